"""
Test Suite Configuration
"""
from pathlib import Path
from typing import AsyncGenerator, Dict

import polars as pl
import pytest
from httpx import ASGITransport, AsyncClient

from ecommerce_dashboard.database.connection import Database
from ecommerce_dashboard.ingestion.etl import run_etl
from ecommerce_dashboard.serving.api import create_api_app

NUM_USERS = 25
NUM_PRODUCTS = 5
MISSING_PRODUCT_ID = 99


def build_users() -> pl.DataFrame:
    ids = list(range(1, NUM_USERS + 1))
    return pl.DataFrame({
        "id": ids,
        "first_name": [f"First{i}" for i in ids],
        "last_name": [f"Last{i}" for i in ids],
        "email": [f"user{i}@example.com" for i in ids],
        "age": [20 + i for i in ids],
        "gender": ["F" if i % 2 else "M" for i in ids],
        "state": ["California"] * NUM_USERS,
        "street_address": [f"{i} Main St" for i in ids],
        "postal_code": [f"9{i:04d}" for i in ids],
        "city": ["Los Angeles" if i % 3 else "San Diego" for i in ids],
        "country": ["United States"] * NUM_USERS,
        "latitude": [34.05 + i / 100 for i in ids],
        "longitude": [-118.24 - i / 100 for i in ids],
        "traffic_source": ["Search" if i % 2 else "Email" for i in ids],
        "created_at": [f"2022-01-{i:02d} 08:00:00" for i in ids],
    })


def build_orders() -> pl.DataFrame:
    """User n places n % 4 orders, so every fourth user has none."""
    rows = []
    order_id = 100
    statuses = ["Processing", "Shipped", "Complete", "Cancelled"]
    for user_id in range(1, NUM_USERS + 1):
        for k in range(user_id % 4):
            order_id += 1
            rows.append({
                "order_id": order_id,
                "user_id": user_id,
                "status": statuses[order_id % 4],
                "gender": "F" if user_id % 2 else "M",
                "created_at": f"2023-{k + 1:02d}-{user_id:02d} 10:00:00",
                "returned_at": None,
                "shipped_at": f"2023-{k + 1:02d}-{user_id:02d} 18:00:00",
                "delivered_at": None,
                "num_of_item": (order_id % 3) + 1,
            })
    return pl.DataFrame(rows)


def build_products() -> pl.DataFrame:
    ids = list(range(1, NUM_PRODUCTS + 1))
    return pl.DataFrame({
        "id": ids,
        "cost": [5.0 * i for i in ids],
        "category": ["Jeans", "Tops", "Socks", "Jeans", "Outerwear"],
        "name": [f"Product {i}" for i in ids],
        "brand": [f"Brand {i % 2}" for i in ids],
        "retail_price": [10.0 * i for i in ids],
        "department": ["Women" if i % 2 else "Men" for i in ids],
        "sku": [f"SKU{i:05d}" for i in ids],
        "distribution_center_id": [i % 3 + 1 for i in ids],
    })


def build_order_items(orders: pl.DataFrame) -> pl.DataFrame:
    """num_of_item lines per order; the very last line points at a missing product."""
    rows = []
    item_id = 1000
    for order in orders.iter_rows(named=True):
        for n in range(order["num_of_item"]):
            item_id += 1
            rows.append({
                "id": item_id,
                "order_id": order["order_id"],
                "user_id": order["user_id"],
                "product_id": (item_id % NUM_PRODUCTS) + 1,
                "inventory_item_id": item_id + 5000,
                "status": order["status"],
                "created_at": order["created_at"],
                "shipped_at": order["shipped_at"],
                "delivered_at": None,
                "returned_at": None,
                "sale_price": 9.5 + n,
            })
    rows[-1]["product_id"] = MISSING_PRODUCT_ID
    return pl.DataFrame(rows)


@pytest.fixture
def dataset() -> Dict[str, pl.DataFrame]:
    """Source tables for the ETL, keyed by table name"""
    orders = build_orders()
    return {
        "users": build_users(),
        "orders": orders,
        "products": build_products(),
        "order_items": build_order_items(orders),
    }


@pytest.fixture
def csv_sources(tmp_path: Path, dataset: Dict[str, pl.DataFrame]) -> Dict[str, Path]:
    """Dataset written as CSV files, one per table"""
    csv_dir = tmp_path / "archive"
    csv_dir.mkdir()
    sources = {}
    for table_name, df in dataset.items():
        path = csv_dir / f"{table_name}.csv"
        df.write_csv(path)
        sources[table_name] = path
    return sources


@pytest.fixture
async def database(tmp_path: Path) -> AsyncGenerator[Database, None]:
    """Empty SQLite store in a temporary file"""
    db = Database(f"sqlite+aiosqlite:///{tmp_path / 'test.db'}")
    await db.init()
    yield db
    await db.close()


@pytest.fixture
async def loaded_database(database: Database, csv_sources: Dict[str, Path]) -> Database:
    """Store populated by a full ETL run"""
    await run_etl(database, csv_sources)
    return database


@pytest.fixture
async def client(loaded_database: Database) -> AsyncGenerator[AsyncClient, None]:
    """HTTP client against an app serving the loaded store"""
    app = create_api_app(loaded_database)
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


@pytest.fixture
async def empty_client(database: Database) -> AsyncGenerator[AsyncClient, None]:
    """HTTP client against an app whose store has not been loaded"""
    app = create_api_app(database)
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
