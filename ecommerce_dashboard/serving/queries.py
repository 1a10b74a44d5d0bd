"""
Query Service

Read-only operations over the store. Each takes primitive parameters and
returns plain dicts; joins and counts are left to SQLite.

Errors:
- InvalidArgumentError: non-numeric id, bad paging values
- NotFoundError: no user/order with the requested id

Store failures propagate as SQLAlchemyError.
"""

import re
from typing import Any, Dict, List, Optional, Union

import structlog
from sqlalchemy import func, select

from ecommerce_dashboard.database.connection import Database
from ecommerce_dashboard.database.models import Base, Order, OrderItem, Product, User
from ecommerce_dashboard.serving.errors import InvalidArgumentError, NotFoundError

logger = structlog.get_logger(__name__)

_NUMERIC_ID = re.compile(r"-?\d+", re.ASCII)

# SQLite INTEGER is a signed 64-bit value
_MAX_ID = 2 ** 63 - 1

USER_SUMMARY_COLUMNS = (
    User.id,
    User.first_name,
    User.last_name,
    User.email,
    User.gender,
    User.country,
    User.city,
)

ORDER_SUMMARY_COLUMNS = (
    Order.order_id,
    Order.user_id,
    Order.status,
    Order.created_at,
    Order.shipped_at,
    Order.delivered_at,
    Order.returned_at,
    Order.num_of_item,
)

LIST_MODES = ("paginated", "capped")


def parse_id(value: Union[str, int], name: str) -> int:
    """
    Parse a path parameter as a row id.

    Raises:
        InvalidArgumentError: The value is not an integer, or is outside the
            range SQLite can store
    """
    if isinstance(value, bool):
        raise InvalidArgumentError(f"Invalid {name}: must be numeric.")
    if isinstance(value, int):
        parsed = value
    elif isinstance(value, str) and _NUMERIC_ID.fullmatch(value):
        parsed = int(value)
    else:
        raise InvalidArgumentError(f"Invalid {name}: must be numeric.")

    if abs(parsed) > _MAX_ID:
        raise InvalidArgumentError(f"Invalid {name}: out of range.")
    return parsed


class QueryService:
    """
    Read-only queries behind the dashboard API.

    Example:
        service = QueryService(database)
        user = await service.get_user("42")
    """

    def __init__(self, database: Database):
        self.database = database

    async def _fetch_all(self, query) -> List[Dict[str, Any]]:
        async with self.database.connect() as conn:
            result = await conn.execute(query)
            return [dict(row) for row in result.mappings().all()]

    async def _fetch_one(self, query) -> Optional[Dict[str, Any]]:
        async with self.database.connect() as conn:
            result = await conn.execute(query)
            row = result.mappings().first()
        return dict(row) if row is not None else None

    async def list_users(
        self,
        page: int = 1,
        limit: int = 20,
        with_order_count: bool = True,
        mode: str = "paginated",
        cap: int = 100,
    ) -> List[Dict[str, Any]]:
        """
        List user summaries ordered by id.

        Args:
            page: 1-based page number (paginated mode only)
            limit: Page size (paginated mode only)
            with_order_count: Annotate each user with its number of orders
            mode: "paginated" (offset/limit) or "capped" (first `cap` users)
            cap: Row cap in capped mode
        """
        if mode not in LIST_MODES:
            raise InvalidArgumentError(f"Invalid list mode: {mode!r}.")
        if page < 1:
            raise InvalidArgumentError("Invalid page: must be 1 or greater.")
        if limit < 1:
            raise InvalidArgumentError("Invalid limit: must be 1 or greater.")

        if with_order_count:
            query = (
                select(*USER_SUMMARY_COLUMNS, func.count(Order.order_id).label("order_count"))
                .select_from(User)
                .outerjoin(Order, Order.user_id == User.id)
                .group_by(User.id)
            )
        else:
            query = select(*USER_SUMMARY_COLUMNS)

        query = query.order_by(User.id.asc())

        if mode == "capped":
            query = query.limit(cap)
        else:
            query = query.offset((page - 1) * limit).limit(limit)

        users = await self._fetch_all(query)
        logger.debug("Users listed", mode=mode, page=page, limit=limit, count=len(users))
        return users

    async def get_user(self, user_id: Union[str, int]) -> Dict[str, Any]:
        """User row with the total number of orders placed by the user."""
        uid = parse_id(user_id, "user id")

        order_count = (
            select(func.count(Order.order_id))
            .where(Order.user_id == User.id)
            .correlate(User)
            .scalar_subquery()
            .label("order_count")
        )
        query = select(*User.__table__.columns, order_count).where(User.id == uid)

        user = await self._fetch_one(query)
        if user is None:
            raise NotFoundError(f"User with id {uid} not found.")
        return user

    async def list_user_orders(self, user_id: Union[str, int]) -> List[Dict[str, Any]]:
        """Orders of one user, most recent first. Unknown users have none."""
        uid = parse_id(user_id, "user id")

        query = (
            select(*ORDER_SUMMARY_COLUMNS)
            .where(Order.user_id == uid)
            .order_by(Order.created_at.desc(), Order.order_id.desc())
        )
        return await self._fetch_all(query)

    async def get_order(self, order_id: Union[str, int]) -> Dict[str, Any]:
        """
        Order row with its line items.

        Each item carries the name, brand and category of its product; items
        whose product is missing keep those fields as None.
        """
        oid = parse_id(order_id, "order id")

        order = await self._fetch_one(
            select(*Order.__table__.columns).where(Order.order_id == oid)
        )
        if order is None:
            raise NotFoundError(f"Order with id {oid} not found.")

        items_query = (
            select(
                *OrderItem.__table__.columns,
                Product.name.label("product_name"),
                Product.brand.label("product_brand"),
                Product.category.label("product_category"),
            )
            .select_from(OrderItem)
            .outerjoin(Product, Product.id == OrderItem.product_id)
            .where(OrderItem.order_id == oid)
            .order_by(OrderItem.id.asc())
        )
        order["items"] = await self._fetch_all(items_query)
        return order

    async def get_stats(self) -> Dict[str, Any]:
        """Dashboard totals: users, orders and revenue from order items."""
        query = select(
            select(func.count(User.id)).scalar_subquery().label("total_users"),
            select(func.count(Order.order_id)).scalar_subquery().label("total_orders"),
            select(func.coalesce(func.sum(OrderItem.sale_price), 0.0))
            .scalar_subquery()
            .label("total_revenue"),
        )
        stats = await self._fetch_one(query)
        return {
            "total_users": stats["total_users"] or 0,
            "total_orders": stats["total_orders"] or 0,
            "total_revenue": float(stats["total_revenue"] or 0),
        }

    async def check_ready(self) -> Dict[str, Any]:
        """
        Whether the ETL has produced a usable store.

        Ready means every schema table exists and at least one user is loaded.
        """
        tables = await self.database.existing_tables()
        missing = sorted(set(Base.metadata.tables) - set(tables))
        if missing:
            return {"ready": False, "missing_tables": missing, "users": 0}

        users = await self._fetch_one(select(func.count(User.id).label("users")))
        count = users["users"] if users else 0
        return {"ready": count > 0, "missing_tables": [], "users": count}
