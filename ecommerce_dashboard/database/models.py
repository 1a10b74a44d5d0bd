"""
Database Models

Normalized schema for the dashboard dataset. Column names match the source
CSV headers verbatim, since the loader builds its inserts from those headers.

Tables:
- users: customer accounts
- orders: one row per order, references users
- products: product catalog
- order_items: order lines, reference orders and products

Foreign keys are declared for documentation and joins only; SQLite does not
enforce them unless the foreign_keys pragma is enabled, which it is not.
"""

from enum import Enum
from typing import List, Optional

from sqlalchemy import Float, ForeignKey, Index, Integer, String
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, relationship


class Base(DeclarativeBase):
    """Base class for all database models"""
    pass


# =============================================================================
# ENUMERATIONS
# =============================================================================

class OrderStatus(str, Enum):
    """Order status vocabulary of the source dataset (not enforced on load)"""
    PROCESSING = "Processing"
    SHIPPED = "Shipped"
    COMPLETE = "Complete"
    CANCELLED = "Cancelled"
    RETURNED = "Returned"


# =============================================================================
# TABLES
# =============================================================================

class User(Base):
    """Customer account"""
    __tablename__ = "users"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    first_name: Mapped[Optional[str]] = mapped_column(String)
    last_name: Mapped[Optional[str]] = mapped_column(String)
    email: Mapped[Optional[str]] = mapped_column(String)
    age: Mapped[Optional[int]] = mapped_column(Integer)
    gender: Mapped[Optional[str]] = mapped_column(String)
    state: Mapped[Optional[str]] = mapped_column(String)
    street_address: Mapped[Optional[str]] = mapped_column(String)
    postal_code: Mapped[Optional[str]] = mapped_column(String)
    city: Mapped[Optional[str]] = mapped_column(String)
    country: Mapped[Optional[str]] = mapped_column(String)
    latitude: Mapped[Optional[float]] = mapped_column(Float)
    longitude: Mapped[Optional[float]] = mapped_column(Float)
    traffic_source: Mapped[Optional[str]] = mapped_column(String)
    created_at: Mapped[Optional[str]] = mapped_column(String)

    orders: Mapped[List["Order"]] = relationship(back_populates="user")


class Order(Base):
    """Customer order"""
    __tablename__ = "orders"

    order_id: Mapped[int] = mapped_column(Integer, primary_key=True)
    user_id: Mapped[Optional[int]] = mapped_column(Integer, ForeignKey("users.id"))
    status: Mapped[Optional[str]] = mapped_column(String)
    gender: Mapped[Optional[str]] = mapped_column(String)
    created_at: Mapped[Optional[str]] = mapped_column(String)
    returned_at: Mapped[Optional[str]] = mapped_column(String)
    shipped_at: Mapped[Optional[str]] = mapped_column(String)
    delivered_at: Mapped[Optional[str]] = mapped_column(String)
    num_of_item: Mapped[Optional[int]] = mapped_column(Integer)

    user: Mapped[Optional["User"]] = relationship(back_populates="orders")
    items: Mapped[List["OrderItem"]] = relationship(back_populates="order")

    __table_args__ = (
        Index("ix_orders_user_id", "user_id"),
    )


class Product(Base):
    """Catalog product"""
    __tablename__ = "products"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    cost: Mapped[Optional[float]] = mapped_column(Float)
    category: Mapped[Optional[str]] = mapped_column(String)
    name: Mapped[Optional[str]] = mapped_column(String)
    brand: Mapped[Optional[str]] = mapped_column(String)
    retail_price: Mapped[Optional[float]] = mapped_column(Float)
    department: Mapped[Optional[str]] = mapped_column(String)
    sku: Mapped[Optional[str]] = mapped_column(String)
    distribution_center_id: Mapped[Optional[int]] = mapped_column(Integer)

    order_items: Mapped[List["OrderItem"]] = relationship(back_populates="product")


class OrderItem(Base):
    """Order line"""
    __tablename__ = "order_items"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    order_id: Mapped[Optional[int]] = mapped_column(Integer, ForeignKey("orders.order_id"))
    user_id: Mapped[Optional[int]] = mapped_column(Integer)
    product_id: Mapped[Optional[int]] = mapped_column(Integer, ForeignKey("products.id"))
    inventory_item_id: Mapped[Optional[int]] = mapped_column(Integer)
    status: Mapped[Optional[str]] = mapped_column(String)
    created_at: Mapped[Optional[str]] = mapped_column(String)
    shipped_at: Mapped[Optional[str]] = mapped_column(String)
    delivered_at: Mapped[Optional[str]] = mapped_column(String)
    returned_at: Mapped[Optional[str]] = mapped_column(String)
    sale_price: Mapped[Optional[float]] = mapped_column(Float)

    order: Mapped[Optional["Order"]] = relationship(back_populates="items")
    product: Mapped[Optional["Product"]] = relationship(back_populates="order_items")

    __table_args__ = (
        Index("ix_order_items_order_id", "order_id"),
    )


# Load order; parents before children
TABLE_LOAD_ORDER = ("users", "orders", "products", "order_items")
