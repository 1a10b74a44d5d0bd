"""
Database Module
"""
from .connection import Database
from .models import Base, Order, OrderItem, OrderStatus, Product, User

__all__ = [
    "Database",
    "Base",
    "Order",
    "OrderItem",
    "OrderStatus",
    "Product",
    "User",
]
