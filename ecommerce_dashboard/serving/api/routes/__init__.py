"""
API Routes Module
"""
from .health import router as health_router
from .orders import router as orders_router
from .stats import router as stats_router
from .users import router as users_router

__all__ = [
    "health_router",
    "orders_router",
    "stats_router",
    "users_router",
]
