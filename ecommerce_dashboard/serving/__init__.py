"""
Serving Module
"""
from .errors import DashboardError, InternalError, InvalidArgumentError, NotFoundError
from .queries import QueryService

__all__ = [
    "DashboardError",
    "InternalError",
    "InvalidArgumentError",
    "NotFoundError",
    "QueryService",
]
