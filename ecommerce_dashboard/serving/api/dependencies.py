"""
FastAPI dependencies

The store handle lives on `app.state.database`; handlers get it (or a query
service bound to it) through these functions.
"""

from fastapi import Depends, Request

from ecommerce_dashboard.database.connection import Database
from ecommerce_dashboard.serving.errors import InternalError
from ecommerce_dashboard.serving.queries import QueryService


def get_database(request: Request) -> Database:
    """
    Store handle owned by the application.

    Raises:
        InternalError: The application started without a database
    """
    database = getattr(request.app.state, "database", None)
    if database is None:
        raise InternalError("Database is not available.")
    return database


def get_query_service(database: Database = Depends(get_database)) -> QueryService:
    """
    Query service bound to the application's store.

    Example:
        @router.get("/items")
        async def get_items(service: QueryService = Depends(get_query_service)):
            ...
    """
    return QueryService(database)
