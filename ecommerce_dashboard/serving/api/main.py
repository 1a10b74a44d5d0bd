"""
FastAPI Application Factory

Creates and configures the dashboard API: routes, middleware, error
translation and the lifecycle of the store handle.
"""

from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException
import structlog

from ecommerce_dashboard.config import get_settings
from ecommerce_dashboard.database.connection import Database
from ecommerce_dashboard.serving.api.middleware import RequestLoggingMiddleware
from ecommerce_dashboard.serving.api.routes import (
    health_router,
    orders_router,
    stats_router,
    users_router,
)
from ecommerce_dashboard.serving.errors import DashboardError

settings = get_settings()
logger = structlog.get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan manager.

    Opens the configured database unless one was injected into the factory,
    and closes only what it opened.
    """
    from ecommerce_dashboard.config.logging import configure_logging
    configure_logging()

    logger.info("Starting E-Commerce Dashboard API")

    owned: Optional[Database] = None
    if app.state.database is None:
        owned = Database.from_settings()
        await owned.init()
        app.state.database = owned

    yield

    logger.info("Shutting down...")
    if owned is not None:
        await owned.close()
        app.state.database = None


# =============================================================================
# ERROR TRANSLATION
# =============================================================================

async def dashboard_error_handler(request: Request, exc: DashboardError) -> JSONResponse:
    """InvalidArgument -> 400, NotFound -> 404, Internal -> 500"""
    if exc.status_code >= 500:
        logger.error(
            "Request failed",
            path=request.url.path,
            status_code=exc.status_code,
            error=exc.message,
            cause=repr(exc.__cause__) if exc.__cause__ else None,
        )
    else:
        logger.info(
            "Request rejected",
            path=request.url.path,
            status_code=exc.status_code,
            error=exc.message,
        )
    return JSONResponse(status_code=exc.status_code, content={"error": exc.message})


async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Malformed query parameters are client errors, reported as 400"""
    problems = []
    for error in exc.errors():
        location = ".".join(str(part) for part in error.get("loc", ())[1:])
        problems.append(f"{location}: {error.get('msg')}" if location else str(error.get("msg")))

    message = "Invalid request parameters: " + "; ".join(problems)
    logger.info("Request rejected", path=request.url.path, status_code=400, error=message)
    return JSONResponse(status_code=400, content={"error": message})


async def http_error_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    """Routing errors (unknown path, wrong method) in the same error shape"""
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": exc.detail},
        headers=getattr(exc, "headers", None),
    )


async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    """Anything else: log the detail, return a generic message"""
    logger.error(
        "Unhandled error",
        path=request.url.path,
        error=str(exc),
        error_type=type(exc).__name__,
        exc_info=exc,
    )
    return JSONResponse(status_code=500, content={"error": "Internal server error."})


# =============================================================================
# FACTORY
# =============================================================================

def create_api_app(database: Optional[Database] = None) -> FastAPI:
    """
    Create and configure FastAPI application.

    Args:
        database: Initialized store handle to serve from. When omitted the
            lifespan opens the configured database and closes it on shutdown.

    Returns:
        Configured FastAPI app instance
    """
    app = FastAPI(
        title="E-Commerce Dashboard API",
        description="Read-only API over the users, orders and products of the shop",
        version=settings.version,
        docs_url="/docs" if settings.is_development else None,
        redoc_url="/redoc" if settings.is_development else None,
        lifespan=lifespan,
    )
    app.state.database = database

    # Error translation
    app.add_exception_handler(DashboardError, dashboard_error_handler)
    app.add_exception_handler(RequestValidationError, validation_error_handler)
    app.add_exception_handler(StarletteHTTPException, http_error_handler)
    app.add_exception_handler(Exception, unhandled_error_handler)

    # CORS
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.api.cors_origins,
        allow_credentials=True,
        allow_methods=["GET"],
        allow_headers=["*"],
    )

    # Compression
    app.add_middleware(GZipMiddleware, minimum_size=1000)

    app.add_middleware(RequestLoggingMiddleware)

    # API routes
    app.include_router(health_router, prefix="/api", tags=["Health"])
    app.include_router(users_router, prefix="/api/users", tags=["Users"])
    app.include_router(orders_router, prefix="/api/orders", tags=["Orders"])
    app.include_router(stats_router, prefix="/api/stats", tags=["Stats"])

    @app.get("/")
    async def root():
        """Confirm the server is running."""
        return {"message": "Welcome to the E-commerce API. The server is running correctly."}

    return app
