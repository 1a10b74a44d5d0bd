"""
Health Check Endpoints

Liveness and readiness checks. Readiness reports whether the ETL has
populated the store; requests are never blocked on it.
"""

from datetime import datetime
from typing import Any, Dict

from fastapi import APIRouter, Depends, Response
from pydantic import BaseModel
from sqlalchemy.exc import SQLAlchemyError

from ecommerce_dashboard.config import get_settings
from ecommerce_dashboard.database.connection import Database
from ecommerce_dashboard.serving.api.dependencies import get_database
from ecommerce_dashboard.serving.queries import QueryService

settings = get_settings()
router = APIRouter()


class HealthResponse(BaseModel):
    """Health check response"""
    status: str
    version: str
    environment: str
    timestamp: datetime
    checks: Dict[str, Any]


@router.get("/health", response_model=HealthResponse)
async def health_check(database: Database = Depends(get_database)) -> HealthResponse:
    """
    Comprehensive health check endpoint.

    Checks:
    - Database connectivity
    - Whether the ETL has loaded the tables
    """
    checks = {}
    overall_status = "healthy"

    db_health = await database.check_health()
    checks["database"] = db_health
    if db_health.get("status") != "healthy":
        overall_status = "unhealthy"
    else:
        try:
            readiness = await QueryService(database).check_ready()
            checks["data"] = readiness
            if not readiness["ready"]:
                overall_status = "degraded"
        except SQLAlchemyError as e:
            checks["data"] = {"ready": False, "error": type(e).__name__}
            overall_status = "degraded"

    return HealthResponse(
        status=overall_status,
        version=settings.version,
        environment=settings.app_env,
        timestamp=datetime.utcnow(),
        checks=checks,
    )


@router.get("/health/live")
async def liveness_check() -> Dict[str, str]:
    """
    Liveness probe endpoint.

    Returns 200 if the application is running.
    """
    return {"status": "alive"}


@router.get("/health/ready")
async def readiness_check(
    response: Response,
    database: Database = Depends(get_database),
) -> Dict[str, str]:
    """
    Readiness probe endpoint.

    Returns 200 once the tables exist and hold users, 503 before.
    """
    try:
        readiness = await QueryService(database).check_ready()
    except SQLAlchemyError as e:
        response.status_code = 503
        return {"status": "not_ready", "reason": type(e).__name__}

    if readiness["missing_tables"]:
        response.status_code = 503
        return {"status": "not_ready", "reason": "tables_missing"}
    if not readiness["ready"]:
        response.status_code = 503
        return {"status": "not_ready", "reason": "no_data_loaded"}

    return {"status": "ready"}
