"""
Stats API Endpoint

Summary totals for the dashboard header cards.
"""

from fastapi import APIRouter, Depends
from pydantic import BaseModel, ConfigDict, Field
from sqlalchemy.exc import SQLAlchemyError
import structlog

from ecommerce_dashboard.serving.api.dependencies import get_query_service
from ecommerce_dashboard.serving.errors import InternalError
from ecommerce_dashboard.serving.queries import QueryService

router = APIRouter()
logger = structlog.get_logger(__name__)


class StatsResponse(BaseModel):
    """Dashboard totals, serialized with the frontend's camelCase keys"""
    model_config = ConfigDict(populate_by_name=True)

    total_users: int = Field(alias="totalUsers")
    total_orders: int = Field(alias="totalOrders")
    total_revenue: float = Field(alias="totalRevenue")


@router.get("", response_model=StatsResponse)
async def get_stats(
    service: QueryService = Depends(get_query_service),
) -> StatsResponse:
    """Get summary statistics for the dashboard."""
    try:
        stats = await service.get_stats()
    except SQLAlchemyError as e:
        logger.error("Error fetching stats", error=str(e), error_type=type(e).__name__)
        raise InternalError("Failed to calculate statistics.") from e

    return StatsResponse(**stats)
