"""
Users API Endpoints

User list, user detail and the orders of a user.
"""

from typing import List, Optional

from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel
from sqlalchemy.exc import SQLAlchemyError
import structlog

from ecommerce_dashboard.config import get_settings
from ecommerce_dashboard.serving.api.dependencies import get_query_service
from ecommerce_dashboard.serving.api.fields import StoredFloat, StoredInt
from ecommerce_dashboard.serving.errors import InternalError
from ecommerce_dashboard.serving.queries import QueryService

router = APIRouter()
logger = structlog.get_logger(__name__)
settings = get_settings()


# =============================================================================
# RESPONSE MODELS
# =============================================================================

class UserSummary(BaseModel):
    """User list entry"""
    id: int
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    email: Optional[str] = None
    gender: Optional[str] = None
    country: Optional[str] = None
    city: Optional[str] = None
    order_count: Optional[int] = None


class UserDetail(BaseModel):
    """Full user record with computed order count"""
    id: int
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    email: Optional[str] = None
    age: StoredInt = None
    gender: Optional[str] = None
    state: Optional[str] = None
    street_address: Optional[str] = None
    postal_code: Optional[str] = None
    city: Optional[str] = None
    country: Optional[str] = None
    latitude: StoredFloat = None
    longitude: StoredFloat = None
    traffic_source: Optional[str] = None
    created_at: Optional[str] = None
    order_count: int


class UserOrder(BaseModel):
    """Order summary as listed for a user"""
    order_id: int
    user_id: StoredInt = None
    status: Optional[str] = None
    created_at: Optional[str] = None
    shipped_at: Optional[str] = None
    delivered_at: Optional[str] = None
    returned_at: Optional[str] = None
    num_of_item: StoredInt = None


# =============================================================================
# ENDPOINTS
# =============================================================================

@router.get("", response_model=List[UserSummary], response_model_exclude_unset=True)
async def list_users(
    page: int = Query(1, ge=1),
    limit: Optional[int] = Query(None, ge=1),
    order_count: Optional[bool] = None,
    service: QueryService = Depends(get_query_service),
) -> List[UserSummary]:
    """
    List users by ascending id.

    Paginated with `page`/`limit`, or capped to a fixed number of rows when
    the deployment runs the capped listing mode.
    """
    page_size = min(limit or settings.api.users_page_size, settings.api.users_max_page_size)
    with_order_count = settings.api.users_order_count if order_count is None else order_count

    try:
        users = await service.list_users(
            page=page,
            limit=page_size,
            with_order_count=with_order_count,
            mode=settings.api.users_list_mode,
            cap=settings.api.users_list_cap,
        )
    except SQLAlchemyError as e:
        logger.error("Error querying users", error=str(e), error_type=type(e).__name__)
        raise InternalError("Failed to retrieve users from the database.") from e

    return [UserSummary(**user) for user in users]


@router.get("/{user_id}", response_model=UserDetail)
async def get_user(
    user_id: str,
    service: QueryService = Depends(get_query_service),
) -> UserDetail:
    """Get one user with the number of orders they placed."""
    try:
        user = await service.get_user(user_id)
    except SQLAlchemyError as e:
        logger.error("Error querying user", user_id=user_id, error=str(e), error_type=type(e).__name__)
        raise InternalError("Failed to retrieve user details.") from e

    return UserDetail(**user)


@router.get("/{user_id}/orders", response_model=List[UserOrder])
async def get_user_orders(
    user_id: str,
    service: QueryService = Depends(get_query_service),
) -> List[UserOrder]:
    """Get all orders of a user, most recent first."""
    try:
        orders = await service.list_user_orders(user_id)
    except SQLAlchemyError as e:
        logger.error(
            "Error querying orders for user",
            user_id=user_id,
            error=str(e),
            error_type=type(e).__name__,
        )
        raise InternalError("Failed to retrieve orders.") from e

    return [UserOrder(**order) for order in orders]
