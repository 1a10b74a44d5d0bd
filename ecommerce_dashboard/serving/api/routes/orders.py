"""
Orders API Endpoints

Order detail with its line items.
"""

from typing import List, Optional

from fastapi import APIRouter, Depends
from pydantic import BaseModel
from sqlalchemy.exc import SQLAlchemyError
import structlog

from ecommerce_dashboard.serving.api.dependencies import get_query_service
from ecommerce_dashboard.serving.api.fields import StoredFloat, StoredInt
from ecommerce_dashboard.serving.errors import InternalError
from ecommerce_dashboard.serving.queries import QueryService

router = APIRouter()
logger = structlog.get_logger(__name__)


class OrderItemDetail(BaseModel):
    """Order line annotated with its product"""
    id: int
    order_id: StoredInt = None
    user_id: StoredInt = None
    product_id: StoredInt = None
    inventory_item_id: StoredInt = None
    status: Optional[str] = None
    created_at: Optional[str] = None
    shipped_at: Optional[str] = None
    delivered_at: Optional[str] = None
    returned_at: Optional[str] = None
    sale_price: StoredFloat = None
    product_name: Optional[str] = None
    product_brand: Optional[str] = None
    product_category: Optional[str] = None


class OrderDetail(BaseModel):
    """Order record with nested items"""
    order_id: int
    user_id: StoredInt = None
    status: Optional[str] = None
    gender: Optional[str] = None
    created_at: Optional[str] = None
    returned_at: Optional[str] = None
    shipped_at: Optional[str] = None
    delivered_at: Optional[str] = None
    num_of_item: StoredInt = None
    items: List[OrderItemDetail]


@router.get("/{order_id}", response_model=OrderDetail)
async def get_order(
    order_id: str,
    service: QueryService = Depends(get_query_service),
) -> OrderDetail:
    """
    Get order details by ID.

    Items are ordered by item id and carry product name, brand and category.
    """
    try:
        order = await service.get_order(order_id)
    except SQLAlchemyError as e:
        logger.error("Error querying order", order_id=order_id, error=str(e), error_type=type(e).__name__)
        raise InternalError("Failed to retrieve order details.") from e

    return OrderDetail(**order)
