"""
Order endpoints.

Checkout, order history, admin status changes and customer cancellation.
"""
import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query, status

from larder.application.dtos import (
    CancelOrderRequest,
    CreateOrderRequest,
    OrderDTO,
    OrderListDTO,
    UpdateOrderStatusRequest,
)
from larder.application.services import OrderService
from larder.domain.enums import OrderStatus
from larder_api.dependencies import (
    get_current_user_id,
    get_order_service,
    is_admin,
    require_admin,
)


logger = logging.getLogger(__name__)
router = APIRouter()


@router.post(
    "",
    response_model=OrderDTO,
    status_code=status.HTTP_201_CREATED,
    summary="Create order from cart",
)
async def create_order(
    request: CreateOrderRequest,
    user_id: str = Depends(get_current_user_id),
    service: OrderService = Depends(get_order_service),
):
    """
    Turn the caller's cart into an order.

    **Errors:**
    - 400: invalid request body
    - 404: empty cart, or address not found for this user
    """
    return await service.create_order(user_id, request)


@router.get(
    "",
    response_model=OrderListDTO,
    summary="List my orders",
)
async def list_orders(
    page: int = Query(default=1, ge=1, description="Page number"),
    page_size: int = Query(default=10, ge=1, le=100, description="Orders per page"),
    order_status: Optional[OrderStatus] = Query(default=None, alias="status"),
    user_id: str = Depends(get_current_user_id),
    service: OrderService = Depends(get_order_service),
):
    return await service.list_orders(user_id, page=page, page_size=page_size, status=order_status)


@router.get(
    "/{order_id}",
    response_model=OrderDTO,
    summary="Get order",
)
async def get_order(
    order_id: str,
    user_id: str = Depends(get_current_user_id),
    admin: bool = Depends(is_admin),
    service: OrderService = Depends(get_order_service),
):
    return await service.get_order(user_id, order_id, is_admin=admin)


@router.put(
    "/{order_id}/status",
    response_model=OrderDTO,
    summary="Change order status (admin)",
)
async def update_order_status(
    order_id: str,
    request: UpdateOrderStatusRequest,
    admin_id: str = Depends(require_admin),
    service: OrderService = Depends(get_order_service),
):
    """
    Move an order along its lifecycle.

    PENDING → CONFIRMED → PREPARING → OUT_FOR_DELIVERY → DELIVERED → REFUNDED;
    PENDING and CONFIRMED may also go to CANCELLED (reason required).
    """
    logger.info(f"Admin {admin_id} requested {order_id} → {request.status.value}")
    return await service.update_order_status(order_id, request.status, reason=request.reason)


@router.delete(
    "/{order_id}",
    response_model=OrderDTO,
    summary="Cancel my order",
)
async def cancel_order(
    order_id: str,
    request: CancelOrderRequest,
    user_id: str = Depends(get_current_user_id),
    service: OrderService = Depends(get_order_service),
):
    return await service.cancel_order(user_id, order_id, request.cancellation_reason)
