"""
Payment endpoints.

Payment intents, gateway webhooks, refunds.
"""
import logging
from typing import Optional

from fastapi import APIRouter, Depends, Header, Request, status
from fastapi.responses import JSONResponse

from larder.application.dtos import (
    ConfirmPaymentRequest,
    CreatePaymentIntentRequest,
    PaymentDTO,
    PaymentIntentDTO,
    RefundRequest,
    WebhookAckDTO,
)
from larder.application.services import PaymentService
from larder_api.dependencies import (
    get_current_user_id,
    get_payment_service,
    is_admin,
    require_admin,
)


logger = logging.getLogger(__name__)
router = APIRouter()


@router.post(
    "/create-payment-intent",
    response_model=PaymentIntentDTO,
    status_code=status.HTTP_201_CREATED,
    summary="Create payment intent for an order",
)
async def create_payment_intent(
    request: CreatePaymentIntentRequest,
    user_id: str = Depends(get_current_user_id),
    service: PaymentService = Depends(get_payment_service),
):
    return await service.create_payment_intent(user_id, request.order_id)


@router.post(
    "/confirm",
    response_model=PaymentDTO,
    summary="Confirm payment from gateway status",
)
async def confirm_payment(
    request: ConfirmPaymentRequest,
    user_id: str = Depends(get_current_user_id),
    service: PaymentService = Depends(get_payment_service),
):
    return await service.confirm_payment(user_id, request.payment_intent_id)


@router.post(
    "/webhook",
    response_model=WebhookAckDTO,
    summary="Gateway webhook receiver",
)
async def webhook(
    request: Request,
    stripe_signature: Optional[str] = Header(default=None, alias="Stripe-Signature"),
    service: PaymentService = Depends(get_payment_service),
):
    """
    Receive a gateway callback.

    The raw body is verified before anything is parsed. Any failure answers
    400 so that the gateway retries the delivery.
    """
    payload = await request.body()
    try:
        outcome = await service.handle_webhook(payload, stripe_signature or "")
    except Exception as e:
        logger.error(f"Webhook processing failed: {e}", exc_info=True)
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content={"error": getattr(e, "message", "Webhook processing failed")},
        )

    logger.info(f"Webhook handled: {outcome}")
    return WebhookAckDTO(received=True)


@router.get(
    "/order/{order_id}",
    response_model=PaymentDTO,
    summary="Get payment for an order",
)
async def get_payment_by_order(
    order_id: str,
    user_id: str = Depends(get_current_user_id),
    admin: bool = Depends(is_admin),
    service: PaymentService = Depends(get_payment_service),
):
    return await service.get_payment_by_order(user_id, order_id, is_admin=admin)


@router.post(
    "/{payment_id}/refund",
    response_model=PaymentDTO,
    summary="Refund a payment (admin)",
)
async def refund_payment(
    payment_id: str,
    request: Optional[RefundRequest] = None,
    admin_id: str = Depends(require_admin),
    service: PaymentService = Depends(get_payment_service),
):
    """
    Refund part or all of a completed payment.

    Omit `amount` to refund everything still refundable.
    """
    amount = request.amount if request else None
    logger.info(f"Admin {admin_id} requested refund of {amount or 'remaining'} on {payment_id}")
    return await service.process_refund(payment_id, amount)
