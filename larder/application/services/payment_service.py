"""Application service for Payment settlement."""

import logging
from decimal import Decimal
from typing import Awaitable, Callable, Dict, Optional

from sqlalchemy.ext.asyncio import async_sessionmaker

from larder.application.dtos.payment_dto import PaymentDTO, PaymentIntentDTO
from larder.application.interfaces import GatewayEvent, GatewayIntent, IPaymentGateway, charge_id_of
from larder.data.uow import UnitOfWork, create_uow
from larder.domain.clock import utcnow
from larder.domain.entities.payment import Payment
from larder.domain.enums import PaymentStatus
from larder.domain.exceptions import (
    ForbiddenError,
    OrderNotFoundError,
    PaymentAlreadyCompletedError,
    PaymentNotFoundError,
)
from larder.domain.value_objects import Money


logger = logging.getLogger(__name__)

# Outcomes returned by handle_webhook
WEBHOOK_APPLIED = "applied"
WEBHOOK_DUPLICATE = "duplicate"
WEBHOOK_IGNORED = "ignored"

EVENT_PAYMENT_SUCCEEDED = "payment_intent.succeeded"
EVENT_PAYMENT_FAILED = "payment_intent.payment_failed"
EVENT_CHARGE_REFUNDED = "charge.refunded"

DEFAULT_FAILURE_REASON = "Payment failed"

# Gateway intent states that can no longer be paid
CLOSED_INTENT_STATUSES = frozenset({"canceled"})


class PaymentService:
    """
    Payment intents, webhook settlement and refunds.

    Each webhook delivery is applied in exactly one transaction together with
    its row in the processed-events ledger, so re-delivery is a no-op.
    Refund totals always come from the gateway's figures.
    """

    def __init__(
        self,
        session_factory: async_sessionmaker,
        gateway: IPaymentGateway,
        currency: str = "INR",
        clock: Callable = utcnow,
    ) -> None:
        """Initialize payment service.

        Args:
            session_factory: SQLAlchemy async session factory
            gateway: Payment gateway adapter
            currency: Settlement currency (ISO code)
        """
        self._session_factory = session_factory
        self._gateway = gateway
        self._currency = currency.upper()
        self._clock = clock

        self._webhook_handlers: Dict[str, Callable[[UnitOfWork, GatewayEvent], Awaitable[bool]]] = {
            EVENT_PAYMENT_SUCCEEDED: self._on_payment_succeeded,
            EVENT_PAYMENT_FAILED: self._on_payment_failed,
            EVENT_CHARGE_REFUNDED: self._on_charge_refunded,
        }

    # =========================================================================
    # PAYMENT INTENTS
    # =========================================================================

    async def create_payment_intent(self, user_id: str, order_id: str) -> PaymentIntentDTO:
        """Request a gateway intent for an order and record it locally.

        While the order's stored intent is still open at the gateway it is
        returned again, so a client secret already handed out stays the one
        its webhook settles. Only a canceled intent is replaced, reusing the
        same payment row.

        Raises:
            OrderNotFoundError: Unknown order, or not owned by user_id
            PaymentAlreadyCompletedError: Order payment status is not PENDING
            GatewayError: Gateway rejected the request (nothing persisted)
        """
        uow = create_uow(self._session_factory)
        async with uow:
            order = await uow.orders.find_by_id(order_id, for_update=True)
            if order is None or not order.is_owned_by(user_id):
                raise OrderNotFoundError(order_id)
            if order.payment_status is not PaymentStatus.PENDING:
                raise PaymentAlreadyCompletedError(order_id)

            payment = await uow.payments.find_by_order_id(order.id, for_update=True)
            if payment is not None:
                current = await self._gateway.retrieve_intent(payment.gateway_intent_id)
                if current.status not in CLOSED_INTENT_STATUSES:
                    logger.info(
                        f"Reusing open payment intent {current.id} for order "
                        f"{order.order_number.value} ({current.status})"
                    )
                    return self._intent_to_dto(current)

            amount = order.total.quantize()
            intent = await self._gateway.create_intent(
                amount=amount.to_minor_units(),
                currency=self._currency.lower(),
                metadata={
                    "order_id": order.id,
                    "user_id": user_id,
                    "order_number": order.order_number.value,
                },
            )

            now = self._clock()
            if payment is None:
                payment = Payment.open(order.id, intent.id, amount.amount, self._currency, now)
                await uow.payments.add(payment)
            else:
                logger.info(
                    f"Replacing {current.status} intent {payment.gateway_intent_id} "
                    f"with {intent.id}"
                )
                payment.gateway_intent_id = intent.id
                payment.amount = amount.amount
                payment.updated_at = now
                await uow.payments.update(payment)

            await uow.commit()

        logger.info(
            f"Payment intent {intent.id} created for order {order.order_number.value} "
            f"({intent.amount} {intent.currency})"
        )
        return self._intent_to_dto(intent)

    async def confirm_payment(self, user_id: str, intent_id: str) -> PaymentDTO:
        """Settle a payment by asking the gateway for the intent's status.

        Applies the same success mutation as the webhook when the gateway
        reports the intent as succeeded; otherwise nothing changes.

        Raises:
            PaymentNotFoundError: Unknown intent, or its order is not owned by user_id
            GatewayError: Gateway lookup failed
        """
        uow = create_uow(self._session_factory)
        async with uow:
            payment = await uow.payments.find_by_intent_id(intent_id, for_update=True)
            if payment is None:
                raise PaymentNotFoundError(f"intent {intent_id}")
            order = await uow.orders.find_by_id(payment.order_id)
            if order is None or not order.is_owned_by(user_id):
                logger.warning(f"User {user_id} tried to confirm intent {intent_id} of another user")
                raise PaymentNotFoundError(f"intent {intent_id}")

            intent = await self._gateway.retrieve_intent(intent_id)
            if intent.status == "succeeded" and not payment.is_settled():
                await self._apply_success(uow, payment, intent.latest_charge_id)
                await uow.commit()
            else:
                logger.info(
                    f"Payment {payment.id} not changed by confirmation "
                    f"(gateway={intent.status}, local={payment.status.value})"
                )

        return self._payment_to_dto(payment)

    async def get_payment_by_order(
        self, user_id: str, order_id: str, is_admin: bool = False
    ) -> PaymentDTO:
        uow = create_uow(self._session_factory)
        async with uow:
            order = await uow.orders.find_by_id(order_id)
            if order is None:
                raise OrderNotFoundError(order_id)
            if not is_admin and not order.is_owned_by(user_id):
                raise ForbiddenError("You do not have access to this order")

            payment = await uow.payments.find_by_order_id(order_id)
            if payment is None:
                raise PaymentNotFoundError(f"order {order_id}")

        return self._payment_to_dto(payment)

    # =========================================================================
    # WEBHOOKS
    # =========================================================================

    async def handle_webhook(self, payload: bytes, signature: str) -> str:
        """Verify and apply one gateway webhook delivery.

        Args:
            payload: Raw request body, exactly as received
            signature: Signature header value

        Returns:
            "applied", "duplicate" or "ignored"

        Raises:
            WebhookSignatureError: Signature invalid (nothing processed)
            WebhookConfigurationError: No webhook secret configured
            PaymentNotFoundError: Success/failure event for an unknown intent
        """
        event = self._gateway.construct_webhook_event(payload, signature)
        intent_id = self._intent_id_of(event)

        uow = create_uow(self._session_factory)
        async with uow:
            first_delivery = await uow.payments.mark_event_processed(
                event.id, event.type, intent_id
            )
            if not first_delivery:
                logger.info(f"Webhook {event.id} ({event.type}) already processed, skipping")
                return WEBHOOK_DUPLICATE

            handler = self._webhook_handlers.get(event.type)
            if handler is None:
                logger.info(f"Unhandled webhook event type {event.type} ({event.id})")
                await uow.commit()
                return WEBHOOK_IGNORED

            applied = await handler(uow, event)
            await uow.commit()

        return WEBHOOK_APPLIED if applied else WEBHOOK_IGNORED

    @staticmethod
    def _intent_id_of(event: GatewayEvent) -> Optional[str]:
        if event.type.startswith("charge."):
            return event.data.get("payment_intent")
        return event.data.get("id")

    async def _on_payment_succeeded(self, uow: UnitOfWork, event: GatewayEvent) -> bool:
        intent_id = event.data.get("id")
        payment = await uow.payments.find_by_intent_id(intent_id, for_update=True)
        if payment is None:
            logger.error(f"Payment not found for payment intent {intent_id}")
            raise PaymentNotFoundError(f"intent {intent_id}")

        if payment.is_settled():
            logger.info(f"Payment {payment.id} already {payment.status.value}, success ignored")
            return False

        await self._apply_success(uow, payment, charge_id_of(event.data))
        return True

    async def _on_payment_failed(self, uow: UnitOfWork, event: GatewayEvent) -> bool:
        intent_id = event.data.get("id")
        payment = await uow.payments.find_by_intent_id(intent_id, for_update=True)
        if payment is None:
            logger.error(f"Payment not found for payment intent {intent_id}")
            raise PaymentNotFoundError(f"intent {intent_id}")

        if payment.is_settled():
            logger.info(f"Payment {payment.id} already {payment.status.value}, late failure ignored")
            return False

        reason = (event.data.get("last_payment_error") or {}).get("message") or DEFAULT_FAILURE_REASON
        now = self._clock()
        payment.fail(reason, now)
        await uow.payments.update(payment)

        order = await uow.orders.find_by_id(payment.order_id, for_update=True)
        order.mark_payment_failed(now)
        await uow.orders.update(order)

        logger.warning(f"Payment failed for order {payment.order_id} ({intent_id}): {reason}")
        return True

    async def _on_charge_refunded(self, uow: UnitOfWork, event: GatewayEvent) -> bool:
        charge = event.data
        payment = None
        if charge.get("id"):
            payment = await uow.payments.find_by_transaction_id(charge["id"], for_update=True)
        if payment is None and charge.get("payment_intent"):
            payment = await uow.payments.find_by_intent_id(charge["payment_intent"], for_update=True)

        if payment is None:
            logger.warning(
                f"Refund for unknown charge {charge.get('id')} "
                f"(intent {charge.get('payment_intent')}), skipping"
            )
            return False

        cumulative = Money.from_minor_units(charge.get("amount_refunded") or 0, payment.currency)
        if not await self._apply_refund_total(uow, payment, cumulative.amount):
            logger.info(
                f"Refund total {cumulative.amount} for payment {payment.id} not above "
                f"stored {payment.refunded_amount}, ignored"
            )
            return False
        return True

    # =========================================================================
    # REFUNDS
    # =========================================================================

    async def process_refund(self, payment_id: str, amount: Optional[Decimal] = None) -> PaymentDTO:
        """Issue a gateway refund and record it.

        Args:
            payment_id: Local payment ID
            amount: Amount to refund; defaults to everything still refundable

        Raises:
            PaymentNotFoundError: Unknown payment
            RefundNotAllowedError: Payment is not COMPLETED
            RefundExceedsRemainingError: Amount above what is left
            GatewayError: Gateway refused the refund (nothing recorded)
        """
        uow = create_uow(self._session_factory)
        async with uow:
            payment = await uow.payments.find_by_id(payment_id, for_update=True)
            if payment is None:
                raise PaymentNotFoundError(payment_id)

            refund_amount = payment.validate_refund(amount)
            refund = await self._gateway.create_refund(
                payment.gateway_intent_id,
                Money(amount=refund_amount, currency=payment.currency).to_minor_units(),
            )

            refunded_now = Money.from_minor_units(refund.amount, payment.currency).amount
            await self._apply_refund_total(uow, payment, payment.refunded_amount + refunded_now)
            await uow.commit()

        logger.info(
            f"Refund {refund.id} processed for payment {payment.id}: {refunded_now} "
            f"(total refunded {payment.refunded_amount} of {payment.amount})"
        )
        return self._payment_to_dto(payment)

    # =========================================================================
    # SHARED MUTATIONS
    # =========================================================================

    async def _apply_success(
        self, uow: UnitOfWork, payment: Payment, transaction_id: Optional[str]
    ) -> None:
        now = self._clock()
        payment.complete(transaction_id, now)
        await uow.payments.update(payment)

        order = await uow.orders.find_by_id(payment.order_id, for_update=True)
        order.mark_payment_completed(now)
        await uow.orders.update(order)

        logger.info(
            f"✅ Payment confirmed: order {order.order_number.value} "
            f"(intent {payment.gateway_intent_id}, amount {payment.amount})"
        )

    async def _apply_refund_total(
        self, uow: UnitOfWork, payment: Payment, cumulative: Decimal
    ) -> bool:
        now = self._clock()
        if not payment.apply_cumulative_refund(cumulative, now):
            return False
        await uow.payments.update(payment)

        if payment.is_fully_refunded:
            order = await uow.orders.find_by_id(payment.order_id, for_update=True)
            order.mark_refunded(now)
            await uow.orders.update(order)
            logger.info(f"Order {order.order_number.value} fully refunded")
        return True

    def _intent_to_dto(self, intent: GatewayIntent) -> PaymentIntentDTO:
        return PaymentIntentDTO(
            client_secret=intent.client_secret,
            payment_intent_id=intent.id,
            amount=intent.amount,
            currency=self._currency,
            status=intent.status,
        )

    @staticmethod
    def _payment_to_dto(payment: Payment) -> PaymentDTO:
        return PaymentDTO(
            id=payment.id,
            order_id=payment.order_id,
            gateway_intent_id=payment.gateway_intent_id,
            amount=payment.amount,
            currency=payment.currency,
            status=payment.status,
            transaction_id=payment.transaction_id,
            failure_reason=payment.failure_reason,
            refunded_amount=payment.refunded_amount,
            remaining_refundable=payment.remaining_refundable,
            created_at=payment.created_at,
            updated_at=payment.updated_at,
        )
