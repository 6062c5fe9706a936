"""
Order aggregate root.

CRITICAL: This file must contain ZERO imports from:
- sqlalchemy
- pydantic
- fastapi
"""
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from decimal import Decimal
from typing import Any, Dict, List, Optional
import uuid

from ..enums import OrderStatus, PaymentMethod, PaymentStatus
from ..events.base import DomainEvent
from ..exceptions import (
    InvalidStatusTransitionError,
    OrderCancellationError,
    ValidationError,
)
from ..rules import (
    CANCELLABLE_STATUSES,
    OrderTotals,
    check_cancellation_reason,
    check_transition,
)
from ..value_objects import Money, OrderNumber


@dataclass(frozen=True)
class OrderItem:
    """
    Immutable line snapshot copied from the cart at order creation.

    Later catalog price changes or product removal never affect it.
    """
    product_id: str
    product_name: str
    quantity: int
    unit_price: Money
    total_price: Money
    product_image: Optional[str] = None
    variant_id: Optional[str] = None
    variant_sku: Optional[str] = None
    variant_name: Optional[str] = None
    variant_attributes: Optional[Dict[str, Any]] = None
    id: Optional[str] = None


@dataclass
class Order:
    """
    Order aggregate root.

    One checkout attempt. Totals are fixed at creation; afterwards the order
    is mutated only through the status state machine and by payment
    settlement.
    """
    id: str
    order_number: OrderNumber
    user_id: str
    payment_method: PaymentMethod
    address_id: str
    totals: OrderTotals
    currency: str = "INR"
    items: List[OrderItem] = field(default_factory=list)

    status: OrderStatus = OrderStatus.PENDING
    payment_status: PaymentStatus = PaymentStatus.PENDING

    coupon_id: Optional[str] = None
    coupon_code: Optional[str] = None
    special_instructions: Optional[str] = None

    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    estimated_delivery_date: Optional[datetime] = None
    delivered_at: Optional[datetime] = None
    cancelled_at: Optional[datetime] = None
    cancellation_reason: Optional[str] = None

    _domain_events: List[DomainEvent] = field(default_factory=list, init=False, repr=False)

    @classmethod
    def place(
        cls,
        order_number: OrderNumber,
        user_id: str,
        payment_method: PaymentMethod,
        address_id: str,
        totals: OrderTotals,
        items: List[OrderItem],
        now: datetime,
        currency: str = "INR",
        coupon_id: Optional[str] = None,
        coupon_code: Optional[str] = None,
        special_instructions: Optional[str] = None,
        estimated_delivery_days: int = 5,
    ) -> "Order":
        """
        Factory for a brand-new PENDING order.

        Raises:
            ValidationError: If there are no items or totals do not balance
        """
        if not items:
            raise ValidationError("Cannot place an order without items")
        if not totals.is_balanced():
            raise ValidationError("Order totals do not balance")

        return cls(
            id=str(uuid.uuid4()),
            order_number=order_number,
            user_id=user_id,
            payment_method=PaymentMethod(payment_method),
            address_id=address_id,
            totals=totals,
            currency=currency,
            items=list(items),
            status=OrderStatus.PENDING,
            payment_status=PaymentStatus.PENDING,
            coupon_id=coupon_id,
            coupon_code=coupon_code.upper() if coupon_id and coupon_code else None,
            special_instructions=special_instructions,
            created_at=now,
            updated_at=now,
            estimated_delivery_date=now + timedelta(days=estimated_delivery_days),
        )

    @property
    def total(self) -> Money:
        return Money(amount=self.totals.total, currency=self.currency)

    def is_owned_by(self, user_id: str) -> bool:
        return self.user_id == user_id

    # =========================================================================
    # STATUS STATE MACHINE
    # =========================================================================

    def transition_to(
        self,
        new_status: OrderStatus,
        now: datetime,
        reason: Optional[str] = None,
    ) -> OrderStatus:
        """
        Move to `new_status` following the transition table.

        Returns:
            The previous status

        Raises:
            InvalidStatusTransitionError: Transition not in the table (state untouched)
            ValidationError: Cancelling without a usable reason
        """
        check = check_transition(self.status, new_status)
        if not check.allowed:
            raise InvalidStatusTransitionError(check.current.value, check.requested.value)

        if check.requested is OrderStatus.CANCELLED:
            problem = check_cancellation_reason(reason)
            if problem:
                raise ValidationError(problem)

        previous = self.status
        self.status = check.requested
        self.updated_at = now

        if self.status is OrderStatus.DELIVERED:
            self.delivered_at = now
        elif self.status is OrderStatus.CANCELLED:
            self.cancelled_at = now
            self.cancellation_reason = reason.strip()

        return previous

    def cancel(self, reason: str, now: datetime) -> OrderStatus:
        """
        Customer cancellation; allowed only from PENDING or CONFIRMED.

        Raises:
            OrderCancellationError: Current status disallows cancellation
            ValidationError: Reason shorter than 10 characters
        """
        if self.status not in CANCELLABLE_STATUSES:
            raise OrderCancellationError(
                f"Cannot cancel order with status {self.status.value}"
            )
        return self.transition_to(OrderStatus.CANCELLED, now, reason=reason)

    # =========================================================================
    # PAYMENT SETTLEMENT
    # =========================================================================

    def mark_payment_completed(self, now: datetime) -> None:
        """Payment captured: payment status COMPLETED, PENDING orders become CONFIRMED."""
        self.payment_status = PaymentStatus.COMPLETED
        if self.status is OrderStatus.PENDING:
            self.status = OrderStatus.CONFIRMED
        self.updated_at = now

    def mark_payment_failed(self, now: datetime) -> None:
        """Payment failed; order status is left alone so the customer can retry."""
        self.payment_status = PaymentStatus.FAILED
        self.updated_at = now

    def mark_refunded(self, now: datetime) -> None:
        """Full refund settled."""
        self.payment_status = PaymentStatus.REFUNDED
        self.status = OrderStatus.REFUNDED
        self.updated_at = now

    # =========================================================================
    # EVENT COLLECTION
    # =========================================================================

    def record_event(self, event: DomainEvent) -> None:
        self._domain_events.append(event)

    def pull_events(self) -> List[DomainEvent]:
        """Return collected events and clear them (call after commit)."""
        events = list(self._domain_events)
        self._domain_events.clear()
        return events
