"""
Payment entity.

One payment per order, created when a payment intent is requested.

Invariant (MUST ALWAYS HOLD):
    0 <= refunded_amount <= amount, refunded_amount never decreases
"""
from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from typing import Optional
import uuid

from ..enums import PaymentStatus
from ..exceptions import RefundExceedsRemainingError, RefundNotAllowedError, ValidationError


ZERO = Decimal("0")


@dataclass
class Payment:
    """Local record of a gateway payment intent and its settlement."""

    id: str
    order_id: str
    gateway_intent_id: str
    amount: Decimal
    currency: str = "INR"
    status: PaymentStatus = PaymentStatus.PENDING
    transaction_id: Optional[str] = None
    failure_reason: Optional[str] = None
    refunded_amount: Decimal = ZERO
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @classmethod
    def open(
        cls,
        order_id: str,
        gateway_intent_id: str,
        amount: Decimal,
        currency: str,
        now: datetime,
    ) -> "Payment":
        return cls(
            id=str(uuid.uuid4()),
            order_id=order_id,
            gateway_intent_id=gateway_intent_id,
            amount=Decimal(amount),
            currency=currency,
            status=PaymentStatus.PENDING,
            created_at=now,
            updated_at=now,
        )

    @property
    def remaining_refundable(self) -> Decimal:
        return self.amount - (self.refunded_amount or ZERO)

    def is_settled(self) -> bool:
        """COMPLETED or REFUNDED: a success/failure event can no longer change it."""
        return self.status in (PaymentStatus.COMPLETED, PaymentStatus.REFUNDED)

    def complete(self, transaction_id: Optional[str], now: datetime) -> None:
        self.status = PaymentStatus.COMPLETED
        self.transaction_id = transaction_id
        self.failure_reason = None
        self.updated_at = now

    def fail(self, reason: str, now: datetime) -> None:
        self.status = PaymentStatus.FAILED
        self.failure_reason = reason
        self.updated_at = now

    def validate_refund(self, requested: Optional[Decimal]) -> Decimal:
        """
        Validate a refund request and return the amount to refund.

        Defaults to the full remaining refundable amount.

        Raises:
            RefundNotAllowedError: Payment is not COMPLETED
            ValidationError: Requested amount is not positive
            RefundExceedsRemainingError: Requested amount exceeds what is left
        """
        if self.status is not PaymentStatus.COMPLETED:
            raise RefundNotAllowedError(
                f"Cannot refund payment with status {self.status.value}"
            )

        remaining = self.remaining_refundable
        amount = remaining if requested is None else Decimal(requested)

        if amount <= 0:
            raise ValidationError("Refund amount must be a positive number")
        if amount > remaining:
            raise RefundExceedsRemainingError(amount, remaining)

        return amount

    def apply_cumulative_refund(self, cumulative: Decimal, now: datetime) -> bool:
        """
        Set the refunded total from an authoritative cumulative figure.

        A cumulative figure lower than what is already stored (stale or
        reordered delivery) is ignored. The figure is clamped to the payment
        amount.

        Returns:
            True if the stored state changed
        """
        cumulative = min(Decimal(cumulative), self.amount)
        if cumulative <= (self.refunded_amount or ZERO):
            return False

        self.refunded_amount = cumulative
        self.status = (
            PaymentStatus.REFUNDED if cumulative == self.amount else PaymentStatus.COMPLETED
        )
        self.updated_at = now
        return True

    @property
    def is_fully_refunded(self) -> bool:
        return self.refunded_amount == self.amount
