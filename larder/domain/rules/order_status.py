"""
Order status state machine.

Pure transition table; no persistence, no side effects.
"""
from dataclasses import dataclass
from typing import Dict, FrozenSet, Optional

from ..enums import OrderStatus


VALID_TRANSITIONS: Dict[OrderStatus, FrozenSet[OrderStatus]] = {
    OrderStatus.PENDING: frozenset({OrderStatus.CONFIRMED, OrderStatus.CANCELLED}),
    OrderStatus.CONFIRMED: frozenset({OrderStatus.PREPARING, OrderStatus.CANCELLED}),
    OrderStatus.PREPARING: frozenset({OrderStatus.OUT_FOR_DELIVERY}),
    OrderStatus.OUT_FOR_DELIVERY: frozenset({OrderStatus.DELIVERED}),
    OrderStatus.DELIVERED: frozenset({OrderStatus.REFUNDED}),
    OrderStatus.CANCELLED: frozenset(),
    OrderStatus.REFUNDED: frozenset(),
}

CANCELLABLE_STATUSES: FrozenSet[OrderStatus] = frozenset(
    {OrderStatus.PENDING, OrderStatus.CONFIRMED}
)

MIN_CANCELLATION_REASON_LENGTH = 10


@dataclass(frozen=True)
class TransitionCheck:
    """Outcome of validating a status transition."""

    allowed: bool
    current: OrderStatus
    requested: OrderStatus
    reason: Optional[str] = None


def check_transition(current: OrderStatus, requested: OrderStatus) -> TransitionCheck:
    """Validate `current -> requested` against the transition table."""
    current = OrderStatus(current)
    requested = OrderStatus(requested)

    if requested in VALID_TRANSITIONS[current]:
        return TransitionCheck(allowed=True, current=current, requested=requested)

    return TransitionCheck(
        allowed=False,
        current=current,
        requested=requested,
        reason=f"Invalid status transition from {current.value} to {requested.value}",
    )


def check_cancellation_reason(reason: Optional[str]) -> Optional[str]:
    """Return a rejection message for an unusable cancellation reason, else None."""
    if reason is None or not reason.strip():
        return "Cancellation reason is required"
    if len(reason.strip()) < MIN_CANCELLATION_REASON_LENGTH:
        return (
            f"Cancellation reason must be at least "
            f"{MIN_CANCELLATION_REASON_LENGTH} characters"
        )
    return None
