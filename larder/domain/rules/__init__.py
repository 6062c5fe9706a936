"""Pure business rules: state machine, pricing, coupon arithmetic."""

from .coupons import CouponEvaluation, calculate_discount
from .order_status import (
    CANCELLABLE_STATUSES,
    MIN_CANCELLATION_REASON_LENGTH,
    VALID_TRANSITIONS,
    TransitionCheck,
    check_cancellation_reason,
    check_transition,
)
from .pricing import OrderTotals, PricingPolicy

__all__ = [
    "CANCELLABLE_STATUSES",
    "MIN_CANCELLATION_REASON_LENGTH",
    "VALID_TRANSITIONS",
    "CouponEvaluation",
    "OrderTotals",
    "PricingPolicy",
    "TransitionCheck",
    "calculate_discount",
    "check_cancellation_reason",
    "check_transition",
]
