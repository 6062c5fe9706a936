"""Domain enums."""

from .order_status import OrderStatus, PaymentMethod, PaymentStatus
from .coupon_status import CouponStatus, DiscountType

__all__ = [
    "CouponStatus",
    "DiscountType",
    "OrderStatus",
    "PaymentMethod",
    "PaymentStatus",
]
