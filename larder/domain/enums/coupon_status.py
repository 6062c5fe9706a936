"""Coupon enums."""
from enum import Enum


class DiscountType(str, Enum):
    """Kind of discount a coupon grants."""

    PERCENTAGE = "PERCENTAGE"
    FIXED_AMOUNT = "FIXED_AMOUNT"
    FREE_SHIPPING = "FREE_SHIPPING"


class CouponStatus(str, Enum):
    """Lifecycle status, flipped to EXPIRED by the expiry sweep."""

    ACTIVE = "ACTIVE"
    EXPIRED = "EXPIRED"
