"""Application services."""

from .coupon_service import CouponService
from .order_service import OrderService
from .payment_service import PaymentService

__all__ = ["CouponService", "OrderService", "PaymentService"]
