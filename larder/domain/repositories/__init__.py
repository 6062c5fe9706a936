"""Repository interfaces."""

from .coupon_repository import CouponRepository
from .order_repository import OrderRepository
from .payment_repository import PaymentRepository

__all__ = ["CouponRepository", "OrderRepository", "PaymentRepository"]
