"""Domain layer - pure domain models and interfaces."""

from .entities import Coupon, Order, OrderItem, Payment
from .repositories import CouponRepository, OrderRepository, PaymentRepository
from .value_objects import ExecutionID, Money, OrderNumber

__all__ = [
    "Coupon",
    "CouponRepository",
    "ExecutionID",
    "Money",
    "Order",
    "OrderItem",
    "OrderNumber",
    "OrderRepository",
    "Payment",
    "PaymentRepository",
]
