"""Domain entities."""

from .cart import Address, Cart, CartLine
from .coupon import Coupon, CouponUsage, CouponUsageStats
from .order import Order, OrderItem
from .payment import Payment

__all__ = [
    "Address",
    "Cart",
    "CartLine",
    "Coupon",
    "CouponUsage",
    "CouponUsageStats",
    "Order",
    "OrderItem",
    "Payment",
]
