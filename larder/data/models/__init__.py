"""Database models."""

from .base import Base
from .checkout_model import AddressModel, CartItemModel, CartModel, ProductVariantModel
from .coupon_model import CouponModel, CouponUsageModel
from .order_model import OrderItemModel, OrderModel
from .payment_model import PaymentModel, ProcessedWebhookEventModel

__all__ = [
    "AddressModel",
    "Base",
    "CartItemModel",
    "CartModel",
    "CouponModel",
    "CouponUsageModel",
    "OrderItemModel",
    "OrderModel",
    "PaymentModel",
    "ProcessedWebhookEventModel",
    "ProductVariantModel",
]
