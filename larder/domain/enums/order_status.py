"""
Order Status Enums.

Status axes for the order lifecycle and the payment attached to it.
"""
from enum import Enum


class OrderStatus(str, Enum):
    """Fulfilment status of an order."""

    PENDING = "PENDING"
    CONFIRMED = "CONFIRMED"
    PREPARING = "PREPARING"
    OUT_FOR_DELIVERY = "OUT_FOR_DELIVERY"
    DELIVERED = "DELIVERED"
    CANCELLED = "CANCELLED"
    REFUNDED = "REFUNDED"


class PaymentStatus(str, Enum):
    """Payment status, shared by Order.payment_status and Payment.status."""

    PENDING = "PENDING"
    COMPLETED = "COMPLETED"
    FAILED = "FAILED"
    REFUNDED = "REFUNDED"


class PaymentMethod(str, Enum):
    """How the customer intends to pay."""

    CARD = "CARD"
    UPI = "UPI"
    COD = "COD"
    WALLET = "WALLET"
