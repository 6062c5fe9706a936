"""
Order Domain Events.

Published after the order transaction commits. Subscribers perform the
best-effort side effects (notifications, coupon usage bookkeeping).
"""
from dataclasses import dataclass
from decimal import Decimal
from typing import Optional

from .base import DomainEvent


@dataclass
class OrderPlacedEvent(DomainEvent):
    """
    Order was created from the user's cart.

    Consumers: order confirmation notification
    """

    order_id: str = ""
    order_number: str = ""
    total_amount: Decimal = Decimal("0")
    payment_method: str = ""
    items_count: int = 0

    def __post_init__(self):
        if not self.aggregate_id and self.order_id:
            object.__setattr__(self, 'aggregate_id', self.order_id)
        super().__post_init__()


@dataclass
class CouponAppliedEvent(DomainEvent):
    """
    A valid coupon discounted a newly created order.

    Consumers: coupon usage recording
    """

    order_id: str = ""
    coupon_id: str = ""
    coupon_code: str = ""
    discount_amount: Decimal = Decimal("0")

    def __post_init__(self):
        if not self.aggregate_id and self.order_id:
            object.__setattr__(self, 'aggregate_id', self.order_id)
        super().__post_init__()


@dataclass
class OrderStatusChangedEvent(DomainEvent):
    """
    Order status changed through the state machine.

    Consumers: push + email status notifications
    """

    order_id: str = ""
    order_number: str = ""
    previous_status: str = ""
    new_status: str = ""

    def __post_init__(self):
        if not self.aggregate_id and self.order_id:
            object.__setattr__(self, 'aggregate_id', self.order_id)
        super().__post_init__()


@dataclass
class OrderCancelledEvent(DomainEvent):
    """
    Order was cancelled by its owner.

    Consumers: push + email cancellation notifications
    """

    order_id: str = ""
    order_number: str = ""
    previous_status: str = ""
    reason: Optional[str] = None

    def __post_init__(self):
        if not self.aggregate_id and self.order_id:
            object.__setattr__(self, 'aggregate_id', self.order_id)
        super().__post_init__()
