"""Domain events published on the event bus."""
from .base import DomainEvent
from .order_events import (
    CouponAppliedEvent,
    OrderCancelledEvent,
    OrderPlacedEvent,
    OrderStatusChangedEvent,
)

__all__ = [
    "CouponAppliedEvent",
    "DomainEvent",
    "OrderCancelledEvent",
    "OrderPlacedEvent",
    "OrderStatusChangedEvent",
]
