"""
Event subscribers for best-effort order side effects.

They run after the order transaction has committed. Any exception they raise
is logged by the event bus and never reaches the customer request.
"""
import logging

from sqlalchemy.ext.asyncio import async_sessionmaker

from larder.application.interfaces import INotificationService
from larder.application.services.coupon_service import CouponService
from larder.data.uow import create_uow
from larder.domain.entities.order import Order
from larder.domain.event_bus import EventBus
from larder.domain.events import (
    CouponAppliedEvent,
    OrderCancelledEvent,
    OrderPlacedEvent,
    OrderStatusChangedEvent,
)


logger = logging.getLogger(__name__)


class OrderNotificationHandler:
    """Sends customer notifications for order lifecycle events."""

    def __init__(self, session_factory: async_sessionmaker, notifier: INotificationService):
        self._session_factory = session_factory
        self._notifier = notifier

    async def _load(self, order_id: str) -> Order:
        uow = create_uow(self._session_factory)
        async with uow:
            order = await uow.orders.find_by_id(order_id)
        if order is None:
            raise LookupError(f"Order {order_id} vanished before notification")
        return order

    async def on_order_placed(self, event: OrderPlacedEvent) -> None:
        order = await self._load(event.order_id)
        await self._notifier.send_order_confirmation(order)

    async def on_status_changed(self, event: OrderStatusChangedEvent) -> None:
        order = await self._load(event.order_id)
        await self._notifier.send_order_status_update(order, event.previous_status)

    async def on_order_cancelled(self, event: OrderCancelledEvent) -> None:
        order = await self._load(event.order_id)
        await self._notifier.send_order_cancelled(order)


class CouponUsageHandler:
    """Books coupon usage once the discounted order exists."""

    def __init__(self, coupon_service: CouponService):
        self._coupons = coupon_service

    async def on_coupon_applied(self, event: CouponAppliedEvent) -> None:
        await self._coupons.record_usage(
            coupon_id=event.coupon_id,
            user_id=event.user_id,
            order_id=event.order_id,
            discount_amount=event.discount_amount,
        )


def register_order_handlers(
    event_bus: EventBus,
    session_factory: async_sessionmaker,
    notifier: INotificationService,
    coupon_service: CouponService,
) -> None:
    """Wire order side effects onto the event bus."""
    notifications = OrderNotificationHandler(session_factory, notifier)
    usage = CouponUsageHandler(coupon_service)

    event_bus.subscribe(OrderPlacedEvent, notifications.on_order_placed)
    event_bus.subscribe(CouponAppliedEvent, usage.on_coupon_applied)
    event_bus.subscribe(OrderStatusChangedEvent, notifications.on_status_changed)
    event_bus.subscribe(OrderCancelledEvent, notifications.on_order_cancelled)
    logger.info("Order event handlers registered")
