"""Tests for InMemoryEventBus."""

import pytest

from larder.domain.events import OrderCancelledEvent, OrderPlacedEvent
from larder.infrastructure.event_bus import InMemoryEventBus


@pytest.mark.asyncio
async def test_subscribers_receive_only_their_event_class():
    bus = InMemoryEventBus()
    placed, cancelled = [], []

    async def on_placed(event):
        placed.append(event)

    async def on_cancelled(event):
        cancelled.append(event)

    bus.subscribe(OrderPlacedEvent, on_placed)
    bus.subscribe(OrderCancelledEvent, on_cancelled)

    await bus.publish(OrderPlacedEvent(order_id="order-1", order_number="ORD-20260101-00001"))

    assert [e.order_id for e in placed] == ["order-1"]
    assert cancelled == []
    assert placed[0].aggregate_id == "order-1"
    assert placed[0].event_type == "OrderPlacedEvent"


@pytest.mark.asyncio
async def test_failing_subscriber_is_isolated():
    bus = InMemoryEventBus()
    received = []

    async def broken(event):
        raise RuntimeError("boom")

    def sync_handler(event):
        received.append(event.order_id)

    bus.subscribe(OrderPlacedEvent, broken)
    bus.subscribe(OrderPlacedEvent, sync_handler)

    await bus.publish(OrderPlacedEvent(order_id="order-1"))

    assert received == ["order-1"]


@pytest.mark.asyncio
async def test_publish_all_keeps_order():
    bus = InMemoryEventBus()
    seen = []

    async def handler(event):
        seen.append(event.order_id)

    bus.subscribe(OrderPlacedEvent, handler)
    await bus.publish_all([OrderPlacedEvent(order_id=f"order-{i}") for i in range(3)])
    await bus.publish_all([])

    assert seen == ["order-0", "order-1", "order-2"]


def test_unsubscribe():
    bus = InMemoryEventBus()

    async def handler(event):
        pass

    bus.subscribe(OrderPlacedEvent, handler)
    bus.unsubscribe(OrderPlacedEvent, handler)

    assert bus.subscribers_for(OrderPlacedEvent) == []


def test_event_to_dict_serializes_decimals():
    from decimal import Decimal

    event = OrderPlacedEvent(order_id="order-1", total_amount=Decimal("966.00"))
    data = event.to_dict()

    assert data["aggregate_type"] == "Order"
    assert data["data"]["total_amount"] == "966.00"
