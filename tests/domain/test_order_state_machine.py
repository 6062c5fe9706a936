"""Tests for the order status state machine and cancellation rules."""

from datetime import datetime
from decimal import Decimal

import pytest

from larder.domain.entities import Order, OrderItem
from larder.domain.enums import OrderStatus, PaymentMethod, PaymentStatus
from larder.domain.exceptions import (
    InvalidStatusTransitionError,
    OrderCancellationError,
    ValidationError,
)
from larder.domain.rules import OrderTotals, VALID_TRANSITIONS, check_transition
from larder.domain.value_objects import Money, OrderNumber


NOW = datetime(2026, 3, 14, 10, 30)


def make_order(status: OrderStatus = OrderStatus.PENDING) -> Order:
    item = OrderItem(
        product_id="prod-1",
        product_name="Masala Oats 500g",
        quantity=2,
        unit_price=Money(Decimal("500")),
        total_price=Money(Decimal("1000")),
    )
    order = Order.place(
        order_number=OrderNumber("ORD-20260314-00042"),
        user_id="user-1",
        payment_method=PaymentMethod.CARD,
        address_id="addr-1",
        totals=OrderTotals.compute(Decimal("1000")),
        items=[item],
        now=NOW,
    )
    order.status = status
    return order


ALL_STATUSES = list(OrderStatus)


@pytest.mark.parametrize("current", ALL_STATUSES)
@pytest.mark.parametrize("requested", ALL_STATUSES)
def test_transition_table(current, requested):
    check = check_transition(current, requested)
    assert check.allowed == (requested in VALID_TRANSITIONS[current])
    if not check.allowed:
        assert check.reason == (
            f"Invalid status transition from {current.value} to {requested.value}"
        )


def test_terminal_statuses_have_no_exits():
    assert VALID_TRANSITIONS[OrderStatus.CANCELLED] == frozenset()
    assert VALID_TRANSITIONS[OrderStatus.REFUNDED] == frozenset()


def test_invalid_transition_leaves_order_untouched():
    order = make_order()

    with pytest.raises(InvalidStatusTransitionError) as exc_info:
        order.transition_to(OrderStatus.OUT_FOR_DELIVERY, NOW)

    assert exc_info.value.message == (
        "Invalid status transition from PENDING to OUT_FOR_DELIVERY"
    )
    assert order.status is OrderStatus.PENDING


def test_delivered_sets_timestamp():
    order = make_order(OrderStatus.OUT_FOR_DELIVERY)

    previous = order.transition_to(OrderStatus.DELIVERED, NOW)

    assert previous is OrderStatus.OUT_FOR_DELIVERY
    assert order.delivered_at == NOW


def test_admin_cancel_requires_reason():
    order = make_order(OrderStatus.CONFIRMED)

    with pytest.raises(ValidationError):
        order.transition_to(OrderStatus.CANCELLED, NOW)

    assert order.status is OrderStatus.CONFIRMED


def test_cancel_pending_order():
    order = make_order()

    order.cancel("  Ordered the wrong pack size  ", NOW)

    assert order.status is OrderStatus.CANCELLED
    assert order.cancelled_at == NOW
    assert order.cancellation_reason == "Ordered the wrong pack size"


def test_cancel_delivered_order_rejected():
    order = make_order(OrderStatus.DELIVERED)

    with pytest.raises(OrderCancellationError) as exc_info:
        order.cancel("Changed my mind about this", NOW)

    assert exc_info.value.message == "Cannot cancel order with status DELIVERED"
    assert order.status is OrderStatus.DELIVERED


def test_cancel_with_short_reason_rejected():
    order = make_order()

    with pytest.raises(ValidationError):
        order.cancel("too short", NOW)

    assert order.status is OrderStatus.PENDING


def test_payment_completion_confirms_pending_order():
    order = make_order()

    order.mark_payment_completed(NOW)

    assert order.payment_status is PaymentStatus.COMPLETED
    assert order.status is OrderStatus.CONFIRMED


def test_payment_completion_keeps_later_status():
    order = make_order(OrderStatus.PREPARING)

    order.mark_payment_completed(NOW)

    assert order.status is OrderStatus.PREPARING


def test_payment_failure_keeps_order_status():
    order = make_order()

    order.mark_payment_failed(NOW)

    assert order.payment_status is PaymentStatus.FAILED
    assert order.status is OrderStatus.PENDING


def test_place_requires_items():
    with pytest.raises(ValidationError):
        Order.place(
            order_number=OrderNumber("ORD-20260314-00042"),
            user_id="user-1",
            payment_method=PaymentMethod.COD,
            address_id="addr-1",
            totals=OrderTotals.compute(Decimal("0")),
            items=[],
            now=NOW,
        )


def test_place_sets_estimated_delivery():
    order = make_order()

    assert order.estimated_delivery_date == datetime(2026, 3, 19, 10, 30)
    assert order.payment_status is PaymentStatus.PENDING
