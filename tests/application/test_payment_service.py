"""Tests for PaymentService: intents, webhooks, refunds."""

from decimal import Decimal

import pytest

from larder.application.dtos import CreateOrderRequest
from larder.application.services.payment_service import (
    WEBHOOK_APPLIED,
    WEBHOOK_DUPLICATE,
    WEBHOOK_IGNORED,
)
from larder.data.models import PaymentModel, ProcessedWebhookEventModel
from larder.domain.enums import OrderStatus, PaymentMethod, PaymentStatus
from larder.domain.exceptions import (
    ForbiddenError,
    GatewayError,
    OrderNotFoundError,
    PaymentAlreadyCompletedError,
    PaymentNotFoundError,
    RefundExceedsRemainingError,
    RefundNotAllowedError,
    WebhookSignatureError,
)


# 2 x 500 -> total 1050.00
TWO_PACKS = [{"unit_price": "500.00", "quantity": 2}]


@pytest.fixture
def place_order(order_service, seed):
    async def _place(user_id: str = "user-1"):
        address_id = await seed.checkout(TWO_PACKS, user_id=user_id)
        return await order_service.create_order(
            user_id,
            CreateOrderRequest(address_id=address_id, payment_method=PaymentMethod.CARD),
        )

    return _place


@pytest.fixture
def deliver(gateway, payment_service):
    """Sign a gateway event and hand it to the webhook handler."""

    async def _deliver(event_type: str, data: dict, event_id=None):
        payload = gateway.build_event_payload(event_type, data, event_id)
        return await payment_service.handle_webhook(payload, gateway.sign(payload))

    return _deliver


@pytest.fixture
def paid_order(place_order, payment_service, gateway, deliver):
    """Order whose payment was captured through a webhook."""

    async def _paid():
        order = await place_order()
        intent = await payment_service.create_payment_intent("user-1", order.id)
        charge_id = gateway.succeed_intent(intent.payment_intent_id, "ch_paid_1")
        await deliver(
            "payment_intent.succeeded",
            {"id": intent.payment_intent_id, "latest_charge": charge_id},
        )
        payment = await payment_service.get_payment_by_order("user-1", order.id)
        return order, intent, payment

    return _paid


# =============================================================================
# INTENTS
# =============================================================================

async def test_create_intent_uses_minor_units(place_order, payment_service, gateway):
    order = await place_order()

    intent = await payment_service.create_payment_intent("user-1", order.id)

    assert intent.amount == 105000
    assert intent.currency == "INR"
    assert intent.client_secret
    stored = gateway.intents[intent.payment_intent_id]
    assert stored["metadata"]["order_id"] == order.id
    assert stored["metadata"]["order_number"] == order.order_number

    payment = await payment_service.get_payment_by_order("user-1", order.id)
    assert payment.status is PaymentStatus.PENDING
    assert payment.amount == Decimal("1050.00")
    assert payment.gateway_intent_id == intent.payment_intent_id


async def test_second_intent_returns_open_intent(place_order, payment_service, gateway):
    order = await place_order()

    first = await payment_service.create_payment_intent("user-1", order.id)
    second = await payment_service.create_payment_intent("user-1", order.id)

    assert second.payment_intent_id == first.payment_intent_id
    assert second.client_secret == first.client_secret
    assert len(gateway.intents) == 1


async def test_first_intent_still_settles_after_repeat_request(
    place_order, payment_service, order_service, gateway, deliver
):
    order = await place_order()
    first = await payment_service.create_payment_intent("user-1", order.id)
    await payment_service.create_payment_intent("user-1", order.id)

    charge_id = gateway.succeed_intent(first.payment_intent_id)
    outcome = await deliver(
        "payment_intent.succeeded",
        {"id": first.payment_intent_id, "latest_charge": charge_id},
    )

    assert outcome == WEBHOOK_APPLIED
    reloaded = await order_service.get_order("user-1", order.id)
    assert reloaded.status is OrderStatus.CONFIRMED
    assert reloaded.payment_status is PaymentStatus.COMPLETED


async def test_canceled_intent_replaced_on_same_row(place_order, payment_service, gateway, seed):
    order = await place_order()
    first = await payment_service.create_payment_intent("user-1", order.id)
    gateway.cancel_intent(first.payment_intent_id)

    second = await payment_service.create_payment_intent("user-1", order.id)

    assert second.payment_intent_id != first.payment_intent_id
    payment = await payment_service.get_payment_by_order("user-1", order.id)
    assert payment.gateway_intent_id == second.payment_intent_id
    assert await seed.count(PaymentModel) == 1


async def test_intent_for_foreign_order(place_order, payment_service):
    order = await place_order()

    with pytest.raises(OrderNotFoundError):
        await payment_service.create_payment_intent("user-2", order.id)


async def test_intent_for_paid_order_rejected(paid_order, payment_service):
    order, _, _ = await paid_order()

    with pytest.raises(PaymentAlreadyCompletedError):
        await payment_service.create_payment_intent("user-1", order.id)


async def test_gateway_failure_persists_nothing(place_order, payment_service, gateway):
    order = await place_order()
    gateway.fail_with = GatewayError("card network unreachable")

    with pytest.raises(GatewayError):
        await payment_service.create_payment_intent("user-1", order.id)

    with pytest.raises(PaymentNotFoundError):
        await payment_service.get_payment_by_order("user-1", order.id)


async def test_payment_lookup_ownership(place_order, payment_service):
    order = await place_order()
    await payment_service.create_payment_intent("user-1", order.id)

    with pytest.raises(ForbiddenError):
        await payment_service.get_payment_by_order("user-2", order.id)
    admin_view = await payment_service.get_payment_by_order("admin", order.id, is_admin=True)
    assert admin_view.order_id == order.id


# =============================================================================
# CONFIRMATION
# =============================================================================

async def test_confirm_succeeded_intent(place_order, payment_service, order_service, gateway):
    order = await place_order()
    intent = await payment_service.create_payment_intent("user-1", order.id)
    gateway.succeed_intent(intent.payment_intent_id, "ch_direct")

    payment = await payment_service.confirm_payment("user-1", intent.payment_intent_id)

    assert payment.status is PaymentStatus.COMPLETED
    assert payment.transaction_id == "ch_direct"
    reloaded = await order_service.get_order("user-1", order.id)
    assert reloaded.status is OrderStatus.CONFIRMED
    assert reloaded.payment_status is PaymentStatus.COMPLETED


async def test_confirm_unpaid_intent_changes_nothing(place_order, payment_service):
    order = await place_order()
    intent = await payment_service.create_payment_intent("user-1", order.id)

    payment = await payment_service.confirm_payment("user-1", intent.payment_intent_id)

    assert payment.status is PaymentStatus.PENDING


async def test_confirm_foreign_intent_rejected(place_order, payment_service, gateway):
    order = await place_order()
    intent = await payment_service.create_payment_intent("user-1", order.id)
    gateway.succeed_intent(intent.payment_intent_id)

    with pytest.raises(PaymentNotFoundError):
        await payment_service.confirm_payment("user-2", intent.payment_intent_id)

    payment = await payment_service.get_payment_by_order("user-1", order.id)
    assert payment.status is PaymentStatus.PENDING


# =============================================================================
# WEBHOOKS
# =============================================================================

async def test_success_webhook_confirms_order(paid_order, order_service):
    order, _, payment = await paid_order()

    reloaded = await order_service.get_order("user-1", order.id)
    assert payment.status is PaymentStatus.COMPLETED
    assert payment.transaction_id == "ch_paid_1"
    assert reloaded.status is OrderStatus.CONFIRMED
    assert reloaded.payment_status is PaymentStatus.COMPLETED


async def test_replayed_event_is_duplicate(place_order, payment_service, gateway, deliver, seed):
    order = await place_order()
    intent = await payment_service.create_payment_intent("user-1", order.id)
    data = {"id": intent.payment_intent_id, "latest_charge": "ch_1"}

    first = await deliver("payment_intent.succeeded", data, event_id="evt_1")
    second = await deliver("payment_intent.succeeded", data, event_id="evt_1")

    assert first == WEBHOOK_APPLIED
    assert second == WEBHOOK_DUPLICATE
    assert await seed.count(ProcessedWebhookEventModel) == 1


async def test_redelivered_success_with_new_event_id_is_ignored(paid_order, deliver):
    _, intent, _ = await paid_order()

    outcome = await deliver(
        "payment_intent.succeeded",
        {"id": intent.payment_intent_id, "latest_charge": "ch_other"},
    )

    assert outcome == WEBHOOK_IGNORED


async def test_failure_webhook(place_order, payment_service, order_service, deliver):
    order = await place_order()
    intent = await payment_service.create_payment_intent("user-1", order.id)

    outcome = await deliver(
        "payment_intent.payment_failed",
        {"id": intent.payment_intent_id, "last_payment_error": {"message": "Card declined"}},
    )

    payment = await payment_service.get_payment_by_order("user-1", order.id)
    reloaded = await order_service.get_order("user-1", order.id)
    assert outcome == WEBHOOK_APPLIED
    assert payment.status is PaymentStatus.FAILED
    assert payment.failure_reason == "Card declined"
    assert reloaded.status is OrderStatus.PENDING
    assert reloaded.payment_status is PaymentStatus.FAILED


async def test_late_failure_after_success_ignored(paid_order, payment_service, deliver):
    order, intent, _ = await paid_order()

    outcome = await deliver("payment_intent.payment_failed", {"id": intent.payment_intent_id})

    payment = await payment_service.get_payment_by_order("user-1", order.id)
    assert outcome == WEBHOOK_IGNORED
    assert payment.status is PaymentStatus.COMPLETED


async def test_success_after_failure_applies(place_order, payment_service, deliver):
    order = await place_order()
    intent = await payment_service.create_payment_intent("user-1", order.id)
    await deliver("payment_intent.payment_failed", {"id": intent.payment_intent_id})

    outcome = await deliver(
        "payment_intent.succeeded", {"id": intent.payment_intent_id, "latest_charge": "ch_retry"}
    )

    payment = await payment_service.get_payment_by_order("user-1", order.id)
    assert outcome == WEBHOOK_APPLIED
    assert payment.status is PaymentStatus.COMPLETED
    assert payment.failure_reason is None


async def test_unknown_intent_fails_and_is_not_recorded(deliver, seed):
    with pytest.raises(PaymentNotFoundError):
        await deliver("payment_intent.succeeded", {"id": "pi_unknown"}, event_id="evt_lost")

    # Rolled back with the failure, so a retry is processed again
    assert await seed.count(ProcessedWebhookEventModel) == 0


async def test_unhandled_event_type_is_recorded(deliver, seed):
    outcome = await deliver("customer.created", {"id": "cus_1"})

    assert outcome == WEBHOOK_IGNORED
    assert await seed.count(ProcessedWebhookEventModel) == 1


async def test_bad_signature_rejected(payment_service, gateway, seed):
    payload = gateway.build_event_payload("payment_intent.succeeded", {"id": "pi_1"})

    with pytest.raises(WebhookSignatureError):
        await payment_service.handle_webhook(payload, "t=1,v1=deadbeef")
    with pytest.raises(WebhookSignatureError):
        await payment_service.handle_webhook(payload, "")

    assert await seed.count(ProcessedWebhookEventModel) == 0


async def test_tampered_payload_rejected(payment_service, gateway):
    payload = gateway.build_event_payload("payment_intent.succeeded", {"id": "pi_1"})
    signature = gateway.sign(payload)

    with pytest.raises(WebhookSignatureError):
        await payment_service.handle_webhook(payload.replace(b"pi_1", b"pi_2"), signature)


async def test_charge_refunded_twice_applies_once(paid_order, payment_service, order_service, deliver):
    order, intent, _ = await paid_order()
    charge = {
        "id": "ch_paid_1",
        "payment_intent": intent.payment_intent_id,
        "amount_refunded": 52500,
    }

    first = await deliver("charge.refunded", charge)
    second = await deliver("charge.refunded", charge)

    payment = await payment_service.get_payment_by_order("user-1", order.id)
    reloaded = await order_service.get_order("user-1", order.id)
    assert first == WEBHOOK_APPLIED
    assert second == WEBHOOK_IGNORED
    assert payment.refunded_amount == Decimal("525.00")
    assert payment.status is PaymentStatus.COMPLETED
    assert reloaded.status is OrderStatus.CONFIRMED


async def test_charge_refunded_found_by_intent(paid_order, payment_service, deliver):
    order, intent, _ = await paid_order()

    outcome = await deliver(
        "charge.refunded",
        {"id": "ch_unknown", "payment_intent": intent.payment_intent_id, "amount_refunded": 105000},
    )

    payment = await payment_service.get_payment_by_order("user-1", order.id)
    assert outcome == WEBHOOK_APPLIED
    assert payment.status is PaymentStatus.REFUNDED


async def test_charge_refunded_unknown_charge_skipped(deliver, seed):
    outcome = await deliver("charge.refunded", {"id": "ch_nowhere", "amount_refunded": 100})

    assert outcome == WEBHOOK_IGNORED
    assert await seed.count(ProcessedWebhookEventModel) == 1


# =============================================================================
# REFUNDS
# =============================================================================

async def test_over_refund_rejected(paid_order, payment_service, gateway):
    _, _, payment = await paid_order()

    with pytest.raises(RefundExceedsRemainingError):
        await payment_service.process_refund(payment.id, Decimal("1200.00"))

    unchanged = await payment_service.get_payment_by_order("user-1", payment.order_id)
    assert unchanged.status is PaymentStatus.COMPLETED
    assert unchanged.refunded_amount == Decimal("0")
    assert gateway.refunds == []


async def test_partial_then_full_refund(paid_order, payment_service, order_service, gateway):
    order, _, payment = await paid_order()

    partial = await payment_service.process_refund(payment.id, Decimal("50.00"))
    rest = await payment_service.process_refund(payment.id)

    assert partial.refunded_amount == Decimal("50.00")
    assert partial.status is PaymentStatus.COMPLETED
    assert rest.refunded_amount == Decimal("1050.00")
    assert rest.remaining_refundable == Decimal("0")
    assert rest.status is PaymentStatus.REFUNDED
    assert [refund.amount for refund in gateway.refunds] == [5000, 100000]

    reloaded = await order_service.get_order("user-1", order.id)
    assert reloaded.status is OrderStatus.REFUNDED
    assert reloaded.payment_status is PaymentStatus.REFUNDED


async def test_refund_webhook_after_api_refund_is_no_change(paid_order, payment_service, deliver):
    _, intent, payment = await paid_order()
    await payment_service.process_refund(payment.id, Decimal("100.00"))

    outcome = await deliver(
        "charge.refunded",
        {"id": "ch_paid_1", "payment_intent": intent.payment_intent_id, "amount_refunded": 10000},
    )

    refreshed = await payment_service.get_payment_by_order("user-1", payment.order_id)
    assert outcome == WEBHOOK_IGNORED
    assert refreshed.refunded_amount == Decimal("100.00")


async def test_refund_of_pending_payment_rejected(place_order, payment_service):
    order = await place_order()
    await payment_service.create_payment_intent("user-1", order.id)
    payment = await payment_service.get_payment_by_order("user-1", order.id)

    with pytest.raises(RefundNotAllowedError):
        await payment_service.process_refund(payment.id)


async def test_refund_unknown_payment(payment_service):
    with pytest.raises(PaymentNotFoundError):
        await payment_service.process_refund("missing")


async def test_gateway_refund_failure_records_nothing(paid_order, payment_service, gateway):
    _, _, payment = await paid_order()
    gateway.fail_with = GatewayError("refund declined")

    with pytest.raises(GatewayError):
        await payment_service.process_refund(payment.id, Decimal("10.00"))

    unchanged = await payment_service.get_payment_by_order("user-1", payment.order_id)
    assert unchanged.refunded_amount == Decimal("0")
