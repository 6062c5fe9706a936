"""End-to-end API tests: checkout, payment webhooks, refunds, coupons."""

from decimal import Decimal


ADMIN_HEADERS = {"X-User-Id": "admin-1", "X-User-Role": "ADMIN"}
USER_HEADERS = {"X-User-Id": "user-1"}
TWO_PACKS = [{"unit_price": "500.00", "quantity": 2}]


async def create_order(api, seed, coupon_code=None):
    address_id = await seed.checkout(TWO_PACKS)
    body = {"address_id": address_id, "payment_method": "CARD"}
    if coupon_code:
        body["coupon_code"] = coupon_code
    response = await api.post("/api/orders", json=body, headers=USER_HEADERS)
    assert response.status_code == 201, response.text
    return response.json()


async def test_health(api):
    response = await api.get("/health")
    ready = await api.get("/health/ready")

    assert response.status_code == 200
    assert response.json()["status"] == "healthy"
    assert ready.status_code == 200
    assert ready.json()["checks"]["database"] == "ok"


async def test_checkout_with_coupon(api, seed):
    await seed.coupon("SAVE10", max_discount_amount=Decimal("80"))

    order = await create_order(api, seed, coupon_code="save10")

    assert order["status"] == "PENDING"
    assert order["coupon_code"] == "SAVE10"
    assert Decimal(order["total_amount"]) == Decimal("966.00")

    listing = await api.get("/api/orders", headers=USER_HEADERS)
    assert listing.status_code == 200
    assert listing.json()["pagination"]["total_items"] == 1


async def test_missing_identity_is_unauthorized(api):
    response = await api.get("/api/orders")

    assert response.status_code == 401


async def test_empty_cart_is_not_found(api, seed):
    address_id = await seed.address()

    response = await api.post(
        "/api/orders",
        json={"address_id": address_id, "payment_method": "COD"},
        headers=USER_HEADERS,
    )

    assert response.status_code == 404
    assert response.json()["error"] == "Cart is empty"


async def test_invalid_body_is_bad_request(api):
    response = await api.post(
        "/api/orders",
        json={"address_id": "addr-1", "payment_method": "BARTER"},
        headers=USER_HEADERS,
    )

    assert response.status_code == 400
    assert response.json()["details"]


async def test_foreign_order_is_forbidden(api, seed):
    order = await create_order(api, seed)

    response = await api.get(f"/api/orders/{order['id']}", headers={"X-User-Id": "user-2"})
    as_admin = await api.get(f"/api/orders/{order['id']}", headers=ADMIN_HEADERS)

    assert response.status_code == 403
    assert as_admin.status_code == 200


async def test_status_change_requires_admin(api, seed):
    order = await create_order(api, seed)
    url = f"/api/orders/{order['id']}/status"

    as_user = await api.put(url, json={"status": "CONFIRMED"}, headers=USER_HEADERS)
    skipped = await api.put(url, json={"status": "DELIVERED"}, headers=ADMIN_HEADERS)
    confirmed = await api.put(url, json={"status": "CONFIRMED"}, headers=ADMIN_HEADERS)

    assert as_user.status_code == 403
    assert skipped.status_code == 400
    assert skipped.json()["error"] == "Invalid status transition from PENDING to DELIVERED"
    assert confirmed.status_code == 200
    assert confirmed.json()["status"] == "CONFIRMED"


async def test_cancel_order(api, seed):
    order = await create_order(api, seed)
    url = f"/api/orders/{order['id']}"

    too_short = await api.request(
        "DELETE", url, json={"cancellation_reason": "meh"}, headers=USER_HEADERS
    )
    cancelled = await api.request(
        "DELETE", url, json={"cancellation_reason": "Found a better price"}, headers=USER_HEADERS
    )

    assert too_short.status_code == 400
    assert cancelled.status_code == 200
    assert cancelled.json()["status"] == "CANCELLED"


async def test_payment_flow_with_webhooks_and_refund(api, seed, gateway):
    order = await create_order(api, seed)

    created = await api.post(
        "/api/payment/create-payment-intent", json={"order_id": order["id"]}, headers=USER_HEADERS
    )
    assert created.status_code == 201
    intent = created.json()
    assert intent["amount"] == 105000

    payload = gateway.build_event_payload(
        "payment_intent.succeeded",
        {"id": intent["payment_intent_id"], "latest_charge": "ch_api_1"},
        event_id="evt_api_1",
    )
    headers = {"Stripe-Signature": gateway.sign(payload), "Content-Type": "application/json"}
    first = await api.post("/api/payment/webhook", content=payload, headers=headers)
    replay = await api.post("/api/payment/webhook", content=payload, headers=headers)

    assert first.status_code == 200
    assert first.json() == {"received": True}
    assert replay.status_code == 200

    payment = (await api.get(f"/api/payment/order/{order['id']}", headers=USER_HEADERS)).json()
    assert payment["status"] == "COMPLETED"
    assert payment["transaction_id"] == "ch_api_1"

    again = await api.post(
        "/api/payment/create-payment-intent", json={"order_id": order["id"]}, headers=USER_HEADERS
    )
    assert again.status_code == 400

    over = await api.post(
        f"/api/payment/{payment['id']}/refund", json={"amount": "1200.00"}, headers=ADMIN_HEADERS
    )
    partial = await api.post(
        f"/api/payment/{payment['id']}/refund", json={"amount": "525.00"}, headers=ADMIN_HEADERS
    )
    rest = await api.post(f"/api/payment/{payment['id']}/refund", headers=ADMIN_HEADERS)

    assert over.status_code == 400
    assert "exceeds remaining refundable amount" in over.json()["error"]
    assert partial.status_code == 200
    assert Decimal(partial.json()["refunded_amount"]) == Decimal("525.00")
    assert rest.status_code == 200
    assert rest.json()["status"] == "REFUNDED"


async def test_webhook_with_bad_signature(api, gateway):
    payload = gateway.build_event_payload("payment_intent.succeeded", {"id": "pi_1"})

    response = await api.post(
        "/api/payment/webhook", content=payload, headers={"Stripe-Signature": "t=1,v1=bad"}
    )
    unsigned = await api.post("/api/payment/webhook", content=payload)

    assert response.status_code == 400
    assert unsigned.status_code == 400


async def test_confirm_is_owner_only(api, seed, gateway):
    order = await create_order(api, seed)
    intent = (
        await api.post(
            "/api/payment/create-payment-intent", json={"order_id": order["id"]}, headers=USER_HEADERS
        )
    ).json()
    gateway.succeed_intent(intent["payment_intent_id"], "ch_confirm_1")
    body = {"payment_intent_id": intent["payment_intent_id"]}

    foreign = await api.post("/api/payment/confirm", json=body, headers={"X-User-Id": "user-2"})
    owner = await api.post("/api/payment/confirm", json=body, headers=USER_HEADERS)

    assert foreign.status_code == 404
    assert owner.status_code == 200
    assert owner.json()["status"] == "COMPLETED"


async def test_refund_requires_admin(api):
    response = await api.post("/api/payment/some-id/refund", headers=USER_HEADERS)

    assert response.status_code == 403


async def test_coupon_admin_lifecycle(api):
    body = {
        "code": "monsoon15",
        "name": "Monsoon sale",
        "discount_type": "PERCENTAGE",
        "discount_value": "15",
        "max_discount_amount": "100",
        "valid_from": "2020-01-01T00:00:00Z",
        "valid_until": "2099-01-01T00:00:00Z",
    }

    forbidden = await api.post("/api/coupons", json=body, headers=USER_HEADERS)
    created = await api.post("/api/coupons", json=body, headers=ADMIN_HEADERS)
    duplicate = await api.post("/api/coupons", json=body, headers=ADMIN_HEADERS)

    assert forbidden.status_code == 403
    assert created.status_code == 201
    assert created.json()["code"] == "MONSOON15"
    assert duplicate.status_code == 409

    coupon_id = created.json()["id"]
    validated = await api.post(
        "/api/coupons/validate",
        json={"code": "MONSOON15", "order_amount": "400"},
        headers=USER_HEADERS,
    )
    assert validated.status_code == 200
    assert validated.json()["is_valid"] is True
    assert Decimal(validated.json()["discount_amount"]) == Decimal("60.00")

    updated = await api.put(
        f"/api/coupons/{coupon_id}", json={"name": "Monsoon mega sale"}, headers=ADMIN_HEADERS
    )
    listed = await api.get("/api/coupons", params={"search": "monsoon"}, headers=ADMIN_HEADERS)
    stats = await api.get(f"/api/coupons/{coupon_id}/stats", headers=ADMIN_HEADERS)
    deactivated = await api.delete(f"/api/coupons/{coupon_id}", headers=ADMIN_HEADERS)
    missing = await api.get("/api/coupons/nope", headers=ADMIN_HEADERS)

    assert updated.json()["name"] == "Monsoon mega sale"
    assert listed.json()["pagination"]["total_items"] == 1
    assert stats.json()["total_usage"] == 0
    assert deactivated.json()["is_active"] is False
    assert missing.status_code == 404


async def test_rejected_coupon_is_a_value_not_an_error(api):
    response = await api.post(
        "/api/coupons/validate",
        json={"code": "GHOST", "order_amount": "100"},
        headers=USER_HEADERS,
    )

    assert response.status_code == 200
    assert response.json()["is_valid"] is False
    assert response.json()["message"] == "Coupon code not found"
