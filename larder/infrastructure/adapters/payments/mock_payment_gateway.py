"""
Mock Payment Gateway Implementation.

In-process stand-in for Stripe used for local development and tests. Intents
and refunds live in memory; webhooks use the Stripe signature scheme
(`t=<timestamp>,v1=<hex HMAC-SHA256 of "<timestamp>.<payload>">`).
"""
import hashlib
import hmac
import json
import logging
import time
import uuid
from typing import Any, Dict, List, Optional

from larder.application.interfaces import (
    GatewayEvent,
    GatewayIntent,
    GatewayRefund,
    IPaymentGateway,
)
from larder.domain.exceptions import GatewayError, WebhookConfigurationError, WebhookSignatureError


logger = logging.getLogger(__name__)

DEFAULT_TOLERANCE_SECONDS = 300


class MockPaymentGateway(IPaymentGateway):
    """
    Mock implementation of the payment gateway.

    Set `fail_with` to make the next gateway call raise that GatewayError.
    Without a webhook secret every webhook is rejected.
    """

    def __init__(self, webhook_secret: Optional[str] = None, tolerance: int = DEFAULT_TOLERANCE_SECONDS):
        self.webhook_secret = webhook_secret
        self.tolerance = tolerance
        self.intents: Dict[str, Dict[str, Any]] = {}
        self.refunds: List[GatewayRefund] = []
        self.fail_with: Optional[GatewayError] = None
        logger.info("MockPaymentGateway initialized")

    def _maybe_fail(self) -> None:
        if self.fail_with is not None:
            error, self.fail_with = self.fail_with, None
            raise error

    def _to_intent(self, intent: Dict[str, Any]) -> GatewayIntent:
        return GatewayIntent(
            id=intent["id"],
            amount=intent["amount"],
            currency=intent["currency"],
            status=intent["status"],
            client_secret=intent["client_secret"],
            latest_charge_id=intent.get("latest_charge"),
            metadata=dict(intent["metadata"]),
        )

    async def create_intent(
        self,
        amount: int,
        currency: str,
        metadata: Dict[str, str],
    ) -> GatewayIntent:
        self._maybe_fail()
        intent_id = f"pi_mock_{uuid.uuid4().hex[:24]}"
        self.intents[intent_id] = {
            "id": intent_id,
            "amount": int(amount),
            "currency": currency.lower(),
            "status": "requires_payment_method",
            "client_secret": f"{intent_id}_secret_{uuid.uuid4().hex[:16]}",
            "metadata": dict(metadata),
            "latest_charge": None,
        }
        logger.info(f"🧪 Mock intent created: {intent_id} ({amount} {currency})")
        return self._to_intent(self.intents[intent_id])

    async def retrieve_intent(self, intent_id: str) -> GatewayIntent:
        self._maybe_fail()
        intent = self.intents.get(intent_id)
        if intent is None:
            raise GatewayError(f"No such payment_intent: {intent_id}")
        return self._to_intent(intent)

    async def create_refund(self, intent_id: str, amount: int) -> GatewayRefund:
        self._maybe_fail()
        if intent_id not in self.intents:
            raise GatewayError(f"No such payment_intent: {intent_id}")
        refund = GatewayRefund(
            id=f"re_mock_{uuid.uuid4().hex[:24]}",
            amount=int(amount),
            status="succeeded",
            payment_intent_id=intent_id,
        )
        self.refunds.append(refund)
        return refund

    # =========================================================================
    # TEST HELPERS
    # =========================================================================

    def succeed_intent(self, intent_id: str, charge_id: Optional[str] = None) -> str:
        """Mark an intent as captured; returns the charge id."""
        charge_id = charge_id or f"ch_mock_{uuid.uuid4().hex[:24]}"
        self.intents[intent_id]["status"] = "succeeded"
        self.intents[intent_id]["latest_charge"] = charge_id
        return charge_id

    def cancel_intent(self, intent_id: str) -> None:
        self.intents[intent_id]["status"] = "canceled"

    def sign(self, payload: bytes, timestamp: Optional[int] = None) -> str:
        """Build a Stripe-Signature header value for `payload`."""
        if not self.webhook_secret:
            raise WebhookConfigurationError("Webhook secret is not configured")
        timestamp = int(time.time()) if timestamp is None else timestamp
        signed = f"{timestamp}.".encode() + payload
        digest = hmac.new(self.webhook_secret.encode(), signed, hashlib.sha256).hexdigest()
        return f"t={timestamp},v1={digest}"

    @staticmethod
    def build_event_payload(event_type: str, data: Dict[str, Any], event_id: Optional[str] = None) -> bytes:
        return json.dumps(
            {
                "id": event_id or f"evt_mock_{uuid.uuid4().hex[:24]}",
                "object": "event",
                "type": event_type,
                "data": {"object": data},
            }
        ).encode()

    # =========================================================================
    # WEBHOOKS
    # =========================================================================

    def construct_webhook_event(self, payload: bytes, signature: str) -> GatewayEvent:
        if not self.webhook_secret:
            raise WebhookConfigurationError("Webhook secret is not configured")
        if not signature:
            raise WebhookSignatureError("Missing Stripe-Signature header")

        parts = dict(
            item.split("=", 1) for item in signature.split(",") if "=" in item
        )
        timestamp, received = parts.get("t"), parts.get("v1")
        if not timestamp or not received or not timestamp.isdigit():
            raise WebhookSignatureError("Invalid webhook signature")

        expected = self.sign(payload, int(timestamp)).split("v1=", 1)[1]
        if not hmac.compare_digest(expected, received):
            raise WebhookSignatureError("Invalid webhook signature")
        if self.tolerance and abs(time.time() - int(timestamp)) > self.tolerance:
            raise WebhookSignatureError("Webhook timestamp outside the tolerance zone")

        try:
            body = json.loads(payload)
        except ValueError as e:
            raise GatewayError(f"Invalid webhook payload: {e}") from e

        return GatewayEvent(
            id=body["id"],
            type=body["type"],
            data=body.get("data", {}).get("object", {}),
        )
