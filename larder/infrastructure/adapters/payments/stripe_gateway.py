"""
Stripe Payment Gateway Implementation.

The stripe library is synchronous; every API call is off-loaded to a worker
thread. The secret key is passed per call instead of via the global
`stripe.api_key`.
"""
import asyncio
import json
import logging
from typing import Any, Dict

import stripe

from larder.application.interfaces import (
    GatewayEvent,
    GatewayIntent,
    GatewayRefund,
    IPaymentGateway,
    charge_id_of,
)
from larder.domain.exceptions import GatewayError, WebhookConfigurationError, WebhookSignatureError
from larder.settings.sections import StripeSettings


logger = logging.getLogger(__name__)


class StripePaymentGateway(IPaymentGateway):
    """Stripe implementation of the payment gateway."""

    def __init__(self, settings: StripeSettings):
        """
        Initialize Stripe gateway.

        Args:
            settings: Stripe settings with secret key and webhook secret
        """
        if not settings.secret_key:
            raise GatewayError("Stripe secret key is not configured")
        self.settings = settings
        self._api_key = settings.secret_key
        logger.info("StripePaymentGateway initialized")

    @staticmethod
    def _to_intent(intent: Any) -> GatewayIntent:
        return GatewayIntent(
            id=intent["id"],
            amount=int(intent["amount"]),
            currency=intent["currency"],
            status=intent["status"],
            client_secret=intent.get("client_secret"),
            latest_charge_id=charge_id_of(intent),
            metadata=dict(intent.get("metadata") or {}),
        )

    async def create_intent(
        self,
        amount: int,
        currency: str,
        metadata: Dict[str, str],
    ) -> GatewayIntent:
        try:
            intent = await asyncio.to_thread(
                stripe.PaymentIntent.create,
                amount=amount,
                currency=currency.lower(),
                metadata=metadata,
                automatic_payment_methods={"enabled": True},
                api_key=self._api_key,
            )
        except stripe.StripeError as e:
            logger.error(f"Stripe create_intent failed: {e}", exc_info=True)
            raise GatewayError(f"Failed to create payment intent: {e.user_message or e}") from e

        logger.info(f"Created Stripe payment intent {intent['id']} ({amount} {currency})")
        return self._to_intent(intent)

    async def retrieve_intent(self, intent_id: str) -> GatewayIntent:
        try:
            intent = await asyncio.to_thread(
                stripe.PaymentIntent.retrieve,
                intent_id,
                api_key=self._api_key,
            )
        except stripe.StripeError as e:
            logger.error(f"Stripe retrieve_intent failed: {e}", exc_info=True)
            raise GatewayError(f"Failed to retrieve payment intent: {e.user_message or e}") from e
        return self._to_intent(intent)

    async def create_refund(self, intent_id: str, amount: int) -> GatewayRefund:
        try:
            refund = await asyncio.to_thread(
                stripe.Refund.create,
                payment_intent=intent_id,
                amount=amount,
                api_key=self._api_key,
            )
        except stripe.StripeError as e:
            logger.error(f"Stripe create_refund failed: {e}", exc_info=True)
            raise GatewayError(f"Failed to create refund: {e.user_message or e}") from e

        logger.info(f"Created Stripe refund {refund['id']} ({refund['amount']}) for {intent_id}")
        return GatewayRefund(
            id=refund["id"],
            amount=int(refund["amount"]),
            status=refund["status"],
            payment_intent_id=intent_id,
        )

    def construct_webhook_event(self, payload: bytes, signature: str) -> GatewayEvent:
        if not self.settings.webhook_secret:
            raise WebhookConfigurationError("Stripe webhook secret is not configured")
        if not signature:
            raise WebhookSignatureError("Missing Stripe-Signature header")

        # Verify signature BEFORE trusting the payload
        try:
            stripe.Webhook.construct_event(payload, signature, self.settings.webhook_secret)
        except stripe.SignatureVerificationError as e:
            logger.warning(f"Webhook signature verification failed: {e}")
            raise WebhookSignatureError("Invalid webhook signature") from e
        except ValueError as e:
            raise GatewayError(f"Invalid webhook payload: {e}") from e

        body = json.loads(payload)
        return GatewayEvent(
            id=body["id"],
            type=body["type"],
            data=body.get("data", {}).get("object", {}),
        )
