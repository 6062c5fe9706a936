"""Payment gateway port and the plain data it exchanges with the core."""
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Dict, Mapping, Optional


@dataclass(frozen=True)
class GatewayIntent:
    """Gateway-side payment intent. Amounts are integer minor units."""
    id: str
    amount: int
    currency: str
    status: str
    client_secret: Optional[str] = None
    latest_charge_id: Optional[str] = None
    metadata: Dict[str, str] = field(default_factory=dict)


@dataclass(frozen=True)
class GatewayRefund:
    id: str
    amount: int
    status: str
    payment_intent_id: Optional[str] = None


@dataclass(frozen=True)
class GatewayEvent:
    """
    Verified webhook event.

    `data` is the event's `data.object` payload as a plain dict.
    """
    id: str
    type: str
    data: Dict[str, Any] = field(default_factory=dict)


def charge_id_of(intent: Mapping[str, Any]) -> Optional[str]:
    """Charge id of a payment intent payload, for current and legacy API shapes."""
    latest = intent.get("latest_charge")
    if isinstance(latest, str):
        return latest
    if latest:
        return latest.get("id")

    charges = (intent.get("charges") or {}).get("data") or []
    return charges[0].get("id") if charges else None


class IPaymentGateway(ABC):
    """
    Interface for the external payment gateway.

    Implementations raise GatewayError on any transport or API failure and
    never retry.
    """

    @abstractmethod
    async def create_intent(
        self,
        amount: int,
        currency: str,
        metadata: Dict[str, str],
    ) -> GatewayIntent:
        """
        Create a payment intent.

        Args:
            amount: Amount in minor units
            currency: Lowercase ISO currency code
            metadata: order_id, user_id, order_number

        Returns:
            Created intent including its client secret
        """
        pass

    @abstractmethod
    async def retrieve_intent(self, intent_id: str) -> GatewayIntent:
        pass

    @abstractmethod
    async def create_refund(self, intent_id: str, amount: int) -> GatewayRefund:
        """
        Refund part or all of a captured intent.

        Args:
            intent_id: Gateway payment intent id
            amount: Amount to refund in minor units

        Returns:
            Refund as reported by the gateway (its amount is authoritative)
        """
        pass

    @abstractmethod
    def construct_webhook_event(self, payload: bytes, signature: str) -> GatewayEvent:
        """
        Verify a webhook signature and parse the event.

        Raises:
            WebhookConfigurationError: No webhook secret configured
            WebhookSignatureError: Signature missing or invalid
        """
        pass
