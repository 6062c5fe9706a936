"""Repository interface for Payment records and the webhook event ledger."""

from abc import ABC, abstractmethod
from typing import Optional

from ..entities.payment import Payment


class PaymentRepository(ABC):
    """Abstract repository for Payment persistence."""

    @abstractmethod
    async def add(self, payment: Payment) -> None:
        pass

    @abstractmethod
    async def update(self, payment: Payment) -> None:
        pass

    @abstractmethod
    async def find_by_id(self, payment_id: str, for_update: bool = False) -> Optional[Payment]:
        pass

    @abstractmethod
    async def find_by_order_id(self, order_id: str, for_update: bool = False) -> Optional[Payment]:
        pass

    @abstractmethod
    async def find_by_intent_id(self, intent_id: str, for_update: bool = False) -> Optional[Payment]:
        pass

    @abstractmethod
    async def find_by_transaction_id(
        self, transaction_id: str, for_update: bool = False
    ) -> Optional[Payment]:
        pass

    @abstractmethod
    async def mark_event_processed(
        self, event_id: str, event_type: str, intent_id: Optional[str]
    ) -> bool:
        """Record a gateway event id in the processed-events ledger.

        Returns:
            False if the event id was already recorded (re-delivery)
        """
        pass
