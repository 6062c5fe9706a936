"""SQLAlchemy implementation of PaymentRepository."""

from typing import Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from larder.domain.entities.payment import Payment
from larder.domain.repositories.payment_repository import PaymentRepository

from ..mappers import PaymentMapper
from ..models.payment_model import PaymentModel, ProcessedWebhookEventModel


class SqlAlchemyPaymentRepository(PaymentRepository):
    """Concrete implementation of PaymentRepository using SQLAlchemy."""

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def add(self, payment: Payment) -> None:
        self._session.add(PaymentMapper.to_persistence(payment))
        await self._session.flush()

    async def update(self, payment: Payment) -> None:
        existing = await self._session.get(PaymentModel, payment.id)
        if existing is None:
            raise LookupError(f"Payment row missing for update: {payment.id}")
        PaymentMapper.update_persistence(payment, existing)
        await self._session.flush()

    async def _find_one(self, condition, for_update: bool) -> Optional[Payment]:
        stmt = select(PaymentModel).where(condition)
        if for_update:
            stmt = stmt.with_for_update()
        result = await self._session.execute(stmt)
        model = result.scalars().first()
        return PaymentMapper.to_domain(model) if model else None

    async def find_by_id(self, payment_id: str, for_update: bool = False) -> Optional[Payment]:
        return await self._find_one(PaymentModel.id == payment_id, for_update)

    async def find_by_order_id(self, order_id: str, for_update: bool = False) -> Optional[Payment]:
        return await self._find_one(PaymentModel.order_id == order_id, for_update)

    async def find_by_intent_id(self, intent_id: str, for_update: bool = False) -> Optional[Payment]:
        return await self._find_one(PaymentModel.gateway_intent_id == intent_id, for_update)

    async def find_by_transaction_id(
        self, transaction_id: str, for_update: bool = False
    ) -> Optional[Payment]:
        return await self._find_one(PaymentModel.transaction_id == transaction_id, for_update)

    async def mark_event_processed(
        self, event_id: str, event_type: str, intent_id: Optional[str]
    ) -> bool:
        """Record a gateway event id; False when it was already recorded.

        A concurrent duplicate that slips past the lookup fails on the primary
        key at flush, rolling back the whole delivery.
        """
        existing = await self._session.get(ProcessedWebhookEventModel, event_id)
        if existing is not None:
            return False

        self._session.add(
            ProcessedWebhookEventModel(
                event_id=event_id,
                event_type=event_type,
                gateway_intent_id=intent_id,
            )
        )
        await self._session.flush()
        return True
