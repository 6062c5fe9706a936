"""SQLAlchemy implementation of OrderRepository."""

from typing import List, Optional, Tuple

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from larder.domain.entities.order import Order
from larder.domain.enums import OrderStatus
from larder.domain.repositories.order_repository import OrderRepository

from ..mappers import OrderMapper
from ..models.order_model import OrderModel


class SqlAlchemyOrderRepository(OrderRepository):
    """Concrete implementation of OrderRepository using SQLAlchemy."""

    def __init__(self, session: AsyncSession) -> None:
        """Initialize repository with SQLAlchemy session.

        Args:
            session: SQLAlchemy async session
        """
        self._session = session

    async def add(self, order: Order) -> None:
        self._session.add(OrderMapper.to_persistence(order))
        await self._session.flush()  # Propagate to DB without committing

    async def update(self, order: Order) -> None:
        existing = await self._session.get(OrderModel, order.id)
        if existing is None:
            raise LookupError(f"Order row missing for update: {order.id}")
        OrderMapper.update_persistence(order, existing)
        await self._session.flush()

    async def find_by_id(self, order_id: str, for_update: bool = False) -> Optional[Order]:
        """Retrieve order by primary key.

        Args:
            order_id: Order ID
            for_update: Lock the row (no-op on SQLite)

        Returns:
            Order if found, None otherwise
        """
        stmt = select(OrderModel).where(OrderModel.id == order_id)
        if for_update:
            stmt = stmt.with_for_update()

        result = await self._session.execute(stmt)
        model = result.scalar_one_or_none()

        if not model:
            return None

        return OrderMapper.to_domain(model)

    async def find_for_user(
        self,
        user_id: str,
        page: int = 1,
        page_size: int = 10,
        status: Optional[OrderStatus] = None,
    ) -> Tuple[List[Order], int]:
        conditions = [OrderModel.user_id == user_id]
        if status is not None:
            conditions.append(OrderModel.status == OrderStatus(status).value)

        total = await self._session.scalar(
            select(func.count(OrderModel.id)).where(*conditions)
        )

        result = await self._session.execute(
            select(OrderModel)
            .where(*conditions)
            .order_by(OrderModel.created_at.desc(), OrderModel.order_number.desc())
            .offset((page - 1) * page_size)
            .limit(page_size)
        )
        models = result.scalars().all()

        return [OrderMapper.to_domain(model) for model in models], int(total or 0)

    async def order_number_exists(self, order_number: str) -> bool:
        """Check if an order number is already taken (duplicate prevention).

        Args:
            order_number: Candidate ORD-YYYYMMDD-NNNNN value

        Returns:
            True if taken, False otherwise
        """
        result = await self._session.execute(
            select(OrderModel.id).where(OrderModel.order_number == order_number)
        )
        return result.scalar_one_or_none() is not None
