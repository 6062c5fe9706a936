"""Unit of Work pattern for atomic transactions."""

from typing import Optional

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from larder.domain.value_objects import ExecutionID

from .repositories import (
    SqlAlchemyAddressProvider,
    SqlAlchemyCartProvider,
    SqlAlchemyCouponRepository,
    SqlAlchemyOrderRepository,
    SqlAlchemyPaymentRepository,
)


class UnitOfWork:
    """
    Unit of Work pattern for atomic transactions.

    Responsibilities:
    1. Manage SQLAlchemy session lifecycle
    2. Propagate ExecutionID across all operations
    3. Atomic commit/rollback of all repository operations
    4. Lazy initialization of repositories

    Nothing is committed unless commit() is called inside the block; leaving
    the block on an exception rolls back.
    """

    def __init__(self, session_factory: async_sessionmaker) -> None:
        """Initialize Unit of Work.

        Args:
            session_factory: SQLAlchemy async session factory
        """
        self._session_factory = session_factory
        self._session: Optional[AsyncSession] = None
        self._execution_id: Optional[ExecutionID] = None

        # Lazy-loaded repositories
        self._orders: Optional[SqlAlchemyOrderRepository] = None
        self._payments: Optional[SqlAlchemyPaymentRepository] = None
        self._coupons: Optional[SqlAlchemyCouponRepository] = None
        self._carts: Optional[SqlAlchemyCartProvider] = None
        self._addresses: Optional[SqlAlchemyAddressProvider] = None

    async def __aenter__(self) -> "UnitOfWork":
        """Start transaction scope."""
        self._session = self._session_factory()
        self._execution_id = ExecutionID.generate()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        """Rollback on exception, always close the session."""
        try:
            if exc_type is not None:
                await self._session.rollback()
        finally:
            await self._session.close()
            self._session = None
            self._orders = self._payments = self._coupons = None
            self._carts = self._addresses = None

    def _require_session(self) -> AsyncSession:
        if self._session is None:
            raise RuntimeError("UnitOfWork not initialized. Use async context manager.")
        return self._session

    @property
    def execution_id(self) -> ExecutionID:
        """Get current execution ID for tracing.

        Returns:
            ExecutionID value object
        """
        if self._execution_id is None:
            raise RuntimeError("UnitOfWork not initialized. Use async context manager.")
        return self._execution_id

    @property
    def orders(self) -> SqlAlchemyOrderRepository:
        session = self._require_session()
        if self._orders is None:
            self._orders = SqlAlchemyOrderRepository(session)
        return self._orders

    @property
    def payments(self) -> SqlAlchemyPaymentRepository:
        session = self._require_session()
        if self._payments is None:
            self._payments = SqlAlchemyPaymentRepository(session)
        return self._payments

    @property
    def coupons(self) -> SqlAlchemyCouponRepository:
        session = self._require_session()
        if self._coupons is None:
            self._coupons = SqlAlchemyCouponRepository(session)
        return self._coupons

    @property
    def carts(self) -> SqlAlchemyCartProvider:
        session = self._require_session()
        if self._carts is None:
            self._carts = SqlAlchemyCartProvider(session)
        return self._carts

    @property
    def addresses(self) -> SqlAlchemyAddressProvider:
        session = self._require_session()
        if self._addresses is None:
            self._addresses = SqlAlchemyAddressProvider(session)
        return self._addresses

    async def commit(self) -> None:
        """Commit all pending changes."""
        await self._require_session().commit()

    async def rollback(self) -> None:
        """Rollback all pending changes."""
        await self._require_session().rollback()


def create_uow(session_factory: async_sessionmaker) -> UnitOfWork:
    """Create a new Unit of Work instance.

    Args:
        session_factory: SQLAlchemy async session factory

    Returns:
        UnitOfWork instance
    """
    return UnitOfWork(session_factory)
