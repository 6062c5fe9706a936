"""Shared fixtures: in-memory database, fakes and wired services."""

import uuid
from datetime import timedelta
from decimal import Decimal
from typing import Any, Dict, List, Optional

import pytest
import pytest_asyncio
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import create_async_engine
from sqlalchemy.pool import StaticPool

from larder.application.handlers import register_order_handlers
from larder.application.services import CouponService, OrderService, PaymentService
from larder.data.models import (
    AddressModel,
    CartItemModel,
    CartModel,
    CouponModel,
    ProductVariantModel,
)
from larder.domain.clock import utcnow
from larder.infrastructure.adapters.notifications import MockNotificationService
from larder.infrastructure.adapters.payments import MockPaymentGateway
from larder.infrastructure.database import Database
from larder.infrastructure.event_bus import InMemoryEventBus


# Use in-memory SQLite for testing
TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"

USER_ID = "user-1"
OTHER_USER_ID = "user-2"


@pytest_asyncio.fixture
async def database():
    """Fresh in-memory database with all tables created."""
    engine = create_async_engine(
        TEST_DATABASE_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
        echo=False,
    )
    db = Database(engine=engine)
    await db.init()

    yield db

    await db.close()


@pytest.fixture
def session_factory(database):
    return database.session_factory


@pytest.fixture
def gateway() -> MockPaymentGateway:
    return MockPaymentGateway(webhook_secret="whsec_test")


@pytest.fixture
def notifier() -> MockNotificationService:
    return MockNotificationService()


@pytest.fixture
def event_bus() -> InMemoryEventBus:
    return InMemoryEventBus()


@pytest.fixture
def coupon_service(session_factory) -> CouponService:
    return CouponService(session_factory)


@pytest.fixture
def order_service(session_factory, coupon_service, event_bus, notifier) -> OrderService:
    register_order_handlers(event_bus, session_factory, notifier, coupon_service)
    return OrderService(session_factory, coupon_service=coupon_service, event_bus=event_bus)


@pytest.fixture
def payment_service(session_factory, gateway) -> PaymentService:
    return PaymentService(session_factory, gateway=gateway)


# =============================================================================
# SEEDING
# =============================================================================

class Seeder:
    """Writes storefront-owned rows (addresses, carts, coupons) straight to the database."""

    def __init__(self, session_factory):
        self._session_factory = session_factory

    async def address(self, user_id: str = USER_ID) -> str:
        address_id = str(uuid.uuid4())
        async with self._session_factory() as session:
            session.add(
                AddressModel(
                    id=address_id,
                    user_id=user_id,
                    full_name="Asha Rao",
                    phone_number="+919800000000",
                    address_line1="12 Market Road",
                    city="Pune",
                    state="MH",
                    postal_code="411001",
                    country="India",
                )
            )
            await session.commit()
        return address_id

    async def cart(self, lines: List[Dict[str, Any]], user_id: str = USER_ID) -> str:
        """Each line needs unit_price and quantity; sku creates a product variant."""
        async with self._session_factory() as session:
            cart = await session.scalar(select(CartModel).where(CartModel.user_id == user_id))
            if cart is None:
                cart = CartModel(id=str(uuid.uuid4()), user_id=user_id)
                session.add(cart)
            for index, line in enumerate(lines):
                product_id = line.get("product_id", f"prod-{index}")
                variant_id = None
                if line.get("sku"):
                    variant_id = str(uuid.uuid4())
                    session.add(
                        ProductVariantModel(
                            id=variant_id,
                            product_id=product_id,
                            sku=line["sku"],
                            name=line.get("variant_name"),
                        )
                    )
                cart.items.append(
                    CartItemModel(
                        product_id=product_id,
                        category_id=line.get("category_id"),
                        product_name=line.get("product_name", f"Product {index}"),
                        quantity=line["quantity"],
                        unit_price=Decimal(line["unit_price"]),
                        variant_id=variant_id,
                        variant_name=line.get("variant_name"),
                    )
                )
            await session.commit()
            return cart.id

    async def checkout(
        self,
        lines: Optional[List[Dict[str, Any]]] = None,
        user_id: str = USER_ID,
    ) -> str:
        """Address + cart; returns the address id."""
        address_id = await self.address(user_id)
        await self.cart(lines or [{"unit_price": "200.00", "quantity": 2}], user_id=user_id)
        return address_id

    async def coupon(self, code: str = "SAVE10", **overrides) -> str:
        now = utcnow()
        values = {
            "id": str(uuid.uuid4()),
            "code": code,
            "name": f"{code} promotion",
            "discount_type": "PERCENTAGE",
            "discount_value": Decimal("10"),
            "valid_from": now - timedelta(days=1),
            "valid_until": now + timedelta(days=30),
            "is_active": True,
            "status": "ACTIVE",
            "usage_count": 0,
            "applicable_categories": [],
            "applicable_products": [],
            "restricted_user_ids": [],
        }
        values.update(overrides)
        async with self._session_factory() as session:
            session.add(CouponModel(**values))
            await session.commit()
        return values["id"]

    async def cart_item_count(self, user_id: str = USER_ID) -> int:
        async with self._session_factory() as session:
            result = await session.execute(
                select(func.count(CartItemModel.id))
                .join(CartModel, CartModel.id == CartItemModel.cart_id)
                .where(CartModel.user_id == user_id)
            )
            return result.scalar_one()

    async def count(self, model) -> int:
        async with self._session_factory() as session:
            result = await session.execute(select(func.count()).select_from(model))
            return result.scalar_one()


@pytest.fixture
def seed(session_factory) -> Seeder:
    return Seeder(session_factory)
