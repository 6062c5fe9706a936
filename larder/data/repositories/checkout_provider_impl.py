"""SQLAlchemy-backed cart and address providers bound to the UoW session."""

from typing import Dict, Iterable, Optional

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from larder.application.interfaces import IAddressProvider, ICartProvider
from larder.domain.entities.cart import Address, Cart

from ..mappers import CheckoutMapper
from ..models.checkout_model import AddressModel, CartItemModel, CartModel, ProductVariantModel


class SqlAlchemyCartProvider(ICartProvider):
    """Reads the storefront cart tables within the current transaction."""

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def get_cart(self, user_id: str) -> Cart:
        result = await self._session.execute(
            select(CartModel).where(CartModel.user_id == user_id)
        )
        model = result.scalar_one_or_none()
        if model is None:
            return Cart(user_id=user_id)
        return CheckoutMapper.cart_to_domain(model)

    async def clear_cart(self, user_id: str) -> None:
        cart_ids = select(CartModel.id).where(CartModel.user_id == user_id)
        await self._session.execute(
            delete(CartItemModel)
            .where(CartItemModel.cart_id.in_(cart_ids))
            .execution_options(synchronize_session=False)
        )

    async def variant_skus(self, variant_ids: Iterable[str]) -> Dict[str, str]:
        ids = [variant_id for variant_id in variant_ids if variant_id]
        if not ids:
            return {}
        result = await self._session.execute(
            select(ProductVariantModel.id, ProductVariantModel.sku).where(
                ProductVariantModel.id.in_(ids)
            )
        )
        return {variant_id: sku for variant_id, sku in result.all()}


class SqlAlchemyAddressProvider(IAddressProvider):

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def find_for_user(self, address_id: str, user_id: str) -> Optional[Address]:
        result = await self._session.execute(
            select(AddressModel).where(
                AddressModel.id == address_id,
                AddressModel.user_id == user_id,
            )
        )
        model = result.scalar_one_or_none()
        return CheckoutMapper.address_to_domain(model) if model else None
