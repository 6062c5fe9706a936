"""Application layer interfaces."""
from abc import ABC, abstractmethod
from typing import Dict, Iterable, Optional

from larder.domain.entities.cart import Address, Cart
from larder.domain.entities.order import Order

from .payment_gateway import GatewayEvent, GatewayIntent, GatewayRefund, IPaymentGateway, charge_id_of


class ICartProvider(ABC):
    """
    Interface for reading and clearing a user's cart.

    Implementations are bound to the unit of work so that clearing the cart
    commits together with the order insert.
    """

    @abstractmethod
    async def get_cart(self, user_id: str) -> Cart:
        """
        Get the user's cart (an empty Cart when the user has none).

        Args:
            user_id: Cart owner
        """
        pass

    @abstractmethod
    async def clear_cart(self, user_id: str) -> None:
        pass

    @abstractmethod
    async def variant_skus(self, variant_ids: Iterable[str]) -> Dict[str, str]:
        """
        Resolve variant ids to SKUs for the order item snapshot.

        Returns:
            Mapping of variant id to SKU; unknown ids are omitted
        """
        pass


class IAddressProvider(ABC):

    @abstractmethod
    async def find_for_user(self, address_id: str, user_id: str) -> Optional[Address]:
        """
        Get an address only if it belongs to the user.

        Returns:
            Address if it exists and is owned by user_id, None otherwise
        """
        pass


class INotificationService(ABC):
    """
    Interface for customer notifications (push + email).

    Delivery is owned by an external dispatcher. Callers treat every method
    as best-effort.
    """

    @abstractmethod
    async def send_order_confirmation(self, order: Order) -> None:
        """
        Notify the customer that their order was placed.

        Args:
            order: Freshly created order
        """
        pass

    @abstractmethod
    async def send_order_status_update(
        self,
        order: Order,
        previous_status: str,
    ) -> None:
        """
        Notify the customer of a status change.

        Args:
            order: Order after the transition
            previous_status: Status before the transition
        """
        pass

    @abstractmethod
    async def send_order_cancelled(self, order: Order) -> None:
        pass


__all__ = [
    "GatewayEvent",
    "GatewayIntent",
    "GatewayRefund",
    "IAddressProvider",
    "ICartProvider",
    "INotificationService",
    "IPaymentGateway",
    "charge_id_of",
]
