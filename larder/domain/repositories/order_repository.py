"""Repository interface for the Order aggregate."""

from abc import ABC, abstractmethod
from typing import List, Optional, Tuple

from ..entities.order import Order
from ..enums import OrderStatus


class OrderRepository(ABC):
    """Abstract repository for Order aggregate persistence."""

    @abstractmethod
    async def add(self, order: Order) -> None:
        """Insert a new order together with its item snapshots.

        Args:
            order: Freshly placed Order aggregate
        """
        pass

    @abstractmethod
    async def update(self, order: Order) -> None:
        """Persist status, payment status and timestamp changes.

        Args:
            order: Order aggregate previously loaded from this repository
        """
        pass

    @abstractmethod
    async def find_by_id(self, order_id: str, for_update: bool = False) -> Optional[Order]:
        """Retrieve order by primary key.

        Args:
            order_id: Order ID
            for_update: Lock the row for the rest of the transaction

        Returns:
            Order if found, None otherwise
        """
        pass

    @abstractmethod
    async def find_for_user(
        self,
        user_id: str,
        page: int = 1,
        page_size: int = 10,
        status: Optional[OrderStatus] = None,
    ) -> Tuple[List[Order], int]:
        """List a user's orders, newest first.

        Returns:
            (orders on the requested page, total matching count)
        """
        pass

    @abstractmethod
    async def order_number_exists(self, order_number: str) -> bool:
        """Check whether an order number is already taken."""
        pass
