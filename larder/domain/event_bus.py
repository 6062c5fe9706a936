"""
Event Bus Interface (Domain Layer).

Pure interface definition - no implementation details.
"""
from abc import ABC, abstractmethod
from typing import Awaitable, Callable, List, Type

from .events.base import DomainEvent


EventHandler = Callable[[DomainEvent], Awaitable[None]]


class EventBus(ABC):
    """
    Event Bus Interface.

    Boundary for best-effort side effects: services publish events after
    their transaction commits, subscribers act on them. A subscriber failure
    never propagates back to the publisher.
    """

    @abstractmethod
    async def publish(self, event: DomainEvent) -> None:
        """
        Publish a single domain event.

        Args:
            event: Domain event to publish
        """
        pass

    @abstractmethod
    async def publish_all(self, events: List[DomainEvent]) -> None:
        """
        Publish multiple domain events in order.

        Args:
            events: List of domain events to publish
        """
        pass

    @abstractmethod
    def subscribe(self, event_type: Type[DomainEvent], handler: EventHandler) -> None:
        """
        Subscribe a handler to one event class.

        Args:
            event_type: Event class to listen for
            handler: Async handler function
        """
        pass
