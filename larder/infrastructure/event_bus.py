"""
Event Bus Implementation (Infrastructure Layer).

Dispatches events to subscribers registered per event class.
"""
import asyncio
import logging
from collections import defaultdict
from typing import Dict, List, Type

from larder.domain.event_bus import EventBus, EventHandler
from larder.domain.events.base import DomainEvent


logger = logging.getLogger(__name__)


class InMemoryEventBus(EventBus):
    """
    In-Memory Event Bus Implementation.

    Features:
    - Subscribers keyed by event class, called in registration order
    - Supports async and plain callables
    - Subscriber failures are logged and swallowed; publishing never fails

    Can be replaced with a message broker without touching services.
    """

    def __init__(self):
        """Initialize event bus with subscribers."""
        self._subscribers: Dict[Type[DomainEvent], List[EventHandler]] = defaultdict(list)

    async def publish(self, event: DomainEvent) -> None:
        """
        Publish a single domain event.

        Args:
            event: Domain event to publish
        """
        logger.info(f"Publishing event: {event.event_type} (aggregate: {event.aggregate_id})")
        await self._notify_subscribers(event)

    async def publish_all(self, events: List[DomainEvent]) -> None:
        """
        Publish multiple domain events in order.

        Args:
            events: List of domain events to publish
        """
        if not events:
            return

        logger.debug(f"Publishing {len(events)} events")
        for event in events:
            await self.publish(event)

    def subscribe(self, event_type: Type[DomainEvent], handler: EventHandler) -> None:
        """
        Subscribe to one event class.

        Args:
            event_type: Event class
            handler: Callback that receives events
        """
        self._subscribers[event_type].append(handler)
        logger.info(
            f"Registered event subscriber: {getattr(handler, '__name__', handler)} -> {event_type.__name__}"
        )

    def unsubscribe(self, event_type: Type[DomainEvent], handler: EventHandler) -> None:
        handlers = self._subscribers.get(event_type, [])
        if handler in handlers:
            handlers.remove(handler)

    def subscribers_for(self, event_type: Type[DomainEvent]) -> List[EventHandler]:
        return list(self._subscribers.get(event_type, []))

    async def _notify_subscribers(self, event: DomainEvent) -> None:
        """Notify all subscribers of the event's class."""
        subscribers = self._subscribers.get(type(event))
        if not subscribers:
            return

        logger.debug(f"Notifying {len(subscribers)} subscribers about {event.event_type}")

        for subscriber in list(subscribers):
            try:
                result = subscriber(event)
                if asyncio.iscoroutine(result):
                    await result
            except Exception as e:
                logger.error(
                    f"Subscriber {getattr(subscriber, '__name__', subscriber)} failed on "
                    f"{event.event_type}: {e}",
                    exc_info=True,
                )
