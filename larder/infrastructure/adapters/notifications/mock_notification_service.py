"""
Mock Notification Service Implementation.

This records notifications in memory for tests and local development.
"""
import logging
from typing import Any, Dict, List

from larder.application.interfaces import INotificationService
from larder.domain.entities.order import Order


logger = logging.getLogger(__name__)


class MockNotificationService(INotificationService):
    """
    Mock implementation of notification service.

    Logs notifications instead of actually sending them.
    """

    def __init__(self):
        """Initialize mock notification service."""
        self.notifications_sent: List[Dict[str, Any]] = []
        logger.info("MockNotificationService initialized (console logging)")

    def _record(self, kind: str, order: Order, **extra: Any) -> None:
        notification = {
            "type": kind,
            "order_id": order.id,
            "order_number": order.order_number.value,
            "user_id": order.user_id,
            "status": order.status.value,
            **extra,
        }
        self.notifications_sent.append(notification)

    async def send_order_confirmation(self, order: Order) -> None:
        self._record("order_confirmation", order, total=str(order.totals.total))
        logger.info(
            f"🔔 ORDER CONFIRMATION:\n"
            f"   Order: {order.order_number.value}\n"
            f"   User: {order.user_id}\n"
            f"   Total: {order.total}"
        )

    async def send_order_status_update(self, order: Order, previous_status: str) -> None:
        self._record("order_status_update", order, previous_status=previous_status)
        logger.info(
            f"🔔 ORDER STATUS UPDATE:\n"
            f"   Order: {order.order_number.value}\n"
            f"   {previous_status} → {order.status.value}"
        )

    async def send_order_cancelled(self, order: Order) -> None:
        self._record("order_cancelled", order, reason=order.cancellation_reason)
        logger.info(
            f"🔔 ORDER CANCELLED:\n"
            f"   Order: {order.order_number.value}\n"
            f"   Reason: {order.cancellation_reason}"
        )

    def get_notifications(self) -> list:
        """Get all sent notifications (for testing)."""
        return self.notifications_sent

    def clear(self) -> None:
        """Clear notifications (for testing)."""
        self.notifications_sent.clear()
