"""
HTTP Notification Service Implementation.

Posts order notifications to the external dispatcher that owns push and email
delivery.
"""
import logging
from typing import Any, Dict

import aiohttp

from larder.application.interfaces import INotificationService
from larder.domain.entities.order import Order
from larder.settings.sections import NotificationSettings


logger = logging.getLogger(__name__)


class HttpNotificationService(INotificationService):
    """
    Dispatcher-backed implementation of notification service.

    Failures are logged, never raised.
    """

    def __init__(self, settings: NotificationSettings):
        """
        Initialize HTTP notification service.

        Args:
            settings: Notification settings with dispatcher URL
        """
        self.settings = settings
        self.dispatcher_url = settings.dispatcher_url
        self.timeout = aiohttp.ClientTimeout(total=settings.timeout_seconds)
        logger.info("HttpNotificationService initialized")

    async def send_order_confirmation(self, order: Order) -> None:
        await self._send(
            "order_confirmation",
            {
                **self._order_payload(order),
                "title": "Order Placed",
                "body": f"Your order {order.order_number.value} has been placed successfully",
            },
        )

    async def send_order_status_update(self, order: Order, previous_status: str) -> None:
        payload = {
            **self._order_payload(order),
            "previous_status": previous_status,
            "title": "Order Update",
            "body": f"Your order {order.order_number.value} is now {order.status.value}",
        }
        if order.delivered_at:
            payload["delivered_at"] = order.delivered_at.isoformat()
        await self._send("order_status_update", payload)

    async def send_order_cancelled(self, order: Order) -> None:
        await self._send(
            "order_cancelled",
            {
                **self._order_payload(order),
                "reason": order.cancellation_reason,
                "title": "Order Cancelled",
                "body": f"Your order {order.order_number.value} has been cancelled",
            },
        )

    @staticmethod
    def _order_payload(order: Order) -> Dict[str, Any]:
        return {
            "order_id": order.id,
            "order_number": order.order_number.value,
            "user_id": order.user_id,
            "status": order.status.value,
            "total_amount": str(order.totals.total),
            "currency": order.currency,
        }

    async def _send(self, kind: str, payload: Dict[str, Any]) -> None:
        """
        Send one notification to the dispatcher.

        Args:
            kind: Notification type
            payload: JSON body
        """
        if not self.settings.enabled or not self.dispatcher_url:
            logger.warning(f"Notification dispatcher not configured, skipping {kind}")
            return

        try:
            async with aiohttp.ClientSession(timeout=self.timeout) as session:
                async with session.post(
                    self.dispatcher_url, json={"type": kind, "data": payload}
                ) as response:
                    if response.status >= 300:
                        error_text = await response.text()
                        logger.error(
                            f"Notification dispatcher error: {response.status} - {error_text}"
                        )
                    else:
                        logger.info(f"Notification sent: {kind} ({payload['order_number']})")
        except Exception as e:
            logger.error(f"Failed to send {kind} notification: {e}", exc_info=True)
