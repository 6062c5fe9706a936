from .http_notification_service import HttpNotificationService
from .mock_notification_service import MockNotificationService

__all__ = ["HttpNotificationService", "MockNotificationService"]
