from typing import Optional

from pydantic_settings import SettingsConfigDict

from larder.settings.base import LarderBaseSettings


class NotificationSettings(LarderBaseSettings):
    """
    Notification dispatcher settings.

    When disabled or without a dispatcher URL, notifications are only logged.
    """

    enabled: bool = False
    dispatcher_url: Optional[str] = None
    timeout_seconds: float = 5.0

    model_config = SettingsConfigDict(env_prefix="NOTIFY_")
