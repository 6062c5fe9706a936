# larder/settings/app.py
from functools import lru_cache

from larder.settings.sections import (
    CheckoutSettings,
    DatabaseSettings,
    NotificationSettings,
    StripeSettings,
)


class AppSettings:
    """
    Central application settings aggregator.
    Settings are loaded lazily inside __init__
    to prevent eager evaluation at import time.
    """

    def __init__(self):
        self.database = DatabaseSettings()
        self.stripe = StripeSettings()
        self.checkout = CheckoutSettings()
        self.notifications = NotificationSettings()


@lru_cache()
def get_app_settings() -> AppSettings:
    """Return cached global settings for the entire app."""
    return AppSettings()
