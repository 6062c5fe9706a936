from .checkout import CheckoutSettings
from .database import DatabaseSettings
from .notifications import NotificationSettings
from .gateway import StripeSettings

__all__ = ["CheckoutSettings", "DatabaseSettings", "NotificationSettings", "StripeSettings"]
