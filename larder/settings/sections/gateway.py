from typing import Optional

from pydantic import Field
from pydantic_settings import SettingsConfigDict

from larder.settings.base import LarderBaseSettings


class StripeSettings(LarderBaseSettings):
    """
    Payment gateway settings.

    With `enabled=False` the app runs against the in-process mock gateway.
    """

    secret_key: Optional[str] = None
    webhook_secret: Optional[str] = None
    currency: str = Field(default="inr", min_length=3, max_length=3)
    enabled: bool = False

    model_config = SettingsConfigDict(env_prefix="STRIPE_")
