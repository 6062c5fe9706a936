from decimal import Decimal

from pydantic import Field
from pydantic_settings import SettingsConfigDict

from larder.domain.rules import PricingPolicy
from larder.settings.base import LarderBaseSettings


class CheckoutSettings(LarderBaseSettings):
    """Flat pricing parameters applied to every order."""

    tax_rate: Decimal = Field(default=Decimal("0.05"), ge=0)
    free_delivery_threshold: Decimal = Field(default=Decimal("500"), ge=0)
    delivery_charge: Decimal = Field(default=Decimal("50"), ge=0)
    estimated_delivery_days: int = Field(default=5, ge=0)
    order_number_attempts: int = Field(default=5, ge=1)
    currency: str = Field(default="INR", min_length=3, max_length=3)

    model_config = SettingsConfigDict(env_prefix="CHECKOUT_")

    def pricing_policy(self) -> PricingPolicy:
        return PricingPolicy(
            tax_rate=self.tax_rate,
            free_delivery_threshold=self.free_delivery_threshold,
            delivery_charge=self.delivery_charge,
        )
