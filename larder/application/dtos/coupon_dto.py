"""Application DTOs for Coupon operations."""

from datetime import datetime, timezone
from decimal import Decimal
from typing import List, Optional

from pydantic import BaseModel, Field, field_validator, model_validator

from larder.domain.enums import CouponStatus, DiscountType

from .order_dto import PaginationDTO


CODE_PATTERN = r"^[A-Za-z0-9_-]+$"


def _naive_utc(value: Optional[datetime]) -> Optional[datetime]:
    """Timestamps are stored as naive UTC."""
    if value is not None and value.tzinfo is not None:
        return value.astimezone(timezone.utc).replace(tzinfo=None)
    return value


class ValidateCouponRequest(BaseModel):
    """Request DTO for checking a coupon against a basket."""

    code: str = Field(..., min_length=1, max_length=64, description="Coupon code")
    order_amount: Decimal = Field(..., ge=0, description="Basket amount")
    category_ids: List[str] = Field(default_factory=list)
    product_ids: List[str] = Field(default_factory=list)

    model_config = {"frozen": True}


class CouponEvaluationDTO(BaseModel):
    """Response DTO for a coupon evaluation."""

    is_valid: bool
    discount_amount: Decimal
    final_amount: Decimal
    coupon_id: Optional[str] = None
    is_free_shipping: bool = False
    message: Optional[str] = None

    model_config = {"frozen": True}


class _CouponRules(BaseModel):
    """Cross-field checks shared by create and update requests."""

    @field_validator("valid_from", "valid_until", check_fields=False)
    @classmethod
    def to_naive_utc(cls, value: Optional[datetime]) -> Optional[datetime]:
        return _naive_utc(value)

    @model_validator(mode="after")
    def check_rules(self):
        valid_from = getattr(self, "valid_from", None)
        valid_until = getattr(self, "valid_until", None)
        if valid_from and valid_until and valid_until <= valid_from:
            raise ValueError("valid_until must be after valid_from")

        if (
            getattr(self, "discount_type", None) is DiscountType.PERCENTAGE
            and getattr(self, "discount_value", None) is not None
            and self.discount_value > 100
        ):
            raise ValueError("Percentage discount cannot exceed 100")
        return self


class CreateCouponRequest(_CouponRules):
    """Request DTO for creating a coupon."""

    code: str = Field(..., min_length=3, max_length=64, pattern=CODE_PATTERN)
    name: str = Field(..., min_length=1, max_length=255)
    description: Optional[str] = None
    discount_type: DiscountType
    discount_value: Decimal = Field(..., ge=0)
    min_order_amount: Optional[Decimal] = Field(None, ge=0)
    max_discount_amount: Optional[Decimal] = Field(None, gt=0)
    usage_limit: Optional[int] = Field(None, ge=1)
    per_user_limit: Optional[int] = Field(None, ge=1)
    valid_from: datetime
    valid_until: datetime
    is_active: bool = True
    applicable_categories: List[str] = Field(default_factory=list)
    applicable_products: List[str] = Field(default_factory=list)
    restricted_user_ids: List[str] = Field(default_factory=list)

    model_config = {"frozen": True}

    @field_validator("code")
    @classmethod
    def upper_code(cls, value: str) -> str:
        return value.upper()


class UpdateCouponRequest(_CouponRules):
    """Request DTO for a partial coupon update; unset fields are left alone."""

    code: Optional[str] = Field(None, min_length=3, max_length=64, pattern=CODE_PATTERN)
    name: Optional[str] = Field(None, min_length=1, max_length=255)
    description: Optional[str] = None
    discount_type: Optional[DiscountType] = None
    discount_value: Optional[Decimal] = Field(None, ge=0)
    min_order_amount: Optional[Decimal] = Field(None, ge=0)
    max_discount_amount: Optional[Decimal] = Field(None, gt=0)
    usage_limit: Optional[int] = Field(None, ge=1)
    per_user_limit: Optional[int] = Field(None, ge=1)
    valid_from: Optional[datetime] = None
    valid_until: Optional[datetime] = None
    is_active: Optional[bool] = None
    status: Optional[CouponStatus] = None
    applicable_categories: Optional[List[str]] = None
    applicable_products: Optional[List[str]] = None
    restricted_user_ids: Optional[List[str]] = None

    model_config = {"frozen": True}

    @field_validator("code")
    @classmethod
    def upper_code(cls, value: Optional[str]) -> Optional[str]:
        return value.upper() if value else value


class CouponDTO(BaseModel):
    """Response DTO for coupon details."""

    id: str
    code: str
    name: str
    description: Optional[str] = None
    discount_type: DiscountType
    discount_value: Decimal
    min_order_amount: Optional[Decimal] = None
    max_discount_amount: Optional[Decimal] = None
    usage_limit: Optional[int] = None
    usage_count: int = 0
    per_user_limit: Optional[int] = None
    valid_from: datetime
    valid_until: datetime
    is_active: bool
    status: CouponStatus
    applicable_categories: List[str] = Field(default_factory=list)
    applicable_products: List[str] = Field(default_factory=list)
    restricted_user_ids: List[str] = Field(default_factory=list)
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    model_config = {"frozen": True}


class CouponListDTO(BaseModel):
    coupons: List[CouponDTO] = Field(default_factory=list)
    pagination: PaginationDTO

    model_config = {"frozen": True}


class CouponUsageStatsDTO(BaseModel):
    """Aggregate usage statistics for one coupon."""

    coupon_id: str
    code: str
    total_usage: int
    unique_users: int
    total_discount_given: Decimal
    last_used: Optional[datetime] = None

    model_config = {"frozen": True}
