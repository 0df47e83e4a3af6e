"""Pydantic schemas for coupon administration and checkout validation."""
from datetime import datetime, timezone
from decimal import Decimal
from typing import Optional, List
from uuid import UUID

from pydantic import BaseModel, Field, field_validator, model_validator

from groweasy.core.utils import as_utc
from groweasy.models.coupon import DiscountType
from groweasy.schemas.base import (
    BaseCreateSchema, BaseUpdateSchema, BaseResponseSchema, MoneyValue, Pagination, reject_null
)


# ==================== Coupon Admin Schemas ====================

class CouponCreate(BaseCreateSchema):
    code: str = Field(..., min_length=3, max_length=20, pattern=r"^[A-Za-z0-9_-]+$")
    name: str = Field(..., min_length=1, max_length=100)
    description: Optional[str] = Field(None, max_length=500)
    discount_type: DiscountType
    discount_value: Decimal = Field(..., ge=0)
    minimum_order_amount: Decimal = Field(Decimal("0"), ge=0)
    maximum_discount_amount: Optional[Decimal] = Field(None, ge=0)
    usage_limit: Optional[int] = Field(None, ge=1)
    user_usage_limit: int = Field(1, ge=1)
    valid_from: Optional[datetime] = None
    valid_until: datetime
    is_active: bool = True
    applicable_products: List[UUID] = []
    applicable_categories: List[str] = []
    excluded_products: List[UUID] = []

    @field_validator("code")
    @classmethod
    def uppercase_code(cls, v: str) -> str:
        return v.upper()

    @model_validator(mode="after")
    def check_rules(self):
        if self.discount_type == DiscountType.PERCENTAGE and self.discount_value > 100:
            raise ValueError("Percentage discount cannot exceed 100")
        starts = self.valid_from or datetime.now(timezone.utc)
        if as_utc(self.valid_until) <= as_utc(starts):
            raise ValueError("valid_until must be after valid_from")
        return self


class CouponUpdate(BaseUpdateSchema):
    code: Optional[str] = Field(None, min_length=3, max_length=20, pattern=r"^[A-Za-z0-9_-]+$")
    name: Optional[str] = Field(None, min_length=1, max_length=100)
    description: Optional[str] = Field(None, max_length=500)
    discount_type: Optional[DiscountType] = None
    discount_value: Optional[Decimal] = Field(None, ge=0)
    minimum_order_amount: Optional[Decimal] = Field(None, ge=0)
    maximum_discount_amount: Optional[Decimal] = Field(None, ge=0)
    usage_limit: Optional[int] = Field(None, ge=1)
    user_usage_limit: Optional[int] = Field(None, ge=1)
    valid_from: Optional[datetime] = None
    valid_until: Optional[datetime] = None
    is_active: Optional[bool] = None
    applicable_products: Optional[List[UUID]] = None
    applicable_categories: Optional[List[str]] = None
    excluded_products: Optional[List[UUID]] = None

    @field_validator("code")
    @classmethod
    def uppercase_code(cls, v: Optional[str]) -> Optional[str]:
        return v.upper() if v else v

    @field_validator(
        "code", "name", "discount_type", "discount_value", "minimum_order_amount",
        "user_usage_limit", "valid_from", "valid_until", "is_active",
        "applicable_products", "applicable_categories", "excluded_products",
    )
    @classmethod
    def required_columns(cls, v):
        return reject_null(v)

    @model_validator(mode="after")
    def check_rules(self):
        if (
            self.discount_type == DiscountType.PERCENTAGE
            and self.discount_value is not None
            and self.discount_value > 100
        ):
            raise ValueError("Percentage discount cannot exceed 100")
        if self.valid_from and self.valid_until and as_utc(self.valid_until) <= as_utc(self.valid_from):
            raise ValueError("valid_until must be after valid_from")
        return self


class CouponResponse(BaseResponseSchema):
    id: UUID
    code: str
    name: str
    description: Optional[str] = None
    discount_type: str
    discount_value: MoneyValue
    minimum_order_amount: MoneyValue
    maximum_discount_amount: Optional[MoneyValue] = None
    usage_limit: Optional[int] = None
    used_count: int
    user_usage_limit: int
    valid_from: datetime
    valid_until: datetime
    is_active: bool
    is_expired: bool
    applicable_products: List[UUID] = []
    applicable_categories: List[str] = []
    excluded_products: List[UUID] = []
    created_at: datetime


class CouponListResponse(BaseModel):
    items: List[CouponResponse]
    pagination: Pagination


# ==================== Checkout Validation Schemas ====================

class CouponValidateRequest(BaseModel):
    """Request to validate a coupon code against a cart."""
    code: str = Field(..., min_length=1, max_length=20)
    cart_total: Decimal = Field(..., ge=0)
    product_ids: List[UUID] = []
    categories: List[str] = []
    customer_id: Optional[UUID] = None


class CouponValidateResponse(BaseModel):
    valid: bool
    code: str
    message: str
    discount_amount: MoneyValue = Decimal("0")
    discount_type: Optional[str] = None
    discount_value: Optional[MoneyValue] = None
