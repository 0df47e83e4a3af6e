from datetime import datetime
from typing import Optional, List, Literal
from uuid import UUID

from pydantic import BaseModel, Field

from groweasy.schemas.base import BaseUpdateSchema, BaseResponseSchema, MoneyValue


class ShopCustomization(BaseUpdateSchema):
    primaryColor: Optional[str] = Field(None, pattern=r"^#[0-9A-Fa-f]{6}$")
    secondaryColor: Optional[str] = Field(None, pattern=r"^#[0-9A-Fa-f]{6}$")
    theme: Optional[Literal["light", "dark"]] = None


class ShopUpdate(BaseUpdateSchema):
    shop_name: Optional[str] = Field(None, min_length=1, max_length=100)
    shop_description: Optional[str] = Field(None, max_length=1000)
    logo: Optional[str] = Field(None, max_length=500)
    banner: Optional[str] = Field(None, max_length=500)
    is_active: Optional[bool] = None
    product_ids: Optional[List[UUID]] = None
    customization: Optional[ShopCustomization] = None


class ShopResponse(BaseResponseSchema):
    id: UUID
    seller_id: UUID
    shop_name: str
    shop_description: Optional[str] = None
    logo: Optional[str] = None
    banner: Optional[str] = None
    is_active: bool
    product_ids: List[UUID] = []
    customization: dict
    total_visits: int
    total_orders: int
    total_revenue: MoneyValue
    created_at: datetime


class PublicShopResponse(BaseModel):
    shop: ShopResponse
    seller_name: str
    business_name: Optional[str] = None


class ShopStatsResponse(BaseModel):
    total_products: int
    total_clicks: int
    total_conversions: int
    total_earnings: float
    conversion_rate: float
    total_visits: int
    total_orders: int
    total_revenue: float
