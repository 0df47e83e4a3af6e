from datetime import datetime
from typing import Optional, List
from uuid import UUID

from pydantic import BaseModel, Field

from groweasy.schemas.base import BaseResponseSchema, MoneyValue, Pagination
from groweasy.schemas.product import ProductBrief


class AffiliateLinkCreate(BaseModel):
    product_id: UUID = Field(..., description="Active product to promote")


class AffiliateLinkResponse(BaseResponseSchema):
    id: UUID
    affiliate_code: str
    seller_id: UUID
    product_id: UUID
    clicks: int
    conversions: int
    earnings: MoneyValue
    commission_rate: MoneyValue
    conversion_rate: float
    is_active: bool
    url: Optional[str] = None
    product: Optional[ProductBrief] = None
    created_at: datetime


class AffiliateLinkListResponse(BaseModel):
    items: List[AffiliateLinkResponse]
    pagination: Pagination


class AffiliateClickResponse(BaseModel):
    affiliate_code: str
    product_id: UUID
    redirect_url: str
