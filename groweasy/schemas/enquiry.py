from datetime import datetime
from decimal import Decimal
from typing import Optional, List
from uuid import UUID

from pydantic import BaseModel, Field

from groweasy.schemas.base import BaseCreateSchema, BaseResponseSchema, MoneyValue, Pagination


class EnquiryCreate(BaseCreateSchema):
    """Seller request to list a product. product_id refers to an admin-curated product."""
    product_id: Optional[UUID] = None
    product_name: str = Field(..., min_length=1, max_length=200)
    description: str = Field(..., min_length=1)
    category: str = Field(..., min_length=1, max_length=100)
    subcategory: Optional[str] = Field(None, max_length=100)
    suggested_price: Decimal = Field(..., gt=0)
    images: List[str] = []
    specifications: dict = {}


class EnquiryResponse(BaseResponseSchema):
    id: UUID
    seller_id: UUID
    product_id: Optional[UUID] = None
    product_name: str
    description: str
    category: str
    subcategory: Optional[str] = None
    suggested_price: MoneyValue
    images: List[str] = []
    specifications: dict = {}
    status: str
    admin_feedback: Optional[str] = None
    approved_product_id: Optional[UUID] = None
    reviewed_at: Optional[datetime] = None
    created_at: datetime


class EnquiryListResponse(BaseModel):
    items: List[EnquiryResponse]
    pagination: Pagination


class EnquiryReviewRequest(BaseModel):
    """Admin decision payload. Feedback is shown to the seller."""
    admin_feedback: Optional[str] = Field(None, max_length=2000)
    affiliate_percentage: Optional[Decimal] = Field(None, ge=0, le=50, description="Used when the approval creates a new product")
    stock: int = Field(0, ge=0, description="Opening stock when the approval creates a new product")
