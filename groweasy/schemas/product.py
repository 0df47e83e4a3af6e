"""Pydantic schemas for the product catalog."""
from datetime import datetime
from decimal import Decimal
from typing import Optional, List
from uuid import UUID

from pydantic import BaseModel, Field, field_validator, model_validator

from groweasy.models.product import ProductStatus
from groweasy.schemas.base import (
    BaseCreateSchema, BaseUpdateSchema, BaseResponseSchema, MoneyValue, Pagination, reject_null
)


# ==================== Product Schemas ====================

class ProductBase(BaseModel):
    """Base schema for Product."""
    name: str = Field(..., min_length=1, max_length=200)
    description: str = Field(..., min_length=1)
    short_description: Optional[str] = Field(None, max_length=500)
    price: Decimal = Field(..., gt=0)
    compare_price: Optional[Decimal] = Field(None, gt=0)
    stock: int = Field(0, ge=0)
    sku: str = Field(..., min_length=1, max_length=100)
    category: str = Field(..., min_length=1, max_length=100)
    subcategory: Optional[str] = Field(None, max_length=100)
    tags: List[str] = []
    images: List[str] = []
    specifications: dict = {}
    affiliate_percentage: Decimal = Field(Decimal("5"), ge=0, le=50)
    featured: bool = False

    # SEO
    seo_title: Optional[str] = Field(None, max_length=60)
    seo_description: Optional[str] = Field(None, max_length=160)

    # Shipping
    weight: Optional[Decimal] = Field(None, ge=0)
    dimensions: Optional[dict] = None


class ProductCreate(ProductBase, BaseCreateSchema):
    """Schema for admin product creation. Products created by admins go live immediately."""

    @model_validator(mode="after")
    def check_compare_price(self):
        if self.compare_price is not None and self.compare_price < self.price:
            raise ValueError("compare_price must be greater than or equal to price")
        return self


class ProductUpdate(BaseUpdateSchema):
    """Schema for updating Product."""
    name: Optional[str] = Field(None, min_length=1, max_length=200)
    description: Optional[str] = Field(None, min_length=1)
    short_description: Optional[str] = Field(None, max_length=500)
    price: Optional[Decimal] = Field(None, gt=0)
    compare_price: Optional[Decimal] = Field(None, gt=0)
    stock: Optional[int] = Field(None, ge=0)
    category: Optional[str] = Field(None, min_length=1, max_length=100)
    subcategory: Optional[str] = Field(None, max_length=100)
    tags: Optional[List[str]] = None
    images: Optional[List[str]] = None
    specifications: Optional[dict] = None
    affiliate_percentage: Optional[Decimal] = Field(None, ge=0, le=50)
    status: Optional[ProductStatus] = None
    featured: Optional[bool] = None
    seo_title: Optional[str] = Field(None, max_length=60)
    seo_description: Optional[str] = Field(None, max_length=160)
    weight: Optional[Decimal] = Field(None, ge=0)
    dimensions: Optional[dict] = None

    @field_validator(
        "name", "description", "price", "stock", "category", "tags", "images",
        "specifications", "affiliate_percentage", "status", "featured",
    )
    @classmethod
    def required_columns(cls, v):
        return reject_null(v)


class ProductResponse(BaseResponseSchema):
    """Response schema for Product."""
    id: UUID
    name: str
    description: str
    short_description: Optional[str] = None
    price: MoneyValue
    compare_price: Optional[MoneyValue] = None
    stock: int
    sku: str
    category: str
    subcategory: Optional[str] = None
    tags: List[str] = []
    images: List[str] = []
    specifications: dict = {}
    affiliate_percentage: MoneyValue
    seller_id: Optional[UUID] = None
    status: str
    featured: bool
    seo_title: Optional[str] = None
    seo_description: Optional[str] = None
    weight: Optional[MoneyValue] = None
    dimensions: Optional[dict] = None
    created_at: datetime
    updated_at: datetime


class ProductBrief(BaseResponseSchema):
    """Summary embedded in affiliate links, enquiries and orders."""
    id: UUID
    name: str
    price: MoneyValue
    images: List[str] = []
    category: str
    status: str


class ProductListResponse(BaseModel):
    items: List[ProductResponse]
    pagination: Pagination


class CategoryCount(BaseModel):
    name: str
    count: int


class CategoryListResponse(BaseModel):
    categories: List[CategoryCount]
