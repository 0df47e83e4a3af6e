"""Pydantic schemas for checkout, payment verification and order management."""
from datetime import datetime
from typing import Optional, List, Literal
from uuid import UUID

from pydantic import BaseModel, Field

from groweasy.models.order import OrderStatus
from groweasy.schemas.base import BaseCreateSchema, BaseResponseSchema, MoneyValue, Pagination


# ==================== Checkout Schemas ====================

class OrderAddress(BaseModel):
    first_name: str = Field(..., min_length=1, max_length=100)
    last_name: str = Field(..., min_length=1, max_length=100)
    street: str = Field(..., min_length=1, max_length=300)
    city: str = Field(..., min_length=1, max_length=100)
    state: str = Field(..., min_length=1, max_length=100)
    zip_code: str = Field(..., min_length=3, max_length=12)
    country: str = "India"
    phone: Optional[str] = Field(None, max_length=20)


class CartItem(BaseModel):
    product_id: UUID
    quantity: int = Field(..., ge=1, le=100)


class OrderCreate(BaseCreateSchema):
    """Checkout request. Prices are always read from the catalog, never from the client."""
    items: List[CartItem] = Field(..., min_length=1)
    shipping_address: OrderAddress
    billing_address: Optional[OrderAddress] = None
    coupon_code: Optional[str] = Field(None, max_length=20)
    affiliate_code: Optional[str] = Field(None, max_length=50)
    shop_id: Optional[UUID] = None
    payment_method: Optional[str] = Field(None, max_length=30)
    notes: Optional[str] = Field(None, max_length=1000)


class OrderCreateResponse(BaseModel):
    order_id: UUID
    order_number: str
    amount: MoneyValue
    currency: str
    razorpay_order_id: str
    key_id: str
    gateway_order: dict


class PaymentVerifyRequest(BaseModel):
    """Payload posted by the storefront after Razorpay checkout completes."""
    razorpay_order_id: str = Field(..., description="Razorpay order ID")
    razorpay_payment_id: str = Field(..., description="Razorpay payment ID")
    razorpay_signature: str = Field(..., description="Razorpay signature")
    order_id: UUID = Field(..., description="Marketplace order ID")


# ==================== Order Response Schemas ====================

class OrderItemResponse(BaseResponseSchema):
    id: UUID
    product_id: Optional[UUID] = None
    seller_id: Optional[UUID] = None
    name: str
    price: MoneyValue
    quantity: int
    affiliate_percentage: MoneyValue


class OrderResponse(BaseResponseSchema):
    id: UUID
    order_number: str
    customer_id: Optional[UUID] = None
    shop_id: Optional[UUID] = None
    affiliate_link_id: Optional[UUID] = None
    coupon_code: Optional[str] = None
    items: List[OrderItemResponse]
    subtotal: MoneyValue
    tax: MoneyValue
    shipping: MoneyValue
    discount: MoneyValue
    total: MoneyValue
    status: str
    payment_status: str
    payment_method: Optional[str] = None
    razorpay_order_id: Optional[str] = None
    razorpay_payment_id: Optional[str] = None
    paid_at: Optional[datetime] = None
    shipping_address: dict
    billing_address: Optional[dict] = None
    tracking_number: Optional[str] = None
    notes: Optional[str] = None
    created_at: datetime
    updated_at: datetime


class OrderListResponse(BaseModel):
    items: List[OrderResponse]
    pagination: Pagination


class OrderUpdate(BaseModel):
    """Admin order update."""
    status: Optional[OrderStatus] = None
    tracking_number: Optional[str] = Field(None, max_length=100)


class PaymentVerifyResponse(BaseModel):
    message: str
    order: OrderResponse


OrderSource = Literal["shop", "affiliate"]
