"""Schemas for admin platform settings and seller preferences."""
from decimal import Decimal
from typing import Optional, List, Literal

from pydantic import BaseModel, EmailStr, Field

from groweasy.schemas.base import BaseUpdateSchema


# ==================== Admin Settings Schemas ====================

class GeneralSettings(BaseModel):
    site_name: str
    site_description: str
    site_url: str
    admin_email: str
    support_email: str
    currency: str
    timezone: str
    language: str


class PaymentSettings(BaseModel):
    razorpay_key_id: str
    razorpay_key_secret: str = "***hidden***"
    razorpay_account_number: str
    payment_methods: List[str]
    minimum_payout_amount: float
    payout_schedule: str


class FeatureSettings(BaseModel):
    allow_seller_registration: bool
    require_seller_approval: bool
    enable_affiliate_program: bool
    enable_coupons: bool
    enable_reviews: bool
    enable_wishlist: bool


class AdminSettingsResponse(BaseModel):
    general: GeneralSettings
    payment: PaymentSettings
    features: FeatureSettings


class GeneralSettingsUpdate(BaseUpdateSchema):
    site_name: Optional[str] = Field(None, min_length=1, max_length=100)
    site_description: Optional[str] = Field(None, max_length=500)
    site_url: Optional[str] = Field(None, max_length=200)
    admin_email: Optional[EmailStr] = None
    support_email: Optional[EmailStr] = None
    currency: Optional[str] = Field(None, min_length=3, max_length=3)
    timezone: Optional[str] = None
    language: Optional[str] = Field(None, max_length=10)


class PaymentSettingsUpdate(BaseUpdateSchema):
    """Gateway credentials are environment-only and cannot be changed here."""
    payment_methods: Optional[List[Literal["card", "netbanking", "upi", "wallet"]]] = None
    minimum_payout_amount: Optional[float] = Field(None, ge=1)
    payout_schedule: Optional[Literal["daily", "weekly", "monthly"]] = None


class FeatureSettingsUpdate(BaseUpdateSchema):
    allow_seller_registration: Optional[bool] = None
    require_seller_approval: Optional[bool] = None
    enable_affiliate_program: Optional[bool] = None
    enable_coupons: Optional[bool] = None
    enable_reviews: Optional[bool] = None
    enable_wishlist: Optional[bool] = None


class AdminSettingsUpdate(BaseModel):
    general: Optional[GeneralSettingsUpdate] = None
    payment: Optional[PaymentSettingsUpdate] = None
    features: Optional[FeatureSettingsUpdate] = None


# ==================== Seller Settings Schemas ====================

class SellerNotificationSettings(BaseModel):
    email_notifications: bool = True
    sms_notifications: bool = False
    order_alerts: bool = True
    payment_alerts: bool = True
    enquiry_alerts: bool = True


class SellerPreferences(BaseModel):
    currency: str = "INR"
    timezone: str = "Asia/Kolkata"
    language: str = "en"
    auto_approve_orders: bool = False
    minimum_order_amount: Decimal = Field(Decimal("0"), ge=0)


class SellerSettings(BaseModel):
    notifications: SellerNotificationSettings = SellerNotificationSettings()
    preferences: SellerPreferences = SellerPreferences()
