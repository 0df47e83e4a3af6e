"""Pydantic schemas for users, sellers and their business/bank details."""
from datetime import datetime
from typing import Optional, List
from uuid import UUID

from pydantic import BaseModel, Field

from groweasy.models.user import UserStatus
from groweasy.schemas.base import BaseResponseSchema, BaseUpdateSchema, Pagination


class Address(BaseModel):
    street: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    zip_code: Optional[str] = None
    country: Optional[str] = "India"


class BusinessInfo(BaseModel):
    business_name: Optional[str] = Field(None, max_length=200)
    business_type: Optional[str] = Field(None, max_length=100)
    gst_number: Optional[str] = Field(None, max_length=20)
    address: Optional[Address] = None


class BankDetails(BaseModel):
    account_number: str = Field(..., min_length=6, max_length=20)
    ifsc_code: str = Field(..., pattern=r"^[A-Za-z]{4}0[A-Za-z0-9]{6}$", description="11-character IFSC")
    account_holder_name: str = Field(..., min_length=2, max_length=200)
    bank_name: Optional[str] = Field(None, max_length=200)


# ==================== User Schemas ====================

class UserBrief(BaseResponseSchema):
    id: UUID
    email: str
    first_name: str
    last_name: str


class UserResponse(BaseResponseSchema):
    """User as returned to clients. Never includes the password hash."""
    id: UUID
    email: str
    role: str
    status: str
    first_name: str
    last_name: str
    phone: Optional[str] = None
    avatar: Optional[str] = None
    business_info: Optional[dict] = None
    created_at: datetime
    last_login_at: Optional[datetime] = None


class SellerResponse(UserResponse):
    bank_details: Optional[dict] = None
    documents: List[str] = []
    rejection_reason: Optional[str] = None


class UserListResponse(BaseModel):
    items: List[UserResponse]
    pagination: Pagination


class SellerListResponse(BaseModel):
    items: List[SellerResponse]
    pagination: Pagination


class ProfileUpdate(BaseUpdateSchema):
    first_name: Optional[str] = Field(None, min_length=1, max_length=100)
    last_name: Optional[str] = Field(None, min_length=1, max_length=100)
    phone: Optional[str] = Field(None, max_length=20)
    avatar: Optional[str] = Field(None, max_length=500)
    business_info: Optional[BusinessInfo] = None


class SellerRejectRequest(BaseModel):
    reason: Optional[str] = Field(None, max_length=1000)


class UserStatusUpdate(BaseModel):
    status: UserStatus
