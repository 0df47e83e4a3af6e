from typing import Literal, Optional

from pydantic import BaseModel, EmailStr, Field, field_validator

from groweasy.schemas.user import BusinessInfo, UserResponse


class RegisterRequest(BaseModel):
    """Registration request schema. Admin accounts cannot self-register."""
    email: EmailStr = Field(..., description="User email address")
    password: str = Field(..., min_length=6, description="User password")
    first_name: str = Field(..., min_length=1, max_length=100)
    last_name: str = Field(..., min_length=1, max_length=100)
    role: Literal["customer", "seller"] = Field("customer", description="Account type")
    phone: Optional[str] = Field(None, max_length=20)
    business_info: Optional[BusinessInfo] = None

    @field_validator("email")
    @classmethod
    def normalize_email(cls, v: str) -> str:
        return v.strip().lower()


class RegisterResponse(BaseModel):
    message: str
    user: UserResponse
    access_token: Optional[str] = Field(None, description="Only issued to accounts that may log in immediately")
    token_type: str = "bearer"


class LoginRequest(BaseModel):
    """Login request schema."""
    email: EmailStr = Field(..., description="User email address")
    password: str = Field(..., min_length=1, description="User password")


class TokenResponse(BaseModel):
    """Token response schema."""
    access_token: str = Field(..., description="JWT access token")
    token_type: str = Field(default="bearer", description="Token type")
    expires_in: int = Field(..., description="Access token expiration in seconds")
    user: UserResponse


class ChangePasswordRequest(BaseModel):
    current_password: str = Field(..., description="Current password")
    new_password: str = Field(..., min_length=6, description="New password")
