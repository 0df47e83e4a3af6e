from fastapi import APIRouter, HTTPException, status

from groweasy.api.deps import DB, CurrentUser
from groweasy.models.user import UserRole, UserStatus
from groweasy.schemas.auth import (
    RegisterRequest,
    RegisterResponse,
    LoginRequest,
    TokenResponse,
    ChangePasswordRequest,
)
from groweasy.schemas.base import MessageResponse
from groweasy.schemas.user import UserResponse, ProfileUpdate
from groweasy.services.auth_service import AuthService

router = APIRouter(tags=["Authentication"])


@router.post("/register", response_model=RegisterResponse, status_code=status.HTTP_201_CREATED)
async def register(data: RegisterRequest, db: DB):
    """
    Create a customer or seller account.

    Customers (and sellers when approval is switched off) get a token
    straight away; other sellers wait for admin approval.
    """
    auth_service = AuthService(db)
    user = await auth_service.register(data)

    if user.role == UserRole.SELLER.value and user.status != UserStatus.APPROVED.value:
        return RegisterResponse(
            message="Registration successful. Awaiting approval.",
            user=UserResponse.model_validate(user),
        )

    access_token, _ = auth_service.create_token(user)
    return RegisterResponse(
        message="Registration successful",
        user=UserResponse.model_validate(user),
        access_token=access_token,
    )


@router.post("/login", response_model=TokenResponse)
async def login(data: LoginRequest, db: DB):
    """
    Authenticate user and return an access token.
    """
    result = await AuthService(db).login(data.email, data.password)

    if not result:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid credentials",
            headers={"WWW-Authenticate": "Bearer"},
        )

    user, access_token, expires_in = result
    return TokenResponse(
        access_token=access_token,
        token_type="bearer",
        expires_in=expires_in,
        user=UserResponse.model_validate(user),
    )


@router.post("/logout", response_model=MessageResponse)
async def logout(current_user: CurrentUser):
    """Tokens are stateless; the client drops its copy."""
    return MessageResponse(message="Logged out successfully")


@router.get("/me", response_model=UserResponse)
async def get_current_user_info(current_user: CurrentUser):
    return current_user


@router.put("/profile", response_model=UserResponse)
async def update_profile(data: ProfileUpdate, current_user: CurrentUser, db: DB):
    changes = data.model_dump(exclude_unset=True)
    if "business_info" in changes and data.business_info is not None:
        changes["business_info"] = data.business_info.model_dump(mode="json")

    for key, value in changes.items():
        if key in ("first_name", "last_name") and value is None:
            continue
        setattr(current_user, key, value)

    await db.flush()
    return current_user


@router.post("/change-password", response_model=MessageResponse)
async def change_password(data: ChangePasswordRequest, current_user: CurrentUser, db: DB):
    await AuthService(db).change_password(current_user, data.current_password, data.new_password)
    return MessageResponse(message="Password changed successfully")
