from datetime import datetime, timezone
from typing import Optional, Tuple
import logging

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from groweasy.config import settings
from groweasy.core.exceptions import ConflictError, MarketplaceError, PermissionDeniedError
from groweasy.core.security import (
    verify_password,
    get_password_hash,
    create_access_token,
)
from groweasy.models.user import User, UserRole, UserStatus
from groweasy.schemas.auth import RegisterRequest
from groweasy.services.settings_service import SettingsService
from groweasy.services.wallet_service import WalletService

logger = logging.getLogger(__name__)


class AuthService:
    """Authentication service for registration, login and token issue."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def get_by_email(self, email: str) -> Optional[User]:
        result = await self.db.execute(select(User).where(User.email == email.strip().lower()))
        return result.scalar_one_or_none()

    async def register(self, data: RegisterRequest) -> User:
        """
        Create a customer or seller account.

        Sellers start pending (unless approval is switched off) and get an
        empty wallet straight away.
        """
        if await self.get_by_email(data.email):
            raise ConflictError("User already exists")

        settings_service = SettingsService(self.db)
        is_seller = data.role == UserRole.SELLER.value

        if is_seller:
            if not await settings_service.feature_enabled("allow_seller_registration"):
                raise PermissionDeniedError("Seller registration is currently closed")
            needs_approval = await settings_service.feature_enabled("require_seller_approval")
            status = UserStatus.PENDING.value if needs_approval else UserStatus.APPROVED.value
        else:
            status = UserStatus.ACTIVE.value

        user = User(
            email=data.email.lower(),
            password_hash=get_password_hash(data.password),
            role=data.role,
            status=status,
            first_name=data.first_name,
            last_name=data.last_name,
            phone=data.phone,
            business_info=data.business_info.model_dump(mode="json") if data.business_info else None,
            documents=[],
        )
        self.db.add(user)
        await self.db.flush()

        if is_seller:
            await WalletService(self.db).get_or_create(user.id)

        logger.info(f"Registered {user.role} account {user.email} (status={user.status})")
        return user

    async def authenticate_user(self, email: str, password: str) -> Optional[User]:
        """
        Authenticate a user by email and password.

        Returns:
            User object if the credentials match, None otherwise
        """
        user = await self.get_by_email(email)
        if user is None:
            return None
        if not verify_password(password, user.password_hash):
            return None
        return user

    @staticmethod
    def check_can_login(user: User) -> None:
        """Sellers must be approved; rejected accounts of any role are blocked."""
        if user.role == UserRole.SELLER.value and user.status != UserStatus.APPROVED.value:
            if user.status == UserStatus.REJECTED.value:
                raise PermissionDeniedError(
                    "Your seller account has been rejected. Please contact support."
                )
            raise PermissionDeniedError(
                "Your seller account is pending approval. Please wait for admin approval."
            )
        if user.status == UserStatus.REJECTED.value:
            raise PermissionDeniedError("Your account has been deactivated")

    async def login(self, email: str, password: str) -> Optional[Tuple[User, str, int]]:
        user = await self.authenticate_user(email, password)
        if user is None:
            return None

        self.check_can_login(user)

        user.last_login_at = datetime.now(timezone.utc)
        await self.db.flush()

        access_token, expires_in = self.create_token(user)
        return user, access_token, expires_in

    @staticmethod
    def create_token(user: User) -> Tuple[str, int]:
        """Returns (access_token, expires_in_seconds)."""
        token = create_access_token(subject=user.id, additional_claims={"role": user.role})
        return token, settings.ACCESS_TOKEN_EXPIRE_MINUTES * 60

    async def change_password(self, user: User, current_password: str, new_password: str) -> None:
        if not verify_password(current_password, user.password_hash):
            raise MarketplaceError("Current password is incorrect")
        user.password_hash = get_password_hash(new_password)
        await self.db.flush()
