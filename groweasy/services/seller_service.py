"""
User administration: seller approval, user listing and status changes,
plus seller-owned account data (bank details, preferences).
"""
import logging
from typing import Optional, List, Tuple
import uuid

from sqlalchemy import select, func, or_
from sqlalchemy.ext.asyncio import AsyncSession

from groweasy.core.exceptions import NotFoundError
from groweasy.models.notification import NotificationType
from groweasy.models.user import User, UserRole, UserStatus
from groweasy.schemas.settings import SellerSettings
from groweasy.schemas.user import BankDetails
from groweasy.services.notification_service import NotificationService
from groweasy.services.wallet_service import WalletService

logger = logging.getLogger(__name__)


class SellerService:

    def __init__(self, db: AsyncSession):
        self.db = db

    async def get_user(self, user_id: uuid.UUID) -> User:
        user = (await self.db.execute(select(User).where(User.id == user_id))).scalar_one_or_none()
        if not user:
            raise NotFoundError("User not found")
        return user

    async def get_seller(self, seller_id: uuid.UUID) -> User:
        user = (await self.db.execute(
            select(User).where(User.id == seller_id, User.role == UserRole.SELLER.value)
        )).scalar_one_or_none()
        if not user:
            raise NotFoundError("Seller not found")
        return user

    async def list_users(
        self,
        role: Optional[str] = None,
        status: Optional[str] = None,
        search: Optional[str] = None,
        page: int = 1,
        limit: int = 10,
    ) -> Tuple[List[User], int]:
        query = select(User)
        if role:
            query = query.where(User.role == role)
        if status:
            query = query.where(User.status == status)
        if search:
            pattern = f"%{search}%"
            query = query.where(
                or_(
                    User.first_name.ilike(pattern),
                    User.last_name.ilike(pattern),
                    User.email.ilike(pattern),
                )
            )

        total = (await self.db.execute(
            select(func.count()).select_from(query.subquery())
        )).scalar() or 0

        result = await self.db.execute(
            query.order_by(User.created_at.desc())
            .offset((page - 1) * limit)
            .limit(limit)
        )
        return list(result.scalars().all()), total

    async def approve(self, seller_id: uuid.UUID) -> User:
        seller = await self.get_seller(seller_id)
        seller.status = UserStatus.APPROVED.value
        seller.rejection_reason = None
        await WalletService(self.db).get_or_create(seller.id)

        await NotificationService(self.db).notify(
            seller.id,
            NotificationType.ACCOUNT_APPROVED,
            "Account approved",
            "Your seller account has been approved. You can now start selling.",
        )
        await self.db.flush()
        logger.info(f"Seller {seller.email} approved")
        return seller

    async def reject(self, seller_id: uuid.UUID, reason: Optional[str] = None) -> User:
        seller = await self.get_seller(seller_id)
        seller.status = UserStatus.REJECTED.value
        seller.rejection_reason = reason

        await NotificationService(self.db).notify(
            seller.id,
            NotificationType.ACCOUNT_REJECTED,
            "Account rejected",
            "Your seller application was not approved."
            + (f" Reason: {reason}" if reason else ""),
            {"reason": reason} if reason else None,
        )
        await self.db.flush()
        logger.info(f"Seller {seller.email} rejected")
        return seller

    async def set_status(self, user_id: uuid.UUID, status: UserStatus) -> Tuple[User, str]:
        """Returns (user, previous status)."""
        user = await self.get_user(user_id)
        previous = user.status
        user.status = status.value
        await self.db.flush()
        logger.info(f"User {user.email} status {previous} -> {user.status}")
        return user, previous

    async def update_bank_details(self, seller: User, bank_details: BankDetails) -> User:
        seller.bank_details = bank_details.model_dump()
        await self.db.flush()
        logger.info(f"Bank details updated for seller {seller.id}")
        return seller

    @staticmethod
    def get_settings(seller: User) -> SellerSettings:
        return SellerSettings.model_validate(seller.settings or {})

    async def update_settings(self, seller: User, new_settings: SellerSettings) -> SellerSettings:
        seller.settings = new_settings.model_dump(mode="json")
        await self.db.flush()
        return new_settings
