"""
Platform settings.

Defaults come from environment configuration; admins override them per
section and the stored values win at runtime.
"""
import logging
from typing import Dict, Any, Optional
import uuid

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from groweasy.config import settings
from groweasy.models.setting import PlatformSetting

logger = logging.getLogger(__name__)

SECTIONS = ("general", "payment", "features")


def default_settings() -> Dict[str, Dict[str, Any]]:
    return {
        "general": {
            "site_name": settings.SITE_NAME,
            "site_description": settings.SITE_DESCRIPTION,
            "site_url": settings.SITE_URL,
            "admin_email": settings.ADMIN_EMAIL,
            "support_email": settings.SUPPORT_EMAIL,
            "currency": settings.CURRENCY,
            "timezone": settings.TIMEZONE,
            "language": settings.LANGUAGE,
        },
        "payment": {
            "razorpay_key_id": settings.RAZORPAY_KEY_ID,
            "razorpay_account_number": settings.RAZORPAY_ACCOUNT_NUMBER,
            "payment_methods": ["card", "netbanking", "upi", "wallet"],
            "minimum_payout_amount": settings.MINIMUM_PAYOUT_AMOUNT,
            "payout_schedule": settings.PAYOUT_SCHEDULE,
        },
        "features": {
            "allow_seller_registration": settings.ALLOW_SELLER_REGISTRATION,
            "require_seller_approval": settings.REQUIRE_SELLER_APPROVAL,
            "enable_affiliate_program": settings.ENABLE_AFFILIATE_PROGRAM,
            "enable_coupons": settings.ENABLE_COUPONS,
            "enable_reviews": settings.ENABLE_REVIEWS,
            "enable_wishlist": settings.ENABLE_WISHLIST,
        },
    }


class SettingsService:

    def __init__(self, db: AsyncSession):
        self.db = db

    async def _stored(self) -> Dict[str, PlatformSetting]:
        result = await self.db.execute(select(PlatformSetting))
        return {row.section: row for row in result.scalars().all()}

    async def get_all(self) -> Dict[str, Dict[str, Any]]:
        merged = default_settings()
        for section, row in (await self._stored()).items():
            if section in merged:
                merged[section].update(row.values or {})
        return merged

    async def get_section(self, section: str) -> Dict[str, Any]:
        return (await self.get_all())[section]

    async def feature_enabled(self, flag: str) -> bool:
        return bool((await self.get_section("features")).get(flag, False))

    async def minimum_payout_amount(self) -> float:
        return float((await self.get_section("payment"))["minimum_payout_amount"])

    async def update(
        self,
        changes: Dict[str, Dict[str, Any]],
        admin_id: Optional[uuid.UUID] = None,
    ) -> Dict[str, Dict[str, Any]]:
        """Merge provided sections into stored settings and return the effective result."""
        stored = await self._stored()
        for section, values in changes.items():
            if section not in SECTIONS or not values:
                continue
            row = stored.get(section)
            if row is None:
                row = PlatformSetting(section=section, values={})
                self.db.add(row)
            # Reassign so the JSON column is flagged dirty
            row.values = {**(row.values or {}), **values}
            row.updated_by = admin_id

        await self.db.flush()
        logger.info(f"Platform settings updated: {', '.join(k for k, v in changes.items() if v)}")
        return await self.get_all()
