"""
Seller payouts.

State machine:
    pending -> processing -> completed | failed
    pending -> failed (rejected by admin)

The requested amount leaves the wallet balance as soon as the payout is
created; failure or rejection returns it.
"""
import logging
from datetime import datetime, timezone
from decimal import Decimal
from typing import Optional, List, Tuple
import uuid

from sqlalchemy import select, func, or_, and_
from sqlalchemy.ext.asyncio import AsyncSession

from groweasy.core.exceptions import (
    MarketplaceError,
    NotFoundError,
    InvalidStateError,
    PaymentGatewayError,
)
from groweasy.core.utils import round_money, to_decimal
from groweasy.models.notification import NotificationType
from groweasy.models.payout import Payout, PayoutStatus, PayoutRequester
from groweasy.models.user import User, UserRole, UserStatus
from groweasy.models.wallet import Wallet
from groweasy.services.notification_service import NotificationService
from groweasy.services.payout_gateway import PayoutClient
from groweasy.services.settings_service import SettingsService
from groweasy.services.wallet_service import WalletService

logger = logging.getLogger(__name__)

OPEN_STATUSES = (PayoutStatus.PENDING.value, PayoutStatus.PROCESSING.value)


class PayoutService:

    def __init__(self, db: AsyncSession):
        self.db = db
        self.wallets = WalletService(db)
        self.notifications = NotificationService(db)

    async def get(self, payout_id: uuid.UUID) -> Payout:
        payout = (await self.db.execute(
            select(Payout).where(Payout.id == payout_id)
        )).scalar_one_or_none()
        if not payout:
            raise NotFoundError("Payout not found")
        return payout

    async def has_open_payout(self, seller_id: uuid.UUID) -> bool:
        count = (await self.db.execute(
            select(func.count(Payout.id)).where(
                and_(Payout.seller_id == seller_id, Payout.status.in_(OPEN_STATUSES))
            )
        )).scalar() or 0
        return count > 0

    async def request_payout(
        self,
        seller: User,
        amount: Decimal,
        requested_by: PayoutRequester = PayoutRequester.SELLER,
    ) -> Payout:
        amount = round_money(amount)
        minimum = to_decimal(await SettingsService(self.db).minimum_payout_amount())
        if amount < minimum:
            raise MarketplaceError(f"Minimum payout amount is ₹{round_money(minimum)}")

        if not seller.bank_details:
            raise MarketplaceError("Please add bank details before requesting a payout")

        wallet = await self.wallets.get_or_create(seller.id, for_update=True)
        if amount > to_decimal(wallet.balance):
            raise MarketplaceError("Insufficient wallet balance")

        if await self.has_open_payout(seller.id):
            raise MarketplaceError("A payout request is already in progress")

        payout = Payout(
            seller_id=seller.id,
            amount=amount,
            status=PayoutStatus.PENDING.value,
            bank_details=dict(seller.bank_details),
            requested_by=requested_by.value,
        )
        self.db.add(payout)
        await self.db.flush()
        await self.db.refresh(payout, attribute_names=["seller"])

        await self.wallets.hold_for_payout(wallet, payout)
        await self.notifications.notify(
            seller.id,
            NotificationType.PAYOUT_REQUESTED,
            "Payout requested",
            f"Your payout request of ₹{amount} has been received.",
            {"payout_id": str(payout.id), "amount": float(amount)},
        )

        logger.info(f"Payout {payout.id} of {amount} requested for seller {seller.id} by {requested_by.value}")
        return payout

    async def list_payouts(
        self,
        seller_id: Optional[uuid.UUID] = None,
        status: Optional[str] = None,
        search: Optional[str] = None,
        page: int = 1,
        limit: int = 10,
    ) -> Tuple[List[Payout], int]:
        query = select(Payout)
        if seller_id:
            query = query.where(Payout.seller_id == seller_id)
        if status:
            query = query.where(Payout.status == status)
        if search:
            pattern = f"%{search}%"
            query = query.join(User, User.id == Payout.seller_id).where(
                or_(
                    User.email.ilike(pattern),
                    User.first_name.ilike(pattern),
                    User.last_name.ilike(pattern),
                )
            )

        total = (await self.db.execute(
            select(func.count()).select_from(query.subquery())
        )).scalar() or 0

        result = await self.db.execute(
            query.order_by(Payout.created_at.desc())
            .offset((page - 1) * limit)
            .limit(limit)
        )
        return list(result.scalars().all()), total

    async def process(self, payout_id: uuid.UUID, client: PayoutClient) -> Payout:
        """
        Send a pending payout to RazorpayX.

        On gateway failure the payout is marked failed, the money goes back
        to the wallet, and PaymentGatewayError is re-raised after the state
        is flushed so the caller can commit it.
        """
        payout = await self.get(payout_id)
        if payout.status != PayoutStatus.PENDING.value:
            raise InvalidStateError("Invalid payout request")

        payout.status = PayoutStatus.PROCESSING.value
        await self.db.flush()

        try:
            result = await client.create_payout(
                amount=to_decimal(payout.amount),
                bank_details=payout.bank_details or {},
                reference_id=str(payout.id),
                narration="GrowEasy seller payout",
            )
        except PaymentGatewayError as e:
            await self._fail(payout, e.message)
            await self.notifications.notify(
                payout.seller_id,
                NotificationType.PAYOUT_FAILED,
                "Payout failed",
                f"Your payout of ₹{payout.amount} could not be processed. The amount has been returned to your wallet.",
                {"payout_id": str(payout.id), "reason": e.message},
            )
            logger.error(f"Payout {payout.id} failed: {e.message}")
            raise

        payout.status = PayoutStatus.COMPLETED.value
        payout.razorpay_payout_id = result.get("id")
        payout.processed_at = datetime.now(timezone.utc)
        await self.wallets.complete_payout(payout)
        await self.notifications.notify(
            payout.seller_id,
            NotificationType.PAYOUT_COMPLETED,
            "Payout processed",
            f"Your payout of ₹{payout.amount} has been sent to your bank account.",
            {"payout_id": str(payout.id), "razorpay_payout_id": payout.razorpay_payout_id},
        )
        await self.db.flush()

        logger.info(f"Payout {payout.id} completed ({payout.razorpay_payout_id})")
        return payout

    async def reject(self, payout_id: uuid.UUID, reason: str) -> Payout:
        payout = await self.get(payout_id)
        if payout.status != PayoutStatus.PENDING.value:
            raise InvalidStateError("Only pending payouts can be rejected")

        await self._fail(payout, reason)
        await self.notifications.notify(
            payout.seller_id,
            NotificationType.PAYOUT_FAILED,
            "Payout rejected",
            f"Your payout of ₹{payout.amount} was rejected: {reason}",
            {"payout_id": str(payout.id), "reason": reason},
        )
        logger.info(f"Payout {payout.id} rejected: {reason}")
        return payout

    async def _fail(self, payout: Payout, reason: str) -> None:
        payout.status = PayoutStatus.FAILED.value
        payout.failure_reason = reason
        payout.processed_at = datetime.now(timezone.utc)
        await self.wallets.release_payout(payout)
        await self.db.flush()

    async def schedule_payouts(self) -> List[Payout]:
        """
        Create a payout for the full balance of every approved seller who has
        bank details, a balance at or above the minimum and nothing in flight.
        """
        minimum = to_decimal(await SettingsService(self.db).minimum_payout_amount())

        result = await self.db.execute(
            select(User, Wallet)
            .join(Wallet, Wallet.seller_id == User.id)
            .where(
                and_(
                    User.role == UserRole.SELLER.value,
                    User.status == UserStatus.APPROVED.value,
                    Wallet.balance >= minimum,
                )
            )
        )

        created = []
        for seller, wallet in result.all():
            if not seller.bank_details:
                continue
            if await self.has_open_payout(seller.id):
                continue
            payout = await self.request_payout(
                seller,
                to_decimal(wallet.balance),
                requested_by=PayoutRequester.SCHEDULER,
            )
            created.append(payout)

        logger.info(f"Scheduled payouts created: {len(created)}")
        return created
