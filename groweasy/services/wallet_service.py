"""
Seller wallet bookkeeping.

Credits are recorded as pending when an order is paid and only become
withdrawable (added to balance) once the order is delivered. A payout request
moves money out of balance immediately as a pending debit; a failed or
rejected payout puts it back.
"""
import logging
from datetime import datetime, timezone
from decimal import Decimal
from typing import Optional, List
import uuid

from sqlalchemy import select, func, and_
from sqlalchemy.ext.asyncio import AsyncSession

from groweasy.core.utils import round_money, to_decimal
from groweasy.models.payout import Payout
from groweasy.models.wallet import Wallet, WalletTransaction, TransactionType, TransactionStatus

logger = logging.getLogger(__name__)


class WalletService:

    def __init__(self, db: AsyncSession):
        self.db = db

    async def get_or_create(self, seller_id: uuid.UUID, for_update: bool = False) -> Wallet:
        query = select(Wallet).where(Wallet.seller_id == seller_id)
        if for_update:
            query = query.with_for_update()
        wallet = (await self.db.execute(query)).scalar_one_or_none()
        if wallet is None:
            wallet = Wallet(
                seller_id=seller_id,
                balance=Decimal("0"),
                total_earnings=Decimal("0"),
                total_withdrawn=Decimal("0"),
            )
            self.db.add(wallet)
            await self.db.flush()
            logger.info(f"Created wallet for seller {seller_id}")
        return wallet

    async def pending_earnings(self, wallet: Wallet) -> Decimal:
        result = await self.db.execute(
            select(func.coalesce(func.sum(WalletTransaction.amount), 0)).where(
                and_(
                    WalletTransaction.wallet_id == wallet.id,
                    WalletTransaction.type == TransactionType.CREDIT.value,
                    WalletTransaction.status == TransactionStatus.PENDING.value,
                )
            )
        )
        return round_money(result.scalar() or 0)

    async def add_pending_credit(
        self,
        seller_id: uuid.UUID,
        amount: Decimal,
        description: str,
        order_id: Optional[uuid.UUID] = None,
        affiliate_link_id: Optional[uuid.UUID] = None,
    ) -> Optional[WalletTransaction]:
        amount = round_money(amount)
        if amount <= 0:
            return None

        wallet = await self.get_or_create(seller_id)
        txn = WalletTransaction(
            wallet_id=wallet.id,
            type=TransactionType.CREDIT.value,
            amount=amount,
            description=description,
            status=TransactionStatus.PENDING.value,
            order_id=order_id,
            affiliate_link_id=affiliate_link_id,
        )
        self.db.add(txn)
        await self.db.flush()
        return txn

    async def _order_credits(self, order_id: uuid.UUID) -> List[WalletTransaction]:
        result = await self.db.execute(
            select(WalletTransaction).where(
                and_(
                    WalletTransaction.order_id == order_id,
                    WalletTransaction.type == TransactionType.CREDIT.value,
                    WalletTransaction.status == TransactionStatus.PENDING.value,
                )
            )
        )
        return list(result.scalars().all())

    async def complete_order_credits(self, order_id: uuid.UUID) -> Decimal:
        """Release pending credits of a delivered order into seller balances."""
        released = Decimal("0")
        for txn in await self._order_credits(order_id):
            wallet = (await self.db.execute(
                select(Wallet).where(Wallet.id == txn.wallet_id).with_for_update()
            )).scalar_one()
            amount = to_decimal(txn.amount)
            wallet.balance = round_money(to_decimal(wallet.balance) + amount)
            wallet.total_earnings = round_money(to_decimal(wallet.total_earnings) + amount)
            txn.status = TransactionStatus.COMPLETED.value
            released += amount

        await self.db.flush()
        if released:
            logger.info(f"Released {released} of earnings for order {order_id}")
        return released

    async def fail_order_credits(self, order_id: uuid.UUID) -> int:
        """Cancel pending credits of a cancelled/refunded order."""
        credits = await self._order_credits(order_id)
        for txn in credits:
            txn.status = TransactionStatus.FAILED.value
        await self.db.flush()
        return len(credits)

    async def hold_for_payout(self, wallet: Wallet, payout: Payout) -> WalletTransaction:
        """Move the payout amount out of the balance as a pending debit."""
        amount = to_decimal(payout.amount)
        wallet.balance = round_money(to_decimal(wallet.balance) - amount)
        txn = WalletTransaction(
            wallet_id=wallet.id,
            type=TransactionType.DEBIT.value,
            amount=amount,
            description="Payout request",
            status=TransactionStatus.PENDING.value,
            payout_id=payout.id,
        )
        self.db.add(txn)
        await self.db.flush()
        return txn

    async def _payout_debit(self, payout_id: uuid.UUID) -> Optional[WalletTransaction]:
        result = await self.db.execute(
            select(WalletTransaction).where(
                and_(
                    WalletTransaction.payout_id == payout_id,
                    WalletTransaction.type == TransactionType.DEBIT.value,
                )
            )
        )
        return result.scalar_one_or_none()

    async def complete_payout(self, payout: Payout) -> None:
        wallet = await self.get_or_create(payout.seller_id, for_update=True)
        wallet.total_withdrawn = round_money(to_decimal(wallet.total_withdrawn) + to_decimal(payout.amount))
        wallet.last_payout_date = datetime.now(timezone.utc)

        txn = await self._payout_debit(payout.id)
        if txn:
            txn.status = TransactionStatus.COMPLETED.value
        await self.db.flush()

    async def release_payout(self, payout: Payout) -> None:
        """Return the held amount of a failed or rejected payout to the balance."""
        wallet = await self.get_or_create(payout.seller_id, for_update=True)
        txn = await self._payout_debit(payout.id)
        if txn is not None and txn.status != TransactionStatus.PENDING.value:
            return

        wallet.balance = round_money(to_decimal(wallet.balance) + to_decimal(payout.amount))
        if txn:
            txn.status = TransactionStatus.FAILED.value
        await self.db.flush()
