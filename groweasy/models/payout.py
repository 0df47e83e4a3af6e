import uuid
from datetime import datetime, timezone
from decimal import Decimal
from enum import Enum
from typing import Optional

from sqlalchemy import String, DateTime, ForeignKey, Text, Index
from sqlalchemy.orm import Mapped, mapped_column, relationship

from groweasy.database import Base
from groweasy.db_types import JSONType, UUIDType, Money


class PayoutStatus(str, Enum):
    """
    Payout lifecycle:
        pending -> processing -> completed | failed
        pending -> failed (rejected by admin)
    """
    PENDING = "pending"
    PROCESSING = "processing"
    COMPLETED = "completed"
    FAILED = "failed"


class PayoutRequester(str, Enum):
    SELLER = "seller"
    SCHEDULER = "scheduler"


class Payout(Base):
    """Transfer of withdrawable seller earnings to a bank account."""
    __tablename__ = "payouts"
    __table_args__ = (
        Index('ix_payouts_seller_status', 'seller_id', 'status'),
    )

    id: Mapped[uuid.UUID] = mapped_column(
        UUIDType(as_uuid=True),
        primary_key=True,
        default=uuid.uuid4
    )
    seller_id: Mapped[uuid.UUID] = mapped_column(
        UUIDType(as_uuid=True),
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False
    )
    amount: Mapped[Decimal] = mapped_column(Money, nullable=False)
    status: Mapped[str] = mapped_column(String(20), default=PayoutStatus.PENDING.value, nullable=False)

    # Copy of the seller's bank details at request time
    bank_details: Mapped[dict] = mapped_column(JSONType, nullable=False)

    razorpay_payout_id: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    failure_reason: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    processed_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)
    requested_by: Mapped[str] = mapped_column(String(20), default=PayoutRequester.SELLER.value, nullable=False)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        nullable=False
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
        nullable=False
    )

    seller: Mapped["User"] = relationship("User", lazy="selectin")

    def __repr__(self) -> str:
        return f"<Payout(seller_id='{self.seller_id}', amount={self.amount}, status='{self.status}')>"
