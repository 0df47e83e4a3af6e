import uuid
from datetime import datetime, timezone
from decimal import Decimal
from typing import Optional

from sqlalchemy import String, Boolean, DateTime, ForeignKey, Integer, Numeric, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from groweasy.database import Base
from groweasy.db_types import JSONType, UUIDType, Money


class AffiliateLink(Base):
    """
    Tracked referral link tied to a seller and product.

    commission_rate is frozen from the product's affiliate_percentage when the
    link is created, so later catalog changes do not alter existing links.
    """
    __tablename__ = "affiliate_links"
    __table_args__ = (
        UniqueConstraint('seller_id', 'product_id', name='uq_affiliate_links_seller_product'),
    )

    id: Mapped[uuid.UUID] = mapped_column(
        UUIDType(as_uuid=True),
        primary_key=True,
        default=uuid.uuid4
    )
    affiliate_code: Mapped[str] = mapped_column(String(50), unique=True, nullable=False, index=True)

    seller_id: Mapped[uuid.UUID] = mapped_column(
        UUIDType(as_uuid=True),
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True
    )
    product_id: Mapped[uuid.UUID] = mapped_column(
        UUIDType(as_uuid=True),
        ForeignKey("products.id", ondelete="CASCADE"),
        nullable=False
    )

    # Counters
    clicks: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    conversions: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    earnings: Mapped[Decimal] = mapped_column(Money, default=0, nullable=False)

    commission_rate: Mapped[Decimal] = mapped_column(Numeric(5, 2), nullable=False)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)
    # "metadata" is reserved on declarative classes
    extra_data: Mapped[Optional[dict]] = mapped_column("metadata", JSONType, nullable=True)

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

    product: Mapped["Product"] = relationship("Product", lazy="selectin")

    @property
    def conversion_rate(self) -> float:
        if not self.clicks:
            return 0.0
        return round(self.conversions / self.clicks * 100, 2)

    def __repr__(self) -> str:
        return f"<AffiliateLink(code='{self.affiliate_code}', clicks={self.clicks})>"
