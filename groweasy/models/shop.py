import uuid
from datetime import datetime, timezone
from decimal import Decimal
from typing import Optional

from sqlalchemy import String, Boolean, DateTime, ForeignKey, Integer
from sqlalchemy.orm import Mapped, mapped_column

from groweasy.database import Base
from groweasy.db_types import JSONType, UUIDType, Money


DEFAULT_SHOP_CUSTOMIZATION = {
    "primaryColor": "#3B82F6",
    "secondaryColor": "#1F2937",
    "theme": "light",
}


def default_customization() -> dict:
    return dict(DEFAULT_SHOP_CUSTOMIZATION)


class SellerShop(Base):
    """Seller's public storefront page. One shop per seller."""
    __tablename__ = "seller_shops"

    id: Mapped[uuid.UUID] = mapped_column(
        UUIDType(as_uuid=True),
        primary_key=True,
        default=uuid.uuid4
    )
    seller_id: Mapped[uuid.UUID] = mapped_column(
        UUIDType(as_uuid=True),
        ForeignKey("users.id", ondelete="CASCADE"),
        unique=True,
        nullable=False
    )

    shop_name: Mapped[str] = mapped_column(String(100), nullable=False)
    shop_description: Mapped[Optional[str]] = mapped_column(String(1000), nullable=True)
    logo: Mapped[Optional[str]] = mapped_column(String(500), nullable=True)
    banner: Mapped[Optional[str]] = mapped_column(String(500), nullable=True)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)

    # Product ids featured in the shop
    product_ids: Mapped[list] = mapped_column(JSONType, default=list)
    customization: Mapped[dict] = mapped_column(JSONType, default=default_customization)

    # Analytics
    total_visits: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    total_orders: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    total_revenue: Mapped[Decimal] = mapped_column(Money, default=0, nullable=False)

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

    def __repr__(self) -> str:
        return f"<SellerShop(shop_name='{self.shop_name}')>"
