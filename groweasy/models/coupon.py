"""
Coupon Model for the storefront checkout.

Supports percentage and fixed discounts, usage limits, and product/category
restrictions.
"""

import uuid
from datetime import datetime, timezone
from decimal import Decimal
from enum import Enum
from typing import Optional

from sqlalchemy import String, Boolean, DateTime, Integer, ForeignKey
from sqlalchemy.orm import Mapped, mapped_column

from groweasy.core.utils import as_utc
from groweasy.database import Base
from groweasy.db_types import JSONType, UUIDType, Money


class DiscountType(str, Enum):
    """Discount type enumeration."""
    PERCENTAGE = "percentage"  # e.g., 10% off
    FIXED = "fixed"  # e.g., ₹100 off


class Coupon(Base):
    """
    Coupon/Promo code created by admins.
    """
    __tablename__ = "coupons"

    id: Mapped[uuid.UUID] = mapped_column(
        UUIDType(as_uuid=True),
        primary_key=True,
        default=uuid.uuid4
    )

    # Coupon Code
    code: Mapped[str] = mapped_column(
        String(20),
        unique=True,
        nullable=False,
        index=True,
        comment="Unique coupon code, stored uppercase"
    )

    # Display Info
    name: Mapped[str] = mapped_column(String(100), nullable=False)
    description: Mapped[Optional[str]] = mapped_column(String(500), nullable=True)

    # Discount Type & Value
    discount_type: Mapped[str] = mapped_column(
        String(20),
        nullable=False,
        default=DiscountType.PERCENTAGE.value,
        comment="percentage, fixed"
    )
    discount_value: Mapped[Decimal] = mapped_column(
        Money,
        nullable=False,
        default=0,
        comment="Discount value (percentage or amount)"
    )
    maximum_discount_amount: Mapped[Optional[Decimal]] = mapped_column(
        Money,
        nullable=True,
        comment="Cap on discount for percentage type"
    )
    minimum_order_amount: Mapped[Decimal] = mapped_column(
        Money,
        nullable=False,
        default=0,
        comment="Minimum cart value to apply coupon"
    )

    # Usage Limits
    usage_limit: Mapped[Optional[int]] = mapped_column(
        Integer,
        nullable=True,
        comment="Total times this coupon can be used (null = unlimited)"
    )
    used_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    user_usage_limit: Mapped[int] = mapped_column(
        Integer,
        nullable=False,
        default=1,
        comment="Times each customer can use this coupon"
    )

    # Validity Period
    valid_from: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc)
    )
    valid_until: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        index=True,
        comment="Expiry date"
    )

    # Restrictions (stored as JSON)
    applicable_products: Mapped[list] = mapped_column(JSONType, default=list)
    applicable_categories: Mapped[list] = mapped_column(JSONType, default=list)
    excluded_products: Mapped[list] = mapped_column(JSONType, default=list)

    # Status
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)

    created_by: Mapped[Optional[uuid.UUID]] = mapped_column(
        UUIDType(as_uuid=True),
        ForeignKey("users.id", ondelete="SET NULL"),
        nullable=True
    )

    # Timestamps
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

    @property
    def is_expired(self) -> bool:
        return datetime.now(timezone.utc) > as_utc(self.valid_until)

    def __repr__(self) -> str:
        return f"<Coupon(code='{self.code}', type='{self.discount_type}', value={self.discount_value})>"


class CouponUsage(Base):
    """
    Tracks coupon usage by customers.
    """
    __tablename__ = "coupon_usage"

    id: Mapped[uuid.UUID] = mapped_column(
        UUIDType(as_uuid=True),
        primary_key=True,
        default=uuid.uuid4
    )
    coupon_id: Mapped[uuid.UUID] = mapped_column(
        UUIDType(as_uuid=True),
        ForeignKey("coupons.id", ondelete="CASCADE"),
        nullable=False,
        index=True
    )
    customer_id: Mapped[Optional[uuid.UUID]] = mapped_column(
        UUIDType(as_uuid=True),
        ForeignKey("users.id", ondelete="SET NULL"),
        nullable=True,
        index=True
    )
    order_id: Mapped[uuid.UUID] = mapped_column(
        UUIDType(as_uuid=True),
        ForeignKey("orders.id", ondelete="CASCADE"),
        nullable=False
    )
    discount_amount: Mapped[Decimal] = mapped_column(Money, nullable=False)
    used_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        nullable=False
    )

    def __repr__(self) -> str:
        return f"<CouponUsage(coupon_id='{self.coupon_id}', order_id='{self.order_id}')>"
