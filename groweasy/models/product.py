import uuid
from datetime import datetime, timezone
from decimal import Decimal
from enum import Enum
from typing import Optional

from sqlalchemy import String, Boolean, DateTime, ForeignKey, Integer, Text, Numeric, Index
from sqlalchemy.orm import Mapped, mapped_column

from groweasy.database import Base
from groweasy.db_types import JSONType, UUIDType, Money


class ProductStatus(str, Enum):
    """Product status enumeration. Only ACTIVE products are shown on the storefront."""
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"
    ACTIVE = "active"
    INACTIVE = "inactive"


class Product(Base):
    """
    Catalog product.

    Admin-curated products have no seller_id; sellers get them listed through
    approved enquiries. Products created from a seller's own enquiry carry the
    seller_id of the owner.
    """
    __tablename__ = "products"
    __table_args__ = (
        Index('ix_products_status_category', 'status', 'category'),
        Index('ix_products_seller_status', 'seller_id', 'status'),
    )

    id: Mapped[uuid.UUID] = mapped_column(
        UUIDType(as_uuid=True),
        primary_key=True,
        default=uuid.uuid4
    )

    # Basic Info
    name: Mapped[str] = mapped_column(String(200), nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False)
    short_description: Mapped[Optional[str]] = mapped_column(String(500), nullable=True)
    sku: Mapped[str] = mapped_column(String(100), unique=True, nullable=False, index=True)

    # Pricing & stock
    price: Mapped[Decimal] = mapped_column(Money, nullable=False)
    compare_price: Mapped[Optional[Decimal]] = mapped_column(Money, nullable=True)
    stock: Mapped[int] = mapped_column(Integer, default=0, nullable=False)

    # Classification
    category: Mapped[str] = mapped_column(String(100), nullable=False, index=True)
    subcategory: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    tags: Mapped[list] = mapped_column(JSONType, default=list)
    images: Mapped[list] = mapped_column(JSONType, default=list)
    specifications: Mapped[dict] = mapped_column(JSONType, default=dict)

    # Affiliate commission paid to sellers promoting this product
    affiliate_percentage: Mapped[Decimal] = mapped_column(
        Numeric(5, 2), default=5, nullable=False,
        comment="0-50 percent of item value"
    )

    # Ownership
    seller_id: Mapped[Optional[uuid.UUID]] = mapped_column(
        UUIDType(as_uuid=True),
        ForeignKey("users.id", ondelete="SET NULL"),
        nullable=True,
        index=True
    )

    # Status
    status: Mapped[str] = mapped_column(String(20), default=ProductStatus.PENDING.value, nullable=False)
    featured: Mapped[bool] = mapped_column(Boolean, default=False)

    # SEO
    seo_title: Mapped[Optional[str]] = mapped_column(String(60), nullable=True)
    seo_description: Mapped[Optional[str]] = mapped_column(String(160), nullable=True)

    # Shipping
    weight: Mapped[Optional[Decimal]] = mapped_column(Numeric(10, 3), nullable=True)
    dimensions: Mapped[Optional[dict]] = mapped_column(JSONType, nullable=True, comment="length, width, height")

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
    def is_active(self) -> bool:
        return self.status == ProductStatus.ACTIVE.value

    def __repr__(self) -> str:
        return f"<Product(sku='{self.sku}', name='{self.name}')>"
