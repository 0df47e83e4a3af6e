"""
Seller product enquiries.

A seller asks to list an admin-curated product (product_id set) or proposes
a new one. Approval either links the existing product or creates a new
seller-owned listing from the enquiry.
"""
import logging
from datetime import datetime, timezone
from typing import Optional, List, Tuple
import uuid

from sqlalchemy import select, func, and_, or_
from sqlalchemy.ext.asyncio import AsyncSession

from groweasy.core.exceptions import ConflictError, NotFoundError, InvalidStateError
from groweasy.models.enquiry import ProductEnquiry, EnquiryStatus
from groweasy.models.notification import NotificationType
from groweasy.models.product import Product, ProductStatus
from groweasy.schemas.enquiry import EnquiryCreate, EnquiryReviewRequest
from groweasy.schemas.product import ProductCreate
from groweasy.services.notification_service import NotificationService
from groweasy.services.product_service import ProductService

logger = logging.getLogger(__name__)


class EnquiryService:

    def __init__(self, db: AsyncSession):
        self.db = db
        self.notifications = NotificationService(db)

    async def get(self, enquiry_id: uuid.UUID) -> ProductEnquiry:
        enquiry = (await self.db.execute(
            select(ProductEnquiry).where(ProductEnquiry.id == enquiry_id)
        )).scalar_one_or_none()
        if not enquiry:
            raise NotFoundError("Enquiry not found")
        return enquiry

    async def list_enquiries(
        self,
        seller_id: Optional[uuid.UUID] = None,
        status: Optional[str] = None,
        page: int = 1,
        limit: int = 10,
    ) -> Tuple[List[ProductEnquiry], int]:
        query = select(ProductEnquiry)
        if seller_id:
            query = query.where(ProductEnquiry.seller_id == seller_id)
        if status:
            query = query.where(ProductEnquiry.status == status)

        total = (await self.db.execute(
            select(func.count()).select_from(query.subquery())
        )).scalar() or 0

        result = await self.db.execute(
            query.order_by(ProductEnquiry.created_at.desc())
            .offset((page - 1) * limit)
            .limit(limit)
        )
        return list(result.scalars().all()), total

    async def available_products(
        self,
        seller_id: uuid.UUID,
        category: Optional[str] = None,
        search: Optional[str] = None,
        page: int = 1,
        limit: int = 12,
    ) -> Tuple[List[Product], int]:
        """Active admin-curated products the seller has not enquired about yet."""
        already_requested = select(ProductEnquiry.product_id).where(
            and_(ProductEnquiry.seller_id == seller_id, ProductEnquiry.product_id.is_not(None))
        )
        query = select(Product).where(
            and_(
                Product.status == ProductStatus.ACTIVE.value,
                Product.seller_id.is_(None),
                Product.id.not_in(already_requested),
            )
        )
        if category:
            query = query.where(Product.category == category)
        if search:
            pattern = f"%{search}%"
            query = query.where(or_(Product.name.ilike(pattern), Product.description.ilike(pattern)))

        total = (await self.db.execute(
            select(func.count()).select_from(query.subquery())
        )).scalar() or 0

        result = await self.db.execute(
            query.order_by(Product.created_at.desc())
            .offset((page - 1) * limit)
            .limit(limit)
        )
        return list(result.scalars().all()), total

    async def seller_products(
        self,
        seller_id: uuid.UUID,
        page: int = 1,
        limit: int = 12,
    ) -> Tuple[List[Product], int]:
        """Products unlocked for the seller by approved enquiries."""
        approved_ids = select(ProductEnquiry.approved_product_id).where(
            and_(
                ProductEnquiry.seller_id == seller_id,
                ProductEnquiry.status == EnquiryStatus.APPROVED.value,
                ProductEnquiry.approved_product_id.is_not(None),
            )
        )
        query = select(Product).where(Product.id.in_(approved_ids))

        total = (await self.db.execute(
            select(func.count()).select_from(query.subquery())
        )).scalar() or 0

        result = await self.db.execute(
            query.order_by(Product.created_at.desc())
            .offset((page - 1) * limit)
            .limit(limit)
        )
        return list(result.scalars().all()), total

    async def create(self, seller_id: uuid.UUID, data: EnquiryCreate) -> ProductEnquiry:
        if data.product_id:
            product = (await self.db.execute(
                select(Product).where(Product.id == data.product_id)
            )).scalar_one_or_none()
            if not product:
                raise NotFoundError("Product not found")

            duplicate = (await self.db.execute(
                select(ProductEnquiry.id).where(
                    and_(
                        ProductEnquiry.seller_id == seller_id,
                        ProductEnquiry.product_id == data.product_id,
                    )
                )
            )).scalar_one_or_none()
            if duplicate:
                raise ConflictError("You have already submitted an enquiry for this product")

        enquiry = ProductEnquiry(
            seller_id=seller_id,
            **data.model_dump(),
            status=EnquiryStatus.PENDING.value,
        )
        self.db.add(enquiry)
        await self.db.flush()

        await self.notifications.notify(
            seller_id,
            NotificationType.ENQUIRY_SUBMITTED,
            "Enquiry submitted",
            f"Your enquiry for '{enquiry.product_name}' has been submitted for review.",
            {"enquiry_id": str(enquiry.id)},
        )
        logger.info(f"Enquiry {enquiry.id} submitted by seller {seller_id}")
        return enquiry

    async def approve(
        self,
        enquiry_id: uuid.UUID,
        review: EnquiryReviewRequest,
        admin_id: uuid.UUID,
    ) -> ProductEnquiry:
        enquiry = await self.get(enquiry_id)
        if enquiry.status != EnquiryStatus.PENDING.value:
            raise InvalidStateError("Enquiry has already been reviewed")

        if enquiry.product_id:
            approved_product_id = enquiry.product_id
        else:
            product = await ProductService(self.db).create_product(
                ProductCreate(
                    name=enquiry.product_name,
                    description=enquiry.description,
                    price=enquiry.suggested_price,
                    stock=review.stock,
                    sku=f"SE-{enquiry.id.hex[:12].upper()}",
                    category=enquiry.category,
                    subcategory=enquiry.subcategory,
                    images=enquiry.images or [],
                    specifications=enquiry.specifications or {},
                    **({"affiliate_percentage": review.affiliate_percentage}
                       if review.affiliate_percentage is not None else {}),
                ),
                seller_id=enquiry.seller_id,
                status=ProductStatus.ACTIVE,
            )
            approved_product_id = product.id

        enquiry.status = EnquiryStatus.APPROVED.value
        enquiry.approved_product_id = approved_product_id
        enquiry.admin_feedback = review.admin_feedback
        enquiry.reviewed_by = admin_id
        enquiry.reviewed_at = datetime.now(timezone.utc)
        await self.db.flush()

        await self.notifications.notify(
            enquiry.seller_id,
            NotificationType.ENQUIRY_APPROVED,
            "Enquiry approved",
            f"Your enquiry for '{enquiry.product_name}' has been approved.",
            {"enquiry_id": str(enquiry.id), "product_id": str(approved_product_id)},
        )
        logger.info(f"Enquiry {enquiry.id} approved -> product {approved_product_id}")
        return enquiry

    async def reject(
        self,
        enquiry_id: uuid.UUID,
        review: EnquiryReviewRequest,
        admin_id: uuid.UUID,
    ) -> ProductEnquiry:
        enquiry = await self.get(enquiry_id)
        if enquiry.status != EnquiryStatus.PENDING.value:
            raise InvalidStateError("Enquiry has already been reviewed")

        enquiry.status = EnquiryStatus.REJECTED.value
        enquiry.admin_feedback = review.admin_feedback
        enquiry.reviewed_by = admin_id
        enquiry.reviewed_at = datetime.now(timezone.utc)
        await self.db.flush()

        await self.notifications.notify(
            enquiry.seller_id,
            NotificationType.ENQUIRY_REJECTED,
            "Enquiry rejected",
            f"Your enquiry for '{enquiry.product_name}' was not approved."
            + (f" Feedback: {review.admin_feedback}" if review.admin_feedback else ""),
            {"enquiry_id": str(enquiry.id)},
        )
        logger.info(f"Enquiry {enquiry.id} rejected")
        return enquiry
