"""
Affiliate links: creation, click tracking and conversion credit.
"""
import logging
from decimal import Decimal
from typing import Optional, List, Tuple
import uuid

from sqlalchemy import select, func, and_
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from groweasy.config import settings
from groweasy.core.exceptions import ConflictError, NotFoundError
from groweasy.core.utils import generate_affiliate_code, round_money, to_decimal
from groweasy.models.affiliate import AffiliateLink
from groweasy.models.notification import NotificationType
from groweasy.models.order import Order
from groweasy.models.product import Product, ProductStatus
from groweasy.services.notification_service import NotificationService
from groweasy.services.wallet_service import WalletService

logger = logging.getLogger(__name__)


def affiliate_url(code: str, product_id: uuid.UUID) -> str:
    return f"{settings.SITE_URL.rstrip('/')}/products/{product_id}?ref={code}"


class AffiliateService:

    def __init__(self, db: AsyncSession):
        self.db = db

    async def get_by_code(self, code: str) -> Optional[AffiliateLink]:
        result = await self.db.execute(
            select(AffiliateLink).where(AffiliateLink.affiliate_code == code)
        )
        return result.scalar_one_or_none()

    async def list_links(
        self,
        seller_id: uuid.UUID,
        product_id: Optional[uuid.UUID] = None,
        page: int = 1,
        limit: int = 10,
    ) -> Tuple[List[AffiliateLink], int]:
        query = select(AffiliateLink).where(AffiliateLink.seller_id == seller_id)
        if product_id:
            query = query.where(AffiliateLink.product_id == product_id)

        total = (await self.db.execute(
            select(func.count()).select_from(query.subquery())
        )).scalar() or 0

        result = await self.db.execute(
            query.order_by(AffiliateLink.created_at.desc())
            .offset((page - 1) * limit)
            .limit(limit)
        )
        return list(result.scalars().all()), total

    async def create_link(self, seller_id: uuid.UUID, product_id: uuid.UUID) -> AffiliateLink:
        product = (await self.db.execute(
            select(Product).where(
                and_(Product.id == product_id, Product.status == ProductStatus.ACTIVE.value)
            )
        )).scalar_one_or_none()
        if not product:
            raise NotFoundError("Product not found or not active")

        existing = (await self.db.execute(
            select(AffiliateLink.id).where(
                and_(AffiliateLink.seller_id == seller_id, AffiliateLink.product_id == product_id)
            )
        )).scalar_one_or_none()
        if existing:
            raise ConflictError("Affiliate link already exists for this product")

        link = AffiliateLink(
            affiliate_code=generate_affiliate_code(seller_id, product_id),
            seller_id=seller_id,
            product_id=product_id,
            clicks=0,
            conversions=0,
            earnings=Decimal("0"),
            commission_rate=product.affiliate_percentage,
            is_active=True,
            extra_data={"product_name": product.name},
        )
        self.db.add(link)
        try:
            await self.db.flush()
        except IntegrityError as e:
            raise ConflictError("Affiliate link already exists for this product") from e

        await self.db.refresh(link, attribute_names=["product"])
        logger.info(f"Affiliate link {link.affiliate_code} created for seller {seller_id}")
        return link

    async def record_click(self, code: str) -> AffiliateLink:
        link = await self.get_by_code(code)
        if not link or not link.is_active:
            raise NotFoundError("Affiliate link not found")
        link.clicks = (link.clicks or 0) + 1
        await self.db.flush()
        return link

    async def record_conversion(self, order: Order) -> Decimal:
        """
        Credit the link owner for the items of the linked product in a paid
        order. The credit stays pending until the order is delivered.
        """
        if not order.affiliate_link_id:
            return Decimal("0")

        link = (await self.db.execute(
            select(AffiliateLink).where(AffiliateLink.id == order.affiliate_link_id)
        )).scalar_one_or_none()
        if not link:
            return Decimal("0")

        rate = to_decimal(link.commission_rate)
        commission = round_money(sum(
            (to_decimal(item.price) * item.quantity * rate / Decimal(100)
             for item in order.items if item.product_id == link.product_id),
            Decimal("0"),
        ))

        link.conversions = (link.conversions or 0) + 1
        link.earnings = round_money(to_decimal(link.earnings) + commission)

        if commission > 0:
            await WalletService(self.db).add_pending_credit(
                link.seller_id,
                commission,
                f"Affiliate commission for order {order.order_number}",
                order_id=order.id,
                affiliate_link_id=link.id,
            )
            await NotificationService(self.db).notify(
                link.seller_id,
                NotificationType.AFFILIATE_CONVERSION,
                "Affiliate sale",
                f"Your affiliate link earned ₹{commission} on order {order.order_number}.",
                {"order_id": str(order.id), "affiliate_code": link.affiliate_code, "commission": float(commission)},
            )

        await self.db.flush()
        logger.info(f"Affiliate conversion on {link.affiliate_code}: order {order.order_number}, commission {commission}")
        return commission

    async def seller_totals(self, seller_id: uuid.UUID) -> dict:
        row = (await self.db.execute(
            select(
                func.count(AffiliateLink.id),
                func.coalesce(func.sum(AffiliateLink.clicks), 0),
                func.coalesce(func.sum(AffiliateLink.conversions), 0),
                func.coalesce(func.sum(AffiliateLink.earnings), 0),
            ).where(AffiliateLink.seller_id == seller_id)
        )).one()
        links, clicks, conversions, earnings = row
        clicks = int(clicks)
        conversions = int(conversions)
        return {
            "total_links": links or 0,
            "total_clicks": clicks,
            "total_conversions": conversions,
            "total_earnings": float(round_money(earnings or 0)),
            "conversion_rate": round(conversions / clicks * 100, 2) if clicks else 0.0,
        }
