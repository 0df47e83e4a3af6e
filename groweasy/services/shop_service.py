"""Seller shops: the seller's own storefront page and its counters."""
import logging
from decimal import Decimal
from typing import List, Tuple
import uuid

from sqlalchemy import select, func, and_, update
from sqlalchemy.ext.asyncio import AsyncSession

from groweasy.core.exceptions import NotFoundError
from groweasy.core.utils import round_money, to_decimal
from groweasy.models.enquiry import ProductEnquiry, EnquiryStatus
from groweasy.models.product import Product, ProductStatus
from groweasy.models.shop import SellerShop, default_customization
from groweasy.models.user import User
from groweasy.schemas.shop import ShopUpdate
from groweasy.services.affiliate_service import AffiliateService

logger = logging.getLogger(__name__)


class ShopService:

    def __init__(self, db: AsyncSession):
        self.db = db

    async def get_for_seller(self, seller: User) -> SellerShop:
        """Return the seller's shop, creating the default one on first access."""
        shop = (await self.db.execute(
            select(SellerShop).where(SellerShop.seller_id == seller.id)
        )).scalar_one_or_none()
        if shop is None:
            shop = SellerShop(
                seller_id=seller.id,
                shop_name=f"{seller.first_name}'s Shop",
                shop_description="Welcome to my shop!",
                is_active=True,
                product_ids=[],
                customization=default_customization(),
                total_visits=0,
                total_orders=0,
                total_revenue=Decimal("0"),
            )
            self.db.add(shop)
            await self.db.flush()
            logger.info(f"Created default shop for seller {seller.id}")
        return shop

    async def update_shop(self, seller: User, data: ShopUpdate) -> SellerShop:
        shop = await self.get_for_seller(seller)
        changes = data.model_dump(exclude_unset=True, exclude={"customization"})

        if "product_ids" in changes and changes["product_ids"] is not None:
            changes["product_ids"] = [str(pid) for pid in changes["product_ids"]]

        for key, value in changes.items():
            if key in ("shop_name", "is_active") and value is None:
                continue
            setattr(shop, key, value)

        if data.customization is not None:
            shop.customization = {
                **(shop.customization or default_customization()),
                **data.customization.model_dump(exclude_none=True),
            }

        await self.db.flush()
        return shop

    async def get_public(self, shop_id: uuid.UUID) -> Tuple[SellerShop, User]:
        row = (await self.db.execute(
            select(SellerShop, User)
            .join(User, User.id == SellerShop.seller_id)
            .where(and_(SellerShop.id == shop_id, SellerShop.is_active == True))  # noqa: E712
        )).first()
        if not row:
            raise NotFoundError("Shop not found")
        return row[0], row[1]

    async def get_shop_products(
        self,
        shop_id: uuid.UUID,
        page: int = 1,
        limit: int = 12,
    ) -> Tuple[List[Product], int]:
        shop, _ = await self.get_public(shop_id)
        ids = []
        for pid in shop.product_ids or []:
            try:
                ids.append(uuid.UUID(str(pid)))
            except ValueError:
                logger.warning(f"Shop {shop.id} lists an invalid product id: {pid}")
        if not ids:
            return [], 0

        query = select(Product).where(
            and_(Product.id.in_(ids), Product.status == ProductStatus.ACTIVE.value)
        )
        total = (await self.db.execute(
            select(func.count()).select_from(query.subquery())
        )).scalar() or 0
        result = await self.db.execute(
            query.order_by(Product.created_at.desc())
            .offset((page - 1) * limit)
            .limit(limit)
        )
        return list(result.scalars().all()), total

    async def record_visit(self, shop_id: uuid.UUID) -> int:
        shop, _ = await self.get_public(shop_id)
        shop.total_visits = (shop.total_visits or 0) + 1
        await self.db.flush()
        return shop.total_visits

    async def record_order(self, shop_id: uuid.UUID, order_total: Decimal) -> None:
        result = await self.db.execute(
            update(SellerShop)
            .where(SellerShop.id == shop_id)
            .values(
                total_orders=SellerShop.total_orders + 1,
                total_revenue=SellerShop.total_revenue + round_money(order_total),
            )
            .execution_options(synchronize_session=False)
        )
        if not result.rowcount:
            logger.warning(f"Order referenced unknown shop {shop_id}")

    async def stats(self, seller: User) -> dict:
        shop = await self.get_for_seller(seller)
        approved = (await self.db.execute(
            select(func.count(ProductEnquiry.id)).where(
                and_(
                    ProductEnquiry.seller_id == seller.id,
                    ProductEnquiry.status == EnquiryStatus.APPROVED.value,
                )
            )
        )).scalar() or 0
        affiliate = await AffiliateService(self.db).seller_totals(seller.id)

        return {
            "total_products": approved,
            "total_clicks": affiliate["total_clicks"],
            "total_conversions": affiliate["total_conversions"],
            "total_earnings": affiliate["total_earnings"],
            "conversion_rate": affiliate["conversion_rate"],
            "total_visits": shop.total_visits or 0,
            "total_orders": shop.total_orders or 0,
            "total_revenue": float(to_decimal(shop.total_revenue)),
        }
