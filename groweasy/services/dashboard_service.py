"""
Dashboard and analytics aggregates for admins and sellers.

Revenue figures only count delivered orders.
"""
from datetime import datetime, timedelta, timezone
from typing import Dict, Any, Optional
import uuid

from sqlalchemy import select, func, and_
from sqlalchemy.ext.asyncio import AsyncSession

from groweasy.core.utils import round_money, to_decimal
from groweasy.models.enquiry import ProductEnquiry, EnquiryStatus
from groweasy.models.order import Order, OrderItem, OrderStatus
from groweasy.models.payout import Payout, PayoutStatus
from groweasy.models.product import Product
from groweasy.models.user import User, UserRole, UserStatus
from groweasy.schemas.order import OrderResponse
from groweasy.schemas.user import SellerResponse
from groweasy.services.affiliate_service import AffiliateService
from groweasy.services.coupon_service import CouponService
from groweasy.services.wallet_service import WalletService

DELIVERED = OrderStatus.DELIVERED.value


def _money(value) -> float:
    return float(round_money(value or 0))


class DashboardService:

    def __init__(self, db: AsyncSession):
        self.db = db

    async def _count(self, model, *conditions) -> int:
        stmt = select(func.count()).select_from(model)
        if conditions:
            stmt = stmt.where(and_(*conditions))
        return (await self.db.execute(stmt)).scalar() or 0

    async def _sales_since(self, since: Optional[datetime]) -> Dict[str, Any]:
        stmt = select(func.coalesce(func.sum(Order.total), 0), func.count(Order.id)).where(
            Order.status == DELIVERED
        )
        if since is not None:
            stmt = stmt.where(Order.created_at >= since)
        total, count = (await self.db.execute(stmt)).one()
        return {"total": _money(total), "count": count or 0}

    # ==================== ADMIN ====================

    async def admin_dashboard(self) -> Dict[str, Any]:
        recent_orders = (await self.db.execute(
            select(Order).order_by(Order.created_at.desc()).limit(5)
        )).scalars().all()
        recent_sellers = (await self.db.execute(
            select(User).where(User.role == UserRole.SELLER.value)
            .order_by(User.created_at.desc()).limit(5)
        )).scalars().all()

        return {
            "total_users": await self._count(User, User.role == UserRole.CUSTOMER.value),
            "total_sellers": await self._count(
                User, User.role == UserRole.SELLER.value, User.status == UserStatus.APPROVED.value
            ),
            "pending_sellers": await self._count(
                User, User.role == UserRole.SELLER.value, User.status == UserStatus.PENDING.value
            ),
            "total_products": await self._count(Product),
            "total_orders": await self._count(Order),
            "total_revenue": (await self._sales_since(None))["total"],
            "recent_orders": [
                OrderResponse.model_validate(o).model_dump(mode="json") for o in recent_orders
            ],
            "recent_sellers": [
                SellerResponse.model_validate(s).model_dump(mode="json") for s in recent_sellers
            ],
        }

    async def analytics(self) -> Dict[str, Any]:
        now = datetime.now(timezone.utc)
        start_of_day = now.replace(hour=0, minute=0, second=0, microsecond=0)
        start_of_week = start_of_day - timedelta(days=start_of_day.weekday())
        start_of_month = start_of_day.replace(day=1)

        total = await self._sales_since(None)
        monthly = await self._sales_since(start_of_month)
        weekly = await self._sales_since(start_of_week)
        daily = await self._sales_since(start_of_day)

        by_role = (await self.db.execute(
            select(User.role, func.count(User.id)).group_by(User.role)
        )).all()
        by_category = (await self.db.execute(
            select(Product.category, func.count(Product.id))
            .group_by(Product.category)
            .order_by(func.count(Product.id).desc())
        )).all()

        sold = func.sum(OrderItem.quantity).label("total_sold")
        top_selling = (await self.db.execute(
            select(OrderItem.product_id, OrderItem.name, sold)
            .join(Order, Order.id == OrderItem.order_id)
            .where(Order.status.not_in([OrderStatus.CANCELLED.value, OrderStatus.REFUNDED.value]))
            .group_by(OrderItem.product_id, OrderItem.name)
            .order_by(sold.desc())
            .limit(10)
        )).all()

        payout_sums = dict((await self.db.execute(
            select(Payout.status, func.coalesce(func.sum(Payout.amount), 0))
            .group_by(Payout.status)
        )).all())

        return {
            "sales": {
                "total": total["total"],
                "total_orders": total["count"],
                "monthly": monthly["total"],
                "monthly_orders": monthly["count"],
                "weekly": weekly["total"],
                "weekly_orders": weekly["count"],
                "daily": daily["total"],
                "daily_orders": daily["count"],
            },
            "users": {
                "total": await self._count(User),
                "new_this_month": await self._count(User, User.created_at >= start_of_month),
                "by_role": [{"role": role, "count": count} for role, count in by_role],
            },
            "products": {
                "total": await self._count(Product),
                "by_category": [{"category": c, "count": n} for c, n in by_category],
                "top_selling": [
                    {"product_id": str(pid) if pid else None, "name": name, "total_sold": int(qty or 0)}
                    for pid, name, qty in top_selling
                ],
            },
            "coupons": await CouponService(self.db).stats(),
            "payouts": {
                "pending": _money(
                    to_decimal(payout_sums.get(PayoutStatus.PENDING.value, 0))
                    + to_decimal(payout_sums.get(PayoutStatus.PROCESSING.value, 0))
                ),
                "completed": _money(payout_sums.get(PayoutStatus.COMPLETED.value, 0)),
            },
        }

    # ==================== SELLER ====================

    async def seller_dashboard(self, seller_id: uuid.UUID) -> Dict[str, Any]:
        seller_order_ids = select(OrderItem.order_id).where(OrderItem.seller_id == seller_id)

        total_orders = (await self.db.execute(
            select(func.count(Order.id)).where(Order.id.in_(seller_order_ids))
        )).scalar() or 0

        recent_orders = (await self.db.execute(
            select(Order).where(Order.id.in_(seller_order_ids))
            .order_by(Order.created_at.desc()).limit(5)
        )).scalars().all()

        earnings = (await self.db.execute(
            select(func.coalesce(func.sum(OrderItem.price * OrderItem.quantity), 0))
            .select_from(OrderItem)
            .join(Order, Order.id == OrderItem.order_id)
            .where(and_(OrderItem.seller_id == seller_id, Order.status == DELIVERED))
        )).scalar()

        sold = func.sum(OrderItem.quantity).label("total_sold")
        top_products = (await self.db.execute(
            select(
                OrderItem.product_id,
                OrderItem.name,
                sold,
                func.sum(OrderItem.price * OrderItem.quantity).label("revenue"),
            )
            .where(OrderItem.seller_id == seller_id)
            .group_by(OrderItem.product_id, OrderItem.name)
            .order_by(sold.desc())
            .limit(5)
        )).all()

        wallet = await WalletService(self.db).get_or_create(seller_id)
        affiliate = await AffiliateService(self.db).seller_totals(seller_id)

        return {
            "total_products": await self._count(
                ProductEnquiry,
                ProductEnquiry.seller_id == seller_id,
                ProductEnquiry.status == EnquiryStatus.APPROVED.value,
            ),
            "pending_products": await self._count(
                ProductEnquiry,
                ProductEnquiry.seller_id == seller_id,
                ProductEnquiry.status == EnquiryStatus.PENDING.value,
            ),
            "total_orders": total_orders,
            "total_earnings": _money(earnings),
            "wallet_balance": _money(wallet.balance),
            "recent_orders": [
                OrderResponse.model_validate(o).model_dump(mode="json") for o in recent_orders
            ],
            "top_products": [
                {
                    "product_id": str(pid) if pid else None,
                    "name": name,
                    "total_sold": int(qty or 0),
                    "revenue": _money(revenue),
                }
                for pid, name, qty, revenue in top_products
            ],
            "affiliate_stats": affiliate,
        }
