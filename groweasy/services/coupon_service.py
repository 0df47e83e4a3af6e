"""
Coupon administration, checkout validation and usage tracking.
"""
import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from decimal import Decimal
from typing import Optional, List, Tuple, Iterable, Dict, Any
import uuid

from sqlalchemy import select, func, update, and_, or_
from sqlalchemy.ext.asyncio import AsyncSession

from groweasy.core.exceptions import ConflictError, NotFoundError, UnprocessableError
from groweasy.core.utils import as_utc, round_money, to_decimal
from groweasy.models.coupon import Coupon, CouponUsage, DiscountType
from groweasy.schemas.coupon import CouponCreate, CouponUpdate

logger = logging.getLogger(__name__)


def calculate_discount(coupon: Coupon, cart_total: Decimal) -> Decimal:
    """
    Percentage coupons take value% of the cart, capped at
    maximum_discount_amount. Fixed coupons never exceed the cart.
    """
    cart_total = to_decimal(cart_total)
    value = to_decimal(coupon.discount_value)

    if coupon.discount_type == DiscountType.PERCENTAGE.value:
        discount = cart_total * value / Decimal(100)
        if coupon.maximum_discount_amount is not None:
            discount = min(discount, to_decimal(coupon.maximum_discount_amount))
    else:
        discount = min(value, cart_total)

    return round_money(max(discount, Decimal("0")))


@dataclass
class CouponCheck:
    valid: bool
    message: str
    coupon: Optional[Coupon] = None
    discount_amount: Decimal = Decimal("0")


class CouponService:

    def __init__(self, db: AsyncSession):
        self.db = db

    async def get(self, coupon_id: uuid.UUID) -> Coupon:
        coupon = (await self.db.execute(
            select(Coupon).where(Coupon.id == coupon_id)
        )).scalar_one_or_none()
        if not coupon:
            raise NotFoundError("Coupon not found")
        return coupon

    async def get_by_code(self, code: str) -> Optional[Coupon]:
        result = await self.db.execute(select(Coupon).where(Coupon.code == code.strip().upper()))
        return result.scalar_one_or_none()

    # ==================== Admin CRUD ====================

    async def list_coupons(
        self,
        status: Optional[str] = None,
        search: Optional[str] = None,
        page: int = 1,
        limit: int = 10,
    ) -> Tuple[List[Coupon], int]:
        now = datetime.now(timezone.utc)
        query = select(Coupon)
        if status == "active":
            query = query.where(and_(Coupon.is_active == True, Coupon.valid_until > now))  # noqa: E712
        elif status == "expired":
            query = query.where(or_(Coupon.is_active == False, Coupon.valid_until <= now))  # noqa: E712
        if search:
            query = query.where(Coupon.code.ilike(f"%{search}%"))

        total = (await self.db.execute(
            select(func.count()).select_from(query.subquery())
        )).scalar() or 0

        result = await self.db.execute(
            query.order_by(Coupon.created_at.desc())
            .offset((page - 1) * limit)
            .limit(limit)
        )
        return list(result.scalars().all()), total

    async def create(self, data: CouponCreate, admin_id: Optional[uuid.UUID] = None) -> Coupon:
        if await self.get_by_code(data.code):
            raise ConflictError("Coupon code already exists")

        values = data.model_dump(mode="json", exclude={"valid_from", "valid_until", "discount_value",
                                                      "minimum_order_amount", "maximum_discount_amount"})
        coupon = Coupon(
            **values,
            discount_value=data.discount_value,
            minimum_order_amount=data.minimum_order_amount,
            maximum_discount_amount=data.maximum_discount_amount,
            valid_from=data.valid_from or datetime.now(timezone.utc),
            valid_until=data.valid_until,
            created_by=admin_id,
        )
        self.db.add(coupon)
        await self.db.flush()
        logger.info(f"Coupon {coupon.code} created")
        return coupon

    async def update(self, coupon_id: uuid.UUID, data: CouponUpdate) -> Coupon:
        coupon = await self.get(coupon_id)
        changes = data.model_dump(exclude_unset=True)

        new_code = changes.get("code")
        if new_code and new_code != coupon.code:
            if await self.get_by_code(new_code):
                raise ConflictError("Coupon code already exists")

        for field in ("applicable_products", "excluded_products"):
            if changes.get(field) is not None:
                changes[field] = [str(v) for v in changes[field]]
        if changes.get("discount_type") is not None:
            changes["discount_type"] = changes["discount_type"].value

        for field, value in changes.items():
            setattr(coupon, field, value)

        if (
            coupon.discount_type == DiscountType.PERCENTAGE.value
            and to_decimal(coupon.discount_value) > 100
        ):
            raise UnprocessableError("Percentage discount cannot exceed 100")
        if as_utc(coupon.valid_until) <= as_utc(coupon.valid_from):
            raise UnprocessableError("valid_until must be after valid_from")

        await self.db.flush()
        logger.info(f"Coupon {coupon.code} updated: {', '.join(changes)}")
        return coupon

    async def delete(self, coupon_id: uuid.UUID) -> Coupon:
        coupon = await self.get(coupon_id)
        await self.db.delete(coupon)
        await self.db.flush()
        logger.info(f"Coupon {coupon.code} deleted")
        return coupon

    # ==================== Checkout ====================

    async def customer_usage_count(self, coupon_id: uuid.UUID, customer_id: uuid.UUID) -> int:
        return (await self.db.execute(
            select(func.count(CouponUsage.id)).where(
                and_(CouponUsage.coupon_id == coupon_id, CouponUsage.customer_id == customer_id)
            )
        )).scalar() or 0

    async def validate(
        self,
        code: str,
        cart_total: Decimal,
        product_ids: Iterable[uuid.UUID] = (),
        categories: Iterable[str] = (),
        customer_id: Optional[uuid.UUID] = None,
    ) -> CouponCheck:
        """
        Run every coupon rule against a cart and return the first failure,
        or the computed discount.
        """
        coupon = await self.get_by_code(code)
        if not coupon or not coupon.is_active:
            return CouponCheck(False, "Invalid coupon code")

        now = datetime.now(timezone.utc)
        if now < as_utc(coupon.valid_from):
            return CouponCheck(False, "Coupon is not yet valid", coupon)
        if coupon.is_expired:
            return CouponCheck(False, "Coupon has expired", coupon)
        if coupon.usage_limit is not None and coupon.used_count >= coupon.usage_limit:
            return CouponCheck(False, "Coupon usage limit reached", coupon)

        cart_total = to_decimal(cart_total)
        minimum = to_decimal(coupon.minimum_order_amount)
        if cart_total < minimum:
            return CouponCheck(False, f"Minimum order amount of ₹{minimum} required", coupon)

        if customer_id is not None:
            used = await self.customer_usage_count(coupon.id, customer_id)
            if used >= coupon.user_usage_limit:
                return CouponCheck(False, "You have already used this coupon", coupon)

        cart_products = {str(p) for p in product_ids}
        applicable = {str(p) for p in (coupon.applicable_products or [])}
        excluded = {str(p) for p in (coupon.excluded_products or [])}
        if applicable and not (cart_products & applicable):
            return CouponCheck(False, "Coupon is not applicable to the products in your cart", coupon)
        if excluded and cart_products and cart_products <= excluded:
            return CouponCheck(False, "Coupon cannot be applied to these products", coupon)

        applicable_categories = {c.lower() for c in (coupon.applicable_categories or [])}
        if applicable_categories and not ({c.lower() for c in categories} & applicable_categories):
            return CouponCheck(False, "Coupon is not applicable to these categories", coupon)

        discount = calculate_discount(coupon, cart_total)
        return CouponCheck(True, "Coupon applied successfully", coupon, discount)

    async def record_usage(
        self,
        coupon_code: str,
        order_id: uuid.UUID,
        discount_amount: Decimal,
        customer_id: Optional[uuid.UUID] = None,
    ) -> Optional[CouponUsage]:
        coupon = await self.get_by_code(coupon_code)
        if not coupon:
            logger.warning(f"Coupon {coupon_code} vanished before usage could be recorded (order {order_id})")
            return None

        coupon.used_count = (coupon.used_count or 0) + 1
        usage = CouponUsage(
            coupon_id=coupon.id,
            customer_id=customer_id,
            order_id=order_id,
            discount_amount=round_money(discount_amount),
        )
        self.db.add(usage)
        await self.db.flush()
        return usage

    async def expire_coupons(self) -> int:
        """Deactivate active coupons past valid_until."""
        result = await self.db.execute(
            update(Coupon)
            .where(and_(Coupon.is_active == True, Coupon.valid_until < datetime.now(timezone.utc)))  # noqa: E712
            .values(is_active=False)
        )
        count = result.rowcount or 0
        if count:
            logger.info(f"Deactivated {count} expired coupons")
        return count

    async def stats(self) -> Dict[str, Any]:
        now = datetime.now(timezone.utc)
        total = (await self.db.execute(select(func.count(Coupon.id)))).scalar() or 0
        active = (await self.db.execute(
            select(func.count(Coupon.id)).where(
                and_(Coupon.is_active == True, Coupon.valid_until > now)  # noqa: E712
            )
        )).scalar() or 0
        used = (await self.db.execute(
            select(func.coalesce(func.sum(Coupon.used_count), 0))
        )).scalar() or 0
        return {"total_coupons": total, "active_coupons": active, "total_used": int(used)}
