"""
Order Service - checkout, payment verification and fulfilment.

Flow:
1. create_order: price the cart from the catalog, apply coupon, tax and
   shipping, open a Razorpay order
2. verify_payment: check the checkout signature, mark paid, move stock,
   record coupon/shop/affiliate effects and queue seller earnings
3. update_order (admin): status changes; delivery releases earnings,
   cancellation/refund voids them and restocks
"""
import logging
from collections import defaultdict
from datetime import datetime, timezone
from decimal import Decimal
from typing import Optional, List, Tuple, Dict
import uuid

from fastapi.concurrency import run_in_threadpool
from sqlalchemy import select, func, or_, and_, exists
from sqlalchemy.ext.asyncio import AsyncSession

from groweasy.config import settings
from groweasy.core.exceptions import (
    MarketplaceError,
    InvalidStateError,
    NotFoundError,
    PermissionDeniedError,
)
from groweasy.core.utils import generate_order_number, percent_of, round_money, to_decimal
from groweasy.models.affiliate import AffiliateLink
from groweasy.models.notification import NotificationType
from groweasy.models.order import Order, OrderItem, OrderStatus, PaymentStatus
from groweasy.models.product import Product, ProductStatus
from groweasy.models.shop import SellerShop
from groweasy.models.user import User
from groweasy.schemas.order import OrderCreate, OrderUpdate
from groweasy.services.affiliate_service import AffiliateService
from groweasy.services.coupon_service import CouponService
from groweasy.services.notification_service import NotificationService
from groweasy.services.payment_service import PaymentService
from groweasy.services.settings_service import SettingsService
from groweasy.services.shop_service import ShopService
from groweasy.services.wallet_service import WalletService

logger = logging.getLogger(__name__)

CLOSED_STATUSES = (OrderStatus.CANCELLED.value, OrderStatus.REFUNDED.value)


def calculate_totals(subtotal: Decimal, discount: Decimal) -> Dict[str, Decimal]:
    """
    tax is charged on the discounted subtotal; shipping is free at or above
    the threshold (judged on the undiscounted subtotal).
    """
    subtotal = round_money(subtotal)
    discount = round_money(min(to_decimal(discount), subtotal))
    tax = percent_of(subtotal - discount, settings.TAX_RATE)
    if subtotal >= to_decimal(settings.FREE_SHIPPING_THRESHOLD):
        shipping = Decimal("0.00")
    else:
        shipping = round_money(settings.SHIPPING_FEE)
    total = round_money(subtotal - discount + tax + shipping)
    return {
        "subtotal": subtotal,
        "discount": discount,
        "tax": tax,
        "shipping": shipping,
        "total": total,
    }


def seller_share(amount: Decimal) -> Decimal:
    """Part of a sale paid to the seller after platform commission."""
    return percent_of(amount, Decimal(100) - to_decimal(settings.PLATFORM_COMMISSION_RATE))


class OrderService:

    def __init__(self, db: AsyncSession):
        self.db = db
        self.wallets = WalletService(db)
        self.notifications = NotificationService(db)

    async def get(self, order_id: uuid.UUID) -> Order:
        order = (await self.db.execute(
            select(Order).where(Order.id == order_id)
        )).scalar_one_or_none()
        if not order:
            raise NotFoundError("Order not found")
        return order

    async def get_for_user(self, order_id: uuid.UUID, user: User) -> Order:
        order = await self.get(order_id)
        if not user.is_admin and order.customer_id != user.id:
            raise PermissionDeniedError("Not authorized to view this order")
        return order

    # ==================== CHECKOUT ====================

    async def _resolve_affiliate(self, code: Optional[str]) -> Optional[AffiliateLink]:
        if not code:
            return None
        if not await SettingsService(self.db).feature_enabled("enable_affiliate_program"):
            return None
        link = await AffiliateService(self.db).get_by_code(code)
        if not link or not link.is_active:
            logger.warning(f"Checkout with unknown or inactive affiliate code {code}")
            return None
        return link

    async def _resolve_shop(self, shop_id: Optional[uuid.UUID]) -> Optional[SellerShop]:
        if not shop_id:
            return None
        shop = (await self.db.execute(
            select(SellerShop).where(
                and_(SellerShop.id == shop_id, SellerShop.is_active == True)  # noqa: E712
            )
        )).scalar_one_or_none()
        if not shop:
            logger.warning(f"Checkout referenced unknown or inactive shop {shop_id}")
        return shop

    async def create_order(
        self,
        data: OrderCreate,
        payment: PaymentService,
        customer: Optional[User] = None,
    ) -> Tuple[Order, dict]:
        """Returns (order, razorpay order entity)."""
        quantities: Dict[uuid.UUID, int] = defaultdict(int)
        for item in data.items:
            quantities[item.product_id] += item.quantity

        products = {
            p.id: p for p in (await self.db.execute(
                select(Product).where(Product.id.in_(list(quantities)))
            )).scalars().all()
        }

        shop = await self._resolve_shop(data.shop_id)
        link = await self._resolve_affiliate(data.affiliate_code)

        items: List[OrderItem] = []
        subtotal = Decimal("0")
        for product_id, quantity in quantities.items():
            product = products.get(product_id)
            if not product:
                raise NotFoundError("Product not found")
            if product.status != ProductStatus.ACTIVE.value:
                raise MarketplaceError(f"Product {product.name} is not available")
            if product.stock < quantity:
                raise MarketplaceError(f"Product {product.name} is out of stock")

            price = round_money(product.price)
            subtotal += price * quantity
            items.append(OrderItem(
                product_id=product.id,
                seller_id=product.seller_id or (shop.seller_id if shop else None),
                name=product.name,
                price=price,
                quantity=quantity,
                affiliate_percentage=product.affiliate_percentage,
            ))

        discount = Decimal("0")
        coupon_code = None
        if data.coupon_code:
            if not await SettingsService(self.db).feature_enabled("enable_coupons"):
                raise MarketplaceError("Coupons are currently disabled")
            check = await CouponService(self.db).validate(
                data.coupon_code,
                subtotal,
                product_ids=list(quantities),
                categories=sorted({p.category for p in products.values()}),
                customer_id=customer.id if customer else None,
            )
            if not check.valid:
                raise MarketplaceError(check.message)
            discount = check.discount_amount
            coupon_code = check.coupon.code

        totals = calculate_totals(subtotal, discount)

        order = Order(
            order_number=generate_order_number(),
            customer_id=customer.id if customer else None,
            shop_id=shop.id if shop else None,
            affiliate_link_id=link.id if link else None,
            coupon_code=coupon_code,
            items=items,
            status=OrderStatus.PENDING.value,
            payment_status=PaymentStatus.PENDING.value,
            payment_method=data.payment_method or "razorpay",
            shipping_address=data.shipping_address.model_dump(),
            billing_address=data.billing_address.model_dump() if data.billing_address else None,
            notes=data.notes,
            **totals,
        )
        self.db.add(order)
        await self.db.flush()

        gateway_order = await run_in_threadpool(
            payment.create_order,
            totals["total"],
            order.order_number,
            settings.CURRENCY,
            {"order_id": str(order.id)},
        )
        order.razorpay_order_id = gateway_order["id"]
        await self.db.flush()

        logger.info(f"Order {order.order_number} created: total {order.total}, {len(items)} line(s)")
        return order, gateway_order

    async def verify_payment(
        self,
        order_id: uuid.UUID,
        razorpay_order_id: str,
        razorpay_payment_id: str,
        razorpay_signature: str,
        payment: PaymentService,
    ) -> Order:
        if not payment.verify_signature(razorpay_order_id, razorpay_payment_id, razorpay_signature):
            raise MarketplaceError("Invalid payment signature")

        order = await self.get(order_id)
        if order.is_paid:
            return order
        if order.status in CLOSED_STATUSES or order.earnings_settled:
            raise InvalidStateError(f"Order is {order.status} and can no longer be paid")

        if order.razorpay_order_id and order.razorpay_order_id != razorpay_order_id:
            raise MarketplaceError("Payment does not belong to this order")

        order.payment_status = PaymentStatus.COMPLETED.value
        order.status = OrderStatus.CONFIRMED.value
        order.razorpay_payment_id = razorpay_payment_id
        order.paid_at = datetime.now(timezone.utc)

        await self._adjust_stock(order, -1)

        if order.coupon_code:
            await CouponService(self.db).record_usage(
                order.coupon_code, order.id, to_decimal(order.discount), order.customer_id
            )
        if order.shop_id:
            await ShopService(self.db).record_order(order.shop_id, to_decimal(order.total))
        if order.affiliate_link_id:
            await AffiliateService(self.db).record_conversion(order)

        await self._credit_sellers(order)
        await self.db.flush()

        logger.info(f"Order {order.order_number} paid ({razorpay_payment_id})")
        return order

    async def _adjust_stock(self, order: Order, direction: int) -> None:
        for item in order.items:
            if not item.product_id:
                continue
            product = (await self.db.execute(
                select(Product).where(Product.id == item.product_id).with_for_update()
            )).scalar_one_or_none()
            if product is None:
                continue
            new_stock = product.stock + direction * item.quantity
            if new_stock < 0:
                logger.warning(
                    f"Oversold {product.sku}: order {order.order_number} needs {item.quantity}, "
                    f"only {product.stock} left"
                )
                new_stock = 0
            product.stock = new_stock

    async def _credit_sellers(self, order: Order) -> None:
        per_seller: Dict[uuid.UUID, Decimal] = defaultdict(Decimal)
        for item in order.items:
            if item.seller_id:
                per_seller[item.seller_id] += item.line_total

        for seller_id, gross in per_seller.items():
            share = seller_share(gross)
            await self.wallets.add_pending_credit(
                seller_id,
                share,
                f"Earnings from order {order.order_number}",
                order_id=order.id,
            )
            await self.notifications.notify(
                seller_id,
                NotificationType.NEW_ORDER,
                "New order",
                f"You have a new order {order.order_number}.",
                {"order_id": str(order.id), "order_number": order.order_number, "earnings": float(share)},
            )

    # ==================== FULFILMENT ====================

    async def update_order(self, order_id: uuid.UUID, data: OrderUpdate) -> Tuple[Order, Optional[str]]:
        """Returns (order, previous status if it changed)."""
        order = await self.get(order_id)
        previous = None

        if data.tracking_number is not None:
            order.tracking_number = data.tracking_number

        if data.status is not None and data.status.value != order.status:
            previous = order.status
            order.status = data.status.value

            if not order.earnings_settled:
                if order.status == OrderStatus.DELIVERED.value:
                    released = await self.wallets.complete_order_credits(order.id)
                    order.earnings_settled = True
                    for seller_id in {i.seller_id for i in order.items if i.seller_id}:
                        await self.notifications.notify(
                            seller_id,
                            NotificationType.ORDER_DELIVERED,
                            "Order delivered",
                            f"Order {order.order_number} was delivered. Earnings are now in your wallet.",
                            {"order_id": str(order.id)},
                        )
                    logger.info(f"Order {order.order_number} delivered; released {released}")
                elif order.status in CLOSED_STATUSES:
                    await self.wallets.fail_order_credits(order.id)
                    if order.is_paid:
                        await self._adjust_stock(order, 1)
                    order.earnings_settled = True
                    logger.info(f"Order {order.order_number} {order.status}; earnings voided")

            if order.status == OrderStatus.REFUNDED.value and order.is_paid:
                order.payment_status = PaymentStatus.REFUNDED.value

        await self.db.flush()
        return order, previous

    # ==================== LISTING ====================

    async def _paginate(self, query, page: int, limit: int) -> Tuple[List[Order], int]:
        total = (await self.db.execute(
            select(func.count()).select_from(query.subquery())
        )).scalar() or 0
        result = await self.db.execute(
            query.order_by(Order.created_at.desc())
            .offset((page - 1) * limit)
            .limit(limit)
        )
        return list(result.scalars().all()), total

    async def list_orders(
        self,
        status: Optional[str] = None,
        search: Optional[str] = None,
        customer_id: Optional[uuid.UUID] = None,
        page: int = 1,
        limit: int = 10,
    ) -> Tuple[List[Order], int]:
        query = select(Order)
        if customer_id:
            query = query.where(Order.customer_id == customer_id)
        if status:
            query = query.where(Order.status == status)
        if search:
            pattern = f"%{search}%"
            query = query.where(
                or_(
                    Order.order_number.ilike(pattern),
                    Order.shipping_address["first_name"].as_string().ilike(pattern),
                    Order.shipping_address["last_name"].as_string().ilike(pattern),
                )
            )
        return await self._paginate(query, page, limit)

    async def seller_orders(
        self,
        seller_id: uuid.UUID,
        status: Optional[str] = None,
        source: Optional[str] = None,
        page: int = 1,
        limit: int = 10,
    ) -> Tuple[List[Order], int]:
        """Orders containing at least one of the seller's items."""
        has_item = exists().where(
            and_(OrderItem.order_id == Order.id, OrderItem.seller_id == seller_id)
        )
        query = select(Order).where(has_item)
        if status:
            query = query.where(Order.status == status)
        if source == "affiliate":
            query = query.where(Order.affiliate_link_id.is_not(None))
        elif source == "shop":
            query = query.where(Order.affiliate_link_id.is_(None))
        return await self._paginate(query, page, limit)
