"""
Seller workspace: dashboard, product enquiries, affiliate links, shop,
wallet and payouts, orders, notifications and settings.

Every route requires an approved seller account.
"""
from typing import Optional
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Query, status

from groweasy.api.deps import DB, SellerUser, require_feature
from groweasy.schemas.affiliate import (
    AffiliateLinkCreate,
    AffiliateLinkResponse,
    AffiliateLinkListResponse,
)
from groweasy.schemas.base import MessageResponse, page_info
from groweasy.schemas.enquiry import EnquiryCreate, EnquiryResponse, EnquiryListResponse
from groweasy.schemas.notification import (
    NotificationResponse,
    NotificationListResponse,
    NotificationUpdate,
)
from groweasy.schemas.order import OrderResponse, OrderListResponse, OrderSource
from groweasy.schemas.product import ProductResponse, ProductListResponse
from groweasy.schemas.settings import SellerSettings
from groweasy.schemas.shop import ShopUpdate, ShopResponse, ShopStatsResponse
from groweasy.schemas.wallet import (
    WalletResponse,
    SellerWalletResponse,
    BankDetailsUpdate,
    PayoutCreate,
    PayoutResponse,
    PayoutListResponse,
)
from groweasy.services.affiliate_service import AffiliateService, affiliate_url
from groweasy.services.dashboard_service import DashboardService
from groweasy.services.enquiry_service import EnquiryService
from groweasy.services.notification_service import NotificationService
from groweasy.services.order_service import OrderService
from groweasy.services.payout_service import PayoutService
from groweasy.services.seller_service import SellerService
from groweasy.services.settings_service import SettingsService
from groweasy.services.shop_service import ShopService
from groweasy.services.wallet_service import WalletService

router = APIRouter(prefix="/seller", tags=["Seller"])


def _link_response(link) -> AffiliateLinkResponse:
    response = AffiliateLinkResponse.model_validate(link)
    response.url = affiliate_url(link.affiliate_code, link.product_id)
    return response


# ==================== Dashboard ====================

@router.get("/dashboard")
async def seller_dashboard(db: DB, seller: SellerUser):
    return await DashboardService(db).seller_dashboard(seller.id)


# ==================== Products & Enquiries ====================

@router.get("/available-products", response_model=ProductListResponse)
async def available_products(
    db: DB,
    seller: SellerUser,
    category: Optional[str] = None,
    search: Optional[str] = None,
    page: int = Query(1, ge=1),
    limit: int = Query(12, ge=1, le=100),
):
    """Admin-curated products this seller has not enquired about yet."""
    products, total = await EnquiryService(db).available_products(
        seller.id, category=category, search=search, page=page, limit=limit
    )
    return ProductListResponse(
        items=[ProductResponse.model_validate(p) for p in products],
        pagination=page_info(page, limit, total),
    )


@router.get("/products", response_model=ProductListResponse)
async def seller_products(
    db: DB,
    seller: SellerUser,
    page: int = Query(1, ge=1),
    limit: int = Query(12, ge=1, le=100),
):
    products, total = await EnquiryService(db).seller_products(seller.id, page=page, limit=limit)
    return ProductListResponse(
        items=[ProductResponse.model_validate(p) for p in products],
        pagination=page_info(page, limit, total),
    )


@router.get("/enquiries", response_model=EnquiryListResponse)
async def list_enquiries(
    db: DB,
    seller: SellerUser,
    status: Optional[str] = None,
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
):
    enquiries, total = await EnquiryService(db).list_enquiries(
        seller_id=seller.id, status=status, page=page, limit=limit
    )
    return EnquiryListResponse(
        items=[EnquiryResponse.model_validate(e) for e in enquiries],
        pagination=page_info(page, limit, total),
    )


@router.post("/enquiries", response_model=EnquiryResponse, status_code=status.HTTP_201_CREATED)
async def create_enquiry(data: EnquiryCreate, db: DB, seller: SellerUser):
    return await EnquiryService(db).create(seller.id, data)


# ==================== Affiliate Links ====================

@router.get("/affiliate-links", response_model=AffiliateLinkListResponse)
async def list_affiliate_links(
    db: DB,
    seller: SellerUser,
    product_id: Optional[UUID] = None,
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
):
    links, total = await AffiliateService(db).list_links(
        seller.id, product_id=product_id, page=page, limit=limit
    )
    return AffiliateLinkListResponse(
        items=[_link_response(link) for link in links],
        pagination=page_info(page, limit, total),
    )


@router.post(
    "/affiliate-links",
    response_model=AffiliateLinkResponse,
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(require_feature("enable_affiliate_program"))],
)
async def create_affiliate_link(data: AffiliateLinkCreate, db: DB, seller: SellerUser):
    link = await AffiliateService(db).create_link(seller.id, data.product_id)
    return _link_response(link)


# ==================== Shop ====================

@router.get("/shop", response_model=ShopResponse)
async def get_shop(db: DB, seller: SellerUser):
    return await ShopService(db).get_for_seller(seller)


@router.put("/shop", response_model=ShopResponse)
async def update_shop(data: ShopUpdate, db: DB, seller: SellerUser):
    return await ShopService(db).update_shop(seller, data)


@router.get("/shop/stats", response_model=ShopStatsResponse)
async def shop_stats(db: DB, seller: SellerUser):
    return ShopStatsResponse(**await ShopService(db).stats(seller))


# ==================== Wallet & Payouts ====================

@router.get("/wallet", response_model=SellerWalletResponse)
async def get_wallet(db: DB, seller: SellerUser):
    """Wallet with recent transactions, pending earnings and bank details."""
    wallets = WalletService(db)
    wallet = await wallets.get_or_create(seller.id)
    await db.refresh(wallet, attribute_names=["transactions"])

    response = WalletResponse.model_validate(wallet)
    response.transactions = response.transactions[:20]
    response.pending_earnings = await wallets.pending_earnings(wallet)
    return SellerWalletResponse(
        wallet=response,
        bank_details=seller.bank_details,
        minimum_payout_amount=await SettingsService(db).minimum_payout_amount(),
    )


@router.put("/wallet", response_model=MessageResponse)
async def update_bank_details(data: BankDetailsUpdate, db: DB, seller: SellerUser):
    await SellerService(db).update_bank_details(seller, data.bank_details)
    return MessageResponse(message="Bank details updated successfully")


@router.get("/payouts", response_model=PayoutListResponse)
async def list_payouts(
    db: DB,
    seller: SellerUser,
    status: Optional[str] = None,
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
):
    payouts, total = await PayoutService(db).list_payouts(
        seller_id=seller.id, status=status, page=page, limit=limit
    )
    return PayoutListResponse(
        items=[PayoutResponse.model_validate(p) for p in payouts],
        pagination=page_info(page, limit, total),
    )


@router.post("/payouts", response_model=PayoutResponse, status_code=status.HTTP_201_CREATED)
async def request_payout(data: PayoutCreate, db: DB, seller: SellerUser):
    """Hold `amount` from the wallet balance until an admin processes the payout."""
    return await PayoutService(db).request_payout(seller, data.amount)


# ==================== Orders ====================

@router.get("/orders", response_model=OrderListResponse)
async def seller_orders(
    db: DB,
    seller: SellerUser,
    status: Optional[str] = None,
    source: Optional[OrderSource] = None,
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
):
    orders, total = await OrderService(db).seller_orders(
        seller.id, status=status, source=source, page=page, limit=limit
    )
    return OrderListResponse(
        items=[OrderResponse.model_validate(o) for o in orders],
        pagination=page_info(page, limit, total),
    )


# ==================== Notifications ====================

@router.get("/notifications", response_model=NotificationListResponse)
async def list_notifications(
    db: DB,
    seller: SellerUser,
    type: Optional[str] = None,
    unread_only: bool = False,
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
):
    notifications, total, unread_count = await NotificationService(db).list_for_user(
        seller.id, page=page, limit=limit, notification_type=type, unread_only=unread_only
    )
    return NotificationListResponse(
        items=[NotificationResponse.model_validate(n) for n in notifications],
        pagination=page_info(page, limit, total),
        unread_count=unread_count,
    )


@router.put("/notifications", response_model=MessageResponse)
async def update_notifications(data: NotificationUpdate, db: DB, seller: SellerUser):
    service = NotificationService(db)
    if data.mark_all_as_read:
        count = await service.mark_all_as_read(seller.id)
        return MessageResponse(message=f"{count} notifications marked as read")
    if data.notification_id:
        await service.mark_as_read(seller.id, data.notification_id)
        return MessageResponse(message="Notification marked as read")
    raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Invalid request")


@router.delete("/notifications/{notification_id}", response_model=MessageResponse)
async def delete_notification(notification_id: UUID, db: DB, seller: SellerUser):
    await NotificationService(db).delete(seller.id, notification_id)
    return MessageResponse(message="Notification deleted successfully")


# ==================== Settings ====================

@router.get("/settings", response_model=SellerSettings)
async def get_settings(seller: SellerUser):
    return SellerService.get_settings(seller)


@router.put("/settings", response_model=SellerSettings)
async def update_settings(data: SellerSettings, db: DB, seller: SellerUser):
    return await SellerService(db).update_settings(seller, data)
