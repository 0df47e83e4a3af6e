"""Public seller shop pages and affiliate link click tracking."""
from uuid import UUID

from fastapi import APIRouter, Query

from groweasy.api.deps import DB
from groweasy.schemas.affiliate import AffiliateClickResponse
from groweasy.schemas.base import MessageResponse, page_info
from groweasy.schemas.product import ProductResponse, ProductListResponse
from groweasy.schemas.shop import ShopResponse, PublicShopResponse
from groweasy.services.affiliate_service import AffiliateService, affiliate_url
from groweasy.services.shop_service import ShopService

router = APIRouter(tags=["Shops"])


@router.get("/shop/{shop_id}", response_model=PublicShopResponse)
async def get_shop(shop_id: UUID, db: DB):
    shop, seller = await ShopService(db).get_public(shop_id)
    business_info = seller.business_info or {}
    return PublicShopResponse(
        shop=ShopResponse.model_validate(shop),
        seller_name=seller.full_name,
        business_name=business_info.get("business_name"),
    )


@router.get("/shop/{shop_id}/products", response_model=ProductListResponse)
async def get_shop_products(
    shop_id: UUID,
    db: DB,
    page: int = Query(1, ge=1),
    limit: int = Query(12, ge=1, le=100),
):
    products, total = await ShopService(db).get_shop_products(shop_id, page=page, limit=limit)
    return ProductListResponse(
        items=[ProductResponse.model_validate(p) for p in products],
        pagination=page_info(page, limit, total),
    )


@router.post("/shop/{shop_id}/visit", response_model=MessageResponse)
async def record_shop_visit(shop_id: UUID, db: DB):
    await ShopService(db).record_visit(shop_id)
    return MessageResponse(message="Visit recorded")


@router.get("/affiliate/{code}", response_model=AffiliateClickResponse)
async def follow_affiliate_link(code: str, db: DB):
    """Count a click on an affiliate link and return where to send the shopper."""
    link = await AffiliateService(db).record_click(code)
    return AffiliateClickResponse(
        affiliate_code=link.affiliate_code,
        product_id=link.product_id,
        redirect_url=affiliate_url(link.affiliate_code, link.product_id),
    )
