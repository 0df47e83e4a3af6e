"""API endpoints for coupon administration and checkout validation."""
from typing import Optional, Literal
from uuid import UUID

from fastapi import APIRouter, Depends, Query, Request, status

from groweasy.api.deps import DB, AdminUser, record_admin_action, require_feature
from groweasy.schemas.base import MessageResponse, page_info
from groweasy.schemas.coupon import (
    CouponCreate,
    CouponUpdate,
    CouponResponse,
    CouponListResponse,
    CouponValidateRequest,
    CouponValidateResponse,
)
from groweasy.services.coupon_service import CouponService

router = APIRouter(prefix="/coupons", tags=["Coupons"])
admin_router = APIRouter(prefix="/coupons", tags=["Admin Coupons"])


@router.post(
    "/validate",
    response_model=CouponValidateResponse,
    dependencies=[Depends(require_feature("enable_coupons"))],
)
async def validate_coupon(data: CouponValidateRequest, db: DB):
    """
    Validate a coupon code against a cart.

    Always 200: `valid` tells the storefront whether to apply it and
    `message` explains why not.
    """
    check = await CouponService(db).validate(
        data.code,
        data.cart_total,
        product_ids=data.product_ids,
        categories=data.categories,
        customer_id=data.customer_id,
    )
    return CouponValidateResponse(
        valid=check.valid,
        code=data.code.upper(),
        message=check.message,
        discount_amount=check.discount_amount,
        discount_type=check.coupon.discount_type if check.valid else None,
        discount_value=check.coupon.discount_value if check.valid else None,
    )


# ==================== Admin ====================

@admin_router.get("", response_model=CouponListResponse)
async def list_coupons(
    db: DB,
    admin: AdminUser,
    status: Optional[Literal["active", "expired"]] = None,
    search: Optional[str] = None,
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
):
    coupons, total = await CouponService(db).list_coupons(
        status=status, search=search, page=page, limit=limit
    )
    return CouponListResponse(
        items=[CouponResponse.model_validate(c) for c in coupons],
        pagination=page_info(page, limit, total),
    )


@admin_router.post("", response_model=CouponResponse, status_code=status.HTTP_201_CREATED)
async def create_coupon(data: CouponCreate, request: Request, db: DB, admin: AdminUser):
    coupon = await CouponService(db).create(data, admin_id=admin.id)
    await record_admin_action(db, request, admin, "CREATE_COUPON", "coupon", coupon.id, {"code": coupon.code})
    return coupon


@admin_router.get("/{coupon_id}", response_model=CouponResponse)
async def get_coupon(coupon_id: UUID, db: DB, admin: AdminUser):
    return await CouponService(db).get(coupon_id)


@admin_router.put("/{coupon_id}", response_model=CouponResponse)
async def update_coupon(
    coupon_id: UUID,
    data: CouponUpdate,
    request: Request,
    db: DB,
    admin: AdminUser,
):
    coupon = await CouponService(db).update(coupon_id, data)
    await record_admin_action(
        db, request, admin, "UPDATE_COUPON", "coupon", coupon.id,
        {"code": coupon.code, "fields": sorted(data.model_dump(exclude_unset=True))},
    )
    return coupon


@admin_router.delete("/{coupon_id}", response_model=MessageResponse)
async def delete_coupon(coupon_id: UUID, request: Request, db: DB, admin: AdminUser):
    coupon = await CouponService(db).delete(coupon_id)
    await record_admin_action(db, request, admin, "DELETE_COUPON", "coupon", coupon_id, {"code": coupon.code})
    return MessageResponse(message="Coupon deleted successfully")
