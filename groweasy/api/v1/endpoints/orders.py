"""
API endpoints for checkout, Razorpay payment verification and order
management.
"""
from typing import Annotated, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Query, Request, status

from groweasy.api.deps import DB, CurrentUser, OptionalUser, AdminUser, record_admin_action
from groweasy.config import settings
from groweasy.schemas.base import page_info
from groweasy.schemas.order import (
    OrderCreate,
    OrderCreateResponse,
    PaymentVerifyRequest,
    PaymentVerifyResponse,
    OrderResponse,
    OrderListResponse,
    OrderUpdate,
)
from groweasy.services.order_service import OrderService
from groweasy.services.payment_service import PaymentService, get_payment_service

router = APIRouter(prefix="/orders", tags=["Orders"])
admin_router = APIRouter(prefix="/orders", tags=["Admin Orders"])

Payments = Annotated[PaymentService, Depends(get_payment_service)]


# ==================== Checkout ====================

@router.post("/create", response_model=OrderCreateResponse, status_code=status.HTTP_201_CREATED)
async def create_order(data: OrderCreate, db: DB, customer: OptionalUser, payment: Payments):
    """
    Create an order from the cart and open a Razorpay order for its total.

    The storefront passes `razorpay_order_id` and `key_id` to Razorpay
    Checkout, then posts the result to /orders/verify.
    """
    order, gateway_order = await OrderService(db).create_order(data, payment, customer)
    return OrderCreateResponse(
        order_id=order.id,
        order_number=order.order_number,
        amount=order.total,
        currency=settings.CURRENCY,
        razorpay_order_id=gateway_order["id"],
        key_id=payment.key_id,
        gateway_order=gateway_order,
    )


@router.post("/verify", response_model=PaymentVerifyResponse)
async def verify_payment(data: PaymentVerifyRequest, db: DB, payment: Payments):
    """
    Verify the Razorpay checkout signature and mark the order paid.

    Safe to call more than once for the same payment.
    """
    order = await OrderService(db).verify_payment(
        order_id=data.order_id,
        razorpay_order_id=data.razorpay_order_id,
        razorpay_payment_id=data.razorpay_payment_id,
        razorpay_signature=data.razorpay_signature,
        payment=payment,
    )
    return PaymentVerifyResponse(
        message="Payment verified successfully",
        order=OrderResponse.model_validate(order),
    )


# ==================== Customer ====================

@router.get("/my", response_model=OrderListResponse)
async def my_orders(
    db: DB,
    current_user: CurrentUser,
    status: Optional[str] = None,
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
):
    orders, total = await OrderService(db).list_orders(
        status=status, customer_id=current_user.id, page=page, limit=limit
    )
    return OrderListResponse(
        items=[OrderResponse.model_validate(o) for o in orders],
        pagination=page_info(page, limit, total),
    )


@router.get("/{order_id}", response_model=OrderResponse)
async def get_order(order_id: UUID, db: DB, current_user: CurrentUser):
    return await OrderService(db).get_for_user(order_id, current_user)


# ==================== Admin ====================

@admin_router.get("", response_model=OrderListResponse)
async def admin_list_orders(
    db: DB,
    admin: AdminUser,
    status: Optional[str] = None,
    search: Optional[str] = None,
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
):
    orders, total = await OrderService(db).list_orders(
        status=status, search=search, page=page, limit=limit
    )
    return OrderListResponse(
        items=[OrderResponse.model_validate(o) for o in orders],
        pagination=page_info(page, limit, total),
    )


@admin_router.get("/{order_id}", response_model=OrderResponse)
async def admin_get_order(order_id: UUID, db: DB, admin: AdminUser):
    return await OrderService(db).get(order_id)


@admin_router.put("/{order_id}", response_model=OrderResponse)
async def admin_update_order(
    order_id: UUID,
    data: OrderUpdate,
    request: Request,
    db: DB,
    admin: AdminUser,
):
    """Update status/tracking. Delivery releases seller earnings; cancel/refund voids them."""
    order, previous = await OrderService(db).update_order(order_id, data)
    await record_admin_action(
        db, request, admin, "UPDATE_ORDER", "order", order.id,
        {
            "order_number": order.order_number,
            "from": previous,
            "to": order.status,
            "tracking_number": data.tracking_number,
        },
    )
    return order
