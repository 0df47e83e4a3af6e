"""Admin payout processing through RazorpayX."""
from typing import Annotated, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Query, Request, status

from groweasy.api.deps import DB, AdminUser, record_admin_action
from groweasy.core.exceptions import PaymentGatewayError
from groweasy.schemas.base import page_info
from groweasy.schemas.wallet import (
    PayoutResponse,
    PayoutListResponse,
    PayoutRejectRequest,
)
from groweasy.services.payout_gateway import PayoutClient, get_payout_client
from groweasy.services.payout_service import PayoutService

admin_router = APIRouter(prefix="/payouts", tags=["Admin Payouts"])


@admin_router.get("", response_model=PayoutListResponse)
async def list_payouts(
    db: DB,
    admin: AdminUser,
    status: Optional[str] = None,
    search: Optional[str] = None,
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
):
    payouts, total = await PayoutService(db).list_payouts(
        status=status, search=search, page=page, limit=limit
    )
    return PayoutListResponse(
        items=[PayoutResponse.model_validate(p) for p in payouts],
        pagination=page_info(page, limit, total),
    )


@admin_router.post("/{payout_id}/process", response_model=PayoutResponse)
async def process_payout(
    payout_id: UUID,
    request: Request,
    db: DB,
    admin: AdminUser,
    client: Annotated[PayoutClient, Depends(get_payout_client)],
):
    """
    Send a pending payout to the seller's bank account.

    A gateway failure marks the payout failed and refunds the wallet before
    answering 502.
    """
    try:
        payout = await PayoutService(db).process(payout_id, client)
    except PaymentGatewayError as e:
        await record_admin_action(
            db, request, admin, "PROCESS_PAYOUT", "payout", payout_id,
            {"result": "failed", "reason": e.message},
        )
        # Keep the failed state; the error response would otherwise roll it back
        await db.commit()
        raise HTTPException(
            status_code=status.HTTP_502_BAD_GATEWAY,
            detail="Failed to process payout",
        )

    await record_admin_action(
        db, request, admin, "PROCESS_PAYOUT", "payout", payout.id,
        {"result": "completed", "amount": float(payout.amount), "razorpay_payout_id": payout.razorpay_payout_id},
    )
    return payout


@admin_router.post("/{payout_id}/reject", response_model=PayoutResponse)
async def reject_payout(
    payout_id: UUID,
    data: PayoutRejectRequest,
    request: Request,
    db: DB,
    admin: AdminUser,
):
    payout = await PayoutService(db).reject(payout_id, data.reason)
    await record_admin_action(
        db, request, admin, "REJECT_PAYOUT", "payout", payout.id,
        {"amount": float(payout.amount), "reason": data.reason},
    )
    return payout
