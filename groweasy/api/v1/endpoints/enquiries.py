"""Admin review of seller product enquiries."""
from typing import Optional
from uuid import UUID

from fastapi import APIRouter, Query, Request

from groweasy.api.deps import DB, AdminUser, record_admin_action
from groweasy.schemas.base import page_info
from groweasy.schemas.enquiry import EnquiryResponse, EnquiryListResponse, EnquiryReviewRequest
from groweasy.services.enquiry_service import EnquiryService

admin_router = APIRouter(prefix="/enquiries", tags=["Admin Enquiries"])


@admin_router.get("", response_model=EnquiryListResponse)
async def list_enquiries(
    db: DB,
    admin: AdminUser,
    status: Optional[str] = None,
    seller_id: Optional[UUID] = None,
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
):
    enquiries, total = await EnquiryService(db).list_enquiries(
        seller_id=seller_id, status=status, page=page, limit=limit
    )
    return EnquiryListResponse(
        items=[EnquiryResponse.model_validate(e) for e in enquiries],
        pagination=page_info(page, limit, total),
    )


@admin_router.put("/{enquiry_id}/approve", response_model=EnquiryResponse)
async def approve_enquiry(
    enquiry_id: UUID,
    request: Request,
    db: DB,
    admin: AdminUser,
    data: Optional[EnquiryReviewRequest] = None,
):
    """
    Approve a pending enquiry.

    An enquiry without an admin product creates a seller-owned product from
    the enquiry's data.
    """
    enquiry = await EnquiryService(db).approve(enquiry_id, data or EnquiryReviewRequest(), admin.id)
    await record_admin_action(
        db, request, admin, "APPROVE_ENQUIRY", "enquiry", enquiry.id,
        {"product_name": enquiry.product_name, "approved_product_id": str(enquiry.approved_product_id)},
    )
    return enquiry


@admin_router.put("/{enquiry_id}/reject", response_model=EnquiryResponse)
async def reject_enquiry(
    enquiry_id: UUID,
    request: Request,
    db: DB,
    admin: AdminUser,
    data: Optional[EnquiryReviewRequest] = None,
):
    review = data or EnquiryReviewRequest()
    enquiry = await EnquiryService(db).reject(enquiry_id, review, admin.id)
    await record_admin_action(
        db, request, admin, "REJECT_ENQUIRY", "enquiry", enquiry.id,
        {"product_name": enquiry.product_name, "admin_feedback": review.admin_feedback},
    )
    return enquiry
