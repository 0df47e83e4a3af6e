"""
Admin back office: seller approval, users, dashboard, analytics, platform
settings, audit trail and inbound form submissions.
"""
from typing import Optional
from uuid import UUID

from fastapi import APIRouter, Query, Request

from groweasy.api.deps import DB, AdminUser, record_admin_action
from groweasy.jobs.scheduler import reschedule_payouts
from groweasy.models.support import ContactMessage, Feedback
from groweasy.models.user import UserRole
from groweasy.schemas.audit import AuditLogResponse, AuditLogListResponse
from groweasy.schemas.base import page_info
from groweasy.schemas.settings import AdminSettingsResponse, AdminSettingsUpdate
from groweasy.schemas.support import (
    ContactMessageResponse,
    ContactMessageListResponse,
    FeedbackResponse,
    FeedbackListResponse,
)
from groweasy.schemas.user import (
    SellerResponse,
    SellerListResponse,
    SellerRejectRequest,
    UserResponse,
    UserListResponse,
    UserStatusUpdate,
)
from groweasy.services.audit_service import AuditService
from groweasy.services.dashboard_service import DashboardService
from groweasy.services.seller_service import SellerService
from groweasy.services.settings_service import SettingsService
from groweasy.services.support_service import SupportService

router = APIRouter(tags=["Admin"])


# ==================== Sellers ====================

@router.get("/sellers", response_model=SellerListResponse)
async def list_sellers(
    db: DB,
    admin: AdminUser,
    status: Optional[str] = None,
    search: Optional[str] = None,
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
):
    sellers, total = await SellerService(db).list_users(
        role=UserRole.SELLER.value, status=status, search=search, page=page, limit=limit
    )
    return SellerListResponse(
        items=[SellerResponse.model_validate(s) for s in sellers],
        pagination=page_info(page, limit, total),
    )


@router.put("/sellers/{seller_id}/approve", response_model=SellerResponse)
async def approve_seller(seller_id: UUID, request: Request, db: DB, admin: AdminUser):
    seller = await SellerService(db).approve(seller_id)
    await record_admin_action(db, request, admin, "APPROVE_SELLER", "user", seller.id, {"email": seller.email})
    return seller


@router.put("/sellers/{seller_id}/reject", response_model=SellerResponse)
async def reject_seller(
    seller_id: UUID,
    request: Request,
    db: DB,
    admin: AdminUser,
    data: Optional[SellerRejectRequest] = None,
):
    reason = data.reason if data else None
    seller = await SellerService(db).reject(seller_id, reason)
    await record_admin_action(
        db, request, admin, "REJECT_SELLER", "user", seller.id,
        {"email": seller.email, "reason": reason},
    )
    return seller


# ==================== Users ====================

@router.get("/users", response_model=UserListResponse)
async def list_users(
    db: DB,
    admin: AdminUser,
    role: Optional[str] = None,
    status: Optional[str] = None,
    search: Optional[str] = None,
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
):
    users, total = await SellerService(db).list_users(
        role=role, status=status, search=search, page=page, limit=limit
    )
    return UserListResponse(
        items=[UserResponse.model_validate(u) for u in users],
        pagination=page_info(page, limit, total),
    )


@router.put("/users/{user_id}/status", response_model=UserResponse)
async def update_user_status(
    user_id: UUID,
    data: UserStatusUpdate,
    request: Request,
    db: DB,
    admin: AdminUser,
):
    user, previous = await SellerService(db).set_status(user_id, data.status)
    await record_admin_action(
        db, request, admin, "UPDATE_USER_STATUS", "user", user.id,
        {"from": previous, "to": user.status},
    )
    return user


# ==================== Dashboard & Analytics ====================

@router.get("/dashboard")
async def admin_dashboard(db: DB, admin: AdminUser):
    return await DashboardService(db).admin_dashboard()


@router.get("/analytics")
async def admin_analytics(db: DB, admin: AdminUser):
    return await DashboardService(db).analytics()


# ==================== Settings ====================

@router.get("/settings", response_model=AdminSettingsResponse)
async def get_settings(db: DB, admin: AdminUser):
    """Effective settings; the gateway secret is never returned."""
    return AdminSettingsResponse.model_validate(await SettingsService(db).get_all())


@router.put("/settings", response_model=AdminSettingsResponse)
async def update_settings(data: AdminSettingsUpdate, request: Request, db: DB, admin: AdminUser):
    changes = {
        section: values.model_dump(mode="json", exclude_unset=True)
        for section, values in (
            ("general", data.general),
            ("payment", data.payment),
            ("features", data.features),
        )
        if values is not None
    }
    updated = await SettingsService(db).update(changes, admin_id=admin.id)
    await record_admin_action(db, request, admin, "UPDATE_SETTINGS", "settings", None, changes)
    if "payout_schedule" in changes.get("payment", {}):
        reschedule_payouts(updated["payment"]["payout_schedule"])
    return AdminSettingsResponse.model_validate(updated)


# ==================== Audit Log ====================

@router.get("/audit-logs", response_model=AuditLogListResponse)
async def list_audit_logs(
    db: DB,
    admin: AdminUser,
    action: Optional[str] = None,
    target: Optional[str] = None,
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
):
    logs, total = await AuditService(db).list_logs(action=action, target=target, page=page, limit=limit)
    return AuditLogListResponse(
        items=[AuditLogResponse.model_validate(log) for log in logs],
        pagination=page_info(page, limit, total),
    )


# ==================== Form Submissions ====================

@router.get("/contact-messages", response_model=ContactMessageListResponse)
async def list_contact_messages(
    db: DB,
    admin: AdminUser,
    status: Optional[str] = None,
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
):
    messages, total = await SupportService(db).list_submissions(
        ContactMessage, status=status, page=page, limit=limit
    )
    return ContactMessageListResponse(
        items=[ContactMessageResponse.model_validate(m) for m in messages],
        pagination=page_info(page, limit, total),
    )


@router.get("/feedback", response_model=FeedbackListResponse)
async def list_feedback(
    db: DB,
    admin: AdminUser,
    status: Optional[str] = None,
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
):
    entries, total = await SupportService(db).list_submissions(
        Feedback, status=status, page=page, limit=limit
    )
    return FeedbackListResponse(
        items=[FeedbackResponse.model_validate(f) for f in entries],
        pagination=page_info(page, limit, total),
    )
