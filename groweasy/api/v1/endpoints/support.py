"""Public forms (contact, feedback, newsletter) and support tickets."""
from typing import Optional
from uuid import UUID

from fastapi import APIRouter, Query, Request, status
from pydantic import EmailStr

from groweasy.api.deps import DB, AdminUser, OptionalUser, record_admin_action
from groweasy.schemas.base import MessageResponse, page_info
from groweasy.schemas.support import (
    ContactCreate,
    FeedbackCreate,
    NewsletterSubscribe,
    TicketCreate,
    TicketCreateResponse,
    TicketUpdate,
    TicketResponse,
    TicketListResponse,
)
from groweasy.services.support_service import SupportService

router = APIRouter(tags=["Support"])


# ==================== Forms ====================

@router.post("/contact", response_model=MessageResponse, status_code=status.HTTP_201_CREATED)
async def submit_contact(data: ContactCreate, db: DB, user: OptionalUser):
    await SupportService(db).submit_contact(data, user_id=user.id if user else None)
    return MessageResponse(message="Message sent successfully")


@router.post("/feedback", response_model=MessageResponse, status_code=status.HTTP_201_CREATED)
async def submit_feedback(data: FeedbackCreate, db: DB, user: OptionalUser):
    await SupportService(db).submit_feedback(data, user_id=user.id if user else None)
    return MessageResponse(message="Thank you for your feedback")


@router.post("/newsletter", response_model=MessageResponse, status_code=status.HTTP_201_CREATED)
async def subscribe(data: NewsletterSubscribe, db: DB):
    await SupportService(db).subscribe(data.email)
    return MessageResponse(message="Subscribed successfully")


@router.delete("/newsletter", response_model=MessageResponse)
async def unsubscribe(db: DB, email: EmailStr = Query(...)):
    await SupportService(db).unsubscribe(email)
    return MessageResponse(message="Unsubscribed successfully")


# ==================== Support Tickets ====================

@router.post("/support/tickets", response_model=TicketCreateResponse, status_code=status.HTTP_201_CREATED)
async def create_ticket(data: TicketCreate, db: DB, user: OptionalUser):
    ticket = await SupportService(db).create_ticket(data, user)
    return TicketCreateResponse(
        message="Support ticket created successfully",
        ticket_number=ticket.ticket_number,
    )


@router.get("/support/tickets", response_model=TicketListResponse)
async def list_tickets(
    db: DB,
    admin: AdminUser,
    status: Optional[str] = None,
    priority: Optional[str] = None,
    category: Optional[str] = None,
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
):
    tickets, total = await SupportService(db).list_tickets(
        status=status, priority=priority, category=category, page=page, limit=limit
    )
    return TicketListResponse(
        items=[TicketResponse.model_validate(t) for t in tickets],
        pagination=page_info(page, limit, total),
    )


@router.put("/support/tickets/{ticket_id}", response_model=TicketResponse)
async def update_ticket(
    ticket_id: UUID,
    data: TicketUpdate,
    request: Request,
    db: DB,
    admin: AdminUser,
):
    ticket = await SupportService(db).update_ticket(ticket_id, data, admin)
    await record_admin_action(
        db, request, admin, "UPDATE_TICKET", "support_ticket", ticket.id,
        {"ticket_number": ticket.ticket_number, **data.model_dump(mode="json", exclude_unset=True)},
    )
    return ticket
