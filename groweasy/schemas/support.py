"""Schemas for public forms: contact, feedback, newsletter and support tickets."""
from datetime import datetime
from typing import Optional, List, Literal
from uuid import UUID

from pydantic import BaseModel, EmailStr, Field

from groweasy.models.support import TicketStatus, TicketPriority
from groweasy.schemas.base import BaseCreateSchema, BaseResponseSchema, Pagination


ContactCategory = Literal["general", "support", "business", "partnership", "complaint", "other"]
FeedbackCategory = Literal["product", "service", "website", "delivery", "support", "other"]
TicketCategory = Literal["technical", "billing", "order", "product", "account", "general", "other"]


# ==================== Contact Schemas ====================

class ContactCreate(BaseCreateSchema):
    name: str = Field(..., min_length=1, max_length=200)
    email: EmailStr
    phone: Optional[str] = Field(None, max_length=20)
    subject: str = Field(..., min_length=1, max_length=255)
    message: str = Field(..., min_length=1)
    category: ContactCategory = "general"


class ContactMessageResponse(BaseResponseSchema):
    id: UUID
    name: str
    email: str
    phone: Optional[str] = None
    subject: str
    message: str
    category: str
    status: str
    created_at: datetime


class ContactMessageListResponse(BaseModel):
    items: List[ContactMessageResponse]
    pagination: Pagination


# ==================== Feedback Schemas ====================

class FeedbackCreate(BaseCreateSchema):
    """Rating range is checked by the service so the error text matches the form."""
    name: str = Field(..., min_length=1, max_length=200)
    email: EmailStr
    rating: int
    subject: Optional[str] = Field(None, max_length=255)
    message: str = Field(..., min_length=1)
    category: FeedbackCategory = "other"


class FeedbackResponse(BaseResponseSchema):
    id: UUID
    name: str
    email: str
    rating: int
    subject: Optional[str] = None
    message: str
    category: str
    status: str
    created_at: datetime


class FeedbackListResponse(BaseModel):
    items: List[FeedbackResponse]
    pagination: Pagination


# ==================== Newsletter Schemas ====================

class NewsletterSubscribe(BaseModel):
    email: EmailStr


# ==================== Support Ticket Schemas ====================

class TicketCreate(BaseCreateSchema):
    name: str = Field(..., min_length=1, max_length=200)
    email: EmailStr
    subject: str = Field(..., min_length=1, max_length=255)
    message: str = Field(..., min_length=1)
    priority: TicketPriority = TicketPriority.MEDIUM
    category: TicketCategory = "general"


class TicketCreateResponse(BaseModel):
    message: str
    ticket_number: str


class TicketUpdate(BaseModel):
    status: Optional[TicketStatus] = None
    priority: Optional[TicketPriority] = None
    assigned_to: Optional[UUID] = None
    reply: Optional[str] = Field(None, min_length=1, description="Appended to the ticket thread")


class TicketResponse(BaseResponseSchema):
    id: UUID
    ticket_number: str
    user_id: Optional[UUID] = None
    name: str
    email: str
    subject: str
    message: str
    category: str
    priority: str
    status: str
    assigned_to: Optional[UUID] = None
    messages: List[dict] = []
    resolved_at: Optional[datetime] = None
    closed_at: Optional[datetime] = None
    created_at: datetime


class TicketListResponse(BaseModel):
    items: List[TicketResponse]
    pagination: Pagination
