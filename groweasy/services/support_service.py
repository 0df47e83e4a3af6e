"""Public forms (contact, feedback, newsletter) and support tickets."""
import logging
from datetime import datetime, timezone
from typing import Optional, List, Tuple, Type
import uuid

from sqlalchemy import select, func
from sqlalchemy.ext.asyncio import AsyncSession

from groweasy.core.exceptions import ConflictError, MarketplaceError, NotFoundError
from groweasy.core.utils import generate_ticket_number
from groweasy.models.support import (
    ContactMessage,
    Feedback,
    NewsletterSubscriber,
    SupportTicket,
    TicketStatus,
)
from groweasy.models.user import User
from groweasy.schemas.support import ContactCreate, FeedbackCreate, TicketCreate, TicketUpdate

logger = logging.getLogger(__name__)


class SupportService:

    def __init__(self, db: AsyncSession):
        self.db = db

    async def _paginate(self, query, order_by, page: int, limit: int) -> Tuple[list, int]:
        total = (await self.db.execute(
            select(func.count()).select_from(query.subquery())
        )).scalar() or 0
        result = await self.db.execute(
            query.order_by(order_by).offset((page - 1) * limit).limit(limit)
        )
        return list(result.scalars().all()), total

    # ==================== CONTACT / FEEDBACK ====================

    async def submit_contact(self, data: ContactCreate, user_id: Optional[uuid.UUID] = None) -> ContactMessage:
        message = ContactMessage(**data.model_dump(), user_id=user_id, status="new")
        self.db.add(message)
        await self.db.flush()
        logger.info(f"Contact message {message.id} received ({message.category})")
        return message

    async def submit_feedback(self, data: FeedbackCreate, user_id: Optional[uuid.UUID] = None) -> Feedback:
        if not 1 <= data.rating <= 5:
            raise MarketplaceError("Rating must be between 1 and 5")
        feedback = Feedback(**data.model_dump(), user_id=user_id, status="new")
        self.db.add(feedback)
        await self.db.flush()
        logger.info(f"Feedback {feedback.id} received (rating {feedback.rating})")
        return feedback

    async def list_submissions(
        self,
        model: Type[ContactMessage] | Type[Feedback],
        status: Optional[str] = None,
        page: int = 1,
        limit: int = 10,
    ) -> Tuple[list, int]:
        query = select(model)
        if status:
            query = query.where(model.status == status)
        return await self._paginate(query, model.created_at.desc(), page, limit)

    # ==================== NEWSLETTER ====================

    async def subscribe(self, email: str) -> NewsletterSubscriber:
        email = email.strip().lower()
        subscriber = (await self.db.execute(
            select(NewsletterSubscriber).where(NewsletterSubscriber.email == email)
        )).scalar_one_or_none()

        if subscriber:
            if subscriber.is_active:
                raise ConflictError("Email already subscribed")
            subscriber.is_active = True
            subscriber.subscribed_at = datetime.now(timezone.utc)
            subscriber.unsubscribed_at = None
        else:
            subscriber = NewsletterSubscriber(email=email, is_active=True)
            self.db.add(subscriber)

        await self.db.flush()
        return subscriber

    async def unsubscribe(self, email: str) -> NewsletterSubscriber:
        subscriber = (await self.db.execute(
            select(NewsletterSubscriber).where(NewsletterSubscriber.email == email.strip().lower())
        )).scalar_one_or_none()
        if not subscriber:
            raise NotFoundError("Email not found")

        subscriber.is_active = False
        subscriber.unsubscribed_at = datetime.now(timezone.utc)
        await self.db.flush()
        return subscriber

    # ==================== TICKETS ====================

    async def create_ticket(self, data: TicketCreate, user: Optional[User] = None) -> SupportTicket:
        now = datetime.now(timezone.utc)
        ticket = SupportTicket(
            ticket_number=generate_ticket_number(),
            user_id=user.id if user else None,
            name=data.name,
            email=data.email,
            subject=data.subject,
            message=data.message,
            category=data.category,
            priority=data.priority.value,
            status=TicketStatus.OPEN.value,
            messages=[{
                "sender": "customer",
                "message": data.message,
                "timestamp": now.isoformat(),
            }],
        )
        self.db.add(ticket)
        await self.db.flush()
        logger.info(f"Support ticket {ticket.ticket_number} opened")
        return ticket

    async def list_tickets(
        self,
        status: Optional[str] = None,
        priority: Optional[str] = None,
        category: Optional[str] = None,
        page: int = 1,
        limit: int = 10,
    ) -> Tuple[List[SupportTicket], int]:
        query = select(SupportTicket)
        if status:
            query = query.where(SupportTicket.status == status)
        if priority:
            query = query.where(SupportTicket.priority == priority)
        if category:
            query = query.where(SupportTicket.category == category)
        return await self._paginate(query, SupportTicket.created_at.desc(), page, limit)

    async def update_ticket(self, ticket_id: uuid.UUID, data: TicketUpdate, admin: User) -> SupportTicket:
        ticket = (await self.db.execute(
            select(SupportTicket).where(SupportTicket.id == ticket_id)
        )).scalar_one_or_none()
        if not ticket:
            raise NotFoundError("Ticket not found")

        now = datetime.now(timezone.utc)
        if data.status is not None:
            ticket.status = data.status.value
            if data.status == TicketStatus.RESOLVED:
                ticket.resolved_at = now
            elif data.status == TicketStatus.CLOSED:
                ticket.closed_at = now
        if data.priority is not None:
            ticket.priority = data.priority.value
        if data.assigned_to is not None:
            ticket.assigned_to = data.assigned_to
        if data.reply:
            ticket.messages = [
                *(ticket.messages or []),
                {
                    "sender": "support",
                    "sender_id": str(admin.id),
                    "message": data.reply,
                    "timestamp": now.isoformat(),
                },
            ]

        await self.db.flush()
        logger.info(f"Support ticket {ticket.ticket_number} updated (status={ticket.status})")
        return ticket
