"""In-app notifications for sellers (approvals, orders, payouts)."""
import logging
from datetime import datetime, timezone
from typing import Optional, Dict, Any, List, Tuple
import uuid

from sqlalchemy import select, func, update, and_
from sqlalchemy.ext.asyncio import AsyncSession

from groweasy.core.exceptions import NotFoundError
from groweasy.models.notification import Notification, NotificationType

logger = logging.getLogger(__name__)


class NotificationService:

    def __init__(self, db: AsyncSession):
        self.db = db

    async def notify(
        self,
        user_id: uuid.UUID,
        notification_type: NotificationType,
        title: str,
        message: str,
        data: Optional[Dict[str, Any]] = None,
    ) -> Notification:
        notification = Notification(
            user_id=user_id,
            type=notification_type.value,
            title=title,
            message=message,
            data=data or {},
        )
        self.db.add(notification)
        await self.db.flush()
        logger.debug(f"Notification '{notification_type.value}' queued for user {user_id}")
        return notification

    async def list_for_user(
        self,
        user_id: uuid.UUID,
        page: int = 1,
        limit: int = 20,
        notification_type: Optional[str] = None,
        unread_only: bool = False,
    ) -> Tuple[List[Notification], int, int]:
        """Returns (notifications, total matching, unread count)."""
        query = select(Notification).where(Notification.user_id == user_id)
        if notification_type:
            query = query.where(Notification.type == notification_type)
        if unread_only:
            query = query.where(Notification.is_read == False)  # noqa: E712

        total = (await self.db.execute(
            select(func.count()).select_from(query.subquery())
        )).scalar() or 0

        unread_count = (await self.db.execute(
            select(func.count(Notification.id)).where(
                and_(Notification.user_id == user_id, Notification.is_read == False)  # noqa: E712
            )
        )).scalar() or 0

        result = await self.db.execute(
            query.order_by(Notification.created_at.desc())
            .offset((page - 1) * limit)
            .limit(limit)
        )
        return list(result.scalars().all()), total, unread_count

    async def mark_as_read(self, user_id: uuid.UUID, notification_id: uuid.UUID) -> Notification:
        result = await self.db.execute(
            select(Notification).where(
                and_(Notification.id == notification_id, Notification.user_id == user_id)
            )
        )
        notification = result.scalar_one_or_none()
        if not notification:
            raise NotFoundError("Notification not found")

        if not notification.is_read:
            notification.is_read = True
            notification.read_at = datetime.now(timezone.utc)
            await self.db.flush()
        return notification

    async def mark_all_as_read(self, user_id: uuid.UUID) -> int:
        result = await self.db.execute(
            update(Notification)
            .where(and_(Notification.user_id == user_id, Notification.is_read == False))  # noqa: E712
            .values(is_read=True, read_at=datetime.now(timezone.utc))
        )
        return result.rowcount or 0

    async def delete(self, user_id: uuid.UUID, notification_id: uuid.UUID) -> None:
        result = await self.db.execute(
            select(Notification).where(
                and_(Notification.id == notification_id, Notification.user_id == user_id)
            )
        )
        notification = result.scalar_one_or_none()
        if not notification:
            raise NotFoundError("Notification not found")
        await self.db.delete(notification)
        await self.db.flush()
