from datetime import datetime
from typing import Optional, List
from uuid import UUID

from pydantic import BaseModel

from groweasy.schemas.base import BaseResponseSchema, Pagination


class NotificationResponse(BaseResponseSchema):
    id: UUID
    type: str
    title: str
    message: str
    data: Optional[dict] = None
    is_read: bool
    read_at: Optional[datetime] = None
    created_at: datetime


class NotificationListResponse(BaseModel):
    items: List[NotificationResponse]
    pagination: Pagination
    unread_count: int


class NotificationUpdate(BaseModel):
    """Mark a single notification, or all of them, as read."""
    notification_id: Optional[UUID] = None
    mark_all_as_read: bool = False
