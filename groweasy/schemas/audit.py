from datetime import datetime
from typing import Optional, List
from uuid import UUID

from pydantic import BaseModel

from groweasy.schemas.base import BaseResponseSchema, Pagination


class AuditLogResponse(BaseResponseSchema):
    id: UUID
    admin_id: Optional[UUID] = None
    action: str
    target: str
    target_id: Optional[str] = None
    details: Optional[dict] = None
    ip_address: Optional[str] = None
    user_agent: Optional[str] = None
    created_at: datetime


class AuditLogListResponse(BaseModel):
    items: List[AuditLogResponse]
    pagination: Pagination
