"""Database models for in-app notifications."""
from datetime import datetime, timezone
from enum import Enum
from uuid import uuid4

from sqlalchemy import Column, String, Text, DateTime, Boolean, ForeignKey, Index

from groweasy.database import Base
from groweasy.db_types import JSONType, UUIDType


class NotificationType(str, Enum):
    """Types of notifications."""
    # Account
    ACCOUNT_APPROVED = "account_approved"
    ACCOUNT_REJECTED = "account_rejected"

    # Enquiries
    ENQUIRY_SUBMITTED = "enquiry_submitted"
    ENQUIRY_APPROVED = "enquiry_approved"
    ENQUIRY_REJECTED = "enquiry_rejected"

    # Orders
    NEW_ORDER = "new_order"
    ORDER_DELIVERED = "order_delivered"
    AFFILIATE_CONVERSION = "affiliate_conversion"

    # Payouts
    PAYOUT_REQUESTED = "payout_requested"
    PAYOUT_COMPLETED = "payout_completed"
    PAYOUT_FAILED = "payout_failed"

    # General
    SYSTEM = "system"


class Notification(Base):
    """
    Notification model - stores in-app notifications per user.
    """
    __tablename__ = "notifications"

    id = Column(UUIDType(as_uuid=True), primary_key=True, default=uuid4)

    # Recipient
    user_id = Column(UUIDType(as_uuid=True), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)

    # Content
    type = Column(String(50), nullable=False, default=NotificationType.SYSTEM.value)
    title = Column(String(200), nullable=False)
    message = Column(Text, nullable=False)

    # Reference ids (order_id, payout_id, enquiry_id ...)
    data = Column(JSONType, default=dict)

    # Status
    is_read = Column(Boolean, default=False, nullable=False)
    read_at = Column(DateTime(timezone=True))

    created_at = Column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc), nullable=False)

    __table_args__ = (
        Index('ix_notifications_user_unread', 'user_id', 'is_read'),
        Index('ix_notifications_user_type', 'user_id', 'type'),
    )
