import uuid
from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import String, DateTime, ForeignKey
from sqlalchemy.orm import Mapped, mapped_column

from groweasy.database import Base
from groweasy.db_types import JSONType, UUIDType


class AuditLog(Base):
    """
    Audit trail of admin actions.
    Records: seller approvals, payout processing, coupon and settings changes, etc.
    """
    __tablename__ = "audit_logs"

    id: Mapped[uuid.UUID] = mapped_column(
        UUIDType(as_uuid=True),
        primary_key=True,
        default=uuid.uuid4
    )

    # Who performed the action
    admin_id: Mapped[Optional[uuid.UUID]] = mapped_column(
        UUIDType(as_uuid=True),
        ForeignKey("users.id", ondelete="SET NULL"),
        nullable=True
    )

    # Action details
    action: Mapped[str] = mapped_column(String(50), nullable=False, index=True)
    # Actions: APPROVE_SELLER, REJECT_SELLER, PROCESS_PAYOUT, CREATE_COUPON, UPDATE_SETTINGS, etc.

    # Record being modified
    target: Mapped[str] = mapped_column(String(50), nullable=False, index=True)
    # Targets: user, product, order, coupon, payout, enquiry, settings, ticket

    target_id: Mapped[Optional[str]] = mapped_column(String(64), nullable=True)

    details: Mapped[Optional[dict]] = mapped_column(JSONType, nullable=True)

    # Request metadata
    ip_address: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)
    user_agent: Mapped[Optional[str]] = mapped_column(String(500), nullable=True)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        nullable=False,
        index=True
    )

    def __repr__(self) -> str:
        return f"<AuditLog(action='{self.action}', target='{self.target}', id='{self.target_id}')>"
