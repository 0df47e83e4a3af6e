import uuid
from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import String, DateTime, ForeignKey
from sqlalchemy.orm import Mapped, mapped_column

from groweasy.database import Base
from groweasy.db_types import JSONType, UUIDType


class PlatformSetting(Base):
    """
    Admin-editable settings, one row per section (general, payment, features).
    Values override the defaults from environment configuration.
    """
    __tablename__ = "platform_settings"

    id: Mapped[uuid.UUID] = mapped_column(
        UUIDType(as_uuid=True),
        primary_key=True,
        default=uuid.uuid4
    )
    section: Mapped[str] = mapped_column(String(30), unique=True, nullable=False)
    values: Mapped[dict] = mapped_column(JSONType, default=dict, nullable=False)

    updated_by: Mapped[Optional[uuid.UUID]] = mapped_column(
        UUIDType(as_uuid=True),
        ForeignKey("users.id", ondelete="SET NULL"),
        nullable=True
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
        nullable=False
    )

    def __repr__(self) -> str:
        return f"<PlatformSetting(section='{self.section}')>"
