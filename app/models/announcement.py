import uuid
from datetime import datetime
from enum import Enum

from sqlalchemy import Boolean, DateTime, ForeignKey, JSON, String, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.db.base import Base, enum_column, utcnow


class AnnouncementCategory(str, Enum):
    GENERAL = "general"
    MESS = "mess"
    MAINTENANCE = "maintenance"
    EMERGENCY = "emergency"


class Announcement(Base):
    __tablename__ = "announcements"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)

    title: Mapped[str] = mapped_column(String(200), nullable=False)
    content: Mapped[str] = mapped_column(Text, nullable=False)
    category: Mapped[AnnouncementCategory] = mapped_column(
        enum_column(AnnouncementCategory, "announcement_category"),
        nullable=False,
        default=AnnouncementCategory.GENERAL,
        index=True,
    )

    posted_by: Mapped[uuid.UUID] = mapped_column(Uuid, ForeignKey("users.id"), nullable=False)
    # empty list = everyone
    target_hostels: Mapped[list] = mapped_column(JSON, nullable=False, default=list)
    target_blocks: Mapped[list] = mapped_column(JSON, nullable=False, default=list)

    scheduled_for: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True, index=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow, nullable=False)

    author = relationship("User", foreign_keys=[posted_by], lazy="joined")
    reads = relationship("AnnouncementRead", cascade="all, delete-orphan", lazy="selectin")


class AnnouncementRead(Base):
    """Read receipt; the composite key makes the read set a real set."""

    __tablename__ = "announcement_reads"

    announcement_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("announcements.id", ondelete="CASCADE"), primary_key=True
    )
    user_id: Mapped[uuid.UUID] = mapped_column(Uuid, ForeignKey("users.id"), primary_key=True)
    read_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow, nullable=False)
