"""
complaint.py

Complaint tickets and their status history.

- ticket_id      : human readable, unique (TKT-YYMMDD-XXXXXXXX)
- history        : ComplaintStatusChange rows, insert-only, oldest first
- resolved_by/at : stamped the first time the ticket reaches "resolved"

"""

import uuid
from datetime import datetime
from enum import Enum

from sqlalchemy import DateTime, ForeignKey, Integer, String, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.db.base import Base, enum_column, utcnow


class ComplaintCategory(str, Enum):
    MESS = "mess"
    HOSTEL = "hostel"
    ELECTRICAL = "electrical"
    PLUMBING = "plumbing"
    WIFI = "wifi"
    CLEANLINESS = "cleanliness"
    SECURITY = "security"
    OTHER = "other"


class ComplaintStatus(str, Enum):
    PENDING = "pending"
    IN_PROGRESS = "in_progress"
    RESOLVED = "resolved"
    REJECTED = "rejected"


class ComplaintPriority(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    URGENT = "urgent"


class Complaint(Base):
    __tablename__ = "complaints"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    ticket_id: Mapped[str] = mapped_column(String(32), unique=True, nullable=False, index=True)

    student_id: Mapped[uuid.UUID] = mapped_column(Uuid, ForeignKey("users.id"), nullable=False, index=True)

    category: Mapped[ComplaintCategory] = mapped_column(
        enum_column(ComplaintCategory, "complaint_category"), nullable=False, index=True
    )
    description: Mapped[str] = mapped_column(Text, nullable=False)
    status: Mapped[ComplaintStatus] = mapped_column(
        enum_column(ComplaintStatus, "complaint_status"), nullable=False, default=ComplaintStatus.PENDING, index=True
    )
    priority: Mapped[ComplaintPriority] = mapped_column(
        enum_column(ComplaintPriority, "complaint_priority"), nullable=False, default=ComplaintPriority.MEDIUM
    )

    remarks: Mapped[str | None] = mapped_column(Text, nullable=True)
    resolution_notes: Mapped[str | None] = mapped_column(Text, nullable=True)

    assigned_to: Mapped[uuid.UUID | None] = mapped_column(Uuid, ForeignKey("users.id"), nullable=True)
    resolved_by: Mapped[uuid.UUID | None] = mapped_column(Uuid, ForeignKey("users.id"), nullable=True)
    resolved_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow, nullable=False)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, onupdate=utcnow, nullable=False
    )

    student = relationship("User", foreign_keys=[student_id], lazy="joined")
    history = relationship(
        "ComplaintStatusChange",
        order_by="ComplaintStatusChange.seq",
        cascade="all, delete-orphan",
        lazy="selectin",
    )


class ComplaintStatusChange(Base):
    __tablename__ = "complaint_status_history"

    # seq keeps insertion order even when two changes share a timestamp
    seq: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)

    complaint_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("complaints.id", ondelete="CASCADE"), nullable=False, index=True
    )
    status: Mapped[ComplaintStatus] = mapped_column(enum_column(ComplaintStatus, "complaint_status"), nullable=False)
    changed_by: Mapped[uuid.UUID | None] = mapped_column(Uuid, ForeignKey("users.id"), nullable=True)
    changed_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow, nullable=False)
    remarks: Mapped[str | None] = mapped_column(Text, nullable=True)
