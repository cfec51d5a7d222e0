"""
user.py

User, Role and ApprovalStatus definitions.

Holds identity (name, college id, email), credentials (bcrypt hash or
Google id), role, approval state, email verification state and the
optional room / hostel linkage.

Every auth, attendance, billing and admin feature hangs off this model.

"""

import uuid
import datetime
from enum import Enum

from sqlalchemy import String, Integer, Boolean, DateTime, ForeignKey, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from app.db.base import Base, enum_column, utcnow


"""
Roles

- STUDENT : hostel resident (auto-approved)
- WARDEN  : staff, needs admin approval
- ADMIN   : system administrator (never self-registered)

"""

class Role(str, Enum):
    STUDENT = "student"
    WARDEN = "warden"
    ADMIN = "admin"


class ApprovalStatus(str, Enum):
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


def default_approval_for(role: Role) -> ApprovalStatus:
    # students and admins skip the approval gate
    if role in (Role.STUDENT, Role.ADMIN):
        return ApprovalStatus.APPROVED
    return ApprovalStatus.PENDING


"""
User model

- email / college_id are unique; stored lower / upper cased
- password_hash is empty for accounts created through Google
- email_verification_otp* hold the single-use verification code
- room_id links to the allocated room; room_number / hostel_block are
  kept denormalised for filtering and display

"""

class User(Base):
    __tablename__ = "users"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)

    name: Mapped[str] = mapped_column(String(100), nullable=False)
    college_id: Mapped[str] = mapped_column(String(30), unique=True, index=True, nullable=False)
    email: Mapped[str] = mapped_column(String(255), unique=True, index=True, nullable=False)
    password_hash: Mapped[str | None] = mapped_column(String(255), nullable=True)

    google_id: Mapped[str | None] = mapped_column(String(64), unique=True, nullable=True)
    avatar: Mapped[str | None] = mapped_column(String(512), nullable=True)

    role: Mapped[Role] = mapped_column(enum_column(Role, "user_role"), default=Role.STUDENT, index=True)
    approval_status: Mapped[ApprovalStatus] = mapped_column(
        enum_column(ApprovalStatus, "approval_status"), default=ApprovalStatus.APPROVED, index=True
    )
    approved_by: Mapped[uuid.UUID | None] = mapped_column(Uuid, ForeignKey("users.id"), nullable=True)
    approved_at: Mapped[datetime.datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    rejection_reason: Mapped[str | None] = mapped_column(String(255), nullable=True)

    room_number: Mapped[str | None] = mapped_column(String(20), nullable=True)
    hostel_block: Mapped[str | None] = mapped_column(String(20), nullable=True)
    room_id: Mapped[uuid.UUID | None] = mapped_column(Uuid, ForeignKey("rooms.id"), nullable=True, index=True)

    department: Mapped[str | None] = mapped_column(String(100), nullable=True)
    year: Mapped[int | None] = mapped_column(Integer, nullable=True)
    phone_number: Mapped[str | None] = mapped_column(String(30), nullable=True)

    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)

    email_verified: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    email_verification_otp: Mapped[str | None] = mapped_column(String(6), nullable=True)
    email_verification_otp_expires: Mapped[datetime.datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True
    )

    created_at: Mapped[datetime.datetime] = mapped_column(DateTime(timezone=True), default=utcnow, nullable=False)
    updated_at: Mapped[datetime.datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, onupdate=utcnow, nullable=False
    )

    @property
    def is_privileged(self) -> bool:
        return self.role in (Role.WARDEN, Role.ADMIN)
