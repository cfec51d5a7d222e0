"""

admin_log.py

Audit log of privileged account actions.

Records approvals, rejections, role changes, activation toggles and
warden-request decisions so that every change to who-can-do-what can be
traced back to the admin who made it.

Design rules:
- the log row is written in the same transaction as the change it records
- rows are never updated or deleted
- actor and target are kept as separate columns

"""

import uuid
from datetime import datetime
from enum import Enum

from sqlalchemy import DateTime, ForeignKey, String, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from app.db.base import Base, enum_column, utcnow



#  admin action types

class AdminAction(str, Enum):
    APPROVE_USER = "APPROVE_USER"
    REJECT_USER = "REJECT_USER"
    SET_ROLE = "SET_ROLE"
    ACTIVATE_USER = "ACTIVATE_USER"
    DEACTIVATE_USER = "DEACTIVATE_USER"
    APPROVE_WARDEN_REQUEST = "APPROVE_WARDEN_REQUEST"
    REJECT_WARDEN_REQUEST = "REJECT_WARDEN_REQUEST"


"""
AdminActionLog

- actor_id       : admin who performed the action
- target_user_id : account the action was applied to (optional)
- action         : AdminAction
- before_role    : role before the change
- after_role     : role after the change
- created_at     : UTC timestamp

"""

class AdminActionLog(Base):
    __tablename__ = "admin_action_logs"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)

    actor_id: Mapped[uuid.UUID] = mapped_column(Uuid, ForeignKey("users.id"), nullable=False)
    target_user_id: Mapped[uuid.UUID | None] = mapped_column(Uuid, ForeignKey("users.id"), nullable=True)

    action: Mapped[AdminAction] = mapped_column(enum_column(AdminAction, "admin_action"), nullable=False)

    before_role: Mapped[str | None] = mapped_column(String(20), nullable=True)
    after_role: Mapped[str | None] = mapped_column(String(20), nullable=True)

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow, nullable=False)
