"""
services/admin.py

Account administration rules.

Approval, rejection, role changes and activation toggles. Every
mutation writes an AdminActionLog row in the same session; the router
commits both together.

Design rules:
- no HTTP / FastAPI dependency
- transaction control stays in the router
- admin safety rules (no self role change, no promotion to admin,
  admins are untouchable by other admins) live here only

"""

import uuid

from sqlalchemy import select, desc
from sqlalchemy.orm import Session

from app.core.exceptions import InvalidTransition, NotFound, PermissionDenied, ValidationFailed
from app.db.base import utcnow
from app.models.admin_log import AdminAction
from app.models.user import ApprovalStatus, Role, User
from app.services.admin_log import write_admin_log


def get_user_or_404(db: Session, user_id: uuid.UUID) -> User:
    user = db.scalar(select(User).where(User.id == user_id))
    if not user:
        raise NotFound("User not found")
    return user


def list_users(
    db: Session,
    *,
    role: Role | None = None,
    approval_status: ApprovalStatus | None = None,
) -> list[User]:
    q = select(User)
    if role is not None:
        q = q.where(User.role == role)
    if approval_status is not None:
        q = q.where(User.approval_status == approval_status)
    return list(db.scalars(q.order_by(User.role, User.college_id)).all())


def list_pending_users(db: Session) -> list[User]:
    return list(
        db.scalars(
            select(User)
            .where(User.approval_status == ApprovalStatus.PENDING)
            .order_by(desc(User.created_at))
        ).all()
    )


def _ensure_pending(user: User) -> None:
    if user.approval_status != ApprovalStatus.PENDING:
        raise InvalidTransition(f"User is already {user.approval_status.value}")


def approve_user(db: Session, *, actor: User, user: User) -> User:
    _ensure_pending(user)

    user.approval_status = ApprovalStatus.APPROVED
    user.approved_by = actor.id
    user.approved_at = utcnow()
    user.rejection_reason = None

    write_admin_log(
        db,
        actor_id=actor.id,
        action=AdminAction.APPROVE_USER,
        target_user_id=user.id,
        before_role=user.role.value,
        after_role=user.role.value,
    )
    return user


def reject_user(db: Session, *, actor: User, user: User, reason: str | None) -> User:
    if user.id == actor.id:
        raise ValidationFailed("Cannot reject yourself")
    _ensure_pending(user)

    user.approval_status = ApprovalStatus.REJECTED
    user.approved_by = actor.id
    user.approved_at = utcnow()
    user.rejection_reason = reason or "Rejected by admin"

    write_admin_log(
        db,
        actor_id=actor.id,
        action=AdminAction.REJECT_USER,
        target_user_id=user.id,
        before_role=user.role.value,
        after_role=user.role.value,
    )
    return user


def set_role(db: Session, *, actor: User, user: User, role: Role) -> Role:
    """Change a user's role; returns the previous role."""
    if user.id == actor.id:
        raise ValidationFailed("Cannot change your own role")
    if role == Role.ADMIN:
        raise PermissionDenied("Cannot promote to admin")
    if user.role == Role.ADMIN:
        raise PermissionDenied("Cannot change another admin's role")
    if user.role == role:
        raise ValidationFailed(f"User already {role.value}")

    before = user.role
    user.role = role
    user.approval_status = ApprovalStatus.APPROVED
    user.approved_by = actor.id
    user.approved_at = utcnow()

    write_admin_log(
        db,
        actor_id=actor.id,
        action=AdminAction.SET_ROLE,
        target_user_id=user.id,
        before_role=before.value,
        after_role=role.value,
    )
    return before


def set_active(db: Session, *, actor: User, user: User, is_active: bool) -> User:
    if user.id == actor.id and not is_active:
        raise ValidationFailed("Cannot deactivate yourself")
    if user.role == Role.ADMIN and user.id != actor.id:
        raise PermissionDenied("Cannot change another admin's status")
    if user.is_active == is_active:
        raise ValidationFailed(f"User is already {'active' if is_active else 'inactive'}")

    user.is_active = is_active
    write_admin_log(
        db,
        actor_id=actor.id,
        action=AdminAction.ACTIVATE_USER if is_active else AdminAction.DEACTIVATE_USER,
        target_user_id=user.id,
        before_role=user.role.value,
        after_role=user.role.value,
    )
    return user
