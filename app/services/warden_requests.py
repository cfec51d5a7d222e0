"""
services/warden_requests.py

Warden promotion workflow.

submit  : any non-warden, non-admin user with no pending request
approve : request -> approved, user -> warden (approved)
reject  : request -> rejected, user approval -> rejected

Both decisions touch two rows plus the audit log; the router commits
them as one transaction, so a failure leaves neither side changed.

"""

import uuid

from sqlalchemy import select
from sqlalchemy.orm import Session

from app.core.exceptions import InvalidTransition, NotFound, ValidationFailed
from app.core.logging import get_logger
from app.db.base import utcnow
from app.models.admin_log import AdminAction
from app.models.user import ApprovalStatus, Role, User
from app.models.warden_request import WardenRequest
from app.services.admin_log import write_admin_log

logger = get_logger(__name__)

ALREADY_PENDING_MESSAGE = "You already have a pending warden request"
DEFAULT_REJECTION_REASON = "Warden request rejected by admin"


def submit_request(db: Session, *, user: User) -> WardenRequest:
    if user.role == Role.WARDEN:
        raise ValidationFailed("You already have warden access")
    if user.role == Role.ADMIN:
        raise ValidationFailed("Admins cannot request warden access")

    pending = db.scalar(
        select(WardenRequest).where(
            WardenRequest.user_id == user.id,
            WardenRequest.status == ApprovalStatus.PENDING,
        )
    )
    if pending:
        raise ValidationFailed(ALREADY_PENDING_MESSAGE)

    req = WardenRequest(
        user_id=user.id,
        name=user.name,
        email=user.email,
        college_id=user.college_id,
        department=user.department,
        phone_number=user.phone_number,
        status=ApprovalStatus.PENDING,
        requested_at=utcnow(),
    )
    db.add(req)
    return req


def list_requests(db: Session, status: ApprovalStatus | None = None) -> list[WardenRequest]:
    q = select(WardenRequest)
    if status is not None:
        q = q.where(WardenRequest.status == status)
    return list(db.scalars(q.order_by(WardenRequest.requested_at.desc())).unique().all())


def request_stats(db: Session) -> dict:
    rows = list_requests(db)
    stats = {"total": len(rows)}
    for s in ApprovalStatus:
        stats[s.value] = sum(1 for r in rows if r.status == s)
    return stats


def latest_for_user(db: Session, user_id: uuid.UUID) -> WardenRequest | None:
    return db.scalar(
        select(WardenRequest)
        .where(WardenRequest.user_id == user_id)
        .order_by(WardenRequest.requested_at.desc())
        .limit(1)
    )


def get_request_or_404(db: Session, request_id: uuid.UUID) -> WardenRequest:
    req = db.scalar(select(WardenRequest).where(WardenRequest.id == request_id))
    if not req:
        raise NotFound("Warden request not found")
    return req


def _ensure_pending(req: WardenRequest) -> None:
    if req.status != ApprovalStatus.PENDING:
        raise InvalidTransition(f"Request has already been {req.status.value}")


def _requester(db: Session, req: WardenRequest) -> User:
    user = db.scalar(select(User).where(User.id == req.user_id))
    if not user:
        raise NotFound("User not found")
    return user


def approve_request(db: Session, req: WardenRequest, *, admin: User, notes: str | None) -> User:
    _ensure_pending(req)
    user = _requester(db, req)
    now = utcnow()

    req.status = ApprovalStatus.APPROVED
    req.reviewed_by = admin.id
    req.reviewed_at = now
    req.review_notes = notes

    before = user.role
    user.role = Role.WARDEN
    user.approval_status = ApprovalStatus.APPROVED
    user.approved_by = admin.id
    user.approved_at = now
    user.rejection_reason = None

    write_admin_log(
        db,
        actor_id=admin.id,
        action=AdminAction.APPROVE_WARDEN_REQUEST,
        target_user_id=user.id,
        before_role=before.value,
        after_role=Role.WARDEN.value,
    )
    logger.info("warden_request_approved", request_id=str(req.id), user_id=str(user.id))
    return user


def reject_request(db: Session, req: WardenRequest, *, admin: User, reason: str | None) -> User:
    _ensure_pending(req)
    user = _requester(db, req)
    now = utcnow()
    reason = reason or DEFAULT_REJECTION_REASON

    req.status = ApprovalStatus.REJECTED
    req.reviewed_by = admin.id
    req.reviewed_at = now
    req.review_notes = reason

    user.approval_status = ApprovalStatus.REJECTED
    user.rejection_reason = reason

    write_admin_log(
        db,
        actor_id=admin.id,
        action=AdminAction.REJECT_WARDEN_REQUEST,
        target_user_id=user.id,
        before_role=user.role.value,
        after_role=user.role.value,
    )
    logger.info("warden_request_rejected", request_id=str(req.id), user_id=str(user.id))
    return user
