"""
warden_requests.py

Warden promotion request API.

- any signed-in user (not already warden / admin) can submit one request
- admins list, approve or reject requests
- a decision writes the request, the user and the audit log in one commit

Related files:
- app.services.warden_requests : workflow rules
- app.models.warden_request    : WardenRequest model (one pending per user)

"""

import uuid

from fastapi import APIRouter, Depends, Query, status
from fastapi.responses import JSONResponse
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.core.deps import get_db, get_current_user, get_current_admin
from app.core.exceptions import ValidationFailed
from app.core.responses import ok
from app.models.user import ApprovalStatus, User
from app.schemas.user import user_payload
from app.schemas.warden_request import ReviewRequest, warden_request_payload
from app.services import warden_requests as request_service

router = APIRouter(prefix="/warden-requests", tags=["warden-requests"])


@router.post("")
def submit_request(
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
):
    try:
        req = request_service.submit_request(db, user=user)
        db.commit()
        db.refresh(req)
    except IntegrityError:
        # a concurrent submit won the one-pending-per-user index
        db.rollback()
        raise ValidationFailed(request_service.ALREADY_PENDING_MESSAGE)
    except Exception:
        db.rollback()
        raise

    return JSONResponse(
        status_code=status.HTTP_201_CREATED,
        content=ok(
            warden_request_payload(req),
            message="Warden access request submitted. Please wait for admin approval.",
        ),
    )


@router.get("")
def list_requests(
    status_filter: ApprovalStatus | None = Query(default=None, alias="status"),
    db: Session = Depends(get_db),
    _: User = Depends(get_current_admin),
):
    requests = request_service.list_requests(db, status_filter)
    return ok(
        [warden_request_payload(r) for r in requests],
        count=len(requests),
        stats=request_service.request_stats(db),
    )


@router.get("/my-request")
def my_request(
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
):
    req = request_service.latest_for_user(db, user.id)
    body = ok()
    body["data"] = warden_request_payload(req) if req else None
    return body


@router.put("/{request_id}/approve")
def approve_request(
    request_id: uuid.UUID,
    data: ReviewRequest | None = None,
    db: Session = Depends(get_db),
    admin: User = Depends(get_current_admin),
):
    notes = data.notes if data else None
    try:
        req = request_service.get_request_or_404(db, request_id)
        user = request_service.approve_request(db, req, admin=admin, notes=notes)
        db.commit()
        db.refresh(req)
        db.refresh(user)
    except Exception:
        db.rollback()
        raise

    return ok(
        {"request": warden_request_payload(req), "user": user_payload(user)},
        message="Warden request approved successfully",
    )


@router.put("/{request_id}/reject")
def reject_request(
    request_id: uuid.UUID,
    data: ReviewRequest | None = None,
    db: Session = Depends(get_db),
    admin: User = Depends(get_current_admin),
):
    reason = (data.notes or data.reason) if data else None
    try:
        req = request_service.get_request_or_404(db, request_id)
        user = request_service.reject_request(db, req, admin=admin, reason=reason)
        db.commit()
        db.refresh(req)
        db.refresh(user)
    except Exception:
        db.rollback()
        raise

    return ok(
        {"request": warden_request_payload(req), "user": user_payload(user)},
        message="Warden request rejected",
    )
