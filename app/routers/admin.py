import uuid

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session, aliased
from sqlalchemy import select, desc

from app.core.deps import get_db, get_current_admin, get_current_staff
from app.core.responses import ok
from app.models.admin_log import AdminActionLog
from app.models.user import ApprovalStatus, Role, User
from app.schemas.user import ActiveUpdate, RejectUserRequest, RoleUpdate, user_payload
from app.services import admin as admin_service


router = APIRouter(prefix="/admin", tags=["admin"])


# account list with optional role / approval filters (staff)
@router.get("/users")
def list_users(
    role: Role | None = Query(default=None),
    approval_status: ApprovalStatus | None = Query(default=None),
    db: Session = Depends(get_db),
    _: User = Depends(get_current_staff),
):
    users = admin_service.list_users(db, role=role, approval_status=approval_status)
    return ok([user_payload(u) for u in users], count=len(users))


# accounts waiting for approval
@router.get("/users/pending")
def list_pending_users(
    db: Session = Depends(get_db),
    _: User = Depends(get_current_admin),
):
    users = admin_service.list_pending_users(db)
    return ok([user_payload(u) for u in users], count=len(users))


@router.get("/users/{user_id}")
def get_user_details(
    user_id: uuid.UUID,
    db: Session = Depends(get_db),
    _: User = Depends(get_current_staff),
):
    user = admin_service.get_user_or_404(db, user_id)
    return ok(user_payload(user))


# approve a pending account
@router.post("/users/{user_id}/approve")
def approve_user(
    user_id: uuid.UUID,
    db: Session = Depends(get_db),
    current_admin: User = Depends(get_current_admin),
):
    try:
        user = admin_service.get_user_or_404(db, user_id)
        admin_service.approve_user(db, actor=current_admin, user=user)
        db.commit()
        db.refresh(user)
    except Exception:
        db.rollback()
        raise

    return ok(user_payload(user), message="User approved")


# reject a pending account
@router.post("/users/{user_id}/reject")
def reject_user(
    user_id: uuid.UUID,
    data: RejectUserRequest | None = None,
    db: Session = Depends(get_db),
    current_admin: User = Depends(get_current_admin),
):
    reason = data.reason if data else None
    try:
        user = admin_service.get_user_or_404(db, user_id)
        admin_service.reject_user(db, actor=current_admin, user=user, reason=reason)
        db.commit()
        db.refresh(user)
    except Exception:
        db.rollback()
        raise

    return ok(user_payload(user), message="User rejected")


# change a user's role
@router.patch("/users/{user_id}/set_role")
def set_role(
    user_id: uuid.UUID,
    data: RoleUpdate,
    db: Session = Depends(get_db),
    current_admin: User = Depends(get_current_admin),
):
    try:
        user = admin_service.get_user_or_404(db, user_id)
        before = admin_service.set_role(db, actor=current_admin, user=user, role=data.role)
        db.commit()
        db.refresh(user)
    except Exception:
        db.rollback()
        raise

    return ok(
        {
            "id": str(user.id),
            "name": user.name,
            "email": user.email,
            "before_role": before.value,
            "after_role": user.role.value,
        },
        message="Role updated",
    )


# activate / deactivate an account
@router.patch("/users/{user_id}/active")
def set_active(
    user_id: uuid.UUID,
    data: ActiveUpdate,
    db: Session = Depends(get_db),
    current_admin: User = Depends(get_current_admin),
):
    try:
        user = admin_service.get_user_or_404(db, user_id)
        admin_service.set_active(db, actor=current_admin, user=user, is_active=data.is_active)
        db.commit()
        db.refresh(user)
    except Exception:
        db.rollback()
        raise

    return ok(user_payload(user), message="User activated" if user.is_active else "User deactivated")


# admin action log, newest first
@router.get("/logs")
def list_admin_logs(
    limit: int = 50,
    db: Session = Depends(get_db),
    _: User = Depends(get_current_admin),
):
    limit = max(1, min(limit, 200))

    Actor = aliased(User)
    Target = aliased(User)

    rows = db.execute(
        select(AdminActionLog, Actor, Target)
        .join(Actor, Actor.id == AdminActionLog.actor_id)
        .outerjoin(Target, Target.id == AdminActionLog.target_user_id)
        .order_by(desc(AdminActionLog.created_at))
        .limit(limit)
    ).all()

    result = []
    for log, actor, target in rows:
        result.append(
            {
                "id": str(log.id),
                "created_at": log.created_at.isoformat(),
                "action": log.action.value,
                "before_role": log.before_role,
                "after_role": log.after_role,
                "actor": {
                    "id": str(actor.id),
                    "email": actor.email,
                    "name": actor.name,
                    "role": actor.role.value,
                },
                "target": (
                    {
                        "id": str(target.id),
                        "email": target.email,
                        "name": target.name,
                        "role": target.role.value,
                    }
                    if target
                    else None
                ),
            }
        )
    return ok(result, meta={"limit": limit, "count": len(result)})
