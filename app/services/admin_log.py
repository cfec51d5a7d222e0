"""
services/admin_log.py

Writes AdminActionLog rows.

Called from the admin and warden-request services right next to the
change being recorded, so the log row shares that change's transaction.

NOTE:
- db.commit() is the caller's job (router)

"""

from sqlalchemy.orm import Session

from app.core.logging import get_logger
from app.models.admin_log import AdminActionLog, AdminAction

logger = get_logger(__name__)


"""
Record one admin action

- actor_id       : admin performing the action
- action         : AdminAction
- target_user_id : account affected (optional)
- before_role    : role before (optional)
- after_role     : role after (optional)

"""
def write_admin_log(
    db: Session,
    *,
    actor_id,
    action: AdminAction,
    target_user_id=None,
    before_role=None,
    after_role=None,
) -> AdminActionLog:
    log = AdminActionLog(
        actor_id=actor_id,
        action=action,
        target_user_id=target_user_id,
        before_role=before_role,
        after_role=after_role,
    )
    db.add(log)
    logger.info(
        "admin_action",
        action=action.value,
        actor_id=str(actor_id),
        target_user_id=str(target_user_id) if target_user_id else None,
    )
    return log
