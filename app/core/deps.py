"""
deps.py

FastAPI dependencies shared by every router.

- get_db             : one Session per request
- get_current_user   : bearer token -> active, approved User
- require_roles      : role allow-list gate
- ensure_self_or_privileged : students may only touch their own records

Error messages here are what clients see on every protected route, so
they are kept stable.

"""

from typing import Generator
import uuid

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from jose import JWTError
from sqlalchemy.orm import Session
from sqlalchemy import select

from app.core.logging import bind_user
from app.core.security import decode_access_token
from app.db.session import SessionLocal
from app.models.user import User, Role, ApprovalStatus

# bearer token input for Swagger "Authorize"
bearer_scheme = HTTPBearer(auto_error=False)


def get_db() -> Generator[Session, None, None]:
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


def get_current_user(
    cred: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),
    db: Session = Depends(get_db),
) -> User:
    if cred is None:
        raise _unauthorized("Not authorized to access this route. Please login.")

    try:
        user_id = uuid.UUID(decode_access_token(cred.credentials))
    except (JWTError, ValueError):
        raise _unauthorized("Invalid or expired token. Please login again.")

    user = db.scalar(select(User).where(User.id == user_id))
    if not user:
        raise _unauthorized("User not found")

    if not user.is_active:
        raise _unauthorized("Your account has been deactivated")

    # admins are never gated on approval
    if user.role != Role.ADMIN and user.approval_status != ApprovalStatus.APPROVED:
        raise _unauthorized(f"Your account is {user.approval_status.value}. Access denied.")

    bind_user(str(user.id))
    return user


def require_roles(*roles: Role):
    allowed = set(roles)

    def _checker(current_user: User = Depends(get_current_user)) -> User:
        if current_user.role not in allowed:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail=f"User role '{current_user.role.value}' is not authorized to access this route",
            )
        return current_user

    return _checker


get_current_student = require_roles(Role.STUDENT)
get_current_warden = require_roles(Role.WARDEN)
get_current_staff = require_roles(Role.WARDEN, Role.ADMIN)
get_current_admin = require_roles(Role.ADMIN)


def ensure_self_or_privileged(user: User, target_id: uuid.UUID) -> None:
    if user.role == Role.STUDENT and user.id != target_id:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="You are not authorized to access this data",
        )
