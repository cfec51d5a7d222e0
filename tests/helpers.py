# tests/helpers.py
import uuid
from datetime import date

from sqlalchemy.orm import Session
from sqlalchemy import select

from app.core.security import create_access_token, get_password_hash
from app.models.attendance import Attendance, AttendanceStatus
from app.models.user import ApprovalStatus, Role, User

DOMAIN = "nitj.ac.in"
PASSWORD = "Passw0rd!"


def auth_header(token: str) -> dict:
    return {"Authorization": f"Bearer {token}"}


def unique_email(prefix: str = "user") -> str:
    return f"{prefix}_{uuid.uuid4().hex[:6]}@{DOMAIN}"


def create_user_in_db(
    db: Session,
    *,
    role: Role = Role.STUDENT,
    email: str | None = None,
    password: str = PASSWORD,
    name: str | None = None,
    college_id: str | None = None,
    approval_status: ApprovalStatus = ApprovalStatus.APPROVED,
    email_verified: bool = True,
    is_active: bool = True,
    room_number: str | None = None,
    hostel_block: str | None = None,
) -> User:
    user = User(
        name=name or f"{role.value.title()} {uuid.uuid4().hex[:4]}",
        college_id=college_id or f"{role.value[:3].upper()}{uuid.uuid4().hex[:6].upper()}",
        email=email or unique_email(role.value),
        password_hash=get_password_hash(password),
        role=role,
        approval_status=approval_status,
        email_verified=email_verified,
        is_active=is_active,
        room_number=room_number if room_number is not None else ("101" if role == Role.STUDENT else None),
        hostel_block=hostel_block if hostel_block is not None else ("A" if role == Role.STUDENT else None),
    )
    db.add(user)
    db.commit()
    db.refresh(user)
    return user


def token_for(user: User) -> str:
    return create_access_token(subject=str(user.id))


def headers_for(user: User) -> dict:
    return auth_header(token_for(user))


def create_admin_in_db(db: Session, **kwargs) -> User:
    return create_user_in_db(db, role=Role.ADMIN, **kwargs)


def create_warden_in_db(db: Session, **kwargs) -> User:
    return create_user_in_db(db, role=Role.WARDEN, **kwargs)


def create_student_in_db(db: Session, **kwargs) -> User:
    return create_user_in_db(db, role=Role.STUDENT, **kwargs)


def add_attendance(
    db: Session,
    student: User,
    days: list[date],
    *,
    status: AttendanceStatus = AttendanceStatus.PRESENT,
    approval_status: ApprovalStatus = ApprovalStatus.APPROVED,
) -> list[Attendance]:
    records = [
        Attendance(
            student_id=student.id,
            date=d,
            status=status,
            approval_status=approval_status,
            marked_by=student.id,
        )
        for d in days
    ]
    db.add_all(records)
    db.commit()
    return records


def get_user(db: Session, user_id) -> User:
    # requests run in their own sessions; drop anything cached here
    db.expire_all()
    if isinstance(user_id, str):
        user_id = uuid.UUID(user_id)
    return db.scalar(select(User).where(User.id == user_id))
