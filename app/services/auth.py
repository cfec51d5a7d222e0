"""
services/auth.py

Registration, email verification, login and Google account provisioning.

Pure business rules: functions here mutate ORM objects and raise
ServiceError subclasses. Commits and OTP mail delivery stay in
app.routers.auth.

Rules:
- email must belong to settings.ALLOWED_EMAIL_DOMAIN
- admin accounts are never self-registered
- a new account starts unverified with a fresh 6-digit OTP
- login requires a verified, active, approved account

"""

from sqlalchemy import select, or_
from sqlalchemy.orm import Session

from app.core.config import settings
from app.core.exceptions import (
    AuthenticationFailed,
    Conflict,
    NotFound,
    PermissionDenied,
    ValidationFailed,
)
from app.core.logging import get_logger
from app.core.security import generate_otp, get_password_hash, otp_expiry, verify_password
from app.db.base import as_utc, utcnow
from app.models.user import ApprovalStatus, Role, User, default_approval_for
from app.schemas.auth import RegisterRequest
from app.services.google_oauth import GoogleProfile

logger = get_logger(__name__)


def normalize_email(email: str) -> str:
    return email.strip().lower()


def normalize_college_id(college_id: str) -> str:
    return college_id.strip().upper()


def ensure_allowed_domain(email: str) -> None:
    if not email.endswith("@" + settings.ALLOWED_EMAIL_DOMAIN):
        raise ValidationFailed(f"Only @{settings.ALLOWED_EMAIL_DOMAIN} email addresses are allowed")


def get_user_by_email(db: Session, email: str) -> User | None:
    return db.scalar(select(User).where(User.email == normalize_email(email)))


def issue_otp(user: User) -> str:
    otp = generate_otp()
    user.email_verification_otp = otp
    user.email_verification_otp_expires = otp_expiry()
    return otp


"""
Registration

- duplicate email / college id is checked before anything is written
- students must give a room number
- role=admin is refused outright

"""

def register_user(db: Session, data: RegisterRequest) -> User:
    email = normalize_email(data.email)
    college_id = normalize_college_id(data.college_id)

    ensure_allowed_domain(email)

    if data.role == Role.ADMIN:
        raise PermissionDenied("Admin accounts cannot be created through registration")

    if data.role == Role.STUDENT and not (data.room_number and data.room_number.strip()):
        raise ValidationFailed("Room number is required for students")

    existing = db.scalar(select(User).where(or_(User.email == email, User.college_id == college_id)))
    if existing:
        raise Conflict("User with this email or college ID already exists")

    user = User(
        name=data.name.strip(),
        college_id=college_id,
        email=email,
        password_hash=get_password_hash(data.password),
        role=data.role,
        approval_status=default_approval_for(data.role),
        room_number=data.room_number,
        hostel_block=data.hostel_block,
        department=data.department,
        year=data.year,
        phone_number=data.phone_number,
        is_active=True,
        email_verified=False,
    )
    issue_otp(user)
    db.add(user)
    return user


def prepare_resend_otp(db: Session, email: str) -> User:
    user = get_user_by_email(db, email)
    if not user:
        raise NotFound("User not found")
    if user.email_verified:
        raise ValidationFailed("Email is already verified")
    issue_otp(user)
    return user


def verify_email_otp(db: Session, email: str, otp: str) -> User:
    user = get_user_by_email(db, email)
    if not user:
        raise NotFound("User not found")
    if user.email_verified:
        raise ValidationFailed("Email is already verified")

    # fail closed on missing, expired or wrong code
    if not user.email_verification_otp or not user.email_verification_otp_expires:
        raise ValidationFailed("No verification code found. Please request a new one.")
    if as_utc(user.email_verification_otp_expires) < utcnow():
        raise ValidationFailed("Verification code has expired. Please request a new one.")
    if user.email_verification_otp != otp.strip():
        raise ValidationFailed("Invalid verification code")

    user.email_verified = True
    user.email_verification_otp = None
    user.email_verification_otp_expires = None
    return user


def ensure_can_login(user: User) -> None:
    if not user.is_active:
        raise AuthenticationFailed("Your account has been deactivated")

    if not user.email_verified:
        raise PermissionDenied(
            "Please verify your email before logging in",
            requires_verification=True,
            email=user.email,
        )

    if user.role != Role.ADMIN and user.approval_status != ApprovalStatus.APPROVED:
        if user.approval_status == ApprovalStatus.PENDING:
            raise PermissionDenied("Your account is pending approval", approval_status=user.approval_status.value)
        raise PermissionDenied(
            "Your account has been rejected",
            approval_status=user.approval_status.value,
            rejection_reason=user.rejection_reason,
        )


def authenticate(db: Session, *, email: str | None, college_id: str | None, password: str) -> User:
    if email:
        user = get_user_by_email(db, email)
    else:
        user = db.scalar(select(User).where(User.college_id == normalize_college_id(college_id or "")))

    if not user or not verify_password(password, user.password_hash):
        logger.warning("login_failed", identifier=email or college_id)
        raise AuthenticationFailed("Invalid credentials")

    ensure_can_login(user)
    return user


def change_password(user: User, current_password: str, new_password: str) -> None:
    if not verify_password(current_password, user.password_hash):
        raise AuthenticationFailed("Current password is incorrect")
    user.password_hash = get_password_hash(new_password)


"""
Google sign-in

- the profile email must belong to the allowed domain
- an account is matched by google_id, then by email (and linked)
- unknown emails get an unverified student account; the college id is
  the upper-cased local part of the email

"""

def google_login(db: Session, profile: GoogleProfile) -> tuple[User, bool]:
    """Return (user, created)."""
    email = normalize_email(profile.email)
    if not email.endswith("@" + settings.ALLOWED_EMAIL_DOMAIN):
        raise PermissionDenied(f"Only @{settings.ALLOWED_EMAIL_DOMAIN} email addresses are allowed")

    user = db.scalar(select(User).where(User.google_id == profile.google_id))
    if user:
        return user, False

    user = get_user_by_email(db, email)
    if user:
        user.google_id = profile.google_id
        if not user.avatar:
            user.avatar = profile.avatar
        return user, False

    college_id = normalize_college_id(email.split("@")[0])
    if db.scalar(select(User).where(User.college_id == college_id)):
        raise Conflict("User with this college ID already exists")

    user = User(
        name=profile.name,
        email=email,
        college_id=college_id,
        google_id=profile.google_id,
        avatar=profile.avatar,
        password_hash=None,
        role=Role.STUDENT,
        approval_status=default_approval_for(Role.STUDENT),
        is_active=True,
        email_verified=False,
    )
    db.add(user)
    return user, True
