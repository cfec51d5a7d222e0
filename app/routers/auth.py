"""
auth.py

Authentication and account self-service API.

Registration with email OTP verification, login, profile editing and
Google sign-in. A single bearer access token is issued on login; there
is no refresh token or cookie.

Main endpoints:
- register (unverified account + OTP mail)
- send-verification-otp / verify-email
- login by email or college id
- me / update-profile / change-password
- google / google/callback

Design rules:
- access token travels in the Authorization header
- OTP mail on registration is best effort; the account is kept even
  when delivery fails
- business rules live in app.services.auth

Related files:
- app.core.security        : password hashing / JWT / OTP helpers
- app.core.deps            : get_current_user
- app.services.auth        : registration / verification / login rules
- app.services.google_oauth: Google OAuth client

"""

from fastapi import APIRouter, Depends, Query, status
from fastapi.responses import JSONResponse, RedirectResponse
from sqlalchemy.orm import Session

from app.core.deps import get_db, get_current_user
from app.core.exceptions import ServiceError
from app.core.logging import get_logger
from app.core.responses import error_body, ok
from app.core.security import create_access_token
from app.models.user import Role, User
from app.schemas.auth import (
    RegisterRequest,
    EmailRequest,
    VerifyEmailRequest,
    LoginRequest,
    UpdateProfileRequest,
    ChangePasswordRequest,
)
from app.schemas.user import user_payload
from app.services import auth as auth_service
from app.services.email import send_otp_email
from app.services.google_oauth import GoogleOAuthClient, get_google_client

router = APIRouter(prefix="/auth", tags=["auth"])

logger = get_logger(__name__)


def _send_otp_best_effort(user: User, otp: str) -> bool:
    try:
        send_otp_email(user.email, user.name, otp)
    except ServiceError as e:
        logger.warning("otp_email_not_sent", email=user.email, reason=e.message)
        return False
    return True


"""
Register

- organisation email only
- duplicate email / college id rejected before any write
- account starts unverified with a 6-digit OTP (10 minutes)

"""

@router.post("/register", status_code=status.HTTP_201_CREATED)
def register(data: RegisterRequest, db: Session = Depends(get_db)):
    try:
        user = auth_service.register_user(db, data)
        otp = user.email_verification_otp
        db.commit()
        db.refresh(user)
    except Exception:
        db.rollback()
        raise

    email_sent = _send_otp_best_effort(user, otp)

    return ok(
        {
            "user": user_payload(user),
            "requires_verification": True,
            "email_sent": email_sent,
        },
        message="Registration successful. Please verify your email with the OTP sent to your inbox.",
    )


"""
Resend verification OTP

- unknown email -> 404, already verified -> 400
- delivery failure is an error here

"""

@router.post("/send-verification-otp")
def send_verification_otp(data: EmailRequest, db: Session = Depends(get_db)):
    try:
        user = auth_service.prepare_resend_otp(db, data.email)
        otp = user.email_verification_otp
        db.commit()
    except Exception:
        db.rollback()
        raise

    send_otp_email(user.email, user.name, otp)
    return ok(message="Verification OTP sent to your email")


@router.post("/verify-email")
def verify_email(data: VerifyEmailRequest, db: Session = Depends(get_db)):
    try:
        user = auth_service.verify_email_otp(db, data.email, data.otp)
        db.commit()
        db.refresh(user)
    except Exception:
        db.rollback()
        raise

    return ok({"user": user_payload(user)}, message="Email verified successfully")


"""
Login

- email or college id + password
- unverified -> 403 with requires_verification
- pending / rejected approval -> 403

"""

@router.post("/login")
def login(data: LoginRequest, db: Session = Depends(get_db)):
    user = auth_service.authenticate(
        db, email=data.email, college_id=data.college_id, password=data.password
    )
    token = create_access_token(subject=str(user.id))
    return ok({"token": token, "user": user_payload(user)}, message="Login successful")


@router.get("/me")
def me(user: User = Depends(get_current_user)):
    return ok({"user": user_payload(user)})


@router.put("/update-profile")
def update_profile(
    data: UpdateProfileRequest,
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
):
    changes = data.model_dump(exclude_unset=True, exclude_none=True)
    # room number is only self-managed by students
    if user.role != Role.STUDENT:
        changes.pop("room_number", None)

    try:
        for field, value in changes.items():
            setattr(user, field, value)
        db.commit()
        db.refresh(user)
    except Exception:
        db.rollback()
        raise

    return ok({"user": user_payload(user)}, message="Profile updated successfully")


@router.put("/change-password")
def change_password(
    data: ChangePasswordRequest,
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
):
    try:
        auth_service.change_password(user, data.current_password, data.new_password)
        db.commit()
    except Exception:
        db.rollback()
        raise

    return ok(message="Password changed successfully")


"""
Google sign-in

- /google redirects to the provider consent page
- /google/callback links or provisions the account, then either returns
  a token or asks for email verification

"""

@router.get("/google")
def google_login(client: GoogleOAuthClient = Depends(get_google_client)):
    return RedirectResponse(client.authorization_url(), status_code=status.HTTP_302_FOUND)


@router.get("/google/callback")
def google_callback(
    code: str = Query(..., min_length=1),
    db: Session = Depends(get_db),
    client: GoogleOAuthClient = Depends(get_google_client),
):
    profile = client.fetch_profile(code)

    try:
        user, created = auth_service.google_login(db, profile)
        otp = None
        if not user.email_verified and user.is_active:
            otp = auth_service.issue_otp(user)
        db.commit()
        db.refresh(user)
    except Exception:
        db.rollback()
        raise

    if otp is not None:
        email_sent = _send_otp_best_effort(user, otp)
        return JSONResponse(
            status_code=status.HTTP_403_FORBIDDEN,
            content=error_body(
                "Please verify your email before logging in",
                requires_verification=True,
                email=user.email,
                email_sent=email_sent,
                is_new_user=created,
            ),
        )

    auth_service.ensure_can_login(user)

    token = create_access_token(subject=str(user.id))
    return ok({"token": token, "user": user_payload(user), "is_new_user": created}, message="Login successful")
