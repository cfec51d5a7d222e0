"""
security.py

Low-level security helpers: password hashing, JWT access tokens and
email-verification OTPs.

No routing or business rules live here.

Main functions:
- password hashing / verification (bcrypt)
- access token creation and decoding
- 6-digit OTP generation and expiry calculation

Design rules:
- expiry (exp) handled in UTC
- token payload carries only the user id (sub) and the token type
- OTPs come from the `secrets` module, never `random`

Related files:
- app.core.config        : secret key / expiry settings
- app.core.deps          : token verification dependency
- app.services.auth      : register / verify / login

"""

import secrets
from datetime import datetime, timedelta, timezone
from typing import Optional

from jose import jwt, JWTError
from passlib.context import CryptContext

from app.core.config import settings


# bcrypt hashing context
# deprecated="auto" so the scheme can be rotated later
pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")


def get_password_hash(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(plain: str, hashed: str | None) -> bool:
    # Google-only accounts have no local password
    if not hashed:
        return False
    return pwd_context.verify(plain, hashed)


"""
Access token

- sub  : user id (string UUID)
- type : always "access"
- exp  : UTC timestamp

"""

def create_access_token(subject: str, expires_delta: Optional[timedelta] = None) -> str:
    expire = datetime.now(timezone.utc) + (
        expires_delta or timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)
    )
    payload = {
        "sub": subject,
        "type": "access",
        "exp": int(expire.timestamp()),
    }
    return jwt.encode(payload, settings.SECRET_KEY, algorithm=settings.ALGORITHM)


def decode_access_token(token: str) -> str:
    """Return the subject of a valid access token, raise JWTError otherwise."""
    payload = jwt.decode(token, settings.SECRET_KEY, algorithms=[settings.ALGORITHM])
    if payload.get("type") != "access":
        raise JWTError("Not an access token")
    sub = payload.get("sub")
    if not sub:
        raise JWTError("Missing subject")
    return sub


"""
Email verification OTP

- 6 digits, zero padding never needed (100000..999999)
- validity window comes from settings.OTP_EXPIRE_MINUTES

"""

def generate_otp() -> str:
    return str(100000 + secrets.randbelow(900000))


def otp_expiry(now: datetime | None = None) -> datetime:
    now = now or datetime.now(timezone.utc)
    return now + timedelta(minutes=settings.OTP_EXPIRE_MINUTES)
