"""
services/email.py

Outbound email through the SendGrid v3 HTTP API.

Only the OTP verification mail is sent today. The transport is a plain
httpx POST so tests never need a live key: with SENDGRID_* unset the
send fails fast with ConfigurationError.

NOTE:
- callers decide whether a failed send is fatal (registration: no,
  resend-OTP endpoint: yes)

"""

from html import escape

import httpx

from app.core.config import settings
from app.core.exceptions import ConfigurationError, EmailDeliveryError
from app.core.logging import get_logger

SENDGRID_URL = "https://api.sendgrid.com/v3/mail/send"

logger = get_logger(__name__)


def send_email(to: str, subject: str, html: str, *, timeout: float = 10.0) -> None:
    if not settings.SENDGRID_API_KEY or not settings.SENDGRID_FROM_EMAIL:
        raise ConfigurationError("Email service is not configured")

    payload = {
        "personalizations": [{"to": [{"email": to}]}],
        "from": {"email": settings.SENDGRID_FROM_EMAIL, "name": "Hostel Management"},
        "subject": subject,
        "content": [{"type": "text/html", "value": html}],
    }
    headers = {"Authorization": f"Bearer {settings.SENDGRID_API_KEY}"}

    try:
        with httpx.Client(timeout=timeout) as client:
            r = client.post(SENDGRID_URL, headers=headers, json=payload)
            r.raise_for_status()
    except httpx.HTTPError as e:
        logger.warning("email_send_failed", to=to, error=type(e).__name__)
        raise EmailDeliveryError("Failed to send email") from e

    logger.info("email_sent", to=to, subject=subject)


def otp_email_html(name: str, otp: str, minutes: int) -> str:
    return (
        "<div style=\"font-family: Arial, sans-serif; max-width: 600px; margin: 0 auto;\">"
        "<h2>Email Verification</h2>"
        f"<p>Hello {escape(name)},</p>"
        "<p>Your verification code is:</p>"
        f"<p style=\"font-size: 32px; font-weight: bold; letter-spacing: 6px;\">{otp}</p>"
        f"<p>This code expires in {minutes} minutes.</p>"
        "<p>If you did not request this, please ignore this email.</p>"
        "</div>"
    )


def send_otp_email(to: str, name: str, otp: str) -> None:
    send_email(
        to,
        "Verify your email - Hostel Management",
        otp_email_html(name, otp, settings.OTP_EXPIRE_MINUTES),
    )
