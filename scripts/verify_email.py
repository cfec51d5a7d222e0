"""

Mark a user's email as verified without the OTP round trip.

For support cases where the verification mail never arrived.

Usage
- (.venv) ~/backend$ python -m scripts.verify_email student@nitj.ac.in

"""

import sys
from dotenv import load_dotenv
load_dotenv()

from sqlalchemy import select
from app.db.session import SessionLocal
from app.models.user import User


def main(argv: list[str]) -> int:
    if len(argv) != 1:
        print("usage: python -m scripts.verify_email <email>")
        return 2

    email = argv[0].strip().lower()

    db = SessionLocal()
    try:
        user = db.scalar(select(User).where(User.email == email))
        if not user:
            print(f"User not found: {email}")
            return 1
        if user.email_verified:
            print(f"Email already verified: {email}")
            return 0

        user.email_verified = True
        user.email_verification_otp = None
        user.email_verification_otp_expires = None
        db.commit()
        print(f"Email verified: {email}")
        return 0
    finally:
        db.close()


if __name__ == "__main__":
    sys.exit(main(sys.argv[1:]))
