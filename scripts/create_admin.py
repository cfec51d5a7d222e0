"""

Initial admin account script.

- run once when the server is first set up
- reads ADMIN_* variables from .env and creates the admin account
- if the account already exists, its password is reset and it is
  re-activated (role admin, approved, email verified)

Usage
- activate the virtualenv
- (.venv) ~/backend$ python -m scripts.create_admin

"""

import os
from dotenv import load_dotenv
load_dotenv()

from sqlalchemy import select
from app.db.session import SessionLocal
from app.models.user import User, Role, ApprovalStatus
from app.core.security import get_password_hash


def main():
    email = os.environ["ADMIN_EMAIL"].strip().lower()
    password = os.environ["ADMIN_PASSWORD"]
    name = os.environ.get("ADMIN_NAME", "System Administrator")
    college_id = os.environ.get("ADMIN_COLLEGE_ID", "ADMIN001").strip().upper()
    phone = os.environ.get("ADMIN_PHONE")

    db = SessionLocal()
    try:
        user = db.scalar(select(User).where(User.email == email))
        if user:
            user.password_hash = get_password_hash(password)
            user.role = Role.ADMIN
            user.approval_status = ApprovalStatus.APPROVED
            user.is_active = True
            user.email_verified = True
            db.commit()
            print(f"Admin already exists, password reset: {email}")
            return

        if db.scalar(select(User).where(User.college_id == college_id)):
            raise RuntimeError(f"College ID {college_id} already belongs to another account")

        db.add(
            User(
                name=name,
                college_id=college_id,
                email=email,
                password_hash=get_password_hash(password),
                role=Role.ADMIN,
                approval_status=ApprovalStatus.APPROVED,
                is_active=True,
                email_verified=True,
                phone_number=phone,
            )
        )
        db.commit()
        print(f"Admin created: {email}")

    finally:
        db.close()


if __name__ == "__main__":
    main()
