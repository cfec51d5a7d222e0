"""

Hard-delete a user account by email.

The API never deletes accounts (admins deactivate instead); this script
is the one place a row is removed. Records owned by the user
(attendance, bills, complaints, warden requests, read receipts) are
removed with it.

Usage
- (.venv) ~/backend$ python -m scripts.delete_user student@nitj.ac.in

"""

import sys
from dotenv import load_dotenv
load_dotenv()

from sqlalchemy import delete, select
from app.db.session import SessionLocal
from app.models import (
    AnnouncementRead,
    Attendance,
    Complaint,
    MessBill,
    User,
    WardenRequest,
)


def main(argv: list[str]) -> int:
    if len(argv) != 1:
        print("usage: python -m scripts.delete_user <email>")
        return 2

    email = argv[0].strip().lower()

    db = SessionLocal()
    try:
        user = db.scalar(select(User).where(User.email == email))
        if not user:
            print(f"User not found: {email}")
            return 1

        for complaint in db.scalars(select(Complaint).where(Complaint.student_id == user.id)).unique().all():
            db.delete(complaint)
        db.execute(delete(Attendance).where(Attendance.student_id == user.id))
        db.execute(delete(MessBill).where(MessBill.student_id == user.id))
        db.execute(delete(WardenRequest).where(WardenRequest.user_id == user.id))
        db.execute(delete(AnnouncementRead).where(AnnouncementRead.user_id == user.id))
        db.delete(user)
        db.commit()
        print(f"Deleted user: {user.name} ({email}, {user.role.value})")
        return 0
    except Exception:
        db.rollback()
        raise
    finally:
        db.close()


if __name__ == "__main__":
    sys.exit(main(sys.argv[1:]))
