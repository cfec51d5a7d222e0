"""
services/attendance.py

Attendance marking, approval and reporting rules.

- one record per (student, calendar date)
- a student marks only themselves, as present, pending approval
- staff marking creates an approved record, or edits the existing one
  (approval state untouched, edit audit fields stamped)
- approve / reject only from pending

Routers commit; this module only mutates and queries.

"""

import calendar
import uuid
from datetime import date

from sqlalchemy import select, func
from sqlalchemy.orm import Session

from app.core.exceptions import Conflict, InvalidTransition, NotFound, ValidationFailed
from app.db.base import utcnow
from app.models.attendance import Attendance, AttendanceStatus
from app.models.user import ApprovalStatus, Role, User
from app.schemas.attendance import MarkAttendanceRequest, attendance_payload


DEFAULT_REJECTION_REASON = "Rejected by warden"
MIN_YEAR, MAX_YEAR = 2000, 2100


def today() -> date:
    # server-local calendar date
    return date.today()


def month_range(month: int, year: int) -> tuple[date, date]:
    if not 1 <= month <= 12:
        raise ValidationFailed("month must be between 1 and 12")
    if not MIN_YEAR <= year <= MAX_YEAR:
        raise ValidationFailed(f"year must be between {MIN_YEAR} and {MAX_YEAR}")
    last = calendar.monthrange(year, month)[1]
    return date(year, month, 1), date(year, month, last)


def resolve_range(
    *,
    start_date: date | None,
    end_date: date | None,
    month: int | None,
    year: int | None,
) -> tuple[date, date]:
    """Explicit range wins, then month/year, then the current month."""
    if start_date and end_date:
        if start_date > end_date:
            raise ValidationFailed("start_date must be before end_date")
        return start_date, end_date
    now = today()
    return month_range(month or now.month, year or now.year)


def get_record_or_404(db: Session, attendance_id: uuid.UUID) -> Attendance:
    record = db.scalar(select(Attendance).where(Attendance.id == attendance_id))
    if not record:
        raise NotFound("Attendance record not found")
    return record


def find_record(db: Session, student_id: uuid.UUID, on: date) -> Attendance | None:
    return db.scalar(
        select(Attendance).where(Attendance.student_id == student_id, Attendance.date == on)
    )


def get_student_or_404(db: Session, student_id: uuid.UUID) -> User:
    student = db.scalar(select(User).where(User.id == student_id, User.role == Role.STUDENT))
    if not student:
        raise NotFound("Student not found")
    return student


def _stamp_edit(record: Attendance, actor: User) -> None:
    record.is_edited = True
    record.edited_by = actor.id
    record.edited_at = utcnow()


"""
Marking

Returns (record, created). created=False means an existing record was
edited by staff.

"""

def mark_attendance(db: Session, *, actor: User, data: MarkAttendanceRequest) -> tuple[Attendance, bool]:
    on = data.date or today()

    if actor.role == Role.STUDENT:
        existing = find_record(db, actor.id, on)
        if existing:
            raise Conflict("Attendance already marked for this date", data=attendance_payload(existing))

        record = Attendance(
            student_id=actor.id,
            date=on,
            status=AttendanceStatus.PRESENT,
            approval_status=ApprovalStatus.PENDING,
            marked_by=actor.id,
            marked_at=utcnow(),
            remarks=data.remarks,
        )
        db.add(record)
        return record, True

    if not data.student_id:
        raise ValidationFailed("Student ID is required")
    student = get_student_or_404(db, data.student_id)

    existing = find_record(db, student.id, on)
    if existing:
        existing.status = data.status
        if data.remarks is not None:
            existing.remarks = data.remarks
        _stamp_edit(existing, actor)
        return existing, False

    now = utcnow()
    record = Attendance(
        student_id=student.id,
        date=on,
        status=data.status,
        approval_status=ApprovalStatus.APPROVED,
        marked_by=actor.id,
        marked_at=now,
        approved_by=actor.id,
        approved_at=now,
        remarks=data.remarks,
    )
    db.add(record)
    return record, True


def update_attendance(
    record: Attendance,
    *,
    actor: User,
    status: AttendanceStatus | None,
    remarks: str | None,
) -> Attendance:
    if status is None and remarks is None:
        raise ValidationFailed("No changes provided")
    if status is not None:
        record.status = status
    if remarks is not None:
        record.remarks = remarks
    _stamp_edit(record, actor)
    return record


def _ensure_pending(record: Attendance) -> None:
    if record.approval_status != ApprovalStatus.PENDING:
        raise InvalidTransition(f"Attendance already {record.approval_status.value}")


def approve_attendance(record: Attendance, *, actor: User) -> Attendance:
    _ensure_pending(record)
    record.approval_status = ApprovalStatus.APPROVED
    record.approved_by = actor.id
    record.approved_at = utcnow()
    return record


def reject_attendance(record: Attendance, *, actor: User, reason: str | None) -> Attendance:
    _ensure_pending(record)
    record.approval_status = ApprovalStatus.REJECTED
    record.approved_by = actor.id
    record.approved_at = utcnow()
    record.rejection_reason = reason or DEFAULT_REJECTION_REASON
    return record


"""
Queries and stats

"""

def status_stats(records: list[Attendance]) -> dict:
    stats = {s.value: 0 for s in AttendanceStatus}
    for r in records:
        stats[r.status.value] += 1
    stats["total"] = len(records)
    return stats


def approval_stats(records: list[Attendance]) -> dict:
    stats = {s.value: 0 for s in ApprovalStatus}
    for r in records:
        stats[r.approval_status.value] += 1
    return stats


def list_for_student(
    db: Session,
    student_id: uuid.UUID,
    *,
    start: date,
    end: date,
    approval_status: ApprovalStatus | None = None,
) -> list[Attendance]:
    q = select(Attendance).where(
        Attendance.student_id == student_id,
        Attendance.date >= start,
        Attendance.date <= end,
    )
    if approval_status is not None:
        q = q.where(Attendance.approval_status == approval_status)
    return list(db.scalars(q.order_by(Attendance.date.desc())).unique().all())


def count_active_students(db: Session) -> int:
    return db.scalar(
        select(func.count()).select_from(User).where(User.role == Role.STUDENT, User.is_active.is_(True))
    ) or 0


def records_on(db: Session, on: date) -> list[Attendance]:
    return list(
        db.scalars(select(Attendance).where(Attendance.date == on).order_by(Attendance.marked_at)).unique().all()
    )


def today_summary(db: Session) -> tuple[date, list[Attendance], dict]:
    on = today()
    records = records_on(db, on)
    total_students = count_active_students(db)
    stats = status_stats(records)
    stats.pop("total")
    stats = {
        "total_students": total_students,
        "marked": len(records),
        "not_marked": max(0, total_students - len(records)),
        **stats,
    }
    return on, records, stats


def pending_records(db: Session, on: date | None = None) -> list[Attendance]:
    q = select(Attendance).where(Attendance.approval_status == ApprovalStatus.PENDING)
    if on is not None:
        q = q.where(Attendance.date == on)
    return list(db.scalars(q.order_by(Attendance.date.desc(), Attendance.marked_at)).unique().all())


def approval_statistics(db: Session, on: date | None = None) -> dict:
    q = select(Attendance.approval_status, func.count()).group_by(Attendance.approval_status)
    if on is not None:
        q = q.where(Attendance.date == on)
    stats = {s.value: 0 for s in ApprovalStatus}
    for status, n in db.execute(q).all():
        stats[status.value] = n
    stats["total"] = sum(stats.values())
    return stats


def monthly_report(
    db: Session,
    *,
    month: int,
    year: int,
    room_number: str | None = None,
    hostel_block: str | None = None,
) -> list[dict]:
    start, end = month_range(month, year)

    sq = select(User).where(User.role == Role.STUDENT, User.is_active.is_(True))
    if room_number:
        sq = sq.where(User.room_number == room_number)
    if hostel_block:
        sq = sq.where(User.hostel_block == hostel_block)
    students = db.scalars(sq.order_by(User.college_id)).all()

    records = db.scalars(
        select(Attendance).where(Attendance.date >= start, Attendance.date <= end)
    ).unique().all()
    by_student: dict[uuid.UUID, list[Attendance]] = {}
    for r in records:
        by_student.setdefault(r.student_id, []).append(r)

    report = []
    for s in students:
        mine = by_student.get(s.id, [])
        stats = status_stats(mine)
        present = stats[AttendanceStatus.PRESENT.value]
        stats["percentage"] = round(present / len(mine) * 100, 2) if mine else 0
        report.append(
            {
                "student": {
                    "id": str(s.id),
                    "name": s.name,
                    "college_id": s.college_id,
                    "room_number": s.room_number,
                    "hostel_block": s.hostel_block,
                },
                "attendance": stats,
            }
        )
    return report
