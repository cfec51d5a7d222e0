"""
attendance.py

Attendance marking, approval and reporting API.

Students mark their own daily attendance (pending approval); wardens and
admins mark for students, approve or reject pending records, edit and
delete records, and pull daily / monthly views.

Design rules:
- static paths are declared before /{attendance_id}
- students can only read their own records (ownership check)
- rules live in app.services.attendance

"""

import uuid
from datetime import date

from fastapi import APIRouter, Depends, Query, status
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session

from app.core.deps import (
    get_db,
    get_current_user,
    get_current_student,
    get_current_staff,
    ensure_self_or_privileged,
)
from app.core.responses import ok
from app.models.user import ApprovalStatus, User
from app.schemas.attendance import (
    AttendanceUpdate,
    MarkAttendanceRequest,
    RejectAttendanceRequest,
    attendance_payload,
)
from app.services import attendance as attendance_service

router = APIRouter(prefix="/attendance", tags=["attendance"])


"""
Mark attendance

- student: self, present, pending approval; second mark same day -> 400
- staff  : student_id required; creates an approved record or edits the
           existing one

"""

@router.post("/mark")
def mark_attendance(
    data: MarkAttendanceRequest,
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
):
    try:
        record, created = attendance_service.mark_attendance(db, actor=user, data=data)
        db.commit()
        db.refresh(record)
    except Exception:
        db.rollback()
        raise

    if created:
        message = (
            "Attendance marked. Waiting for warden approval."
            if record.approval_status == ApprovalStatus.PENDING
            else "Attendance marked successfully"
        )
        return JSONResponse(
            status_code=status.HTTP_201_CREATED,
            content=ok(attendance_payload(record), message=message),
        )
    return ok(attendance_payload(record), message="Attendance updated successfully")


@router.get("/my")
def my_attendance(
    start_date: date | None = Query(default=None),
    end_date: date | None = Query(default=None),
    month: int | None = Query(default=None, ge=1, le=12),
    year: int | None = Query(default=None, ge=2000, le=2100),
    db: Session = Depends(get_db),
    user: User = Depends(get_current_student),
):
    start, end = attendance_service.resolve_range(
        start_date=start_date, end_date=end_date, month=month, year=year
    )
    records = attendance_service.list_for_student(db, user.id, start=start, end=end)
    return ok(
        [attendance_payload(r) for r in records],
        count=len(records),
        stats=attendance_service.status_stats(records),
        approval_stats=attendance_service.approval_stats(records),
        start_date=start.isoformat(),
        end_date=end.isoformat(),
    )


@router.get("/student/{student_id}")
def student_attendance(
    student_id: uuid.UUID,
    start_date: date | None = Query(default=None),
    end_date: date | None = Query(default=None),
    month: int | None = Query(default=None, ge=1, le=12),
    year: int | None = Query(default=None, ge=2000, le=2100),
    approval_status: ApprovalStatus | None = Query(default=None),
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
):
    ensure_self_or_privileged(user, student_id)

    start, end = attendance_service.resolve_range(
        start_date=start_date, end_date=end_date, month=month, year=year
    )
    records = attendance_service.list_for_student(
        db, student_id, start=start, end=end, approval_status=approval_status
    )
    return ok(
        [attendance_payload(r) for r in records],
        count=len(records),
        stats=attendance_service.status_stats(records),
        approval_stats=attendance_service.approval_stats(records),
    )


@router.get("/today")
def today_attendance(
    db: Session = Depends(get_db),
    _: User = Depends(get_current_staff),
):
    on, records, stats = attendance_service.today_summary(db)
    return ok([attendance_payload(r) for r in records], date=on.isoformat(), stats=stats)


# monthly per-student report
@router.get("/report")
def attendance_report(
    month: int | None = Query(default=None, ge=1, le=12),
    year: int | None = Query(default=None, ge=2000, le=2100),
    room_number: str | None = Query(default=None),
    hostel_block: str | None = Query(default=None),
    db: Session = Depends(get_db),
    _: User = Depends(get_current_staff),
):
    now = attendance_service.today()
    month = month or now.month
    year = year or now.year
    report = attendance_service.monthly_report(
        db, month=month, year=year, room_number=room_number, hostel_block=hostel_block
    )
    return ok(report, month=month, year=year, total_students=len(report))


@router.get("/pending")
def pending_attendance(
    on: date | None = Query(default=None, alias="date"),
    db: Session = Depends(get_db),
    _: User = Depends(get_current_staff),
):
    records = attendance_service.pending_records(db, on)
    return ok([attendance_payload(r) for r in records], count=len(records))


@router.get("/statistics")
def attendance_statistics(
    on: date | None = Query(default=None, alias="date"),
    db: Session = Depends(get_db),
    _: User = Depends(get_current_staff),
):
    return ok(stats=attendance_service.approval_statistics(db, on))


@router.put("/{attendance_id}/approve")
def approve_attendance(
    attendance_id: uuid.UUID,
    db: Session = Depends(get_db),
    user: User = Depends(get_current_staff),
):
    try:
        record = attendance_service.get_record_or_404(db, attendance_id)
        attendance_service.approve_attendance(record, actor=user)
        db.commit()
        db.refresh(record)
    except Exception:
        db.rollback()
        raise

    return ok(attendance_payload(record), message="Attendance approved")


@router.put("/{attendance_id}/reject")
def reject_attendance(
    attendance_id: uuid.UUID,
    data: RejectAttendanceRequest | None = None,
    db: Session = Depends(get_db),
    user: User = Depends(get_current_staff),
):
    try:
        record = attendance_service.get_record_or_404(db, attendance_id)
        attendance_service.reject_attendance(record, actor=user, reason=data.reason if data else None)
        db.commit()
        db.refresh(record)
    except Exception:
        db.rollback()
        raise

    return ok(attendance_payload(record), message="Attendance rejected")


@router.put("/{attendance_id}")
def update_attendance(
    attendance_id: uuid.UUID,
    data: AttendanceUpdate,
    db: Session = Depends(get_db),
    user: User = Depends(get_current_staff),
):
    try:
        record = attendance_service.get_record_or_404(db, attendance_id)
        attendance_service.update_attendance(record, actor=user, status=data.status, remarks=data.remarks)
        db.commit()
        db.refresh(record)
    except Exception:
        db.rollback()
        raise

    return ok(attendance_payload(record), message="Attendance updated successfully")


@router.delete("/{attendance_id}")
def delete_attendance(
    attendance_id: uuid.UUID,
    db: Session = Depends(get_db),
    _: User = Depends(get_current_staff),
):
    try:
        record = attendance_service.get_record_or_404(db, attendance_id)
        db.delete(record)
        db.commit()
    except Exception:
        db.rollback()
        raise

    return ok(message="Attendance deleted successfully")
