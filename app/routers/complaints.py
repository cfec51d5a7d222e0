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
    get_current_warden,
    ensure_self_or_privileged,
)
from app.core.responses import ok
from app.models.complaint import ComplaintCategory, ComplaintPriority, ComplaintStatus
from app.models.user import User
from app.schemas.complaint import ComplaintCreate, ComplaintUpdate, complaint_payload
from app.services import complaints as complaint_service

router = APIRouter(prefix="/complaints", tags=["complaints"])


"""
Submit a complaint (student)

- ticket id TKT-YYMMDD-XXXXXXXX
- first history entry: pending / "Complaint submitted"

"""

@router.post("")
def create_complaint(
    data: ComplaintCreate,
    db: Session = Depends(get_db),
    user: User = Depends(get_current_student),
):
    try:
        complaint = complaint_service.create_complaint(db, student=user, data=data)
        db.commit()
        db.refresh(complaint)
    except Exception:
        db.rollback()
        raise

    return JSONResponse(
        status_code=status.HTTP_201_CREATED,
        content=ok(complaint_payload(complaint), message="Complaint submitted successfully"),
    )


@router.get("/my")
def my_complaints(
    status_filter: ComplaintStatus | None = Query(default=None, alias="status"),
    category: ComplaintCategory | None = Query(default=None),
    db: Session = Depends(get_db),
    user: User = Depends(get_current_student),
):
    complaints = complaint_service.list_complaints(
        db, student_id=user.id, status=status_filter, category=category
    )
    return ok(
        [complaint_payload(c) for c in complaints],
        count=len(complaints),
        stats=complaint_service.status_stats(complaints),
    )


@router.get("")
def list_complaints(
    status_filter: ComplaintStatus | None = Query(default=None, alias="status"),
    category: ComplaintCategory | None = Query(default=None),
    priority: ComplaintPriority | None = Query(default=None),
    student_id: uuid.UUID | None = Query(default=None),
    start_date: date | None = Query(default=None),
    end_date: date | None = Query(default=None),
    db: Session = Depends(get_db),
    _: User = Depends(get_current_staff),
):
    complaints = complaint_service.list_complaints(
        db,
        student_id=student_id,
        status=status_filter,
        category=category,
        priority=priority,
        start_date=start_date,
        end_date=end_date,
    )
    stats = complaint_service.status_stats(complaints)
    stats["by_category"] = complaint_service.category_counts(complaints)
    return ok([complaint_payload(c) for c in complaints], count=len(complaints), stats=stats)


@router.get("/analytics/summary")
def complaint_analytics(
    start_date: date | None = Query(default=None),
    end_date: date | None = Query(default=None),
    db: Session = Depends(get_db),
    _: User = Depends(get_current_staff),
):
    complaints = complaint_service.list_complaints(db, start_date=start_date, end_date=end_date)
    return ok(summary=complaint_service.analytics_summary(complaints))


@router.get("/{complaint_id}")
def get_complaint(
    complaint_id: uuid.UUID,
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
):
    complaint = complaint_service.get_complaint_or_404(db, complaint_id)
    ensure_self_or_privileged(user, complaint.student_id)
    return ok(complaint_payload(complaint))


# status change appends a history entry
@router.put("/{complaint_id}")
def update_complaint(
    complaint_id: uuid.UUID,
    data: ComplaintUpdate,
    db: Session = Depends(get_db),
    user: User = Depends(get_current_warden),
):
    try:
        complaint = complaint_service.get_complaint_or_404(db, complaint_id)
        complaint_service.update_complaint(
            db, complaint, actor=user, changes=data.model_dump(exclude_unset=True)
        )
        db.commit()
        db.refresh(complaint)
    except Exception:
        db.rollback()
        raise

    return ok(complaint_payload(complaint), message="Complaint updated successfully")


@router.delete("/{complaint_id}")
def delete_complaint(
    complaint_id: uuid.UUID,
    db: Session = Depends(get_db),
    _: User = Depends(get_current_warden),
):
    try:
        complaint = complaint_service.get_complaint_or_404(db, complaint_id)
        db.delete(complaint)
        db.commit()
    except Exception:
        db.rollback()
        raise

    return ok(message="Complaint deleted successfully")
