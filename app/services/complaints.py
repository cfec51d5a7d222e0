"""
services/complaints.py

Complaint ticketing rules.

- ticket ids are TKT-<YYMMDD>-<8 hex chars of a uuid4>
- every status change appends one history row (never rewritten)
- resolved_by / resolved_at are set once, the first time a ticket
  reaches "resolved"

"""

import uuid
from datetime import date, datetime, time, timezone

from sqlalchemy import select
from sqlalchemy.orm import Session

from app.core.exceptions import NotFound, ValidationFailed
from app.db.base import as_utc, utcnow
from app.models.complaint import (
    Complaint,
    ComplaintCategory,
    ComplaintPriority,
    ComplaintStatus,
    ComplaintStatusChange,
)
from app.models.user import User
from app.schemas.complaint import ComplaintCreate


def generate_ticket_id(now: datetime | None = None) -> str:
    now = now or utcnow()
    return f"TKT-{now.strftime('%y%m%d')}-{uuid.uuid4().hex[:8].upper()}"


def _append_history(complaint: Complaint, *, status: ComplaintStatus, actor_id, remarks: str | None) -> None:
    complaint.history.append(
        ComplaintStatusChange(status=status, changed_by=actor_id, changed_at=utcnow(), remarks=remarks)
    )


def create_complaint(db: Session, *, student: User, data: ComplaintCreate) -> Complaint:
    complaint = Complaint(
        ticket_id=generate_ticket_id(),
        student_id=student.id,
        category=data.category,
        description=data.description.strip(),
        priority=data.priority,
        status=ComplaintStatus.PENDING,
    )
    _append_history(complaint, status=ComplaintStatus.PENDING, actor_id=student.id, remarks="Complaint submitted")
    db.add(complaint)
    return complaint


def get_complaint_or_404(db: Session, complaint_id: uuid.UUID) -> Complaint:
    complaint = db.scalar(select(Complaint).where(Complaint.id == complaint_id))
    if not complaint:
        raise NotFound("Complaint not found")
    return complaint


def update_complaint(db: Session, complaint: Complaint, *, actor: User, changes: dict) -> Complaint:
    if not changes:
        raise ValidationFailed("No changes provided")

    if "assigned_to" in changes and changes["assigned_to"] is not None:
        if not db.scalar(select(User.id).where(User.id == changes["assigned_to"])):
            raise NotFound("Assignee not found")
        complaint.assigned_to = changes["assigned_to"]

    for field in ("remarks", "resolution_notes", "priority"):
        if field in changes and changes[field] is not None:
            setattr(complaint, field, changes[field])

    status = changes.get("status")
    if status is not None and status != complaint.status:
        complaint.status = status
        _append_history(complaint, status=status, actor_id=actor.id, remarks=changes.get("remarks"))

        if status == ComplaintStatus.RESOLVED and complaint.resolved_at is None:
            complaint.resolved_by = actor.id
            complaint.resolved_at = utcnow()

    return complaint


def list_complaints(
    db: Session,
    *,
    student_id: uuid.UUID | None = None,
    status: ComplaintStatus | None = None,
    category: ComplaintCategory | None = None,
    priority: ComplaintPriority | None = None,
    start_date: date | None = None,
    end_date: date | None = None,
) -> list[Complaint]:
    q = select(Complaint)
    if student_id is not None:
        q = q.where(Complaint.student_id == student_id)
    if status is not None:
        q = q.where(Complaint.status == status)
    if category is not None:
        q = q.where(Complaint.category == category)
    if priority is not None:
        q = q.where(Complaint.priority == priority)
    if start_date is not None:
        q = q.where(Complaint.created_at >= datetime.combine(start_date, time.min, tzinfo=timezone.utc))
    if end_date is not None:
        q = q.where(Complaint.created_at <= datetime.combine(end_date, time.max, tzinfo=timezone.utc))
    return list(db.scalars(q.order_by(Complaint.created_at.desc())).unique().all())


def status_stats(complaints: list[Complaint]) -> dict:
    stats = {"total": len(complaints)}
    for s in ComplaintStatus:
        stats[s.value] = sum(1 for c in complaints if c.status == s)
    return stats


def category_counts(complaints: list[Complaint]) -> dict:
    counts: dict[str, int] = {}
    for c in complaints:
        counts[c.category.value] = counts.get(c.category.value, 0) + 1
    return counts


def analytics_summary(complaints: list[Complaint]) -> dict:
    resolved = [c for c in complaints if c.status == ComplaintStatus.RESOLVED and c.resolved_at]
    if resolved:
        seconds = sum(
            (as_utc(c.resolved_at) - as_utc(c.created_at)).total_seconds() for c in resolved
        )
        avg_hours = round(seconds / len(resolved) / 3600, 2)
    else:
        avg_hours = 0

    by_category: dict[str, dict] = {}
    for c in complaints:
        row = by_category.setdefault(
            c.category.value, {"total": 0, **{s.value: 0 for s in ComplaintStatus}}
        )
        row["total"] += 1
        row[c.status.value] += 1

    summary = status_stats(complaints)
    summary["avg_resolution_time_hours"] = avg_hours
    summary["category_stats"] = by_category
    return summary
