"""
services/mess.py

Mess billing engine and rate management.

Every billing rule lives here: bill arithmetic, billable-day counting,
rate lookup with defaults, single and bulk generation, payment status
progression and the rate-change cascade.

Design rules:
- compute_bill is pure; everything that stores a total goes through it
- billable days = present days of the month whose approval is not rejected
- routers commit, except generate_all which commits per student so one
  failure never undoes the bills already produced

"""

import uuid
from typing import Any, Iterable, Mapping

from sqlalchemy import select, func
from sqlalchemy.orm import Session

from app.core.exceptions import Conflict, InvalidTransition, NotFound, ValidationFailed
from app.core.logging import get_logger
from app.db.base import utcnow
from app.models.attendance import Attendance, AttendanceStatus
from app.models.mess import (
    MessBill,
    MessRate,
    PaymentStatus,
    DEFAULT_DAILY_RATE,
    DEFAULT_BREAKFAST_RATE,
    DEFAULT_LUNCH_RATE,
    DEFAULT_DINNER_RATE,
)
from app.models.user import ApprovalStatus, Role, User
from app.schemas.mess import MessRateCreate, bill_payload
from app.services.attendance import month_range

logger = get_logger(__name__)

BILL_EXISTS_MESSAGE = "Bill already exists for this month. Use update endpoint to modify."
PAID_BILL_FROZEN_MESSAGE = "Paid bills cannot be re-priced"

# forward-only order of payment states
_PAYMENT_RANK = {
    PaymentStatus.PENDING: 0,
    PaymentStatus.PARTIAL: 1,
    PaymentStatus.PAID: 2,
}


"""
Bill arithmetic

- charges may be plain numbers or mappings carrying an "amount"
- the total never goes below zero

"""

def _amount(item: Any) -> float:
    if isinstance(item, Mapping):
        return float(item.get("amount") or 0)
    return float(item or 0)


def compute_bill(
    total_days: int,
    rate: float,
    extra_charges: Iterable[Any] = (),
    deductions: Iterable[Any] = (),
) -> float:
    base = total_days * float(rate)
    extra = sum(_amount(c) for c in extra_charges or ())
    minus = sum(_amount(d) for d in deductions or ())
    return round(max(0.0, base + extra - minus), 2)


def recompute_total(bill: MessBill) -> MessBill:
    bill.total_amount = compute_bill(bill.total_days, bill.rate, bill.extra_charges, bill.deductions)
    return bill


def reprice(bill: MessBill) -> MessBill:
    """
    Recompute the total of an existing bill.

    A paid bill is closed and keeps its price. A partial bill whose paid
    amount now covers the new total moves forward to paid.
    """
    if bill.payment_status == PaymentStatus.PAID:
        raise InvalidTransition(PAID_BILL_FROZEN_MESSAGE)
    recompute_total(bill)
    if bill.payment_status == PaymentStatus.PARTIAL and bill.paid_amount >= bill.total_amount:
        bill.payment_status = PaymentStatus.PAID
        bill.paid_date = utcnow()
    return bill


"""
Rates

"""

def get_active_rate(db: Session, month: int, year: int) -> MessRate | None:
    return db.scalar(
        select(MessRate).where(
            MessRate.month == month,
            MessRate.year == year,
            MessRate.is_active.is_(True),
        )
    )


def default_rate_payload(month: int, year: int) -> dict:
    return {
        "month": month,
        "year": year,
        "daily_rate": DEFAULT_DAILY_RATE,
        "monthly_fixed_rate": 0.0,
        "breakfast_rate": DEFAULT_BREAKFAST_RATE,
        "lunch_rate": DEFAULT_LUNCH_RATE,
        "dinner_rate": DEFAULT_DINNER_RATE,
        "is_default": True,
    }


def daily_rate_for(db: Session, month: int, year: int) -> float:
    rate = get_active_rate(db, month, year)
    return float(rate.daily_rate) if rate else DEFAULT_DAILY_RATE


def get_rate_or_404(db: Session, rate_id: uuid.UUID) -> MessRate:
    rate = db.scalar(select(MessRate).where(MessRate.id == rate_id))
    if not rate:
        raise NotFound("Mess rate not found")
    return rate


def create_rate(db: Session, *, data: MessRateCreate, actor: User) -> MessRate:
    existing = db.scalar(select(MessRate).where(MessRate.month == data.month, MessRate.year == data.year))
    if existing:
        raise Conflict("Mess rate already exists for this month. Use update endpoint to modify.")

    rate = MessRate(**data.model_dump(), set_by=actor.id, effective_from=utcnow())
    db.add(rate)
    return rate


def update_rate(db: Session, rate: MessRate, *, changes: dict, actor: User) -> int:
    """Apply rate changes; returns how many bills were re-priced."""
    if not changes:
        raise ValidationFailed("No changes provided")

    old_daily = float(rate.daily_rate)
    for field, value in changes.items():
        setattr(rate, field, value)
    rate.set_by = actor.id

    new_daily = changes.get("daily_rate")
    if new_daily is None or float(new_daily) == old_daily:
        return 0

    # settled bills keep the rate they were paid at
    bills = db.scalars(
        select(MessBill).where(
            MessBill.month == rate.month,
            MessBill.year == rate.year,
            MessBill.payment_status != PaymentStatus.PAID,
        )
    ).unique().all()
    for bill in bills:
        bill.rate = float(new_daily)
        reprice(bill)

    logger.info(
        "mess_rate_cascade",
        month=rate.month,
        year=rate.year,
        old_rate=old_daily,
        new_rate=float(new_daily),
        bills_updated=len(bills),
    )
    return len(bills)


def list_rates(db: Session, year: int | None = None) -> list[MessRate]:
    q = select(MessRate)
    if year is not None:
        q = q.where(MessRate.year == year)
    return list(db.scalars(q.order_by(MessRate.year.desc(), MessRate.month.desc())).all())


"""
Billable days

"""

def count_present_days(db: Session, student_id: uuid.UUID, month: int, year: int) -> int:
    start, end = month_range(month, year)
    return db.scalar(
        select(func.count())
        .select_from(Attendance)
        .where(
            Attendance.student_id == student_id,
            Attendance.date >= start,
            Attendance.date <= end,
            Attendance.status == AttendanceStatus.PRESENT,
            Attendance.approval_status != ApprovalStatus.REJECTED,
        )
    ) or 0


"""
Generation

"""

def get_bill_or_404(db: Session, bill_id: uuid.UUID) -> MessBill:
    bill = db.scalar(select(MessBill).where(MessBill.id == bill_id))
    if not bill:
        raise NotFound("Bill not found")
    return bill


def find_bill(db: Session, student_id: uuid.UUID, month: int, year: int) -> MessBill | None:
    return db.scalar(
        select(MessBill).where(
            MessBill.student_id == student_id,
            MessBill.month == month,
            MessBill.year == year,
        )
    )


def generate_bill(
    db: Session,
    *,
    student_id: uuid.UUID,
    month: int,
    year: int,
    actor_id: uuid.UUID | None,
) -> MessBill:
    student = db.scalar(select(User).where(User.id == student_id, User.role == Role.STUDENT))
    if not student:
        raise NotFound("Student not found")

    existing = find_bill(db, student_id, month, year)
    if existing:
        raise Conflict(BILL_EXISTS_MESSAGE, data=bill_payload(existing))

    total_days = count_present_days(db, student_id, month, year)
    rate = daily_rate_for(db, month, year)

    bill = MessBill(
        student_id=student_id,
        month=month,
        year=year,
        total_days=total_days,
        rate=rate,
        extra_charges=[],
        deductions=[],
        payment_status=PaymentStatus.PENDING,
        paid_amount=0.0,
        generated_by=actor_id,
        generated_at=utcnow(),
    )
    recompute_total(bill)
    db.add(bill)
    return bill


def generate_all(db: Session, *, month: int, year: int, actor_id: uuid.UUID | None) -> dict:
    """
    Bill every active student for the month.

    Each student lands in exactly one bucket: generated, skipped (bill
    already there) or failed. Commits after every student.
    """
    month_range(month, year)

    students = db.scalars(
        select(User)
        .where(User.role == Role.STUDENT, User.is_active.is_(True))
        .order_by(User.college_id)
    ).all()
    targets = [(s.id, s.name, s.college_id) for s in students]

    generated: list[dict] = []
    skipped: list[dict] = []
    failed: list[dict] = []

    for student_id, name, college_id in targets:
        entry = {"student_id": str(student_id), "name": name, "college_id": college_id}

        if find_bill(db, student_id, month, year):
            skipped.append({**entry, "reason": "Bill already exists"})
            continue

        try:
            bill = generate_bill(db, student_id=student_id, month=month, year=year, actor_id=actor_id)
            db.commit()
        except Exception as e:
            db.rollback()
            logger.warning("bill_generation_failed", student_id=str(student_id), error=str(e))
            failed.append({**entry, "error": str(e)})
            continue

        generated.append({**entry, "bill_id": str(bill.id), "total_days": bill.total_days,
                          "total_amount": bill.total_amount})

    summary = {
        "total": len(targets),
        "generated": len(generated),
        "skipped": len(skipped),
        "failed": len(failed),
    }
    logger.info("bulk_bill_generation", month=month, year=year, **summary)

    return {
        "summary": summary,
        "generated": generated,
        "skipped": skipped,
        "failed": failed,
    }


def recalculate_bill(db: Session, bill: MessBill) -> MessBill:
    if bill.payment_status == PaymentStatus.PAID:
        raise InvalidTransition(PAID_BILL_FROZEN_MESSAGE)
    bill.total_days = count_present_days(db, bill.student_id, bill.month, bill.year)
    return reprice(bill)


"""
Payment status

- forward only: pending -> partial -> paid, pending -> paid
- only paid_amount given: status follows the amount
- nothing given: settle the bill in full
- entering paid stamps paid_date
- paid requires the full total
- a paid bill keeps its price; re-pricing it is refused

"""

def apply_payment(
    bill: MessBill,
    *,
    paid_amount: float | None = None,
    payment_status: PaymentStatus | None = None,
) -> MessBill:
    if payment_status is None and paid_amount is None:
        payment_status = PaymentStatus.PAID

    if payment_status is None:
        if paid_amount >= bill.total_amount:
            payment_status = PaymentStatus.PAID
        elif paid_amount > 0:
            payment_status = PaymentStatus.PARTIAL
        else:
            payment_status = PaymentStatus.PENDING

    if (
        payment_status == PaymentStatus.PAID
        and paid_amount is not None
        and paid_amount < bill.total_amount
    ):
        raise ValidationFailed("paid_amount is below the bill total; a paid bill must be settled in full")

    current = bill.payment_status
    if _PAYMENT_RANK[payment_status] < _PAYMENT_RANK[current]:
        raise InvalidTransition(
            f"Payment status cannot move from {current.value} to {payment_status.value}"
        )

    if paid_amount is not None:
        bill.paid_amount = float(paid_amount)
    elif payment_status == PaymentStatus.PAID:
        bill.paid_amount = float(bill.total_amount)

    if payment_status == PaymentStatus.PAID and current != PaymentStatus.PAID:
        bill.paid_date = utcnow()

    bill.payment_status = payment_status
    return bill


def update_bill(bill: MessBill, *, changes: dict) -> MessBill:
    if not changes:
        raise ValidationFailed("No changes provided")

    if changes.keys() & {"rate", "extra_charges", "deductions"}:
        if bill.payment_status == PaymentStatus.PAID:
            raise InvalidTransition(PAID_BILL_FROZEN_MESSAGE)
        if "rate" in changes:
            bill.rate = float(changes["rate"])
        if "extra_charges" in changes:
            bill.extra_charges = list(changes["extra_charges"])
        if "deductions" in changes:
            bill.deductions = list(changes["deductions"])
        reprice(bill)

    if "paid_amount" in changes or "payment_status" in changes:
        apply_payment(
            bill,
            paid_amount=changes.get("paid_amount"),
            payment_status=changes.get("payment_status"),
        )
    return bill


"""
Listing / stats

"""

def list_bills(
    db: Session,
    *,
    month: int | None = None,
    year: int | None = None,
    payment_status: PaymentStatus | None = None,
    student_id: uuid.UUID | None = None,
) -> list[MessBill]:
    q = select(MessBill)
    if month is not None:
        q = q.where(MessBill.month == month)
    if year is not None:
        q = q.where(MessBill.year == year)
    if payment_status is not None:
        q = q.where(MessBill.payment_status == payment_status)
    if student_id is not None:
        q = q.where(MessBill.student_id == student_id)
    q = q.order_by(MessBill.year.desc(), MessBill.month.desc(), MessBill.generated_at.desc())
    return list(db.scalars(q).unique().all())


def bill_stats(bills: list[MessBill]) -> dict:
    total_amount = round(sum(float(b.total_amount) for b in bills), 2)
    paid_amount = round(sum(float(b.paid_amount) for b in bills), 2)
    stats = {
        "total_bills": len(bills),
        "total_amount": total_amount,
        "paid_amount": paid_amount,
        "pending_amount": round(max(0.0, total_amount - paid_amount), 2),
    }
    for s in PaymentStatus:
        stats[s.value] = sum(1 for b in bills if b.payment_status == s)
    return stats


def month_summary(db: Session, month: int, year: int) -> dict:
    month_range(month, year)
    bills = list_bills(db, month=month, year=year)
    summary = bill_stats(bills)
    summary["month"] = month
    summary["year"] = year
    summary["average_days"] = round(sum(b.total_days for b in bills) / len(bills), 2) if bills else 0
    summary["daily_rate"] = daily_rate_for(db, month, year)
    return summary


EXPORT_COLUMNS = [
    "month", "year", "name", "college_id", "room_number", "hostel_block",
    "total_days", "rate", "extra_charges", "deductions", "total_amount",
    "paid_amount", "payment_status",
]


def export_rows(db: Session, *, month: int, year: int) -> list[list]:
    month_range(month, year)
    rows = []
    for b in list_bills(db, month=month, year=year):
        s = b.student
        rows.append([
            b.month,
            b.year,
            s.name if s else "",
            s.college_id if s else "",
            (s.room_number or "") if s else "",
            (s.hostel_block or "") if s else "",
            b.total_days,
            float(b.rate),
            round(sum(_amount(c) for c in b.extra_charges or ()), 2),
            round(sum(_amount(d) for d in b.deductions or ()), 2),
            float(b.total_amount),
            float(b.paid_amount),
            b.payment_status.value,
        ])
    # stable order for spreadsheets
    rows.sort(key=lambda r: (r[5], r[4], r[3]))
    return rows
