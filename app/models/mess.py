"""
mess.py

Mess rate and mess bill models.

MessRate : one rate card per (month, year); the daily rate feeds billing
MessBill : one bill per (student, month, year)

total_amount is always derived through app.services.mess.compute_bill;
nothing writes it directly.

"""

import uuid
from datetime import datetime
from enum import Enum

from sqlalchemy import (
    Boolean, DateTime, Float, ForeignKey, Integer, JSON, String, UniqueConstraint, Uuid,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.db.base import Base, enum_column, utcnow


DEFAULT_DAILY_RATE = 100.0
DEFAULT_BREAKFAST_RATE = 30.0
DEFAULT_LUNCH_RATE = 50.0
DEFAULT_DINNER_RATE = 50.0


class PaymentStatus(str, Enum):
    PENDING = "pending"
    PARTIAL = "partial"
    PAID = "paid"


class MessRate(Base):
    __tablename__ = "mess_rates"
    __table_args__ = (
        UniqueConstraint("month", "year", name="uq_mess_rates_month_year"),
    )

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)

    month: Mapped[int] = mapped_column(Integer, nullable=False)
    year: Mapped[int] = mapped_column(Integer, nullable=False)

    daily_rate: Mapped[float] = mapped_column(Float, nullable=False, default=DEFAULT_DAILY_RATE)
    monthly_fixed_rate: Mapped[float] = mapped_column(Float, nullable=False, default=0.0)
    breakfast_rate: Mapped[float] = mapped_column(Float, nullable=False, default=DEFAULT_BREAKFAST_RATE)
    lunch_rate: Mapped[float] = mapped_column(Float, nullable=False, default=DEFAULT_LUNCH_RATE)
    dinner_rate: Mapped[float] = mapped_column(Float, nullable=False, default=DEFAULT_DINNER_RATE)

    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    set_by: Mapped[uuid.UUID | None] = mapped_column(Uuid, ForeignKey("users.id"), nullable=True)
    effective_from: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow, nullable=False)
    remarks: Mapped[str | None] = mapped_column(String(255), nullable=True)

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow, nullable=False)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, onupdate=utcnow, nullable=False
    )


"""
MessBill

- extra_charges / deductions : JSON lists of {"description", "amount"}
- payment_status moves forward only (pending -> partial -> paid)
- total_days counts present, non-rejected attendance days of the month

"""

class MessBill(Base):
    __tablename__ = "mess_bills"
    __table_args__ = (
        UniqueConstraint("student_id", "month", "year", name="uq_mess_bills_student_period"),
    )

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)

    student_id: Mapped[uuid.UUID] = mapped_column(Uuid, ForeignKey("users.id"), nullable=False, index=True)
    month: Mapped[int] = mapped_column(Integer, nullable=False, index=True)
    year: Mapped[int] = mapped_column(Integer, nullable=False, index=True)

    total_days: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    rate: Mapped[float] = mapped_column(Float, nullable=False, default=DEFAULT_DAILY_RATE)
    total_amount: Mapped[float] = mapped_column(Float, nullable=False, default=0.0)

    extra_charges: Mapped[list] = mapped_column(JSON, nullable=False, default=list)
    deductions: Mapped[list] = mapped_column(JSON, nullable=False, default=list)

    payment_status: Mapped[PaymentStatus] = mapped_column(
        enum_column(PaymentStatus, "payment_status"), nullable=False, default=PaymentStatus.PENDING, index=True
    )
    paid_amount: Mapped[float] = mapped_column(Float, nullable=False, default=0.0)
    paid_date: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)

    generated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow, nullable=False)
    generated_by: Mapped[uuid.UUID | None] = mapped_column(Uuid, ForeignKey("users.id"), nullable=True)
    last_updated: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, onupdate=utcnow, nullable=False
    )

    student = relationship("User", foreign_keys=[student_id], lazy="joined")
