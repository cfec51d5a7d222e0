import uuid
from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field, ConfigDict

from app.models.mess import (
    PaymentStatus,
    DEFAULT_DAILY_RATE,
    DEFAULT_BREAKFAST_RATE,
    DEFAULT_LUNCH_RATE,
    DEFAULT_DINNER_RATE,
)
from app.schemas.user import UserBrief


Month = int
Year = int


class ChargeItem(BaseModel):
    description: str = ""
    amount: float = Field(..., ge=0)


class GenerateBillRequest(BaseModel):
    student_id: uuid.UUID
    month: Month = Field(..., ge=1, le=12)
    year: Year = Field(..., ge=2000, le=2100)


class GenerateAllRequest(BaseModel):
    month: Month = Field(..., ge=1, le=12)
    year: Year = Field(..., ge=2000, le=2100)


class BillUpdateRequest(BaseModel):
    rate: Optional[float] = Field(default=None, ge=0)
    extra_charges: Optional[List[ChargeItem]] = None
    deductions: Optional[List[ChargeItem]] = None
    paid_amount: Optional[float] = Field(default=None, ge=0)
    payment_status: Optional[PaymentStatus] = None


class PaymentRequest(BaseModel):
    paid_amount: Optional[float] = Field(default=None, ge=0)
    payment_status: Optional[PaymentStatus] = None


class MessBillResponse(BaseModel):
    id: uuid.UUID
    student_id: uuid.UUID
    month: int
    year: int
    total_days: int
    rate: float
    total_amount: float
    extra_charges: list
    deductions: list
    payment_status: PaymentStatus
    paid_amount: float
    paid_date: Optional[datetime] = None
    generated_at: datetime
    generated_by: Optional[uuid.UUID] = None
    last_updated: datetime
    student: Optional[UserBrief] = None

    model_config = ConfigDict(from_attributes=True)


class MessRateCreate(BaseModel):
    month: Month = Field(..., ge=1, le=12)
    year: Year = Field(..., ge=2000, le=2100)
    daily_rate: float = Field(default=DEFAULT_DAILY_RATE, ge=0)
    monthly_fixed_rate: float = Field(default=0.0, ge=0)
    breakfast_rate: float = Field(default=DEFAULT_BREAKFAST_RATE, ge=0)
    lunch_rate: float = Field(default=DEFAULT_LUNCH_RATE, ge=0)
    dinner_rate: float = Field(default=DEFAULT_DINNER_RATE, ge=0)
    is_active: bool = True
    remarks: Optional[str] = None


class MessRateUpdate(BaseModel):
    daily_rate: Optional[float] = Field(default=None, ge=0)
    monthly_fixed_rate: Optional[float] = Field(default=None, ge=0)
    breakfast_rate: Optional[float] = Field(default=None, ge=0)
    lunch_rate: Optional[float] = Field(default=None, ge=0)
    dinner_rate: Optional[float] = Field(default=None, ge=0)
    is_active: Optional[bool] = None
    remarks: Optional[str] = None


class MessRateResponse(BaseModel):
    id: uuid.UUID
    month: int
    year: int
    daily_rate: float
    monthly_fixed_rate: float
    breakfast_rate: float
    lunch_rate: float
    dinner_rate: float
    is_active: bool
    set_by: Optional[uuid.UUID] = None
    effective_from: datetime
    remarks: Optional[str] = None

    model_config = ConfigDict(from_attributes=True)


def bill_payload(bill) -> dict:
    return MessBillResponse.model_validate(bill).model_dump(mode="json")


def rate_payload(rate) -> dict:
    return MessRateResponse.model_validate(rate).model_dump(mode="json")
