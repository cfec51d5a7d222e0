import uuid
import datetime as dt

from pydantic import BaseModel, ConfigDict

from app.models.attendance import AttendanceStatus
from app.models.user import ApprovalStatus
from app.schemas.user import UserBrief


class MarkAttendanceRequest(BaseModel):
    # required when staff mark for a student; ignored for self-marking
    student_id: uuid.UUID | None = None
    date: dt.date | None = None
    status: AttendanceStatus = AttendanceStatus.PRESENT
    remarks: str | None = None


class AttendanceUpdate(BaseModel):
    status: AttendanceStatus | None = None
    remarks: str | None = None


class RejectAttendanceRequest(BaseModel):
    reason: str | None = None


class AttendanceResponse(BaseModel):
    id: uuid.UUID
    student_id: uuid.UUID
    date: dt.date
    status: AttendanceStatus
    approval_status: ApprovalStatus
    marked_by: uuid.UUID | None = None
    marked_at: dt.datetime
    remarks: str | None = None
    approved_by: uuid.UUID | None = None
    approved_at: dt.datetime | None = None
    rejection_reason: str | None = None
    is_edited: bool
    edited_by: uuid.UUID | None = None
    edited_at: dt.datetime | None = None
    student: UserBrief | None = None

    model_config = ConfigDict(from_attributes=True)


def attendance_payload(record) -> dict:
    return AttendanceResponse.model_validate(record).model_dump(mode="json")
