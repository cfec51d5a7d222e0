import uuid
from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from app.models.complaint import ComplaintCategory, ComplaintPriority, ComplaintStatus
from app.schemas.user import UserBrief


class ComplaintCreate(BaseModel):
    category: ComplaintCategory
    description: str = Field(..., min_length=10, max_length=2000)
    priority: ComplaintPriority = ComplaintPriority.MEDIUM


class ComplaintUpdate(BaseModel):
    status: ComplaintStatus | None = None
    remarks: str | None = None
    resolution_notes: str | None = None
    assigned_to: uuid.UUID | None = None
    priority: ComplaintPriority | None = None


class StatusChangeResponse(BaseModel):
    status: ComplaintStatus
    changed_by: uuid.UUID | None = None
    changed_at: datetime
    remarks: str | None = None

    model_config = ConfigDict(from_attributes=True)


class ComplaintResponse(BaseModel):
    id: uuid.UUID
    ticket_id: str
    student_id: uuid.UUID
    category: ComplaintCategory
    description: str
    status: ComplaintStatus
    priority: ComplaintPriority
    remarks: str | None = None
    resolution_notes: str | None = None
    assigned_to: uuid.UUID | None = None
    resolved_by: uuid.UUID | None = None
    resolved_at: datetime | None = None
    created_at: datetime
    updated_at: datetime
    student: UserBrief | None = None
    history: list[StatusChangeResponse] = []

    model_config = ConfigDict(from_attributes=True)


def complaint_payload(complaint) -> dict:
    return ComplaintResponse.model_validate(complaint).model_dump(mode="json")
