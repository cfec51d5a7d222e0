import uuid
from datetime import datetime

from pydantic import BaseModel, ConfigDict

from app.models.user import ApprovalStatus


class ReviewRequest(BaseModel):
    notes: str | None = None
    # accepted as an alias of notes on reject
    reason: str | None = None


class WardenRequestResponse(BaseModel):
    id: uuid.UUID
    user_id: uuid.UUID
    name: str
    email: str
    college_id: str
    department: str | None = None
    phone_number: str | None = None
    status: ApprovalStatus
    requested_at: datetime
    reviewed_by: uuid.UUID | None = None
    reviewed_at: datetime | None = None
    review_notes: str | None = None

    model_config = ConfigDict(from_attributes=True)


def warden_request_payload(req) -> dict:
    return WardenRequestResponse.model_validate(req).model_dump(mode="json")
