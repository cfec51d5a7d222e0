import uuid
from datetime import datetime

from pydantic import BaseModel, ConfigDict

from app.models.user import Role, ApprovalStatus


# role change request (admin)
class RoleUpdate(BaseModel):
    role: Role


class RejectUserRequest(BaseModel):
    reason: str | None = None


class ActiveUpdate(BaseModel):
    is_active: bool


# full user view (no credentials, no OTP)
class UserResponse(BaseModel):
    id: uuid.UUID
    name: str
    college_id: str
    email: str
    role: Role
    approval_status: ApprovalStatus
    room_number: str | None = None
    hostel_block: str | None = None
    room_id: uuid.UUID | None = None
    department: str | None = None
    year: int | None = None
    phone_number: str | None = None
    avatar: str | None = None
    is_active: bool
    email_verified: bool
    rejection_reason: str | None = None
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


# embedded in attendance / bill / complaint payloads
class UserBrief(BaseModel):
    id: uuid.UUID
    name: str
    college_id: str
    email: str
    room_number: str | None = None
    hostel_block: str | None = None

    model_config = ConfigDict(from_attributes=True)


def user_payload(user) -> dict:
    return UserResponse.model_validate(user).model_dump(mode="json")
