import uuid
from datetime import datetime
from typing import List

from pydantic import BaseModel, ConfigDict, Field

from app.models.room import RoomStatus
from app.schemas.user import UserBrief


class RoomCreate(BaseModel):
    room_number: str = Field(..., min_length=1, max_length=20)
    hostel_block: str = Field(..., min_length=1, max_length=20)
    capacity: int = Field(..., ge=1, le=20)
    facilities: List[str] = []


class AllocateRequest(BaseModel):
    student_id: uuid.UUID


class RoomStatusUpdate(BaseModel):
    status: RoomStatus


class RoomResponse(BaseModel):
    id: uuid.UUID
    room_number: str
    hostel_block: str
    capacity: int
    status: RoomStatus
    facilities: list
    created_at: datetime
    occupants: List[UserBrief] = []

    model_config = ConfigDict(from_attributes=True)


def room_payload(room) -> dict:
    body = RoomResponse.model_validate(room).model_dump(mode="json")
    body["occupied"] = len(room.occupants)
    body["available_beds"] = max(0, room.capacity - len(room.occupants))
    return body
