import uuid
from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field

from app.models.announcement import AnnouncementCategory


class AnnouncementCreate(BaseModel):
    title: str = Field(..., min_length=1, max_length=200)
    content: str = Field(..., min_length=1)
    category: AnnouncementCategory = AnnouncementCategory.GENERAL
    target_hostels: List[str] = []
    target_blocks: List[str] = []
    scheduled_for: Optional[datetime] = None
    is_active: bool = True


class AnnouncementUpdate(BaseModel):
    title: Optional[str] = Field(default=None, min_length=1, max_length=200)
    content: Optional[str] = Field(default=None, min_length=1)
    category: Optional[AnnouncementCategory] = None
    target_hostels: Optional[List[str]] = None
    target_blocks: Optional[List[str]] = None
    scheduled_for: Optional[datetime] = None
    is_active: Optional[bool] = None


class AnnouncementResponse(BaseModel):
    id: uuid.UUID
    title: str
    content: str
    category: AnnouncementCategory
    posted_by: uuid.UUID
    target_hostels: list
    target_blocks: list
    scheduled_for: Optional[datetime] = None
    is_active: bool
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


def announcement_payload(announcement, *, user_id: uuid.UUID | None = None) -> dict:
    body = AnnouncementResponse.model_validate(announcement).model_dump(mode="json")
    reader_ids = {r.user_id for r in announcement.reads}
    body["posted_by_name"] = announcement.author.name if announcement.author else None
    body["read_count"] = len(reader_ids)
    if user_id is not None:
        body["is_read"] = user_id in reader_ids
    return body
