import uuid

from sqlalchemy import select
from sqlalchemy.orm import Session

from app.core.exceptions import NotFound, ValidationFailed
from app.models.announcement import Announcement, AnnouncementCategory, AnnouncementRead
from app.models.user import Role, User
from app.schemas.announcement import AnnouncementCreate


def create_announcement(db: Session, *, author: User, data: AnnouncementCreate) -> Announcement:
    announcement = Announcement(**data.model_dump(), posted_by=author.id)
    db.add(announcement)
    return announcement


def get_announcement_or_404(db: Session, announcement_id: uuid.UUID) -> Announcement:
    announcement = db.scalar(select(Announcement).where(Announcement.id == announcement_id))
    if not announcement:
        raise NotFound("Announcement not found")
    return announcement


def visible_to(announcement: Announcement, user: User) -> bool:
    # staff see everything; students only untargeted or their own block
    if user.role != Role.STUDENT:
        return True
    blocks = announcement.target_blocks or []
    return not blocks or user.hostel_block in blocks


def list_announcements(
    db: Session,
    *,
    user: User,
    category: AnnouncementCategory | None = None,
    is_active: bool | None = None,
) -> list[Announcement]:
    q = select(Announcement)
    if category is not None:
        q = q.where(Announcement.category == category)
    if is_active is not None:
        q = q.where(Announcement.is_active.is_(is_active))
    rows = db.scalars(q.order_by(Announcement.created_at.desc())).unique().all()
    return [a for a in rows if visible_to(a, user)]


def mark_read(db: Session, announcement: Announcement, *, user: User) -> int:
    """Idempotent; returns the number of distinct readers."""
    if not any(r.user_id == user.id for r in announcement.reads):
        announcement.reads.append(AnnouncementRead(announcement_id=announcement.id, user_id=user.id))
    return len(announcement.reads)


def update_announcement(announcement: Announcement, *, changes: dict) -> Announcement:
    if not changes:
        raise ValidationFailed("No changes provided")
    for field, value in changes.items():
        setattr(announcement, field, value)
    return announcement
