import uuid

from fastapi import APIRouter, Depends, Query, status
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session

from app.core.deps import get_db, get_current_user, get_current_staff
from app.core.exceptions import NotFound
from app.core.responses import ok
from app.models.announcement import AnnouncementCategory
from app.models.user import User
from app.schemas.announcement import AnnouncementCreate, AnnouncementUpdate, announcement_payload
from app.services import announcements as announcement_service

router = APIRouter(prefix="/announcements", tags=["announcements"])


@router.post("")
def create_announcement(
    data: AnnouncementCreate,
    db: Session = Depends(get_db),
    user: User = Depends(get_current_staff),
):
    try:
        announcement = announcement_service.create_announcement(db, author=user, data=data)
        db.commit()
        db.refresh(announcement)
    except Exception:
        db.rollback()
        raise

    return JSONResponse(
        status_code=status.HTTP_201_CREATED,
        content=ok(announcement_payload(announcement), message="Announcement created successfully"),
    )


# students only get untargeted announcements or ones for their block
@router.get("")
def list_announcements(
    category: AnnouncementCategory | None = Query(default=None),
    is_active: bool | None = Query(default=None),
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
):
    rows = announcement_service.list_announcements(db, user=user, category=category, is_active=is_active)
    return ok([announcement_payload(a, user_id=user.id) for a in rows], count=len(rows))


@router.get("/{announcement_id}")
def get_announcement(
    announcement_id: uuid.UUID,
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
):
    announcement = announcement_service.get_announcement_or_404(db, announcement_id)
    if not announcement_service.visible_to(announcement, user):
        raise NotFound("Announcement not found")
    return ok(announcement_payload(announcement, user_id=user.id))


@router.put("/{announcement_id}/read")
def mark_read(
    announcement_id: uuid.UUID,
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
):
    try:
        announcement = announcement_service.get_announcement_or_404(db, announcement_id)
        if not announcement_service.visible_to(announcement, user):
            raise NotFound("Announcement not found")
        read_count = announcement_service.mark_read(db, announcement, user=user)
        db.commit()
    except Exception:
        db.rollback()
        raise

    return ok(message="Marked as read", read_count=read_count)


@router.put("/{announcement_id}")
def update_announcement(
    announcement_id: uuid.UUID,
    data: AnnouncementUpdate,
    db: Session = Depends(get_db),
    _: User = Depends(get_current_staff),
):
    try:
        announcement = announcement_service.get_announcement_or_404(db, announcement_id)
        announcement_service.update_announcement(announcement, changes=data.model_dump(exclude_unset=True))
        db.commit()
        db.refresh(announcement)
    except Exception:
        db.rollback()
        raise

    return ok(announcement_payload(announcement), message="Announcement updated successfully")


@router.delete("/{announcement_id}")
def delete_announcement(
    announcement_id: uuid.UUID,
    db: Session = Depends(get_db),
    _: User = Depends(get_current_staff),
):
    try:
        announcement = announcement_service.get_announcement_or_404(db, announcement_id)
        db.delete(announcement)
        db.commit()
    except Exception:
        db.rollback()
        raise

    return ok(message="Announcement deleted successfully")
