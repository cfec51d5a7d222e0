import uuid

from fastapi import APIRouter, Depends, Query, status
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session

from app.core.deps import get_db, get_current_user, get_current_staff
from app.core.responses import ok
from app.models.room import RoomStatus
from app.models.user import User
from app.schemas.room import AllocateRequest, RoomCreate, RoomStatusUpdate, room_payload
from app.services import rooms as room_service

router = APIRouter(prefix="/rooms", tags=["rooms"])


@router.post("")
def create_room(
    data: RoomCreate,
    db: Session = Depends(get_db),
    _: User = Depends(get_current_staff),
):
    try:
        room = room_service.create_room(db, data=data)
        db.commit()
        db.refresh(room)
    except Exception:
        db.rollback()
        raise

    return JSONResponse(
        status_code=status.HTTP_201_CREATED,
        content=ok(room_payload(room), message="Room created successfully"),
    )


@router.get("")
def list_rooms(
    status_filter: RoomStatus | None = Query(default=None, alias="status"),
    hostel_block: str | None = Query(default=None),
    db: Session = Depends(get_db),
    _: User = Depends(get_current_staff),
):
    rooms = room_service.list_rooms(db, status=status_filter, hostel_block=hostel_block)
    return ok([room_payload(r) for r in rooms], count=len(rooms))


@router.get("/stats/occupancy")
def occupancy(
    db: Session = Depends(get_db),
    _: User = Depends(get_current_staff),
):
    return ok(stats=room_service.occupancy_stats(db))


@router.get("/{room_id}")
def get_room(
    room_id: uuid.UUID,
    db: Session = Depends(get_db),
    _: User = Depends(get_current_user),
):
    return ok(room_payload(room_service.get_room_or_404(db, room_id)))


@router.put("/{room_id}/allocate")
def allocate_room(
    room_id: uuid.UUID,
    data: AllocateRequest,
    db: Session = Depends(get_db),
    _: User = Depends(get_current_staff),
):
    try:
        room = room_service.get_room_or_404(db, room_id)
        room_service.allocate(db, room, student_id=data.student_id)
        db.commit()
        db.refresh(room)
    except Exception:
        db.rollback()
        raise

    return ok(room_payload(room), message="Room allocated successfully")


@router.put("/{room_id}/deallocate")
def deallocate_room(
    room_id: uuid.UUID,
    data: AllocateRequest,
    db: Session = Depends(get_db),
    _: User = Depends(get_current_staff),
):
    try:
        room = room_service.get_room_or_404(db, room_id)
        room_service.deallocate(db, room, student_id=data.student_id)
        db.commit()
        db.refresh(room)
    except Exception:
        db.rollback()
        raise

    return ok(room_payload(room), message="Student removed from room")


@router.put("/{room_id}/status")
def set_room_status(
    room_id: uuid.UUID,
    data: RoomStatusUpdate,
    db: Session = Depends(get_db),
    _: User = Depends(get_current_staff),
):
    try:
        room = room_service.get_room_or_404(db, room_id)
        room_service.set_status(db, room, status=data.status)
        db.commit()
        db.refresh(room)
    except Exception:
        db.rollback()
        raise

    return ok(room_payload(room), message="Room status updated")
