"""
services/rooms.py

Room inventory and allocation.

- occupants are users whose room_id points at the room
- allocation copies room_number / hostel_block onto the student and
  moves them out of any previous room
- status follows occupancy unless the room is under maintenance

"""

import uuid

from sqlalchemy import select
from sqlalchemy.orm import Session

from app.core.exceptions import Conflict, NotFound, ValidationFailed
from app.models.room import Room, RoomStatus
from app.models.user import Role, User
from app.schemas.room import RoomCreate


def create_room(db: Session, *, data: RoomCreate) -> Room:
    room_number = data.room_number.strip()
    if db.scalar(select(Room).where(Room.room_number == room_number)):
        raise Conflict("Room already exists")
    room = Room(
        room_number=room_number,
        hostel_block=data.hostel_block.strip(),
        capacity=data.capacity,
        facilities=list(data.facilities),
        status=RoomStatus.AVAILABLE,
    )
    db.add(room)
    return room


def get_room_or_404(db: Session, room_id: uuid.UUID) -> Room:
    room = db.scalar(select(Room).where(Room.id == room_id))
    if not room:
        raise NotFound("Room not found")
    return room


def list_rooms(db: Session, *, status: RoomStatus | None = None, hostel_block: str | None = None) -> list[Room]:
    q = select(Room)
    if status is not None:
        q = q.where(Room.status == status)
    if hostel_block:
        q = q.where(Room.hostel_block == hostel_block)
    return list(db.scalars(q.order_by(Room.hostel_block, Room.room_number)).all())


def _occupant_ids(db: Session, room_id: uuid.UUID) -> list[uuid.UUID]:
    # read from the session, not the cached relationship
    return list(db.scalars(select(User.id).where(User.room_id == room_id)).all())


def refresh_status(db: Session, room: Room) -> None:
    if room.status == RoomStatus.UNDER_MAINTENANCE:
        return
    occupied = len(_occupant_ids(db, room.id))
    room.status = RoomStatus.OCCUPIED if occupied >= room.capacity else RoomStatus.AVAILABLE


def allocate(db: Session, room: Room, *, student_id: uuid.UUID) -> User:
    student = db.scalar(select(User).where(User.id == student_id))
    if not student:
        raise NotFound("Student not found")
    if student.role != Role.STUDENT:
        raise ValidationFailed("Only students can be allocated rooms")
    if room.status == RoomStatus.UNDER_MAINTENANCE:
        raise ValidationFailed("Room is under maintenance")

    occupants = _occupant_ids(db, room.id)
    if student.id in occupants:
        raise ValidationFailed("Student already allocated to this room")
    if len(occupants) >= room.capacity:
        raise ValidationFailed("Room is full")

    previous_id = student.room_id
    student.room_id = room.id
    student.room_number = room.room_number
    student.hostel_block = room.hostel_block
    db.flush()

    if previous_id is not None:
        previous = db.scalar(select(Room).where(Room.id == previous_id))
        if previous:
            refresh_status(db, previous)
    refresh_status(db, room)
    return student


def deallocate(db: Session, room: Room, *, student_id: uuid.UUID) -> User:
    student = db.scalar(select(User).where(User.id == student_id, User.room_id == room.id))
    if not student:
        raise NotFound("Student not found in this room")

    student.room_id = None
    student.room_number = None
    student.hostel_block = None
    db.flush()

    refresh_status(db, room)
    return student


def set_status(db: Session, room: Room, *, status: RoomStatus) -> Room:
    occupied = len(_occupant_ids(db, room.id))
    if status == RoomStatus.AVAILABLE and occupied >= room.capacity:
        raise ValidationFailed("Room is full and cannot be marked available")
    room.status = status
    return room


def occupancy_stats(db: Session) -> dict:
    rooms = db.scalars(select(Room)).all()
    total_capacity = sum(r.capacity for r in rooms)
    occupied_beds = sum(len(_occupant_ids(db, r.id)) for r in rooms)
    stats = {
        "total_rooms": len(rooms),
        "total_capacity": total_capacity,
        "occupied_beds": occupied_beds,
        "available_beds": max(0, total_capacity - occupied_beds),
        "occupancy_rate": round(occupied_beds / total_capacity * 100, 2) if total_capacity else 0,
    }
    for s in RoomStatus:
        stats[s.value] = sum(1 for r in rooms if r.status == s)
    return stats
