import uuid
from datetime import datetime
from enum import Enum

from sqlalchemy import DateTime, Integer, String, JSON, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.db.base import Base, enum_column, utcnow


class RoomStatus(str, Enum):
    AVAILABLE = "available"
    OCCUPIED = "occupied"
    UNDER_MAINTENANCE = "under_maintenance"


class Room(Base):
    """Hostel room.

    Occupants are the users whose room_id points here; capacity bounds their count.
    """

    __tablename__ = "rooms"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)

    room_number: Mapped[str] = mapped_column(String(20), unique=True, nullable=False)
    hostel_block: Mapped[str] = mapped_column(String(20), nullable=False)
    capacity: Mapped[int] = mapped_column(Integer, nullable=False)
    status: Mapped[RoomStatus] = mapped_column(
        enum_column(RoomStatus, "room_status"), default=RoomStatus.AVAILABLE, nullable=False
    )
    facilities: Mapped[list] = mapped_column(JSON, default=list, nullable=False)

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow, nullable=False)

    occupants = relationship("User", primaryjoin="Room.id == User.room_id", viewonly=True, lazy="selectin")
