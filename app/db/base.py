"""
base.py

SQLAlchemy ORM Base definition.

Every model (User, Attendance, MessBill, ...) inherits from this Base, and
Alembic reads the same metadata for autogenerate.

Design rules:
- Base is defined in exactly one place
- shared column helpers live here to avoid circular imports between models

Related files:
- app.models.*            : all ORM models
- alembic/env.py          : migration metadata

"""

from datetime import datetime, timezone
from enum import Enum
from typing import Type

from sqlalchemy import Enum as SAEnum
from sqlalchemy.orm import declarative_base

# base class for every ORM model
Base = declarative_base()


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def as_utc(value: datetime | None) -> datetime | None:
    # SQLite hands back naive datetimes even for timezone=True columns
    if value is not None and value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def enum_column(enum_cls: Type[Enum], name: str) -> SAEnum:
    """Enum column that stores the member values ("in_progress"), not the names."""
    return SAEnum(
        enum_cls,
        name=name,
        values_callable=lambda members: [m.value for m in members],
        validate_strings=True,
    )
