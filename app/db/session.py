"""
session.py

Database engine and Session factory.

Creates the SQLAlchemy Engine and SessionLocal shared by the whole app.
The get_db dependency opens one session per request and closes it after.

Design rules:
- connection settings are defined in one place only
- pool_pre_ping=True to survive idle connection drops

Related files:
- app.core.config        : DATABASE_URL
- app.core.deps          : get_db dependency

"""

from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from app.core.config import settings


# pool_pre_ping=True:
#   detect and replace connections dropped while idle
engine = create_engine(
    settings.DATABASE_URL,
    pool_pre_ping=True,
)

SessionLocal = sessionmaker(
    autocommit=False,
    autoflush=False,
    bind=engine,
)
