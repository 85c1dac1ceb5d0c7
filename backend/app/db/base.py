# backend/app/db/base.py
"""
SQLAlchemy declarative base and shared column types.

Every ORM model in backend/app/models inherits from Base.
"""
from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import DateTime
from sqlalchemy.orm import DeclarativeBase
from sqlalchemy.types import TypeDecorator


# ─────────────────────────────────────────────────────────────────────────────
# Declarative Base for ORM Models
# All models inherit from this class
# ─────────────────────────────────────────────────────────────────────────────
class Base(DeclarativeBase):
    """
    Base class for all SQLAlchemy ORM models.

    Usage:
        class User(Base):
            __tablename__ = "users"
            id = Column(String(36), primary_key=True)
            ...
    """
    pass


# ─────────────────────────────────────────────────────────────────────────────
# Timestamps
#
# SQLite has no time zone support and hands back naive datetimes. Services
# compare against an aware UTC clock, so timestamps are stored as naive UTC
# and come back aware.
# ─────────────────────────────────────────────────────────────────────────────
class UTCDateTime(TypeDecorator):
    impl = DateTime
    cache_ok = True

    def process_bind_param(self, value: Optional[datetime], dialect) -> Optional[datetime]:
        if value is None:
            return None
        if value.tzinfo is None:
            value = value.replace(tzinfo=timezone.utc)
        return value.astimezone(timezone.utc).replace(tzinfo=None)

    def process_result_value(self, value: Optional[datetime], dialect) -> Optional[datetime]:
        if value is None:
            return None
        return value.replace(tzinfo=timezone.utc)


__all__ = [
    "Base",
    "UTCDateTime",
]
