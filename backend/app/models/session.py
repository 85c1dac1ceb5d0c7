# backend/app/models/session.py
from datetime import datetime

from sqlalchemy import Column, ForeignKey, String

from backend.app.db.base import Base, UTCDateTime


class Session(Base):
    """A login session. The token is the bearer credential and the key."""
    __tablename__ = "sessions"

    token = Column(String(64), primary_key=True)
    user_id = Column(String(36), ForeignKey("users.id"), index=True, nullable=False)
    created_at = Column(UTCDateTime, nullable=False)
    expires_at = Column(UTCDateTime, nullable=False)

    def is_expired(self, now: datetime) -> bool:
        # Valid up to and including expires_at
        return now > self.expires_at
