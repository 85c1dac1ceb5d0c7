# backend/app/models/user.py
from dataclasses import dataclass
from typing import Optional

from sqlalchemy import Boolean, Column, Integer, String, Text

from backend.app.db.base import Base, UTCDateTime


class User(Base):
    __tablename__ = "users"

    id = Column(String(36), primary_key=True)
    # Exact, case-sensitive match; the unique constraint settles concurrent registrations
    email = Column(String(320), unique=True, index=True, nullable=False)

    # One-way bcrypt hashes. Never leave the service layer.
    master_password_hash = Column(String(255), nullable=False)
    security_question = Column(Text, nullable=False)
    security_answer_hash = Column(String(255), nullable=False)

    date_created = Column(UTCDateTime, nullable=False)
    last_access = Column(UTCDateTime, nullable=True)

    # Lockout state: account_locked flips once failed_attempts hits the
    # threshold and is only cleared by a completed recovery.
    failed_attempts = Column(Integer, default=0, nullable=False)
    account_locked = Column(Boolean, default=False, nullable=False)

    two_factor_enabled = Column(Boolean, default=False, nullable=False)
    phone = Column(String(16), nullable=True)
    # Base32 TOTP secret, present only when two-factor is enabled
    totp_secret = Column(String(64), nullable=True)

    # Minutes of inactivity before the client should lock itself (1-60)
    inactivity_timeout = Column(Integer, default=15, nullable=False)


@dataclass(frozen=True)
class UserPublic:
    """The only user shape that may cross the service boundary."""
    id: str
    email: str
    two_factor_enabled: bool

    @classmethod
    def from_user(cls, user: User) -> "UserPublic":
        return cls(id=user.id, email=user.email, two_factor_enabled=user.two_factor_enabled)


@dataclass
class UserRegistration:
    email: str
    master_password: str
    confirm_master_password: str
    security_question: str
    security_answer: str
    two_factor_enabled: bool = False
    phone: Optional[str] = None
    inactivity_timeout: Optional[int] = None
