# backend/app/models/recovery_request.py
"""
A single password-reset attempt window.

Status transitions:
    pending -> completed   (successful verify)
    pending -> expired     (request used after date_expiration)
    pending -> cancelled   (explicit cancel)
Every other status is terminal.
"""
from dataclasses import dataclass
from datetime import datetime
from enum import Enum

from sqlalchemy import Column, ForeignKey, String
from sqlalchemy import Enum as SAEnum

from backend.app.db.base import Base, UTCDateTime


class RecoveryStatus(str, Enum):
    PENDING = "pending"
    COMPLETED = "completed"
    EXPIRED = "expired"
    CANCELLED = "cancelled"


class RecoveryRequest(Base):
    __tablename__ = "recovery_requests"

    id = Column(String(36), primary_key=True)
    user_id = Column(String(36), ForeignKey("users.id"), index=True, nullable=False)
    token = Column(String(64), unique=True, index=True, nullable=False)
    date_requested = Column(UTCDateTime, nullable=False)
    date_expiration = Column(UTCDateTime, nullable=False)

    # Audit only
    ip_address = Column(String(45), nullable=False)

    status = Column(
        SAEnum(
            RecoveryStatus,
            native_enum=False,
            length=16,
            values_callable=lambda statuses: [s.value for s in statuses],
        ),
        default=RecoveryStatus.PENDING,
        nullable=False,
    )

    def is_expired(self, now: datetime) -> bool:
        return now > self.date_expiration


@dataclass(frozen=True)
class RecoveryTicket:
    """
    Result of a recovery request.

    `issued` is False when the e-mail is unknown; the token is then a
    placeholder that matches nothing. The HTTP layer must answer both cases
    with the same generic message.
    """
    token: str
    issued: bool
