# backend/app/models/credential.py
from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from sqlalchemy import Boolean, Column, ForeignKey, String, Text

from backend.app.db.base import Base, UTCDateTime

DEFAULT_CATEGORY = "General"


class Credential(Base):
    __tablename__ = "credentials"

    id = Column(String(36), primary_key=True)
    user_id = Column(String(36), ForeignKey("users.id"), index=True, nullable=False)
    title = Column(String(100), nullable=False)

    # AES-GCM token (see security/encryption.py), never the plaintext
    password = Column(Text, nullable=False)

    date_created = Column(UTCDateTime, nullable=False)
    date_modified = Column(UTCDateTime, nullable=False)

    username = Column(String(255), nullable=True)
    url = Column(String(2048), nullable=True)
    category = Column(Text, default=DEFAULT_CATEGORY, nullable=False)
    notes = Column(Text, nullable=True)
    expiration_date = Column(UTCDateTime, nullable=True)
    is_favorite = Column(Boolean, default=False, nullable=False)


@dataclass
class CredentialInput:
    title: str
    password: str
    username: Optional[str] = None
    url: Optional[str] = None
    category: Optional[str] = None
    notes: Optional[str] = None
    expiration_date: Optional[datetime] = None
    is_favorite: bool = False


_UNSET = object()


class CredentialUpdate:
    """
    Partial update. Only attributes passed to the constructor count as
    present; everything else stays untouched on the stored record.
    """

    FIELDS = (
        "title",
        "username",
        "password",
        "url",
        "category",
        "notes",
        "expiration_date",
        "is_favorite",
    )

    def __init__(self, **changes):
        unknown = set(changes) - set(self.FIELDS)
        if unknown:
            raise TypeError(f"unknown credential fields: {', '.join(sorted(unknown))}")
        self._changes = changes

    def __contains__(self, field: str) -> bool:
        return field in self._changes

    def get(self, field: str, default=_UNSET):
        return self._changes.get(field, default)

    def items(self):
        return self._changes.items()

    def __repr__(self) -> str:
        # The secret never shows up in logs or tracebacks
        shown = {k: ("***" if k == "password" else v) for k, v in self._changes.items()}
        return f"CredentialUpdate({shown!r})"


@dataclass(frozen=True)
class CredentialSummary:
    """List projection: everything except the secret."""
    id: str
    title: str
    username: Optional[str]
    url: Optional[str]
    category: str
    date_created: datetime
    date_modified: datetime
    expiration_date: Optional[datetime]
    is_favorite: bool
    is_expiring_soon: bool


@dataclass(frozen=True)
class CredentialDetail:
    id: str
    user_id: str
    title: str
    username: Optional[str]
    url: Optional[str]
    category: str
    notes: Optional[str]
    date_created: datetime
    date_modified: datetime
    expiration_date: Optional[datetime]
    is_favorite: bool
    decrypted_password: str
