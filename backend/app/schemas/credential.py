# backend/app/schemas/credential.py
from datetime import datetime
from typing import Optional

from backend.app.schemas.common import CamelModel


class PasswordCreate(CamelModel):
    title: str
    password: str
    username: Optional[str] = None
    url: Optional[str] = None
    category: Optional[str] = None
    notes: Optional[str] = None
    expiration_date: Optional[datetime] = None
    is_favorite: bool = False


class PasswordUpdate(CamelModel):
    """Every field optional; only the ones sent are applied. isFavorite may be omitted but not null."""
    title: Optional[str] = None
    username: Optional[str] = None
    password: Optional[str] = None
    url: Optional[str] = None
    category: Optional[str] = None
    notes: Optional[str] = None
    expiration_date: Optional[datetime] = None
    is_favorite: bool = False


class PasswordCreated(CamelModel):
    id: str


class PasswordSummaryResponse(CamelModel):
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


class PasswordDetailResponse(CamelModel):
    id: str
    title: str
    username: Optional[str]
    url: Optional[str]
    category: str
    notes: Optional[str]
    date_created: datetime
    date_modified: datetime
    expiration_date: Optional[datetime]
    is_favorite: bool
    # Decrypted secret, only ever returned for a single owned record
    password: str
