# backend/app/services/credentials.py
"""
Password records: the credential store and the service on top of it.

CredentialStore is plain data access. PasswordService validates input,
encrypts/decrypts the secret and enforces ownership on every call:

    record missing           -> passwordNotFound
    record owned by another  -> unauthorized

Existence is checked before ownership. The caller supplies `user_id`, which
must come from a validated session (AuthenticationService.validate_session).
"""
import logging
from datetime import datetime, timedelta, timezone
from typing import List, Optional

from sqlalchemy import delete, select

from backend.app.core.clock import Clock, SystemClock
from backend.app.core.errors import AccessDenied, ErrorCode, NotFound
from backend.app.db.session import Database
from backend.app.models.credential import (
    DEFAULT_CATEGORY,
    Credential,
    CredentialDetail,
    CredentialInput,
    CredentialSummary,
    CredentialUpdate,
)
from backend.app.security.encryption import CredentialCipher
from backend.app.security.tokens import new_id
from backend.app.services import validation

logger = logging.getLogger(__name__)

EXPIRATION_WARNING_DAYS = 7


def _as_utc(value: Optional[datetime]) -> Optional[datetime]:
    # Naive datetimes from clients are taken as UTC
    if value is not None and value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


class CredentialStore:
    def __init__(self, database: Database):
        self.database = database

    def get(self, credential_id: str) -> Optional[Credential]:
        with self.database.transaction() as db:
            return db.get(Credential, credential_id)

    def save(self, credential: Credential) -> None:
        with self.database.transaction() as db:
            db.add(credential)

    def remove(self, credential_id: str) -> bool:
        with self.database.transaction() as db:
            return db.execute(delete(Credential).where(Credential.id == credential_id)).rowcount > 0

    def owned_by(self, user_id: str) -> List[Credential]:
        with self.database.transaction() as db:
            query = (
                select(Credential)
                .where(Credential.user_id == user_id)
                .order_by(Credential.date_created, Credential.id)
            )
            return list(db.scalars(query))


class PasswordService:
    def __init__(
        self,
        store: CredentialStore,
        cipher: CredentialCipher,
        clock: Optional[Clock] = None,
        expiration_warning_days: int = EXPIRATION_WARNING_DAYS,
    ):
        self.store = store
        self.cipher = cipher
        self.clock = clock or SystemClock()
        self.warning_window = timedelta(days=expiration_warning_days)

    # ─────────────────────────────────────────────────────────────────────
    # Helpers
    # ─────────────────────────────────────────────────────────────────────
    @staticmethod
    def _associated_data(credential_id: str, user_id: str) -> dict:
        return {"credential_id": credential_id, "user_id": user_id}

    def _encrypt(self, plaintext: str, credential_id: str, user_id: str) -> str:
        return self.cipher.encrypt(plaintext, self._associated_data(credential_id, user_id))

    def _load_owned(self, credential_id: str, user_id: str) -> Credential:
        credential = self.store.get(credential_id)
        if credential is None:
            raise NotFound(ErrorCode.PASSWORD_NOT_FOUND)
        if credential.user_id != user_id:
            logger.warning("User %s tried to access credential %s owned by another user", user_id, credential_id)
            raise AccessDenied(ErrorCode.UNAUTHORIZED)
        return credential

    def _is_expiring_soon(self, expiration_date: Optional[datetime], now: datetime) -> bool:
        if expiration_date is None:
            return False
        return now < expiration_date <= now + self.warning_window

    # ─────────────────────────────────────────────────────────────────────
    # Operations
    # ─────────────────────────────────────────────────────────────────────
    def create(self, user_id: str, fields: CredentialInput) -> str:
        now = self.clock.now()
        expiration_date = _as_utc(fields.expiration_date)

        validation.validate_title(fields.title)
        validation.validate_secret(fields.password)
        validation.validate_username(fields.username)
        validation.validate_url(fields.url)
        validation.validate_notes(fields.notes)
        validation.validate_expiration_date(expiration_date, now)

        credential_id = new_id()
        credential = Credential(
            id=credential_id,
            user_id=user_id,
            title=fields.title,
            password=self._encrypt(fields.password, credential_id, user_id),
            date_created=now,
            date_modified=now,
            username=fields.username or None,
            url=fields.url or None,
            category=fields.category or DEFAULT_CATEGORY,
            notes=fields.notes or None,
            expiration_date=expiration_date,
            is_favorite=bool(fields.is_favorite),
        )
        self.store.save(credential)

        logger.info("User %s created credential %s", user_id, credential_id)
        return credential_id

    def list(self, user_id: str) -> List[CredentialSummary]:
        now = self.clock.now()
        return [
            CredentialSummary(
                id=c.id,
                title=c.title,
                username=c.username,
                url=c.url,
                category=c.category,
                date_created=c.date_created,
                date_modified=c.date_modified,
                expiration_date=c.expiration_date,
                is_favorite=c.is_favorite,
                is_expiring_soon=self._is_expiring_soon(c.expiration_date, now),
            )
            for c in self.store.owned_by(user_id)
        ]

    def get(self, credential_id: str, user_id: str) -> CredentialDetail:
        c = self._load_owned(credential_id, user_id)
        return CredentialDetail(
            id=c.id,
            user_id=c.user_id,
            title=c.title,
            username=c.username,
            url=c.url,
            category=c.category,
            notes=c.notes,
            date_created=c.date_created,
            date_modified=c.date_modified,
            expiration_date=c.expiration_date,
            is_favorite=c.is_favorite,
            decrypted_password=self.cipher.decrypt(c.password, self._associated_data(c.id, c.user_id)),
        )

    def update(self, credential_id: str, user_id: str, changes: CredentialUpdate) -> None:
        """
        Apply a partial update.

        Every provided field is validated before anything is written; one
        failure leaves the stored record exactly as it was.
        """
        with self.store.database.transaction():
            current = self._load_owned(credential_id, user_id)
            now = self.clock.now()
            values = {}

            if "title" in changes:
                title = changes.get("title")
                validation.validate_title(title)
                values["title"] = title

            if "username" in changes:
                username = changes.get("username")
                validation.validate_username(username)
                values["username"] = username or None

            if "password" in changes:
                secret = changes.get("password")
                validation.validate_secret(secret)
                values["password"] = self._encrypt(secret, current.id, current.user_id)

            if "url" in changes:
                url = changes.get("url")
                validation.validate_url(url)
                values["url"] = url or None

            if "category" in changes:
                values["category"] = changes.get("category") or DEFAULT_CATEGORY

            if "notes" in changes:
                notes = changes.get("notes")
                validation.validate_notes(notes)
                values["notes"] = notes or None

            if "expiration_date" in changes:
                expiration_date = _as_utc(changes.get("expiration_date"))
                validation.validate_expiration_date(expiration_date, now)
                values["expiration_date"] = expiration_date

            if "is_favorite" in changes:
                values["is_favorite"] = bool(changes.get("is_favorite"))

            # Nothing is written until every provided field has passed
            for field, value in values.items():
                setattr(current, field, value)
            current.date_modified = now

        logger.info("User %s updated credential %s (%s)", user_id, credential_id, ", ".join(sorted(values)) or "no fields")

    def delete(self, credential_id: str, user_id: str) -> None:
        with self.store.database.transaction():
            self._load_owned(credential_id, user_id)
            self.store.remove(credential_id)
        logger.info("User %s deleted credential %s", user_id, credential_id)
