# backend/app/services/validation.py
"""
Input rules shared by the services.

Each check raises ValidationFailed with a specific ErrorCode. Where several
rules apply to one value they run in a fixed order and the first failure
wins, so callers always see the same error for the same input.
"""
import re
from datetime import datetime
from typing import Optional
from urllib.parse import urlsplit

from backend.app.core.errors import ErrorCode, ValidationFailed

EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
PHONE_PATTERN = re.compile(r"^\+?[1-9]\d{1,14}$")

MASTER_PASSWORD_MIN_LENGTH = 12
OBVIOUS_PATTERN = re.compile(r"123456|abcdef|password", re.IGNORECASE)

SECURITY_ANSWER_MIN_LENGTH = 3
SECURITY_ANSWER_MAX_LENGTH = 100
INACTIVITY_TIMEOUT_RANGE = (1, 60)

TITLE_MAX_LENGTH = 100
SECRET_MAX_LENGTH = 255
USERNAME_MAX_LENGTH = 255
URL_MAX_LENGTH = 2048
NOTES_MAX_LENGTH = 5000


def _fail(code: ErrorCode) -> None:
    raise ValidationFailed(code)


# ─────────────────────────────────────────────────────────────────────────────
# Account rules
# ─────────────────────────────────────────────────────────────────────────────
def validate_email(email: str) -> None:
    if not email or not EMAIL_PATTERN.match(email):
        _fail(ErrorCode.INVALID_EMAIL_FORMAT)


def validate_master_password(password: str) -> None:
    """
    Master password policy, used at registration and on recovery.

    Order: length, uppercase, lowercase, digit, special character, obvious
    substrings ("123456", "abcdef", "password", case-insensitive).
    """
    if len(password) < MASTER_PASSWORD_MIN_LENGTH:
        _fail(ErrorCode.MASTER_PASSWORD_TOO_SHORT)
    if not re.search(r"[A-Z]", password):
        _fail(ErrorCode.MASTER_PASSWORD_MISSING_UPPERCASE)
    if not re.search(r"[a-z]", password):
        _fail(ErrorCode.MASTER_PASSWORD_MISSING_LOWERCASE)
    if not re.search(r"[0-9]", password):
        _fail(ErrorCode.MASTER_PASSWORD_MISSING_NUMBER)
    if not re.search(r"[^A-Za-z0-9]", password):
        _fail(ErrorCode.MASTER_PASSWORD_MISSING_SPECIAL_CHAR)
    if OBVIOUS_PATTERN.search(password):
        _fail(ErrorCode.MASTER_PASSWORD_TOO_OBVIOUS)


def validate_password_confirmation(password: str, confirmation: str) -> None:
    if password != confirmation:
        _fail(ErrorCode.PASSWORD_CONFIRMATION_MISMATCH)


def validate_security_question(question: Optional[str]) -> None:
    if not question or not question.strip():
        _fail(ErrorCode.SECURITY_QUESTION_REQUIRED)


def validate_security_answer(answer: Optional[str]) -> None:
    if not answer or len(answer) < SECURITY_ANSWER_MIN_LENGTH:
        _fail(ErrorCode.SECURITY_ANSWER_TOO_SHORT)
    if len(answer) > SECURITY_ANSWER_MAX_LENGTH:
        _fail(ErrorCode.SECURITY_ANSWER_TOO_LONG)


def validate_phone(two_factor_enabled: bool, phone: Optional[str]) -> None:
    # Phone only matters when two-factor is on
    if not two_factor_enabled:
        return
    if not phone:
        _fail(ErrorCode.PHONE_REQUIRED_FOR_TWO_FACTOR)
    if not PHONE_PATTERN.match(phone):
        _fail(ErrorCode.INVALID_PHONE_FORMAT)


def validate_inactivity_timeout(minutes: int) -> None:
    low, high = INACTIVITY_TIMEOUT_RANGE
    if isinstance(minutes, bool) or not isinstance(minutes, int) or not low <= minutes <= high:
        _fail(ErrorCode.INVALID_INACTIVITY_TIMEOUT)


# ─────────────────────────────────────────────────────────────────────────────
# Password record rules
# ─────────────────────────────────────────────────────────────────────────────
def validate_title(title: Optional[str]) -> None:
    if not title or not title.strip():
        _fail(ErrorCode.TITLE_REQUIRED)
    if len(title) > TITLE_MAX_LENGTH:
        _fail(ErrorCode.TITLE_TOO_LONG)


def validate_secret(secret: Optional[str]) -> None:
    if not secret or not secret.strip():
        _fail(ErrorCode.PASSWORD_REQUIRED)
    if len(secret) > SECRET_MAX_LENGTH:
        _fail(ErrorCode.PASSWORD_TOO_LONG)


def validate_username(username: Optional[str]) -> None:
    if username and len(username) > USERNAME_MAX_LENGTH:
        _fail(ErrorCode.USERNAME_TOO_LONG)


def is_well_formed_url(url: str) -> bool:
    """Absolute URL check: a valid scheme plus a host or a path (mailto:, file:)."""
    if any(ch.isspace() for ch in url):
        return False
    try:
        parts = urlsplit(url)
        # Accessing .port validates the port component
        parts.port
    except ValueError:
        return False
    if not parts.scheme or not re.match(r"^[A-Za-z][A-Za-z0-9+.\-]*$", parts.scheme):
        return False
    return bool(parts.netloc or parts.path)


def validate_url(url: Optional[str]) -> None:
    if not url:
        return
    if not is_well_formed_url(url):
        _fail(ErrorCode.INVALID_URL)
    if len(url) > URL_MAX_LENGTH:
        _fail(ErrorCode.URL_TOO_LONG)


def validate_notes(notes: Optional[str]) -> None:
    if notes and len(notes) > NOTES_MAX_LENGTH:
        _fail(ErrorCode.NOTES_TOO_LONG)


def validate_expiration_date(expiration_date: Optional[datetime], now: datetime) -> None:
    if expiration_date is not None and expiration_date <= now:
        _fail(ErrorCode.EXPIRATION_DATE_MUST_BE_FUTURE)
