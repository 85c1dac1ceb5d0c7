# backend/app/services/users.py
"""
User directory: accounts, credential hashes and lockout counters.

The directory is the only component that writes User records. Lookups by
e-mail hit the unique index on users.email.

Transactions:
    bcrypt runs outside any transaction. Uniqueness of the e-mail is checked
    once up front (to keep the error order stable) and again by the unique
    constraint when the row is inserted. Failed-attempt bookkeeping and the
    login stamp re-read the row inside their transaction, so the lock
    threshold is crossed exactly once and a locked account never gets its
    counter reset by a late successful login.
"""
import logging
from typing import Optional

from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session as DbSession

from backend.app.core.clock import Clock, SystemClock
from backend.app.core.errors import AuthenticationFailed, ErrorCode, NotFound, ValidationFailed
from backend.app.db.session import Database
from backend.app.models.user import User, UserRegistration
from backend.app.security.hashing import PasswordHasher
from backend.app.security.tokens import new_id
from backend.app.security.totp import generate_totp_secret
from backend.app.services import validation

logger = logging.getLogger(__name__)

MAX_FAILED_ATTEMPTS = 5
DEFAULT_INACTIVITY_TIMEOUT = 15


class UserDirectory:
    def __init__(
        self,
        database: Database,
        hasher: Optional[PasswordHasher] = None,
        clock: Optional[Clock] = None,
        max_failed_attempts: int = MAX_FAILED_ATTEMPTS,
        default_inactivity_timeout: int = DEFAULT_INACTIVITY_TIMEOUT,
    ):
        self.database = database
        self.hasher = hasher or PasswordHasher()
        self.clock = clock or SystemClock()
        self.max_failed_attempts = max_failed_attempts
        self.default_inactivity_timeout = default_inactivity_timeout

    # ─────────────────────────────────────────────────────────────────────
    # Registration
    # ─────────────────────────────────────────────────────────────────────
    def create_user(self, data: UserRegistration) -> str:
        """
        Validate a registration and store the new account.

        Checks run in a fixed order and the first failure is raised:
        e-mail format, e-mail uniqueness, master password policy,
        confirmation, password != e-mail, security question, security
        answer length, phone (only with two-factor), inactivity timeout.

        Returns:
            The new user id.
        """
        validation.validate_email(data.email)
        if self.find_by_email(data.email) is not None:
            raise ValidationFailed(ErrorCode.EMAIL_ALREADY_EXISTS)

        validation.validate_master_password(data.master_password)
        validation.validate_password_confirmation(data.master_password, data.confirm_master_password)
        if data.master_password == data.email:
            raise ValidationFailed(ErrorCode.MASTER_PASSWORD_CANNOT_BE_EMAIL)

        validation.validate_security_question(data.security_question)
        validation.validate_security_answer(data.security_answer)
        validation.validate_phone(data.two_factor_enabled, data.phone)

        inactivity_timeout = data.inactivity_timeout
        if inactivity_timeout is None:
            inactivity_timeout = self.default_inactivity_timeout
        validation.validate_inactivity_timeout(inactivity_timeout)

        user = User(
            id=new_id(),
            email=data.email,
            master_password_hash=self.hasher.hash(data.master_password),
            security_question=data.security_question,
            security_answer_hash=self.hasher.hash(data.security_answer.lower()),
            date_created=self.clock.now(),
            last_access=None,
            failed_attempts=0,
            account_locked=False,
            two_factor_enabled=data.two_factor_enabled,
            phone=data.phone or None,
            totp_secret=generate_totp_secret() if data.two_factor_enabled else None,
            inactivity_timeout=inactivity_timeout,
        )

        try:
            with self.database.transaction() as db:
                db.add(user)
                db.flush()
        except IntegrityError:
            # Lost a race against a concurrent registration of the same e-mail
            raise ValidationFailed(ErrorCode.EMAIL_ALREADY_EXISTS) from None

        logger.info("Registered user %s (two_factor=%s)", user.id, user.two_factor_enabled)
        return user.id

    # ─────────────────────────────────────────────────────────────────────
    # Lookups
    # ─────────────────────────────────────────────────────────────────────
    def get(self, user_id: str) -> Optional[User]:
        with self.database.transaction() as db:
            return db.get(User, user_id)

    def find_by_email(self, email: str) -> Optional[User]:
        with self.database.transaction() as db:
            return db.scalar(select(User).where(User.email == email))

    def count(self) -> int:
        with self.database.transaction() as db:
            return db.scalar(select(func.count()).select_from(User))

    @staticmethod
    def _require(db: DbSession, user_id: str) -> User:
        user = db.get(User, user_id)
        if user is None:
            raise NotFound(ErrorCode.USER_NOT_FOUND)
        return user

    # ─────────────────────────────────────────────────────────────────────
    # Secrets
    # ─────────────────────────────────────────────────────────────────────
    def verify_master_password(self, user: User, master_password: str) -> bool:
        return self.hasher.verify(master_password, user.master_password_hash)

    def verify_security_answer(self, user: User, answer: str) -> bool:
        # Answers are compared case-insensitively
        return self.hasher.verify(answer.lower(), user.security_answer_hash)

    def hash_master_password(self, master_password: str) -> str:
        return self.hasher.hash(master_password)

    def replace_master_password(self, user_id: str, new_hash: str) -> User:
        """Install a new master password hash and clear the lockout state."""
        with self.database.transaction() as db:
            user = self._require(db, user_id)
            user.master_password_hash = new_hash
            user.account_locked = False
            user.failed_attempts = 0
            return user

    # ─────────────────────────────────────────────────────────────────────
    # Lockout bookkeeping
    # ─────────────────────────────────────────────────────────────────────
    def increment_failed_attempts(self, user_id: str) -> User:
        """
        Count one failed login. Locks the account when the counter reaches
        the threshold; the lock is one-way until a recovery completes.

        Raises:
            AuthenticationFailed(accountLocked): the account locked while
                this attempt was being checked; the attempt is not counted
        """
        with self.database.transaction() as db:
            user = self._require(db, user_id)
            if user.account_locked:
                raise AuthenticationFailed(ErrorCode.ACCOUNT_LOCKED)

            user.failed_attempts += 1
            if user.failed_attempts >= self.max_failed_attempts:
                user.account_locked = True
                logger.warning(
                    "Account %s locked after %d failed login attempts", user.email, user.failed_attempts
                )
            return user

    def reset_failed_attempts(self, user_id: str) -> User:
        with self.database.transaction() as db:
            user = self._require(db, user_id)
            user.failed_attempts = 0
            return user

    def lock_account(self, user_id: str) -> User:
        with self.database.transaction() as db:
            user = self._require(db, user_id)
            user.account_locked = True
            return user

    def record_access(self, user_id: str) -> User:
        """
        Successful login: clear the failure counter and stamp last_access.

        Raises:
            AuthenticationFailed(accountLocked): the account locked after the
                caller's earlier read
        """
        with self.database.transaction() as db:
            user = self._require(db, user_id)
            if user.account_locked:
                raise AuthenticationFailed(ErrorCode.ACCOUNT_LOCKED)

            user.failed_attempts = 0
            user.last_access = self.clock.now()
            return user
