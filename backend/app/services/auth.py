# backend/app/services/auth.py
"""
Authentication service: registration, login, logout and session checks.

Login order matters and is part of the contract:
    1. unknown e-mail            -> invalidCredentials (same as a bad password)
    2. locked account            -> accountLocked (before any hash check)
    3. wrong password            -> count the failure (may lock), invalidCredentials
    4. two-factor enabled:
         no code                 -> twoFactorCodeRequired
         not 6 digits / rejected -> invalidTwoFactorCode
    5. success                   -> reset counter, stamp last_access, new session

The lock check in step 2 reads a snapshot taken before the bcrypt check.
Steps 3 and 5 re-read the account inside their own transaction, so an
account that locked in the meantime answers accountLocked and no session
is issued.
"""
import logging
from dataclasses import dataclass
from typing import Optional

from backend.app.core.errors import AuthenticationFailed, ErrorCode, NotFound
from backend.app.models.user import UserPublic, UserRegistration
from backend.app.security import totp
from backend.app.security.totp import TwoFactorVerifier
from backend.app.services.sessions import SessionRegistry
from backend.app.services.users import UserDirectory

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class LoginResult:
    token: str
    user: UserPublic


@dataclass(frozen=True)
class TwoFactorProvisioning:
    otpauth_uri: str
    qr_code_base64: str


class AuthenticationService:
    def __init__(
        self,
        users: UserDirectory,
        sessions: SessionRegistry,
        two_factor: Optional[TwoFactorVerifier] = None,
        totp_issuer: str = "SafePazz",
    ):
        self.users = users
        self.sessions = sessions
        self.two_factor = two_factor or totp.TotpVerifier()
        self.totp_issuer = totp_issuer

    def register(self, data: UserRegistration) -> str:
        return self.users.create_user(data)

    def login(self, email: str, master_password: str, two_factor_code: Optional[str] = None) -> LoginResult:
        user = self.users.find_by_email(email)
        if user is None:
            logger.info("Login failed: unknown account")
            raise AuthenticationFailed(ErrorCode.INVALID_CREDENTIALS)

        if user.account_locked:
            logger.info("Login refused for locked account %s", user.id)
            raise AuthenticationFailed(ErrorCode.ACCOUNT_LOCKED)

        if not self.users.verify_master_password(user, master_password):
            # Raises accountLocked if another attempt locked the account meanwhile
            updated = self.users.increment_failed_attempts(user.id)
            logger.info(
                "Login failed for user %s (%d failed attempt(s))", user.id, updated.failed_attempts
            )
            # Same error whether or not this attempt tripped the lock
            raise AuthenticationFailed(ErrorCode.INVALID_CREDENTIALS)

        if user.two_factor_enabled:
            if not two_factor_code:
                raise AuthenticationFailed(ErrorCode.TWO_FACTOR_CODE_REQUIRED)
            # Shape guard first, then the configured verifier
            if not totp.is_six_digit_code(two_factor_code) or not self.two_factor.verify(user, two_factor_code):
                logger.info("Login failed for user %s: bad two-factor code", user.id)
                raise AuthenticationFailed(ErrorCode.INVALID_TWO_FACTOR_CODE)

        # Lock re-check, counter reset and session row commit together
        with self.users.database.transaction():
            user = self.users.record_access(user.id)
            session = self.sessions.issue(user.id)
        logger.info("User %s logged in", user.id)

        return LoginResult(token=session.token, user=UserPublic.from_user(user))

    def logout(self, token: str) -> None:
        # Idempotent: an unknown token is not an error
        if self.sessions.revoke(token):
            logger.info("Session closed")

    def validate_session(self, token: str) -> str:
        """Access-control gate: every authenticated operation calls this first."""
        return self.sessions.validate(token)

    def two_factor_provisioning(self, user_id: str) -> TwoFactorProvisioning:
        """otpauth:// URI and QR code for enrolling the user's authenticator app."""
        user = self.users.get(user_id)
        if user is None:
            raise NotFound(ErrorCode.USER_NOT_FOUND)
        if not user.two_factor_enabled or not user.totp_secret:
            raise NotFound(ErrorCode.TWO_FACTOR_NOT_ENABLED)

        uri = totp.get_totp_uri(user.totp_secret, user.email, self.totp_issuer)
        return TwoFactorProvisioning(otpauth_uri=uri, qr_code_base64=totp.generate_qr_code_base64(uri))
