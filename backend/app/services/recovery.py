# backend/app/services/recovery.py
"""
Password recovery via security-question challenge.

Flow:
    1. request_recovery(email, ip)  -> token (would be e-mailed in production)
    2. get_security_question(token) -> prompt shown to the user
    3. verify_recovery(token, answer, new password, confirmation)

Security:
    - Unknown e-mails get a placeholder ticket and no record is created; the
      HTTP layer answers both cases with the same message
    - Tokens expire 24h after the request; expiry is detected when the token
      is used, nothing sweeps old requests
    - completed / expired / cancelled are terminal and all collapse to the
      same invalidOrExpiredToken error
    - Leaving pending is a conditional UPDATE (WHERE status = 'pending'), so
      two concurrent verifies of one token cannot both succeed
"""
import logging
from datetime import timedelta
from typing import Optional

from sqlalchemy import select, update
from sqlalchemy.orm import Session as DbSession

from backend.app.core.clock import Clock, SystemClock
from backend.app.core.errors import ErrorCode, StateConflict, ValidationFailed
from backend.app.db.session import Database
from backend.app.models.recovery_request import RecoveryRequest, RecoveryStatus, RecoveryTicket
from backend.app.models.user import User
from backend.app.security.tokens import generate_token, new_id
from backend.app.services import validation
from backend.app.services.sessions import SessionRegistry
from backend.app.services.users import UserDirectory

logger = logging.getLogger(__name__)

RECOVERY_TOKEN_EXPIRY_HOURS = 24
PLACEHOLDER_TOKEN = "dummy-token"


class RecoveryWorkflow:
    def __init__(
        self,
        database: Database,
        users: UserDirectory,
        sessions: Optional[SessionRegistry] = None,
        clock: Optional[Clock] = None,
        expiry_hours: int = RECOVERY_TOKEN_EXPIRY_HOURS,
    ):
        self.database = database
        self.users = users
        self.sessions = sessions
        self.clock = clock or SystemClock()
        self.expiry = timedelta(hours=expiry_hours)

    def request_recovery(self, email: str, ip_address: str) -> RecoveryTicket:
        user = self.users.find_by_email(email)
        if user is None:
            logger.info("Recovery requested for unknown account from %s", ip_address)
            return RecoveryTicket(token=PLACEHOLDER_TOKEN, issued=False)

        now = self.clock.now()
        request = RecoveryRequest(
            id=new_id(),
            user_id=user.id,
            token=generate_token(),
            date_requested=now,
            date_expiration=now + self.expiry,
            ip_address=ip_address,
            status=RecoveryStatus.PENDING,
        )
        with self.database.transaction() as db:
            db.add(request)

        logger.info("Recovery request %s opened for user %s from %s", request.id, user.id, ip_address)
        return RecoveryTicket(token=request.token, issued=True)

    @staticmethod
    def _find(db: DbSession, token: str) -> Optional[RecoveryRequest]:
        return db.scalar(select(RecoveryRequest).where(RecoveryRequest.token == token))

    def find_request(self, token: str) -> Optional[RecoveryRequest]:
        with self.database.transaction() as db:
            return self._find(db, token)

    def _open_request(self, token: str) -> RecoveryRequest:
        """
        Return the pending, unexpired request for a token.

        A request found past its expiry is marked expired (and committed)
        before the error is raised.
        """
        with self.database.transaction() as db:
            request = self._find(db, token)
            if request is None:
                raise StateConflict(ErrorCode.INVALID_OR_EXPIRED_TOKEN)

            # Expiry is checked before status, like the rest of the workflow
            if not request.is_expired(self.clock.now()):
                if request.status is not RecoveryStatus.PENDING:
                    raise StateConflict(ErrorCode.INVALID_OR_EXPIRED_TOKEN)
                return request

            newly_expired = request.status is RecoveryStatus.PENDING
            if newly_expired:
                request.status = RecoveryStatus.EXPIRED

        if newly_expired:
            logger.info("Recovery request %s expired", request.id)
        raise StateConflict(ErrorCode.INVALID_OR_EXPIRED_TOKEN)

    def _owner(self, request: RecoveryRequest) -> User:
        user = self.users.get(request.user_id)
        if user is None:
            raise StateConflict(ErrorCode.USER_NOT_FOUND)
        return user

    def _leave_pending(self, db: DbSession, token: str, status: RecoveryStatus) -> bool:
        """Move a still-pending, unexpired request to `status`. False if another caller got there first."""
        result = db.execute(
            update(RecoveryRequest)
            .where(
                RecoveryRequest.token == token,
                RecoveryRequest.status == RecoveryStatus.PENDING,
                RecoveryRequest.date_expiration >= self.clock.now(),
            )
            .values(status=status)
            .execution_options(synchronize_session=False)
        )
        return result.rowcount == 1

    def get_security_question(self, token: str) -> str:
        request = self._open_request(token)
        return self._owner(request).security_question

    def verify_recovery(
        self,
        token: str,
        security_answer: str,
        new_master_password: str,
        confirm_new_master_password: str,
    ) -> None:
        request = self._open_request(token)
        user = self._owner(request)

        if not self.users.verify_security_answer(user, security_answer):
            logger.info("Recovery request %s: incorrect security answer", request.id)
            raise StateConflict(ErrorCode.INCORRECT_SECURITY_ANSWER)

        validation.validate_master_password(new_master_password)
        validation.validate_password_confirmation(new_master_password, confirm_new_master_password)

        if self.users.verify_master_password(user, new_master_password):
            raise ValidationFailed(ErrorCode.NEW_PASSWORD_CANNOT_BE_SAME_AS_OLD)

        new_hash = self.users.hash_master_password(new_master_password)

        # The token may have been used by someone else while we hashed
        with self.database.transaction() as db:
            if not self._leave_pending(db, token, RecoveryStatus.COMPLETED):
                raise StateConflict(ErrorCode.INVALID_OR_EXPIRED_TOKEN)

            self.users.replace_master_password(user.id, new_hash)
            if self.sessions is not None:
                self.sessions.revoke_all(user.id)

        logger.info("Recovery request %s completed for user %s", request.id, user.id)

    def cancel_recovery(self, token: str) -> None:
        request = self._open_request(token)
        with self.database.transaction() as db:
            if not self._leave_pending(db, token, RecoveryStatus.CANCELLED):
                raise StateConflict(ErrorCode.INVALID_OR_EXPIRED_TOKEN)
        logger.info("Recovery request %s cancelled", request.id)

    def status_of(self, token: str) -> Optional[RecoveryStatus]:
        request = self.find_request(token)
        return request.status if request is not None else None
