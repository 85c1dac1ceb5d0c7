# backend/app/services/sessions.py
import logging
from datetime import timedelta
from typing import Optional

from sqlalchemy import delete, func, select

from backend.app.core.clock import Clock, SystemClock
from backend.app.core.errors import AuthenticationFailed, ErrorCode
from backend.app.db.session import Database
from backend.app.models.session import Session
from backend.app.security.tokens import generate_token

logger = logging.getLogger(__name__)

SESSION_DURATION_HOURS = 24


class SessionRegistry:
    """
    Issued session tokens and their expiry.

    A session is valid while its row exists and `now <= expires_at`.
    Expired rows are purged when someone looks them up; nothing sweeps
    them in the background. Sessions are never renewed.
    """

    def __init__(
        self,
        database: Database,
        clock: Optional[Clock] = None,
        duration_hours: int = SESSION_DURATION_HOURS,
    ):
        self.database = database
        self.clock = clock or SystemClock()
        self.duration = timedelta(hours=duration_hours)

    def issue(self, user_id: str) -> Session:
        now = self.clock.now()
        session = Session(
            token=generate_token(),
            user_id=user_id,
            created_at=now,
            expires_at=now + self.duration,
        )
        with self.database.transaction() as db:
            db.add(session)
        return session

    def validate(self, token: str) -> str:
        """
        Resolve a token to its user id.

        Raises:
            AuthenticationFailed(invalidSession): unknown token
            AuthenticationFailed(sessionExpired): token past expiry (purged)
        """
        with self.database.transaction() as db:
            session = db.get(Session, token)
            if session is None:
                raise AuthenticationFailed(ErrorCode.INVALID_SESSION)

            if not session.is_expired(self.clock.now()):
                return session.user_id

            db.delete(session)

        # Raised after the purge has committed
        raise AuthenticationFailed(ErrorCode.SESSION_EXPIRED)

    def revoke(self, token: str) -> bool:
        with self.database.transaction() as db:
            return db.execute(delete(Session).where(Session.token == token)).rowcount > 0

    def revoke_all(self, user_id: str) -> int:
        with self.database.transaction() as db:
            revoked = db.execute(delete(Session).where(Session.user_id == user_id)).rowcount
        if revoked:
            logger.info("Revoked %d session(s) for user %s", revoked, user_id)
        return revoked

    def active_count(self) -> int:
        with self.database.transaction() as db:
            return db.scalar(select(func.count()).select_from(Session))
