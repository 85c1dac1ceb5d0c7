# backend/app/services/container.py
"""
Service wiring.

Builds one database and one set of services per process from Settings.
Every service shares the same Database, so a unit of work that spans two
services (login, recovery) commits or rolls back as one transaction.

Usage in FastAPI endpoints:
    @router.get("/passwords")
    async def list_passwords(services: Services = Depends(get_services)):
        ...
"""
from dataclasses import dataclass
from functools import lru_cache
from typing import Optional

from backend.app.core.clock import Clock, SystemClock
from backend.app.core.config import Settings, get_settings
from backend.app.db.session import Database, create_database
from backend.app.security.encryption import CredentialCipher
from backend.app.security.hashing import PasswordHasher
from backend.app.security.totp import build_verifier
from backend.app.services.auth import AuthenticationService
from backend.app.services.credentials import CredentialStore, PasswordService
from backend.app.services.recovery import RecoveryWorkflow
from backend.app.services.sessions import SessionRegistry
from backend.app.services.users import UserDirectory


@dataclass
class Services:
    database: Database
    users: UserDirectory
    sessions: SessionRegistry
    auth: AuthenticationService
    recovery: RecoveryWorkflow
    passwords: PasswordService


def build_services(settings: Settings, clock: Optional[Clock] = None) -> Services:
    clock = clock or SystemClock()
    database = create_database(settings)

    users = UserDirectory(
        database,
        hasher=PasswordHasher(settings.BCRYPT_ROUNDS),
        clock=clock,
        max_failed_attempts=settings.MAX_FAILED_ATTEMPTS,
        default_inactivity_timeout=settings.DEFAULT_INACTIVITY_TIMEOUT,
    )
    sessions = SessionRegistry(database, clock=clock, duration_hours=settings.SESSION_DURATION_HOURS)

    return Services(
        database=database,
        users=users,
        sessions=sessions,
        auth=AuthenticationService(
            users,
            sessions,
            two_factor=build_verifier(settings.TWO_FACTOR_MODE),
            totp_issuer=settings.TOTP_ISSUER,
        ),
        recovery=RecoveryWorkflow(
            database,
            users,
            sessions=sessions,
            clock=clock,
            expiry_hours=settings.RECOVERY_TOKEN_EXPIRY_HOURS,
        ),
        passwords=PasswordService(
            CredentialStore(database),
            CredentialCipher(settings.VAULT_SECRET_KEY),
            clock=clock,
            expiration_warning_days=settings.EXPIRATION_WARNING_DAYS,
        ),
    )


@lru_cache()
def get_services() -> Services:
    """
    Process-wide services, created on first use.

    With the default DATABASE_URL the data lives in memory only and is lost
    when the process exits. Tests override this dependency with their own
    build_services(...) result.
    """
    return build_services(get_settings())
