"""Shared fixtures.

- Settings with a cheap bcrypt cost so the suite stays fast
- FrozenClock so expiry rules can be tested without sleeping
- Fresh services on their own in-memory database per test (no state leaks between tests)
"""
from datetime import datetime, timedelta, timezone

import pytest
from fastapi.testclient import TestClient

from backend.app.core.clock import Clock
from backend.app.core.config import Settings
from backend.app.main import create_app
from backend.app.models.user import UserRegistration
from backend.app.services.container import build_services, get_services

STRONG_PASSWORD = "Str0ng!Passw0rd"
OTHER_STRONG_PASSWORD = "An0ther#Secret!"


class FrozenClock(Clock):
    def __init__(self, start: datetime):
        self.current = start

    def now(self) -> datetime:
        return self.current

    def advance(self, **kwargs) -> datetime:
        self.current = self.current + timedelta(**kwargs)
        return self.current


@pytest.fixture
def clock():
    return FrozenClock(datetime(2026, 1, 1, 12, 0, tzinfo=timezone.utc))


@pytest.fixture
def settings():
    return Settings(
        _env_file=None,
        ENVIRONMENT="test",
        BCRYPT_ROUNDS=4,
        VAULT_SECRET_KEY="test-vault-secret",
        TWO_FACTOR_MODE="totp",
        CORS_ORIGINS="",
    )


@pytest.fixture
def services(settings, clock):
    return build_services(settings, clock=clock)


def make_registration(email="a@b.com", **overrides) -> UserRegistration:
    data = dict(
        email=email,
        master_password=STRONG_PASSWORD,
        confirm_master_password=STRONG_PASSWORD,
        security_question="pet name",
        security_answer="Rex",
        two_factor_enabled=False,
    )
    data.update(overrides)
    return UserRegistration(**data)


@pytest.fixture
def registered_user(services):
    """A plain account (no two-factor) with the id it was created under."""
    user_id = services.auth.register(make_registration())
    return services.users.get(user_id)


@pytest.fixture
def app(settings, services):
    application = create_app(settings)
    application.dependency_overrides[get_services] = lambda: services
    yield application
    application.dependency_overrides.clear()


@pytest.fixture
def client(app):
    return TestClient(app)
