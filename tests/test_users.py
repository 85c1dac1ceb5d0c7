"""Unit tests for the user directory (registration and lockout bookkeeping)."""
import pytest

from conftest import STRONG_PASSWORD, make_registration

from backend.app.core.errors import AuthenticationFailed, ErrorCode, NotFound, ValidationFailed


def _register_error(services, **overrides):
    with pytest.raises(ValidationFailed) as exc_info:
        services.users.create_user(make_registration(**overrides))
    return exc_info.value.code


class TestRegistration:
    def test_register_returns_fresh_ids(self, services):
        ids = {services.users.create_user(make_registration(email=f"user{i}@example.com")) for i in range(5)}

        assert len(ids) == 5

    def test_stored_user_has_hashes_not_secrets(self, services):
        user_id = services.users.create_user(make_registration())
        user = services.users.get(user_id)

        assert user.master_password_hash != STRONG_PASSWORD
        assert user.master_password_hash.startswith("$2")
        assert user.security_answer_hash.startswith("$2")
        assert user.failed_attempts == 0
        assert user.account_locked is False
        assert user.last_access is None
        assert user.inactivity_timeout == 15
        assert user.totp_secret is None

    def test_security_answer_is_case_insensitive(self, services):
        user = services.users.get(services.users.create_user(make_registration()))

        assert services.users.verify_security_answer(user, "rex")
        assert services.users.verify_security_answer(user, "REX")
        assert not services.users.verify_security_answer(user, "Max")

    def test_duplicate_email_rejected(self, services):
        services.users.create_user(make_registration())

        assert _register_error(services) == ErrorCode.EMAIL_ALREADY_EXISTS

    def test_email_uniqueness_is_case_sensitive_as_stored(self, services):
        services.users.create_user(make_registration(email="a@b.com"))
        services.users.create_user(make_registration(email="A@b.com"))

        assert services.users.find_by_email("A@b.com").email == "A@b.com"

    def test_duplicate_check_runs_before_password_policy(self, services):
        services.users.create_user(make_registration())

        assert _register_error(services, master_password="weak") == ErrorCode.EMAIL_ALREADY_EXISTS

    @pytest.mark.parametrize(
        "overrides, expected",
        [
            ({"email": "not-an-email"}, ErrorCode.INVALID_EMAIL_FORMAT),
            ({"master_password": "short"}, ErrorCode.MASTER_PASSWORD_TOO_SHORT),
            ({"confirm_master_password": "Different!Pass1"}, ErrorCode.PASSWORD_CONFIRMATION_MISMATCH),
            ({"security_question": "   "}, ErrorCode.SECURITY_QUESTION_REQUIRED),
            ({"security_answer": "ab"}, ErrorCode.SECURITY_ANSWER_TOO_SHORT),
            ({"security_answer": "x" * 101}, ErrorCode.SECURITY_ANSWER_TOO_LONG),
            ({"two_factor_enabled": True}, ErrorCode.PHONE_REQUIRED_FOR_TWO_FACTOR),
            ({"two_factor_enabled": True, "phone": "12-34"}, ErrorCode.INVALID_PHONE_FORMAT),
            ({"inactivity_timeout": 61}, ErrorCode.INVALID_INACTIVITY_TIMEOUT),
            ({"inactivity_timeout": 0}, ErrorCode.INVALID_INACTIVITY_TIMEOUT),
        ],
    )
    def test_validation_errors(self, services, overrides, expected):
        assert _register_error(services, **overrides) == expected
        assert services.users.count() == 0

    def test_master_password_cannot_be_email(self, services):
        email = "Str0ng!Passw0rd@x.io"

        code = _register_error(
            services, email=email, master_password=email, confirm_master_password=email
        )

        assert code == ErrorCode.MASTER_PASSWORD_CANNOT_BE_EMAIL

    def test_two_factor_account_gets_totp_secret(self, services):
        user_id = services.users.create_user(make_registration(two_factor_enabled=True, phone="+15551234567"))
        user = services.users.get(user_id)

        assert user.two_factor_enabled is True
        assert user.phone == "+15551234567"
        assert user.totp_secret


class TestLockoutBookkeeping:
    def test_threshold_locks_exactly_once(self, services, registered_user):
        for _ in range(4):
            user = services.users.increment_failed_attempts(registered_user.id)
            assert user.account_locked is False

        user = services.users.increment_failed_attempts(registered_user.id)

        assert user.failed_attempts == 5
        assert user.account_locked is True

    def test_attempts_on_locked_account_are_not_counted(self, services, registered_user):
        for _ in range(5):
            services.users.increment_failed_attempts(registered_user.id)

        with pytest.raises(AuthenticationFailed) as exc_info:
            services.users.increment_failed_attempts(registered_user.id)

        assert exc_info.value.code == ErrorCode.ACCOUNT_LOCKED
        assert services.users.get(registered_user.id).failed_attempts == 5

    def test_record_access_refuses_locked_account(self, services, registered_user, clock):
        services.users.increment_failed_attempts(registered_user.id)
        services.users.lock_account(registered_user.id)

        with pytest.raises(AuthenticationFailed) as exc_info:
            services.users.record_access(registered_user.id)

        assert exc_info.value.code == ErrorCode.ACCOUNT_LOCKED
        user = services.users.get(registered_user.id)
        assert user.failed_attempts == 1
        assert user.last_access is None

    def test_reset_does_not_unlock(self, services, registered_user):
        services.users.lock_account(registered_user.id)
        user = services.users.reset_failed_attempts(registered_user.id)

        assert user.failed_attempts == 0
        assert user.account_locked is True

    def test_replace_master_password_clears_lock(self, services, registered_user):
        for _ in range(5):
            services.users.increment_failed_attempts(registered_user.id)

        user = services.users.replace_master_password(registered_user.id, "new-hash")

        assert user.account_locked is False
        assert user.failed_attempts == 0
        assert user.master_password_hash == "new-hash"

    def test_unknown_user(self, services):
        with pytest.raises(NotFound) as exc_info:
            services.users.increment_failed_attempts("nope")

        assert exc_info.value.code == ErrorCode.USER_NOT_FOUND
