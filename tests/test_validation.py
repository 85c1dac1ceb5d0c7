"""Unit tests for input rules (master password policy, URLs, record fields)."""
from datetime import datetime, timedelta, timezone

import pytest

from backend.app.core.errors import ErrorCode, ValidationFailed
from backend.app.services import validation


def _code(fn, *args):
    with pytest.raises(ValidationFailed) as exc_info:
        fn(*args)
    return exc_info.value.code


class TestMasterPasswordPolicy:
    @pytest.mark.parametrize(
        "password, expected",
        [
            ("Sh0rt!", ErrorCode.MASTER_PASSWORD_TOO_SHORT),
            # too short wins even when everything else is missing too
            ("abc", ErrorCode.MASTER_PASSWORD_TOO_SHORT),
            ("lowercase0nly!!", ErrorCode.MASTER_PASSWORD_MISSING_UPPERCASE),
            ("UPPERCASE0NLY!!", ErrorCode.MASTER_PASSWORD_MISSING_LOWERCASE),
            ("NoDigitsHere!!", ErrorCode.MASTER_PASSWORD_MISSING_NUMBER),
            ("NoSpecial1234x", ErrorCode.MASTER_PASSWORD_MISSING_SPECIAL_CHAR),
            ("My!Password99x", ErrorCode.MASTER_PASSWORD_TOO_OBVIOUS),
            ("Xy!1234567zzzz", ErrorCode.MASTER_PASSWORD_TOO_OBVIOUS),
            ("Q!9ABCDEFqwert", ErrorCode.MASTER_PASSWORD_TOO_OBVIOUS),
        ],
    )
    def test_first_failing_rule_wins(self, password, expected):
        assert _code(validation.validate_master_password, password) == expected

    def test_strong_password_passes(self):
        validation.validate_master_password("Str0ng!Passw0rd")


class TestAccountRules:
    @pytest.mark.parametrize("email", ["", "plain", "a@b", "a b@c.com", "@b.com"])
    def test_bad_emails(self, email):
        assert _code(validation.validate_email, email) == ErrorCode.INVALID_EMAIL_FORMAT

    def test_phone_only_checked_with_two_factor(self):
        validation.validate_phone(False, None)
        validation.validate_phone(False, "not a phone")
        validation.validate_phone(True, "+15551234567")

        assert _code(validation.validate_phone, True, None) == ErrorCode.PHONE_REQUIRED_FOR_TWO_FACTOR
        assert _code(validation.validate_phone, True, "0123") == ErrorCode.INVALID_PHONE_FORMAT

    @pytest.mark.parametrize("minutes", [0, 61, -5])
    def test_inactivity_timeout_range(self, minutes):
        assert _code(validation.validate_inactivity_timeout, minutes) == ErrorCode.INVALID_INACTIVITY_TIMEOUT


class TestRecordRules:
    @pytest.mark.parametrize(
        "url",
        ["https://example.com", "http://localhost:8080/login?next=/", "mailto:someone@example.com"],
    )
    def test_well_formed_urls(self, url):
        assert validation.is_well_formed_url(url)

    @pytest.mark.parametrize("url", ["example.com", "not a url", "https://", "http://host:99999/"])
    def test_malformed_urls(self, url):
        assert not validation.is_well_formed_url(url)

    def test_url_format_checked_before_length(self):
        too_long = "https://example.com/" + "a" * 2048
        assert _code(validation.validate_url, too_long) == ErrorCode.URL_TOO_LONG
        assert _code(validation.validate_url, "nope" * 600) == ErrorCode.INVALID_URL

    def test_whitespace_title_is_missing(self):
        assert _code(validation.validate_title, "   ") == ErrorCode.TITLE_REQUIRED
        assert _code(validation.validate_title, "t" * 101) == ErrorCode.TITLE_TOO_LONG

    def test_expiration_must_be_strictly_future(self):
        now = datetime(2026, 1, 1, tzinfo=timezone.utc)

        assert _code(validation.validate_expiration_date, now, now) == ErrorCode.EXPIRATION_DATE_MUST_BE_FUTURE
        validation.validate_expiration_date(now + timedelta(seconds=1), now)
        validation.validate_expiration_date(None, now)
