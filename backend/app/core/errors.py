# backend/app/core/errors.py
"""
Error taxonomy for the core services.

Every failure carries a stable, machine-readable code so the HTTP layer
(and any other caller) can switch on the exact kind of error instead of
parsing messages. The exception class tells the boundary which family the
error belongs to; the code tells it which error it is.
"""
from enum import Enum


class ErrorCode(str, Enum):
    # Registration / master password policy
    INVALID_EMAIL_FORMAT = "invalidEmailFormat"
    EMAIL_ALREADY_EXISTS = "emailAlreadyExists"
    MASTER_PASSWORD_TOO_SHORT = "masterPasswordTooShort"
    MASTER_PASSWORD_MISSING_UPPERCASE = "masterPasswordMissingUppercase"
    MASTER_PASSWORD_MISSING_LOWERCASE = "masterPasswordMissingLowercase"
    MASTER_PASSWORD_MISSING_NUMBER = "masterPasswordMissingNumber"
    MASTER_PASSWORD_MISSING_SPECIAL_CHAR = "masterPasswordMissingSpecialChar"
    MASTER_PASSWORD_TOO_OBVIOUS = "masterPasswordTooObvious"
    PASSWORD_CONFIRMATION_MISMATCH = "passwordConfirmationMismatch"
    MASTER_PASSWORD_CANNOT_BE_EMAIL = "masterPasswordCannotBeEmail"
    SECURITY_QUESTION_REQUIRED = "securityQuestionRequired"
    SECURITY_ANSWER_TOO_SHORT = "securityAnswerTooShort"
    SECURITY_ANSWER_TOO_LONG = "securityAnswerTooLong"
    PHONE_REQUIRED_FOR_TWO_FACTOR = "phoneRequiredForTwoFactor"
    INVALID_PHONE_FORMAT = "invalidPhoneFormat"
    INVALID_INACTIVITY_TIMEOUT = "invalidInactivityTimeout"

    # Authentication / sessions
    INVALID_CREDENTIALS = "invalidCredentials"
    ACCOUNT_LOCKED = "accountLocked"
    TWO_FACTOR_CODE_REQUIRED = "twoFactorCodeRequired"
    INVALID_TWO_FACTOR_CODE = "invalidTwoFactorCode"
    TWO_FACTOR_NOT_ENABLED = "twoFactorNotEnabled"
    AUTHENTICATION_REQUIRED = "authenticationRequired"
    INVALID_SESSION = "invalidSession"
    SESSION_EXPIRED = "sessionExpired"

    # Recovery
    INVALID_OR_EXPIRED_TOKEN = "invalidOrExpiredToken"
    USER_NOT_FOUND = "userNotFound"
    INCORRECT_SECURITY_ANSWER = "incorrectSecurityAnswer"
    NEW_PASSWORD_CANNOT_BE_SAME_AS_OLD = "newPasswordCannotBeSameAsOld"

    # Password records
    TITLE_REQUIRED = "titleRequired"
    TITLE_TOO_LONG = "titleTooLong"
    PASSWORD_REQUIRED = "passwordRequired"
    PASSWORD_TOO_LONG = "passwordTooLong"
    USERNAME_TOO_LONG = "usernameTooLong"
    INVALID_URL = "invalidUrl"
    URL_TOO_LONG = "urlTooLong"
    NOTES_TOO_LONG = "notesTooLong"
    EXPIRATION_DATE_MUST_BE_FUTURE = "expirationDateMustBeFuture"
    PASSWORD_NOT_FOUND = "passwordNotFound"
    UNAUTHORIZED = "unauthorized"

    # Boundary only
    VALIDATION_ERROR = "VALIDATION_ERROR"
    INTERNAL_SERVER_ERROR = "INTERNAL_SERVER_ERROR"


class AppError(Exception):
    """Base class for every error the core raises on purpose."""

    def __init__(self, code: ErrorCode):
        self.code = code
        super().__init__(code.value)

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.code.value!r})"


class ValidationFailed(AppError):
    """Malformed or out-of-policy input. Caller may retry with fixed input."""


class AuthenticationFailed(AppError):
    """Bad credentials, locked account, missing/invalid session or 2FA code."""


class AccessDenied(AppError):
    """The resource exists but belongs to someone else."""


class NotFound(AppError):
    pass


class StateConflict(AppError):
    """A workflow token or its owner is no longer in a usable state."""
