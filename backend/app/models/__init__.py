from backend.app.models.credential import (
    Credential,
    CredentialDetail,
    CredentialInput,
    CredentialSummary,
    CredentialUpdate,
)
from backend.app.models.recovery_request import RecoveryRequest, RecoveryStatus, RecoveryTicket
from backend.app.models.session import Session
from backend.app.models.user import User, UserPublic, UserRegistration

__all__ = [
    "Credential",
    "CredentialDetail",
    "CredentialInput",
    "CredentialSummary",
    "CredentialUpdate",
    "RecoveryRequest",
    "RecoveryStatus",
    "RecoveryTicket",
    "Session",
    "User",
    "UserPublic",
    "UserRegistration",
]
