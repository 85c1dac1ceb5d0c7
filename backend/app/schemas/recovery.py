# backend/app/schemas/recovery.py
"""
Schemas for the security-question recovery flow.

The recovery token is never part of a response: in production it travels
by e-mail only.
"""
from pydantic import Field

from backend.app.schemas.common import CamelModel

GENERIC_RECOVERY_MESSAGE = "If the email exists, a recovery link has been sent"


class RecoveryRequestBody(CamelModel):
    email: str = Field(..., min_length=1)


class RecoveryRequestResponse(CamelModel):
    message: str = GENERIC_RECOVERY_MESSAGE


class SecurityQuestionResponse(CamelModel):
    security_question: str


class RecoveryVerifyRequest(CamelModel):
    token: str = Field(..., min_length=1)
    security_answer: str = Field(..., min_length=1)
    new_master_password: str
    confirm_new_master_password: str


class RecoveryVerifyResponse(CamelModel):
    success: bool = True
