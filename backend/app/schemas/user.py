# backend/app/schemas/user.py
from typing import Optional

from pydantic import Field

from backend.app.schemas.common import CamelModel


# Request bodies only check types; the policy checks live in the services
# so every failure surfaces with its own error code.
class RegisterRequest(CamelModel):
    email: str
    master_password: str
    confirm_master_password: str
    security_question: str
    security_answer: str
    two_factor_enabled: bool = False
    phone: Optional[str] = None
    inactivity_timeout: Optional[int] = None


class LoginRequest(CamelModel):
    email: str
    master_password: str = Field(..., min_length=1)
    two_factor_code: Optional[str] = None


class UserResponse(CamelModel):
    """Public projection. Hashes and the TOTP secret are never part of it."""
    id: str
    email: str
    two_factor_enabled: bool


class TwoFactorProvisioningResponse(CamelModel):
    otpauth_uri: str
    qr_code_base64: str


class RegisterResponse(CamelModel):
    id: str
    two_factor_provisioning: Optional[TwoFactorProvisioningResponse] = None


class LoginResponse(CamelModel):
    token: str
    user: UserResponse
