# backend/app/security/totp.py
"""
Two-factor verification.

The authentication service always runs the 6-digit shape check first
(`is_six_digit_code`) and only then hands the code to a verifier:

- TotpVerifier: RFC 6238 codes (Google Authenticator, Authy, Aegis),
  6 digits, 30-second step, HMAC-SHA1, Base32 secret, ±1 step tolerance
- FormatOnlyVerifier: accepts any 6-digit code (legacy placeholder mode)
"""
import base64
import io
import re
from typing import Protocol

import pyotp
import qrcode

from backend.app.models.user import User

_SIX_DIGITS = re.compile(r"^\d{6}$")


def is_six_digit_code(code: str) -> bool:
    return bool(_SIX_DIGITS.match(code))


def generate_totp_secret() -> str:
    """
    Generate a new random TOTP secret (Base32 encoded).
    Returns 32-character Base32 string.
    """
    return pyotp.random_base32()


def get_totp_uri(secret: str, account_name: str, issuer: str) -> str:
    """
    Generate the otpauth:// URI for QR code encoding.

    Format: otpauth://totp/{issuer}:{account}?secret={secret}&issuer={issuer}
    """
    totp = pyotp.TOTP(secret)
    return totp.provisioning_uri(name=account_name, issuer_name=issuer)


def generate_qr_code_base64(uri: str) -> str:
    """
    Render an otpauth:// URI as a Base64-encoded PNG QR code.

    Frontend can display this directly using: <img src="data:image/png;base64,{result}">
    """
    qr = qrcode.QRCode(
        version=1,
        error_correction=qrcode.constants.ERROR_CORRECT_L,
        box_size=10,
        border=4,
    )
    qr.add_data(uri)
    qr.make(fit=True)

    img = qr.make_image(fill_color="black", back_color="white")

    buffer = io.BytesIO()
    img.save(buffer, format="PNG")
    return base64.b64encode(buffer.getvalue()).decode("utf-8")


def get_current_totp(secret: str) -> str:
    """
    Get the current TOTP code for a secret.
    Useful for testing only - never expose this in production!
    """
    return pyotp.TOTP(secret).now()


class TwoFactorVerifier(Protocol):
    def verify(self, user: User, code: str) -> bool: ...


class TotpVerifier:
    def __init__(self, valid_window: int = 1):
        self.valid_window = valid_window

    def verify(self, user: User, code: str) -> bool:
        if not user.totp_secret:
            return False
        return pyotp.TOTP(user.totp_secret).verify(code, valid_window=self.valid_window)


class FormatOnlyVerifier:
    """Accepts any syntactically valid code. No real second factor."""

    def verify(self, user: User, code: str) -> bool:
        return is_six_digit_code(code)


def build_verifier(mode: str) -> TwoFactorVerifier:
    if mode == "totp":
        return TotpVerifier()
    if mode == "format":
        return FormatOnlyVerifier()
    raise ValueError(f"unknown two-factor mode: {mode!r}")
