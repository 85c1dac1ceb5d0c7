# backend/app/security/tokens.py
"""
Opaque identifiers and bearer tokens.

- Record ids are UUID4 strings (unique for the process lifetime)
- Session and recovery tokens are 256-bit URL-safe random strings
"""
import secrets
import uuid

TOKEN_BYTES = 32


def new_id() -> str:
    return str(uuid.uuid4())


def generate_token() -> str:
    """Generate an unguessable bearer token."""
    return secrets.token_urlsafe(TOKEN_BYTES)
