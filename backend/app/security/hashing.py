# backend/app/security/hashing.py
"""
One-way hashing for master passwords and security answers (bcrypt).

bcrypt only looks at the first 72 bytes of its input and newer releases
refuse longer input outright. Secrets are therefore pre-hashed with SHA-256
and base64-encoded (44 ASCII bytes) before bcrypt sees them, so long
passphrases keep their full entropy.
"""
import base64
import hashlib

import bcrypt

DEFAULT_ROUNDS = 10


def _prehash(secret: str) -> bytes:
    digest = hashlib.sha256(secret.encode("utf-8")).digest()
    return base64.b64encode(digest)


def get_password_hash(secret: str, rounds: int = DEFAULT_ROUNDS) -> str:
    """
    Hash a secret with bcrypt.

    Each call uses a fresh random salt, so two hashes of the same secret
    differ. The returned string embeds the cost factor and salt ($2b$...).
    """
    salt = bcrypt.gensalt(rounds=rounds)
    return bcrypt.hashpw(_prehash(secret), salt).decode("utf-8")


def verify_password(secret: str, hashed: str) -> bool:
    """
    Check a secret against a stored bcrypt hash (constant-time).

    Returns False for malformed hashes instead of raising.
    """
    try:
        return bcrypt.checkpw(_prehash(secret), hashed.encode("utf-8"))
    except (ValueError, AttributeError):
        return False


class PasswordHasher:
    """Bcrypt hasher bound to a cost factor, injected into the user directory."""

    def __init__(self, rounds: int = DEFAULT_ROUNDS):
        if not 4 <= rounds <= 31:
            raise ValueError("bcrypt rounds must be between 4 and 31")
        self.rounds = rounds

    def hash(self, secret: str) -> str:
        return get_password_hash(secret, self.rounds)

    def verify(self, secret: str, hashed: str) -> bool:
        return verify_password(secret, hashed)
