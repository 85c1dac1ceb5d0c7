# backend/app/security/encryption.py
"""
Authenticated encryption for stored credential secrets.

Security Architecture:
    1. VAULT_SECRET_KEY (from settings) → HKDF-SHA256 → 32-byte AES key
    2. Each secret encrypted with AES-256-GCM under a fresh 96-bit nonce
    3. Associated data binds the ciphertext to its record id and owner, so a
       ciphertext copied onto another record (or user) fails to decrypt

Stored format (urlsafe base64):
    nonce (12 bytes) || ciphertext || auth_tag (16 bytes)

The key is derived at startup and held in memory only; it is never stored
next to the ciphertexts.
"""
import base64
import binascii
import json
import os
from typing import Optional

from cryptography.exceptions import InvalidTag
from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.ciphers.aead import AESGCM
from cryptography.hazmat.primitives.kdf.hkdf import HKDF

KEY_SIZE = 32      # 256-bit key
NONCE_SIZE = 12    # 96-bit nonce for AES-GCM
HKDF_INFO = b"safepazz-credential-secret-v1"


class DecryptionError(Exception):
    """Ciphertext was tampered with, truncated, or encrypted under another key."""


def derive_key(secret_key: str, salt: Optional[bytes] = None) -> bytes:
    """
    Derive the AES key from the configured secret using HKDF.

    The 'info' parameter gives domain separation, so the same secret can
    safely feed other subkeys later.
    """
    if not secret_key:
        raise ValueError("secret_key must not be empty")
    hkdf = HKDF(
        algorithm=hashes.SHA256(),
        length=KEY_SIZE,
        salt=salt,
        info=HKDF_INFO,
    )
    return hkdf.derive(secret_key.encode("utf-8"))


def canonical_ad(ad: dict) -> bytes:
    """Associated data as canonical JSON bytes (sorted keys, no whitespace)."""
    return json.dumps(ad, sort_keys=True, separators=(",", ":")).encode("utf-8")


class CredentialCipher:
    def __init__(self, secret_key: str):
        self._aead = AESGCM(derive_key(secret_key))

    def encrypt(self, plaintext: str, associated_data: dict) -> str:
        nonce = os.urandom(NONCE_SIZE)
        ciphertext = self._aead.encrypt(nonce, plaintext.encode("utf-8"), canonical_ad(associated_data))
        return base64.urlsafe_b64encode(nonce + ciphertext).decode("ascii")

    def decrypt(self, token: str, associated_data: dict) -> str:
        try:
            blob = base64.urlsafe_b64decode(token.encode("ascii"))
        except (binascii.Error, ValueError) as e:
            raise DecryptionError("malformed ciphertext") from e

        if len(blob) <= NONCE_SIZE:
            raise DecryptionError("malformed ciphertext")

        nonce, ciphertext = blob[:NONCE_SIZE], blob[NONCE_SIZE:]
        try:
            plaintext = self._aead.decrypt(nonce, ciphertext, canonical_ad(associated_data))
        except InvalidTag as e:
            raise DecryptionError("authentication tag mismatch") from e
        return plaintext.decode("utf-8")
