"""Encryption of the GitHub token stored at rest."""

from __future__ import annotations

import base64
import hashlib

from cryptography.fernet import Fernet, InvalidToken

from pagesync.exceptions import InternalServerError


def _fernet(secret_key: str) -> Fernet:
    """Build a Fernet cipher keyed by SHA-256 of the application secret."""
    digest = hashlib.sha256(secret_key.encode()).digest()
    return Fernet(base64.urlsafe_b64encode(digest))


def encrypt_token(token: str, secret_key: str) -> str:
    """Encrypt a token; an empty token is stored as an empty string."""
    if not token:
        return ""
    return _fernet(secret_key).encrypt(token.encode()).decode()


def decrypt_token(ciphertext: str, secret_key: str) -> str:
    """Decrypt a stored token.

    Raises InternalServerError when the value was encrypted under another
    secret key or is corrupt; the message must not reach clients.
    """
    if not ciphertext:
        return ""
    try:
        return _fernet(secret_key).decrypt(ciphertext.encode()).decode()
    except InvalidToken as exc:
        msg = "Stored GitHub token cannot be decrypted; was SECRET_KEY changed?"
        raise InternalServerError(msg) from exc


def mask_token(token: str) -> str | None:
    """Return a display hint such as ``...a1b2`` for a token, or None if unset."""
    if not token:
        return None
    if len(token) <= 8:
        return "..."
    return f"...{token[-4:]}"
