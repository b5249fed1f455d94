"""Encryption and masking of users' third-party API keys."""

import base64
import binascii
import hashlib
from functools import lru_cache

from cryptography.fernet import Fernet, InvalidToken

from notecanvas.config import get_settings
from notecanvas.exceptions import StorageError

MASK_CHAR = "•"
VISIBLE_CHARS = 4
MIN_MASKABLE_LENGTH = 8


@lru_cache
def _fernet(encryption_key: str) -> Fernet:
    try:
        return Fernet(encryption_key.encode())
    except (ValueError, binascii.Error):
        # Not a Fernet key: derive one from the configured secret
        digest = hashlib.sha256(encryption_key.encode()).digest()
        return Fernet(base64.urlsafe_b64encode(digest))


def get_cipher() -> Fernet:
    """Get the cipher for the configured encryption key."""
    return _fernet(get_settings().encryption_key)


def encrypt_api_key(api_key: str) -> str:
    """Encrypt an API key for storage."""
    return get_cipher().encrypt(api_key.encode()).decode()


def decrypt_api_key(encrypted: str) -> str:
    """Decrypt a stored API key. Server-side use only."""
    try:
        return get_cipher().decrypt(encrypted.encode()).decode()
    except InvalidToken as e:
        raise StorageError("Stored API key could not be decrypted") from e


def mask_api_key(api_key: str) -> str:
    """Mask a key for display, e.g. ``sk-t••••••••••••7890``."""
    if not api_key or len(api_key) < MIN_MASKABLE_LENGTH:
        return MASK_CHAR * 16
    return api_key[:VISIBLE_CHARS] + MASK_CHAR * 12 + api_key[-VISIBLE_CHARS:]
