import base64
import binascii
import os

from argon2.exceptions import HashingError
from argon2.low_level import Type, hash_secret_raw

from shincrypt.core.exceptions import CryptoError

# Argon2id defaults used by every container; they are not stored in the file.
TIME_COST = 2
MEMORY_COST = 19456
PARALLELISM = 1
KEY_LEN = 32

SALT_LEN = 16
MIN_SALT_TOKEN = 4
MAX_SALT_TOKEN = 64
MIN_SALT_BYTES = 8


def generate_salt(length: int = SALT_LEN) -> bytes:
    """Return a cryptographically secure random salt."""
    return os.urandom(length)


def encode_salt(salt: bytes) -> str:
    """Render salt bytes as an unpadded base64 token."""
    return base64.b64encode(salt).decode("ascii").rstrip("=")


def decode_salt(token: str) -> bytes:
    """
    Parse a salt token written by :func:`encode_salt`.
    Raises CryptoError if the token is not valid unpadded base64.
    """
    token = token.strip()
    if not MIN_SALT_TOKEN <= len(token) <= MAX_SALT_TOKEN or "=" in token:
        raise CryptoError("Malformed salt")
    try:
        salt = base64.b64decode(token + "=" * (-len(token) % 4), validate=True)
    except (binascii.Error, ValueError) as exc:
        raise CryptoError("Malformed salt") from exc
    if len(salt) < MIN_SALT_BYTES:
        raise CryptoError("Malformed salt")
    return salt


def derive_key(password, salt: bytes, key_len: int = KEY_LEN) -> bytes:
    """
    Derive a cipher key from a password using Argon2id.
    Returns raw derived key bytes.
    """
    if isinstance(password, str):
        password = password.encode("utf-8")

    try:
        return hash_secret_raw(
            secret=password,
            salt=salt,
            time_cost=TIME_COST,
            memory_cost=MEMORY_COST,
            parallelism=PARALLELISM,
            hash_len=key_len,
            type=Type.ID,
        )
    except HashingError as exc:
        raise CryptoError(f"Key derivation failed: {exc}") from exc
