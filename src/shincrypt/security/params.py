"""Per-operation key material and the plaintext container preamble.

The preamble is what precedes the encrypted header on disk:

- the salt token as one UTF-8 line terminated by ``\\n``
- the 24 raw nonce bytes

Both are needed to re-derive the key, so neither is encrypted.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from typing import BinaryIO

from shincrypt.core.exceptions import CryptoError, FormatError
from .kdf import decode_salt, derive_key, encode_salt, generate_salt

NONCE_SIZE = 24
# Longest salt line we are willing to read before giving up on a file.
MAX_SALT_LINE = 128


def generate_nonce() -> bytes:
    return os.urandom(NONCE_SIZE)


@dataclass(frozen=True)
class EncryptionParameters:
    """Salt token, nonce and derived key for one encrypt or decrypt call."""

    salt: str
    nonce: bytes
    key: bytes = field(repr=False)

    @classmethod
    def generate(cls, password: str) -> "EncryptionParameters":
        # Fresh salt and nonce on every call, even for the same password.
        salt = generate_salt()
        return cls(salt=encode_salt(salt), nonce=generate_nonce(), key=derive_key(password, salt))

    @classmethod
    def restore(cls, password: str, salt: str, nonce: bytes) -> "EncryptionParameters":
        if len(nonce) != NONCE_SIZE:
            raise CryptoError(f"Nonce must be {NONCE_SIZE} bytes")
        return cls(salt=salt, nonce=nonce, key=derive_key(password, decode_salt(salt)))

    def write_preamble(self, out: BinaryIO) -> int:
        """Write salt line + nonce; returns the number of bytes written."""
        line = f"{self.salt}\n".encode("utf-8")
        out.write(line)
        out.write(self.nonce)
        return len(line) + len(self.nonce)


def read_preamble(inf: BinaryIO) -> tuple[str, bytes]:
    """Read the salt line and nonce from the start of a container."""
    line = inf.readline(MAX_SALT_LINE)
    if not line.endswith(b"\n"):
        raise FormatError("Invalid file: missing salt line")
    try:
        salt = line[:-1].decode("utf-8")
    except UnicodeDecodeError as exc:
        raise CryptoError("Malformed salt") from exc

    nonce = inf.read(NONCE_SIZE)
    if len(nonce) != NONCE_SIZE:
        raise FormatError("Invalid file: truncated nonce")
    return salt, nonce
