"""Security helpers: key derivation and streaming encryption primitives for ShinCrypt.

This package provides:
- Argon2id key derivation from a password and a salt token
- fresh salt/nonce generation and the plaintext container preamble
- XChaCha20 file-like adapters that encrypt/decrypt in 1 MiB chunks
"""

from .kdf import generate_salt, encode_salt, decode_salt, derive_key
from .params import EncryptionParameters, NONCE_SIZE, generate_nonce, read_preamble
from .stream import CHUNK_SIZE, new_cipher, EncryptingWriter, DecryptingReader

__all__ = [
    "generate_salt",
    "encode_salt",
    "decode_salt",
    "derive_key",
    "EncryptionParameters",
    "NONCE_SIZE",
    "generate_nonce",
    "read_preamble",
    "CHUNK_SIZE",
    "new_cipher",
    "EncryptingWriter",
    "DecryptingReader",
]
