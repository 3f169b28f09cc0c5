"""Unit tests for the Key Derivation Function (KDF) module."""

import pytest

from shincrypt.core.exceptions import CryptoError
from shincrypt.security.kdf import (
    KEY_LEN,
    decode_salt,
    derive_key,
    encode_salt,
    generate_salt,
)


def test_generate_salt_defaults():
    """Ensure salt generation returns bytes of the default length (16)."""
    salt = generate_salt()
    assert isinstance(salt, bytes)
    assert len(salt) == 16


def test_generate_salt_custom_length():
    """Ensure salt generation respects the length parameter."""
    salt = generate_salt(length=32)
    assert len(salt) == 32


def test_encode_salt_is_unpadded_token():
    """A 16-byte salt becomes a 22 character base64 token with no '=' padding."""
    token = encode_salt(b"\x00" * 16)
    assert token == "AAAAAAAAAAAAAAAAAAAAAA"
    assert "=" not in token


def test_decode_salt_reverses_encode():
    salt = generate_salt()
    assert decode_salt(encode_salt(salt)) == salt


def test_decode_salt_ignores_surrounding_whitespace():
    salt = generate_salt()
    assert decode_salt(f"  {encode_salt(salt)}\r\n") == salt


@pytest.mark.parametrize(
    "token",
    [
        "",
        "abc",  # too short
        "A" * 65,  # too long
        "not base64!!",
        "AAAAAAAAAAAAAAAAAAAAAA==",  # padding is not part of the token format
        "AAAAAA",  # decodes to fewer than 8 bytes
    ],
)
def test_decode_salt_rejects_malformed_tokens(token):
    with pytest.raises(CryptoError):
        decode_salt(token)


def test_derive_key_length():
    key = derive_key("secure_string_password", generate_salt())
    assert isinstance(key, bytes)
    assert len(key) == KEY_LEN


def test_derive_key_consistency():
    """Ensure passing the same password as string or bytes yields the same key."""
    salt = generate_salt()
    assert derive_key("password123", salt) == derive_key(b"password123", salt)


def test_derive_key_depends_on_salt_and_password():
    salt = generate_salt()
    key = derive_key("password123", salt)
    assert key != derive_key("password124", salt)
    assert key != derive_key("password123", generate_salt())


def test_derive_key_known_vector_is_stable():
    """Argon2id with fixed cost parameters is deterministic for fixed inputs."""
    salt = b"saltsaltsaltsalt"
    assert derive_key("secret123", salt) == derive_key("secret123", salt)


def test_derive_key_custom_length():
    assert len(derive_key(b"pass", generate_salt(), key_len=64)) == 64


def test_derive_key_short_salt_raises_crypto_error():
    """Argon2 refuses salts under 8 bytes; that must surface as CryptoError."""
    with pytest.raises(CryptoError):
        derive_key(b"pass", b"abc")
