"""Chunked XChaCha20 stream adapters.

A container carries one continuous keystream: the encrypted header consumes
the first bytes of it and the payload continues exactly where the header
stopped. The adapters below apply that keystream in fixed CHUNK_SIZE slices,
strictly in order, and report progress after every slice.

- EncryptingWriter wraps a writable binary sink. ``write`` buffers plaintext
  and emits whole chunks; ``flush`` emits whatever partial chunk is left.
- DecryptingReader wraps a readable binary source. Each refill reads up to one
  chunk (short reads are fine), decrypts it once and serves it from a cursor.

The cipher object is stateful, so neither adapter is safe to share between
threads.
"""

from __future__ import annotations

import logging
from typing import BinaryIO, Optional

from Crypto.Cipher import ChaCha20

from shincrypt.core.progress import ProgressReporter
from .params import NONCE_SIZE

logger = logging.getLogger(__name__)

CHUNK_SIZE = 1024 * 1024  # 1 MiB


def new_cipher(key: bytes, nonce: bytes):
    """Return an XChaCha20 cipher positioned at the start of the keystream."""
    if len(nonce) != NONCE_SIZE:
        raise ValueError(f"XChaCha20 needs a {NONCE_SIZE}-byte nonce")
    return ChaCha20.new(key=key, nonce=nonce)


class EncryptingWriter:
    """File-like sink that encrypts everything written through it."""

    def __init__(
        self,
        inner: BinaryIO,
        cipher,
        progress: Optional[ProgressReporter] = None,
        chunk_size: int = CHUNK_SIZE,
    ):
        self.inner = inner
        self.cipher = cipher
        self.progress = progress or ProgressReporter()
        self.chunk_size = chunk_size
        self._buffer = bytearray()

    def writable(self) -> bool:
        return True

    def write(self, data) -> int:
        self._buffer += data
        while len(self._buffer) >= self.chunk_size:
            self._emit(self.chunk_size)
        return len(data)

    def flush(self) -> None:
        """Encrypt and write out the remaining partial chunk, then flush the sink."""
        if self._buffer:
            self._emit(len(self._buffer))
        self.inner.flush()

    def _emit(self, size: int) -> None:
        chunk = self.cipher.encrypt(bytes(self._buffer[:size]))
        self.inner.write(chunk)
        del self._buffer[:size]
        self.progress.advance(size)

    @property
    def pending(self) -> int:
        # plaintext bytes buffered but not yet encrypted
        return len(self._buffer)


class DecryptingReader:
    """File-like source that decrypts everything read through it."""

    def __init__(
        self,
        inner: BinaryIO,
        cipher,
        progress: Optional[ProgressReporter] = None,
        chunk_size: int = CHUNK_SIZE,
    ):
        self.inner = inner
        self.cipher = cipher
        self.progress = progress or ProgressReporter()
        self.chunk_size = chunk_size
        self._buffer = b""
        self._pos = 0

    def readable(self) -> bool:
        return True

    def read(self, size: int = -1) -> bytes:
        if size is None or size < 0:
            return self.readall()
        if size == 0:
            return b""
        if self._pos == len(self._buffer) and not self._refill():
            return b""
        end = min(self._pos + size, len(self._buffer))
        data = self._buffer[self._pos:end]
        self._pos = end
        return data

    def readall(self) -> bytes:
        parts = []
        while True:
            data = self.read(self.chunk_size)
            if not data:
                return b"".join(parts)
            parts.append(data)

    def read_exact(self, size: int) -> bytes:
        """Read until ``size`` bytes are collected or the source ends."""
        parts = []
        remaining = size
        while remaining > 0:
            data = self.read(remaining)
            if not data:
                break
            parts.append(data)
            remaining -= len(data)
        return b"".join(parts)

    def _refill(self) -> bool:
        raw = self.inner.read(self.chunk_size)
        if not raw:
            self._buffer = b""
            self._pos = 0
            return False
        self._buffer = self.cipher.decrypt(raw)
        self._pos = 0
        self.progress.advance(len(raw))
        logger.debug("decrypted %d bytes (%d total)", len(raw), self.progress.processed)
        return True
