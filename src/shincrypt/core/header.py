"""
Fixed-width FileHeader record.

Layout (little-endian, HEADER_SIZE bytes total):
- 1 byte: packed flag (0/1)
- 1 byte: is_file flag (0/1)
- 2 bytes: format version
- 2 bytes: encryption method tag
- 2 bytes: name length N, then N bytes of UTF-8 name
- 2 bytes: path length P, then P bytes of UTF-8 original path
- zero padding up to HEADER_SIZE

The record is encrypted with the same keystream as the payload that follows it,
so there is no magic value to check. Decoding is strict instead: a wrong
password almost always produces a record that fails one of the checks below.
"""

from __future__ import annotations

import struct
from dataclasses import dataclass
from enum import IntEnum

from .exceptions import FormatError, RecordTooLargeError, UnsupportedMethodError

HEADER_SIZE = 4096
FORMAT_VERSION = 1

_FIXED = struct.Struct("<BBHH")
_LEN = struct.Struct("<H")
_OVERHEAD = _FIXED.size + 2 * _LEN.size


class EncryptionMethod(IntEnum):
    # 1 = XChaCha20 applied in CHUNK_SIZE slices
    STREAM_CIPHER_V1 = 1


@dataclass(frozen=True)
class FileHeader:
    packed: bool
    is_file: bool
    name: str
    original_path: str
    version: int = FORMAT_VERSION
    encryption_method: EncryptionMethod = EncryptionMethod.STREAM_CIPHER_V1

    def encode(self) -> bytes:
        """Serialize into exactly HEADER_SIZE bytes."""
        name = self.name.encode("utf-8")
        path = self.original_path.encode("utf-8")
        needed = _OVERHEAD + len(name) + len(path)
        if needed > HEADER_SIZE:
            raise RecordTooLargeError(
                f"Name and path need {needed} bytes, header holds {HEADER_SIZE}"
            )

        record = bytearray(HEADER_SIZE)
        offset = 0
        _FIXED.pack_into(
            record, offset, int(self.packed), int(self.is_file), self.version, int(self.encryption_method)
        )
        offset += _FIXED.size
        for field in (name, path):
            _LEN.pack_into(record, offset, len(field))
            offset += _LEN.size
            record[offset:offset + len(field)] = field
            offset += len(field)
        return bytes(record)

    @classmethod
    def decode(cls, record: bytes) -> "FileHeader":
        """Parse a record produced by :meth:`encode`; raises FormatError if malformed."""
        if len(record) != HEADER_SIZE:
            raise FormatError("Invalid file: malformed header")

        packed, is_file, version, method = _FIXED.unpack_from(record, 0)
        if packed > 1 or is_file > 1:
            raise FormatError("Invalid file: malformed header")
        try:
            method = EncryptionMethod(method)
        except ValueError:
            raise UnsupportedMethodError(f"Invalid file: unsupported encryption method {method}") from None

        offset = _FIXED.size
        fields = []
        for _ in range(2):
            (length,) = _LEN.unpack_from(record, offset)
            offset += _LEN.size
            # leave room for the next length prefix
            if offset + length + (_LEN.size if not fields else 0) > HEADER_SIZE:
                raise FormatError("Invalid file: malformed header")
            try:
                fields.append(record[offset:offset + length].decode("utf-8"))
            except UnicodeDecodeError as exc:
                raise FormatError("Invalid file: header text is not UTF-8") from exc
            offset += length

        if any(record[offset:]):
            raise FormatError("Invalid file: malformed header")

        name, original_path = fields
        return cls(
            packed=bool(packed),
            is_file=bool(is_file),
            name=name,
            original_path=original_path,
            version=version,
            encryption_method=method,
        )
