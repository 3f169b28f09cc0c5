"""
Encrypt/decrypt orchestration.

Container layout on disk:
- salt token line (plaintext)
- 24-byte nonce (plaintext)
- FileHeader record, HEADER_SIZE bytes, encrypted
- payload (tar stream or raw file bytes), encrypted in CHUNK_SIZE slices

Header and payload share one keystream: the cipher that encrypted the header
is handed to the EncryptingWriter, and on the way back the header is read
through the same DecryptingReader that later serves the payload.

There is no MAC. A wrong password is caught by the strict header decoding in
nearly every case, but tampered payload bytes decrypt to garbage silently.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Optional, Union

from ..security.params import EncryptionParameters, read_preamble
from ..security.stream import DecryptingReader, EncryptingWriter, new_cipher
from .archive import copy_raw, pack, unpack
from .config import EngineConfig
from .exceptions import ContainerIOError, CryptoError, FormatError, PathError, ShinCryptError
from .header import HEADER_SIZE, FileHeader
from .paths import PathKind, classify, container_path, disambiguate, safe_member_name, total_size
from .progress import ProgressLike, ProgressReporter

logger = logging.getLogger(__name__)

PathLike = Union[str, Path]


def _check_password(password: str) -> None:
    if not password:
        raise CryptoError("Password must not be empty")


def _output_dir(input_path: Path, output_dir: Optional[PathLike], config: EngineConfig) -> Path:
    # same_dir (or no output_dir at all) means "next to the input"
    if config.same_dir or output_dir is None:
        target = input_path.absolute().parent
    else:
        target = Path(output_dir).expanduser()
    try:
        target.mkdir(parents=True, exist_ok=True)
    except OSError as exc:
        raise ContainerIOError(f"Failed to create directory {target}: {exc}") from exc
    return target


def _discard(path: Path) -> None:
    # Remove a partially written output; a leftover is reported, not raised.
    try:
        path.unlink(missing_ok=True)
    except OSError as exc:
        logger.warning("could not remove partial output %s: %s", path, exc)


def encrypt(
    input_path: PathLike,
    output_dir: Optional[PathLike],
    password: str,
    progress: ProgressLike = None,
    config: Optional[EngineConfig] = None,
) -> Path:
    """
    Encrypt a file or directory into a single container.

    Directories (and single files when ``config.pack_files`` is set) are stored
    as a tar stream; single files otherwise go in as raw bytes. Returns the
    container path. Raises a ShinCryptError subclass on failure, in which case
    no partial container is left behind.
    """
    config = config or EngineConfig()
    # abspath folds ".." lexically, so a symlinked input keeps its own name
    source = Path(os.path.abspath(Path(input_path).expanduser()))
    kind = classify(source)
    _check_password(password)
    if not source.name:
        raise PathError(f"Invalid path: {source} has no name to store")

    packed = kind is PathKind.DIRECTORY or config.pack_files
    try:
        header = FileHeader(
            packed=packed,
            is_file=kind is PathKind.FILE,
            name=source.name,
            original_path=str(source),
        )
        record = header.encode()
    except UnicodeEncodeError as exc:
        raise PathError(f"Invalid path: {source} is not valid UTF-8") from exc

    target_dir = _output_dir(source, output_dir, config)
    out_path = container_path(source, target_dir, config.extension)

    try:
        payload_size = total_size(source)
    except OSError as exc:
        raise PathError(f"Invalid path: cannot read {source}: {exc}") from exc

    params = EncryptionParameters.generate(password)
    reporter = ProgressReporter(progress, total=payload_size)
    logger.info("encrypting %s -> %s (%s)", source, out_path, "packed" if packed else "raw")

    created = False
    try:
        with open(out_path, "wb") as out:
            created = True
            params.write_preamble(out)
            cipher = new_cipher(params.key, params.nonce)
            out.write(cipher.encrypt(record))

            writer = EncryptingWriter(out, cipher, reporter)
            if packed:
                pack(writer, source, header.name, exclude=out_path)
            else:
                with open(source, "rb") as inf:
                    copy_raw(inf, writer)
            writer.flush()
    except OSError as exc:
        if created:
            _discard(out_path)
        raise ContainerIOError(f"Failed to encrypt {source}: {exc}") from exc
    except ShinCryptError:
        if created:
            _discard(out_path)
        raise

    reporter.finish()
    logger.info("encrypted %s (%d bytes of payload)", out_path, reporter.processed)
    return out_path


def decrypt(
    input_path: PathLike,
    output_dir: Optional[PathLike],
    password: str,
    progress: ProgressLike = None,
    config: Optional[EngineConfig] = None,
) -> FileHeader:
    """
    Decrypt a container into ``output_dir``.

    Packed containers are unpacked directly under ``output_dir``; raw ones are
    written to ``output_dir/<header.name>``. Returns the decoded FileHeader.
    A wrong password normally surfaces as FormatError while reading the header.
    """
    config = config or EngineConfig()
    source = Path(input_path).expanduser()
    if classify(source) is not PathKind.FILE:
        raise PathError(f"Invalid path: {source} is not a container file")
    _check_password(password)
    target_dir = _output_dir(source, output_dir, config)

    written: Optional[Path] = None
    try:
        with open(source, "rb") as inf:
            salt, nonce = read_preamble(inf)
            params = EncryptionParameters.restore(password, salt, nonce)
            remaining = source.stat().st_size - inf.tell()

            reporter = ProgressReporter(progress, total=remaining)
            reader = DecryptingReader(inf, new_cipher(params.key, params.nonce), reporter)

            record = reader.read_exact(HEADER_SIZE)
            if len(record) != HEADER_SIZE:
                raise FormatError("Invalid file: truncated header")
            header = FileHeader.decode(record)
            logger.info(
                "decrypting %s -> %s (%s)", source, target_dir, "packed" if header.packed else "raw"
            )

            if header.packed:
                unpack(reader, target_dir)
            else:
                target = target_dir / safe_member_name(header.name)
                if target.resolve() == source.resolve():
                    target = disambiguate(target)
                with open(target, "wb") as out:
                    written = target
                    copy_raw(reader, out)
    except OSError as exc:
        if written is not None:
            _discard(written)
        raise ContainerIOError(f"Failed to decrypt {source}: {exc}") from exc
    except ShinCryptError:
        if written is not None:
            _discard(written)
        raise

    reporter.finish()
    logger.info("decrypted %s", source)
    return header
