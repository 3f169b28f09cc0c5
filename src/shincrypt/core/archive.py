"""
Payload framing: a tar stream for packed containers, raw bytes otherwise.

Both directions work on file-like objects so they can sit directly on top of
the cipher adapters in shincrypt.security.stream without temporary files.
"""

from __future__ import annotations

import logging
import shutil
import tarfile
from pathlib import Path
from typing import BinaryIO, Optional

from .exceptions import FormatError

logger = logging.getLogger(__name__)

COPY_BUFSIZE = 64 * 1024


def pack(sink: BinaryIO, source: Path, arcname: str, exclude: Optional[Path] = None) -> None:
    """
    Write ``source`` (file or directory tree) as an uncompressed tar stream into ``sink``.

    Entry names start at ``arcname`` so unpacking recreates the top-level name.
    Symbolic links are followed, so the archive carries their contents.
    ``exclude`` keeps the container itself out of the archive when it is being
    written inside the directory that is packed.
    """
    skip = exclude.resolve() if exclude is not None else None

    def _filter(info: tarfile.TarInfo) -> Optional[tarfile.TarInfo]:
        if skip is not None and source.joinpath(*Path(info.name).parts[1:]).resolve() == skip:
            return None
        return info

    # "w|" never seeks and leaves sink open when the archive is closed;
    # symlinks are stored as the files and directories they point to
    with tarfile.open(fileobj=sink, mode="w|", dereference=True) as tar:
        tar.add(str(source), arcname=arcname, recursive=True, filter=_filter)
    logger.debug("packed %s as %s", source, arcname)


def unpack(source: BinaryIO, output_dir: Path) -> None:
    """Extract a tar stream from ``source`` into ``output_dir``."""
    try:
        with tarfile.open(fileobj=source, mode="r|") as tar:
            tar.extractall(path=str(output_dir), filter="data")
    except tarfile.TarError as exc:
        raise FormatError(f"Invalid file: archive is corrupt ({exc})") from exc


def copy_raw(source: BinaryIO, sink: BinaryIO) -> None:
    shutil.copyfileobj(source, sink, COPY_BUFSIZE)
