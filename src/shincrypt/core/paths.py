""" Filesystem helpers: input classification, sizes and output naming. """

import os
from enum import Enum
from pathlib import Path

from .exceptions import FormatError, PathError


class PathKind(Enum):
    FILE = "file"
    DIRECTORY = "directory"


def classify(path: Path) -> PathKind:
    """Return whether ``path`` is a file or a directory; raises PathError otherwise."""
    if not path.exists():
        raise PathError(f"Invalid path: {path} does not exist")
    if path.is_file():
        return PathKind.FILE
    if path.is_dir():
        return PathKind.DIRECTORY
    raise PathError(f"Invalid path: {path} is neither a file nor a directory")


def total_size(path: Path) -> int:
    # Sum of file sizes below path (or the file's own size); linked files count
    # with their target size since packing follows them.
    if path.is_file():
        return path.stat().st_size
    size = 0
    for root, _dirs, files in os.walk(path):
        for name in files:
            entry = Path(root) / name
            if entry.is_file():
                size += entry.stat().st_size
    return size


def disambiguate(path: Path) -> Path:
    # report.pdf.shincrypt -> report.pdf_1.shincrypt
    stem, suffix = path.stem, path.suffix
    counter = 1
    candidate = path.with_name(f"{stem}_{counter}{suffix}")
    while candidate.exists():
        counter += 1
        candidate = path.with_name(f"{stem}_{counter}{suffix}")
    return candidate


def container_path(input_path: Path, output_dir: Path, extension: str) -> Path:
    """
    Default container location: ``output_dir/<input name>.<extension>``.
    If that is the input path itself, a numbered suffix is inserted before the extension.
    """
    name = f"{input_path.name}.{extension}" if extension else input_path.name
    candidate = output_dir / name
    if candidate.resolve() == input_path.resolve():
        candidate = disambiguate(candidate)
    return candidate


def safe_member_name(name: str) -> str:
    """Reject header names that would escape the output directory."""
    if not name or name in (".", "..") or "/" in name or "\\" in name or "\x00" in name:
        raise FormatError(f"Invalid file: unsafe file name {name!r}")
    return name
