"""Per-call engine configuration.

The engine holds no global state; whatever the caller's preferences are, they
arrive here and are passed into every operation.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Mapping, Optional

FILE_1GB = 1024 * 1024 * 1024
DEFAULT_EXTENSION = "shincrypt"

_TRUE = {"1", "true", "yes", "on"}


@dataclass(frozen=True)
class EngineConfig:
    """Options for encrypt, decrypt and benchmark."""

    extension: str = DEFAULT_EXTENSION
    pack_files: bool = False  # archive single files as well as directories
    same_dir: bool = False  # write output next to the input path
    benchmark_size: int = FILE_1GB
    scratch_root: Optional[Path] = None

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "EngineConfig":
        """
        Build a config from ``SHINCRYPT_*`` environment variables.

        - ``SHINCRYPT_EXTENSION``: container extension (without the dot)
        - ``SHINCRYPT_PACK_FILES``: archive single files too
        - ``SHINCRYPT_SAME_DIR``: write output next to the input
        - ``SHINCRYPT_SCRATCH_DIR``: where the benchmark puts its scratch files

        Unset variables fall back to the dataclass defaults.
        """
        env = os.environ if environ is None else environ
        scratch = env.get("SHINCRYPT_SCRATCH_DIR")
        return cls(
            extension=env.get("SHINCRYPT_EXTENSION", DEFAULT_EXTENSION),
            pack_files=env.get("SHINCRYPT_PACK_FILES", "").strip().lower() in _TRUE,
            same_dir=env.get("SHINCRYPT_SAME_DIR", "").strip().lower() in _TRUE,
            scratch_root=Path(scratch).expanduser() if scratch else None,
        )
