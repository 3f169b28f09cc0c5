"""
Throughput benchmark: encrypt and decrypt one synthetic random file and time both.
"""

from __future__ import annotations

import logging
import os
import shutil
import tempfile
import time
from pathlib import Path
from typing import Optional, Tuple

from ..security.stream import CHUNK_SIZE
from .config import EngineConfig
from .engine import decrypt, encrypt
from .exceptions import ContainerIOError

logger = logging.getLogger(__name__)

BENCHMARK_EXT = "benchmark"
BENCHMARK_PASSWORD = "ShinCrypt"


def generate_sample(path: Path, size: int) -> Path:
    """Write ``size`` random bytes to ``path`` one chunk at a time."""
    with open(path, "wb") as f:
        remaining = size
        while remaining > 0:
            n = min(CHUNK_SIZE, remaining)
            f.write(os.urandom(n))
            remaining -= n
    return path


def benchmark(config: Optional[EngineConfig] = None) -> Tuple[float, float]:
    """
    Time a full encrypt and a full decrypt of ``config.benchmark_size`` random bytes.

    Returns ``(encrypt_seconds, decrypt_seconds)``. The scratch directory is
    removed afterwards whether or not the run succeeded.
    """
    config = config or EngineConfig()
    root = config.scratch_root
    try:
        if root is not None:
            Path(root).mkdir(parents=True, exist_ok=True)
        scratch = Path(tempfile.mkdtemp(prefix=f"shincrypt-{BENCHMARK_EXT}-", dir=root))
    except OSError as exc:
        raise ContainerIOError(f"Failed to create benchmark directory: {exc}") from exc

    try:
        try:
            sample = generate_sample(scratch / f"shincrypt.{BENCHMARK_EXT}", config.benchmark_size)
        except OSError as exc:
            raise ContainerIOError(f"Failed to write benchmark sample: {exc}") from exc
        logger.info("benchmarking with %d bytes in %s", config.benchmark_size, scratch)

        start = time.perf_counter()
        container = encrypt(sample, scratch, BENCHMARK_PASSWORD, config=config)
        encrypt_time = time.perf_counter() - start

        start = time.perf_counter()
        decrypt(container, scratch / "restored", BENCHMARK_PASSWORD, config=config)
        decrypt_time = time.perf_counter() - start
    finally:
        shutil.rmtree(scratch)

    logger.info("benchmark: encrypt %.3fs, decrypt %.3fs", encrypt_time, decrypt_time)
    return encrypt_time, decrypt_time


def format_duration(seconds: float) -> str:
    """Format seconds as HH:MM:SS.mmm."""
    millis_total = int(round(seconds * 1000))
    total_secs, millis = divmod(millis_total, 1000)
    hours, rest = divmod(total_secs, 3600)
    minutes, secs = divmod(rest, 60)
    return f"{hours:02}:{minutes:02}:{secs:02}.{millis:03}"


def calculate_speed(size_bytes: int, seconds: float) -> float:
    """Throughput in MB/s (1 MB = 1024 * 1024 bytes)."""
    if seconds <= 0:
        return float("inf")
    return size_bytes / (1024 * 1024) / seconds
