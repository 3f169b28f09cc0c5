"""Operations in background workers: independent runs and live progress polling."""

import os
import time

from shincrypt.core.engine import decrypt, encrypt
from shincrypt.core.progress import ProgressChannel
from shincrypt.core.worker import run_in_background
from shincrypt.security.stream import CHUNK_SIZE


def test_parallel_operations_are_independent(tmp_path):
    sources = []
    for i in range(4):
        src = tmp_path / f"file{i}.bin"
        src.write_bytes(os.urandom(CHUNK_SIZE + i * 1000))
        sources.append(src)

    futures = [run_in_background(encrypt, src, tmp_path / "enc", f"pw{i}") for i, src in enumerate(sources)]
    containers = [f.result(timeout=120) for f in futures]

    futures = [
        run_in_background(decrypt, c, tmp_path / "dec", f"pw{i}") for i, c in enumerate(containers)
    ]
    for f in futures:
        f.result(timeout=120)

    for src in sources:
        assert (tmp_path / "dec" / src.name).read_bytes() == src.read_bytes()


def test_consumer_polls_latest_progress(tmp_path):
    src = tmp_path / "big.bin"
    src.write_bytes(os.urandom(CHUNK_SIZE * 4))
    channel = ProgressChannel()

    future = run_in_background(encrypt, src, tmp_path / "enc", "pw", channel)
    seen = []
    while not future.done():
        value = channel.poll()
        if value is not None:
            seen.append(value)
        time.sleep(0.01)
    future.result()

    last = channel.poll()
    if last is not None:
        seen.append(last)
    assert seen == sorted(seen)
    assert seen[-1] == 1.0
