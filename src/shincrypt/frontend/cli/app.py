"""
Command line front end for the ShinCrypt engine.

Usage:
    shincrypt encrypt <path> [-o DIR] [--pack] [--same-dir]
    shincrypt decrypt <container> [-o DIR] [--same-dir]
    shincrypt benchmark [--size BYTES]

The operation runs in a background worker while this thread polls a
ProgressChannel and redraws a percentage line.
"""

from __future__ import annotations

import argparse
import dataclasses
import getpass
import logging
import sys
import time
from concurrent.futures import Future
from typing import List, Optional

from shincrypt.core.benchmark import benchmark, calculate_speed, format_duration
from shincrypt.core.config import EngineConfig
from shincrypt.core.engine import decrypt, encrypt
from shincrypt.core.exceptions import ShinCryptError
from shincrypt.core.progress import ProgressChannel
from shincrypt.core.worker import run_in_background
from .logging_config import configure_logging

POLL_INTERVAL = 0.1


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="shincrypt", description="Password-based file and folder encryption")
    parser.add_argument("-v", "--verbose", action="count", default=0, help="-v for info, -vv for debug logs")
    sub = parser.add_subparsers(dest="command", required=True)

    enc = sub.add_parser("encrypt", help="encrypt a file or directory")
    enc.add_argument("path")
    enc.add_argument("-o", "--output-dir", default=None)
    enc.add_argument("--pack", action="store_true", help="archive single files as well")
    enc.add_argument("--same-dir", action="store_true", help="write next to the input")
    enc.add_argument("--password", default=None)

    dec = sub.add_parser("decrypt", help="decrypt a container")
    dec.add_argument("path")
    dec.add_argument("-o", "--output-dir", default=None)
    dec.add_argument("--same-dir", action="store_true", help="write next to the input")
    dec.add_argument("--password", default=None)

    bench = sub.add_parser("benchmark", help="time encrypt/decrypt of a random file")
    bench.add_argument("--size", type=int, default=None, help="sample size in bytes (default 1 GiB)")
    return parser


def _ask_password(confirm: bool) -> str:
    password = getpass.getpass("Password: ")
    if confirm and getpass.getpass("Repeat password: ") != password:
        raise ShinCryptError("Passwords do not match")
    return password


def _wait(future: Future, channel: Optional[ProgressChannel]):
    # Poll until the worker is done; only the newest progress sample is drawn.
    try:
        while not future.done():
            time.sleep(POLL_INTERVAL)
            if channel is not None:
                value = channel.poll()
                if value is not None:
                    print(f"\r{value * 100:5.1f}%", end="", flush=True)
    finally:
        if channel is not None:
            channel.close()
            print("\r", end="", flush=True)
    return future.result()


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    configure_logging(logging.DEBUG if args.verbose > 1 else logging.INFO if args.verbose else logging.WARNING)

    config = EngineConfig.from_env()
    if getattr(args, "same_dir", False):
        config = dataclasses.replace(config, same_dir=True)
    if getattr(args, "pack", False):
        config = dataclasses.replace(config, pack_files=True)

    try:
        if args.command == "benchmark":
            if args.size is not None:
                config = dataclasses.replace(config, benchmark_size=args.size)
            enc_time, dec_time = _wait(run_in_background(benchmark, config), None)
            print(
                f"Encrypt: {format_duration(enc_time)} "
                f"({calculate_speed(config.benchmark_size, enc_time):.1f} MB/s)"
            )
            print(
                f"Decrypt: {format_duration(dec_time)} "
                f"({calculate_speed(config.benchmark_size, dec_time):.1f} MB/s)"
            )
            return 0

        password = args.password if args.password is not None else _ask_password(args.command == "encrypt")
        channel = ProgressChannel()
        op = encrypt if args.command == "encrypt" else decrypt
        result = _wait(run_in_background(op, args.path, args.output_dir, password, channel, config), channel)
    except ShinCryptError as exc:
        print(f"Failed: {exc}", file=sys.stderr)
        return 1
    except KeyboardInterrupt:
        print("\nInterrupted", file=sys.stderr)
        return 1

    if args.command == "encrypt":
        print(f"Success: file encrypted to {result}")
    else:
        print(f"Success: file decrypted ({result.name})")
    return 0


if __name__ == "__main__":
    sys.exit(main())
