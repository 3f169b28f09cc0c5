"""Run engine operations off the caller's thread."""

from __future__ import annotations

import threading
from concurrent.futures import Future
from typing import Any, Callable, Optional


def run_in_background(fn: Callable[..., Any], *args, name: Optional[str] = None, **kwargs) -> Future:
    """
    Start ``fn(*args, **kwargs)`` in a daemon thread and return a Future for its outcome.

    The operation cannot be interrupted once started; dropping the Future only
    means nobody looks at the result.
    """
    future: Future = Future()

    def _target() -> None:
        if not future.set_running_or_notify_cancel():
            return
        try:
            result = fn(*args, **kwargs)
        except BaseException as exc:
            future.set_exception(exc)
        else:
            future.set_result(result)

    t = threading.Thread(target=_target, name=name or f"shincrypt-{fn.__name__}", daemon=True)
    t.start()
    return future
