"""
Progress reporting for long-running operations.

Workers push samples through a ProgressListener; sends never block and a
detached listener never fails the operation. A sample is a fraction in [0, 1]
when the total size is known, otherwise a raw cumulative byte count.
"""

from __future__ import annotations

import logging
import queue
from typing import Callable, Optional, Union

logger = logging.getLogger(__name__)


class ChannelClosed(Exception):
    # raised by a channel whose consumer went away
    pass


class ProgressListener:
    """Observer for progress samples. The default implementation ignores them."""

    def notify(self, value: float) -> None:
        pass


NullProgress = ProgressListener


class CallbackProgress(ProgressListener):
    """Adapts a plain callable to the listener interface."""

    def __init__(self, callback: Callable[[float], None]):
        self._callback = callback

    def notify(self, value: float) -> None:
        self._callback(value)


class ProgressChannel(ProgressListener):
    """
    Many-producer/one-consumer channel of progress samples.

    Producers call :meth:`notify`, which never blocks. The consumer calls
    :meth:`poll` whenever convenient and only sees the latest sample;
    intermediate ones are dropped.
    """

    def __init__(self):
        self._queue: "queue.SimpleQueue[float]" = queue.SimpleQueue()
        self._closed = False

    def notify(self, value: float) -> None:
        """
        Queue a sample without blocking.

        Raises ChannelClosed once :meth:`close` has been called. Workers send
        through ProgressReporter, which drops samples for a closed channel
        instead of failing the operation.
        """
        if self._closed:
            raise ChannelClosed("progress receiver is gone")
        self._queue.put_nowait(value)

    def poll(self) -> Optional[float]:
        """Return the most recent sample, or None if nothing arrived since the last poll."""
        latest = None
        while True:
            try:
                latest = self._queue.get_nowait()
            except queue.Empty:
                return latest

    def close(self) -> None:
        self._closed = True

    @property
    def closed(self) -> bool:
        return self._closed


ProgressLike = Union[ProgressListener, Callable[[float], None], None]


def as_listener(progress: ProgressLike) -> ProgressListener:
    """Accept anything with a notify(value) method, or a plain callable."""
    if progress is None:
        return NullProgress()
    if isinstance(progress, ProgressListener) or callable(getattr(progress, "notify", None)):
        return progress
    return CallbackProgress(progress)


class ProgressReporter:
    """Turns cumulative byte counts into monotonic samples for one operation."""

    def __init__(self, listener: ProgressLike = None, total: Optional[int] = None):
        self.listener = as_listener(listener)
        self.total = total
        self.processed = 0
        self._last: Optional[float] = None

    def advance(self, nbytes: int) -> None:
        self.processed += nbytes
        self._emit(self._sample())

    def finish(self) -> None:
        """Emit the terminal sample for a successful operation."""
        if self.total is None:
            self._emit(float(self.processed))
        else:
            self._emit(1.0)

    def _sample(self) -> float:
        if self.total is None:
            return float(self.processed)
        if self.total <= 0:
            return 1.0
        return min(self.processed / self.total, 1.0)

    def _emit(self, value: float) -> None:
        if self._last is not None and value <= self._last:
            return
        self._last = value
        try:
            self.listener.notify(value)
        except ChannelClosed:
            logger.debug("progress listener detached, dropping sample %.3f", value)
