"""
Progress events and the sinks that receive them.

The orchestrator reports progress through any object with an ``emit``
method, see :py:class:`ProgressSink`. Sinks are called from the thread that
drives the batch and must return promptly; a consumer on another thread
should read from a :py:class:`QueueSink`.
"""

import logging
import queue
import threading
from typing import Any, Callable, Optional, Protocol

from attrs import define, field

from psd2png.validators import range_

logger = logging.getLogger(__name__)


@define(frozen=True)
class ProgressEvent:
    """
    A progress notification.

    .. py:attribute:: fraction

        Completed share of the batch in ``[0.0, 1.0]``.

    .. py:attribute:: message

        Human readable status.

    .. py:attribute:: terminal

        True for the single event that ends a run.
    """

    fraction: float = field(converter=float, validator=range_(0.0, 1.0))
    message: str = field(converter=str)
    terminal: bool = False


class ProgressSink(Protocol):
    def emit(self, event: ProgressEvent) -> None: ...


class NullSink:
    """Discard every event."""

    def emit(self, event: ProgressEvent) -> None:
        pass


class CallbackSink:
    """
    Forward events to ``callback(fraction, message)``.

    Exceptions raised by the callback are logged and do not reach the batch.
    """

    def __init__(self, callback: Callable[[float, str], Any]) -> None:
        self.callback = callback

    def emit(self, event: ProgressEvent) -> None:
        try:
            self.callback(event.fraction, event.message)
        except Exception:
            logger.exception("Progress callback failed")


class LoggingSink:
    """Log every event."""

    def __init__(
        self, logger: Optional[logging.Logger] = None, level: int = logging.INFO
    ) -> None:
        self.logger = logger or logging.getLogger("psd2png")
        self.level = level

    def emit(self, event: ProgressEvent) -> None:
        self.logger.log(self.level, "[%3d%%] %s", int(event.fraction * 100), event.message)


class QueueSink:
    """
    Bounded, non-blocking event channel for a consumer on another thread.

    When the queue is full the oldest pending non-terminal event is dropped
    to make room. The terminal event is never dropped.

    :param maxsize: capacity of the channel, at least 1.
    """

    def __init__(self, maxsize: int = 64) -> None:
        if maxsize < 1:
            raise ValueError("maxsize must be at least 1: %r" % maxsize)
        self.queue: "queue.Queue[ProgressEvent]" = queue.Queue(maxsize)
        self.dropped = 0
        self._lock = threading.Lock()

    def emit(self, event: ProgressEvent) -> None:
        with self._lock:
            while True:
                try:
                    self.queue.put_nowait(event)
                    return
                except queue.Full:
                    pass
                if not self._drop_oldest():
                    if not event.terminal:
                        self.dropped += 1
                        return
                    # Only terminal events are pending; the newest one wins.
                    self._discard_one()

    def _drop_oldest(self) -> bool:
        """Drop the oldest non-terminal event, keeping the others in order."""
        pending = self._take_all()
        for i, item in enumerate(pending):
            if not item.terminal:
                del pending[i]
                self.dropped += 1
                self._put_all(pending)
                return True
        self._put_all(pending)
        return False

    def _discard_one(self) -> None:
        try:
            self.queue.get_nowait()
        except queue.Empty:
            pass

    def _take_all(self) -> list[ProgressEvent]:
        items = []
        while True:
            try:
                items.append(self.queue.get_nowait())
            except queue.Empty:
                return items

    def _put_all(self, items: list[ProgressEvent]) -> None:
        for item in items:
            self.queue.put_nowait(item)

    def get(self, timeout: Optional[float] = None) -> ProgressEvent:
        """Block until an event is available. Raises :exc:`queue.Empty` on timeout."""
        return self.queue.get(timeout=timeout)

    def drain(self) -> list[ProgressEvent]:
        """Return and remove every pending event."""
        with self._lock:
            return self._take_all()
