from __future__ import annotations

import threading
from collections.abc import Callable
from functools import partial
from typing import Any

from loguru import logger

from utils.reading_constants import AUTOSAVE_DEBOUNCE_SECONDS

__all__ = ["DebouncedFlush"]

TimerFactory = Callable[[float, Callable[[], None]], Any]


class DebouncedFlush:
    """Coalesces bursts of edits into a single deferred write.

    Each ``schedule()`` marks a write as pending and restarts a cancellable timer;
    the flush callback runs once the timer expires without another edit.
    Only one flush runs at a time, whether started by the timer or by
    ``flush_now()``. Failures in the callback are logged and dropped.
    """

    def __init__(
        self,
        flush: Callable[[], None],
        delay: float = AUTOSAVE_DEBOUNCE_SECONDS,
        timer_factory: TimerFactory | None = None,
    ) -> None:
        self._flush = flush
        self._delay = delay
        self._timer_factory = timer_factory or self._default_timer
        self._timer: Any = None
        self._generation = 0
        self._pending = False
        self._lock = threading.Lock()
        self._write_lock = threading.Lock()

    @staticmethod
    def _default_timer(delay: float, callback: Callable[[], None]) -> threading.Timer:
        timer = threading.Timer(delay, callback)
        timer.daemon = True
        return timer

    @property
    def pending(self) -> bool:
        """Whether an edit is waiting to be written."""
        return self._pending

    def schedule(self) -> None:
        """Mark a write pending and restart the debounce timer."""
        with self._lock:
            self._pending = True
            if self._timer is not None:
                self._timer.cancel()
            self._generation += 1
            self._timer = self._timer_factory(self._delay, partial(self._on_timer, self._generation))
            self._timer.start()

    def _on_timer(self, generation: int) -> None:
        with self._lock:
            # A timer replaced by a later schedule() leaves the write to its successor.
            if generation != self._generation:
                return
            self._timer = None
            if not self._pending:
                return
            self._pending = False
        self._run()

    def flush_now(self) -> bool:
        """Cancel the timer and write immediately if anything is pending."""
        with self._lock:
            if self._timer is not None:
                self._timer.cancel()
                self._timer = None
            if not self._pending:
                return False
            self._pending = False
        self._run()
        return True

    def cancel(self) -> None:
        """Drop the pending write without running it."""
        with self._lock:
            if self._timer is not None:
                self._timer.cancel()
                self._timer = None
            self._pending = False

    def _run(self) -> None:
        with self._write_lock:
            try:
                self._flush()
            except Exception as exc:
                logger.exception(f"Scheduled flush failed: {exc}")
