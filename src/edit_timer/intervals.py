"""Cancellable repeating intervals run on background threads."""

from __future__ import annotations

import logging
import threading
from datetime import timedelta
from typing import Callable, Optional

logger = logging.getLogger(__name__)


class IntervalTimer:
    """Call ``callback`` every ``interval`` until stopped.

    ``start`` and ``stop`` may be called any number of times; at most one
    worker thread exists per instance.
    """

    def __init__(self, name: str, interval: timedelta, callback: Callable[[], None]) -> None:
        self.name = name
        self._interval = interval.total_seconds()
        self._callback = callback
        self._lock = threading.Lock()
        self._thread: Optional[threading.Thread] = None
        self._stop_event: Optional[threading.Event] = None

    def start(self) -> None:
        with self._lock:
            if self._thread and self._thread.is_alive():
                return
            stop_event = threading.Event()
            thread = threading.Thread(
                target=self._run,
                args=(stop_event,),
                name=f"edit-timer-{self.name}",
                daemon=True,
            )
            self._thread = thread
            self._stop_event = stop_event
            thread.start()
            logger.debug("Interval %s started (every %.1fs).", self.name, self._interval)

    def stop(self) -> None:
        thread: Optional[threading.Thread] = None
        with self._lock:
            if not self._thread or not self._stop_event:
                return
            self._stop_event.set()
            thread = self._thread
            self._thread = None
            self._stop_event = None
        if thread is not threading.current_thread():
            thread.join(timeout=10)
        logger.debug("Interval %s stopped.", self.name)

    def is_running(self) -> bool:
        with self._lock:
            return bool(self._thread and self._thread.is_alive())

    def _run(self, stop_event: threading.Event) -> None:
        # Sleep in an interruptible manner.
        while not stop_event.wait(self._interval):
            try:
                self._callback()
            except Exception:
                logger.exception("Interval %s callback failed.", self.name)
