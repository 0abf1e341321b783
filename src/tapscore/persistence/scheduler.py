from __future__ import annotations

import logging
import threading
from typing import Optional

from .models import ApplicationState
from .store import DurableStore

logger = logging.getLogger(__name__)

DEFAULT_DEBOUNCE_SECONDS = 0.4


class DebouncedSaveScheduler:
    """Coalesce bursts of mutations into one deferred write.

    Every ``schedule`` call replaces the pending snapshot and restarts the
    quiet interval. When the interval elapses without another call, the
    latest snapshot is written on the timer thread. A generation counter is
    checked at fire time, so a timer that was superseded after it woke up
    still does nothing. Writes already in progress are never interrupted.
    """

    def __init__(self, store: DurableStore, interval: float = DEFAULT_DEBOUNCE_SECONDS) -> None:
        if interval <= 0:
            raise ValueError("interval must be positive")
        self.store = store
        self.interval = interval
        self._lock = threading.Lock()
        self._write_lock = threading.Lock()
        self._timer: Optional[threading.Timer] = None
        self._snapshot: Optional[ApplicationState] = None
        self._generation = 0
        self._writes = 0

    @property
    def pending(self) -> bool:
        with self._lock:
            return self._snapshot is not None

    @property
    def writes(self) -> int:
        """Number of write attempts handed to the store so far."""
        return self._writes

    def schedule(self, snapshot: ApplicationState) -> None:
        """Arm a deferred write of ``snapshot``, cancelling any unfired one."""
        with self._lock:
            if self._timer is not None:
                self._timer.cancel()
            self._generation += 1
            self._snapshot = snapshot
            timer = threading.Timer(self.interval, self._fire, args=(self._generation,))
            timer.daemon = True
            timer.name = f"tapscore-save-{self._generation}"
            self._timer = timer
            timer.start()

    def cancel(self) -> None:
        """Drop the pending write, if any."""
        with self._lock:
            self._drop_pending()

    def flush(self) -> bool:
        """Write the pending snapshot now on the calling thread. Returns False if nothing was pending."""
        with self._write_lock:
            with self._lock:
                snapshot = self._snapshot
                self._drop_pending()
            if snapshot is None:
                return False
            self._write(snapshot)
            return True

    def _fire(self, generation: int) -> None:
        with self._write_lock:
            with self._lock:
                if generation != self._generation or self._snapshot is None:
                    return
                snapshot = self._snapshot
                self._snapshot = None
                self._timer = None
            self._write(snapshot)

    def _write(self, snapshot: ApplicationState) -> None:
        self._writes += 1
        if not self.store.save(snapshot):
            logger.debug("Debounced save #%d did not land", self._writes)

    def _drop_pending(self) -> None:
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None
        self._snapshot = None
        self._generation += 1
