"""CleanupScheduler — periodic expired-session cleanup using threading.Timer."""

from __future__ import annotations

import logging
import threading

from pinwise.config import SESSION_MAX_AGE
from pinwise.storage.sessions import SessionStore, SessionStoreError

logger = logging.getLogger(__name__)


class CleanupScheduler:
    """Run :meth:`SessionStore.cleanup_expired` on a fixed interval.

    Uses a daemon threading.Timer, so no external scheduler is required
    and a running schedule never keeps the process alive.
    """

    def __init__(
        self,
        store: SessionStore,
        *,
        max_age: float = SESSION_MAX_AGE,
    ) -> None:
        self._store = store
        self._max_age = max_age
        self._timer: threading.Timer | None = None
        self._running = False
        self._interval_hours: float = 1.0
        self._lock = threading.Lock()

    @property
    def is_running(self) -> bool:
        return self._running

    def start(self, interval_hours: float = 1.0) -> None:
        """Start the periodic cleanup.

        Parameters
        ----------
        interval_hours:
            Hours between cleanup runs (default hourly).
        """
        with self._lock:
            self._interval_hours = interval_hours
            self._running = True
            self._schedule_next()
        logger.info("Scheduled session cleanup every %.1f hours", interval_hours)

    def stop(self) -> None:
        """Stop the periodic cleanup."""
        with self._lock:
            self._running = False
            if self._timer is not None:
                self._timer.cancel()
                self._timer = None
        logger.info("Stopped session cleanup schedule")

    def run_now(self) -> int:
        """Run one cleanup immediately and return the number of sessions removed."""
        return self._store.cleanup_expired(self._max_age)

    def _schedule_next(self) -> None:
        if not self._running:
            return
        self._timer = threading.Timer(self._interval_hours * 3600, self._run)
        self._timer.daemon = True
        self._timer.start()

    def _run(self) -> None:
        if not self._running:
            return
        try:
            self.run_now()
        except SessionStoreError as exc:
            logger.error("Scheduled session cleanup failed: %s", exc)
        except Exception:
            logger.exception("Unexpected error in scheduled session cleanup")
        finally:
            with self._lock:
                self._schedule_next()
