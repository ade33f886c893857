"""A small cache whose entries expire after a time-to-live."""

from __future__ import annotations

import logging
import threading
import time

from intentplanner.config import MAX_PLAN_CACHE_TIMEOUT, MAX_PLAN_CACHE_TTL

log = logging.getLogger(__name__)


def _now_ms() -> float:
    return time.monotonic() * 1000.0


class TTLCache:
    """Set of keys that a background thread evicts once they are older than ``ttl`` ms.

    The eviction runs every ``tick`` ms. With invalid timing values the cache
    still works but never evicts anything.
    """

    def __init__(self, ttl: int, tick: int) -> None:
        self._ttl = ttl
        self._tick = tick
        self._entries: dict[str, float] = {}
        self._lock = threading.Lock()
        self._done = threading.Event()
        self._thread: threading.Thread | None = None
        if tick <= 0 or ttl <= 0 or tick > MAX_PLAN_CACHE_TIMEOUT or ttl > MAX_PLAN_CACHE_TTL:
            log.error("invalid timing values.")
            return
        self._thread = threading.Thread(
            target=self._evict_loop, name="ttl-cache-evictor", daemon=True
        )
        self._thread.start()

    def _evict_loop(self) -> None:
        while not self._done.wait(self._tick / 1000.0):
            now = _now_ms()
            with self._lock:
                expired = [key for key, stamp in self._entries.items() if now - stamp > self._ttl]
                for key in expired:
                    del self._entries[key]

    @property
    def evicting(self) -> bool:
        """True while the eviction thread is running."""
        return self._thread is not None and self._thread.is_alive()

    def put(self, key: str) -> None:
        """Add or refresh an entry."""
        with self._lock:
            self._entries[key] = _now_ms()

    def is_in(self, key: str) -> bool:
        """Tell whether an entry still exists."""
        with self._lock:
            return key in self._entries

    def __contains__(self, key: str) -> bool:
        return self.is_in(key)

    def close(self) -> None:
        """Stop the eviction thread."""
        self._done.set()
        if self._thread is not None and self._thread is not threading.current_thread():
            self._thread.join()

    def __enter__(self) -> "TTLCache":
        return self

    def __exit__(self, *args) -> None:
        self.close()