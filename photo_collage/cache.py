"""Thread-safe thumbnail cache keyed by asset identifier.

Thumbnails are requested from pool threads and read from the consumer thread,
so the cache guards its dictionaries with a lock that is only ever held for a
single lookup or update, never across a fetch.  A fetch for a missing key is
started only after :meth:`ThumbnailCache.claim` succeeds, which turns
concurrent requests for the same key into a single underlying fetch.

Entries are never evicted during a picker session; the session owner calls
:meth:`ThumbnailCache.clear` when the session ends.
"""

from __future__ import annotations

from threading import RLock
from typing import Any, Dict, Iterator, Optional, Set


class ThumbnailCache:
    """Write-once-per-key thumbnail store with claim-on-miss semantics."""

    def __init__(self) -> None:
        self._entries: Dict[str, Any] = {}
        self._in_flight: Set[str] = set()
        self._lock = RLock()

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def __contains__(self, key: object) -> bool:
        with self._lock:
            return key in self._entries

    def __iter__(self) -> Iterator[str]:
        with self._lock:
            return iter(list(self._entries))

    def get(self, key: str) -> Optional[Any]:
        """Return the cached thumbnail for *key* or ``None``."""
        with self._lock:
            return self._entries.get(key)

    def claim(self, key: str) -> bool:
        """Reserve *key* for fetching.

        Returns ``True`` only for the first caller while the key is neither
        cached nor already being fetched.  The caller that wins the claim must
        eventually call :meth:`put` or :meth:`release`.
        """
        with self._lock:
            if key in self._entries or key in self._in_flight:
                return False
            self._in_flight.add(key)
            return True

    def put(self, key: str, thumbnail: Any) -> None:
        """Store *thumbnail* for *key*, replacing any earlier value."""
        with self._lock:
            self._entries[key] = thumbnail
            self._in_flight.discard(key)

    def release(self, key: str) -> None:
        """Drop a claim without storing a value (e.g. after a failed fetch)."""
        with self._lock:
            self._in_flight.discard(key)

    def is_pending(self, key: str) -> bool:
        with self._lock:
            return key in self._in_flight

    def snapshot(self) -> Dict[str, Any]:
        """Return a shallow copy of the cached entries."""
        with self._lock:
            return dict(self._entries)

    def clear(self) -> None:
        """Remove all cached entries and outstanding claims."""
        with self._lock:
            self._entries.clear()
            self._in_flight.clear()


__all__ = ["ThumbnailCache"]
