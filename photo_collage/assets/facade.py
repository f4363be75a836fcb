"""AssetRetrievalFacade: fetches full images and cached thumbnails off-thread.

Library requests run on pool threads.  Their outcomes come back to the
consumer thread as signals; degraded placeholders never leave this module and
failures are logged and reported on ``fetch_failed`` only.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Tuple

from PySide6.QtCore import QObject, QThreadPool, Signal, Slot

from .. import config
from ..cache import ThumbnailCache
from ..workers import Worker, WorkerSet
from .library import AssetLibrary, AssetRecord, AssetRetrievalError

logger = logging.getLogger("photo_collage.assets")


@dataclass(frozen=True, slots=True)
class _FetchOutcome:
    asset_id: str
    token: int = 0
    image: Optional[Any] = None
    error: Optional[str] = None
    cache: Optional[ThumbnailCache] = None


def _final_image(library: AssetLibrary, asset_id: str, size: Tuple[int, int]) -> Any:
    for result in library.request_image(asset_id, size):
        if result.degraded:
            continue
        return result.image
    raise AssetRetrievalError(f"No final image delivered for {asset_id}")


def _fetch_full(library: AssetLibrary, asset_id: str, token: int, size: Tuple[int, int]) -> _FetchOutcome:
    try:
        image = _final_image(library, asset_id, size)
    except Exception as exc:  # noqa: BLE001 - reported through fetch_failed
        return _FetchOutcome(asset_id, token, error=str(exc))
    return _FetchOutcome(asset_id, token, image=image)


def _fetch_thumbnail(
    library: AssetLibrary,
    cache: ThumbnailCache,
    asset_id: str,
    size: Tuple[int, int],
) -> _FetchOutcome:
    try:
        image = _final_image(library, asset_id, size)
    except Exception as exc:  # noqa: BLE001 - reported through fetch_failed
        cache.release(asset_id)
        return _FetchOutcome(asset_id, error=str(exc), cache=cache)
    cache.put(asset_id, image)
    return _FetchOutcome(asset_id, image=image, cache=cache)


class AssetRetrievalFacade(QObject):
    full_image_ready = Signal(str, int, object)  # asset id, session token, image
    thumbnail_ready = Signal(str, object)
    fetch_failed = Signal(str, str)

    def __init__(
        self,
        library: AssetLibrary,
        thread_pool: Optional[QThreadPool] = None,
        *,
        full_size: Tuple[int, int] = config.FULL_IMAGE_SIZE,
        thumbnail_size: Tuple[int, int] = config.THUMBNAIL_SIZE,
        parent=None,
    ) -> None:
        super().__init__(parent)
        self._library = library
        self._workers = WorkerSet(thread_pool, parent=self)
        self._full_size = full_size
        self._thumbnail_size = thumbnail_size
        self._cache = ThumbnailCache()

    @property
    def thumbnails(self) -> Dict[str, Any]:
        """Copy of the thumbnails fetched during this picker session."""
        return self._cache.snapshot()

    @property
    def pending(self) -> int:
        return len(self._workers)

    def list_assets(self) -> List[AssetRecord]:
        return self._library.list_assets()

    def fetch_full(self, asset_id: str, token: int = 0) -> None:
        """Fetch the full-resolution image for *asset_id*.

        The result arrives on ``full_image_ready`` tagged with *token*.
        """
        worker = Worker(_fetch_full, self._library, asset_id, token, self._full_size)
        self._workers.start(worker, on_result=self._on_full_fetched)

    def fetch_thumbnail(self, asset_id: str) -> Optional[Any]:
        """Return the cached thumbnail, or start fetching it and return ``None``.

        Only the first request for an uncached id starts a fetch; requests
        arriving while it is in flight wait for the same ``thumbnail_ready``.
        """
        cached = self._cache.get(asset_id)
        if cached is not None:
            return cached
        if not self._cache.claim(asset_id):
            logger.debug("Thumbnail for %s already in flight", asset_id)
            return None
        worker = Worker(_fetch_thumbnail, self._library, self._cache, asset_id, self._thumbnail_size)
        self._workers.start(worker, on_result=self._on_thumbnail_fetched)
        return None

    def end_session(self) -> None:
        """Drop every cached thumbnail.

        Fetches still in flight write into the retired cache and are ignored.
        """
        retired = self._cache
        self._cache = ThumbnailCache()
        retired.clear()
        logger.info("Picker session ended; thumbnail cache cleared")

    def wait_for_idle(self, timeout: Optional[float] = None) -> None:
        self._workers.wait_for_idle(timeout)

    @Slot(object)
    def _on_full_fetched(self, outcome: _FetchOutcome) -> None:
        if outcome.error is not None:
            self._report_failure(outcome)
            return
        self.full_image_ready.emit(outcome.asset_id, outcome.token, outcome.image)

    @Slot(object)
    def _on_thumbnail_fetched(self, outcome: _FetchOutcome) -> None:
        if outcome.error is not None:
            self._report_failure(outcome)
            return
        if outcome.cache is not self._cache:
            logger.debug("Discarding thumbnail for %s from an ended session", outcome.asset_id)
            return
        self.thumbnail_ready.emit(outcome.asset_id, outcome.image)

    def _report_failure(self, outcome: _FetchOutcome) -> None:
        logger.warning("Asset fetch failed for %s: %s", outcome.asset_id, outcome.error)
        self.fetch_failed.emit(outcome.asset_id, outcome.error)
