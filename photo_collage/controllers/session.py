"""Session controller for the collage selection and save workflow.

:class:`CollageSessionController` owns every collaborator of one collage
workflow outright: the working set store, the composer deriving the preview,
the save orchestrator, the asset facade and the gate of the current selection
session.  Nothing it wires up keeps a reference back to the controller; the
state each callback needs is passed to it explicitly.

A selection session is armed with :meth:`add`.  Each arming creates a fresh
source and gate and retires the previous ones, and full-size images fetched
for an older session are dropped when they arrive.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional, Sequence, Tuple

from PySide6.QtCore import QObject, QThreadPool, Signal, Slot

from .. import config
from ..assets import AssetLibrary, AssetRecord, AssetRetrievalFacade
from ..composer import CollageComposer, Compositor
from ..managers.photo_writer import PhotoWriter
from ..managers.save import SaveOrchestrator, SaveResult
from ..state import BoundedSelectionGate, SelectionSource, WorkingSet, WorkingSetStore
from ..utils.collage_layouts import compose_collage

logger = logging.getLogger("photo_collage.session")


class CollageSessionController(QObject):
    """Coordinate selection, preview and save for one collage workflow."""

    session_armed = Signal(int)

    def __init__(
        self,
        library: AssetLibrary,
        writer: PhotoWriter,
        *,
        compositor: Compositor = compose_collage,
        collage_size: Tuple[int, int] = config.COLLAGE_SIZE,
        max_items: int = config.MAX_ITEMS,
        thread_pool: Optional[QThreadPool] = None,
        parent=None,
    ) -> None:
        super().__init__(parent)
        if max_items <= 0:
            raise ValueError("max_items must be greater than zero")
        self._max_items = max_items
        self.store = WorkingSetStore(parent=self)
        self.composer = CollageComposer(self.store, compositor, collage_size, parent=self)
        self.orchestrator = SaveOrchestrator(
            self.store, self.composer, writer, thread_pool, parent=self
        )
        self.assets = AssetRetrievalFacade(library, thread_pool, parent=self)
        self.assets.full_image_ready.connect(self._on_full_image)

        self._source: Optional[SelectionSource] = None
        self._gate: Optional[BoundedSelectionGate] = None
        self._session_token = 0

        self.composer.bind()

    # Observable state

    @property
    def count_changed(self):
        return self.composer.count_changed

    @property
    def preview_changed(self):
        return self.composer.preview_changed

    @property
    def save_finished(self):
        return self.orchestrator.save_finished

    @property
    def images(self) -> WorkingSet:
        return self.store.images

    @property
    def current_preview(self) -> Optional[Any]:
        return self.composer.preview

    @property
    def current_count(self) -> int:
        return self.composer.count

    @property
    def last_save_result(self) -> Optional[SaveResult]:
        return self.orchestrator.last_result

    @property
    def last_saved_photo_id(self) -> str:
        return self.orchestrator.last_saved_id

    @property
    def last_error_message(self) -> str:
        return self.orchestrator.last_error_message

    @property
    def thumbnails(self) -> Dict[str, Any]:
        return self.assets.thumbnails

    @property
    def session_token(self) -> int:
        return self._session_token

    @property
    def gate(self) -> Optional[BoundedSelectionGate]:
        return self._gate

    # Commands

    def add(self) -> None:
        """Arm a new bounded selection session, retiring the previous one."""
        if self._gate is not None:
            self._gate.detach()
            self._gate.deleteLater()
        if self._source is not None:
            self._source.complete()
            self._source.deleteLater()

        self._session_token += 1
        store = self.store
        limit = self._max_items
        self._source = SelectionSource(parent=self)
        self._gate = BoundedSelectionGate(
            self._source, lambda: len(store) < limit, parent=self
        )
        self._gate.subscribe(store.append)
        logger.info("Selection session %d armed", self._session_token)
        self.session_armed.emit(self._session_token)

    def select_image(self, asset_id: str) -> None:
        """Fetch *asset_id* at full size for the current session."""
        if self._source is None:
            logger.warning("select_image(%s) called without an armed session; ignored", asset_id)
            return
        self.assets.fetch_full(asset_id, self._session_token)

    def select_images(self, asset_ids: Sequence[str]) -> None:
        for asset_id in asset_ids:
            self.select_image(asset_id)

    def clear(self) -> None:
        self.store.clear()

    def save(self) -> bool:
        return self.orchestrator.save()

    # Photo picker helpers

    def load_photos(self) -> List[AssetRecord]:
        return self.assets.list_assets()

    def enqueue_thumbnail(self, asset_id: str) -> Optional[Any]:
        return self.assets.fetch_thumbnail(asset_id)

    # Lifecycle

    def wait_for_idle(self, timeout: Optional[float] = None) -> None:
        """Wait for pending fetches, then for pending saves."""
        self.assets.wait_for_idle(timeout)
        self.orchestrator.wait_for_idle(timeout)

    def shutdown(self, timeout: Optional[float] = None, *, wait: bool = True) -> None:
        """Retire the current session and release background work.

        With ``wait`` pending fetches and saves are allowed to settle first.
        """
        if self._gate is not None:
            self._gate.detach()
            self._gate = None
        if self._source is not None:
            self._source.complete()
            self._source = None
        if wait:
            self.wait_for_idle(timeout)
        self.assets.end_session()
        self.composer.unbind()

    @Slot(str, int, object)
    def _on_full_image(self, asset_id: str, token: int, image: Any) -> None:
        if token != self._session_token or self._source is None:
            logger.debug("Dropping %s fetched for stale session %d", asset_id, token)
            return
        self._source.send(image)
