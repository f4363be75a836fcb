"""
CollageComposer: derives the preview and item count from the working set.
"""
import logging
from dataclasses import dataclass
from typing import Any, Callable, Optional, Sequence, Tuple

from PySide6.QtCore import QObject, Signal, Slot

from . import config
from .state.store import WorkingSet, WorkingSetStore
from .utils.collage_layouts import compose_collage

Compositor = Callable[[Sequence[Any], Tuple[int, int]], Optional[Any]]


@dataclass(frozen=True, slots=True)
class CollageSnapshot:
    """Item count and the preview composed from that same working set."""

    count: int
    preview: Optional[Any]


class CollageComposer(QObject):
    count_changed = Signal(int)
    preview_changed = Signal(object)
    snapshot_changed = Signal(object)

    def __init__(
        self,
        store: WorkingSetStore,
        compositor: Compositor = compose_collage,
        target_size: Tuple[int, int] = config.COLLAGE_SIZE,
        parent=None,
    ):
        super().__init__(parent)
        self._store = store
        self._compositor = compositor
        self._target_size = target_size
        self._snapshot = CollageSnapshot(count=0, preview=None)
        self._bound = False
        self.logger = logging.getLogger("photo_collage.composer")

    @property
    def preview(self) -> Optional[Any]:
        return self._snapshot.preview

    @property
    def count(self) -> int:
        return self._snapshot.count

    @property
    def snapshot(self) -> CollageSnapshot:
        return self._snapshot

    def bind(self) -> None:
        """Start following the store and publish its current state."""
        if self._bound:
            return
        self._bound = True
        self._store.changed.connect(self._on_working_set_changed)
        self._on_working_set_changed(self._store.images)

    def unbind(self) -> None:
        if not self._bound:
            return
        self._bound = False
        self._store.changed.disconnect(self._on_working_set_changed)

    @Slot(object)
    def _on_working_set_changed(self, images: WorkingSet) -> None:
        preview = self._compositor(images, self._target_size) if images else None
        # Both halves are stored before any listener runs.
        snapshot = CollageSnapshot(count=len(images), preview=preview)
        self._snapshot = snapshot
        self.logger.debug("Preview recomputed for %d image(s)", len(images))
        # A listener may mutate the store re-entrantly; stop emitting once a
        # newer snapshot has been published so nothing older follows it.
        self.count_changed.emit(snapshot.count)
        if self._snapshot is not snapshot:
            return
        self.preview_changed.emit(snapshot.preview)
        if self._snapshot is not snapshot:
            return
        self.snapshot_changed.emit(snapshot)
