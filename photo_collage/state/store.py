"""Working set store: the single owner of the selected images.

The store is a state cell with a synchronous getter, two mutations and a
``changed`` signal.  It belongs to the thread that created it; mutations
requested from any other thread are re-posted to that thread through a queued
connection so every read-modify-write runs there, in request order.
"""

from __future__ import annotations

import logging
import threading
from typing import Any, Tuple

from PySide6.QtCore import QObject, Qt, Signal, Slot

logger = logging.getLogger("photo_collage.store")

WorkingSet = Tuple[Any, ...]


class WorkingSetStore(QObject):
    """Ordered, replace-on-write collection of selected images."""

    changed = Signal(object)  # the new WorkingSet tuple

    _append_requested = Signal(object)
    _clear_requested = Signal()

    def __init__(self, parent=None) -> None:
        super().__init__(parent)
        self._images: WorkingSet = ()
        self._owner_ident = threading.get_ident()
        self._append_requested.connect(self._apply_append, Qt.ConnectionType.QueuedConnection)
        self._clear_requested.connect(self._apply_clear, Qt.ConnectionType.QueuedConnection)

    @property
    def images(self) -> WorkingSet:
        """Current working set."""
        return self._images

    def __len__(self) -> int:
        return len(self._images)

    def append(self, image: Any) -> None:
        """Replace the working set with ``current + (image,)``.

        The bound is enforced upstream by the selection gate and is not
        checked again here.
        """
        if self._on_owner_thread():
            self._apply_append(image)
        else:
            self._append_requested.emit(image)

    def clear(self) -> None:
        """Reset the working set to empty."""
        if self._on_owner_thread():
            self._apply_clear()
        else:
            self._clear_requested.emit()

    def _on_owner_thread(self) -> bool:
        return threading.get_ident() == self._owner_ident

    @Slot(object)
    def _apply_append(self, image: Any) -> None:
        self._replace(self._images + (image,))

    @Slot()
    def _apply_clear(self) -> None:
        self._replace(())

    def _replace(self, images: WorkingSet) -> None:
        self._images = images
        logger.debug("Working set now holds %d image(s)", len(images))
        self.changed.emit(images)
