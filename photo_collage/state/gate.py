"""Selection sources and the bounded gate that shares them.

A :class:`SelectionSource` is created per selection session.  The
:class:`BoundedSelectionGate` holds the only connection to that source,
evaluates its predicate once per incoming image and fans the accepted images
out to every subscriber.  The first time the predicate fails the gate closes
for good and lets go of the source.
"""

from __future__ import annotations

import logging
from typing import Any, Callable, List

from PySide6.QtCore import QObject, Signal, Slot

logger = logging.getLogger("photo_collage.gate")


class SelectionSource(QObject):
    """Pass-through source of selected images for one session."""

    image_selected = Signal(object)
    completed = Signal()

    def __init__(self, parent=None) -> None:
        super().__init__(parent)
        self._completed = False

    @property
    def is_completed(self) -> bool:
        return self._completed

    def send(self, image: Any) -> None:
        if self._completed:
            logger.debug("Source already completed; selection ignored")
            return
        self.image_selected.emit(image)

    def complete(self) -> None:
        if self._completed:
            return
        self._completed = True
        self.completed.emit()


class BoundedSelectionGate(QObject):
    """Forward images from *source* while *predicate* holds, then stop for good.

    The gate is a plain QObject: the caller must keep a reference to it or give
    it a parent, otherwise it is collected and the stream silently stops.
    """

    accepted = Signal(object)
    closed = Signal()

    def __init__(
        self,
        source: SelectionSource,
        predicate: Callable[[], bool],
        parent=None,
    ) -> None:
        super().__init__(parent)
        self._source = source
        self._predicate = predicate
        self._forwarded: List[Any] = []
        self._subscribers: List[Callable[[Any], None]] = []
        self._open = True
        source.image_selected.connect(self._on_image)
        source.completed.connect(self._on_source_completed)
        if source.is_completed:
            self._close()

    @property
    def is_open(self) -> bool:
        return self._open

    @property
    def forwarded(self) -> List[Any]:
        """Images forwarded so far, in arrival order."""
        return list(self._forwarded)

    def subscribe(self, slot: Callable[[Any], None], *, replay: bool = False) -> None:
        """Attach *slot* to the shared stream of accepted images.

        With ``replay`` the images already forwarded are delivered to *slot*
        first, so a late subscriber sees the whole session.
        """
        if replay:
            for image in self._forwarded:
                slot(image)
        self._subscribers.append(slot)
        self.accepted.connect(slot)

    def detach(self) -> None:
        """Disconnect from the source and from every subscriber."""
        self._close()
        for slot in self._subscribers:
            self.accepted.disconnect(slot)
        self._subscribers.clear()

    @Slot(object)
    def _on_image(self, image: Any) -> None:
        if not self._open:
            return
        if not self._predicate():
            logger.info("Selection limit reached; gate closed after %d image(s)", len(self._forwarded))
            self._close()
            return
        self._forwarded.append(image)
        self.accepted.emit(image)

    @Slot()
    def _on_source_completed(self) -> None:
        self._close()

    def _close(self) -> None:
        if not self._open:
            return
        self._open = False
        self._source.image_selected.disconnect(self._on_image)
        self._source.completed.disconnect(self._on_source_completed)
        self.closed.emit()
