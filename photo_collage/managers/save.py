# managers/save.py
"""Save orchestration for the current collage preview.

``SaveOrchestrator.save`` hands the composer's preview to a photo writer on a
pool thread.  The outcome comes back to the consumer thread as a
:class:`Saved` or :class:`Failed` value, is recorded as the latest result and
then the working set is cleared, whichever way the write went.  Failures are
never raised to the caller.

Overlapping saves are not serialised: each one settles independently and the
last to settle owns ``last_result``.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional, Union

from PySide6.QtCore import QObject, QThreadPool, Signal, Slot

from ..composer import CollageComposer
from ..state.store import WorkingSetStore
from ..workers import Worker, WorkerSet
from .photo_writer import PhotoWriter

logger = logging.getLogger("photo_collage.save")


@dataclass(frozen=True, slots=True)
class Saved:
    id: str


@dataclass(frozen=True, slots=True)
class Failed:
    message: str


SaveResult = Union[Saved, Failed]


def _write_photo(writer: PhotoWriter, image) -> SaveResult:
    """Run on a pool thread; folds any writer failure into a result value."""
    try:
        return Saved(writer.write(image))
    except Exception as exc:  # noqa: BLE001 - surfaced as Failed(message)
        return Failed(str(exc) or exc.__class__.__name__)


class SaveOrchestrator(QObject):
    """Persist the latest preview and route the outcome into observable state."""

    save_started = Signal()
    save_finished = Signal(object)  # SaveResult

    def __init__(
        self,
        store: WorkingSetStore,
        composer: CollageComposer,
        writer: PhotoWriter,
        thread_pool: Optional[QThreadPool] = None,
        parent=None,
    ) -> None:
        super().__init__(parent)
        self._store = store
        self._composer = composer
        self._writer = writer
        self._workers = WorkerSet(thread_pool, parent=self)
        self._last_result: Optional[SaveResult] = None
        self._last_saved_id = ""
        self._last_error_message = ""

    @property
    def last_result(self) -> Optional[SaveResult]:
        return self._last_result

    @property
    def last_saved_id(self) -> str:
        return self._last_saved_id

    @property
    def last_error_message(self) -> str:
        return self._last_error_message

    @property
    def pending(self) -> int:
        """Number of saves started but not yet settled."""
        return len(self._workers)

    def save(self) -> bool:
        """Start saving the current preview.

        Returns ``False`` without touching any state when there is nothing to
        save, ``True`` once the write has been scheduled.
        """
        image = self._composer.preview
        if image is None:
            logger.debug("Save requested without a preview; ignored")
            return False

        worker = Worker(_write_photo, self._writer, image)
        self._workers.start(worker, on_result=self._on_settled, on_error=self._on_worker_error)
        logger.info("Save started (%d pending)", self.pending)
        self.save_started.emit()
        return True

    def wait_for_idle(self, timeout: Optional[float] = None) -> None:
        """Block until every started save has settled.

        Primarily used by the command line runner and tests.
        """
        self._workers.wait_for_idle(timeout)

    @Slot(object)
    def _on_settled(self, result: SaveResult) -> None:
        self._last_result = result
        if isinstance(result, Saved):
            self._last_saved_id = result.id
            logger.info("Collage saved as %s", result.id)
        else:
            self._last_error_message = result.message
            logger.warning("Collage save failed: %s", result.message)
        self.save_finished.emit(result)
        # The collage session ends whatever the outcome.
        self._store.clear()

    @Slot(str)
    def _on_worker_error(self, message: str) -> None:
        self._on_settled(Failed(message))
