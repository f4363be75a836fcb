# workers.py
"""
Background task execution utilities for Photo Collage.
Defines a unified Worker for QRunnable tasks, a WorkerSet that keeps running
workers alive until they settle, and a helper that pumps the Qt event loop
while waiting for them.
"""
import logging
import time
from typing import Any, Callable, Optional, Set

from PySide6.QtCore import (
    QCoreApplication,
    QObject,
    QRunnable,
    QThreadPool,
    Signal,
    Slot,
)

from . import config

logger = logging.getLogger("photo_collage.workers")


class WorkerSignals(QObject):
    started = Signal()
    finished = Signal(object)  # the worker that finished
    error = Signal(str)
    result = Signal(object)


class Worker(QRunnable):
    """Wraps any function to run in a QThreadPool."""
    def __init__(self, fn: Callable, *args, **kwargs):
        super().__init__()
        # WorkerSet owns the lifetime; the pool must not delete the runnable
        self.setAutoDelete(False)
        self.fn = fn
        self.args = args
        self.kwargs = kwargs
        self.signals = WorkerSignals()

    def run(self) -> None:
        try:
            self.signals.started.emit()
            result = self.fn(*self.args, **self.kwargs)
        except Exception as e:  # noqa: BLE001 - reported through the error signal
            logger.error("Worker error: %s", e)
            self.signals.error.emit(str(e))
        else:
            self.signals.result.emit(result)
        finally:
            self.signals.finished.emit(self)


def wait_until(predicate: Callable[[], bool], timeout: Optional[float] = None) -> None:
    """Pump the Qt event loop until *predicate* returns ``True``.

    Results from pool threads are delivered through queued connections, which
    only run while events are processed, so callers waiting on background work
    must use this rather than sleeping.
    """

    app = QCoreApplication.instance()
    deadline = None if timeout is None else time.perf_counter() + timeout
    while not predicate():
        if app is not None:
            app.processEvents()
        if predicate():
            break
        if deadline is not None and time.perf_counter() >= deadline:
            raise TimeoutError("Background task did not complete in time")
        time.sleep(config.WAIT_POLL_SECONDS)


class WorkerSet(QObject):
    """Tracks the workers started by one component until each one finishes.

    The set lives on the consumer thread. ``finished`` is connected after the
    caller's result/error slots, so a worker is released only once its outcome
    has been handled there.  Workers do not auto-delete, so holding one here
    keeps the runnable and its signals alive while queued deliveries are pending.
    """

    def __init__(self, thread_pool: Optional[QThreadPool] = None, parent=None) -> None:
        super().__init__(parent)
        self.thread_pool = thread_pool or QThreadPool.globalInstance()
        self._workers: Set[Worker] = set()

    def __len__(self) -> int:
        return len(self._workers)

    def start(
        self,
        worker: Worker,
        on_result: Optional[Callable[[Any], None]] = None,
        on_error: Optional[Callable[[str], None]] = None,
    ) -> Worker:
        """Connect *worker* to the given slots and schedule it.

        ``on_result`` and ``on_error`` must be ``@Slot`` methods of objects
        living on the consumer thread so delivery is queued onto it.
        """
        if on_result is not None:
            worker.signals.result.connect(on_result)
        if on_error is not None:
            worker.signals.error.connect(on_error)
        worker.signals.finished.connect(self._release)
        self._workers.add(worker)
        self.thread_pool.start(worker)
        return worker

    @Slot(object)
    def _release(self, worker: Worker) -> None:
        self._workers.discard(worker)

    def wait_for_idle(self, timeout: Optional[float] = None) -> None:
        """Block until every worker started here has finished."""
        wait_until(lambda: not self._workers, timeout)
