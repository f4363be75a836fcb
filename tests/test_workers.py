"""Tests for the background worker helpers."""

from __future__ import annotations

import threading

import pytest
from PySide6.QtCore import QObject, Slot

from photo_collage.workers import Worker, WorkerSet, wait_until


class Recorder(QObject):
    def __init__(self) -> None:
        super().__init__()
        self.results = []
        self.errors = []
        self.threads = []

    @Slot(object)
    def on_result(self, value) -> None:
        self.results.append(value)
        self.threads.append(threading.get_ident())

    @Slot(str)
    def on_error(self, message: str) -> None:
        self.errors.append(message)


def test_result_is_delivered_on_the_consumer_thread(thread_pool):
    recorder = Recorder()
    workers = WorkerSet(thread_pool)

    workers.start(Worker(lambda a, b: a + b, 2, 3), recorder.on_result, recorder.on_error)
    workers.wait_for_idle(timeout=5)

    assert recorder.results == [5]
    assert recorder.errors == []
    assert recorder.threads == [threading.get_ident()]
    assert len(workers) == 0


def test_exceptions_are_reported_not_raised(thread_pool):
    recorder = Recorder()
    workers = WorkerSet(thread_pool)

    def boom():
        raise RuntimeError("boom")

    workers.start(Worker(boom), recorder.on_result, recorder.on_error)
    workers.wait_for_idle(timeout=5)

    assert recorder.results == []
    assert recorder.errors == ["boom"]


def test_wait_until_times_out():
    with pytest.raises(TimeoutError):
        wait_until(lambda: False, timeout=0.05)


def test_worker_lifetime_is_owned_by_python(thread_pool):
    recorder = Recorder()
    workers = WorkerSet(thread_pool)
    worker = Worker(lambda: "done")
    assert worker.autoDelete() is False

    workers.start(worker, recorder.on_result)
    workers.wait_for_idle(timeout=5)

    assert recorder.results == ["done"]
    # the runnable survives the pool so its signals can still be disconnected
    worker.signals.result.disconnect(recorder.on_result)
