"""Shared fixtures: a Qt core application, a private thread pool and fakes
for the asset library and the photo writer."""

from __future__ import annotations

import os
import threading
from collections import Counter
from typing import Dict, Iterator, List, Optional

import pytest

os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")

from PIL import Image  # noqa: E402
from PySide6.QtCore import QCoreApplication, QThreadPool  # noqa: E402

from photo_collage.assets import AssetImage, AssetRecord, AssetRetrievalError  # noqa: E402
from photo_collage.managers import PersistenceError  # noqa: E402


@pytest.fixture(scope="session", autouse=True)
def qt_app() -> QCoreApplication:
    app = QCoreApplication.instance()
    if app is None:
        app = QCoreApplication([])
    return app


@pytest.fixture()
def thread_pool() -> Iterator[QThreadPool]:
    pool = QThreadPool()
    pool.setMaxThreadCount(4)
    yield pool
    pool.waitForDone(5000)


COLOURS = ["red", "green", "blue", "yellow", "purple", "orange", "cyan", "white"]


def make_image(colour: str = "red", size=(12, 8)) -> Image.Image:
    return Image.new("RGB", size, colour)


@pytest.fixture()
def images() -> Dict[str, Image.Image]:
    """Eight distinct images keyed ``A`` .. ``H``."""
    return {chr(ord("A") + i): make_image(colour) for i, colour in enumerate(COLOURS)}


class FakeLibrary:
    """In-memory asset library.

    Every request yields a degraded placeholder before the real image.  Requests
    for ids listed in ``blocked`` wait until :meth:`release` is called.
    """

    def __init__(self, assets: Dict[str, Image.Image]) -> None:
        self.assets = dict(assets)
        self.calls: Counter[str] = Counter()
        self._lock = threading.Lock()
        self._gates: Dict[str, threading.Event] = {}

    def block(self, asset_id: str) -> None:
        self._gates[asset_id] = threading.Event()

    def release(self, asset_id: str) -> None:
        self._gates[asset_id].set()

    def stop_blocking(self, asset_id: str) -> threading.Event:
        """Let new requests through; returns the event earlier ones still wait on."""
        return self._gates.pop(asset_id)

    def list_assets(self) -> List[AssetRecord]:
        return [
            AssetRecord(asset_id=asset_id, path=None, created=float(index))
            for index, asset_id in enumerate(self.assets)
        ]

    def request_image(self, asset_id, target_size) -> Iterator[AssetImage]:
        with self._lock:
            gate = self._gates.get(asset_id)
            self.calls[asset_id] += 1
        if gate is not None:
            gate.wait(5)
        if asset_id not in self.assets:
            raise AssetRetrievalError(f"Unknown asset {asset_id}")
        yield AssetImage(make_image("black", (2, 2)), degraded=True)
        yield AssetImage(self.assets[asset_id])


class FakeWriter:
    """Photo writer returning queued ids or raising queued errors."""

    def __init__(self, *outcomes) -> None:
        self.outcomes = list(outcomes) or ["X123"]
        self.written: List[Image.Image] = []
        self.gates: Dict[int, threading.Event] = {}
        self._lock = threading.Lock()

    @property
    def calls(self) -> int:
        return len(self.written)

    def block_call(self, index: int) -> threading.Event:
        self.gates[index] = threading.Event()
        return self.gates[index]

    def write(self, image: Image.Image) -> str:
        with self._lock:
            index = len(self.written)
            self.written.append(image)
            outcome = self.outcomes[min(index, len(self.outcomes) - 1)]
        gate: Optional[threading.Event] = self.gates.get(index)
        if gate is not None:
            gate.wait(5)
        if isinstance(outcome, Exception):
            raise outcome
        return outcome


@pytest.fixture()
def library(images) -> FakeLibrary:
    return FakeLibrary(images)


@pytest.fixture()
def writer() -> FakeWriter:
    return FakeWriter("X123")


@pytest.fixture()
def failing_writer() -> FakeWriter:
    return FakeWriter(PersistenceError("disk full"))


@pytest.fixture()
def fake_library_cls():
    return FakeLibrary


@pytest.fixture()
def fake_writer_cls():
    return FakeWriter
