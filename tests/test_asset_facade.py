"""Tests for the asset retrieval facade."""

from __future__ import annotations

import logging

import pytest

from photo_collage.assets import AssetRetrievalFacade
from photo_collage.workers import wait_until


@pytest.fixture
def facade(library, thread_pool):
    return AssetRetrievalFacade(library, thread_pool)


def test_fetch_full_forwards_only_the_final_image(facade, images):
    delivered = []
    facade.full_image_ready.connect(lambda *args: delivered.append(args))

    facade.fetch_full("B", token=7)
    facade.wait_for_idle(timeout=5)

    assert delivered == [("B", 7, images["B"])]


def test_fetch_full_failure_is_swallowed_and_logged(facade, caplog):
    delivered, failures = [], []
    facade.full_image_ready.connect(lambda *args: delivered.append(args))
    facade.fetch_failed.connect(lambda *args: failures.append(args))

    caplog.set_level(logging.WARNING)
    facade.fetch_full("missing")
    facade.wait_for_idle(timeout=5)

    assert delivered == []
    assert [asset_id for asset_id, _ in failures] == ["missing"]
    assert any("Asset fetch failed for missing" in r.message for r in caplog.records)


def test_concurrent_thumbnail_requests_fetch_once(facade, library, images):
    """Two requests for an uncached id before the first completes share one fetch."""

    ready = []
    facade.thumbnail_ready.connect(lambda *args: ready.append(args))
    library.block("A")

    assert facade.fetch_thumbnail("A") is None
    assert facade.fetch_thumbnail("A") is None

    library.release("A")
    facade.wait_for_idle(timeout=5)

    assert library.calls["A"] == 1
    assert facade.thumbnails == {"A": images["A"]}
    assert ready == [("A", images["A"])]


def test_cached_thumbnail_is_returned_without_fetching(facade, library, images):
    facade.fetch_thumbnail("C")
    facade.wait_for_idle(timeout=5)

    assert facade.fetch_thumbnail("C") is images["C"]
    assert library.calls["C"] == 1
    assert facade.pending == 0


def test_failed_thumbnail_can_be_retried(facade, library):
    failures = []
    facade.fetch_failed.connect(lambda *args: failures.append(args))

    facade.fetch_thumbnail("missing")
    facade.wait_for_idle(timeout=5)
    facade.fetch_thumbnail("missing")
    facade.wait_for_idle(timeout=5)

    assert library.calls["missing"] == 2
    assert len(failures) == 2
    assert facade.thumbnails == {}


def test_end_session_clears_and_ignores_in_flight_thumbnails(facade, library, images):
    facade.fetch_thumbnail("A")
    facade.wait_for_idle(timeout=5)
    ready = []
    facade.thumbnail_ready.connect(lambda *args: ready.append(args))
    library.block("B")
    facade.fetch_thumbnail("B")

    facade.end_session()
    library.release("B")
    facade.wait_for_idle(timeout=5)

    assert facade.thumbnails == {}
    assert ready == []


def test_retired_fetch_does_not_announce_over_the_new_session(facade, library, images):
    ready = []
    facade.thumbnail_ready.connect(lambda *args: ready.append(args))
    library.block("B")
    facade.fetch_thumbnail("B")
    wait_until(lambda: library.calls["B"] == 1, timeout=5)

    earlier = library.stop_blocking("B")
    facade.end_session()
    facade.fetch_thumbnail("B")
    wait_until(lambda: len(ready) == 1, timeout=5)

    earlier.set()
    facade.wait_for_idle(timeout=5)

    assert library.calls["B"] == 2
    assert ready == [("B", images["B"])]
    assert facade.thumbnails == {"B": images["B"]}


def test_list_assets_delegates_to_library(facade, images):
    assert [record.asset_id for record in facade.list_assets()] == sorted(images)
