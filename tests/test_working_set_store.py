"""Tests for the working set store."""

from __future__ import annotations

import threading

from photo_collage.state import WorkingSetStore
from photo_collage.workers import wait_until


def test_append_preserves_selection_order(images):
    store = WorkingSetStore()
    seen = []
    store.changed.connect(seen.append)

    for key in "ABC":
        store.append(images[key])

    assert store.images == (images["A"], images["B"], images["C"])
    assert [len(value) for value in seen] == [1, 2, 3]
    assert seen[-1] == store.images


def test_append_replaces_instead_of_mutating(images):
    store = WorkingSetStore()
    store.append(images["A"])
    before = store.images

    store.append(images["B"])

    assert before == (images["A"],)
    assert store.images is not before


def test_append_does_not_deduplicate(images):
    store = WorkingSetStore()
    store.append(images["A"])
    store.append(images["A"])
    assert len(store) == 2


def test_clear_notifies_with_empty_working_set(images):
    store = WorkingSetStore()
    store.append(images["A"])
    seen = []
    store.changed.connect(seen.append)

    store.clear()

    assert store.images == ()
    assert seen == [()]


def test_mutations_from_other_threads_run_on_owner_thread(images):
    store = WorkingSetStore()
    owner = threading.get_ident()
    delivered_on = []
    store.changed.connect(lambda _value: delivered_on.append(threading.get_ident()))

    producers = [
        threading.Thread(target=store.append, args=(images[key],)) for key in "ABCD"
    ]
    for producer in producers:
        producer.start()
    for producer in producers:
        producer.join()

    wait_until(lambda: len(store) == 4, timeout=5)

    assert sorted(map(id, store.images)) == sorted(id(images[key]) for key in "ABCD")
    assert delivered_on == [owner] * 4
