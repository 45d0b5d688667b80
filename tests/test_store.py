"""Tests for AnnotationStore."""

from dataclasses import replace

import pytest

from polymark.core.annotations import AnnotationStore, make_line
from polymark.core.geometry import AffineTransform, CanonicalPoint


def record(ann_id, page=1, x=0):
    return {
        "id": ann_id,
        "page": page,
        "type": "line",
        "geometry": {"start": [x, 0], "end": [x + 10, 0]},
    }


@pytest.fixture
def events(store):
    received = []
    store.subscribe(received.append)
    return received


def test_by_page_and_counts(store):
    assert [a.id for a in store.by_page(1)] == ["1-0", "1-1"]
    assert store.by_page(5) == []
    assert store.count() == 3
    assert store.count(1) == 2
    assert store.pages() == [1, 2]


def test_by_page_returns_a_copy(store):
    store.by_page(1).clear()
    assert store.count(1) == 2


def test_get(store, line):
    assert store.get(1, "1-0") == line
    assert store.get(2, "1-0") is None


def test_all_annotations_skips_empty_pages(store):
    store.remove(2, ["2-0"])
    assert list(store.all_annotations()) == [1]


def test_next_id_unique(store, style):
    assert store.next_id(1) == "1-2"
    assert store.next_id(3) == "3-0"
    store.remove(1, ["1-0"])
    # "1-1" is still taken
    assert store.next_id(1) == "1-2"


def test_add_notifies_once(store, events, style):
    store.add(make_line("1-5", 1, CanonicalPoint(0, 0), CanonicalPoint(1, 1), style))
    assert events == [1]


def test_add_rejects_duplicate_id(store, line, events):
    with pytest.raises(ValueError):
        store.add(line)
    assert store.count(1) == 2
    assert events == []


def test_add_rejects_non_annotation(store):
    with pytest.raises(TypeError):
        store.add({"id": "1-9"})


def test_upsert_page(store, line, events):
    store.upsert_page(1, [line])
    assert store.by_page(1) == [line]
    assert events == [1]


def test_upsert_page_rejects_page_mismatch(store, line):
    with pytest.raises(ValueError):
        store.upsert_page(2, [line])


def test_remove(store, events):
    assert store.remove(1, ["1-0", "missing"]) == 1
    assert [a.id for a in store.by_page(1)] == ["1-1"]
    assert events == [1]


def test_remove_nothing_does_not_notify(store, events):
    assert store.remove(1, ["missing"]) == 0
    assert events == []


def test_update_keeps_position(store, line, events):
    moved = replace(line, transform=AffineTransform(translate_x=4))
    assert store.update(1, [moved]) == 1
    assert store.by_page(1)[0] == moved
    assert events == [1]


def test_replace_is_one_change(store, square, style, events):
    merged = make_line("1-2", 1, CanonicalPoint(0, 0), CanonicalPoint(9, 9), style)
    store.replace(1, ["1-0", "1-1"], [merged])
    assert store.by_page(1) == [merged]
    assert events == [1]


def test_clear(store, events):
    store.clear()
    assert store.count() == 0
    assert events == [None]


def test_unsubscribe(store, events):
    store.unsubscribe(events.append)
    store.clear()
    assert events == []


def test_load_skips_malformed_records(caplog):
    store = AnnotationStore()
    records = [
        record("1-0"),
        {"id": "1-1", "page": 1, "type": "line", "geometry": {"start": [0, 0]}},
        record("1-2", x=20),
        record("2-0", page=2),
    ]
    with caplog.at_level("WARNING"):
        assert store.load(records) == 3
    assert [a.id for a in store.by_page(1)] == ["1-0", "1-2"]
    assert store.count(2) == 1
    assert "malformed" in caplog.text


def test_load_skips_duplicate_ids(store):
    assert store.load([record("1-0"), record("1-7"), record("1-7")]) == 1
    assert store.count(1) == 3


def test_load_round_trip(store):
    records = [ann.to_dict() for anns in store.all_annotations().values() for ann in anns]
    copy = AnnotationStore()
    assert copy.load(records) == 3
    assert copy.all_annotations() == store.all_annotations()
