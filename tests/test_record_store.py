import pytest

from models import CitationRecord
from record_store import CitationRecordStore


def test_records_follow_input_index_not_arrival() -> None:
    store = CitationRecordStore()
    third = CitationRecord(title="third")
    first = CitationRecord(title="first")
    second = CitationRecord(title="second")

    store.append(third, index=2)
    store.append(first, index=0)
    store.append(second, index=1)

    assert [record.title for record in store.records()] == ["first", "second", "third"]
    assert [record.title for record in store] == ["first", "second", "third"]
    assert [record.title for record in store.completion_order()] == ["third", "first", "second"]
    assert len(store) == 3


def test_append_without_index_goes_after_existing() -> None:
    store = CitationRecordStore()
    store.append(CitationRecord(title="a"))
    store.append(CitationRecord(title="b"))

    assert [record.title for record in store.records()] == ["a", "b"]


def test_duplicate_id_is_rejected() -> None:
    store = CitationRecordStore()
    store.append(CitationRecord(id="same"))

    with pytest.raises(ValueError, match="same"):
        store.append(CitationRecord(id="same"))
    assert len(store) == 1


def test_get_and_truthiness() -> None:
    store = CitationRecordStore()
    assert not store
    assert store.get("missing") is None

    record = CitationRecord(id="r1", title="x")
    store.append(record)
    assert store
    assert store.get("r1") is record


def test_append_without_index_follows_highest_index() -> None:
    store = CitationRecordStore()
    store.append(CitationRecord(title="a"), index=5)
    store.append(CitationRecord(title="b"))

    assert [record.title for record in store.records()] == ["a", "b"]
