import pytest

from medreminder.core.errors import NotFound, ValidationError


def test_create_and_get(store, clock):
    record = store.create("r1", "Aspirin", "+15551234567", "08:00")

    assert record.status == "active"
    assert record.created_at == clock.now
    assert record.taken_at is None
    assert store.get("r1") == record


def test_create_requires_id(store):
    with pytest.raises(ValidationError):
        store.create("", "Aspirin", "+15551234567", "08:00")


def test_get_unknown_raises(store):
    with pytest.raises(NotFound):
        store.get("nope")


def test_mark_taken_first_transition_wins(store, clock):
    store.create("r1", "Aspirin", "+15551234567", "08:00")
    first = store.mark_taken("r1")
    clock.advance(60)
    second = store.mark_taken("r1")

    assert first.status == second.status == "taken"
    assert second.taken_at == first.taken_at


def test_mark_taken_unknown_raises(store):
    with pytest.raises(NotFound):
        store.mark_taken("nope")


def test_recreate_overwrites_and_resets_status(store):
    store.create("a", "Aspirin", "+1555", "08:00")
    store.create("b", "Ibuprofen", "+1555", "09:00")
    store.mark_taken("a")

    record = store.create("a", "Vitamin D", "+1666", "10:00")

    assert record.status == "active"
    assert record.taken_at is None
    assert [r.id for r in store.list()] == ["a", "b"]
    assert store.get("a").medicine_name == "Vitamin D"


def test_returned_records_are_copies(store):
    store.create("r1", "Aspirin", "+15551234567", "08:00")
    record = store.get("r1")
    record.status = "taken"

    assert store.get("r1").status == "active"
