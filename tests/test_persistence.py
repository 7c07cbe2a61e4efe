import sqlite3
from pathlib import Path

import pytest

from pyscorer.persistence import (
    DuplicateKeyError,
    SeatingStore,
    StoreBlockedError,
    StoreError,
    UnknownCollectionError,
)


@pytest.fixture()
def store(tmp_path: Path):
    with SeatingStore(tmp_path / "seating.sqlite", timeout=0) as opened:
        yield opened


def test_schema_version_is_recorded(tmp_path: Path):
    path = tmp_path / "seating.sqlite"
    SeatingStore(path).open().close()

    conn = sqlite3.connect(path)
    try:
        assert conn.execute("PRAGMA user_version").fetchone()[0] == 3
    finally:
        conn.close()

    # Reopening an up-to-date store is a no-op.
    with SeatingStore(path) as reopened:
        assert reopened.list_families() == []


def test_store_must_be_open(tmp_path: Path):
    store = SeatingStore(tmp_path / "seating.sqlite")

    with pytest.raises(StoreError):
        store.list_cars()
    store.open()
    assert store.is_open
    store.close()
    assert not store.is_open


def test_family_crud(store: SeatingStore):
    store.add_family({"familyName": "Sato", "members": 4})
    store.add_family({"familyName": "Abe", "members": 2})

    assert store.get_family("Sato") == {"familyName": "Sato", "members": 4}
    assert [family["familyName"] for family in store.list_families()] == ["Abe", "Sato"]

    store.update_family({"familyName": "Sato", "members": 5})
    assert store.get_family("Sato")["members"] == 5

    store.delete_family("Abe")
    assert store.get_family("Abe") is None
    assert store.count("families") == 1


def test_insert_rejects_existing_key(store: SeatingStore):
    store.add_car({"id": 1, "seats": 5})

    with pytest.raises(DuplicateKeyError):
        store.add_car({"id": 1, "seats": 7})
    assert store.get_car(1)["seats"] == 5


def test_missing_key_is_rejected(store: SeatingStore):
    with pytest.raises(StoreError):
        store.add_family({"members": 3})


def test_bulk_insert_overwrites_in_one_transaction(store: SeatingStore):
    store.add_car({"id": 1, "seats": 5})

    stored = store.bulk_add_cars([{"id": 1, "seats": 8}, {"id": 2, "seats": 4}])

    assert len(stored) == 2
    assert [car["seats"] for car in store.list_cars()] == [8, 4]
    assert store.bulk_add_cars([]) == []


def test_auto_increment_ids_are_written_into_payload(store: SeatingStore):
    first = store.save_state({"seats": ["A"], "timestamp": 1})
    second = store.save_state({"seats": ["B"], "timestamp": 2})

    assert (first["id"], second["id"]) == (1, 2)
    assert store.get_saved_state(2) == {"seats": ["B"], "timestamp": 2, "id": 2}


def test_save_with_trim_keeps_most_recent(store: SeatingStore):
    for stamp in range(1, 8):
        store.save_state({"label": f"state {stamp}", "timestamp": stamp})
        assert store.count("saved_states") == min(stamp, 5)

    states = store.list_saved_states()
    assert [state["timestamp"] for state in states] == [7, 6, 5, 4, 3]
    assert [state["timestamp"] for state in store.list_saved_states(limit=2)] == [7, 6]


def test_trim_limit_can_be_overridden(store: SeatingStore):
    for stamp in range(1, 5):
        store.save_with_trim("saved_parking", {"name": f"lot {stamp}", "timestamp": stamp}, limit=2)

    assert [item["name"] for item in store.list_saved_parking()] == ["lot 4", "lot 3"]


def test_trim_limit_env_override(store: SeatingStore, monkeypatch):
    monkeypatch.setenv("PYSCORER_STATE_LIMIT", "2")
    for stamp in range(1, 5):
        store.save_state({"timestamp": stamp})

    assert store.count("saved_states") == 2


def test_equal_timestamps_trim_oldest_key(store: SeatingStore):
    for _ in range(6):
        store.save_state({"timestamp": 100})

    assert sorted(state["id"] for state in store.list_saved_states()) == [2, 3, 4, 5, 6]


def test_timestamp_defaults_to_now(store: SeatingStore):
    saved = store.save_parking({"name": "church lot"})

    assert isinstance(saved["timestamp"], int)
    assert saved["timestamp"] > 1_600_000_000_000


def test_get_all_sorted_by_name(store: SeatingStore):
    store.bulk_add_parking([{"name": "b", "timestamp": 1}, {"name": "a", "timestamp": 2}])

    names = [item["name"] for item in store.get_all_sorted("saved_parking", "name", descending=False)]
    assert names == ["a", "b"]
    with pytest.raises(StoreError):
        store.get_all_sorted("families", "timestamp")


def test_failed_save_rolls_back(store: SeatingStore):
    store.save_state({"timestamp": 1})

    with pytest.raises(TypeError):
        store.save_state({"timestamp": 2, "payload": object()})
    assert [state["timestamp"] for state in store.list_saved_states()] == [1]


def test_trim_requires_timestamped_collection(store: SeatingStore):
    with pytest.raises(StoreError):
        store.save_with_trim("families", {"familyName": "Ito"})


def test_unknown_collection(store: SeatingStore):
    with pytest.raises(UnknownCollectionError):
        store.get_all("seats")
    with pytest.raises(KeyError):
        store.clear("seats")


def test_clear_and_clear_all(store: SeatingStore):
    store.add_family({"familyName": "Sato"})
    store.add_car({"id": 1})
    store.save_state({"timestamp": 1})

    store.clear("cars")
    assert store.list_cars() == []
    assert store.count("families") == 1

    store.clear_all()
    assert store.list_families() == []
    assert store.list_saved_states() == []


def test_locked_database_reports_blocked(tmp_path: Path):
    path = tmp_path / "seating.sqlite"
    store = SeatingStore(path, timeout=0).open()
    blocker = sqlite3.connect(path, isolation_level=None)
    blocker.execute("BEGIN EXCLUSIVE")
    try:
        with pytest.raises(StoreBlockedError) as excinfo:
            store.add_family({"familyName": "Sato"})
        assert "close other tabs" in str(excinfo.value)

        with pytest.raises(StoreBlockedError):
            SeatingStore(path, timeout=0).open()
    finally:
        blocker.execute("ROLLBACK")
        blocker.close()
        store.close()

    with SeatingStore(path, timeout=0) as reopened:
        reopened.add_family({"familyName": "Sato"})
        assert reopened.count("families") == 1
