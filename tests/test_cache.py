from datetime import datetime
from pathlib import Path

from pyscorer.persistence import BATTING_KEY, DATE_KEY, DatasetCache


def test_save_and_load_round_trip(tmp_path: Path):
    cache = DatasetCache(tmp_path / "cache.sqlite")
    batting = [{"選手ID": "P001", "打数": 4, "安打": 2}]
    pitching = [{"選手ID": "P010", "アウト数": 18}]

    stamp = cache.save(batting, pitching, imported_at=datetime(2024, 5, 1, 12, 30))

    assert stamp == "2024-05-01 12:30:00"
    loaded = DatasetCache(tmp_path / "cache.sqlite").load()
    assert loaded.batting == batting
    assert loaded.pitching == pitching
    assert loaded.imported_at == stamp


def test_load_without_batting_rows(tmp_path: Path):
    cache = DatasetCache(tmp_path / "cache.sqlite")

    assert cache.load() is None
    cache.save([], [{"選手ID": "P010"}])
    assert cache.load() is None


def test_corrupt_payload_is_ignored(tmp_path: Path):
    cache = DatasetCache(tmp_path / "cache.sqlite")
    cache.set_item(BATTING_KEY, "{not json")

    assert cache.load() is None


def test_clear_removes_the_three_keys(tmp_path: Path):
    cache = DatasetCache(tmp_path / "cache.sqlite")
    cache.save([{"選手ID": "P001"}], [])
    cache.set_item("unrelated", "keep")

    cache.clear()

    assert cache.load() is None
    assert cache.get_item(DATE_KEY) is None
    assert cache.get_item("unrelated") == "keep"
