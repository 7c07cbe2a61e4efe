import logging
from pathlib import Path

from pyscorer.ingest import classify_file, import_files, import_paths, load_sample_data

BATTING_CSV = "選手ID,名前,日付,打席数,打数,安打\nP001,山田,2024-06-01,4,4,2\n"
PITCHING_CSV = "選手ID,名前,日付,投球回,アウト数,球数\nP010,田中,2024-06-01,5,15,80\n"


def test_classify_by_suffix_then_signature():
    assert classify_file("export_b.csv", []) == "batting"
    assert classify_file("export_p.csv", []) == "pitching"
    assert classify_file("data.csv", [{"打席数": 4}]) == "batting"
    assert classify_file("data.csv", [{"球数": 80}]) == "pitching"
    assert classify_file("data.csv", [{"投球回": 5}]) == "pitching"
    assert classify_file("notes.csv", [{"メモ": "x"}]) is None


def test_import_replaces_datasets_wholesale():
    current_batting = [{"選手ID": "OLD"}]
    current_pitching = [{"選手ID": "OLDP"}]

    result = import_files(
        [("latest_b.csv", BATTING_CSV)],
        batting=current_batting,
        pitching=current_pitching,
    )

    assert result.imported_count == 1
    assert [row["選手ID"] for row in result.batting] == ["P001"]
    assert result.pitching == current_pitching
    assert result.message == "Imported 1 file(s)"


def test_unclassified_files_are_dropped(caplog):
    with caplog.at_level(logging.DEBUG, logger="pyscorer.ingest.files"):
        result = import_files(
            [("notes.txt", "a,b\n1,2\n"), ("stats.csv", PITCHING_CSV)],
        )

    assert result.imported_count == 1
    assert result.skipped_files == ["notes.txt"]
    assert len(result.pitching) == 1
    assert "Dropping unclassified file notes.txt" in caplog.text


def test_import_paths_reads_utf8_with_bom(tmp_path: Path):
    path = tmp_path / "week_b.csv"
    path.write_text("\ufeff" + BATTING_CSV, encoding="utf-8")

    result = import_paths([path])

    assert result.batting[0]["選手ID"] == "P001"


def test_sample_data_is_bundled():
    batting, pitching = load_sample_data()

    assert len(batting) == 12
    assert len(pitching) == 6
    assert classify_file("sample.csv", batting) == "batting"
    assert classify_file("sample.csv", pitching) == "pitching"
