import csv
import json
from pathlib import Path

import pytest

from pyscorer.cli import main
from pyscorer.config_loader import FilterProfile


def test_report_from_sample_data(tmp_path: Path, capsys):
    output = tmp_path / "batting.csv"
    report = tmp_path / "report.json"

    main(["--output", str(output), "--report", str(report), "--top", "2"])

    out = capsys.readouterr().out
    assert "Using bundled sample data" in out
    assert "Team: 4 games" in out
    assert "佐藤 健 0.462" in out

    with output.open(encoding="utf-8") as f:
        rows = list(csv.DictReader(f))
    assert [row["player_key"] for row in rows] == ["P002", "P001", "P003", "P004"]
    assert rows[1]["ops"] == "1.015"
    assert (tmp_path / "batting_pitching.csv").exists()

    payload = json.loads(report.read_text(encoding="utf-8"))
    assert payload["team"]["total_games"] == 4
    assert len(payload["leaders"]) == 2


def test_filters_and_pitching_metric(tmp_path: Path, capsys):
    main(
        [
            "--category",
            "市長杯",
            "--metric",
            "era",
            "--player",
            "P010",
            "--output",
            str(tmp_path / "out.csv"),
        ]
    )

    out = capsys.readouterr().out
    assert "Filtered 6 batting and 3 pitching rows" in out
    assert "Leaders by ERA:" in out
    assert "vs 港南スターズ" in out


def test_imports_files_and_skips_unknown(tmp_path: Path, capsys):
    batting = tmp_path / "week_b.csv"
    batting.write_text("選手ID,名前,日付,打席数,打数,安打\nP1,A,2024-06-01,4,4,2\n", encoding="utf-8")
    notes = tmp_path / "notes.csv"
    notes.write_text("a,b\n1,2\n", encoding="utf-8")

    main([str(batting), str(notes), "--output", str(tmp_path / "out.csv"), "--scatter", "avg", "obp"])

    out = capsys.readouterr().out
    assert "Imported 1 file(s)" in out
    assert "Skipped unrecognised files: notes.csv" in out
    assert "avg vs obp:" in out
    assert "A: 0.500, 0.500 (4 PA)" in out


def test_filter_profiles_round_trip(tmp_path: Path, capsys):
    profile_path = tmp_path / "filters.json"
    main(["--team", "イーグルス", "--save-filters", str(profile_path), "--output", str(tmp_path / "a.csv")])

    saved = FilterProfile.load(profile_path)
    assert saved.team_keyword == "イーグルス"
    assert saved.category == "all"

    capsys.readouterr()
    main(["--load-filters", str(profile_path), "--output", str(tmp_path / "b.csv")])
    assert "Team: 1 games" in capsys.readouterr().out


def test_profile_merge_prefers_explicit_values():
    base = FilterProfile(start_date="2024-04-01", category="春季リーグ", min_sample=5)
    override = FilterProfile(start_date="2024-05-01")

    merged = base.merged(override)

    assert merged.start_date == "2024-05-01"
    assert merged.category == "春季リーグ"
    assert merged.min_sample == 5
    assert merged.criteria().category == "春季リーグ"


def test_bad_scatter_metric_exits(tmp_path: Path):
    with pytest.raises(SystemExit):
        main(["--scatter", "era", "obp", "--output", str(tmp_path / "out.csv")])
