import pytest

from pyscorer.analysis import (
    BattingAggregate,
    PitchingAggregate,
    aggregate_batting,
    aggregate_pitching,
    monthly_batting_trend,
    monthly_pitching_trend,
    player_batting_trend,
    player_pitching_trend,
    safe_div,
    sorted_batting,
    sorted_pitching,
    team_summary,
)
from pyscorer.analysis.aggregate import as_batting_records, counting_fields, opponent_for
from pyscorer.ingest import load_sample_data, parse_csv
from pyscorer.models import BattingRecord, PitchingRecord


@pytest.fixture(scope="module")
def sample():
    return load_sample_data()


def test_batting_average_from_minimal_export():
    aggregates = aggregate_batting(parse_csv("日付,打数,安打\n2024-04-01,4,2\n"))

    assert list(aggregates.values())[0].avg == 0.5


def test_era_uses_seven_inning_games():
    pitching = aggregate_pitching([PitchingRecord(player_id="P1", outs=18, er=3)])

    assert pitching["P1"].era == 3.50
    assert pitching["P1"].display_innings == "6"


def test_display_innings_uses_thirds():
    aggregate = PitchingAggregate(player_key="P1", outs=19)

    assert aggregate.display_innings == "6.1"
    assert aggregate.innings == pytest.approx(19 / 3)


def test_zero_denominators_yield_zero():
    batting = BattingAggregate(player_key="x")
    pitching = PitchingAggregate(player_key="y", er=3, bb=2)

    assert safe_div(1, 0) == 0
    assert (batting.avg, batting.obp, batting.slg, batting.ops, batting.bb_k) == (0, 0, 0, 0, 0)
    assert (pitching.era, pitching.whip, pitching.kbb) == (0, 0, 0)


def test_player_totals_and_rates(sample):
    batting = aggregate_batting(sample[0])
    yamada = batting["P001"]

    assert list(batting) == ["P001", "P002", "P003", "P004"]
    assert (yamada.games, yamada.pa, yamada.ab, yamada.h) == (4, 15, 13, 4)
    assert yamada.singles == 2
    assert yamada.total_bases == 8
    assert yamada.avg == 0.308
    assert yamada.obp == 0.4
    assert yamada.slg == 0.615
    assert yamada.bb_k == 0.67


def test_ops_is_exact_sum_of_components(sample):
    for aggregate in aggregate_batting(sample[0]).values():
        assert aggregate.ops == aggregate.obp + aggregate.slg


def test_default_orderings(sample):
    batting = aggregate_batting(sample[0])
    pitching = aggregate_pitching(sample[1])

    assert [agg.player_key for agg in sorted_batting(batting)] == ["P002", "P001", "P003", "P004"]
    assert [agg.player_key for agg in sorted_pitching(pitching)] == ["P010", "P011"]
    assert pitching["P010"].era == 1.94


def test_to_dict_carries_derived_metrics(sample):
    payload = aggregate_batting(sample[0])["P001"].to_dict()

    assert payload["name"] == "山田 太郎"
    assert payload["avg"] == 0.308
    assert payload["ops"] == 1.015
    assert "iso_d" in payload


def test_team_summary(sample):
    batting_records = as_batting_records(sample[0])
    summary = team_summary(batting_records, aggregate_batting(batting_records), aggregate_pitching(sample[1]))

    assert summary.total_games == 4
    assert summary.total_runs == 7
    assert summary.total_hr == 2
    assert summary.team_avg == 0.343
    assert summary.team_era == 2.85
    assert team_summary([], {}, {}) is None


def test_monthly_batting_trend(sample):
    rows = monthly_batting_trend(sample[0])

    assert [row.month for row in rows] == ["2024-04", "2024-05"]
    assert sum(row.totals.ab for row in rows) == 35
    payload = rows[0].to_dict()
    assert payload["month"] == "2024-04"
    assert "player_key" not in payload


def test_monthly_pitching_trend(sample):
    rows = monthly_pitching_trend(sample[1])

    assert [row.totals.outs for row in rows] == [42, 39]


def test_opponent_rule():
    home_game = BattingRecord(away_team="緑町ファイターズ", home_team="ありんこアントス")
    away_game = BattingRecord(away_team="ありんこアントス", home_team="青葉イーグルス")

    assert opponent_for(home_game) == "緑町ファイターズ"
    assert opponent_for(away_game) == "青葉イーグルス"


def test_player_batting_trend_is_cumulative(sample):
    points = player_batting_trend(sample[0], "P001")

    assert [point.opponent for point in points] == ["青葉イーグルス", "緑町ファイターズ", "港南スターズ", "西台バッファローズ"]
    assert [point.totals.avg for point in points] == [0.667, 0.429, 0.3, 0.308]
    for earlier, later in zip(points, points[1:]):
        for name in counting_fields(BattingAggregate):
            assert getattr(later.totals, name) >= getattr(earlier.totals, name), name
    assert [point.totals.games for point in points] == [1, 2, 3, 4]
    assert points[-1].to_dict()["games"] == 4
    assert points[-1].to_dict()["ops"] == 1.015


def test_player_trend_sorts_by_date_stably():
    records = [
        BattingRecord(player_id="P1", date="2024-05-01", game_id="late", ab=1, h=1),
        BattingRecord(player_id="P1", date="2024-04-01", game_id="early", ab=1),
        BattingRecord(player_id="P1", date="", game_id="undated", ab=1),
    ]

    points = player_batting_trend(records, "P1")

    assert [point.game_id for point in points] == ["undated", "early", "late"]


def test_player_pitching_trend_per_game_fields(sample):
    points = player_pitching_trend(sample[1], "P010")

    first = points[0]
    assert first.innings == 6.0
    assert first.strike_rate == 63.0
    assert first.pitches == 92
    assert first.totals.era == 3.5
    assert points[-1].totals.outs == 65
    for earlier, later in zip(points, points[1:]):
        for name in counting_fields(PitchingAggregate):
            assert getattr(later.totals, name) >= getattr(earlier.totals, name), name
    assert [point.totals.games for point in points] == [1, 2, 3, 4]
    assert player_pitching_trend(sample[1], "nobody") == []


def test_average_stays_within_unit_interval(sample):
    for aggregate in aggregate_batting(sample[0]).values():
        if aggregate.ab:
            assert 0 <= aggregate.avg <= 1
        else:
            assert aggregate.avg == 0
