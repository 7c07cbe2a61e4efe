"""Pure view-model builder for the stats dashboard.

``recompute`` rebuilds every table and series from scratch for the given
state. Nothing is cached between calls, so a view always matches its filters.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from typing import Any, Dict, List, Literal, Mapping, Optional, Sequence, Union

from pyscorer.analysis import (
    FilterCriteria,
    filter_records,
    rank,
    scatter,
    sorted_batting,
    sorted_pitching,
    team_summary,
)
from pyscorer.analysis.aggregate import (
    aggregate_batting,
    aggregate_pitching,
    as_batting_records,
    as_pitching_records,
    monthly_batting_trend,
    monthly_pitching_trend,
    player_batting_trend,
    player_pitching_trend,
)
from pyscorer.models import BattingRecord, PitchingRecord


_UNNUMBERED = 999


@dataclass(frozen=True)
class PlayerEntry:
    player_key: str
    name: str
    number: Optional[str]


@dataclass
class DashboardState:
    batting: Sequence[Union[BattingRecord, Mapping[str, Any]]] = ()
    pitching: Sequence[Union[PitchingRecord, Mapping[str, Any]]] = ()
    filters: FilterCriteria = field(default_factory=FilterCriteria)
    trend_target: Literal["team", "player"] = "team"
    trend_type: Literal["batting", "pitching"] = "batting"
    selected_player: Optional[str] = None
    comparison_metric: str = "avg"
    min_sample: float = 0
    scatter_x: str = "obp"
    scatter_y: str = "slg"


@dataclass
class DashboardView:
    categories: List[str]
    players: List[PlayerEntry]
    selected_player: Optional[str]
    batting_rows: int
    pitching_rows: int
    batting: List[Dict[str, Any]]
    pitching: List[Dict[str, Any]]
    team: Optional[Dict[str, Any]]
    monthly_trend: List[Dict[str, Any]]
    player_trend: List[Dict[str, Any]]
    ranking: List[Dict[str, Any]]
    scatter: List[Dict[str, Any]]


def _jersey_order(entry: PlayerEntry) -> int:
    try:
        return int(entry.number) if entry.number else _UNNUMBERED
    except ValueError:
        return _UNNUMBERED


def player_directory(
    batting: Sequence[BattingRecord],
    pitching: Sequence[PitchingRecord],
) -> List[PlayerEntry]:
    """Unique players across both datasets, ordered by jersey number."""

    seen: Dict[str, PlayerEntry] = {}
    for record in [*batting, *pitching]:
        key = record.player_key
        if key not in seen:
            seen[key] = PlayerEntry(player_key=key, name=record.name, number=record.number)
    return sorted(seen.values(), key=_jersey_order)


def categories_of(batting: Sequence[BattingRecord]) -> List[str]:
    return sorted({record.title for record in batting if record.title})


def recompute(state: DashboardState) -> DashboardView:
    batting_records = as_batting_records(state.batting)
    pitching_records = as_pitching_records(state.pitching)

    players = player_directory(batting_records, pitching_records)
    selected = state.selected_player or (players[0].player_key if players else None)

    filtered_batting = filter_records(batting_records, state.filters)
    filtered_pitching = filter_records(pitching_records, state.filters)
    batting = aggregate_batting(filtered_batting)
    pitching = aggregate_pitching(filtered_pitching)
    team = team_summary(filtered_batting, batting, pitching)

    if state.trend_type == "pitching":
        monthly = monthly_pitching_trend(filtered_pitching)
    else:
        monthly = monthly_batting_trend(filtered_batting)

    player_trend: List[Dict[str, Any]] = []
    if state.trend_target == "player" and selected is not None:
        if state.trend_type == "pitching":
            player_trend = [point.to_dict() for point in player_pitching_trend(filtered_pitching, selected)]
        else:
            player_trend = [point.to_dict() for point in player_batting_trend(filtered_batting, selected)]

    ranking = rank(batting, pitching, state.comparison_metric, state.min_sample)
    points = scatter(batting, state.scatter_x, state.scatter_y, state.min_sample)

    return DashboardView(
        categories=categories_of(batting_records),
        players=players,
        selected_player=selected,
        batting_rows=len(filtered_batting),
        pitching_rows=len(filtered_pitching),
        batting=[agg.to_dict() for agg in sorted_batting(batting)],
        pitching=[agg.to_dict() for agg in sorted_pitching(pitching)],
        team=asdict(team) if team is not None else None,
        monthly_trend=[row.to_dict() for row in monthly],
        player_trend=player_trend,
        ranking=[asdict(entry) for entry in ranking],
        scatter=[asdict(point) for point in points],
    )


__all__ = [
    "DashboardState",
    "DashboardView",
    "PlayerEntry",
    "categories_of",
    "player_directory",
    "recompute",
]
