"""Game-log analysis utilities (filtering, aggregation, ranking)."""

from .aggregate import (
    BattingAggregate,
    PitchingAggregate,
    TeamSummary,
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
from .filtering import ALL_CATEGORIES, FilterCriteria, filter_records
from .ranking import RankingEntry, ScatterPoint, rank, scatter

__all__ = [
    "ALL_CATEGORIES",
    "BattingAggregate",
    "FilterCriteria",
    "PitchingAggregate",
    "RankingEntry",
    "ScatterPoint",
    "TeamSummary",
    "aggregate_batting",
    "aggregate_pitching",
    "filter_records",
    "monthly_batting_trend",
    "monthly_pitching_trend",
    "player_batting_trend",
    "player_pitching_trend",
    "rank",
    "safe_div",
    "scatter",
    "sorted_batting",
    "sorted_pitching",
    "team_summary",
]
