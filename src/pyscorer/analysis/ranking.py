"""Leaderboards and scatter comparisons over aggregated player rows."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, List, Mapping, Sequence, Union

from pyscorer.config import LOWER_IS_BETTER, PITCHING_METRICS

from .aggregate import BattingAggregate, PitchingAggregate, counting_fields


_BATTING_DERIVED = ("singles", "total_bases", "avg", "obp", "slg", "ops", "bb_k", "iso_d")
_PITCHING_DERIVED = ("innings", "era", "whip", "kbb")

BATTING_METRIC_NAMES: frozenset[str] = frozenset(counting_fields(BattingAggregate) + _BATTING_DERIVED)
PITCHING_METRIC_NAMES: frozenset[str] = frozenset(counting_fields(PitchingAggregate) + _PITCHING_DERIVED)

AggregateRows = Union[Mapping[str, BattingAggregate], Sequence[BattingAggregate]]


@dataclass(frozen=True)
class RankingEntry:
    name: str
    value: float


@dataclass(frozen=True)
class ScatterPoint:
    name: str
    x: float
    y: float
    z: int


def is_pitching_metric(metric: str) -> bool:
    return metric in PITCHING_METRICS


def _rows(aggregates) -> list:
    if isinstance(aggregates, Mapping):
        return list(aggregates.values())
    return list(aggregates)


def _metric_value(agg, metric: str) -> float:
    value = getattr(agg, metric)
    # ops sums two rounded rates and can carry float noise
    return round(value, 3) if metric == "ops" else value


def _require_batting_metric(metric: str) -> None:
    if metric not in BATTING_METRIC_NAMES:
        raise ValueError(f"Unknown batting metric {metric!r}")


def rank(
    batting: AggregateRows,
    pitching: Union[Mapping[str, PitchingAggregate], Sequence[PitchingAggregate]],
    metric: str,
    min_sample: float = 0,
) -> List[RankingEntry]:
    """Order players by ``metric``.

    Pitching metrics draw from pitchers with at least ``min_sample`` innings;
    every other metric draws from batters with at least ``min_sample`` plate
    appearances. ERA and WHIP sort ascending, everything else descending.
    """

    if is_pitching_metric(metric):
        entries = [
            RankingEntry(name=agg.name, value=_metric_value(agg, metric))
            for agg in _rows(pitching)
            if agg.innings >= min_sample
        ]
    else:
        _require_batting_metric(metric)
        entries = [
            RankingEntry(name=agg.name, value=_metric_value(agg, metric))
            for agg in _rows(batting)
            if agg.pa >= min_sample
        ]

    entries.sort(key=lambda entry: entry.value, reverse=metric not in LOWER_IS_BETTER)
    return entries


def scatter(
    batting: AggregateRows,
    x_metric: str,
    y_metric: str,
    min_sample: float = 0,
) -> List[ScatterPoint]:
    """Pair two batting metrics per player; ``z`` carries plate appearances."""

    _require_batting_metric(x_metric)
    _require_batting_metric(y_metric)
    return [
        ScatterPoint(
            name=agg.name,
            x=_metric_value(agg, x_metric),
            y=_metric_value(agg, y_metric),
            z=agg.pa,
        )
        for agg in _rows(batting)
        if agg.pa >= min_sample
    ]


def top_entries(entries: Iterable[RankingEntry], limit: int | None) -> List[RankingEntry]:
    items = list(entries)
    return items[:limit] if limit is not None and limit > 0 else items


__all__ = [
    "BATTING_METRIC_NAMES",
    "PITCHING_METRIC_NAMES",
    "RankingEntry",
    "ScatterPoint",
    "is_pitching_metric",
    "rank",
    "scatter",
    "top_entries",
]
