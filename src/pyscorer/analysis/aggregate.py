"""Fold filtered game logs into per-player, team, monthly and running totals.

Every derived rate stat is a read-only property over the counting totals, so
an aggregate can never hold a ratio that disagrees with its totals. All
divisions go through :func:`safe_div` and yield 0 on a zero denominator.
"""

from __future__ import annotations

import logging
from dataclasses import asdict, dataclass, fields, replace
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence, Tuple, Union

from pyscorer.config import HOME_FRANCHISE_FRAGMENTS, get_layout
from pyscorer.ingest.dates import month_key, normalize_date
from pyscorer.models import BattingRecord, GameRecord, PitchingRecord


logger = logging.getLogger(__name__)

# 7-inning games: ERA scales earned runs to a full game of seven innings.
ERA_INNINGS = 7

_BATTING_COUNTS: Tuple[str, ...] = tuple(get_layout("batting").stat_columns)
_PITCHING_COUNTS: Tuple[str, ...] = tuple(get_layout("pitching").stat_columns)


def safe_div(numerator: float, denominator: float) -> float:
    return numerator / denominator if denominator else 0.0


def as_batting_records(rows: Iterable[Union[BattingRecord, Mapping[str, Any]]]) -> List[BattingRecord]:
    return [row if isinstance(row, BattingRecord) else BattingRecord.from_raw(row) for row in rows]


def as_pitching_records(rows: Iterable[Union[PitchingRecord, Mapping[str, Any]]]) -> List[PitchingRecord]:
    return [row if isinstance(row, PitchingRecord) else PitchingRecord.from_raw(row) for row in rows]


@dataclass
class BattingAggregate:
    player_key: str
    player_id: Optional[str] = None
    name: str = ""
    number: Optional[str] = None
    games: int = 0
    pa: int = 0
    ab: int = 0
    h: int = 0
    doubles: int = 0
    triples: int = 0
    hr: int = 0
    rbi: int = 0
    runs: int = 0
    so: int = 0
    bb: int = 0
    hbp: int = 0
    sb: int = 0
    sf: int = 0
    sac: int = 0

    def fold(self, record: BattingRecord) -> None:
        self.games += 1
        for attr in _BATTING_COUNTS:
            setattr(self, attr, getattr(self, attr) + getattr(record, attr))

    @property
    def singles(self) -> int:
        return self.h - self.doubles - self.triples - self.hr

    @property
    def total_bases(self) -> int:
        return self.singles + 2 * self.doubles + 3 * self.triples + 4 * self.hr

    def _avg(self) -> float:
        return safe_div(self.h, self.ab)

    def _obp(self) -> float:
        return safe_div(self.h + self.bb + self.hbp, self.ab + self.bb + self.hbp + self.sf)

    @property
    def avg(self) -> float:
        return round(self._avg(), 3)

    @property
    def obp(self) -> float:
        return round(self._obp(), 3)

    @property
    def slg(self) -> float:
        return round(safe_div(self.total_bases, self.ab), 3)

    @property
    def ops(self) -> float:
        return self.obp + self.slg

    @property
    def bb_k(self) -> float:
        return round(safe_div(self.bb + self.hbp, self.so), 2)

    @property
    def iso_d(self) -> float:
        return round(self._obp() - self._avg(), 3)

    def to_dict(self) -> dict[str, Any]:
        payload = asdict(self)
        payload.update(
            avg=self.avg,
            obp=self.obp,
            slg=self.slg,
            ops=round(self.ops, 3),
            bb_k=self.bb_k,
            iso_d=self.iso_d,
        )
        return payload


@dataclass
class PitchingAggregate:
    player_key: str
    player_id: Optional[str] = None
    name: str = ""
    number: Optional[str] = None
    games: int = 0
    outs: int = 0
    h: int = 0
    r: int = 0
    er: int = 0
    bb: int = 0
    so: int = 0
    win: int = 0
    loss: int = 0
    sv: int = 0
    pitches: int = 0
    strikes: int = 0

    def fold(self, record: PitchingRecord) -> None:
        self.games += 1
        for attr in _PITCHING_COUNTS:
            setattr(self, attr, getattr(self, attr) + getattr(record, attr))

    @property
    def innings(self) -> float:
        return self.outs / 3

    @property
    def display_innings(self) -> str:
        whole, thirds = divmod(self.outs, 3)
        return f"{whole}.{thirds}" if thirds else str(whole)

    @property
    def era(self) -> float:
        return round(safe_div(self.er * ERA_INNINGS, self.innings), 2)

    @property
    def whip(self) -> float:
        return round(safe_div(self.bb + self.h, self.innings), 2)

    @property
    def kbb(self) -> float:
        return round(safe_div(self.so, self.bb), 2)

    def to_dict(self) -> dict[str, Any]:
        payload = asdict(self)
        payload.update(
            innings=self.innings,
            display_innings=self.display_innings,
            era=self.era,
            whip=self.whip,
            kbb=self.kbb,
        )
        return payload


def _fold_players(records: Sequence[GameRecord], factory) -> Dict[str, Any]:
    aggregates: Dict[str, Any] = {}
    for record in records:
        key = record.player_key
        aggregate = aggregates.get(key)
        if aggregate is None:
            aggregate = factory(
                player_key=key,
                player_id=record.player_id,
                name=record.name,
                number=record.number,
            )
            aggregates[key] = aggregate
        aggregate.fold(record)
    return aggregates


def aggregate_batting(records: Iterable[Union[BattingRecord, Mapping[str, Any]]]) -> Dict[str, BattingAggregate]:
    """Group batting lines by player identity, first appearance first."""

    return _fold_players(as_batting_records(records), BattingAggregate)


def aggregate_pitching(records: Iterable[Union[PitchingRecord, Mapping[str, Any]]]) -> Dict[str, PitchingAggregate]:
    """Group pitching lines by player identity, first appearance first."""

    return _fold_players(as_pitching_records(records), PitchingAggregate)


def sorted_batting(aggregates: Mapping[str, BattingAggregate]) -> List[BattingAggregate]:
    return sorted(aggregates.values(), key=lambda agg: agg.avg, reverse=True)


def sorted_pitching(aggregates: Mapping[str, PitchingAggregate]) -> List[PitchingAggregate]:
    return sorted(aggregates.values(), key=lambda agg: agg.era)


@dataclass(frozen=True)
class TeamSummary:
    total_games: int
    total_ab: int
    total_h: int
    total_runs: int
    total_hr: int
    total_er: int
    total_outs: int
    team_avg: float
    team_era: float


def team_summary(
    batting_records: Sequence[BattingRecord],
    batting: Mapping[str, BattingAggregate],
    pitching: Mapping[str, PitchingAggregate],
) -> Optional[TeamSummary]:
    """Sum every player in the filtered set; ``None`` without batting lines."""

    if not batting_records:
        return None
    game_ids = {record.game_id for record in batting_records}
    total_ab = sum(agg.ab for agg in batting.values())
    total_h = sum(agg.h for agg in batting.values())
    total_er = sum(agg.er for agg in pitching.values())
    total_outs = sum(agg.outs for agg in pitching.values())
    return TeamSummary(
        total_games=len(game_ids),
        total_ab=total_ab,
        total_h=total_h,
        total_runs=sum(agg.runs for agg in batting.values()),
        total_hr=sum(agg.hr for agg in batting.values()),
        total_er=total_er,
        total_outs=total_outs,
        team_avg=round(safe_div(total_h, total_ab), 3),
        team_era=round(safe_div(total_er * ERA_INNINGS, total_outs / 3), 2),
    )


@dataclass(frozen=True)
class MonthlyTrendRow:
    month: str
    totals: Union[BattingAggregate, PitchingAggregate]

    def to_dict(self) -> dict[str, Any]:
        payload = self.totals.to_dict()
        for key in ("player_key", "player_id", "name", "number"):
            payload.pop(key, None)
        payload["month"] = self.month
        return payload


def _monthly(records: Sequence[GameRecord], factory) -> List[MonthlyTrendRow]:
    months: Dict[str, Any] = {}
    for record in records:
        key = month_key(record.date)
        if key is None:
            logger.debug("Skipping %s row without a month: %r", record.player_key, record.date)
            continue
        if key not in months:
            months[key] = factory(player_key=key, name=key)
        months[key].fold(record)
    return [MonthlyTrendRow(month=key, totals=months[key]) for key in sorted(months)]


def monthly_batting_trend(records: Iterable[Union[BattingRecord, Mapping[str, Any]]]) -> List[MonthlyTrendRow]:
    return _monthly(as_batting_records(records), BattingAggregate)


def monthly_pitching_trend(records: Iterable[Union[PitchingRecord, Mapping[str, Any]]]) -> List[MonthlyTrendRow]:
    return _monthly(as_pitching_records(records), PitchingAggregate)


def opponent_for(record: GameRecord) -> str:
    """Pick the other club: the away side when we are home, else the home side."""

    home = record.home_team or ""
    away = record.away_team or ""
    if any(fragment in home for fragment in HOME_FRANCHISE_FRAGMENTS):
        return away
    return home


def _player_games(records: Sequence[GameRecord], player_key: str) -> List[GameRecord]:
    rows = [record for record in records if record.player_key == player_key]
    rows.sort(key=lambda record: normalize_date(record.date))
    return rows


@dataclass(frozen=True)
class BattingTrendPoint:
    date: Optional[str]
    game_id: Optional[str]
    opponent: str
    totals: BattingAggregate

    def to_dict(self) -> dict[str, Any]:
        return {
            "date": self.date,
            "game": self.game_id,
            "opponent": self.opponent,
            "games": self.totals.games,
            "ab": self.totals.ab,
            "h": self.totals.h,
            "avg": self.totals.avg,
            "obp": self.totals.obp,
            "slg": self.totals.slg,
            "ops": round(self.totals.ops, 3),
        }


@dataclass(frozen=True)
class PitchingTrendPoint:
    date: Optional[str]
    game_id: Optional[str]
    opponent: str
    totals: PitchingAggregate
    innings: float
    strike_rate: float
    bb: int
    pitches: int

    def to_dict(self) -> dict[str, Any]:
        return {
            "date": self.date,
            "game": self.game_id,
            "opponent": self.opponent,
            "games": self.totals.games,
            "era": self.totals.era,
            "whip": self.totals.whip,
            "kbb": self.totals.kbb,
            "innings": self.innings,
            "strike_rate": self.strike_rate,
            "bb": self.bb,
            "pitches": self.pitches,
        }


def player_batting_trend(
    records: Iterable[Union[BattingRecord, Mapping[str, Any]]],
    player_key: str,
) -> List[BattingTrendPoint]:
    """Running batting totals for one player, one point per game in date order."""

    running = BattingAggregate(player_key=player_key)
    points: List[BattingTrendPoint] = []
    for record in _player_games(as_batting_records(records), player_key):
        running.fold(record)
        points.append(
            BattingTrendPoint(
                date=record.date,
                game_id=record.game_id,
                opponent=opponent_for(record),
                totals=replace(running),
            )
        )
    return points


def player_pitching_trend(
    records: Iterable[Union[PitchingRecord, Mapping[str, Any]]],
    player_key: str,
) -> List[PitchingTrendPoint]:
    """Running pitching totals for one player; innings and strike rate are per game."""

    running = PitchingAggregate(player_key=player_key)
    points: List[PitchingTrendPoint] = []
    for record in _player_games(as_pitching_records(records), player_key):
        running.fold(record)
        points.append(
            PitchingTrendPoint(
                date=record.date,
                game_id=record.game_id,
                opponent=opponent_for(record),
                totals=replace(running),
                innings=round(record.outs / 3, 1),
                strike_rate=round(safe_div(record.strikes, record.pitches) * 100, 1),
                bb=record.bb,
                pitches=record.pitches,
            )
        )
    return points


def counting_fields(aggregate_type) -> Tuple[str, ...]:
    """Names of the numeric fields on an aggregate dataclass."""

    return tuple(f.name for f in fields(aggregate_type) if f.type in ("int", int))


__all__ = [
    "ERA_INNINGS",
    "BattingAggregate",
    "BattingTrendPoint",
    "MonthlyTrendRow",
    "PitchingAggregate",
    "PitchingTrendPoint",
    "TeamSummary",
    "aggregate_batting",
    "aggregate_pitching",
    "as_batting_records",
    "as_pitching_records",
    "monthly_batting_trend",
    "monthly_pitching_trend",
    "opponent_for",
    "player_batting_trend",
    "player_pitching_trend",
    "safe_div",
    "sorted_batting",
    "sorted_pitching",
    "team_summary",
]
