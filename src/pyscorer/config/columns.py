"""Column layouts for scorer CSV exports (batting and pitching)."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Iterable, Mapping, Tuple


# Identifier/text columns that are never coerced to numbers by the parser.
TEXT_COLUMNS: frozenset[str] = frozenset(
    {
        "選手ID",
        "名前",
        "日付",
        "試合ID",
        "スコア",
        "カテゴリ",
        "球場",
        "タイトル",
        "背番号",
        "先攻",
        "後攻",
    }
)

# Record attribute -> CSV header shared by both layouts.
IDENTITY_COLUMNS: Mapping[str, str] = {
    "player_id": "選手ID",
    "name": "名前",
    "number": "背番号",
    "date": "日付",
    "game_id": "試合ID",
    "title": "タイトル",
    "away_team": "先攻",
    "home_team": "後攻",
    "venue": "球場",
    "score": "スコア",
}

# Substrings of the home-team column that identify our own franchise.
HOME_FRANCHISE_FRAGMENTS: Tuple[str, ...] = ("ありんこ", "アントス")


@dataclass(frozen=True)
class ColumnLayout:
    kind: str
    stat_columns: Mapping[str, str]
    filename_suffix: str
    signature_columns: Tuple[str, ...]

    @property
    def columns(self) -> Mapping[str, str]:
        return {**IDENTITY_COLUMNS, **self.stat_columns}


_LAYOUTS: Dict[str, ColumnLayout] = {
    "batting": ColumnLayout(
        kind="batting",
        stat_columns={
            "pa": "打席数",
            "ab": "打数",
            "h": "安打",
            "doubles": "二塁打",
            "triples": "三塁打",
            "hr": "本塁打",
            "rbi": "打点",
            "runs": "得点",
            "so": "三振",
            "bb": "四球",
            "hbp": "死球",
            "sb": "盗塁",
            "sf": "犠飛",
            "sac": "犠打",
        },
        filename_suffix="_b.csv",
        signature_columns=("打席数",),
    ),
    "pitching": ColumnLayout(
        kind="pitching",
        stat_columns={
            "outs": "アウト数",
            "h": "安打",
            "r": "失点",
            "er": "自責点",
            "bb": "四球",
            "so": "三振",
            "win": "勝数",
            "loss": "負数",
            "sv": "セーブ",
            "pitches": "球数",
            "strikes": "S数",
        },
        filename_suffix="_p.csv",
        signature_columns=("投球回", "球数"),
    ),
}


def iter_layouts() -> Iterable[ColumnLayout]:
    """Return an iterator of all configured layouts (batting first)."""

    return _LAYOUTS.values()


def get_layout(kind: str) -> ColumnLayout:
    """Fetch a layout by kind, raising KeyError if missing."""

    key = kind.lower()
    if key not in _LAYOUTS:
        raise KeyError(f"No column layout configured for kind={kind!r}")
    return _LAYOUTS[key]


@dataclass(frozen=True)
class MetricSpec:
    key: str
    label: str
    source: str
    lower_is_better: bool = False


_METRICS: Tuple[MetricSpec, ...] = (
    MetricSpec("avg", "AVG", "batting"),
    MetricSpec("ops", "OPS", "batting"),
    MetricSpec("hr", "HR", "batting"),
    MetricSpec("rbi", "RBI", "batting"),
    MetricSpec("sb", "SB", "batting"),
    MetricSpec("obp", "OBP", "batting"),
    MetricSpec("slg", "SLG", "batting"),
    MetricSpec("bb", "BB", "batting"),
    MetricSpec("bb_k", "BB/K", "batting"),
    MetricSpec("iso_d", "IsoD", "batting"),
    MetricSpec("so", "K (pitching)", "pitching"),
    MetricSpec("win", "W", "pitching"),
    MetricSpec("era", "ERA", "pitching", lower_is_better=True),
    MetricSpec("whip", "WHIP", "pitching", lower_is_better=True),
    MetricSpec("kbb", "K/BB", "pitching"),
)

METRICS: Mapping[str, MetricSpec] = {metric.key: metric for metric in _METRICS}

PITCHING_METRICS: frozenset[str] = frozenset(
    metric.key for metric in _METRICS if metric.source == "pitching"
)
LOWER_IS_BETTER: frozenset[str] = frozenset(
    metric.key for metric in _METRICS if metric.lower_is_better
)
