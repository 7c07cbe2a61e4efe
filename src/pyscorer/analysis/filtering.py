"""Helpers for slicing game-log records by date, team and category."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import List, Optional, Sequence, TypeVar

from pyscorer.ingest.dates import normalize_date
from pyscorer.models import GameRecord


RecordT = TypeVar("RecordT", bound=GameRecord)

ALL_CATEGORIES = "all"


@dataclass(frozen=True)
class FilterCriteria:
    """Filtering configuration; unset fields impose no constraint."""

    start_date: str | None = None
    end_date: str | None = None
    team_keyword: str | None = None
    category: str | None = ALL_CATEGORIES


@dataclass(frozen=True)
class _Bounds:
    start: Optional[datetime]
    end_exclusive: Optional[datetime]
    keyword: Optional[str]
    category: Optional[str]


def _resolve(criteria: FilterCriteria) -> _Bounds:
    start = normalize_date(criteria.start_date) if criteria.start_date else None
    end_exclusive = None
    if criteria.end_date:
        # The end date covers its whole calendar day.
        end_exclusive = normalize_date(criteria.end_date) + timedelta(days=1)
    keyword = criteria.team_keyword.lower() if criteria.team_keyword else None
    category = criteria.category if criteria.category and criteria.category != ALL_CATEGORIES else None
    return _Bounds(start=start, end_exclusive=end_exclusive, keyword=keyword, category=category)


def _passes_criteria(record: GameRecord, bounds: _Bounds) -> bool:
    if bounds.start is not None or bounds.end_exclusive is not None:
        played = normalize_date(record.date)
        if bounds.start is not None and played < bounds.start:
            return False
        if bounds.end_exclusive is not None and played >= bounds.end_exclusive:
            return False

    if bounds.keyword is not None:
        away = (record.away_team or "").lower()
        home = (record.home_team or "").lower()
        if bounds.keyword not in away and bounds.keyword not in home:
            return False

    if bounds.category is not None and record.title != bounds.category:
        return False

    return True


def filter_records(records: Sequence[RecordT], criteria: FilterCriteria) -> List[RecordT]:
    """Return the records matching every active constraint, in input order."""

    bounds = _resolve(criteria)
    return [record for record in records if _passes_criteria(record, bounds)]


__all__ = [
    "ALL_CATEGORIES",
    "FilterCriteria",
    "filter_records",
]
