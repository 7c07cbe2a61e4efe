"""Persist and load CLI filter profiles."""

from __future__ import annotations

import json
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from pyscorer.analysis import ALL_CATEGORIES, FilterCriteria


@dataclass
class FilterProfile:
    start_date: Optional[str] = None
    end_date: Optional[str] = None
    team_keyword: Optional[str] = None
    category: str = ALL_CATEGORIES
    metric: Optional[str] = None
    min_sample: Optional[float] = None

    @classmethod
    def load(cls, path: Path) -> "FilterProfile":
        data = json.loads(path.read_text(encoding="utf-8"))
        return cls(
            start_date=data.get("start_date"),
            end_date=data.get("end_date"),
            team_keyword=data.get("team_keyword"),
            category=data.get("category") or ALL_CATEGORIES,
            metric=data.get("metric"),
            min_sample=data.get("min_sample"),
        )

    def save(self, path: Path) -> None:
        payload = {
            "start_date": self.start_date,
            "end_date": self.end_date,
            "team_keyword": self.team_keyword,
            "category": self.category,
            "metric": self.metric,
            "min_sample": self.min_sample,
        }
        path.write_text(json.dumps(payload, indent=2, ensure_ascii=False), encoding="utf-8")

    def merged(self, other: "FilterProfile") -> "FilterProfile":
        """Fields set on ``other`` win over this profile's values."""

        return FilterProfile(
            start_date=other.start_date or self.start_date,
            end_date=other.end_date or self.end_date,
            team_keyword=other.team_keyword or self.team_keyword,
            category=other.category if other.category != ALL_CATEGORIES else self.category,
            metric=other.metric or self.metric,
            min_sample=other.min_sample if other.min_sample is not None else self.min_sample,
        )

    def criteria(self) -> FilterCriteria:
        return FilterCriteria(
            start_date=self.start_date,
            end_date=self.end_date,
            team_keyword=self.team_keyword,
            category=self.category,
        )
