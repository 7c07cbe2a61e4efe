"""Typed game-log records shared across ingestion and analysis layers."""

from __future__ import annotations

import logging
import math
from typing import Any, ClassVar, Mapping, Optional

from pydantic import BaseModel, Field
from pydantic.config import ConfigDict

from pyscorer.config import get_layout


logger = logging.getLogger(__name__)


def _as_count(value: Any) -> int:
    """Coerce a raw cell to a non-negative count; anything unusable is 0."""

    if isinstance(value, bool) or value is None:
        return 0
    if isinstance(value, (int, float)):
        number = float(value)
    else:
        text = str(value).strip()
        if not text:
            return 0
        try:
            number = float(text)
        except ValueError:
            logger.debug("Ignoring non-numeric count %r", value)
            return 0
    if math.isnan(number) or math.isinf(number) or number < 0:
        return 0
    return int(number)


def _as_text(value: Any) -> Optional[str]:
    if value is None:
        return None
    text = str(value).strip()
    return text or None


class GameRecord(BaseModel):
    """One player's line for one game; identity columns only."""

    layout_kind: ClassVar[str] = ""

    player_id: Optional[str] = None
    name: str = ""
    number: Optional[str] = None
    date: Optional[str] = None
    game_id: Optional[str] = None
    title: Optional[str] = None
    away_team: Optional[str] = None
    home_team: Optional[str] = None
    venue: Optional[str] = None
    score: Optional[str] = None

    model_config = ConfigDict(frozen=True)

    @property
    def player_key(self) -> str:
        return self.player_id or self.name or ""

    @classmethod
    def from_raw(cls, row: Mapping[str, Any]):
        layout = get_layout(cls.layout_kind)
        data: dict[str, Any] = {}
        for attr, header in layout.columns.items():
            value = row.get(header)
            if attr in layout.stat_columns:
                data[attr] = _as_count(value)
            elif attr == "name":
                data[attr] = _as_text(value) or ""
            else:
                data[attr] = _as_text(value)
        return cls(**data)


class BattingRecord(GameRecord):
    layout_kind: ClassVar[str] = "batting"

    pa: int = Field(default=0, ge=0)
    ab: int = Field(default=0, ge=0)
    h: int = Field(default=0, ge=0)
    doubles: int = Field(default=0, ge=0)
    triples: int = Field(default=0, ge=0)
    hr: int = Field(default=0, ge=0)
    rbi: int = Field(default=0, ge=0)
    runs: int = Field(default=0, ge=0)
    so: int = Field(default=0, ge=0)
    bb: int = Field(default=0, ge=0)
    hbp: int = Field(default=0, ge=0)
    sb: int = Field(default=0, ge=0)
    sf: int = Field(default=0, ge=0)
    sac: int = Field(default=0, ge=0)


class PitchingRecord(GameRecord):
    layout_kind: ClassVar[str] = "pitching"

    outs: int = Field(default=0, ge=0)
    h: int = Field(default=0, ge=0)
    r: int = Field(default=0, ge=0)
    er: int = Field(default=0, ge=0)
    bb: int = Field(default=0, ge=0)
    so: int = Field(default=0, ge=0)
    win: int = Field(default=0, ge=0)
    loss: int = Field(default=0, ge=0)
    sv: int = Field(default=0, ge=0)
    pitches: int = Field(default=0, ge=0)
    strikes: int = Field(default=0, ge=0)
