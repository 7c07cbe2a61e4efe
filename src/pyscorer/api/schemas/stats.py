from __future__ import annotations

from typing import Any, List, Literal

from pydantic import BaseModel, Field


class ImportResponse(BaseModel):
    message: str
    imported_count: int
    batting_rows: int
    pitching_rows: int
    skipped_files: List[str] = Field(default_factory=list)
    imported_at: str | None = None


class PlayerEntryResponse(BaseModel):
    player_key: str
    name: str
    number: str | None = None


class TeamSummaryResponse(BaseModel):
    total_games: int
    total_ab: int
    total_h: int
    total_runs: int
    total_hr: int
    total_er: int
    total_outs: int
    team_avg: float
    team_era: float


class RankingEntryResponse(BaseModel):
    name: str
    value: float


class ScatterPointResponse(BaseModel):
    name: str
    x: float
    y: float
    z: int


class DashboardResponse(BaseModel):
    categories: List[str]
    players: List[PlayerEntryResponse]
    selected_player: str | None
    batting_rows: int
    pitching_rows: int
    batting: List[dict[str, Any]]
    pitching: List[dict[str, Any]]
    team: TeamSummaryResponse | None
    monthly_trend: List[dict[str, Any]]
    player_trend: List[dict[str, Any]]
    ranking: List[RankingEntryResponse]
    scatter: List[ScatterPointResponse]
    imported_at: str | None = None


class TrendResponse(BaseModel):
    player_key: str
    kind: Literal["batting", "pitching"]
    points: List[dict[str, Any]]
