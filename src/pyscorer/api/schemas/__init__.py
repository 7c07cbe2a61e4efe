"""Pydantic models for API I/O."""

from .seating import BulkWriteResponse, CarPayload, FamilyPayload, SnapshotPayload, car_key
from .stats import (
    DashboardResponse,
    ImportResponse,
    PlayerEntryResponse,
    RankingEntryResponse,
    ScatterPointResponse,
    TeamSummaryResponse,
    TrendResponse,
)

__all__ = [
    "BulkWriteResponse",
    "CarPayload",
    "DashboardResponse",
    "FamilyPayload",
    "ImportResponse",
    "PlayerEntryResponse",
    "RankingEntryResponse",
    "ScatterPointResponse",
    "SnapshotPayload",
    "TeamSummaryResponse",
    "TrendResponse",
    "car_key",
]
