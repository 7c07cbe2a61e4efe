"""Configuration helpers for CSV layouts, metrics and storage."""

from .columns import (
    HOME_FRANCHISE_FRAGMENTS,
    LOWER_IS_BETTER,
    METRICS,
    PITCHING_METRICS,
    TEXT_COLUMNS,
    ColumnLayout,
    MetricSpec,
    get_layout,
    iter_layouts,
)
from .stores import Collection, get_collection, iter_collections

__all__ = [
    "ColumnLayout",
    "MetricSpec",
    "Collection",
    "HOME_FRANCHISE_FRAGMENTS",
    "LOWER_IS_BETTER",
    "METRICS",
    "PITCHING_METRICS",
    "TEXT_COLUMNS",
    "get_layout",
    "iter_layouts",
    "get_collection",
    "iter_collections",
]
