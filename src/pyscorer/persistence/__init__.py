"""Persistence layer for seating collections and the dataset cache."""

from .cache import BATTING_KEY, DATE_KEY, PITCHING_KEY, CachedDatasets, DatasetCache
from .store import (
    DuplicateKeyError,
    SeatingStore,
    StoreBlockedError,
    StoreError,
    UnknownCollectionError,
)

__all__ = [
    "BATTING_KEY",
    "CachedDatasets",
    "DATE_KEY",
    "DatasetCache",
    "DuplicateKeyError",
    "PITCHING_KEY",
    "SeatingStore",
    "StoreBlockedError",
    "StoreError",
    "UnknownCollectionError",
]
