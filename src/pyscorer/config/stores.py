"""Collection definitions for the seating-assignment store."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Iterable, Tuple


@dataclass(frozen=True)
class Collection:
    name: str
    key_path: str
    auto_increment: bool = False
    indexes: Tuple[str, ...] = ()
    trim_limit: int | None = None
    since_version: int = 1


FAMILIES = "families"
CARS = "cars"
SAVED_STATES = "saved_states"
SAVED_PARKING = "saved_parking"

SCHEMA_VERSION = 3

_COLLECTIONS: Dict[str, Collection] = {
    FAMILIES: Collection(name=FAMILIES, key_path="familyName"),
    CARS: Collection(name=CARS, key_path="id"),
    SAVED_STATES: Collection(
        name=SAVED_STATES,
        key_path="id",
        auto_increment=True,
        indexes=("timestamp",),
        trim_limit=5,
        since_version=2,
    ),
    SAVED_PARKING: Collection(
        name=SAVED_PARKING,
        key_path="id",
        auto_increment=True,
        indexes=("timestamp", "name"),
        trim_limit=20,
        since_version=3,
    ),
}


def iter_collections() -> Iterable[Collection]:
    """Return all collections in schema-version order."""

    return sorted(_COLLECTIONS.values(), key=lambda c: c.since_version)


def get_collection(name: str) -> Collection:
    """Fetch a collection definition, raising KeyError if missing."""

    if name not in _COLLECTIONS:
        raise KeyError(f"No collection configured named {name!r}")
    return _COLLECTIONS[name]
