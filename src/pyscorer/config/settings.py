"""Environment-driven runtime settings."""

from __future__ import annotations

import logging
import os
from pathlib import Path

from .stores import SAVED_PARKING, SAVED_STATES, get_collection


logger = logging.getLogger(__name__)

_DB_PATH_ENV = "PYSCORER_DB_PATH"
_CACHE_PATH_ENV = "PYSCORER_CACHE_PATH"
_STATE_LIMIT_ENV = "PYSCORER_STATE_LIMIT"
_PARKING_LIMIT_ENV = "PYSCORER_PARKING_LIMIT"
_BUSY_TIMEOUT_ENV = "PYSCORER_BUSY_TIMEOUT"

_DEFAULT_DATA_DIR = Path(__file__).resolve().parent.parent
_BUSY_TIMEOUT_DEFAULT = 1.0


def _env_float(name: str, default: float, *, clamp_min: float | None = None) -> float:
    raw = os.getenv(name)
    if raw is None:
        return default
    try:
        value = float(raw)
    except ValueError:
        logger.warning("Invalid float for %s: %s; using default %.2f", name, raw, default)
        return default
    if clamp_min is not None:
        value = max(clamp_min, value)
    return value


def _env_int(name: str, default: int, *, min_value: int | None = None) -> int:
    raw = os.getenv(name)
    if raw is None:
        return default
    try:
        value = int(raw)
    except ValueError:
        logger.warning("Invalid int for %s: %s; using default %d", name, raw, default)
        return default
    if min_value is not None:
        value = max(min_value, value)
    return value


def _env_path(name: str, default: Path) -> Path:
    raw = os.getenv(name)
    return Path(raw) if raw else default


def store_path(explicit: Path | str | None = None) -> Path:
    if explicit is not None:
        return Path(explicit)
    return _env_path(_DB_PATH_ENV, _DEFAULT_DATA_DIR / "pyscorer.sqlite")


def cache_path(explicit: Path | str | None = None) -> Path:
    if explicit is not None:
        return Path(explicit)
    return _env_path(_CACHE_PATH_ENV, _DEFAULT_DATA_DIR / "pyscorer-cache.sqlite")


def busy_timeout() -> float:
    """Seconds SQLite waits on a lock before the store reports it blocked."""

    return _env_float(_BUSY_TIMEOUT_ENV, _BUSY_TIMEOUT_DEFAULT, clamp_min=0.0)


def trim_limit(collection: str) -> int | None:
    """Resolve the history limit for a trimmed collection."""

    default = get_collection(collection).trim_limit
    if default is None:
        return None
    if collection == SAVED_STATES:
        return _env_int(_STATE_LIMIT_ENV, default, min_value=1)
    if collection == SAVED_PARKING:
        return _env_int(_PARKING_LIMIT_ENV, default, min_value=1)
    return default
