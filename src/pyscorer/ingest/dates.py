"""Date normalisation for game-log rows and filter bounds."""

from __future__ import annotations

import re
from datetime import datetime
from typing import Optional


# Returned for empty or unparsable dates; sorts before every real game.
EPOCH_SENTINEL = datetime(1970, 1, 1)

_SEPARATORS = re.compile(r"[-/]")
_LEADING_INT = re.compile(r"\s*([+-]?\d+)", re.ASCII)
_FALLBACK_FORMATS = (
    "%Y%m%d",
    "%Y.%m.%d",
    "%Y年%m月%d日",
    "%m/%d/%Y",
    "%b %d %Y",
    "%b %d, %Y",
    "%d %b %Y",
    "%B %d, %Y",
)


def _leading_int(part: str) -> Optional[int]:
    match = _LEADING_INT.match(part)
    return int(match.group(1)) if match else None


def _from_parts(value: str) -> Optional[datetime]:
    parts = _SEPARATORS.split(value)
    if len(parts) != 3:
        return None
    year, month, day = (_leading_int(part) for part in parts)
    if year is None or month is None or day is None:
        return None
    try:
        return datetime(year, month, day)
    except ValueError:
        return None


def _generic_parse(value: str) -> Optional[datetime]:
    try:
        parsed = datetime.fromisoformat(value)
    except ValueError:
        parsed = None
    if parsed is None:
        for fmt in _FALLBACK_FORMATS:
            try:
                parsed = datetime.strptime(value, fmt)
                break
            except ValueError:
                continue
    if parsed is None:
        return None
    if parsed.tzinfo is not None:
        parsed = parsed.astimezone().replace(tzinfo=None)
    return parsed


def normalize_date(value: Optional[str]) -> datetime:
    """Map ``YYYY-MM-DD``/``YYYY/MM/DD`` (or anything parseable) to a datetime.

    Never raises: empty and unparsable inputs yield :data:`EPOCH_SENTINEL`,
    which callers treat as the earliest possible date.
    """

    if not value:
        return EPOCH_SENTINEL
    text = str(value).strip()
    if not text:
        return EPOCH_SENTINEL
    return _from_parts(text) or _generic_parse(text) or EPOCH_SENTINEL


def month_key(value: Optional[str]) -> Optional[str]:
    """Return ``YYYY-MM`` for a date string, or ``None`` without a month part."""

    if not value:
        return None
    parts = _SEPARATORS.split(str(value).strip())
    if len(parts) < 2:
        return None
    return f"{parts[0]}-{parts[1].zfill(2)}"
