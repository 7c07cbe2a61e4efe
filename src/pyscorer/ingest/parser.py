"""Plain comma-split parser for scorer CSV exports.

Quoted fields are not supported: a value containing a comma shifts every
column after it. Existing exports never quote, and splitting naively keeps
them readable exactly as the scorer app writes them.
"""

from __future__ import annotations

import logging
import re
from typing import List, Mapping, Sequence, Union

from pyscorer.config import TEXT_COLUMNS, ColumnLayout


logger = logging.getLogger(__name__)

RawValue = Union[str, int, float]
RawRecord = dict[str, RawValue]

_BOM = "\ufeff"
_NUMERIC_PATTERN = re.compile(r"[+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?", re.ASCII)
_INTEGER_PATTERN = re.compile(r"[+-]?\d+", re.ASCII)


def _coerce(value: str) -> RawValue:
    if not value or not _NUMERIC_PATTERN.fullmatch(value):
        return value
    if _INTEGER_PATTERN.fullmatch(value):
        return int(value)
    return float(value)


def parse_csv(text: str) -> List[RawRecord]:
    """Turn raw CSV text into one mapping per data line."""

    lines = text.strip().split("\n")
    if len(lines) < 2:
        return []

    headers = [header.strip() for header in lines[0].lstrip(_BOM).split(",")]
    rows: List[RawRecord] = []
    for line in lines[1:]:
        fields = line.split(",")
        if len(fields) <= 1:
            continue
        row: RawRecord = {}
        for idx, header in enumerate(headers):
            value = fields[idx].strip() if idx < len(fields) else ""
            row[header] = value if header in TEXT_COLUMNS else _coerce(value)
        rows.append(row)
    return rows


def missing_columns(rows: Sequence[Mapping[str, RawValue]], layout: ColumnLayout) -> List[str]:
    """Return recognised stat headers absent from the dataset's header row."""

    if not rows:
        return []
    present = set(rows[0].keys())
    return [header for header in layout.stat_columns.values() if header not in present]


def warn_missing_columns(rows: Sequence[Mapping[str, RawValue]], layout: ColumnLayout, *, source: str) -> None:
    missing = missing_columns(rows, layout)
    if missing:
        logger.warning(
            "%s %s data lacks columns %s; they count as zero",
            source,
            layout.kind,
            ", ".join(missing),
        )

