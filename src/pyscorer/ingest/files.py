"""Import surface: classify uploaded CSV files and load bundled samples."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from importlib import resources
from pathlib import Path
from typing import Iterable, List, Literal, Mapping, Optional, Sequence, Tuple

from pyscorer.config import get_layout

from .parser import RawRecord, parse_csv, warn_missing_columns


logger = logging.getLogger(__name__)

DatasetKind = Literal["batting", "pitching"]

SAMPLE_BATTING_FILE = "scorer_stats_raw_b.csv"
SAMPLE_PITCHING_FILE = "scorer_stats_raw_p.csv"


def classify_file(filename: str, rows: Sequence[Mapping[str, object]]) -> Optional[DatasetKind]:
    """Decide whether a parsed file holds batting or pitching lines.

    The file name suffix wins; otherwise the first row's headers are checked
    against each layout's signature columns. Returns ``None`` when neither
    matches.
    """

    first = rows[0] if rows else {}
    for kind in ("batting", "pitching"):
        layout = get_layout(kind)
        if layout.filename_suffix in filename:
            return kind  # type: ignore[return-value]
        if any(column in first for column in layout.signature_columns):
            return kind  # type: ignore[return-value]
    return None


@dataclass
class ImportResult:
    batting: List[RawRecord]
    pitching: List[RawRecord]
    imported_count: int = 0
    skipped_files: List[str] = field(default_factory=list)

    @property
    def message(self) -> str:
        return f"Imported {self.imported_count} file(s)"


def import_files(
    files: Iterable[Tuple[str, str]],
    *,
    batting: Sequence[RawRecord] | None = None,
    pitching: Sequence[RawRecord] | None = None,
) -> ImportResult:
    """Fold ``(filename, text)`` pairs onto the current datasets.

    A classified file replaces its dataset wholesale; the last file of a kind
    wins. Unclassified files are dropped.
    """

    result = ImportResult(batting=list(batting or []), pitching=list(pitching or []))
    for filename, text in files:
        rows = parse_csv(text)
        kind = classify_file(filename, rows)
        if kind is None:
            logger.debug("Dropping unclassified file %s (%d rows)", filename, len(rows))
            result.skipped_files.append(filename)
            continue
        warn_missing_columns(rows, get_layout(kind), source=filename)
        if kind == "batting":
            result.batting = rows
        else:
            result.pitching = rows
        result.imported_count += 1
        logger.info("Imported %s as %s (%d rows)", filename, kind, len(rows))
    return result


def import_paths(paths: Iterable[Path], **kwargs) -> ImportResult:
    return import_files(
        ((path.name, path.read_text(encoding="utf-8-sig")) for path in paths),
        **kwargs,
    )


def load_sample_data() -> Tuple[List[RawRecord], List[RawRecord]]:
    """Return the bundled sample batting and pitching datasets."""

    data_dir = resources.files("pyscorer") / "data"
    batting_text = (data_dir / SAMPLE_BATTING_FILE).read_text(encoding="utf-8")
    pitching_text = (data_dir / SAMPLE_PITCHING_FILE).read_text(encoding="utf-8")
    return parse_csv(batting_text), parse_csv(pitching_text)
