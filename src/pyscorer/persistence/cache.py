"""Key/value cache holding the last imported datasets between sessions."""

from __future__ import annotations

import json
import logging
import sqlite3
from contextlib import closing
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import Any, List, Mapping, Optional, Sequence

from pyscorer.config import settings


logger = logging.getLogger(__name__)

BATTING_KEY = "bb_stats_batting"
PITCHING_KEY = "bb_stats_pitching"
DATE_KEY = "bb_stats_date"


@dataclass
class CachedDatasets:
    batting: List[dict]
    pitching: List[dict]
    imported_at: Optional[str]


class DatasetCache:
    """Stores raw batting and pitching rows as JSON text under fixed keys."""

    def __init__(self, db_path: Path | str | None = None) -> None:
        self.db_path = settings.cache_path(db_path)
        self._ensure_schema()

    def _connect(self) -> sqlite3.Connection:
        self.db_path.parent.mkdir(parents=True, exist_ok=True)
        conn = sqlite3.connect(self.db_path)
        conn.row_factory = sqlite3.Row
        return conn

    def _ensure_schema(self) -> None:
        with closing(self._connect()) as conn, conn:
            conn.execute(
                """
                CREATE TABLE IF NOT EXISTS cache (
                    key TEXT PRIMARY KEY,
                    value TEXT NOT NULL
                )
                """
            )

    def get_item(self, key: str) -> Optional[str]:
        with closing(self._connect()) as conn:
            row = conn.execute("SELECT value FROM cache WHERE key = ?", (key,)).fetchone()
        return row["value"] if row is not None else None

    def set_item(self, key: str, value: str) -> None:
        with closing(self._connect()) as conn, conn:
            conn.execute(
                "INSERT OR REPLACE INTO cache (key, value) VALUES (?, ?)",
                (key, value),
            )

    def remove_item(self, key: str) -> None:
        with closing(self._connect()) as conn, conn:
            conn.execute("DELETE FROM cache WHERE key = ?", (key,))

    def save(
        self,
        batting: Sequence[Mapping[str, Any]],
        pitching: Sequence[Mapping[str, Any]],
        imported_at: Optional[datetime] = None,
    ) -> str:
        stamp = (imported_at or datetime.now()).isoformat(sep=" ", timespec="seconds")
        with closing(self._connect()) as conn, conn:
            conn.executemany(
                "INSERT OR REPLACE INTO cache (key, value) VALUES (?, ?)",
                [
                    (BATTING_KEY, json.dumps([dict(row) for row in batting], ensure_ascii=False)),
                    (PITCHING_KEY, json.dumps([dict(row) for row in pitching], ensure_ascii=False)),
                    (DATE_KEY, stamp),
                ],
            )
        logger.info("Cached %d batting and %d pitching rows", len(batting), len(pitching))
        return stamp

    def load(self) -> Optional[CachedDatasets]:
        """Return the cached datasets, or None when no batting rows are cached."""

        batting_raw = self.get_item(BATTING_KEY)
        if not batting_raw:
            return None
        try:
            batting = json.loads(batting_raw)
            pitching = json.loads(self.get_item(PITCHING_KEY) or "[]")
        except json.JSONDecodeError:
            logger.warning("Ignoring corrupt dataset cache at %s", self.db_path)
            return None
        if not batting:
            return None
        return CachedDatasets(
            batting=batting,
            pitching=pitching,
            imported_at=self.get_item(DATE_KEY),
        )

    def clear(self) -> None:
        with closing(self._connect()) as conn, conn:
            conn.execute(
                "DELETE FROM cache WHERE key IN (?, ?, ?)",
                (BATTING_KEY, PITCHING_KEY, DATE_KEY),
            )
        logger.info("Cleared dataset cache")
