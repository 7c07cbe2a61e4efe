"""SQLite-backed store for the seating-assignment collections."""

from __future__ import annotations

import json
import logging
import sqlite3
import time
from contextlib import contextmanager
from pathlib import Path
from typing import Any, Iterable, Iterator, List, Mapping, Optional

from pyscorer.config import settings
from pyscorer.config.stores import (
    CARS,
    FAMILIES,
    SAVED_PARKING,
    SAVED_STATES,
    SCHEMA_VERSION,
    Collection,
    get_collection,
    iter_collections,
)


logger = logging.getLogger(__name__)

Item = dict[str, Any]


class StoreError(RuntimeError):
    """Raised when the storage engine rejects an operation."""


class StoreBlockedError(StoreError):
    """Raised when another connection holds the database lock."""

    def __init__(self, detail: str = "") -> None:
        message = "Database is in use by another session; close other tabs or windows and try again"
        if detail:
            message = f"{message} ({detail})"
        super().__init__(message)


class DuplicateKeyError(StoreError):
    """Raised by ``insert`` when the key already exists."""


class UnknownCollectionError(StoreError, KeyError):
    """Raised for collection names the schema does not define."""

    def __str__(self) -> str:
        return str(self.args[0]) if self.args else ""


def _now_ms() -> int:
    return int(time.time() * 1000)


def _translate(exc: sqlite3.Error) -> StoreError:
    message = str(exc)
    lowered = message.lower()
    if isinstance(exc, sqlite3.OperationalError) and ("locked" in lowered or "busy" in lowered):
        return StoreBlockedError(message)
    if isinstance(exc, sqlite3.IntegrityError) and "unique" in lowered:
        return DuplicateKeyError(message)
    return StoreError(message)


class SeatingStore:
    """Families, cars and saved snapshots persisted in one SQLite file.

    The store must be opened before use, either with :meth:`open` or as a
    context manager. Every write runs in its own ``BEGIN IMMEDIATE``
    transaction.
    """

    def __init__(self, db_path: Path | str | None = None, *, timeout: float | None = None) -> None:
        self._use_uri = False
        resolved = settings.store_path(db_path)
        if str(resolved).startswith("file:"):
            self.db_path: Path | str = str(resolved)
            self._use_uri = True
        else:
            self.db_path = resolved
        self.timeout = settings.busy_timeout() if timeout is None else timeout
        self._conn: Optional[sqlite3.Connection] = None

    # -- lifecycle ---------------------------------------------------------

    def open(self) -> "SeatingStore":
        if self._conn is not None:
            return self
        if isinstance(self.db_path, Path):
            self.db_path.parent.mkdir(parents=True, exist_ok=True)
        try:
            conn = sqlite3.connect(
                self.db_path,
                timeout=self.timeout,
                isolation_level=None,
                check_same_thread=False,
                uri=self._use_uri,
            )
        except sqlite3.Error as exc:
            raise _translate(exc) from exc
        conn.row_factory = sqlite3.Row
        self._conn = conn
        try:
            self._ensure_schema()
        except StoreError:
            self.close()
            raise
        return self

    def close(self) -> None:
        if self._conn is not None:
            self._conn.close()
            self._conn = None

    @property
    def is_open(self) -> bool:
        return self._conn is not None

    def __enter__(self) -> "SeatingStore":
        return self.open()

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def _connection(self) -> sqlite3.Connection:
        if self._conn is None:
            raise StoreError("Store is not open")
        return self._conn

    @staticmethod
    def _rollback(conn: sqlite3.Connection) -> None:
        if conn.in_transaction:
            conn.execute("ROLLBACK")

    @contextmanager
    def _transaction(self) -> Iterator[sqlite3.Connection]:
        conn = self._connection()
        try:
            conn.execute("BEGIN IMMEDIATE")
        except sqlite3.Error as exc:
            raise _translate(exc) from exc
        try:
            yield conn
        except sqlite3.Error as exc:
            self._rollback(conn)
            raise _translate(exc) from exc
        except BaseException:
            self._rollback(conn)
            raise
        else:
            try:
                conn.execute("COMMIT")
            except sqlite3.Error as exc:
                self._rollback(conn)
                raise _translate(exc) from exc

    @contextmanager
    def _reading(self) -> Iterator[sqlite3.Connection]:
        conn = self._connection()
        try:
            yield conn
        except sqlite3.Error as exc:
            raise _translate(exc) from exc

    # -- schema ------------------------------------------------------------

    def _ensure_schema(self) -> None:
        with self._transaction() as conn:
            current = conn.execute("PRAGMA user_version").fetchone()[0]
            for collection in iter_collections():
                self._create_collection(conn, collection)
                if current and collection.since_version > current:
                    logger.info("Created collection %s (schema v%d)", collection.name, collection.since_version)
            if current != SCHEMA_VERSION:
                logger.info("Store upgrading from version %d to %d", current, SCHEMA_VERSION)
                conn.execute(f"PRAGMA user_version = {SCHEMA_VERSION}")

    def _create_collection(self, conn: sqlite3.Connection, collection: Collection) -> None:
        if collection.auto_increment:
            key_column = "item_key INTEGER PRIMARY KEY AUTOINCREMENT"
        else:
            key_column = "item_key NOT NULL PRIMARY KEY"
        index_columns = "".join(
            f",\n                {index} {'REAL' if index == 'timestamp' else 'TEXT'}"
            for index in collection.indexes
        )
        conn.execute(
            f"""
            CREATE TABLE IF NOT EXISTS {collection.name} (
                {key_column},
                payload_json TEXT NOT NULL{index_columns}
            )
            """
        )
        for index in collection.indexes:
            try:
                conn.execute(f"ALTER TABLE {collection.name} ADD COLUMN {index}")
            except sqlite3.OperationalError:
                pass
            conn.execute(
                f"CREATE INDEX IF NOT EXISTS idx_{collection.name}_{index} "
                f"ON {collection.name} ({index})"
            )

    # -- generic CRUD ------------------------------------------------------

    @staticmethod
    def _collection(name: str) -> Collection:
        try:
            return get_collection(name)
        except KeyError:
            raise UnknownCollectionError(f"Unknown collection {name!r}") from None

    @staticmethod
    def _index_value(payload: Mapping[str, Any], index: str) -> Any:
        value = payload.get(index)
        if index == "timestamp":
            if isinstance(value, bool) or not isinstance(value, (int, float)):
                return None
            return value
        return None if value is None else str(value)

    def _write(self, conn: sqlite3.Connection, collection: Collection, item: Mapping[str, Any], *, replace: bool) -> Item:
        payload = dict(item)
        key = payload.get(collection.key_path)
        if key is None and not collection.auto_increment:
            raise StoreError(f"Item for {collection.name} is missing key {collection.key_path!r}")
        columns = ["item_key", "payload_json", *collection.indexes]
        values = [
            key,
            json.dumps(payload, ensure_ascii=False),
            *(self._index_value(payload, index) for index in collection.indexes),
        ]
        verb = "INSERT OR REPLACE" if replace else "INSERT"
        cursor = conn.execute(
            f"{verb} INTO {collection.name} ({', '.join(columns)}) "
            f"VALUES ({', '.join('?' for _ in columns)})",
            values,
        )
        if key is None:
            payload[collection.key_path] = cursor.lastrowid
            conn.execute(
                f"UPDATE {collection.name} SET payload_json = ? WHERE item_key = ?",
                (json.dumps(payload, ensure_ascii=False), cursor.lastrowid),
            )
        return payload

    def get(self, collection: str, key: Any) -> Optional[Item]:
        coll = self._collection(collection)
        with self._reading() as conn:
            row = conn.execute(
                f"SELECT payload_json FROM {coll.name} WHERE item_key = ?",
                (key,),
            ).fetchone()
        return json.loads(row["payload_json"]) if row is not None else None

    def get_all(self, collection: str) -> List[Item]:
        coll = self._collection(collection)
        with self._reading() as conn:
            rows = conn.execute(f"SELECT payload_json FROM {coll.name} ORDER BY item_key").fetchall()
        return [json.loads(row["payload_json"]) for row in rows]

    def get_all_sorted(
        self,
        collection: str,
        index: str,
        *,
        descending: bool = True,
        limit: int | None = None,
    ) -> List[Item]:
        """Items ordered by an index column; ``limit`` of None or 0 returns all."""

        coll = self._collection(collection)
        if index not in coll.indexes:
            raise StoreError(f"Collection {coll.name} has no index {index!r}")
        direction = "DESC" if descending else "ASC"
        with self._reading() as conn:
            rows = conn.execute(
                f"SELECT payload_json FROM {coll.name} "
                f"ORDER BY {index} {direction}, item_key {direction} LIMIT ?",
                (limit if limit else -1,),
            ).fetchall()
        return [json.loads(row["payload_json"]) for row in rows]

    def insert(self, collection: str, item: Mapping[str, Any]) -> Item:
        coll = self._collection(collection)
        with self._transaction() as conn:
            return self._write(conn, coll, item, replace=False)

    def upsert(self, collection: str, item: Mapping[str, Any]) -> Item:
        coll = self._collection(collection)
        with self._transaction() as conn:
            return self._write(conn, coll, item, replace=True)

    def bulk_insert(self, collection: str, items: Iterable[Mapping[str, Any]]) -> List[Item]:
        """Write many items in one transaction, overwriting existing keys."""

        coll = self._collection(collection)
        items = list(items)
        if not items:
            return []
        with self._transaction() as conn:
            return [self._write(conn, coll, item, replace=True) for item in items]

    def delete(self, collection: str, key: Any) -> None:
        coll = self._collection(collection)
        with self._transaction() as conn:
            conn.execute(f"DELETE FROM {coll.name} WHERE item_key = ?", (key,))

    def clear(self, collection: str) -> None:
        coll = self._collection(collection)
        with self._transaction() as conn:
            conn.execute(f"DELETE FROM {coll.name}")

    def clear_all(self) -> None:
        with self._transaction() as conn:
            for coll in iter_collections():
                conn.execute(f"DELETE FROM {coll.name}")

    def count(self, collection: str) -> int:
        coll = self._collection(collection)
        with self._reading() as conn:
            return conn.execute(f"SELECT COUNT(*) FROM {coll.name}").fetchone()[0]

    def save_with_trim(self, collection: str, item: Mapping[str, Any], *, limit: int | None = None) -> Item:
        """Store a timestamped item and keep only the ``limit`` most recent.

        Insert and trim share one transaction, so a failure leaves the
        collection exactly as it was.
        """

        coll = self._collection(collection)
        if "timestamp" not in coll.indexes:
            raise StoreError(f"Collection {coll.name} is not timestamped")
        keep = limit if limit is not None else settings.trim_limit(coll.name)
        if keep is None or keep < 1:
            raise StoreError(f"Collection {coll.name} has no trim limit")

        payload = dict(item)
        if self._index_value(payload, "timestamp") is None:
            payload["timestamp"] = _now_ms()
        with self._transaction() as conn:
            stored = self._write(conn, coll, payload, replace=True)
            cursor = conn.execute(
                f"""
                DELETE FROM {coll.name}
                WHERE item_key NOT IN (
                    SELECT item_key FROM {coll.name}
                    ORDER BY timestamp DESC, item_key DESC
                    LIMIT ?
                )
                """,
                (keep,),
            )
        if cursor.rowcount:
            logger.info("Trimmed %d old item(s) from %s (limit %d)", cursor.rowcount, coll.name, keep)
        return stored

    # -- seating helpers ---------------------------------------------------

    def get_family(self, family_name: str) -> Optional[Item]:
        return self.get(FAMILIES, family_name)

    def list_families(self) -> List[Item]:
        return self.get_all(FAMILIES)

    def add_family(self, family: Mapping[str, Any]) -> Item:
        return self.insert(FAMILIES, family)

    def update_family(self, family: Mapping[str, Any]) -> Item:
        return self.upsert(FAMILIES, family)

    def delete_family(self, family_name: str) -> None:
        self.delete(FAMILIES, family_name)

    def bulk_add_families(self, families: Iterable[Mapping[str, Any]]) -> List[Item]:
        return self.bulk_insert(FAMILIES, families)

    def get_car(self, car_id: Any) -> Optional[Item]:
        return self.get(CARS, car_id)

    def list_cars(self) -> List[Item]:
        return self.get_all(CARS)

    def add_car(self, car: Mapping[str, Any]) -> Item:
        return self.insert(CARS, car)

    def update_car(self, car: Mapping[str, Any]) -> Item:
        return self.upsert(CARS, car)

    def delete_car(self, car_id: Any) -> None:
        self.delete(CARS, car_id)

    def bulk_add_cars(self, cars: Iterable[Mapping[str, Any]]) -> List[Item]:
        return self.bulk_insert(CARS, cars)

    def get_saved_state(self, state_id: int) -> Optional[Item]:
        return self.get(SAVED_STATES, state_id)

    def list_saved_states(self, limit: int | None = None) -> List[Item]:
        return self.get_all_sorted(SAVED_STATES, "timestamp", descending=True, limit=limit)

    def save_state(self, state: Mapping[str, Any]) -> Item:
        return self.save_with_trim(SAVED_STATES, state)

    def delete_saved_state(self, state_id: int) -> None:
        self.delete(SAVED_STATES, state_id)

    def get_saved_parking(self, parking_id: int) -> Optional[Item]:
        return self.get(SAVED_PARKING, parking_id)

    def list_saved_parking(self, limit: int | None = None) -> List[Item]:
        return self.get_all_sorted(SAVED_PARKING, "timestamp", descending=True, limit=limit)

    def save_parking(self, parking: Mapping[str, Any]) -> Item:
        return self.save_with_trim(SAVED_PARKING, parking)

    def delete_saved_parking(self, parking_id: int) -> None:
        self.delete(SAVED_PARKING, parking_id)

    def bulk_add_parking(self, items: Iterable[Mapping[str, Any]]) -> List[Item]:
        return self.bulk_insert(SAVED_PARKING, items)
