# chain_tracker/storage/snapshot_store.py

"""SQLite-backed append-only store for balance snapshots."""

import logging
import sqlite3
import threading
from pathlib import Path
from typing import Any

from chain_tracker.config.settings import Settings
from chain_tracker.models.snapshot import BalanceAverages, Snapshot

logger = logging.getLogger("chain_tracker.store")

MEMORY = ":memory:"

_SCHEMA = """\
CREATE TABLE IF NOT EXISTS balance_history (
    id             INTEGER PRIMARY KEY AUTOINCREMENT,
    timestamp      INTEGER NOT NULL,
    base_balance   REAL    NOT NULL,
    solana_balance REAL    NOT NULL,
    base_usd       REAL,
    solana_usd     REAL
);

CREATE INDEX IF NOT EXISTS idx_timestamp
    ON balance_history(timestamp);
"""

_COLUMNS = (
    "id, timestamp, base_balance, solana_balance, base_usd, solana_usd"
)


class StorageError(Exception):
    """The persistence layer is unavailable or corrupt."""


def _row_to_snapshot(row: tuple[Any, ...]) -> Snapshot:
    return Snapshot(
        id=row[0],
        timestamp=row[1],
        base_balance=row[2],
        solana_balance=row[3],
        base_usd=row[4],
        solana_usd=row[5],
    )


class SnapshotStore:
    """Append-only time series of balance snapshots.

    Rows are never updated or deleted.  Every read filters or orders
    by ``timestamp``, which is indexed.  One connection is shared
    between the scheduler thread and request threads, so statements
    are serialised with a lock.
    """

    def __init__(
        self, db_path: Path | str | None = None,
    ) -> None:
        path = db_path or Settings.DB_PATH
        self._lock = threading.Lock()
        try:
            if str(path) != MEMORY:
                Path(path).parent.mkdir(parents=True, exist_ok=True)
            self._conn = sqlite3.connect(
                str(path), check_same_thread=False,
            )
            if str(path) != MEMORY:
                self._conn.execute("PRAGMA journal_mode=WAL")
            self._conn.execute("PRAGMA synchronous=FULL")
            self._conn.executescript(_SCHEMA)
        except (sqlite3.Error, OSError) as exc:
            raise StorageError(
                f"Cannot open snapshot store at {path}: {exc}"
            ) from exc
        logger.debug("SnapshotStore opened at %s", path)

    def close(self) -> None:
        """Close the database connection."""
        with self._lock:
            self._conn.close()

    def _fetchone(
        self, sql: str, params: tuple[Any, ...] = (),
    ) -> tuple[Any, ...] | None:
        try:
            with self._lock:
                row: tuple[Any, ...] | None = self._conn.execute(
                    sql, params,
                ).fetchone()
        except (sqlite3.Error, OverflowError) as exc:
            raise StorageError(f"Snapshot query failed: {exc}") from exc
        return row

    def _fetchall(
        self, sql: str, params: tuple[Any, ...] = (),
    ) -> list[tuple[Any, ...]]:
        try:
            with self._lock:
                rows: list[tuple[Any, ...]] = self._conn.execute(
                    sql, params,
                ).fetchall()
        except (sqlite3.Error, OverflowError) as exc:
            raise StorageError(f"Snapshot query failed: {exc}") from exc
        return rows

    # ── Recording ────────────────────────────────────────

    def append(
        self,
        timestamp: int,
        base_balance: float,
        solana_balance: float,
    ) -> int:
        """Insert one snapshot and commit before returning its id."""
        try:
            with self._lock, self._conn:
                cur = self._conn.execute(
                    "INSERT INTO balance_history "
                    "(timestamp, base_balance, solana_balance) "
                    "VALUES (?, ?, ?)",
                    (timestamp, base_balance, solana_balance),
                )
                snapshot_id = cur.lastrowid
        except (sqlite3.Error, OverflowError) as exc:
            raise StorageError(
                f"Failed to append snapshot: {exc}"
            ) from exc
        if snapshot_id is None:
            raise StorageError("Insert did not return a row id")
        logger.debug(
            "Appended snapshot %d at %d", snapshot_id, timestamp,
        )
        return snapshot_id

    # ── Querying ─────────────────────────────────────────

    def count(self) -> int:
        row = self._fetchone("SELECT COUNT(*) FROM balance_history")
        return int(row[0]) if row else 0

    def first(self) -> Snapshot | None:
        """Return the oldest snapshot, or None when empty."""
        row = self._fetchone(
            f"SELECT {_COLUMNS} FROM balance_history "
            "ORDER BY timestamp ASC, id ASC LIMIT 1",
        )
        return _row_to_snapshot(row) if row else None

    def latest(self) -> Snapshot | None:
        """Return the newest snapshot, or None when empty."""
        row = self._fetchone(
            f"SELECT {_COLUMNS} FROM balance_history "
            "ORDER BY timestamp DESC, id DESC LIMIT 1",
        )
        return _row_to_snapshot(row) if row else None

    def range_since(self, threshold: int) -> list[Snapshot]:
        """Return snapshots newer than *threshold*, oldest first."""
        rows = self._fetchall(
            f"SELECT {_COLUMNS} FROM balance_history "
            "WHERE timestamp > ? "
            "ORDER BY timestamp ASC, id ASC",
            (threshold,),
        )
        return [_row_to_snapshot(r) for r in rows]

    def count_since(self, threshold: int) -> int:
        row = self._fetchone(
            "SELECT COUNT(*) FROM balance_history WHERE timestamp > ?",
            (threshold,),
        )
        return int(row[0]) if row else 0

    def average_since(
        self, threshold: int,
    ) -> BalanceAverages | None:
        """Mean balances newer than *threshold*.

        Returns None for an empty window so callers never read
        "no samples" as a zero balance.
        """
        row = self._fetchone(
            "SELECT AVG(base_balance), AVG(solana_balance), COUNT(id) "
            "FROM balance_history WHERE timestamp > ?",
            (threshold,),
        )
        if row is None or row[2] == 0:
            return None
        return BalanceAverages(
            base_balance=row[0],
            solana_balance=row[1],
            sample_count=row[2],
        )
