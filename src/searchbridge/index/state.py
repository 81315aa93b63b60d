"""SQLite persistence for bulk reindex cursors."""

from __future__ import annotations

import json
import sqlite3
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator, List, Optional, Protocol

from searchbridge.models import ReindexCursor


class CursorStore(Protocol):
    def load(self, job: str) -> Optional[ReindexCursor]:
        ...

    def save(self, job: str, cursor: ReindexCursor) -> None:
        ...

    def delete(self, job: str) -> None:
        ...


class SQLiteCursorStore:
    """Keeps one cursor row per named job so a reindex survives restarts."""

    def __init__(self, db_path: Path) -> None:
        self.db_path = Path(db_path)
        self._conn = sqlite3.connect(self.db_path)
        self._conn.row_factory = sqlite3.Row
        self._conn.execute("PRAGMA journal_mode=WAL;")
        self._conn.execute("PRAGMA synchronous=NORMAL;")
        self._ensure_schema()

    @property
    def connection(self) -> sqlite3.Connection:
        return self._conn

    def close(self) -> None:
        self._conn.close()

    @contextmanager
    def transaction(self) -> Iterator[sqlite3.Connection]:
        try:
            yield self._conn
            self._conn.commit()
        except Exception:
            self._conn.rollback()
            raise

    def _ensure_schema(self) -> None:
        with self.transaction() as conn:
            conn.execute(
                """
                CREATE TABLE IF NOT EXISTS reindex_jobs (
                    job TEXT PRIMARY KEY,
                    state TEXT NOT NULL,
                    created_at TEXT DEFAULT CURRENT_TIMESTAMP,
                    updated_at TEXT DEFAULT CURRENT_TIMESTAMP
                )
                """
            )

    def load(self, job: str) -> Optional[ReindexCursor]:
        row = self._conn.execute(
            "SELECT state FROM reindex_jobs WHERE job = ?", (job,)
        ).fetchone()
        if row is None:
            return None
        return ReindexCursor.from_dict(json.loads(row["state"]))

    def save(self, job: str, cursor: ReindexCursor) -> None:
        with self.transaction() as conn:
            conn.execute(
                """
                INSERT INTO reindex_jobs(job, state) VALUES (?, ?)
                ON CONFLICT(job) DO UPDATE SET
                    state = excluded.state,
                    updated_at = CURRENT_TIMESTAMP
                """,
                (job, json.dumps(cursor.to_dict(), ensure_ascii=True)),
            )

    def delete(self, job: str) -> None:
        with self.transaction() as conn:
            conn.execute("DELETE FROM reindex_jobs WHERE job = ?", (job,))

    def jobs(self) -> List[str]:
        return [row["job"] for row in self._conn.execute("SELECT job FROM reindex_jobs ORDER BY job")]
