"""SQLite storage for tracked directories and the session display cache."""

import logging
import sqlite3
import time
from collections.abc import Callable, Iterator
from contextlib import contextmanager
from pathlib import Path

from dirnotes.config import DB_PATH, ensure_db_dir
from dirnotes.tracking.models import RecentActivity, SessionDisplayRecord, TrackedDirectory

logger = logging.getLogger(__name__)

SCHEMA = """
CREATE TABLE IF NOT EXISTS noted_dirs (
    dir_name TEXT NOT NULL UNIQUE,
    summary TEXT,
    last_activity REAL NOT NULL DEFAULT (strftime('%s', 'now'))
);

CREATE TABLE IF NOT EXISTS display_cache (
    session_id TEXT NOT NULL,
    dir_name TEXT NOT NULL,
    notes_timestamp INTEGER NOT NULL,
    display_timestamp REAL NOT NULL DEFAULT (strftime('%s', 'now')),
    UNIQUE (session_id, dir_name)
);

CREATE INDEX IF NOT EXISTS idx_display_cache_ts ON display_cache(display_timestamp);

CREATE VIEW IF NOT EXISTS recent_activity AS
    SELECT
        strftime('%Y-%m-%d %H:%M', last_activity, 'unixepoch', 'localtime') AS date,
        dir_name,
        summary,
        last_activity
    FROM noted_dirs
    ORDER BY last_activity DESC, dir_name;
"""


class StoreError(Exception):
    """The notes database could not be opened or initialized."""


class NotesStore:
    """SQLite-backed store of noted directories and displayed-note records."""

    def __init__(self, db_path: Path | None = None, clock: Callable[[], float] = time.time):
        self.db_path = db_path or DB_PATH
        self.clock = clock
        self._conn: sqlite3.Connection | None = None
        self._depth = 0

    def open(self) -> sqlite3.Connection:
        """Connect, creating the schema on first use."""
        if self._conn is None:
            try:
                ensure_db_dir(self.db_path)
                # Autocommit: every statement is atomic on its own, and
                # transaction() groups statements explicitly.
                conn = sqlite3.connect(str(self.db_path), isolation_level=None)
                conn.row_factory = sqlite3.Row
                conn.executescript(SCHEMA)
            except (sqlite3.Error, OSError) as e:
                raise StoreError(f"cannot open notes database {self.db_path}: {e}") from e
            logger.debug("Opened notes database %s", self.db_path)
            self._conn = conn
        return self._conn

    def close(self) -> None:
        if self._conn:
            self._conn.close()
            self._conn = None

    @contextmanager
    def transaction(self) -> Iterator[sqlite3.Connection]:
        """Run a block of statements under a write lock.

        Only the outermost block begins and commits; nested blocks join it.
        """
        conn = self.open()
        if self._depth:
            self._depth += 1
            try:
                yield conn
            finally:
                self._depth -= 1
            return

        conn.execute("BEGIN IMMEDIATE")
        self._depth = 1
        try:
            yield conn
        except BaseException:
            conn.execute("ROLLBACK")
            raise
        else:
            conn.execute("COMMIT")
        finally:
            self._depth = 0

    # ── Tracked directories ─────────────────────────────────────

    def upsert(self, path: str, summary: str | None, reset_activity: bool = False) -> None:
        """Insert a directory, or replace the summary of a known one.

        New rows always start with last_activity = now. Existing rows keep
        their timestamp unless reset_activity is set.
        """
        conn = self.open()
        now = self.clock()
        if reset_activity:
            conn.execute(
                """INSERT INTO noted_dirs (dir_name, summary, last_activity)
                VALUES (?, ?, ?)
                ON CONFLICT (dir_name) DO UPDATE SET
                    summary = excluded.summary,
                    last_activity = excluded.last_activity""",
                (path, summary, now),
            )
        else:
            conn.execute(
                """INSERT INTO noted_dirs (dir_name, summary, last_activity)
                VALUES (?, ?, ?)
                ON CONFLICT (dir_name) DO UPDATE SET summary = excluded.summary""",
                (path, summary, now),
            )

    def remove(self, path: str) -> bool:
        """Forget a directory. Returns whether it was tracked."""
        conn = self.open()
        cursor = conn.execute("DELETE FROM noted_dirs WHERE dir_name = ?", (path,))
        return cursor.rowcount > 0

    def get(self, path: str) -> TrackedDirectory | None:
        conn = self.open()
        row = conn.execute(
            "SELECT dir_name, summary, last_activity FROM noted_dirs WHERE dir_name = ?",
            (path,),
        ).fetchone()
        if row is None:
            return None
        return TrackedDirectory(
            path=row["dir_name"],
            summary=row["summary"],
            last_activity=row["last_activity"],
        )

    def list_recent(self) -> list[RecentActivity]:
        """List tracked directories, most recently active first."""
        conn = self.open()
        rows = conn.execute(
            "SELECT date, dir_name, summary, last_activity FROM recent_activity"
        ).fetchall()
        return [
            RecentActivity(
                date=r["date"],
                path=r["dir_name"],
                summary=r["summary"],
                last_activity=r["last_activity"],
            )
            for r in rows
        ]

    # ── Session display cache ───────────────────────────────────

    def record_display(self, session_id: str, dir_path: str, notes_version: int) -> None:
        """Remember that this notes version was handled in this session."""
        conn = self.open()
        conn.execute(
            """INSERT INTO display_cache (session_id, dir_name, notes_timestamp, display_timestamp)
            VALUES (?, ?, ?, ?)
            ON CONFLICT (session_id, dir_name) DO UPDATE SET
                notes_timestamp = excluded.notes_timestamp,
                display_timestamp = excluded.display_timestamp""",
            (session_id, dir_path, notes_version, self.clock()),
        )

    def was_displayed(self, session_id: str, dir_path: str, notes_version: int) -> bool:
        conn = self.open()
        row = conn.execute(
            """SELECT 1 FROM display_cache
            WHERE session_id = ? AND dir_name = ? AND notes_timestamp = ?""",
            (session_id, dir_path, notes_version),
        ).fetchone()
        return row is not None

    def get_display_record(self, session_id: str, dir_path: str) -> SessionDisplayRecord | None:
        conn = self.open()
        row = conn.execute(
            """SELECT session_id, dir_name, notes_timestamp, display_timestamp
            FROM display_cache WHERE session_id = ? AND dir_name = ?""",
            (session_id, dir_path),
        ).fetchone()
        if row is None:
            return None
        return SessionDisplayRecord(
            session_id=row["session_id"],
            dir_path=row["dir_name"],
            notes_version=row["notes_timestamp"],
            display_timestamp=row["display_timestamp"],
        )

    def evict_stale(self, session_timeout: float) -> int:
        """Delete display records older than session_timeout seconds."""
        conn = self.open()
        cutoff = self.clock() - session_timeout
        cursor = conn.execute(
            "DELETE FROM display_cache WHERE display_timestamp < ?", (cutoff,)
        )
        if cursor.rowcount:
            logger.debug("Evicted %d stale display records", cursor.rowcount)
        return cursor.rowcount
