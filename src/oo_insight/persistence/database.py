"""SQLite-backed results database for finished analysis runs."""

import sqlite3
from pathlib import Path
from typing import Optional, Union

from ..logging_config import get_logger

logger = get_logger(__name__)

# Current schema version (bump when tables change).
_SCHEMA_VERSION = 1


class ResultsDB:
    """Manages the results database file.

    Usage::

        with ResultsDB(".oo-insight/history.db") as db:
            run_id = save_run(db.conn, result, "zoo")
    """

    def __init__(self, db_path: Union[str, Path]) -> None:
        self.db_path: Path = Path(db_path)
        self._conn: Optional[sqlite3.Connection] = None

    @property
    def conn(self) -> sqlite3.Connection:
        """Return the active connection. Raises if not connected."""
        if self._conn is None:
            raise RuntimeError("ResultsDB is not connected. Use as context manager or call connect().")
        return self._conn

    # ── lifecycle ─────────────────────────────────────────────────

    def connect(self) -> sqlite3.Connection:
        """Open (or create) the database and run migrations."""
        self.db_path.parent.mkdir(parents=True, exist_ok=True)
        conn = sqlite3.connect(str(self.db_path))
        conn.execute("PRAGMA journal_mode=WAL")
        conn.execute("PRAGMA foreign_keys=ON")
        conn.row_factory = sqlite3.Row
        self._conn = conn
        self._migrate()
        logger.debug("Results DB connected at %s", self.db_path)
        return conn

    def close(self) -> None:
        """Close the connection if open."""
        if self._conn is not None:
            self._conn.close()
            self._conn = None

    def __enter__(self) -> "ResultsDB":
        self.connect()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()

    # ── migration ─────────────────────────────────────────────────

    def _migrate(self) -> None:
        """Idempotently create all tables."""
        c = self.conn

        c.execute(
            """
            CREATE TABLE IF NOT EXISTS schema_version (
                version INTEGER NOT NULL
            )
            """
        )
        row = c.execute("SELECT version FROM schema_version").fetchone()
        if row is None:
            c.execute("INSERT INTO schema_version (version) VALUES (?)", (_SCHEMA_VERSION,))

        # ── runs ──────────────────────────────────────────────────
        c.execute(
            """
            CREATE TABLE IF NOT EXISTS runs (
                id              INTEGER PRIMARY KEY AUTOINCREMENT,
                tool_version    TEXT    NOT NULL,
                timestamp       TEXT    NOT NULL,
                project_name    TEXT    NOT NULL,
                project_paths   TEXT    NOT NULL DEFAULT '[]',
                entity_count    INTEGER NOT NULL DEFAULT 0
            )
            """
        )

        # ── store_entries: one row per (namespace, key) ───────────
        c.execute(
            """
            CREATE TABLE IF NOT EXISTS store_entries (
                run_id      INTEGER NOT NULL REFERENCES runs(id) ON DELETE CASCADE,
                namespace   TEXT    NOT NULL,
                kind        TEXT    NOT NULL,
                entity_key  TEXT    NOT NULL,
                value       TEXT    NOT NULL,
                PRIMARY KEY (run_id, namespace, entity_key)
            )
            """
        )

        # ── metric_stats: finalized statistics per metric ─────────
        c.execute(
            """
            CREATE TABLE IF NOT EXISTS metric_stats (
                run_id        INTEGER NOT NULL REFERENCES runs(id) ON DELETE CASCADE,
                metric        TEXT    NOT NULL,
                kind          TEXT    NOT NULL,
                sample_count  INTEGER NOT NULL,
                minimum       REAL,
                maximum       REAL,
                mean          REAL,
                q1            REAL,
                median        REAL,
                q3            REAL,
                iqr           REAL,
                mild_lower    REAL,
                mild_upper    REAL,
                extreme_lower REAL,
                extreme_upper REAL,
                percentiles   TEXT    NOT NULL DEFAULT '{}',
                PRIMARY KEY (run_id, metric)
            )
            """
        )

        # ── metric_samples: sorted samples ────────────────────────
        c.execute(
            """
            CREATE TABLE IF NOT EXISTS metric_samples (
                run_id    INTEGER NOT NULL REFERENCES runs(id) ON DELETE CASCADE,
                metric    TEXT    NOT NULL,
                position  INTEGER NOT NULL,
                value     REAL    NOT NULL,
                PRIMARY KEY (run_id, metric, position)
            )
            """
        )

        # ── findings ──────────────────────────────────────────────
        c.execute(
            """
            CREATE TABLE IF NOT EXISTS findings (
                id            INTEGER PRIMARY KEY AUTOINCREMENT,
                run_id        INTEGER NOT NULL REFERENCES runs(id) ON DELETE CASCADE,
                entity_path   TEXT    NOT NULL,
                defect_name   TEXT    NOT NULL,
                project_path  TEXT    NOT NULL
            )
            """
        )

        c.execute("CREATE INDEX IF NOT EXISTS idx_findings_run ON findings(run_id)")
        c.execute("CREATE INDEX IF NOT EXISTS idx_store_run_ns ON store_entries(run_id, namespace)")

        c.commit()
