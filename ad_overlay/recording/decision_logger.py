"""SQLite decision log with WAL mode for concurrent reads."""

from __future__ import annotations

import logging
import sqlite3
import threading
from pathlib import Path

from ad_overlay.recording.models import DecisionRecord

logger = logging.getLogger(__name__)

CREATE_TABLE_SQL = """
CREATE TABLE IF NOT EXISTS decisions (
    decision_id INTEGER PRIMARY KEY AUTOINCREMENT,
    timestamp REAL NOT NULL,
    category TEXT NOT NULL,
    asset_id TEXT NOT NULL,
    placeholder INTEGER NOT NULL,
    x INTEGER NOT NULL,
    y INTEGER NOT NULL,
    score REAL NOT NULL,
    relocated INTEGER NOT NULL,
    detection_count INTEGER NOT NULL
);
"""

INSERT_SQL = """
INSERT INTO decisions (
    timestamp, category, asset_id, placeholder,
    x, y, score, relocated, detection_count
) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?);
"""

SELECT_RECENT_SQL = """
SELECT decision_id, timestamp, category, asset_id, placeholder,
       x, y, score, relocated, detection_count
FROM decisions ORDER BY decision_id DESC LIMIT ?
"""


class DecisionLogger:
    """Logs render decisions to SQLite."""

    def __init__(self, db_path: str):
        self._db_path = Path(db_path)
        if db_path != ":memory:":
            self._db_path.parent.mkdir(parents=True, exist_ok=True)

        self._lock = threading.Lock()
        self._conn = sqlite3.connect(str(db_path), check_same_thread=False)
        self._conn.execute("PRAGMA journal_mode=WAL")
        self._conn.execute(CREATE_TABLE_SQL)
        self._conn.commit()
        logger.info("Decision logger initialized: %s", db_path)

    def log_decision(self, record: DecisionRecord) -> int:
        """Insert a decision. Returns the decision_id."""
        with self._lock:
            cursor = self._conn.execute(INSERT_SQL, (
                record.timestamp,
                record.category,
                record.asset_id,
                int(record.placeholder),
                record.x,
                record.y,
                record.score,
                int(record.relocated),
                record.detection_count,
            ))
            self._conn.commit()
        decision_id = cursor.lastrowid
        logger.debug("Logged decision #%d (%s -> %s)",
                     decision_id, record.category, record.asset_id)
        return decision_id

    def get_recent(self, limit: int = 50) -> list[DecisionRecord]:
        """Get the most recent decisions, newest first."""
        with self._lock:
            rows = self._conn.execute(SELECT_RECENT_SQL, (limit,)).fetchall()
        return [self._row_to_record(row) for row in rows]

    def get_stats(self) -> dict:
        """Total decisions and per-category counts."""
        with self._lock:
            total = self._conn.execute("SELECT COUNT(*) FROM decisions").fetchone()[0]
            rows = self._conn.execute(
                "SELECT category, COUNT(*) FROM decisions GROUP BY category"
            ).fetchall()
        return {"total": total, "by_category": {cat: count for cat, count in rows}}

    def clear_all(self) -> int:
        """Delete all decisions. Returns the number removed."""
        with self._lock:
            cursor = self._conn.execute("DELETE FROM decisions")
            self._conn.commit()
        logger.info("Cleared %d decisions", cursor.rowcount)
        return cursor.rowcount

    def close(self) -> None:
        """Close the database connection."""
        self._conn.close()

    @staticmethod
    def _row_to_record(row: tuple) -> DecisionRecord:
        return DecisionRecord(
            decision_id=row[0],
            timestamp=row[1],
            category=row[2],
            asset_id=row[3],
            placeholder=bool(row[4]),
            x=row[5],
            y=row[6],
            score=row[7],
            relocated=bool(row[8]),
            detection_count=row[9],
        )
