"""
iReminder — Local State Storage.

Durable key/value storage for the three state records (settings, tasks,
wellness). Each record is a JSON document in a single SQLite row, so a
save either lands completely or not at all.
"""

from __future__ import annotations

import json
import logging
import sqlite3
from datetime import datetime
from pathlib import Path
from typing import Any

logger = logging.getLogger(__name__)

SETTINGS_KEY = "ireminder-settings"
TASKS_KEY = "ireminder-tasks"
WELLNESS_KEY = "ireminder-wellness"


class StateStorage:
    """SQLite-backed storage for JSON state records."""

    def __init__(self, db_path: str | None = None) -> None:
        if db_path is None:
            from ireminder.config import settings
            db_path = settings.DATABASE_PATH

        self._db_path = db_path
        Path(db_path).parent.mkdir(parents=True, exist_ok=True)
        self._init_db()

    def _connect(self) -> sqlite3.Connection:
        conn = sqlite3.connect(self._db_path)
        conn.row_factory = sqlite3.Row
        return conn

    def _init_db(self) -> None:
        """Create the records table if it doesn't exist."""
        with self._connect() as conn:
            conn.execute("""
                CREATE TABLE IF NOT EXISTS records (
                    key        TEXT PRIMARY KEY,
                    value      TEXT NOT NULL,
                    updated_at TEXT NOT NULL
                )
            """)
        logger.debug("Records table initialized at %s", self._db_path)

    def load(self, key: str) -> dict[str, Any] | None:
        """Return the stored record for key, or None if absent or unreadable."""
        with self._connect() as conn:
            row = conn.execute(
                "SELECT value FROM records WHERE key = ?", (key,)
            ).fetchone()
        if row is None:
            return None
        try:
            data = json.loads(row["value"])
        except json.JSONDecodeError as exc:
            logger.warning("Record '%s' is not valid JSON, ignoring it: %s", key, exc)
            return None
        if not isinstance(data, dict):
            logger.warning("Record '%s' is not an object, ignoring it", key)
            return None
        return data

    def save(self, key: str, data: dict[str, Any]) -> None:
        """Insert or replace the record for key."""
        payload = json.dumps(data, ensure_ascii=False)
        with self._connect() as conn:
            conn.execute(
                """
                INSERT INTO records (key, value, updated_at) VALUES (?, ?, ?)
                ON CONFLICT(key) DO UPDATE SET
                    value = excluded.value,
                    updated_at = excluded.updated_at
                """,
                (key, payload, datetime.now().isoformat()),
            )
        logger.debug("Record '%s' saved (%d bytes)", key, len(payload))

    def delete(self, key: str) -> bool:
        """Remove a record. Returns False if it did not exist."""
        with self._connect() as conn:
            cursor = conn.execute("DELETE FROM records WHERE key = ?", (key,))
        deleted = cursor.rowcount > 0
        if deleted:
            logger.info("Record '%s' deleted", key)
        return deleted

    def keys(self) -> list[str]:
        with self._connect() as conn:
            rows = conn.execute("SELECT key FROM records ORDER BY key").fetchall()
        return [r["key"] for r in rows]
