"""
SQLite-backed hand-off of submitted values to the confirmation page.
"""

import json
import logging
from pathlib import Path
from typing import Any

import aiosqlite

from .config import get_settings
from .exceptions import HandoffStoreError

logger = logging.getLogger(__name__)

CREATE_TABLE = (
    "CREATE TABLE IF NOT EXISTS handoff ("
    "session_id TEXT NOT NULL, "
    "key TEXT NOT NULL, "
    "payload TEXT NOT NULL, "
    "created_at TEXT NOT NULL DEFAULT CURRENT_TIMESTAMP, "
    "PRIMARY KEY (session_id, key))"
)


class HandoffStore:
    """One record per form session, stored under a fixed, well-known key."""

    def __init__(self, path: Path | None = None, key: str | None = None) -> None:
        settings = get_settings()
        self.path = Path(path or settings.sqlite_path)
        self.key = key or settings.handoff_key

    async def write(self, session_id: str, record: dict[str, Any]) -> None:
        payload = json.dumps(record)
        self.path.parent.mkdir(parents=True, exist_ok=True)
        try:
            async with aiosqlite.connect(self.path) as db:
                await db.execute(CREATE_TABLE)
                await db.execute(
                    "INSERT INTO handoff (session_id, key, payload) VALUES (?, ?, ?)",
                    (session_id, self.key, payload),
                )
                await db.commit()
        except aiosqlite.IntegrityError as exc:
            raise HandoffStoreError(f"Session {session_id} was already handed off") from exc
        except aiosqlite.Error as exc:
            raise HandoffStoreError(f"Failed to write hand-off record: {exc}") from exc
        logger.info("Handed off %d values for session %s", len(record), session_id)

    async def read(self, session_id: str) -> dict[str, Any]:
        """Return the stored record, or an empty one when nothing was handed off."""
        if not self.path.exists():
            return {}
        try:
            async with aiosqlite.connect(self.path) as db:
                await db.execute(CREATE_TABLE)
                cursor = await db.execute(
                    "SELECT payload FROM handoff WHERE session_id = ? AND key = ?",
                    (session_id, self.key),
                )
                row = await cursor.fetchone()
        except aiosqlite.Error as exc:
            raise HandoffStoreError(f"Failed to read hand-off record: {exc}") from exc

        if row is None:
            return {}
        record = json.loads(row[0])
        return record if isinstance(record, dict) else {}
