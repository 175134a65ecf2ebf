"""SQLite persistence for MindTree sessions and settings."""

import json
import logging
import sqlite3
from datetime import datetime
from pathlib import Path
from typing import Optional, List, Any

from mindtree.config import EditorSettings, get_data_dir
from mindtree.errors import SessionError
from mindtree.session import SessionState

logger = logging.getLogger(__name__)

DEFAULT_SESSION = "default"
SETTINGS_KEY = "editor"


def get_db_path() -> Path:
    """Get the database file path."""
    return get_data_dir() / "mindtree.db"


class Storage:
    """Stores named sessions as JSON documents plus app settings."""

    def __init__(self, db_path: Optional[Path] = None):
        self.db_path = db_path or get_db_path()
        self._conn: Optional[sqlite3.Connection] = None
        self._init_db()

    @property
    def conn(self) -> sqlite3.Connection:
        if self._conn is None:
            self._conn = sqlite3.connect(str(self.db_path))
            self._conn.row_factory = sqlite3.Row
        return self._conn

    def _init_db(self):
        """Initialize the database schema."""
        cursor = self.conn.cursor()
        cursor.executescript("""
            CREATE TABLE IF NOT EXISTS sessions (
                name TEXT PRIMARY KEY,
                state JSON NOT NULL,
                modified_at DATETIME DEFAULT CURRENT_TIMESTAMP
            );

            CREATE TABLE IF NOT EXISTS settings (
                key TEXT PRIMARY KEY,
                value JSON
            );
        """)
        self.conn.commit()

    def close(self):
        """Close the database connection."""
        if self._conn:
            self._conn.close()
            self._conn = None

    # ==================== Sessions ====================

    def save_session(self, state: SessionState, name: str = DEFAULT_SESSION):
        """Write a session, replacing any previous one of the same name."""
        now = datetime.now().isoformat()
        self.conn.execute(
            "INSERT OR REPLACE INTO sessions (name, state, modified_at) VALUES (?, ?, ?)",
            (name, state.to_json(), now)
        )
        self.conn.commit()

    def load_session(self, name: str = DEFAULT_SESSION) -> SessionState:
        """Read a session.

        A missing or malformed session yields a fresh one, so a damaged file
        never prevents the editor from starting.
        """
        cursor = self.conn.cursor()
        cursor.execute("SELECT state FROM sessions WHERE name = ?", (name,))
        row = cursor.fetchone()

        if not row:
            return SessionState()

        try:
            return SessionState.from_json(row["state"])
        except SessionError as exc:
            logger.warning("Discarding malformed session %r: %s", name, exc)
            return SessionState()

    def list_sessions(self) -> List[str]:
        """Session names, most recently modified first."""
        cursor = self.conn.cursor()
        cursor.execute("SELECT name FROM sessions ORDER BY modified_at DESC")
        return [row["name"] for row in cursor.fetchall()]

    def delete_session(self, name: str):
        """Delete a session."""
        self.conn.execute("DELETE FROM sessions WHERE name = ?", (name,))
        self.conn.commit()

    # ==================== Settings Operations ====================

    def get_setting(self, key: str, default: Any = None) -> Any:
        """Get an application setting."""
        cursor = self.conn.cursor()
        cursor.execute("SELECT value FROM settings WHERE key = ?", (key,))
        row = cursor.fetchone()

        if not row:
            return default

        try:
            return json.loads(row["value"])
        except json.JSONDecodeError:
            return default

    def set_setting(self, key: str, value: Any):
        """Set an application setting."""
        cursor = self.conn.cursor()
        cursor.execute(
            "INSERT OR REPLACE INTO settings (key, value) VALUES (?, ?)",
            (key, json.dumps(value))
        )
        self.conn.commit()

    def load_settings(self) -> EditorSettings:
        """Editor settings, with defaults for anything not stored."""
        cursor = self.conn.cursor()
        cursor.execute("SELECT value FROM settings WHERE key = ?", (SETTINGS_KEY,))
        row = cursor.fetchone()
        return EditorSettings.from_json(row["value"] if row else None)

    def save_settings(self, settings: EditorSettings):
        self.conn.execute(
            "INSERT OR REPLACE INTO settings (key, value) VALUES (?, ?)",
            (SETTINGS_KEY, settings.to_json())
        )
        self.conn.commit()
