"""SQLite storage for chat messages.

One row per message, append-only. Timestamps are assigned on insert and
history is returned oldest first.
"""

import logging
import os
import sqlite3
import threading
from datetime import UTC, datetime
from pathlib import Path

from src.models.schemas import ChatRecord

logger = logging.getLogger(__name__)

# Store chat history in project data directory unless overridden
_DATA_DIR = Path(__file__).parent.parent.parent / "data"
_DEFAULT_DB_PATH = _DATA_DIR / "chats.db"


class ChatStore:
    """SQLite-backed storage for chat messages.

    One connection is shared by the request threadpool; statements are
    serialized with a lock.
    """

    def __init__(self, db_path: Path | str) -> None:
        db_path = str(db_path)
        if db_path != ":memory:":
            Path(db_path).parent.mkdir(parents=True, exist_ok=True)
        self.conn = sqlite3.connect(db_path, check_same_thread=False)
        self._lock = threading.Lock()
        self.conn.row_factory = sqlite3.Row
        self._migrate()

    def _migrate(self) -> None:
        self.conn.executescript("""
            CREATE TABLE IF NOT EXISTS chats (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                session_id TEXT NOT NULL,
                message TEXT NOT NULL,
                is_user INTEGER NOT NULL,
                user_id TEXT,
                timestamp TEXT NOT NULL
            );

            CREATE INDEX IF NOT EXISTS idx_chats_session
                ON chats(session_id);
        """)
        self.conn.commit()

    def add(
        self,
        session_id: str,
        message: str,
        is_user: bool | None,
        user_id: str | None = None,
    ) -> ChatRecord:
        """Insert a message and return the stored record.

        Raises:
            sqlite3.Error: If the row violates a constraint or the write fails.
        """
        with self._lock:
            timestamp = datetime.now(UTC)
            cur = self.conn.execute(
                """INSERT INTO chats (session_id, message, is_user, user_id, timestamp)
                   VALUES (?, ?, ?, ?, ?)""",
                (
                    session_id,
                    message,
                    None if is_user is None else int(is_user),
                    user_id,
                    timestamp.isoformat(),
                ),
            )
            self.conn.commit()
        return ChatRecord(
            id=cur.lastrowid,
            session_id=session_id,
            message=message,
            is_user=bool(is_user),
            user_id=user_id,
            timestamp=timestamp,
        )

    def find(
        self,
        session_id: str | None = None,
        user_id: str | None = None,
    ) -> list[ChatRecord]:
        """Return messages matching the filters, oldest first.

        A filter left as None matches every row.
        """
        clauses: list[str] = []
        params: list[str] = []
        if user_id:
            clauses.append("user_id = ?")
            params.append(user_id)
        if session_id:
            clauses.append("session_id = ?")
            params.append(session_id)

        query = "SELECT * FROM chats"
        if clauses:
            query += " WHERE " + " AND ".join(clauses)
        query += " ORDER BY timestamp ASC, id ASC"

        with self._lock:
            rows = self.conn.execute(query, params).fetchall()
        return [
            ChatRecord(
                id=row["id"],
                session_id=row["session_id"],
                message=row["message"],
                is_user=bool(row["is_user"]),
                user_id=row["user_id"],
                timestamp=datetime.fromisoformat(row["timestamp"]),
            )
            for row in rows
        ]

    def close(self) -> None:
        with self._lock:
            self.conn.close()


# Module-level singleton instance
_chat_store: ChatStore | None = None


def get_chat_store() -> ChatStore:
    """Get or create the global chat store.

    The database path comes from CHAT_DB_PATH, falling back to data/chats.db.

    Returns:
        The ChatStore instance.
    """
    global _chat_store
    if _chat_store is None:
        _chat_store = ChatStore(os.getenv("CHAT_DB_PATH") or _DEFAULT_DB_PATH)
    return _chat_store


def close_chat_store() -> None:
    """Close the global chat store, if it was opened."""
    global _chat_store
    if _chat_store is not None:
        _chat_store.close()
        _chat_store = None
