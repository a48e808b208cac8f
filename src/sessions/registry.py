"""Session registry kept in per-browser key-value storage.

The whole registry is serialized under one key and rewritten on every
mutation; the active session id lives under a second key.
"""

import json
import logging
import time
import uuid
from collections.abc import MutableMapping
from typing import Any

from pydantic import TypeAdapter, ValidationError

from src.models.schemas import Session

logger = logging.getLogger(__name__)

SESSIONS_KEY = "chatSessions"
ACTIVE_SESSION_KEY = "currentSessionId"

# Any mutable mapping works: NiceGUI's app.storage.user in the UI, a dict in tests
KeyValueStore = MutableMapping[str, Any]

_sessions_adapter = TypeAdapter(list[Session])


def generate_session_id() -> str:
    """Return a new session id built from random bits and the current time."""
    return f"{uuid.uuid4().hex[:12]}-{int(time.time() * 1000):x}"


class SessionRegistry:
    """Ordered list of chat sessions, newest first."""

    def __init__(self, storage: KeyValueStore) -> None:
        self._storage = storage

    def _load(self) -> list[Session]:
        raw = self._storage.get(SESSIONS_KEY)
        if not raw:
            return []
        try:
            sessions = _sessions_adapter.validate_json(raw)
        except ValidationError as e:
            logger.warning(f"Discarding unreadable session registry: {e}")
            return []

        # Keep the first occurrence of any duplicated id
        seen: set[str] = set()
        unique = []
        for session in sessions:
            if session.id not in seen:
                seen.add(session.id)
                unique.append(session)
        return unique

    def _save(self, sessions: list[Session]) -> None:
        self._storage[SESSIONS_KEY] = json.dumps(
            [s.model_dump(mode="json", exclude_none=True) for s in sessions]
        )

    def list_sessions(self) -> list[Session]:
        return self._load()

    def get_session(self, session_id: str) -> Session | None:
        return next((s for s in self._load() if s.id == session_id), None)

    def create_session(self) -> str:
        """Register a new unnamed session and make it active.

        Returns:
            The new session id.
        """
        sessions = self._load()
        existing = {s.id for s in sessions}
        session_id = generate_session_id()
        while session_id in existing:
            session_id = generate_session_id()

        sessions.insert(0, Session(id=session_id))
        self._save(sessions)
        self._storage[ACTIVE_SESSION_KEY] = session_id
        logger.info(f"Created session {session_id}")
        return session_id

    def rename_session(self, session_id: str, name: str) -> bool:
        """Set a session's display name. A blank name clears it.

        Returns:
            False if no session has the given id.
        """
        sessions = self._load()
        for session in sessions:
            if session.id == session_id:
                session.name = name.strip() or None
                self._save(sessions)
                return True
        logger.debug(f"Rename ignored, unknown session {session_id}")
        return False

    def delete_session(self, session_id: str) -> bool:
        """Remove a session. Clears the active pointer if it referenced it.

        Returns:
            False if no session has the given id.
        """
        sessions = self._load()
        remaining = [s for s in sessions if s.id != session_id]
        if len(remaining) == len(sessions):
            logger.debug(f"Delete ignored, unknown session {session_id}")
            return False

        self._save(remaining)
        if self._storage.get(ACTIVE_SESSION_KEY) == session_id:
            self._storage.pop(ACTIVE_SESSION_KEY, None)
        logger.info(f"Deleted session {session_id}")
        return True

    def set_active_session_id(self, session_id: str) -> None:
        """Point the active session at a registered session.

        Raises:
            KeyError: If the session is not registered.
        """
        if self.get_session(session_id) is None:
            raise KeyError(session_id)
        self._storage[ACTIVE_SESSION_KEY] = session_id

    def get_active_session_id(self) -> str:
        """Return the active session id, creating a session if there is none.

        A pointer to an id that is no longer registered counts as absent.
        """
        active = self._storage.get(ACTIVE_SESSION_KEY)
        if active and self.get_session(active) is not None:
            return active
        return self.create_session()
