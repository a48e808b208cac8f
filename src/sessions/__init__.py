"""Chat session state: the session registry and the session controller.

Responsibilities:
    - Session list and active pointer in per-browser storage
    - Transcript loading on session activation
    - Optimistic message append with background persistence
    - Streamed reply assembly with stale-session protection
"""

from src.sessions.controller import SessionController
from src.sessions.registry import KeyValueStore, SessionRegistry

__all__ = ["KeyValueStore", "SessionController", "SessionRegistry"]
