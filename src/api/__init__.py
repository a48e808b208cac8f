"""FastAPI persistence service for chat transcripts.

RESTful API over a SQLite message store with async request handling.

Endpoints:
    - GET /health: Service health status
    - POST /api/chats: Store a chat message
    - GET /api/chats: List messages for a session (or user)
"""

from src.api.app import app, create_app

__all__ = ["app", "create_app"]
