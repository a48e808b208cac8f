"""Pydantic models for sessions, messages, and API payloads.

Provides type safety, validation, and automatic OpenAPI documentation.

Models:
    - Session: Chat session registered in browser storage
    - Message: Transcript entry for the active session
    - ChatCreate: Incoming persistence request payload
    - ChatRecord: Stored chat message returned by the API
    - CompletionTurn: Role/content entry sent to the completion provider
    - ChatState: Conversation lifecycle state
"""

from src.models.schemas import (
    ChatCreate,
    ChatRecord,
    ChatState,
    CompletionTurn,
    Message,
    Session,
)

__all__ = [
    "ChatCreate",
    "ChatRecord",
    "ChatState",
    "CompletionTurn",
    "Message",
    "Session",
]
