"""Chat message endpoints for transcript persistence.

Handles storing individual messages and listing a session's history.
"""

import logging
import sqlite3

from fastapi import APIRouter, Depends, HTTPException, status

from src.api.store import ChatStore, get_chat_store
from src.models.schemas import ChatCreate, ChatRecord

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/chats", tags=["chats"])


@router.post(
    "",
    response_model=ChatRecord,
    response_model_by_alias=True,
    status_code=status.HTTP_201_CREATED,
)
def save_chat(
    payload: ChatCreate,
    store: ChatStore = Depends(get_chat_store),
) -> ChatRecord:
    """Store a single chat message.

    Args:
        payload: Session id, message text, author flag and optional user id.
        store: Message storage backend.

    Returns:
        The stored record with its server-assigned id and timestamp.

    Raises:
        400: sessionId or message missing.
        500: Storage failure.
    """
    if not payload.session_id or not payload.message:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="sessionId and message are required",
        )

    try:
        return store.add(
            session_id=payload.session_id,
            message=payload.message,
            is_user=payload.is_user,
            user_id=payload.user_id,
        )
    except sqlite3.Error as e:
        logger.error(f"Failed to save chat message for session {payload.session_id}: {e}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to save chat message",
        ) from e


@router.get("", response_model=list[ChatRecord], response_model_by_alias=True)
def list_chats(
    sessionId: str | None = None,  # noqa: N803 - public query parameter name
    userId: str | None = None,  # noqa: N803
    store: ChatStore = Depends(get_chat_store),
) -> list[ChatRecord]:
    """List chat messages, oldest first.

    Missing filters match every message.

    Raises:
        500: Storage failure.
    """
    try:
        return store.find(session_id=sessionId, user_id=userId)
    except sqlite3.Error as e:
        logger.error(f"Failed to fetch chat history: {e}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to fetch chat history",
        ) from e
