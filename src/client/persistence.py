"""HTTP client for the chat persistence API.

Best-effort by contract: writes are fire-and-forget and never retried,
reads degrade to an empty history.
"""

import logging
import os

import httpx

from src.models.schemas import ChatRecord, Message

logger = logging.getLogger(__name__)

DEFAULT_API_BASE_URL = "http://localhost:8000"


class PersistenceClient:
    """Issues create/list calls against ``/api/chats``."""

    def __init__(
        self,
        base_url: str | None = None,
        user_id: str | None = None,
        timeout: float = 10.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._base_url = (
            base_url or os.getenv("API_BASE_URL") or DEFAULT_API_BASE_URL
        ).rstrip("/")
        self._user_id = user_id if user_id is not None else os.getenv("CHAT_USER_ID") or None
        self._timeout = timeout
        self._transport = transport

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            base_url=self._base_url,
            timeout=self._timeout,
            transport=self._transport,
        )

    async def save_message(
        self,
        session_id: str,
        content: str,
        is_user: bool,
    ) -> ChatRecord | None:
        """Store one message.

        Returns:
            The stored record, or None if the request failed.
        """
        payload: dict[str, str | bool] = {
            "sessionId": session_id,
            "message": content,
            "isUser": is_user,
        }
        if self._user_id:
            payload["userId"] = self._user_id

        async with self._client() as client:
            try:
                response = await client.post("/api/chats", json=payload)
                response.raise_for_status()
                return ChatRecord.model_validate(response.json())
            except httpx.HTTPStatusError as e:
                logger.warning(
                    f"Failed to save message for session {session_id}: "
                    f"HTTP {e.response.status_code}"
                )
            except (httpx.RequestError, ValueError) as e:
                logger.warning(f"Failed to save message for session {session_id}: {e}")
        return None

    async def fetch_history(self, session_id: str) -> list[Message]:
        """Load a session's messages, oldest first.

        Returns:
            The session's messages; empty for a new session or on failure.
        """
        params = {"sessionId": session_id}
        if self._user_id:
            params["userId"] = self._user_id

        async with self._client() as client:
            try:
                response = await client.get("/api/chats", params=params)
                response.raise_for_status()
                records = [ChatRecord.model_validate(item) for item in response.json()]
            except httpx.HTTPStatusError as e:
                logger.warning(
                    f"Failed to fetch history for session {session_id}: "
                    f"HTTP {e.response.status_code}"
                )
                return []
            except (httpx.RequestError, ValueError) as e:
                logger.warning(f"Failed to fetch history for session {session_id}: {e}")
                return []

        records.sort(key=lambda record: (record.timestamp, record.id))
        return [record.to_message() for record in records]
