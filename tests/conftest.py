"""Pytest fixtures and shared test configuration.

Provides reusable fixtures for unit and integration tests.

Fixtures:
    - chat_store: In-memory SQLite chat store
    - api_app: FastAPI app wired to the in-memory store
    - async_client: HTTPX client for API testing
    - storage: Dict standing in for per-browser storage
    - registry: SessionRegistry over that storage
    - persistence / completion: Doubles for the controller's collaborators
    - controller: SessionController wired to the doubles
    - mock_session_id: Consistent session ID for tests
"""

import asyncio
from collections.abc import AsyncGenerator, AsyncIterator, Generator, Sequence
from typing import Any

import pytest
from fastapi import FastAPI
from httpx import ASGITransport, AsyncClient

from src.api.app import create_app
from src.api.store import ChatStore
from src.models.schemas import Message
from src.sessions.controller import SessionController
from src.sessions.registry import SessionRegistry

GREETING = "Hello! I am here to help."


class FakePersistence:
    """Records writes and serves canned histories."""

    def __init__(self, histories: dict[str, list[Message]] | None = None) -> None:
        self.histories = histories or {}
        self.saved: list[tuple[str, str, bool]] = []
        self.fetches: list[str] = []

    async def save_message(self, session_id: str, content: str, is_user: bool) -> None:
        self.saved.append((session_id, content, is_user))

    async def fetch_history(self, session_id: str) -> list[Message]:
        self.fetches.append(session_id)
        return list(self.histories.get(session_id, []))


class FakeCompletion:
    """Streams queued replies, one list of fragments per request.

    A reply queued as an exception is raised instead. When ``gate`` is set
    the stream waits for it before producing anything. Messages whose
    stream was read to the end are recorded in ``finished``.
    """

    def __init__(self, replies: list[Any] | None = None, greeting: str = GREETING) -> None:
        self.replies = list(replies or [])
        self.greeting = greeting
        self.requests: list[tuple[str, list[Message]]] = []
        self.finished: list[str] = []
        self.gate: asyncio.Event | None = None

    async def get_initial_message(self) -> str:
        return self.greeting

    async def stream_response(
        self,
        user_message: str,
        *,
        history: Sequence[Message] | None = None,
        use_reasoning: bool = False,
    ) -> AsyncIterator[str]:
        self.requests.append((user_message, list(history or [])))
        reply = self.replies.pop(0) if self.replies else [f"Reply to {user_message}"]
        if self.gate is not None:
            await self.gate.wait()
        if isinstance(reply, Exception):
            raise reply
        for fragment in reply:
            await asyncio.sleep(0)
            yield fragment
        self.finished.append(user_message)


@pytest.fixture
def mock_session_id() -> str:
    """Generate consistent session ID for testing.

    Returns:
        Predictable session ID for test assertions.
    """
    return "test-session-12345"


@pytest.fixture
def chat_store() -> Generator[ChatStore]:
    """Create an in-memory chat store."""
    store = ChatStore(":memory:")
    yield store
    store.close()


@pytest.fixture
def api_app(chat_store: ChatStore) -> FastAPI:
    """Create a FastAPI app that uses the in-memory store."""
    return create_app(store=chat_store)


@pytest.fixture
async def async_client(api_app: FastAPI) -> AsyncGenerator[AsyncClient]:
    """Create async HTTP client for API testing.

    Yields:
        Configured AsyncClient for making test requests.
    """
    transport = ASGITransport(app=api_app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client


@pytest.fixture
def storage() -> dict[str, Any]:
    return {}


@pytest.fixture
def registry(storage: dict[str, Any]) -> SessionRegistry:
    return SessionRegistry(storage)


@pytest.fixture
def persistence() -> FakePersistence:
    return FakePersistence()


@pytest.fixture
def completion() -> FakeCompletion:
    return FakeCompletion()


@pytest.fixture
def controller(
    registry: SessionRegistry,
    persistence: FakePersistence,
    completion: FakeCompletion,
) -> SessionController:
    return SessionController(registry, persistence, completion)
