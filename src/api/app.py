"""FastAPI application for transcript persistence.

Serves the chat message endpoints and a health check. The chat UI is
mounted onto this app by ``src.main`` in integrated mode.
"""

import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from src.api.routes import router as chats_router
from src.api.store import ChatStore, close_chat_store, get_chat_store

logger = logging.getLogger(__name__)

SERVICE_NAME = "virtual-parent"


def create_app(store: ChatStore | None = None) -> FastAPI:
    """Create the persistence API.

    Args:
        store: Chat store to serve. Defaults to the global SQLite store,
            which is opened on startup and closed on shutdown. A store
            passed in is owned by the caller and left open.

    Returns:
        Configured FastAPI application instance.
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncGenerator[None]:
        if store is None:
            # Open now so a bad CHAT_DB_PATH fails at startup, not on first message
            get_chat_store()
        logger.info("Chat persistence API ready")
        yield
        if store is None:
            close_chat_store()
        logger.info("Chat persistence API stopped")

    application = FastAPI(
        title="Virtual Parent API",
        description="Stores chat messages per session and returns session history in order.",
        version="0.1.0",
        lifespan=lifespan,
    )

    # The browser UI may be served from another origin in separate mode
    application.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["GET", "POST"],
        allow_headers=["*"],
    )

    application.include_router(chats_router)
    if store is not None:
        application.dependency_overrides[get_chat_store] = lambda: store

    @application.get("/health")
    def health_check() -> dict[str, str]:
        return {"status": "healthy", "service": SERVICE_NAME}

    return application


app = create_app()
