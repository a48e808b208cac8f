"""Session controller: transcript, session identity and streamed replies.

Owns the active session and its in-memory transcript and coordinates the
persistence client and the completion client.

Flow of one message:

1. Blank input is ignored.
2. The user message is appended to the transcript and stored in the
   background (SENDING).
3. Reply fragments extend ``pending`` as they arrive (STREAMING).
4. The full reply is appended to the transcript, stored in the background,
   and ``pending`` is cleared (IDLE). A failed reply is appended as an
   assistant entry carrying an error text instead.

Every activation bumps a view generation. Work started under an older
generation stops touching controller state the moment it notices, so a late
reply never lands in another session's transcript. Outstanding provider
requests are not cancelled: a stale stream is read to its end and dropped.

No public method raises. Failures end up in the transcript or the log.
"""

import asyncio
import logging
from collections.abc import Callable
from contextlib import aclosing

from src.agent.completion import CompletionService
from src.client.persistence import PersistenceClient
from src.models.schemas import ChatState, Message, Session
from src.sessions.registry import SessionRegistry

logger = logging.getLogger(__name__)

FAILED_REPLY = "Sorry, I encountered an error. Please try again."

Listener = Callable[[], None]


class SessionController:
    """State holder for the chat view of one browser."""

    def __init__(
        self,
        registry: SessionRegistry,
        persistence: PersistenceClient,
        completion: CompletionService,
        use_reasoning: bool = False,
    ) -> None:
        self._registry = registry
        self._persistence = persistence
        self._completion = completion
        self.use_reasoning = use_reasoning

        self.session_id: str | None = None
        self.messages: list[Message] = []
        self.pending: str = ""
        self.state: ChatState = ChatState.IDLE
        self.loading: bool = False
        self.error: str | None = None

        self._generation = 0
        self._send_lock = asyncio.Lock()
        self._background: set[asyncio.Task] = set()
        self._listeners: list[Listener] = []

    @property
    def is_busy(self) -> bool:
        return self.loading or self.state is not ChatState.IDLE

    def list_sessions(self) -> list[Session]:
        return self._registry.list_sessions()

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Register a callback fired after every state change.

        Returns:
            A function that removes the listener.
        """
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _notify(self) -> None:
        for listener in list(self._listeners):
            try:
                listener()
            except Exception:
                logger.exception("Session listener failed")

    def _is_current(self, generation: int) -> bool:
        return generation == self._generation

    # Persistence

    async def _save(self, session_id: str, content: str, is_user: bool) -> None:
        try:
            await self._persistence.save_message(session_id, content, is_user)
        except Exception as e:
            logger.warning(f"Dropped message for session {session_id}: {e}")

    def _persist(self, session_id: str, content: str, is_user: bool) -> None:
        task = asyncio.create_task(self._save(session_id, content, is_user))
        self._background.add(task)
        task.add_done_callback(self._background.discard)

    async def wait_for_persistence(self) -> None:
        """Wait until every scheduled write has finished."""
        while self._background:
            await asyncio.gather(*list(self._background))

    # Session lifecycle

    async def _activate(self, session_id: str) -> None:
        self._generation += 1
        generation = self._generation
        self._send_lock = asyncio.Lock()

        self.session_id = session_id
        self.messages = []
        self.pending = ""
        self.state = ChatState.IDLE
        self.error = None
        self.loading = True
        self._notify()

        async with self._send_lock:
            try:
                history = await self._persistence.fetch_history(session_id)
                if not self._is_current(generation):
                    return
                if history:
                    logger.info(f"Loaded {len(history)} messages for session {session_id}")
                    self.messages = history
                else:
                    greeting = await self._completion.get_initial_message()
                    if not self._is_current(generation):
                        return
                    self.messages = [Message(content=greeting, is_user=False)]
                    self._persist(session_id, greeting, False)
            except Exception:
                logger.exception(f"Failed to load session {session_id}")
            finally:
                if self._is_current(generation):
                    self.loading = False
                    self._notify()

    async def start(self) -> None:
        """Load the active session, creating one on first use."""
        try:
            await self._activate(self._registry.get_active_session_id())
        except Exception:
            logger.exception("Failed to start chat session")

    async def switch_session(self, session_id: str) -> None:
        """Make another registered session active and load its transcript.

        Switching to the already active session does nothing.
        """
        if session_id == self.session_id:
            return
        try:
            self._registry.set_active_session_id(session_id)
        except KeyError:
            logger.warning(f"Cannot switch to unknown session {session_id}")
            return
        await self._activate(session_id)

    async def new_session(self) -> None:
        try:
            session_id = self._registry.create_session()
        except Exception:
            logger.exception("Failed to create session")
            return
        await self._activate(session_id)

    def rename_session(self, session_id: str, name: str) -> bool:
        try:
            renamed = self._registry.rename_session(session_id, name)
        except Exception:
            logger.exception(f"Failed to rename session {session_id}")
            return False
        if renamed:
            self._notify()
        return renamed

    async def delete_session(self, session_id: str) -> None:
        """Delete a session. Deleting the active one activates another."""
        try:
            was_active = session_id == self.session_id
            if not self._registry.delete_session(session_id):
                return
            if not was_active:
                self._notify()
                return
            remaining = self._registry.list_sessions()
            if remaining:
                self._registry.set_active_session_id(remaining[0].id)
                next_id = remaining[0].id
            else:
                next_id = self._registry.create_session()
        except Exception:
            logger.exception(f"Failed to delete session {session_id}")
            return
        await self._activate(next_id)

    # Messaging

    def _commit_reply(self, session_id: str, content: str) -> None:
        self.messages.append(Message(content=content, is_user=False))
        self._persist(session_id, content, False)

    async def send_message(self, text: str) -> None:
        """Append a user message and stream the assistant's reply.

        Blank input is ignored. Messages sent while a reply is outstanding are
        handled one after another.
        """
        if not text or not text.strip():
            return
        if self.session_id is None:
            await self.start()
            if self.session_id is None:
                return

        generation = self._generation
        session_id = self.session_id
        async with self._send_lock:
            if not self._is_current(generation):
                logger.info(f"Dropping message for inactive session {session_id}")
                return

            history = list(self.messages)
            self.messages.append(Message(content=text, is_user=True))
            self.state = ChatState.SENDING
            self.pending = ""
            self.error = None
            self._notify()
            self._persist(session_id, text, True)

            try:
                stream = self._completion.stream_response(
                    text, history=history, use_reasoning=self.use_reasoning
                )
                async with aclosing(stream):
                    async for fragment in stream:
                        if not self._is_current(generation):
                            # Drain without applying; the request runs to completion
                            continue
                        self.pending += fragment
                        self.state = ChatState.STREAMING
                        self._notify()
                if not self._is_current(generation):
                    logger.info(f"Discarded reply for inactive session {session_id}")
                    return
                reply = self.pending
                if not reply.strip():
                    raise ValueError("No response received")
            except Exception as e:
                if not self._is_current(generation):
                    return
                logger.error(f"Error getting response for session {session_id}: {e}")
                self.error = FAILED_REPLY
                reply = FAILED_REPLY

            if not self._is_current(generation):
                return
            self._commit_reply(session_id, reply)
            self.pending = ""
            self.state = ChatState.IDLE
            self._notify()
