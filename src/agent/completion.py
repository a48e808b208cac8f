"""Agno-backed completion client with streaming, retries and fallbacks.

Talks to the chat model on behalf of the session controller.

Behaviour layered on top of Agno's Agent:

1. **Stateless agents** - No Agno storage is attached. The caller owns the
   transcript and sends the running context explicitly, so the persona
   instruction is always the first entry and history lives in one place.

2. **Two response modes** - Short replies (150 tokens) for normal chat and long
   replies (300 tokens) when reasoning is requested. Each mode is its own agent
   because the token bound is part of the model configuration.

3. **Retry then apologise** - Failed or empty completions are retried with a
   fixed delay. When the budget is spent the caller receives a fixed apology
   as ordinary content; nothing is raised.

4. **Streaming generator** - Agno yields run events with metadata. Content events
   are stripped of emoji and exposed as a plain async iterator of fragments.
   Agno reports provider failures as error events or errored runs rather than
   exceptions; both are raised here so the retry path sees them.
"""

import asyncio
import logging
from collections.abc import AsyncIterator, Callable, Sequence

from agno.agent import Agent
from agno.models.message import Message as AgnoMessage
from agno.models.openai import OpenAIChat
from agno.run.agent import RunEvent, RunOutput
from agno.run.base import RunStatus

from src.agent.config import CompletionConfig, get_completion_config
from src.agent.prompts import (
    DEFAULT_ERROR_RESPONSE,
    DEFAULT_GREETING,
    GREETING_PROMPT,
    HEALTH_CHECK_PROMPT,
    SYSTEM_PROMPT,
)
from src.agent.text import strip_emojis
from src.models.schemas import CompletionTurn, Message

logger = logging.getLogger(__name__)


class EmptyCompletionError(Exception):
    """Raised when the provider answers without any usable text."""

    pass


class ProviderError(Exception):
    """Raised when Agno reports a failed run instead of raising."""

    pass


def _ensure_succeeded(response: RunOutput) -> RunOutput:
    """Turn an errored run into an exception.

    Agno catches provider failures itself and returns a run whose status is
    ERROR and whose content is the error text.
    """
    if getattr(response, "status", None) == RunStatus.error:
        raise ProviderError(getattr(response, "content", None) or "Run failed")
    return response


def build_context(turns: Sequence[CompletionTurn]) -> list[CompletionTurn]:
    """Return the context with the persona instruction as its first entry.

    The input is not modified. A context that already opens with a system
    entry is returned as is.
    """
    context = list(turns)
    if not context or context[0].role != "system":
        context.insert(0, CompletionTurn(role="system", content=SYSTEM_PROMPT))
    return context


def transcript_to_turns(messages: Sequence[Message]) -> list[CompletionTurn]:
    """Map transcript entries onto provider roles."""
    return [
        CompletionTurn(role="user" if msg.is_user else "assistant", content=msg.content)
        for msg in messages
    ]


class CompletionService:
    """Client for the completion provider.

    Wraps Agno agents with:
    - Persona instruction injection
    - Short and long response modes
    - Bounded retries with a fixed delay and an apology fallback
    - Clean streaming interface for the session controller
    """

    def __init__(self, config: CompletionConfig | None = None) -> None:
        """Initialize the completion service.

        Args:
            config: Optional completion configuration.
                    Loads from environment if not provided.
        """
        self._config = config or get_completion_config()
        self._short_agent = self._create_agent(self._config.short_max_tokens)
        self._long_agent = self._create_agent(self._config.long_max_tokens)
        self._probe_agent = self._create_agent(1)

    def _create_agent(self, max_tokens: int) -> Agent:
        """Create a stateless Agno agent bound to one token limit.

        Returns:
            Configured Agent with an OpenAI-compatible chat model.
        """
        model = OpenAIChat(
            id=self._config.model_name,
            api_key=self._config.api_key,
            base_url=self._config.base_url,
            temperature=self._config.temperature,
            max_tokens=max_tokens,
        )

        return Agent(model=model, markdown=False)

    def _agent_for(self, use_reasoning: bool) -> Agent:
        return self._long_agent if use_reasoning else self._short_agent

    @staticmethod
    def _to_input(turns: Sequence[CompletionTurn]) -> list[AgnoMessage]:
        return [AgnoMessage(role=turn.role, content=turn.content) for turn in turns]

    def _context_for(
        self,
        user_message: str,
        history: Sequence[Message] | None,
    ) -> list[CompletionTurn]:
        prior = list(history or [])
        if self._config.history_messages:
            prior = prior[-self._config.history_messages :]
        else:
            prior = []
        return build_context(
            [*transcript_to_turns(prior), CompletionTurn(role="user", content=user_message)]
        )

    async def check_health(self) -> bool:
        """Probe the provider with a minimal request.

        Returns:
            True when the provider answered, False on any failure.
        """
        try:
            response = await self._probe_agent.arun(
                self._to_input([CompletionTurn(role="user", content=HEALTH_CHECK_PROMPT)])
            )
            _ensure_succeeded(response)
        except Exception as e:
            logger.warning(f"Completion health check failed: {e}")
            return False
        logger.debug("Completion health check passed")
        return True

    async def _stream_once(
        self,
        turns: Sequence[CompletionTurn],
        use_reasoning: bool,
    ) -> AsyncIterator[str]:
        response_stream = self._agent_for(use_reasoning).arun(
            self._to_input(turns),
            stream=True,
        )
        async for chunk in response_stream:
            event = getattr(chunk, "event", None)
            if event == RunEvent.run_error.value:
                raise ProviderError(getattr(chunk, "content", None) or "Run failed")
            if event != RunEvent.run_content.value:
                continue
            if isinstance(chunk.content, str) and chunk.content:
                fragment = strip_emojis(chunk.content)
                if fragment:
                    yield fragment

    async def _stream_with_retries(
        self,
        turns: Sequence[CompletionTurn],
        use_reasoning: bool,
        retries: int,
    ) -> AsyncIterator[str]:
        produced = False
        try:
            async for fragment in self._stream_once(turns, use_reasoning):
                produced = True
                yield fragment
            if not produced:
                raise EmptyCompletionError("Empty response received")
        except Exception as e:
            if produced:
                # Fragments already reached the caller; a retry would duplicate them
                logger.warning(f"Completion stream interrupted after partial output: {e}")
                return
            if retries > 0:
                logger.info(f"Retrying completion... ({retries} attempts remaining): {e}")
                await asyncio.sleep(self._config.retry_delay)
                async for fragment in self._stream_with_retries(
                    turns, use_reasoning, retries - 1
                ):
                    yield fragment
                return
            logger.error(f"Completion failed after retries: {e}")
            yield DEFAULT_ERROR_RESPONSE

    async def _complete_once(
        self,
        turns: Sequence[CompletionTurn],
        use_reasoning: bool,
    ) -> str:
        response = _ensure_succeeded(
            await self._agent_for(use_reasoning).arun(self._to_input(turns))
        )
        content = getattr(response, "content", None)
        if not isinstance(content, str):
            raise EmptyCompletionError(f"Unexpected response format: {response!r}")
        text = strip_emojis(content).strip()
        if not text:
            raise EmptyCompletionError("Empty response received")
        return text

    async def _complete_with_retries(
        self,
        turns: Sequence[CompletionTurn],
        use_reasoning: bool,
        retries: int,
    ) -> str:
        try:
            return await self._complete_once(turns, use_reasoning)
        except Exception as e:
            if retries > 0:
                logger.info(f"Retrying completion... ({retries} attempts remaining): {e}")
                await asyncio.sleep(self._config.retry_delay)
                return await self._complete_with_retries(turns, use_reasoning, retries - 1)
            logger.error(f"Completion failed after retries: {e}")
            return DEFAULT_ERROR_RESPONSE

    async def stream_response(
        self,
        user_message: str,
        *,
        history: Sequence[Message] | None = None,
        use_reasoning: bool = False,
    ) -> AsyncIterator[str]:
        """Stream reply fragments for a user message.

        Yields fragments in arrival order. A request that cannot be completed
        yields the apology text as its only fragment.

        Args:
            user_message: The user's message.
            history: Earlier transcript entries sent as context.
            use_reasoning: Use the long response mode.

        Yields:
            Response text fragments as they arrive.
        """
        if not user_message.strip():
            logger.debug("Empty message received")
            yield DEFAULT_ERROR_RESPONSE
            return

        turns = self._context_for(user_message, history)
        async for fragment in self._stream_with_retries(
            turns, use_reasoning, self._config.max_retries
        ):
            yield fragment

    async def get_response(
        self,
        user_message: str,
        on_chunk: Callable[[str], None] | None = None,
        *,
        history: Sequence[Message] | None = None,
        use_reasoning: bool = False,
    ) -> str:
        """Get the complete reply for a user message.

        With ``on_chunk`` the reply is streamed and the callback receives each
        fragment in order; the return value is their concatenation.

        Args:
            user_message: The user's message.
            on_chunk: Optional per-fragment callback.
            history: Earlier transcript entries sent as context.
            use_reasoning: Use the long response mode.

        Returns:
            Complete response text, or the apology text on failure.
        """
        if on_chunk is None:
            if not user_message.strip():
                return DEFAULT_ERROR_RESPONSE
            turns = self._context_for(user_message, history)
            return await self._complete_with_retries(
                turns, use_reasoning, self._config.max_retries
            )

        parts: list[str] = []
        async for fragment in self.stream_response(
            user_message, history=history, use_reasoning=use_reasoning
        ):
            parts.append(fragment)
            on_chunk(fragment)
        return "".join(parts) or DEFAULT_ERROR_RESPONSE

    async def get_initial_message(self) -> str:
        """Generate the opening greeting for a new conversation.

        Returns:
            A generated self-introduction, or the canned greeting when the
            provider is unavailable.
        """
        if not await self.check_health():
            logger.info("Completion provider unavailable, using default greeting")
            return DEFAULT_GREETING

        turns = build_context([CompletionTurn(role="user", content=GREETING_PROMPT)])
        try:
            return await self._complete_once(turns, use_reasoning=False)
        except Exception as e:
            logger.error(f"Initialization error: {e}")
            return DEFAULT_GREETING

    async def get_chat_response(
        self,
        messages: Sequence[Message],
        use_reasoning: bool = False,
    ) -> str:
        """Get a reply to a whole transcript without streaming.

        Returns:
            The reply text, the canned greeting for an empty transcript, or
            the apology text on failure.
        """
        if not messages:
            return DEFAULT_GREETING
        turns = build_context(transcript_to_turns(messages))
        return await self._complete_with_retries(
            turns, use_reasoning, self._config.max_retries
        )


# Module-level singleton instance
_completion_service: CompletionService | None = None


def get_completion_service() -> CompletionService:
    """Get or create the global completion service.

    Returns:
        The CompletionService instance.
    """
    global _completion_service
    if _completion_service is None:
        _completion_service = CompletionService()
    return _completion_service
