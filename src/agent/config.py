"""Completion configuration with environment variable loading.

Pydantic-based configuration for the Agno-backed completion client.
Supports OpenAI and OpenAI-compatible APIs (Groq, local servers) via custom base URL.
"""

import os

from dotenv import load_dotenv
from pydantic import BaseModel, Field, field_validator

# Load environment variables from .env file
load_dotenv()


class CompletionConfig(BaseModel):
    """Configuration for the completion client.

    Supports OpenAI and any OpenAI-compatible API via LLM_BASE_URL.

    Attributes:
        api_key: API key for model access.
        base_url: API base URL (None for OpenAI default).
        model_name: Model identifier to use.
        temperature: Sampling temperature (0.0 = deterministic, 2.0 = creative).
        short_max_tokens: Token bound for regular replies.
        long_max_tokens: Token bound for reasoning (long) replies.
        history_messages: Prior transcript entries included as context.
        max_retries: Extra attempts after a failed or empty completion.
        retry_delay: Seconds to wait between attempts.
    """

    api_key: str = Field(
        default_factory=lambda: os.getenv("LLM_API_KEY", os.getenv("OPENAI_API_KEY", "")),
        description="API key for LLM provider",
    )
    base_url: str | None = Field(
        default_factory=lambda: os.getenv("LLM_BASE_URL") or None,
        description="API base URL (None for OpenAI default)",
    )
    model_name: str = Field(
        default_factory=lambda: os.getenv("LLM_MODEL", "gpt-4o-mini"),
        description="Model to use",
    )
    temperature: float = Field(
        default=0.7,
        ge=0.0,
        le=2.0,
        description="Sampling temperature for response generation",
    )
    short_max_tokens: int = Field(
        default=150,
        ge=1,
        le=128000,
        description="Maximum tokens in a regular response",
    )
    long_max_tokens: int = Field(
        default=300,
        ge=1,
        le=128000,
        description="Maximum tokens in a reasoning response",
    )
    history_messages: int = Field(
        default=20,
        ge=0,
        description="Prior transcript entries sent as context (~10 turns)",
    )
    max_retries: int = Field(default=2, ge=0, le=10)
    retry_delay: float = Field(default=0.5, ge=0.0)

    @field_validator("api_key")
    @classmethod
    def validate_api_key(cls, v: str) -> str:
        """Validate that API key is provided and non-empty."""
        if not v or not v.strip():
            raise ValueError(
                "API key required. Set LLM_API_KEY or OPENAI_API_KEY in .env"
            )
        return v.strip()


def get_completion_config() -> CompletionConfig:
    """Create completion configuration from environment.

    Returns:
        Configured CompletionConfig instance.

    Raises:
        ValueError: If no API key is set.
    """
    return CompletionConfig()
