"""Agno completion logic for the virtual parent persona.

Responsibilities:
    - Model configuration for OpenAI-compatible providers
    - Persona instruction injection
    - Streaming token delivery with retries and fallback replies
    - Provider health probing and greeting generation

Maintains clean separation from the UI and persistence layers.
"""

from src.agent.completion import CompletionService, get_completion_service
from src.agent.config import CompletionConfig, get_completion_config

__all__ = [
    "CompletionConfig",
    "CompletionService",
    "get_completion_config",
    "get_completion_service",
]
