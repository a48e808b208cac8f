"""Virtual Parent - streaming parenting-advice chat assistant.

Combines FastAPI for transcript persistence, Agno for LLM completions,
NiceGUI for the chat interface, and Pydantic for data validation.

Components:
    - api: Chat message persistence endpoints and SQLite store
    - agent: Completion client with persona, retries and streaming
    - client: HTTP client for the persistence API
    - sessions: Session registry and the streaming session controller
    - ui: Web interface with session sidebar and voice input/output
    - models: Session, message and payload schemas
"""

__version__ = "0.1.0"
