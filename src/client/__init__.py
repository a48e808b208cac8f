"""HTTP clients used by the chat UI."""

from src.client.persistence import PersistenceClient

__all__ = ["PersistenceClient"]
