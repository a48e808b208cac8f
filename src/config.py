"""Server configuration with environment variable loading.

Covers how the process serves the API and the chat UI. The completion
provider has its own settings in ``src.agent.config``.
"""

import os
from typing import Literal

from dotenv import load_dotenv
from pydantic import BaseModel, Field, field_validator

load_dotenv()

# Bind-all addresses are not reachable as a client target
_WILDCARD_HOSTS = {"", "0.0.0.0", "::"}


class ServerConfig(BaseModel):
    """Configuration for serving Virtual Parent.

    Attributes:
        host: Interface the servers bind to.
        port: Port of the API (and of the UI in integrated mode).
        ui_port: Port of the UI in separate mode.
        run_mode: ``integrated`` mounts the UI on the API server,
            ``separate`` runs each in its own process.
        log_level: Root logging level.
        storage_secret: Secret signing NiceGUI's per-browser storage.
        api_base_url: Explicit persistence API location, if not served here.
    """

    host: str = Field(default_factory=lambda: os.getenv("HOST", "0.0.0.0"))
    port: int = Field(
        default_factory=lambda: int(os.getenv("PORT", "8000")),
        ge=1,
        le=65535,
    )
    ui_port: int = Field(
        default_factory=lambda: int(os.getenv("UI_PORT", "8080")),
        ge=1,
        le=65535,
    )
    run_mode: Literal["integrated", "separate"] = Field(
        default_factory=lambda: os.getenv("RUN_MODE", "integrated"),
    )
    log_level: str = Field(default_factory=lambda: os.getenv("LOG_LEVEL", "INFO"))
    storage_secret: str = Field(
        default_factory=lambda: os.getenv("NICEGUI_STORAGE_SECRET", "virtual-parent-secret"),
    )
    api_base_url: str | None = Field(
        default_factory=lambda: os.getenv("API_BASE_URL") or None,
    )

    @field_validator("run_mode", mode="before")
    @classmethod
    def normalize_run_mode(cls, v: str) -> str:
        return v.strip().lower() if isinstance(v, str) else v

    @field_validator("log_level")
    @classmethod
    def normalize_log_level(cls, v: str) -> str:
        return v.strip().upper() or "INFO"

    @property
    def local_api_url(self) -> str:
        """URL at which this process's own API server can be reached."""
        host = "127.0.0.1" if self.host in _WILDCARD_HOSTS else self.host
        return f"http://{host}:{self.port}"

    @property
    def persistence_url(self) -> str:
        """Base URL the chat UI should use for the persistence API."""
        return self.api_base_url or self.local_api_url

    def ui_environment(self) -> dict[str, str]:
        """Environment for a standalone UI process.

        The child serves on ``ui_port`` and talks to this process's API.
        """
        return {
            **os.environ,
            "PORT": str(self.ui_port),
            "API_BASE_URL": self.persistence_url,
        }


def get_server_config() -> ServerConfig:
    """Create server configuration from environment.

    Raises:
        ValueError: If a port or the run mode is invalid.
    """
    return ServerConfig()
