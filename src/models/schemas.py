from datetime import datetime
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, field_validator


class ChatState(str, Enum):
    """Lifecycle states of the active conversation."""

    IDLE = "idle"
    SENDING = "sending"
    STREAMING = "streaming"


class Session(BaseModel):
    """A user-visible conversation thread.

    Attributes:
        id: Opaque identifier, unique per device.
        created: When the session was started.
        name: Optional display name set by the user.
    """

    id: str = Field(..., min_length=1)
    created: datetime = Field(default_factory=datetime.now)
    name: str | None = None

    @property
    def display_name(self) -> str:
        """Name shown in the sidebar, derived from creation time when unnamed."""
        if self.name:
            return self.name
        return f"Chat {self.created.strftime('%b %d, %I:%M %p')}"


class Message(BaseModel):
    """A single transcript entry.

    Attributes:
        content: The message text.
        is_user: True for user-authored entries, False for assistant replies.
        timestamp: Server-assigned persistence time, None until stored.
    """

    content: str
    is_user: bool
    timestamp: datetime | None = None


class ChatCreate(BaseModel):
    """Request payload for storing a chat message.

    Fields are optional at the schema level so that missing values are
    answered with 400 by the route instead of a 422 validation error.
    """

    model_config = ConfigDict(populate_by_name=True)

    session_id: str | None = Field(None, alias="sessionId")
    message: str | None = None
    is_user: bool | None = Field(None, alias="isUser")
    user_id: str | None = Field(None, alias="userId")


class ChatRecord(BaseModel):
    """A stored chat message as returned by the persistence API."""

    model_config = ConfigDict(populate_by_name=True)

    id: int
    session_id: str = Field(..., alias="sessionId")
    message: str
    is_user: bool = Field(..., alias="isUser")
    user_id: str | None = Field(None, alias="userId")
    timestamp: datetime

    def to_message(self) -> Message:
        """Convert the wire record into a transcript entry."""
        return Message(content=self.message, is_user=self.is_user, timestamp=self.timestamp)


class CompletionTurn(BaseModel):
    """One entry of the context sent to the completion provider."""

    role: str = Field(..., pattern="^(system|user|assistant)$")
    content: str

    @field_validator("content", mode="before")
    @classmethod
    def coerce_content(cls, v: object) -> object:
        """Treat a missing content as an empty string."""
        if v is None:
            return ""
        return v
