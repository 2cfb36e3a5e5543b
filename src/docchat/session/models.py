"""Data models for chat session state."""

from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from uuid import uuid4

from pydantic import BaseModel, ConfigDict, Field

from ..reply.models import ChatMessage, DecodedReply


class SessionRecord(BaseModel):
    """Persisted identity of the anonymous (unreferenced) chat session."""

    model_config = ConfigDict(populate_by_name=True)

    session_id: str = Field(default_factory=lambda: str(uuid4()), alias="sessionId")
    created_at: datetime = Field(default_factory=datetime.now, alias="createdAt")


@dataclass(frozen=True)
class SendFailure:
    """A submission that did not reach the server, kept for retry."""

    text: str
    file: Path | None
    error: Exception | None
    cancelled: bool = False

    @property
    def message(self) -> str:
        if self.cancelled:
            return "Request cancelled"
        return str(self.error) if self.error else "Failed to send message"

    @property
    def is_retryable(self) -> bool:
        if self.cancelled or self.error is None:
            return True
        check = getattr(self.error, "is_retryable", None)
        return bool(check()) if callable(check) else False


@dataclass(frozen=True)
class DisplayEntry:
    """One renderable row of the session view."""

    message: ChatMessage
    reply: DecodedReply
    has_attachment: bool = False

    @property
    def is_assistant(self) -> bool:
        return self.message.is_assistant
