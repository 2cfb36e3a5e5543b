"""Data models for chat messages and decoded replies.

These models define the structure of a message as the server sends it and of
the artifacts derived from an assistant reply. They are independent of how
replies are decoded or rendered.
"""

import json
from datetime import datetime
from enum import Enum
from typing import Any

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator


class MessageRole(str, Enum):
    """Author of a chat message."""

    USER = "user"
    ASSISTANT = "assistant"


class ContentType(str, Enum):
    """Whether a message carries text or marks a file attachment."""

    TEXT = "text"
    FILE = "file"


class DecodeStrategy(str, Enum):
    """How the structured payload was located in a reply."""

    NONE = "none"
    SENTINEL = "sentinel"
    BRACE_FALLBACK = "brace_fallback"


_ASSISTANT_ALIASES = {"assistant", "ai", "model", "bot"}


class ChatMessage(BaseModel):
    """A single entry of a chat session.

    Messages are frozen: decoding derives new values and never rewrites
    the stored content.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    role: MessageRole = Field(description="Author of the message")
    content: str = Field(default="", description="Raw message text, may embed a payload")
    created_at: datetime = Field(
        default_factory=datetime.now,
        alias="createdAt",
        description="Creation timestamp"
    )
    content_type: ContentType = Field(
        default=ContentType.TEXT,
        alias="contentType",
        description="Text message or file attachment placeholder"
    )

    @field_validator("role", mode="before")
    @classmethod
    def _normalize_role(cls, value: Any) -> Any:
        if isinstance(value, str):
            lowered = value.strip().lower()
            if lowered in _ASSISTANT_ALIASES:
                return MessageRole.ASSISTANT
            return lowered
        return value

    @field_validator("content", mode="before")
    @classmethod
    def _coerce_content(cls, value: Any) -> Any:
        if value is None:
            return ""
        if isinstance(value, str):
            return value
        return json.dumps(value, ensure_ascii=False)

    @field_validator("content_type", mode="before")
    @classmethod
    def _default_content_type(cls, value: Any) -> Any:
        if value in (None, ""):
            return ContentType.TEXT
        return value

    @property
    def is_assistant(self) -> bool:
        return self.role == MessageRole.ASSISTANT

    @property
    def is_attachment(self) -> bool:
        return self.content_type == ContentType.FILE


class SlideItemKind(str, Enum):
    """Content kinds a slide can hold."""

    TEXT = "Text"
    TABLE = "Table"
    IMAGE = "Image"
    SHAPE = "Shape"
    CHART = "Chart"

    @classmethod
    def _missing_(cls, value: object) -> "SlideItemKind | None":
        if isinstance(value, str):
            for member in cls:
                if member.value.lower() == value.strip().lower():
                    return member
        return None


class ChartSeries(BaseModel):
    """One named data series of a chart."""

    model_config = ConfigDict(frozen=True)

    name: str = Field(default="", description="Series name shown in the legend")
    labels: list[Any] = Field(default_factory=list, description="Category labels")
    values: list[Any] = Field(description="Data points, required")

    @field_validator("name", mode="before")
    @classmethod
    def _stringify_name(cls, value: Any) -> Any:
        return "" if value is None else str(value)


class SlideItem(BaseModel):
    """A typed content item placed on a slide."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    type: SlideItemKind
    value: Any = None
    options: dict[str, Any] = Field(default_factory=dict)
    chart_data: list[ChartSeries] = Field(
        default_factory=list,
        validation_alias=AliasChoices("chatData", "chartData", "chart_data"),
    )

    @field_validator("options", mode="before")
    @classmethod
    def _default_options(cls, value: Any) -> Any:
        return {} if value is None else value


class SlideSpec(BaseModel):
    """Declarative content of one slide."""

    model_config = ConfigDict(frozen=True)

    data: list[SlideItem] = Field(default_factory=list)


def cell_value(cell: Any) -> Any:
    """Extract the value of a spreadsheet cell.

    Cells arrive as ``{"value": x}`` objects; bare scalars are their own value.
    """
    if isinstance(cell, dict):
        return cell.get("value")
    return cell


class SpreadsheetSpec(BaseModel):
    """Tabular payload of a reply."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    column_labels: list[str] = Field(default_factory=list, alias="columnLabels")
    row_labels: list[str] | None = Field(default=None, alias="rowLabels")
    data: list[list[Any]] = Field(description="Rows of cells")

    @field_validator("column_labels", "row_labels", mode="before")
    @classmethod
    def _stringify_labels(cls, value: Any) -> Any:
        if isinstance(value, list):
            return ["" if label is None else str(label) for label in value]
        return value

    def value_rows(self) -> list[list[Any]]:
        """Data rows with each cell reduced to its value."""
        return [[cell_value(cell) for cell in row] for row in self.data]


class DecodedReply(BaseModel):
    """Prose and artifacts derived from one chat message."""

    model_config = ConfigDict(frozen=True)

    prose: str = ""
    slides: list[SlideSpec] | None = None
    spreadsheet: SpreadsheetSpec | None = None
    decode_error: bool = False
    strategy: DecodeStrategy = DecodeStrategy.NONE

    @property
    def has_slides(self) -> bool:
        return bool(self.slides)

    @property
    def has_spreadsheet(self) -> bool:
        return self.spreadsheet is not None and bool(self.spreadsheet.data)

    @property
    def is_displayable(self) -> bool:
        """False only for suppressed (fail-closed) replies."""
        return not self.decode_error or bool(self.prose)
