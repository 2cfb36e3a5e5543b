"""Data models for the chat API client."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field, field_validator

DEFAULT_BASE_URL = "http://127.0.0.1:5000"


class ClientConfig(BaseModel):
    """Connection settings for the chat REST API."""

    model_config = ConfigDict(frozen=True)

    base_url: str = Field(default=DEFAULT_BASE_URL, description="API root URL")
    timeout: float = Field(
        default=60.0,
        gt=0,
        description="Per-request timeout in seconds (model replies can be slow)"
    )
    connect_timeout: float = Field(default=10.0, gt=0, description="Connect timeout in seconds")

    @field_validator("base_url")
    @classmethod
    def _strip_trailing_slash(cls, value: str) -> str:
        return value.rstrip("/")


class DocumentInfo(BaseModel):
    """A reference document known to the server."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    document_id: str = Field(alias="documentId")
    title: str = ""
    url: str = ""
    type: str = "pdf"
    user_id: str | None = Field(default=None, alias="userId")
    created_at: datetime | None = Field(default=None, alias="createdAt")
    updated_at: datetime | None = Field(default=None, alias="updatedAt")
