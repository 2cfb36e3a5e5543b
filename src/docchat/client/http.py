"""Async HTTP client for the document chat REST API.

This module hides the design decision of how the chat server is reached.
Hidden design decisions:
- Endpoint paths and multipart field names
- Which endpoint answers referenced vs. unreferenced chats
- How transport failures and error bodies map onto ChatApiError types

Supports async context manager protocol for proper resource cleanup:
    async with ChatApiClient(config) as client:
        history = await client.fetch_messages(session_id)
"""

import logging
import mimetypes
from pathlib import Path
from typing import Any

import httpx
from pydantic import ValidationError

from ..reply.models import ChatMessage
from .errors import (
    ApiConnectionError,
    ApiResponseError,
    ApiStatusError,
    ApiTimeoutError,
)
from .models import ClientConfig, DocumentInfo

logger = logging.getLogger(__name__)

REFERENCED_CHAT_PATH = "/ai-chat-docs"
UNREFERENCED_CHAT_PATH = "/ai-chat"


def _error_detail(response: httpx.Response) -> str:
    """Pull the server's error message out of a failed response."""
    try:
        payload = response.json()
    except ValueError:
        return response.text.strip()
    if isinstance(payload, dict):
        return str(payload.get("message", "")).strip()
    if isinstance(payload, str):
        return payload.strip()
    return ""


class ChatApiClient:
    """Client for message history, chat turns and reference documents."""

    def __init__(
        self,
        config: ClientConfig | None = None,
        transport: httpx.AsyncBaseTransport | None = None
    ):
        """Initialize client.

        Args:
            config: Connection settings (defaults to ClientConfig())
            transport: Optional transport override, used by tests
        """
        self._config = config or ClientConfig()
        timeout = httpx.Timeout(self._config.timeout, connect=self._config.connect_timeout)
        self._client = httpx.AsyncClient(
            base_url=self._config.base_url,
            timeout=timeout,
            transport=transport
        )

    @property
    def config(self) -> ClientConfig:
        return self._config

    async def _request(self, method: str, path: str, **kwargs: Any) -> httpx.Response:
        logger.debug("%s %s", method, path)
        try:
            response = await self._client.request(method, path, **kwargs)
        except httpx.TimeoutException as e:
            raise ApiTimeoutError(f"{method} {path}") from e
        except httpx.RequestError as e:
            raise ApiConnectionError(str(e) or type(e).__name__) from e

        if response.status_code >= 400:
            detail = _error_detail(response)
            logger.warning("%s %s failed with %d: %s", method, path, response.status_code, detail)
            raise ApiStatusError(response.status_code, detail)
        return response

    @staticmethod
    def _json(response: httpx.Response) -> Any:
        try:
            return response.json()
        except ValueError as e:
            raise ApiResponseError(f"body is not JSON ({e})") from e

    async def fetch_messages(self, session_id: str) -> list[ChatMessage]:
        """Fetch the stored history for a chat session, oldest first."""
        response = await self._request("GET", f"/messages/sessions/{session_id}")
        payload = self._json(response)
        if payload is None:
            return []
        if not isinstance(payload, list):
            raise ApiResponseError("expected a list of messages")
        try:
            return [ChatMessage.model_validate(item) for item in payload]
        except ValidationError as e:
            raise ApiResponseError(str(e)) from e

    async def send_message(
        self,
        text: str,
        session_id: str,
        *,
        file: str | Path | None = None,
        referenced: bool = False
    ) -> ChatMessage:
        """Send one chat turn and return the assistant's reply.

        Args:
            text: User message text (may be empty when a file is attached)
            session_id: Chat session identifier
            file: Optional attachment path
            referenced: Ask against the reference documents

        Returns:
            The assistant reply message
        """
        path = REFERENCED_CHAT_PATH if referenced else UNREFERENCED_CHAT_PATH
        data = {"text": text, "sessionId": session_id}

        if file is None:
            # httpx only encodes multipart when files are present
            response = await self._request("POST", path, files={k: (None, v) for k, v in data.items()})
        else:
            file_path = Path(file)
            content_type = mimetypes.guess_type(file_path.name)[0] or "application/octet-stream"
            with file_path.open("rb") as handle:
                response = await self._request(
                    "POST",
                    path,
                    data=data,
                    files={"file": (file_path.name, handle, content_type)}
                )

        payload = self._json(response)
        try:
            return ChatMessage.model_validate(payload)
        except ValidationError as e:
            raise ApiResponseError(str(e)) from e

    async def clear_messages(self, session_id: str) -> None:
        """Delete the stored history for a chat session."""
        await self._request("DELETE", f"/messages/sessions/{session_id}")

    async def list_documents(self, user_id: str | None = None) -> list[DocumentInfo]:
        """List reference documents, optionally only those of one user."""
        path = f"/documents/users/{user_id}" if user_id else "/documents"
        payload = self._json(await self._request("GET", path))
        if payload is None:
            return []
        if not isinstance(payload, list):
            raise ApiResponseError("expected a list of documents")
        try:
            return [DocumentInfo.model_validate(item) for item in payload]
        except ValidationError as e:
            raise ApiResponseError(str(e)) from e

    async def upload_document(
        self,
        path: str | Path,
        title: str,
        user_id: str,
        file_type: str = "pdf"
    ) -> DocumentInfo:
        """Upload a reference document."""
        file_path = Path(path)
        content_type = mimetypes.guess_type(file_path.name)[0] or "application/pdf"
        with file_path.open("rb") as handle:
            response = await self._request(
                "POST",
                "/documents",
                data={"title": title, "userId": user_id, "fileType": file_type},
                files={"file": (file_path.name, handle, content_type)}
            )
        try:
            return DocumentInfo.model_validate(self._json(response))
        except ValidationError as e:
            raise ApiResponseError(str(e)) from e

    async def delete_document(self, document_id: str) -> None:
        """Delete a reference document."""
        await self._request("DELETE", f"/documents/{document_id}")

    async def close(self) -> None:
        """Close the underlying HTTP connection pool."""
        await self._client.aclose()

    async def __aenter__(self) -> "ChatApiClient":
        return self

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        try:
            await self.close()
        except RuntimeError as e:
            # Harmless httpx/anyio cleanup race
            if "Event loop is closed" not in str(e):
                raise
