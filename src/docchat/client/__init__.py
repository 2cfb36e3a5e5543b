"""Chat API client module for docchat.

Talks to the document chat REST server over HTTP.
"""

from .errors import (
    ApiConnectionError,
    ApiResponseError,
    ApiStatusError,
    ApiTimeoutError,
    ChatApiError,
)
from .http import ChatApiClient
from .models import DEFAULT_BASE_URL, ClientConfig, DocumentInfo

__all__ = [
    "ApiConnectionError",
    "ApiResponseError",
    "ApiStatusError",
    "ApiTimeoutError",
    "ChatApiClient",
    "ChatApiError",
    "ClientConfig",
    "DEFAULT_BASE_URL",
    "DocumentInfo",
]
