"""Error types raised by the chat API client."""


class ChatApiError(Exception):
    """Base class for chat API errors."""

    def is_retryable(self) -> bool:
        """Override in subclasses to control retry behavior."""
        return False


class ApiTimeoutError(ChatApiError):
    """Request did not complete within the configured timeout (retryable)."""

    def __init__(self, message: str):
        super().__init__(f"Request timed out: {message}")

    def is_retryable(self) -> bool:
        return True


class ApiConnectionError(ChatApiError):
    """Server could not be reached (retryable)."""

    def __init__(self, message: str):
        super().__init__(f"Network error: {message}")

    def is_retryable(self) -> bool:
        return True


class ApiStatusError(ChatApiError):
    """Server answered with an error status."""

    def __init__(self, status_code: int, detail: str = ""):
        message = f"Server returned {status_code}"
        if detail:
            message = f"{message}: {detail}"
        super().__init__(message)
        self.status_code = status_code
        self.detail = detail

    def is_retryable(self) -> bool:
        return self.status_code >= 500 or self.status_code == 429


class ApiResponseError(ChatApiError):
    """Server answered with a body that does not match the expected shape."""

    def __init__(self, message: str):
        super().__init__(f"Malformed response: {message}")
