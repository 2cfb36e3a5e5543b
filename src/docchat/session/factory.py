"""Factory for creating session stores."""

from typing import Any

from .base import SessionStore


def create_session_store(backend: str = "memory", **kwargs: Any) -> SessionStore:
    """Create a session store.

    Args:
        backend: Backend type ("memory" or "file")
        **kwargs: Backend-specific configuration

    Returns:
        SessionStore instance

    Raises:
        ValueError: If backend type is not supported
    """
    if backend == "memory":
        from .in_memory import InMemorySessionStore
        return InMemorySessionStore(**kwargs)

    elif backend == "file":
        from .file import FileSessionStore
        return FileSessionStore(**kwargs)

    raise ValueError(
        f"Unsupported session backend: {backend}. "
        f"Supported backends: memory, file"
    )
