"""Abstract base class for session identity stores.

This module defines where the anonymous chat session id lives.
The abstraction hides:
- Persistence mechanism (process memory, JSON file)
- Initialization on first use
"""

from abc import ABC, abstractmethod


class SessionStore(ABC):
    """Process-wide holder of the current anonymous session id."""

    @abstractmethod
    def current(self) -> str | None:
        """Return the current session id, or None before first use."""

    @abstractmethod
    def get_or_create(self) -> str:
        """Return the current session id, creating one on first use."""

    @abstractmethod
    def reset(self) -> str:
        """Replace the current session id with a fresh one and return it."""

    @property
    @abstractmethod
    def backend_type(self) -> str:
        """Get the backend type identifier."""
