"""In-memory session store.

The session id lives for the lifetime of the process.
"""

from .base import SessionStore
from .models import SessionRecord


class InMemorySessionStore(SessionStore):
    """Session store that forgets its id when the app exits."""

    def __init__(self, session_id: str | None = None):
        self._record = SessionRecord(session_id=session_id) if session_id else None

    def current(self) -> str | None:
        return self._record.session_id if self._record else None

    def get_or_create(self) -> str:
        if self._record is None:
            self._record = SessionRecord()
        return self._record.session_id

    def reset(self) -> str:
        self._record = SessionRecord()
        return self._record.session_id

    @property
    def backend_type(self) -> str:
        return "memory"
