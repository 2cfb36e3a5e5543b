"""Chat session module for docchat.

Keeps the visible message list of a chat in step with the server.
"""

from .base import SessionStore
from .controller import ChatSession, SessionBusyError
from .factory import create_session_store
from .file import DEFAULT_SESSION_PATH, FileSessionStore
from .in_memory import InMemorySessionStore
from .models import DisplayEntry, SendFailure, SessionRecord

__all__ = [
    "ChatSession",
    "DEFAULT_SESSION_PATH",
    "DisplayEntry",
    "FileSessionStore",
    "InMemorySessionStore",
    "SendFailure",
    "SessionBusyError",
    "SessionRecord",
    "SessionStore",
    "create_session_store",
]
