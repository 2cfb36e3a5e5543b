"""JSON file session store.

Keeps the anonymous session id across runs, the way a browser keeps it in
local storage.
"""

import json
import logging
from pathlib import Path

from pydantic import ValidationError

from .base import SessionStore
from .models import SessionRecord

logger = logging.getLogger(__name__)

DEFAULT_SESSION_PATH = Path.home() / ".docchat" / "session.json"


class FileSessionStore(SessionStore):
    """Session store persisted to a small JSON file."""

    def __init__(self, path: str | Path | None = None):
        self._path = Path(path).expanduser() if path else DEFAULT_SESSION_PATH
        self._record: SessionRecord | None = None

    @property
    def path(self) -> Path:
        return self._path

    def _load(self) -> SessionRecord | None:
        if not self._path.exists():
            return None
        try:
            return SessionRecord.model_validate_json(self._path.read_text(encoding="utf-8"))
        except (OSError, ValidationError, json.JSONDecodeError) as e:
            # Unreadable file: treat as absent, next write replaces it
            logger.warning("Ignoring unreadable session file %s: %s", self._path, e)
            return None

    def _save(self, record: SessionRecord) -> None:
        self._path.parent.mkdir(parents=True, exist_ok=True)
        self._path.write_text(record.model_dump_json(by_alias=True), encoding="utf-8")
        self._record = record

    def current(self) -> str | None:
        if self._record is None:
            self._record = self._load()
        return self._record.session_id if self._record else None

    def get_or_create(self) -> str:
        existing = self.current()
        if existing:
            return existing
        record = SessionRecord()
        self._save(record)
        logger.info("Started chat session %s", record.session_id)
        return record.session_id

    def reset(self) -> str:
        record = SessionRecord()
        self._save(record)
        logger.info("Started new chat session %s", record.session_id)
        return record.session_id

    @property
    def backend_type(self) -> str:
        return "file"
