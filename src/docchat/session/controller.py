"""Chat session controller.

This module hides the design decision of how the visible message list is kept
in step with the server.
Hidden design decisions:
- Optimistic append of outgoing messages before the server answers
- Rollback of exactly those optimistic entries on failure or cancellation
- Which session id and endpoint a chat uses (document vs. anonymous)
- Decoding each reply once and reusing the result on every render
"""

import asyncio
import logging
from collections.abc import Callable
from pathlib import Path

from ..client.errors import ChatApiError
from ..client.http import ChatApiClient
from ..reply.decoder import ReplyDecoder, visible_messages
from ..reply.models import ChatMessage, ContentType, DecodedReply, MessageRole
from .base import SessionStore
from .in_memory import InMemorySessionStore
from .models import DisplayEntry, SendFailure

logger = logging.getLogger(__name__)

SessionListener = Callable[["ChatSession"], None]


class SessionBusyError(RuntimeError):
    """A message is already in flight for this session."""


class ChatSession:
    """Message list plus the operations that change it.

    All mutation happens on the caller's event loop; observers are called
    synchronously after every state change.

    Example:
        session = ChatSession(client, store=store)
        await session.load()
        await session.send("Summarize chapter 2 as slides")
        for entry in session.display():
            ...
    """

    def __init__(
        self,
        client: ChatApiClient,
        *,
        document_id: str | None = None,
        store: SessionStore | None = None,
        decoder: ReplyDecoder | None = None
    ):
        """Initialize session.

        Args:
            client: API client used for all server calls
            document_id: Reference document; when set, the chat is referenced
                and the document id doubles as the session id
            store: Holder of the anonymous session id (unreferenced chats)
            decoder: Reply decoder (defaults to ReplyDecoder())
        """
        self._client = client
        self._document_id = document_id
        self._store = store or InMemorySessionStore()
        self._decoder = decoder or ReplyDecoder()

        self._messages: list[ChatMessage] = []
        self._decoded: dict[tuple[MessageRole, str], DecodedReply] = {}
        self._listeners: list[SessionListener] = []
        self._busy = False

        self.last_error: Exception | None = None
        self.failure: SendFailure | None = None

    # State

    @property
    def referenced(self) -> bool:
        return self._document_id is not None

    @property
    def session_id(self) -> str:
        if self._document_id is not None:
            return self._document_id
        return self._store.get_or_create()

    @property
    def messages(self) -> tuple[ChatMessage, ...]:
        return tuple(self._messages)

    @property
    def is_busy(self) -> bool:
        return self._busy

    def subscribe(self, listener: SessionListener) -> Callable[[], None]:
        """Register a state-change listener; returns an unsubscribe function."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _notify(self) -> None:
        for listener in list(self._listeners):
            try:
                listener(self)
            except Exception:
                logger.exception("Session listener failed")

    # Rendering

    def decoded(self, message: ChatMessage) -> DecodedReply:
        """Decoded form of one message, computed at most once per content."""
        key = (message.role, message.content)
        reply = self._decoded.get(key)
        if reply is None:
            reply = self._decoder.decode(message)
            self._decoded[key] = reply
        return reply

    def display(self) -> list[DisplayEntry]:
        """Renderable entries, with undecodable replies left out."""
        entries = []
        for message, has_attachment in visible_messages(self._messages):
            reply = self.decoded(message)
            if not reply.is_displayable:
                continue
            entries.append(DisplayEntry(message=message, reply=reply, has_attachment=has_attachment))
        return entries

    # Operations

    async def load(self) -> bool:
        """Replace the local list with the server's history.

        Returns:
            True on success; on failure the prior list is kept and
            ``last_error`` is set
        """
        try:
            history = await self._client.fetch_messages(self.session_id)
        except ChatApiError as e:
            logger.error("Failed to load messages for %s: %s", self.session_id, e)
            self.last_error = e
            self._notify()
            return False

        self._messages = list(history)
        live = {(message.role, message.content) for message in self._messages}
        self._decoded = {key: reply for key, reply in self._decoded.items() if key in live}
        self.last_error = None
        self._notify()
        logger.debug("Loaded %d messages", len(history))
        return True

    async def send(self, text: str, file: str | Path | None = None) -> ChatMessage | None:
        """Send one message with optimistic display.

        The outgoing entries appear at once. If the request fails or is
        cancelled, exactly those entries are removed again and ``failure``
        records the submission for ``retry()``.

        Returns:
            The assistant reply, or None when the send failed

        Raises:
            ValueError: If there is nothing to send
            SessionBusyError: If another send is still in flight
            asyncio.CancelledError: Re-raised after rolling back
            Exception: Unexpected errors are re-raised after rolling back
        """
        text = text.strip()
        file_path = Path(file) if file is not None else None
        if not text and file_path is None:
            raise ValueError("Message cannot be empty")
        if self.referenced and not text:
            raise ValueError("Please type a question about the document")
        if self._busy:
            raise SessionBusyError("A message is already being sent")

        optimistic: list[ChatMessage] = []
        if file_path is not None:
            optimistic.append(ChatMessage(
                role=MessageRole.USER,
                content=file_path.name,
                content_type=ContentType.FILE
            ))
        if text:
            optimistic.append(ChatMessage(role=MessageRole.USER, content=text))

        self._busy = True
        self.failure = None
        self.last_error = None
        self._messages.extend(optimistic)
        self._notify()

        try:
            reply = await self._client.send_message(
                text,
                self.session_id,
                file=file_path,
                referenced=self.referenced
            )
        except asyncio.CancelledError:
            self._rollback(optimistic)
            self.failure = SendFailure(text=text, file=file_path, error=None, cancelled=True)
            raise
        except (ChatApiError, OSError) as e:
            logger.error("Failed to send message: %s", e)
            self._rollback(optimistic)
            self.failure = SendFailure(text=text, file=file_path, error=e)
            self.last_error = e
            return None
        except Exception as e:
            logger.exception("Unexpected error while sending message")
            self._rollback(optimistic)
            self.failure = SendFailure(text=text, file=file_path, error=e)
            self.last_error = e
            raise
        else:
            self._messages.append(reply)
            return reply
        finally:
            self._busy = False
            self._notify()

    def _rollback(self, optimistic: list[ChatMessage]) -> None:
        # Identity match: equal-looking earlier messages must stay
        self._messages = [
            message for message in self._messages
            if not any(message is entry for entry in optimistic)
        ]

    async def retry(self) -> ChatMessage | None:
        """Resend the last failed submission.

        Raises:
            RuntimeError: If there is no failed submission
        """
        if self.failure is None:
            raise RuntimeError("Nothing to retry")
        failure = self.failure
        return await self.send(failure.text, failure.file)

    def dismiss_failure(self) -> None:
        """Forget the failed submission without resending it."""
        self.failure = None
        self.last_error = None
        self._notify()

    async def clear(self) -> bool:
        """Delete the history on the server, then locally.

        Returns:
            True on success; on failure nothing local changes
        """
        try:
            await self._client.clear_messages(self.session_id)
        except ChatApiError as e:
            logger.error("Failed to clear messages: %s", e)
            self.last_error = e
            self._notify()
            return False

        self._messages = []
        self._decoded.clear()
        self.failure = None
        self.last_error = None
        self._notify()
        return True

    def new_session(self) -> str:
        """Start a fresh anonymous session.

        Raises:
            RuntimeError: For document chats, whose id is fixed
        """
        if self.referenced:
            raise RuntimeError("Document chats cannot start a new session")
        session_id = self._store.reset()
        self._messages = []
        self._decoded.clear()
        self.failure = None
        self.last_error = None
        self._notify()
        logger.info("New session %s", session_id)
        return session_id
