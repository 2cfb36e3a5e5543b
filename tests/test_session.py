"""Tests for the chat session controller and session stores."""
import asyncio
import json

import pytest

from docchat.client import ApiConnectionError, ApiStatusError
from docchat.reply import ChatMessage, ContentType, MessageRole, ReplyDecoder
from docchat.session import (
    ChatSession,
    FileSessionStore,
    InMemorySessionStore,
    SendFailure,
    SessionBusyError,
    create_session_store,
)


def user(content: str) -> ChatMessage:
    return ChatMessage(role=MessageRole.USER, content=content)


def assistant(content: str) -> ChatMessage:
    return ChatMessage(role=MessageRole.ASSISTANT, content=content)


class FakeClient:
    """Stand-in for ChatApiClient recording calls.

    Sends block on ``gate`` when one is set, so tests can observe the
    session while a request is in flight.
    """

    def __init__(self, history=None, reply="Done."):
        self.history = list(history or [])
        self.reply = reply
        self.send_error = None
        self.fetch_error = None
        self.clear_error = None
        self.gate = None
        self.sent = []
        self.cleared = []
        self.fetched = []

    async def fetch_messages(self, session_id):
        self.fetched.append(session_id)
        if self.fetch_error:
            raise self.fetch_error
        return list(self.history)

    async def send_message(self, text, session_id, *, file=None, referenced=False):
        self.sent.append((text, session_id, file, referenced))
        if self.gate is not None:
            await self.gate.wait()
        if self.send_error:
            raise self.send_error
        return assistant(self.reply)

    async def clear_messages(self, session_id):
        self.cleared.append(session_id)
        if self.clear_error:
            raise self.clear_error


async def wait_until_busy(session: ChatSession) -> None:
    for _ in range(100):
        if session.is_busy:
            return
        await asyncio.sleep(0)
    raise AssertionError("send never started")


class TestLoad:
    """Tests for loading history."""

    @pytest.mark.asyncio
    async def test_load_replaces_messages(self):
        """Test that load installs the server history."""
        client = FakeClient(history=[user("hi"), assistant("hello")])
        session = ChatSession(client, store=InMemorySessionStore("s-1"))

        assert await session.load()
        assert [m.content for m in session.messages] == ["hi", "hello"]
        assert client.fetched == ["s-1"]

    @pytest.mark.asyncio
    async def test_load_failure_keeps_state(self):
        """Test that a failed load keeps the previous list and records the error."""
        client = FakeClient(history=[user("hi")])
        session = ChatSession(client)
        await session.load()

        client.fetch_error = ApiConnectionError("refused")
        assert not await session.load()
        assert [m.content for m in session.messages] == ["hi"]
        assert isinstance(session.last_error, ApiConnectionError)

    @pytest.mark.asyncio
    async def test_document_chat_uses_document_id(self):
        """Test that a referenced chat uses the document id as session id."""
        client = FakeClient()
        store = InMemorySessionStore()
        session = ChatSession(client, document_id="doc-7", store=store)

        await session.load()
        assert session.referenced
        assert client.fetched == ["doc-7"]
        assert store.current() is None


class TestSend:
    """Tests for optimistic sends."""

    @pytest.mark.asyncio
    async def test_success_appends_reply(self):
        """Test that a successful send leaves user message then reply."""
        client = FakeClient(reply="Answer")
        session = ChatSession(client, store=InMemorySessionStore("s-1"))

        reply = await session.send("  Question  ")

        assert reply.content == "Answer"
        assert [m.content for m in session.messages] == ["Question", "Answer"]
        assert client.sent == [("Question", "s-1", None, False)]
        assert not session.is_busy
        assert session.failure is None

    @pytest.mark.asyncio
    async def test_user_message_visible_while_pending(self):
        """Test that the outgoing message shows before the server answers."""
        client = FakeClient()
        client.gate = asyncio.Event()
        session = ChatSession(client)
        snapshots = []
        session.subscribe(lambda s: snapshots.append((s.is_busy, len(s.messages))))

        task = asyncio.create_task(session.send("hello"))
        await wait_until_busy(session)

        assert [m.content for m in session.messages] == ["hello"]
        client.gate.set()
        await task

        assert snapshots[0] == (True, 1)
        assert snapshots[-1] == (False, 2)

    @pytest.mark.asyncio
    async def test_failure_rolls_back(self):
        """Test that a failed send removes only its own entries."""
        client = FakeClient(history=[user("earlier"), assistant("ok")])
        session = ChatSession(client)
        await session.load()

        client.send_error = ApiStatusError(500, "boom")
        result = await session.send("earlier")

        assert result is None
        assert [m.content for m in session.messages] == ["earlier", "ok"]
        assert session.failure == SendFailure(text="earlier", file=None, error=client.send_error)
        assert session.failure.is_retryable
        assert session.last_error is client.send_error
        assert not session.is_busy

    @pytest.mark.asyncio
    async def test_attachment_rolled_back_with_text(self, tmp_path):
        """Test that the file placeholder is removed together with the text."""
        attachment = tmp_path / "a.pdf"
        attachment.write_bytes(b"%PDF")
        client = FakeClient()
        client.send_error = ApiConnectionError("down")
        session = ChatSession(client)

        await session.send("about this", attachment)

        assert session.messages == ()
        assert session.failure.file == attachment

    @pytest.mark.asyncio
    async def test_cancellation_rolls_back(self):
        """Test that cancelling an in-flight send removes its entries."""
        client = FakeClient(history=[user("keep")])
        client.gate = asyncio.Event()
        session = ChatSession(client)
        await session.load()

        task = asyncio.create_task(session.send("drop me"))
        await wait_until_busy(session)
        task.cancel()
        with pytest.raises(asyncio.CancelledError):
            await task

        assert [m.content for m in session.messages] == ["keep"]
        assert session.failure.cancelled
        assert session.failure.message == "Request cancelled"
        assert not session.is_busy

    @pytest.mark.asyncio
    async def test_busy_rejects_second_send(self):
        """Test that only one send may be in flight."""
        client = FakeClient()
        client.gate = asyncio.Event()
        session = ChatSession(client)

        task = asyncio.create_task(session.send("first"))
        await wait_until_busy(session)
        with pytest.raises(SessionBusyError):
            await session.send("second")

        client.gate.set()
        await task
        assert [m.content for m in session.messages] == ["first", "Done."]

    @pytest.mark.asyncio
    async def test_empty_message_rejected(self):
        """Test that blank text without a file is refused."""
        session = ChatSession(FakeClient())
        with pytest.raises(ValueError):
            await session.send("   ")
        assert session.messages == ()

    @pytest.mark.asyncio
    async def test_file_only_allowed_unreferenced(self, tmp_path):
        """Test that a general chat may send just a file."""
        attachment = tmp_path / "a.pdf"
        attachment.write_bytes(b"%PDF")
        client = FakeClient()
        session = ChatSession(client)

        await session.send("", attachment)

        assert [(m.content, m.content_type) for m in session.messages] == [
            ("a.pdf", ContentType.FILE),
            ("Done.", ContentType.TEXT),
        ]
        assert client.sent[0][2] == attachment

    @pytest.mark.asyncio
    async def test_referenced_requires_text(self, tmp_path):
        """Test that a document chat needs a question."""
        attachment = tmp_path / "a.pdf"
        attachment.write_bytes(b"%PDF")
        session = ChatSession(FakeClient(), document_id="doc-1")
        with pytest.raises(ValueError):
            await session.send("", attachment)

    @pytest.mark.asyncio
    async def test_referenced_flag_passed(self):
        """Test that document chats send to the referenced endpoint."""
        client = FakeClient()
        session = ChatSession(client, document_id="doc-1")
        await session.send("q")
        assert client.sent == [("q", "doc-1", None, True)]

    @pytest.mark.asyncio
    async def test_unexpected_error_rolls_back_and_unlocks(self):
        """Test that an unmapped error still rolls back and frees the session."""
        client = FakeClient(history=[user("keep")])
        session = ChatSession(client)
        await session.load()

        client.send_error = KeyError("surprise")
        with pytest.raises(KeyError):
            await session.send("hello")

        assert [m.content for m in session.messages] == ["keep"]
        assert not session.is_busy
        assert session.failure.text == "hello"
        assert session.last_error is client.send_error

        client.send_error = None
        reply = await session.send("hello again")
        assert reply.content == "Done."


class TestRetry:
    """Tests for retrying failed sends."""

    @pytest.mark.asyncio
    async def test_retry_resends(self):
        """Test that retry resubmits the failed text."""
        client = FakeClient(reply="Second time lucky")
        client.send_error = ApiConnectionError("down")
        session = ChatSession(client)
        await session.send("hello")

        client.send_error = None
        reply = await session.retry()

        assert reply.content == "Second time lucky"
        assert [m.content for m in session.messages] == ["hello", "Second time lucky"]
        assert session.failure is None

    @pytest.mark.asyncio
    async def test_retry_without_failure(self):
        """Test that retry needs a failed submission."""
        with pytest.raises(RuntimeError):
            await ChatSession(FakeClient()).retry()

    @pytest.mark.asyncio
    async def test_dismiss(self):
        """Test that dismissing forgets the failure."""
        client = FakeClient()
        client.send_error = ApiConnectionError("down")
        session = ChatSession(client)
        await session.send("hello")

        session.dismiss_failure()
        assert session.failure is None
        assert session.last_error is None

    def test_client_errors_not_retryable(self):
        """Test that a 4xx failure is not offered for retry."""
        failure = SendFailure(text="x", file=None, error=ApiStatusError(400))
        assert not failure.is_retryable
        assert failure.message == "Server returned 400"


class TestDisplay:
    """Tests for rendering entries."""

    @pytest.mark.asyncio
    async def test_attachment_flag_and_hidden_placeholder(self):
        """Test that file placeholders mark the next message and are hidden."""
        history = [
            ChatMessage(role=MessageRole.USER, content="a.pdf", content_type=ContentType.FILE),
            user("summarize"),
            assistant("summary"),
        ]
        session = ChatSession(FakeClient(history=history))
        await session.load()

        entries = session.display()
        assert [(e.message.content, e.has_attachment) for e in entries] == [
            ("summarize", True),
            ("summary", False),
        ]
        assert entries[1].is_assistant

    @pytest.mark.asyncio
    async def test_undecodable_reply_hidden(self):
        """Test that fail-closed replies are left out of the display."""
        session = ChatSession(FakeClient(history=[user("q"), assistant("&&json {broken")]))
        await session.load()

        assert [e.message.content for e in session.display()] == ["q"]

    @pytest.mark.asyncio
    async def test_decoded_once(self):
        """Test that replies are decoded once and reused."""
        payload = json.dumps({"slides": [{"data": [{"type": "Text", "value": "x"}]}]})
        history = [assistant(f"deck &&json {payload}")]

        class CountingDecoder:
            calls = 0

            def decode(self, message):
                CountingDecoder.calls += 1
                return ReplyDecoder().decode(message)

        session = ChatSession(FakeClient(history=history), decoder=CountingDecoder())
        await session.load()
        session.display()
        session.display()

        assert CountingDecoder.calls == 1
        assert session.display()[0].reply.has_slides

    @pytest.mark.asyncio
    async def test_reload_drops_stale_decodes(self):
        """Test that reloading forgets decodes of messages no longer listed."""
        calls = []

        class CountingDecoder:
            def decode(self, message):
                calls.append(message.content)
                return ReplyDecoder().decode(message)

        client = FakeClient(history=[assistant("first")])
        session = ChatSession(client, decoder=CountingDecoder())
        await session.load()
        session.display()

        client.history = [assistant("second")]
        await session.load()
        session.display()

        client.history = [assistant("first")]
        await session.load()
        session.display()

        assert calls == ["first", "second", "first"]


class TestClearAndNewSession:
    """Tests for clearing history and starting over."""

    @pytest.mark.asyncio
    async def test_clear(self):
        """Test that clear empties the server and local history."""
        client = FakeClient(history=[user("hi")])
        session = ChatSession(client, store=InMemorySessionStore("s-1"))
        await session.load()

        assert await session.clear()
        assert session.messages == ()
        assert client.cleared == ["s-1"]

    @pytest.mark.asyncio
    async def test_clear_failure_keeps_history(self):
        """Test that a failed clear changes nothing locally."""
        client = FakeClient(history=[user("hi")])
        client.clear_error = ApiStatusError(503)
        session = ChatSession(client)
        await session.load()

        assert not await session.clear()
        assert [m.content for m in session.messages] == ["hi"]
        assert session.last_error is client.clear_error

    @pytest.mark.asyncio
    async def test_new_session(self):
        """Test that a new session gets a fresh id and empty list."""
        client = FakeClient(history=[user("hi")])
        store = InMemorySessionStore("old")
        session = ChatSession(client, store=store)
        await session.load()

        new_id = session.new_session()

        assert new_id != "old"
        assert session.session_id == new_id
        assert session.messages == ()

    def test_new_session_rejected_for_documents(self):
        """Test that document chats keep their id."""
        with pytest.raises(RuntimeError):
            ChatSession(FakeClient(), document_id="doc-1").new_session()

    def test_unsubscribe(self):
        """Test that an unsubscribed listener is not called."""
        session = ChatSession(FakeClient())
        calls = []
        unsubscribe = session.subscribe(lambda s: calls.append(1))
        unsubscribe()
        session.dismiss_failure()
        assert calls == []


class TestSessionStores:
    """Tests for session id stores."""

    def test_memory_store(self):
        """Test that the memory store creates once and resets on demand."""
        store = InMemorySessionStore()
        assert store.current() is None
        first = store.get_or_create()
        assert store.get_or_create() == first
        assert store.reset() != first
        assert store.backend_type == "memory"

    def test_file_store_persists(self, tmp_path):
        """Test that the file store survives a new instance."""
        path = tmp_path / "nested" / "session.json"
        session_id = FileSessionStore(path).get_or_create()

        reopened = FileSessionStore(path)
        assert reopened.current() == session_id
        assert json.loads(path.read_text())["sessionId"] == session_id

    def test_file_store_reset(self, tmp_path):
        """Test that reset writes a new id."""
        path = tmp_path / "session.json"
        store = FileSessionStore(path)
        first = store.get_or_create()
        second = store.reset()

        assert first != second
        assert FileSessionStore(path).current() == second

    def test_file_store_ignores_corrupt_file(self, tmp_path):
        """Test that an unreadable file is treated as no session."""
        path = tmp_path / "session.json"
        path.write_text("{not json")
        store = FileSessionStore(path)

        assert store.current() is None
        assert store.get_or_create()

    def test_factory(self, tmp_path):
        """Test creating stores by backend name."""
        assert isinstance(create_session_store("memory"), InMemorySessionStore)
        store = create_session_store("file", path=tmp_path / "s.json")
        assert isinstance(store, FileSessionStore)
        assert store.backend_type == "file"

    def test_factory_unknown_backend(self):
        """Test that an unknown backend raises ValueError."""
        with pytest.raises(ValueError, match="Unsupported session backend"):
            create_session_store("redis")
