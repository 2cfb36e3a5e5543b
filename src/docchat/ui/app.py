"""Main Textual TUI application.

Orchestrates the UI components and wires them to a ChatSession.
"""

import asyncio
import logging
import webbrowser
from datetime import datetime
from pathlib import Path

from textual import work
from textual.app import App, ComposeResult
from textual.binding import Binding
from textual.containers import Vertical
from textual.widgets import Footer, Header, Static

from ..client.http import ChatApiClient
from ..export.base import ArtifactExporter, ExportError
from ..export.grid import SpreadsheetGrid
from ..export.printing import open_print_view
from ..export.slides import SlideDeckExporter
from ..export.spreadsheet import SpreadsheetExporter
from ..reply.models import DecodedReply
from ..session.base import SessionStore
from ..session.controller import ChatSession, SessionBusyError
from .config import NOTIFY_ERROR, NOTIFY_SHORT, PRINT_TITLE, LogLevel
from .log_handler import PanelLogHandler
from .screens import AttachFileScreen, ConfirmationScreen, SpreadsheetPreviewScreen
from .styles import APP_CSS
from .themes import DOCCHAT_DARK
from .widgets import (
    ACTION_COPY,
    ACTION_EXCEL,
    ACTION_PRINT,
    ACTION_SHEET,
    ACTION_SLIDES,
    ChatHistoryWidget,
    ChatInputBar,
    DebugPanel,
    ErrorBar,
    MessageView,
    copy_text,
)

logger = logging.getLogger(__name__)


class DocChatApp(App):
    """Textual TUI for document chat."""

    CSS = APP_CSS
    TITLE = "DocChat"

    BINDINGS = [
        Binding("ctrl+c", "quit", "Quit"),
        Binding("ctrl+n", "new_session", "New Session"),
        Binding("ctrl+k", "clear_chat", "Clear Chat"),
        Binding("ctrl+o", "attach_file", "Attach"),
        Binding("ctrl+r", "copy_last_response", "Copy Reply"),
        Binding("escape", "cancel_request", "Cancel"),
        Binding("ctrl+b", "toggle_maximize_chat", "Max Chat"),
        Binding("ctrl+d", "toggle_debug", "Log"),
    ]

    def __init__(
        self,
        session: ChatSession,
        log_level: str | None = None,
        export_dir: str | Path | None = None,
    ) -> None:
        super().__init__()
        self._session = session
        self._log_level = log_level
        self._export_dir = Path(export_dir) if export_dir else Path.cwd()
        self._attachment: Path | None = None
        self._current_worker = None
        self._log_handler: PanelLogHandler | None = None
        self._unsubscribe = None
        self._log_was_visible = False

    @property
    def session(self) -> ChatSession:
        return self._session

    def compose(self) -> ComposeResult:
        yield Header(show_clock=True)
        yield ChatHistoryWidget(id="chat-history")
        yield DebugPanel(id="debug-panel")
        with Vertical(id="bottom-bar"):
            yield ErrorBar(id="error-bar")
            yield Static("", id="attachment-label", markup=False)
            yield ChatInputBar(id="chat-input-bar")
        yield Footer()

    def on_mount(self) -> None:
        """Called when app is mounted."""
        self.register_theme(DOCCHAT_DARK)
        self.theme = "docchat-dark"

        log_panel = self.query_one("#debug-panel", DebugPanel)
        self._log_handler = PanelLogHandler(self, log_panel)
        logging.getLogger("docchat").addHandler(self._log_handler)
        if self._log_level is not None:
            log_panel.log_level = LogLevel.from_string(self._log_level)
            log_panel.show()
            logger.info("Log panel enabled with level: %s", self._log_level.upper())

        mode = "document" if self._session.referenced else "general"
        self.sub_title = f"{mode} chat | session {self._session.session_id[:8]}"

        self._unsubscribe = self._session.subscribe(lambda _session: self._refresh())
        chat = self.query_one("#chat-history", ChatHistoryWidget)
        chat.set_welcome([
            "Welcome to DocChat!",
            "",
            "Ask about your documents. Replies with slides or spreadsheets",
            "get Slides, Excel and Sheet buttons underneath.",
            "",
            "Ctrl+J sends, Ctrl+O attaches a PDF.",
        ])
        self.query_one("#chat-input-bar", ChatInputBar).focus_input()
        self._load_history()

    def on_unmount(self) -> None:
        """Detach from the session and logging."""
        if self._unsubscribe is not None:
            self._unsubscribe()
            self._unsubscribe = None
        if self._log_handler is not None:
            logging.getLogger("docchat").removeHandler(self._log_handler)
            self._log_handler = None

    # Session state -> widgets

    def _refresh(self) -> None:
        session = self._session
        chat = self.query_one("#chat-history", ChatHistoryWidget)
        chat.show_entries(session.display(), pending=session.is_busy)
        self.query_one("#chat-input-bar", ChatInputBar).set_busy(session.is_busy)

        error_bar = self.query_one("#error-bar", ErrorBar)
        if session.failure is not None:
            error_bar.show_error(session.failure.message, retryable=session.failure.is_retryable)
        elif session.last_error is not None:
            error_bar.show_error(str(session.last_error))
        else:
            error_bar.clear()

    def _set_attachment(self, path: Path | None) -> None:
        self._attachment = path
        label = self.query_one("#attachment-label", Static)
        label.update(f"Attached: {path.name}" if path else "")

    # Workers

    @work(exclusive=True, group="history")
    async def _load_history(self) -> None:
        if await self._session.load():
            logger.info("History loaded (%d messages)", len(self._session.messages))
        else:
            self.notify("Failed to load messages", severity="error", timeout=NOTIFY_ERROR)

    @work(exclusive=True, group="chat")
    async def _send(self, text: str, file: Path | None) -> None:
        try:
            reply = await self._session.send(text, file)
        except asyncio.CancelledError:
            self.notify("Cancelled", severity="warning", timeout=NOTIFY_SHORT)
            return
        except (ValueError, SessionBusyError) as e:
            self.notify(str(e), severity="warning", timeout=NOTIFY_SHORT)
            return
        except Exception as e:
            # Session already rolled back and logged the traceback
            self.notify(f"Failed to send message: {e}", severity="error", timeout=NOTIFY_ERROR)
            return

        if reply is None:
            self.notify("Failed to send message", severity="error", timeout=NOTIFY_ERROR)

    @work(exclusive=True, group="chat")
    async def _retry(self) -> None:
        try:
            reply = await self._session.retry()
        except asyncio.CancelledError:
            self.notify("Cancelled", severity="warning", timeout=NOTIFY_SHORT)
            return
        except (RuntimeError, ValueError) as e:
            self.notify(str(e), severity="warning", timeout=NOTIFY_SHORT)
            return
        if reply is None:
            self.notify("Failed to send message", severity="error", timeout=NOTIFY_ERROR)

    @work(exclusive=True, group="history")
    async def _clear(self) -> None:
        if await self._session.clear():
            self.notify("Messages deleted", timeout=NOTIFY_SHORT)
        else:
            self.notify("Failed to delete messages", severity="error", timeout=NOTIFY_ERROR)

    # Events

    def on_chat_input_bar_submitted(self, event: ChatInputBar.Submitted) -> None:
        """Handle user input submission."""
        text = event.value
        if not text and self._attachment is None:
            self.notify("Please type a message", severity="warning", timeout=NOTIFY_SHORT)
            return
        if self._session.is_busy:
            self.notify("Wait for the current reply", severity="warning", timeout=NOTIFY_SHORT)
            return

        attachment = self._attachment
        self._set_attachment(None)
        self._current_worker = self._send(text, attachment)

    def on_chat_input_bar_attach_requested(self, event: ChatInputBar.AttachRequested) -> None:
        self.action_attach_file()

    def on_error_bar_retry_requested(self, event: ErrorBar.RetryRequested) -> None:
        if self._session.failure is not None:
            self._current_worker = self._retry()
        else:
            self._load_history()

    def on_error_bar_dismissed(self, event: ErrorBar.Dismissed) -> None:
        self._session.dismiss_failure()

    def on_message_view_action_requested(self, event: MessageView.ActionRequested) -> None:
        reply = event.entry.reply
        if event.action == ACTION_COPY:
            copy_text(self, reply.prose)
        elif event.action == ACTION_PRINT:
            self._print(reply.prose)
        elif event.action == ACTION_SLIDES:
            self._export(SlideDeckExporter(), reply)
        elif event.action == ACTION_EXCEL:
            self._export(SpreadsheetExporter(), reply)
        elif event.action == ACTION_SHEET and reply.spreadsheet is not None:
            grid = SpreadsheetGrid.from_spec(reply.spreadsheet)
            self.push_screen(SpreadsheetPreviewScreen(grid), self._download_grid)

    # Export

    def _export_path(self, filename: str) -> Path:
        stem, _, suffix = filename.rpartition(".")
        stamp = datetime.now().strftime("%Y%m%d-%H%M%S")
        return self._export_dir / f"{stem}-{stamp}.{suffix}"

    def _export(self, exporter: ArtifactExporter, reply: DecodedReply) -> None:
        try:
            path = exporter.write(reply, self._export_path(exporter.default_filename))
        except (ExportError, OSError) as e:
            logger.error("Export failed: %s", e)
            self.notify(f"Export failed: {e}", severity="error", timeout=NOTIFY_ERROR)
            return
        self.notify(f"Saved {path}", timeout=NOTIFY_ERROR)

    def _print(self, prose: str) -> None:
        try:
            path = open_print_view(prose, PRINT_TITLE)
        except (OSError, webbrowser.Error) as e:
            logger.error("Print view failed: %s", e)
            self.notify(f"Print failed: {e}", severity="error", timeout=NOTIFY_ERROR)
            return
        self.notify(f"Print view opened: {path.name}", timeout=NOTIFY_SHORT)

    def _download_grid(self, grid: SpreadsheetGrid | None) -> None:
        if grid is None:
            return
        exporter = SpreadsheetExporter()
        path = self._export_path(exporter.default_filename)
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_bytes(exporter.export_spec(grid.to_spec()))
        except (ExportError, OSError) as e:
            logger.error("Export failed: %s", e)
            self.notify(f"Export failed: {e}", severity="error", timeout=NOTIFY_ERROR)
            return
        self.notify(f"Saved {path}", timeout=NOTIFY_ERROR)

    # Actions

    def action_new_session(self) -> None:
        """Start a fresh anonymous session."""
        if self._session.referenced:
            self.notify("Document chats keep their session", severity="warning", timeout=NOTIFY_SHORT)
            return
        if self._session.is_busy:
            self.notify("Wait for the current reply", severity="warning", timeout=NOTIFY_SHORT)
            return
        session_id = self._session.new_session()
        self.sub_title = f"general chat | session {session_id[:8]}"
        self.notify("New session started", timeout=NOTIFY_SHORT)

    def action_clear_chat(self) -> None:
        """Delete the session's messages after confirmation."""
        def on_answer(confirmed: bool | None) -> None:
            if confirmed:
                self._clear()

        self.push_screen(
            ConfirmationScreen("Delete all messages in this session?", title="Clear chat"),
            on_answer,
        )

    def action_attach_file(self) -> None:
        """Pick a PDF to send with the next message."""
        if self._attachment is not None:
            self._set_attachment(None)
            self.notify("Attachment removed", timeout=NOTIFY_SHORT)
            return
        self.push_screen(AttachFileScreen(), self._set_attachment)

    def action_cancel_request(self) -> None:
        """Cancel the in-flight request."""
        if self._current_worker and self._current_worker.is_running:
            self._current_worker.cancel()

    def action_toggle_debug(self) -> None:
        """Toggle the log panel visibility."""
        log_panel = self.query_one("#debug-panel", DebugPanel)
        is_visible = log_panel.toggle()
        self.notify(f"Log panel {'shown' if is_visible else 'hidden'}", timeout=NOTIFY_SHORT)

    def action_toggle_maximize_chat(self) -> None:
        """Toggle maximize for chat panel."""
        chat = self.query_one("#chat-history", ChatHistoryWidget)
        log_panel = self.query_one("#debug-panel", DebugPanel)
        if chat.has_class("-maximized"):
            chat.remove_class("-maximized")
            if self._log_was_visible:
                log_panel.show()
        else:
            chat.add_class("-maximized")
            self._log_was_visible = bool(log_panel.display)
            log_panel.hide()

    def action_copy_last_response(self) -> None:
        """Copy last assistant reply to clipboard."""
        chat = self.query_one("#chat-history", ChatHistoryWidget)
        response = chat.get_last_response()
        if response:
            copy_text(self, response, "Reply")
        else:
            self.notify("No reply to copy", severity="warning")


async def run_tui(
    client: ChatApiClient,
    store: SessionStore,
    document_id: str | None = None,
    log_level: str | None = None,
    export_dir: str | Path | None = None,
) -> None:
    """Run the Textual TUI.

    Args:
        client: API client; closed when the app exits
        store: Holder of the anonymous session id
        document_id: Chat about this reference document
        log_level: Log level for panel (debug/info/warning/error), None to hide
        export_dir: Directory for exported decks and workbooks
    """
    session = ChatSession(client, document_id=document_id, store=store)
    app = DocChatApp(session, log_level=log_level, export_dir=export_dir)
    async with client:
        try:
            await app.run_async()
        except (KeyboardInterrupt, asyncio.CancelledError):
            pass
