"""Custom Textual widgets for the TUI.

Hides widget implementation details:
- Input history management
- Chat message rendering and per-reply action buttons
- Inline error row with retry
- Log rendering and scrolling
"""

from datetime import datetime

from textual.app import App
from textual.containers import Horizontal, Vertical, VerticalScroll
from textual.events import Click
from textual.message import Message
from textual.widgets import Button, Markdown, RichLog, Static, TextArea

from ..session.models import DisplayEntry
from .config import (
    CHAT_TIMESTAMP_FORMAT,
    INPUT_HISTORY_MAX_SIZE,
    LOG_MAX_MESSAGE_LENGTH,
    LOG_TIMESTAMP_FORMAT,
    NOTIFY_SHORT,
    LogLevel,
)
from .formatting import artifact_summary, clean_prose

# Action ids shown under assistant replies
ACTION_COPY = "copy"
ACTION_PRINT = "print"
ACTION_SLIDES = "slides"
ACTION_EXCEL = "excel"
ACTION_SHEET = "sheet"


def copy_text(app: App, text: str, what: str = "Message") -> None:
    """Copy text to the system clipboard, falling back to OSC 52."""
    try:
        import pyperclip
        pyperclip.copy(text)
        app.notify(f"{what} copied", timeout=NOTIFY_SHORT)
    except Exception:
        app.copy_to_clipboard(text)
        app.notify(f"{what} copied (terminal)", timeout=NOTIFY_SHORT)


class MessageView(Vertical):
    """One rendered chat entry with its action row."""

    class ActionRequested(Message):
        """Posted when an action button under a reply is pressed."""

        def __init__(self, action: str, entry: DisplayEntry) -> None:
            super().__init__()
            self.action = action
            self.entry = entry

    def __init__(self, entry: DisplayEntry, *args, **kwargs) -> None:
        role_class = "assistant-message" if entry.is_assistant else "user-message"
        super().__init__(*args, classes=f"chat-message {role_class}", **kwargs)
        self._entry = entry

    @property
    def entry(self) -> DisplayEntry:
        return self._entry

    def compose(self):
        message = self._entry.message
        reply = self._entry.reply
        author = "Assistant" if message.is_assistant else "You"
        timestamp = message.created_at.strftime(CHAT_TIMESTAMP_FORMAT)
        yield Static(f"{author} [{timestamp}]", classes="message-header", markup=False)

        if self._entry.has_attachment:
            yield Static("[file attached]", classes="attachment-badge", markup=False)

        prose = clean_prose(reply.prose)
        if message.is_assistant:
            yield Markdown(prose, classes="message-content")
            summary = artifact_summary(reply)
            if summary:
                yield Static(f"Attached: {summary}", classes="artifact-summary", markup=False)
            with Horizontal(classes="message-actions"):
                yield Button("Copy", name=ACTION_COPY)
                yield Button("Print", name=ACTION_PRINT)
                if reply.has_slides:
                    yield Button("Slides", name=ACTION_SLIDES, variant="primary")
                if reply.has_spreadsheet:
                    yield Button("Excel", name=ACTION_EXCEL, variant="success")
                    yield Button("Sheet", name=ACTION_SHEET)
        else:
            yield Static(prose, classes="message-content", markup=False)

    def on_button_pressed(self, event: Button.Pressed) -> None:
        event.stop()
        if event.button.name:
            self.post_message(self.ActionRequested(event.button.name, self._entry))


class ChatHistoryWidget(VerticalScroll):
    """Scrollable chat history."""

    BORDER_TITLE = "Chat"
    BORDER_SUBTITLE = "Conversation history"
    ALLOW_MAXIMIZE = True

    def __init__(self, *args, **kwargs) -> None:
        super().__init__(*args, **kwargs)
        self._entries: list[DisplayEntry] = []
        self._welcome: str = ""

    @property
    def entries(self) -> list[DisplayEntry]:
        return list(self._entries)

    def show_entries(self, entries: list[DisplayEntry], pending: bool = False) -> None:
        """Replace the rendered history."""
        self._entries = list(entries)
        self.remove_children()
        views = [MessageView(entry) for entry in self._entries]
        if pending:
            views.append(Static("Assistant is typing...", classes="artifact-summary"))
        if not views and self._welcome:
            views.append(Static(self._welcome, classes="message-content", markup=False))
        if views:
            self.mount(*views)
        count = len(self._entries)
        self.border_subtitle = f"{count} messages" if count else "Conversation history"
        self.scroll_end(animate=False)

    def set_welcome(self, lines: list[str]) -> None:
        """Set the note shown while the history is empty."""
        self._welcome = "\n".join(lines)
        self.show_entries(self._entries)

    def get_last_response(self) -> str | None:
        """Get the prose of the last assistant reply."""
        for entry in reversed(self._entries):
            if entry.is_assistant:
                return entry.reply.prose
        return None


class ChatInputBar(Horizontal):
    """Chat input bar with TextArea, Attach and Send buttons."""

    class Submitted(Message):
        """Message sent when user submits input."""

        def __init__(self, value: str) -> None:
            super().__init__()
            self.value = value

    class AttachRequested(Message):
        """Message sent when the Attach button is pressed."""

    def __init__(self, *args, **kwargs) -> None:
        super().__init__(*args, **kwargs)
        self._history: list[str] = []
        self._history_index: int = -1

    def compose(self):
        text_area = TextArea(id="chat-input", show_line_numbers=False)
        text_area.cursor_blink = False
        yield text_area
        yield Button("Attach", id="attach-btn").with_tooltip("Attach a PDF (Ctrl+O)")
        yield Button("Send", id="send-btn", variant="success").with_tooltip(
            "Submit message (Ctrl+J)"
        )

    def on_mount(self) -> None:
        text_area = self.query_one("#chat-input", TextArea)
        text_area.highlight_cursor_line = False
        text_area.focus()

    def on_button_pressed(self, event: Button.Pressed) -> None:
        if event.button.id == "send-btn":
            self._submit()
        elif event.button.id == "attach-btn":
            self.post_message(self.AttachRequested())

    def on_key(self, event) -> None:
        """Handle keyboard shortcuts.

        Note: ctrl+enter cannot work in terminals (terminal doesn't pass
        ctrl/shift modifiers with Enter). Use ctrl+j as the submit shortcut.
        """
        if event.key == "ctrl+j":
            self._submit()
            event.prevent_default()
            event.stop()
        elif event.key == "up" and self._is_cursor_at_start():
            self._navigate_history(-1)
            event.prevent_default()
            event.stop()
        elif event.key == "down" and self._is_cursor_at_end():
            self._navigate_history(1)
            event.prevent_default()
            event.stop()

    def _is_cursor_at_start(self) -> bool:
        text_area = self.query_one("#chat-input", TextArea)
        return text_area.cursor_location == (0, 0)

    def _is_cursor_at_end(self) -> bool:
        text_area = self.query_one("#chat-input", TextArea)
        lines = text_area.text.split("\n")
        return text_area.cursor_location == (len(lines) - 1, len(lines[-1]))

    def _navigate_history(self, direction: int) -> None:
        if not self._history:
            return
        text_area = self.query_one("#chat-input", TextArea)
        if direction < 0:
            if self._history_index == -1:
                self._history_index = len(self._history) - 1
            elif self._history_index > 0:
                self._history_index -= 1
        else:
            if self._history_index < len(self._history) - 1:
                self._history_index += 1
            else:
                self._history_index = -1
                text_area.text = ""
                return
        text_area.text = self._history[self._history_index]

    def _submit(self) -> None:
        text_area = self.query_one("#chat-input", TextArea)
        value = text_area.text.strip()
        if value and (not self._history or self._history[-1] != value):
            self._history.append(value)
            del self._history[:-INPUT_HISTORY_MAX_SIZE]
        self._history_index = -1
        text_area.text = ""
        # Empty submits still go out: an attachment may be pending
        self.post_message(self.Submitted(value))

    def set_busy(self, busy: bool) -> None:
        """Disable sending while a request is in flight."""
        self.set_class(busy, "-busy")
        self.query_one("#send-btn", Button).disabled = busy
        self.query_one("#attach-btn", Button).disabled = busy

    def focus_input(self) -> None:
        """Focus the text input."""
        self.query_one("#chat-input", TextArea).focus()


class ErrorBar(Horizontal):
    """Inline error row with Try again / Dismiss buttons."""

    class RetryRequested(Message):
        """User asked to resend the failed message."""

    class Dismissed(Message):
        """User dismissed the error."""

    def compose(self):
        yield Static("", id="error-text", markup=False)
        yield Button("Try again", id="retry-btn", variant="warning")
        yield Button("Dismiss", id="dismiss-btn")

    def show_error(self, message: str, retryable: bool = True) -> None:
        self.query_one("#error-text", Static).update(message)
        self.query_one("#retry-btn", Button).display = retryable
        self.add_class("-visible")

    def clear(self) -> None:
        self.remove_class("-visible")

    def on_button_pressed(self, event: Button.Pressed) -> None:
        event.stop()
        if event.button.id == "retry-btn":
            self.post_message(self.RetryRequested())
        elif event.button.id == "dismiss-btn":
            self.post_message(self.Dismissed())


class DebugPanel(RichLog):
    """Log panel with level filtering.

    Shows timestamped records from the docchat loggers.
    Hidden by default, shown with --log-level or toggled with Ctrl+D.
    """

    BORDER_TITLE = "Log"
    BORDER_SUBTITLE = "Trace log"

    def __init__(self, *args, log_level: int = LogLevel.INFO, **kwargs) -> None:
        super().__init__(
            *args,
            markup=True,
            highlight=False,
            auto_scroll=True,
            wrap=False,
            **kwargs
        )
        self._log_level = log_level

    @property
    def log_level(self) -> int:
        """Current log level threshold."""
        return self._log_level

    @log_level.setter
    def log_level(self, level: int) -> None:
        self._log_level = level
        self._update_subtitle()

    def _update_subtitle(self) -> None:
        if self.display:
            self.border_subtitle = f"Level: {LogLevel.name(self._log_level)}"
        else:
            self.border_subtitle = "Hidden"

    def on_mount(self) -> None:
        """Hide by default."""
        self.display = False

    def log(self, component: str, message: str, level: int = LogLevel.DEBUG) -> None:
        """Add a log entry if it meets the current level threshold.

        Args:
            component: Short source name (logger name tail)
            message: Log message
            level: Log level (LogLevel.DEBUG, INFO, WARNING, ERROR)
        """
        if level < self._log_level:
            return

        from rich.markup import escape

        if len(message) > LOG_MAX_MESSAGE_LENGTH:
            message = message[:LOG_MAX_MESSAGE_LENGTH] + "..."
        timestamp = datetime.now().strftime(LOG_TIMESTAMP_FORMAT)
        level_colors = {
            LogLevel.DEBUG: "dim white",
            LogLevel.INFO: "cyan",
            LogLevel.WARNING: "yellow",
            LogLevel.ERROR: "red",
        }
        level_color = level_colors.get(min(level, LogLevel.ERROR), "white")

        self.write(
            f"[dim]{timestamp}[/] "
            f"[{level_color}]{LogLevel.name(level):<5}[/] "
            f"[magenta]\\[{escape(component)}][/] {escape(message)}"
        )

    def show(self) -> None:
        self.display = True
        self._update_subtitle()

    def hide(self) -> None:
        self.display = False
        self.border_subtitle = "Hidden"

    def toggle(self) -> bool:
        """Toggle visibility. Returns new state."""
        if self.display:
            self.hide()
            return False
        self.show()
        return True

    def get_plain_text(self) -> str:
        """Get plain text content of the log for copying."""
        return "\n".join(line.text for line in self.lines)

    def on_click(self, event: Click) -> None:
        """Copy log content to clipboard when clicked."""
        event.stop()
        text = self.get_plain_text()
        if not text.strip():
            self.app.notify("Log is empty", timeout=NOTIFY_SHORT)
            return
        copy_text(self.app, text, "Log")
