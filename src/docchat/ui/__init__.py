"""Terminal UI module for docchat.

Provides a Textual-based TUI for chatting about reference documents.

Module structure (each module hides a design decision):
- widgets.py: Custom widgets (message rendering, input history, log panel)
- styles.py: CSS styling (layout decisions)
- themes.py: Color palettes and theme configuration
- screens.py: Modal dialogs (confirmation, sheet preview, attach file)
- log_handler.py: How log records reach the log panel
- app.py: Application orchestration (user interaction flow)
"""

from .app import DocChatApp, run_tui
from .config import LogLevel
from .log_handler import PanelLogHandler
from .widgets import ChatHistoryWidget, ChatInputBar, DebugPanel, ErrorBar, MessageView

__all__ = [
    "ChatHistoryWidget",
    "ChatInputBar",
    "DebugPanel",
    "DocChatApp",
    "ErrorBar",
    "LogLevel",
    "MessageView",
    "PanelLogHandler",
    "run_tui",
]
