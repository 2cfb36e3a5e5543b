"""Routes stdlib log records into the TUI log panel."""

import logging
import threading

from textual.app import App

from .widgets import DebugPanel


class PanelLogHandler(logging.Handler):
    """logging.Handler that writes records to a DebugPanel.

    Records from worker threads are marshalled onto the app thread.
    """

    def __init__(self, app: App, panel: DebugPanel, level: int = logging.DEBUG) -> None:
        super().__init__(level)
        self._app = app
        self._panel = panel
        self._thread_id = threading.get_ident()

    def emit(self, record: logging.LogRecord) -> None:
        try:
            message = record.getMessage()
            if record.exc_info and record.exc_info[1] is not None:
                message = f"{message} ({record.exc_info[1]})"
            component = record.name.rsplit(".", 1)[-1]
            if threading.get_ident() == self._thread_id:
                self._panel.log(component, message, record.levelno)
            else:
                self._app.call_from_thread(self._panel.log, component, message, record.levelno)
        except Exception:
            self.handleError(record)
