"""Modal screens for the TUI.

This module hides the design decisions about:
- Confirmation dialog appearance and keyboard shortcuts
- How the spreadsheet preview is laid out and edited
- How a file to attach is picked

To change how dialogs look, modify only this file.
"""

from pathlib import Path

from textual.app import ComposeResult
from textual.binding import Binding
from textual.containers import Horizontal, Vertical
from textual.screen import ModalScreen
from textual.widgets import Button, DataTable, Input, Static

from ..export.grid import SpreadsheetGrid, coerce_cell_text
from .config import PREVIEW_COLUMN_WIDTH


class ConfirmationScreen(ModalScreen[bool]):
    """Modal yes/no dialog. Dismisses with True when confirmed."""

    CSS = """
    ConfirmationScreen {
        align: center middle;
        background: $background 70%;
    }

    #confirmation-dialog {
        width: 60;
        height: auto;
        border: tall $accent;
        background: $surface;
        padding: 1 2;
    }

    #confirmation-title {
        width: 100%;
        text-align: center;
        text-style: bold;
        color: $accent;
        border-bottom: solid $border;
        margin-bottom: 1;
    }

    #confirmation-prompt {
        width: 100%;
        text-align: center;
        padding: 1 2;
        margin-bottom: 1;
    }

    #confirmation-buttons {
        width: 100%;
        height: 3;
        align: center middle;
    }

    #confirmation-buttons Button {
        margin: 0 1;
        min-width: 10;
    }
    """

    BINDINGS = [
        Binding("y", "confirm_yes", "Yes", show=False),
        Binding("n", "confirm_no", "No", show=False),
        Binding("escape", "confirm_no", "Cancel", show=False),
    ]

    def __init__(self, prompt: str, title: str = "Are you sure?") -> None:
        super().__init__()
        self._prompt = prompt
        self._title = title

    def compose(self) -> ComposeResult:
        with Vertical(id="confirmation-dialog"):
            yield Static(self._title, id="confirmation-title")
            yield Static(self._prompt, id="confirmation-prompt")
            with Horizontal(id="confirmation-buttons"):
                yield Button("Yes", id="btn-yes", variant="error")
                yield Button("No", id="btn-no", variant="primary")

    def on_button_pressed(self, event: Button.Pressed) -> None:
        self.dismiss(event.button.id == "btn-yes")

    def action_confirm_yes(self) -> None:
        self.dismiss(True)

    def action_confirm_no(self) -> None:
        self.dismiss(False)


class SpreadsheetPreviewScreen(ModalScreen[SpreadsheetGrid | None]):
    """Editable sheet view of a reply's spreadsheet.

    Select a cell, type a new value and press Enter to change it.
    Dismisses with the edited grid when "Download" is pressed, or None.
    """

    CSS = """
    SpreadsheetPreviewScreen {
        align: center middle;
        background: $background 70%;
    }

    #sheet-dialog {
        width: 90%;
        height: 85%;
        border: tall $primary;
        background: $surface;
        padding: 1 2;
    }

    #sheet-title {
        width: 100%;
        text-style: bold;
        color: $primary;
        margin-bottom: 1;
    }

    #sheet-table {
        height: 1fr;
    }

    #cell-editor {
        margin-top: 1;
    }

    #sheet-buttons {
        height: 3;
        align: right middle;
        margin-top: 1;
    }

    #sheet-buttons Button {
        margin: 0 0 0 1;
    }
    """

    BINDINGS = [
        Binding("escape", "close", "Close", show=False),
    ]

    def __init__(self, grid: SpreadsheetGrid, title: str = "Sheet View") -> None:
        super().__init__()
        self._grid = grid
        self._title = title

    @property
    def grid(self) -> SpreadsheetGrid:
        return self._grid

    def compose(self) -> ComposeResult:
        with Vertical(id="sheet-dialog"):
            yield Static(self._title, id="sheet-title")
            yield DataTable(id="sheet-table", zebra_stripes=True)
            yield Input(placeholder="Select a cell, edit, press Enter", id="cell-editor")
            with Horizontal(id="sheet-buttons"):
                yield Button("Download", id="btn-download", variant="success")
                yield Button("Close", id="btn-close")

    def on_mount(self) -> None:
        table = self.query_one("#sheet-table", DataTable)
        table.cursor_type = "cell"
        for label in self._grid.column_labels:
            table.add_column(label or " ", width=PREVIEW_COLUMN_WIDTH)
        for row in range(self._grid.row_count):
            values = [self._cell_text(row, column) for column in range(self._grid.column_count)]
            table.add_row(*values, label=self._grid.row_label(row))
        table.focus()

    def _cell_text(self, row: int, column: int) -> str:
        value = self._grid.cell(row, column)
        return "" if value is None else str(value)

    def on_data_table_cell_highlighted(self, event: DataTable.CellHighlighted) -> None:
        row, column = event.coordinate
        self.query_one("#cell-editor", Input).value = self._cell_text(row, column)

    def on_data_table_cell_selected(self, event: DataTable.CellSelected) -> None:
        self.query_one("#cell-editor", Input).focus()

    def on_input_submitted(self, event: Input.Submitted) -> None:
        table = self.query_one("#sheet-table", DataTable)
        coordinate = table.cursor_coordinate
        if not self._grid.row_count or not self._grid.column_count:
            return
        self._grid.set_cell(coordinate.row, coordinate.column, coerce_cell_text(event.value))
        table.update_cell_at(coordinate, self._cell_text(coordinate.row, coordinate.column))
        if self._grid.is_dirty:
            self.query_one("#sheet-title", Static).update(f"{self._title} (edited)")
        table.focus()

    def on_button_pressed(self, event: Button.Pressed) -> None:
        if event.button.id == "btn-download":
            self.dismiss(self._grid)
        else:
            self.dismiss(None)

    def action_close(self) -> None:
        self.dismiss(None)


class AttachFileScreen(ModalScreen[Path | None]):
    """Prompt for the path of a file to attach to the next message."""

    CSS = """
    AttachFileScreen {
        align: center middle;
        background: $background 70%;
    }

    #attach-dialog {
        width: 70;
        height: auto;
        border: tall $accent;
        background: $surface;
        padding: 1 2;
    }

    #attach-error {
        color: $error;
        height: auto;
    }

    #attach-buttons {
        height: 3;
        align: right middle;
        margin-top: 1;
    }
    """

    BINDINGS = [
        Binding("escape", "cancel", "Cancel", show=False),
    ]

    def compose(self) -> ComposeResult:
        with Vertical(id="attach-dialog"):
            yield Static("Attach a PDF")
            yield Input(placeholder="/path/to/document.pdf", id="attach-path")
            yield Static("", id="attach-error")
            with Horizontal(id="attach-buttons"):
                yield Button("Attach", id="btn-attach", variant="success")
                yield Button("Cancel", id="btn-cancel")

    def on_mount(self) -> None:
        self.query_one("#attach-path", Input).focus()

    def _choose(self) -> None:
        from ..documents import UnsupportedDocumentError, inspect_document

        raw = self.query_one("#attach-path", Input).value.strip()
        if not raw:
            return
        try:
            document = inspect_document(raw)
        except (FileNotFoundError, UnsupportedDocumentError) as e:
            self.query_one("#attach-error", Static).update(str(e))
            return
        self.dismiss(Path(document.path))

    def on_input_submitted(self, event: Input.Submitted) -> None:
        self._choose()

    def on_button_pressed(self, event: Button.Pressed) -> None:
        if event.button.id == "btn-attach":
            self._choose()
        else:
            self.dismiss(None)

    def action_cancel(self) -> None:
        self.dismiss(None)
