"""Editable spreadsheet preview model.

Holds a private copy of a spreadsheet so the preview can be edited without
touching the decoded reply it came from.
"""

from typing import Any

from ..reply.models import SpreadsheetSpec


def coerce_cell_text(text: str) -> Any:
    """Convert edited cell text back to a number when it looks like one."""
    stripped = text.strip()
    if not stripped:
        return ""
    try:
        return int(stripped)
    except ValueError:
        pass
    try:
        return float(stripped)
    except ValueError:
        return text


class SpreadsheetGrid:
    """Rectangular, editable grid of cell values."""

    def __init__(
        self,
        column_labels: list[str],
        rows: list[list[Any]],
        row_labels: list[str] | None = None,
    ):
        width = max([len(column_labels), *(len(row) for row in rows)], default=0)
        self._columns = list(column_labels) + [""] * (width - len(column_labels))
        self._rows = [list(row) + [None] * (width - len(row)) for row in rows]
        self._row_labels = list(row_labels) if row_labels else None
        self._dirty = False

    @classmethod
    def from_spec(cls, spec: SpreadsheetSpec) -> "SpreadsheetGrid":
        return cls(spec.column_labels, spec.value_rows(), spec.row_labels)

    @property
    def column_labels(self) -> list[str]:
        return list(self._columns)

    @property
    def row_count(self) -> int:
        return len(self._rows)

    @property
    def column_count(self) -> int:
        return len(self._columns)

    @property
    def is_dirty(self) -> bool:
        """True once any cell was edited."""
        return self._dirty

    def row_label(self, row: int) -> str:
        if self._row_labels and row < len(self._row_labels):
            return self._row_labels[row]
        return str(row + 1)

    def cell(self, row: int, column: int) -> Any:
        return self._rows[row][column]

    def set_cell(self, row: int, column: int, value: Any) -> None:
        """Replace a cell value.

        Raises:
            IndexError: If the position is outside the grid
        """
        if not (0 <= row < self.row_count and 0 <= column < self.column_count):
            raise IndexError(f"Cell ({row}, {column}) is outside the grid")
        if self._rows[row][column] != value:
            self._rows[row][column] = value
            self._dirty = True

    def rows(self) -> list[list[Any]]:
        return [list(row) for row in self._rows]

    def to_spec(self) -> SpreadsheetSpec:
        """Snapshot the grid as a spreadsheet spec with ``{"value": x}`` cells."""
        return SpreadsheetSpec(
            column_labels=self._columns,
            row_labels=self._row_labels,
            data=[[{"value": value} for value in row] for row in self._rows],
        )
