"""Spreadsheet exporter using openpyxl.

Hidden design decisions:
- Workbook layout (single sheet, header row, then data rows)
- Conversion of cell objects to plain cell values
- Column width heuristics
"""

import json
from io import BytesIO
from pathlib import Path
from typing import Any

from openpyxl import Workbook, load_workbook
from openpyxl.styles import Font
from openpyxl.utils import get_column_letter

from ..reply.models import DecodedReply, SpreadsheetSpec
from .base import ArtifactExporter, ExportError

MAX_COLUMN_WIDTH = 60


def _excel_value(value: Any) -> Any:
    """Reduce a cell value to something a worksheet cell can hold."""
    if value is None or isinstance(value, (str, int, float, bool)):
        return value
    return json.dumps(value, ensure_ascii=False)


class SpreadsheetExporter(ArtifactExporter):
    """Writes the spreadsheet of a decoded reply to an .xlsx workbook."""

    def __init__(
        self,
        filename: str = "spreadsheet.xlsx",
        sheet_title: str = "Sheet1",
        include_row_labels: bool = False,
    ):
        self._filename = filename
        self._sheet_title = sheet_title
        self._include_row_labels = include_row_labels

    @property
    def file_extension(self) -> str:
        return ".xlsx"

    @property
    def default_filename(self) -> str:
        return self._filename

    def can_export(self, reply: DecodedReply) -> bool:
        return reply.is_displayable and reply.has_spreadsheet

    def export(self, reply: DecodedReply) -> bytes:
        if not self.can_export(reply) or reply.spreadsheet is None:
            raise ExportError("Reply has no spreadsheet to export")
        return self.export_spec(reply.spreadsheet)

    def export_spec(self, spec: SpreadsheetSpec) -> bytes:
        """Render a spreadsheet spec to .xlsx bytes."""
        header: list[Any] = list(spec.column_labels)
        rows = [[_excel_value(v) for v in row] for row in spec.value_rows()]

        if self._include_row_labels and spec.row_labels:
            header = [""] + header
            labels = list(spec.row_labels) + [""] * max(0, len(rows) - len(spec.row_labels))
            rows = [[label] + row for label, row in zip(labels, rows, strict=False)]

        try:
            workbook = Workbook()
            sheet = workbook.active
            sheet.title = self._sheet_title

            _append_literal(sheet, header)
            for cell in sheet[1]:
                cell.font = Font(bold=True)
            for row in rows:
                _append_literal(sheet, row)

            _fit_columns(sheet, [header, *rows])

            buffer = BytesIO()
            workbook.save(buffer)
            return buffer.getvalue()
        except Exception as e:
            raise ExportError(f"Failed to build workbook: {e}") from e


def _append_literal(sheet: Any, values: list[Any]) -> None:
    """Append a row; text starting with '=' stays text, never a formula."""
    sheet.append(values)
    for cell in sheet[sheet.max_row]:
        if cell.data_type == "f":
            cell.data_type = "s"


def _fit_columns(sheet: Any, rows: list[list[Any]]) -> None:
    widths: dict[int, int] = {}
    for row in rows:
        for index, value in enumerate(row, 1):
            length = len(str(value)) if value is not None else 0
            widths[index] = max(widths.get(index, 0), length)
    for index, width in widths.items():
        sheet.column_dimensions[get_column_letter(index)].width = min(width + 2, MAX_COLUMN_WIDTH)


def read_grid(source: bytes | str | Path) -> tuple[list[str], list[list[Any]]]:
    """Load the first sheet of a workbook as a header row and data rows.

    Args:
        source: Workbook bytes or a path to an .xlsx file

    Returns:
        Tuple of (header labels, data rows of cell values)
    """
    handle = BytesIO(source) if isinstance(source, bytes) else Path(source)
    workbook = load_workbook(handle, read_only=True, data_only=True)
    try:
        sheet = workbook.worksheets[0]
        values = [list(row) for row in sheet.iter_rows(values_only=True)]
    finally:
        workbook.close()

    if not values:
        return [], []
    header = ["" if label is None else str(label) for label in values[0]]
    return header, values[1:]
