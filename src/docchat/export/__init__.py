"""Artifact export module for docchat.

Turns decoded reply artifacts into slide decks, workbooks and print views.
"""

from .base import ArtifactExporter, ExportError
from .factory import create_exporter
from .grid import SpreadsheetGrid, coerce_cell_text
from .printing import open_print_view, render_print_html, write_print_view
from .slides import SlideDeckExporter
from .spreadsheet import SpreadsheetExporter, read_grid

__all__ = [
    "ArtifactExporter",
    "ExportError",
    "SlideDeckExporter",
    "SpreadsheetExporter",
    "SpreadsheetGrid",
    "coerce_cell_text",
    "create_exporter",
    "open_print_view",
    "read_grid",
    "render_print_html",
    "write_print_view",
]
