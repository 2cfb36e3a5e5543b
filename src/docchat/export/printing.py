"""Printable view of reply prose.

Renders prose to a standalone HTML page that opens the browser's print
dialog, so a reply can be printed or saved as PDF.
"""

import html
import tempfile
import webbrowser
from pathlib import Path

from markdown_it import MarkdownIt

PRINT_STYLE = """
body { font-family: Arial, sans-serif; padding: 20px; line-height: 1.5; }
table { border-collapse: collapse; margin: 12px 0; }
th, td { border: 1px solid #999; padding: 4px 8px; text-align: left; }
pre { background: #f4f4f4; padding: 8px; white-space: pre-wrap; }
@media print { body { padding: 0; } }
"""


def _markdown() -> MarkdownIt:
    return MarkdownIt("commonmark", {"html": False}).enable(["table", "strikethrough"])


def render_print_html(prose: str, title: str = "Print Message") -> str:
    """Render prose as a print-ready HTML document."""
    body = _markdown().render(prose)
    return (
        "<!DOCTYPE html>\n"
        "<html>\n<head>\n"
        '<meta charset="utf-8">\n'
        f"<title>{html.escape(title)}</title>\n"
        f"<style>{PRINT_STYLE}</style>\n"
        "</head>\n"
        '<body onload="window.print()">\n'
        f"{body}"
        "</body>\n</html>\n"
    )


def write_print_view(prose: str, path: str | Path | None = None, title: str = "Print Message") -> Path:
    """Write the print view to ``path`` or a temporary file."""
    document = render_print_html(prose, title)
    if path is None:
        with tempfile.NamedTemporaryFile(
            "w", suffix=".html", prefix="docchat-print-", delete=False, encoding="utf-8"
        ) as handle:
            handle.write(document)
            return Path(handle.name)

    target = Path(path)
    target.parent.mkdir(parents=True, exist_ok=True)
    target.write_text(document, encoding="utf-8")
    return target


def open_print_view(prose: str, title: str = "Print Message") -> Path:
    """Write the print view and open it in the default browser."""
    target = write_print_view(prose, title=title)
    webbrowser.open(target.as_uri())
    return target
