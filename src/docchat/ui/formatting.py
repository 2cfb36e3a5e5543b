"""Text formatting utilities for the TUI.

Hides the details of how reply prose and artifact summaries are turned
into something the terminal can show.
"""

import re

from rich.markdown import Markdown

from ..reply.models import DecodedReply


def clean_latex(text: str) -> str:
    """Strip LaTeX math delimiters and common commands Rich cannot render."""
    # \( \) and \[ \] delimiters
    text = re.sub(r'\\[\(\[]\s*', '', text)
    text = re.sub(r'\s*\\[\)\]]', '', text)

    # $$ before single $
    text = re.sub(r'\$\$\s*', '', text)
    text = re.sub(r'(?<!\\)\$([^$\n]+)(?<!\\)\$', r'\1', text)

    text = re.sub(r'\\frac\{([^}]*)\}\{([^}]*)\}', r'(\1)/(\2)', text)
    text = re.sub(r'\\sqrt\{([^}]*)\}', r'sqrt(\1)', text)
    for command, plain in (
        ("times", "x"),
        ("cdot", "*"),
        ("pm", "+/-"),
        ("leq", "<="),
        ("geq", ">="),
        ("neq", "!="),
        ("approx", "~="),
        ("ldots", "..."),
    ):
        text = text.replace(f"\\{command}", plain)

    # Keep the argument of any remaining \command{...}
    return re.sub(r'\\[a-zA-Z]+\{([^}]*)\}', r'\1', text)


def clean_prose(text: str) -> str:
    """Prepare decoded prose for display."""
    return clean_latex(text).strip()


def render_markdown(text: str) -> Markdown:
    """Render prose as rich Markdown."""
    return Markdown(clean_prose(text))


def artifact_summary(reply: DecodedReply) -> str:
    """One-line description of the artifacts attached to a reply."""
    parts = []
    if reply.has_slides:
        count = len(reply.slides)
        parts.append(f"{count} slide{'s' if count != 1 else ''}")
    if reply.has_spreadsheet:
        spec = reply.spreadsheet
        rows = len(spec.data)
        columns = max([len(spec.column_labels), *(len(row) for row in spec.data)], default=0)
        parts.append(f"spreadsheet {rows}x{columns}")
    return ", ".join(parts)
