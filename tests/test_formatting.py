"""Tests for display formatting and logging helpers."""
import logging

import pytest
from rich.logging import RichHandler

from docchat.logs import configure_logging, parse_level
from docchat.reply import DecodedReply, SlideSpec, SpreadsheetSpec
from docchat.ui.config import LogLevel
from docchat.ui.formatting import artifact_summary, clean_latex, clean_prose


class TestCleanLatex:
    """Tests for LaTeX cleanup."""

    @pytest.mark.parametrize("text,expected", [
        (r"\(x + y\)", "x + y"),
        (r"$a \times b$", "a x b"),
        (r"\frac{1}{2}", "(1)/(2)"),
        (r"\sqrt{9}", "sqrt(9)"),
        (r"\textbf{bold}", "bold"),
        ("no math here", "no math here"),
    ])
    def test_conversions(self, text, expected):
        """Test common LaTeX fragments become plain text."""
        assert clean_latex(text) == expected

    def test_clean_prose_strips(self):
        """Test that prose is trimmed for display."""
        assert clean_prose("\n  hello  \n") == "hello"


class TestArtifactSummary:
    """Tests for artifact_summary."""

    def test_none(self):
        """Test that a prose-only reply has an empty summary."""
        assert artifact_summary(DecodedReply(prose="x")) == ""

    def test_slides_and_sheet(self):
        """Test a reply carrying both artifacts."""
        reply = DecodedReply(
            slides=[SlideSpec(), SlideSpec()],
            spreadsheet=SpreadsheetSpec(column_labels=["A", "B"], data=[[1, 2], [3, 4], [5, 6]]),
        )
        assert artifact_summary(reply) == "2 slides, spreadsheet 3x2"

    def test_single_slide(self):
        """Test singular wording."""
        assert artifact_summary(DecodedReply(slides=[SlideSpec()])) == "1 slide"


class TestLogLevels:
    """Tests for log level helpers."""

    @pytest.mark.parametrize("value,expected", [
        ("debug", logging.DEBUG),
        ("INFO", logging.INFO),
        (" warning ", logging.WARNING),
        ("bogus", logging.WARNING),
        (None, logging.WARNING),
        (logging.ERROR, logging.ERROR),
    ])
    def test_parse_level(self, value, expected):
        """Test level parsing with a warning default."""
        assert parse_level(value) == expected

    def test_panel_names(self):
        """Test short level names shown in the debug panel."""
        assert LogLevel.name(logging.WARNING) == "WARN"
        assert LogLevel.name(logging.CRITICAL) == "ERROR"
        assert LogLevel.from_string("nope") == LogLevel.DEBUG

    def test_configure_logging_replaces_handler(self):
        """Test that repeated setup keeps a single rich handler."""
        logger = logging.getLogger("docchat")
        saved = (list(logger.handlers), logger.level, logger.propagate)
        try:
            configure_logging("info")
            configure_logging("debug")
            rich_handlers = [h for h in logger.handlers if isinstance(h, RichHandler)]
            assert len(rich_handlers) == 1
            assert logger.level == logging.DEBUG
        finally:
            logger.handlers[:] = saved[0]
            logger.setLevel(saved[1])
            logger.propagate = saved[2]
