"""Factory for creating artifact exporters."""

from typing import Any

from .base import ArtifactExporter


def create_exporter(kind: str, **kwargs: Any) -> ArtifactExporter:
    """Create an exporter for one artifact kind.

    Args:
        kind: Artifact kind ("pptx"/"slides" or "xlsx"/"excel")
        **kwargs: Exporter-specific configuration

    Returns:
        ArtifactExporter instance

    Raises:
        ValueError: If the kind is not supported
    """
    kind_lower = kind.lower()

    if kind_lower in ("pptx", "slides"):
        from .slides import SlideDeckExporter
        return SlideDeckExporter(**kwargs)

    elif kind_lower in ("xlsx", "excel", "spreadsheet"):
        from .spreadsheet import SpreadsheetExporter
        return SpreadsheetExporter(**kwargs)

    raise ValueError(
        f"Unsupported export kind: {kind}. "
        f"Supported kinds: pptx, xlsx"
    )
