"""PDF inspection using pypdf.

Hidden design decisions:
- Using pypdf library to read PDF properties
- Which file types are accepted for upload
- Title fallback when the PDF carries no metadata
"""

import logging
from pathlib import Path

from pypdf import PdfReader
from pypdf.errors import PdfReadError

from .models import DocumentFile

logger = logging.getLogger(__name__)

SUPPORTED_EXTENSIONS = {".pdf"}
# Server rejects request bodies above 1 GiB
MAX_UPLOAD_BYTES = 1 << 30


class UnsupportedDocumentError(ValueError):
    """File cannot be used as a reference document."""


def inspect_document(path: str | Path) -> DocumentFile:
    """Validate a local file and read its PDF properties.

    Args:
        path: Path to the candidate document

    Returns:
        DocumentFile describing the document

    Raises:
        FileNotFoundError: If the file doesn't exist
        UnsupportedDocumentError: If the file is not a readable PDF
    """
    file_path = Path(path).expanduser().resolve()
    if not file_path.is_file():
        raise FileNotFoundError(f"File not found: {file_path}")

    suffix = file_path.suffix.lower()
    if suffix == ".docx":
        raise UnsupportedDocumentError(".docx files are not supported.")
    if suffix not in SUPPORTED_EXTENSIONS:
        raise UnsupportedDocumentError(f"Only PDF files are supported, got '{suffix or file_path.name}'")

    size = file_path.stat().st_size
    if size > MAX_UPLOAD_BYTES:
        raise UnsupportedDocumentError(f"File is too large to upload ({size} bytes)")

    try:
        reader = PdfReader(file_path)
        metadata = reader.metadata or {}
        page_count = len(reader.pages)
    except (PdfReadError, OSError, ValueError) as e:
        raise UnsupportedDocumentError(f"Invalid PDF file: {e}") from e

    title = str(metadata.get("/Title", "") or "").strip() or file_path.stem
    author = str(metadata.get("/Author", "") or "").strip()
    logger.debug("Inspected %s: %d pages", file_path, page_count)

    return DocumentFile(
        path=str(file_path),
        title=title,
        author=author,
        page_count=page_count,
        size_bytes=size,
    )
