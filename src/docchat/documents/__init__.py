"""Reference document module for docchat.

Checks local files before they are uploaded as chat references.
"""

from .models import DocumentFile
from .pdf import SUPPORTED_EXTENSIONS, UnsupportedDocumentError, inspect_document

__all__ = [
    "DocumentFile",
    "SUPPORTED_EXTENSIONS",
    "UnsupportedDocumentError",
    "inspect_document",
]
