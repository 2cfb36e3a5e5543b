"""Tests for local document inspection."""
import pytest
from pypdf import PdfWriter

from docchat.documents import UnsupportedDocumentError, inspect_document


@pytest.fixture
def pdf_factory(tmp_path):
    """Return a factory writing small PDFs into a temp directory."""
    def _make(name="guide.pdf", pages=2, metadata=None):
        writer = PdfWriter()
        for _ in range(pages):
            writer.add_blank_page(width=200, height=200)
        if metadata:
            writer.add_metadata(metadata)
        path = tmp_path / name
        with open(path, "wb") as f:
            writer.write(f)
        return path

    return _make


class TestInspectDocument:
    """Tests for inspect_document."""

    def test_reads_metadata(self, pdf_factory):
        """Test that title, author and pages come from the PDF."""
        path = pdf_factory(pages=3, metadata={"/Title": "Field Guide", "/Author": "Ada"})
        info = inspect_document(path)

        assert info.title == "Field Guide"
        assert info.author == "Ada"
        assert info.page_count == 3
        assert info.size_bytes == path.stat().st_size
        assert info.file_type == "pdf"
        assert info.path == str(path.resolve())

    def test_title_falls_back_to_stem(self, pdf_factory):
        """Test that a PDF without a title uses its file name."""
        info = inspect_document(pdf_factory(name="annual-report.pdf", pages=1))
        assert info.title == "annual-report"
        assert info.author == ""

    def test_uppercase_extension(self, pdf_factory):
        """Test that the extension check ignores case."""
        info = inspect_document(pdf_factory(name="SCAN.PDF", pages=1))
        assert info.page_count == 1

    def test_missing_file(self, tmp_path):
        """Test that a missing file raises FileNotFoundError."""
        with pytest.raises(FileNotFoundError):
            inspect_document(tmp_path / "nope.pdf")

    def test_docx_rejected(self, tmp_path):
        """Test that Word documents get their own message."""
        path = tmp_path / "notes.docx"
        path.write_bytes(b"PK")
        with pytest.raises(UnsupportedDocumentError, match=".docx files are not supported"):
            inspect_document(path)

    def test_other_types_rejected(self, tmp_path):
        """Test that non-PDF files are refused."""
        path = tmp_path / "notes.txt"
        path.write_text("hello")
        with pytest.raises(UnsupportedDocumentError, match="Only PDF files are supported"):
            inspect_document(path)

    def test_corrupt_pdf_rejected(self, tmp_path):
        """Test that a file that is not really a PDF is refused."""
        path = tmp_path / "fake.pdf"
        path.write_text("this is not a pdf")
        with pytest.raises(UnsupportedDocumentError, match="Invalid PDF file"):
            inspect_document(path)

    def test_directory_rejected(self, tmp_path):
        """Test that a directory is not a document."""
        folder = tmp_path / "folder.pdf"
        folder.mkdir()
        with pytest.raises(FileNotFoundError):
            inspect_document(folder)
