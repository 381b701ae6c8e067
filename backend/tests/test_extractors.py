"""
Family Cookbook Backend — Document Extractor Tests
====================================================

What:  Format detection and text extraction for .txt, .docx and .pdf.
How:   Real files written to tmp_path; python-docx and pypdf build the
       fixtures so the extractors read genuine documents.
"""

import docx
import pytest
from pypdf import PdfWriter

from cookbook.exceptions import ExtractionError, UnsupportedFileTypeError
from cookbook.services.extractors import (
    DocumentFormat,
    DocxExtractor,
    PdfExtractor,
    TextExtractor,
    allowed_extensions,
    get_extractor,
)


class TestDocumentFormat:

    @pytest.mark.parametrize(
        "filename, expected",
        [
            ("recipe.txt", DocumentFormat.TXT),
            ("Recipe.DOCX", DocumentFormat.DOCX),
            ("scan.Pdf", DocumentFormat.PDF),
            ("grandmas.stew.txt", DocumentFormat.TXT),
        ],
    )
    def test_recognised_extensions(self, filename, expected):
        assert DocumentFormat.from_filename(filename) is expected

    @pytest.mark.parametrize("filename", ["recipe.rtf", "recipe.doc", "noextension", "image.png"])
    def test_unrecognised_extension_raises(self, filename):
        with pytest.raises(UnsupportedFileTypeError, match="not supported") as exc_info:
            DocumentFormat.from_filename(filename)
        assert exc_info.value.status_code == 415

    def test_get_extractor_maps_each_format(self):
        assert isinstance(get_extractor("a.txt"), TextExtractor)
        assert isinstance(get_extractor("a.docx"), DocxExtractor)
        assert isinstance(get_extractor("a.pdf"), PdfExtractor)

    def test_allowed_extensions(self):
        assert allowed_extensions() == [".docx", ".pdf", ".txt"]


class TestTextExtractor:

    def test_returns_content_unchanged(self, tmp_path):
        text = "Pancakes\n\n2 eggs\n1 cup flour\nCrème fraîche to serve\n"
        path = tmp_path / "pancakes.txt"
        path.write_bytes(text.encode("utf-8"))

        assert TextExtractor().extract(str(path)) == text

    def test_empty_file_gives_empty_string(self, tmp_path):
        path = tmp_path / "empty.txt"
        path.write_bytes(b"")
        assert TextExtractor().extract(str(path)) == ""

    def test_invalid_utf8_raises_extraction_error(self, tmp_path):
        path = tmp_path / "latin1.txt"
        path.write_bytes("Crème".encode("latin-1"))

        with pytest.raises(ExtractionError) as exc_info:
            TextExtractor().extract(str(path))
        assert exc_info.value.context["format"] == ".txt"


class TestDocxExtractor:

    def test_paragraphs_joined_by_blank_lines(self, tmp_path):
        path = tmp_path / "stew.docx"
        document = docx.Document()
        document.add_paragraph("Beef Stew")
        document.add_paragraph("Brown the beef.")
        document.save(str(path))

        text = DocxExtractor().extract(str(path))
        assert "Beef Stew\n\nBrown the beef." in text

    def test_corrupt_docx_raises_extraction_error(self, tmp_path):
        path = tmp_path / "broken.docx"
        path.write_bytes(b"this is not a zip archive")

        with pytest.raises(ExtractionError, match=".docx"):
            DocxExtractor().extract(str(path))


class TestPdfExtractor:

    def test_blank_page_gives_empty_text(self, tmp_path):
        path = tmp_path / "blank.pdf"
        writer = PdfWriter()
        writer.add_blank_page(width=72, height=72)
        with open(path, "wb") as f:
            writer.write(f)

        assert PdfExtractor().extract(str(path)).strip() == ""

    def test_garbage_raises_extraction_error(self, tmp_path):
        path = tmp_path / "garbage.pdf"
        path.write_bytes(b"definitely not a pdf")

        with pytest.raises(ExtractionError):
            PdfExtractor().extract(str(path))
