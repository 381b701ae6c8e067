"""
Family Cookbook Backend — Document Text Extractors
====================================================

What:  One interface for turning an uploaded recipe document into plain text,
       with an implementation per supported format.
How:   `DocumentFormat` enumerates the recognised extensions. Each format maps
       to a `DocumentExtractor`; `get_extractor()` resolves a filename to its
       extractor or raises UnsupportedFileTypeError. There is no silent
       fallthrough to empty text.
Who:   Called by FileService after the upload has been written to disk.

Supported formats:
    .txt   → bytes decoded as UTF-8, unchanged
    .docx  → python-docx, paragraph texts joined by blank lines
    .pdf   → pypdf, page texts joined by blank lines

Extractors are synchronous (the parsing libraries are); FileService runs
them in a worker thread.
"""

import enum
import logging
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Dict

import docx
from pypdf import PdfReader

from cookbook.exceptions import ExtractionError, UnsupportedFileTypeError

logger = logging.getLogger(__name__)


class DocumentFormat(str, enum.Enum):
    TXT = ".txt"
    DOCX = ".docx"
    PDF = ".pdf"

    @classmethod
    def from_filename(cls, filename: str) -> "DocumentFormat":
        """
        Resolve a filename to its format by extension (case-insensitive).

        Raises:
            UnsupportedFileTypeError: extension missing or not recognised.
        """
        ext = Path(filename).suffix.lower()
        try:
            return cls(ext)
        except ValueError:
            raise UnsupportedFileTypeError(
                extension=ext, allowed=[f.value for f in cls]
            ) from None


class DocumentExtractor(ABC):
    """
    Abstract interface for plain-text extraction from a stored document.

    Contract:
        - extract() receives the path of a file that exists on disk
        - returns the document's text; an empty document yields ""
        - never returns None
        - parser failures are wrapped in ExtractionError
    """

    format: DocumentFormat

    def extract(self, path: str) -> str:
        try:
            return self._extract(Path(path))
        except ExtractionError:
            raise
        except Exception as e:
            logger.warning(
                "%s extraction failed for %s: %s",
                self.format.value, Path(path).name, e,
            )
            raise ExtractionError(
                message=f"Could not extract text from the {self.format.value} document",
                context={"format": self.format.value, "error": str(e)},
            ) from e

    @abstractmethod
    def _extract(self, path: Path) -> str:
        ...


class TextExtractor(DocumentExtractor):
    format = DocumentFormat.TXT

    def _extract(self, path: Path) -> str:
        # Strict decoding: undecodable bytes fail the upload instead of being
        # replaced with U+FFFD.
        return path.read_bytes().decode("utf-8")


class DocxExtractor(DocumentExtractor):
    format = DocumentFormat.DOCX

    def _extract(self, path: Path) -> str:
        document = docx.Document(str(path))
        return "\n\n".join(paragraph.text for paragraph in document.paragraphs)


class PdfExtractor(DocumentExtractor):
    format = DocumentFormat.PDF

    def _extract(self, path: Path) -> str:
        reader = PdfReader(str(path))
        pages = [page.extract_text() or "" for page in reader.pages]
        return "\n\n".join(pages)


EXTRACTORS: Dict[DocumentFormat, DocumentExtractor] = {
    DocumentFormat.TXT: TextExtractor(),
    DocumentFormat.DOCX: DocxExtractor(),
    DocumentFormat.PDF: PdfExtractor(),
}


def get_extractor(filename: str) -> DocumentExtractor:
    """Return the extractor for `filename` or raise UnsupportedFileTypeError."""
    return EXTRACTORS[DocumentFormat.from_filename(filename)]


def allowed_extensions() -> list:
    return sorted(f.value for f in DocumentFormat)
