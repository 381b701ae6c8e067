"""
Family Cookbook Backend — Upload Storage & Ingestion Service
==============================================================

What:  Validates an uploaded document, writes it to a temporary file, runs
       the matching text extractor and removes the file again.
How:   Extension → extractor lookup first, then size, then an aiofiles write
       under a UUID filename, then extraction in a worker thread. The
       temporary file is deleted in a `finally` block, so it is gone after
       both successful and failed extractions.
Who:   Called by PendingService.submit_document().

Validation order:
    1. Extension check   : rejects unsupported types before reading further (415)
    2. Size check        : Content-Length header, then the actual byte count (413)
    3. Empty check       : a zero-byte upload has nothing to moderate (400)
    4. Store             : UUID filename, no user input in the path
    5. Extract           : parser runs off the event loop
    6. Cleanup           : always
"""

import logging
import os
import uuid
from pathlib import Path
from typing import Optional

import aiofiles
from starlette.concurrency import run_in_threadpool

from cookbook.exceptions import FileStorageError, FileTooLargeError, ValidationError
from cookbook.services.extractors import DocumentExtractor, DocumentFormat, get_extractor

logger = logging.getLogger(__name__)


class FileService:
    """
    Manages the short life of an uploaded document.

    Lifecycle of an uploaded file:
        1. Route reads the multipart part into memory (bounded by the size cap)
        2. FileService.extract_text() validates type and size
        3. Content is written to <storage_root>/<uuid><ext>
        4. The format's extractor reads it back as text
        5. The file is removed; only the text is kept (in pending_recipes)
    """

    def __init__(self, storage_root: str, max_file_size: int):
        self.storage_root = Path(storage_root).resolve()
        self.max_file_size = max_file_size
        self.storage_root.mkdir(parents=True, exist_ok=True)
        logger.info("FileService initialized with storage_root=%s", self.storage_root)

    def validate_extension(self, filename: str) -> DocumentExtractor:
        """Resolve the extractor for `filename`; raises UnsupportedFileTypeError."""
        return get_extractor(filename)

    def check_declared_size(self, size: Optional[int]) -> None:
        """Reject a part whose reported size is already over the cap, before reading it."""
        if size and size > self.max_file_size:
            raise FileTooLargeError(max_size=self.max_file_size, actual_size=size)

    def validate_size(self, content_length: Optional[int], actual_size: int) -> None:
        """
        Enforce the upload cap.

        Args:
            content_length: Size reported by the client (may be None or wrong)
            actual_size: Actual byte count of the uploaded file

        Raises:
            FileTooLargeError: either size is over the cap
            ValidationError: the file is empty
        """
        self.check_declared_size(content_length)

        if actual_size > self.max_file_size:
            raise FileTooLargeError(max_size=self.max_file_size, actual_size=actual_size)

        if actual_size == 0:
            raise ValidationError(message="The uploaded file is empty", field="document")

    def _generate_storage_path(self, fmt: DocumentFormat) -> Path:
        return self.storage_root / f"{uuid.uuid4()}{fmt.value}"

    async def store_file(self, content: bytes, fmt: DocumentFormat) -> Path:
        """
        Write validated content to a uniquely named file.

        Raises:
            FileStorageError if the directory or the file cannot be written.
        """
        path = self._generate_storage_path(fmt)
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            async with aiofiles.open(path, "wb") as f:
                await f.write(content)
        except OSError as e:
            logger.error("Failed to store upload at %s: %s", path, e)
            raise FileStorageError(
                message="Failed to save the uploaded document. Please try again.",
                context={"path": str(path), "os_error": str(e)},
            ) from e

        logger.debug("Upload stored: %s (%d bytes)", path.name, len(content))
        return path

    async def cleanup_file(self, file_path: Path) -> None:
        """
        Remove a temporary upload if it still exists.

        Failure to delete is logged, not raised: the extraction result (or
        its error) is what the caller needs to see.
        """
        try:
            if file_path.exists():
                os.remove(file_path)
                logger.debug("Cleaned up upload: %s", file_path.name)
        except OSError as e:
            logger.warning("Failed to clean up upload %s: %s", file_path, e)

    async def extract_text(
        self,
        filename: str,
        content: bytes,
        content_length: Optional[int] = None,
    ) -> str:
        """
        Complete ingestion pipeline: validate → store → extract → cleanup.

        Returns:
            The document's plain text.

        Raises:
            UnsupportedFileTypeError (415), FileTooLargeError (413),
            ValidationError (400), FileStorageError (500), ExtractionError (500)
        """
        extractor = self.validate_extension(filename)
        self.validate_size(content_length, len(content))

        path = await self.store_file(content, extractor.format)
        try:
            text = await run_in_threadpool(extractor.extract, str(path))
        finally:
            await self.cleanup_file(path)

        logger.info(
            "Extracted %d chars from %s (%s)", len(text), filename, extractor.format.value
        )
        return text
