"""
Ingestion pipeline: uploaded bytes -> stored file -> extracted text -> store entry.
"""

import asyncio
import os
from typing import Callable, Optional

from ..config import Settings, settings as default_settings
from ..exceptions import (
    DocumentValidationError,
    ExtractionFailedError,
    PayloadTooLargeError,
    UnsupportedMediaTypeError,
)
from ..utils import (
    build_storage_name,
    format_timestamp,
    generate_document_id,
    handle_processing_error,
    log_processing_info,
    measure_time,
)
from .document_store import Document, DocumentStore
from .pdf_processor import ExtractedPDF, PDFProcessor
import logging

logger = logging.getLogger(__name__)

TextExtractor = Callable[[bytes, str], ExtractedPDF]


class IngestionService:
    """Validates uploads, persists them and registers the extracted document."""

    def __init__(
        self,
        store: DocumentStore,
        extractor: Optional[TextExtractor] = None,
        settings: Optional[Settings] = None,
    ):
        self.store = store
        self.settings = settings or default_settings
        self.extractor = extractor or PDFProcessor().extract_text

    def _validate(self, file_content: bytes, filename: str, mime_type: Optional[str]) -> None:
        if mime_type not in self.settings.allowed_mime_types:
            raise UnsupportedMediaTypeError(
                f"Invalid file type: {filename}. Only PDF files are allowed.",
                {"filename": filename, "mime_type": mime_type}
            )

        if not file_content:
            raise DocumentValidationError(f"Empty file content for {filename}", {"filename": filename})

        if len(file_content) > self.settings.max_file_size_bytes:
            file_size_mb = len(file_content) / (1024 * 1024)
            raise PayloadTooLargeError(
                f"File {filename} is too large: {file_size_mb:.1f}MB. "
                f"Maximum size is {self.settings.max_file_size_mb}MB.",
                {"filename": filename, "size": len(file_content)}
            )

    def _persist(self, file_content: bytes, filename: str) -> str:
        os.makedirs(self.settings.upload_dir, exist_ok=True)
        storage_path = os.path.join(self.settings.upload_dir, build_storage_name(filename))
        with open(storage_path, "wb") as f:
            f.write(file_content)
        return storage_path

    @measure_time
    async def ingest(self, file_content: bytes, filename: str, mime_type: Optional[str]) -> Document:
        """
        Ingest one uploaded PDF.

        Validation happens before anything is written. If extraction fails the
        stored file is kept on disk for inspection but no document is registered.
        """
        filename = filename or "document.pdf"
        self._validate(file_content, filename, mime_type)

        storage_path = await asyncio.to_thread(self._persist, file_content, filename)

        try:
            extracted = await asyncio.wait_for(
                asyncio.to_thread(self.extractor, file_content, filename),
                timeout=self.settings.request_timeout_seconds,
            )
        except ExtractionFailedError as e:
            logger.error(f"Extraction failed for {filename}, file kept at {storage_path}: {e}")
            raise
        except asyncio.TimeoutError as e:
            handle_processing_error("pdf_extraction", e, {"filename": filename, "storage_path": storage_path})
            raise ExtractionFailedError(
                f"Timed out extracting text from PDF {filename}",
                {"filename": filename, "storage_path": storage_path}
            ) from e
        except Exception as e:
            error_info = handle_processing_error(
                "pdf_extraction", e, {"filename": filename, "storage_path": storage_path}
            )
            raise ExtractionFailedError(f"Failed to extract text from PDF {filename}: {e}", error_info) from e

        if not extracted.text or not extracted.text.strip():
            raise ExtractionFailedError(
                f"No text could be extracted from PDF {filename}",
                {"filename": filename, "storage_path": storage_path}
            )

        document = Document(
            id=generate_document_id(),
            original_name=filename,
            storage_path=storage_path,
            extracted_text=extracted.text,
            page_count=extracted.page_count,
            uploaded_at=format_timestamp(),
            size_bytes=len(file_content),
            info=extracted.info,
        )
        self.store.add(document)

        log_processing_info("Document ingested", {
            "id": document.id,
            "filename": filename,
            "pages": document.page_count,
            "text_length": document.text_length
        })
        return document
