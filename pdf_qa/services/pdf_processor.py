"""
PDF processing service for extracting text from PDF files.
"""

import PyPDF2
from io import BytesIO
from dataclasses import dataclass, field
from typing import Any, Dict

from ..exceptions import ExtractionFailedError
from ..utils import (
    measure_time,
    clean_text,
    log_processing_info,
    handle_processing_error
)
import logging

logger = logging.getLogger(__name__)


@dataclass
class ExtractedPDF:
    """Plain text and descriptive metadata pulled out of a PDF."""
    text: str
    page_count: int
    info: Dict[str, Any] = field(default_factory=dict)


class PDFProcessor:
    """Service for processing PDF files and extracting text."""

    @staticmethod
    def _read_info(pdf_reader: PyPDF2.PdfReader) -> Dict[str, Any]:
        """Document info dictionary with the leading slash dropped from keys."""
        try:
            metadata = pdf_reader.metadata
        except Exception as e:
            logger.warning(f"Could not read PDF metadata: {e}")
            return {}
        if not metadata:
            return {}
        return {str(key).lstrip('/'): str(value) for key, value in metadata.items()}

    @measure_time
    def extract_text(self, file_content: bytes, filename: str) -> ExtractedPDF:
        """
        Extract text from PDF file content.

        Args:
            file_content: PDF file content as bytes
            filename: Name of the PDF file

        Returns:
            ExtractedPDF with the text of every readable page joined by blank lines

        Raises:
            ExtractionFailedError: if the PDF cannot be parsed or has no text
        """
        try:
            pdf_reader = PyPDF2.PdfReader(BytesIO(file_content))
            total_pages = len(pdf_reader.pages)
        except Exception as e:
            error_info = handle_processing_error(
                "pdf_extraction",
                e,
                {"filename": filename, "file_size": len(file_content)}
            )
            raise ExtractionFailedError(
                f"Failed to extract text from PDF {filename}: {e}", error_info
            ) from e

        log_processing_info("PDF extraction started", {
            "filename": filename,
            "total_pages": total_pages,
            "file_size": len(file_content)
        })

        page_texts = []
        for page_num, page in enumerate(pdf_reader.pages):
            try:
                page_text = clean_text(page.extract_text() or "")
            except Exception as page_error:
                error_info = handle_processing_error(
                    "page_extraction",
                    page_error,
                    {"filename": filename, "page": page_num + 1}
                )
                logger.warning(f"Skipping page {page_num + 1}: {error_info}")
                continue
            if page_text:
                page_texts.append(page_text)

        text = "\n\n".join(page_texts)
        if not text.strip():
            raise ExtractionFailedError(
                f"No text could be extracted from PDF {filename}",
                {"filename": filename, "total_pages": total_pages}
            )

        log_processing_info("PDF extraction completed", {
            "filename": filename,
            "pages_with_text": len(page_texts),
            "total_pages": total_pages,
            "text_length": len(text)
        })

        return ExtractedPDF(text=text, page_count=total_pages, info=self._read_info(pdf_reader))
