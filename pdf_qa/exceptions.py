"""
Exception hierarchy for the question-answering pipeline.

Each surfaced error carries the HTTP status the API layer maps it to.
"""
from typing import Any, Dict, Optional


class PipelineError(Exception):
    """Base class for pipeline exceptions."""

    status_code: int = 500
    error: str = "Pipeline error"

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}


class DocumentValidationError(PipelineError):
    """Raised for bad or missing client input; include details in message."""

    status_code = 400
    error = "Validation error"


class UnsupportedMediaTypeError(DocumentValidationError):
    """Raised when an upload is not an accepted document type."""

    error = "Unsupported media type"


class PayloadTooLargeError(PipelineError):
    """Raised when an upload exceeds the configured size limit."""

    status_code = 413
    error = "Payload too large"


class DocumentNotFoundError(PipelineError):
    """Raised when a document id is not in the store."""

    status_code = 404
    error = "Document not found"

    def __init__(self, document_id: str):
        super().__init__(f"Document not found: {document_id}", {"id": document_id})
        self.document_id = document_id


class ExtractionFailedError(PipelineError):
    """Raised when text extraction fails or returns unusable output."""

    status_code = 500
    error = "Failed to process PDF"


class CompletionUnavailableError(PipelineError):
    """Raised when the completion capability cannot produce an answer."""

    status_code = 503
    error = "Completion unavailable"

    def __init__(self, reason: str, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message, details)
        self.reason = reason


class TranslationFailedError(PipelineError):
    """Raised when translating an answer fails. Always absorbed by callers."""


class LanguageDetectionError(PipelineError):
    """Raised when language detection fails. Always absorbed by callers."""
