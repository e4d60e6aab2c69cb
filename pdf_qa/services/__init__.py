"""
Services package for the PDF Q&A Backend.
"""

from .document_store import Document, DocumentStore
from .pdf_processor import PDFProcessor
from .chat_service import ChatService
from .language_service import LanguageService, LanguageResolver
from .context_builder import ContextAssembler
from .answer_service import AnswerGenerator, AnswerResult
from .ingestion_service import IngestionService
from .document_service import DocumentService

__all__ = [
    "Document",
    "DocumentStore",
    "PDFProcessor",
    "ChatService",
    "LanguageService",
    "LanguageResolver",
    "ContextAssembler",
    "AnswerGenerator",
    "AnswerResult",
    "IngestionService",
    "DocumentService"
]
