"""
Main document service that wires ingestion, storage, context, language
resolution and answer generation together for the API layer.
"""

from typing import Any, Dict, List, Optional

from ..config import Settings, settings as default_settings
from ..exceptions import DocumentValidationError
from ..utils import format_timestamp, log_processing_info, measure_time
from .answer_service import AnswerGenerator, AnswerResult
from .chat_service import ChatService
from .context_builder import ContextAssembler
from .document_store import Document, DocumentStore
from .ingestion_service import IngestionService, TextExtractor
from .language_service import AUTO, LanguageResolver, LanguageService
import logging

logger = logging.getLogger(__name__)


class DocumentService:
    """Main service for document ingestion and question answering."""

    def __init__(
        self,
        settings: Optional[Settings] = None,
        store: Optional[DocumentStore] = None,
        chat_service: Optional[ChatService] = None,
        language_service: Optional[LanguageService] = None,
        extractor: Optional[TextExtractor] = None,
    ):
        """Initialize the document service. Collaborators may be injected."""
        self.settings = settings or default_settings
        self.store = store if store is not None else DocumentStore()
        self.chat_service = chat_service or ChatService(self.settings)
        self.language_service = language_service or LanguageService(self.chat_service, self.settings)

        self.ingestion = IngestionService(self.store, extractor, self.settings)
        self.context_assembler = ContextAssembler(self.store, self.settings.context_char_budget)
        self.language_resolver = LanguageResolver(self.language_service, self.settings.fallback_language)
        self.answer_generator = AnswerGenerator(self.chat_service, self.language_service, self.settings)

    async def ingest_document(self, file_content: bytes, filename: str, mime_type: Optional[str]) -> Document:
        return await self.ingestion.ingest(file_content, filename, mime_type)

    def list_documents(self) -> List[Document]:
        return self.store.list()

    def get_document(self, document_id: str) -> Document:
        return self.store.get(document_id)

    def delete_document(self, document_id: str) -> Document:
        return self.store.remove(document_id)

    @measure_time
    async def ask_question(
        self,
        question_text: str,
        language_hint: Optional[str] = AUTO,
        document_selector: Optional[str] = None,
    ) -> AnswerResult:
        """
        Answer a question, optionally grounded in stored documents.

        Args:
            question_text: The user's question, must be non-empty
            language_hint: "auto" or a language tag
            document_selector: None, a document id or "all"

        Returns:
            AnswerResult; degraded answers are flagged, never raised

        Raises:
            DocumentValidationError: empty question
            DocumentNotFoundError: selector names an unknown document
        """
        if not question_text or not question_text.strip():
            raise DocumentValidationError("Question is required")
        question_text = question_text.strip()

        # Context first: an unknown document id fails before any outbound call
        context = self.context_assembler.build_context(document_selector)
        language = await self.language_resolver.resolve(question_text, language_hint)

        log_processing_info("Question received", {
            "question_length": len(question_text),
            "language_hint": language_hint,
            "resolved_language": language,
            "document_selector": document_selector,
            "context_length": len(context)
        })

        return await self.answer_generator.answer(question_text, context, language)

    def health_check(self) -> Dict[str, Any]:
        """Liveness information. Never raises."""
        return {
            "status": "healthy",
            "documents_loaded": self.store.count(),
            "completion_capability_configured": self.chat_service.is_configured,
            "chat_service": self.chat_service.health_check(),
            "timestamp": format_timestamp()
        }
