"""
FastAPI application for the PDF Q&A Backend.
"""

from typing import Optional
from fastapi import Depends, FastAPI, File, Request, UploadFile, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
import logging

from .config import Settings, settings as default_settings, validate_required_settings
from .exceptions import DocumentValidationError, PayloadTooLargeError, PipelineError
from .models import (
    AnswerResponse,
    DocumentDeleteResponse,
    DocumentDetailResponse,
    DocumentListResponse,
    DocumentSummary,
    DocumentUploadResponse,
    ErrorResponse,
    HealthResponse,
    LanguageInfo,
    LanguagesResponse,
    QuestionRequest,
)
from .services import DocumentService
from .services.language_service import SUPPORTED_LANGUAGES
from .utils import format_timestamp

# Configure logging
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


def _error_response(status_code: int, error: str, detail: Optional[str] = None) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content=ErrorResponse(error=error, detail=detail, status_code=status_code).model_dump(by_alias=True)
    )


UPLOAD_CHUNK_SIZE = 1024 * 1024


async def read_upload(file: UploadFile, max_bytes: int, chunk_size: int = UPLOAD_CHUNK_SIZE) -> bytes:
    """Read an upload in chunks, stopping once it grows past ``max_bytes``."""
    chunks = []
    total = 0
    while True:
        chunk = await file.read(chunk_size)
        if not chunk:
            break
        total += len(chunk)
        if total > max_bytes:
            raise PayloadTooLargeError(
                f"File {file.filename} is too large. Maximum size is {max_bytes} bytes.",
                {"filename": file.filename, "max_bytes": max_bytes}
            )
        chunks.append(chunk)
    return b"".join(chunks)


def get_document_service(request: Request) -> DocumentService:
    """Dependency returning the service bound to the running app."""
    return request.app.state.document_service


def create_app(document_service: Optional[DocumentService] = None, settings: Optional[Settings] = None) -> FastAPI:
    """Build the application. A prepared ``DocumentService`` may be passed in."""
    settings = settings or (document_service.settings if document_service else default_settings)
    validate_required_settings(settings)

    app = FastAPI(
        title=settings.app_name,
        version=settings.app_version,
        description="Ask questions about uploaded PDFs in any language",
        docs_url="/docs",
        redoc_url="/redoc"
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.state.settings = settings
    app.state.document_service = document_service or DocumentService(settings)

    @app.exception_handler(PipelineError)
    async def pipeline_exception_handler(request: Request, exc: PipelineError):
        if exc.status_code >= 500:
            logger.error(f"{exc.error}: {exc.message}")
        else:
            logger.info(f"{exc.error}: {exc.message}")
        return _error_response(exc.status_code, exc.error, exc.message)

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError):
        messages = "; ".join(
            f"{'.'.join(str(part) for part in err.get('loc', ()))}: {err.get('msg')}" for err in exc.errors()
        )
        return _error_response(status.HTTP_400_BAD_REQUEST, "Invalid request", messages)

    @app.exception_handler(Exception)
    async def global_exception_handler(request: Request, exc: Exception):
        """Global exception handler."""
        logger.error(f"Unhandled exception: {str(exc)}")
        return _error_response(
            status.HTTP_500_INTERNAL_SERVER_ERROR,
            "Internal server error",
            str(exc) if settings.debug else "An unexpected error occurred"
        )

    @app.get("/", response_model=dict)
    async def root():
        """Root endpoint."""
        return {
            "message": "PDF Q&A API is running",
            "version": settings.app_version,
            "timestamp": format_timestamp()
        }

    @app.get("/health", response_model=HealthResponse)
    async def health_check(service: DocumentService = Depends(get_document_service)):
        """Liveness and configuration status. Always 200 while the process is up."""
        health_info = service.health_check()
        return HealthResponse(
            status=health_info["status"],
            documents_loaded=health_info["documents_loaded"],
            completion_capability_configured=health_info["completion_capability_configured"],
            version=settings.app_version,
            timestamp=health_info["timestamp"]
        )

    @app.post("/documents", response_model=DocumentUploadResponse, status_code=status.HTTP_201_CREATED)
    async def upload_document(
        file: Optional[UploadFile] = File(None),
        service: DocumentService = Depends(get_document_service)
    ):
        """Upload one PDF, extract its text and register it."""
        if file is None:
            raise DocumentValidationError("No file uploaded")

        # Reject before reading the body when the size is already known
        if file.size is not None and file.size > settings.max_file_size_bytes:
            raise PayloadTooLargeError(
                f"File {file.filename} is too large. Maximum size is {settings.max_file_size_mb}MB."
            )

        content = await read_upload(file, settings.max_file_size_bytes)
        document = await service.ingest_document(content, file.filename, file.content_type)

        return DocumentUploadResponse(
            id=document.id,
            filename=document.original_name,
            page_count=document.page_count,
            text_length=document.text_length,
            info=document.info
        )

    @app.get("/documents", response_model=DocumentListResponse)
    async def list_documents(service: DocumentService = Depends(get_document_service)):
        documents = service.list_documents()
        return DocumentListResponse(
            documents=[
                DocumentSummary(id=doc.id, filename=doc.original_name, uploaded_at=doc.uploaded_at)
                for doc in documents
            ],
            total_count=len(documents)
        )

    @app.get("/documents/{document_id}", response_model=DocumentDetailResponse)
    async def get_document(document_id: str, service: DocumentService = Depends(get_document_service)):
        doc = service.get_document(document_id)
        return DocumentDetailResponse(
            id=doc.id,
            filename=doc.original_name,
            storage_path=doc.storage_path,
            page_count=doc.page_count,
            uploaded_at=doc.uploaded_at,
            text_length=doc.text_length,
            extracted_text=doc.extracted_text,
            info=doc.info
        )

    @app.delete("/documents/{document_id}", response_model=DocumentDeleteResponse)
    async def delete_document(document_id: str, service: DocumentService = Depends(get_document_service)):
        """Remove a document and its stored file."""
        service.delete_document(document_id)
        return DocumentDeleteResponse(message="Document deleted successfully", id=document_id)

    @app.post("/questions", response_model=AnswerResponse)
    async def ask_question(payload: QuestionRequest, service: DocumentService = Depends(get_document_service)):
        """
        Answer a question, grounded in stored documents when a selector is given.

        Model outages never produce an error status: the answer is marked degraded.
        """
        if payload.audio_data:
            logger.info("Audio payload received; using the transcribed question text")

        result = await service.ask_question(
            question_text=payload.question_text,
            language_hint=payload.language_hint,
            document_selector=payload.document_selector
        )
        return AnswerResponse(
            question_text=payload.question_text,
            answer_text=result.answer_text,
            resolved_language=result.resolved_language,
            degraded=result.degraded,
            degraded_reason=result.degraded_reason,
            timestamp=result.timestamp
        )

    @app.get("/languages", response_model=LanguagesResponse)
    async def list_languages():
        """Languages with curated display names."""
        return LanguagesResponse(
            languages=[LanguageInfo(code=code, name=name) for code, name in SUPPORTED_LANGUAGES.items()]
        )

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "pdf_qa.main:app",
        host="0.0.0.0",
        port=8000,
        reload=default_settings.debug
    )
