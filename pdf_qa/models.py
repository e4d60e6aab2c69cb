"""
Pydantic models for request/response validation.

JSON uses camelCase field names; snake_case is accepted on input as well.
"""

from typing import Any, Dict, List, Optional
from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from .utils import normalize_language_tag


class APIModel(BaseModel):
    """Base model with camelCase aliases."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class DocumentUploadResponse(APIModel):
    """Response model for PDF upload."""
    id: str = Field(..., description="Document ID")
    filename: str = Field(..., description="Original file name")
    page_count: int = Field(..., description="Number of pages in the PDF")
    text_length: int = Field(..., description="Length of the extracted text")
    info: Dict[str, Any] = Field(default_factory=dict, description="PDF metadata")


class DocumentSummary(APIModel):
    """One entry of the document listing."""
    id: str
    filename: str
    uploaded_at: str


class DocumentListResponse(APIModel):
    """Response model for listing documents."""
    documents: List[DocumentSummary] = Field(default_factory=list)
    total_count: int = Field(..., description="Number of stored documents")


class DocumentDetailResponse(APIModel):
    """Full document record."""
    id: str
    filename: str
    storage_path: Optional[str] = None
    page_count: int
    uploaded_at: str
    text_length: int
    extracted_text: str
    info: Dict[str, Any] = Field(default_factory=dict)


class DocumentDeleteResponse(APIModel):
    message: str
    id: str


class QuestionRequest(APIModel):
    """Request model for questions."""
    question_text: str = Field(..., description="User's question")
    language_hint: str = Field(default="auto", description="'auto' or a language tag such as 'fr'")
    document_selector: Optional[str] = Field(
        default=None, description="Document ID, 'all', or omitted for no document context"
    )
    audio_data: Optional[str] = Field(
        default=None, description="Recorded audio; the question must already be transcribed"
    )

    @field_validator("question_text")
    @classmethod
    def question_not_blank(cls, v: str) -> str:
        if not v or not v.strip():
            raise ValueError("Question is required")
        return v.strip()

    @field_validator("language_hint", mode="before")
    @classmethod
    def normalize_hint(cls, v: Optional[str]) -> str:
        if v is None or not str(v).strip() or str(v).strip().lower() == "auto":
            return "auto"
        tag = normalize_language_tag(str(v))
        if tag is None:
            raise ValueError(f"Invalid language tag: {v}")
        return tag

    @field_validator("document_selector")
    @classmethod
    def blank_selector_is_none(cls, v: Optional[str]) -> Optional[str]:
        if v is None or not v.strip():
            return None
        return v.strip()


class AnswerResponse(APIModel):
    """Response model for questions."""
    question_text: str
    answer_text: str
    resolved_language: str
    degraded: bool = Field(..., description="True when the answer came from a fallback path")
    degraded_reason: Optional[str] = Field(
        default=None, description="authentication, rate_limit or unavailable when degraded"
    )
    timestamp: str


class LanguageInfo(APIModel):
    code: str
    name: str


class LanguagesResponse(APIModel):
    languages: List[LanguageInfo]


class HealthResponse(APIModel):
    """Response model for health check."""
    status: str = Field(..., description="Health status")
    documents_loaded: int = Field(..., description="Number of stored documents")
    completion_capability_configured: bool = Field(..., description="Whether a model credential is set")
    version: str = Field(..., description="Application version")
    timestamp: str = Field(..., description="Current timestamp")


class ErrorResponse(APIModel):
    """Response model for errors."""
    error: str = Field(..., description="Error message")
    detail: Optional[str] = Field(default=None, description="Detailed error information")
    status_code: int = Field(..., description="HTTP status code")
