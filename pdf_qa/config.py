"""
Configuration management for the PDF Q&A Backend.
Handles environment variables and application settings.
"""

import logging
from typing import List, Optional
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict
from dotenv import load_dotenv

# Load environment variables
load_dotenv()

logger = logging.getLogger(__name__)


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=False,
        extra="ignore",  # Ignore extra fields from environment
    )

    # API Configuration
    app_name: str = Field(default="PDF Q&A Backend")
    app_version: str = Field(default="1.0.0")
    debug: bool = Field(default=False)
    cors_origins: List[str] = Field(default=["*"])

    # Completion capability
    llm_provider: str = Field(default="google", description="google or groq")
    google_api_key: Optional[str] = Field(default=None)
    google_chat_model: str = Field(default="gemini-1.5-flash")
    groq_api_key: Optional[str] = Field(default=None)
    groq_chat_model: str = Field(default="llama-3.3-70b-versatile")
    llm_temperature: float = Field(default=0.7)
    llm_max_tokens: int = Field(default=1024)

    # Language handling
    fallback_language: str = Field(default="en")
    model_default_language: str = Field(default="en")

    # File Processing Configuration
    max_file_size_mb: int = Field(default=10)
    allowed_mime_types: List[str] = Field(default=["application/pdf"])
    upload_dir: str = Field(default="uploads")

    # Question answering
    context_char_budget: int = Field(default=3000, gt=0)
    request_timeout_seconds: float = Field(default=30.0, gt=0)

    @property
    def completion_api_key(self) -> Optional[str]:
        """Credential for the configured provider, if any."""
        if self.llm_provider.lower() == "groq":
            return self.groq_api_key
        return self.google_api_key

    @property
    def completion_configured(self) -> bool:
        return bool(self.completion_api_key)

    @property
    def max_file_size_bytes(self) -> int:
        return self.max_file_size_mb * 1024 * 1024


# Global settings instance
settings = Settings()


def get_settings() -> Settings:
    """Get application settings."""
    return settings


def validate_required_settings(current: Optional[Settings] = None) -> None:
    """
    Validate settings at startup.

    A missing completion credential is not fatal: questions are still answered
    through the degraded path. An unknown provider is a configuration error.
    """
    current = current or settings

    if current.llm_provider.lower() not in ("google", "groq"):
        raise ValueError(
            f"Unsupported LLM_PROVIDER '{current.llm_provider}'. Use 'google' or 'groq'."
        )

    if not current.completion_configured:
        logger.warning(
            "No API key configured for provider '%s'. Answers will come from the fallback path.",
            current.llm_provider,
        )
