"""
Language detection, translation and per-request language resolution.
"""

import asyncio
from typing import Dict, Optional, TYPE_CHECKING

from langdetect import DetectorFactory, LangDetectException, detect

from ..config import Settings, settings as default_settings
from ..exceptions import LanguageDetectionError, TranslationFailedError
from ..utils import handle_processing_error, log_processing_info, normalize_language_tag
import logging

if TYPE_CHECKING:
    from .chat_service import ChatService

logger = logging.getLogger(__name__)

# langdetect is probabilistic unless seeded
DetectorFactory.seed = 0

AUTO = "auto"

SUPPORTED_LANGUAGES: Dict[str, str] = {
    "en": "English",
    "gu": "ગુજરાતી (Gujarati)",
    "hi": "हिन्दी (Hindi)",
    "es": "Español (Spanish)",
    "fr": "Français (French)",
    "de": "Deutsch (German)",
    "zh": "中文 (Chinese)",
    "ja": "日本語 (Japanese)",
    "ar": "العربية (Arabic)",
    "pt": "Português (Portuguese)",
}

TRANSLATION_SYSTEM_PROMPT = (
    "You are a translation engine. Translate the user's text into {language}. "
    "Return only the translated text, without quotes, notes or explanations."
)


def language_name(tag: str) -> str:
    """Human readable name for a tag, or the tag itself when unknown."""
    return SUPPORTED_LANGUAGES.get(tag, tag)


class LanguageService:
    """Detection via langdetect; translation via the configured chat model."""

    def __init__(self, chat_service: Optional["ChatService"] = None, settings: Optional[Settings] = None):
        self.chat_service = chat_service
        self.settings = settings or default_settings

    @staticmethod
    def _detect_sync(text: str) -> str:
        try:
            return detect(text)
        except LangDetectException as e:
            raise LanguageDetectionError(f"Language detection failed: {e}") from e

    async def detect_language(self, text: str) -> str:
        """
        Detect the language of ``text`` as a bare tag.

        Raises:
            LanguageDetectionError: on empty input, detector failure or timeout
        """
        if not text or not text.strip():
            raise LanguageDetectionError("Cannot detect the language of empty text")

        try:
            raw = await asyncio.wait_for(
                asyncio.to_thread(self._detect_sync, text),
                timeout=self.settings.request_timeout_seconds,
            )
        except asyncio.TimeoutError as e:
            raise LanguageDetectionError("Language detection timed out") from e

        tag = normalize_language_tag(raw)
        if not tag:
            raise LanguageDetectionError(f"Detector returned an unusable tag: {raw!r}")
        return tag

    async def translate(self, text: str, target_language: str) -> str:
        """
        Translate ``text`` into ``target_language``.

        Raises:
            TranslationFailedError: when no model is available or the call fails
        """
        if self.chat_service is None or not self.chat_service.is_configured:
            raise TranslationFailedError("No translation backend configured")

        system_prompt = TRANSLATION_SYSTEM_PROMPT.format(
            language=f"{language_name(target_language)} ({target_language})"
        )
        try:
            translated = await self.chat_service.complete(system_prompt, None, text)
        except Exception as e:
            error_info = handle_processing_error("translation", e, {"target_language": target_language})
            raise TranslationFailedError(f"Translation to {target_language} failed", error_info) from e

        if not translated.strip():
            raise TranslationFailedError(f"Translation to {target_language} returned no text")
        return translated.strip()


class LanguageResolver:
    """Decides which language a request must be answered in. Never raises."""

    def __init__(self, language_service: LanguageService, fallback_language: str = "en"):
        self.language_service = language_service
        self.fallback_language = fallback_language

    async def resolve(self, question_text: str, language_hint: Optional[str] = AUTO) -> str:
        if language_hint and language_hint.strip().lower() != AUTO:
            tag = normalize_language_tag(language_hint)
            if tag:
                return tag
            logger.warning(f"Ignoring malformed language hint {language_hint!r}")

        try:
            detected = await self.language_service.detect_language(question_text)
        except LanguageDetectionError as e:
            logger.warning(f"Language detection failed, using '{self.fallback_language}': {e}")
            return self.fallback_language

        log_processing_info("Language detected", {"language": detected})
        return detected
