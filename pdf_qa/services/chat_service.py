"""
Chat service wrapping the external chat-completion model.
"""

import asyncio
from typing import Any, Dict, List, Optional

from langchain_core.language_models.chat_models import BaseChatModel
from langchain_core.messages import BaseMessage, HumanMessage, SystemMessage
from langchain_google_genai import ChatGoogleGenerativeAI
from langchain_groq import ChatGroq

from ..config import Settings, settings as default_settings
from ..exceptions import CompletionUnavailableError
from ..utils import (
    handle_processing_error,
    log_processing_info,
)
import logging

logger = logging.getLogger(__name__)

# Failure classes of the completion capability
AUTHENTICATION = "authentication"
RATE_LIMIT = "rate_limit"
UNAVAILABLE = "unavailable"

_AUTH_MARKERS = ("authentication", "permissiondenied", "unauthenticated", "unauthorized")
_RATE_LIMIT_MARKERS = ("ratelimit", "resourceexhausted", "toomanyrequests")
_AUTH_MESSAGE_MARKERS = ("api key", "api_key", "invalid key", "unauthorized", "authentication")
_RATE_LIMIT_MESSAGE_MARKERS = ("rate limit", "rate_limit", "quota", "too many requests")


def _status_code(error: BaseException) -> Optional[int]:
    for attr in ("status_code", "code", "status"):
        value = getattr(error, attr, None)
        if isinstance(value, int):
            return value
    response = getattr(error, "response", None)
    value = getattr(response, "status_code", None)
    return value if isinstance(value, int) else None


def classify_completion_error(error: BaseException) -> str:
    """
    Map a failure from the completion call onto one of
    ``authentication``, ``rate_limit`` or ``unavailable``.

    Provider SDKs raise their own exception types, so the status code, the
    class names in the MRO and finally the message text are inspected.
    """
    if isinstance(error, CompletionUnavailableError):
        return error.reason
    if isinstance(error, (asyncio.TimeoutError, TimeoutError, ConnectionError)):
        return UNAVAILABLE

    status = _status_code(error)
    if status in (401, 403):
        return AUTHENTICATION
    if status == 429:
        return RATE_LIMIT

    class_names = " ".join(cls.__name__.lower() for cls in type(error).__mro__)
    if any(marker in class_names for marker in _AUTH_MARKERS):
        return AUTHENTICATION
    if any(marker in class_names for marker in _RATE_LIMIT_MARKERS):
        return RATE_LIMIT

    message = str(error).lower()
    if any(marker in message for marker in _AUTH_MESSAGE_MARKERS):
        return AUTHENTICATION
    if any(marker in message for marker in _RATE_LIMIT_MESSAGE_MARKERS):
        return RATE_LIMIT

    return UNAVAILABLE


def _content_to_text(content: Any) -> str:
    """Chat model content may be a string or a list of content parts."""
    if isinstance(content, str):
        return content
    if isinstance(content, list):
        parts = []
        for part in content:
            if isinstance(part, str):
                parts.append(part)
            elif isinstance(part, dict) and part.get("type") == "text":
                parts.append(part.get("text", ""))
        return "".join(parts)
    return str(content or "")


class ChatService:
    """Service for generating chat completions using an LLM."""

    def __init__(self, settings: Optional[Settings] = None, llm: Optional[BaseChatModel] = None):
        """Initialize the chat service. Without a credential no model is built."""
        self.settings = settings or default_settings
        self.llm = llm if llm is not None else self._initialize_llm()

    @property
    def is_configured(self) -> bool:
        return self.llm is not None

    @property
    def model_name(self) -> str:
        if self.settings.llm_provider.lower() == "groq":
            return self.settings.groq_chat_model
        return self.settings.google_chat_model

    def _initialize_llm(self) -> Optional[BaseChatModel]:
        """Initialize the language model for the configured provider."""
        api_key = self.settings.completion_api_key
        if not api_key:
            logger.warning("Completion capability not configured: no API key")
            return None

        provider = self.settings.llm_provider.lower()
        try:
            if provider == "groq":
                llm = ChatGroq(
                    model=self.settings.groq_chat_model,
                    api_key=api_key,
                    temperature=self.settings.llm_temperature,
                    max_tokens=self.settings.llm_max_tokens,
                    max_retries=0,
                )
            else:
                llm = ChatGoogleGenerativeAI(
                    model=self.settings.google_chat_model,
                    google_api_key=api_key,
                    temperature=self.settings.llm_temperature,
                    max_output_tokens=self.settings.llm_max_tokens,
                    max_retries=0,
                )
        except Exception as e:
            # A model that cannot be built is reported as a configuration problem
            handle_processing_error("llm_init", e, {"provider": provider})
            return None

        log_processing_info("LLM initialized", {
            "provider": provider,
            "model": self.model_name,
            "temperature": self.settings.llm_temperature
        })
        return llm

    @staticmethod
    def build_messages(
        system_prompt: str,
        context: Optional[str],
        user_message: str,
        instruction: Optional[str] = None,
    ) -> List[BaseMessage]:
        """
        Single system message (instruction, optional context, optional closing
        instruction) followed by the user's message. Some providers reject more
        than one system message.
        """
        system_content = system_prompt.strip()
        if context:
            system_content += f"\n\nContext from uploaded documents:\n{context}"
        if instruction:
            system_content += f"\n\n{instruction.strip()}"
        return [SystemMessage(content=system_content), HumanMessage(content=user_message)]

    async def complete(
        self,
        system_prompt: str,
        context: Optional[str],
        user_message: str,
        instruction: Optional[str] = None,
    ) -> str:
        """
        Run one chat completion.

        Returns:
            The generated text (never empty)

        Raises:
            CompletionUnavailableError: with ``reason`` set to the failure class
        """
        if self.llm is None:
            raise CompletionUnavailableError(
                AUTHENTICATION, "Completion capability is not configured: missing API key"
            )

        messages = self.build_messages(system_prompt, context, user_message, instruction)
        try:
            response = await asyncio.wait_for(
                self.llm.ainvoke(messages),
                timeout=self.settings.request_timeout_seconds,
            )
        except Exception as e:
            reason = classify_completion_error(e)
            error_info = handle_processing_error(
                "chat_completion",
                e,
                {"reason": reason, "model": self.model_name}
            )
            raise CompletionUnavailableError(reason, f"Completion failed ({reason}): {e}", error_info) from e

        answer = _content_to_text(getattr(response, "content", response)).strip()
        if not answer:
            raise CompletionUnavailableError(UNAVAILABLE, "Completion returned no text")

        log_processing_info("Completion generated", {
            "context_length": len(context or ""),
            "question_length": len(user_message),
            "answer_length": len(answer)
        })
        return answer

    def health_check(self) -> Dict[str, Any]:
        """Configuration status of the chat service. Makes no outbound call."""
        return {
            "status": "configured" if self.is_configured else "not_configured",
            "provider": self.settings.llm_provider,
            "model": self.model_name,
        }
