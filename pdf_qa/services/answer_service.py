"""
Answer generation as an ordered chain of named strategies.

Each strategy returns ``Success`` or ``Unavailable``; ``first_success`` runs
them in order and stops at the first ``Success``. The chain used by
``AnswerGenerator`` is: primary model call, curated topic answer (transient
failures only), classified error message. The last one always succeeds, so
every valid question gets an answer.
"""

from dataclasses import dataclass, field
from typing import Optional, Sequence, Tuple, Union

from ..config import Settings, settings as default_settings
from ..exceptions import CompletionUnavailableError, LanguageDetectionError, TranslationFailedError
from ..utils import format_timestamp, log_processing_info, measure_time
from .chat_service import UNAVAILABLE, ChatService
from .fallbacks import error_message, find_canned_answer
from .language_service import LanguageService, language_name
import logging

logger = logging.getLogger(__name__)

SYSTEM_INSTRUCTION = (
    "You are a helpful assistant that answers questions accurately and concisely. "
    "If context from uploaded documents is provided, base your answer on it and say so "
    "when the context does not contain the answer. Otherwise answer from general knowledge."
)

LANGUAGE_INSTRUCTION = "Answer in {name} (language code: {tag}), whatever language the question is in."


@dataclass(frozen=True)
class AnswerRequest:
    question_text: str
    context: str
    language: str


@dataclass(frozen=True)
class Success:
    answer_text: str
    degraded: bool = False


@dataclass(frozen=True)
class Unavailable:
    reason: str
    detail: str = ""


StrategyResult = Union[Success, Unavailable]


@dataclass
class AnswerResult:
    answer_text: str
    resolved_language: str
    degraded: bool
    strategy: str
    degraded_reason: Optional[str] = None
    timestamp: str = field(default_factory=format_timestamp)


class AnswerStrategy:
    """One stage of the fallback chain."""

    name = "strategy"

    async def attempt(self, request: AnswerRequest, failure: Optional[Unavailable]) -> StrategyResult:
        raise NotImplementedError


async def first_success(
    strategies: Sequence[AnswerStrategy], request: AnswerRequest
) -> Tuple[str, StrategyResult, Optional[Unavailable]]:
    """
    Try ``strategies`` in order.

    Returns the winning strategy's name, its result and the first failure seen
    (``None`` when the first strategy succeeded). If nothing succeeds the last
    ``Unavailable`` is returned as the result.
    """
    first_failure: Optional[Unavailable] = None
    result: StrategyResult = Unavailable(UNAVAILABLE, "no strategies configured")
    name = ""
    for strategy in strategies:
        name = strategy.name
        result = await strategy.attempt(request, first_failure)
        if isinstance(result, Success):
            return name, result, first_failure
        logger.info(f"Answer strategy '{name}' unavailable: {result.reason} {result.detail}".rstrip())
        if first_failure is None:
            first_failure = result
    return name, result, first_failure


class PrimaryCompletionStrategy(AnswerStrategy):
    """Ask the model, then translate the answer if it came back in the wrong language."""

    name = "primary"

    def __init__(self, chat_service: ChatService, language_service: LanguageService, model_default_language: str = "en"):
        self.chat_service = chat_service
        self.language_service = language_service
        self.model_default_language = model_default_language

    async def attempt(self, request: AnswerRequest, failure: Optional[Unavailable]) -> StrategyResult:
        instruction = LANGUAGE_INSTRUCTION.format(name=language_name(request.language), tag=request.language)
        try:
            answer = await self.chat_service.complete(
                SYSTEM_INSTRUCTION, request.context or None, request.question_text, instruction
            )
        except CompletionUnavailableError as e:
            return Unavailable(e.reason, e.message)

        answer = await self._ensure_language(answer, request.language)
        return Success(answer)

    async def _ensure_language(self, answer: str, language: str) -> str:
        if language == self.model_default_language:
            return answer

        try:
            detected = await self.language_service.detect_language(answer)
        except LanguageDetectionError:
            detected = None
        if detected == language:
            return answer

        try:
            return await self.language_service.translate(answer, language)
        except TranslationFailedError as e:
            logger.warning(f"Keeping untranslated answer, translation to '{language}' failed: {e}")
            return answer


class CannedAnswerStrategy(AnswerStrategy):
    """
    Curated answer for a recognised topic in the requested language.

    Only used for transient failures; authentication and rate-limit failures
    go straight to their own message.
    """

    name = "canned"

    async def attempt(self, request: AnswerRequest, failure: Optional[Unavailable]) -> StrategyResult:
        if failure is not None and failure.reason != UNAVAILABLE:
            return Unavailable("not_transient", failure.reason)
        answer = find_canned_answer(request.question_text, request.language)
        if answer is None:
            return Unavailable("no_canned_answer")
        return Success(answer, degraded=True)


class ErrorMessageStrategy(AnswerStrategy):
    """User-facing message chosen by why the model call failed."""

    name = "error_message"

    async def attempt(self, request: AnswerRequest, failure: Optional[Unavailable]) -> StrategyResult:
        reason = failure.reason if failure else UNAVAILABLE
        return Success(error_message(reason, request.language), degraded=True)


class AnswerGenerator:
    """Builds an ``AnswerResult`` from question, context and resolved language."""

    def __init__(
        self,
        chat_service: ChatService,
        language_service: LanguageService,
        settings: Optional[Settings] = None,
        strategies: Optional[Sequence[AnswerStrategy]] = None,
    ):
        self.settings = settings or default_settings
        self.strategies = list(strategies) if strategies is not None else [
            PrimaryCompletionStrategy(chat_service, language_service, self.settings.model_default_language),
            CannedAnswerStrategy(),
            ErrorMessageStrategy(),
        ]

    @measure_time
    async def answer(self, question_text: str, context: str, resolved_language: str) -> AnswerResult:
        request = AnswerRequest(question_text=question_text, context=context or "", language=resolved_language)
        name, result, failure = await first_success(self.strategies, request)

        if isinstance(result, Unavailable):
            # Only reachable with a custom chain lacking a terminal strategy
            result = Success(error_message(result.reason, resolved_language), degraded=True)
            name = ErrorMessageStrategy.name

        degraded_reason = failure.reason if result.degraded and failure else None
        log_processing_info("Answer generated", {
            "strategy": name,
            "language": resolved_language,
            "degraded": result.degraded,
            "degraded_reason": degraded_reason,
            "answer_length": len(result.answer_text)
        })
        return AnswerResult(
            answer_text=result.answer_text,
            resolved_language=resolved_language,
            degraded=result.degraded,
            strategy=name,
            degraded_reason=degraded_reason,
        )
