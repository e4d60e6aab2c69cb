"""
Unit tests for the answer generator and its fallback chain.
"""
import pytest

from pdf_qa.services.answer_service import (
    AnswerGenerator,
    AnswerRequest,
    AnswerStrategy,
    CannedAnswerStrategy,
    ErrorMessageStrategy,
    Success,
    Unavailable,
    first_success,
)
from pdf_qa.services.chat_service import AUTHENTICATION, RATE_LIMIT, UNAVAILABLE, ChatService
from pdf_qa.services.fallbacks import CANNED_ANSWERS, ERROR_MESSAGES, error_message, find_canned_answer

from tests.fakes import FakeChatModel, FakeLanguageService, make_settings

pytestmark = pytest.mark.unit


class RateLimitError(Exception):
    pass


class AuthenticationError(Exception):
    pass


def make_generator(tmp_path, llm=None, language_service=None, **settings_overrides):
    settings = make_settings(tmp_path, **settings_overrides)
    chat_service = ChatService(settings, llm=llm or FakeChatModel())
    return AnswerGenerator(chat_service, language_service or FakeLanguageService(), settings)


class RecordingStrategy(AnswerStrategy):

    def __init__(self, name, result):
        self.name = name
        self.result = result
        self.seen_failures = []

    async def attempt(self, request, failure):
        self.seen_failures.append(failure)
        return self.result


class TestFirstSuccess:

    @pytest.mark.asyncio
    async def test_stops_at_first_success(self):
        first = RecordingStrategy("first", Unavailable(RATE_LIMIT))
        second = RecordingStrategy("second", Success("ok", degraded=True))
        third = RecordingStrategy("third", Success("never"))

        name, result, failure = await first_success([first, second, third], AnswerRequest("q", "", "en"))

        assert name == "second"
        assert result == Success("ok", degraded=True)
        assert failure == Unavailable(RATE_LIMIT)
        assert second.seen_failures == [Unavailable(RATE_LIMIT)]
        assert third.seen_failures == []

    @pytest.mark.asyncio
    async def test_all_unavailable_returns_last_result(self):
        strategies = [
            RecordingStrategy("a", Unavailable(AUTHENTICATION)),
            RecordingStrategy("b", Unavailable("no_canned_answer")),
        ]

        name, result, failure = await first_success(strategies, AnswerRequest("q", "", "en"))

        assert name == "b"
        assert result == Unavailable("no_canned_answer")
        assert failure == Unavailable(AUTHENTICATION)


class TestAnswerGenerator:

    @pytest.mark.asyncio
    async def test_primary_path_is_not_degraded(self, tmp_path):
        llm = FakeChatModel(responses=["He was born in Chhapaiya."])
        language_service = FakeLanguageService()
        generator = make_generator(tmp_path, llm, language_service)

        result = await generator.answer("Where was he born?", "Born in Chhapaiya.", "en")

        assert result.answer_text == "He was born in Chhapaiya."
        assert result.degraded is False
        assert result.degraded_reason is None
        assert result.strategy == "primary"
        assert result.resolved_language == "en"
        assert result.timestamp
        assert language_service.translate_calls == []

    @pytest.mark.asyncio
    async def test_prompt_contains_context_then_language_instruction(self, tmp_path):
        llm = FakeChatModel()
        generator = make_generator(tmp_path, llm)

        await generator.answer("Where was he born?", "Born in Chhapaiya.", "gu")

        system, human = llm.calls[0]
        assert system.content.index("Born in Chhapaiya.") < system.content.index("language code: gu")
        assert "Gujarati" in system.content
        assert human.content == "Where was he born?"

    @pytest.mark.asyncio
    async def test_answer_in_wrong_language_is_translated(self, tmp_path):
        language_service = FakeLanguageService(detected="en")
        generator = make_generator(tmp_path, FakeChatModel(responses=["Born in Chhapaiya."]), language_service)

        result = await generator.answer("Où est-il né ?", "", "fr")

        assert result.answer_text == "[fr] Born in Chhapaiya."
        assert result.degraded is False
        assert language_service.translate_calls == [("Born in Chhapaiya.", "fr")]

    @pytest.mark.asyncio
    async def test_answer_already_in_target_language_is_kept(self, tmp_path):
        language_service = FakeLanguageService(detected="fr")
        generator = make_generator(tmp_path, FakeChatModel(responses=["Il est né à Chhapaiya."]), language_service)

        result = await generator.answer("Où est-il né ?", "", "fr")

        assert result.answer_text == "Il est né à Chhapaiya."
        assert language_service.translate_calls == []

    @pytest.mark.asyncio
    async def test_translation_failure_keeps_untranslated_answer(self, tmp_path):
        language_service = FakeLanguageService(detected="en", translate_error=True)
        generator = make_generator(tmp_path, FakeChatModel(responses=["Born in Chhapaiya."]), language_service)

        result = await generator.answer("Où est-il né ?", "", "fr")

        assert result.answer_text == "Born in Chhapaiya."
        assert result.degraded is False

    @pytest.mark.asyncio
    async def test_undetectable_answer_language_is_translated(self, tmp_path):
        language_service = FakeLanguageService(detect_error=True)
        generator = make_generator(tmp_path, FakeChatModel(responses=["1781"]), language_service)

        result = await generator.answer("Quand ?", "", "fr")

        assert result.answer_text == "[fr] 1781"

    @pytest.mark.asyncio
    async def test_authentication_and_rate_limit_messages_differ(self, tmp_path):
        auth = await make_generator(tmp_path, FakeChatModel(error=AuthenticationError("bad key"))).answer(
            "What is in the report?", "", "en"
        )
        limited = await make_generator(tmp_path, FakeChatModel(error=RateLimitError("slow down"))).answer(
            "What is in the report?", "", "en"
        )

        assert auth.degraded and limited.degraded
        assert auth.degraded_reason == AUTHENTICATION
        assert limited.degraded_reason == RATE_LIMIT
        assert auth.answer_text != limited.answer_text
        assert auth.answer_text == ERROR_MESSAGES[AUTHENTICATION]["en"]
        assert limited.answer_text == ERROR_MESSAGES[RATE_LIMIT]["en"]

    @pytest.mark.asyncio
    async def test_missing_credential_is_degraded(self, tmp_path):
        settings = make_settings(tmp_path, google_api_key=None)
        generator = AnswerGenerator(ChatService(settings), FakeLanguageService(), settings)

        result = await generator.answer("What is in the report?", "", "en")

        assert result.degraded is True
        assert result.degraded_reason == AUTHENTICATION
        assert result.answer_text

    @pytest.mark.asyncio
    async def test_canned_answer_for_known_topic(self, tmp_path):
        generator = make_generator(tmp_path, FakeChatModel(error=RuntimeError("boom")))

        result = await generator.answer("Swaminarayan no janma kya thayo?", "", "gu")

        assert result.answer_text == CANNED_ANSWERS["swaminarayan"]["gu"]
        assert result.degraded is True
        assert result.strategy == "canned"
        assert result.degraded_reason == UNAVAILABLE

    @pytest.mark.asyncio
    async def test_known_topic_keeps_auth_and_rate_limit_messages_distinct(self, tmp_path):
        question = "Who was Swaminarayan?"
        auth = await make_generator(tmp_path, FakeChatModel(error=AuthenticationError("bad key"))).answer(
            question, "", "en"
        )
        limited = await make_generator(tmp_path, FakeChatModel(error=RateLimitError("slow down"))).answer(
            question, "", "en"
        )

        assert auth.strategy == limited.strategy == "error_message"
        assert auth.answer_text == ERROR_MESSAGES[AUTHENTICATION]["en"]
        assert limited.answer_text == ERROR_MESSAGES[RATE_LIMIT]["en"]
        assert auth.answer_text != limited.answer_text

    @pytest.mark.asyncio
    async def test_known_topic_without_credential_gets_authentication_message(self, tmp_path):
        settings = make_settings(tmp_path, google_api_key=None)
        generator = AnswerGenerator(ChatService(settings), FakeLanguageService(), settings)

        result = await generator.answer("Who was Swaminarayan?", "", "en")

        assert result.strategy == "error_message"
        assert result.degraded_reason == AUTHENTICATION
        assert result.answer_text == ERROR_MESSAGES[AUTHENTICATION]["en"]

    @pytest.mark.asyncio
    async def test_canned_strategy_skips_non_transient_failures(self):
        request = AnswerRequest("Who was Swaminarayan?", "", "en")

        skipped = await CannedAnswerStrategy().attempt(request, Unavailable(RATE_LIMIT))
        served = await CannedAnswerStrategy().attempt(request, Unavailable(UNAVAILABLE))

        assert isinstance(skipped, Unavailable)
        assert served == Success(CANNED_ANSWERS["swaminarayan"]["en"], degraded=True)

    @pytest.mark.asyncio
    async def test_known_topic_without_language_falls_to_error_message(self, tmp_path):
        generator = make_generator(tmp_path, FakeChatModel(error=RuntimeError("boom")))

        result = await generator.answer("Where is Chhapaiya?", "", "ja")

        assert result.strategy == "error_message"
        assert result.answer_text == ERROR_MESSAGES[UNAVAILABLE]["en"]

    @pytest.mark.asyncio
    async def test_generic_message_uses_requested_language_when_available(self, tmp_path):
        generator = make_generator(tmp_path, FakeChatModel(error=RuntimeError("boom")))

        result = await generator.answer("Quoi ?", "", "fr")

        assert result.answer_text == ERROR_MESSAGES[UNAVAILABLE]["fr"]

    @pytest.mark.asyncio
    async def test_chain_without_terminal_strategy_still_answers(self, tmp_path):
        settings = make_settings(tmp_path)
        generator = AnswerGenerator(
            ChatService(settings, llm=FakeChatModel()),
            FakeLanguageService(),
            settings,
            strategies=[CannedAnswerStrategy()],
        )

        result = await generator.answer("Unrelated question", "", "en")

        assert result.degraded is True
        assert result.answer_text


class TestFallbackTables:

    def test_find_canned_answer_matches_keyword_case_insensitively(self):
        assert find_canned_answer("Tell me about CHHAPAIYA", "en") == CANNED_ANSWERS["chhapaiya"]["en"]

    def test_find_canned_answer_requires_language_entry(self):
        assert find_canned_answer("Tell me about Chhapaiya", "ja") is None

    def test_find_canned_answer_without_keyword(self):
        assert find_canned_answer("What is the weather?", "en") is None

    def test_error_messages_are_distinct_per_reason(self):
        messages = {error_message(reason, "en") for reason in (AUTHENTICATION, RATE_LIMIT, UNAVAILABLE)}
        assert len(messages) == 3

    def test_unknown_reason_uses_generic_message(self):
        assert error_message("mystery", "en") == ERROR_MESSAGES[UNAVAILABLE]["en"]

    @pytest.mark.asyncio
    async def test_error_message_strategy_without_failure(self):
        result = await ErrorMessageStrategy().attempt(AnswerRequest("q", "", "es"), None)
        assert result == Success(ERROR_MESSAGES[UNAVAILABLE]["es"], degraded=True)
