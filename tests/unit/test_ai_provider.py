"""
Unit tests for the AI question providers (HTTP mocked with httpx.MockTransport).
"""

import json

import httpx
import pytest

from config import Settings
from learnloop.core.errors import (
    ProviderAuthError,
    ProviderError,
    ProviderFormatError,
    ProviderNetworkError,
    ProviderQuotaError,
)
from learnloop.integrations import ai_provider
from learnloop.integrations.ai_provider import (
    DEFAULT_PROMPT,
    GeminiProvider,
    OpenAIProvider,
    build_provider,
    strip_code_fences,
)

QUESTION_JSON = {
    "question": "What does the 'yield' keyword create in Python?",
    "options": ["A list", "A generator", "A tuple", "A class"],
    "correct": 1,
    "explanation": "A function containing yield returns a generator.",
    "explanations": {"0": "Lists are built eagerly.", "1": "Correct: yield makes a generator."},
}


def openai_body(content: str) -> dict:
    return {"choices": [{"message": {"role": "assistant", "content": content}}]}


def gemini_body(text: str) -> dict:
    return {"candidates": [{"content": {"parts": [{"text": text}]}}]}


def mock_client(handler) -> httpx.AsyncClient:
    return httpx.AsyncClient(transport=httpx.MockTransport(handler))


def status_handler(status: int, body: str = "error"):
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(status, text=body)

    return handler


class TestPrompt:
    def test_default_prompt(self):
        provider = OpenAIProvider("key", "gpt-test", client=mock_client(status_handler(200)))
        prompt = provider.build_prompt("python", "advanced")
        assert "Topic: python" in prompt
        assert "Difficulty Level: advanced" in prompt
        assert '"options": ["Option A"' in prompt

    def test_custom_prompt_keeps_literal_braces(self):
        provider = OpenAIProvider("key", "gpt-test", client=mock_client(status_handler(200)))
        provider.set_custom_prompt('Ask about {topic} at {level}. Reply as {"question": ...}')
        assert provider.build_prompt("sql", "beginner") == 'Ask about sql at beginner. Reply as {"question": ...}'

        provider.reset_prompt()
        assert provider.current_prompt == DEFAULT_PROMPT

    def test_strip_code_fences(self):
        assert strip_code_fences('```json\n{"a": 1}\n```') == '{"a": 1}'
        assert strip_code_fences('{"a": 1}') == '{"a": 1}'


class TestOpenAIProvider:
    @pytest.mark.asyncio
    async def test_generates_question_from_fenced_json(self):
        seen = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen["auth"] = request.headers["Authorization"]
            seen["payload"] = json.loads(request.content)
            fenced = "```json\n" + json.dumps(QUESTION_JSON) + "\n```"
            return httpx.Response(200, json=openai_body(fenced))

        provider = OpenAIProvider("sk-test", "gpt-test", client=mock_client(handler))
        question = await provider.generate_question("python", "intermediate")
        await provider.close()

        assert seen["auth"] == "Bearer sk-test"
        assert seen["payload"]["model"] == "gpt-test"
        assert question.topic == "python"
        assert question.level == "intermediate"
        assert question.source == "openai"
        assert question.id.startswith("ai_")
        assert question.correct_answer == "A generator"
        # Missing explanations for options 2 and 3 are filled in
        assert set(question.explanations) == {"0", "1", "2", "3"}

    @pytest.mark.asyncio
    async def test_prompt_override_for_one_call(self):
        sent = []

        def handler(request: httpx.Request) -> httpx.Response:
            sent.append(json.loads(request.content)["messages"][1]["content"])
            return httpx.Response(200, json=openai_body(json.dumps(QUESTION_JSON)))

        provider = OpenAIProvider("sk-test", "gpt-test", client=mock_client(handler))
        question = await provider.generate_question("system-design", "advanced", prompt="Ask a Google-style question.")
        await provider.generate_question("python", "beginner")
        await provider.close()

        assert sent[0] == "Ask a Google-style question."
        assert "Topic: python" in sent[1]
        assert question.topic == "system-design"

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "status,body,error",
        [
            (401, "unauthorized", ProviderAuthError),
            (403, "forbidden", ProviderAuthError),
            (400, "API key not valid. Please pass a valid API key.", ProviderAuthError),
            (429, "rate limited", ProviderQuotaError),
            (400, "You exceeded your current quota", ProviderQuotaError),
            (500, "boom", ProviderNetworkError),
            (503, "unavailable", ProviderNetworkError),
            (404, "no such model", ProviderError),
        ],
    )
    async def test_http_errors_are_mapped(self, status, body, error):
        provider = OpenAIProvider("sk-test", "gpt-test", client=mock_client(status_handler(status, body)))
        with pytest.raises(error) as exc_info:
            await provider.generate_question("python", "beginner")
        assert exc_info.value.provider == "openai"

    @pytest.mark.asyncio
    async def test_unparsable_output(self):
        handler = lambda request: httpx.Response(200, json=openai_body("Sure! Here is a question..."))  # noqa: E731
        provider = OpenAIProvider("sk-test", "gpt-test", client=mock_client(handler))
        with pytest.raises(ProviderFormatError):
            await provider.generate_question("python", "beginner")

    @pytest.mark.asyncio
    async def test_invalid_question_shape(self):
        bad = {**QUESTION_JSON, "options": ["only", "three", "options"]}
        handler = lambda request: httpx.Response(200, json=openai_body(json.dumps(bad)))  # noqa: E731
        provider = OpenAIProvider("sk-test", "gpt-test", client=mock_client(handler))
        with pytest.raises(ProviderFormatError):
            await provider.generate_question("python", "beginner")

    @pytest.mark.asyncio
    async def test_unexpected_response_shape(self):
        handler = lambda request: httpx.Response(200, json={"choices": []})  # noqa: E731
        provider = OpenAIProvider("sk-test", "gpt-test", client=mock_client(handler))
        with pytest.raises(ProviderFormatError):
            await provider.generate_question("python", "beginner")

    @pytest.mark.asyncio
    async def test_timeout_is_network_error(self):
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ReadTimeout("slow", request=request)

        provider = OpenAIProvider("sk-test", "gpt-test", client=mock_client(handler))
        with pytest.raises(ProviderNetworkError):
            await provider.generate_question("python", "beginner")

    @pytest.mark.asyncio
    async def test_missing_key_fails_without_request(self):
        calls = []

        def handler(request: httpx.Request) -> httpx.Response:
            calls.append(request)
            return httpx.Response(200)

        provider = OpenAIProvider("", "gpt-test", client=mock_client(handler))
        assert provider.is_ready() is False
        with pytest.raises(ProviderAuthError):
            await provider.generate_question("python", "beginner")
        assert calls == []

    @pytest.mark.asyncio
    async def test_retries_server_errors(self, monkeypatch):
        responses = [httpx.Response(502, text="bad gateway"), httpx.Response(200, json=openai_body(json.dumps(QUESTION_JSON)))]

        async def no_sleep(seconds):
            return None

        monkeypatch.setattr(ai_provider.asyncio, "sleep", no_sleep)
        provider = OpenAIProvider(
            "sk-test", "gpt-test", retry_attempts=2, client=mock_client(lambda request: responses.pop(0))
        )
        question = await provider.generate_question("python", "beginner")
        assert question.correct == 1
        assert responses == []


class TestGeminiProvider:
    @pytest.mark.asyncio
    async def test_generates_question(self):
        seen = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen["url"] = request.url
            return httpx.Response(200, json=gemini_body(json.dumps(QUESTION_JSON)))

        provider = GeminiProvider("g-key", "gemini-test", client=mock_client(handler))
        question = await provider.generate_question("ai", "advanced")

        assert seen["url"].params["key"] == "g-key"
        assert "gemini-test:generateContent" in seen["url"].path
        assert question.source == "gemini"
        assert question.topic == "ai"


class TestFeedbackAndFactory:
    @pytest.mark.asyncio
    async def test_validate_answer_uses_stored_explanations(self):
        handler = lambda request: httpx.Response(200, json=openai_body(json.dumps(QUESTION_JSON)))  # noqa: E731
        provider = OpenAIProvider("sk-test", "gpt-test", client=mock_client(handler))
        question = await provider.generate_question("python", "beginner")

        right = provider.validate_answer(question, 1)
        wrong = provider.validate_answer(question, 0)

        assert right.correct is True
        assert right.explanation.startswith("Correct!")
        assert wrong.correct is False
        assert "Lists are built eagerly." in wrong.explanation
        assert wrong.enhanced is True

    def test_build_provider(self):
        settings = Settings(_env_file=None, ai_provider="gemini", gemini_api_key="g-key", custom_prompt="Q on {topic}")
        provider = build_provider(settings, client=mock_client(status_handler(200)))

        assert isinstance(provider, GeminiProvider)
        assert provider.is_ready()
        assert provider.build_prompt("sql", "beginner") == "Q on sql"

        default = build_provider(Settings(_env_file=None), client=mock_client(status_handler(200)))
        assert isinstance(default, OpenAIProvider)
        assert default.is_ready() is False
