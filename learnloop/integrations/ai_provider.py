"""
AI question providers.

HTTP clients for text-generation services that produce multiple-choice
questions as JSON. Both providers share one shape:

- ``generate_question(topic, level)`` returns a validated ``Question`` with
  per-option explanations (missing ones are filled in)
- ``validate_answer(question, user_index, correct_index)`` builds feedback
  from those explanations without another request

HTTP failures are translated into the ProviderError taxonomy:
401/403 -> auth, 429 or "quota" -> quota, timeouts / transport / 5xx ->
network, unparsable output -> format.
"""

from __future__ import annotations

import asyncio
import json
import random
import re
import time
from dataclasses import dataclass
from typing import Any

import httpx
from loguru import logger
from pydantic import ValidationError

from config import Settings
from learnloop.core.errors import (
    ProviderAuthError,
    ProviderError,
    ProviderFormatError,
    ProviderNetworkError,
    ProviderQuotaError,
)
from learnloop.core.question import Question, explain_answer, fill_missing_explanations, now_iso

DEFAULT_PROMPT = """Generate a multiple-choice question about the given topic and difficulty level.

Requirements:
- Exactly 4 options with only one correct answer
- Appropriate for the specified difficulty level
- Practical, applicable knowledge
- Explanations for ALL options, saying why each is right or wrong

Topic: {topic}
Difficulty Level: {level}

Respond with JSON only:
{{
  "question": "Your question here?",
  "options": ["Option A", "Option B", "Option C", "Option D"],
  "correct": 0,
  "explanation": "Why the correct answer is right.",
  "explanations": {{"0": "...", "1": "...", "2": "...", "3": "..."}}
}}"""

SYSTEM_PROMPT = (
    "You are an expert educator who creates high-quality multiple-choice questions. "
    "Always respond with valid JSON in the exact format requested."
)

_FENCE = re.compile(r"```(?:json)?\s*|\s*```")


@dataclass
class AnswerFeedback:
    correct: bool
    explanation: str
    enhanced: bool


def strip_code_fences(text: str) -> str:
    """Remove markdown ``` / ```json fences around a JSON payload."""
    return _FENCE.sub("", text).strip()


class AIProvider:
    """
    Base class for question generation services.

    Subclasses implement ``_complete(prompt) -> str``; everything else
    (prompt building, parsing, validation, error mapping) lives here.
    """

    name = "ai"

    def __init__(
        self,
        api_key: str,
        model: str,
        custom_prompt: str | None = None,
        timeout_seconds: float = 30.0,
        retry_attempts: int = 1,
        client: httpx.AsyncClient | None = None,
    ):
        """
        Initialize the provider.

        Args:
            api_key: Service API key; an empty key leaves the provider not ready
            model: Model identifier
            custom_prompt: Prompt template override with {topic} / {level}
            timeout_seconds: Per-request HTTP timeout
            retry_attempts: Attempts on timeouts and 5xx responses
            client: Pre-built client (tests pass one with a MockTransport)
        """
        self.api_key = api_key
        self.model = model
        self.custom_prompt = custom_prompt or None
        self.retry_attempts = max(1, retry_attempts)
        self.client = client or httpx.AsyncClient(timeout=httpx.Timeout(timeout_seconds))

    def is_ready(self) -> bool:
        return bool(self.api_key)

    async def close(self) -> None:
        await self.client.aclose()

    # -------------------------------------------------------------------------
    # Prompt
    # -------------------------------------------------------------------------

    def set_custom_prompt(self, prompt: str | None) -> None:
        self.custom_prompt = prompt or None

    def reset_prompt(self) -> None:
        self.custom_prompt = None

    @property
    def current_prompt(self) -> str:
        return self.custom_prompt or DEFAULT_PROMPT

    def build_prompt(self, topic: str, level: str) -> str:
        # str.replace keeps literal braces in custom templates intact.
        if self.custom_prompt:
            return self.custom_prompt.replace("{topic}", topic).replace("{level}", level)
        return DEFAULT_PROMPT.format(topic=topic, level=level)

    # -------------------------------------------------------------------------
    # HTTP
    # -------------------------------------------------------------------------

    def _raise_for_status(self, response: httpx.Response) -> None:
        status = response.status_code
        if status < 400:
            return
        body = response.text[:500]
        lowered = body.lower()
        if status in (401, 403) or "api key not valid" in lowered or "invalid api key" in lowered:
            raise ProviderAuthError(f"{self.name} rejected the API key ({status})", self.name)
        if status == 429 or "quota" in lowered:
            raise ProviderQuotaError(f"{self.name} quota exceeded ({status})", self.name)
        if status >= 500:
            raise ProviderNetworkError(f"{self.name} server error {status}", self.name)
        raise ProviderError(f"{self.name} request failed ({status}): {body}", self.name)

    async def _post(self, url: str, payload: dict[str, Any], **kwargs: Any) -> dict[str, Any]:
        """POST with retry on timeouts, transport errors and 5xx."""
        last_error: ProviderError | None = None

        for attempt in range(self.retry_attempts):
            try:
                response = await self.client.post(url, json=payload, **kwargs)
                self._raise_for_status(response)
                return response.json()
            except httpx.TimeoutException as e:
                last_error = ProviderNetworkError(f"{self.name} request timed out: {e}", self.name)
            except httpx.RequestError as e:
                last_error = ProviderNetworkError(f"{self.name} request error: {e}", self.name)
            except ProviderNetworkError as e:
                last_error = e
            except json.JSONDecodeError as e:
                raise ProviderFormatError(f"{self.name} returned non-JSON body: {e}", self.name) from e

            if attempt < self.retry_attempts - 1:
                wait_time = 2**attempt
                logger.warning(
                    f"{self.name} attempt {attempt + 1}/{self.retry_attempts} failed: {last_error}. "
                    f"Retrying in {wait_time}s..."
                )
                await asyncio.sleep(wait_time)

        raise last_error

    async def _complete(self, prompt: str) -> str:
        raise NotImplementedError

    # -------------------------------------------------------------------------
    # Generation
    # -------------------------------------------------------------------------

    def parse_question(self, text: str, topic: str, level: str) -> Question:
        """
        Turn raw generation output into a validated Question.

        Raises:
            ProviderFormatError: Output is not JSON or not a valid question
        """
        try:
            data = json.loads(strip_code_fences(text))
        except json.JSONDecodeError as e:
            raise ProviderFormatError(f"Failed to parse {self.name} response: {e}", self.name) from e
        if not isinstance(data, dict):
            raise ProviderFormatError(f"{self.name} response is not a JSON object", self.name)

        explanation = data.get("explanation")
        correct = data.get("correct")
        if isinstance(correct, int) and isinstance(explanation, str) and explanation:
            if not data.get("explanations"):
                logger.debug(f"{self.name} response missing per-option explanations")
            raw = data.get("explanations")
            data["explanations"] = fill_missing_explanations(
                raw if isinstance(raw, dict) else None, correct, explanation
            )

        try:
            return Question.model_validate(
                {
                    **data,
                    "id": f"ai_{int(time.time() * 1000)}_{random.randint(0, 999)}",
                    "topic": topic,
                    "level": level,
                    "source": self.name,
                    "generated_at": now_iso(),
                }
            )
        except ValidationError as e:
            raise ProviderFormatError(
                f"Invalid question format received from {self.name}: {e.error_count()} error(s)",
                self.name,
            ) from e

    async def generate_question(
        self, topic: str, level: str = "intermediate", prompt: str | None = None
    ) -> Question:
        """
        Generate one question for (topic, level).

        ``prompt`` replaces the template-built prompt for this call only.

        Raises:
            ProviderAuthError: No API key configured or key rejected
            ProviderQuotaError / ProviderNetworkError / ProviderFormatError
        """
        if not self.is_ready():
            raise ProviderAuthError(f"{self.name} is not configured. Set an API key.", self.name)

        text = await self._complete(prompt or self.build_prompt(topic, level))
        question = self.parse_question(text, topic, level)
        logger.debug(f"{self.name} generated question {question.id} for {topic}/{level}")
        return question

    def validate_answer(self, question: Question, user_index: int, correct_index: int | None = None) -> AnswerFeedback:
        """Feedback from the stored explanations; no request is made."""
        if correct_index is None:
            correct_index = question.correct
        explanation, enhanced = explain_answer(question, user_index)
        return AnswerFeedback(correct=user_index == correct_index, explanation=explanation, enhanced=enhanced)


class OpenAIProvider(AIProvider):
    """OpenAI chat completions."""

    name = "openai"
    API_URL = "https://api.openai.com/v1/chat/completions"

    async def _complete(self, prompt: str) -> str:
        data = await self._post(
            self.API_URL,
            {
                "model": self.model,
                "messages": [
                    {"role": "system", "content": SYSTEM_PROMPT},
                    {"role": "user", "content": prompt},
                ],
                "max_tokens": 800,
                "temperature": 0.7,
            },
            headers={"Authorization": f"Bearer {self.api_key}"},
        )
        try:
            return data["choices"][0]["message"]["content"]
        except (KeyError, IndexError, TypeError) as e:
            raise ProviderFormatError(f"Unexpected openai response shape: {e}", self.name) from e


class GeminiProvider(AIProvider):
    """Google Generative Language generateContent."""

    name = "gemini"
    API_URL = "https://generativelanguage.googleapis.com/v1beta/models/{model}:generateContent"

    async def _complete(self, prompt: str) -> str:
        data = await self._post(
            self.API_URL.format(model=self.model),
            {
                "contents": [{"parts": [{"text": f"{SYSTEM_PROMPT}\n\n{prompt}"}]}],
                "generationConfig": {"temperature": 0.7, "maxOutputTokens": 800},
            },
            params={"key": self.api_key},
        )
        try:
            return data["candidates"][0]["content"]["parts"][0]["text"]
        except (KeyError, IndexError, TypeError) as e:
            raise ProviderFormatError(f"Unexpected gemini response shape: {e}", self.name) from e


def build_provider(settings: Settings, client: httpx.AsyncClient | None = None) -> AIProvider:
    """Provider selected by ``settings.ai_provider``."""
    common = {
        "custom_prompt": settings.custom_prompt or None,
        "timeout_seconds": settings.provider_timeout_seconds,
        "client": client,
    }
    if settings.ai_provider == "gemini":
        return GeminiProvider(settings.gemini_api_key, settings.gemini_model, **common)
    return OpenAIProvider(settings.openai_api_key, settings.openai_model, **common)
