"""
Question Selector.

Scheduling policy for the next question. Each request walks:

    IDLE -> CHOOSING_SOURCE -> GENERATING | CACHE_LOOKUP | BANK_LOOKUP
         -> DELIVERED | FAILED

1. Pick (topic, level): with probability 0.7 pin to the top targeted
   weakness, otherwise draw from the preferred topics / levels.
2. AI enabled and provider ready: generate; on any ProviderError fall back
   to cached questions matching topic+level, topic, level, then anything.
   If the cache is exhausted too, serve a static question tagged
   ``static-fallback``.
3. Otherwise serve a static bank question.

An explicit (topic, level) from the caller replaces step 1 on every path.

Only the provider call awaits; the cache is touched before or after it.
"""

from __future__ import annotations

import asyncio
import random
import time
from dataclasses import dataclass, field
from enum import Enum

from loguru import logger

from config import Settings
from learnloop.adaptive.weakness_analyzer import TargetedTopic, WeaknessAnalyzer
from learnloop.core.errors import InvalidQuestionId, NoQuestionsAvailable, ProviderError, ProviderNetworkError
from learnloop.core.question import OPTION_COUNT, Question, explain_answer
from learnloop.integrations.ai_provider import AIProvider
from learnloop.quiz.cache_store import CacheStore
from learnloop.quiz.question_bank import QuestionBank

SOURCE_AI = "ai"
SOURCE_CACHED = "cached"
SOURCE_STATIC = "static"
SOURCE_STATIC_FALLBACK = "static-fallback"
SOURCE_COMPANY = "company"


class SelectionState(str, Enum):
    IDLE = "idle"
    CHOOSING_SOURCE = "choosing_source"
    GENERATING = "generating"
    CACHE_LOOKUP = "cache_lookup"
    BANK_LOOKUP = "bank_lookup"
    DELIVERED = "delivered"
    FAILED = "failed"


@dataclass
class SelectionPolicy:
    preferred_topics: list[str] = field(default_factory=lambda: ["oops", "java", "python", "ai", "databases"])
    preferred_levels: list[str] = field(default_factory=lambda: ["beginner", "intermediate", "advanced"])
    targeted_probability: float = 0.7
    targeted_limit: int = 3
    use_ai: bool = False
    provider_timeout_seconds: float = 30.0

    @classmethod
    def from_settings(cls, settings: Settings) -> SelectionPolicy:
        return cls(
            preferred_topics=list(settings.preferred_topics),
            preferred_levels=list(settings.preferred_levels),
            targeted_probability=settings.targeted_topic_probability,
            targeted_limit=settings.targeted_topic_limit,
            use_ai=settings.use_ai,
            provider_timeout_seconds=settings.provider_timeout_seconds,
        )


@dataclass
class DeliveredQuestion:
    """A question handed to the user, with where it came from."""

    question: Question
    source: str  # ai | cached | static | static-fallback | company
    ai_enabled: bool
    targeted: TargetedTopic | None = None
    provider_error: str | None = None
    delivered_at: float = field(default_factory=time.monotonic)

    @property
    def id(self) -> str:
        return self.question.id

    def elapsed_ms(self) -> int:
        return int((time.monotonic() - self.delivered_at) * 1000)


@dataclass
class AnswerResult:
    question_id: str
    correct: bool
    user_index: int
    correct_index: int
    user_answer: str
    correct_answer: str
    explanation: str
    enhanced: bool


class QuestionSelector:
    """
    Chooses and serves the next question.

    Args:
        analyzer: Source of targeted topics (its last report)
        cache: Generated question cache
        bank: Static question bank
        provider: AI provider, or None when generation is unavailable
        policy: Preferences and selection knobs
        rng: Random source
    """

    def __init__(
        self,
        analyzer: WeaknessAnalyzer,
        cache: CacheStore,
        bank: QuestionBank,
        provider: AIProvider | None = None,
        policy: SelectionPolicy | None = None,
        rng: random.Random | None = None,
    ):
        self.analyzer = analyzer
        self.cache = cache
        self.bank = bank
        self.provider = provider
        self.policy = policy or SelectionPolicy()
        self.rng = rng or random.Random()
        self.state = SelectionState.IDLE
        self.transitions: list[SelectionState] = []
        self._active: DeliveredQuestion | None = None

    def _enter(self, state: SelectionState) -> None:
        self.state = state
        self.transitions.append(state)

    @property
    def active(self) -> DeliveredQuestion | None:
        return self._active

    def clear_active(self) -> None:
        self._active = None

    def ai_available(self) -> bool:
        return bool(self.policy.use_ai and self.provider is not None and self.provider.is_ready())

    # -------------------------------------------------------------------------
    # Target choice
    # -------------------------------------------------------------------------

    def preferred_target(self) -> tuple[str | None, str | None]:
        """Random (topic, level) from the preferences; None where a list is empty."""
        topics = self.policy.preferred_topics
        levels = self.policy.preferred_levels
        topic = self.rng.choice(topics) if topics else None
        level = self.rng.choice(levels) if levels else None
        return topic, level

    def choose_target(self) -> tuple[str | None, str | None, TargetedTopic | None]:
        """(topic, level, targeted entry or None) for generation."""
        targets = self.analyzer.get_targeted_topics(self.policy.targeted_limit)
        if targets and self.rng.random() < self.policy.targeted_probability:
            top = targets[0]
            return top.topic, top.difficulty, top
        return (*self.preferred_target(), None)

    # -------------------------------------------------------------------------
    # Sources
    # -------------------------------------------------------------------------

    async def _generate(self, topic: str, level: str) -> Question:
        self._enter(SelectionState.GENERATING)
        try:
            return await asyncio.wait_for(
                self.provider.generate_question(topic, level),
                timeout=self.policy.provider_timeout_seconds,
            )
        except asyncio.TimeoutError as e:
            raise ProviderNetworkError(
                f"Generation timed out after {self.policy.provider_timeout_seconds}s",
                self.provider.name,
            ) from e

    def _from_cache(self, topic: str | None, level: str | None) -> Question | None:
        self._enter(SelectionState.CACHE_LOOKUP)
        tiers = ((topic, level), (topic, None), (None, level), (None, None))
        for tier_topic, tier_level in tiers:
            question = self.cache.query_random(topic=tier_topic, level=tier_level)
            if question is not None:
                logger.info(f"Serving cached question (topic={tier_topic}, level={tier_level})")
                return question
        return None

    def _from_bank(self, topic: str | None, level: str | None) -> Question | None:
        self._enter(SelectionState.BANK_LOOKUP)
        return self.bank.random_question(topic, level)

    # -------------------------------------------------------------------------
    # Public API
    # -------------------------------------------------------------------------

    async def next_question(self, topic: str | None = None, level: str | None = None) -> DeliveredQuestion:
        """
        Select, fetch and activate the next question.

        ``topic`` / ``level`` pin the target; when either is given, weakness
        targeting and preferences are skipped.

        Raises:
            NoQuestionsAvailable: The static bank is empty as well
        """
        self.transitions = []
        self._enter(SelectionState.CHOOSING_SOURCE)
        ai_enabled = self.ai_available()
        delivered: DeliveredQuestion | None = None
        pinned = topic is not None or level is not None

        if ai_enabled:
            targeted = None
            if not pinned:
                # Weakness targets are concept ids; only generation understands them
                topic, level, targeted = self.choose_target()
            try:
                question = await self._generate(topic or "programming", level or "intermediate")
                self.cache.add(question)
                delivered = DeliveredQuestion(question, SOURCE_AI, True, targeted)
            except ProviderError as e:
                logger.warning(f"{type(e).__name__} from {e.provider}: {e}. Falling back to cache")
                cached = self._from_cache(topic, level)
                if cached is not None:
                    delivered = DeliveredQuestion(cached, SOURCE_CACHED, True, targeted, str(e))
                else:
                    logger.warning("No cached questions available, using static question")
                    question = self._from_bank(*((topic, level) if pinned else self.preferred_target()))
                    if question is not None:
                        delivered = DeliveredQuestion(
                            question, SOURCE_STATIC_FALLBACK, True, None, str(e)
                        )
        else:
            question = self._from_bank(*((topic, level) if pinned else self.preferred_target()))
            if question is not None:
                delivered = DeliveredQuestion(question, SOURCE_STATIC, False)

        if delivered is None:
            self._enter(SelectionState.FAILED)
            raise NoQuestionsAvailable("No question could be served from any source")

        return self._deliver(delivered)

    def deliver(self, question: Question, source: str) -> DeliveredQuestion:
        """Activate a question fetched elsewhere (e.g. a company question set)."""
        self.transitions = []
        return self._deliver(DeliveredQuestion(question, source, self.ai_available()))

    def _deliver(self, delivered: DeliveredQuestion) -> DeliveredQuestion:
        self._active = delivered
        self._enter(SelectionState.DELIVERED)
        logger.debug(f"Delivered {delivered.id} from {delivered.source} ({delivered.question.topic}/{delivered.question.level})")
        return delivered

    def check_answer(self, question_id: str, answer_index: int) -> AnswerResult:
        """
        Grade an answer against the active question and release it.

        Raises:
            InvalidQuestionId: No active question or a different id
            ValueError: answer_index is not an option index
        """
        active = self._active
        if active is None or active.id != str(question_id):
            raise InvalidQuestionId(str(question_id))
        if isinstance(answer_index, bool) or not 0 <= answer_index < OPTION_COUNT:
            raise ValueError(f"Answer index must be between 0 and {OPTION_COUNT - 1}")

        question = active.question
        explanation, enhanced = explain_answer(question, answer_index)
        self._active = None
        self.state = SelectionState.IDLE
        return AnswerResult(
            question_id=question.id,
            correct=answer_index == question.correct,
            user_index=answer_index,
            correct_index=question.correct,
            user_answer=question.options[answer_index],
            correct_answer=question.correct_answer,
            explanation=explanation,
            enhanced=enhanced,
        )
