"""
Learning Companion.

The explicit application context: one object owning the durable store and
every component built on it (ledger, analyzers, cache, bank, provider,
selector, interview history, company question sets). The CLI and the
scheduler loop talk to this object only.
"""

from __future__ import annotations

import random
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

from loguru import logger

from config import Settings, get_settings
from learnloop.adaptive.skill_assessor import Assessment, SkillAssessor
from learnloop.adaptive.weakness_analyzer import WeaknessAnalyzer, WeaknessReport
from learnloop.core.errors import InterviewNotActive
from learnloop.delivery.state_store import StateStore
from learnloop.integrations.ai_provider import AIProvider, build_provider
from learnloop.quiz.cache_store import CacheStore
from learnloop.quiz.company_questions import CompanyQuestionSets
from learnloop.quiz.question_bank import QuestionBank
from learnloop.quiz.question_selector import (
    SOURCE_COMPANY,
    AnswerResult,
    DeliveredQuestion,
    QuestionSelector,
    SelectionPolicy,
)
from learnloop.study.achievements import Achievement
from learnloop.study.answer_ledger import AnswerAttempt, AnswerLedger
from learnloop.study.interview_session import InterviewHistory, InterviewResult, InterviewSession


@dataclass
class SubmissionResult:
    answer: AnswerResult
    attempt: AnswerAttempt
    achievements: list[Achievement] = field(default_factory=list)


class LearningCompanion:
    """
    Wires the learning pipeline together.

    Only one question is active at a time: ``next_question`` returns None
    until the active one is answered or skipped.
    """

    def __init__(
        self,
        settings: Settings | None = None,
        store: StateStore | None = None,
        provider: AIProvider | None = None,
        rng: random.Random | None = None,
    ):
        self.settings = settings or get_settings()
        self.store = store or StateStore(self.settings.store_path)
        self.rng = rng or random.Random()
        self._requesting = False

        self.ledger = AnswerLedger(self.store, retention=self.settings.ledger_retention)
        self.analyzer = WeaknessAnalyzer(store=self.store, profile_days=self.settings.weakness_profile_days)
        self.assessor = SkillAssessor(store=self.store, history_limit=self.settings.assessment_history_limit)
        self.cache = CacheStore(self.store, rng=self.rng)
        self.bank = QuestionBank(rng=self.rng)
        self.interviews = InterviewHistory(self.store)
        self.company_sets = CompanyQuestionSets(self.store, rng=self.rng)
        self.interview: InterviewSession | None = None

        if provider is None and self.settings.has_ai_configured():
            provider = build_provider(self.settings)
        self.provider = provider

        self.selector = QuestionSelector(
            analyzer=self.analyzer,
            cache=self.cache,
            bank=self.bank,
            provider=self.provider,
            policy=SelectionPolicy.from_settings(self.settings),
            rng=self.rng,
        )

        if self.ledger.attempt_count:
            self.analyze_weaknesses()

    # -------------------------------------------------------------------------
    # Questions
    # -------------------------------------------------------------------------

    @property
    def active_question(self) -> DeliveredQuestion | None:
        return self.selector.active

    def is_busy(self) -> bool:
        """True while a question is being fetched or waiting for an answer."""
        return self._requesting or self.selector.active is not None

    async def next_question(self) -> DeliveredQuestion | None:
        """Serve the next question, or None while one is still pending."""
        if self.is_busy():
            logger.debug("A question is already pending, request ignored")
            return None
        self._requesting = True
        try:
            return await self.selector.next_question()
        finally:
            self._requesting = False

    def skip_question(self) -> None:
        self.selector.clear_active()

    def submit_answer(
        self,
        question_id: str,
        answer_index: int,
        response_time_ms: Any = None,
        now: datetime | None = None,
    ) -> SubmissionResult:
        """
        Grade, record and evaluate achievements for an answer.

        Raises:
            InvalidQuestionId: Answer does not belong to the active question
        """
        delivered = self.selector.active
        answer = self.selector.check_answer(question_id, answer_index)
        question = delivered.question
        elapsed = delivered.elapsed_ms() if response_time_ms is None else response_time_ms

        attempt = self.ledger.record_attempt(
            topic=question.topic,
            level=question.level,
            source=delivered.source,
            user_answer_index=answer.user_index,
            correct_index=answer.correct_index,
            response_time_ms=elapsed,
            question_id=question.id,
            explanation=answer.explanation,
            now=now,
        )
        achievements = self.ledger.check_achievements(now=now)
        self.analyze_weaknesses()
        return SubmissionResult(answer=answer, attempt=attempt, achievements=achievements)

    # -------------------------------------------------------------------------
    # Interviews
    # -------------------------------------------------------------------------

    def _require_interview(self) -> InterviewSession:
        if self.interview is None:
            raise InterviewNotActive("No interview in progress")
        return self.interview

    def start_interview(
        self, type_key: str, company_key: str | None = None, now: datetime | None = None
    ) -> InterviewSession:
        """
        Start a mock interview, abandoning any unfinished one.

        Raises:
            UnknownProfile: Unknown interview type or company key
        """
        session = InterviewSession(type_key, company_key, rng=self.rng, now=now)
        if self.interview is not None:
            logger.warning(f"Abandoning unfinished interview {self.interview.id}")
        self.interview = session
        self.selector.clear_active()
        return session

    async def next_interview_question(self) -> DeliveredQuestion | None:
        """
        Serve the question for the current interview slot.

        Company interviews draw from the company's question set first.
        Returns None while a question is pending or when every slot is answered.

        Raises:
            InterviewNotActive: No interview, or it is paused
        """
        session = self._require_interview()
        if session.is_finished or self.is_busy():
            return None
        slot = session.ensure_accepting()
        self._requesting = True
        try:
            if session.company is not None:
                question = self.company_sets.random_question(session.company.key)
                if question is not None:
                    return self.selector.deliver(question, SOURCE_COMPANY)
            return await self.selector.next_question(slot.topic, slot.level)
        finally:
            self._requesting = False

    def submit_interview_answer(
        self,
        question_id: str,
        answer_index: int,
        response_time_ms: Any = None,
        now: datetime | None = None,
    ) -> AnswerResult:
        """
        Grade an interview answer and record it on the session.

        Interview answers stay out of the practice ledger.

        Raises:
            InterviewNotActive: No interview, or it is paused
            InvalidQuestionId: Answer does not belong to the active question
        """
        session = self._require_interview()
        session.ensure_accepting()
        delivered = self.selector.active
        answer = self.selector.check_answer(question_id, answer_index)
        elapsed = delivered.elapsed_ms() if response_time_ms is None else response_time_ms
        session.record_answer(answer.question_id, answer.correct, elapsed, now=now)
        return answer

    def pause_interview(self) -> None:
        self._require_interview().pause()

    def resume_interview(self) -> None:
        self._require_interview().resume()

    def complete_interview(self, now: datetime | None = None) -> InterviewResult:
        """Score the interview, store the result and end the session."""
        result = self._require_interview().complete(now=now)
        self.interviews.add(result)
        self.interview = None
        self.selector.clear_active()
        return result

    # -------------------------------------------------------------------------
    # Analytics
    # -------------------------------------------------------------------------

    def analyze_weaknesses(self) -> WeaknessReport:
        return self.analyzer.analyze(self.ledger.get_aggregates(), self.ledger.get_weekly_stats())

    def assess_skills(self, interview_history: list[dict] | None = None) -> Assessment:
        """Assess with the given interview history, else the stored one."""
        if interview_history is None:
            interview_history = self.interviews.records()
        report = self.analyzer.last_report or self.analyze_weaknesses()
        return self.assessor.assess(self.ledger.get_aggregates(), report, interview_history)

    def weakness_summary(self) -> dict[str, Any] | None:
        return self.analyzer.get_summary()

    def analytics(self) -> dict[str, Any]:
        """Everything the stats view shows."""
        return {
            "aggregates": self.ledger.get_aggregates(),
            "weekly": self.ledger.get_weekly_stats(),
            "trend": self.ledger.get_recent_trend(),
            "topics": self.ledger.topic_performance(),
            "achievements": self.ledger.achievements,
            "insights": self.ledger.insights(),
        }

    def reset_analytics(self) -> None:
        """Clear answers, achievements, weakness profiles, assessments and interviews.

        The cache and company question sets stay.
        """
        self.ledger.clear()
        self.analyzer.clear()
        self.assessor.clear()
        self.interviews.clear()
        logger.info("Analytics reset")

    async def aclose(self) -> None:
        if self.provider is not None:
            await self.provider.close()
        self.store.close()
