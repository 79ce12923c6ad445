"""
Integration tests for the learning companion.

Exercises the full pipeline against a file-backed StateStore:
question delivery, grading, ledger, achievements, weakness analysis,
skill assessment and persistence across restarts.
"""

import asyncio
import random

import pytest

from learnloop.core.errors import InterviewNotActive, InvalidQuestionId
from learnloop.core.question import Question
from learnloop.delivery.companion import LearningCompanion
from learnloop.delivery.state_store import StateStore
from learnloop.quiz.question_selector import SOURCE_COMPANY, SOURCE_STATIC


@pytest.fixture
def store_path(tmp_path):
    return tmp_path / "companion.db"


@pytest.fixture
def companion(settings, store_path):
    c = LearningCompanion(settings=settings, store=StateStore(store_path), rng=random.Random(5))
    yield c
    c.store.close()


async def answer_wrong(companion, now):
    delivered = await companion.next_question()
    wrong = (delivered.question.correct + 1) % 4
    return companion.submit_answer(delivered.id, wrong, response_time_ms=4000, now=now)


class TestQuestionFlow:
    @pytest.mark.asyncio
    async def test_answer_is_recorded(self, companion, fixed_now):
        delivered = await companion.next_question()

        assert delivered.source == SOURCE_STATIC
        assert companion.is_busy() is True

        result = companion.submit_answer(
            delivered.id, delivered.question.correct, response_time_ms=2500, now=fixed_now
        )

        assert result.answer.correct is True
        assert result.attempt.topic == delivered.question.topic
        assert result.attempt.source == SOURCE_STATIC
        assert [a.id for a in result.achievements] == ["first_question"]
        assert companion.is_busy() is False

        agg = companion.ledger.get_aggregates()
        assert agg.total_questions == 1
        assert agg.correct_answers == 1
        assert companion.analyzer.last_report is not None

    @pytest.mark.asyncio
    async def test_one_active_question(self, companion):
        first = await companion.next_question()
        assert await companion.next_question() is None

        with pytest.raises(InvalidQuestionId):
            companion.submit_answer("stale-id", 0)
        assert companion.active_question is first

        companion.skip_question()
        assert companion.active_question is None
        assert await companion.next_question() is not None

    @pytest.mark.asyncio
    async def test_achievements_awarded_once(self, companion, fixed_now):
        for _ in range(2):
            delivered = await companion.next_question()
            result = companion.submit_answer(delivered.id, delivered.question.correct, now=fixed_now)
        assert result.achievements == []
        assert len(companion.ledger.achievements) == 1


class TestAnalytics:
    @pytest.mark.asyncio
    async def test_analytics_view(self, companion, fixed_now):
        for _ in range(3):
            await answer_wrong(companion, fixed_now)

        view = companion.analytics()

        assert view["aggregates"].total_questions == 3
        assert view["aggregates"].overall_accuracy == 0
        assert view["topics"]
        assert companion.weakness_summary() is not None

    @pytest.mark.asyncio
    async def test_assessment_history_and_reset(self, companion, fixed_now):
        await answer_wrong(companion, fixed_now)

        assessment = companion.assess_skills(interview_history=[{"score": 80}, {"score": 40}])

        assert 0 <= assessment.overall_score <= 100
        assert len(companion.assessor.history()) == 1
        assert companion.assessor.latest()["id"] == assessment.id

        companion.cache.add(
            {
                "id": "c1",
                "question": "Which keyword defines a class in Python?",
                "options": ["class", "def", "struct", "object"],
                "correct": 0,
                "topic": "python",
                "level": "beginner",
            }
        )
        companion.reset_analytics()

        assert companion.ledger.attempt_count == 0
        assert companion.ledger.achievements == []
        assert companion.assessor.history() == []
        assert companion.analyzer.last_report is None
        assert len(companion.cache) == 1


class TestPersistence:
    @pytest.mark.asyncio
    async def test_state_survives_restart(self, settings, store_path, fixed_now):
        first = LearningCompanion(settings=settings, store=StateStore(store_path), rng=random.Random(1))
        for _ in range(2):
            await answer_wrong(first, fixed_now)
        await first.aclose()

        second = LearningCompanion(settings=settings, store=StateStore(store_path), rng=random.Random(1))
        try:
            assert second.ledger.attempt_count == 2
            assert [a.id for a in second.ledger.achievements] == ["first_question"]
            # Weakness report is rebuilt on startup
            assert second.analyzer.last_report is not None
        finally:
            await second.aclose()


class SlowProvider:
    """Provider double that takes a while to answer."""

    name = "slow"

    def __init__(self, question: Question, delay: float = 0.05):
        self.question = question
        self.delay = delay
        self.calls = 0

    def is_ready(self):
        return True

    async def generate_question(self, topic, level="intermediate"):
        self.calls += 1
        await asyncio.sleep(self.delay)
        return self.question.model_copy(update={"id": f"ai_{self.calls}", "topic": topic, "level": level})

    async def close(self):
        return None


class TestPendingRequest:
    @pytest.mark.asyncio
    async def test_overlapping_requests_serve_one_question(self, settings, sample_question):
        provider = SlowProvider(Question.model_validate(sample_question))
        companion = LearningCompanion(
            settings=settings.model_copy(update={"use_ai": True}),
            store=StateStore(":memory:"),
            provider=provider,
            rng=random.Random(2),
        )

        first_task = asyncio.create_task(companion.next_question())
        await asyncio.sleep(0)
        assert companion.is_busy() is True

        second = await companion.next_question()
        first = await first_task

        assert second is None
        assert provider.calls == 1
        assert companion.submit_answer(first.id, first.question.correct).answer.correct is True
        await companion.aclose()


async def run_interview(companion, type_key="quick-practice", company_key=None, now=None):
    session = companion.start_interview(type_key, company_key, now=now)
    while not session.is_finished:
        delivered = await companion.next_interview_question()
        companion.submit_interview_answer(delivered.id, delivered.question.correct, response_time_ms=1000)
    return session, companion.complete_interview(now=now)


class TestInterviewFlow:
    @pytest.mark.asyncio
    async def test_interview_feeds_assessment(self, companion, fixed_now):
        baseline = companion.assess_skills().interview_readiness.estimated_success_rate

        session, result = await run_interview(companion, now=fixed_now)

        assert result.score == 100
        assert result.questions_answered == len(session.slots) == 5
        assert companion.interview is None
        assert companion.ledger.attempt_count == 0
        assert [r["id"] for r in companion.interviews.records()] == [session.id]

        after = companion.assess_skills().interview_readiness.estimated_success_rate
        assert after == baseline + 10

    @pytest.mark.asyncio
    async def test_bank_questions_serve_interview_slots(self, companion):
        companion.start_interview("quick-practice")

        delivered = await companion.next_interview_question()

        assert delivered.source == SOURCE_STATIC
        assert await companion.next_interview_question() is None

    @pytest.mark.asyncio
    async def test_company_interview_uses_company_set(self, companion, sample_question):
        companion.company_sets.import_data("startup", {"questions": [sample_question]})
        companion.start_interview("quick-practice", "startup")

        delivered = await companion.next_interview_question()

        assert delivered.source == SOURCE_COMPANY
        assert delivered.id == "q-001"

    @pytest.mark.asyncio
    async def test_paused_interview_keeps_question(self, companion):
        session = companion.start_interview("quick-practice")
        delivered = await companion.next_interview_question()

        companion.pause_interview()
        with pytest.raises(InterviewNotActive):
            companion.submit_interview_answer(delivered.id, 0)
        assert companion.active_question is delivered

        companion.resume_interview()
        companion.submit_interview_answer(delivered.id, 0)
        assert len(session.answers) == 1

    @pytest.mark.asyncio
    async def test_requires_started_interview(self, companion):
        with pytest.raises(InterviewNotActive):
            await companion.next_interview_question()
        with pytest.raises(InterviewNotActive):
            companion.complete_interview()

    @pytest.mark.asyncio
    async def test_history_survives_restart_and_reset_clears_it(self, settings, store_path, fixed_now):
        first = LearningCompanion(settings=settings, store=StateStore(store_path), rng=random.Random(3))
        await run_interview(first, now=fixed_now)
        await first.aclose()

        second = LearningCompanion(settings=settings, store=StateStore(store_path), rng=random.Random(3))
        try:
            assert second.interviews.stats().total_interviews == 1
            second.reset_analytics()
            assert second.interviews.records() == []
        finally:
            await second.aclose()
