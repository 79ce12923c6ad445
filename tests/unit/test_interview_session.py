"""
Unit tests for mock interview profiles, sessions and history.
"""

import random
from collections import Counter

import pytest

from learnloop.adaptive.interview_profiles import (
    COMPANY_PROFILES,
    INTERVIEW_TYPES,
    DifficultyMix,
    company_profile,
    interview_type,
)
from learnloop.core.errors import InterviewNotActive, UnknownProfile
from learnloop.study.interview_session import (
    InterviewHistory,
    InterviewPhase,
    InterviewResult,
    InterviewSession,
    InterviewStatus,
    build_plan,
    time_score,
)


class FakeClock:
    def __init__(self):
        self.now = 0.0

    def __call__(self):
        return self.now


@pytest.fixture
def clock():
    return FakeClock()


def make_session(clock, type_key="quick-practice", company_key=None):
    return InterviewSession(type_key, company_key, rng=random.Random(7), clock=clock)


def make_result(n, score):
    return InterviewResult(
        id=f"iv-{n}",
        type="quick-practice",
        type_name="Quick Practice Session",
        company=None,
        started_at="2024-03-14T09:00:00",
        completed_at="2024-03-14T09:15:00",
        total_time_ms=60_000,
        questions_total=5,
        questions_answered=5,
        correct_answers=5,
        accuracy_score=score,
        time_score=100,
        completion_score=100,
        score=score,
    )


class TestProfiles:
    def test_mix_counts_give_remainder_to_hard(self):
        assert DifficultyMix(30, 50, 20).counts(9) == {"easy": 2, "medium": 4, "hard": 3}
        assert sum(DifficultyMix(25, 55, 20).counts(11).values()) == 11

    def test_unknown_keys(self):
        with pytest.raises(UnknownProfile) as exc:
            interview_type("whiteboard")
        assert exc.value.kind == "interview type"
        assert exc.value.key == "whiteboard"

        with pytest.raises(UnknownProfile):
            company_profile("initech")

    @pytest.mark.parametrize("key", sorted(COMPANY_PROFILES))
    def test_company_prompts_cover_question_types(self, key):
        profile = COMPANY_PROFILES[key]
        assert set(profile.prompts) == set(profile.question_types)
        assert profile.topics and profile.levels and profile.tips

    def test_interview_type_question_counts(self):
        assert INTERVIEW_TYPES["technical-general"].question_count == 9
        assert INTERVIEW_TYPES["quick-practice"].question_count == 5


class TestPlan:
    def test_plan_follows_type_mix(self):
        slots = build_plan(interview_type("technical-general"), None, random.Random(1))

        assert len(slots) == 9
        assert Counter(s.difficulty for s in slots) == {"easy": 2, "medium": 4, "hard": 3}
        assert {s.level for s in slots if s.difficulty == "hard"} == {"advanced"}
        assert {s.phase for s in slots if s.difficulty == "easy"} == {InterviewPhase.WARMUP}
        assert all(s.time_allotted_ms == 5 * 60_000 for s in slots)

    def test_company_overrides_mix_pace_and_topics(self):
        google = company_profile("google")
        slots = build_plan(interview_type("technical-general"), google, random.Random(1))

        assert len(slots) == 45 // 8
        assert Counter(s.difficulty for s in slots) == {"medium": 2, "hard": 3}
        assert {s.topic for s in slots} <= set(google.topics)

    def test_company_without_mix_keeps_type_mix(self):
        slots = build_plan(interview_type("quick-practice"), company_profile("apple"), random.Random(1))

        assert len(slots) == 15 // 9
        assert [s.difficulty for s in slots] == ["hard"]


class TestSession:
    def test_phase_follows_progress(self, clock):
        session = make_session(clock)
        assert session.phase is InterviewPhase.WARMUP

        phases = []
        while not session.is_finished:
            session.record_answer(f"q{len(phases)}", True)
            phases.append(session.phase)

        assert phases == [
            InterviewPhase.TECHNICAL,
            InterviewPhase.TECHNICAL,
            InterviewPhase.TECHNICAL,
            InterviewPhase.ADVANCED,
            InterviewPhase.BEHAVIORAL,
        ]
        assert session.current_slot is None

    def test_answer_takes_slot_topic_and_level(self, clock):
        session = make_session(clock)
        slot = session.current_slot

        answer = session.record_answer("q1", False, response_time_ms=3000)

        assert answer.slot_id == slot.id
        assert answer.level == slot.level
        assert answer.correct is False
        assert answer.response_time_ms == 3000

    def test_pause_stops_the_clock(self, clock):
        session = make_session(clock)
        clock.now = 60
        session.pause()
        clock.now = 160
        assert session.elapsed_ms() == 60_000
        assert session.progress()["status"] == "paused"

        with pytest.raises(InterviewNotActive):
            session.record_answer("q1", True)

        session.resume()
        clock.now = 170
        assert session.elapsed_ms() == 70_000
        assert session.status is InterviewStatus.ACTIVE

    def test_no_answers_past_last_slot(self, clock):
        session = make_session(clock)
        for i in range(len(session.slots)):
            session.record_answer(f"q{i}", True)

        with pytest.raises(InterviewNotActive):
            session.record_answer("extra", True)

    def test_perfect_fast_interview_scores_100(self, clock):
        session = make_session(clock)
        for i in range(len(session.slots)):
            session.record_answer(f"q{i}", True)
        clock.now = 60

        result = session.complete()

        assert result.score == 100
        assert result.accuracy_score == 100
        assert result.time_score == 100
        assert result.completion_score == 100
        assert result.status == "completed"
        assert session.phase is InterviewPhase.COMPLETE

    def test_partial_interview_score_blend(self, clock):
        session = make_session(clock)
        for correct in (True, False, True, False):
            session.record_answer("q", correct)
        clock.now = 15 * 60

        result = session.complete()

        assert result.questions_answered == 4
        assert result.accuracy_score == 50
        assert result.time_score == 90
        assert result.completion_score == 80
        assert result.score == 68

    def test_complete_twice(self, clock):
        session = make_session(clock)
        session.complete()
        with pytest.raises(InterviewNotActive):
            session.complete()

    @pytest.mark.parametrize(
        "elapsed, expected",
        [(0, 100), (720, 100), (900, 90), (1000, 70), (1200, 50)],
    )
    def test_time_score_tiers(self, elapsed, expected):
        assert time_score(elapsed, 900) == expected


class TestHistory:
    def test_cap_keeps_newest(self):
        history = InterviewHistory(limit=3)
        for n in range(5):
            history.add(make_result(n, 60 + n))

        assert [r["id"] for r in history.records()] == ["iv-2", "iv-3", "iv-4"]
        assert [r["id"] for r in history.recent(2)] == ["iv-4", "iv-3"]

    def test_stats(self):
        history = InterviewHistory()
        assert history.stats().total_interviews == 0

        for n, score in enumerate((70, 85, 90)):
            history.add(make_result(n, score))
        stats = history.stats()

        assert stats.total_interviews == 3
        assert stats.average_score == 81.7
        assert stats.best_score == 90
        assert stats.total_time_ms == 180_000
        assert stats.completion_rate == 100

    def test_persists_in_store(self, memory_store):
        InterviewHistory(memory_store).add(make_result(1, 75))

        records = InterviewHistory(memory_store).records()
        assert len(records) == 1
        assert records[0]["score"] == 75
        assert records[0]["answers"] == []

    def test_malformed_history_ignored(self, memory_store):
        memory_store.set(InterviewHistory.HISTORY_KEY, {"not": "a list"})
        assert InterviewHistory(memory_store).records() == []

    def test_clear(self, memory_store):
        history = InterviewHistory(memory_store)
        history.add(make_result(1, 75))
        history.clear()
        assert history.records() == []
