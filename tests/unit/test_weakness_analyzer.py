"""
Unit tests for the weakness analyzer.
"""

import copy
from datetime import datetime

import pytest

from learnloop.adaptive.weakness_analyzer import Severity, WeaknessAnalyzer
from learnloop.core.mastery import MasteryLevel
from learnloop.study.answer_ledger import AnswerLedger, LedgerAggregates


def aggregates_for(results: dict[str, tuple[int, int]], time_ms: int = 0) -> LedgerAggregates:
    """Build aggregates from {topic: (correct, incorrect)}."""
    ledger = AnswerLedger()
    now = datetime(2024, 3, 14, 10, 0)
    for topic, (correct, incorrect) in results.items():
        for i in range(correct + incorrect):
            ledger.record_attempt(
                topic=topic,
                level="intermediate",
                source="static",
                user_answer_index=1 if i < correct else 0,
                correct_index=1,
                response_time_ms=time_ms,
                now=now,
            )
    return ledger.get_aggregates()


@pytest.fixture
def analyzer():
    return WeaknessAnalyzer()


class TestScoringPrimitives:
    def test_weakness_score_components(self, analyzer):
        # (1 - 0.5) * 100 + min(15000/30000, 1) * 20 + max(0, 10 - 4) * 5
        assert analyzer.weakness_score(0.5, 15000, 4) == pytest.approx(50 + 10 + 30)
        assert analyzer.weakness_score(1.0, 90000, 20) == pytest.approx(20)

    @pytest.mark.parametrize(
        "score,severity",
        [(85, Severity.CRITICAL), (80, Severity.CRITICAL), (60, Severity.HIGH), (45, Severity.MEDIUM), (39.9, Severity.LOW)],
    )
    def test_severity(self, analyzer, score, severity):
        assert analyzer.severity(score) is severity

    def test_is_weak_concept(self, analyzer):
        assert analyzer.is_weak_concept(0.59, 1)
        assert not analyzer.is_weak_concept(0.65, 4)
        assert analyzer.is_weak_concept(0.65, 5)
        assert not analyzer.is_weak_concept(0.70, 50)

    def test_sample_confidence(self, analyzer):
        assert analyzer.sample_confidence(2) == "low"
        assert analyzer.sample_confidence(3) == "medium"
        assert analyzer.sample_confidence(8) == "high"


class TestAnalyze:
    def test_half_correct_arrays_is_weak(self, analyzer):
        report = analyzer.analyze(aggregates_for({"arrays": (5, 5)}))

        concept = report.concept_weaknesses["arrays"]
        assert concept.accuracy == 0.5
        assert concept.is_weak
        assert concept.category == "data-structures"
        assert concept.weakness_score == pytest.approx(50)

        top = report.overall_weaknesses[0]
        assert top.type == "concept"
        assert top.name == "arrays"
        assert top.severity is Severity.MEDIUM
        # weight 1.4 * medium multiplier 2 * (1 - 0.5)
        assert top.priority == pytest.approx(1.4)

        category = report.category_weaknesses["data-structures"]
        assert category.is_weak
        assert any(w.type == "category" and w.name == "data-structures" for w in report.overall_weaknesses)

    def test_topics_merge_into_one_concept(self, analyzer):
        report = analyzer.analyze(aggregates_for({"database": (3, 1), "databases": (1, 3)}))

        merged = report.concept_weaknesses["sql-basics"]
        assert merged.total_questions == 8
        assert merged.correct_answers == 4

    def test_analyze_does_not_mutate_input(self, analyzer):
        aggregates = aggregates_for({"arrays": (2, 6), "python": (5, 0)})
        before = copy.deepcopy(aggregates)
        analyzer.analyze(aggregates)
        assert aggregates == before

    def test_idempotent(self, analyzer):
        aggregates = aggregates_for({"arrays": (2, 6), "recursion": (1, 4), "joins": (6, 1)}, time_ms=12000)
        now = datetime(2024, 3, 14, 12, 0)
        assert analyzer.analyze(aggregates, now=now) == analyzer.analyze(aggregates, now=now)

    def test_more_misses_never_lower_score(self, analyzer):
        lighter = analyzer.analyze(aggregates_for({"recursion": (6, 4)}))
        heavier = analyzer.analyze(aggregates_for({"recursion": (6, 8)}))
        assert (
            heavier.concept_weaknesses["recursion"].weakness_score
            >= lighter.concept_weaknesses["recursion"].weakness_score
        )

    def test_weaknesses_sorted_by_priority(self, analyzer):
        report = analyzer.analyze(aggregates_for({"arrays": (1, 9), "recursion": (2, 8), "joins": (3, 7)}))
        priorities = [w.priority for w in report.overall_weaknesses]
        assert priorities == sorted(priorities, reverse=True)

    def test_actions_are_unique(self, analyzer):
        report = analyzer.analyze(
            aggregates_for({"trees": (1, 9), "recursion": (1, 9), "linked-lists": (2, 8)})
        )
        keys = [a.dedupe_key for a in report.recommended_actions]
        assert len(keys) == len(set(keys))
        assert any(a.type == "review" and a.reason == "Prerequisite for trees" for a in report.recommended_actions)
        assert any(a.type == "category-focus" for a in report.recommended_actions)

    def test_learning_path_capped(self, analyzer):
        topics = {f"topic {i}": (1, 9) for i in range(15)}
        report = analyzer.analyze(aggregates_for(topics))
        assert len(report.learning_path) == 10
        assert all(item.type == "weakness-focus" for item in report.learning_path)

    def test_progression_items_skip_expert(self, analyzer):
        report = analyzer.analyze(aggregates_for({"sorting": (8, 2), "searching": (10, 0)}))

        by_concept = {item.concept: item for item in report.learning_path}
        assert by_concept["sorting"].type == "mastery-progression"
        assert by_concept["sorting"].questions_needed == 1
        assert by_concept["sorting"].current_level == "intermediate"
        assert "searching" not in by_concept
        assert report.mastery_levels["searching"].level is MasteryLevel.EXPERT

    def test_confidence_scores(self, analyzer):
        aggregates = aggregates_for({"python": (3, 1)})
        report = analyzer.analyze(aggregates)
        assert report.confidence_scores.by_difficulty == {"intermediate": 75}
        # No weekly stats: recent accuracy 0 against 75 overall
        assert report.confidence_scores.trend == "declining"
        assert report.confidence_scores.overall == pytest.approx(37.5)

    def test_empty_aggregates(self, analyzer):
        report = analyzer.analyze(LedgerAggregates())
        assert report.overall_weaknesses == []
        assert report.learning_path == []
        assert report.mastery_distribution()["novice"] == 0


class TestTargetsAndProfiles:
    def test_no_targets_before_analysis(self, analyzer):
        assert analyzer.get_targeted_topics() == []
        assert analyzer.get_summary() is None

    def test_targeted_topics_follow_priority(self, analyzer):
        analyzer.analyze(aggregates_for({"arrays": (1, 9), "dynamic-programming": (1, 9)}))
        targets = analyzer.get_targeted_topics(limit=2)

        assert len(targets) == 2
        assert targets[0].topic == "dynamic-programming"
        assert targets[0].difficulty == "advanced"
        assert targets[0].priority >= targets[1].priority

    def test_summary(self, analyzer):
        analyzer.analyze(aggregates_for({"arrays": (0, 10)}))
        summary = analyzer.get_summary()
        assert summary["total_weaknesses"] >= 1
        assert summary["critical_weaknesses"] >= 1
        assert len(summary["top_weaknesses"]) <= 3

    def test_profiles_written_per_day(self, memory_store):
        analyzer = WeaknessAnalyzer(store=memory_store)
        aggregates = aggregates_for({"arrays": (1, 4)})
        analyzer.analyze(aggregates, now=datetime(2024, 3, 1, 9, 0))
        analyzer.analyze(aggregates, now=datetime(2024, 3, 14, 9, 0))
        analyzer.analyze(aggregates, now=datetime(2024, 3, 14, 18, 0))

        profiles = analyzer.profiles()
        assert set(profiles) == {"2024-03-01", "2024-03-14"}
        assert profiles["2024-03-14"]["timestamp"] == "2024-03-14T18:00:00"

        analyzer.analyze(aggregates, now=datetime(2024, 4, 20, 9, 0))
        assert "2024-03-01" not in analyzer.profiles()

    def test_clear(self, memory_store):
        analyzer = WeaknessAnalyzer(store=memory_store)
        analyzer.analyze(aggregates_for({"arrays": (1, 4)}))
        analyzer.clear()
        assert analyzer.last_report is None
        assert analyzer.profiles() == {}
