"""
Unit tests for the static question bank.
"""

import random

import pytest

from learnloop.quiz.question_bank import BANK_SOURCE, GENERAL_TOPIC, QuestionBank


@pytest.fixture
def bank():
    return QuestionBank(rng=random.Random(3))


class TestQuestionBank:
    def test_contents(self, bank):
        assert len(bank) == 37
        assert bank.topics() == ["oops", "java", "python", "ai", "databases"]
        assert all(q.source == BANK_SOURCE for q in bank.all())
        assert all(isinstance(q.id, str) for q in bank.all())

    def test_get_accepts_numeric_ids(self, bank):
        assert bank.get(401).topic == "python"
        assert bank.get("1").topic == GENERAL_TOPIC
        assert bank.get("999") is None

    def test_questions_for(self, bank):
        assert {q.id for q in bank.questions_for("java", "beginner")} == {"301", "302"}
        assert len(bank.questions_for("java")) == 5

    def test_random_exact_pool(self, bank):
        for _ in range(10):
            q = bank.random_question("ai", "advanced")
            assert q.id == "505"

    def test_missing_level_falls_back_to_topic(self, bank):
        for _ in range(10):
            assert bank.random_question("python", "expert").topic == "python"

    def test_unknown_topic_falls_back_to_everything(self, bank):
        assert bank.random_question("rust", "expert") is not None
        assert bank.random_question() is not None

    def test_empty_bank(self):
        assert QuestionBank(level_questions=(), general_questions=()).random_question("python") is None

    def test_level_without_topic(self, bank):
        for _ in range(10):
            assert bank.random_question(None, "advanced").level == "advanced"

    def test_unknown_topic_keeps_level(self, bank):
        for _ in range(10):
            assert bank.random_question("algorithms", "beginner").level == "beginner"
