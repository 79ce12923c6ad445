"""
Unit tests for the generated question cache.
"""

import random

import pytest

from learnloop.core.question import Question
from learnloop.quiz.cache_store import CacheStore


def make_question(sample_question, **overrides):
    data = dict(sample_question)
    data.update(overrides)
    return data


@pytest.fixture
def cache(memory_store):
    return CacheStore(memory_store, rng=random.Random(7))


class TestAdd:
    def test_add_valid(self, cache, sample_question):
        assert cache.add(sample_question) is True
        assert len(cache) == 1
        stored = cache.all()[0]
        assert isinstance(stored, Question)
        assert stored.generated_at is not None

    def test_duplicate_rejected(self, cache, sample_question):
        cache.add(sample_question)
        assert cache.add(make_question(sample_question, id="q-002")) is False
        assert len(cache) == 1

    def test_same_text_other_level_allowed(self, cache, sample_question):
        cache.add(sample_question)
        assert cache.add(make_question(sample_question, id="q-002", level="advanced")) is True

    @pytest.mark.parametrize(
        "override",
        [
            {"options": ["a", "b", "c"]},
            {"correct": 4},
            {"correct": True},
            {"question": ""},
        ],
    )
    def test_invalid_rejected(self, cache, sample_question, override):
        assert cache.add(make_question(sample_question, **override)) is False
        assert len(cache) == 0

    def test_non_dict_rejected(self, cache):
        assert cache.add("not a question") is False


class TestPersistence:
    def test_reload(self, memory_store, sample_question):
        CacheStore(memory_store).add(sample_question)

        reloaded = CacheStore(memory_store)
        assert len(reloaded) == 1
        assert reloaded.metadata["total_questions"] == 1
        assert reloaded.metadata["version"] == "1.0"

    def test_invalid_structure_starts_empty(self, memory_store):
        memory_store.set(CacheStore.STORE_KEY, ["not", "a", "document"])
        assert len(CacheStore(memory_store)) == 0

    def test_bad_entries_skipped_on_load(self, memory_store, sample_question):
        memory_store.set(
            CacheStore.STORE_KEY,
            {"metadata": {}, "questions": [sample_question, {"id": "broken"}, sample_question]},
        )
        assert len(CacheStore(memory_store)) == 1

    def test_clear(self, cache, memory_store, sample_question):
        cache.add(sample_question)
        cache.clear()
        assert len(cache) == 0
        assert memory_store.get(CacheStore.STORE_KEY)["questions"] == []


class TestQueries:
    @pytest.fixture
    def filled(self, cache, sample_question):
        cache.add(make_question(sample_question, id="1", topic="Python Basics"))
        cache.add(make_question(sample_question, id="2", question="What is a tuple?", level="intermediate"))
        cache.add(make_question(sample_question, id="3", question="What is JVM?", topic="java", source="gemini"))
        return cache

    def test_topic_substring_match(self, filled):
        assert {q.id for q in filled.questions_by_topic("PYTHON")} == {"1", "2"}

    def test_level_exact_match(self, filled):
        assert [q.id for q in filled.questions_by_level("intermediate")] == ["2"]

    def test_query_random_filters(self, filled):
        assert filled.query_random(topic="java").id == "3"
        assert filled.query_random(source="gemini").id == "3"
        assert filled.query_random(topic="python", level="intermediate").id == "2"
        assert filled.query_random(topic="rust") is None

    def test_available_and_stats(self, filled):
        assert filled.available_topics() == ["Python Basics", "java", "python"]
        assert filled.available_levels() == ["beginner", "intermediate"]

        stats = filled.stats()
        assert stats.total == 3
        assert stats.by_source == {"openai": 2, "gemini": 1}
        assert stats.by_level["beginner"] == 2


class TestExportImport:
    def test_roundtrip(self, cache, sample_question):
        cache.add(sample_question)
        cache.add(make_question(sample_question, id="q-2", question="What is PEP 8?"))
        document = cache.export_all()

        target = CacheStore()
        assert target.import_all(document) == 2
        assert target.import_all(document) == 0
        assert {q.id for q in target.all()} == {"q-001", "q-2"}

    def test_import_bare_list_skips_invalid(self, sample_question):
        target = CacheStore()
        assert target.import_all([sample_question, {"question": "half"}]) == 1

    def test_import_rejects_non_list(self):
        assert CacheStore().import_all({"questions": "nope"}) == 0
