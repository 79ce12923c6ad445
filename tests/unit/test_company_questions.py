"""
Unit tests for company question sets: generation, queries and transfer.
"""

import random

import pytest

from learnloop.adaptive.interview_profiles import company_profile
from learnloop.core.errors import ProviderNetworkError, UnknownProfile
from learnloop.core.question import Question
from learnloop.quiz.company_questions import CompanyQuestionSets, company_prompt


class PromptProvider:
    """Provider double recording prompts; fails on the listed call numbers."""

    name = "stub"

    def __init__(self, question: Question, fail_on=()):
        self.question = question
        self.fail_on = set(fail_on)
        self.calls = []

    def is_ready(self):
        return True

    async def generate_question(self, topic, level="intermediate", prompt=None):
        self.calls.append((topic, level, prompt))
        if len(self.calls) in self.fail_on:
            raise ProviderNetworkError("upstream 503", self.name)
        return self.question.model_copy(
            update={"id": f"gen_{len(self.calls)}", "topic": topic, "level": level}
        )

    async def close(self):
        pass


@pytest.fixture
def question(sample_question):
    return Question.model_validate(sample_question)


@pytest.fixture
def sets(memory_store):
    return CompanyQuestionSets(memory_store, rng=random.Random(2))


class TestDownload:
    @pytest.mark.asyncio
    async def test_round_robin_question_types(self, sets, question):
        provider = PromptProvider(question)

        result = await sets.download("amazon", provider, count=6, delay_seconds=0)

        assert result.success is True
        assert result.generated == 6
        records = sets.records("amazon")
        assert [r["question_type"] for r in records] == [
            "coding", "system-design", "behavioral", "leadership", "coding", "system-design",
        ]
        assert {r["company"] for r in records} == {"amazon"}
        assert len({r["download_id"] for r in records}) == 1

    @pytest.mark.asyncio
    async def test_prompt_carries_company_context(self, sets, question):
        provider = PromptProvider(question)

        await sets.download("google", provider, count=1, delay_seconds=0)

        topic, level, prompt = provider.calls[0]
        google = company_profile("google")
        assert topic in google.topics
        assert level in google.levels
        assert google.prompts["coding"] in prompt
        assert google.description in prompt

    @pytest.mark.asyncio
    async def test_partial_failures_are_skipped(self, sets, question):
        provider = PromptProvider(question, fail_on={2, 3})

        result = await sets.download("meta", provider, count=4, delay_seconds=0)

        assert result.generated == 2
        assert result.failed == 2
        assert len(sets.records("meta")) == 2
        assert sets.download_stats()["successful_downloads"] == 1

    @pytest.mark.asyncio
    async def test_total_failure_raises_and_is_counted(self, sets, question):
        provider = PromptProvider(question, fail_on={1, 2})

        with pytest.raises(ProviderNetworkError):
            await sets.download("uber", provider, count=2, delay_seconds=0)

        stats = sets.download_stats()
        assert stats["failed_downloads"] == 1
        assert stats["history"][-1]["success"] is False
        assert sets.records("uber") == []

    @pytest.mark.asyncio
    async def test_unknown_company(self, sets, question):
        with pytest.raises(UnknownProfile):
            await sets.download("initech", PromptProvider(question), count=1, delay_seconds=0)

    @pytest.mark.asyncio
    async def test_progress_reported(self, sets, question):
        stages = []

        await sets.download(
            "startup", PromptProvider(question), count=2, delay_seconds=0,
            on_progress=lambda stage, pct, message: stages.append((stage, pct)),
        )

        assert stages == [("generating", 0.0), ("generating", 50.0), ("complete", 100)]


class TestQueries:
    @pytest.mark.asyncio
    async def test_random_question_by_type(self, sets, question):
        await sets.download("amazon", PromptProvider(question), count=4, delay_seconds=0)

        picked = sets.random_question("amazon", "leadership")

        assert isinstance(picked, Question)
        assert picked.id == "gen_4"
        assert sets.random_question("netflix") is None

    @pytest.mark.asyncio
    async def test_summary(self, sets, question):
        await sets.download("amazon", PromptProvider(question), count=5, delay_seconds=0)

        summary = sets.summary()

        assert summary["amazon"]["total_questions"] == 5
        assert summary["amazon"]["question_types"]["coding"] == 2
        assert summary["amazon"]["available"] is True
        assert summary["amazon"]["last_updated"] is not None
        assert summary["google"]["available"] is False

    def test_prompt_for_type_without_template(self):
        prompt = company_prompt(company_profile("google"), "puzzle", "algorithms", "advanced")
        assert "Google-style puzzle question" in prompt


class TestTransfer:
    @pytest.mark.asyncio
    async def test_export_then_import(self, memory_store, sets, question):
        await sets.download("microsoft", PromptProvider(question), count=3, delay_seconds=0)
        document = sets.export("microsoft")
        assert document["total_questions"] == 3

        target = CompanyQuestionSets()
        assert target.import_data("microsoft", document) == 3
        assert [r["question_type"] for r in target.records("microsoft")] == [
            "coding", "system-design", "behavioral",
        ]

    def test_import_skips_invalid_questions(self, sets, sample_question):
        data = {"questions": [sample_question, {"question": "no options"}]}
        assert sets.import_data("apple", data) == 1
        assert sets.records("apple")[0]["question_type"] == "coding"

    def test_import_rejects_bad_document(self, sets):
        with pytest.raises(ValueError):
            sets.import_data("apple", {"items": []})

    @pytest.mark.asyncio
    async def test_delete_and_clear(self, sets, question):
        await sets.download("google", PromptProvider(question), count=1, delay_seconds=0)
        await sets.download("meta", PromptProvider(question), count=1, delay_seconds=0)

        sets.delete("google")
        assert sets.records("google") == []
        assert len(sets.records("meta")) == 1

        sets.clear()
        assert sets.records("meta") == []
        assert sets.download_stats()["total_downloads"] == 0
