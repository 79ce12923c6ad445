"""
Company Question Sets.

Per-company question collections generated through an AI provider with a
company-specific prompt (interview style, focus, question type), plus
download history, import/export and a per-company summary.

Store keys:
    company_questions   {company_key: [question record, ...]}
    company_downloads   {"history": [...], "stats": {...}, "last_updated": {...}}
"""

from __future__ import annotations

import asyncio
import random
import time
from collections import Counter
from dataclasses import asdict, dataclass
from datetime import datetime
from typing import Any, Callable

from loguru import logger
from pydantic import ValidationError

from learnloop.adaptive.interview_profiles import COMPANY_PROFILES, CompanyProfile, company_profile
from learnloop.core.errors import ProviderError
from learnloop.core.question import Question
from learnloop.delivery.state_store import StateStore

DOWNLOAD_HISTORY_LIMIT = 50

COMPANY_PROMPT = """{base}

Company Context: {description}
Interview Style: {focus}
Topic Focus: {topic}
Difficulty Level: {level}
Question Type: {question_type}

Generate a realistic {company}-style multiple-choice interview question.
Respond with JSON only:
{{
  "question": "The interview question text",
  "options": ["Option A", "Option B", "Option C", "Option D"],
  "correct": 0,
  "explanation": "Why the correct answer is right.",
  "explanations": {{"0": "...", "1": "...", "2": "...", "3": "..."}}
}}"""

ProgressCallback = Callable[[str, float, str], Any]


@dataclass
class DownloadResult:
    id: str
    company: str
    requested: int
    generated: int
    failed: int
    duration_ms: int
    success: bool
    error: str | None = None

    def to_dict(self) -> dict:
        return asdict(self)


def company_prompt(profile: CompanyProfile, question_type: str, topic: str, level: str) -> str:
    base = profile.prompts.get(question_type) or f"Generate a {profile.name}-style {question_type} question."
    return COMPANY_PROMPT.format(
        base=base,
        description=profile.description,
        focus=profile.focus,
        topic=topic,
        level=level,
        question_type=question_type,
        company=profile.name,
    )


class CompanyQuestionSets:
    """Generated and imported question sets keyed by company."""

    SETS_KEY = "company_questions"
    META_KEY = "company_downloads"

    def __init__(self, store: StateStore | None = None, rng: random.Random | None = None):
        self.store = store
        self.rng = rng or random.Random()
        self._memory: dict[str, Any] = {}

    # -------------------------------------------------------------------------
    # Persistence
    # -------------------------------------------------------------------------

    def _get(self, key: str) -> dict[str, Any]:
        value = self.store.get(key, {}) if self.store is not None else self._memory.get(key, {})
        if not isinstance(value, dict):
            logger.warning(f"Ignoring malformed {key} document")
            return {}
        return value

    def _set(self, key: str, value: dict[str, Any]) -> None:
        if self.store is not None:
            self.store.set(key, value)
        else:
            self._memory[key] = value

    def _sets(self) -> dict[str, list[dict[str, Any]]]:
        return {k: v for k, v in self._get(self.SETS_KEY).items() if isinstance(v, list)}

    def _meta(self) -> dict[str, Any]:
        meta = self._get(self.META_KEY)
        meta.setdefault("history", [])
        meta.setdefault("stats", {"total_downloads": 0, "successful_downloads": 0, "failed_downloads": 0})
        meta.setdefault("last_updated", {})
        return meta

    def _append(self, company_key: str, records: list[dict[str, Any]]) -> int:
        sets = self._sets()
        sets[company_key] = sets.get(company_key, []) + records
        self._set(self.SETS_KEY, sets)
        meta = self._meta()
        meta["last_updated"][company_key] = datetime.now().isoformat()
        self._set(self.META_KEY, meta)
        return len(sets[company_key])

    def _record_download(self, result: DownloadResult) -> None:
        meta = self._meta()
        history = meta["history"] + [{**result.to_dict(), "finished_at": datetime.now().isoformat()}]
        meta["history"] = history[-DOWNLOAD_HISTORY_LIMIT:]
        stats = meta["stats"]
        stats["total_downloads"] = stats.get("total_downloads", 0) + 1
        outcome = "successful_downloads" if result.success else "failed_downloads"
        stats[outcome] = stats.get(outcome, 0) + 1
        self._set(self.META_KEY, meta)

    # -------------------------------------------------------------------------
    # Generation
    # -------------------------------------------------------------------------

    async def download(
        self,
        company_key: str,
        provider: Any,
        count: int | None = None,
        delay_seconds: float = 1.0,
        on_progress: ProgressCallback | None = None,
    ) -> DownloadResult:
        """
        Generate ``count`` questions (default: the profile's question count)
        spread round-robin over the company's question types.

        Individual generation failures are logged and skipped.

        Raises:
            UnknownProfile: Unknown company key
            ProviderError: Not a single question could be generated
        """
        profile = company_profile(company_key)
        total = count if count is not None else profile.question_count
        download_id = f"dl-{int(time.time() * 1000)}"
        started = time.monotonic()
        records: list[dict[str, Any]] = []
        last_error: ProviderError | None = None

        for i in range(total):
            question_type = profile.question_types[i % len(profile.question_types)]
            topic = self.rng.choice(profile.topics)
            level = self.rng.choice(profile.levels)
            if on_progress:
                on_progress("generating", i / total * 100, f"Generating {question_type} question {i + 1}/{total}")
            try:
                question = await provider.generate_question(
                    topic, level, prompt=company_prompt(profile, question_type, topic, level)
                )
            except ProviderError as e:
                logger.warning(f"Failed to generate {question_type} question for {profile.name}: {e}")
                last_error = e
                continue
            records.append(
                {
                    **question.to_dict(),
                    "company": company_key,
                    "question_type": question_type,
                    "download_id": download_id,
                }
            )
            if delay_seconds > 0 and i < total - 1:
                await asyncio.sleep(delay_seconds)

        result = DownloadResult(
            id=download_id,
            company=company_key,
            requested=total,
            generated=len(records),
            failed=total - len(records),
            duration_ms=int((time.monotonic() - started) * 1000),
            success=bool(records),
            error=str(last_error) if not records and last_error else None,
        )
        self._record_download(result)

        if not records:
            if on_progress:
                on_progress("error", 0, f"No questions generated for {profile.name}")
            raise last_error or ProviderError(f"No questions generated for {profile.name}", provider.name)

        self._append(company_key, records)
        if on_progress:
            on_progress("complete", 100, f"Downloaded {len(records)} questions for {profile.name}")
        logger.info(f"Downloaded {len(records)}/{total} questions for {profile.name}")
        return result

    # -------------------------------------------------------------------------
    # Queries
    # -------------------------------------------------------------------------

    def records(
        self, company_key: str, question_type: str | None = None, limit: int | None = None
    ) -> list[dict[str, Any]]:
        records = self._sets().get(company_key, [])
        if question_type:
            records = [r for r in records if r.get("question_type") == question_type]
        return records[:limit] if limit else records

    def random_question(self, company_key: str, question_type: str | None = None) -> Question | None:
        """A random valid question from the company's set, None when it has none."""
        pool = self.records(company_key, question_type)
        while pool:
            record = pool.pop(self.rng.randrange(len(pool)))
            try:
                return Question.model_validate(record)
            except ValidationError:
                logger.debug(f"Skipping malformed {company_key} question")
        return None

    def summary(self) -> dict[str, dict[str, Any]]:
        sets = self._sets()
        last_updated = self._meta()["last_updated"]
        summary = {}
        for key, profile in COMPANY_PROFILES.items():
            records = sets.get(key, [])
            summary[key] = {
                "name": profile.name,
                "description": profile.description,
                "total_questions": len(records),
                "question_types": dict(Counter(r.get("question_type", "unknown") for r in records)),
                "last_updated": last_updated.get(key),
                "available": bool(records),
            }
        return summary

    def download_stats(self) -> dict[str, Any]:
        meta = self._meta()
        return {**meta["stats"], "history": meta["history"][-10:]}

    # -------------------------------------------------------------------------
    # Maintenance
    # -------------------------------------------------------------------------

    def export(self, company_key: str) -> dict[str, Any]:
        profile = company_profile(company_key)
        records = self.records(company_key)
        return {
            "company": company_key,
            "name": profile.name,
            "questions": records,
            "exported_at": datetime.now().isoformat(),
            "total_questions": len(records),
        }

    def import_data(self, company_key: str, data: Any) -> int:
        """
        Append valid questions from an export document. Returns how many.

        Raises:
            UnknownProfile: Unknown company key
            ValueError: ``data`` has no ``questions`` list
        """
        company_profile(company_key)
        if not isinstance(data, dict) or not isinstance(data.get("questions"), list):
            raise ValueError("Invalid questions data format")

        stamp = datetime.now().isoformat()
        records = []
        for item in data["questions"]:
            try:
                question = Question.model_validate(item)
            except ValidationError:
                continue
            records.append(
                {
                    **question.to_dict(),
                    "company": company_key,
                    "question_type": item.get("question_type", "coding"),
                    "imported_at": stamp,
                }
            )
        if records:
            self._append(company_key, records)
        logger.info(f"Imported {len(records)} questions for {company_key}")
        return len(records)

    def delete(self, company_key: str) -> None:
        sets = self._sets()
        if sets.pop(company_key, None) is not None:
            self._set(self.SETS_KEY, sets)

    def clear(self) -> None:
        self._set(self.SETS_KEY, {})
        self._set(self.META_KEY, {})
