"""
Generated Question Cache.

Durable collection of AI-generated (or hand-added) questions used both to
persist new generator output and to serve fallback lookups when a provider
fails.

Stored as one JSON document under the ``question_cache`` key:

    {
        "metadata": {"version": "1.0", "created": ..., "last_updated": ...,
                     "total_questions": N},
        "questions": [ {id, question, options, correct, explanation, ...}, ... ]
    }

The same document is what ``export_all`` returns and ``import_all`` accepts.
"""

from __future__ import annotations

import random
from collections import Counter
from dataclasses import dataclass, field
from typing import Any

from loguru import logger
from pydantic import ValidationError

from learnloop.core.question import Question, now_iso
from learnloop.delivery.state_store import StateStore

CACHE_VERSION = "1.0"


@dataclass
class CacheStats:
    total: int = 0
    by_source: dict[str, int] = field(default_factory=dict)
    by_topic: dict[str, int] = field(default_factory=dict)
    by_level: dict[str, int] = field(default_factory=dict)


def _dedupe_key(q: Question) -> tuple[str, str, str]:
    return (q.question, q.topic, q.level)


class CacheStore:
    """
    Question cache with duplicate suppression on (question text, topic, level).

    Args:
        store: Durable store; ``None`` keeps the cache in memory only
        rng: Random source for ``query_random``
    """

    STORE_KEY = "question_cache"

    def __init__(self, store: StateStore | None = None, rng: random.Random | None = None):
        self.store = store
        self.rng = rng or random.Random()
        self._questions: list[Question] = []
        self._keys: set[tuple[str, str, str]] = set()
        self._metadata = self._default_metadata()
        self._load()

    @staticmethod
    def _default_metadata() -> dict[str, Any]:
        stamp = now_iso()
        return {
            "version": CACHE_VERSION,
            "created": stamp,
            "last_updated": stamp,
            "total_questions": 0,
        }

    def __len__(self) -> int:
        return len(self._questions)

    # -------------------------------------------------------------------------
    # Persistence
    # -------------------------------------------------------------------------

    def _load(self) -> None:
        if self.store is None:
            return
        raw = self.store.get(self.STORE_KEY)
        if raw is None:
            return
        if not isinstance(raw, dict) or not isinstance(raw.get("questions"), list):
            logger.warning("Question cache has an invalid structure, starting empty")
            return

        if isinstance(raw.get("metadata"), dict):
            self._metadata.update(raw["metadata"])
        skipped = 0
        for item in raw["questions"]:
            question = self._validate(item)
            if question is None or _dedupe_key(question) in self._keys:
                skipped += 1
                continue
            self._append(question)
        if skipped:
            logger.warning(f"Skipped {skipped} unusable cached question(s)")
        logger.debug(f"Loaded {len(self._questions)} cached questions")

    def _save(self) -> None:
        self._metadata["last_updated"] = now_iso()
        self._metadata["total_questions"] = len(self._questions)
        if self.store is not None:
            self.store.set(self.STORE_KEY, self._document())

    def _document(self) -> dict[str, Any]:
        return {
            "metadata": dict(self._metadata),
            "questions": [q.to_dict() for q in self._questions],
        }

    # -------------------------------------------------------------------------
    # Mutation
    # -------------------------------------------------------------------------

    @staticmethod
    def _validate(item: Question | dict[str, Any]) -> Question | None:
        if isinstance(item, Question):
            return item
        if not isinstance(item, dict):
            return None
        try:
            return Question.model_validate(item)
        except ValidationError as e:
            logger.debug(f"Rejected cache entry: {e.error_count()} validation error(s)")
            return None

    def _append(self, question: Question) -> None:
        self._questions.append(question)
        self._keys.add(_dedupe_key(question))

    def _insert(self, item: Question | dict[str, Any]) -> bool:
        question = self._validate(item)
        if question is None:
            logger.warning("Invalid question format, not cached")
            return False
        if _dedupe_key(question) in self._keys:
            return False
        if not question.generated_at:
            question = question.model_copy(update={"generated_at": now_iso()})
        self._append(question)
        return True

    def add(self, question: Question | dict[str, Any]) -> bool:
        """
        Add a question.

        Returns False when it fails validation or duplicates an entry with
        the same question text, topic and level.
        """
        added = self._insert(question)
        if added:
            self._save()
        return added

    def clear(self) -> None:
        self._questions = []
        self._keys = set()
        self._save()
        logger.info("Question cache cleared")

    def remove_duplicates(self) -> int:
        """Drop repeated (question, topic, level) entries; returns how many went."""
        seen: set[tuple[str, str, str]] = set()
        unique = []
        for q in self._questions:
            key = _dedupe_key(q)
            if key in seen:
                continue
            seen.add(key)
            unique.append(q)
        removed = len(self._questions) - len(unique)
        if removed:
            self._questions = unique
            self._keys = seen
            self._save()
            logger.info(f"Removed {removed} duplicate questions from cache")
        return removed

    # -------------------------------------------------------------------------
    # Queries
    # -------------------------------------------------------------------------

    def _filter(
        self, topic: str | None = None, level: str | None = None, source: str | None = None
    ) -> list[Question]:
        pool = self._questions
        if topic:
            needle = topic.lower()
            pool = [q for q in pool if needle in q.topic.lower()]
        if level:
            pool = [q for q in pool if q.level == level]
        if source:
            pool = [q for q in pool if q.source == source]
        return pool

    def query_random(
        self, topic: str | None = None, level: str | None = None, source: str | None = None
    ) -> Question | None:
        """
        Random cached question matching the filters.

        ``topic`` is a case-insensitive substring match; ``level`` and
        ``source`` must match exactly. Empty filters are ignored.
        """
        pool = self._filter(topic, level, source)
        if not pool:
            return None
        question = self.rng.choice(pool)
        logger.debug(f"Cache hit ({question.source}): {question.question[:50]}")
        return question

    def questions_by_topic(self, topic: str) -> list[Question]:
        return self._filter(topic=topic)

    def questions_by_level(self, level: str) -> list[Question]:
        return self._filter(level=level)

    def available_topics(self) -> list[str]:
        return sorted({q.topic for q in self._questions})

    def available_levels(self) -> list[str]:
        return sorted({q.level for q in self._questions})

    def all(self) -> list[Question]:
        return list(self._questions)

    def stats(self) -> CacheStats:
        return CacheStats(
            total=len(self._questions),
            by_source=dict(Counter(q.source for q in self._questions)),
            by_topic=dict(Counter(q.topic for q in self._questions)),
            by_level=dict(Counter(q.level for q in self._questions)),
        )

    @property
    def metadata(self) -> dict[str, Any]:
        return dict(self._metadata)

    # -------------------------------------------------------------------------
    # Export / import
    # -------------------------------------------------------------------------

    def export_all(self) -> dict[str, Any]:
        """Full cache document (metadata + questions)."""
        return self._document()

    def import_all(self, data: dict[str, Any] | list[Any]) -> int:
        """
        Add every valid, non-duplicate question from an export document
        (or a bare list of questions). Returns the number imported.
        """
        items = data.get("questions") if isinstance(data, dict) else data
        if not isinstance(items, list):
            logger.error("Import data must contain a list of questions")
            return 0

        imported = sum(1 for item in items if self._insert(item))
        if imported:
            self._save()
        logger.info(f"Imported {imported} questions to cache")
        return imported
