"""
Mock Interview Sessions.

A session is a timed run through a planned list of question slots:

- The plan size is duration / minutes per question; slots are split by the
  easy / medium / hard mix of the interview type (or the company profile
  when it has its own) and shuffled.
- The phase follows progress: warmup < 20% < technical < 70% < advanced
  < 90% < behavioral.
- Pausing stops the clock; resuming shifts the start by the paused time.
- The final score blends accuracy (50%), time (30%) and completion (20%).

Completed sessions are kept in InterviewHistory (store key ``interviews``),
which also feeds the skill assessor's interview success estimate.
"""

from __future__ import annotations

import random
import time
import uuid
from dataclasses import asdict, dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Callable

from loguru import logger

from learnloop.adaptive.interview_profiles import (
    DIFFICULTY_LEVELS,
    CompanyProfile,
    InterviewType,
    company_profile,
    interview_type,
)
from learnloop.core.errors import InterviewNotActive
from learnloop.core.scoring import percent, round_half_up
from learnloop.delivery.state_store import StateStore

HISTORY_LIMIT = 50
ACCURACY_WEIGHT = 0.5
TIME_WEIGHT = 0.3
COMPLETION_WEIGHT = 0.2


class InterviewPhase(str, Enum):
    WARMUP = "warmup"
    TECHNICAL = "technical"
    ADVANCED = "advanced"
    BEHAVIORAL = "behavioral"
    COMPLETE = "complete"


class InterviewStatus(str, Enum):
    ACTIVE = "active"
    PAUSED = "paused"
    COMPLETED = "completed"


# =============================================================================
# Data Classes
# =============================================================================


@dataclass
class InterviewSlot:
    id: str
    difficulty: str  # easy | medium | hard
    level: str
    topic: str
    phase: InterviewPhase
    time_allotted_ms: int


@dataclass
class InterviewAnswer:
    slot_id: str
    question_id: str
    topic: str
    level: str
    correct: bool
    response_time_ms: int
    timestamp: str


@dataclass
class InterviewResult:
    id: str
    type: str
    type_name: str
    company: str | None
    started_at: str
    completed_at: str
    total_time_ms: int
    questions_total: int
    questions_answered: int
    correct_answers: int
    accuracy_score: int
    time_score: int
    completion_score: int
    score: int
    status: str = InterviewStatus.COMPLETED.value
    answers: list[InterviewAnswer] = field(default_factory=list)

    def to_dict(self) -> dict:
        return asdict(self)


@dataclass
class InterviewStats:
    total_interviews: int = 0
    average_score: float = 0.0
    best_score: int = 0
    total_time_ms: int = 0
    completion_rate: int = 0


# =============================================================================
# Scoring helpers
# =============================================================================


def time_score(elapsed_ms: float, expected_ms: float) -> int:
    """100 when finished early, 90 on time, 70 slightly over, 50 otherwise."""
    ratio = elapsed_ms / expected_ms if expected_ms > 0 else 0.0
    if ratio <= 0.8:
        return 100
    if ratio <= 1.0:
        return 90
    if ratio <= 1.2:
        return 70
    return 50


def phase_for_progress(progress: float) -> InterviewPhase:
    if progress < 0.2:
        return InterviewPhase.WARMUP
    if progress < 0.7:
        return InterviewPhase.TECHNICAL
    if progress < 0.9:
        return InterviewPhase.ADVANCED
    return InterviewPhase.BEHAVIORAL


def build_plan(
    itype: InterviewType, company: CompanyProfile | None, rng: random.Random
) -> list[InterviewSlot]:
    """Shuffled question slots for one session."""
    mix = company.mix if company is not None and company.mix is not None else itype.mix
    minutes = company.minutes_per_question if company is not None else itype.minutes_per_question
    topics = company.topics if company is not None else itype.topics
    total = max(1, itype.duration_minutes // minutes)

    slots: list[InterviewSlot] = []
    for difficulty, count in mix.counts(total).items():
        for i in range(count):
            if difficulty == "easy":
                phase = InterviewPhase.WARMUP if i < 2 else InterviewPhase.TECHNICAL
            elif difficulty == "medium":
                phase = InterviewPhase.TECHNICAL
            else:
                phase = InterviewPhase.ADVANCED
            slots.append(
                InterviewSlot(
                    id=f"{difficulty}_{i}",
                    difficulty=difficulty,
                    level=DIFFICULTY_LEVELS[difficulty],
                    topic=rng.choice(topics),
                    phase=phase,
                    time_allotted_ms=minutes * 60_000,
                )
            )
    rng.shuffle(slots)
    return slots


# =============================================================================
# Session
# =============================================================================


class InterviewSession:
    """
    One timed mock interview.

    Questions themselves come from the caller (the companion serves them
    through the question selector); the session only tracks the plan,
    the answers and the clock.

    Raises:
        UnknownProfile: Unknown interview type or company key
    """

    def __init__(
        self,
        type_key: str,
        company_key: str | None = None,
        rng: random.Random | None = None,
        clock: Callable[[], float] = time.monotonic,
        now: datetime | None = None,
    ):
        self.interview_type = interview_type(type_key)
        self.company = company_profile(company_key) if company_key else None
        self.rng = rng or random.Random()
        self.id = f"iv-{uuid.uuid4().hex[:8]}"
        self.started_at = (now or datetime.now()).isoformat()
        self.duration_ms = self.interview_type.duration_minutes * 60_000
        self.slots = build_plan(self.interview_type, self.company, self.rng)
        self.answers: list[InterviewAnswer] = []
        self.status = InterviewStatus.ACTIVE
        self.phase = InterviewPhase.WARMUP

        self._clock = clock
        self._started = clock()
        self._paused_at: float | None = None

        logger.info(
            f"Interview {self.id} started: {self.interview_type.name}"
            + (f" ({self.company.name})" if self.company else "")
            + f", {len(self.slots)} questions"
        )

    @property
    def current_slot(self) -> InterviewSlot | None:
        index = len(self.answers)
        return self.slots[index] if index < len(self.slots) else None

    @property
    def is_finished(self) -> bool:
        return len(self.answers) >= len(self.slots)

    @property
    def correct_answers(self) -> int:
        return sum(1 for a in self.answers if a.correct)

    def elapsed_ms(self) -> int:
        end = self._paused_at if self._paused_at is not None else self._clock()
        return int((end - self._started) * 1000)

    def ensure_accepting(self) -> InterviewSlot:
        """The slot the next answer fills. Raises InterviewNotActive when none can be recorded."""
        if self.status is not InterviewStatus.ACTIVE:
            raise InterviewNotActive(f"Interview {self.id} is {self.status.value}")
        slot = self.current_slot
        if slot is None:
            raise InterviewNotActive(f"Interview {self.id} has no questions left")
        return slot

    def record_answer(
        self,
        question_id: str,
        correct: bool,
        response_time_ms: int = 0,
        now: datetime | None = None,
    ) -> InterviewAnswer:
        """
        Record the answer for the current slot and advance.

        Raises:
            InterviewNotActive: Session is paused, completed or out of slots
        """
        slot = self.ensure_accepting()

        answer = InterviewAnswer(
            slot_id=slot.id,
            question_id=str(question_id),
            topic=slot.topic,
            level=slot.level,
            correct=bool(correct),
            response_time_ms=max(0, int(response_time_ms or 0)),
            timestamp=(now or datetime.now()).isoformat(),
        )
        self.answers.append(answer)
        self.phase = phase_for_progress(len(self.answers) / len(self.slots))
        return answer

    def pause(self) -> None:
        if self.status is InterviewStatus.ACTIVE:
            self.status = InterviewStatus.PAUSED
            self._paused_at = self._clock()

    def resume(self) -> None:
        if self.status is InterviewStatus.PAUSED and self._paused_at is not None:
            self._started += self._clock() - self._paused_at
            self._paused_at = None
            self.status = InterviewStatus.ACTIVE

    def progress(self) -> dict[str, Any]:
        elapsed = self.elapsed_ms()
        return {
            "current_question": min(len(self.answers) + 1, len(self.slots)),
            "total_questions": len(self.slots),
            "time_elapsed_ms": elapsed,
            "time_remaining_ms": max(0, self.duration_ms - elapsed),
            "phase": self.phase.value,
            "status": self.status.value,
            "accuracy": percent(self.correct_answers, len(self.answers)),
        }

    def complete(self, now: datetime | None = None) -> InterviewResult:
        """
        Finish the session and score it. Unanswered slots lower completion.

        Raises:
            InterviewNotActive: Already completed
        """
        if self.status is InterviewStatus.COMPLETED:
            raise InterviewNotActive(f"Interview {self.id} is already completed")

        elapsed = self.elapsed_ms()
        answered = len(self.answers)
        accuracy = self.correct_answers / max(answered, 1) * 100
        timing = time_score(elapsed, self.duration_ms)
        completion = answered / len(self.slots) * 100

        self.status = InterviewStatus.COMPLETED
        self.phase = InterviewPhase.COMPLETE
        result = InterviewResult(
            id=self.id,
            type=self.interview_type.key,
            type_name=self.interview_type.name,
            company=self.company.key if self.company else None,
            started_at=self.started_at,
            completed_at=(now or datetime.now()).isoformat(),
            total_time_ms=elapsed,
            questions_total=len(self.slots),
            questions_answered=answered,
            correct_answers=self.correct_answers,
            accuracy_score=round_half_up(accuracy),
            time_score=timing,
            completion_score=round_half_up(completion),
            score=round_half_up(
                accuracy * ACCURACY_WEIGHT + timing * TIME_WEIGHT + completion * COMPLETION_WEIGHT
            ),
            answers=list(self.answers),
        )
        logger.info(f"Interview {self.id} completed with score {result.score}")
        return result


# =============================================================================
# History
# =============================================================================


class InterviewHistory:
    """Completed interviews, oldest first, capped at ``limit``."""

    HISTORY_KEY = "interviews"

    def __init__(self, store: StateStore | None = None, limit: int = HISTORY_LIMIT):
        self.store = store
        self.limit = limit
        self._memory: list[dict[str, Any]] = []

    def records(self) -> list[dict[str, Any]]:
        if self.store is None:
            return list(self._memory)
        records = self.store.get(self.HISTORY_KEY, [])
        if not isinstance(records, list):
            logger.warning("Ignoring malformed interview history")
            return []
        return [r for r in records if isinstance(r, dict)]

    def _write(self, records: list[dict[str, Any]]) -> None:
        if self.store is None:
            self._memory = records
        else:
            self.store.set(self.HISTORY_KEY, records)

    def add(self, result: InterviewResult) -> None:
        records = self.records()
        records.append(result.to_dict())
        self._write(records[-self.limit :] if self.limit > 0 else [])

    def recent(self, limit: int = 10) -> list[dict[str, Any]]:
        """Most recent first."""
        return list(reversed(self.records()[-limit:])) if limit > 0 else []

    def stats(self) -> InterviewStats:
        records = self.records()
        if not records:
            return InterviewStats()
        scores = [int(r.get("score", 0) or 0) for r in records]
        completed = sum(1 for r in records if r.get("status") == InterviewStatus.COMPLETED.value)
        return InterviewStats(
            total_interviews=len(records),
            average_score=round(sum(scores) / len(scores), 1),
            best_score=max(scores),
            total_time_ms=sum(int(r.get("total_time_ms", 0) or 0) for r in records),
            completion_rate=percent(completed, len(records)),
        )

    def clear(self) -> None:
        self._memory = []
        if self.store is not None:
            self.store.delete(self.HISTORY_KEY)
