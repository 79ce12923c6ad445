"""
Answer Ledger.

Append-only log of answer attempts plus the counters derived from it:
- per-day, per-topic, per-level and per-source accuracy
- current / longest streak
- rolling average response time

The ledger is the only owner of this state. Analyzers receive copies from
``get_aggregates()`` and never mutate the ledger.

Persistence: one JSON document under the ``ledger`` key of the StateStore,
rewritten after every attempt.
"""

from __future__ import annotations

import copy
import math
import threading
import uuid
from dataclasses import asdict, dataclass, field
from datetime import date, datetime, timedelta
from typing import Any

from loguru import logger

from learnloop.core.scoring import percent
from learnloop.delivery.state_store import StateStore
from learnloop.study.achievements import Achievement, evaluate_achievements

DEFAULT_RETENTION = 1000
TREND_WINDOW = 20
TREND_THRESHOLD = 10  # accuracy points between halves

# =============================================================================
# Data Classes
# =============================================================================


@dataclass(frozen=True)
class AnswerAttempt:
    """A single answered question. Never mutated after creation."""

    id: str
    timestamp: str  # ISO 8601, local time
    date: str  # YYYY-MM-DD, local calendar day
    topic: str
    level: str
    source: str
    user_answer_index: int
    correct_index: int
    is_correct: bool
    response_time_ms: int
    question_id: str | None = None
    explanation: str | None = None

    def to_dict(self) -> dict:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: dict) -> AnswerAttempt:
        return cls(
            id=data["id"],
            timestamp=data["timestamp"],
            date=data["date"],
            topic=data["topic"],
            level=data["level"],
            source=data["source"],
            user_answer_index=int(data["user_answer_index"]),
            correct_index=int(data["correct_index"]),
            is_correct=bool(data["is_correct"]),
            response_time_ms=int(data.get("response_time_ms", 0)),
            question_id=data.get("question_id"),
            explanation=data.get("explanation"),
        )


@dataclass
class DailyStat:
    questions_answered: int = 0
    correct_answers: int = 0
    incorrect_answers: int = 0
    accuracy: int = 0

    def record(self, is_correct: bool) -> None:
        self.questions_answered += 1
        if is_correct:
            self.correct_answers += 1
        else:
            self.incorrect_answers += 1
        self.accuracy = percent(self.correct_answers, self.questions_answered)


@dataclass
class StatCounter:
    """Correct/total counter used for topic, level and source stats."""

    correct: int = 0
    total: int = 0
    accuracy: int = 0  # integer percent
    total_time_ms: int = 0

    def record(self, is_correct: bool, response_time_ms: int) -> None:
        self.total += 1
        if is_correct:
            self.correct += 1
        self.total_time_ms += response_time_ms
        self.accuracy = percent(self.correct, self.total)

    @property
    def avg_response_time_ms(self) -> float:
        return self.total_time_ms / self.total if self.total else 0.0


@dataclass
class StreakState:
    current_streak: int = 0
    longest_streak: int = 0
    last_answer_date: str | None = None

    def register(self, answer_date: str, is_correct: bool) -> None:
        """
        Apply one answer to the streak.

        A correct answer on the same day as the previous answer, or on the
        next calendar day, extends the streak. Any other correct answer
        starts a new streak of 1. An incorrect answer resets it to 0.
        """
        if is_correct:
            if self._continues(answer_date):
                self.current_streak += 1
            else:
                self.current_streak = 1
            self.longest_streak = max(self.longest_streak, self.current_streak)
        else:
            self.current_streak = 0
        self.last_answer_date = answer_date

    def _continues(self, answer_date: str) -> bool:
        if self.last_answer_date is None:
            return False
        gap = (date.fromisoformat(answer_date) - date.fromisoformat(self.last_answer_date)).days
        return gap in (0, 1)


@dataclass
class LedgerAggregates:
    """Snapshot of everything derived from the attempt log."""

    daily_stats: dict[str, DailyStat] = field(default_factory=dict)
    topic_stats: dict[str, StatCounter] = field(default_factory=dict)
    level_stats: dict[str, StatCounter] = field(default_factory=dict)
    source_stats: dict[str, StatCounter] = field(default_factory=dict)
    streak: StreakState = field(default_factory=StreakState)
    total_questions: int = 0
    correct_answers: int = 0
    incorrect_answers: int = 0
    average_response_time_ms: float = 0.0

    @property
    def overall_accuracy(self) -> int:
        return percent(self.correct_answers, self.total_questions)

    def to_dict(self) -> dict:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: dict) -> LedgerAggregates:
        def counters(raw: dict | None) -> dict[str, StatCounter]:
            return {k: StatCounter(**v) for k, v in (raw or {}).items()}

        return cls(
            daily_stats={k: DailyStat(**v) for k, v in (data.get("daily_stats") or {}).items()},
            topic_stats=counters(data.get("topic_stats")),
            level_stats=counters(data.get("level_stats")),
            source_stats=counters(data.get("source_stats")),
            streak=StreakState(**(data.get("streak") or {})),
            total_questions=int(data.get("total_questions", 0)),
            correct_answers=int(data.get("correct_answers", 0)),
            incorrect_answers=int(data.get("incorrect_answers", 0)),
            average_response_time_ms=float(data.get("average_response_time_ms", 0.0)),
        )


@dataclass
class DayBreakdown:
    date: str
    day: str  # weekday name
    questions: int
    correct: int
    accuracy: int


@dataclass
class WeeklyStats:
    days: list[DayBreakdown]
    total_questions: int
    total_correct: int
    accuracy: int

    def to_dict(self) -> dict:
        return asdict(self)


@dataclass
class RecentTrend:
    trend: str  # improving | declining | neutral
    accuracy: int  # accuracy over the window
    first_half_accuracy: int = 0
    second_half_accuracy: int = 0


# =============================================================================
# Answer Ledger
# =============================================================================


def _coerce_response_time(value: Any) -> int:
    """Non-numeric, negative and non-finite times count as 0 ms."""
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return 0
    if not math.isfinite(value) or value < 0:
        return 0
    return int(value)


class AnswerLedger:
    """
    Append-only answer history with incremental aggregates.

    All mutation goes through ``record_attempt`` / ``import_data`` /
    ``clear`` under a single lock.
    """

    STORE_KEY = "ledger"

    def __init__(self, store: StateStore | None = None, retention: int = DEFAULT_RETENTION):
        self.store = store
        self.retention = retention
        self._lock = threading.RLock()
        self._attempts: list[AnswerAttempt] = []
        self._agg = LedgerAggregates()
        self._achievements: list[Achievement] = []
        self._load()

    # -------------------------------------------------------------------------
    # Persistence
    # -------------------------------------------------------------------------

    def _load(self) -> None:
        if self.store is None:
            return
        raw = self.store.get(self.STORE_KEY)
        if raw is None:
            return
        try:
            self._apply_snapshot(raw)
        except (KeyError, TypeError, ValueError) as e:
            logger.warning(f"Ignoring malformed ledger data: {e}")
            self._attempts = []
            self._agg = LedgerAggregates()
            self._achievements = []

    def _apply_snapshot(self, raw: dict) -> None:
        self._attempts = [AnswerAttempt.from_dict(a) for a in raw.get("attempts", [])]
        self._agg = LedgerAggregates.from_dict(raw.get("aggregates") or {})
        self._achievements = [Achievement.from_dict(a) for a in raw.get("achievements", [])]

    def _snapshot(self) -> dict:
        return {
            "attempts": [a.to_dict() for a in self._attempts],
            "aggregates": self._agg.to_dict(),
            "achievements": [a.to_dict() for a in self._achievements],
        }

    def _save(self) -> None:
        if self.store is not None:
            self.store.set(self.STORE_KEY, self._snapshot())

    # -------------------------------------------------------------------------
    # Recording
    # -------------------------------------------------------------------------

    def record_attempt(
        self,
        topic: str,
        level: str,
        source: str,
        user_answer_index: int,
        correct_index: int,
        response_time_ms: Any = 0,
        question_id: str | None = None,
        explanation: str | None = None,
        now: datetime | None = None,
    ) -> AnswerAttempt:
        """
        Record one answer and update every derived counter.

        Args:
            topic: Raw question topic
            level: Question difficulty level
            source: Where the question came from (ai, cached, static, ...)
            user_answer_index: Option the user picked
            correct_index: Option that was correct
            response_time_ms: Time to answer; invalid values count as 0
            question_id: Id of the answered question, if known
            explanation: Feedback shown to the user
            now: Clock override (local time)

        Returns:
            The stored AnswerAttempt
        """
        now = now or datetime.now()
        attempt = AnswerAttempt(
            id=f"attempt_{int(now.timestamp() * 1000)}_{uuid.uuid4().hex[:9]}",
            timestamp=now.isoformat(),
            date=now.date().isoformat(),
            topic=topic,
            level=level,
            source=source,
            user_answer_index=user_answer_index,
            correct_index=correct_index,
            is_correct=user_answer_index == correct_index,
            response_time_ms=_coerce_response_time(response_time_ms),
            question_id=question_id,
            explanation=explanation,
        )

        with self._lock:
            self._attempts.append(attempt)
            if len(self._attempts) > self.retention:
                del self._attempts[: len(self._attempts) - self.retention]

            agg = self._agg
            agg.daily_stats.setdefault(attempt.date, DailyStat()).record(attempt.is_correct)
            for bucket, key in (
                (agg.topic_stats, topic),
                (agg.level_stats, level),
                (agg.source_stats, source),
            ):
                bucket.setdefault(key, StatCounter()).record(
                    attempt.is_correct, attempt.response_time_ms
                )

            agg.total_questions += 1
            if attempt.is_correct:
                agg.correct_answers += 1
            else:
                agg.incorrect_answers += 1

            agg.streak.register(attempt.date, attempt.is_correct)

            timed = [a.response_time_ms for a in self._attempts if a.response_time_ms > 0]
            agg.average_response_time_ms = sum(timed) / len(timed) if timed else 0.0

            self._save()

        logger.debug(
            f"Recorded {topic}/{level} ({source}): "
            f"{'correct' if attempt.is_correct else 'incorrect'}, streak {agg.streak.current_streak}"
        )
        return attempt

    # -------------------------------------------------------------------------
    # Queries
    # -------------------------------------------------------------------------

    def get_aggregates(self) -> LedgerAggregates:
        """Deep copy of the current aggregates."""
        with self._lock:
            return copy.deepcopy(self._agg)

    def recent_attempts(self, limit: int = 50) -> list[AnswerAttempt]:
        """Newest attempts last."""
        with self._lock:
            return list(self._attempts[-limit:]) if limit > 0 else []

    @property
    def attempt_count(self) -> int:
        with self._lock:
            return len(self._attempts)

    def get_weekly_stats(self, today: date | None = None) -> WeeklyStats:
        """
        Per-day breakdown of the last 7 calendar days including today.

        Days are ordered oldest -> newest; days without answers show zeros.
        """
        today = today or date.today()
        days: list[DayBreakdown] = []
        total = correct = 0
        with self._lock:
            for offset in range(6, -1, -1):
                day = today - timedelta(days=offset)
                stat = self._agg.daily_stats.get(day.isoformat(), DailyStat())
                total += stat.questions_answered
                correct += stat.correct_answers
                days.append(
                    DayBreakdown(
                        date=day.isoformat(),
                        day=day.strftime("%A"),
                        questions=stat.questions_answered,
                        correct=stat.correct_answers,
                        accuracy=stat.accuracy,
                    )
                )
        return WeeklyStats(days=days, total_questions=total, total_correct=correct, accuracy=percent(correct, total))

    def get_recent_trend(self) -> RecentTrend:
        """
        Compare the two halves of the last 20 attempts.

        improving / declining when the newer half differs by more than
        10 accuracy points, otherwise neutral.
        """
        recent = self.recent_attempts(TREND_WINDOW)
        if not recent:
            return RecentTrend(trend="neutral", accuracy=0)

        mid = len(recent) // 2
        first, second = recent[:mid], recent[mid:]
        first_acc = percent(sum(a.is_correct for a in first), len(first))
        second_acc = percent(sum(a.is_correct for a in second), len(second))

        trend = "neutral"
        if second_acc > first_acc + TREND_THRESHOLD:
            trend = "improving"
        elif second_acc < first_acc - TREND_THRESHOLD:
            trend = "declining"

        return RecentTrend(
            trend=trend,
            accuracy=percent(sum(a.is_correct for a in recent), len(recent)),
            first_half_accuracy=first_acc,
            second_half_accuracy=second_acc,
        )

    def topic_performance(self) -> list[dict[str, Any]]:
        """Topics ordered by most practiced, each tagged strong / moderate / weak."""
        with self._lock:
            items = list(self._agg.topic_stats.items())
        rows = []
        for topic, stat in sorted(items, key=lambda kv: kv[1].total, reverse=True):
            if stat.accuracy >= 80:
                status = "strong"
            elif stat.accuracy >= 60:
                status = "moderate"
            else:
                status = "weak"
            rows.append(
                {
                    "topic": topic,
                    "accuracy": stat.accuracy,
                    "total": stat.total,
                    "correct": stat.correct,
                    "status": status,
                }
            )
        return rows

    def insights(self) -> dict[str, Any]:
        """Summary data for study insights (and the AI insight prompt)."""
        performance = self.topic_performance()
        weekly = self.get_weekly_stats()
        trend = self.get_recent_trend()
        agg = self.get_aggregates()
        return {
            "total_questions": agg.total_questions,
            "overall_accuracy": agg.overall_accuracy,
            "current_streak": agg.streak.current_streak,
            "strong_topics": [p["topic"] for p in performance if p["status"] == "strong"],
            "weak_topics": [p["topic"] for p in performance if p["status"] == "weak"],
            "recent_trend": trend.trend,
            "weekly_questions": weekly.total_questions,
            "weekly_accuracy": weekly.accuracy,
        }

    # -------------------------------------------------------------------------
    # Achievements
    # -------------------------------------------------------------------------

    def check_achievements(self, now: datetime | None = None) -> list[Achievement]:
        """Evaluate the rule table and store (and return) newly earned achievements."""
        with self._lock:
            earned = {a.id for a in self._achievements}
            new_rules = evaluate_achievements(self._agg, earned)
            if not new_rules:
                return []
            stamp = (now or datetime.now()).isoformat()
            new = [Achievement(r.id, r.name, r.description, stamp) for r in new_rules]
            self._achievements.extend(new)
            self._save()

        for achievement in new:
            logger.info(f"Achievement unlocked: {achievement.name}")
        return new

    @property
    def achievements(self) -> list[Achievement]:
        with self._lock:
            return list(self._achievements)

    # -------------------------------------------------------------------------
    # Maintenance
    # -------------------------------------------------------------------------

    def export(self) -> dict:
        with self._lock:
            data = self._snapshot()
        data["exported_at"] = datetime.now().isoformat()
        return data

    def import_data(self, data: dict) -> bool:
        """Replace the ledger with an exported document. False if it is malformed."""
        with self._lock:
            previous = (self._attempts, self._agg, self._achievements)
            try:
                self._apply_snapshot(data)
            except (KeyError, TypeError, ValueError, AttributeError) as e:
                logger.warning(f"Rejected ledger import: {e}")
                self._attempts, self._agg, self._achievements = previous
                return False
            self._save()
        return True

    def clear(self) -> None:
        with self._lock:
            self._attempts = []
            self._agg = LedgerAggregates()
            self._achievements = []
            self._save()
        logger.info("Answer ledger cleared")
