"""
Achievement rules.

Evaluation is a pure function of the ledger aggregates and the ids already
earned; storing newly earned achievements is the ledger's job.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import TYPE_CHECKING, Callable

if TYPE_CHECKING:
    from learnloop.study.answer_ledger import LedgerAggregates


@dataclass(frozen=True)
class AchievementRule:
    id: str
    name: str
    description: str
    condition: Callable[[LedgerAggregates], bool]


@dataclass
class Achievement:
    """An earned achievement."""

    id: str
    name: str
    description: str
    earned_at: str
    is_new: bool = True

    def to_dict(self) -> dict:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: dict) -> Achievement:
        return cls(
            id=data["id"],
            name=data.get("name", data["id"]),
            description=data.get("description", ""),
            earned_at=data.get("earned_at", ""),
            is_new=bool(data.get("is_new", False)),
        )


def _accuracy_90(agg: LedgerAggregates) -> bool:
    return agg.total_questions >= 50 and agg.correct_answers / agg.total_questions >= 0.9


def _topic_master(agg: LedgerAggregates) -> bool:
    return any(stat.total >= 10 and stat.correct == stat.total for stat in agg.topic_stats.values())


ACHIEVEMENT_RULES: tuple[AchievementRule, ...] = (
    AchievementRule(
        "first_question", "Getting Started", "Answered your first question",
        lambda agg: agg.total_questions >= 1,
    ),
    AchievementRule(
        "streak_5", "On Fire!", "5 correct answers in a row",
        lambda agg: agg.streak.current_streak >= 5,
    ),
    AchievementRule(
        "streak_10", "Unstoppable!", "10 correct answers in a row",
        lambda agg: agg.streak.current_streak >= 10,
    ),
    AchievementRule(
        "streak_25", "Legend!", "25 correct answers in a row",
        lambda agg: agg.streak.current_streak >= 25,
    ),
    AchievementRule(
        "hundred_questions", "Century Club", "Answered 100 questions",
        lambda agg: agg.total_questions >= 100,
    ),
    AchievementRule(
        "accuracy_90", "Perfectionist", "90%+ accuracy with 50+ questions",
        _accuracy_90,
    ),
    AchievementRule(
        "topic_master", "Topic Master", "100% accuracy in any topic (10+ questions)",
        _topic_master,
    ),
)


def evaluate_achievements(
    aggregates: LedgerAggregates,
    earned_ids: set[str] | frozenset[str],
    rules: tuple[AchievementRule, ...] = ACHIEVEMENT_RULES,
) -> list[AchievementRule]:
    """Return the rules that hold now and have not been earned before."""
    return [rule for rule in rules if rule.id not in earned_ids and rule.condition(aggregates)]
