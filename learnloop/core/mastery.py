"""
Core Mastery Module.

Accuracy-threshold mastery tiers used by the weakness analyzer and the CLI.

Design:
- MasteryLevel: Enum for categorizing concept accuracy
- MASTERY_THRESHOLDS: fixed cut points for each tier above novice
- questions_needed_for_next_level: rough effort estimate to reach the next tier
"""

from __future__ import annotations

import math
from enum import Enum

# Lower accuracy bound (0-1) of each tier above novice.
MASTERY_THRESHOLDS: dict[str, float] = {
    "beginner": 0.40,
    "intermediate": 0.70,
    "advanced": 0.85,
    "expert": 0.95,
}

# Questions per unit of accuracy gap.
QUESTIONS_PER_ACCURACY_UNIT = 20


class MasteryLevel(str, Enum):
    """
    Mastery level categorization.

    Ordered from lowest to highest; comparisons use ``rank``.
    """

    NOVICE = "novice"  # < 40%
    BEGINNER = "beginner"  # 40-69%
    INTERMEDIATE = "intermediate"  # 70-84%
    ADVANCED = "advanced"  # 85-94%
    EXPERT = "expert"  # 95-100%

    @classmethod
    def from_accuracy(cls, accuracy: float) -> MasteryLevel:
        """
        Convert a 0-1 accuracy to a level.

        Args:
            accuracy: Fraction of correct answers between 0 and 1

        Returns:
            Corresponding MasteryLevel
        """
        if accuracy >= MASTERY_THRESHOLDS["expert"]:
            return cls.EXPERT
        elif accuracy >= MASTERY_THRESHOLDS["advanced"]:
            return cls.ADVANCED
        elif accuracy >= MASTERY_THRESHOLDS["intermediate"]:
            return cls.INTERMEDIATE
        elif accuracy >= MASTERY_THRESHOLDS["beginner"]:
            return cls.BEGINNER
        else:
            return cls.NOVICE

    @property
    def rank(self) -> int:
        """Position in the novice -> expert ordering."""
        return list(MasteryLevel).index(self)

    @property
    def next_level(self) -> MasteryLevel | None:
        """The tier above this one, None at expert."""
        levels = list(MasteryLevel)
        if self.rank + 1 < len(levels):
            return levels[self.rank + 1]
        return None

    @property
    def display_name(self) -> str:
        """Human-readable name."""
        return self.value.title()

    @property
    def emoji(self) -> str:
        """Status glyph for CLI display."""
        return {
            MasteryLevel.NOVICE: "○",
            MasteryLevel.BEGINNER: "◔",
            MasteryLevel.INTERMEDIATE: "◑",
            MasteryLevel.ADVANCED: "◕",
            MasteryLevel.EXPERT: "●",
        }[self]

    @property
    def color(self) -> str:
        """Rich color for CLI display."""
        return {
            MasteryLevel.NOVICE: "red",
            MasteryLevel.BEGINNER: "yellow",
            MasteryLevel.INTERMEDIATE: "cyan",
            MasteryLevel.ADVANCED: "blue",
            MasteryLevel.EXPERT: "green",
        }[self]


def next_threshold(accuracy: float) -> float | None:
    """Accuracy needed for the next tier, None once expert is reached."""
    following = MasteryLevel.from_accuracy(accuracy).next_level
    if following is None:
        return None
    return MASTERY_THRESHOLDS[following.value]


def questions_needed_for_next_level(accuracy: float) -> int:
    """
    Estimate the questions needed to reach the next mastery tier.

    Formula: ceil((next_threshold - accuracy) * 20), 0 at expert.
    """
    target = next_threshold(accuracy)
    if target is None:
        return 0
    # Float noise such as 3.0000000000000004 must round to 3.
    return max(0, math.ceil((target - accuracy) * QUESTIONS_PER_ACCURACY_UNIT - 1e-9))
