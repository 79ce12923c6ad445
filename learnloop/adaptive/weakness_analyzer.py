"""
Weakness Analyzer.

Turns the ledger's topic counters into a prioritized, explainable weakness
report:

1. Topics are mapped onto concept ids (``normalize_topic``) and merged.
2. Each concept gets a weakness score:
       (1 - accuracy) * 100
     + min(avg_response_ms / 30000, 1) * 20
     + max(0, 10 - total) * 5
3. Concepts roll up into categories.
4. Weak concepts and categories are ranked by priority, expanded into
   practice / review / category-focus actions and a learning path.

The heuristic constants live in ``WeaknessConfig`` so they can be tuned
without touching the algorithm.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from datetime import date, datetime, timedelta
from enum import Enum
from typing import Any

from loguru import logger

from learnloop.core.concept_graph import ConceptGraph, normalize_topic
from learnloop.core.mastery import MasteryLevel, questions_needed_for_next_level
from learnloop.core.scoring import round_half_up
from learnloop.delivery.state_store import StateStore
from learnloop.study.answer_ledger import LedgerAggregates, WeeklyStats

# =============================================================================
# Configuration
# =============================================================================


@dataclass
class WeaknessConfig:
    """Tunable constants for weakness scoring and ranking."""

    time_normalizer_ms: float = 30000.0
    accuracy_weight: float = 100.0
    time_weight: float = 20.0
    sample_weight: float = 5.0
    low_sample_cutoff: int = 10

    weak_accuracy: float = 0.60
    weak_min_questions: int = 5
    weak_accuracy_with_samples: float = 0.70
    weak_category_accuracy: float = 0.65

    severity_critical: float = 80.0
    severity_high: float = 60.0
    severity_medium: float = 40.0

    category_weights: dict[str, float] = field(
        default_factory=lambda: {
            "fundamentals": 3.0,
            "data-structures": 2.5,
            "algorithms": 2.5,
            "oop": 2.0,
            "database": 1.8,
            "system-design": 1.5,
        }
    )
    default_category_weight: float = 1.0

    progression_window: int = 10  # max questions_needed for a progression item
    progression_priority: float = 5.0
    path_limit: int = 10
    category_focus_concepts: int = 3
    confidence_trend_margin: float = 5.0


CONCEPT_RESOURCES: dict[str, list[str]] = {
    "arrays": ["Array manipulation exercises", "Sorting algorithms practice"],
    "recursion": ["Base case identification", "Recursive thinking patterns"],
    "binary-trees": ["Tree traversal methods", "Binary tree properties"],
    "dynamic-programming": ["Memoization techniques", "Bottom-up approaches"],
    "sql-basics": ["SELECT statement practice", "WHERE clause exercises"],
    "joins": ["INNER JOIN examples", "LEFT/RIGHT JOIN differences"],
}


def resources_for(concept: str) -> list[str]:
    return list(CONCEPT_RESOURCES.get(concept, [f"{concept} fundamentals", f"{concept} practice problems"]))


# =============================================================================
# Data Classes
# =============================================================================


class Severity(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"

    @property
    def multiplier(self) -> int:
        return {
            Severity.CRITICAL: 4,
            Severity.HIGH: 3,
            Severity.MEDIUM: 2,
            Severity.LOW: 1,
        }[self]

    @property
    def color(self) -> str:
        return {
            Severity.CRITICAL: "red",
            Severity.HIGH: "yellow",
            Severity.MEDIUM: "cyan",
            Severity.LOW: "dim",
        }[self]


@dataclass
class ConceptWeakness:
    accuracy: float  # 0-1
    total_questions: int
    correct_answers: int
    avg_response_time_ms: float
    weakness_score: float
    is_weak: bool
    confidence: str  # low | medium | high
    category: str
    difficulty: str
    weight: float


@dataclass
class CategoryWeakness:
    accuracy: float
    total_questions: int
    correct_answers: int
    avg_response_time_ms: float
    weakness_score: float
    is_weak: bool
    concepts: list[str]

    @property
    def concept_count(self) -> int:
        return len(self.concepts)


@dataclass
class Weakness:
    """One entry of the ranked weakness list."""

    type: str  # concept | category
    name: str
    severity: Severity
    description: str
    impact: str  # low | medium | high
    priority: float

    def to_dict(self) -> dict:
        data = asdict(self)
        data["severity"] = self.severity.value
        return data


@dataclass
class RecommendedAction:
    type: str  # practice | review | category-focus
    action: str
    estimated_time: str
    difficulty: str
    priority: float
    concept: str | None = None
    category: str | None = None
    reason: str | None = None
    resources: list[str] = field(default_factory=list)
    concepts: list[str] = field(default_factory=list)

    @property
    def dedupe_key(self) -> str:
        return f"{self.type}-{self.concept or self.category}"


@dataclass
class LearningPathItem:
    concept: str
    type: str  # weakness-focus | mastery-progression
    title: str
    description: str
    estimated_time: str
    difficulty: str
    priority: float
    milestones: list[str]
    prerequisites: list[str] = field(default_factory=list)
    questions_needed: int | None = None
    current_level: str | None = None


@dataclass
class ConceptMasteryInfo:
    level: MasteryLevel
    score: float  # accuracy 0-1
    confidence: str
    questions_needed: int


@dataclass
class ConfidenceScores:
    overall: float = 0.0
    trend: str = "stable"  # improving | declining | stable
    by_difficulty: dict[str, int] = field(default_factory=dict)


@dataclass
class TargetedTopic:
    """A (topic, difficulty) pair the selector should bias toward."""

    topic: str
    priority: float
    difficulty: str
    reason: str


@dataclass
class WeaknessReport:
    timestamp: str
    concept_weaknesses: dict[str, ConceptWeakness]
    category_weaknesses: dict[str, CategoryWeakness]
    mastery_levels: dict[str, ConceptMasteryInfo]
    confidence_scores: ConfidenceScores
    overall_weaknesses: list[Weakness]
    recommended_actions: list[RecommendedAction]
    learning_path: list[LearningPathItem]

    @property
    def weak_concepts(self) -> set[str]:
        return {name for name, data in self.concept_weaknesses.items() if data.is_weak}

    def mastery_distribution(self) -> dict[str, int]:
        distribution = {level.value: 0 for level in MasteryLevel}
        for info in self.mastery_levels.values():
            distribution[info.level.value] += 1
        return distribution


# =============================================================================
# Analyzer
# =============================================================================


class WeaknessAnalyzer:
    """
    Computes weakness reports from ledger aggregates.

    ``analyze`` only reads its inputs; the last report is kept for
    ``get_targeted_topics`` / ``get_summary`` and, when a store is given,
    a daily profile is written under ``weakness_profiles``.
    """

    PROFILES_KEY = "weakness_profiles"

    def __init__(
        self,
        graph: ConceptGraph | None = None,
        config: WeaknessConfig | None = None,
        store: StateStore | None = None,
        profile_days: int = 30,
    ):
        self.graph = graph or ConceptGraph()
        self.config = config or WeaknessConfig()
        self.store = store
        self.profile_days = profile_days
        self._last_report: WeaknessReport | None = None

    @property
    def last_report(self) -> WeaknessReport | None:
        return self._last_report

    # -------------------------------------------------------------------------
    # Scoring primitives
    # -------------------------------------------------------------------------

    def weakness_score(self, accuracy: float, avg_response_time_ms: float, total: int) -> float:
        cfg = self.config
        accuracy_part = (1 - accuracy) * cfg.accuracy_weight
        time_part = min(avg_response_time_ms / cfg.time_normalizer_ms, 1) * cfg.time_weight
        sample_part = max(0, cfg.low_sample_cutoff - total) * cfg.sample_weight
        return accuracy_part + time_part + sample_part

    def severity(self, weakness_score: float) -> Severity:
        cfg = self.config
        if weakness_score >= cfg.severity_critical:
            return Severity.CRITICAL
        if weakness_score >= cfg.severity_high:
            return Severity.HIGH
        if weakness_score >= cfg.severity_medium:
            return Severity.MEDIUM
        return Severity.LOW

    def is_weak_concept(self, accuracy: float, total: int) -> bool:
        cfg = self.config
        return accuracy < cfg.weak_accuracy or (
            total >= cfg.weak_min_questions and accuracy < cfg.weak_accuracy_with_samples
        )

    def concept_priority(self, concept: str, data: ConceptWeakness) -> float:
        multiplier = self.severity(data.weakness_score).multiplier
        return self.graph.weight_of(concept) * multiplier * (1 - data.accuracy)

    def category_priority(self, category: str, data: CategoryWeakness) -> float:
        weight = self.config.category_weights.get(category, self.config.default_category_weight)
        return weight * (1 - data.accuracy) * data.concept_count

    def impact(self, concept: str) -> str:
        dependents = len(self.graph.dependents_of(concept))
        weight = self.graph.weight_of(concept)
        if dependents >= 3 and weight >= 1.5:
            return "high"
        if dependents >= 2 or weight >= 1.3:
            return "medium"
        return "low"

    @staticmethod
    def sample_confidence(total: int) -> str:
        if total < 3:
            return "low"
        if total < 8:
            return "medium"
        return "high"

    # -------------------------------------------------------------------------
    # Analysis steps
    # -------------------------------------------------------------------------

    def _concept_performance(self, aggregates: LedgerAggregates) -> dict[str, ConceptWeakness]:
        merged: dict[str, list[int]] = {}
        for topic, stat in aggregates.topic_stats.items():
            counts = merged.setdefault(normalize_topic(topic), [0, 0, 0])
            counts[0] += stat.correct
            counts[1] += stat.total
            counts[2] += stat.total_time_ms

        concepts: dict[str, ConceptWeakness] = {}
        for concept, (correct, total, time_ms) in merged.items():
            accuracy = correct / max(total, 1)
            avg_time = time_ms / max(total, 1)
            concepts[concept] = ConceptWeakness(
                accuracy=accuracy,
                total_questions=total,
                correct_answers=correct,
                avg_response_time_ms=avg_time,
                weakness_score=self.weakness_score(accuracy, avg_time, total),
                is_weak=self.is_weak_concept(accuracy, total),
                confidence=self.sample_confidence(total),
                category=self.graph.category_of(concept),
                difficulty=self.graph.difficulty_of(concept).value,
                weight=self.graph.weight_of(concept),
            )
        return concepts

    def _category_performance(self, concepts: dict[str, ConceptWeakness]) -> dict[str, CategoryWeakness]:
        grouped: dict[str, list[tuple[str, ConceptWeakness]]] = {}
        for name, data in concepts.items():
            grouped.setdefault(data.category, []).append((name, data))

        categories: dict[str, CategoryWeakness] = {}
        for category, members in grouped.items():
            correct = sum(d.correct_answers for _, d in members)
            total = sum(d.total_questions for _, d in members)
            time_ms = sum(d.avg_response_time_ms * d.total_questions for _, d in members)
            accuracy = correct / max(total, 1)
            avg_time = time_ms / max(total, 1)
            categories[category] = CategoryWeakness(
                accuracy=accuracy,
                total_questions=total,
                correct_answers=correct,
                avg_response_time_ms=avg_time,
                weakness_score=self.weakness_score(accuracy, avg_time, total),
                is_weak=accuracy < self.config.weak_category_accuracy,
                concepts=[name for name, _ in members],
            )
        return categories

    def _mastery_levels(self, concepts: dict[str, ConceptWeakness]) -> dict[str, ConceptMasteryInfo]:
        return {
            name: ConceptMasteryInfo(
                level=MasteryLevel.from_accuracy(data.accuracy),
                score=data.accuracy,
                confidence=data.confidence,
                questions_needed=questions_needed_for_next_level(data.accuracy),
            )
            for name, data in concepts.items()
        }

    def _confidence_scores(
        self, aggregates: LedgerAggregates, weekly_stats: WeeklyStats | None
    ) -> ConfidenceScores:
        overall_acc = aggregates.overall_accuracy
        recent_acc = weekly_stats.accuracy if weekly_stats else 0
        margin = self.config.confidence_trend_margin

        trend = "stable"
        if recent_acc > overall_acc + margin:
            trend = "improving"
        elif recent_acc < overall_acc - margin:
            trend = "declining"

        by_difficulty = {
            level: round_half_up(stat.correct / max(stat.total, 1) * 100)
            for level, stat in aggregates.level_stats.items()
        }
        return ConfidenceScores(
            overall=min(100.0, (overall_acc + recent_acc) / 2),
            trend=trend,
            by_difficulty=by_difficulty,
        )

    def _overall_weaknesses(
        self,
        concepts: dict[str, ConceptWeakness],
        categories: dict[str, CategoryWeakness],
    ) -> list[Weakness]:
        weaknesses: list[Weakness] = []
        for name, data in concepts.items():
            if not data.is_weak:
                continue
            weaknesses.append(
                Weakness(
                    type="concept",
                    name=name,
                    severity=self.severity(data.weakness_score),
                    description=f"Low accuracy in {name} ({round_half_up(data.accuracy * 100)}%)",
                    impact=self.impact(name),
                    priority=self.concept_priority(name, data),
                )
            )
        for name, data in categories.items():
            if not data.is_weak:
                continue
            weaknesses.append(
                Weakness(
                    type="category",
                    name=name,
                    severity=self.severity(data.weakness_score),
                    description=(
                        f"Struggling with {name} concepts "
                        f"({round_half_up(data.accuracy * 100)}% accuracy)"
                    ),
                    impact="high",
                    priority=self.category_priority(name, data),
                )
            )
        # Stable sort keeps insertion order for ties.
        return sorted(weaknesses, key=lambda w: w.priority, reverse=True)

    def _recommended_actions(
        self,
        weaknesses: list[Weakness],
        concepts: dict[str, ConceptWeakness],
        categories: dict[str, CategoryWeakness],
    ) -> list[RecommendedAction]:
        actions: list[RecommendedAction] = []
        for weakness in weaknesses:
            if weakness.type != "concept":
                continue
            actions.append(
                RecommendedAction(
                    type="practice",
                    concept=weakness.name,
                    action=f"Focus on {weakness.name} with targeted practice",
                    estimated_time="15-30 minutes daily",
                    difficulty=self.graph.difficulty_of(weakness.name).value,
                    priority=weakness.priority,
                    resources=resources_for(weakness.name),
                )
            )
            for prereq in self.graph.prerequisites_of(weakness.name):
                prereq_data = concepts.get(prereq)
                if prereq_data is None or not prereq_data.is_weak:
                    continue
                actions.append(
                    RecommendedAction(
                        type="review",
                        concept=prereq,
                        action=f"Review {prereq} fundamentals before advancing to {weakness.name}",
                        estimated_time="10-20 minutes",
                        difficulty=self.graph.difficulty_of(prereq).value,
                        priority=weakness.priority + 1,
                        reason=f"Prerequisite for {weakness.name}",
                    )
                )

        for name, data in categories.items():
            if not data.is_weak:
                continue
            actions.append(
                RecommendedAction(
                    type="category-focus",
                    category=name,
                    action=f"Intensive {name} practice session",
                    estimated_time="45-60 minutes",
                    difficulty="mixed",
                    priority=self.category_priority(name, data),
                    concepts=data.concepts[: self.config.category_focus_concepts],
                )
            )

        seen: set[str] = set()
        unique: list[RecommendedAction] = []
        for action in sorted(actions, key=lambda a: a.priority, reverse=True):
            if action.dedupe_key in seen:
                continue
            seen.add(action.dedupe_key)
            unique.append(action)
        return unique

    def _learning_path(
        self,
        weaknesses: list[Weakness],
        concepts: dict[str, ConceptWeakness],
        mastery: dict[str, ConceptMasteryInfo],
    ) -> list[LearningPathItem]:
        path: list[LearningPathItem] = []
        processed: set[str] = set()

        for weakness in weaknesses:
            name = weakness.name
            if weakness.type != "concept" or name in processed or name not in concepts:
                continue
            data = concepts[name]
            path.append(
                LearningPathItem(
                    concept=name,
                    type="weakness-focus",
                    title=f"Master {name}",
                    description=(
                        f"Improve your {name} skills from {round_half_up(data.accuracy * 100)}% to 80%+"
                    ),
                    estimated_time="2-3 weeks",
                    difficulty=self.graph.difficulty_of(name).value,
                    priority=self.concept_priority(name, data),
                    prerequisites=self.graph.prerequisites_of(name),
                    milestones=[
                        f"Understand {name} fundamentals",
                        f"Practice basic {name} problems",
                        f"Apply {name} in complex scenarios",
                        "Achieve 80%+ accuracy",
                    ],
                )
            )
            processed.add(name)

        for name, info in mastery.items():
            if name in processed or info.level is MasteryLevel.EXPERT:
                continue
            if info.questions_needed > self.config.progression_window:
                continue
            path.append(
                LearningPathItem(
                    concept=name,
                    type="mastery-progression",
                    title=f"Advance in {name}",
                    description=f"Progress from {info.level.value} to next level",
                    estimated_time="1-2 weeks",
                    difficulty=self.graph.difficulty_of(name).value,
                    priority=self.config.progression_priority,
                    questions_needed=info.questions_needed,
                    current_level=info.level.value,
                    milestones=[
                        f"Complete {info.questions_needed} practice questions",
                        "Maintain 85%+ accuracy",
                        "Advance to next mastery level",
                    ],
                )
            )
            processed.add(name)

        return path[: self.config.path_limit]

    # -------------------------------------------------------------------------
    # Public API
    # -------------------------------------------------------------------------

    def analyze(
        self,
        aggregates: LedgerAggregates,
        weekly_stats: WeeklyStats | None = None,
        now: datetime | None = None,
    ) -> WeaknessReport:
        """
        Build a weakness report from ledger aggregates.

        Args:
            aggregates: Snapshot from ``AnswerLedger.get_aggregates()``
            weekly_stats: Optional weekly breakdown for the confidence trend
            now: Timestamp override for the report

        Returns:
            WeaknessReport (also kept as ``last_report``)
        """
        concepts = self._concept_performance(aggregates)
        categories = self._category_performance(concepts)
        mastery = self._mastery_levels(concepts)
        confidence = self._confidence_scores(aggregates, weekly_stats)
        weaknesses = self._overall_weaknesses(concepts, categories)

        report = WeaknessReport(
            timestamp=(now or datetime.now()).isoformat(),
            concept_weaknesses=concepts,
            category_weaknesses=categories,
            mastery_levels=mastery,
            confidence_scores=confidence,
            overall_weaknesses=weaknesses,
            recommended_actions=self._recommended_actions(weaknesses, concepts, categories),
            learning_path=self._learning_path(weaknesses, concepts, mastery),
        )
        self._last_report = report

        logger.debug(
            f"Weakness analysis: {len(concepts)} concepts, {len(weaknesses)} weaknesses"
        )
        if self.store is not None:
            self._update_profiles(report)
        return report

    def get_targeted_topics(self, limit: int = 5) -> list[TargetedTopic]:
        """Top weaknesses from the last report as selector targets."""
        if self._last_report is None or limit <= 0:
            return []
        return [
            TargetedTopic(
                topic=w.name,
                priority=w.priority,
                difficulty=self.graph.difficulty_of(w.name).value,
                reason=w.description,
            )
            for w in self._last_report.overall_weaknesses[:limit]
        ]

    def get_summary(self) -> dict[str, Any] | None:
        """Compact view of the last report, None before the first analysis."""
        report = self._last_report
        if report is None:
            return None
        return {
            "total_weaknesses": len(report.overall_weaknesses),
            "critical_weaknesses": sum(
                1 for w in report.overall_weaknesses if w.severity is Severity.CRITICAL
            ),
            "top_weaknesses": report.overall_weaknesses[:3],
            "recommended_actions": report.recommended_actions[:3],
            "overall_confidence": report.confidence_scores.overall,
            "last_updated": report.timestamp,
        }

    # -------------------------------------------------------------------------
    # Daily profiles
    # -------------------------------------------------------------------------

    def _update_profiles(self, report: WeaknessReport) -> None:
        profiles = self.store.get(self.PROFILES_KEY, {})
        if not isinstance(profiles, dict):
            logger.warning("Resetting malformed weakness profiles")
            profiles = {}

        report_day = datetime.fromisoformat(report.timestamp).date()
        profiles[report_day.isoformat()] = {
            "timestamp": report.timestamp,
            "weakness_count": len(report.overall_weaknesses),
            "top_weaknesses": [w.to_dict() for w in report.overall_weaknesses[:5]],
            "mastery_distribution": report.mastery_distribution(),
            "overall_confidence": report.confidence_scores.overall,
        }

        cutoff = report_day - timedelta(days=self.profile_days)
        for day in list(profiles):
            try:
                expired = date.fromisoformat(day) < cutoff
            except ValueError:
                expired = True
            if expired:
                del profiles[day]

        self.store.set(self.PROFILES_KEY, profiles)

    def profiles(self) -> dict[str, dict]:
        if self.store is None:
            return {}
        profiles = self.store.get(self.PROFILES_KEY, {})
        return profiles if isinstance(profiles, dict) else {}

    def clear(self) -> None:
        self._last_report = None
        if self.store is not None:
            self.store.delete(self.PROFILES_KEY)
