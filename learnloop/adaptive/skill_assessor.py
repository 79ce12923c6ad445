"""
Skill Assessor.

Rolls ledger counters (and optionally a weakness report) up the competency
tree in ``skill_tree``:

    topic -> skill tags -> subcategory (mean) -> category (weighted)
          -> overall score (weighted, rounded)

and derives an experience level, certifications, interview readiness,
benchmark gaps, strengths / weaknesses and recommendations from the result.
"""

from __future__ import annotations

import math
import uuid
from dataclasses import asdict, dataclass, field
from datetime import datetime
from typing import Any

from loguru import logger

from learnloop.adaptive import skill_tree
from learnloop.adaptive.skill_tree import (
    BENCHMARKS,
    BEGINNER_LEVEL,
    BEGINNER_NAME,
    CATEGORY_KEYS,
    CERTIFICATIONS,
    COMPANY_BLENDS,
    FRONTEND_FACTOR,
    IMPROVEMENT_ACTIONS,
    IMPROVEMENT_TIME,
    ROLE_BLENDS,
    SKILL_TREE,
    Benchmark,
)
from learnloop.adaptive.weakness_analyzer import WeaknessReport
from learnloop.core.scoring import round_half_up, weighted_mean
from learnloop.delivery.state_store import StateStore
from learnloop.study.answer_ledger import LedgerAggregates

PRIORITY_ORDER = {"high": 3, "medium": 2, "low": 1}

# =============================================================================
# Configuration
# =============================================================================


@dataclass
class SkillScoringConfig:
    accuracy_share: float = 0.7
    time_share: float = 0.3
    optimal_seconds: float = 30.0
    seconds_penalty: float = 2.0  # points lost per second over optimal
    confidence_multipliers: dict[str, float] = field(
        default_factory=lambda: {"low": 0.8, "medium": 1.0, "high": 1.1}
    )
    count_bonus_per_question: float = 0.5
    count_bonus_cap: float = 10.0
    weak_concept_penalty: float = 0.9
    interview_prep_threshold: float = 75.0


# =============================================================================
# Data Classes
# =============================================================================


@dataclass
class SkillScore:
    accuracy: float
    response_time_ms: float
    questions_answered: int
    confidence: str
    score: float
    sources: list[str] = field(default_factory=list)


@dataclass
class GroupScore:
    """Score of a subcategory or category."""

    score: float
    member_count: int  # skills (subcategory) or subcategories (category)
    total_questions: int
    confidence: str


@dataclass
class ExperienceLevel:
    level: str
    name: str
    confidence: str


@dataclass
class InterviewReadiness:
    overall: float
    by_company: dict[str, int]
    by_role: dict[str, int]
    estimated_success_rate: int
    recommendations: list[str]


@dataclass
class SkillFinding:
    """A strength or weakness at category / subcategory / skill granularity."""

    type: str
    name: str
    score: float
    description: str
    level: str | None = None  # strengths
    severity: str | None = None  # weaknesses
    impact: str | None = None


@dataclass
class Recommendation:
    type: str  # improvement | progression | interview-prep
    priority: str  # high | medium | low
    category: str
    title: str
    description: str
    estimated_time: str
    actions: list[str]


@dataclass
class Certification:
    level: str
    name: str
    badge: str
    description: str
    earned_date: str
    score: int


@dataclass
class CategoryGap:
    current: float
    required: float
    gap: float
    meets: bool


@dataclass
class BenchmarkComparison:
    name: str
    salary_min: int
    salary_max: int
    common_roles: list[str]
    gaps: dict[str, CategoryGap]
    overall_gap: float
    categories_met: int
    total_categories: int

    @property
    def readiness(self) -> float:
        return self.categories_met / self.total_categories if self.total_categories else 0.0


@dataclass
class Assessment:
    id: str
    timestamp: str
    data_quality: str
    skill_scores: dict[str, SkillScore]
    subcategory_scores: dict[str, GroupScore]
    category_scores: dict[str, GroupScore]
    overall_score: int
    experience_level: ExperienceLevel
    interview_readiness: InterviewReadiness
    strengths: list[SkillFinding]
    weaknesses: list[SkillFinding]
    recommendations: list[Recommendation]
    certifications: list[Certification]
    benchmark_comparison: dict[str, BenchmarkComparison]
    confidence_level: str
    type: str = "comprehensive"

    def category_score(self, key: str) -> float:
        """Score of a category, 0 when it has no data."""
        group = self.category_scores.get(key)
        return group.score if group else 0.0

    @property
    def highest_certification(self) -> Certification | None:
        return self.certifications[-1] if self.certifications else None

    def to_dict(self) -> dict:
        data = asdict(self)
        for key, comparison in self.benchmark_comparison.items():
            data["benchmark_comparison"][key]["readiness"] = comparison.readiness
        return data


# =============================================================================
# Assessor
# =============================================================================


def _confidence_rollup(confidences: list[str], high_share: float, medium_share: float) -> str:
    if not confidences:
        return "low"
    high = confidences.count("high")
    medium = confidences.count("medium")
    if high >= len(confidences) * high_share:
        return "high"
    if high + medium >= len(confidences) * medium_share:
        return "medium"
    return "low"


def compute_overall_score(category_scores: dict[str, float]) -> int:
    """
    Weight-normalized mean of the categories present, rounded half up.

    Example:
        {tech: 90, problem: 85, coding: 80, communication: 75} -> 85
    """
    pairs = [
        (category_scores[cat.key], cat.weight) for cat in SKILL_TREE if cat.key in category_scores
    ]
    mean = weighted_mean(pairs)
    return round_half_up(mean) if mean is not None else 0


class SkillAssessor:
    """
    Competency assessment over ledger aggregates.

    ``assess`` is deterministic for the same inputs apart from the id and
    timestamp. Results are appended to a bounded history in the store
    under ``assessments``.
    """

    HISTORY_KEY = "assessments"

    def __init__(
        self,
        config: SkillScoringConfig | None = None,
        store: StateStore | None = None,
        history_limit: int = 10,
    ):
        self.config = config or SkillScoringConfig()
        self.store = store
        self.history_limit = history_limit
        self._last: Assessment | None = None
        self._memory_history: list[dict] = []

    # -------------------------------------------------------------------------
    # Skill scores
    # -------------------------------------------------------------------------

    def skill_confidence(self, count: int, accuracy: float) -> str:
        if count < 3:
            return "low"
        if count < 8:
            return "medium"
        return "high" if accuracy >= 0.8 else "medium"

    def final_skill_score(self, accuracy: float, response_time_ms: float, confidence: str, count: int) -> int:
        """
        score = min(100, round((acc*100*0.7 + time_score*0.3) * multiplier + count_bonus))

        time_score = max(0, 100 - (seconds - 30) * 2), so answers at or under
        30s score 100 or more before the clamp.
        """
        cfg = self.config
        base = accuracy * 100
        time_score = max(0.0, 100 - (response_time_ms / 1000 - cfg.optimal_seconds) * cfg.seconds_penalty)
        count_bonus = min(cfg.count_bonus_cap, count * cfg.count_bonus_per_question)
        raw = (base * cfg.accuracy_share + time_score * cfg.time_share) * cfg.confidence_multipliers[
            confidence
        ] + count_bonus
        return min(100, round_half_up(raw))

    def _skill_scores(
        self, aggregates: LedgerAggregates, weakness_report: WeaknessReport | None
    ) -> dict[str, SkillScore]:
        totals: dict[str, list] = {}
        for topic, stat in aggregates.topic_stats.items():
            if stat.total <= 0:
                continue
            for skill in skill_tree.map_topic_to_skills(topic):
                entry = totals.setdefault(skill, [0, 0, 0, []])
                entry[0] += stat.correct
                entry[1] += stat.total
                entry[2] += stat.total_time_ms
                entry[3].append(topic)

        scores: dict[str, SkillScore] = {}
        for skill, (correct, total, time_ms, sources) in totals.items():
            accuracy = correct / total
            avg_time = time_ms / total
            confidence = self.skill_confidence(total, accuracy)
            scores[skill] = SkillScore(
                accuracy=accuracy,
                response_time_ms=avg_time,
                questions_answered=total,
                confidence=confidence,
                score=self.final_skill_score(accuracy, avg_time, confidence, total),
                sources=sources,
            )

        if weakness_report is not None:
            for concept in weakness_report.weak_concepts:
                if concept in scores:
                    scores[concept].score *= self.config.weak_concept_penalty
                    scores[concept].confidence = "low"
        return scores

    def _subcategory_scores(self, skills: dict[str, SkillScore]) -> dict[str, GroupScore]:
        result: dict[str, GroupScore] = {}
        for cat in SKILL_TREE:
            for sub in cat.subcategories:
                present = [skills[s] for s in sub.skills if s in skills]
                if not present:
                    continue
                confidences = [skills[s].confidence if s in skills else "low" for s in sub.skills]
                result[sub.key] = GroupScore(
                    score=math.fsum(s.score for s in present) / len(present),
                    member_count=len(present),
                    total_questions=sum(s.questions_answered for s in present),
                    confidence=_confidence_rollup(confidences, 0.6, 0.7),
                )
        return result

    def _category_scores(self, subcategories: dict[str, GroupScore]) -> dict[str, GroupScore]:
        result: dict[str, GroupScore] = {}
        for cat in SKILL_TREE:
            pairs = [
                (subcategories[sub.key].score, sub.weight)
                for sub in cat.subcategories
                if sub.key in subcategories
            ]
            mean = weighted_mean(pairs)
            if mean is None:
                continue
            confidences = [
                subcategories[sub.key].confidence if sub.key in subcategories else "low"
                for sub in cat.subcategories
            ]
            result[cat.key] = GroupScore(
                score=mean,
                member_count=len(pairs),
                total_questions=sum(
                    subcategories[sub.key].total_questions
                    for sub in cat.subcategories
                    if sub.key in subcategories
                ),
                confidence=_confidence_rollup(confidences, 0.5, 0.6),
            )
        return result

    # -------------------------------------------------------------------------
    # Levels, certifications, benchmarks
    # -------------------------------------------------------------------------

    @staticmethod
    def _padded(category_scores: dict[str, GroupScore]) -> dict[str, float]:
        return {key: category_scores[key].score if key in category_scores else 0.0 for key in CATEGORY_KEYS}

    @staticmethod
    def _level_confidence(scores: dict[str, float], requirements: dict[str, float]) -> str:
        gaps = [max(0.0, required - scores.get(cat, 0.0)) for cat, required in requirements.items()]
        avg_gap = sum(gaps) / len(gaps)
        if avg_gap <= 5:
            return "high"
        if avg_gap <= 15:
            return "medium"
        return "low"

    def experience_level(self, category_scores: dict[str, GroupScore]) -> ExperienceLevel:
        """Highest benchmark whose every category minimum is met, else beginner."""
        scores = self._padded(category_scores)
        for benchmark in reversed(BENCHMARKS):
            if all(scores[cat] >= required for cat, required in benchmark.requirements.items()):
                return ExperienceLevel(
                    level=benchmark.key,
                    name=benchmark.name,
                    confidence=self._level_confidence(scores, benchmark.requirements),
                )
        return ExperienceLevel(level=BEGINNER_LEVEL, name=BEGINNER_NAME, confidence="low")

    def certifications(
        self, overall: int, category_scores: dict[str, GroupScore], now: str
    ) -> list[Certification]:
        """Every tier whose requirements are met, lowest first."""
        earned = []
        for cert in CERTIFICATIONS:
            if overall < cert.overall:
                continue
            if any(
                cat not in category_scores or category_scores[cat].score < required
                for cat, required in cert.categories.items()
            ):
                continue
            earned.append(
                Certification(
                    level=cert.key,
                    name=cert.name,
                    badge=cert.badge,
                    description=cert.description,
                    earned_date=now,
                    score=overall,
                )
            )
        return earned

    def compare_to_benchmarks(self, category_scores: dict[str, GroupScore]) -> dict[str, BenchmarkComparison]:
        scores = self._padded(category_scores)
        comparison = {}
        for benchmark in BENCHMARKS:
            gaps = {}
            for cat, required in benchmark.requirements.items():
                gap = required - scores[cat]
                gaps[cat] = CategoryGap(current=scores[cat], required=required, gap=gap, meets=gap <= 0)
            comparison[benchmark.key] = BenchmarkComparison(
                name=benchmark.name,
                salary_min=benchmark.salary_min,
                salary_max=benchmark.salary_max,
                common_roles=list(benchmark.common_roles),
                gaps=gaps,
                overall_gap=sum(max(0.0, g.gap) for g in gaps.values()),
                categories_met=sum(1 for g in gaps.values() if g.meets),
                total_categories=len(gaps),
            )
        return comparison

    # -------------------------------------------------------------------------
    # Interview readiness
    # -------------------------------------------------------------------------

    @staticmethod
    def balance_bonus(scores: dict[str, float]) -> float:
        """Up to +10 for evenly balanced category scores."""
        values = list(scores.values())
        avg = sum(values) / len(values)
        variance = sum((v - avg) ** 2 for v in values) / len(values)
        return max(0.0, 10 - variance / 10)

    @staticmethod
    def _blend(scores: dict[str, float], weights: dict[str, float]) -> int:
        return round_half_up(math.fsum(scores[cat] * w for cat, w in weights.items()))

    @staticmethod
    def success_rate(overall: int, interview_history: list[dict] | None) -> int:
        base = min(95.0, overall * 0.8 + 20)
        if interview_history:
            recent = interview_history[-5:]
            passed = sum(1 for item in recent if float(item.get("score", 0) or 0) >= 70)
            base += passed / min(5, len(interview_history)) * 10
        return round_half_up(base)

    def interview_readiness(
        self,
        overall: int,
        category_scores: dict[str, GroupScore],
        interview_history: list[dict] | None,
    ) -> InterviewReadiness:
        scores = self._padded(category_scores)

        by_company = {name: self._blend(scores, weights) for name, weights in COMPANY_BLENDS.items()}
        by_role = {
            "frontend": round_half_up(overall * FRONTEND_FACTOR),
            "backend": self._blend(scores, ROLE_BLENDS["backend"]),
            "fullstack": overall,
            "data-science": self._blend(scores, ROLE_BLENDS["data-science"]),
        }

        recommendations = []
        weakest = sorted(scores.items(), key=lambda kv: kv[1])[:2]
        for key, score in weakest:
            if score < self.config.interview_prep_threshold:
                cat = skill_tree.category(key)
                recommendations.append(f"Focus on {cat.name} - current score: {round_half_up(score)}%")

        return InterviewReadiness(
            overall=min(100.0, overall + self.balance_bonus(scores)),
            by_company=by_company,
            by_role=by_role,
            estimated_success_rate=self.success_rate(overall, interview_history),
            recommendations=recommendations,
        )

    # -------------------------------------------------------------------------
    # Strengths, weaknesses, recommendations
    # -------------------------------------------------------------------------

    @staticmethod
    def _readable(key: str) -> str:
        return key.replace("-", " ")

    def strengths(
        self,
        skills: dict[str, SkillScore],
        subcategories: dict[str, GroupScore],
        categories: dict[str, GroupScore],
    ) -> list[SkillFinding]:
        found: list[SkillFinding] = []
        for key, group in categories.items():
            if group.score >= 80:
                found.append(
                    SkillFinding(
                        type="category", name=key, score=group.score, level="high",
                        description=f"Strong performance in {skill_tree.category(key).name}",
                    )
                )
        for key, group in subcategories.items():
            located = skill_tree.find_subcategory(key)
            if group.score >= 85 and located:
                found.append(
                    SkillFinding(
                        type="subcategory", name=key, score=group.score, level="high",
                        description=f"Excellent {located[1].name} skills",
                    )
                )
        for key, skill in skills.items():
            if skill.score >= 90 and skill.confidence != "low":
                found.append(
                    SkillFinding(
                        type="skill", name=key, score=skill.score, level="expert",
                        description=f"Mastery of {self._readable(key)}",
                    )
                )
        return sorted(found, key=lambda f: f.score, reverse=True)[:10]

    def weaknesses(
        self,
        skills: dict[str, SkillScore],
        subcategories: dict[str, GroupScore],
        categories: dict[str, GroupScore],
    ) -> list[SkillFinding]:
        found: list[SkillFinding] = []
        for key, group in categories.items():
            if group.score < 60:
                found.append(
                    SkillFinding(
                        type="category", name=key, score=group.score,
                        severity="critical" if group.score < 40 else "high", impact="high",
                        description=f"Needs improvement in {skill_tree.category(key).name}",
                    )
                )
        for key, group in subcategories.items():
            located = skill_tree.find_subcategory(key)
            if group.score < 65 and located:
                found.append(
                    SkillFinding(
                        type="subcategory", name=key, score=group.score,
                        severity="critical" if group.score < 45 else "medium", impact="medium",
                        description=f"Weak {located[1].name} skills",
                    )
                )
        for key, skill in skills.items():
            if skill.score < 70 and skill.questions_answered >= 3:
                found.append(
                    SkillFinding(
                        type="skill", name=key, score=skill.score,
                        severity="critical" if skill.score < 50 else "low", impact="low",
                        description=f"Needs practice with {self._readable(key)}",
                    )
                )
        return sorted(found, key=lambda f: f.score)[:15]

    def _progression_actions(self, scores: dict[str, float], target: Benchmark) -> list[str]:
        actions = []
        for cat, required in target.requirements.items():
            current = scores[cat]
            if current < required:
                gap = math.ceil(required - current - 1e-9)
                actions.append(f"Improve {skill_tree.category(cat).name} by {gap} points")
        return actions

    def recommendations(
        self,
        weaknesses: list[SkillFinding],
        level: ExperienceLevel,
        readiness: InterviewReadiness,
        category_scores: dict[str, GroupScore],
    ) -> list[Recommendation]:
        recs: list[Recommendation] = []
        for weakness in weaknesses:
            if weakness.severity not in ("critical", "high"):
                continue
            actions = IMPROVEMENT_ACTIONS.get(weakness.name, (f"Practice {self._readable(weakness.name)}",))
            recs.append(
                Recommendation(
                    type="improvement",
                    priority="high" if weakness.severity == "critical" else "medium",
                    category=weakness.type,
                    title=f"Improve {self._readable(weakness.name)}",
                    description=weakness.description,
                    estimated_time=IMPROVEMENT_TIME.get(weakness.severity, "2-4 weeks"),
                    actions=list(actions),
                )
            )

        target = skill_tree.next_benchmark(level.level)
        if target is not None:
            recs.append(
                Recommendation(
                    type="progression",
                    priority="medium",
                    category="career",
                    title=f"Progress to {target.name}",
                    description=f"Focus on key areas to reach {target.name}",
                    estimated_time="3-6 months",
                    actions=self._progression_actions(self._padded(category_scores), target),
                )
            )

        if readiness.overall < self.config.interview_prep_threshold:
            recs.append(
                Recommendation(
                    type="interview-prep",
                    priority="high",
                    category="interview",
                    title="Improve Interview Readiness",
                    description="Focus on areas that will boost your interview performance",
                    estimated_time="2-4 weeks",
                    actions=list(readiness.recommendations),
                )
            )

        return sorted(recs, key=lambda r: PRIORITY_ORDER[r.priority], reverse=True)

    # -------------------------------------------------------------------------
    # Quality / confidence
    # -------------------------------------------------------------------------

    @staticmethod
    def data_quality(aggregates: LedgerAggregates) -> str:
        total = aggregates.total_questions
        topics = len(aggregates.topic_stats)
        if total >= 50 and topics >= 5:
            return "high"
        if total >= 20 and topics >= 3:
            return "medium"
        return "low"

    @staticmethod
    def confidence_level(data_quality: str, category_scores: dict[str, GroupScore]) -> str:
        high = sum(1 for g in category_scores.values() if g.confidence == "high")
        if data_quality == "high" and high >= 3:
            return "high"
        if data_quality == "medium" and high >= 2:
            return "medium"
        return "low"

    # -------------------------------------------------------------------------
    # Public API
    # -------------------------------------------------------------------------

    def assess(
        self,
        aggregates: LedgerAggregates,
        weakness_report: WeaknessReport | None = None,
        interview_history: list[dict] | None = None,
        now: datetime | None = None,
    ) -> Assessment:
        """
        Run a full assessment.

        Args:
            aggregates: Snapshot from ``AnswerLedger.get_aggregates()``
            weakness_report: Latest weakness report; weak concepts lower the
                matching skill scores
            interview_history: Past interview results, each with a ``score``
            now: Timestamp override

        Returns:
            Assessment (also appended to the history)
        """
        now = now or datetime.now()
        stamp = now.isoformat()

        skills = self._skill_scores(aggregates, weakness_report)
        subcategories = self._subcategory_scores(skills)
        categories = self._category_scores(subcategories)
        overall = compute_overall_score({k: g.score for k, g in categories.items()})
        level = self.experience_level(categories)
        readiness = self.interview_readiness(overall, categories, interview_history)
        weaknesses = self.weaknesses(skills, subcategories, categories)
        quality = self.data_quality(aggregates)

        assessment = Assessment(
            id=f"{int(now.timestamp() * 1000)}-{uuid.uuid4().hex[:6]}",
            timestamp=stamp,
            data_quality=quality,
            skill_scores=skills,
            subcategory_scores=subcategories,
            category_scores=categories,
            overall_score=overall,
            experience_level=level,
            interview_readiness=readiness,
            strengths=self.strengths(skills, subcategories, categories),
            weaknesses=weaknesses,
            recommendations=self.recommendations(weaknesses, level, readiness, categories),
            certifications=self.certifications(overall, categories, stamp),
            benchmark_comparison=self.compare_to_benchmarks(categories),
            confidence_level=self.confidence_level(quality, categories),
        )

        logger.debug(
            f"Assessment {assessment.id}: overall {overall}, level {level.level}, "
            f"{len(assessment.certifications)} certification(s)"
        )
        self._store(assessment)
        return assessment

    def _store(self, assessment: Assessment) -> None:
        self._last = assessment
        history = self.history()
        history.append(assessment.to_dict())
        history = history[-self.history_limit :] if self.history_limit > 0 else []
        if self.store is not None:
            self.store.set(self.HISTORY_KEY, history)
        else:
            self._memory_history = history

    @property
    def last_assessment(self) -> Assessment | None:
        return self._last

    def latest(self) -> dict[str, Any] | None:
        """Most recent stored assessment as a dict."""
        history = self.history()
        return history[-1] if history else None

    def history(self) -> list[dict[str, Any]]:
        if self.store is None:
            return list(self._memory_history)
        history = self.store.get(self.HISTORY_KEY, [])
        if not isinstance(history, list):
            logger.warning("Ignoring malformed assessment history")
            return []
        return history

    def clear(self) -> None:
        self._last = None
        self._memory_history = []
        if self.store is not None:
            self.store.delete(self.HISTORY_KEY)
