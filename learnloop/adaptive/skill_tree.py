"""
Static competency tables for the skill assessor.

- SKILL_TREE: 4 weighted categories -> weighted subcategories -> skill tags
- BENCHMARKS: industry experience tiers with per-category minimums
- CERTIFICATIONS: cumulative bronze -> platinum tiers
- TOPIC_SKILLS: raw question topic -> skill tags
"""

from __future__ import annotations

from dataclasses import dataclass

from learnloop.core.concept_graph import slugify


@dataclass(frozen=True)
class SkillSubcategory:
    key: str
    name: str
    weight: float
    skills: tuple[str, ...]


@dataclass(frozen=True)
class SkillCategory:
    key: str
    name: str
    weight: float
    subcategories: tuple[SkillSubcategory, ...]


@dataclass(frozen=True)
class Benchmark:
    key: str
    name: str
    requirements: dict[str, float]
    salary_min: int
    salary_max: int
    common_roles: tuple[str, ...]


@dataclass(frozen=True)
class CertificationLevel:
    key: str
    name: str
    overall: float
    categories: dict[str, float]
    badge: str
    description: str


def _sub(key: str, name: str, weight: float, *skills: str) -> SkillSubcategory:
    return SkillSubcategory(key=key, name=name, weight=weight, skills=skills)


SKILL_TREE: tuple[SkillCategory, ...] = (
    SkillCategory(
        "technical-skills",
        "Technical Skills",
        0.40,
        (
            _sub("programming-fundamentals", "Programming Fundamentals", 0.25,
                 "variables", "data-types", "control-flow", "functions", "error-handling"),
            _sub("data-structures", "Data Structures", 0.25,
                 "arrays", "linked-lists", "stacks", "queues", "trees", "graphs", "hash-tables"),
            _sub("algorithms", "Algorithms", 0.25,
                 "sorting", "searching", "recursion", "dynamic-programming", "greedy", "graph-algorithms"),
            _sub("system-design", "System Design", 0.25,
                 "scalability", "load-balancing", "caching", "databases", "microservices", "apis"),
        ),
    ),
    SkillCategory(
        "problem-solving",
        "Problem Solving",
        0.25,
        (
            _sub("analytical-thinking", "Analytical Thinking", 0.4,
                 "problem-decomposition", "pattern-recognition", "logical-reasoning"),
            _sub("optimization", "Optimization", 0.3,
                 "time-complexity", "space-complexity", "performance-tuning"),
            _sub("debugging", "Debugging", 0.3,
                 "error-identification", "root-cause-analysis", "testing-strategies"),
        ),
    ),
    SkillCategory(
        "coding-proficiency",
        "Coding Proficiency",
        0.20,
        (
            _sub("code-quality", "Code Quality", 0.4,
                 "clean-code", "readability", "maintainability", "documentation"),
            _sub("best-practices", "Best Practices", 0.3,
                 "design-patterns", "solid-principles", "code-review", "version-control"),
            _sub("testing", "Testing", 0.3,
                 "unit-testing", "integration-testing", "test-driven-development"),
        ),
    ),
    SkillCategory(
        "communication",
        "Communication",
        0.15,
        (
            _sub("technical-communication", "Technical Communication", 0.6,
                 "explaining-solutions", "code-walkthrough", "technical-writing"),
            _sub("collaboration", "Collaboration", 0.4,
                 "teamwork", "code-review-participation", "knowledge-sharing"),
        ),
    ),
)

CATEGORY_KEYS: tuple[str, ...] = tuple(c.key for c in SKILL_TREE)


def _requirements(tech: float, problem: float, coding: float, comm: float) -> dict[str, float]:
    return dict(zip(CATEGORY_KEYS, (tech, problem, coding, comm)))


# Ordered lowest -> highest.
BENCHMARKS: tuple[Benchmark, ...] = (
    Benchmark(
        "entry-level", "Entry Level (0-2 years)", _requirements(60, 55, 50, 45),
        50000, 75000, ("Junior Developer", "Software Engineer I", "Associate Developer"),
    ),
    Benchmark(
        "mid-level", "Mid Level (2-5 years)", _requirements(75, 70, 70, 65),
        75000, 120000, ("Software Engineer II", "Full Stack Developer", "Backend Developer"),
    ),
    Benchmark(
        "senior-level", "Senior Level (5-8 years)", _requirements(85, 80, 80, 75),
        120000, 180000, ("Senior Software Engineer", "Tech Lead", "Principal Engineer"),
    ),
    Benchmark(
        "expert-level", "Expert Level (8+ years)", _requirements(90, 85, 85, 80),
        180000, 300000, ("Staff Engineer", "Principal Engineer", "Engineering Manager"),
    ),
)

BEGINNER_LEVEL = "beginner"
BEGINNER_NAME = "Beginner (< 1 year)"

CERTIFICATIONS: tuple[CertificationLevel, ...] = (
    CertificationLevel(
        "bronze", "Bronze Certification", 60, {"technical-skills": 55},
        "🥉", "Demonstrates basic programming competency",
    ),
    CertificationLevel(
        "silver", "Silver Certification", 75, {"technical-skills": 70, "problem-solving": 65},
        "🥈", "Shows solid intermediate programming skills",
    ),
    CertificationLevel(
        "gold", "Gold Certification", 85,
        {"technical-skills": 80, "problem-solving": 75, "coding-proficiency": 75},
        "🥇", "Indicates advanced programming expertise",
    ),
    CertificationLevel(
        "platinum", "Platinum Certification", 90,
        {"technical-skills": 85, "problem-solving": 80, "coding-proficiency": 80, "communication": 75},
        "💎", "Represents expert-level programming mastery",
    ),
)

TOPIC_SKILLS: dict[str, tuple[str, ...]] = {
    "java": ("programming-fundamentals", "oop", "classes", "inheritance"),
    "python": ("programming-fundamentals", "data-types", "functions"),
    "javascript": ("programming-fundamentals", "functions", "closures"),
    "oop": ("classes", "inheritance", "polymorphism", "encapsulation"),
    "database": ("sql-basics", "joins", "normalization", "indexing"),
    "algorithms": ("sorting", "searching", "recursion", "dynamic-programming"),
    "ai": ("machine-learning", "data-analysis", "statistics"),
    "system-design": ("scalability", "load-balancing", "caching", "microservices"),
}

IMPROVEMENT_ACTIONS: dict[str, tuple[str, ...]] = {
    "technical-skills": (
        "Practice coding problems daily",
        "Study data structures and algorithms",
        "Build projects to apply concepts",
    ),
    "problem-solving": (
        "Solve algorithmic challenges",
        "Practice breaking down complex problems",
        "Learn problem-solving patterns",
    ),
    "coding-proficiency": (
        "Focus on code quality and best practices",
        "Practice code reviews",
        "Learn design patterns",
    ),
    "communication": (
        "Practice explaining technical concepts",
        "Join coding communities",
        "Present your projects",
    ),
}

IMPROVEMENT_TIME: dict[str, str] = {
    "critical": "4-8 weeks",
    "high": "2-4 weeks",
    "medium": "1-3 weeks",
    "low": "1-2 weeks",
}

# Linear blends of category scores per company / role archetype.
COMPANY_BLENDS: dict[str, dict[str, float]] = {
    "startup": {"coding-proficiency": 0.4, "problem-solving": 0.4, "communication": 0.2},
    "big-tech": {"technical-skills": 0.5, "problem-solving": 0.3, "coding-proficiency": 0.2},
    "enterprise": {"technical-skills": 0.3, "coding-proficiency": 0.3, "communication": 0.4},
    "consulting": {"problem-solving": 0.4, "communication": 0.4, "technical-skills": 0.2},
}

ROLE_BLENDS: dict[str, dict[str, float]] = {
    "backend": {"technical-skills": 0.6, "problem-solving": 0.4},
    "data-science": {"problem-solving": 0.5, "technical-skills": 0.5},
}
# frontend = overall * 0.9, fullstack = overall
FRONTEND_FACTOR = 0.9


def map_topic_to_skills(topic: str) -> tuple[str, ...]:
    """Skill tags exercised by a question topic; unknown topics map to their slug."""
    return TOPIC_SKILLS.get(topic.strip().lower()) or (slugify(topic),)


def category(key: str) -> SkillCategory | None:
    return next((c for c in SKILL_TREE if c.key == key), None)


def find_subcategory(key: str) -> tuple[SkillCategory, SkillSubcategory] | None:
    for cat in SKILL_TREE:
        for sub in cat.subcategories:
            if sub.key == key:
                return cat, sub
    return None


def next_benchmark(level: str) -> Benchmark | None:
    """The tier above ``level``; entry-level for beginners, None at expert."""
    if level == BEGINNER_LEVEL:
        return BENCHMARKS[0]
    keys = [b.key for b in BENCHMARKS]
    if level not in keys:
        return None
    index = keys.index(level)
    return BENCHMARKS[index + 1] if index + 1 < len(BENCHMARKS) else None
