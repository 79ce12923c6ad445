"""
Concept Dependency Graph.

Static table of programming concepts with their category, difficulty,
weight and prerequisite/dependent links. The links are stored as plain id
lists in an id -> Concept arena; they are not guaranteed to form a DAG and
may reference ids that have no entry of their own.

Provides helpers to:
  - look up category / difficulty / weight with defaults for unknown ids
  - map raw question topics onto concept ids
  - walk prerequisites without tripping over cycles
"""

from __future__ import annotations

import re
from collections import deque
from dataclasses import dataclass
from enum import Enum


class Difficulty(str, Enum):
    """Concept difficulty tier."""

    BEGINNER = "beginner"
    INTERMEDIATE = "intermediate"
    ADVANCED = "advanced"


DEFAULT_CATEGORY = "general"
DEFAULT_DIFFICULTY = Difficulty.INTERMEDIATE
DEFAULT_WEIGHT = 1.0


@dataclass(frozen=True)
class Concept:
    """An atomic knowledge unit in the prerequisite graph."""

    id: str
    category: str
    difficulty: Difficulty
    weight: float
    prerequisites: tuple[str, ...] = ()
    dependents: tuple[str, ...] = ()


def _c(
    concept_id: str,
    category: str,
    difficulty: str,
    weight: float,
    prerequisites: list[str],
    dependents: list[str],
) -> Concept:
    return Concept(
        id=concept_id,
        category=category,
        difficulty=Difficulty(difficulty),
        weight=weight,
        prerequisites=tuple(prerequisites),
        dependents=tuple(dependents),
    )


CONCEPTS: tuple[Concept, ...] = (
    # Programming fundamentals
    _c("variables", "fundamentals", "beginner", 1.0, [], ["data-types", "operators", "control-flow"]),
    _c("data-types", "fundamentals", "beginner", 1.2, ["variables"], ["arrays", "strings", "objects"]),
    _c("control-flow", "fundamentals", "beginner", 1.3, ["variables", "operators"], ["loops", "conditionals", "functions"]),
    _c("functions", "fundamentals", "intermediate", 1.5, ["control-flow"], ["recursion", "higher-order-functions", "closures"]),
    # Data structures
    _c("arrays", "data-structures", "beginner", 1.4, ["data-types"], ["sorting", "searching", "dynamic-arrays"]),
    _c("linked-lists", "data-structures", "intermediate", 1.6, ["pointers", "objects"], ["stacks", "queues", "trees"]),
    _c("stacks", "data-structures", "intermediate", 1.5, ["arrays", "linked-lists"], ["recursion", "expression-evaluation"]),
    _c("queues", "data-structures", "intermediate", 1.5, ["arrays", "linked-lists"], ["bfs", "scheduling"]),
    _c("trees", "data-structures", "intermediate", 1.7, ["linked-lists", "recursion"], ["binary-trees", "bst", "heaps"]),
    _c("binary-trees", "data-structures", "intermediate", 1.6, ["trees"], ["tree-traversal", "bst"]),
    _c("hash-tables", "data-structures", "intermediate", 1.8, ["arrays", "functions"], ["sets", "maps", "caching"]),
    # Algorithms
    _c("sorting", "algorithms", "intermediate", 1.6, ["arrays", "comparison"], ["merge-sort", "quick-sort", "heap-sort"]),
    _c("searching", "algorithms", "beginner", 1.3, ["arrays"], ["binary-search", "hash-search"]),
    _c("recursion", "algorithms", "intermediate", 1.9, ["functions", "base-cases"], ["divide-conquer", "dynamic-programming", "backtracking"]),
    _c("dynamic-programming", "algorithms", "advanced", 2.2, ["recursion", "memoization"], ["optimization", "longest-subsequence"]),
    _c("graph-algorithms", "algorithms", "advanced", 2.0, ["graphs", "queues", "stacks"], ["dfs", "bfs", "shortest-path"]),
    # Object-oriented programming
    _c("classes", "oop", "intermediate", 1.5, ["objects", "functions"], ["inheritance", "encapsulation", "polymorphism"]),
    _c("inheritance", "oop", "intermediate", 1.6, ["classes"], ["polymorphism", "abstract-classes"]),
    _c("polymorphism", "oop", "advanced", 1.8, ["inheritance"], ["interfaces", "method-overriding"]),
    _c("encapsulation", "oop", "intermediate", 1.4, ["classes"], ["access-modifiers", "getters-setters"]),
    # Databases
    _c("sql-basics", "database", "beginner", 1.3, ["tables", "queries"], ["joins", "subqueries", "indexing"]),
    _c("joins", "database", "intermediate", 1.7, ["sql-basics", "relationships"], ["complex-queries", "optimization"]),
    _c("normalization", "database", "intermediate", 1.6, ["tables", "relationships"], ["database-design", "performance"]),
    _c("indexing", "database", "intermediate", 1.5, ["sql-basics"], ["query-optimization", "performance"]),
    # System design
    _c("scalability", "system-design", "advanced", 2.1, ["architecture", "performance"], ["load-balancing", "caching", "microservices"]),
    _c("caching", "system-design", "intermediate", 1.7, ["performance", "memory"], ["redis", "cdn", "database-caching"]),
    _c("load-balancing", "system-design", "advanced", 1.9, ["scalability", "networking"], ["high-availability", "fault-tolerance"]),
    _c("microservices", "system-design", "advanced", 2.0, ["apis", "distributed-systems"], ["service-mesh", "containerization"]),
)

# Raw question topics that name a broader area than a single concept.
TOPIC_CONCEPT_MAP: dict[str, str] = {
    "java": "oop",
    "python": "programming-fundamentals",
    "javascript": "programming-fundamentals",
    "oop": "classes",
    "oops": "classes",
    "database": "sql-basics",
    "databases": "sql-basics",
    "algorithms": "sorting",
    "ai": "machine-learning",
    "web-development": "frontend",
    "system-design": "scalability",
}

_WHITESPACE = re.compile(r"\s+")


def slugify(topic: str) -> str:
    """Lower-case a topic and join whitespace runs with '-'."""
    return _WHITESPACE.sub("-", topic.strip().lower())


def normalize_topic(topic: str) -> str:
    """
    Map a raw question topic to a canonical concept id.

    Example:
        normalize_topic("Database")      -> "sql-basics"
        normalize_topic("Linked Lists")  -> "linked-lists"
    """
    key = topic.strip().lower()
    return TOPIC_CONCEPT_MAP.get(key) or slugify(topic)


class ConceptGraph:
    """
    Directed concept graph stored as an id -> Concept arena.

    Edges are looked up by id, so cycles and dangling references are safe.
    """

    def __init__(self, concepts: tuple[Concept, ...] | list[Concept] = CONCEPTS):
        self._concepts: dict[str, Concept] = {c.id: c for c in concepts}

    def __contains__(self, concept_id: str) -> bool:
        return concept_id in self._concepts

    def __len__(self) -> int:
        return len(self._concepts)

    def get(self, concept_id: str) -> Concept | None:
        return self._concepts.get(concept_id)

    def all_ids(self) -> list[str]:
        """Return all concept ids defined in the graph."""
        return list(self._concepts)

    def category_of(self, concept_id: str) -> str:
        concept = self._concepts.get(concept_id)
        return concept.category if concept else DEFAULT_CATEGORY

    def difficulty_of(self, concept_id: str) -> Difficulty:
        concept = self._concepts.get(concept_id)
        return concept.difficulty if concept else DEFAULT_DIFFICULTY

    def weight_of(self, concept_id: str) -> float:
        concept = self._concepts.get(concept_id)
        return concept.weight if concept else DEFAULT_WEIGHT

    def prerequisites_of(self, concept_id: str) -> list[str]:
        """
        Return the direct prerequisites for a concept.

        Example:
            prerequisites_of("trees") -> ["linked-lists", "recursion"]
        """
        concept = self._concepts.get(concept_id)
        return list(concept.prerequisites) if concept else []

    def dependents_of(self, concept_id: str) -> list[str]:
        concept = self._concepts.get(concept_id)
        return list(concept.dependents) if concept else []

    def concepts_in(self, category: str) -> list[str]:
        return [c.id for c in self._concepts.values() if c.category == category]

    def categories(self) -> list[str]:
        seen: dict[str, None] = {}
        for concept in self._concepts.values():
            seen.setdefault(concept.category, None)
        return list(seen)

    def ancestors(self, concept_id: str) -> list[str]:
        """
        All transitive prerequisites in breadth-first order.

        The start node is never included, even when a cycle leads back to it.
        """
        visited = {concept_id}
        order: list[str] = []
        queue = deque(self.prerequisites_of(concept_id))
        while queue:
            current = queue.popleft()
            if current in visited:
                continue
            visited.add(current)
            order.append(current)
            queue.extend(self.prerequisites_of(current))
        return order
