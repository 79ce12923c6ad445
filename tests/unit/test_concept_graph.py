"""
Unit tests for the concept graph and topic normalization.
"""

import pytest

from learnloop.core.concept_graph import (
    Concept,
    ConceptGraph,
    Difficulty,
    normalize_topic,
    slugify,
)


@pytest.fixture
def graph():
    return ConceptGraph()


class TestNormalizeTopic:
    @pytest.mark.parametrize(
        "topic,concept",
        [
            ("Database", "sql-basics"),
            ("databases", "sql-basics"),
            ("oops", "classes"),
            ("  Python ", "programming-fundamentals"),
            ("Linked Lists", "linked-lists"),
            ("arrays", "arrays"),
        ],
    )
    def test_known_and_slugged_topics(self, topic, concept):
        assert normalize_topic(topic) == concept

    def test_slugify_collapses_whitespace(self):
        assert slugify("  Dynamic   Programming ") == "dynamic-programming"


class TestLookups:
    def test_known_concept(self, graph):
        assert graph.category_of("arrays") == "data-structures"
        assert graph.difficulty_of("dynamic-programming") is Difficulty.ADVANCED
        assert graph.weight_of("recursion") == 1.9

    def test_unknown_concept_defaults(self, graph):
        assert graph.category_of("quantum-computing") == "general"
        assert graph.difficulty_of("quantum-computing") is Difficulty.INTERMEDIATE
        assert graph.weight_of("quantum-computing") == 1.0
        assert graph.prerequisites_of("quantum-computing") == []

    def test_prerequisites_and_dependents(self, graph):
        assert graph.prerequisites_of("trees") == ["linked-lists", "recursion"]
        assert "recursion" in graph.dependents_of("functions")

    def test_categories(self, graph):
        assert set(graph.categories()) == {
            "fundamentals",
            "data-structures",
            "algorithms",
            "oop",
            "database",
            "system-design",
        }
        assert "joins" in graph.concepts_in("database")


class TestAncestors:
    def test_transitive_prerequisites(self, graph):
        ancestors = graph.ancestors("trees")
        assert ancestors[:2] == ["linked-lists", "recursion"]
        assert "functions" in ancestors
        assert "trees" not in ancestors

    def test_cycle_terminates(self):
        cyclic = ConceptGraph(
            [
                Concept("a", "general", Difficulty.BEGINNER, 1.0, prerequisites=("b",)),
                Concept("b", "general", Difficulty.BEGINNER, 1.0, prerequisites=("a", "ghost")),
            ]
        )
        assert cyclic.ancestors("a") == ["b", "ghost"]
