"""
Core primitives shared by every layer.

- Question: validated multiple-choice question model
- ConceptGraph: topic -> concept mapping with prerequisites and difficulty
- MasteryLevel: novice .. expert thresholds
- scoring: half-up rounding and percentage helpers
- errors: LearnLoopError hierarchy
"""

from .concept_graph import ConceptGraph, normalize_topic
from .errors import (
    InterviewNotActive,
    InvalidQuestionId,
    LearnLoopError,
    NoQuestionsAvailable,
    ProviderAuthError,
    ProviderError,
    ProviderFormatError,
    ProviderNetworkError,
    ProviderQuotaError,
    UnknownProfile,
)
from .mastery import MasteryLevel
from .question import Question

__all__ = [
    "ConceptGraph",
    "normalize_topic",
    "MasteryLevel",
    "Question",
    # Errors
    "LearnLoopError",
    "ProviderError",
    "ProviderAuthError",
    "ProviderQuotaError",
    "ProviderNetworkError",
    "ProviderFormatError",
    "NoQuestionsAvailable",
    "InvalidQuestionId",
    "UnknownProfile",
    "InterviewNotActive",
]
