"""
Error taxonomy shared by the selector, providers and the CLI.

Provider errors are recoverable: the question selector turns each one into
the next fallback tier. NoQuestionsAvailable ends a single request, and
InvalidQuestionId is a caller error that is reported, never retried.
"""

from __future__ import annotations


class LearnLoopError(Exception):
    """Base class for all learnloop errors."""


class ProviderError(LearnLoopError):
    """A question provider failed to produce a usable question."""

    def __init__(self, message: str, provider: str = "unknown"):
        super().__init__(message)
        self.provider = provider


class ProviderAuthError(ProviderError):
    """Missing or rejected API credentials."""


class ProviderQuotaError(ProviderError):
    """Rate limit or billing quota exhausted."""


class ProviderNetworkError(ProviderError):
    """Timeout, connection failure or upstream 5xx."""


class ProviderFormatError(ProviderError):
    """Generation output could not be parsed into a valid question."""


class NoQuestionsAvailable(LearnLoopError):
    """Every fallback tier was exhausted for the current request."""


class InvalidQuestionId(LearnLoopError):
    """An answer was submitted against an unknown or stale question."""

    def __init__(self, question_id: str):
        super().__init__(f"Invalid question: {question_id}")
        self.question_id = question_id


class UnknownProfile(LearnLoopError):
    """An interview type or company key is not in the profile tables."""

    def __init__(self, kind: str, key: str):
        super().__init__(f"Unknown {kind}: {key}")
        self.kind = kind
        self.key = key


class InterviewNotActive(LearnLoopError):
    """The interview session is paused, finished or was never started."""
