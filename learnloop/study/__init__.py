"""Answer history, streaks and achievements."""

from .achievements import ACHIEVEMENT_RULES, Achievement
from .answer_ledger import AnswerAttempt, AnswerLedger, LedgerAggregates

__all__ = [
    "ACHIEVEMENT_RULES",
    "Achievement",
    "AnswerAttempt",
    "AnswerLedger",
    "LedgerAggregates",
]
