"""Question sources (static bank, generated cache, company sets) and the selector that picks between them."""

from .cache_store import CacheStore
from .company_questions import CompanyQuestionSets
from .question_bank import QuestionBank
from .question_selector import DeliveredQuestion, QuestionSelector, SelectionPolicy

__all__ = [
    "CacheStore",
    "CompanyQuestionSets",
    "QuestionBank",
    "QuestionSelector",
    "SelectionPolicy",
    "DeliveredQuestion",
]
