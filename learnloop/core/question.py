"""
Multiple-choice question model shared by the bank, the cache and the providers.

Field names follow the JSON cache format (``correct``, ``generated_at``) so
hand-edited cache files and exported dumps load without translation.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

OPTION_COUNT = 4


class Question(BaseModel):
    """A four-option multiple-choice question."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    id: str = Field(min_length=1)
    question: str = Field(min_length=1)
    options: list[str] = Field(min_length=OPTION_COUNT, max_length=OPTION_COUNT)
    correct: int = Field(ge=0, le=OPTION_COUNT - 1)
    explanation: str
    explanations: dict[str, str] | None = None
    topic: str
    level: str
    source: str
    generated_at: str | None = None

    @field_validator("id", mode="before")
    @classmethod
    def _coerce_id(cls, v: Any) -> Any:
        # Older caches used numeric ids.
        if isinstance(v, int) and not isinstance(v, bool):
            return str(v)
        return v

    @field_validator("correct", mode="before")
    @classmethod
    def _reject_bool(cls, v: Any) -> Any:
        if isinstance(v, bool):
            raise ValueError("correct must be an option index")
        return v

    @property
    def correct_answer(self) -> str:
        return self.options[self.correct]

    def explanation_for(self, index: int) -> str | None:
        """Per-option explanation, if the question carries one for ``index``."""
        if not self.explanations:
            return None
        return self.explanations.get(str(index)) or None

    def to_dict(self) -> dict[str, Any]:
        return self.model_dump(exclude_none=True)

    def public_view(self) -> dict[str, Any]:
        """Fields safe to show before the question is answered."""
        return {
            "id": self.id,
            "question": self.question,
            "options": list(self.options),
            "topic": self.topic,
            "level": self.level,
            "source": self.source,
        }


def now_iso() -> str:
    return datetime.now().isoformat()


def fill_missing_explanations(
    explanations: dict[str, str] | None, correct: int, explanation: str
) -> dict[str, str]:
    """
    Ensure every option has an explanation.

    Missing entries fall back to the top-level explanation for the correct
    option and to a short "incorrect" note for the others.
    """
    filled = {str(k): v for k, v in (explanations or {}).items() if v}
    letter = chr(ord("A") + correct)
    for i in range(OPTION_COUNT):
        key = str(i)
        if key in filled:
            continue
        if i == correct:
            filled[key] = explanation
        elif explanations:
            filled[key] = f"This option is incorrect. The correct answer is option {letter}."
        else:
            filled[key] = f"This option is incorrect. {explanation}"
    return filled


def explain_answer(question: Question, user_index: int) -> tuple[str, bool]:
    """
    Build the feedback text for an answer.

    Returns (explanation, enhanced). ``enhanced`` is True when per-option
    explanations were available for the chosen option.
    """
    is_correct = user_index == question.correct
    user_text = question.explanation_for(user_index)
    if user_text is None:
        return question.explanation or "Answer explanation not available.", False

    if is_correct:
        return f"Correct! {user_text}", True

    correct_text = question.explanation_for(question.correct) or question.explanation
    return f"Incorrect. Your choice: {user_text}\n\nCorrect answer: {correct_text}", True
