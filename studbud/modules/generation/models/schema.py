"""Structured output contract sent to the inference backend.

Note: To keep provider structured output schemas simple and compatible, the
drafts avoid complex constraints (lengths, option counts, membership).
Integrity rules are enforced after generation by the response normalizer.
"""

from __future__ import annotations

from typing import Type

from pydantic import BaseModel, Field

from .items import GenerationMode


class FlashcardDraft(BaseModel):
    question: str
    answer: str


class QuizDraft(BaseModel):
    question: str
    options: list[str] = Field(default_factory=list)
    correct_answer: str = Field(
        ..., description="Must be exactly equal to one of the options"
    )


class FlashcardBatch(BaseModel):
    """Envelope for flashcard generation."""

    items: list[FlashcardDraft] = Field(default_factory=list)


class QuizBatch(BaseModel):
    """Envelope for multiple-choice question generation."""

    items: list[QuizDraft] = Field(default_factory=list)


def batch_model_for(mode: GenerationMode) -> Type[BaseModel]:
    if mode == GenerationMode.QUIZ:
        return QuizBatch
    return FlashcardBatch
