"""Pydantic models for generated study items and result sets."""

from __future__ import annotations

from enum import Enum
from typing import Union

from pydantic import BaseModel, ConfigDict, Field, model_validator


QUIZ_OPTION_COUNT = 4


class GenerationMode(str, Enum):
    FLASHCARDS = "FLASHCARDS"
    QUIZ = "QUIZ"


class Flashcard(BaseModel):
    """Simple question/answer flashcard."""

    model_config = ConfigDict(frozen=True)

    id: str
    question: str
    answer: str


class QuizQuestion(BaseModel):
    """A multiple-choice question with exactly four distinct options."""

    model_config = ConfigDict(frozen=True)

    id: str
    question: str
    options: list[str]
    correct_answer: str

    @model_validator(mode="after")
    def _check_options(self) -> "QuizQuestion":
        if len(self.options) != QUIZ_OPTION_COUNT:
            raise ValueError(f"expected {QUIZ_OPTION_COUNT} options")
        if len(set(self.options)) != len(self.options):
            raise ValueError("options must be distinct")
        if self.options.count(self.correct_answer) != 1:
            raise ValueError("correct_answer must match exactly one option")
        return self


StudyItem = Union[Flashcard, QuizQuestion]


class Source(BaseModel):
    """A web citation returned by search-augmented generation."""

    title: str = "Source"
    uri: str


class GenerationResult(BaseModel):
    """Ordered items of a single result set plus any cited sources."""

    mode: GenerationMode
    items: list[StudyItem] = Field(default_factory=list)
    sources: list[Source] = Field(default_factory=list)

    def __len__(self) -> int:
        return len(self.items)
