"""Read-only exports of a generated result set."""

from __future__ import annotations

from datetime import date
from typing import Optional

from studbud.modules.generation.models.items import (
    Flashcard,
    GenerationMode,
    GenerationResult,
    QuizQuestion,
)

TITLES = {
    GenerationMode.FLASHCARDS: "StudBud Study Flashcards",
    GenerationMode.QUIZ: "StudBud Practice Quiz",
}


def to_jsonable(result: GenerationResult) -> dict:
    return result.model_dump(mode="json")


def export_filename(mode: GenerationMode, *, stamp: str, ext: str = "txt") -> str:
    return f"StudBud-{mode.value.lower()}-{stamp}.{ext}"


def render_text(result: GenerationResult, *, generated_on: Optional[date] = None) -> str:
    """Printable study sheet: numbered questions, answers or lettered options."""
    day = generated_on or date.today()
    lines = [TITLES[result.mode], f"Generated on {day.isoformat()}", ""]

    for index, item in enumerate(result.items, start=1):
        lines.append(f"{index}. QUESTION")
        lines.append(item.question)
        if isinstance(item, Flashcard):
            lines.append("ANSWER")
            lines.append(item.answer)
        elif isinstance(item, QuizQuestion):
            lines.append("OPTIONS")
            for i, option in enumerate(item.options):
                prefix = "[CORRECT]" if option == item.correct_answer else "[ ]"
                lines.append(f"  {prefix} {chr(65 + i)}) {option}")
        lines.append("")

    if result.sources:
        lines.append("SOURCES")
        for source in result.sources:
            lines.append(f"- {source.title}: {source.uri}")
        lines.append("")

    return "\n".join(lines)
