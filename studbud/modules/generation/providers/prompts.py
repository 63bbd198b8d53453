"""Prompt builders for study item generation."""

from __future__ import annotations

import json

from studbud.modules.generation.models.items import GenerationMode
from studbud.modules.generation.models.schema import batch_model_for


_FLASHCARD_RULES = (
    "For each flashcard, provide a 'question' and an 'answer' (plain text, no "
    "markdown). Each question is clear and atomic; each answer concise. "
    "Prefer conceptual understanding over trivia; include varied difficulty."
)

_QUIZ_RULES = (
    "For each quiz question, provide a 'question', EXACTLY 4 distinct "
    "'options' (plain text), and the 'correct_answer', which must be copied "
    "character for character from one of the options."
)


def build_system_prompt(mode: GenerationMode, count: int, *, structured: bool) -> str:
    is_flashcards = mode == GenerationMode.FLASHCARDS
    kind = "flashcards" if is_flashcards else "multiple-choice quiz questions"
    prompt = (
        "You are an expert educational content generator. "
        f"Generate exactly {int(count)} high-quality {kind} based on the provided "
        "content. "
        f"{_FLASHCARD_RULES if is_flashcards else _QUIZ_RULES} "
    )
    if structured:
        return prompt + "Return the items in the 'items' array of the output object."

    schema = json.dumps(batch_model_for(mode).model_json_schema(), separators=(",", ":"))
    return prompt + (
        "Return ONLY a single JSON object with a key \"items\" holding the list "
        "of items. The object must validate against this JSON Schema: "
        f"{schema} "
        "No extra keys or commentary; do not include code fences."
    )


def build_instruction(text: str, *, use_external_search: bool) -> str:
    if use_external_search:
        return (
            "Research the topic below on the web and use what you find as the "
            "study material.\n\n"
            f'Topic or brief content: "{text}"'
        )
    return f'Context content: "{text}"'


def build_binary_instruction(media_type: str) -> str:
    if media_type.startswith("image/"):
        return "Context content: the attached image. Use the study material it shows."
    return "Context content: the attached document. Use the study material it contains."
