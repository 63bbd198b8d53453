"""Turn raw provider output into a uniform, count-exact item list.

Steps, in order: parse (with a single code-fence repair for text output),
unwrap the ``items`` envelope, drop malformed entries, truncate to the
requested count and assign ids unique to this result set.
"""

from __future__ import annotations

import json
import re
from typing import Any, Callable, Optional
from uuid import uuid4

from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError

from studbud.core.logging import get_logger
from studbud.modules.generation.errors import (
    EmptyResponseError,
    MalformedResponseError,
)
from studbud.modules.generation.models.items import (
    Flashcard,
    GenerationMode,
    GenerationResult,
    QuizQuestion,
    Source,
    StudyItem,
)
from studbud.modules.generation.providers.base import ProviderOutput

logger = get_logger(__name__)

ENVELOPE_KEYS = ("items", "flashcards", "questions", "cards")

_FENCE_RE = re.compile(r"^\s*```[\w-]*[ \t]*\n?(?P<body>.*?)\n?[ \t]*```\s*$", re.DOTALL)


def new_set_id() -> str:
    # 12-char slice from uuid4
    return uuid4().hex[:12]


def strip_fences(text: str) -> str:
    match = _FENCE_RE.match(text)
    if not match:
        return text
    return match.group("body").strip()


def parse_raw(raw: Any) -> Any:
    """Parse text output as JSON, stripping formatting fences at most once."""
    if isinstance(raw, BaseModel):
        return raw.model_dump()
    if isinstance(raw, (bytes, bytearray)):
        raw = bytes(raw).decode("utf-8", errors="replace")
    if not isinstance(raw, str):
        return raw

    text = raw.strip()
    if not text:
        raise EmptyResponseError()
    try:
        return json.loads(text)
    except json.JSONDecodeError:
        pass

    repaired = strip_fences(text)
    if repaired == text:
        raise MalformedResponseError(
            "The AI provider's response is not valid JSON."
        )
    try:
        return json.loads(repaired)
    except json.JSONDecodeError as exc:
        raise MalformedResponseError(
            "The AI provider's response is not valid JSON, even after removing "
            "code fences."
        ) from exc


def unwrap(data: Any) -> list[Any]:
    if data is None:
        raise EmptyResponseError()
    if isinstance(data, list):
        return data
    if isinstance(data, dict):
        for key in ENVELOPE_KEYS:
            if key in data:
                value = data[key]
                if isinstance(value, list):
                    return value
                break
    raise MalformedResponseError(
        "The AI provider's response does not contain a list of items."
    )


def _text(value: Any) -> str:
    if isinstance(value, bool):
        return ""
    if isinstance(value, str):
        return value.strip()
    if isinstance(value, (int, float)):
        return str(value)
    return ""


def coerce_flashcard(entry: Any, item_id: str) -> Optional[Flashcard]:
    if not isinstance(entry, dict):
        return None
    question = _text(entry.get("question"))
    answer = _text(entry.get("answer"))
    if not question or not answer:
        return None
    return Flashcard(id=item_id, question=question, answer=answer)


def coerce_quiz_question(entry: Any, item_id: str) -> Optional[QuizQuestion]:
    if not isinstance(entry, dict):
        return None
    question = _text(entry.get("question"))
    raw_options = entry.get("options")
    if not question or not isinstance(raw_options, list):
        return None
    options = [_text(o) for o in raw_options]
    if not all(options):
        return None
    correct = entry.get("correct_answer", entry.get("correctAnswer"))
    try:
        return QuizQuestion(
            id=item_id,
            question=question,
            options=options,
            correct_answer=_text(correct),
        )
    except PydanticValidationError:
        return None


_COERCERS: dict[GenerationMode, Callable[[Any, str], Optional[StudyItem]]] = {
    GenerationMode.FLASHCARDS: coerce_flashcard,
    GenerationMode.QUIZ: coerce_quiz_question,
}


def normalize_items(
    entries: list[Any], mode: GenerationMode, count: int, *, set_id: Optional[str] = None
) -> list[StudyItem]:
    set_id = set_id or new_set_id()
    coerce = _COERCERS[mode]
    items: list[StudyItem] = []
    dropped = 0
    for entry in entries:
        if len(items) >= count:
            break
        item = coerce(entry, f"{set_id}-{len(items)}")
        if item is None:
            dropped += 1
            continue
        items.append(item)

    if dropped:
        logger.info("Dropped %d malformed %s entries", dropped, mode.value)
    if not items:
        raise MalformedResponseError(
            "The AI provider did not return any valid study items."
        )
    if len(items) < count:
        logger.info("Provider under-delivered: %d of %d items", len(items), count)
    return items


def normalize_response(
    output: ProviderOutput | Any,
    mode: GenerationMode,
    count: int,
    *,
    set_id: Optional[str] = None,
) -> GenerationResult:
    """Build a ``GenerationResult`` from an adapter's raw output."""
    sources: list[Source] = []
    raw = output
    if isinstance(output, ProviderOutput):
        raw, sources = output.raw, list(output.sources)

    entries = unwrap(parse_raw(raw))
    items = normalize_items(entries, mode, count, set_id=set_id)
    return GenerationResult(mode=mode, items=items, sources=sources)
