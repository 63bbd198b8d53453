"""Sufficiency gate: is there enough content to generate from?

Topic submissions are exempt; file and pasted content must carry at least
``MIN_ALNUM_CHARS`` alphanumeric characters once whitespace is normalized.
The characters are counted across the whole text rather than as one unbroken
run: prose is split by spaces and punctuation, so a literal contiguous run of
100 would reject any ordinary paragraph.
Insufficient content is not an error: the caller gets a seed to offer a
search-augmented path with.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Union

from studbud.core.logging import get_logger
from studbud.modules.generation.content import collapse_whitespace
from studbud.modules.generation.models.payload import (
    InputOrigin,
    PreparedContent,
    TextPayload,
)

logger = get_logger(__name__)

MIN_ALNUM_CHARS = 100
FALLBACK_LABEL = "General knowledge"
MAX_LABEL_CHARS = 80


@dataclass(frozen=True)
class Sufficient:
    content: PreparedContent


@dataclass(frozen=True)
class InsufficientContent:
    """Too little signal; ``seed`` is what a search-augmented run starts from."""

    seed: str
    alnum_count: int
    content: PreparedContent


GateOutcome = Union[Sufficient, InsufficientContent]


def alnum_count(text: str) -> int:
    """Alphanumeric characters left once whitespace and punctuation are removed."""
    return sum(1 for ch in collapse_whitespace(text) if ch.isalnum())


def is_sufficient(text: str, *, threshold: int = MIN_ALNUM_CHARS) -> bool:
    return alnum_count(text) >= threshold


def _seed_for(cleaned: str, label: Optional[str]) -> str:
    if cleaned:
        return cleaned
    if label:
        return label[:MAX_LABEL_CHARS]
    return FALLBACK_LABEL


def check(
    content: PreparedContent, *, threshold: int = MIN_ALNUM_CHARS
) -> GateOutcome:
    payload = content.payload
    if content.origin == InputOrigin.TOPIC or not isinstance(payload, TextPayload):
        return Sufficient(content)

    cleaned = collapse_whitespace(payload.text)
    count = alnum_count(cleaned)
    if count >= threshold:
        return Sufficient(content)

    logger.info(
        "Content below sufficiency threshold (%d < %d alphanumeric chars)",
        count,
        threshold,
    )
    return InsufficientContent(
        seed=_seed_for(cleaned, content.label), alnum_count=count, content=content
    )
