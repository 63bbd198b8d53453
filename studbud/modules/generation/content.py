"""Normalize uploaded files, pasted text and topics into content payloads.

Textual files are decoded and whitespace-collapsed; images and documents the
active provider accepts natively become binary payloads tagged with their
media type. PDFs the provider cannot take as binary are converted to text
with pypdf first.
"""

from __future__ import annotations

import io
import mimetypes
from typing import Iterable

from studbud.core.logging import get_logger
from studbud.modules.generation.errors import ReadError, ValidationError
from studbud.modules.generation.models.payload import (
    BinaryPayload,
    FileInput,
    InputOrigin,
    PastedText,
    PreparedContent,
    RawInput,
    TextPayload,
    TopicInput,
)

logger = get_logger(__name__)

PDF_MEDIA_TYPE = "application/pdf"

TEXTUAL_MEDIA_TYPES = frozenset(
    {
        "application/json",
        "application/xml",
        "application/x-yaml",
        "application/yaml",
        "application/csv",
        "application/rtf",
    }
)


def collapse_whitespace(text: str) -> str:
    return " ".join(text.split())


def is_textual(media_type: str) -> bool:
    return media_type.startswith("text/") or media_type in TEXTUAL_MEDIA_TYPES


def resolve_media_type(file: FileInput) -> str:
    """Declared media type, else a guess from the file name, else empty."""
    declared = (file.media_type or "").split(";")[0].strip().lower()
    if declared and declared != "application/octet-stream":
        return declared
    guessed, _ = mimetypes.guess_type(file.name)
    return (guessed or "").lower()


def _decode_text(file: FileInput) -> str:
    try:
        return file.data.decode("utf-8-sig")
    except UnicodeDecodeError as exc:
        raise ReadError(
            f"Could not decode '{file.name}' as text. Please try a different format."
        ) from exc


def extract_pdf_text(file: FileInput) -> str:
    """Concatenate the text layer of every page of a PDF."""
    from pypdf import PdfReader

    try:
        reader = PdfReader(io.BytesIO(file.data))
        parts = [(page.extract_text() or "") for page in reader.pages]
    except Exception as exc:  # noqa: BLE001
        raise ReadError(f"Could not read PDF '{file.name}'.") from exc
    return "\n".join(parts)


def _label_for(name: str) -> str:
    stem = name.rsplit(".", 1)[0] if "." in name else name
    return collapse_whitespace(stem.replace("_", " ").replace("-", " "))


def normalize_file(
    file: FileInput, *, binary_media_types: Iterable[str] = ()
) -> PreparedContent:
    if file.size == 0:
        raise ReadError(f"'{file.name}' is empty.")

    accepted = frozenset(m.lower() for m in binary_media_types)
    media_type = resolve_media_type(file)
    label = _label_for(file.name)

    if media_type in accepted:
        logger.info(
            "Normalized %s as binary payload (%d bytes)", media_type, file.size
        )
        return PreparedContent(
            payload=BinaryPayload(media_type=media_type, data=file.data),
            origin=InputOrigin.FILE,
            label=label,
        )

    if media_type == PDF_MEDIA_TYPE:
        text = extract_pdf_text(file)
    elif not media_type or is_textual(media_type):
        text = _decode_text(file)
    else:
        raise ReadError(
            f"Files of type {media_type} are not supported by the configured AI "
            "provider. Please paste the text directly."
        )

    cleaned = collapse_whitespace(text)
    logger.info(
        "Normalized %s as text payload (%d chars)", media_type or "unknown", len(cleaned)
    )
    return PreparedContent(
        payload=TextPayload(text=cleaned), origin=InputOrigin.FILE, label=label
    )


def normalize_input(
    raw: RawInput, *, binary_media_types: Iterable[str] = ()
) -> PreparedContent:
    """Convert a file, pasted text or topic into a canonical payload."""
    if isinstance(raw, FileInput):
        return normalize_file(raw, binary_media_types=binary_media_types)
    if isinstance(raw, PastedText):
        if not raw.text.strip():
            raise ValidationError("Please enter some text to study from.")
        return PreparedContent(
            payload=TextPayload(text=raw.text), origin=InputOrigin.PASTED
        )
    if isinstance(raw, TopicInput):
        topic = raw.topic.strip()
        if not topic:
            raise ValidationError("Please enter a topic to research.")
        return PreparedContent(
            payload=TextPayload(text=raw.topic),
            origin=InputOrigin.TOPIC,
            label=collapse_whitespace(topic),
        )
    raise ValidationError(f"Unsupported input type: {type(raw).__name__}")
