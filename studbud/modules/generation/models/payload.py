"""Canonical content payloads and the raw inputs they are built from."""

from __future__ import annotations

import mimetypes
from enum import Enum
from pathlib import Path
from typing import Annotated, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field

from .items import GenerationMode


class TextPayload(BaseModel):
    model_config = ConfigDict(frozen=True)

    kind: Literal["text"] = "text"
    text: str


class BinaryPayload(BaseModel):
    model_config = ConfigDict(frozen=True)

    kind: Literal["binary"] = "binary"
    media_type: str
    data: bytes = Field(repr=False)


ContentPayload = Annotated[
    Union[TextPayload, BinaryPayload], Field(discriminator="kind")
]


class InputOrigin(str, Enum):
    FILE = "file"
    PASTED = "pasted"
    TOPIC = "topic"


class FileInput(BaseModel):
    """An uploaded file: name, raw bytes and the declared media type."""

    model_config = ConfigDict(frozen=True)

    name: str
    data: bytes = Field(repr=False)
    media_type: Optional[str] = None

    @property
    def size(self) -> int:
        return len(self.data)

    @classmethod
    def from_path(cls, path: Union[str, Path]) -> "FileInput":
        p = Path(path)
        media_type, _ = mimetypes.guess_type(p.name)
        return cls(name=p.name, data=p.read_bytes(), media_type=media_type)


class PastedText(BaseModel):
    model_config = ConfigDict(frozen=True)

    text: str


class TopicInput(BaseModel):
    model_config = ConfigDict(frozen=True)

    topic: str


RawInput = Union[FileInput, PastedText, TopicInput]


class PreparedContent(BaseModel):
    """A normalized payload together with where it came from."""

    model_config = ConfigDict(frozen=True)

    payload: ContentPayload
    origin: InputOrigin
    label: Optional[str] = None


class GenerationRequest(BaseModel):
    model_config = ConfigDict(frozen=True)

    payload: ContentPayload
    mode: GenerationMode
    count: int = Field(ge=1, le=100)
    use_external_search: bool = False
