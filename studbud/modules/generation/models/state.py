"""Session phases and the read-only view handed to presentation layers."""

from __future__ import annotations

from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field

from .items import GenerationMode, Source, StudyItem


class Phase(str, Enum):
    IDLE = "IDLE"
    SELECTING_MODE = "SELECTING_MODE"
    INSUFFICIENT_CONTENT = "INSUFFICIENT_CONTENT"
    PROCESSING = "PROCESSING"
    VIEWING = "VIEWING"
    ERROR = "ERROR"


class SessionState(BaseModel):
    id: str
    phase: Phase
    mode: GenerationMode
    count: int
    use_external_search: bool = False
    items: list[StudyItem] = Field(default_factory=list)
    sources: list[Source] = Field(default_factory=list)
    cursor: int = 0
    total: int = 0
    error: Optional[str] = None
    error_kind: Optional[str] = None
    validation_message: Optional[str] = None
    search_seed: Optional[str] = None
    created_at: str
