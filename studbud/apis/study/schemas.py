from __future__ import annotations

from pydantic import BaseModel, Field

from studbud.modules.generation.models.items import GenerationMode


class TextSubmitRequest(BaseModel):
    text: str = Field(..., description="Pasted study text")


class TopicSubmitRequest(BaseModel):
    topic: str = Field(..., description="Bare topic to research")


class GenerateRequest(BaseModel):
    mode: GenerationMode = GenerationMode.FLASHCARDS
    count: int = Field(10, description="Number of items to generate (1-100)")


class ErrorDetail(BaseModel):
    kind: str
    message: str


class ErrorResponse(BaseModel):
    detail: ErrorDetail
