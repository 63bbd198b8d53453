"""Study material generation module exports."""

from .errors import (
    AuthError,
    EmptyResponseError,
    GenerationError,
    MalformedResponseError,
    ProviderError,
    RateLimitError,
    ReadError,
    SessionStateError,
    ValidationError,
)
from .gate import InsufficientContent, Sufficient
from .models import (
    FileInput,
    Flashcard,
    GenerationMode,
    GenerationResult,
    PastedText,
    Phase,
    QuizQuestion,
    Source,
    TopicInput,
)
from .orchestrator import GenerationOrchestrator
from .providers import ProviderAdapter, build_adapter
from .session import Session, SessionManager

__all__ = [
    "AuthError",
    "EmptyResponseError",
    "GenerationError",
    "MalformedResponseError",
    "ProviderError",
    "RateLimitError",
    "ReadError",
    "SessionStateError",
    "ValidationError",
    "InsufficientContent",
    "Sufficient",
    "FileInput",
    "Flashcard",
    "GenerationMode",
    "GenerationResult",
    "PastedText",
    "Phase",
    "QuizQuestion",
    "Source",
    "TopicInput",
    "GenerationOrchestrator",
    "ProviderAdapter",
    "build_adapter",
    "Session",
    "SessionManager",
]
