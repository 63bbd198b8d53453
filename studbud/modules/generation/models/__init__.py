from .items import (
    Flashcard,
    GenerationMode,
    GenerationResult,
    QuizQuestion,
    Source,
    StudyItem,
)
from .payload import (
    BinaryPayload,
    ContentPayload,
    FileInput,
    GenerationRequest,
    InputOrigin,
    PastedText,
    PreparedContent,
    RawInput,
    TextPayload,
    TopicInput,
)
from .state import Phase, SessionState
from .schema import (
    FlashcardBatch,
    FlashcardDraft,
    QuizBatch,
    QuizDraft,
    batch_model_for,
)

__all__ = [
    "Flashcard",
    "GenerationMode",
    "GenerationResult",
    "QuizQuestion",
    "Source",
    "StudyItem",
    "BinaryPayload",
    "ContentPayload",
    "FileInput",
    "GenerationRequest",
    "InputOrigin",
    "PastedText",
    "PreparedContent",
    "RawInput",
    "TextPayload",
    "TopicInput",
    "Phase",
    "SessionState",
    "FlashcardBatch",
    "FlashcardDraft",
    "QuizBatch",
    "QuizDraft",
    "batch_model_for",
]
