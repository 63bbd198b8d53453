"""Error taxonomy surfaced by the generation layer.

Every failure that leaves the orchestrator is one of the ``GenerationError``
subclasses below. ``kind`` is the closed discriminator the session state
machine and host UIs branch on; ``message`` is always human readable.
"""

from __future__ import annotations

from typing import Optional


class GenerationError(Exception):
    kind: str = "GenerationError"
    default_message: str = "Study material generation failed."

    def __init__(self, message: Optional[str] = None) -> None:
        self.message = (message or "").strip() or self.default_message
        super().__init__(self.message)

    def to_dict(self) -> dict:
        return {"kind": self.kind, "message": self.message}


class ReadError(GenerationError):
    kind = "ReadError"
    default_message = "Failed to read the file. Please try a different format."


class AuthError(GenerationError):
    kind = "AuthError"
    default_message = "Authentication failed. Please verify your API key."


class RateLimitError(GenerationError):
    kind = "RateLimitError"
    default_message = (
        "The AI provider is rate limiting requests. Please wait a moment and try again."
    )


class EmptyResponseError(GenerationError):
    kind = "EmptyResponseError"
    default_message = "The AI provider returned an empty response."


class MalformedResponseError(GenerationError):
    kind = "MalformedResponseError"
    default_message = (
        "The AI provider returned study items in an unexpected format."
    )


class ProviderError(GenerationError):
    kind = "ProviderError"
    default_message = (
        "An unexpected error occurred during study material generation."
    )

    def __init__(
        self,
        message: Optional[str] = None,
        *,
        status_code: Optional[int] = None,
        detail: Optional[str] = None,
    ) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.detail = detail if detail is not None else message

    def to_dict(self) -> dict:
        data = super().to_dict()
        if self.status_code is not None:
            data["status_code"] = self.status_code
        return data


class ValidationError(GenerationError):
    kind = "ValidationError"
    default_message = "Invalid generation request."


class SessionStateError(RuntimeError):
    """Raised when a trigger is not valid for the session's current phase."""

    def __init__(self, trigger: str, phase: str) -> None:
        self.trigger = trigger
        self.phase = phase
        super().__init__(f"Cannot '{trigger}' while session is {phase}")


ERROR_KINDS: tuple[type[GenerationError], ...] = (
    ReadError,
    AuthError,
    RateLimitError,
    EmptyResponseError,
    MalformedResponseError,
    ProviderError,
    ValidationError,
)
