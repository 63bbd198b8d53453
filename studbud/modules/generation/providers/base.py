"""Provider adapter capability shared by every inference backend.

An adapter performs exactly one inference call per ``generate`` and either
returns the backend's parsed output or raises a classified
``GenerationError``. Adapters never retry; retry is a fresh user action.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Optional

from studbud.core.logging import get_logger
from studbud.modules.generation.errors import (
    AuthError,
    EmptyResponseError,
    GenerationError,
    MalformedResponseError,
    ProviderError,
    RateLimitError,
)
from studbud.modules.generation.models.items import GenerationMode, Source
from studbud.modules.generation.models.payload import ContentPayload, TextPayload

logger = get_logger(__name__)

DEFAULT_MAX_INPUT_CHARS = 30000


@dataclass
class ProviderOutput:
    """Raw parsed backend output, before response normalization.

    ``raw`` is whatever the backend produced: a dict envelope from
    schema-constrained generation, or text that should contain JSON when the
    contract was only described in the prompt.
    """

    raw: Any
    sources: list[Source] = field(default_factory=list)
    structured: bool = True


class ProviderAdapter(ABC):
    name: str = "provider"
    display_name: str = "The AI provider"
    # Media types this backend takes as binary input (images, documents)
    binary_media_types: frozenset[str] = frozenset()
    supports_schema: bool = True
    supports_search: bool = False
    input_char_cap: Optional[int] = None

    def __init__(
        self,
        *,
        api_key: Optional[str],
        max_input_chars: int = DEFAULT_MAX_INPUT_CHARS,
    ) -> None:
        self.api_key = api_key
        limit = max(1, int(max_input_chars))
        if self.input_char_cap is not None:
            limit = min(limit, self.input_char_cap)
        self.max_input_chars = limit

    def has_credentials(self) -> bool:
        key = (self.api_key or "").strip()
        return bool(key) and key.lower() not in {"undefined", "none", "null"}

    def ensure_credentials(self) -> None:
        if not self.has_credentials():
            raise AuthError(
                f"{self.display_name} API key is missing. Please check your "
                "environment configuration."
            )

    def accepts_binary(self, media_type: str) -> bool:
        return media_type.lower() in self.binary_media_types

    def truncate(self, payload: ContentPayload) -> ContentPayload:
        if isinstance(payload, TextPayload) and len(payload.text) > self.max_input_chars:
            logger.info(
                "Truncating text payload from %d to %d chars",
                len(payload.text),
                self.max_input_chars,
                extra={"provider": self.name},
            )
            return TextPayload(text=payload.text[: self.max_input_chars])
        return payload

    @abstractmethod
    async def generate(
        self,
        payload: ContentPayload,
        mode: GenerationMode,
        count: int,
        use_external_search: bool = False,
    ) -> ProviderOutput:
        """Perform one inference call for ``count`` items of ``mode``."""


def _http_detail(body: Any) -> Optional[str]:
    if isinstance(body, dict):
        err = body.get("error", body)
        if isinstance(err, dict):
            msg = err.get("message") or err.get("detail")
            if msg:
                return str(msg)
        elif err:
            return str(err)
        return None
    if body:
        return str(body)
    return None


AUTH_MARKERS = ("API_KEY_INVALID", "UNAUTHENTICATED", "API key not valid")


def _is_auth_rejection(status: int, body: Any, detail: str) -> bool:
    """Gemini rejects a bad key with 400 INVALID_ARGUMENT, not 401."""
    if status in (401, 403):
        return True
    haystack = f"{body!r} {detail}"
    return any(marker in haystack for marker in AUTH_MARKERS)


def classify_exception(exc: BaseException, *, provider: str) -> GenerationError:
    """Map a backend/library exception into the generation error taxonomy."""
    from pydantic_ai.exceptions import ModelHTTPError, UnexpectedModelBehavior

    if isinstance(exc, GenerationError):
        return exc

    if isinstance(exc, ModelHTTPError):
        status = exc.status_code
        detail = _http_detail(exc.body) or str(exc)
        if _is_auth_rejection(status, exc.body, detail):
            return AuthError(
                "Authentication failed. Please verify your "
                f"{provider} API key."
            )
        if status == 429:
            return RateLimitError(
                f"{provider} is rate limiting requests. Please wait a "
                "moment and try again."
            )
        return ProviderError(detail, status_code=status, detail=detail)

    if isinstance(exc, UnexpectedModelBehavior):
        text = str(exc.message or "")
        if "empty" in text.lower():
            return EmptyResponseError(
                f"{provider} returned an empty response."
            )
        return MalformedResponseError(
            f"{provider} returned output that does not match the "
            f"expected structure: {text}"
        )

    return ProviderError(str(exc) or type(exc).__name__, detail=str(exc))
