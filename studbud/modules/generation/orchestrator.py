"""Generation orchestrator: the single entry point host code calls.

Sequences content normalization, the sufficiency gate, one provider call and
response normalization, and guarantees that only ``GenerationError``
subclasses leave it.
"""

from __future__ import annotations

from typing import Any, Optional, Union

from studbud.core.logging import get_logger
from studbud.modules.generation import gate
from studbud.modules.generation.content import normalize_input
from studbud.modules.generation.errors import (
    GenerationError,
    ProviderError,
    ReadError,
    ValidationError,
)
from studbud.modules.generation.gate import GateOutcome, InsufficientContent
from studbud.modules.generation.models.items import GenerationMode, GenerationResult
from studbud.modules.generation.models.payload import (
    ContentPayload,
    GenerationRequest,
    RawInput,
    TextPayload,
)
from studbud.modules.generation.normalizer import normalize_response
from studbud.modules.generation.providers.base import ProviderAdapter

logger = get_logger(__name__)

MIN_COUNT = 1
MAX_COUNT = 100
DEFAULT_COUNT = 10


def validate_count(count: Any) -> int:
    if isinstance(count, bool) or not isinstance(count, int):
        raise ValidationError(
            f"Item count must be a whole number between {MIN_COUNT} and {MAX_COUNT}."
        )
    if not MIN_COUNT <= count <= MAX_COUNT:
        raise ValidationError(
            f"Item count must be between {MIN_COUNT} and {MAX_COUNT} (got {count})."
        )
    return count


def coerce_mode(mode: Union[GenerationMode, str]) -> GenerationMode:
    if isinstance(mode, GenerationMode):
        return mode
    try:
        return GenerationMode(str(mode).strip().upper())
    except ValueError as exc:
        raise ValidationError(
            f"Unknown generation mode '{mode}'. Choose FLASHCARDS or QUIZ."
        ) from exc


class GenerationOrchestrator:
    """Facade over normalizer, gate, provider adapter and response normalizer."""

    def __init__(self, adapter: ProviderAdapter) -> None:
        self.adapter = adapter

    @property
    def provider(self) -> str:
        return self.adapter.name

    def prepare(self, raw: RawInput) -> GateOutcome:
        """Normalize raw input and run it through the sufficiency gate."""
        try:
            content = normalize_input(
                raw, binary_media_types=self.adapter.binary_media_types
            )
        except GenerationError:
            raise
        except Exception as exc:  # noqa: BLE001
            raise ReadError(f"Failed to read the input: {exc}") from exc
        return gate.check(content)

    async def generate(
        self,
        payload: ContentPayload,
        mode: Union[GenerationMode, str],
        count: Any,
        use_external_search: bool = False,
    ) -> GenerationResult:
        mode = coerce_mode(mode)
        count = validate_count(count)
        # Fail before any network round trip when no credential is configured
        self.adapter.ensure_credentials()

        try:
            output = await self.adapter.generate(
                payload, mode, count, use_external_search
            )
            result = normalize_response(output, mode, count)
        except GenerationError:
            raise
        except Exception as exc:  # noqa: BLE001
            logger.exception(
                "Unclassified provider failure", extra={"provider": self.provider}
            )
            raise ProviderError(
                str(exc) or "An unexpected error occurred during study material generation."
            ) from exc

        logger.info(
            "Generated %d/%d %s items (%d sources)",
            len(result.items),
            count,
            mode.value,
            len(result.sources),
            extra={"provider": self.provider},
        )
        return result

    async def run(self, request: GenerationRequest) -> GenerationResult:
        return await self.generate(
            request.payload,
            request.mode,
            request.count,
            request.use_external_search,
        )

    async def orchestrate(
        self,
        raw: RawInput,
        mode: Union[GenerationMode, str],
        count: Any,
        use_external_search: bool = False,
    ) -> Union[GenerationResult, InsufficientContent]:
        """Run the full pipeline from raw input.

        Returns the gate's ``InsufficientContent`` outcome instead of
        generating when the input is too thin and search augmentation was not
        requested; with search augmentation the gate's seed is generated from.
        """
        mode = coerce_mode(mode)
        count = validate_count(count)
        outcome = self.prepare(raw)

        payload: Optional[ContentPayload]
        if isinstance(outcome, InsufficientContent):
            if not use_external_search:
                return outcome
            payload = TextPayload(text=outcome.seed)
        else:
            payload = outcome.content.payload

        return await self.generate(payload, mode, count, use_external_search)
