"""pydantic-ai based adapter shared by every concrete provider.

Concrete providers only decide how the pydantic-ai model is built and which
capabilities the backend has; the request shape, the structured output
contract and error classification live here. Provider imports are kept lazy
so that a missing optional SDK only fails when that provider is selected.
"""

from __future__ import annotations

from abc import abstractmethod
from typing import Any, Iterable, Optional

from pydantic import BaseModel
from pydantic_ai import Agent
from pydantic_ai.messages import BinaryContent
from pydantic_ai.models import Model
from pydantic_ai.settings import ModelSettings

from studbud.core.logging import get_logger
from studbud.modules.generation.errors import EmptyResponseError
from studbud.modules.generation.models.items import GenerationMode, Source
from studbud.modules.generation.models.payload import (
    BinaryPayload,
    ContentPayload,
    TextPayload,
)
from studbud.modules.generation.models.schema import batch_model_for
from studbud.modules.generation.providers.base import (
    DEFAULT_MAX_INPUT_CHARS,
    ProviderAdapter,
    ProviderOutput,
    classify_exception,
)
from studbud.modules.generation.providers.prompts import (
    build_binary_instruction,
    build_instruction,
    build_system_prompt,
)

logger = get_logger(__name__)


class AgentProviderAdapter(ProviderAdapter):
    """Runs a single pydantic-ai agent call per generation request."""

    def __init__(
        self,
        *,
        api_key: Optional[str],
        model_name: str,
        model: Optional[Model] = None,
        max_input_chars: int = DEFAULT_MAX_INPUT_CHARS,
        temperature: float = 0.7,
    ) -> None:
        super().__init__(api_key=api_key, max_input_chars=max_input_chars)
        self.model_name = model_name
        self.temperature = temperature
        self._model = model

    @abstractmethod
    def build_model(self) -> Model:
        """Construct the pydantic-ai model for this backend (lazy import)."""

    def get_model(self) -> Model:
        if self._model is None:
            self._model = self.build_model()
        return self._model

    def uses_schema(self, use_external_search: bool) -> bool:
        """Whether this call can constrain output to the item schema.

        Backends that cannot combine output tools with their search tool fall
        back to the JSON contract described in the prompt.
        """
        if not self.supports_schema:
            return False
        return not (use_external_search and self.supports_search)

    def build_agent(
        self, mode: GenerationMode, count: int, *, structured: bool, search: bool
    ) -> Agent:
        output_type: Any = batch_model_for(mode) if structured else str
        builtin_tools = []
        if search:
            from pydantic_ai.builtin_tools import WebSearchTool

            builtin_tools.append(WebSearchTool())
        return Agent(
            model=self.get_model(),
            output_type=output_type,
            system_prompt=build_system_prompt(mode, count, structured=structured),
            model_settings=ModelSettings(temperature=self.temperature),
            builtin_tools=builtin_tools,
            # Output repair is the response normalizer's job, not a model retry
            retries=0,
        )

    def build_user_prompt(
        self, payload: ContentPayload, *, search: bool
    ) -> str | list[Any]:
        if isinstance(payload, BinaryPayload):
            return [
                build_binary_instruction(payload.media_type),
                BinaryContent(data=payload.data, media_type=payload.media_type),
            ]
        text = payload.text if isinstance(payload, TextPayload) else ""
        return build_instruction(text, use_external_search=search)

    async def generate(
        self,
        payload: ContentPayload,
        mode: GenerationMode,
        count: int,
        use_external_search: bool = False,
    ) -> ProviderOutput:
        self.ensure_credentials()
        search = bool(use_external_search and self.supports_search)
        structured = self.uses_schema(use_external_search)
        payload = self.truncate(payload)

        logger.info(
            "Requesting %d %s items (structured=%s, search=%s)",
            count,
            mode.value,
            structured,
            search,
            extra={"provider": self.name},
        )
        try:
            agent = self.build_agent(mode, count, structured=structured, search=search)
            result = await agent.run(self.build_user_prompt(payload, search=search))
        except Exception as exc:  # noqa: BLE001
            error = classify_exception(exc, provider=self.display_name)
            if error is exc:
                raise
            logger.warning(
                "Generation call failed: %s: %s",
                error.kind,
                error.message,
                extra={"provider": self.name},
            )
            raise error from exc

        output = result.output
        if isinstance(output, BaseModel):
            raw: Any = output.model_dump()
        else:
            raw = output
            if not str(raw or "").strip():
                raise EmptyResponseError(
                    f"{self.display_name} returned an empty response."
                )

        sources = extract_sources(result.all_messages()) if search else []
        return ProviderOutput(raw=raw, sources=sources, structured=structured)


def _walk_citations(node: Any) -> Iterable[Source]:
    if isinstance(node, BaseModel):
        node = node.model_dump()
    if isinstance(node, dict):
        uri = node.get("uri") or node.get("url")
        if isinstance(uri, str) and uri.startswith(("http://", "https://")):
            title = node.get("title")
            yield Source(title=str(title).strip() if title else "Source", uri=uri)
            return
        for value in node.values():
            yield from _walk_citations(value)
    elif isinstance(node, (list, tuple)):
        for value in node:
            yield from _walk_citations(value)


def extract_sources(messages: Iterable[Any]) -> list[Source]:
    """Collect cited web sources from search tool results, de-duplicated by URI."""
    from pydantic_ai.messages import BuiltinToolReturnPart, ModelResponse

    seen: set[str] = set()
    out: list[Source] = []
    for message in messages:
        if not isinstance(message, ModelResponse):
            continue
        nodes: list[Any] = [
            part.content
            for part in message.parts
            if isinstance(part, BuiltinToolReturnPart)
        ]
        details = getattr(message, "provider_details", None)
        if details:
            nodes.append(details)
        for source in _walk_citations(nodes):
            if source.uri in seen:
                continue
            seen.add(source.uri)
            out.append(source)
    return out
