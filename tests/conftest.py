import asyncio
from typing import Any, Optional

import pytest

from studbud.modules.generation.models.items import GenerationMode, Source
from studbud.modules.generation.models.payload import ContentPayload
from studbud.modules.generation.orchestrator import GenerationOrchestrator
from studbud.modules.generation.providers.base import ProviderAdapter, ProviderOutput


PHOTOSYNTHESIS = (
    "Photosynthesis is the process by which green plants, algae and some "
    "bacteria convert light energy into chemical energy. It takes place mainly "
    "in the chloroplasts of leaf cells, where the pigment chlorophyll absorbs "
    "red and blue light. In the light-dependent reactions water is split, "
    "oxygen is released and ATP and NADPH are produced. In the Calvin cycle "
    "the plant uses ATP and NADPH to fix carbon dioxide from the air into "
    "glucose. The overall equation combines six molecules of carbon dioxide "
    "and six of water into one glucose molecule and six of oxygen."
)


def make_entries(mode: GenerationMode, n: int) -> list[dict]:
    if mode == GenerationMode.QUIZ:
        return [
            {
                "question": f"Question {i}?",
                "options": [f"A{i}", f"B{i}", f"C{i}", f"D{i}"],
                "correct_answer": f"B{i}",
            }
            for i in range(n)
        ]
    return [{"question": f"Question {i}?", "answer": f"Answer {i}."} for i in range(n)]


class FakeAdapter(ProviderAdapter):
    """In-test adapter returning canned output or raising a canned error."""

    name = "fake"
    binary_media_types = frozenset({"image/png", "application/pdf"})
    supports_search = True

    def __init__(
        self,
        *,
        raw: Any = None,
        error: Optional[BaseException] = None,
        api_key: Optional[str] = "test-key",
        gate: Optional[asyncio.Event] = None,
        extra: int = 0,
    ) -> None:
        super().__init__(api_key=api_key)
        self.raw = raw
        self.error = error
        self.gate = gate
        self.extra = extra
        self.calls: list[dict] = []

    async def generate(
        self,
        payload: ContentPayload,
        mode: GenerationMode,
        count: int,
        use_external_search: bool = False,
    ) -> ProviderOutput:
        self.calls.append(
            {
                "payload": payload,
                "mode": mode,
                "count": count,
                "use_external_search": use_external_search,
            }
        )
        if self.gate is not None:
            await self.gate.wait()
        if self.error is not None:
            raise self.error
        raw = self.raw
        if raw is None:
            raw = {"items": make_entries(mode, count + self.extra)}
        sources = []
        if use_external_search:
            sources = [Source(title="Encyclopedia", uri="https://example.org/cats")]
        return ProviderOutput(raw=raw, sources=sources)


@pytest.fixture
def photosynthesis_text() -> str:
    return PHOTOSYNTHESIS


@pytest.fixture
def adapter() -> FakeAdapter:
    return FakeAdapter()


@pytest.fixture
def orchestrator(adapter: FakeAdapter) -> GenerationOrchestrator:
    return GenerationOrchestrator(adapter)
