"""Provider adapters, selected once from configuration."""

from __future__ import annotations

from typing import Optional

from studbud.core.config import GenerationSettings
from studbud.modules.generation.providers.agent import AgentProviderAdapter
from studbud.modules.generation.providers.base import (
    ProviderAdapter,
    ProviderOutput,
    classify_exception,
)
from studbud.modules.generation.providers.cerebras import CerebrasAdapter
from studbud.modules.generation.providers.gemini import GeminiAdapter
from studbud.modules.generation.providers.openrouter import OpenRouterAdapter

ADAPTERS: dict[str, type[AgentProviderAdapter]] = {
    "gemini": GeminiAdapter,
    "google": GeminiAdapter,
    "openrouter": OpenRouterAdapter,
    "cerebras": CerebrasAdapter,
}


def build_adapter(config: Optional[GenerationSettings] = None) -> ProviderAdapter:
    """Construct the single adapter configured for this deployment."""
    if config is None:
        from studbud.core.config import settings

        config = settings.generation

    provider = (config.model_provider or "gemini").strip().lower()
    adapter_cls = ADAPTERS.get(provider)
    if adapter_cls is None:
        raise ValueError(
            f"Unknown MODEL_PROVIDER '{config.model_provider}'. "
            f"Expected one of: {', '.join(sorted(ADAPTERS))}"
        )

    if adapter_cls is OpenRouterAdapter:
        api_key, model_name = config.openrouter_api_key, config.openrouter_model
    elif adapter_cls is CerebrasAdapter:
        api_key, model_name = config.cerebras_api_key, config.cerebras_model
    else:
        api_key, model_name = config.gemini_api_key, config.gemini_model

    return adapter_cls(
        api_key=api_key,
        model_name=model_name,
        max_input_chars=config.max_input_chars,
        temperature=config.temperature,
    )


__all__ = [
    "ADAPTERS",
    "AgentProviderAdapter",
    "CerebrasAdapter",
    "GeminiAdapter",
    "OpenRouterAdapter",
    "ProviderAdapter",
    "ProviderOutput",
    "build_adapter",
    "classify_exception",
]
