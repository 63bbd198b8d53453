"""OpenRouter adapter via the OpenAI-compatible API (text input only)."""

from __future__ import annotations

from pydantic_ai.models import Model

from studbud.modules.generation.providers.agent import AgentProviderAdapter

OPENROUTER_BASE_URL = "https://openrouter.ai/api/v1"


class OpenRouterAdapter(AgentProviderAdapter):
    name = "openrouter"
    display_name = "OpenRouter"
    supports_schema = True
    supports_search = False

    def build_model(self) -> Model:
        from pydantic_ai.models.openai import OpenAIChatModel
        from pydantic_ai.providers.openai import OpenAIProvider

        provider = OpenAIProvider(api_key=self.api_key, base_url=OPENROUTER_BASE_URL)
        return OpenAIChatModel(self.model_name, provider=provider)
