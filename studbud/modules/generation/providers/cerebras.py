"""Cerebras Cloud adapter.

Text only, and the JSON contract is described in the prompt rather than
enforced as a schema, so its output goes through the normalizer's repair
pass. Input is capped lower than the other backends.
"""

from __future__ import annotations

from pydantic_ai.models import Model

from studbud.modules.generation.providers.agent import AgentProviderAdapter

CEREBRAS_BASE_URL = "https://api.cerebras.ai/v1"


class CerebrasAdapter(AgentProviderAdapter):
    name = "cerebras"
    display_name = "Cerebras"
    supports_schema = False
    supports_search = False
    input_char_cap = 15000

    def build_model(self) -> Model:
        from pydantic_ai.models.openai import OpenAIChatModel
        from pydantic_ai.providers.openai import OpenAIProvider

        provider = OpenAIProvider(api_key=self.api_key, base_url=CEREBRAS_BASE_URL)
        return OpenAIChatModel(self.model_name, provider=provider)
