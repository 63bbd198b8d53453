"""Google Gemini adapter: schema-constrained output, image/PDF input, search grounding."""

from __future__ import annotations

from pydantic_ai.models import Model

from studbud.modules.generation.providers.agent import AgentProviderAdapter


class GeminiAdapter(AgentProviderAdapter):
    name = "gemini"
    display_name = "Gemini"
    binary_media_types = frozenset(
        {
            "image/png",
            "image/jpeg",
            "image/webp",
            "image/heic",
            "image/heif",
            "application/pdf",
        }
    )
    supports_schema = True
    supports_search = True

    def build_model(self) -> Model:
        from pydantic_ai.models.google import GoogleModel
        from pydantic_ai.providers.google import GoogleProvider

        provider = GoogleProvider(api_key=self.api_key)
        return GoogleModel(self.model_name, provider=provider)
