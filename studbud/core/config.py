from typing import Optional
from pydantic import Field, computed_field
from pydantic_settings import BaseSettings, SettingsConfigDict


class AppSettings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        extra="ignore",
    )
    name: str = Field(default="studbud", alias="APP_NAME")
    version: str = Field(default="v1", alias="API_VERSION")
    port: int = Field(default=9000, alias="APP_PORT")
    mode: str = Field(default="prod", alias="MODE")

    @computed_field
    def is_production(self) -> bool:
        return self.mode != "dev"


class GenerationSettings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        extra="ignore",
    )

    # Model provider selection: "gemini", "openrouter" or "cerebras"
    model_provider: str = Field(default="gemini", alias="MODEL_PROVIDER")

    gemini_api_key: Optional[str] = Field(default=None, alias="GEMINI_API_KEY")
    gemini_model: str = Field(default="gemini-2.5-flash", alias="GEMINI_MODEL")

    openrouter_api_key: Optional[str] = Field(default=None, alias="OPENROUTER_API_KEY")
    openrouter_model: str = Field(
        default="google/gemini-2.5-flash", alias="OPENROUTER_MODEL"
    )

    cerebras_api_key: Optional[str] = Field(default=None, alias="CEREBRAS_API_KEY")
    cerebras_model: str = Field(default="llama-3.3-70b", alias="CEREBRAS_MODEL")

    # Only the first N characters of a text payload are sent to the backend
    max_input_chars: int = Field(default=30000, alias="MAX_INPUT_CHARS")
    temperature: float = Field(default=0.7, alias="GENERATION_TEMPERATURE")
    default_item_count: int = Field(default=10, alias="DEFAULT_ITEM_COUNT")


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        extra="ignore",
    )

    app: AppSettings = Field(default_factory=lambda: AppSettings())
    generation: GenerationSettings = Field(
        default_factory=lambda: GenerationSettings()
    )


settings = Settings()
