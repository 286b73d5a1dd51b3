from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    database_url: str = "sqlite+aiosqlite:///./life_index.db"

    # Single snapshot key. Bump the suffix when the stored schema changes.
    storage_key: str = "life-index-v1"

    # Insight generation (OpenAI-compatible chat completions endpoint)
    insight_api_key: str | None = Field(
        default=None,
        validation_alias=AliasChoices("insight_api_key", "api_key"),
    )
    insight_model: str = "gemini-3-flash-preview"
    insight_base_url: str = "https://generativelanguage.googleapis.com/v1beta/openai/"
    insight_temperature: float = 0.7

    log_level: str = "INFO"
    log_format: str = "console"  # "console" | "json"

    model_config = {"env_file": ".env", "extra": "ignore"}


settings = Settings()
