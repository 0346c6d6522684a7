"""Application configuration."""

import os

from pydantic_settings import BaseSettings, SettingsConfigDict

_ENVIRONMENT = os.getenv("ENVIRONMENT", "local")


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    openai_api_key: str
    openai_model: str = "gpt-5.2"
    openai_reasoning_effort: str | None = "low"
    openai_store: bool = False
    supabase_url: str
    supabase_service_key: str
    supabase_kv_table: str = "kv_store"
    ingredient_region: str = "chile"
    log_level: str = "INFO"
    environment: str = _ENVIRONMENT

    model_config = SettingsConfigDict(
        env_file=(f".env.{_ENVIRONMENT}", ".env"),
        extra="ignore",
    )


def parse_reasoning_effort(raw: str | None) -> str | None:
    """Normalise the reasoning effort setting; blank or "none" disables it."""
    if raw is None:
        return None
    cleaned = raw.strip().lower()
    if cleaned in {"", "none", "off"}:
        return None
    return cleaned
