"""Application settings loaded from environment variables."""

import os
from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


def _env_file() -> str | None:
    if os.getenv("PYTEST_CURRENT_TEST"):
        return None
    return ".env"


class Settings(BaseSettings):
    """Ideate configuration. All values come from environment variables."""

    # Branding used in the persona prompt and welcome copy
    company_name: str = Field(default="Daeda Group")

    # Anthropic (text generation)
    anthropic_api_key: str = Field(default="")
    chat_model: str = Field(default="claude-sonnet-4-5-20250929")
    generation_temperature: float = Field(default=0.7)
    generation_max_tokens: int = Field(default=2048)
    generation_timeout_seconds: float = Field(default=30.0)

    # Brave Search (knowledge research)
    brave_search_api_key: str = Field(default="")
    search_timeout_seconds: float = Field(default=20.0)
    search_result_count: int = Field(default=5, ge=1, le=5)
    search_country: str = Field(default="US")
    search_language: str = Field(default="en")

    # Research gating
    research_enabled: bool = Field(default=True)
    research_min_turns: int = Field(default=2)

    # Database
    database_path: Path = Field(default=Path("data/ideate.db"))

    # Turso (hosted libSQL); when set, overrides local database_path
    turso_database_url: str = Field(default="")
    turso_auth_token: str = Field(default="")

    # Conversation
    history_window_size: int = Field(default=10)

    # HTTP server
    server_host: str = Field(default="0.0.0.0")
    server_port: int = Field(default=8080)
    cors_allow_origin: str = Field(default="*")

    # Logging
    log_level: str = Field(default="INFO")

    model_config = SettingsConfigDict(env_file=_env_file(), env_file_encoding="utf-8")

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings,
        env_settings,
        dotenv_settings,
        file_secret_settings,
    ):
        if os.getenv("PYTEST_CURRENT_TEST"):
            return (init_settings,)
        return (init_settings, env_settings, dotenv_settings, file_secret_settings)


settings = Settings()
