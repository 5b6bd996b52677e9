"""Service settings: environment, .env and an optional config.toml."""

from functools import lru_cache
from pathlib import Path
from typing import Literal

from pydantic import Field, computed_field
from pydantic_settings import (
    BaseSettings,
    PydanticBaseSettingsSource,
    SettingsConfigDict,
    TomlConfigSettingsSource,
)

# Repository root (next to pyproject.toml).
CONFIG_TOML = Path(__file__).resolve().parents[3] / "config.toml"


class Settings(BaseSettings):
    """Settings; environment variables win over .env, which wins over config.toml."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
        toml_file=CONFIG_TOML,
    )

    # API
    api_host: str = "0.0.0.0"
    api_port: int = 8000
    api_env: Literal["development", "staging", "production"] = "development"
    api_docs_enabled: bool = True

    # InterMine registry
    registry_url: str = "https://registry.intermine.org/service"
    registry_timeout_seconds: float = 10.0

    # Mine services
    #
    # ``mine_request_timeout_seconds`` is the transport-level httpx timeout;
    # ``homologue_query_timeout_seconds`` bounds a whole homologue fetch.
    mine_request_timeout_seconds: float = 60.0
    homologue_query_timeout_seconds: float = Field(default=30.0, gt=0)
    homologue_display_limit: int = Field(default=5, ge=1)
    homologue_path_overrides: dict[str, str] = Field(
        default_factory=dict,
        description="Extra namespace -> homologue field path dialects.",
    )
    user_agent: str = "mine-homologues/0.1 (+https://registry.intermine.org)"

    # Logging
    log_level: str = "INFO"
    log_format: Literal["json", "console"] = "json"

    # CORS
    cors_origins: list[str] = ["http://localhost:3000"]
    cors_origin_regex: str | None = r"^https?://(localhost|127\.0\.0\.1)(:\d+)?$"

    @computed_field
    def is_development(self) -> bool:
        """Check if running in development mode."""
        return self.api_env == "development"

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        return (
            init_settings,
            env_settings,
            dotenv_settings,
            file_secret_settings,
            TomlConfigSettingsSource(settings_cls),
        )


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
