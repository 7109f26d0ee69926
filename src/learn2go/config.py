"""Application configuration using pydantic-settings."""

import functools
from pathlib import Path
from typing import Any

import yaml
from pydantic import Field
from pydantic_settings import BaseSettings, PydanticBaseSettingsSource, SettingsConfigDict


def _find_project_root() -> Path:
    """Find project root by locating pyproject.toml."""
    current = Path(__file__).resolve()
    for parent in [current] + list(current.parents):
        if (parent / "pyproject.toml").exists():
            return parent
    return Path(__file__).resolve().parent.parent.parent


class YamlSettingsSource(PydanticBaseSettingsSource):
    """Custom settings source that loads from settings.yaml."""

    def get_field_value(self, field_name: str) -> tuple[Any, str, bool]:
        """Not used - we implement __call__ instead."""
        return None, "", False

    def __call__(self) -> dict[str, Any]:
        """Load settings from YAML file."""
        yaml_path = _find_project_root() / "config" / "settings.yaml"
        if not yaml_path.exists():
            return {}

        with open(yaml_path, encoding='utf-8') as f:
            data = yaml.safe_load(f) or {}

        # Flatten nested structure to match Settings field names
        flattened = {}
        if 'server' in data:
            flattened['host'] = data['server'].get('host')
            flattened['port'] = data['server'].get('port')
        if 'preload' in data:
            preload = data['preload']
            flattened['preload_timeout_seconds'] = preload.get('timeout_seconds')
            flattened['lesson_limit'] = preload.get('lesson_limit')
            flattened['progress_limit'] = preload.get('progress_limit')
            flattened['snapshot_ttl_seconds'] = preload.get('snapshot_ttl_seconds')
        if 'cache' in data:
            cache = data['cache']
            flattened['cache_default_ttl_seconds'] = cache.get('default_ttl_seconds')
            flattened['cache_quick_ttl_seconds'] = cache.get('quick_ttl_seconds')
            flattened['cache_generated_ttl_seconds'] = cache.get('generated_ttl_seconds')
        if 'generation' in data:
            flattened['lesson_generation_timeout_seconds'] = (
                data['generation'].get('lesson_timeout_seconds')
            )
            flattened['game_generation_timeout_seconds'] = (
                data['generation'].get('game_timeout_seconds')
            )
        if 'geolocation' in data:
            flattened['geolocation_url'] = data['geolocation'].get('url')
            flattened['geolocation_timeout_seconds'] = data['geolocation'].get('timeout_seconds')
        if 'openai' in data:
            flattened['generation_model'] = data['openai'].get('generation_model')

        # Remove None values
        return {k: v for k, v in flattened.items() if v is not None}


class Settings(BaseSettings):
    """Application settings loaded from environment and config files."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Remote store (None runs the in-memory demo store)
    supabase_url: str | None = Field(default=None)
    supabase_anon_key: str | None = Field(default=None)

    # OpenAI (None disables generated lessons and games)
    openai_api_key: str | None = Field(default=None)
    generation_model: str = Field(default="gpt-4o-mini")

    # Server
    host: str = Field(default="0.0.0.0")
    port: int = Field(default=8000)
    allowed_origins: str = Field(default="http://localhost:8000,http://127.0.0.1:8000")

    # Preload
    preload_timeout_seconds: float = Field(default=10.0)
    lesson_limit: int = Field(default=20)
    progress_limit: int = Field(default=50)
    snapshot_ttl_seconds: float = Field(default=300.0)

    # Read cache
    cache_default_ttl_seconds: float = Field(default=1800.0)
    cache_quick_ttl_seconds: float = Field(default=300.0)
    cache_generated_ttl_seconds: float = Field(default=3600.0)

    # Generation
    lesson_generation_timeout_seconds: float = Field(default=3.0)
    game_generation_timeout_seconds: float = Field(default=2.0)

    # Geolocation
    geolocation_url: str = Field(default="https://ipapi.co/json/")
    geolocation_timeout_seconds: float = Field(default=3.0)

    # Paths
    project_root: Path = Field(default_factory=_find_project_root)

    @property
    def supabase_configured(self) -> bool:
        """Whether a usable Supabase project is configured."""
        return bool(
            self.supabase_url
            and self.supabase_url.startswith("http")
            and self.supabase_anon_key
        )

    @property
    def origins(self) -> list[str]:
        return [o.strip() for o in self.allowed_origins.split(",") if o.strip()]

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        """Customise settings sources to include YAML file.

        Priority order (highest to lowest):
        1. init_settings (arguments passed to Settings())
        2. env_settings (environment variables)
        3. dotenv_settings (.env file)
        4. YamlSettingsSource (settings.yaml)
        5. file_secret_settings
        """
        return (
            init_settings,
            env_settings,
            dotenv_settings,
            YamlSettingsSource(settings_cls),
            file_secret_settings,
        )


@functools.lru_cache
def get_settings() -> Settings:
    """Get application settings singleton."""
    return Settings()
