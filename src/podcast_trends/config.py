"""Configuration with 4-layer resolution: defaults -> YAML -> env -> overrides.

Uses pydantic-settings with YamlConfigSettingsSource for layered configuration.
Supports ``.env`` file loading, ``PODCAST_TRENDS_`` prefixed env vars, and
nested delimiter ``__`` for overriding sub-model fields, e.g.
``PODCAST_TRENDS_CATALOG__CLIENT_ID``.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, ClassVar, Literal

import structlog
from pydantic import BaseModel, Field, SecretStr, ValidationError
from pydantic_settings import (
    BaseSettings,
    PydanticBaseSettingsSource,
    SettingsConfigDict,
    YamlConfigSettingsSource,
)

logger: structlog.stdlib.BoundLogger = structlog.get_logger(__name__)


# ---------------------------------------------------------------------------
# Sub-models
# ---------------------------------------------------------------------------


class CatalogSettings(BaseModel):
    """Podchaser GraphQL catalog configuration."""

    endpoint: str = "https://api.podchaser.com/graphql"
    client_id: SecretStr | None = None
    client_secret: SecretStr | None = None
    token_safety_margin_seconds: int = Field(
        default=60,
        ge=0,
        description="Subtracted from the issuer lifetime when caching a token.",
    )
    default_token_lifetime_seconds: int = Field(
        default=3600,
        gt=0,
        description="Lifetime assumed when the issuer omits expires_in.",
    )
    timeout: float = Field(default=15.0, gt=0.0, description="Request timeout in seconds.")

    @property
    def has_credentials(self) -> bool:
        return bool(
            self.client_id
            and self.client_id.get_secret_value()
            and self.client_secret
            and self.client_secret.get_secret_value()
        )


class TrendSettings(BaseModel):
    """Trend aggregation and snapshot cache configuration."""

    cache_ttl_seconds: int = Field(default=3600, gt=0)
    episodes_per_category: int = Field(default=3, gt=0, le=10)
    recency_days: int = Field(
        default=2, gt=0, description="Only episodes aired within this window."
    )


class TranslationSettings(BaseModel):
    """LibreTranslate-compatible translation endpoint."""

    endpoint: str = "https://libretranslate.com/translate"
    api_key: SecretStr | None = None
    source: str = "en"
    target: str = "ja"
    timeout: float = Field(default=15.0, gt=0.0)


class SpeechSettings(BaseModel):
    """Gemini Live speech-generation configuration."""

    api_key: SecretStr | None = None
    model: str = "models/gemini-2.5-flash-native-audio-preview-09-2025"
    voice_name: str = "Zephyr"
    timeout_seconds: float | None = Field(
        default=120.0,
        gt=0.0,
        description="Upper bound on one synthesis session; None waits forever.",
    )

    @property
    def has_credentials(self) -> bool:
        return bool(self.api_key and self.api_key.get_secret_value())


class AudioSettings(BaseModel):
    """Where synthesized narration files are written and served from."""

    output_dir: Path = Path("./public/audio")
    public_url_prefix: str = "/audio"


class APISettings(BaseModel):
    """FastAPI server settings."""

    host: str = "0.0.0.0"
    port: int = Field(default=8000, ge=1, le=65535)
    cors_origins: list[str] = Field(default_factory=lambda: ["*"])


class LoggingSettings(BaseModel):
    """Logging / observability configuration."""

    level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "INFO"
    format: Literal["console", "json"] = "console"
    file: Path | None = None


# ---------------------------------------------------------------------------
# Main Settings (4-layer resolution)
# ---------------------------------------------------------------------------


class Settings(BaseSettings):
    """Top-level application settings.

    Resolution order (last wins):
        1. Field defaults (defined above)
        2. YAML config file (``config.yaml`` or ``config_path``)
        3. Environment variables (prefixed ``PODCAST_TRENDS_``)
        4. Programmatic overrides
    """

    model_config = SettingsConfigDict(
        env_prefix="PODCAST_TRENDS_",
        env_nested_delimiter="__",
        env_file=".env",
        env_file_encoding="utf-8",
        yaml_file="config.yaml",
        yaml_file_encoding="utf-8",
        extra="ignore",
    )

    _config_path_override: ClassVar[Path | None] = None

    catalog: CatalogSettings = Field(default_factory=CatalogSettings)
    trends: TrendSettings = Field(default_factory=TrendSettings)
    translation: TranslationSettings = Field(default_factory=TranslationSettings)
    speech: SpeechSettings = Field(default_factory=SpeechSettings)
    audio: AudioSettings = Field(default_factory=AudioSettings)
    api: APISettings = Field(default_factory=APISettings)
    logging: LoggingSettings = Field(default_factory=LoggingSettings)

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        """Customise settings source priority.

        Resolution order (first = highest priority):
            init_settings > env_settings > dotenv (.env) > yaml > defaults

        Args:
            settings_cls: The settings class.
            init_settings: Init / programmatic overrides.
            env_settings: Environment variable source.
            dotenv_settings: Dotenv file source (.env).
            file_secret_settings: Secret file source (unused).

        Returns:
            Ordered tuple of settings sources (first = highest priority).
        """
        yaml_file = cls._config_path_override or settings_cls.model_config.get(
            "yaml_file", "config.yaml"
        )
        return (
            init_settings,
            env_settings,
            dotenv_settings,
            YamlConfigSettingsSource(settings_cls, yaml_file=yaml_file),
        )

    @classmethod
    def load(cls, config_path: Path | None = None, **overrides: Any) -> Settings:
        """Load settings with an optional config path and overrides.

        Args:
            config_path: Optional path to a YAML config file.
            **overrides: Key-value overrides applied at highest priority.

        Returns:
            Fully-resolved Settings instance.

        Raises:
            ValidationError: If any setting value fails validation.
        """
        cls._config_path_override = config_path
        try:
            return cls(**overrides)
        finally:
            cls._config_path_override = None


def format_validation_error(exc: ValidationError) -> str:
    """Format a Pydantic ValidationError into a user-friendly message.

    Args:
        exc: The validation error to format.

    Returns:
        A multi-line string with each error on its own line.
    """
    lines: list[str] = []
    for error in exc.errors():
        loc = " -> ".join(str(part) for part in error["loc"])
        msg = error["msg"]
        raw_input = error.get("input")
        if raw_input is not None:
            lines.append(f"  {loc}: {msg} (got {raw_input!r})")
        else:
            lines.append(f"  {loc}: {msg}")
    return "Configuration error:\n" + "\n".join(lines)
