"""Centralized configuration: Pydantic BaseSettings with TOML + dotenv sources.

Non-secret settings live in config.toml. Environment variables override it
using ``__`` as the nested delimiter (e.g. ``TOOLS__MESSAGE__BROADCAST__ENABLED``).

Priority (highest wins): init args > env vars > .env > config.toml

The Settings instance doubles as the "config snapshot" handed to the
outbound pipeline.  The directory cache keys its invalidation off the
*identity* of that object, so ``reset_settings()`` (or any fresh
``Settings()``) implicitly drops cached directory listings.

Usage::

    from courier.config import get_settings

    s = get_settings()
    print(s.tools.message.broadcast.enabled)
"""

from __future__ import annotations

from pydantic import BaseModel, field_validator
from pydantic_settings import (
    BaseSettings,
    PydanticBaseSettingsSource,
    SettingsConfigDict,
    TomlConfigSettingsSource,
)

# ---------------------------------------------------------------------------
# Sub-models (each maps to a [section] in config.toml)
# ---------------------------------------------------------------------------


class _StrictModel(BaseModel):
    """Base for all config sub-models: reject unknown keys so typos fail loudly."""

    model_config = {"extra": "forbid"}


class ChannelConfig(_StrictModel):
    """One configured chat back-end, keyed by channel id (``[channels.slack]``)."""

    enabled: bool = True
    default_account: str | None = None
    accounts: list[str] = []
    allow_from: list[str] = []


class BroadcastConfig(_StrictModel):
    enabled: bool = True
    # 1 = strictly sequential fan-out
    max_concurrency: int = 1

    @field_validator("max_concurrency")
    @classmethod
    def clamp_max_concurrency(cls, v: int) -> int:
        return max(1, v)


class CrossContextMarkerConfig(_StrictModel):
    enabled: bool = True
    prefix: str = "[from {channel}] "
    suffix: str = ""


class CrossContextConfig(_StrictModel):
    allow_within_provider: bool = True
    allow_across_providers: bool = False
    marker: CrossContextMarkerConfig = CrossContextMarkerConfig()


class MessageToolConfig(_StrictModel):
    broadcast: BroadcastConfig = BroadcastConfig()
    cross_context: CrossContextConfig = CrossContextConfig()


class ToolsConfig(_StrictModel):
    message: MessageToolConfig = MessageToolConfig()


class LoggingConfig(_StrictModel):
    level: str = "INFO"

    @field_validator("level")
    @classmethod
    def normalize_level(cls, v: str) -> str:
        return v.upper()


class PluginConfig(_StrictModel):
    enabled: bool = True


# ---------------------------------------------------------------------------
# Root Settings
# ---------------------------------------------------------------------------


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        toml_file="config.toml",
        env_file=".env",
        env_nested_delimiter="__",
        extra="ignore",
    )

    channels: dict[str, ChannelConfig] = {}  # [channels.<channel_id>]
    tools: ToolsConfig = ToolsConfig()
    logging: LoggingConfig = LoggingConfig()
    plugins: dict[str, PluginConfig] = {}

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        """Priority: init > env vars > .env > config.toml > file secrets."""
        return (
            init_settings,
            env_settings,
            dotenv_settings,
            TomlConfigSettingsSource(settings_cls),
            file_secret_settings,
        )

    def enabled_channels(self) -> list[str]:
        """Channel ids that are configured and not disabled, sorted."""
        return sorted(name for name, cfg in self.channels.items() if cfg.enabled)


# ---------------------------------------------------------------------------
# Singleton
# ---------------------------------------------------------------------------

_settings: Settings | None = None


def get_settings() -> Settings:
    """Lazy cached singleton."""
    global _settings
    if _settings is None:
        _settings = Settings()
    return _settings


def reset_settings() -> None:
    """Clear the cached singleton (for tests and reloads)."""
    global _settings
    _settings = None
