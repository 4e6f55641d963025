"""Application Settings and Configuration

Pydantic-based settings management using environment variables.
Settings are loaded from environment variables with support for .env files,
type validation, and sensible defaults. All settings are frozen and immutable
after initialization.
"""

from __future__ import annotations

from functools import lru_cache
from typing import Literal

from pydantic import AliasChoices, BaseModel, Field, SecretStr, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from ..domain.shared.messages import ErrorMessages
from ..domain.shared.validators import validate_discord_snowflake


class DiscordSettings(BaseModel):
    """Discord bot configuration."""

    model_config = SettingsConfigDict(frozen=True, strict=True, populate_by_name=True)

    token: SecretStr = Field(
        default=SecretStr(""), validation_alias=AliasChoices("token", "bot_token", "discord_token")
    )
    command_prefix: str = Field(
        default="!",
        min_length=1,
        max_length=5,
        validation_alias=AliasChoices("command_prefix", "prefix"),
    )
    guild_ids: tuple[int, ...] = Field(
        default_factory=tuple, validation_alias=AliasChoices("guild_ids", "guilds")
    )
    sync_on_startup: bool = False

    @field_validator("guild_ids", mode="before")
    @classmethod
    def validate_snowflake_ids(cls, v: tuple[int, ...] | list[int]) -> tuple[int, ...]:
        """Validate Discord snowflake IDs and convert lists to tuples."""
        # JSON arrays from env vars arrive as lists
        if isinstance(v, list):
            v = tuple(v)
        for snowflake in v:
            validate_discord_snowflake(snowflake)
        return v


class AudioSettings(BaseModel):
    """Decoder, loudness and resolver configuration."""

    model_config = SettingsConfigDict(frozen=True, strict=True, populate_by_name=True)

    ffmpeg_path: str = Field(
        default="ffmpeg", min_length=1, validation_alias=AliasChoices("ffmpeg_path", "ffmpeg")
    )
    default_volume: float = Field(default=0.7, ge=0.0, le=2.0)

    normalization_enabled: bool = Field(
        default=True, validation_alias=AliasChoices("normalization_enabled", "normalize")
    )
    target_lufs: float = Field(default=-16.0, ge=-70.0, le=-5.0)
    target_lra: float = Field(default=11.0, ge=1.0, le=50.0)
    target_true_peak: float = Field(default=-1.5, ge=-9.0, le=0.0)
    long_track_threshold_seconds: int = Field(default=7200, ge=1)

    reconnect_delay_max: int = Field(default=5, ge=0, le=60)
    stderr_tail_bytes: int = Field(default=500, ge=0, le=65536)

    ytdlp_format: str = Field(default="bestaudio", min_length=1)
    cookies_file: str | None = Field(
        default=None, validation_alias=AliasChoices("cookies_file", "cookies")
    )


class QueueSettings(BaseModel):
    """Per-guild queue bounds and timing."""

    model_config = SettingsConfigDict(frozen=True, strict=True, populate_by_name=True)

    max_size: int = Field(default=200, ge=1, le=10000)
    max_retries: int = Field(default=2, ge=0, le=10)
    retry_delay_seconds: float = Field(default=2.0, ge=0.0)
    idle_advance_delay_seconds: float = Field(default=1.0, ge=0.0)
    inactivity_timeout_seconds: float = Field(
        default=300.0,
        ge=0.0,
        validation_alias=AliasChoices("inactivity_timeout_seconds", "inactivity_timeout"),
    )
    switch_settle_seconds: float = Field(default=0.5, ge=0.0)
    connect_timeout_seconds: float = Field(default=10.0, gt=0.0)
    disconnect_grace_seconds: float = Field(default=5.0, ge=0.0)
    playlist_max_size: int = Field(default=200, ge=1, le=10000)


class Settings(BaseSettings):
    """Application settings container.

    Automatically loads configuration from environment variables.

    Environment variable naming:
    - ENVIRONMENT, DEBUG, LOG_LEVEL (top-level)
    - DISCORD__TOKEN, DISCORD__GUILD_IDS, etc. (nested with ``__``)
    - AUDIO__FFMPEG_PATH, AUDIO__COOKIES_FILE, ...
    - QUEUE__MAX_SIZE, QUEUE__INACTIVITY_TIMEOUT_SECONDS, ...
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_nested_delimiter="__",
        case_sensitive=False,
        extra="ignore",
        strict=True,
    )

    environment: Literal["development", "production", "test"] = "development"
    debug: bool = False
    log_level: str = "INFO"

    discord: DiscordSettings = Field(default_factory=DiscordSettings)
    audio: AudioSettings = Field(default_factory=AudioSettings)
    queue: QueueSettings = Field(default_factory=QueueSettings)

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate log level."""
        valid_levels = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        v_upper = v.upper()
        if v_upper not in valid_levels:
            raise ValueError(ErrorMessages.INVALID_LOG_LEVEL.format(level=v, valid_levels=valid_levels))
        return v_upper


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Get cached application settings.

    Settings are automatically loaded from:
    1. .env file (if present)
    2. Environment variables
    3. Default values
    """
    return Settings()


def clear_settings_cache() -> None:
    """Clear the settings cache (useful for testing)."""
    get_settings.cache_clear()
