"""Value objects for the music bounded context."""

from __future__ import annotations

from enum import Enum, StrEnum

from pydantic import BaseModel, ConfigDict, Field

from discord_guild_queue.domain.shared.types import (
    DurationSeconds,
    HttpUrlStr,
    NonEmptyStr,
    TrackTitleStr,
)


class Platform(StrEnum):
    """Streaming platforms the bot accepts input from."""

    YOUTUBE = "youtube"
    SOUNDCLOUD = "soundcloud"


class QueueState(Enum):
    """Observable state of a guild queue, derived from its guard flags."""

    DISCONNECTED = "disconnected"
    CONNECTING = "connecting"
    IDLE = "idle"
    PLAYING = "playing"
    PAUSED = "paused"
    SWITCHING = "switching"

    @property
    def is_connected(self) -> bool:
        return self in (QueueState.IDLE, QueueState.PLAYING, QueueState.PAUSED)


class TrackMetadata(BaseModel):
    """Descriptive fields a stream resolver reports for a single page URL."""

    model_config = ConfigDict(frozen=True, strict=True)

    title: TrackTitleStr
    duration_seconds: DurationSeconds = 0
    thumbnail_url: HttpUrlStr | None = None


class TrackStub(BaseModel):
    """One entry of a playlist listing, before it is turned into a Track."""

    model_config = ConfigDict(frozen=True, strict=True)

    title: TrackTitleStr
    source_url: HttpUrlStr
    duration_seconds: DurationSeconds = 0
    thumbnail_url: HttpUrlStr | None = None


class InputClassification(BaseModel):
    """Result of classifying raw user input as a URL, playlist or search query."""

    model_config = ConfigDict(frozen=True, strict=True)

    is_url: bool = False
    url: HttpUrlStr | None = None
    is_playlist: bool = False
    playlist_id: NonEmptyStr | None = None
    playlist_url: HttpUrlStr | None = None
    platform: Platform = Platform.YOUTUBE
    track_id: NonEmptyStr | None = Field(
        default=None, description="Platform-native id (YouTube video id) when known"
    )

    @property
    def is_search(self) -> bool:
        return not self.is_url
