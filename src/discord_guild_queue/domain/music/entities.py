"""Core domain entities for the music bounded context."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict

from discord_guild_queue.domain.music.value_objects import Platform, TrackMetadata, TrackStub
from discord_guild_queue.domain.shared.types import (
    DurationSeconds,
    HttpUrlStr,
    NonEmptyStr,
    TrackTitleStr,
)


class Track(BaseModel):
    """Immutable reference to one playable item.

    ``source_url`` is the platform page URL, never the short-lived direct
    media URL; it doubles as the track's identity for retry bookkeeping.
    """

    model_config = ConfigDict(frozen=True, strict=True)

    title: TrackTitleStr
    source_url: HttpUrlStr
    duration_seconds: DurationSeconds = 0
    thumbnail_url: HttpUrlStr | None = None
    requested_by: NonEmptyStr
    platform: Platform = Platform.YOUTUBE

    @property
    def identity(self) -> str:
        return self.source_url

    @property
    def has_known_duration(self) -> bool:
        return self.duration_seconds > 0

    @property
    def duration_formatted(self) -> str:
        """Format duration as MM:SS or HH:MM:SS."""
        if not self.duration_seconds:
            return "Unknown"

        hours, remainder = divmod(self.duration_seconds, 3600)
        minutes, seconds = divmod(remainder, 60)

        if hours > 0:
            return f"{hours}:{minutes:02d}:{seconds:02d}"
        return f"{minutes}:{seconds:02d}"

    @property
    def display_title(self) -> str:
        """Get display title with duration if available."""
        if self.duration_seconds:
            return f"{self.title} [{self.duration_formatted}]"
        return self.title

    @classmethod
    def from_metadata(
        cls,
        source_url: str,
        metadata: TrackMetadata,
        *,
        requested_by: str,
        platform: Platform = Platform.YOUTUBE,
    ) -> Track:
        return cls(
            title=metadata.title,
            source_url=source_url,
            duration_seconds=metadata.duration_seconds,
            thumbnail_url=metadata.thumbnail_url,
            requested_by=requested_by,
            platform=platform,
        )

    @classmethod
    def from_stub(
        cls, stub: TrackStub, *, requested_by: str, platform: Platform = Platform.YOUTUBE
    ) -> Track:
        return cls(
            title=stub.title,
            source_url=stub.source_url,
            duration_seconds=stub.duration_seconds,
            thumbnail_url=stub.thumbnail_url,
            requested_by=requested_by,
            platform=platform,
        )
