"""Command and handler for playing a track from a query or URL."""

from __future__ import annotations

import logging
from collections.abc import Callable
from enum import Enum
from typing import TYPE_CHECKING

from pydantic import BaseModel, ConfigDict, field_validator

from discord_guild_queue.domain.music.entities import Track
from discord_guild_queue.domain.music.value_objects import InputClassification, Platform
from discord_guild_queue.domain.shared.exceptions import QueueFullError, VoiceConnectionError
from discord_guild_queue.domain.shared.messages import DiscordUIMessages, LogTemplates
from discord_guild_queue.domain.shared.types import DiscordSnowflake, NonEmptyStr, NonNegativeInt

if TYPE_CHECKING:
    from ..interfaces.stream_resolver import StreamResolver
    from ..services.queue_registry import QueueRegistry

logger = logging.getLogger(__name__)

Classifier = Callable[[str], InputClassification]


class PlayTrackStatus(Enum):
    """Status codes for play track results."""

    QUEUED = "queued"
    NOW_PLAYING = "now_playing"
    TRACK_NOT_FOUND = "track_not_found"
    RESOLUTION_ERROR = "resolution_error"
    VOICE_ERROR = "voice_error"
    QUEUE_FULL = "queue_full"


class PlayTrackCommand(BaseModel):
    """Request to resolve a query/URL, queue the track, and start playback."""

    model_config = ConfigDict(frozen=True, strict=True)

    guild_id: DiscordSnowflake
    channel_id: DiscordSnowflake
    user_name: NonEmptyStr
    query: NonEmptyStr

    @field_validator("query", mode="before")
    @classmethod
    def _strip_query(cls, v: str) -> str:
        if isinstance(v, str):
            return v.strip()
        return v


class PlayTrackResult(BaseModel):
    """Result of a play track command."""

    model_config = ConfigDict(frozen=True, strict=True)

    status: PlayTrackStatus
    message: str
    track: Track | None = None
    queue_position: NonNegativeInt | None = None
    queue_length: NonNegativeInt = 0
    started_playing: bool = False

    @property
    def is_success(self) -> bool:
        return self.status in {PlayTrackStatus.QUEUED, PlayTrackStatus.NOW_PLAYING}

    @classmethod
    def success(
        cls,
        track: Track,
        queue_position: int,
        queue_length: int,
        started_playing: bool = False,
    ) -> PlayTrackResult:
        if started_playing:
            status = PlayTrackStatus.NOW_PLAYING
            message = DiscordUIMessages.PLAY_NOW_PLAYING.format(title=track.title)
        else:
            status = PlayTrackStatus.QUEUED
            message = DiscordUIMessages.PLAY_QUEUED.format(
                title=track.title, position=queue_position
            )

        return cls(
            status=status,
            message=message,
            track=track,
            queue_position=queue_position,
            queue_length=queue_length,
            started_playing=started_playing,
        )

    @classmethod
    def error(cls, status: PlayTrackStatus, message: str) -> PlayTrackResult:
        return cls(status=status, message=message)


class PlayTrackHandler:
    """Turns a query into a Track, queues it, and asks the guild queue to play.

    A voice failure rolls the queue back to its state before the command.
    """

    def __init__(
        self,
        *,
        registry: QueueRegistry,
        stream_resolver: StreamResolver,
        classifier: Classifier,
    ) -> None:
        self._registry = registry
        self._resolver = stream_resolver
        self._classify = classifier

    async def handle(self, command: PlayTrackCommand) -> PlayTrackResult:
        classification = self._classify(command.query)
        platform = classification.platform

        try:
            source_url = await self._locate(classification, command.query)
            if source_url is None:
                return PlayTrackResult.error(
                    PlayTrackStatus.TRACK_NOT_FOUND,
                    DiscordUIMessages.ERROR_TRACK_NOT_FOUND.format(query=command.query),
                )
            if classification.is_search:
                platform = Platform.YOUTUBE

            metadata = await self._resolver.resolve_metadata(source_url)
        except Exception as e:
            logger.exception(LogTemplates.PLAY_COMMAND_FAILED, command.guild_id)
            return PlayTrackResult.error(
                PlayTrackStatus.RESOLUTION_ERROR,
                DiscordUIMessages.ERROR_RESOLUTION_FAILED.format(error=e),
            )

        if metadata is None:
            return PlayTrackResult.error(
                PlayTrackStatus.TRACK_NOT_FOUND,
                DiscordUIMessages.ERROR_TRACK_NOT_FOUND.format(query=command.query),
            )

        track = Track.from_metadata(
            source_url, metadata, requested_by=command.user_name, platform=platform
        )

        queue = self._registry.get(command.guild_id)
        try:
            position = queue.enqueue(track)
        except QueueFullError as e:
            return PlayTrackResult.error(PlayTrackStatus.QUEUE_FULL, e.message)

        try:
            started = await queue.play(command.channel_id)
        except VoiceConnectionError as e:
            queue.discard(track)
            return PlayTrackResult.error(
                PlayTrackStatus.VOICE_ERROR,
                DiscordUIMessages.ERROR_VOICE_CONNECTION_FAILED.format(error=e.message),
            )

        return PlayTrackResult.success(
            track=track,
            queue_position=position,
            queue_length=len(queue.queued),
            started_playing=started and queue.current is track,
        )

    async def _locate(self, classification: InputClassification, query: str) -> str | None:
        """Find the page URL of the single track the user asked for."""
        if classification.is_search:
            return await self._resolver.search(query)

        if classification.is_playlist and classification.track_id is None:
            stubs = await self._resolver.resolve_playlist(
                classification.playlist_url or classification.url or query
            )
            return stubs[0].source_url if stubs else None

        return classification.url
