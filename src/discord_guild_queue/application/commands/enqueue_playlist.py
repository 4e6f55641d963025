"""Command and handler for queueing every entry of a playlist."""

from __future__ import annotations

import logging
from enum import Enum
from typing import TYPE_CHECKING

from pydantic import BaseModel, ConfigDict, field_validator

from discord_guild_queue.domain.music.entities import Track
from discord_guild_queue.domain.shared.exceptions import VoiceConnectionError
from discord_guild_queue.domain.shared.messages import DiscordUIMessages, LogTemplates
from discord_guild_queue.domain.shared.types import DiscordSnowflake, NonEmptyStr, NonNegativeInt

if TYPE_CHECKING:
    from ..interfaces.stream_resolver import StreamResolver
    from ..services.queue_registry import QueueRegistry
    from .play_track import Classifier

logger = logging.getLogger(__name__)


class EnqueuePlaylistStatus(Enum):
    QUEUED = "queued"
    NOT_A_PLAYLIST = "not_a_playlist"
    PLAYLIST_EMPTY = "playlist_empty"
    NOT_ENOUGH_SPACE = "not_enough_space"
    RESOLUTION_ERROR = "resolution_error"
    VOICE_ERROR = "voice_error"


class TruncationReason(Enum):
    PLAYLIST_LIMIT = "playlist_limit"
    QUEUE_SPACE = "queue_space"


class EnqueuePlaylistCommand(BaseModel):
    model_config = ConfigDict(frozen=True, strict=True)

    guild_id: DiscordSnowflake
    channel_id: DiscordSnowflake
    user_name: NonEmptyStr
    url: NonEmptyStr

    @field_validator("url", mode="before")
    @classmethod
    def _strip_url(cls, v: str) -> str:
        if isinstance(v, str):
            return v.strip()
        return v


class EnqueuePlaylistResult(BaseModel):
    model_config = ConfigDict(frozen=True, strict=True)

    status: EnqueuePlaylistStatus
    message: str
    enqueued: NonNegativeInt = 0
    playlist_size: NonNegativeInt = 0
    truncated_by: TruncationReason | None = None
    started_playing: bool = False

    @property
    def truncated(self) -> bool:
        return self.truncated_by is not None

    @property
    def is_success(self) -> bool:
        return self.status is EnqueuePlaylistStatus.QUEUED

    @classmethod
    def error(cls, status: EnqueuePlaylistStatus, message: str) -> EnqueuePlaylistResult:
        return cls(status=status, message=message)


class EnqueuePlaylistHandler:
    """Queues the head of a playlist that fits both ``playlist_max_size`` and the free queue slots.

    Only a full queue rejects the playlist outright; a voice failure rolls
    back every entry this call added.
    """

    def __init__(
        self,
        *,
        registry: QueueRegistry,
        stream_resolver: StreamResolver,
        classifier: Classifier,
        playlist_max_size: int,
    ) -> None:
        self._registry = registry
        self._resolver = stream_resolver
        self._classify = classifier
        self._playlist_max_size = playlist_max_size

    async def handle(self, command: EnqueuePlaylistCommand) -> EnqueuePlaylistResult:
        classification = self._classify(command.url)
        if not classification.is_playlist or classification.playlist_url is None:
            return EnqueuePlaylistResult.error(
                EnqueuePlaylistStatus.NOT_A_PLAYLIST, DiscordUIMessages.ERROR_NOT_A_PLAYLIST
            )

        try:
            stubs = await self._resolver.resolve_playlist(classification.playlist_url)
        except Exception as e:
            logger.exception(LogTemplates.PLAY_COMMAND_FAILED, command.guild_id)
            return EnqueuePlaylistResult.error(
                EnqueuePlaylistStatus.RESOLUTION_ERROR,
                DiscordUIMessages.ERROR_RESOLUTION_FAILED.format(error=e),
            )

        if not stubs:
            return EnqueuePlaylistResult.error(
                EnqueuePlaylistStatus.PLAYLIST_EMPTY, DiscordUIMessages.ERROR_PLAYLIST_EMPTY
            )

        playlist_size = len(stubs)
        queue = self._registry.get(command.guild_id)
        free_slots = queue.free_slots
        if free_slots == 0:
            return EnqueuePlaylistResult.error(
                EnqueuePlaylistStatus.NOT_ENOUGH_SPACE,
                DiscordUIMessages.ERROR_PLAYLIST_NOT_ENOUGH_SPACE.format(
                    needed=min(playlist_size, self._playlist_max_size), available=0
                ),
            )

        limit = min(self._playlist_max_size, free_slots)
        truncated_by = None
        if playlist_size > limit:
            truncated_by = (
                TruncationReason.QUEUE_SPACE
                if free_slots < self._playlist_max_size
                else TruncationReason.PLAYLIST_LIMIT
            )
        stubs = stubs[:limit]

        tracks = [
            Track.from_stub(stub, requested_by=command.user_name, platform=classification.platform)
            for stub in stubs
        ]
        for track in tracks:
            queue.enqueue(track)

        try:
            started = await queue.play(command.channel_id)
        except VoiceConnectionError as e:
            for track in tracks:
                queue.discard(track)
            return EnqueuePlaylistResult.error(
                EnqueuePlaylistStatus.VOICE_ERROR,
                DiscordUIMessages.ERROR_VOICE_CONNECTION_FAILED.format(error=e.message),
            )

        logger.info(LogTemplates.PLAYLIST_ENQUEUED, len(tracks), playlist_size, command.guild_id)
        message = DiscordUIMessages.PLAYLIST_QUEUED.format(count=len(tracks))
        if truncated_by is TruncationReason.QUEUE_SPACE:
            notice = DiscordUIMessages.PLAYLIST_TRUNCATED_QUEUE_SPACE.format(
                count=playlist_size, available=free_slots
            )
            message = f"{notice}\n{message}"
        elif truncated_by is TruncationReason.PLAYLIST_LIMIT:
            notice = DiscordUIMessages.PLAYLIST_TRUNCATED.format(
                count=playlist_size, max_size=self._playlist_max_size
            )
            message = f"{notice}\n{message}"
        return EnqueuePlaylistResult(
            status=EnqueuePlaylistStatus.QUEUED,
            message=message,
            enqueued=len(tracks),
            playlist_size=playlist_size,
            truncated_by=truncated_by,
            started_playing=started,
        )
