"""Queue Registry - owns every guild's GuildQueue for the lifetime of the process."""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import TYPE_CHECKING

from ...domain.shared.messages import LogTemplates
from ...domain.shared.types import DiscordSnowflake
from .guild_queue import GuildQueue, TrackDroppedCallback

if TYPE_CHECKING:
    from ...config.settings import QueueSettings
    from ..interfaces.audio_decoder import DecoderFactory
    from ..interfaces.voice_transport import VoiceTransport

logger = logging.getLogger(__name__)

GuildQueueFactory = Callable[[DiscordSnowflake], GuildQueue]


class QueueRegistry:
    """Lazily creates guild queues and tears them down on removal."""

    def __init__(self, factory: GuildQueueFactory) -> None:
        self._factory = factory
        self._queues: dict[DiscordSnowflake, GuildQueue] = {}
        self._on_track_dropped: TrackDroppedCallback | None = None

    @classmethod
    def create(
        cls,
        *,
        transport: VoiceTransport,
        decoder_factory: DecoderFactory,
        settings: QueueSettings,
    ) -> QueueRegistry:
        def factory(guild_id: DiscordSnowflake) -> GuildQueue:
            return GuildQueue(
                guild_id,
                transport=transport,
                decoder_factory=decoder_factory,
                settings=settings,
            )

        return cls(factory)

    def set_track_dropped_callback(self, callback: TrackDroppedCallback | None) -> None:
        """Install *callback* on every current and future guild queue."""
        self._on_track_dropped = callback
        for queue in self._queues.values():
            queue.set_track_dropped_callback(callback)

    def get(self, guild_id: DiscordSnowflake) -> GuildQueue:
        queue = self._queues.get(guild_id)
        if queue is None:
            queue = self._factory(guild_id)
            queue.set_track_dropped_callback(self._on_track_dropped)
            self._queues[guild_id] = queue
            logger.debug(LogTemplates.QUEUE_CREATED, guild_id)
        return queue

    def find(self, guild_id: DiscordSnowflake) -> GuildQueue | None:
        return self._queues.get(guild_id)

    async def delete(self, guild_id: DiscordSnowflake) -> None:
        """Tear down and forget a guild's queue. Deleting an unknown guild is a no-op."""
        queue = self._queues.pop(guild_id, None)
        if queue is None:
            return
        await queue.teardown()
        logger.info(LogTemplates.QUEUE_DELETED, guild_id)

    async def shutdown(self) -> None:
        guild_ids = list(self._queues)
        for guild_id in guild_ids:
            try:
                await self.delete(guild_id)
            except Exception:
                logger.exception(LogTemplates.QUEUE_TEARDOWN_FAILED, guild_id)
        logger.info(LogTemplates.QUEUE_REGISTRY_SHUTDOWN, len(guild_ids))

    def __len__(self) -> int:
        return len(self._queues)

    def __contains__(self, guild_id: object) -> bool:
        return guild_id in self._queues
