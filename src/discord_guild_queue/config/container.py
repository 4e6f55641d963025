"""Dependency Injection Container

Owns the application's dependency graph: the stream resolver, the voice
transport, the decoder factory, the queue registry and the command handlers.
Components are created on first access and cached for the process lifetime.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING

from ..domain.shared.messages import ErrorMessages

logger = logging.getLogger(__name__)

if TYPE_CHECKING:
    from discord.ext.commands import Bot

    from ..application.commands.enqueue_playlist import EnqueuePlaylistHandler
    from ..application.commands.play_track import PlayTrackHandler
    from ..application.interfaces.audio_decoder import DecoderFactory
    from ..application.interfaces.stream_resolver import StreamResolver
    from ..application.services.queue_registry import QueueRegistry
    from ..infrastructure.discord.adapters.voice_transport import DiscordVoiceTransport
    from .settings import Settings


@dataclass
class Container:
    """Dependency injection container.

    Components are lazily initialized when first accessed.
    """

    settings: Settings
    _bot: Bot | None = None

    # Infrastructure adapters
    _stream_resolver: StreamResolver | None = None
    _voice_transport: DiscordVoiceTransport | None = None
    _decoder_factory: DecoderFactory | None = None

    # Application services
    _queue_registry: QueueRegistry | None = None

    # Command handlers
    _play_track_handler: PlayTrackHandler | None = None
    _enqueue_playlist_handler: EnqueuePlaylistHandler | None = None

    def set_bot(self, bot: Bot) -> None:
        """Set the Discord bot instance."""
        self._bot = bot

    @property
    def bot(self) -> Bot:
        if self._bot is None:
            raise RuntimeError(ErrorMessages.BOT_NOT_INITIALIZED)
        return self._bot

    # === Infrastructure Adapters ===

    @property
    def stream_resolver(self) -> StreamResolver:
        if self._stream_resolver is None:
            from ..infrastructure.audio.ytdlp_resolver import YtDlpStreamResolver

            self._stream_resolver = YtDlpStreamResolver(self.settings.audio)
        return self._stream_resolver

    @property
    def voice_transport(self) -> DiscordVoiceTransport:
        """Get the voice transport. Requires the bot to be set."""
        if self._voice_transport is None:
            from ..infrastructure.discord.adapters.voice_transport import (
                DiscordVoiceTransport,
            )

            self._voice_transport = DiscordVoiceTransport(
                self.bot, self.settings.audio, self.settings.queue
            )
        return self._voice_transport

    @property
    def decoder_factory(self) -> DecoderFactory:
        if self._decoder_factory is None:
            from ..infrastructure.audio.ffmpeg_pipeline import make_decoder_factory

            self._decoder_factory = make_decoder_factory(
                self.stream_resolver, self.settings.audio
            )
        return self._decoder_factory

    # === Application Services ===

    @property
    def queue_registry(self) -> QueueRegistry:
        """Get the per-guild queue registry."""
        if self._queue_registry is None:
            from ..application.services.queue_registry import QueueRegistry

            self._queue_registry = QueueRegistry.create(
                transport=self.voice_transport,
                decoder_factory=self.decoder_factory,
                settings=self.settings.queue,
            )
        return self._queue_registry

    # === Command Handlers ===

    @property
    def play_track_handler(self) -> PlayTrackHandler:
        if self._play_track_handler is None:
            from ..application.commands.play_track import PlayTrackHandler
            from ..infrastructure.audio.url_classifier import classify

            self._play_track_handler = PlayTrackHandler(
                registry=self.queue_registry,
                stream_resolver=self.stream_resolver,
                classifier=classify,
            )
        return self._play_track_handler

    @property
    def enqueue_playlist_handler(self) -> EnqueuePlaylistHandler:
        if self._enqueue_playlist_handler is None:
            from ..application.commands.enqueue_playlist import EnqueuePlaylistHandler
            from ..infrastructure.audio.url_classifier import classify

            self._enqueue_playlist_handler = EnqueuePlaylistHandler(
                registry=self.queue_registry,
                stream_resolver=self.stream_resolver,
                classifier=classify,
                playlist_max_size=self.settings.queue.playlist_max_size,
            )
        return self._enqueue_playlist_handler

    # === Lifecycle ===

    async def shutdown(self) -> None:
        """Tear down every guild queue. Safe to call more than once."""
        if self._queue_registry is not None:
            await self._queue_registry.shutdown()


def create_container(settings: Settings) -> Container:
    """Create a new dependency injection container."""
    return Container(settings)
