"""
Unit Tests for Dependency Injection Container

Tests for:
- Lazy initialization and caching of adapters, services and handlers
- Bot instance management (set_bot, bot property, error when not set)
- Shutdown delegating to the queue registry
"""

from unittest.mock import AsyncMock, MagicMock

import pytest

from discord_guild_queue.application.commands.enqueue_playlist import EnqueuePlaylistHandler
from discord_guild_queue.application.commands.play_track import PlayTrackHandler
from discord_guild_queue.application.services.queue_registry import QueueRegistry
from discord_guild_queue.config.container import Container, create_container
from discord_guild_queue.config.settings import QueueSettings, Settings
from discord_guild_queue.infrastructure.audio.ytdlp_resolver import YtDlpStreamResolver
from discord_guild_queue.infrastructure.discord.adapters.voice_transport import (
    DiscordVoiceTransport,
)


@pytest.fixture
def settings():
    return Settings(_env_file=None, queue=QueueSettings(playlist_max_size=7))


@pytest.fixture
def container(settings):
    return create_container(settings)


@pytest.fixture
def bot_container(container):
    container.set_bot(MagicMock())
    return container


class TestBot:
    def test_bot_not_set_raises(self, container):
        with pytest.raises(RuntimeError):
            _ = container.bot

    def test_set_bot(self, container):
        bot = MagicMock()
        container.set_bot(bot)
        assert container.bot is bot


class TestLazyProperties:
    """Should build each component on first access and reuse it afterwards."""

    def test_stream_resolver(self, container):
        resolver = container.stream_resolver

        assert isinstance(resolver, YtDlpStreamResolver)
        assert container.stream_resolver is resolver

    def test_voice_transport_requires_bot(self, container):
        with pytest.raises(RuntimeError):
            _ = container.voice_transport

    def test_voice_transport(self, bot_container):
        transport = bot_container.voice_transport

        assert isinstance(transport, DiscordVoiceTransport)
        assert bot_container.voice_transport is transport

    def test_decoder_factory_is_cached(self, container):
        assert container.decoder_factory is container.decoder_factory

    def test_queue_registry(self, bot_container):
        registry = bot_container.queue_registry

        assert isinstance(registry, QueueRegistry)
        assert bot_container.queue_registry is registry

    def test_handlers_share_registry(self, bot_container):
        play = bot_container.play_track_handler
        playlist = bot_container.enqueue_playlist_handler

        assert isinstance(play, PlayTrackHandler)
        assert isinstance(playlist, EnqueuePlaylistHandler)
        assert play._registry is bot_container.queue_registry
        assert playlist._registry is bot_container.queue_registry
        assert playlist._playlist_max_size == 7


class TestShutdown:
    async def test_shutdown_without_registry(self, container):
        await container.shutdown()

    async def test_shutdown_tears_down_registry(self, container):
        registry = MagicMock()
        registry.shutdown = AsyncMock()
        container._queue_registry = registry

        await container.shutdown()

        registry.shutdown.assert_awaited_once()


def test_create_container(settings):
    container = create_container(settings)

    assert isinstance(container, Container)
    assert container.settings is settings
