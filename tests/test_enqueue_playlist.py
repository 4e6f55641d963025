"""
Tests for EnqueuePlaylistHandler
"""

import pytest
import pytest_asyncio

from conftest import CHANNEL_A, GUILD_ID
from discord_guild_queue.application.commands.enqueue_playlist import (
    EnqueuePlaylistCommand,
    EnqueuePlaylistHandler,
    EnqueuePlaylistStatus,
    TruncationReason,
)
from discord_guild_queue.application.services.queue_registry import QueueRegistry
from discord_guild_queue.domain.music.value_objects import Platform, TrackStub
from discord_guild_queue.domain.shared.messages import DiscordUIMessages
from discord_guild_queue.infrastructure.audio.url_classifier import classify

PLAYLIST_URL = "https://www.youtube.com/playlist?list=PLabc"


def _stubs(count: int) -> list[TrackStub]:
    return [
        TrackStub(
            title=f"Entry {i}",
            source_url=f"https://www.youtube.com/watch?v=entry{i:0>6}",
            duration_seconds=100 + i,
        )
        for i in range(count)
    ]


def _command(url: str = PLAYLIST_URL) -> EnqueuePlaylistCommand:
    return EnqueuePlaylistCommand(
        guild_id=GUILD_ID, channel_id=CHANNEL_A, user_name="TestUser", url=url
    )


@pytest_asyncio.fixture
async def registry(transport, decoder_factory, queue_settings):
    registry = QueueRegistry.create(
        transport=transport, decoder_factory=decoder_factory, settings=queue_settings
    )
    yield registry
    await registry.shutdown()


@pytest.fixture
def handler(registry, resolver, queue_settings):
    return EnqueuePlaylistHandler(
        registry=registry,
        stream_resolver=resolver,
        classifier=classify,
        playlist_max_size=queue_settings.playlist_max_size,
    )


class TestEnqueuePlaylistHandler:
    """Tests for capped playlist queueing."""

    async def test_queues_entries_and_starts(self, handler, registry, resolver):
        """Should queue entries in order and start the first."""
        resolver.playlists[PLAYLIST_URL] = _stubs(2)

        result = await handler.handle(_command())

        assert result.status is EnqueuePlaylistStatus.QUEUED
        assert result.enqueued == 2
        assert result.truncated is False
        assert result.started_playing is True
        queue = registry.get(GUILD_ID)
        assert queue.current.title == "Entry 0"
        assert [t.title for t in queue.queued] == ["Entry 1"]
        assert all(t.requested_by == "TestUser" for t in queue.queued)

    async def test_long_playlist_is_truncated(self, handler, resolver):
        """Should cap the playlist and report the original size."""
        resolver.playlists[PLAYLIST_URL] = _stubs(4)

        result = await handler.handle(_command())

        assert result.enqueued == 3
        assert result.playlist_size == 4
        assert result.truncated is True
        assert result.truncated_by is TruncationReason.PLAYLIST_LIMIT
        assert result.message.startswith(
            DiscordUIMessages.PLAYLIST_TRUNCATED.format(count=4, max_size=3)
        )

    async def test_watch_url_with_list_uses_playlist(self, handler, resolver):
        resolver.playlists[PLAYLIST_URL] = _stubs(1)

        result = await handler.handle(
            _command("https://www.youtube.com/watch?v=dQw4w9WgXcQ&list=PLabc")
        )

        assert result.is_success

    async def test_soundcloud_set(self, handler, registry, resolver):
        url = "https://soundcloud.com/artist/sets/road-trip"
        resolver.playlists[url] = _stubs(1)

        await handler.handle(_command(url))

        assert registry.get(GUILD_ID).current.platform is Platform.SOUNDCLOUD

    async def test_not_a_playlist(self, handler):
        result = await handler.handle(_command("https://www.youtube.com/watch?v=dQw4w9WgXcQ"))

        assert result.status is EnqueuePlaylistStatus.NOT_A_PLAYLIST

    async def test_empty_playlist(self, handler):
        result = await handler.handle(_command())

        assert result.status is EnqueuePlaylistStatus.PLAYLIST_EMPTY

    async def test_resolver_error(self, handler, resolver):
        resolver.error = RuntimeError("private playlist")

        result = await handler.handle(_command())

        assert result.status is EnqueuePlaylistStatus.RESOLUTION_ERROR

    async def test_partial_enqueue_fills_free_slots(
        self, handler, registry, resolver, make_track
    ):
        """Should queue as many entries as fit and report the queue-space cut."""
        queue = registry.get(GUILD_ID)
        for i in range(queue.max_size - 1):
            queue.enqueue(make_track(str(i)))
        resolver.playlists[PLAYLIST_URL] = _stubs(3)

        result = await handler.handle(_command())

        assert result.status is EnqueuePlaylistStatus.QUEUED
        assert result.enqueued == 1
        assert result.playlist_size == 3
        assert result.truncated_by is TruncationReason.QUEUE_SPACE
        assert "only 1 slots" in result.message
        assert result.message.endswith(DiscordUIMessages.PLAYLIST_QUEUED.format(count=1))
        assert queue.free_slots == 1
        assert "Entry 0" in [t.title for t in (queue.current, *queue.queued)]
        assert "Entry 1" not in [t.title for t in queue.queued]

    async def test_queue_space_wins_over_playlist_limit(
        self, handler, registry, resolver, make_track
    ):
        """Should name queue space when it is the tighter of the two caps."""
        queue = registry.get(GUILD_ID)
        for i in range(queue.max_size - 2):
            queue.enqueue(make_track(str(i)))
        resolver.playlists[PLAYLIST_URL] = _stubs(10)

        result = await handler.handle(_command())

        assert result.enqueued == 2
        assert result.truncated_by is TruncationReason.QUEUE_SPACE

    async def test_playlist_that_fits_is_not_truncated(
        self, handler, registry, resolver, make_track
    ):
        queue = registry.get(GUILD_ID)
        queue.enqueue(make_track("E"))
        resolver.playlists[PLAYLIST_URL] = _stubs(3)

        result = await handler.handle(_command())

        assert result.enqueued == 3
        assert result.truncated is False
        assert result.message == DiscordUIMessages.PLAYLIST_QUEUED.format(count=3)

    async def test_full_queue_rejects_playlist(self, handler, registry, resolver, make_track):
        """Should add nothing only when no slot is free."""
        queue = registry.get(GUILD_ID)
        for i in range(queue.max_size):
            queue.enqueue(make_track(str(i)))
        resolver.playlists[PLAYLIST_URL] = _stubs(2)

        result = await handler.handle(_command())

        assert result.status is EnqueuePlaylistStatus.NOT_ENOUGH_SPACE
        assert result.enqueued == 0
        assert len(queue.queued) == queue.max_size

    async def test_voice_failure_rolls_back_playlist(
        self, handler, registry, resolver, transport, make_track
    ):
        """Should remove every playlist entry but keep tracks queued before."""
        queue = registry.get(GUILD_ID)
        earlier = make_track("E")
        queue.enqueue(earlier)
        resolver.playlists[PLAYLIST_URL] = _stubs(2)
        transport.refuse = True

        result = await handler.handle(_command())

        assert result.status is EnqueuePlaylistStatus.VOICE_ERROR
        assert queue.queued == (earlier,)
