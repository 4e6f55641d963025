import asyncio

import pytest
import pytest_asyncio

from discord_guild_queue.application.interfaces.audio_decoder import AudioDecoder
from discord_guild_queue.application.interfaces.stream_resolver import StreamResolver
from discord_guild_queue.application.interfaces.voice_transport import (
    AudioSink,
    VoiceConnection,
    VoiceTransport,
)
from discord_guild_queue.config.settings import QueueSettings
from discord_guild_queue.domain.shared.exceptions import (
    ConnectionFailedError,
    ResolutionFailedError,
)

GUILD_ID = 111111111111111111
CHANNEL_A = 222222222222222222
CHANNEL_B = 333333333333333333


# ============================================================================
# Voice Fakes
# ============================================================================


class FakeStream:
    """PCM frame stream with no frames."""

    def __init__(self) -> None:
        self.cleaned_up = False

    def read(self) -> bytes:
        return b""

    def is_opus(self) -> bool:
        return False

    def cleanup(self) -> None:
        self.cleaned_up = True


class FakeSink(AudioSink):
    """Audio sink that records streams and finishes them on demand.

    Errors queued in ``play_errors`` are raised by the next ``play`` calls.
    """

    def __init__(self) -> None:
        self.streams: list = []
        self.play_errors: list[Exception] = []
        self.paused = False
        self.stop_calls = 0
        self._after = None

    def play(self, stream, after) -> None:
        if self.play_errors:
            raise self.play_errors.pop(0)
        self.streams.append(stream)
        self._after = after

    def pause(self) -> None:
        self.paused = True

    def resume(self) -> None:
        self.paused = False

    def stop(self) -> None:
        self.stop_calls += 1
        after, self._after = self._after, None
        if after is not None:
            # discord.py reports the end of a stopped stream asynchronously
            asyncio.get_running_loop().call_soon(after, None)

    def finish(self, error: Exception | None = None) -> None:
        """Simulate the current stream reaching its end."""
        after, self._after = self._after, None
        if after is not None:
            after(error)


class FakeConnection(VoiceConnection):
    def __init__(self, channel_id: int, *, ready_error=None, ready_delay: float = 0.0) -> None:
        self._channel_id = channel_id
        self.ready_error = ready_error
        self.ready_delay = ready_delay
        self.sink = FakeSink()
        self.destroyed = False
        self.destroy_calls = 0
        self._listeners: list = []

    @property
    def channel_id(self) -> int:
        return self._channel_id

    async def wait_until_ready(self, timeout: float) -> None:
        if self.ready_delay:
            await asyncio.sleep(self.ready_delay)
        if self.ready_error is not None:
            raise self.ready_error

    def attach_sink(self, session) -> None:
        session.bind(self.sink)

    async def destroy(self) -> None:
        self.destroy_calls += 1
        if self.destroyed:
            return
        self.destroyed = True
        for listener in list(self._listeners):
            listener(self)

    def add_destroyed_listener(self, callback) -> None:
        self._listeners.append(callback)


class FakeTransport(VoiceTransport):
    def __init__(self) -> None:
        self.connections: list[FakeConnection] = []
        self.ready_errors: dict[int, Exception] = {}
        self.ready_delay = 0.0
        self.refuse = False

    async def connect(self, guild_id: int, channel_id: int) -> FakeConnection:
        if self.refuse:
            raise ConnectionFailedError(channel_id, "refused")
        connection = FakeConnection(
            channel_id,
            ready_error=self.ready_errors.get(channel_id),
            ready_delay=self.ready_delay,
        )
        self.connections.append(connection)
        return connection

    @property
    def latest(self) -> FakeConnection:
        return self.connections[-1]


# ============================================================================
# Decoder Fakes
# ============================================================================


class FakeDecoder(AudioDecoder):
    def __init__(self, factory: "FakeDecoderFactory") -> None:
        self._factory = factory
        self.track = None
        self.spawned_url: str | None = None
        self.terminated = False
        self._alive = False
        self._on_exit = None
        self.stderr = ""

    async def resolve(self, track) -> str:
        self._factory.attempts.append(track.source_url)
        if self._factory.gate is not None:
            await self._factory.gate.wait()
        remaining = self._factory.failures.get(track.source_url, 0)
        if remaining:
            self._factory.failures[track.source_url] = remaining - 1
            raise ResolutionFailedError(track.source_url, "unavailable")
        self.track = track
        return f"https://media.example.com/{len(self._factory.attempts)}.webm"

    def spawn(self, direct_url: str, duration_seconds: int):
        self.spawned_url = direct_url
        self._alive = True
        self._factory.started.append(self.track)
        return FakeStream()

    def terminate(self) -> None:
        self.terminated = True
        self._alive = False

    @property
    def is_alive(self) -> bool:
        return self._alive

    def stderr_tail(self) -> str:
        return self.stderr

    def on_exit(self, callback) -> None:
        self._on_exit = callback

    def exit(self, code: int) -> None:
        """Simulate the process exiting on its own."""
        self._alive = False
        if self._on_exit is not None:
            self._on_exit(self, code)


class FakeDecoderFactory:
    """Creates FakeDecoders; resolution of listed URLs fails a set number of times."""

    def __init__(self) -> None:
        self.created: list[FakeDecoder] = []
        self.attempts: list[str] = []
        self.started: list = []
        self.failures: dict[str, int] = {}
        self.gate: asyncio.Event | None = None

    def fail(self, source_url: str, times: int = 1_000) -> None:
        self.failures[source_url] = times

    def __call__(self) -> FakeDecoder:
        decoder = FakeDecoder(self)
        self.created.append(decoder)
        return decoder

    def live(self) -> list[FakeDecoder]:
        return [d for d in self.created if d.is_alive]


class FakeResolver(StreamResolver):
    def __init__(self) -> None:
        self.metadata: dict = {}
        self.playlists: dict = {}
        self.search_results: dict = {}
        self.error: Exception | None = None

    async def resolve_direct_url(self, url: str) -> str:
        return f"https://media.example.com/{abs(hash(url))}.webm"

    async def resolve_metadata(self, url: str):
        if self.error is not None:
            raise self.error
        return self.metadata.get(url)

    async def resolve_playlist(self, url: str):
        if self.error is not None:
            raise self.error
        return list(self.playlists.get(url, []))

    async def search(self, query: str):
        return self.search_results.get(query)


# ============================================================================
# Fixtures
# ============================================================================


@pytest.fixture
def queue_settings():
    """Queue settings with zero delays so scheduled advances run on the next loop turns."""
    return QueueSettings(
        max_size=5,
        max_retries=2,
        retry_delay_seconds=0.0,
        idle_advance_delay_seconds=0.0,
        inactivity_timeout_seconds=300.0,
        switch_settle_seconds=0.0,
        connect_timeout_seconds=1.0,
        disconnect_grace_seconds=0.0,
        playlist_max_size=3,
    )


@pytest.fixture
def transport():
    return FakeTransport()


@pytest.fixture
def decoder_factory():
    return FakeDecoderFactory()


@pytest.fixture
def resolver():
    return FakeResolver()


@pytest_asyncio.fixture
async def guild_queue(transport, decoder_factory, queue_settings):
    from discord_guild_queue.application.services.guild_queue import GuildQueue

    queue = GuildQueue(
        GUILD_ID,
        transport=transport,
        decoder_factory=decoder_factory,
        settings=queue_settings,
    )
    yield queue
    await queue.teardown()


@pytest.fixture
def make_track():
    """Build tracks with distinct source URLs."""
    from discord_guild_queue.domain.music.entities import Track

    def _make(name: str = "A", duration: int = 180) -> Track:
        return Track(
            title=f"Track {name}",
            source_url=f"https://www.youtube.com/watch?v=track{name:0>6}",
            duration_seconds=duration,
            requested_by="TestUser",
        )

    return _make


@pytest.fixture
def sample_track(make_track):
    return make_track("A")


@pytest.fixture
def settle():
    """Let scheduled callbacks and zero-delay tasks run."""

    async def _settle(rounds: int = 50) -> None:
        for _ in range(rounds):
            await asyncio.sleep(0)

    return _settle
