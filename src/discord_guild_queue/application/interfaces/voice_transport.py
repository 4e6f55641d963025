"""Port interfaces for Discord voice connections and audio output."""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Callable
from typing import TYPE_CHECKING

from discord_guild_queue.domain.shared.types import DiscordSnowflake

if TYPE_CHECKING:
    from .audio_decoder import PCMStream
    from ..services.playback_session import PlaybackSession

SinkFinishedCallback = Callable[["Exception | None"], None]


class AudioSink(ABC):
    """Output end of a voice connection that consumes decoded PCM frame streams."""

    @abstractmethod
    def play(self, stream: "PCMStream", after: SinkFinishedCallback) -> None:
        """Start consuming *stream*; *after* runs on the event loop when it ends."""
        ...

    @abstractmethod
    def pause(self) -> None:
        ...

    @abstractmethod
    def resume(self) -> None:
        ...

    @abstractmethod
    def stop(self) -> None:
        ...


class VoiceConnection(ABC):
    """A single voice connection handle for one guild."""

    @property
    @abstractmethod
    def channel_id(self) -> DiscordSnowflake:
        ...

    @abstractmethod
    async def wait_until_ready(self, timeout: float) -> None:
        """Block until the connection can carry audio.

        Raises:
            TimeoutError: If the connection is not ready within *timeout* seconds.
        """
        ...

    @abstractmethod
    def attach_sink(self, session: "PlaybackSession") -> None:
        """Bind *session* to this connection's audio output."""
        ...

    @abstractmethod
    async def destroy(self) -> None:
        """Tear the connection down. Safe to call more than once."""
        ...

    @abstractmethod
    def add_destroyed_listener(self, callback: Callable[["VoiceConnection"], None]) -> None:
        """Register a callback fired once when the connection goes away."""
        ...


class VoiceTransport(ABC):
    """Interface for opening voice connections."""

    @abstractmethod
    async def connect(
        self, guild_id: DiscordSnowflake, channel_id: DiscordSnowflake
    ) -> VoiceConnection:
        """Open a connection handle to a voice channel.

        The handle may not be ready yet; callers await ``wait_until_ready``.

        Raises:
            ConnectionFailedError: If the guild or channel cannot be joined.
        """
        ...
