"""Port interface for the per-track decode pipeline."""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Callable
from typing import TYPE_CHECKING, Protocol

if TYPE_CHECKING:
    from ...domain.music.entities import Track


class PCMStream(Protocol):
    """Decoded 20ms frames of 48kHz stereo s16le audio, as the voice sink consumes them."""

    def read(self) -> bytes:
        """Return the next frame, or b"" once the stream has ended."""
        ...

    def is_opus(self) -> bool:
        ...

    def cleanup(self) -> None:
        ...


DecoderExitCallback = Callable[["AudioDecoder", "int | None"], None]


class AudioDecoder(ABC):
    """One resolve-and-decode run bound to a single track.

    A decoder owns at most one subprocess. ``terminate`` kills it
    immediately and is safe to call any number of times.
    """

    @abstractmethod
    async def resolve(self, track: "Track") -> str:
        """Resolve the track's page URL to a direct media URL.

        Raises:
            ResolutionFailedError: On resolver failure or an unusable result.
        """
        ...

    @abstractmethod
    def spawn(self, direct_url: str, duration_seconds: int) -> PCMStream:
        """Start decoding and return the PCM frame stream.

        Raises:
            DecoderSpawnFailedError: If the subprocess cannot be started.
        """
        ...

    @abstractmethod
    def terminate(self) -> None:
        ...

    @property
    @abstractmethod
    def is_alive(self) -> bool:
        ...

    @abstractmethod
    def stderr_tail(self) -> str:
        """Last bytes of decoder diagnostics, for logging only."""
        ...

    @abstractmethod
    def on_exit(self, callback: DecoderExitCallback) -> None:
        """Register a callback run on the event loop once the process exits on its own.

        A process killed through ``terminate`` is not reported.
        """
        ...


DecoderFactory = Callable[[], AudioDecoder]
