"""
FFmpeg Decoder Pipeline

Infrastructure component that resolves a track to a direct media URL and
supervises one discord.py FFmpeg source decoding it to loudness-normalized PCM.
"""

from __future__ import annotations

import asyncio
import io
import logging
import subprocess
import threading
from collections.abc import Callable
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

import discord

from discord_guild_queue.application.interfaces.audio_decoder import (
    AudioDecoder,
    DecoderExitCallback,
)
from discord_guild_queue.config.settings import AudioSettings
from discord_guild_queue.domain.shared.exceptions import (
    DecoderSpawnFailedError,
    ResolutionFailedError,
    StreamPrematureCloseError,
)
from discord_guild_queue.domain.shared.messages import ErrorMessages, LogTemplates
from discord_guild_queue.domain.shared.validators import is_direct_media_url

if TYPE_CHECKING:
    from ...application.interfaces.stream_resolver import StreamResolver
    from ...domain.music.entities import Track

logger = logging.getLogger(__name__)

# Single-pass dynamic normalizer for streams too long for loudnorm's lookahead.
DYNAUDNORM_FILTER = "dynaudnorm=f=500:g=31:p=0.95:m=10.0:r=0.9:b=1"

# How long a source that ran to the end waits for ffmpeg's exit status.
EXIT_WAIT_SECONDS = 2.0


@dataclass
class FFmpegConfig:
    """Configuration for FFmpeg audio decoding."""

    executable: str = "ffmpeg"

    # Reconnection settings for streaming
    reconnect: bool = True
    reconnect_streamed: bool = True
    reconnect_delay_max: int = 5

    # Loudness normalization
    normalization_enabled: bool = True
    target_lufs: float = -16.0
    target_lra: float = 11.0
    target_true_peak: float = -1.5
    long_track_threshold_seconds: int = 7200

    @classmethod
    def from_settings(cls, settings: AudioSettings) -> FFmpegConfig:
        return cls(
            executable=settings.ffmpeg_path,
            reconnect_delay_max=settings.reconnect_delay_max,
            normalization_enabled=settings.normalization_enabled,
            target_lufs=settings.target_lufs,
            target_lra=settings.target_lra,
            target_true_peak=settings.target_true_peak,
            long_track_threshold_seconds=settings.long_track_threshold_seconds,
        )

    def get_before_options(self) -> str:
        """Get FFmpeg before_options string."""
        opts = []
        if self.reconnect:
            opts.append("-reconnect 1")
        if self.reconnect_streamed:
            opts.append("-reconnect_streamed 1")
        if self.reconnect_delay_max:
            opts.append(f"-reconnect_delay_max {self.reconnect_delay_max}")
        opts.append("-analyzeduration 0")
        return " ".join(opts)

    def get_filter(self, duration_seconds: int) -> str | None:
        """Pick the normalization filter for a track length (0 means unknown)."""
        if not self.normalization_enabled:
            return None
        if duration_seconds < self.long_track_threshold_seconds:
            return (
                f"loudnorm=I={self.target_lufs:g}"
                f":LRA={self.target_lra:g}"
                f":TP={self.target_true_peak:g}"
            )
        return DYNAUDNORM_FILTER

    def get_options(self, duration_seconds: int) -> str:
        """Get FFmpeg options string; discord.py appends the s16le/48kHz/stereo output."""
        opts = ["-vn"]
        audio_filter = self.get_filter(duration_seconds)
        if audio_filter:
            opts.append(f'-af "{audio_filter}"')
        return " ".join(opts)


class StderrTail:
    """Write-only sink keeping the last ``limit`` bytes of ffmpeg diagnostics.

    It has no file descriptor, so discord.py pipes stderr and feeds it here
    from its reader thread.
    """

    def __init__(self, limit: int) -> None:
        self._limit = limit
        self._data = b""
        self._lock = threading.Lock()

    def fileno(self) -> int:
        raise io.UnsupportedOperation("fileno")

    def write(self, data: bytes) -> int:
        if data and self._limit > 0:
            with self._lock:
                self._data = (self._data + data)[-self._limit :]
        return len(data)

    def text(self) -> str:
        with self._lock:
            data = self._data
        return data.decode("utf-8", errors="replace")


class NormalizedPCMAudio(discord.FFmpegPCMAudio):
    """FFmpegPCMAudio that reports its exit status once and maps closed-pipe reads.

    ``cleanup`` runs from the voice player thread when the stream ends and
    from the event loop when the decoder is killed; only the first call acts.
    """

    def __init__(
        self,
        direct_url: str,
        *,
        config: FFmpegConfig,
        duration_seconds: int,
        stderr: StderrTail,
        on_closed: Callable[[int | None, bool], None],
    ) -> None:
        self._on_closed = on_closed
        self._killed = False
        self._closed = False
        self._close_lock = threading.Lock()
        super().__init__(
            direct_url,
            executable=config.executable,
            stderr=stderr,  # type: ignore[arg-type]
            before_options=config.get_before_options(),
            options=config.get_options(duration_seconds),
        )
        self._pid: int = self._process.pid

    @property
    def pid(self) -> int:
        return self._pid

    @property
    def is_running(self) -> bool:
        process = self._process
        return bool(process) and not self._closed and process.poll() is None

    def read(self) -> bytes:
        try:
            return super().read()
        except (AttributeError, ValueError, OSError) as exc:
            raise StreamPrematureCloseError() from exc

    def kill(self) -> None:
        self._killed = True
        self.cleanup()

    def cleanup(self) -> None:
        with self._close_lock:
            if self._closed:
                return
            self._closed = True

        process = self._process
        if not process:
            return
        if not self._killed:
            try:
                process.wait(timeout=EXIT_WAIT_SECONDS)
            except subprocess.TimeoutExpired:
                pass
        super().cleanup()
        self._on_closed(process.returncode, self._killed)


class DecoderPipeline(AudioDecoder):
    """Resolve-and-decode run for one track, owning at most one ffmpeg process."""

    def __init__(
        self,
        resolver: StreamResolver,
        config: FFmpegConfig | None = None,
        *,
        tail_bytes: int = 500,
        source_factory: Callable[..., NormalizedPCMAudio] = NormalizedPCMAudio,
    ) -> None:
        self._resolver = resolver
        self._config = config or FFmpegConfig()
        self._source_factory = source_factory

        self._stderr = StderrTail(tail_bytes)
        self._source: NormalizedPCMAudio | None = None
        self._on_exit: DecoderExitCallback | None = None
        self._loop: asyncio.AbstractEventLoop | None = None

    @property
    def pid(self) -> int | None:
        return self._source.pid if self._source is not None else None

    @property
    def is_alive(self) -> bool:
        return self._source is not None and self._source.is_running

    def on_exit(self, callback: DecoderExitCallback) -> None:
        self._on_exit = callback

    async def resolve(self, track: Track) -> str:
        try:
            direct_url = await self._resolver.resolve_direct_url(track.source_url)
        except ResolutionFailedError:
            raise
        except Exception as exc:
            raise ResolutionFailedError(track.source_url, str(exc)) from exc

        if not is_direct_media_url(direct_url):
            raise ResolutionFailedError(track.source_url, ErrorMessages.INVALID_DIRECT_URL)
        return direct_url

    def spawn(self, direct_url: str, duration_seconds: int) -> NormalizedPCMAudio:
        if self.is_alive:
            raise DecoderSpawnFailedError(ErrorMessages.DECODER_ALREADY_RUNNING)

        self._loop = self._running_loop()
        try:
            source = self._source_factory(
                direct_url,
                config=self._config,
                duration_seconds=duration_seconds,
                stderr=self._stderr,
                on_closed=self._on_source_closed,
            )
        except (discord.ClientException, OSError, ValueError) as exc:
            raise DecoderSpawnFailedError(str(exc)) from exc

        self._source = source
        logger.info(
            LogTemplates.DECODER_SPAWNED, source.pid, self._config.get_filter(duration_seconds)
        )
        return source

    def terminate(self) -> None:
        source = self._source
        if source is not None:
            source.kill()

    def stderr_tail(self) -> str:
        return self._stderr.text()

    # ── Exit reporting ─────────────────────────────────────────────────

    @staticmethod
    def _running_loop() -> asyncio.AbstractEventLoop | None:
        try:
            return asyncio.get_running_loop()
        except RuntimeError:
            return None

    def _on_source_closed(self, code: int | None, killed: bool) -> None:
        if killed:
            logger.debug(LogTemplates.DECODER_KILLED, self.pid)
            return
        callback = self._on_exit
        loop = self._loop
        if callback is None or loop is None or loop.is_closed():
            return
        loop.call_soon_threadsafe(callback, self, code)


def make_decoder_factory(
    resolver: StreamResolver, settings: AudioSettings, **kwargs: Any
) -> Callable[[], DecoderPipeline]:
    config = FFmpegConfig.from_settings(settings)

    def factory() -> DecoderPipeline:
        return DecoderPipeline(
            resolver, config, tail_bytes=settings.stderr_tail_bytes, **kwargs
        )

    return factory
