"""Playback session - the per-guild player bound to a voice connection's audio sink."""

from __future__ import annotations

import logging
from collections.abc import Callable
from enum import Enum
from functools import partial
from typing import TYPE_CHECKING, Any

from ...domain.shared.exceptions import SinkStartFailedError, StreamPrematureCloseError
from ...domain.shared.messages import ErrorMessages, LogTemplates
from ...domain.shared.types import DiscordSnowflake

if TYPE_CHECKING:
    from ..interfaces.audio_decoder import PCMStream
    from ..interfaces.voice_transport import AudioSink

logger = logging.getLogger(__name__)

SessionListener = Callable[..., Any]


class SessionEvent(Enum):
    IDLE = "idle"
    PLAYING = "playing"
    ERROR = "error"


class SessionStatus(Enum):
    IDLE = "idle"
    PLAYING = "playing"
    PAUSED = "paused"


class PlaybackSession:
    """Plays one stream at a time through a bound audio sink.

    Every ``play`` starts a new generation. The sink's finish callback carries
    the generation it was issued for, so a callback from a stream that has
    already been replaced or halted is dropped instead of reported as idle.

    Listeners are called as ``listener(session, *args)``; the ERROR event also
    passes the exception.
    """

    def __init__(self, guild_id: DiscordSnowflake) -> None:
        self._guild_id = guild_id
        self._sink: AudioSink | None = None
        self._status = SessionStatus.IDLE
        self._generation = 0
        self._listeners: dict[SessionEvent, list[SessionListener]] = {
            event: [] for event in SessionEvent
        }

    @property
    def guild_id(self) -> DiscordSnowflake:
        return self._guild_id

    @property
    def status(self) -> SessionStatus:
        return self._status

    @property
    def is_bound(self) -> bool:
        return self._sink is not None

    @property
    def is_active(self) -> bool:
        """True while a stream is playing or paused."""
        return self._status is not SessionStatus.IDLE

    @property
    def is_paused(self) -> bool:
        return self._status is SessionStatus.PAUSED

    # ── Sink binding ───────────────────────────────────────────────

    def bind(self, sink: AudioSink) -> None:
        self._sink = sink

    def unbind(self) -> None:
        self._sink = None

    # ── Subscriptions ──────────────────────────────────────────────

    def on(self, event: SessionEvent, listener: SessionListener) -> None:
        self._listeners[event].append(listener)

    def remove_all_listeners(self) -> None:
        for listeners in self._listeners.values():
            listeners.clear()

    def _emit(self, event: SessionEvent, *args: Any) -> None:
        for listener in list(self._listeners[event]):
            try:
                listener(self, *args)
            except Exception:
                logger.exception(LogTemplates.PLAYBACK_LISTENER_ERROR, event.value, self._guild_id)

    # ── Playback control ───────────────────────────────────────────

    def play(self, stream: PCMStream) -> None:
        """Start streaming *stream* through the bound sink.

        Raises:
            SinkStartFailedError: If no sink is bound or the sink rejects the stream.
        """
        if self._sink is None:
            raise SinkStartFailedError(ErrorMessages.SESSION_NOT_BOUND)

        generation = self._generation + 1
        try:
            self._sink.play(stream, after=partial(self._on_sink_finished, generation))
        except Exception as exc:
            raise SinkStartFailedError(str(exc) or type(exc).__name__) from exc
        self._generation = generation
        self._status = SessionStatus.PLAYING
        logger.debug(LogTemplates.PLAYBACK_STARTED, self._guild_id)
        self._emit(SessionEvent.PLAYING)

    def pause(self) -> bool:
        if self._sink is None or self._status is not SessionStatus.PLAYING:
            return False
        self._sink.pause()
        self._status = SessionStatus.PAUSED
        logger.info(LogTemplates.PLAYBACK_PAUSED, self._guild_id)
        return True

    def resume(self) -> bool:
        if self._sink is None or self._status is not SessionStatus.PAUSED:
            return False
        self._sink.resume()
        self._status = SessionStatus.PLAYING
        logger.info(LogTemplates.PLAYBACK_RESUMED, self._guild_id)
        return True

    def stop(self) -> None:
        """Stop the current stream; the sink's finish callback then reports IDLE."""
        if self._sink is not None:
            self._sink.stop()

    def halt(self) -> None:
        """Stop the current stream without emitting any further events."""
        self._generation += 1
        self._status = SessionStatus.IDLE
        if self._sink is not None:
            self._sink.stop()

    def _on_sink_finished(self, generation: int, error: Exception | None = None) -> None:
        if generation != self._generation:
            logger.debug(LogTemplates.PLAYBACK_STALE_CALLBACK, self._guild_id)
            return

        self._status = SessionStatus.IDLE
        if isinstance(error, StreamPrematureCloseError):
            logger.debug(LogTemplates.PLAYBACK_PREMATURE_CLOSE, self._guild_id)
        elif error is not None:
            logger.debug(LogTemplates.PLAYBACK_ERROR, self._guild_id, error)
            self._emit(SessionEvent.ERROR, error)
        self._emit(SessionEvent.IDLE)
