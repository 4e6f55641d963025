"""Guild Queue - per-guild playback state machine.

Owns the pending tracks, the voice connection, the playback session and the
decoder pipeline for one guild, and drives them through connect, advance,
retry, channel switch and teardown.
"""

from __future__ import annotations

import asyncio
import logging
from collections import deque
from collections.abc import Callable
from functools import partial
from typing import TYPE_CHECKING, Any

from ...domain.music.retry_policy import RetryPolicy
from ...domain.music.value_objects import QueueState
from ...domain.shared.exceptions import (
    ConnectionFailedError,
    ConnectionTimeoutError,
    DomainError,
    PlaybackStartError,
    QueueFullError,
)
from ...domain.shared.messages import LogTemplates
from ...domain.shared.types import DiscordSnowflake
from .playback_session import PlaybackSession, SessionEvent

if TYPE_CHECKING:
    from ...config.settings import QueueSettings
    from ...domain.music.entities import Track
    from ..interfaces.audio_decoder import AudioDecoder, DecoderFactory
    from ..interfaces.voice_transport import VoiceConnection, VoiceTransport

logger = logging.getLogger(__name__)

TrackDroppedCallback = Callable[[DiscordSnowflake, "Track", Exception], Any]


class GuildQueue:
    """Playback queue and connection lifecycle for a single guild.

    Concurrent triggers are reconciled with guard flags (``connecting``,
    ``advancing``, ``waiting_for_next``, ``switching``) and an epoch counter.
    ``stop()``, channel switches and connection loss bump the epoch, which
    lets coroutines suspended across an await (stream resolution, delayed
    advances, an in-flight connect) detect that their work was superseded.
    """

    def __init__(
        self,
        guild_id: DiscordSnowflake,
        *,
        transport: VoiceTransport,
        decoder_factory: DecoderFactory,
        settings: QueueSettings,
    ) -> None:
        self._guild_id = guild_id
        self._transport = transport
        self._decoder_factory = decoder_factory
        self._settings = settings

        self._tracks: deque[Track] = deque()
        self._current: Track | None = None
        self._connection: VoiceConnection | None = None
        self._pipeline: AudioDecoder | None = None
        self._session = self._new_session()

        self._is_playing = False
        self._waiting_for_next = False
        self._advancing = False
        self._connecting = False
        self._switching = False
        self._epoch = 0

        self._retry = RetryPolicy(max_retries=settings.max_retries)
        self._idle_timer: asyncio.Task[None] | None = None
        self._scheduled: set[asyncio.Task[None]] = set()

        self._on_track_dropped: TrackDroppedCallback | None = None

    # ─────────────────────────────────────────────────────────────────
    # Accessors
    # ─────────────────────────────────────────────────────────────────

    @property
    def guild_id(self) -> DiscordSnowflake:
        return self._guild_id

    @property
    def current(self) -> Track | None:
        return self._current

    @property
    def queued(self) -> tuple[Track, ...]:
        return tuple(self._tracks)

    @property
    def is_playing(self) -> bool:
        return self._is_playing

    @property
    def is_paused(self) -> bool:
        return self._session.is_paused

    @property
    def connected_channel_id(self) -> DiscordSnowflake | None:
        return self._connection.channel_id if self._connection is not None else None

    @property
    def max_size(self) -> int:
        return self._settings.max_size

    @property
    def free_slots(self) -> int:
        return max(0, self._settings.max_size - len(self._tracks))

    @property
    def state(self) -> QueueState:
        if self._switching:
            return QueueState.SWITCHING
        if self._connecting:
            return QueueState.CONNECTING
        if self._connection is None:
            return QueueState.DISCONNECTED
        if self._session.is_paused:
            return QueueState.PAUSED
        if self._is_playing:
            return QueueState.PLAYING
        return QueueState.IDLE

    def set_track_dropped_callback(self, callback: TrackDroppedCallback | None) -> None:
        self._on_track_dropped = callback

    # ─────────────────────────────────────────────────────────────────
    # Queue operations
    # ─────────────────────────────────────────────────────────────────

    def enqueue(self, track: Track) -> int:
        """Append *track* and return its 1-based position in the queue.

        Raises:
            QueueFullError: If the queue already holds ``max_size`` tracks.
        """
        if len(self._tracks) >= self._settings.max_size:
            raise QueueFullError(self._settings.max_size)

        self._tracks.append(track)
        self._cancel_idle_timer()
        position = len(self._tracks)
        logger.info(LogTemplates.QUEUE_ENQUEUED, track.title, position, self._guild_id)
        return position

    def discard(self, track: Track) -> bool:
        """Remove the most recently queued occurrence of *track*, if still pending."""
        for index in range(len(self._tracks) - 1, -1, -1):
            if self._tracks[index] is track:
                del self._tracks[index]
                logger.info(LogTemplates.QUEUE_ROLLED_BACK, track.title, self._guild_id)
                return True
        return False

    async def play(self, channel_id: DiscordSnowflake) -> bool:
        """Make sure the bot is in *channel_id* and playing.

        Returns True only if this call started a track. Returns False while
        another call is still connecting.

        Raises:
            ConnectionTimeoutError: If the new connection never became ready.
            ConnectionFailedError: If the transport could not join the channel.
        """
        if self._connecting:
            logger.info(LogTemplates.VOICE_CONNECT_PENDING, self._guild_id)
            return False

        if self._connection is not None and self._connection.channel_id == channel_id:
            if self._is_playing or not self._tracks or self._advancing:
                return False
            return await self._advance()

        self._connecting = True
        try:
            if self._connection is not None:
                epoch = await self._switch_channel(channel_id)
                if epoch != self._epoch:
                    return False
            if not await self._connect(channel_id):
                return False
        finally:
            self._connecting = False

        if not self._tracks:
            self._arm_idle_timer()
            return False
        return await self._advance()

    def skip(self) -> bool:
        if self._current is None or not self._session.is_active:
            return False

        logger.info(LogTemplates.TRACK_SKIPPED, self._current.title, self._guild_id)
        self._release_pipeline()
        self._session.stop()
        return True

    def pause(self) -> bool:
        if not self._is_playing:
            return False
        return self._session.pause()

    def resume(self) -> bool:
        if not self._session.is_paused:
            return False
        return self._session.resume()

    async def stop(self) -> None:
        """Hard reset: clear everything, kill the decoder and leave voice."""
        logger.info(LogTemplates.QUEUE_STOPPED, self._guild_id)
        self._epoch += 1
        self._tracks.clear()
        self._current = None
        self._cancel_idle_timer()
        self._cancel_scheduled()
        self._release_pipeline()
        self._session.halt()
        self._session.unbind()
        self._reset_flags()
        self._retry.reset()

        connection, self._connection = self._connection, None
        if connection is not None:
            await self._destroy_connection(connection)

    async def teardown(self) -> None:
        await self.stop()
        self._session.remove_all_listeners()
        self._on_track_dropped = None

    # ─────────────────────────────────────────────────────────────────
    # Connection lifecycle
    # ─────────────────────────────────────────────────────────────────

    async def _connect(self, channel_id: DiscordSnowflake) -> bool:
        epoch = self._epoch
        logger.info(LogTemplates.VOICE_CONNECTING, channel_id, self._guild_id)

        try:
            connection = await self._transport.connect(self._guild_id, channel_id)
        except DomainError:
            raise
        except Exception as exc:
            logger.error(LogTemplates.VOICE_CONNECTION_FAILED, channel_id, self._guild_id, exc)
            raise ConnectionFailedError(channel_id, str(exc)) from exc

        timeout = self._settings.connect_timeout_seconds
        try:
            await connection.wait_until_ready(timeout)
        except TimeoutError as exc:
            logger.error(LogTemplates.VOICE_CONNECTION_TIMEOUT, channel_id, self._guild_id)
            await self._destroy_connection(connection)
            raise ConnectionTimeoutError(channel_id, timeout) from exc
        except DomainError:
            await self._destroy_connection(connection)
            raise
        except Exception as exc:
            logger.error(LogTemplates.VOICE_CONNECTION_FAILED, channel_id, self._guild_id, exc)
            await self._destroy_connection(connection)
            raise ConnectionFailedError(channel_id, str(exc)) from exc

        if epoch != self._epoch:
            await self._destroy_connection(connection)
            return False

        connection.add_destroyed_listener(self._on_connection_destroyed)
        connection.attach_sink(self._session)
        self._connection = connection
        logger.info(LogTemplates.VOICE_CONNECTED, channel_id, self._guild_id)
        return True

    async def _switch_channel(self, channel_id: DiscordSnowflake) -> int:
        """Tear down the current connection but keep the pending tracks.

        Returns the epoch the switch established.
        """
        old = self._connection
        logger.info(
            LogTemplates.VOICE_CHANNEL_SWITCH,
            self._guild_id,
            old.channel_id if old is not None else None,
            channel_id,
        )
        self._switching = True
        try:
            saved = list(self._tracks)
            self._epoch += 1
            epoch = self._epoch
            self._cancel_scheduled()
            self._release_pipeline()

            self._connection = None
            if old is not None:
                await self._destroy_connection(old)

            self._rebuild_session()
            self._reset_flags()
            self._retry.reset()
            self._current = None
            self._tracks = deque(saved)
            logger.info(LogTemplates.VOICE_CHANNEL_SWITCH_DONE, self._guild_id, len(saved))

            await asyncio.sleep(self._settings.switch_settle_seconds)
        finally:
            self._switching = False
        return epoch

    async def _destroy_connection(self, connection: VoiceConnection) -> None:
        try:
            await connection.destroy()
        except Exception as exc:
            logger.warning(LogTemplates.VOICE_CLEANUP_ERROR, self._guild_id, exc)

    def _on_connection_destroyed(self, connection: VoiceConnection) -> None:
        if connection is not self._connection:
            return

        logger.warning(LogTemplates.VOICE_CONNECTION_LOST, self._guild_id)
        self._connection = None
        self._epoch += 1
        self._cancel_scheduled()
        self._release_pipeline()
        self._session.halt()
        self._session.unbind()
        self._reset_flags()
        self._current = None
        self._arm_idle_timer()

    # ─────────────────────────────────────────────────────────────────
    # Advancing
    # ─────────────────────────────────────────────────────────────────

    async def _advance(self) -> bool:
        if self._advancing:
            logger.debug(LogTemplates.QUEUE_ADVANCE_IN_FLIGHT, self._guild_id)
            return False
        if self._session.is_active:
            logger.debug(LogTemplates.QUEUE_ADVANCE_STALE, self._guild_id)
            return False

        self._advancing = True
        epoch = self._epoch
        try:
            if not self._tracks:
                self._current = None
                self._is_playing = False
                self._arm_idle_timer()
                return False

            track = self._tracks.popleft()
            self._current = track
            self._is_playing = True
            self._cancel_idle_timer()
            return await self._start_track(track, epoch)
        finally:
            if epoch == self._epoch:
                self._advancing = False

    async def _start_track(self, track: Track, epoch: int) -> bool:
        pipeline = self._decoder_factory()
        try:
            direct_url = await pipeline.resolve(track)
            if epoch != self._epoch:
                logger.info(LogTemplates.TRACK_START_SUPERSEDED, track.title, self._guild_id)
                pipeline.terminate()
                return False

            self._release_pipeline()
            pipeline.on_exit(partial(self._on_decoder_exit, track))
            stream = pipeline.spawn(direct_url, track.duration_seconds)
            self._pipeline = pipeline
            self._session.play(stream)
        except PlaybackStartError as exc:
            pipeline.terminate()
            if self._pipeline is pipeline:
                self._pipeline = None
            if epoch == self._epoch:
                self._handle_failure(track, exc)
            return False

        self._retry.record_success(track.identity)
        logger.info(LogTemplates.TRACK_STARTED, track.title, self._guild_id)
        return True

    def _handle_failure(self, track: Track, error: Exception) -> None:
        self._current = None
        self._is_playing = False

        if self._retry.should_retry(track.identity):
            attempt = self._retry.record_retry(track.identity)
            logger.warning(
                LogTemplates.TRACK_RETRYING,
                track.title,
                attempt,
                self._retry.max_retries,
                self._guild_id,
                error,
            )
            self._tracks.appendleft(track)
            self._schedule_advance(self._settings.retry_delay_seconds)
            return

        self._retry.record_drop(track.identity)
        logger.error(LogTemplates.TRACK_DROPPED, track.title, self._guild_id, error)
        if self._on_track_dropped is not None:
            try:
                self._on_track_dropped(self._guild_id, track, error)
            except Exception:
                logger.exception(LogTemplates.TRACK_DROP_CALLBACK_ERROR, self._guild_id)
        self._schedule_advance(self._settings.idle_advance_delay_seconds)

    def _schedule_advance(self, delay: float) -> None:
        task = asyncio.create_task(self._delayed_advance(delay, self._epoch))
        self._scheduled.add(task)
        task.add_done_callback(self._scheduled.discard)

    async def _delayed_advance(self, delay: float, epoch: int) -> None:
        await asyncio.sleep(delay)
        if epoch != self._epoch or self._connection is None:
            return

        self._waiting_for_next = False
        try:
            await self._advance()
        except Exception:
            logger.exception(LogTemplates.QUEUE_ADVANCE_FAILED, self._guild_id)

    def _cancel_scheduled(self) -> None:
        for task in list(self._scheduled):
            task.cancel()
        self._scheduled.clear()

    # ─────────────────────────────────────────────────────────────────
    # Session and decoder notifications
    # ─────────────────────────────────────────────────────────────────

    def _new_session(self) -> PlaybackSession:
        session = PlaybackSession(self._guild_id)
        session.on(SessionEvent.IDLE, self._on_session_idle)
        session.on(SessionEvent.PLAYING, self._on_session_playing)
        session.on(SessionEvent.ERROR, self._on_session_error)
        return session

    def _rebuild_session(self) -> None:
        old = self._session
        old.remove_all_listeners()
        old.halt()
        old.unbind()
        self._session = self._new_session()

    def _on_session_idle(self, session: PlaybackSession) -> None:
        if session is not self._session or self._connection is None:
            return

        self._is_playing = False
        self._release_pipeline()
        if self._waiting_for_next:
            return
        self._waiting_for_next = True
        self._schedule_advance(self._settings.idle_advance_delay_seconds)

    def _on_session_playing(self, session: PlaybackSession) -> None:
        if session is not self._session:
            return
        self._waiting_for_next = False

    def _on_session_error(self, session: PlaybackSession, error: Exception) -> None:
        if session is not self._session:
            return
        title = self._current.title if self._current is not None else None
        logger.warning(LogTemplates.PLAYBACK_TRACK_ERROR, title, self._guild_id, error)

    def _on_decoder_exit(self, track: Track, pipeline: AudioDecoder, code: int | None) -> None:
        if code:
            logger.warning(
                LogTemplates.DECODER_FAILED,
                track.title,
                code,
                self._guild_id,
                pipeline.stderr_tail(),
            )
        else:
            logger.debug(LogTemplates.DECODER_EXITED, code, self._guild_id)

    def _release_pipeline(self) -> None:
        pipeline, self._pipeline = self._pipeline, None
        if pipeline is not None:
            pipeline.terminate()

    # ─────────────────────────────────────────────────────────────────
    # Inactivity timer
    # ─────────────────────────────────────────────────────────────────

    def _arm_idle_timer(self) -> None:
        self._cancel_idle_timer()
        timeout = self._settings.inactivity_timeout_seconds
        logger.info(LogTemplates.QUEUE_EXHAUSTED, self._guild_id, timeout)
        self._idle_timer = asyncio.create_task(self._idle_expired(timeout))

    def _cancel_idle_timer(self) -> None:
        timer, self._idle_timer = self._idle_timer, None
        if timer is not None and not timer.done():
            timer.cancel()
            logger.debug(LogTemplates.QUEUE_IDLE_TIMER_CANCELLED, self._guild_id)

    async def _idle_expired(self, timeout: float) -> None:
        try:
            await asyncio.sleep(timeout)
        except asyncio.CancelledError:
            return

        self._idle_timer = None
        logger.info(LogTemplates.QUEUE_INACTIVITY_TIMEOUT, timeout, self._guild_id)
        await self.stop()

    def _reset_flags(self) -> None:
        self._is_playing = False
        self._waiting_for_next = False
        self._advancing = False
