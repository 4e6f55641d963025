"""Discord voice transport implementing VoiceTransport on top of discord.py voice clients."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable
from typing import TYPE_CHECKING

import discord

from discord_guild_queue.application.interfaces.voice_transport import (
    VoiceConnection,
    VoiceTransport,
)
from discord_guild_queue.config.settings import AudioSettings, QueueSettings
from discord_guild_queue.domain.shared.exceptions import (
    ConnectionFailedError,
    InvalidOperationError,
)
from discord_guild_queue.domain.shared.messages import ErrorMessages, LogTemplates
from discord_guild_queue.infrastructure.discord.adapters.audio_sink import DiscordAudioSink

if TYPE_CHECKING:
    from discord_guild_queue.application.services.playback_session import PlaybackSession

logger = logging.getLogger(__name__)

VoiceChannelLike = discord.VoiceChannel | discord.StageChannel


class DiscordVoiceConnection(VoiceConnection):
    """One discord.py voice client for one guild, created by ``wait_until_ready``."""

    def __init__(
        self, guild: discord.Guild, channel: VoiceChannelLike, *, volume: float = 0.7
    ) -> None:
        self._guild = guild
        self._channel = channel
        self._volume = volume
        self._voice_client: discord.VoiceClient | None = None
        self._destroyed = False
        self._listeners: list[Callable[[VoiceConnection], None]] = []

    @property
    def channel_id(self) -> int:
        return self._channel.id

    @property
    def guild_id(self) -> int:
        return self._guild.id

    @property
    def voice_client(self) -> discord.VoiceClient | None:
        return self._voice_client

    @property
    def is_destroyed(self) -> bool:
        return self._destroyed

    @property
    def is_connected(self) -> bool:
        return self._voice_client is not None and self._voice_client.is_connected()

    async def wait_until_ready(self, timeout: float) -> None:
        async with asyncio.timeout(timeout):
            voice_client = await self._channel.connect(self_deaf=True, timeout=timeout)
        if not isinstance(voice_client, discord.VoiceClient):
            raise ConnectionFailedError(self._channel.id, ErrorMessages.CONNECTION_NOT_READY)
        self._voice_client = voice_client
        await self._ensure_self_deaf()

    async def _ensure_self_deaf(self) -> None:
        """Ensure the bot is self-deafened in the guild's current voice connection."""
        try:
            await self._guild.change_voice_state(channel=self._channel, self_deaf=True)
        except discord.HTTPException as exc:
            logger.debug(LogTemplates.VOICE_SELF_DEAFEN_FAILED, self._guild.id, exc)

    def attach_sink(self, session: PlaybackSession) -> None:
        if self._voice_client is None:
            raise InvalidOperationError("attach_sink", ErrorMessages.CONNECTION_NOT_READY)
        session.bind(
            DiscordAudioSink(self._voice_client, asyncio.get_running_loop(), volume=self._volume)
        )

    def add_destroyed_listener(self, callback: Callable[[VoiceConnection], None]) -> None:
        self._listeners.append(callback)

    async def destroy(self) -> None:
        if self._destroyed:
            return
        self._destroyed = True

        voice_client = self._voice_client or self._guild.voice_client
        if voice_client is not None:
            try:
                await voice_client.disconnect(force=True)
            except Exception as exc:
                logger.warning(LogTemplates.VOICE_CLEANUP_ERROR, self._guild.id, exc)
        logger.info(LogTemplates.VOICE_DISCONNECTED, self._guild.id)

        for listener in list(self._listeners):
            try:
                listener(self)
            except Exception:
                logger.exception(LogTemplates.VOICE_DESTROYED_LISTENER_ERROR, self._guild.id)
        self._listeners.clear()


class DiscordVoiceTransport(VoiceTransport):
    def __init__(
        self,
        bot: discord.Client,
        settings: AudioSettings | None = None,
        queue_settings: QueueSettings | None = None,
    ) -> None:
        self._bot = bot
        self._settings = settings or AudioSettings()
        self._queue_settings = queue_settings or QueueSettings()
        self._connections: dict[int, DiscordVoiceConnection] = {}

    def get_connection(self, guild_id: int) -> DiscordVoiceConnection | None:
        return self._connections.get(guild_id)

    async def connect(self, guild_id: int, channel_id: int) -> DiscordVoiceConnection:
        guild = self._bot.get_guild(guild_id)
        if guild is None:
            raise ConnectionFailedError(
                channel_id, ErrorMessages.GUILD_UNAVAILABLE.format(guild_id=guild_id)
            )

        channel = guild.get_channel(channel_id)
        if not isinstance(channel, discord.VoiceChannel | discord.StageChannel):
            raise ConnectionFailedError(
                channel_id, ErrorMessages.CHANNEL_NOT_VOICE.format(channel_id=channel_id)
            )

        previous = self._connections.pop(guild_id, None)
        if previous is not None:
            await previous.destroy()

        stale = guild.voice_client
        if stale is not None:
            logger.warning(LogTemplates.VOICE_STALE_CLEANUP, guild_id)
            try:
                await stale.disconnect(force=True)
            except Exception as exc:
                logger.warning(LogTemplates.VOICE_CLEANUP_ERROR, guild_id, exc)

        connection = DiscordVoiceConnection(guild, channel, volume=self._settings.default_volume)
        connection.add_destroyed_listener(self._forget)
        self._connections[guild_id] = connection
        return connection

    def _forget(self, connection: VoiceConnection) -> None:
        if not isinstance(connection, DiscordVoiceConnection):
            return
        if self._connections.get(connection.guild_id) is connection:
            del self._connections[connection.guild_id]

    async def handle_disconnect(self, guild_id: int) -> None:
        """React to the bot being dropped from voice by Discord.

        discord.py may reconnect on its own, so the connection is only
        destroyed if it is still down after the grace period.
        """
        connection = self._connections.get(guild_id)
        if connection is None or connection.is_destroyed:
            return

        await asyncio.sleep(self._queue_settings.disconnect_grace_seconds)
        if connection.is_destroyed:
            return
        if connection.is_connected:
            logger.info(LogTemplates.VOICE_CONNECTION_RECOVERED, guild_id)
            return
        await connection.destroy()
