"""discord.py audio sink feeding decoded PCM sources into a VoiceClient."""

from __future__ import annotations

import asyncio
from typing import TYPE_CHECKING

import discord

from discord_guild_queue.application.interfaces.voice_transport import (
    AudioSink,
    SinkFinishedCallback,
)

if TYPE_CHECKING:
    from ....application.interfaces.audio_decoder import PCMStream


class DiscordAudioSink(AudioSink):
    def __init__(
        self,
        voice_client: discord.VoiceClient,
        loop: asyncio.AbstractEventLoop,
        *,
        volume: float = 0.7,
    ) -> None:
        self._voice_client = voice_client
        self._loop = loop
        self._volume = volume

    def play(self, stream: PCMStream, after: SinkFinishedCallback) -> None:
        """Start *stream* on the voice client.

        Raises:
            discord.ClientException: If the client is already playing or not connected.
            TypeError: If *stream* is not a discord.py AudioSource.
        """
        source = discord.PCMVolumeTransformer(stream, volume=self._volume)  # type: ignore[arg-type]

        # discord.py calls this from its player thread
        def after_callback(error: Exception | None = None) -> None:
            if self._loop.is_closed():
                return
            self._loop.call_soon_threadsafe(after, error)

        self._voice_client.play(source, after=after_callback)

    def pause(self) -> None:
        if self._voice_client.is_playing():
            self._voice_client.pause()

    def resume(self) -> None:
        if self._voice_client.is_paused():
            self._voice_client.resume()

    def stop(self) -> None:
        self._voice_client.stop()
