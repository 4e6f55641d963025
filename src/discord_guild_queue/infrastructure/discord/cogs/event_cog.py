"""Discord event listeners that keep guild queues in step with voice and guild state."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

import discord
from discord.ext import commands

from discord_guild_queue.domain.shared.messages import ErrorMessages, LogTemplates

if TYPE_CHECKING:
    from ....config.container import Container

logger = logging.getLogger(__name__)


class EventCog(commands.Cog):
    def __init__(self, bot: commands.Bot, container: Container) -> None:
        self.bot = bot
        self.container = container

    # ─────────────────────────────────────────────────────────────────
    # Guild Events
    # ─────────────────────────────────────────────────────────────────

    @commands.Cog.listener()
    async def on_guild_remove(self, guild: discord.Guild) -> None:
        logger.info(LogTemplates.EVENT_GUILD_REMOVED, guild.name, guild.id)
        await self.container.queue_registry.delete(guild.id)

    # ─────────────────────────────────────────────────────────────────
    # Voice Events
    # ─────────────────────────────────────────────────────────────────

    @commands.Cog.listener()
    async def on_voice_state_update(
        self, member: discord.Member, before: discord.VoiceState, after: discord.VoiceState
    ) -> None:
        bot_user = self.bot.user
        if bot_user is not None and member.id == bot_user.id:
            if before.channel is not None and after.channel is None:
                logger.info(LogTemplates.EVENT_BOT_DISCONNECTED, member.guild.id)
                await self.container.voice_transport.handle_disconnect(member.guild.id)
            return

        if member.bot or before.channel is None:
            return

        bot_channel = self._get_bot_voice_channel(member.guild)
        if bot_channel is None or before.channel.id != bot_channel.id:
            return

        if self._has_non_bot_members(bot_channel):
            return

        queue = self.container.queue_registry.find(member.guild.id)
        if queue is None:
            return

        logger.info(LogTemplates.EVENT_CHANNEL_EMPTY, member.guild.id)
        await queue.stop()

    def _get_bot_voice_channel(
        self, guild: discord.Guild
    ) -> discord.VoiceChannel | discord.StageChannel | None:
        voice_client = discord.utils.get(self.bot.voice_clients, guild=guild)
        if voice_client is None or voice_client.channel is None:
            return None

        channel = voice_client.channel
        if isinstance(channel, (discord.VoiceChannel, discord.StageChannel)):
            return channel
        return None

    def _has_non_bot_members(self, channel: discord.VoiceChannel | discord.StageChannel) -> bool:
        return any(not m.bot for m in channel.members)


async def setup(bot: commands.Bot) -> None:
    container = getattr(bot, "container", None)
    if container is None:
        raise RuntimeError(ErrorMessages.CONTAINER_NOT_FOUND)

    await bot.add_cog(EventCog(bot, container))
