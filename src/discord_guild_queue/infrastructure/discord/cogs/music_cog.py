"""Slash-command cog for guild playback.

Commands: play, playlist, skip, stop, pause, resume, queue, nowplaying,
cleanup and debug. Commands that change playback share a per-user cooldown.
"""

from __future__ import annotations

import asyncio
import logging
import math
from collections.abc import Callable
from typing import TYPE_CHECKING, Any

import discord
from discord import app_commands
from discord.ext import commands

from discord_guild_queue.application.commands.enqueue_playlist import EnqueuePlaylistCommand
from discord_guild_queue.application.commands.play_track import PlayTrackCommand
from discord_guild_queue.domain.music.value_objects import QueueState
from discord_guild_queue.domain.shared.messages import (
    DiscordUIMessages,
    ErrorMessages,
    LogTemplates,
)
from discord_guild_queue.infrastructure.discord.guards.voice_guards import (
    ensure_user_in_voice,
    get_user_voice_channel,
    send_ephemeral,
)
from discord_guild_queue.infrastructure.discord.views.playback_controls_view import (
    PlaybackControlsView,
    skip_current_track,
)
from discord_guild_queue.utils.reply import format_duration, truncate

if TYPE_CHECKING:
    from ....application.services.guild_queue import GuildQueue
    from ....config.container import Container
    from ....domain.music.entities import Track

logger = logging.getLogger(__name__)

QUEUE_PER_PAGE = 10
COMMAND_COOLDOWN_SECONDS = 3.0


def _cooldown_key(interaction: discord.Interaction) -> tuple[int | None, int]:
    return (interaction.guild_id, interaction.user.id)


def command_cooldown() -> Callable[[Any], Any]:
    """One use per user per guild every COMMAND_COOLDOWN_SECONDS, tracked per command."""
    return app_commands.checks.cooldown(1, COMMAND_COOLDOWN_SECONDS, key=_cooldown_key)


class MusicCog(commands.Cog):
    def __init__(self, bot: commands.Bot, container: Container) -> None:
        self.bot = bot
        self.container = container
        # Last text channel a command was used from, per guild
        self._text_channels: dict[int, int] = {}
        self._announcements: set[asyncio.Task[None]] = set()

    async def cog_load(self) -> None:
        self.container.queue_registry.set_track_dropped_callback(self._on_track_dropped)

    async def cog_unload(self) -> None:
        self.container.queue_registry.set_track_dropped_callback(None)
        for task in list(self._announcements):
            task.cancel()

    def _remember_channel(self, interaction: discord.Interaction) -> None:
        if interaction.guild is not None and interaction.channel_id is not None:
            self._text_channels[interaction.guild.id] = interaction.channel_id

    def _find_queue(self, interaction: discord.Interaction) -> GuildQueue | None:
        assert interaction.guild is not None
        return self.container.queue_registry.find(interaction.guild.id)

    def _controls(self, guild_id: int) -> PlaybackControlsView:
        return PlaybackControlsView(guild_id=guild_id, container=self.container)

    # ─────────────────────────────────────────────────────────────────
    # Play
    # ─────────────────────────────────────────────────────────────────

    @app_commands.command(name="play", description="Play a song by URL or search query.")
    @app_commands.describe(query="YouTube/SoundCloud URL or search query")
    @command_cooldown()
    async def play(self, interaction: discord.Interaction, query: str) -> None:
        channel = await get_user_voice_channel(interaction)
        if channel is None:
            return

        assert interaction.guild is not None
        self._remember_channel(interaction)
        await interaction.response.defer()

        try:
            result = await self.container.play_track_handler.handle(
                PlayTrackCommand(
                    guild_id=interaction.guild.id,
                    channel_id=channel.id,
                    user_name=interaction.user.display_name,
                    query=query,
                )
            )
        except Exception as e:
            logger.exception(LogTemplates.PLAY_COMMAND_FAILED, interaction.guild.id)
            await interaction.followup.send(
                DiscordUIMessages.ERROR_OCCURRED.format(error=e), ephemeral=True
            )
            return

        if result.started_playing:
            view = self._controls(interaction.guild.id)
            message = await interaction.followup.send(result.message, view=view, wait=True)
            view.set_message(message)
            return

        await interaction.followup.send(result.message, ephemeral=not result.is_success)

    @app_commands.command(name="playlist", description="Queue every song from a playlist URL.")
    @app_commands.describe(url="YouTube or SoundCloud playlist URL")
    @command_cooldown()
    async def playlist(self, interaction: discord.Interaction, url: str) -> None:
        channel = await get_user_voice_channel(interaction)
        if channel is None:
            return

        assert interaction.guild is not None
        self._remember_channel(interaction)
        await interaction.response.defer()

        try:
            result = await self.container.enqueue_playlist_handler.handle(
                EnqueuePlaylistCommand(
                    guild_id=interaction.guild.id,
                    channel_id=channel.id,
                    user_name=interaction.user.display_name,
                    url=url,
                )
            )
        except Exception as e:
            logger.exception(LogTemplates.PLAY_COMMAND_FAILED, interaction.guild.id)
            await interaction.followup.send(
                DiscordUIMessages.ERROR_OCCURRED.format(error=e), ephemeral=True
            )
            return

        await interaction.followup.send(result.message, ephemeral=not result.is_success)

    # ─────────────────────────────────────────────────────────────────
    # Playback Controls
    # ─────────────────────────────────────────────────────────────────

    @app_commands.command(name="skip", description="Skip the current track.")
    @command_cooldown()
    async def skip(self, interaction: discord.Interaction) -> None:
        if not await ensure_user_in_voice(interaction):
            return

        outcome = await skip_current_track(self._find_queue(interaction))
        if outcome is None:
            await send_ephemeral(interaction, DiscordUIMessages.STATE_NOTHING_PLAYING)
            return

        reply, stopped = outcome
        if stopped:
            await interaction.response.send_message(reply)
            return

        assert interaction.guild is not None
        view = self._controls(interaction.guild.id)
        await interaction.response.send_message(reply, view=view)
        view.set_message(await interaction.original_response())

    @app_commands.command(name="stop", description="Stop playback, clear the queue and leave.")
    @command_cooldown()
    async def stop(self, interaction: discord.Interaction) -> None:
        if not await ensure_user_in_voice(interaction):
            return

        queue = self._find_queue(interaction)
        if queue is None or (queue.state is QueueState.DISCONNECTED and not queue.queued):
            await send_ephemeral(interaction, DiscordUIMessages.STATE_NOTHING_PLAYING)
            return

        await queue.stop()
        await interaction.response.send_message(DiscordUIMessages.ACTION_STOPPED)

    @app_commands.command(name="pause", description="Pause the current track.")
    @command_cooldown()
    async def pause(self, interaction: discord.Interaction) -> None:
        if not await ensure_user_in_voice(interaction):
            return

        queue = self._find_queue(interaction)
        if queue is not None and queue.pause():
            await interaction.response.send_message(DiscordUIMessages.ACTION_PAUSED)
        else:
            await send_ephemeral(interaction, DiscordUIMessages.STATE_NOTHING_PLAYING_OR_PAUSED)

    @app_commands.command(name="resume", description="Resume paused playback.")
    @command_cooldown()
    async def resume(self, interaction: discord.Interaction) -> None:
        if not await ensure_user_in_voice(interaction):
            return

        queue = self._find_queue(interaction)
        if queue is not None and queue.resume():
            await interaction.response.send_message(DiscordUIMessages.ACTION_RESUMED)
        else:
            await send_ephemeral(interaction, DiscordUIMessages.STATE_NOTHING_PAUSED)

    # ─────────────────────────────────────────────────────────────────
    # Queue Display
    # ─────────────────────────────────────────────────────────────────

    @app_commands.command(name="queue", description="Show the current queue.")
    @app_commands.describe(page="Page number")
    async def queue(self, interaction: discord.Interaction, page: int = 1) -> None:
        if interaction.guild is None:
            await send_ephemeral(interaction, DiscordUIMessages.STATE_SERVER_ONLY)
            return

        guild_queue = self._find_queue(interaction)
        current = guild_queue.current if guild_queue is not None else None
        tracks = guild_queue.queued if guild_queue is not None else ()
        if current is None and not tracks:
            await send_ephemeral(interaction, DiscordUIMessages.STATE_QUEUE_EMPTY)
            return

        total_pages = max(1, math.ceil(len(tracks) / QUEUE_PER_PAGE))
        page = max(1, min(page, total_pages))
        start_idx = (page - 1) * QUEUE_PER_PAGE

        embed = discord.Embed(
            title=DiscordUIMessages.EMBED_QUEUE.format(
                total_tracks=len(tracks), page=page, total_pages=total_pages
            ),
            color=discord.Color.blurple(),
        )

        if current is not None:
            embed.add_field(
                name=DiscordUIMessages.EMBED_NOW_PLAYING,
                value=f"**{truncate(current.title)}**\n"
                f"Duration: {format_duration(current.duration_seconds)}",
                inline=False,
            )

        for idx, track in enumerate(
            tracks[start_idx : start_idx + QUEUE_PER_PAGE], start=start_idx + 1
        ):
            embed.add_field(
                name=f"{idx}. {truncate(track.title)}",
                value=f"Requested by: {track.requested_by}",
                inline=False,
            )

        total_duration = sum(track.duration_seconds for track in tracks)
        if total_duration:
            embed.set_footer(text=f"Total duration: {format_duration(total_duration)}")

        await interaction.response.send_message(embed=embed, ephemeral=True)

    @app_commands.command(name="nowplaying", description="Show the track that is playing.")
    async def nowplaying(self, interaction: discord.Interaction) -> None:
        if interaction.guild is None:
            await send_ephemeral(interaction, DiscordUIMessages.STATE_SERVER_ONLY)
            return

        guild_queue = self._find_queue(interaction)
        current = guild_queue.current if guild_queue is not None else None
        if guild_queue is None or current is None:
            await send_ephemeral(interaction, DiscordUIMessages.STATE_NOTHING_PLAYING)
            return

        embed = discord.Embed(
            title=DiscordUIMessages.EMBED_NOW_PLAYING,
            description=f"[{truncate(current.title)}]({current.source_url})",
            color=discord.Color.green(),
        )
        embed.add_field(name="Duration", value=current.duration_formatted)
        embed.add_field(name="Requested by", value=current.requested_by)
        if guild_queue.is_paused:
            embed.set_footer(text=DiscordUIMessages.ACTION_PAUSED)
        if current.thumbnail_url:
            embed.set_thumbnail(url=current.thumbnail_url)

        view = self._controls(interaction.guild.id)
        await interaction.response.send_message(embed=embed, view=view)
        view.set_message(await interaction.original_response())

    # ─────────────────────────────────────────────────────────────────
    # Maintenance
    # ─────────────────────────────────────────────────────────────────

    @app_commands.command(name="cleanup", description="Reset the player state for this server.")
    @command_cooldown()
    async def cleanup(self, interaction: discord.Interaction) -> None:
        if interaction.guild is None:
            await send_ephemeral(interaction, DiscordUIMessages.STATE_SERVER_ONLY)
            return

        logger.info(LogTemplates.QUEUE_CLEANUP_REQUESTED, interaction.guild.id, interaction.user.id)
        await self.container.queue_registry.delete(interaction.guild.id)

        embed = discord.Embed(
            title=DiscordUIMessages.EMBED_CLEANUP,
            description=DiscordUIMessages.ACTION_CLEANED_UP,
            color=discord.Color.green(),
        )
        await interaction.response.send_message(embed=embed)

    @app_commands.command(name="debug", description="Show the player state for this server.")
    async def debug(self, interaction: discord.Interaction) -> None:
        if interaction.guild is None:
            await send_ephemeral(interaction, DiscordUIMessages.STATE_SERVER_ONLY)
            return

        guild_queue = self._find_queue(interaction)
        state = guild_queue.state if guild_queue is not None else QueueState.DISCONNECTED
        current = guild_queue.current if guild_queue is not None else None
        channel_id = guild_queue.connected_channel_id if guild_queue is not None else None

        def yes_no(flag: bool) -> str:
            return DiscordUIMessages.DEBUG_YES if flag else DiscordUIMessages.DEBUG_NO

        embed = discord.Embed(title=DiscordUIMessages.EMBED_DEBUG, color=discord.Color.purple())
        embed.add_field(name="State", value=state.value)
        embed.add_field(name="Bot Connected", value=yes_no(state.is_connected))
        embed.add_field(
            name="Channel",
            value=f"<#{channel_id}>" if channel_id is not None else DiscordUIMessages.DEBUG_NONE,
        )
        embed.add_field(
            name="Is Playing",
            value=yes_no(guild_queue is not None and guild_queue.is_playing),
        )
        embed.add_field(
            name="Is Paused",
            value=yes_no(guild_queue is not None and guild_queue.is_paused),
        )
        embed.add_field(
            name="Songs in Queue",
            value=str(len(guild_queue.queued) if guild_queue is not None else 0),
        )
        embed.add_field(
            name="Current Song",
            value=truncate(current.title) if current is not None else DiscordUIMessages.DEBUG_NONE,
            inline=False,
        )

        await interaction.response.send_message(embed=embed, ephemeral=True)

    # ─────────────────────────────────────────────────────────────────
    # Callbacks
    # ─────────────────────────────────────────────────────────────────

    def _on_track_dropped(self, guild_id: int, track: Track, error: Exception) -> None:
        channel_id = self._text_channels.get(guild_id)
        if channel_id is None:
            return
        task = asyncio.create_task(self._announce_dropped(channel_id, track))
        self._announcements.add(task)
        task.add_done_callback(self._announcements.discard)

    async def _announce_dropped(self, channel_id: int, track: Track) -> None:
        channel = self.bot.get_channel(channel_id)
        if not isinstance(channel, discord.abc.Messageable):
            return
        try:
            await channel.send(
                DiscordUIMessages.ERROR_TRACK_DROPPED.format(title=truncate(track.title))
            )
        except discord.HTTPException:
            logger.warning(LogTemplates.EVENT_ANNOUNCE_FAILED, channel_id)


async def setup(bot: commands.Bot) -> None:
    container = getattr(bot, "container", None)
    if container is None:
        raise RuntimeError(ErrorMessages.CONTAINER_NOT_FOUND)

    await bot.add_cog(MusicCog(bot, container))
