"""Reusable voice-channel guard functions for Discord slash commands.

These are free functions that take the interaction explicitly rather than
relying on a specific cog instance.
"""

from __future__ import annotations

import discord

from discord_guild_queue.domain.shared.messages import DiscordUIMessages

VoiceChannelLike = discord.VoiceChannel | discord.StageChannel


async def send_ephemeral(interaction: discord.Interaction, message: str) -> None:
    """Send an ephemeral message, handling both fresh and already-responded interactions."""
    if interaction.response.is_done():
        await interaction.followup.send(message, ephemeral=True)
    else:
        await interaction.response.send_message(message, ephemeral=True)


async def get_member(interaction: discord.Interaction) -> discord.Member | None:
    """Validate that the interaction comes from a guild member. Returns None with error on failure."""
    if not interaction.guild:
        await send_ephemeral(interaction, DiscordUIMessages.STATE_SERVER_ONLY)
        return None

    user = interaction.user
    if not isinstance(user, discord.Member):
        await send_ephemeral(interaction, DiscordUIMessages.STATE_VERIFY_VOICE_FAILED)
        return None

    return user


async def get_user_voice_channel(interaction: discord.Interaction) -> VoiceChannelLike | None:
    """Return the caller's voice channel if the bot may join and speak there."""
    member = await get_member(interaction)
    if member is None:
        return None

    channel = member.voice.channel if member.voice else None
    if not isinstance(channel, VoiceChannelLike):
        await send_ephemeral(interaction, DiscordUIMessages.STATE_NEED_TO_BE_IN_VOICE)
        return None

    assert interaction.guild is not None
    permissions = channel.permissions_for(interaction.guild.me)
    if not (permissions.connect and permissions.speak):
        await send_ephemeral(interaction, DiscordUIMessages.STATE_NO_PERMISSIONS)
        return None

    return channel


async def ensure_user_in_voice(interaction: discord.Interaction) -> bool:
    """Check that the user is in a voice channel. Does not touch the bot's connection."""
    member = await get_member(interaction)
    if member is None:
        return False

    if not member.voice or not member.voice.channel:
        await send_ephemeral(interaction, DiscordUIMessages.STATE_NEED_TO_BE_IN_VOICE)
        return False

    return True


async def check_user_in_bot_channel(interaction: discord.Interaction, guild_id: int) -> bool:
    """Return True if the interacting user shares the bot's voice channel.

    Used as an ``interaction_check`` in views, where the guild comes from the
    view rather than from a slash-command context.
    """
    user = interaction.user
    if not isinstance(user, discord.Member):
        await send_ephemeral(interaction, DiscordUIMessages.STATE_VERIFY_VOICE_FAILED)
        return False

    if not user.voice or not user.voice.channel:
        await send_ephemeral(interaction, DiscordUIMessages.STATE_NEED_TO_BE_IN_VOICE)
        return False

    guild = interaction.client.get_guild(guild_id)
    voice_client = guild.voice_client if guild else None
    if voice_client is not None and voice_client.channel is not None:
        if user.voice.channel.id != voice_client.channel.id:
            await send_ephemeral(interaction, DiscordUIMessages.STATE_MUST_BE_IN_SAME_VOICE)
            return False

    return True
