"""Reusable guard functions for Discord interactions."""

from discord_guild_queue.infrastructure.discord.guards.voice_guards import (
    check_user_in_bot_channel,
    ensure_user_in_voice,
    get_member,
    get_user_voice_channel,
    send_ephemeral,
)

__all__ = [
    "check_user_in_bot_channel",
    "ensure_user_in_voice",
    "get_member",
    "get_user_voice_channel",
    "send_ephemeral",
]
