"""Infrastructure layer - external systems integration.

This layer contains implementations for:
- Discord (bot, cogs, voice transport adapter)
- Audio (yt-dlp, FFmpeg, input classification)
"""

from discord_guild_queue.infrastructure.discord.adapters.voice_transport import (
    DiscordVoiceTransport,
)
from discord_guild_queue.infrastructure.discord.bot import create_bot

__all__ = [
    "create_bot",
    "DiscordVoiceTransport",
]
