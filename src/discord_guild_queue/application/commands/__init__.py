"""
Application Commands

Command objects and their handlers for the operations users trigger.
"""

from discord_guild_queue.application.commands.enqueue_playlist import (
    EnqueuePlaylistCommand,
    EnqueuePlaylistHandler,
    EnqueuePlaylistResult,
    EnqueuePlaylistStatus,
)
from discord_guild_queue.application.commands.play_track import (
    PlayTrackCommand,
    PlayTrackHandler,
    PlayTrackResult,
    PlayTrackStatus,
)

__all__ = [
    # Play
    "PlayTrackCommand",
    "PlayTrackHandler",
    "PlayTrackResult",
    "PlayTrackStatus",
    # Playlist
    "EnqueuePlaylistCommand",
    "EnqueuePlaylistHandler",
    "EnqueuePlaylistResult",
    "EnqueuePlaylistStatus",
]
