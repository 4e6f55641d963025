"""Discord UI views and components."""

from __future__ import annotations

from discord_guild_queue.infrastructure.discord.views.base_view import BaseInteractiveView
from discord_guild_queue.infrastructure.discord.views.playback_controls_view import (
    PlaybackControlsView,
    skip_current_track,
)

__all__ = ["BaseInteractiveView", "PlaybackControlsView", "skip_current_track"]
