"""Skip and Stop buttons attached to now-playing and skipped replies."""

from __future__ import annotations

from typing import TYPE_CHECKING

import discord

from discord_guild_queue.domain.music.value_objects import QueueState
from discord_guild_queue.domain.shared.messages import DiscordUIMessages
from discord_guild_queue.infrastructure.discord.guards.voice_guards import (
    check_user_in_bot_channel,
    send_ephemeral,
)
from discord_guild_queue.infrastructure.discord.views.base_view import BaseInteractiveView
from discord_guild_queue.utils.reply import truncate

if TYPE_CHECKING:
    from ....application.services.guild_queue import GuildQueue
    from ....config.container import Container


async def skip_current_track(queue: GuildQueue | None) -> tuple[str, bool] | None:
    """Skip the playing track.

    Returns the reply text and whether the queue was stopped, or None if
    nothing was skipped.

    Skipping the last track stops the queue instead of leaving the bot idle
    in the channel.
    """
    current = queue.current if queue is not None else None
    if queue is None or current is None:
        return None

    title = truncate(current.title)
    if not queue.queued:
        await queue.stop()
        return DiscordUIMessages.ACTION_SKIPPED_LAST.format(title=title), True

    if not queue.skip():
        return None
    return DiscordUIMessages.ACTION_SKIPPED.format(title=title), False


class PlaybackControlsView(BaseInteractiveView):
    """Skip and Stop controls usable by listeners in the bot's voice channel."""

    def __init__(self, *, guild_id: int, container: Container, timeout: float = 300.0) -> None:
        super().__init__(timeout=timeout)
        self.guild_id = guild_id
        self.container = container

    def _find_queue(self) -> GuildQueue | None:
        return self.container.queue_registry.find(self.guild_id)

    async def interaction_check(self, interaction: discord.Interaction) -> bool:
        return await check_user_in_bot_channel(interaction, self.guild_id)

    @discord.ui.button(label=DiscordUIMessages.BUTTON_SKIP, style=discord.ButtonStyle.primary)
    async def skip_button(
        self, interaction: discord.Interaction, button: discord.ui.Button[PlaybackControlsView]
    ) -> None:
        outcome = await skip_current_track(self._find_queue())
        if outcome is None:
            await send_ephemeral(interaction, DiscordUIMessages.STATE_NOTHING_PLAYING)
            return

        reply, stopped = outcome
        await interaction.response.send_message(reply)
        if stopped:
            await self._retire()

    @discord.ui.button(label=DiscordUIMessages.BUTTON_STOP, style=discord.ButtonStyle.danger)
    async def stop_button(
        self, interaction: discord.Interaction, button: discord.ui.Button[PlaybackControlsView]
    ) -> None:
        queue = self._find_queue()
        if queue is None or (queue.state is QueueState.DISCONNECTED and not queue.queued):
            await send_ephemeral(interaction, DiscordUIMessages.STATE_NOTHING_PLAYING)
            return

        await queue.stop()
        await interaction.response.send_message(DiscordUIMessages.ACTION_STOPPED)
        await self._retire()

    async def _retire(self) -> None:
        self._disable_buttons()
        self.stop()
        await self._try_edit_message()
