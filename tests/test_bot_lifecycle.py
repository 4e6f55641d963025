"""
Unit Tests for Bot Lifecycle

Tests for:
- MusicBot initialization (intents, prefix, container wiring)
- setup_hook (cog loading, error handler, optional command sync)
- Slash command error handler and cooldown replies
- on_ready presence
- close() tearing down guild queues and stray voice clients
"""

from unittest.mock import AsyncMock, MagicMock, PropertyMock, patch

import discord
import pytest
from discord import app_commands

from discord_guild_queue.domain.shared.messages import DiscordUIMessages
from discord_guild_queue.infrastructure.discord.bot import COGS, MusicBot, create_bot


@pytest.fixture
def mock_settings():
    settings = MagicMock()
    settings.discord.command_prefix = "!"
    settings.discord.sync_on_startup = False
    settings.discord.guild_ids = ()
    return settings


@pytest.fixture
def mock_container():
    container = MagicMock()
    container.shutdown = AsyncMock()
    container.set_bot = MagicMock()
    return container


@pytest.fixture
def bot(mock_container, mock_settings):
    return MusicBot(container=mock_container, settings=mock_settings)


def _interaction(done: bool = False) -> MagicMock:
    interaction = MagicMock()
    interaction.response.is_done.return_value = done
    interaction.response.send_message = AsyncMock()
    interaction.followup.send = AsyncMock()
    interaction.command.name = "play"
    return interaction


# =============================================================================
# Bot Initialization Tests
# =============================================================================


class TestBotInitialization:
    async def test_init_sets_voice_intents(self, bot):
        assert bot.intents.voice_states is True
        assert bot.intents.guilds is True

    async def test_init_sets_command_prefix(self, mock_container, mock_settings):
        mock_settings.discord.command_prefix = "?"
        bot = MusicBot(container=mock_container, settings=mock_settings)

        assert bot.command_prefix == "?"
        assert bot.help_command is None

    async def test_init_wires_container(self, bot, mock_container, mock_settings):
        """Should hand itself to the container so adapters can reach the gateway."""
        assert bot.container is mock_container
        assert bot.settings is mock_settings
        mock_container.set_bot.assert_called_once_with(bot)

    async def test_create_bot(self, mock_container, mock_settings):
        bot = create_bot(mock_container, mock_settings)

        assert isinstance(bot, MusicBot)
        assert bot.container is mock_container


# =============================================================================
# Setup Hook Tests
# =============================================================================


class TestSetupHook:
    async def test_setup_hook_loads_cogs_and_sets_error_handler(self, bot):
        with (
            patch.object(bot, "_load_cogs", new_callable=AsyncMock) as mock_load,
            patch.object(bot, "_sync_commands", new_callable=AsyncMock) as mock_sync,
        ):
            await bot.setup_hook()

        mock_load.assert_awaited_once()
        mock_sync.assert_not_called()
        assert bot.tree.on_error == bot._on_app_command_error

    async def test_setup_hook_syncs_when_enabled(self, bot, mock_settings):
        mock_settings.discord.sync_on_startup = True

        with (
            patch.object(bot, "_load_cogs", new_callable=AsyncMock),
            patch.object(bot, "_sync_commands", new_callable=AsyncMock) as mock_sync,
        ):
            await bot.setup_hook()

        mock_sync.assert_awaited_once()

    async def test_load_cogs_loads_every_cog(self, bot):
        with patch.object(bot, "load_extension", new_callable=AsyncMock) as mock_load:
            await bot._load_cogs()

        assert mock_load.call_count == len(COGS)
        for cog in COGS:
            mock_load.assert_any_call(cog)

    async def test_load_cogs_continues_after_failure(self, bot):
        """Should keep loading the remaining cogs when one fails."""

        async def load_side_effect(name):
            if name.endswith("music_cog"):
                raise RuntimeError("broken cog")

        with patch.object(
            bot, "load_extension", new_callable=AsyncMock, side_effect=load_side_effect
        ) as mock_load:
            await bot._load_cogs()

        assert mock_load.call_count == len(COGS)


class TestSyncCommands:
    async def test_sync_global(self, bot):
        with patch.object(bot.tree, "sync", new_callable=AsyncMock, return_value=[]) as mock_sync:
            await bot._sync_commands()

        mock_sync.assert_awaited_once_with()

    async def test_sync_configured_guilds(self, bot, mock_settings):
        mock_settings.discord.guild_ids = (111111, 222222)

        with (
            patch.object(bot.tree, "copy_global_to") as mock_copy,
            patch.object(bot.tree, "sync", new_callable=AsyncMock, return_value=[]) as mock_sync,
        ):
            await bot._sync_commands()

        assert mock_copy.call_count == 2
        assert mock_sync.await_count == 3

    async def test_sync_errors_are_logged(self, bot, mock_settings):
        mock_settings.discord.guild_ids = (111111,)
        error = discord.HTTPException(MagicMock(status=500), "sync failed")

        with (
            patch.object(bot.tree, "copy_global_to"),
            patch.object(bot.tree, "sync", new_callable=AsyncMock, side_effect=error),
        ):
            await bot._sync_commands()


# =============================================================================
# Error Handler Tests
# =============================================================================


class TestAppCommandErrorHandler:
    async def test_sends_ephemeral_response(self, bot):
        interaction = _interaction()

        await bot._on_app_command_error(interaction, Exception("Test error"))

        call_args = interaction.response.send_message.call_args
        assert call_args.kwargs["ephemeral"] is True
        assert "Test error" in call_args.args[0]

    async def test_uses_followup_when_responded(self, bot):
        interaction = _interaction(done=True)

        await bot._on_app_command_error(interaction, Exception("Test error"))

        interaction.followup.send.assert_awaited_once()
        assert interaction.followup.send.call_args.kwargs["ephemeral"] is True

    async def test_unwraps_original_error(self, bot):
        interaction = _interaction()
        wrapper = MagicMock()
        wrapper.original = ValueError("Original error")

        await bot._on_app_command_error(interaction, wrapper)

        assert "Original error" in interaction.response.send_message.call_args.args[0]

    async def test_send_failure_is_tolerated(self, bot):
        interaction = _interaction()
        interaction.response.send_message.side_effect = discord.HTTPException(
            MagicMock(status=500), "Send failed"
        )

        await bot._on_app_command_error(interaction, Exception("Test error"))

    async def test_cooldown_reports_wait_time(self, bot):
        """Should tell the user how long to wait instead of reporting an error."""
        interaction = _interaction()
        error = app_commands.CommandOnCooldown(app_commands.Cooldown(1, 3.0), 2.04)

        await bot._on_app_command_error(interaction, error)

        interaction.response.send_message.assert_awaited_once_with(
            DiscordUIMessages.ERROR_COMMAND_COOLDOWN.format(time_str="2.0s"), ephemeral=True
        )

    async def test_short_cooldown_in_milliseconds(self, bot):
        interaction = _interaction(done=True)
        error = app_commands.CommandOnCooldown(app_commands.Cooldown(1, 3.0), 0.25)

        await bot._on_app_command_error(interaction, error)

        interaction.followup.send.assert_awaited_once_with(
            DiscordUIMessages.ERROR_COMMAND_COOLDOWN.format(time_str="250ms"), ephemeral=True
        )


class TestOnReady:
    async def test_on_ready_sets_presence(self, bot):
        mock_user = MagicMock()
        mock_user.id = 123456789

        with (
            patch.object(type(bot), "user", PropertyMock(return_value=mock_user)),
            patch.object(type(bot), "guilds", PropertyMock(return_value=[MagicMock()])),
            patch.object(bot, "change_presence", new_callable=AsyncMock) as mock_change,
        ):
            await bot.on_ready()

        activity = mock_change.call_args.kwargs["activity"]
        assert activity.type == discord.ActivityType.listening
        assert activity.name == "/play"


# =============================================================================
# Close/Shutdown Tests
# =============================================================================


class TestBotClose:
    async def test_close_shuts_down_container(self, bot, mock_container):
        with patch.object(type(bot), "voice_clients", PropertyMock(return_value=[])):
            await bot.close()

        mock_container.shutdown.assert_awaited_once()

    async def test_close_tolerates_container_error(self, bot, mock_container):
        mock_container.shutdown.side_effect = RuntimeError("teardown failed")

        with patch.object(type(bot), "voice_clients", PropertyMock(return_value=[])):
            await bot.close()

    async def test_close_disconnects_stray_voice_clients(self, bot):
        """Should force-disconnect voice clients no queue owned."""
        vc1 = AsyncMock()
        vc2 = AsyncMock()
        vc2.disconnect.side_effect = RuntimeError("already gone")

        with patch.object(type(bot), "voice_clients", PropertyMock(return_value=[vc1, vc2])):
            await bot.close()

        vc1.disconnect.assert_awaited_once_with(force=True)
        vc2.disconnect.assert_awaited_once_with(force=True)
