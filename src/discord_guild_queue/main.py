#!/usr/bin/env python3
"""Entry point for the guild queue bot: argument parsing, startup checks, run loop."""

from __future__ import annotations

import argparse
import logging
import shutil
import sys
from typing import TYPE_CHECKING

from discord_guild_queue.domain.shared.messages import ErrorMessages, LogTemplates
from discord_guild_queue.utils.logging import setup_logging

if TYPE_CHECKING:
    from discord_guild_queue.config.settings import Settings

logger = logging.getLogger(__name__)

LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="discord-guild-queue",
        description="Run the guild queue Discord bot. Configuration comes from the environment.",
    )
    parser.add_argument(
        "--log-level",
        type=str.upper,
        choices=LOG_LEVELS,
        default=None,
        help="override the configured log level",
    )
    parser.add_argument(
        "--check",
        action="store_true",
        help="validate the token and ffmpeg, then exit without connecting",
    )
    return parser


def startup_problems(settings: Settings) -> list[str]:
    """Every reason the bot cannot start with *settings*; empty when it can."""
    problems: list[str] = []
    if not settings.discord.token.get_secret_value():
        problems.append(ErrorMessages.DISCORD_TOKEN_REQUIRED)
    if shutil.which(settings.audio.ffmpeg_path) is None:
        problems.append(ErrorMessages.FFMPEG_NOT_FOUND.format(path=settings.audio.ffmpeg_path))
    return problems


def run_bot(settings: Settings) -> int:
    """Build the container and bot, then block until the bot shuts down."""
    from discord_guild_queue.config.container import create_container
    from discord_guild_queue.infrastructure.discord.bot import create_bot

    container = create_container(settings)
    bot = create_bot(container, settings)

    try:
        logger.info(LogTemplates.BOT_STARTING_RUN)
        bot.run_with_graceful_shutdown(settings.discord.token.get_secret_value())
        logger.info(LogTemplates.BOT_STOPPED)
        return 0
    except KeyboardInterrupt:
        logger.info(LogTemplates.BOT_KEYBOARD_INTERRUPT)
        return 0
    except Exception as e:
        logger.exception(LogTemplates.BOT_FATAL_ERROR, e)
        return 1


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv if argv is not None else [])

    from discord_guild_queue.config.settings import get_settings

    settings = get_settings()
    setup_logging(args.log_level or ("DEBUG" if settings.debug else settings.log_level))

    problems = startup_problems(settings)
    for problem in problems:
        logger.error(problem)
    if problems:
        return 1

    if args.check:
        logger.info(LogTemplates.STARTUP_CHECK_PASSED, settings.audio.ffmpeg_path)
        return 0

    logger.info(LogTemplates.BOT_STARTING.format(environment=settings.environment))
    return run_bot(settings)


def cli() -> None:
    """Console script entry point (``discord-guild-queue``)."""
    sys.exit(main(sys.argv[1:]))


if __name__ == "__main__":
    cli()  # pragma: no cover
