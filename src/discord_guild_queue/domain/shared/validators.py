"""Shared validators for domain models and settings.

Discord-specific checks live here so that settings and command models
reject malformed snowflake IDs the same way.
"""

from discord_guild_queue.domain.shared.messages import ErrorMessages


def validate_discord_snowflake(value: int) -> int:
    """Validate a Discord snowflake ID.

    Discord snowflake IDs are 64-bit unsigned integers representing unique
    identifiers for users, guilds, channels, messages, etc.

    Args:
        value: The snowflake ID to validate.

    Returns:
        The validated snowflake ID.

    Raises:
        ValueError: If the snowflake ID is invalid.
    """
    if value <= 0:
        raise ValueError(ErrorMessages.INVALID_SNOWFLAKE)
    if value >= 2**64:
        raise ValueError(ErrorMessages.SNOWFLAKE_TOO_LARGE)
    return value


def is_direct_media_url(value: str | None) -> bool:
    """Return True when *value* looks like a fetchable http(s) media URL."""
    if not value:
        return False
    return value.startswith(("http://", "https://"))
