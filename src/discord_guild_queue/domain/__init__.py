# ruff: noqa: N999
"""
Domain Layer

Contains pure business logic organized by bounded contexts:
- shared/: Cross-cutting types, messages and exceptions
- music/: Track, retry bookkeeping and playback state vocabulary
"""

from discord_guild_queue.domain.shared.exceptions import DomainError

__all__ = [
    "DomainError",
]
