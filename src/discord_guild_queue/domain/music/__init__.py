"""
Music Bounded Context

Domain logic for tracks, retry bookkeeping and playback state.
"""

from discord_guild_queue.domain.music.entities import Track
from discord_guild_queue.domain.music.retry_policy import RetryPolicy
from discord_guild_queue.domain.music.value_objects import (
    InputClassification,
    Platform,
    QueueState,
    TrackMetadata,
    TrackStub,
)

__all__ = [
    # Entities
    "Track",
    # Value Objects
    "Platform",
    "QueueState",
    "TrackMetadata",
    "TrackStub",
    "InputClassification",
    # Policies
    "RetryPolicy",
]
