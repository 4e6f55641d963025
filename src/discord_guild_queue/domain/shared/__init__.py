"""
Shared Domain Kernel

Contains types, messages and exceptions shared across all bounded contexts.
"""

from discord_guild_queue.domain.shared.exceptions import (
    ConnectionFailedError,
    ConnectionTimeoutError,
    DecoderSpawnFailedError,
    DomainError,
    InvalidOperationError,
    PlaybackStartError,
    QueueFullError,
    SinkStartFailedError,
    ResolutionFailedError,
    StreamPrematureCloseError,
    VoiceConnectionError,
)

__all__ = [
    "DomainError",
    "InvalidOperationError",
    "QueueFullError",
    "VoiceConnectionError",
    "ConnectionTimeoutError",
    "ConnectionFailedError",
    "PlaybackStartError",
    "ResolutionFailedError",
    "DecoderSpawnFailedError",
    "StreamPrematureCloseError",
    "SinkStartFailedError",
]
