"""Base exception classes for domain-level errors."""

from __future__ import annotations

from discord_guild_queue.domain.shared.messages import ErrorMessages


class DomainError(Exception):
    """Base exception for all domain-level errors."""

    def __init__(self, message: str, code: str | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.code = code or self.__class__.__name__


class InvalidOperationError(DomainError):
    """Raised when an operation is invalid in the current state."""

    def __init__(self, operation: str, current_state: str, message: str | None = None) -> None:
        msg = message or f"Cannot perform '{operation}' in state '{current_state}'"
        super().__init__(msg, code="INVALID_OPERATION")
        self.operation = operation
        self.current_state = current_state


class QueueFullError(DomainError):
    """Raised when enqueueing would exceed the per-guild queue bound."""

    def __init__(self, max_size: int) -> None:
        super().__init__(ErrorMessages.QUEUE_FULL.format(max_size=max_size), code="QUEUE_FULL")
        self.max_size = max_size


# ── Voice connection failures ───────────────────────────────────────


class VoiceConnectionError(DomainError):
    """Base for failures while attaching to a voice channel."""

    def __init__(self, channel_id: int, message: str, code: str) -> None:
        super().__init__(message, code=code)
        self.channel_id = channel_id


class ConnectionTimeoutError(VoiceConnectionError):
    """Raised when a voice connection does not become ready in time."""

    def __init__(self, channel_id: int, timeout: float) -> None:
        super().__init__(
            channel_id,
            ErrorMessages.CONNECTION_TIMEOUT.format(channel_id=channel_id, timeout=timeout),
            code="CONNECTION_TIMEOUT",
        )
        self.timeout = timeout


class ConnectionFailedError(VoiceConnectionError):
    """Raised when the voice transport refuses or fails to connect."""

    def __init__(self, channel_id: int, reason: str) -> None:
        super().__init__(
            channel_id,
            ErrorMessages.CONNECTION_FAILED.format(channel_id=channel_id, reason=reason),
            code="CONNECTION_FAILED",
        )
        self.reason = reason


# ── Playback start failures ─────────────────────────────────────────


class PlaybackStartError(DomainError):
    """Base for failures while turning a track into a playable stream."""


class ResolutionFailedError(PlaybackStartError):
    """Raised when a page URL cannot be resolved to a direct media URL."""

    def __init__(self, source_url: str, reason: str) -> None:
        super().__init__(
            ErrorMessages.RESOLUTION_FAILED.format(source_url=source_url, reason=reason),
            code="RESOLUTION_FAILED",
        )
        self.source_url = source_url
        self.reason = reason


class DecoderSpawnFailedError(PlaybackStartError):
    """Raised when the decoder subprocess cannot be started."""

    def __init__(self, reason: str) -> None:
        super().__init__(
            ErrorMessages.DECODER_SPAWN_FAILED.format(reason=reason),
            code="DECODER_SPAWN_FAILED",
        )
        self.reason = reason


class StreamPrematureCloseError(DomainError):
    """Raised when the decoded stream closes underneath a reader.

    Treated as a normal end of track, never as a playback failure.
    """

    def __init__(self, message: str | None = None) -> None:
        super().__init__(message or ErrorMessages.STREAM_PREMATURE_CLOSE, code="STREAM_PREMATURE_CLOSE")


class SinkStartFailedError(PlaybackStartError):
    """Raised when the audio sink refuses a spawned stream."""

    def __init__(self, reason: str) -> None:
        super().__init__(
            ErrorMessages.SINK_START_FAILED.format(reason=reason),
            code="SINK_START_FAILED",
        )
        self.reason = reason
