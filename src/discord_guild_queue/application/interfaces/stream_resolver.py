"""Port interface for turning platform page URLs into streams and metadata."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

from discord_guild_queue.domain.shared.types import HttpUrlStr, NonEmptyStr

if TYPE_CHECKING:
    from ...domain.music.value_objects import TrackMetadata, TrackStub


class StreamResolver(ABC):
    """Interface for resolving page URLs, playlists and search queries."""

    @abstractmethod
    async def resolve_direct_url(self, url: HttpUrlStr) -> str:
        """Resolve a page URL to a short-lived direct media URL.

        Raises:
            ResolutionFailedError: If the platform refuses or returns nothing usable.
        """
        ...

    @abstractmethod
    async def resolve_metadata(self, url: HttpUrlStr) -> "TrackMetadata | None":
        """Fetch title, duration and thumbnail for a page URL."""
        ...

    @abstractmethod
    async def resolve_playlist(self, url: HttpUrlStr) -> list["TrackStub"]:
        """List the entries of a playlist URL, in order."""
        ...

    @abstractmethod
    async def search(self, query: NonEmptyStr) -> str | None:
        """Return the page URL of the best match for a free-text query."""
        ...
