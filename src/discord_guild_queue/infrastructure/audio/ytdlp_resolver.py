"""StreamResolver implementation using yt-dlp for stream, metadata and playlist lookups."""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Final, cast

from yt_dlp import YoutubeDL

from discord_guild_queue.application.interfaces.stream_resolver import StreamResolver
from discord_guild_queue.config.settings import AudioSettings
from discord_guild_queue.domain.music.value_objects import TrackMetadata, TrackStub
from discord_guild_queue.domain.shared.exceptions import ResolutionFailedError
from discord_guild_queue.domain.shared.messages import ErrorMessages, LogTemplates
from discord_guild_queue.domain.shared.validators import is_direct_media_url
from discord_guild_queue.infrastructure.audio.models import (
    LOG_URL_TRUNCATE,
    AudioFormatInfo,
    YtDlpOpts,
    YtDlpTrackInfo,
)

logger = logging.getLogger(__name__)

YOUTUBE_WATCH_URL: Final[str] = "https://www.youtube.com/watch?v={video_id}"


class YtDlpStreamResolver(StreamResolver):
    def __init__(self, settings: AudioSettings | None = None) -> None:
        self._settings = settings or AudioSettings()
        self._base_opts = YtDlpOpts(
            format=self._settings.ytdlp_format,
            cookiefile=self._settings.cookies_file,
        )

        if self._settings.cookies_file:
            logger.info(LogTemplates.YTDLP_COOKIES_CONFIGURED, self._settings.cookies_file)

    def _get_opts(self, **overrides: Any) -> YtDlpOpts:
        if overrides:
            return self._base_opts.model_copy(update=overrides)
        return self._base_opts

    def _get_playlist_opts(self) -> YtDlpOpts:
        return self._get_opts(noplaylist=False, extract_flat="in_playlist")

    @staticmethod
    def _parse_info(data: dict[str, Any]) -> YtDlpTrackInfo:
        return YtDlpTrackInfo.model_validate(data)

    # ── Info to domain conversion ──────────────────────────────────────

    def _extract_stream_url(self, info: YtDlpTrackInfo) -> str | None:
        if info.url:
            return info.url
        return self._extract_stream_from_formats(info.formats)

    @staticmethod
    def _extract_stream_from_formats(formats: list[AudioFormatInfo]) -> str | None:
        if not formats:
            return None
        audio_formats = [f for f in formats if f.acodec != "none" and f.url]
        if audio_formats:
            return audio_formats[-1].url
        return None

    @staticmethod
    def _entry_page_url(info: YtDlpTrackInfo) -> str | None:
        """Page URL of a flat playlist or search entry."""
        if info.webpage_url:
            return info.webpage_url
        if is_direct_media_url(info.url):
            return info.url
        # Flat YouTube entries sometimes carry only the video id
        if info.id and info.ie_key in (None, "Youtube"):
            return YOUTUBE_WATCH_URL.format(video_id=info.id)
        return None

    def _info_to_metadata(self, info: YtDlpTrackInfo) -> TrackMetadata:
        return TrackMetadata(
            title=info.title,
            duration_seconds=info.duration or 0,
            thumbnail_url=info.thumbnail,
        )

    def _info_to_stub(self, info: YtDlpTrackInfo) -> TrackStub | None:
        page_url = self._entry_page_url(info)
        if page_url is None:
            return None
        return TrackStub(
            title=info.title,
            source_url=page_url,
            duration_seconds=info.duration or 0,
            thumbnail_url=info.thumbnail,
        )

    # ── Blocking yt-dlp calls (run in a worker thread) ─────────────────

    def _extract_info_sync(self, url: str) -> YtDlpTrackInfo | None:
        with YoutubeDL(params=cast(Any, self._get_opts().model_dump(exclude_none=True))) as ydl:
            data = ydl.extract_info(url, download=False)
            return self._parse_info(dict(data)) if isinstance(data, dict) else None

    def _search_sync(self, query: str, limit: int = 1) -> list[YtDlpTrackInfo]:
        try:
            search_query = f"ytsearch{limit}:{query}"
            opts = self._get_opts(extract_flat="in_playlist")
            with YoutubeDL(params=cast(Any, opts.model_dump(exclude_none=True))) as ydl:
                data = ydl.extract_info(search_query, download=False)

                if not isinstance(data, dict):
                    return []

                entries = data.get("entries", [])
                if not isinstance(entries, list):
                    return []

                return [self._parse_info(dict(e)) for e in entries if e]
        except Exception:
            logger.exception(LogTemplates.YTDLP_FAILED_SEARCH, query)
            return []

    def _extract_playlist_sync(self, url: str) -> list[YtDlpTrackInfo]:
        try:
            opts = self._get_playlist_opts()
            with YoutubeDL(params=cast(Any, opts.model_dump(exclude_none=True))) as ydl:
                data = ydl.extract_info(url, download=False)

                if not isinstance(data, dict):
                    return []

                entries = data.get("entries", [])
                if not isinstance(entries, list):
                    return []

                return [self._parse_info(dict(e)) for e in entries if e]
        except Exception:
            logger.exception(LogTemplates.YTDLP_FAILED_EXTRACT_PLAYLIST, url)
            return []

    # ── StreamResolver ─────────────────────────────────────────────────

    async def resolve_direct_url(self, url: str) -> str:
        try:
            info = await asyncio.to_thread(self._extract_info_sync, url)
        except Exception as exc:
            raise ResolutionFailedError(url, str(exc)) from exc

        stream_url = self._extract_stream_url(info) if info is not None else None
        if stream_url is None or not is_direct_media_url(stream_url):
            raise ResolutionFailedError(url, ErrorMessages.INVALID_DIRECT_URL)

        logger.debug(LogTemplates.RESOLVER_DIRECT_URL, url, stream_url[:LOG_URL_TRUNCATE])
        return stream_url

    async def resolve_metadata(self, url: str) -> TrackMetadata | None:
        try:
            info = await asyncio.to_thread(self._extract_info_sync, url)
        except Exception:
            logger.exception(LogTemplates.YTDLP_FAILED_EXTRACT_INFO, url)
            return None

        if info is None:
            return None
        return self._info_to_metadata(info)

    async def resolve_playlist(self, url: str) -> list[TrackStub]:
        entries = await asyncio.to_thread(self._extract_playlist_sync, url)

        stubs: list[TrackStub] = []
        for entry in entries:
            stub = self._info_to_stub(entry)
            if stub is None:
                logger.warning(ErrorMessages.NO_URL_IN_INFO_DICT)
                continue
            stubs.append(stub)
        return stubs

    async def search(self, query: str) -> str | None:
        results = await asyncio.to_thread(self._search_sync, query, 1)
        for info in results:
            page_url = self._entry_page_url(info)
            if page_url is not None:
                return page_url
        return None
