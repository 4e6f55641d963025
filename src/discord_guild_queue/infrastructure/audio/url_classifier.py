"""Classify raw user input as a YouTube/SoundCloud URL, a playlist, or a search query."""

from __future__ import annotations

import re
from typing import Final

from discord_guild_queue.domain.music.value_objects import InputClassification, Platform

YOUTUBE_PLAYLIST_PATTERN: Final[re.Pattern[str]] = re.compile(r"[?&]list=([a-zA-Z0-9_-]+)")

YOUTUBE_VIDEO_PATTERN: Final[re.Pattern[str]] = re.compile(
    r"(?:https?://)?(?:www\.)?(?:youtube\.com|youtu\.be)/"
    r"(?:watch\?v=|embed/|v/|shorts/)?([a-zA-Z0-9_-]{11})"
)

SOUNDCLOUD_PATTERNS: Final[list[re.Pattern[str]]] = [
    # https://soundcloud.com/artist/track, optional trailing path or query
    re.compile(
        r"^(?:https?://)?(?:www\.)?soundcloud\.com/([a-zA-Z0-9_-]+)/([a-zA-Z0-9_-]+)(?:[/?].*)?$"
    ),
    re.compile(r"^(?:https?://)?on\.soundcloud\.com/[a-zA-Z0-9]+(?:\?.*)?$"),
    re.compile(
        r"^(?:https?://)?m\.soundcloud\.com/([a-zA-Z0-9_-]+)/([a-zA-Z0-9_-]+)(?:[/?].*)?$"
    ),
]

YOUTUBE_WATCH_URL: Final[str] = "https://www.youtube.com/watch?v={video_id}"
YOUTUBE_PLAYLIST_URL: Final[str] = "https://www.youtube.com/playlist?list={playlist_id}"


def _classify_soundcloud(raw: str) -> InputClassification | None:
    if not any(pattern.match(raw) for pattern in SOUNDCLOUD_PATTERNS):
        return None

    url = raw if raw.startswith(("http://", "https://")) else f"https://{raw}"
    is_playlist = "/sets/" in url
    return InputClassification(
        is_url=True,
        url=url,
        is_playlist=is_playlist,
        playlist_url=url if is_playlist else None,
        platform=Platform.SOUNDCLOUD,
    )


def _classify_youtube(raw: str) -> InputClassification | None:
    playlist_match = YOUTUBE_PLAYLIST_PATTERN.search(raw)
    playlist_id = playlist_match.group(1) if playlist_match else None
    playlist_url = (
        YOUTUBE_PLAYLIST_URL.format(playlist_id=playlist_id) if playlist_id else None
    )

    video_match = YOUTUBE_VIDEO_PATTERN.search(raw)
    if video_match:
        video_id = video_match.group(1)
        url = YOUTUBE_WATCH_URL.format(video_id=video_id)
        if playlist_id:
            url += f"&list={playlist_id}"
        return InputClassification(
            is_url=True,
            url=url,
            is_playlist=playlist_id is not None,
            playlist_id=playlist_id,
            playlist_url=playlist_url,
            platform=Platform.YOUTUBE,
            track_id=video_id,
        )

    if playlist_id:
        return InputClassification(
            is_url=True,
            url=playlist_url,
            is_playlist=True,
            playlist_id=playlist_id,
            playlist_url=playlist_url,
            platform=Platform.YOUTUBE,
        )
    return None


def classify(raw: str) -> InputClassification:
    """Classify *raw* input. Never raises; anything unrecognised is a search query.

    SoundCloud is checked first so its URLs are never mistaken for YouTube ones.
    """
    text = (raw or "").strip()
    if not text:
        return InputClassification()

    return _classify_soundcloud(text) or _classify_youtube(text) or InputClassification()
