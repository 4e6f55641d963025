"""Audio infrastructure - yt-dlp resolver, input classifier and FFmpeg decoder pipeline."""

from discord_guild_queue.infrastructure.audio.ffmpeg_pipeline import (
    DecoderPipeline,
    FFmpegConfig,
    NormalizedPCMAudio,
    make_decoder_factory,
)
from discord_guild_queue.infrastructure.audio.models import (
    AudioFormatInfo,
    YtDlpOpts,
    YtDlpTrackInfo,
)
from discord_guild_queue.infrastructure.audio.url_classifier import classify
from discord_guild_queue.infrastructure.audio.ytdlp_resolver import YtDlpStreamResolver

__all__ = [
    "AudioFormatInfo",
    "DecoderPipeline",
    "FFmpegConfig",
    "NormalizedPCMAudio",
    "YtDlpOpts",
    "YtDlpStreamResolver",
    "YtDlpTrackInfo",
    "classify",
    "make_decoder_factory",
]
