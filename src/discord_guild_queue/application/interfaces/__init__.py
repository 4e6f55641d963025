"""
Application Interfaces (Ports)

Abstract interfaces that define contracts between the application
layer and infrastructure adapters. These are the "ports" in
hexagonal architecture.
"""

from discord_guild_queue.application.interfaces.audio_decoder import (
    AudioDecoder,
    DecoderFactory,
    PCMStream,
)
from discord_guild_queue.application.interfaces.stream_resolver import StreamResolver
from discord_guild_queue.application.interfaces.voice_transport import (
    AudioSink,
    VoiceConnection,
    VoiceTransport,
)

__all__ = [
    "AudioDecoder",
    "AudioSink",
    "DecoderFactory",
    "PCMStream",
    "StreamResolver",
    "VoiceConnection",
    "VoiceTransport",
]
