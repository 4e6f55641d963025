"""
Application Layer

Contains use cases, command handlers, and application services.
This layer orchestrates domain objects and infrastructure to fulfill use cases.

Structure:
- commands/: Write operations (PlayTrackHandler, EnqueuePlaylistHandler)
- services/: Per-guild playback orchestration (GuildQueue, PlaybackSession, QueueRegistry)
- interfaces/: Port interfaces for infrastructure adapters
"""
