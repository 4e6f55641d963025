"""Centralized message constants for error messages, log templates, and user feedback."""

from __future__ import annotations


class ErrorMessages:
    """Error messages for exceptions and validation failures."""

    # Discord ID Validation Errors
    INVALID_SNOWFLAKE = "Discord snowflake ID must be positive"
    SNOWFLAKE_TOO_LARGE = "Discord snowflake ID exceeds maximum value (2^64)"

    INVALID_LOG_LEVEL = "Invalid log level: {level}. Must be one of {valid_levels}"

    # Queue Errors
    QUEUE_FULL = "Queue is full! Maximum {max_size} songs allowed."

    # Voice Connection Errors
    CONNECTION_TIMEOUT = "Voice connection to channel {channel_id} not ready after {timeout}s"
    CONNECTION_FAILED = "Failed to join voice channel {channel_id}: {reason}"
    GUILD_UNAVAILABLE = "Guild {guild_id} is not available"
    CHANNEL_NOT_VOICE = "Channel {channel_id} is not a voice channel"

    # Audio/Stream Errors
    RESOLUTION_FAILED = "Could not resolve a stream for {source_url}: {reason}"
    INVALID_DIRECT_URL = "resolver returned an invalid direct URL"
    DECODER_SPAWN_FAILED = "Failed to start decoder: {reason}"
    DECODER_ALREADY_RUNNING = "decoder pipeline already has a live process"
    STREAM_PREMATURE_CLOSE = "Decoded stream closed before the reader finished"
    NO_URL_IN_INFO_DICT = "No URL found in info dict"
    SESSION_NOT_BOUND = "no audio sink is bound"
    SINK_START_FAILED = "Audio sink could not start the stream: {reason}"
    CONNECTION_NOT_READY = "connection not ready"

    # Authentication/Security Errors
    DISCORD_TOKEN_REQUIRED = "DISCORD_TOKEN environment variable is required"
    BOT_NOT_INITIALIZED = "Bot not initialized. Call set_bot() first."
    CONTAINER_NOT_FOUND = "Container not found on bot instance"
    FFMPEG_NOT_FOUND = "ffmpeg executable not found: {path}"


class LogTemplates:
    """Log message templates for structured logging.

    Use these with logger.info(), logger.error(), etc. and pass values as parameters
    for proper log formatting and structured logging support.
    """

    # Voice Operations
    VOICE_CONNECTING = "Connecting to voice channel %s in guild %s"
    VOICE_CONNECTED = "Connected to voice channel %s in guild %s"
    VOICE_DISCONNECTED = "Disconnected from voice in guild %s"
    VOICE_CONNECTION_TIMEOUT = "Timeout connecting to channel %s in guild %s"
    VOICE_CONNECTION_FAILED = "Failed to connect to channel %s in guild %s: %s"
    VOICE_CONNECTION_LOST = "Voice connection lost in guild %s, resetting playback state"
    VOICE_CONNECTION_RECOVERED = "Voice connection recovered in guild %s"
    VOICE_CONNECT_PENDING = "Connection already in progress for guild %s"
    VOICE_STALE_CLEANUP = "Found stale voice client in guild %s, cleaning up"
    VOICE_CLEANUP_ERROR = "Error disconnecting voice client in guild %s: %r"
    VOICE_SELF_DEAFEN_FAILED = "Failed to self-deafen in guild %s: %r"
    VOICE_CHANNEL_SWITCH = "Switching guild %s from channel %s to channel %s"
    VOICE_CHANNEL_SWITCH_DONE = "Channel switch settled in guild %s, %s tracks restored"
    VOICE_DESTROYED_LISTENER_ERROR = "Error in connection-destroyed listener for guild %s"

    # Playback Session
    PLAYBACK_STARTED = "Playback session started stream in guild %s"
    PLAYBACK_PAUSED = "Paused playback in guild %s"
    PLAYBACK_RESUMED = "Resumed playback in guild %s"
    PLAYBACK_ERROR = "Playback error in guild %s: %s"
    PLAYBACK_STALE_CALLBACK = "Ignoring stale playback callback in guild %s"
    PLAYBACK_PREMATURE_CLOSE = "Stream closed early in guild %s (treated as end of track)"
    PLAYBACK_LISTENER_ERROR = "Error in %s listener for guild %s"
    PLAYBACK_TRACK_ERROR = "Stream of '%s' failed in guild %s: %s"

    # Track Operations
    TRACK_STARTED = "Started playing '%s' in guild %s"
    TRACK_SKIPPED = "Skipped track '%s' in guild %s"
    TRACK_RETRYING = "Retrying '%s' (attempt %s/%s) in guild %s after: %s"
    TRACK_DROPPED = "Dropping '%s' in guild %s after failure: %s"
    TRACK_START_SUPERSEDED = "Abandoning start of '%s' in guild %s, state was reset"
    TRACK_DROP_CALLBACK_ERROR = "Error in track-dropped callback for guild %s"

    # Queue Operations
    QUEUE_ENQUEUED = "Enqueued track '%s' at position %s in guild %s"
    QUEUE_ROLLED_BACK = "Rolled back enqueue of '%s' in guild %s"
    QUEUE_EXHAUSTED = "Queue exhausted in guild %s, arming inactivity timer (%ss)"
    QUEUE_ADVANCE_IN_FLIGHT = "Advance already in flight for guild %s"
    QUEUE_ADVANCE_STALE = "Ignoring advance trigger in guild %s, session already streaming"
    QUEUE_ADVANCE_FAILED = "Scheduled advance failed in guild %s"
    QUEUE_STOPPED = "Stopped playback and cleared queue in guild %s"
    QUEUE_INACTIVITY_TIMEOUT = "No activity for %ss in guild %s, tearing down"
    QUEUE_IDLE_TIMER_CANCELLED = "Cancelled inactivity timer for guild %s"
    QUEUE_CREATED = "Created queue for guild %s"
    QUEUE_DELETED = "Deleted queue for guild %s"
    QUEUE_REGISTRY_SHUTDOWN = "Tore down %s guild queues"
    QUEUE_TEARDOWN_FAILED = "Failed to tear down queue for guild %s"

    # Decoder Operations
    DECODER_SPAWNED = "Spawned decoder pid %s (filter=%s)"
    DECODER_EXITED = "Decoder exited with code %s in guild %s"
    DECODER_FAILED = "Decoder for '%s' exited with code %s in guild %s, stderr tail: %r"
    DECODER_KILLED = "Killed decoder pid %s"

    # Resolution/Search
    RESOLVER_DIRECT_URL = "Resolved direct URL for %s: %s..."
    YTDLP_FAILED_EXTRACT_INFO = "Failed to extract info from %s"
    YTDLP_FAILED_SEARCH = "Failed to search for %r"
    YTDLP_FAILED_EXTRACT_PLAYLIST = "Failed to extract playlist from %s"
    YTDLP_COOKIES_CONFIGURED = "yt-dlp cookies file configured (%s)"

    # Commands
    PLAY_COMMAND_FAILED = "Play command failed in guild %s"
    PLAYLIST_ENQUEUED = "Enqueued %s of %s playlist entries in guild %s"

    # Application Lifecycle
    BOT_STARTING = "Starting guild queue bot in {environment} mode"
    BOT_SETUP = "Setting up bot..."
    BOT_SETUP_COMPLETE = "Bot setup complete"
    BOT_STARTING_RUN = "Starting bot..."
    STARTUP_CHECK_PASSED = "Startup checks passed, ffmpeg at %s"
    BOT_STOPPED = "Bot stopped successfully"
    BOT_KEYBOARD_INTERRUPT = "Received keyboard interrupt, shutting down..."
    BOT_FATAL_ERROR = "Fatal error: %s"
    BOT_SHUTTING_DOWN = "Shutting down bot..."
    BOT_SHUTDOWN_TIMEOUT = "Graceful shutdown did not finish within %ss"
    BOT_CONTAINER_SHUTDOWN = "Container shutdown complete"
    BOT_CONTAINER_SHUTDOWN_ERROR = "Error during container shutdown: %s"
    BOT_SHUTDOWN_COMPLETE = "Bot shutdown complete"
    BOT_READY = "Bot ready as %s (%s)"
    BOT_CONNECTED_GUILDS = "Connected to %s guilds"

    # Bot Cog Management
    BOT_COG_LOADED = "Loaded cog: %s"
    BOT_COG_LOAD_FAILED = "Failed to load cog %s: %s"
    BOT_COGS_LOADED_SUMMARY = "Cogs loaded: %s success, %s failed"

    # Bot Command Sync
    BOT_SYNCED_GUILD = "Synced %s commands to guild %s"
    BOT_SYNC_GUILD_FAILED = "Failed to sync to guild %s: %s"
    BOT_SYNCED_GLOBAL = "Synced %s commands globally"
    BOT_SYNC_GLOBAL_FAILED = "Failed to sync commands globally: %s"

    # Bot Error Handling
    BOT_SLASH_COMMAND_ERROR = "Slash command error in '%s': %s"
    BOT_ERROR_MESSAGE_SEND_FAILED = "Failed to send error message to user"
    BOT_COMMAND_COOLDOWN = "Cooldown triggered for command '%s' by %s (%.2fs remaining)"

    # Voice Events
    EVENT_CHANNEL_EMPTY = "No listeners left in voice channel for guild %s, stopping"
    EVENT_BOT_DISCONNECTED = "Bot was disconnected from voice in guild %s"
    EVENT_GUILD_REMOVED = "Left guild: %s (%s)"
    EVENT_ANNOUNCE_FAILED = "Could not announce dropped track in channel %s"
    QUEUE_CLEANUP_REQUESTED = "Player cleanup requested in guild %s by %s"
    VIEW_EDIT_FAILED = "Could not update controls on message %s"


class DiscordUIMessages:
    """User-facing Discord messages and responses.

    These strings are shown directly to users in Discord interactions.
    Keep them concise, friendly, and include appropriate emoji.
    """

    # Play Results
    PLAY_NOW_PLAYING = "🎵 Now playing: **{title}**"
    PLAY_QUEUED = "➕ Added to queue: **{title}** (position {position})"
    PLAYLIST_QUEUED = "📋 Added **{count}** songs from the playlist to the queue."
    PLAYLIST_TRUNCATED = (
        "Playlist has {count} songs, but only {max_size} can be added. "
        "Adding first {max_size} songs."
    )
    PLAYLIST_TRUNCATED_QUEUE_SPACE = (
        "Queue space: only {available} slots available. "
        "Adding the first {available} of {count} songs."
    )

    # Error Messages
    ERROR_OCCURRED = "An error occurred: {error}"
    ERROR_TRACK_NOT_FOUND = "Couldn't find a track for: {query}"
    ERROR_VOICE_CONNECTION_FAILED = "Failed to join voice channel: {error}"
    ERROR_RESOLUTION_FAILED = "Couldn't load that track: {error}"
    ERROR_NOT_A_PLAYLIST = "This is not a playlist URL! Use `/play` for individual songs."
    ERROR_PLAYLIST_EMPTY = "This playlist is empty or private!"
    ERROR_PLAYLIST_NOT_ENOUGH_SPACE = (
        "Not enough space in queue! Playlist needs {needed} slots, but only {available} available."
    )
    ERROR_TRACK_DROPPED = "⚠️ Skipped **{title}**: it could not be played."
    ERROR_COMMAND_COOLDOWN = "⏳ Command on cooldown. Try again in {time_str}."

    # Action Messages
    ACTION_SKIPPED = "⏭️ Skipped: **{title}**"
    ACTION_SKIPPED_LAST = "⏭️ Skipped: **{title}**. The queue is empty, stopping playback."
    ACTION_STOPPED = "⏹️ Stopped playback and cleared the queue."
    ACTION_PAUSED = "⏸️ Paused playback."
    ACTION_RESUMED = "▶️ Resumed playback."
    ACTION_CLEANED_UP = "Bot state has been reset. The queue was cleared and the voice connection closed."

    # State Messages
    STATE_NOTHING_PLAYING = "There is no song playing!"
    STATE_NOTHING_PLAYING_OR_PAUSED = "Nothing is playing or already paused."
    STATE_NOTHING_PAUSED = "Nothing is paused."
    STATE_QUEUE_EMPTY = "The queue is empty!"
    STATE_SERVER_ONLY = "This command can only be used in a server."
    STATE_VERIFY_VOICE_FAILED = "Could not verify your voice state."
    STATE_NEED_TO_BE_IN_VOICE = "You need to be in a voice channel to play music!"
    STATE_MUST_BE_IN_SAME_VOICE = "You need to be in my voice channel to use these controls."
    STATE_NO_PERMISSIONS = "I need permissions to join and speak in your voice channel!"

    # Embed Titles
    EMBED_NOW_PLAYING = "🎵 Now Playing"
    EMBED_QUEUE = "📋 Queue ({total_tracks} tracks) · Page {page}/{total_pages}"
    EMBED_DEBUG = "🔧 Debug Information"
    EMBED_CLEANUP = "🧹 Cleanup Complete"
    DEBUG_YES = "✅ Yes"
    DEBUG_NO = "❌ No"
    DEBUG_NONE = "None"

    # Buttons
    BUTTON_SKIP = "⏭️ Skip"
    BUTTON_STOP = "⏹️ Stop"
