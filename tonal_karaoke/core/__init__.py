"""Core components for the Tonal Karaoke application."""

# Import errors and events for easier access
from .errors import (
    KaraokeError,
    InvalidInputError,
    DegenerateLineError,
    NoTimedNotesError,
    SongFileError,
    CaptureError,
    PlaybackError,
)
from .events import PlayerState, PlaybackEventType, PlaybackEvent

__all__ = [
    "KaraokeError",
    "InvalidInputError",
    "DegenerateLineError",
    "NoTimedNotesError",
    "SongFileError",
    "CaptureError",
    "PlaybackError",
    "PlayerState",
    "PlaybackEventType",
    "PlaybackEvent",
]
