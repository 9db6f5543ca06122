"""Playback bus events for Tonal Karaoke components."""

from dataclasses import dataclass
from enum import Enum, auto
from typing import Optional


class PlayerState(Enum):
    """State of the playback engine."""

    NULL = auto()
    PAUSED = auto()
    PLAYING = auto()


class PlaybackEventType(Enum):
    """Event types posted on the playback engine's bus."""

    ERROR = auto()
    END_OF_STREAM = auto()
    DURATION_CHANGED = auto()
    STATE_CHANGED = auto()


@dataclass(frozen=True)
class PlaybackEvent:
    """A single message popped from the playback bus."""

    type: PlaybackEventType
    old_state: Optional[PlayerState] = None
    new_state: Optional[PlayerState] = None
    message: str = ""

    @classmethod
    def state_changed(cls, old_state: PlayerState, new_state: PlayerState) -> "PlaybackEvent":
        return cls(PlaybackEventType.STATE_CHANGED, old_state=old_state, new_state=new_state)

    @classmethod
    def end_of_stream(cls) -> "PlaybackEvent":
        return cls(PlaybackEventType.END_OF_STREAM)

    @classmethod
    def error(cls, message: str) -> "PlaybackEvent":
        return cls(PlaybackEventType.ERROR, message=message)

    @classmethod
    def duration_changed(cls) -> "PlaybackEvent":
        return cls(PlaybackEventType.DURATION_CHANGED)
