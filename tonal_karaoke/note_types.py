"""Type definitions for the Tonal Karaoke project."""

from dataclasses import dataclass, field
from enum import Enum, auto
from pathlib import Path
from typing import NamedTuple, Optional, Tuple

from .core.errors import InvalidInputError, NoTimedNotesError


class NoteKind(Enum):
    """Variant of a note in a song line."""

    REGULAR = auto()
    GOLDEN = auto()
    FREESTYLE = auto()
    PLAYER_CHANGE = auto()


@dataclass(frozen=True)
class Note:
    """One sung syllable, or a marker that the performer changes.

    ``start`` and ``duration`` are in beats, ``pitch`` is a semitone index
    (12 per octave, same grid as MIDI note numbers).
    """

    kind: NoteKind
    start: int = 0
    duration: int = 0
    pitch: int = 0
    text: str = ""
    player: Optional[int] = None  # Only set for PLAYER_CHANGE

    @classmethod
    def regular(cls, start: int, duration: int, pitch: int, text: str) -> "Note":
        return cls(NoteKind.REGULAR, start, duration, pitch, text)

    @classmethod
    def golden(cls, start: int, duration: int, pitch: int, text: str) -> "Note":
        return cls(NoteKind.GOLDEN, start, duration, pitch, text)

    @classmethod
    def freestyle(cls, start: int, duration: int, pitch: int, text: str) -> "Note":
        return cls(NoteKind.FREESTYLE, start, duration, pitch, text)

    @classmethod
    def player_change(cls, player: int) -> "Note":
        return cls(NoteKind.PLAYER_CHANGE, player=player)

    @property
    def is_timed(self) -> bool:
        """PlayerChange markers carry no timing or pitch."""
        return self.kind is not NoteKind.PLAYER_CHANGE

    @property
    def end(self) -> int:
        return self.start + self.duration


@dataclass(frozen=True)
class Line:
    """One on-screen lyric phrase.

    ``start`` is the optional beat at which the song file says the line
    should appear; without it the line appears at its first timed note.
    """

    notes: Tuple[Note, ...]
    start: Optional[int] = None

    def __post_init__(self):
        # Accept any iterable but store an immutable tuple
        object.__setattr__(self, "notes", tuple(self.notes))

    @property
    def timed_notes(self) -> Tuple[Note, ...]:
        return tuple(note for note in self.notes if note.is_timed)

    def validate(self) -> None:
        """Raise NoTimedNotesError if the line cannot be timed."""
        if not self.timed_notes:
            raise NoTimedNotesError("line has no timed notes")

    @property
    def first_start(self) -> int:
        self.validate()
        return self.timed_notes[0].start

    @property
    def last_end(self) -> int:
        self.validate()
        return self.timed_notes[-1].end

    @property
    def display_start(self) -> int:
        return self.start if self.start is not None else self.first_start

    @property
    def text(self) -> str:
        return "".join(note.text for note in self.timed_notes)


@dataclass(frozen=True)
class SongTiming:
    """Tempo metadata used to map playback time onto beats."""

    beats_per_minute: float
    gap_ms: float = 0.0

    def __post_init__(self):
        if self.beats_per_minute <= 0:
            raise InvalidInputError(
                f"beats_per_minute must be positive, got {self.beats_per_minute}"
            )


@dataclass(frozen=True)
class Song:
    """A song as delivered by the song source."""

    title: str
    artist: str
    timing: SongTiming
    audio_path: Path
    lines: Tuple[Line, ...] = field(default_factory=tuple)


class HighlightPhase(Enum):
    """Where the current beat is relative to a note."""

    UPCOMING = auto()
    ACTIVE = auto()
    PLAYED = auto()


@dataclass(frozen=True)
class HighlightState:
    """Render state of a note for one tick.

    ``progress`` is only meaningful for ACTIVE notes and lies in [0, 1].
    """

    phase: HighlightPhase
    progress: float = 0.0

    @classmethod
    def upcoming(cls) -> "HighlightState":
        return cls(HighlightPhase.UPCOMING)

    @classmethod
    def active(cls, progress: float) -> "HighlightState":
        return cls(HighlightPhase.ACTIVE, progress)

    @classmethod
    def played(cls) -> "HighlightState":
        return cls(HighlightPhase.PLAYED, 1.0)


@dataclass(frozen=True)
class EstimatedNote:
    """A note estimated from a microphone buffer."""

    step: int  # MIDI note number, e.g. 36 for C2
    name: str  # Note name with octave, e.g. 'C2'
    frequency: float  # Frequency in Hz of the candidate

    def __str__(self):
        return self.name


class NoteWeight(NamedTuple):
    """A candidate note and how well the buffer correlates at its period."""

    note: EstimatedNote
    score: float


# None means the capture buffer was below the silence threshold
DominantNoteSample = Optional[EstimatedNote]
