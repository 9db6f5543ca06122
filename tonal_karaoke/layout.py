"""Screen geometry and colour classification for a lyric line.

Nothing here draws. The functions turn highlight states into positioned,
classified text segments; a render sink decides what the classes look like.
All cells are 0-based (column, row).
"""

from dataclasses import dataclass, field
from enum import Enum, auto
from typing import Dict, List, Optional, Sequence, Tuple

from .core.errors import DegenerateLineError, InvalidInputError
from .highlight import highlight
from .note_types import (
    DominantNoteSample,
    HighlightPhase,
    HighlightState,
    Line,
    Note,
    NoteKind,
)
from .note_utils import LETTER_ROWS, letter_name, letter_row


# Vertical layout
PROGRESS_ROW = 0
TOP_OFFSET = 2  # Rows kept free above the note scale for the progress bar
LINE_SPACING = 2  # Rows between two adjacent letters of the scale
SCALE_ROWS = len(LETTER_ROWS)
LYRIC_ROW = TOP_OFFSET + SCALE_ROWS * LINE_SPACING + 10
STATUS_ROW = LYRIC_ROW + 2

BAR_CHAR = "#"
STATUS_WIDTH = 20


class ColorClass(Enum):
    """Colour of a segment, by note variant and highlight phase."""

    UPCOMING_REGULAR = auto()
    UPCOMING_GOLDEN = auto()
    UPCOMING_FREESTYLE = auto()
    ACTIVE_REGULAR = auto()
    ACTIVE_GOLDEN = auto()
    ACTIVE_FREESTYLE = auto()
    PLAYED_REGULAR = auto()
    PLAYED_GOLDEN = auto()
    PLAYED_FREESTYLE = auto()


class SegmentKind(Enum):
    """What a segment represents on screen."""

    PROGRESS = auto()
    NOTE_BAR = auto()
    MARKED_BAR = auto()  # Sung part of an active note, drawn over its bar
    NOTE_LABEL = auto()
    LYRIC = auto()
    STATUS = auto()
    SCORE = auto()


COLOR_TABLE: Dict[Tuple[NoteKind, HighlightPhase], ColorClass] = {
    (NoteKind.REGULAR, HighlightPhase.UPCOMING): ColorClass.UPCOMING_REGULAR,
    (NoteKind.GOLDEN, HighlightPhase.UPCOMING): ColorClass.UPCOMING_GOLDEN,
    (NoteKind.FREESTYLE, HighlightPhase.UPCOMING): ColorClass.UPCOMING_FREESTYLE,
    (NoteKind.REGULAR, HighlightPhase.ACTIVE): ColorClass.ACTIVE_REGULAR,
    (NoteKind.GOLDEN, HighlightPhase.ACTIVE): ColorClass.ACTIVE_GOLDEN,
    (NoteKind.FREESTYLE, HighlightPhase.ACTIVE): ColorClass.ACTIVE_FREESTYLE,
    (NoteKind.REGULAR, HighlightPhase.PLAYED): ColorClass.PLAYED_REGULAR,
    (NoteKind.GOLDEN, HighlightPhase.PLAYED): ColorClass.PLAYED_GOLDEN,
    (NoteKind.FREESTYLE, HighlightPhase.PLAYED): ColorClass.PLAYED_FREESTYLE,
}


@dataclass(frozen=True)
class RenderSegment:
    """A run of text to draw at a cell, with its classification."""

    col: int
    row: int
    text: str
    kind: SegmentKind
    color: Optional[ColorClass] = None

    @property
    def length(self) -> int:
        return len(self.text)


@dataclass(frozen=True)
class Frame:
    """Everything a render sink needs for one tick, in drawing order."""

    segments: Tuple[RenderSegment, ...] = field(default_factory=tuple)

    def of_kind(self, kind: SegmentKind) -> List[RenderSegment]:
        return [segment for segment in self.segments if segment.kind is kind]


def classify(note: Note, phase: HighlightPhase) -> ColorClass:
    """Colour class of a timed note in the given phase."""
    return COLOR_TABLE[(note.kind, phase)]


def chars_per_beat(line: Line, terminal_width: int) -> float:
    """Horizontal cells per beat so that the line fills the terminal width.

    Raises:
        InvalidInputError: If the terminal width is not positive
        DegenerateLineError: If the line's timed notes span zero beats
    """
    if terminal_width <= 0:
        raise InvalidInputError(f"terminal width must be positive, got {terminal_width}")
    span = line.last_end - line.first_start
    if span <= 0:
        raise DegenerateLineError(
            f"line spans {span} beats (first start {line.first_start}, last end {line.last_end})"
        )
    return terminal_width / span


def note_row(pitch: int) -> int:
    """Screen row of a pitch; higher letters are drawn higher up."""
    return TOP_OFFSET + (SCALE_ROWS - letter_row(pitch)) * LINE_SPACING


def layout_progress(line: Line, beat: float, terminal_width: int) -> RenderSegment:
    """Bar across the top row showing how much of the line has elapsed."""
    cpb = chars_per_beat(line, terminal_width)
    span = line.last_end - line.first_start
    elapsed = min(float(span), max(0.0, beat - line.first_start))
    length = min(terminal_width, int(elapsed * cpb))
    return RenderSegment(0, PROGRESS_ROW, BAR_CHAR * length, SegmentKind.PROGRESS)


def layout_notes(
    line: Line,
    states: Sequence[Tuple[Note, HighlightState]],
    terminal_width: int,
) -> List[RenderSegment]:
    """Note bars, sung sub-bars and pitch labels for every timed note."""
    cpb = chars_per_beat(line, terminal_width)
    first_start = line.first_start
    segments = []

    for note, state in states:
        col = int((note.start - first_start) * cpb)
        row = note_row(note.pitch)
        full_length = int(note.duration * cpb)
        bar_color = classify(note, state.phase)
        segments.append(
            RenderSegment(col, row, BAR_CHAR * full_length, SegmentKind.NOTE_BAR, bar_color)
        )

        if state.phase is HighlightPhase.ACTIVE:
            marked_length = int(state.progress * full_length)
            segments.append(
                RenderSegment(
                    col,
                    row,
                    BAR_CHAR * marked_length,
                    SegmentKind.MARKED_BAR,
                    classify(note, HighlightPhase.PLAYED),
                )
            )

        segments.append(
            RenderSegment(col, row, letter_name(note.pitch), SegmentKind.NOTE_LABEL)
        )

    return segments


def layout_lyrics(
    states: Sequence[Tuple[Note, HighlightState]], terminal_width: int
) -> List[RenderSegment]:
    """Lyric syllables centred on the lyric row, coloured by their own state."""
    text_length = sum(len(note.text) for note, _ in states)
    col = max(0, (terminal_width - text_length) // 2)
    segments = []
    for note, state in states:
        segments.append(
            RenderSegment(col, LYRIC_ROW, note.text, SegmentKind.LYRIC, classify(note, state.phase))
        )
        col += len(note.text)
    return segments


def layout_status(
    sample: DominantNoteSample, terminal_width: int, score: Optional[float] = None
) -> List[RenderSegment]:
    """The most recently sung note under the lyrics, and the score if known.

    The note is centred in a blank field of fixed width, so each tick
    overwrites every cell the previous name used.
    """
    text = (sample.name if sample is not None else "").center(STATUS_WIDTH)
    col = max(0, (terminal_width - STATUS_WIDTH) // 2)
    segments = [RenderSegment(col, STATUS_ROW, text, SegmentKind.STATUS)]
    if score is not None:
        segments.append(
            RenderSegment(0, STATUS_ROW, f"Score: {score:3.0f}%", SegmentKind.SCORE)
        )
    return segments


def compose_frame(
    line: Line,
    beat: float,
    terminal_width: int,
    sample: DominantNoteSample = None,
    score: Optional[float] = None,
) -> Frame:
    """Lay out a whole line at ``beat``.

    Raises:
        NoTimedNotesError: If the line has no timed notes
        DegenerateLineError: If the line spans zero beats
    """
    states = highlight(line, beat)
    segments = [layout_progress(line, beat, terminal_width)]
    segments.extend(layout_notes(line, states, terminal_width))
    segments.extend(layout_lyrics(states, terminal_width))
    segments.extend(layout_status(sample, terminal_width, score))
    return Frame(tuple(segments))
