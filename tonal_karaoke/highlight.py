"""Per-note highlight states for the current beat.

States are recomputed from scratch on every tick. Nothing remembers that a
note was already sung, so rendering a line again at any beat (for example
to finish it off before the next line appears) is always consistent.
"""

from typing import List, Tuple

from .note_types import HighlightState, Line, Note

# Added to a line's end to make sure every note evaluates as played
END_OF_LINE_EPSILON = 1e-3


def highlight_note(note: Note, beat: float) -> HighlightState:
    """Highlight state of a single timed note at ``beat``."""
    if beat < note.start:
        return HighlightState.upcoming()
    if note.duration == 0:
        # Nothing to sing through; the note stays fully marked once reached
        return HighlightState.active(1.0)
    if beat <= note.end:
        progress = (beat - note.start) / note.duration
        return HighlightState.active(min(1.0, max(0.0, progress)))
    return HighlightState.played()


def highlight(line: Line, beat: float) -> List[Tuple[Note, HighlightState]]:
    """Pair every timed note of the line with its state, in line order.

    Raises:
        NoTimedNotesError: If the line has no timed notes
    """
    line.validate()
    return [(note, highlight_note(note, beat)) for note in line.timed_notes]


def end_of_line_beat(line: Line) -> float:
    """A beat just past the line's end, where all notes with a duration are played."""
    return line.last_end + END_OF_LINE_EPSILON
