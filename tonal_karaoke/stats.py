"""Live scoring of the singer against the notes being highlighted."""

from typing import Any, Dict, Sequence, Tuple

from .logger import get_logger
from .note_matcher import NoteMatcher
from .note_types import DominantNoteSample, HighlightPhase, HighlightState, Note, NoteKind

# Get logger for this module
logger = get_logger(__name__)

# Ticks a note kind is worth while it is active; freestyle is never scored
NOTE_WEIGHTS = {
    NoteKind.REGULAR: 1,
    NoteKind.GOLDEN: 2,
}


class SingingStats:
    """Accumulates per-tick hits while notes are active."""

    def __init__(self, match_octave: bool = False) -> None:
        self.note_matcher = NoteMatcher()
        self.match_octave = match_octave
        self.stats: Dict[str, Any] = {
            "scored_ticks": 0,
            "matched_ticks": 0,
            "notes_sung": {},
        }

    def observe(
        self,
        states: Sequence[Tuple[Note, HighlightState]],
        sample: DominantNoteSample,
    ) -> int:
        """Score one tick.

        Args:
            states: Highlight states of the line on screen
            sample: Latest sung note, None while the singer is silent

        Returns:
            The weight matched in this tick
        """
        if sample is not None:
            self.stats["notes_sung"][sample.name] = (
                self.stats["notes_sung"].get(sample.name, 0) + 1
            )

        matched = 0
        for note, state in states:
            weight = NOTE_WEIGHTS.get(note.kind, 0)
            if state.phase is not HighlightPhase.ACTIVE or weight == 0:
                continue
            self.stats["scored_ticks"] += weight
            if sample is not None and self.note_matcher.match(
                note.pitch, sample, match_octave=self.match_octave
            ):
                self.stats["matched_ticks"] += weight
                matched += weight
        return matched

    @property
    def percent(self) -> float:
        if self.stats["scored_ticks"] == 0:
            return 0.0
        return 100.0 * self.stats["matched_ticks"] / self.stats["scored_ticks"]

    def summary_lines(self):
        """Human-readable summary, one string per line."""
        logger.info(
            "Session score %.1f%% (%d/%d)",
            self.percent,
            self.stats["matched_ticks"],
            self.stats["scored_ticks"],
        )
        lines = [
            "===== Singing Statistics =====",
            f"Score: {self.percent:.1f}% "
            f"({self.stats['matched_ticks']} of {self.stats['scored_ticks']} ticks on pitch)",
        ]
        if self.stats["notes_sung"]:
            lines.append("Notes sung:")
            for name, count in sorted(
                self.stats["notes_sung"].items(), key=lambda item: item[1], reverse=True
            ):
                lines.append(f"  {name}: {count} times")
        return lines
