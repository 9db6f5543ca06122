"""Tracks which lyric line is on screen as the beat advances."""

from typing import Iterable, Iterator, Optional

from .logger import get_logger
from .note_types import Line

logger = get_logger(__name__)


class LineTracker:
    """Holds the current and the next line of a song.

    The current line stays on screen until the beat passes the next line's
    start. Then the tracker hands back the retired line so the caller can
    render it one last time as fully played, and moves on.
    """

    # Beats added to the current beat when there is no next line, so the
    # transition never fires on the last line
    NO_NEXT_LINE_HORIZON = 100

    def __init__(self, lines: Iterable[Line]):
        self._lines: Iterator[Line] = iter(lines)
        self.current: Optional[Line] = next(self._lines, None)
        self.next: Optional[Line] = next(self._lines, None)
        self.line_number = 0 if self.current is not None else -1

    def next_line_start(self, beat: float) -> float:
        if self.next is None:
            return beat + self.NO_NEXT_LINE_HORIZON
        return self.next.display_start

    def advance(self, beat: float) -> Optional[Line]:
        """Move to the next line if ``beat`` has passed its start.

        Returns:
            The line that was retired, or None if nothing changed
        """
        if beat <= self.next_line_start(beat):
            return None

        retired = self.current
        self.current = self.next
        self.next = next(self._lines, None)
        self.line_number += 1
        logger.debug("Advanced to line %d at beat %.2f", self.line_number, beat)
        return retired
