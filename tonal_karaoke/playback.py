"""Foreground loop that keeps the lyric display in step with the music."""

from __future__ import annotations
import queue
from dataclasses import dataclass
from typing import ClassVar, Optional

from .beat_clock import beat_at
from .capture import latest_sample
from .core.errors import DegenerateLineError, PlaybackError
from .core.events import PlaybackEvent, PlaybackEventType, PlayerState
from .core.interfaces import IPlaybackEngine, IRenderSink
from .highlight import end_of_line_beat, highlight
from .layout import compose_frame
from .line_tracker import LineTracker
from .logger import get_logger
from .note_types import DominantNoteSample, Line, Song
from .stats import SingingStats

logger = get_logger(__name__)


@dataclass
class PlaybackContext:
    """Mutable state of one playback session, owned by the loop."""

    playing: bool = False
    terminate: bool = False
    duration_ms: Optional[float] = None
    error: Optional[str] = None


def handle_message(context: PlaybackContext, event: PlaybackEvent) -> None:
    """Update the session state from a bus event."""
    if event.type is PlaybackEventType.ERROR:
        logger.error(f"Error received from playback engine: {event.message}")
        context.error = event.message or "playback engine error"
        context.terminate = True
    elif event.type is PlaybackEventType.END_OF_STREAM:
        logger.info("End-Of-Stream reached.")
        context.terminate = True
    elif event.type is PlaybackEventType.DURATION_CHANGED:
        # The duration has changed, mark the current one as invalid
        context.duration_ms = None
    elif event.type is PlaybackEventType.STATE_CHANGED:
        logger.info(
            "Pipeline state changed from %s to %s",
            event.old_state.name if event.old_state else None,
            event.new_state.name if event.new_state else None,
        )
        context.playing = event.new_state is PlayerState.PLAYING


class PlaybackLoop:
    """Polls the playback engine and renders the current line every tick."""

    POLL_TIMEOUT_MS: ClassVar[float] = 10.0

    def __init__(
        self,
        engine: IPlaybackEngine,
        song: Song,
        sink: IRenderSink,
        channel: Optional[queue.Queue] = None,
        stats: Optional[SingingStats] = None,
        poll_timeout_ms: Optional[float] = None,
    ) -> None:
        """Initialize the loop.

        Args:
            engine: Playback engine with the song's audio already selected
            song: The song to display
            sink: Where frames are drawn
            channel: Queue of sung-note samples from the capture loop, if any
            stats: Scorer fed with every received sample, if scoring is enabled
            poll_timeout_ms: How long a tick waits for bus events (default 10)
        """
        self._engine = engine
        self._song = song
        self._sink = sink
        self._channel = channel
        self._stats = stats
        self._poll_timeout_ms = (
            float(poll_timeout_ms) if poll_timeout_ms is not None else self.POLL_TIMEOUT_MS
        )
        self.context = PlaybackContext()
        self.tracker = LineTracker(song.lines)
        self.latest_note: DominantNoteSample = None
        self._warned_degenerate = set()

    def tick(self) -> None:
        """Handle one bus event, or render one frame if nothing arrived."""
        event = self._engine.pop_event(self._poll_timeout_ms)
        if event is not None:
            handle_message(self.context, event)
            return

        if not self.context.playing:
            return

        position_ms = self._engine.query_position_ms()
        if self.context.duration_ms is None:
            self.context.duration_ms = self._engine.query_duration_ms()

        received, sample = (
            latest_sample(self._channel) if self._channel is not None else (False, None)
        )
        if received:
            self.latest_note = sample

        beat = beat_at(position_ms if position_ms is not None else 0.0, self._song.timing)

        retired = self.tracker.advance(beat)
        if retired is not None:
            # Finish the old line so no partial highlight survives the clear
            self._render(retired, end_of_line_beat(retired))
            self._sink.clear()

        line = self.tracker.current
        if line is None:
            return
        if received and self._stats is not None:
            self._stats.observe(highlight(line, beat), sample)
        self._render(line, beat)

    def _render(self, line: Line, beat: float) -> None:
        score = self._stats.percent if self._stats is not None else None
        try:
            frame = compose_frame(
                line, beat, self._sink.terminal_width(), self.latest_note, score
            )
        except DegenerateLineError as e:
            if id(line) not in self._warned_degenerate:
                self._warned_degenerate.add(id(line))
                logger.warning(f"Skipping line {line.text!r}: {e}")
            return
        self._sink.render(frame)

    def run(self) -> None:
        """Play the song until end of stream, an engine error, or ``stop()``.

        Raises:
            PlaybackError: If the engine reported an error
        """
        logger.info(f"Playing {self._song.title} by {self._song.artist}")
        self._engine.play()
        self._sink.clear()
        try:
            while not self.context.terminate:
                self.tick()
        finally:
            self._engine.stop()

        if self.context.error is not None:
            raise PlaybackError(self.context.error)

    def stop(self) -> None:
        """Make ``run()`` return after the current tick."""
        self.context.terminate = True
