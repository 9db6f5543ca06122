"""Mapping from playback position to song beats."""

from .note_types import SongTiming

# Song files count note starts and durations in quarters of the BPM beat.
# This factor is inherited from that timing convention as-is.
BEAT_UNITS_PER_QUARTER = 4.0

MS_PER_MINUTE = 60_000.0


def beat_at(position_ms: float, timing: SongTiming) -> float:
    """Fractional beat at a playback position.

    Negative values mean the position is still inside the gap before the
    first beat.
    """
    beats_per_ms = timing.beats_per_minute / MS_PER_MINUTE
    return (position_ms - timing.gap_ms) * beats_per_ms * BEAT_UNITS_PER_QUARTER
