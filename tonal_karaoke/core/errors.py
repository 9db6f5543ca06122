"""Exception types for Tonal Karaoke."""

from typing import Iterator, Optional


class KaraokeError(Exception):
    """Base class for all Tonal Karaoke errors."""


class InvalidInputError(KaraokeError, ValueError):
    """A pure core function was called with input it cannot work on."""


class DegenerateLineError(InvalidInputError):
    """A line whose timed notes span zero beats cannot be laid out."""


class NoTimedNotesError(KaraokeError, ValueError):
    """A line has no Regular, Golden or Freestyle note."""


class SongFileError(KaraokeError):
    """The song file could not be read or does not describe a valid song."""


class CaptureError(KaraokeError):
    """The capture device failed."""


class PlaybackError(KaraokeError):
    """The playback engine failed."""


def format_error_chain(exc: BaseException) -> Iterator[str]:
    """Yield one line per exception in the cause chain, outermost first.

    Example:
        error: could not load song file
        caused by: [Errno 2] No such file or directory: 'x.json'
    """
    seen = set()
    current: Optional[BaseException] = exc
    prefix = "error"
    while current is not None and id(current) not in seen:
        seen.add(id(current))
        yield f"{prefix}: {current}"
        prefix = "caused by"
        current = current.__cause__ or current.__context__
