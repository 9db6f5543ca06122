"""Loads an already structured song description from JSON.

Example document::

    {
      "title": "Example", "artist": "Somebody",
      "bpm": 120, "gap": 1500, "audio": "example.ogg",
      "lines": [
        {"notes": [
          {"type": "regular", "start": 0, "duration": 4, "pitch": 60, "text": "Hel"},
          {"type": "golden", "start": 4, "duration": 4, "pitch": 62, "text": "lo"}
        ]},
        {"start": 10, "notes": [
          {"type": "player_change", "player": 2},
          {"type": "freestyle", "start": 12, "duration": 2, "pitch": 0, "text": "yeah"}
        ]}
      ]
    }

Relative audio paths are resolved against the song file's directory.
"""

import json
from pathlib import Path
from typing import Any, Dict, Optional, Union

from .core.errors import KaraokeError, SongFileError
from .logger import get_logger
from .note_types import Line, Note, NoteKind, Song, SongTiming

logger = get_logger(__name__)

NOTE_TYPES = {
    "regular": NoteKind.REGULAR,
    "golden": NoteKind.GOLDEN,
    "freestyle": NoteKind.FREESTYLE,
    "player_change": NoteKind.PLAYER_CHANGE,
}


def _require(data: Dict[str, Any], key: str, kind, where: str):
    if key not in data:
        raise SongFileError(f"{where}: missing '{key}'")
    value = data[key]
    # bool is an int subclass but never a valid number here
    if isinstance(value, bool) or not isinstance(value, kind):
        raise SongFileError(f"{where}: '{key}' has the wrong type ({type(value).__name__})")
    return value


def _note_from_dict(data: Any, where: str) -> Note:
    if not isinstance(data, dict):
        raise SongFileError(f"{where}: a note must be an object")
    type_name = _require(data, "type", str, where)
    kind = NOTE_TYPES.get(type_name.lower())
    if kind is None:
        raise SongFileError(f"{where}: unknown note type '{type_name}'")
    if kind is NoteKind.PLAYER_CHANGE:
        return Note.player_change(_require(data, "player", int, where))

    duration = _require(data, "duration", int, where)
    if duration < 0:
        raise SongFileError(f"{where}: negative duration {duration}")
    return Note(
        kind,
        start=_require(data, "start", int, where),
        duration=duration,
        pitch=_require(data, "pitch", int, where),
        text=_require(data, "text", str, where),
    )


def _line_from_dict(data: Any, where: str) -> Line:
    if not isinstance(data, dict):
        raise SongFileError(f"{where}: a line must be an object")
    notes = _require(data, "notes", list, where)
    start: Optional[int] = None
    if "start" in data:
        start = _require(data, "start", int, where)
    line = Line(
        tuple(_note_from_dict(note, f"{where}, note {i + 1}") for i, note in enumerate(notes)),
        start=start,
    )
    try:
        line.validate()
    except KaraokeError as e:
        raise SongFileError(f"{where}: invalid line") from e
    return line


def song_from_dict(data: Any, base_dir: Union[str, Path] = ".") -> Song:
    """Build a Song from a decoded JSON document.

    Raises:
        SongFileError: If the document does not describe a valid song
    """
    if not isinstance(data, dict):
        raise SongFileError("song: top level must be an object")

    try:
        timing = SongTiming(
            beats_per_minute=float(_require(data, "bpm", (int, float), "song")),
            gap_ms=float(data.get("gap", 0.0)),
        )
    except (KaraokeError, TypeError, ValueError) as e:
        raise SongFileError("song: invalid timing") from e

    audio_path = Path(_require(data, "audio", str, "song"))
    if not audio_path.is_absolute():
        audio_path = Path(base_dir) / audio_path

    lines = tuple(
        _line_from_dict(line, f"line {i + 1}")
        for i, line in enumerate(_require(data, "lines", list, "song"))
    )
    if not lines:
        raise SongFileError("song: no lines")

    return Song(
        title=str(data.get("title", "")),
        artist=str(data.get("artist", "")),
        timing=timing,
        audio_path=audio_path,
        lines=lines,
    )


def load_song(path: Union[str, Path]) -> Song:
    """Read a song file.

    Raises:
        SongFileError: If the file cannot be read or is not a valid song
    """
    path = Path(path)
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)
    except (OSError, ValueError) as e:
        raise SongFileError(f"could not parse song file {path}") from e

    song = song_from_dict(data, base_dir=path.parent)
    logger.info(
        f"Loaded '{song.title}' by {song.artist}: {len(song.lines)} lines, "
        f"{song.timing.beats_per_minute} BPM, gap {song.timing.gap_ms} ms"
    )
    return song
