"""Utility functions for working with musical notes and frequencies."""

import re

from .core.errors import InvalidInputError

# Standard reference: A4 = 440Hz, MIDI note 69
A4_FREQ = 440.0
A4_STEP = 69

NOTE_NAMES_SHARPS = ["C", "C#", "D", "D#", "E", "F", "F#", "G", "G#", "A", "A#", "B"]

# The note rows of the display: every letter an octave can be spelled with,
# lowest first. Sharps and flats of the same pitch get their own row.
LETTER_ROWS = [
    "C",
    "C#",
    "Db",
    "D",
    "D#",
    "Eb",
    "E",
    "F",
    "F#",
    "Gb",
    "G",
    "G#",
    "Ab",
    "A",
    "A#",
    "Bb",
    "B",
]

# Matches 'C2', 'f#3' and 'Bb-1'
NOTE_NAME_PATTERN = re.compile(r"^([A-Ga-g])([#b]?)(-?[0-9]+)$")


def step_to_frequency(step: float) -> float:
    """Frequency in Hz of a MIDI step (A4 = 69 = 440 Hz)."""
    return A4_FREQ * 2.0 ** ((step - A4_STEP) / 12.0)


def step_to_name(step: int) -> str:
    """Convert a MIDI step to a note name in Scientific Pitch Notation.

    Args:
        step: MIDI note number (60 is middle C, C4)

    Returns:
        Note name with octave, spelled with sharps (e.g., 'A4', 'C#4')
    """
    octave = (step // 12) - 1
    return f"{NOTE_NAMES_SHARPS[step % 12]}{octave}"


def parse_note_name(name: str) -> int:
    """Convert a note name such as 'C2' or 'Bb3' to its MIDI step.

    Raises:
        InvalidInputError: If the name cannot be parsed
    """
    match = NOTE_NAME_PATTERN.match(name.strip()) if name else None
    if not match:
        raise InvalidInputError(f"not a note name: {name!r}")
    letter, accidental, octave = match.groups()
    index = NOTE_NAMES_SHARPS.index(letter.upper())
    if accidental == "#":
        index += 1
    elif accidental == "b":
        index -= 1
    return (int(octave) + 1) * 12 + index


def letter_row(pitch: int) -> int:
    """Display row (0 = lowest) of a pitch's letter within the octave.

    Pitches are spelled with sharps, so the flat rows stay empty.
    """
    return LETTER_ROWS.index(NOTE_NAMES_SHARPS[pitch % 12])


def letter_name(pitch: int) -> str:
    """Letter of a pitch without octave, e.g. 'F#'."""
    return NOTE_NAMES_SHARPS[pitch % 12]
