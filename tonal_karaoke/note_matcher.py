from typing import Union

from .logger import get_logger
from .note_types import EstimatedNote

# Get logger for this module
logger = get_logger(__name__)

NoteLike = Union[int, EstimatedNote]


class NoteMatcher:
    """
    Encapsulates logic for comparing sung notes to the notes of a song,
    including enharmonic equivalence and octave-insensitive matching.
    """

    @staticmethod
    def to_step(note: NoteLike) -> int:
        """Semitone number of a song pitch or an estimated note."""
        if isinstance(note, EstimatedNote):
            return note.step
        return int(note)

    @classmethod
    def match(cls, target: NoteLike, sung: NoteLike, match_octave: bool = False) -> bool:
        """
        Check if the sung note matches the target note.

        Args:
            target: The pitch of the song's note (e.g. 60 for C4)
            sung: The sung note (e.g. an EstimatedNote)
            match_octave: If False, any octave of the same pitch class matches
        Returns:
            bool: True if the notes match, False otherwise
        """
        target_step = cls.to_step(target)
        sung_step = cls.to_step(sung)

        if match_octave:
            result = target_step == sung_step
        else:
            # Enharmonic spellings share a step, so only the pitch class counts
            result = target_step % 12 == sung_step % 12

        logger.debug(
            "Matching - Target: %r vs Sung: %r -> %s",
            target,
            sung,
            "MATCH" if result else "NO MATCH",
        )
        return result
