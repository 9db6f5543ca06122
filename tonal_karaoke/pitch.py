"""Autocorrelation-style pitch estimation for microphone buffers.

For every candidate semitone the buffer is compared with itself shifted by
one period of the candidate's frequency. A voice singing that note repeats
after one period, so the mean absolute difference is small and the score
``1 - difference`` is high. This is cheap enough to run on every capture
buffer, but it is not a frequency-domain method.

A signal also repeats after two of its periods, so subharmonic candidates
score about as well as the sung note itself, and the lower one wins
whenever it scores higher. Across the default C2..A5 range a pure sine is
reported at a subharmonic for roughly half of the candidates (A3 comes
back as A2, for example). Callers that need the true note must narrow the
range so that no candidate lies an octave or more below it.
"""

from typing import ClassVar, List, Sequence, Union

import numpy as np

from .core.errors import InvalidInputError
from .logger import get_logger
from .note_types import EstimatedNote, NoteWeight
from .note_utils import parse_note_name, step_to_frequency, step_to_name

logger = get_logger(__name__)

Samples = Union[np.ndarray, Sequence[float]]


def candidate_steps(low_step: int, high_step: int) -> List[int]:
    """MIDI steps scanned by the estimator: ``low_step`` up to, not including, ``high_step``."""
    if high_step <= low_step:
        raise InvalidInputError(
            f"empty candidate range: low {low_step} must be below high {high_step}"
        )
    return list(range(low_step, high_step))


def _period_in_samples(sample_rate: float, frequency: float) -> int:
    return int(round(sample_rate / frequency))


def autocorrelation_score(samples: np.ndarray, sample_rate: float, frequency: float) -> float:
    """Similarity of the buffer with itself shifted by one period of ``frequency``.

    Args:
        samples: 1-D float buffer with amplitudes in [-1, 1]
        sample_rate: Sample rate in Hz
        frequency: Candidate fundamental in Hz

    Returns:
        ``1 - sum(|x[i] - x[i + lag]|) / len(x)``; higher is a better match

    Raises:
        InvalidInputError: If the buffer is not longer than the lag
    """
    lag = _period_in_samples(sample_rate, frequency)
    if len(samples) <= lag:
        raise InvalidInputError(
            f"buffer of {len(samples)} samples is too short for a lag of {lag}"
        )
    difference = np.abs(samples[:-lag] - samples[lag:]).sum() if lag > 0 else 0.0
    return 1.0 - float(difference) / len(samples)


def _as_buffer(samples: Samples, sample_rate: float) -> np.ndarray:
    if sample_rate <= 0:
        raise InvalidInputError(f"sample rate must be positive, got {sample_rate}")
    buffer = np.asarray(samples, dtype=np.float64)
    if buffer.ndim != 1:
        raise InvalidInputError(f"expected a mono buffer, got shape {buffer.shape}")
    if buffer.size == 0:
        raise InvalidInputError("empty sample buffer")
    return buffer


def note_weights(
    samples: Samples, sample_rate: float, steps: Sequence[int]
) -> List[NoteWeight]:
    """Score every candidate step, in scan order."""
    buffer = _as_buffer(samples, sample_rate)
    # Longest lag belongs to the lowest note; check once up front
    longest_lag = _period_in_samples(sample_rate, step_to_frequency(min(steps)))
    if buffer.size <= longest_lag:
        raise InvalidInputError(
            f"buffer of {buffer.size} samples is too short for a lag of {longest_lag}"
        )

    weights = []
    for step in steps:
        frequency = step_to_frequency(step)
        note = EstimatedNote(step=step, name=step_to_name(step), frequency=frequency)
        weights.append(NoteWeight(note, autocorrelation_score(buffer, sample_rate, frequency)))
    return weights


def estimate_dominant_note(
    samples: Samples, sample_rate: float, steps: Sequence[int]
) -> EstimatedNote:
    """Candidate with the highest score; ties go to the lowest candidate."""
    best = None
    for weight in note_weights(samples, sample_rate, steps):
        # Strict comparison keeps the first of equal scores
        if best is None or weight.score > best.score:
            best = weight
    return best.note


def max_amplitude(samples: Samples) -> float:
    """Largest absolute sample value, 0.0 for an empty buffer."""
    buffer = np.asarray(samples, dtype=np.float64)
    if buffer.size == 0:
        return 0.0
    return float(np.max(np.abs(buffer)))


class PitchEstimator:
    """Estimates the sung note over a fixed scale of candidate semitones."""

    DEFAULT_LOW_NOTE: ClassVar[str] = "C2"
    DEFAULT_HIGH_NOTE: ClassVar[str] = "A5"  # Exclusive

    def __init__(self, low_note: str = DEFAULT_LOW_NOTE, high_note: str = DEFAULT_HIGH_NOTE) -> None:
        """Initialize the estimator.

        Args:
            low_note: Lowest candidate, e.g. 'C2'
            high_note: First note above the scanned scale, e.g. 'A5'
        """
        self._steps = candidate_steps(parse_note_name(low_note), parse_note_name(high_note))
        logger.debug(
            "PitchEstimator scanning %d candidates from %s to %s",
            len(self._steps),
            step_to_name(self._steps[0]),
            step_to_name(self._steps[-1]),
        )

    @property
    def steps(self) -> List[int]:
        return list(self._steps)

    def min_buffer_size(self, sample_rate: float) -> int:
        """Smallest buffer length the estimator accepts at this sample rate."""
        return _period_in_samples(sample_rate, step_to_frequency(self._steps[0])) + 1

    def weights(self, samples: Samples, sample_rate: float) -> List[NoteWeight]:
        return note_weights(samples, sample_rate, self._steps)

    def estimate(self, samples: Samples, sample_rate: float) -> EstimatedNote:
        return estimate_dominant_note(samples, sample_rate, self._steps)
