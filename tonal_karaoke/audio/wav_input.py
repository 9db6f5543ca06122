"""Replays a recorded take as if it came from a microphone."""

import time
from typing import Optional

import numpy as np
import soundfile as sf

from ..core.errors import CaptureError
from ..core.interfaces import ICaptureDevice
from ..logger import get_logger

logger = get_logger(__name__)


class WavFileCapture(ICaptureDevice):
    """Provides samples from an audio file at real-time pace.

    Samples become available as wall-clock time passes after ``start()``,
    the same way a microphone would deliver them.
    """

    def __init__(self, file_path: str, loop: bool = False, gain: float = 1.0, clock=time.monotonic):
        self._file_path = file_path
        self._loop = loop
        self._gain = gain
        self._clock = clock
        self._data: Optional[np.ndarray] = None
        self._sample_rate = 0
        self._started_at: Optional[float] = None
        self._cursor = 0

    @property
    def sample_rate(self) -> int:
        return self._sample_rate

    def open(self) -> None:
        """Read the whole file into memory as mono int16.

        Raises:
            CaptureError: If the file cannot be read
        """
        try:
            data, self._sample_rate = sf.read(self._file_path, dtype="int16", always_2d=True)
        except (RuntimeError, OSError) as e:
            raise CaptureError(f"could not read recording {self._file_path}") from e

        mono = data[:, 0]
        if self._gain != 1.0:
            mono = np.clip(mono.astype(np.float64) * self._gain, -32768, 32767).astype(np.int16)
        self._data = mono
        logger.info(
            f"Loaded recording {self._file_path}: {len(mono)} samples at {self._sample_rate} Hz"
        )

    def start(self) -> None:
        if self._data is None:
            raise CaptureError("recording is not open")
        self._started_at = self._clock()
        self._cursor = 0

    def _produced(self) -> int:
        """Samples a real device would have delivered by now."""
        if self._started_at is None:
            return 0
        produced = int((self._clock() - self._started_at) * self._sample_rate)
        if not self._loop:
            produced = min(produced, len(self._data))
        return produced

    def samples_available(self) -> int:
        return max(0, self._produced() - self._cursor)

    def read(self, frames: int) -> np.ndarray:
        if self.samples_available() < frames:
            raise CaptureError(f"requested {frames} samples before they were recorded")
        total = len(self._data)
        indices = np.arange(self._cursor, self._cursor + frames) % total
        self._cursor += frames
        return self._data[indices]

    def close(self) -> None:
        self._started_at = None
