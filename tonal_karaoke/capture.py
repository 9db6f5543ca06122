"""Background loop turning microphone buffers into sung-note samples."""

from __future__ import annotations
import queue
import threading
import time
from typing import ClassVar, Optional, Tuple

import numpy as np

from .core.errors import InvalidInputError
from .core.interfaces import ICaptureDevice
from .logger import get_logger
from .note_types import DominantNoteSample
from .pitch import PitchEstimator, max_amplitude

logger = get_logger(__name__)

INT16_FULL_SCALE = 32767.0


def normalize_samples(raw: np.ndarray, input_gain: float = 1.0) -> np.ndarray:
    """Convert int16 samples to floats in [-1, 1], applying ``input_gain``."""
    samples = np.asarray(raw, dtype=np.float64) / INT16_FULL_SCALE * input_gain
    return np.clip(samples, -1.0, 1.0)


def latest_sample(channel: queue.Queue) -> Tuple[bool, DominantNoteSample]:
    """Drain the channel without blocking.

    Returns:
        (received, sample): whether anything was waiting, and the newest value
    """
    received = False
    sample = None
    while True:
        try:
            sample = channel.get_nowait()
            received = True
        except queue.Empty:
            return received, sample


class CaptureLoop:
    """Fills fixed-size buffers from a capture device and estimates the sung note.

    Every buffer produces exactly one message on the channel: the estimated
    note, or None when the buffer is quieter than the silence threshold. The
    channel is unbounded so a slow consumer never stalls capture.
    """

    POLL_INTERVAL: ClassVar[float] = 0.001  # seconds between availability checks
    FRAMES: ClassVar[int] = 2048
    SILENCE_THRESHOLD: ClassVar[float] = 0.1
    INPUT_GAIN: ClassVar[float] = 2.0

    def __init__(
        self,
        device: ICaptureDevice,
        channel: queue.Queue,
        estimator: Optional[PitchEstimator] = None,
        frames: Optional[int] = None,
        silence_threshold: Optional[float] = None,
        input_gain: Optional[float] = None,
    ) -> None:
        """Initialize the capture loop.

        Args:
            device: Opened capture device
            channel: Queue the samples are sent on
            estimator: Pitch estimator, or None for the default scale
            frames: Samples per analysed buffer (default 2048)
            silence_threshold: Peak amplitude below which no note is estimated (default 0.1)
            input_gain: Factor applied when converting int16 samples (default 2.0)

        Raises:
            InvalidInputError: If the buffer is too short for the lowest candidate note
        """
        self._device = device
        self._channel = channel
        self._estimator = estimator or PitchEstimator()
        self._frames = int(frames) if frames is not None else self.FRAMES
        self._silence_threshold = float(
            silence_threshold if silence_threshold is not None else self.SILENCE_THRESHOLD
        )
        self._input_gain = float(input_gain if input_gain is not None else self.INPUT_GAIN)

        min_frames = self._estimator.min_buffer_size(device.sample_rate)
        if self._frames < min_frames:
            raise InvalidInputError(
                f"capture buffer of {self._frames} frames is shorter than the "
                f"{min_frames} frames the lowest candidate note needs"
            )

        self._stop_event = threading.Event()
        self._thread: Optional[threading.Thread] = None
        self.failure: Optional[BaseException] = None

    def start(self) -> None:
        """Start the device and the background thread."""
        if self.is_running():
            logger.warning("Capture loop already running")
            return

        self._stop_event.clear()
        self._device.start()
        self._thread = threading.Thread(target=self._run, name="capture", daemon=True)
        self._thread.start()
        logger.info(
            f"Capture started: {self._frames} frames at {self._device.sample_rate} Hz"
        )

    def stop(self, timeout: float = 1.0) -> None:
        """Ask the thread to exit and wait for it."""
        self._stop_event.set()
        if self._thread is not None:
            self._thread.join(timeout)
            self._thread = None
        self._device.close()
        logger.info("Capture stopped")

    def is_running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def analyze(self, samples: np.ndarray) -> DominantNoteSample:
        """Estimate the note of a normalized buffer unless it is silent."""
        if max_amplitude(samples) <= self._silence_threshold:
            return None
        return self._estimator.estimate(samples, self._device.sample_rate)

    def capture_once(self) -> bool:
        """Wait for one buffer, analyse it and send the result.

        Returns:
            False if the loop was stopped while waiting, True otherwise
        """
        while self._device.samples_available() < self._frames:
            if self._stop_event.is_set():
                return False
            time.sleep(self.POLL_INTERVAL)

        samples = normalize_samples(self._device.read(self._frames), self._input_gain)
        sample = self.analyze(samples)
        self._channel.put(sample)
        return True

    def _run(self) -> None:
        try:
            while not self._stop_event.is_set():
                self.capture_once()
        except Exception as e:
            # Reported by the owner once playback is over
            self.failure = e
            logger.exception("Capture loop failed")
