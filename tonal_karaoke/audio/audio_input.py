"""Microphone capture using the sounddevice library."""

from __future__ import annotations
import threading
from collections import deque
from typing import Any, ClassVar, Deque, Dict, List, Optional

import numpy as np
import sounddevice as sd

from ..core.errors import CaptureError
from ..core.interfaces import ICaptureDevice
from ..logger import get_logger

logger = get_logger(__name__)


def list_input_devices() -> List[Dict[str, Any]]:
    """Describe every device that can record, for choosing ``--device``."""
    devices = []
    for device_id, device in enumerate(sd.query_devices()):
        if device["max_input_channels"] > 0:
            devices.append(
                {
                    "id": device_id,
                    "name": device["name"],
                    "channels": device["max_input_channels"],
                    "default_samplerate": device["default_samplerate"],
                }
            )
    return devices


class SoundDeviceCapture(ICaptureDevice):
    """Buffers mono int16 samples from an input device.

    The stream callback appends blocks to an internal buffer holding at most
    ``max_buffered`` samples; when the reader falls behind the oldest audio
    is dropped.
    """

    # Audio configuration
    SAMPLE_RATE: ClassVar[int] = 44100  # Hz
    CHANNELS: ClassVar[int] = 1  # Mono audio
    MAX_BUFFERED: ClassVar[int] = 8 * 2048  # samples kept before dropping old audio

    def __init__(
        self,
        device_id: Optional[int] = None,
        sample_rate: Optional[int] = None,
        max_buffered: Optional[int] = None,
    ) -> None:
        """Initialize the capture device.

        Args:
            device_id: Audio input device ID, or None for the default input device
            sample_rate: Sample rate in Hz, or None for default (44100)
            max_buffered: Samples kept before old audio is dropped
        """
        self._device_id = device_id
        self._sample_rate = int(sample_rate or self.SAMPLE_RATE)
        self._max_buffered = int(max_buffered or self.MAX_BUFFERED)

        self._stream: Optional[sd.InputStream] = None
        self._blocks: Deque[np.ndarray] = deque()
        self._buffered = 0
        self._lock = threading.Lock()

    @property
    def sample_rate(self) -> int:
        return self._sample_rate

    def open(self) -> None:
        """Open the input stream without starting it.

        Raises:
            CaptureError: If the device cannot be opened with these settings
        """
        try:
            sd.check_input_settings(
                device=self._device_id,
                samplerate=self._sample_rate,
                channels=self.CHANNELS,
                dtype="int16",
            )
            self._stream = sd.InputStream(
                device=self._device_id,
                samplerate=self._sample_rate,
                channels=self.CHANNELS,
                dtype="int16",
                callback=self._audio_callback,
            )
        except (sd.PortAudioError, ValueError) as e:
            raise CaptureError(
                f"could not open capture device {self._device_id if self._device_id is not None else '(default)'}"
            ) from e
        logger.info(
            f"Capture device opened: ID={self._device_id}, Rate={self._sample_rate}Hz"
        )

    def start(self) -> None:
        if self._stream is None:
            raise CaptureError("capture device is not open")
        self._stream.start()

    def _audio_callback(
        self,
        indata: np.ndarray,
        _frames: int,
        _time_info: Any,
        status: sd.CallbackFlags,
    ) -> None:
        """Called from the PortAudio thread; only copies data into the buffer."""
        if status:
            logger.warning(f"Audio callback status: {status}")

        # Extract mono audio data (take first channel if multi-channel)
        block = (indata[:, 0] if indata.ndim > 1 else indata).copy()
        with self._lock:
            self._blocks.append(block)
            self._buffered += len(block)
            while self._buffered > self._max_buffered and len(self._blocks) > 1:
                self._buffered -= len(self._blocks.popleft())

    def samples_available(self) -> int:
        with self._lock:
            return self._buffered

    def read(self, frames: int) -> np.ndarray:
        """Take the oldest ``frames`` samples out of the buffer."""
        with self._lock:
            if self._buffered < frames:
                raise CaptureError(
                    f"requested {frames} samples but only {self._buffered} are buffered"
                )
            parts = []
            needed = frames
            while needed > 0:
                block = self._blocks.popleft()
                if len(block) > needed:
                    # Put the unread tail back for the next read
                    self._blocks.appendleft(block[needed:])
                    block = block[:needed]
                parts.append(block)
                needed -= len(block)
            self._buffered -= frames
        return np.concatenate(parts)

    def close(self) -> None:
        if self._stream is None:
            return
        try:
            self._stream.stop()
            self._stream.close()
        except sd.PortAudioError as e:
            logger.error(f"Error closing capture device: {e}")
        finally:
            self._stream = None
        logger.info("Capture device closed")
