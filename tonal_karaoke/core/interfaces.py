"""Defines the collaborator interfaces for the Tonal Karaoke application."""

from __future__ import annotations
from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Optional

import numpy as np

from .events import PlaybackEvent

if TYPE_CHECKING:
    from ..layout import Frame


class ICaptureDevice(ABC):
    """Interface for microphone-like sample sources."""

    @property
    @abstractmethod
    def sample_rate(self) -> int:
        """The sample rate of the captured audio."""
        pass

    @abstractmethod
    def open(self) -> None:
        """Acquire the device. Raises CaptureError on failure."""
        pass

    @abstractmethod
    def start(self) -> None:
        """Start buffering samples."""
        pass

    @abstractmethod
    def samples_available(self) -> int:
        """Number of buffered mono samples ready to be read."""
        pass

    @abstractmethod
    def read(self, frames: int) -> np.ndarray:
        """Read exactly ``frames`` buffered samples as int16."""
        pass

    @abstractmethod
    def close(self) -> None:
        """Release the device."""
        pass


class IPlaybackEngine(ABC):
    """Interface for the audio playback engine."""

    @abstractmethod
    def set_uri(self, uri: str) -> None:
        """Select the media to play. Raises PlaybackError on failure."""
        pass

    @abstractmethod
    def play(self) -> None:
        """Start playing."""
        pass

    @abstractmethod
    def stop(self) -> None:
        """Stop playing and release the media."""
        pass

    @abstractmethod
    def query_position_ms(self) -> Optional[float]:
        """Current playback position, or None when unknown."""
        pass

    @abstractmethod
    def query_duration_ms(self) -> Optional[float]:
        """Length of the media, or None when unknown."""
        pass

    @abstractmethod
    def pop_event(self, timeout_ms: float) -> Optional[PlaybackEvent]:
        """Wait up to ``timeout_ms`` for a bus event; None if nothing arrived."""
        pass


class IRenderSink(ABC):
    """Interface for whatever draws composed frames."""

    @abstractmethod
    def render(self, frame: Frame) -> None:
        """Draw a frame on top of what is already shown."""
        pass

    @abstractmethod
    def clear(self) -> None:
        """Erase everything drawn so far."""
        pass

    @abstractmethod
    def terminal_width(self) -> int:
        """Current width in cells."""
        pass
