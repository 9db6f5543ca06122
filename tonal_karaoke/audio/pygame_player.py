"""Song playback through pygame's mixer."""

from __future__ import annotations
import queue
from pathlib import Path
from typing import ClassVar, Optional
from urllib.parse import unquote, urlparse

import pygame
import soundfile as sf

from ..core.errors import PlaybackError
from ..core.events import PlaybackEvent, PlayerState
from ..core.interfaces import IPlaybackEngine
from ..logger import get_logger

logger = get_logger(__name__)


def uri_to_path(uri: str) -> Path:
    """Accept 'file://' URIs as well as plain paths."""
    parsed = urlparse(uri)
    if parsed.scheme == "file":
        return Path(unquote(parsed.path))
    return Path(uri)


class PygamePlayer(IPlaybackEngine):
    """Plays one audio file with ``pygame.mixer.music`` and reports bus events.

    The mixer has no bus of its own, so events are queued here: state
    changes on ``play()``/``stop()``, and end of stream once the mixer goes
    quiet while the player still thinks it is playing.
    """

    SAMPLE_RATE: ClassVar[int] = 44100

    def __init__(self, sample_rate: Optional[int] = None) -> None:
        self._events: "queue.Queue[PlaybackEvent]" = queue.Queue()
        self._state = PlayerState.NULL
        self._path: Optional[Path] = None
        self._closed = False
        try:
            pygame.mixer.init(frequency=sample_rate or self.SAMPLE_RATE)
        except pygame.error as e:
            raise PlaybackError("failed to initialize the pygame mixer") from e
        logger.info("Pygame mixer initialized")

    def set_uri(self, uri: str) -> None:
        path = uri_to_path(uri)
        try:
            pygame.mixer.music.load(str(path))
        except (pygame.error, OSError) as e:
            raise PlaybackError(f"can't load audio file {path}") from e
        self._path = path
        self._set_state(PlayerState.PAUSED)
        logger.info(f"Loaded audio {path}")

    def _set_state(self, new_state: PlayerState) -> None:
        if new_state is not self._state:
            self._events.put(PlaybackEvent.state_changed(self._state, new_state))
            self._state = new_state

    def play(self) -> None:
        if self._path is None:
            raise PlaybackError("no audio selected")
        try:
            pygame.mixer.music.play()
        except pygame.error as e:
            raise PlaybackError(f"can't play {self._path}") from e
        self._set_state(PlayerState.PLAYING)

    def stop(self) -> None:
        pygame.mixer.music.stop()
        self._set_state(PlayerState.NULL)

    def close(self) -> None:
        """Stop playback and release the audio device."""
        if self._closed:
            return
        pygame.mixer.music.stop()
        pygame.mixer.quit()
        self._closed = True
        logger.info("Pygame mixer closed")

    def query_position_ms(self) -> Optional[float]:
        position = pygame.mixer.music.get_pos()
        return float(position) if position >= 0 else None

    def query_duration_ms(self) -> Optional[float]:
        if self._path is None:
            return None
        try:
            return sf.info(str(self._path)).duration * 1000.0
        except RuntimeError as e:
            logger.debug(f"Duration of {self._path} unknown: {e}")
            return None

    def pop_event(self, timeout_ms: float) -> Optional[PlaybackEvent]:
        if self._state is PlayerState.PLAYING and not pygame.mixer.music.get_busy():
            self._state = PlayerState.PAUSED
            self._events.put(PlaybackEvent.end_of_stream())
        try:
            return self._events.get(timeout=timeout_ms / 1000.0)
        except queue.Empty:
            return None
