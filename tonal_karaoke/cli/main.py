"""Main entry point for the Tonal Karaoke CLI."""

import os
import queue
import sys
from pathlib import Path
from typing import Any, Dict, Optional

import click
import pyfiglet

from ..capture import CaptureLoop
from ..core.config import ConfigManager
from ..core.errors import CaptureError, format_error_chain
from ..core.interfaces import ICaptureDevice, IPlaybackEngine
from ..logger import get_logger
from ..logging_config import setup_logging
from ..note_types import Song
from ..pitch import PitchEstimator
from ..playback import PlaybackLoop
from ..song_loader import load_song
from ..stats import SingingStats

logger = get_logger(__name__)


def open_capture_device(
    device_id: Optional[int], input_wav: Optional[str], sample_rate: int
) -> ICaptureDevice:
    """Open the microphone, or a recording standing in for it."""
    # Imported here so that the CLI loads without PortAudio present
    if input_wav:
        from ..audio.wav_input import WavFileCapture

        device = WavFileCapture(input_wav)
    else:
        from ..audio.audio_input import SoundDeviceCapture

        device = SoundDeviceCapture(device_id=device_id, sample_rate=sample_rate)
    device.open()
    return device


def run_session(
    song_path: str,
    config: ConfigManager,
    device_id: Optional[int] = None,
    input_wav: Optional[str] = None,
    use_mic: bool = True,
) -> Optional[SingingStats]:
    """Play one song with live lyrics until it ends or the user interrupts.

    Returns:
        The singing statistics, or None when nothing was captured

    Raises:
        KaraokeError: If the song, the playback engine or the capture device fails
    """
    song = load_song(song_path)
    click.echo(pyfiglet.figlet_format(song.title or "Tonal Karaoke"))
    click.echo(f"Playing {song.title} by {song.artist}...")

    capture_config = config.get_config("capture")
    pitch_config = config.get_config("pitch")
    playback_config = config.get_config("playback")
    if device_id is None:
        device_id = capture_config.get("device_id")

    os.environ.setdefault("PYGAME_HIDE_SUPPORT_PROMPT", "1")
    from ..audio.pygame_player import PygamePlayer

    player = PygamePlayer()
    try:
        player.set_uri(Path(song.audio_path).resolve().as_uri())
        return play_with_lyrics(
            player,
            song,
            capture_config,
            pitch_config,
            playback_config,
            device_id=device_id,
            input_wav=input_wav,
            use_mic=use_mic,
        )
    finally:
        player.close()


def play_with_lyrics(
    player: IPlaybackEngine,
    song: Song,
    capture_config: Dict[str, Any],
    pitch_config: Dict[str, Any],
    playback_config: Dict[str, Any],
    device_id: Optional[int] = None,
    input_wav: Optional[str] = None,
    use_mic: bool = True,
) -> Optional[SingingStats]:
    """Drive the capture and playback loops for a loaded song."""
    from ..ui import CursesRenderer

    stats = SingingStats()
    channel: Optional[queue.Queue] = None
    capture: Optional[CaptureLoop] = None
    if use_mic or input_wav:
        device = open_capture_device(device_id, input_wav, capture_config["sample_rate"])
        channel = queue.Queue()
        try:
            capture = CaptureLoop(
                device,
                channel,
                estimator=PitchEstimator(pitch_config["low_note"], pitch_config["high_note"]),
                frames=capture_config["frames"],
                silence_threshold=capture_config["silence_threshold"],
                input_gain=capture_config["input_gain"],
            )
        except Exception:
            device.close()
            raise
    else:
        logger.info("Microphone disabled, singing is not scored")

    renderer = CursesRenderer()
    loop = PlaybackLoop(
        player,
        song,
        renderer,
        channel=channel,
        stats=stats if capture is not None else None,
        poll_timeout_ms=playback_config["poll_timeout_ms"],
    )
    try:
        if capture is not None:
            capture.start()
        renderer.init_screen()
        loop.run()
    except KeyboardInterrupt:
        logger.info("Interrupted by user")
    finally:
        renderer.cleanup()
        if capture is not None:
            capture.stop()

    if capture is not None and capture.failure is not None:
        raise CaptureError("capture stopped during playback") from capture.failure
    return stats if capture is not None else None


def list_devices(ctx: click.Context, _param: click.Parameter, value: bool) -> None:
    """Print the input devices and exit, before SONGFILE is required."""
    if not value or ctx.resilient_parsing:
        return
    from ..audio.audio_input import list_input_devices

    for device in list_input_devices():
        click.echo(
            f"{device['id']}: {device['name']} "
            f"({device['channels']} ch, {device['default_samplerate']:.0f} Hz)"
        )
    ctx.exit(0)


@click.command()
@click.argument("songfile", type=click.Path(exists=True, dir_okay=False))
@click.option("--device", "-d", type=int, default=None, help="Audio input device ID")
@click.option(
    "--input-wav",
    type=click.Path(exists=True, dir_okay=False),
    default=None,
    help="Sing from a recording instead of the microphone",
)
@click.option("--no-mic", is_flag=True, help="Show lyrics only, without pitch capture")
@click.option(
    "--config-dir",
    type=click.Path(file_okay=False),
    default=None,
    help="Configuration directory (default: ~/.config/tonal_karaoke)",
)
@click.option("--log-file", type=click.Path(dir_okay=False), default=None, help="Log file")
@click.option("--debug", is_flag=True, help="Log debug information")
@click.option(
    "--list-devices",
    is_flag=True,
    is_eager=True,
    expose_value=False,
    callback=list_devices,
    help="List audio input devices and exit",
)
def main(songfile, device, input_wav, no_mic, config_dir, log_file, debug):
    """Play SONGFILE with scrolling lyrics and live pitch feedback"""
    stats = None
    try:
        config = ConfigManager(config_dir)
        setup_logging(
            "DEBUG" if debug else None,
            log_file=str(log_file) if log_file else str(config.default_log_file),
        )
        config.validate()
        stats = run_session(
            songfile,
            config,
            device_id=device,
            input_wav=input_wav,
            use_mic=not no_mic,
        )
    except Exception as e:
        logger.exception("Session failed")
        for line in format_error_chain(e):
            click.echo(line, err=True)
        sys.exit(1)

    if stats is not None:
        for line in stats.summary_lines():
            click.echo(line)


if __name__ == "__main__":
    main()
