"""Centralized logging configuration for Tonal Karaoke.

The terminal belongs to the curses renderer while a song is playing, so the
command line entry point normally sends log records to a file instead of
stdout.
"""

import logging
import sys
from typing import Optional

# Log levels for different modules
MODULE_LOG_LEVELS = {
    # Core modules
    "tonal_karaoke": logging.INFO,
    "tonal_karaoke.pitch": logging.INFO,
    "tonal_karaoke.highlight": logging.INFO,
    "tonal_karaoke.line_tracker": logging.INFO,
    "tonal_karaoke.layout": logging.INFO,
    # Loops
    "tonal_karaoke.capture": logging.INFO,
    "tonal_karaoke.playback": logging.INFO,
    "tonal_karaoke.stats": logging.INFO,
    "tonal_karaoke.note_matcher": logging.INFO,  # Set to DEBUG for detailed matching info
    # Collaborators
    "tonal_karaoke.audio": logging.INFO,
    "tonal_karaoke.song_loader": logging.INFO,
    "tonal_karaoke.core": logging.INFO,
    "tonal_karaoke.ui": logging.WARNING,  # Drawing every tick is noisy, keep at WARNING
    "tonal_karaoke.logger": logging.WARNING,
    # Libraries/third-party
    "pygame": logging.ERROR,
    # Root logger
    "": logging.ERROR,
}

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

# Shared handler, replaced when the destination changes
_handler: Optional[logging.Handler] = None


def setup_logging(level: Optional[str] = None, log_file: Optional[str] = None) -> None:
    """Set up logging configuration for the application.

    Args:
        level: If provided, override all 'tonal_karaoke' log levels with this level (e.g., "DEBUG").
        log_file: Write records to this file instead of stdout.
    """
    global _handler

    if _handler is not None:
        _handler.close()

    if log_file:
        _handler = logging.FileHandler(log_file, encoding="utf-8")
    else:
        _handler = logging.StreamHandler(sys.stdout)
    _handler.setFormatter(logging.Formatter(LOG_FORMAT))

    # Determine log levels
    log_levels = MODULE_LOG_LEVELS.copy()
    if level:
        numeric_level = logging.getLevelName(level.upper())
        if isinstance(numeric_level, int):
            for module_name in log_levels:
                if module_name.startswith("tonal_karaoke"):
                    log_levels[module_name] = numeric_level
        else:
            logging.getLogger(__name__).error(f"Invalid log level: {level}")

    # Apply module-specific levels
    for module_name, module_level in log_levels.items():
        logger = logging.getLogger(module_name)
        logger.setLevel(module_level)

        # Only the package root and the root logger own a handler; the
        # module loggers propagate up to "tonal_karaoke".
        for handler in logger.handlers[:]:
            logger.removeHandler(handler)
        if module_name in ("tonal_karaoke", ""):
            logger.addHandler(_handler)
            logger.propagate = module_name == ""
        else:
            logger.propagate = True

    logging.getLogger("tonal_karaoke").info("Logging configuration complete")
