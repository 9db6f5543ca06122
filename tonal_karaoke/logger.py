"""Centralized lazy-loading logger access for Tonal Karaoke."""
import logging
from typing import Dict

# Module-level cache for loggers
_logger_cache: Dict[str, logging.Logger] = {}


def get_logger(name: str) -> logging.Logger:
    """
    Get a lazily initialized logger with the given name.

    Levels and handlers are applied later by ``logging_config.setup_logging``,
    so this is safe to call at import time.

    Args:
        name: The full module name (e.g., 'tonal_karaoke.pitch')

    Returns:
        The logger instance for that name
    """
    if name not in _logger_cache:
        _logger_cache[name] = logging.getLogger(name)
    return _logger_cache[name]
