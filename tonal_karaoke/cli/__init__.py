"""Command-line interface for Tonal Karaoke."""

from .main import main

__all__ = ["main"]
