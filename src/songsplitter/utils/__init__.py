# this_file: utils/__init__.py
"""Utility module for songsplitter."""

from .archive import bundle
from .cache import AudioCache
from .progress import ProgressTracker, format_time

__all__ = ["AudioCache", "ProgressTracker", "bundle", "format_time"]
