# this_file: songsplitter/src/songsplitter/__init__.py
"""Songsplitter - split long rehearsal recordings into one file per song."""

from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("songsplitter")
except PackageNotFoundError:
    __version__ = "unknown"

__all__ = ["__version__"]
