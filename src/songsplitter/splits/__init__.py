# this_file: splits/__init__.py
"""Split data model, store and interactive editing for songsplitter."""

from .models import Edge, Split
from .session import EditSession, Viewport
from .store import SplitStore

__all__ = ["Edge", "EditSession", "Split", "SplitStore", "Viewport"]
