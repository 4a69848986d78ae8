# this_file: src/songsplitter/exceptions.py
"""Error types raised by the segmentation and split-editing engine."""


class SongSplitterError(Exception):
    """Base class for all songsplitter errors."""


class InputError(SongSplitterError, ValueError):
    """Audio input cannot be analyzed or exported (empty, bad rate, zero length)."""


class InvariantViolation(SongSplitterError, AssertionError):
    """The split store would end up unsorted, overlapping or out of bounds.

    This is a programming error, never a user-facing condition.
    """


class RejectedEdit(SongSplitterError):
    """An edit could not be applied without breaking the split constraints.

    The store is left unchanged.
    """

    def __init__(self, reason: str):
        super().__init__(reason)
        self.reason = reason


class SplitNotFound(SongSplitterError, KeyError):
    """No split with the given id exists in the store."""

    def __init__(self, split_id: str):
        super().__init__(split_id)
        self.split_id = split_id

    def __str__(self) -> str:
        return f"No split with id: {self.split_id}"
