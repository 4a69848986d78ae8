# this_file: src/songsplitter/splits/store.py
"""Authoritative, ordered collection of splits."""

import bisect
import json
from collections.abc import Iterable, Iterator
from dataclasses import replace
from pathlib import Path

from loguru import logger

from ..exceptions import InvariantViolation, RejectedEdit, SplitNotFound
from .models import Edge, Split, default_name

# Shortest split a resize can produce, in seconds
MIN_SPLIT_DURATION = 1.0


class SplitStore:
    """Ordered, non-overlapping splits of one recording.

    All mutations go through this class. After every call the splits are
    sorted by start time, pairwise non-overlapping and inside
    [0, total_duration]; a call either applies completely or leaves the
    store unchanged.
    """

    def __init__(self, total_duration: float, splits: Iterable[Split] = (), log=None):
        """Initialize the store.

        Args:
            total_duration: Length of the recording in seconds
            splits: Initial splits (validated like replace_all)
            log: Logger to report through (default: loguru logger)
        """
        self.total_duration = float(total_duration)
        self.log = log if log is not None else logger.bind(component="store")
        self._splits: list[Split] = []
        self.replace_all(splits)

    def __len__(self) -> int:
        return len(self._splits)

    def __iter__(self) -> Iterator[Split]:
        return iter(tuple(self._splits))

    def __contains__(self, split_id: object) -> bool:
        return any(s.id == split_id for s in self._splits)

    def all(self) -> tuple[Split, ...]:
        """All splits sorted by start time."""
        return tuple(self._splits)

    def get(self, split_id: str) -> Split:
        return self._splits[self._index_of(split_id)]

    def query(self, start: float, end: float) -> tuple[Split, ...]:
        """Splits intersecting the time range [start, end)."""
        return tuple(s for s in self._splits if s.overlaps(start, end))

    def split_at(self, time: float) -> Split | None:
        """The split covering ``time``, if any."""
        starts = [s.start_time for s in self._splits]
        index = bisect.bisect_right(starts, time) - 1
        if index >= 0 and self._splits[index].contains(time):
            return self._splits[index]
        return None

    def replace_all(self, splits: Iterable[Split]) -> None:
        """Replace the whole contents, as done by a detection run.

        Raises:
            InvariantViolation: If the new splits are unsorted, overlapping,
                out of bounds or share ids
        """
        new_splits = list(splits)
        self._check(new_splits)
        self._splits = new_splits
        self.log.debug(f"Store replaced with {len(new_splits)} splits")

    def add(self, start_time: float, end_time: float, name: str | None = None) -> Split:
        """Insert a new split.

        Args:
            start_time: Start in seconds
            end_time: End in seconds
            name: Display name (default: "Song N", N = current count + 1)

        Returns:
            The new split

        Raises:
            RejectedEdit: If the interval is out of bounds, empty or overlaps
                an existing split
        """
        if start_time < 0 or end_time > self.total_duration:
            raise RejectedEdit(
                f"Split {start_time:.2f}s - {end_time:.2f}s is outside "
                f"0 - {self.total_duration:.2f}s"
            )
        if start_time >= end_time:
            raise RejectedEdit(f"Split start {start_time:.2f}s is not before end {end_time:.2f}s")

        conflicts = self.query(start_time, end_time)
        if conflicts:
            names = ", ".join(s.name for s in conflicts)
            raise RejectedEdit(
                f"Split {start_time:.2f}s - {end_time:.2f}s overlaps existing split(s): {names}"
            )

        split = Split(name or default_name(len(self._splits) + 1), start_time, end_time)
        updated = list(self._splits)
        updated.insert(bisect.bisect_right([s.start_time for s in updated], start_time), split)
        self._commit(updated)
        self.log.debug(f"Added {split.name!r}: {start_time:.2f}s - {end_time:.2f}s")
        return split

    def remove(self, split_id: str) -> Split:
        """Delete a split; other splits keep their ids and order.

        Raises:
            SplitNotFound: If no split has this id
        """
        index = self._index_of(split_id)
        updated = list(self._splits)
        removed = updated.pop(index)
        self._commit(updated)
        self.log.debug(f"Removed {removed.name!r}")
        return removed

    def rename(self, split_id: str, name: str) -> Split:
        """Change a split's display name.

        Raises:
            SplitNotFound: If no split has this id
        """
        index = self._index_of(split_id)
        updated = list(self._splits)
        updated[index] = replace(updated[index], name=name)
        self._commit(updated)
        return updated[index]

    def resize_edge(self, split_id: str, edge: Edge | str, new_time: float) -> Split:
        """Move the start or end of a split.

        The start is clamped to [0, end - MIN_SPLIT_DURATION] and the end to
        [start + MIN_SPLIT_DURATION, total_duration], never past the
        recording. A split within MIN_SPLIT_DURATION of either end of the
        recording keeps its own bounds and may end up shorter than the
        minimum. Any other split that the moved one now overlaps is dropped.

        Args:
            split_id: Id of the split to resize
            edge: Which edge to move
            new_time: Requested time of that edge in seconds

        Returns:
            The resized split

        Raises:
            SplitNotFound: If no split has this id
            RejectedEdit: If no valid interval is left for the split; the
                store is unchanged
        """
        edge = Edge(edge)
        index = self._index_of(split_id)
        split = self._splits[index]

        if edge is Edge.START:
            start = max(0.0, min(new_time, split.end_time - MIN_SPLIT_DURATION))
            resized = replace(split, start_time=start)
        else:
            end = max(split.start_time + MIN_SPLIT_DURATION, min(new_time, self.total_duration))
            resized = replace(split, end_time=min(end, self.total_duration))

        if not self._in_bounds(resized):
            raise RejectedEdit(
                f"Cannot move {edge.value} of {split.name!r} to {new_time:.2f}s"
            )

        kept = []
        for s in self._splits:
            if s.id == resized.id:
                kept.append(resized)
            elif s.overlaps(resized.start_time, resized.end_time):
                self.log.debug(f"Dropping {s.name!r}, overlapped by {resized.name!r}")
            else:
                kept.append(s)

        kept.sort(key=lambda s: s.start_time)
        self._commit(kept)
        return resized

    def save(self, path: str | Path) -> None:
        """Save the splits as JSON."""
        data = {
            "total_duration": self.total_duration,
            "splits": [s.to_dict() for s in self._splits],
        }
        with open(path, "w", encoding="utf-8") as f:
            json.dump(data, f, indent=2)
        self.log.debug(f"Saved {len(self._splits)} splits to {path}")

    @classmethod
    def load(cls, path: str | Path, log=None) -> "SplitStore":
        """Load splits saved with save().

        Raises:
            InvariantViolation: If the saved splits do not form a valid store
        """
        with open(path, encoding="utf-8") as f:
            data = json.load(f)
        splits = [Split.from_dict(d) for d in data.get("splits", [])]
        return cls(data["total_duration"], splits, log=log)

    def _index_of(self, split_id: str) -> int:
        for index, split in enumerate(self._splits):
            if split.id == split_id:
                return index
        raise SplitNotFound(split_id)

    def _in_bounds(self, split: Split) -> bool:
        return 0 <= split.start_time < split.end_time <= self.total_duration

    def _commit(self, splits: list[Split]) -> None:
        self._check(splits)
        self._splits = splits

    def _check(self, splits: list[Split]) -> None:
        ids = set()
        previous = None
        for split in splits:
            if not self._in_bounds(split):
                raise InvariantViolation(
                    f"Split {split.name!r} ({split.start_time} - {split.end_time}) "
                    f"is outside 0 - {self.total_duration}"
                )
            if split.id in ids:
                raise InvariantViolation(f"Duplicate split id: {split.id}")
            ids.add(split.id)
            if previous is not None and split.start_time < previous.end_time:
                raise InvariantViolation(
                    f"Split {split.name!r} starts before {previous.name!r} ends"
                )
            previous = split
