# this_file: src/songsplitter/splits/models.py
"""Split data model."""

import math
import uuid
from dataclasses import asdict, dataclass, field
from enum import Enum


class Edge(str, Enum):
    """Boundary of a split that can be dragged."""

    START = "start"
    END = "end"


def new_split_id() -> str:
    return uuid.uuid4().hex


def default_name(number: int) -> str:
    return f"Song {number}"


@dataclass(frozen=True)
class Split:
    """A named time region holding one song.

    Times are in seconds, covering the half-open interval [start_time, end_time).
    The id never changes when a split is renamed or resized.
    """

    name: str
    start_time: float
    end_time: float
    id: str = field(default_factory=new_split_id)

    @property
    def duration(self) -> float:
        return self.end_time - self.start_time

    def contains(self, time: float) -> bool:
        return self.start_time <= time < self.end_time

    def overlaps(self, start: float, end: float) -> bool:
        """Whether [start, end) intersects this split."""
        return start < self.end_time and self.start_time < end

    def sample_range(self, sample_rate: int) -> tuple[int, int]:
        """First sample and one-past-last sample of this split."""
        return math.floor(self.start_time * sample_rate), math.floor(self.end_time * sample_rate)

    def to_dict(self) -> dict:
        """Convert to JSON-serializable dict."""
        return asdict(self)

    @classmethod
    def from_dict(cls, data: dict) -> "Split":
        """Create from dict (loaded from JSON)."""
        return cls(
            name=str(data["name"]),
            start_time=float(data["start_time"]),
            end_time=float(data["end_time"]),
            id=str(data.get("id") or new_split_id()),
        )
