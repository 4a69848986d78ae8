# this_file: src/songsplitter/splits/session.py
"""Pointer-driven editing of splits.

The interaction is a small state machine. ``transition`` is a pure function
from (state, pointer event) to (new state, effects); ``EditSession`` owns the
current state and the playhead and applies the effects to a SplitStore.
Coordinates are in the caller's pixel space, mapped to time by a Viewport.
"""

from collections.abc import Sequence
from dataclasses import dataclass

from loguru import logger

from ..exceptions import RejectedEdit, SplitNotFound
from .models import Edge, Split
from .store import SplitStore


@dataclass(frozen=True)
class Viewport:
    """Mapping between time and the horizontal pixel axis of the waveform.

    Attributes:
        width: Width of the surface in pixels
        duration: Recording length in seconds
        handle_radius: Horizontal hit distance for a handle, in pixels
        handle_band: Handles are only hit above this y coordinate
    """

    width: float
    duration: float
    handle_radius: float = 8.0
    handle_band: float = 30.0

    def time_to_x(self, time: float) -> float:
        return time / self.duration * self.width

    def x_to_time(self, x: float) -> float:
        """Time under x, clamped to the recording."""
        relative = max(0.0, min(1.0, x / self.width))
        return relative * self.duration


# States


@dataclass(frozen=True)
class Idle:
    pass


@dataclass(frozen=True)
class HoverHandle:
    split_id: str
    edge: Edge


@dataclass(frozen=True)
class Dragging:
    split_id: str
    edge: Edge


SessionState = Idle | HoverHandle | Dragging

IDLE = Idle()


# Pointer events


@dataclass(frozen=True)
class PointerMove:
    x: float
    y: float


@dataclass(frozen=True)
class PointerDown:
    x: float
    y: float
    remove: bool = False  # the "remove split" gesture, e.g. a right click


@dataclass(frozen=True)
class PointerUp:
    pass


@dataclass(frozen=True)
class PointerLeave:
    pass


PointerEvent = PointerMove | PointerDown | PointerUp | PointerLeave


# Effects


@dataclass(frozen=True)
class ResizeEdge:
    split_id: str
    edge: Edge
    time: float


@dataclass(frozen=True)
class RemoveSplit:
    split_id: str


@dataclass(frozen=True)
class Seek:
    time: float


Effect = ResizeEdge | RemoveSplit | Seek


def hit_test_handle(
    splits: Sequence[Split], viewport: Viewport, x: float, y: float
) -> HoverHandle | None:
    """Find the split handle under the pointer.

    Start handles take priority over end handles.
    """
    if y >= viewport.handle_band:
        return None
    for edge in (Edge.START, Edge.END):
        for split in splits:
            time = split.start_time if edge is Edge.START else split.end_time
            if abs(x - viewport.time_to_x(time)) < viewport.handle_radius:
                return HoverHandle(split.id, edge)
    return None


def hit_test_body(
    splits: Sequence[Split], viewport: Viewport, x: float, y: float
) -> Split | None:
    """Find the split whose body (below the handle band) is under the pointer."""
    if y < viewport.handle_band:
        return None
    for split in splits:
        if viewport.time_to_x(split.start_time) <= x <= viewport.time_to_x(split.end_time):
            return split
    return None


def transition(
    state: SessionState,
    event: PointerEvent,
    splits: Sequence[Split],
    viewport: Viewport,
) -> tuple[SessionState, list[Effect]]:
    """Compute the next state and the effects of a pointer event.

    Args:
        state: Current state
        event: Pointer event
        splits: Current splits, sorted by start time
        viewport: Time/pixel mapping

    Returns:
        (new state, effects to apply in order)
    """
    if isinstance(state, Dragging):
        if isinstance(event, PointerMove):
            return state, [ResizeEdge(state.split_id, state.edge, viewport.x_to_time(event.x))]
        if isinstance(event, PointerUp):
            return IDLE, []
        # Leaving the surface does not end a drag; only a release does
        return state, []

    if isinstance(event, PointerMove):
        return hit_test_handle(splits, viewport, event.x, event.y) or IDLE, []

    if isinstance(event, PointerDown):
        handle = hit_test_handle(splits, viewport, event.x, event.y)
        if handle is not None:
            return Dragging(handle.split_id, handle.edge), []
        if event.remove:
            body = hit_test_body(splits, viewport, event.x, event.y)
            if body is not None:
                return IDLE, [RemoveSplit(body.id)]
        return IDLE, [Seek(viewport.x_to_time(event.x))]

    if isinstance(event, PointerLeave):
        return IDLE, []

    return state, []


class EditSession:
    """Interactive editing state for one loaded recording."""

    # Length of a split created with add_at_playhead, in seconds
    DEFAULT_SPLIT_SECONDS = 60.0

    def __init__(self, store: SplitStore, viewport: Viewport, log=None):
        """Initialize the session.

        Args:
            store: Store the session edits
            viewport: Time/pixel mapping of the waveform surface
            log: Logger to report through (default: loguru logger)
        """
        self.store = store
        self.viewport = viewport
        self.log = log if log is not None else logger.bind(component="session")
        self.state: SessionState = IDLE
        self.playhead = 0.0

    @property
    def hovered(self) -> HoverHandle | None:
        return self.state if isinstance(self.state, HoverHandle) else None

    @property
    def dragging(self) -> Dragging | None:
        return self.state if isinstance(self.state, Dragging) else None

    def handle(self, event: PointerEvent) -> list[Effect]:
        """Process a pointer event and apply its effects.

        Returns:
            The effects that were applied
        """
        self.state, effects = transition(self.state, event, self.store.all(), self.viewport)
        for effect in effects:
            self._apply(effect)
        return effects

    def hit_test(self, x: float, y: float) -> HoverHandle | None:
        """Handle under the given pixel position, for cursor feedback."""
        return hit_test_handle(self.store.all(), self.viewport, x, y)

    def seek(self, time: float) -> None:
        self.playhead = max(0.0, min(time, self.store.total_duration))

    def add_at_playhead(self) -> Split | None:
        """Add a split of DEFAULT_SPLIT_SECONDS starting at the playhead.

        Returns:
            The new split, or None if it would overlap an existing split
        """
        start = self.playhead
        end = min(start + self.DEFAULT_SPLIT_SECONDS, self.store.total_duration)
        try:
            return self.store.add(start, end)
        except RejectedEdit as e:
            self.log.info(f"Split not added: {e.reason}")
            return None

    def playback_range(self, split_id: str, sample_rate: int) -> tuple[int, int]:
        """Sample offsets (start, end) for playing back a split."""
        return self.store.get(split_id).sample_range(sample_rate)

    def reset(self) -> None:
        """Forget pointer state and rewind the playhead."""
        self.state = IDLE
        self.playhead = 0.0

    def _apply(self, effect: Effect) -> None:
        if isinstance(effect, ResizeEdge):
            try:
                self.store.resize_edge(effect.split_id, effect.edge, effect.time)
            except RejectedEdit as e:
                self.log.debug(f"Resize ignored: {e.reason}")
            except SplitNotFound:
                self.log.debug(f"Dragged split {effect.split_id} is gone, ending drag")
                self.state = IDLE
        elif isinstance(effect, RemoveSplit):
            self.store.remove(effect.split_id)
        elif isinstance(effect, Seek):
            self.seek(effect.time)
