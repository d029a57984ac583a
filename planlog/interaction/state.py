"""Gesture state owned by the gesture controller."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional, Set

from planlog.models.block import Layer
from planlog.models.segment import Segment, SegmentSignature


class GesturePhase(str, Enum):
    """Gesture state machine phases."""
    IDLE = "idle"
    ARMED_PENDING_FIRST = "armed_pending_first"
    DRAGGING = "dragging"
    SELECTING = "selecting"
    RESIZE_ARMED = "resize_armed"
    RESIZING = "resizing"
    FINE_ADJUST = "fine_adjust"


@dataclass(frozen=True)
class FinePending:
    """A released fine-adjust value waiting for an explicit commit."""

    side: str
    minute: int
    signature: SegmentSignature


@dataclass
class GestureState:
    """Everything one gesture (and the current selection) needs between pointer events."""

    phase: GesturePhase = GesturePhase.IDLE
    pointer_id: Optional[int] = None

    # Paint / erase / range drags
    tool: Optional[str] = None
    brush: Optional[str] = None
    target_layer: Optional[Layer] = None
    start_cell: Optional[str] = None
    pending_first: Optional[str] = None
    last_cell: Optional[str] = None
    visited: Set[str] = field(default_factory=set)
    range_min_index: Optional[int] = None
    range_max_index: Optional[int] = None

    # Selection and resize
    selection: Optional[Segment] = None
    selection_date: Optional[str] = None
    selection_hour: Optional[int] = None
    resize_side: Optional[str] = None
    resize_base: Optional[Segment] = None
    preview_start_col: Optional[int] = None
    preview_end_col: Optional[int] = None

    # Fine adjust
    fine_side: Optional[str] = None
    fine_value: Optional[int] = None
    fine_pending: Optional[FinePending] = None

    @property
    def dragging(self) -> bool:
        return self.phase in (GesturePhase.ARMED_PENDING_FIRST, GesturePhase.DRAGGING)

    @property
    def has_selection(self) -> bool:
        return self.selection is not None

    def end_drag(self) -> None:
        """Forget the drag fields and return to Idle (or to the live selection)."""
        self.pointer_id = None
        self.tool = None
        self.brush = None
        self.target_layer = None
        self.start_cell = None
        self.pending_first = None
        self.last_cell = None
        self.visited = set()
        self.range_min_index = None
        self.range_max_index = None
        self.phase = GesturePhase.IDLE

    def clear_selection(self) -> None:
        self.end_drag()
        self.selection = None
        self.selection_date = None
        self.selection_hour = None
        self.resize_side = None
        self.resize_base = None
        self.preview_start_col = None
        self.preview_end_col = None
        self.fine_side = None
        self.fine_value = None
        self.fine_pending = None
