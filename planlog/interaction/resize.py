"""Coarse and fine resize of a selected segment.

A selection must be armed before its handles can be dragged. Dragging a handle previews a
new 10-minute span and rewrites the blocks on release. Holding a handle still for
FINE_ADJUST_HOLD_MS escalates to minute-precision adjustment; the released value then waits
for an explicit commit ("minute" or "snap") or discard.
"""

import logging
import math
from dataclasses import replace
from typing import Callable, Optional

from planlog.models.constants import CELL_MINUTES, FINE_ADJUST_HOLD_MS, LAST_COL
from planlog.models.segment import FineBounds, Segment, SegmentSignature
from planlog.engine.block_store import BlockStore
from planlog.engine.fine_bounds import (
    APPLY_MINUTE,
    START,
    apply_fine_value,
    clamp_fine_value,
    effective_fine_bounds,
    reset_fine_bounds,
    signature_for,
)
from planlog.engine.painting import apply_coarse_resize
from planlog.engine.timeutil import clamp
from planlog.interaction.state import FinePending, GesturePhase, GestureState
from planlog.interaction.timers import TimerHandle, TimerScheduler

logger = logging.getLogger(__name__)


def _nearest_boundary(minute: float) -> int:
    return int(math.floor(minute / CELL_MINUTES + 0.5))


def coarse_span_for_handle(base: Segment, side: str, minute: float):
    """New ``(start_col, end_col)`` when a handle of ``base`` is dragged to ``minute`` (within the hour)."""
    if side == START:
        col = clamp(_nearest_boundary(minute), 0, LAST_COL)
        return min(col, base.end_col), base.end_col
    boundary = clamp(_nearest_boundary(minute), 1, LAST_COL + 1)
    return base.start_col, max(boundary - 1, base.start_col)


class ResizeController:
    """Drives resize and fine-adjust over a GestureState."""

    def __init__(
        self,
        store: BlockStore,
        scheduler: TimerScheduler,
        before_change: Callable[[], None],
        hold_ms: int = FINE_ADJUST_HOLD_MS,
    ):
        self.store = store
        self.scheduler = scheduler
        self.before_change = before_change
        self.hold_ms = hold_ms
        self._escalation: Optional[TimerHandle] = None

    def signature(self, state: GestureState, segment: Segment) -> SegmentSignature:
        return signature_for(
            state.selection_date,
            state.selection_hour,
            segment.layer,
            segment.activity_id,
            segment.start_col,
            segment.end_col,
        )

    def arm(self, state: GestureState) -> bool:
        if state.phase != GesturePhase.SELECTING or state.selection is None:
            return False
        state.phase = GesturePhase.RESIZE_ARMED
        logger.debug("Resize armed")
        return True

    def begin(self, state: GestureState, pointer_id: int, side: str) -> bool:
        """Grab a handle. Only allowed once the selection is armed."""
        if state.phase != GesturePhase.RESIZE_ARMED or state.selection is None:
            return False
        base = state.selection
        state.phase = GesturePhase.RESIZING
        state.pointer_id = pointer_id
        state.resize_side = side
        state.resize_base = base
        state.preview_start_col = base.start_col
        state.preview_end_col = base.end_col
        state.fine_pending = None
        self._cancel_escalation()
        self._escalation = self.scheduler.call_later(self.hold_ms / 1000.0, lambda: self._escalate(state))
        return True

    def move(self, state: GestureState, minute: float) -> None:
        base = state.resize_base
        if base is None:
            return
        if state.phase == GesturePhase.RESIZING:
            start_col, end_col = coarse_span_for_handle(base, state.resize_side, minute)
            if (start_col, end_col) != (base.start_col, base.end_col):
                self._cancel_escalation()
            state.preview_start_col = start_col
            state.preview_end_col = end_col
        elif state.phase == GesturePhase.FINE_ADJUST:
            current = effective_fine_bounds(self.store, self.signature(state, base))
            state.fine_value = clamp_fine_value(state.fine_side, minute, base.start_col, base.end_col, current)

    def release(self, state: GestureState) -> Optional[Segment]:
        """Finish a handle drag; the selection stays armed.

        Returns:
            The (possibly resized) selected segment
        """
        self._cancel_escalation()
        base = state.resize_base

        if state.phase == GesturePhase.RESIZING and base is not None:
            new_span = (state.preview_start_col, state.preview_end_col)
            if new_span != (base.start_col, base.end_col):
                self.before_change()
                apply_coarse_resize(
                    self.store,
                    state.selection_date,
                    state.selection_hour,
                    base.layer,
                    base.activity_id,
                    base.start_col,
                    base.end_col,
                    new_span[0],
                    new_span[1],
                )
                resized = replace(base, start_col=new_span[0], end_col=new_span[1])
                reset_fine_bounds(self.store, self.signature(state, base), self.signature(state, resized))
                state.selection = resized
        elif state.phase == GesturePhase.FINE_ADJUST and base is not None:
            state.fine_pending = FinePending(
                side=state.fine_side,
                minute=state.fine_value,
                signature=self.signature(state, base),
            )
            logger.debug(f"Fine value {state.fine_value} pending on {state.fine_side}")

        state.phase = GesturePhase.RESIZE_ARMED if state.selection is not None else GesturePhase.IDLE
        state.pointer_id = None
        state.resize_side = None
        state.resize_base = None
        state.preview_start_col = None
        state.preview_end_col = None
        state.fine_side = None
        state.fine_value = None
        return state.selection

    def commit_fine(self, state: GestureState, mode: str = APPLY_MINUTE) -> Optional[FineBounds]:
        """Commit the pending fine value exactly (``"minute"``) or snapped to 10 minutes (``"snap"``)."""
        pending = state.fine_pending
        if pending is None:
            return None
        state.fine_pending = None
        return apply_fine_value(self.store, pending.signature, pending.side, pending.minute, mode)

    def discard_fine(self, state: GestureState) -> None:
        state.fine_pending = None

    def cancel(self) -> None:
        self._cancel_escalation()

    def _cancel_escalation(self) -> None:
        if self._escalation is not None:
            self._escalation.cancel()
            self._escalation = None

    def _escalate(self, state: GestureState) -> None:
        self._escalation = None
        base = state.resize_base
        if state.phase != GesturePhase.RESIZING or base is None:
            return
        if (state.preview_start_col, state.preview_end_col) != (base.start_col, base.end_col):
            return
        current = effective_fine_bounds(self.store, self.signature(state, base))
        state.phase = GesturePhase.FINE_ADJUST
        state.fine_side = state.resize_side
        state.fine_value = current.start_minute if state.resize_side == START else current.end_minute
        logger.debug(f"Escalated to fine adjust on {state.fine_side} at {state.fine_value}")
