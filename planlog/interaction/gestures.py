"""Pointer gesture controller.

Turns one pointer stream into paint, erase, range, selection, memo and resize operations.
One pointer owns the active gesture; events from any other pointer are ignored until it ends.
Pointer up/cancel must be forwarded from anywhere on the page, not only from the grid.
"""

import logging
from typing import Callable, Optional

from planlog.models.block import Layer
from planlog.models.checklist import ChecklistBlock
from planlog.models.memo import MemoBlock
from planlog.models.segment import FineBounds, Segment
from planlog.models.tool import DayMode, Tool
from planlog.engine.checklists import open_checklist_at
from planlog.engine.fine_bounds import APPLY_MINUTE
from planlog.engine.memos import open_memo_at
from planlog.engine.painting import commit_cell_envelope, erase_cell, paint_cell
from planlog.engine.timeutil import cell_id_to_index, cell_start_minute, parse_cell_id
from planlog.interaction.events import PointerEvent
from planlog.interaction.layer_intent import LayerIntent, choose_layer
from planlog.interaction.long_press import LongPressCapture, LongPressDiscriminator
from planlog.interaction.resize import ResizeController
from planlog.interaction.state import GesturePhase, GestureState
from planlog.interaction.timers import TimerScheduler

logger = logging.getLogger(__name__)

DEFERRED_TOOLS = (Tool.PAINT, Tool.ERASE)
RANGE_TOOLS = (Tool.NEW_RANGE, Tool.PLAN_RANGE)

ChecklistCallback = Callable[[ChecklistBlock, bool], None]
IndicatorCallback = Callable[[str, int], None]
MemoCallback = Callable[[MemoBlock, bool], None]


class GestureController:
    """Gesture state machine over a planner session.

    The session supplies the active date, start hour, tool, brush and day mode, plus the
    block store and history manager the controller writes through.
    """

    def __init__(
        self,
        session,
        scheduler: TimerScheduler,
        on_checklist: Optional[ChecklistCallback] = None,
        on_indicator_request: Optional[IndicatorCallback] = None,
        on_memo: Optional[MemoCallback] = None,
    ):
        self.session = session
        self.state = GestureState()
        self.on_checklist = on_checklist
        self.on_indicator_request = on_indicator_request
        self.on_memo = on_memo
        self.long_press = LongPressDiscriminator(scheduler, self._on_long_press)
        self.resize = ResizeController(session.store, scheduler, before_change=self._push_snapshot)

    @property
    def store(self):
        return self.session.store

    @property
    def phase(self) -> GesturePhase:
        return self.state.phase

    def _push_snapshot(self) -> None:
        self.session.history.push_snapshot(self.session.date_iso, self.session.tool, self.session.brush)

    def _owns(self, event: PointerEvent) -> bool:
        return self.state.pointer_id is None or self.state.pointer_id == event.pointer_id

    # Pointer stream

    def pointer_down(self, event: PointerEvent) -> None:
        state = self.state
        if state.pointer_id is not None and state.pointer_id != event.pointer_id:
            logger.debug(f"Ignoring pointer {event.pointer_id}: pointer {state.pointer_id} owns the gesture")
            return

        if event.handle is not None:
            self.resize.begin(state, event.pointer_id, event.handle)
            return

        if event.cell_id is None:
            return

        tool = self.session.tool
        if tool == Tool.SELECT:
            self.select_at(event.cell_id)
            return
        if tool == Tool.INDICATOR:
            self._request_indicator(event.cell_id)
            return
        if tool == Tool.MEMO:
            self.memo_at(event)
            return

        if state.selection is not None:
            state.clear_selection()

        self._push_snapshot()
        state.phase = GesturePhase.ARMED_PENDING_FIRST
        state.pointer_id = event.pointer_id
        state.tool = tool
        state.brush = self.session.brush
        state.start_cell = event.cell_id
        state.last_cell = event.cell_id
        state.visited = set()

        if tool in RANGE_TOOLS:
            idx = cell_id_to_index(event.cell_id)
            state.range_min_index = state.range_max_index = idx
            state.target_layer = self._range_layer(tool)
            logger.debug(f"Range gesture started at {event.cell_id} ({state.target_layer.value})")
            return

        state.pending_first = event.cell_id
        intent = LayerIntent.OVERLAY if event.overlay_hit else None
        self.long_press.start(LongPressCapture(
            pointer_id=event.pointer_id,
            cell_id=event.cell_id,
            x=event.x,
            y=event.y,
            intent=intent,
            relative_y=event.relative_y,
            cell_height=event.cell_height,
        ))
        logger.debug(f"{tool.value} gesture armed at {event.cell_id}")

    def pointer_move(self, event: PointerEvent) -> None:
        state = self.state
        if state.pointer_id is None or state.pointer_id != event.pointer_id:
            return

        if state.phase in (GesturePhase.RESIZING, GesturePhase.FINE_ADJUST):
            if event.minute is not None:
                self.resize.move(state, event.minute)
            return

        if not state.dragging:
            return

        if not event.primary_pressed:
            # The release was missed; drop the gesture without committing.
            logger.debug(f"Pointer {event.pointer_id} moved with no button held, cancelling gesture")
            self.long_press.cancel("button released")
            state.end_drag()
            return

        self.long_press.observe_move(event.pointer_id, event.x, event.y)

        if event.cell_id is None or event.cell_id == state.last_cell:
            return

        self.long_press.cancel("entered another cell")
        if state.phase == GesturePhase.ARMED_PENDING_FIRST:
            self._apply_pending_first()
            state.phase = GesturePhase.DRAGGING
        state.last_cell = event.cell_id

        if state.tool in RANGE_TOOLS:
            idx = cell_id_to_index(event.cell_id)
            state.range_min_index = min(state.range_min_index, idx)
            state.range_max_index = max(state.range_max_index, idx)
            return
        self._apply_cell(event.cell_id)

    def pointer_up(self, event: PointerEvent) -> None:
        """Global pointer up: finish the owning gesture and apply anything still pending."""
        state = self.state
        if state.pointer_id is None or state.pointer_id != event.pointer_id:
            return

        if state.phase in (GesturePhase.RESIZING, GesturePhase.FINE_ADJUST):
            self.resize.release(state)
            return

        if not state.dragging:
            return

        self.long_press.cancel()
        if state.tool in RANGE_TOOLS:
            self._commit_range()
        else:
            self._apply_pending_first()
        logger.debug(f"Gesture for pointer {event.pointer_id} ended")
        state.end_drag()

    def pointer_cancel(self, event: PointerEvent) -> None:
        self.pointer_up(event)

    # Selection and resize

    def select_at(self, cell_id: str) -> Optional[Segment]:
        date_iso, hour, _ = parse_cell_id(cell_id)
        segment = self.session.segment_at_cell(cell_id)
        self.state.clear_selection()
        if segment is None:
            return None
        self.state.selection = segment
        self.state.selection_date = date_iso
        self.state.selection_hour = hour
        self.state.phase = GesturePhase.SELECTING
        logger.debug(f"Selected {segment.layer} {segment.activity_id} cols {segment.start_col}-{segment.end_col}")
        return segment

    def memo_at(self, event: PointerEvent) -> Optional[MemoBlock]:
        """Open the next memo for the activity under a memo-tool press.

        Presses on empty cells are swallowed without opening anything.
        """
        date_iso, hour, col = parse_cell_id(event.cell_id)
        intent = LayerIntent.OVERLAY if event.overlay_hit else None
        layer, activity_id = self._layer_under(
            date_iso, cell_start_minute(hour, col), intent, event.relative_y, event.cell_height
        )
        if activity_id is None:
            return None

        memo, created = open_memo_at(self.store, date_iso, layer, hour, activity_id)
        logger.debug(f"Memo tool opened {memo.id} (created={created})")
        if self.on_memo is not None:
            self.on_memo(memo, created)
        return memo

    def clear_selection(self) -> None:
        self.resize.cancel()
        self.state.clear_selection()

    def arm_resize(self) -> bool:
        return self.resize.arm(self.state)

    def commit_fine(self, mode: str = APPLY_MINUTE) -> Optional[FineBounds]:
        return self.resize.commit_fine(self.state, mode)

    def discard_fine(self) -> None:
        self.resize.discard_fine(self.state)

    def reset(self) -> None:
        """Abort everything in flight (tool change, date change, undo/redo)."""
        self.long_press.cancel()
        self.resize.cancel()
        self.state.clear_selection()

    # Internals

    def _range_layer(self, tool: Tool) -> Layer:
        if tool == Tool.PLAN_RANGE or DayMode(self.session.day_mode) == DayMode.PLAN:
            return Layer.PLAN
        return Layer.EXECUTE

    def _apply_cell(self, cell_id: str) -> None:
        state = self.state
        if cell_id in state.visited:
            return
        state.visited.add(cell_id)
        if state.tool == Tool.ERASE:
            erase_cell(self.store, cell_id, self.session.day_mode)
        else:
            paint_cell(self.store, cell_id, state.brush, self.session.day_mode)

    def _apply_pending_first(self) -> None:
        first = self.state.pending_first
        self.state.pending_first = None
        if first is not None:
            self._apply_cell(first)

    def _commit_range(self) -> None:
        state = self.state
        if state.range_min_index is None:
            return
        date_iso, _, _ = parse_cell_id(state.start_cell)
        commit_cell_envelope(
            self.store,
            date_iso,
            state.target_layer,
            state.range_min_index,
            state.range_max_index,
            state.brush,
        )

    def _request_indicator(self, cell_id: str) -> None:
        _, hour, col = parse_cell_id(cell_id)
        if self.on_indicator_request is not None:
            self.on_indicator_request(cell_id, cell_start_minute(hour, col))

    def _layer_under(self, date_iso: str, minute: int, intent, relative_y, cell_height):
        """(layer, activity) a press at ``minute`` refers to on the day layers."""
        execute_activity = self.store.activity_at(date_iso, Layer.EXECUTE, minute)
        overlay_activity = self.store.activity_at(date_iso, Layer.OVERLAY, minute)
        layer = choose_layer(
            execute_activity is not None,
            overlay_activity is not None,
            explicit=intent,
            relative_y=relative_y,
            cell_height=cell_height,
        )
        return layer, overlay_activity if layer == Layer.OVERLAY else execute_activity

    def _on_long_press(self, capture: LongPressCapture) -> None:
        state = self.state
        if state.phase != GesturePhase.ARMED_PENDING_FIRST or state.pointer_id != capture.pointer_id:
            return
        if state.pending_first != capture.cell_id:
            return

        # Hold wins: drop the deferred mutation and the snapshot that guarded it.
        state.end_drag()
        self.session.history.discard_last_snapshot()

        date_iso, hour, col = parse_cell_id(capture.cell_id)
        minute = cell_start_minute(hour, col)
        layer, activity_id = self._layer_under(
            date_iso, minute, capture.intent, capture.relative_y, capture.cell_height
        )

        checklist, created = open_checklist_at(self.store, date_iso, layer, minute, activity_id)
        logger.debug(f"Long-press opened checklist {checklist.id} (created={created})")
        if self.on_checklist is not None:
            self.on_checklist(checklist, created)
