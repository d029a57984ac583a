"""Planner session: the active date, tool and brush wired to the store, history and gestures."""

import logging
from datetime import date
from typing import List, Optional

from planlog.models.block import Block, Layer, PLAN_LAYERS
from planlog.models.indicator import IndicatorEvent
from planlog.models.memo import MemoBlock
from planlog.models.segment import Segment
from planlog.models.state import PersistedState
from planlog.models.tool import DayMode, Tool, resolve_tool
from planlog.models.voice import VoiceConfirmation
from planlog.models.constants import HISTORY_LIMIT, MINUTES_PER_HOUR
from planlog.engine.block_store import BlockStore
from planlog.engine.history import HistoryManager
from planlog.engine.memos import delete_memo, save_memo
from planlog.engine.painting import delete_block, delete_indicator, set_block_title, set_indicator
from planlog.engine.segments import build_plan_segments, build_segments, segment_at_cell
from planlog.engine.summary import ActivitySummary, daily_summary
from planlog.engine.timeutil import week_key_for
from planlog.engine.voice import apply_voice_confirmation
from planlog.interaction.gestures import ChecklistCallback, GestureController, IndicatorCallback, MemoCallback
from planlog.interaction.timers import AsyncioTimerScheduler, TimerScheduler

logger = logging.getLogger(__name__)


class PlannerSession:
    """One user's view of the planner: everything the host UI drives and reads."""

    def __init__(
        self,
        store: Optional[BlockStore] = None,
        date_iso: Optional[str] = None,
        scheduler: Optional[TimerScheduler] = None,
        history_limit: int = HISTORY_LIMIT,
        on_checklist: Optional[ChecklistCallback] = None,
        on_indicator_request: Optional[IndicatorCallback] = None,
        on_memo: Optional[MemoCallback] = None,
    ):
        self.store = store or BlockStore()
        self.date_iso = date_iso or date.today().isoformat()
        self.tool: Tool = Tool.PAINT
        self.brush: Optional[str] = None
        self.day_mode: DayMode = DayMode.EXECUTE
        self.history = HistoryManager(self.store, limit=history_limit)
        self.gestures = GestureController(
            self,
            scheduler or AsyncioTimerScheduler(),
            on_checklist=on_checklist,
            on_indicator_request=on_indicator_request,
            on_memo=on_memo,
        )

    @classmethod
    def from_state(cls, state: PersistedState, **kwargs) -> "PlannerSession":
        return cls(store=BlockStore.from_state(state), **kwargs)

    def to_state(self) -> PersistedState:
        return self.store.to_state()

    @property
    def week_key(self) -> str:
        return week_key_for(self.date_iso)

    @property
    def start_hour(self) -> int:
        return self.store.start_hour

    def set_start_hour(self, hour: int) -> None:
        self.store.start_hour = int(hour) % 24
        self.gestures.reset()

    def set_date(self, date_iso: str) -> None:
        self.gestures.reset()
        self.date_iso = date_iso

    def set_tool(self, tool) -> Tool:
        """Switch tools; accepts canonical names and legacy aliases."""
        resolved = resolve_tool(tool)
        if resolved != self.tool:
            self.gestures.reset()
        self.tool = resolved
        return resolved

    def set_brush(self, activity_id: Optional[str]) -> None:
        self.brush = activity_id

    def set_day_mode(self, mode) -> None:
        mode = DayMode(mode)
        if mode != self.day_mode:
            self.gestures.reset()
        self.day_mode = mode

    # Derived views

    def blocks(self, layer=None) -> List[Block]:
        return self.store.blocks_on(self.date_iso, layer)

    def segments(self) -> List[Segment]:
        """Execute/overlay segments of the active date."""
        return build_segments(
            self.store.day_blocks(self.date_iso),
            self.date_iso,
            self.start_hour,
            self.store.known_activity_ids(),
        )

    def plan_segments(self) -> List[Segment]:
        """Week plan projected onto the active date."""
        return build_plan_segments(
            self.store.week_blocks(self.week_key),
            self.date_iso,
            self.start_hour,
            self.store.known_activity_ids(),
        )

    def segment_at_cell(self, cell_id: str) -> Optional[Segment]:
        if self.day_mode == DayMode.PLAN:
            return segment_at_cell(self.plan_segments(), cell_id, self.start_hour, layers=PLAN_LAYERS)
        return segment_at_cell(self.segments(), cell_id, self.start_hour, layers=(Layer.EXECUTE, Layer.OVERLAY))

    def summary(self) -> List[ActivitySummary]:
        return daily_summary(self.store, self.date_iso)

    # History

    def undo(self) -> bool:
        snapshot = self.history.undo(self.tool, self.brush)
        if snapshot is None:
            return False
        self._after_history(snapshot)
        return True

    def redo(self) -> bool:
        snapshot = self.history.redo(self.tool, self.brush)
        if snapshot is None:
            return False
        self._after_history(snapshot)
        return True

    def _after_history(self, snapshot) -> None:
        self.gestures.reset()
        if snapshot.tool is not None:
            self.tool = resolve_tool(snapshot.tool)
        self.brush = snapshot.brush

    # Block edits

    def delete_selection(self) -> int:
        """Delete the blocks drawn under the selected segment as one undo step.

        Returns:
            Number of blocks removed
        """
        state = self.gestures.state
        segment = state.selection
        if segment is None:
            return 0
        date_iso = state.selection_date
        row_start = state.selection_hour * MINUTES_PER_HOUR
        targets = [
            b.id for b in self.store.blocks_on(date_iso, segment.layer)
            if b.activity_id == segment.activity_id
            and b.intersects(row_start + segment.coarse_start_minute, row_start + segment.coarse_end_minute)
        ]
        if not targets:
            return 0
        self.history.push_snapshot(date_iso, self.tool, self.brush)
        for block_id in targets:
            delete_block(self.store, date_iso, block_id)
        self.gestures.clear_selection()
        return len(targets)

    def rename_block(self, block_id: str, title: Optional[str]) -> Optional[Block]:
        return set_block_title(self.store, self.date_iso, block_id, title)

    # Memos

    def memos(self) -> List[MemoBlock]:
        return self.store.memos(self.date_iso)

    def save_memo(self, memo: MemoBlock, text: str) -> MemoBlock:
        return save_memo(self.store, memo, text)

    def remove_memo(self, memo_id: str) -> bool:
        return delete_memo(self.store, self.date_iso, memo_id)

    # External collaborators

    def apply_voice(self, confirmation: VoiceConfirmation) -> Optional[Block]:
        """Write a confirmed voice tuple to the plan layer as one undoable range."""
        self.history.push_snapshot(confirmation.date_iso, self.tool, self.brush)
        block = apply_voice_confirmation(self.store, confirmation)
        logger.info(f"Voice intake {confirmation.activity_name!r} -> {block.id if block else None}")
        return block

    def add_indicator(self, at_min: int, label: str, time_text: Optional[str] = None) -> IndicatorEvent:
        return set_indicator(self.store, self.date_iso, at_min, label, time_text)

    def remove_indicator(self, indicator_id: str) -> bool:
        return delete_indicator(self.store, self.date_iso, indicator_id)
