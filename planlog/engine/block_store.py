"""In-memory block store.

Holds activities, day blocks (execute/overlay) keyed by date, week plans (plan/planOverlay)
keyed by week, checklist blocks, hour memos, indicators and fine bounds. The store only
stores and looks things up; every mutation rule lives in the engine modules that write to it.
"""

import logging
from typing import Dict, Iterable, List, Optional

from planlog.models.activity import Activity
from planlog.models.block import Block, is_plan_layer
from planlog.models.checklist import ChecklistBlock
from planlog.models.constants import CELL_MINUTES, DEFAULT_START_HOUR
from planlog.models.indicator import IndicatorEvent
from planlog.models.memo import MemoBlock
from planlog.models.segment import FineBounds
from planlog.models.state import PersistedState, Theme
from planlog.engine.segments import occupancy
from planlog.engine.timeutil import week_key_for

logger = logging.getLogger(__name__)


class BlockStore:
    """Storage and lookup for everything the planner persists."""

    def __init__(
        self,
        activities: Optional[Iterable[Activity]] = None,
        blocks_by_date: Optional[Dict[str, List[Block]]] = None,
        week_plans: Optional[Dict[str, List[Block]]] = None,
        checklists_by_date: Optional[Dict[str, List[ChecklistBlock]]] = None,
        indicators_by_date: Optional[Dict[str, List[IndicatorEvent]]] = None,
        memos_by_date: Optional[Dict[str, List[MemoBlock]]] = None,
        fine_bounds: Optional[Dict[str, FineBounds]] = None,
        start_hour: int = DEFAULT_START_HOUR,
        theme: str = Theme.LIGHT.value,
    ):
        self.activities: Dict[str, Activity] = {a.id: a for a in (activities or [])}
        self.blocks_by_date: Dict[str, List[Block]] = {k: list(v) for k, v in (blocks_by_date or {}).items()}
        self.week_plans: Dict[str, List[Block]] = {k: list(v) for k, v in (week_plans or {}).items()}
        self.checklists_by_date: Dict[str, List[ChecklistBlock]] = {
            k: list(v) for k, v in (checklists_by_date or {}).items()
        }
        self.indicators_by_date: Dict[str, List[IndicatorEvent]] = {
            k: list(v) for k, v in (indicators_by_date or {}).items()
        }
        self.memos_by_date: Dict[str, List[MemoBlock]] = {k: list(v) for k, v in (memos_by_date or {}).items()}
        self.fine_bounds: Dict[str, FineBounds] = dict(fine_bounds or {})
        self.start_hour = start_hour
        self.theme = theme

    # Activities

    def add_activity(self, activity: Activity) -> Activity:
        self.activities[activity.id] = activity
        return activity

    def get_activity(self, activity_id: str) -> Optional[Activity]:
        return self.activities.get(activity_id)

    def find_activity_by_name(self, name: str) -> Optional[Activity]:
        """Case-insensitive lookup by display name."""
        wanted = (name or "").strip().lower()
        for activity in self.activities.values():
            if activity.name.strip().lower() == wanted:
                return activity
        return None

    def known_activity_ids(self) -> set:
        return set(self.activities)

    # Blocks

    def day_blocks(self, date_iso: str) -> List[Block]:
        return list(self.blocks_by_date.get(date_iso, []))

    def set_day_blocks(self, date_iso: str, blocks: List[Block]) -> None:
        if blocks:
            self.blocks_by_date[date_iso] = list(blocks)
        else:
            self.blocks_by_date.pop(date_iso, None)

    def week_blocks(self, week_key: str) -> List[Block]:
        return list(self.week_plans.get(week_key, []))

    def set_week_blocks(self, week_key: str, blocks: List[Block]) -> None:
        if blocks:
            self.week_plans[week_key] = list(blocks)
        else:
            self.week_plans.pop(week_key, None)

    def collection_for(self, date_iso: str, layer) -> List[Block]:
        """The whole stored collection a block on ``(date_iso, layer)`` belongs to."""
        if is_plan_layer(layer):
            return self.week_blocks(week_key_for(date_iso))
        return self.day_blocks(date_iso)

    def replace_collection(self, date_iso: str, layer, blocks: List[Block]) -> None:
        if is_plan_layer(layer):
            self.set_week_blocks(week_key_for(date_iso), blocks)
        else:
            self.set_day_blocks(date_iso, blocks)

    def blocks_on(self, date_iso: str, layer=None) -> List[Block]:
        """Blocks of one date (plan layers projected from the week), optionally one layer."""
        if layer is not None:
            candidates = self.collection_for(date_iso, layer)
        else:
            candidates = self.day_blocks(date_iso) + self.week_blocks(week_key_for(date_iso))
        return [
            b for b in candidates
            if b.date_iso == date_iso and (layer is None or b.layer == getattr(layer, "value", layer))
        ]

    def activity_at(self, date_iso: str, layer, minute: int) -> Optional[str]:
        """Activity occupying the 10-minute cell that contains ``minute`` on one layer."""
        cells = occupancy(self.blocks_on(date_iso, layer), layer)
        return cells.get(minute // CELL_MINUTES)

    # Checklists, memos and indicators

    def checklists(self, date_iso: str) -> List[ChecklistBlock]:
        return list(self.checklists_by_date.get(date_iso, []))

    def set_checklists(self, date_iso: str, checklists: List[ChecklistBlock]) -> None:
        if checklists:
            self.checklists_by_date[date_iso] = list(checklists)
        else:
            self.checklists_by_date.pop(date_iso, None)

    def memos(self, date_iso: str) -> List[MemoBlock]:
        return list(self.memos_by_date.get(date_iso, []))

    def set_memos(self, date_iso: str, memos: List[MemoBlock]) -> None:
        if memos:
            self.memos_by_date[date_iso] = list(memos)
        else:
            self.memos_by_date.pop(date_iso, None)

    def indicators(self, date_iso: str) -> List[IndicatorEvent]:
        return list(self.indicators_by_date.get(date_iso, []))

    def set_indicators(self, date_iso: str, indicators: List[IndicatorEvent]) -> None:
        if indicators:
            self.indicators_by_date[date_iso] = list(indicators)
        else:
            self.indicators_by_date.pop(date_iso, None)

    # Fine bounds

    def get_fine_bounds(self, key: str) -> Optional[FineBounds]:
        return self.fine_bounds.get(key)

    def set_fine_bounds(self, key: str, bounds: FineBounds) -> None:
        self.fine_bounds[key] = bounds

    def delete_fine_bounds(self, key: str) -> None:
        self.fine_bounds.pop(key, None)

    # Persistence bridge

    @classmethod
    def from_state(cls, state: PersistedState) -> "BlockStore":
        return cls(
            activities=state.activities,
            blocks_by_date=state.blocks_by_date,
            week_plans=state.week_plans,
            checklists_by_date=state.checklist_blocks_by_date,
            indicators_by_date=state.indicators_by_date,
            memos_by_date=state.memos_by_date,
            fine_bounds=state.fine_bounds,
            start_hour=state.start_hour,
            theme=state.theme,
        )

    def to_state(self) -> PersistedState:
        return PersistedState(
            activities=list(self.activities.values()),
            blocks_by_date=self.blocks_by_date,
            week_plans=self.week_plans,
            checklist_blocks_by_date=self.checklists_by_date,
            indicators_by_date=self.indicators_by_date,
            memos_by_date=self.memos_by_date,
            fine_bounds=self.fine_bounds,
            start_hour=self.start_hour,
            theme=self.theme,
        )
