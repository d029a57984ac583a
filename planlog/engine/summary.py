"""Plan vs. execute summaries for a single day."""

from dataclasses import dataclass
from typing import Dict, Iterable, List, Optional

from planlog.models.block import Block, Layer
from planlog.engine.block_store import BlockStore
from planlog.engine.timeutil import format_duration


@dataclass(frozen=True)
class ActivitySummary:
    activity_id: str
    name: str
    color: Optional[str]
    plan_min: int
    execute_min: int

    @property
    def percent(self) -> Optional[int]:
        """Executed share of the planned minutes, or None when nothing was planned."""
        if self.plan_min <= 0:
            return None
        return int(round(self.execute_min / self.plan_min * 100))

    @property
    def plan_text(self) -> str:
        return format_duration(self.plan_min)

    @property
    def execute_text(self) -> str:
        return format_duration(self.execute_min)


def _minutes_by_activity(blocks: Iterable[Block]) -> Dict[str, int]:
    totals: Dict[str, int] = {}
    for block in blocks:
        totals[block.activity_id] = totals.get(block.activity_id, 0) + block.duration_min
    return totals


def daily_summary(store: BlockStore, date_iso: str) -> List[ActivitySummary]:
    """Per activity: planned minutes (plan + planOverlay) vs executed minutes (execute)."""
    planned = _minutes_by_activity(
        store.blocks_on(date_iso, Layer.PLAN) + store.blocks_on(date_iso, Layer.PLAN_OVERLAY)
    )
    executed = _minutes_by_activity(store.blocks_on(date_iso, Layer.EXECUTE))

    rows = []
    for activity_id in list(planned) + [a for a in executed if a not in planned]:
        activity = store.get_activity(activity_id)
        rows.append(ActivitySummary(
            activity_id=activity_id,
            name=activity.name if activity else activity_id,
            color=activity.color if activity else None,
            plan_min=planned.get(activity_id, 0),
            execute_min=executed.get(activity_id, 0),
        ))
    return rows


def find_matching_execute_block(plan_block: Block, execute_blocks: Iterable[Block]) -> Optional[Block]:
    """First execute block of the same activity that overlaps the plan block."""
    for block in execute_blocks:
        if block.activity_id == plan_block.activity_id and block.intersects(plan_block.start_min, plan_block.end_min):
            return block
    return None


def execution_delay(plan_block: Block, execute_block: Block) -> int:
    """Minutes the execution started after (positive) or before (negative) the plan."""
    return execute_block.start_min - plan_block.start_min
