"""Loading saved payloads and migrating the legacy per-cell format.

Schema version 1 stored one record per 10-minute cell (``day``: date -> cell id ->
``{execute, overlay, indicator}``; ``week``: week key -> cell id -> ``{activityId,
overlayActivityId}``). Version 2 stores block ranges. Loading never raises: anything that
cannot be read becomes an empty state.
"""

import json
import logging
from typing import Dict, Iterable, List, Optional, Tuple, Union

from planlog.models.block import Block, BlockSource, Layer
from planlog.models.checklist import ChecklistBlock
from planlog.models.constants import CELL_MINUTES, CELLS_PER_HOUR, DEFAULT_START_HOUR, SCHEMA_VERSION
from planlog.models.indicator import IndicatorEvent
from planlog.models.memo import MemoBlock
from planlog.models.state import PersistedState
from planlog.engine.memos import NO_ACTIVITY, WHOLE_HOUR
from planlog.engine.timeutil import cell_index, make_cell_id, min_to_time, parse_cell_id

logger = logging.getLogger(__name__)

# Legacy week-grid field -> layer
WEEK_FIELDS = (("activityId", Layer.PLAN), ("overlayActivityId", Layer.PLAN_OVERLAY))
DAY_FIELDS = (("execute", Layer.EXECUTE), ("overlay", Layer.OVERLAY))

ID_PREFIX = {
    Layer.EXECUTE: "migrated_exec",
    Layer.OVERLAY: "migrated_overlay",
    Layer.PLAN: "migrated_plan",
    Layer.PLAN_OVERLAY: "migrated_planOverlay",
}


def _cells_by_date(grid: Dict[str, dict], default_date: Optional[str] = None) -> Dict[str, List[Tuple[int, dict]]]:
    """Group a cell grid by date as sorted ``(cell_index, cell)`` pairs, skipping malformed ids."""
    grouped: Dict[str, List[Tuple[int, dict]]] = {}
    for cell_id in sorted(grid):
        try:
            date_iso, hour, col = parse_cell_id(cell_id)
        except ValueError:
            logger.warning(f"Skipping malformed legacy cell id {cell_id!r}")
            continue
        cell = grid[cell_id] or {}
        grouped.setdefault(date_iso or default_date, []).append((cell_index(hour, col), cell))
    for cells in grouped.values():
        cells.sort(key=lambda pair: pair[0])
    return grouped


def scan_layer(date_iso: str, cells: Iterable[Tuple[int, dict]], field: str, layer: Layer) -> List[Block]:
    """Turn one layer of a sorted cell list into blocks.

    A run extends while the same activity continues in the next consecutive cell and is
    flushed when the activity changes, a cell is missing, or the scan ends.
    """
    blocks: List[Block] = []
    run_start: Optional[int] = None
    run_end: Optional[int] = None
    run_activity: Optional[str] = None

    def _flush():
        if run_activity is None:
            return
        start_min = run_start * CELL_MINUTES
        blocks.append(Block(
            id=f"{ID_PREFIX[layer]}_{date_iso}_{start_min}",
            date_iso=date_iso,
            start_min=start_min,
            end_min=(run_end + 1) * CELL_MINUTES,
            activity_id=run_activity,
            layer=layer,
            source=BlockSource.IMPORT,
        ))

    for idx, cell in cells:
        activity = cell.get(field)
        if activity and activity == run_activity and idx == run_end + 1:
            run_end = idx
            continue
        _flush()
        if activity:
            run_start = run_end = idx
            run_activity = activity
        else:
            run_start = run_end = run_activity = None
    _flush()
    return blocks


def migrate_day_grids(day: Dict[str, Dict[str, dict]]):
    """Legacy day grids -> (blocks_by_date, indicators_by_date)."""
    blocks_by_date: Dict[str, List[Block]] = {}
    indicators_by_date: Dict[str, List[IndicatorEvent]] = {}

    for grid_date, grid in (day or {}).items():
        for date_iso, cells in _cells_by_date(grid or {}, grid_date).items():
            blocks: List[Block] = []
            for field, layer in DAY_FIELDS:
                blocks.extend(scan_layer(date_iso, cells, field, layer))
            if blocks:
                blocks_by_date.setdefault(date_iso, []).extend(blocks)

            indicators = []
            for idx, cell in cells:
                indicator = cell.get("indicator")
                if not indicator:
                    continue
                hour, col = divmod(idx, CELLS_PER_HOUR)
                at_min = idx * CELL_MINUTES
                indicators.append(IndicatorEvent(
                    id=f"migrated_ind_{make_cell_id(date_iso, hour, col)}",
                    date_iso=date_iso,
                    at_min=at_min,
                    label=indicator.get("label", ""),
                    time_text=indicator.get("timeText") or min_to_time(at_min),
                ))
            if indicators:
                indicators_by_date.setdefault(date_iso, []).extend(indicators)

    return blocks_by_date, indicators_by_date


def migrate_week_grids(week: Dict[str, Dict[str, dict]]) -> Dict[str, List[Block]]:
    """Legacy week grids -> week plans (plan / planOverlay blocks carrying their own dates)."""
    week_plans: Dict[str, List[Block]] = {}
    for week_key, grid in (week or {}).items():
        blocks: List[Block] = []
        for date_iso, cells in _cells_by_date(grid or {}).items():
            for field, layer in WEEK_FIELDS:
                blocks.extend(scan_layer(date_iso, cells, field, layer))
        if blocks:
            week_plans[week_key] = blocks
    return week_plans


def migrate_checklist_blocks(checklist_blocks: Dict[str, List[dict]]) -> Dict[str, List[ChecklistBlock]]:
    result: Dict[str, List[ChecklistBlock]] = {}
    for date_iso, items in (checklist_blocks or {}).items():
        result[date_iso] = [ChecklistBlock.model_validate({**raw, "dateISO": date_iso}) for raw in items or []]
    return result


def migrate_memo_blocks(memo_blocks: Dict[str, List[dict]]) -> Dict[str, List[MemoBlock]]:
    """Legacy hour memos; the slot is the id suffix and old per-cell memos take their cell's hour."""
    result: Dict[str, List[MemoBlock]] = {}
    for date_iso, items in (memo_blocks or {}).items():
        memos = []
        for raw in items or []:
            raw = dict(raw or {})
            if raw.get("hour") is None and raw.get("cellId"):
                try:
                    raw["hour"] = parse_cell_id(raw["cellId"])[1]
                except ValueError:
                    logger.warning(f"Legacy memo {raw.get('id')!r} has a malformed cell id")
            if raw.get("activityId") in (NO_ACTIVITY, WHOLE_HOUR):
                raw["activityId"] = None
            raw.setdefault("slot", 1 if str(raw.get("id", "")).endswith("_1") else 0)
            try:
                memos.append(MemoBlock.model_validate({**raw, "dateISO": date_iso}))
            except ValueError as e:
                logger.warning(f"Skipping unreadable legacy memo {raw.get('id')!r}: {str(e)}")
        if memos:
            result[date_iso] = memos
    return result


def migrate_v1_to_v2(legacy: dict) -> PersistedState:
    """Convert a legacy per-cell payload into the current schema."""
    day = legacy.get("day") or legacy.get("dayGrid") or {}
    week = legacy.get("week") or legacy.get("weekGrid") or {}
    blocks_by_date, indicators_by_date = migrate_day_grids(day)
    start_hour = legacy.get("startHour")

    state = PersistedState(
        activities=legacy.get("activities") or [],
        blocks_by_date=blocks_by_date,
        week_plans=migrate_week_grids(week),
        checklist_blocks_by_date=migrate_checklist_blocks(legacy.get("checklistBlocks") or {}),
        indicators_by_date=indicators_by_date,
        memos_by_date=migrate_memo_blocks(legacy.get("memoBlocks") or {}),
        fine_bounds=legacy.get("fineBounds") or {},
        start_hour=start_hour if isinstance(start_hour, int) else DEFAULT_START_HOUR,
        theme=legacy.get("theme") or "light",
    )
    logger.info(
        f"Migrated legacy state: {sum(len(v) for v in blocks_by_date.values())} day blocks, "
        f"{sum(len(v) for v in state.week_plans.values())} plan blocks"
    )
    return state


def _is_legacy(payload: dict) -> bool:
    return any(key in payload for key in ("day", "dayGrid", "week", "weekGrid"))


def load_state(payload: Union[str, bytes, dict, None]) -> PersistedState:
    """Read a saved payload (JSON text or decoded dict) into a PersistedState.

    Current-schema payloads are validated as-is; legacy payloads are migrated. Unreadable
    payloads and unknown schema versions yield an empty state.
    """
    if payload is None:
        return PersistedState()
    try:
        data = json.loads(payload) if isinstance(payload, (str, bytes)) else payload
        if not isinstance(data, dict):
            raise TypeError(f"expected an object, got {type(data).__name__}")
        if data.get("schemaVersion") == SCHEMA_VERSION:
            return PersistedState.model_validate(data)
        if _is_legacy(data):
            return migrate_v1_to_v2(data)
        logger.warning(f"Unrecognized schema version {data.get('schemaVersion')!r}, starting empty")
        return PersistedState()
    except (ValueError, TypeError, KeyError, AttributeError) as e:
        logger.warning(f"Failed to read saved state, starting empty: {type(e).__name__}: {str(e)}")
        return PersistedState()


def dump_state(state: PersistedState) -> str:
    return json.dumps(state.to_payload())
