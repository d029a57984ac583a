"""Segment compositor.

Derives render-ready segments from stored blocks (or from a legacy per-cell grid) for one
date. Each hour-row is segmented independently; a segment never crosses a row boundary.
Both sources go through the same run-merge over ``(column, activity_id)`` pairs.
"""

import logging
from typing import Callable, Collection, Dict, Iterable, List, Optional, Sequence, Tuple

from planlog.models.block import Block, Layer, DAY_LAYERS, PLAN_LAYERS
from planlog.models.constants import CELL_MINUTES, CELLS_PER_DAY, CELLS_PER_HOUR, HOURS_PER_DAY
from planlog.models.segment import Segment
from planlog.engine.timeutil import cell_index, make_cell_id, parse_cell_id, row_for_hour

logger = logging.getLogger(__name__)

# (hour, col) -> activity id or None
CellLookup = Callable[[int, int], Optional[str]]

# Legacy per-cell grid: cell id -> {layer: activity_id}
CellGrid = Dict[str, Dict[str, str]]


def block_cells(block: Block) -> range:
    """Absolute cell indexes (0..143) a block occupies."""
    first = block.start_min // CELL_MINUTES
    last = (block.end_min - 1) // CELL_MINUTES
    return range(first, last + 1)


def occupancy(blocks: Iterable[Block], layer, date_iso: Optional[str] = None) -> Dict[int, str]:
    """Map absolute cell index -> activity id for one layer.

    When two blocks touch the same cell (sub-cell boundaries), the later-starting block wins.
    """
    layer_value = Layer(layer).value
    cells: Dict[int, str] = {}
    selected = [
        b for b in blocks
        if b.layer == layer_value and (date_iso is None or b.date_iso == date_iso)
    ]
    for block in sorted(selected, key=lambda b: b.start_min):
        for idx in block_cells(block):
            cells[idx] = block.activity_id
    return cells


def block_lookup(blocks: Iterable[Block], layer, date_iso: Optional[str] = None) -> CellLookup:
    cells = occupancy(blocks, layer, date_iso)
    return lambda hour, col: cells.get(cell_index(hour, col))


def grid_lookup(grid: CellGrid, date_iso: str, layer) -> CellLookup:
    layer_value = Layer(layer).value

    def _lookup(hour: int, col: int) -> Optional[str]:
        cell = grid.get(make_cell_id(date_iso, hour, col))
        return cell.get(layer_value) if cell else None

    return _lookup


def merge_runs(columns: Iterable[Tuple[int, Optional[str]]]) -> List[Tuple[int, int, str]]:
    """Group consecutive columns holding the same activity into ``(start_col, end_col, activity)``.

    A column with no activity (or a gap in column numbers) terminates the current run.
    """
    runs: List[Tuple[int, int, str]] = []
    run_start = run_end = None
    run_activity = None

    for col, activity in columns:
        if activity is not None and activity == run_activity and col == run_end + 1:
            run_end = col
            continue
        if run_activity is not None:
            runs.append((run_start, run_end, run_activity))
        if activity is None:
            run_start = run_end = run_activity = None
        else:
            run_start = run_end = col
            run_activity = activity

    if run_activity is not None:
        runs.append((run_start, run_end, run_activity))
    return runs


def _neighbour(hour: int, col: int, step: int) -> Tuple[int, int]:
    idx = (cell_index(hour, col) + step) % CELLS_PER_DAY
    return idx // CELLS_PER_HOUR, idx % CELLS_PER_HOUR


def compose_segments(
    lookup: CellLookup,
    layer,
    start_hour: int,
    known_activities: Optional[Collection[str]] = None,
) -> List[Segment]:
    """Build the segments of one layer from a cell lookup.

    Cells whose activity is not in ``known_activities`` are treated as empty. Edge rounding
    compares against the neighbouring cell, wrapping to column 5 of the previous hour (or
    column 0 of the next hour) at the row edges.
    """
    layer_value = Layer(layer).value

    def _visible(hour: int, col: int) -> Optional[str]:
        activity = lookup(hour, col)
        if activity is None:
            return None
        if known_activities is not None and activity not in known_activities:
            return None
        return activity

    segments: List[Segment] = []
    for row in range(HOURS_PER_DAY):
        hour = (start_hour + row) % HOURS_PER_DAY
        columns = ((col, _visible(hour, col)) for col in range(CELLS_PER_HOUR))
        for start_col, end_col, activity in merge_runs(columns):
            prev_activity = _visible(*_neighbour(hour, start_col, -1))
            next_activity = _visible(*_neighbour(hour, end_col, 1))
            segments.append(Segment(
                row=row,
                start_col=start_col,
                end_col=end_col,
                layer=layer_value,
                activity_id=activity,
                round_start=prev_activity != activity,
                round_end=next_activity != activity,
            ))
    return segments


def build_segments(
    blocks: Iterable[Block],
    date_iso: str,
    start_hour: int,
    known_activities: Optional[Collection[str]] = None,
    layers: Sequence = DAY_LAYERS,
) -> List[Segment]:
    """Segments for every requested layer of one date, ordered by layer then row."""
    blocks = list(blocks)
    segments: List[Segment] = []
    for layer in layers:
        lookup = block_lookup(blocks, layer, date_iso)
        segments.extend(compose_segments(lookup, layer, start_hour, known_activities))
    return segments


def build_plan_segments(
    week_blocks: Iterable[Block],
    date_iso: str,
    start_hour: int,
    known_activities: Optional[Collection[str]] = None,
) -> List[Segment]:
    """Project the week plan onto one day of that week."""
    return build_segments(week_blocks, date_iso, start_hour, known_activities, layers=PLAN_LAYERS)


def build_grid_segments(
    grid: CellGrid,
    date_iso: str,
    start_hour: int,
    known_activities: Optional[Collection[str]] = None,
    layers: Sequence = DAY_LAYERS,
) -> List[Segment]:
    """Segments straight from a legacy per-cell grid."""
    segments: List[Segment] = []
    for layer in layers:
        segments.extend(compose_segments(grid_lookup(grid, date_iso, layer), layer, start_hour, known_activities))
    return segments


def blocks_to_grid(blocks: Iterable[Block]) -> CellGrid:
    """Project blocks back onto a per-cell grid (cell id -> {layer: activity})."""
    blocks = list(blocks)
    grid: CellGrid = {}
    for date_iso in sorted({b.date_iso for b in blocks}):
        for layer in {b.layer for b in blocks if b.date_iso == date_iso}:
            for idx, activity in occupancy(blocks, layer, date_iso).items():
                hour, col = divmod(idx, CELLS_PER_HOUR)
                grid.setdefault(make_cell_id(date_iso, hour, col), {})[layer] = activity
    return grid


def segment_at(
    segments: Iterable[Segment],
    row: int,
    col: int,
    layers: Sequence = (Layer.EXECUTE, Layer.OVERLAY),
) -> Optional[Segment]:
    """The segment covering ``(row, col)``, checking ``layers`` in priority order."""
    segments = list(segments)
    for layer in layers:
        layer_value = Layer(layer).value
        for segment in segments:
            if segment.row == row and segment.layer == layer_value and segment.contains_col(col):
                return segment
    return None


def segment_at_cell(segments: Iterable[Segment], cell_id: str, start_hour: int, layers: Sequence = (Layer.EXECUTE, Layer.OVERLAY)) -> Optional[Segment]:
    _, hour, col = parse_cell_id(cell_id)
    return segment_at(segments, row_for_hour(hour, start_hour), col, layers)
