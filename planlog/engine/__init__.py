"""Interval engine for planlog."""

from planlog.engine.block_store import BlockStore
from planlog.engine.history import HistoryManager, HistorySnapshot
from planlog.engine.memos import delete_memo, open_memo, open_memo_at, save_memo
from planlog.engine.overlap import (
    Candidate,
    coalesce_adjacent,
    detect_overlap,
    erase_range,
    insert_block,
    resolve_overlaps,
)
from planlog.engine.painting import (
    apply_coarse_resize,
    commit_range,
    delete_block,
    erase_cell,
    paint_cell,
    paint_range,
    set_block_title,
)
from planlog.engine.segments import (
    build_grid_segments,
    build_plan_segments,
    build_segments,
    merge_runs,
    segment_at_cell,
)
from planlog.engine.summary import daily_summary
from planlog.engine.voice import apply_voice_confirmation

__all__ = [
    "BlockStore",
    "HistoryManager",
    "HistorySnapshot",
    "delete_memo",
    "open_memo",
    "open_memo_at",
    "save_memo",
    "Candidate",
    "coalesce_adjacent",
    "detect_overlap",
    "erase_range",
    "insert_block",
    "resolve_overlaps",
    "apply_coarse_resize",
    "commit_range",
    "delete_block",
    "erase_cell",
    "paint_cell",
    "paint_range",
    "set_block_title",
    "build_grid_segments",
    "build_plan_segments",
    "build_segments",
    "merge_runs",
    "segment_at_cell",
    "daily_summary",
    "apply_voice_confirmation",
]
