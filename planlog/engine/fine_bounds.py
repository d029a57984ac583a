"""Minute-precision bounds layered over a segment's coarse window.

Fine bounds are cosmetic: they never change which cells are occupied. They are keyed by
the segment signature and always stay inside ``[start_col*10, (end_col+1)*10]``.
"""

import logging
from typing import Optional

from planlog.models.constants import CELL_MINUTES, MIN_FINE_SPAN_MIN
from planlog.models.segment import FineBounds, SegmentSignature
from planlog.engine.block_store import BlockStore
from planlog.engine.timeutil import clamp, snap10

logger = logging.getLogger(__name__)

START = "start"
END = "end"
APPLY_MINUTE = "minute"
APPLY_SNAP = "snap"


def signature_for(date_iso: str, hour: int, layer, activity_id: str, start_col: int, end_col: int) -> SegmentSignature:
    return SegmentSignature(
        date_iso=date_iso,
        hour=hour,
        layer=getattr(layer, "value", layer),
        activity_id=activity_id,
        start_col=start_col,
        end_col=end_col,
    )


def default_fine_bounds(start_col: int, end_col: int) -> FineBounds:
    return FineBounds(start_minute=start_col * CELL_MINUTES, end_minute=(end_col + 1) * CELL_MINUTES)


def effective_fine_bounds(store: BlockStore, signature: SegmentSignature) -> FineBounds:
    """Stored fine bounds clamped into the coarse window, or the coarse window itself."""
    coarse = default_fine_bounds(signature.start_col, signature.end_col)
    stored = store.get_fine_bounds(signature.key())
    if stored is None:
        return coarse

    start = clamp(stored.start_minute, coarse.start_minute, coarse.end_minute - MIN_FINE_SPAN_MIN)
    end = clamp(stored.end_minute, start + MIN_FINE_SPAN_MIN, coarse.end_minute)
    return FineBounds(start_minute=start, end_minute=end)


def clamp_fine_value(side: str, minute: int, start_col: int, end_col: int, current: FineBounds) -> int:
    """Clamp a dragged fine value so it stays inside the coarse window and off the opposite bound."""
    minute = int(round(minute))
    if side == START:
        return clamp(minute, start_col * CELL_MINUTES, current.end_minute - MIN_FINE_SPAN_MIN)
    return clamp(minute, current.start_minute + MIN_FINE_SPAN_MIN, (end_col + 1) * CELL_MINUTES)


def apply_fine_value(
    store: BlockStore,
    signature: SegmentSignature,
    side: str,
    minute: int,
    mode: str = APPLY_MINUTE,
) -> FineBounds:
    """Commit a pending fine value for one side of a segment.

    ``mode`` is ``"minute"`` to keep the exact value or ``"snap"`` to round it to the nearest
    10-minute boundary first. An inverted result is corrected to a one-minute span.
    """
    value = snap10(minute) if mode == APPLY_SNAP else int(round(minute))
    min_start = signature.start_col * CELL_MINUTES
    max_end = (signature.end_col + 1) * CELL_MINUTES
    current = effective_fine_bounds(store, signature)

    next_start, next_end = current.start_minute, current.end_minute
    if side == START:
        next_start = min(max(min_start, value), max_end - MIN_FINE_SPAN_MIN)
    else:
        next_end = max(min(max_end, value), min_start + MIN_FINE_SPAN_MIN)
    if next_end <= next_start:
        next_end = min(max_end, next_start + MIN_FINE_SPAN_MIN)
        next_start = min(next_start, next_end - MIN_FINE_SPAN_MIN)

    bounds = FineBounds(start_minute=next_start, end_minute=next_end)
    store.set_fine_bounds(signature.key(), bounds)
    logger.debug(f"Fine bounds {signature.key()} -> {next_start}-{next_end} ({mode})")
    return bounds


def reset_fine_bounds(store: BlockStore, old: Optional[SegmentSignature], new: SegmentSignature) -> FineBounds:
    """Drop the old signature's fine bounds and seed the new signature with its coarse default."""
    if old is not None:
        store.delete_fine_bounds(old.key())
    bounds = default_fine_bounds(new.start_col, new.end_col)
    store.set_fine_bounds(new.key(), bounds)
    return bounds
