"""Painting, erasing, range commits and block edits against the block store.

Every write goes through the overlap engine for the target layer. Paint strokes are
followed by coalescing of touching same-activity, same-source blocks; range commits keep
their own block. Plan layers live in the week collection, so writes are scoped to the
blocks of the target date inside that collection.
"""

import logging
from typing import Callable, List, Optional

from planlog.models.block import Block, BlockSource, Layer, SECONDARY_LAYER
from planlog.models.constants import CELL_MINUTES, MINUTES_PER_DAY, MINUTES_PER_HOUR, MIN_COARSE_SPAN_MIN
from planlog.models.indicator import IndicatorEvent
from planlog.models.tool import DayMode
from planlog.engine.block_store import BlockStore
from planlog.engine.overlap import (
    coalesce_adjacent,
    create_block,
    erase_range,
    new_block_id,
    remove_block,
    resolve_overlaps,
    update_block,
)
from planlog.engine.timeutil import cell_start_minute, clamp_minute, make_cell_id, min_to_time, parse_cell_id, snap10

logger = logging.getLogger(__name__)


def primary_layer(mode) -> Layer:
    return Layer.PLAN if DayMode(mode) == DayMode.PLAN else Layer.EXECUTE


def _write(store: BlockStore, date_iso: str, layer, rewrite: Callable[[List[Block]], List[Block]],
           anchor_id: Optional[str] = None) -> None:
    """Apply ``rewrite`` to the same-date blocks of the collection ``layer`` belongs to.

    With ``anchor_id`` the block with that id is then merged with its touching
    same-activity, same-source neighbours.
    """
    collection = store.collection_for(date_iso, layer)
    same_date = [b for b in collection if b.date_iso == date_iso]
    others = [b for b in collection if b.date_iso != date_iso]
    rewritten = rewrite(same_date)
    if anchor_id is not None:
        rewritten = coalesce_adjacent(rewritten, anchor_id=anchor_id)
    store.replace_collection(date_iso, layer, others + rewritten)


def _claim(store: BlockStore, date_iso: str, layer, start_min: int, end_min: int, activity_id: str,
           source=BlockSource.DRAG, title: Optional[str] = None, coalesce: bool = False) -> Block:
    block = create_block(date_iso, start_min, end_min, activity_id, Layer(layer), source=source, title=title)
    _write(store, date_iso, layer, lambda blocks: resolve_overlaps(blocks, block) + [block],
           anchor_id=block.id if coalesce else None)
    return block


def paint_cell(store: BlockStore, cell_id: str, activity_id: Optional[str], mode=DayMode.EXECUTE) -> bool:
    """Paint one 10-minute cell with the two-slot rule.

    The primary slot (execute, or plan in plan mode) is filled when empty. Otherwise a
    different activity goes to the secondary slot (overlay/planOverlay), replacing whatever
    was there. Painting the activity already held by either slot is a no-op.

    Returns:
        True if the store changed
    """
    if not activity_id:
        return False

    date_iso, hour, col = parse_cell_id(cell_id)
    start = cell_start_minute(hour, col)
    primary = primary_layer(mode)
    secondary = SECONDARY_LAYER[primary]

    current = store.activity_at(date_iso, primary, start)
    if current is None:
        target = primary
    elif current == activity_id or store.activity_at(date_iso, secondary, start) == activity_id:
        return False
    else:
        target = secondary

    _claim(store, date_iso, target, start, start + CELL_MINUTES, activity_id, coalesce=True)
    logger.debug(f"Painted {cell_id} {target.value}={activity_id}")
    return True


def paint_range(store: BlockStore, date_iso: str, start_min: int, end_min: int,
                activity_id: Optional[str], mode=DayMode.EXECUTE) -> bool:
    """Paint every cell in a 10-minute-snapped range with the two-slot rule."""
    if not activity_id:
        return False
    start = max(0, snap10(clamp_minute(start_min)))
    end = min(MINUTES_PER_DAY, snap10(clamp_minute(end_min)))
    changed = False
    for minute in range(start, end, CELL_MINUTES):
        hour, col = divmod(minute, MINUTES_PER_HOUR)
        cell_id = make_cell_id(date_iso, hour, col // CELL_MINUTES)
        changed = paint_cell(store, cell_id, activity_id, mode) or changed
    return changed


def erase_cell(store: BlockStore, cell_id: str, mode=DayMode.EXECUTE) -> bool:
    """Clear both slots of one cell; in execute mode also drop indicators pinned inside it.

    Returns:
        True if anything was removed
    """
    date_iso, hour, col = parse_cell_id(cell_id)
    start = cell_start_minute(hour, col)
    end = start + CELL_MINUTES
    primary = primary_layer(mode)
    changed = False

    for layer in (primary, SECONDARY_LAYER[primary]):
        if store.activity_at(date_iso, layer, start) is None:
            continue
        _write(store, date_iso, layer, lambda blocks, layer=layer: erase_range(blocks, layer, start, end))
        changed = True

    if primary == Layer.EXECUTE:
        indicators = store.indicators(date_iso)
        kept = [i for i in indicators if not (start <= i.at_min < end)]
        if len(kept) != len(indicators):
            store.set_indicators(date_iso, kept)
            changed = True

    if changed:
        logger.debug(f"Erased {cell_id} ({primary.value})")
    return changed


def normalize_range(start_min: int, end_min: int, min_span: int = MIN_COARSE_SPAN_MIN):
    """Clamp a range into the day and correct empty or inverted spans to ``min_span``."""
    start = clamp_minute(start_min)
    end = clamp_minute(end_min)
    if end <= start:
        end = min(MINUTES_PER_DAY, start + min_span)
        if end <= start:
            start = MINUTES_PER_DAY - min_span
    return start, end


def commit_range(
    store: BlockStore,
    date_iso: str,
    layer,
    start_min: int,
    end_min: int,
    activity_id: Optional[str],
    source=BlockSource.DRAG,
    title: Optional[str] = None,
) -> Optional[Block]:
    """Commit one block over ``[start_min, end_min)`` on a layer, replacing whatever it covers.

    Returns:
        The new block, stored under its own id and source, or None without an activity
    """
    if not activity_id:
        logger.debug("Range commit skipped: no active brush")
        return None

    start, end = normalize_range(start_min, end_min)
    block = _claim(store, date_iso, layer, start, end, activity_id, source=source, title=title)
    logger.debug(f"Committed range {min_to_time(start)}-{min_to_time(end)} {Layer(layer).value}={activity_id}")
    return block


def commit_cell_envelope(store: BlockStore, date_iso: str, layer, min_index: int, max_index: int,
                         activity_id: Optional[str]) -> Optional[Block]:
    """Commit the minute range spanned by absolute cell indexes ``min_index..max_index``."""
    lo, hi = min(min_index, max_index), max(min_index, max_index)
    return commit_range(store, date_iso, layer, lo * CELL_MINUTES, (hi + 1) * CELL_MINUTES, activity_id)


def _source_at(store: BlockStore, date_iso: str, layer, activity_id: str, minute: int):
    for block in store.blocks_on(date_iso, layer):
        if block.activity_id == activity_id and block.start_min <= minute < block.end_min:
            return block.source
    return BlockSource.SELECT


def apply_coarse_resize(
    store: BlockStore,
    date_iso: str,
    hour: int,
    layer,
    activity_id: str,
    base_start_col: int,
    base_end_col: int,
    new_start_col: int,
    new_end_col: int,
) -> None:
    """Rewrite a segment's cells from ``base`` span to ``new`` span within one hour-row.

    Cells of the old span falling outside the new one are trimmed. Cells the new span adds
    are claimed for the segment's activity on its layer, under the source of the block at
    the edge they grow from, and merged into that block.
    """
    row_start = hour * MINUTES_PER_HOUR

    def minute(col: int) -> int:
        return row_start + col * CELL_MINUTES

    claims = []
    if new_start_col < base_start_col:
        claims.append((new_start_col, min(base_start_col, new_end_col + 1), base_start_col))
    if new_end_col > base_end_col:
        claims.append((max(base_end_col + 1, new_start_col), new_end_col + 1, base_end_col))
    claims = [
        (first_col, stop_col, _source_at(store, date_iso, layer, activity_id, minute(edge_col)))
        for first_col, stop_col, edge_col in claims
    ]

    trims = []
    if new_start_col > base_start_col:
        trims.append((base_start_col, min(new_start_col, base_end_col + 1)))
    if new_end_col < base_end_col:
        trims.append((max(new_end_col + 1, base_start_col), base_end_col + 1))

    for first_col, stop_col in trims:
        if stop_col <= first_col:
            continue
        start, end = minute(first_col), minute(stop_col)
        _write(store, date_iso, layer, lambda blocks: erase_range(blocks, layer, start, end))

    for first_col, stop_col, source in claims:
        if stop_col <= first_col:
            continue
        _claim(store, date_iso, layer, minute(first_col), minute(stop_col), activity_id,
               source=source, coalesce=True)
    logger.debug(
        f"Resized {date_iso} {hour:02d}h {Layer(layer).value}={activity_id}: "
        f"{base_start_col}-{base_end_col} -> {new_start_col}-{new_end_col}"
    )


def find_block(store: BlockStore, date_iso: str, block_id: str) -> Optional[Block]:
    for block in store.blocks_on(date_iso):
        if block.id == block_id:
            return block
    return None


def delete_block(store: BlockStore, date_iso: str, block_id: str) -> bool:
    """Remove one whole block by id from whichever layer of the date holds it."""
    block = find_block(store, date_iso, block_id)
    if block is None:
        logger.warning(f"Block {block_id} not found on {date_iso}")
        return False
    _write(store, date_iso, block.layer, lambda blocks: remove_block(blocks, block_id))
    logger.debug(f"Deleted block {block_id} ({block.layer})")
    return True


def set_block_title(store: BlockStore, date_iso: str, block_id: str, title: Optional[str]) -> Optional[Block]:
    """Set or clear a block's label; occupancy is unchanged."""
    block = find_block(store, date_iso, block_id)
    if block is None:
        logger.warning(f"Block {block_id} not found on {date_iso}")
        return None
    title = (title or "").strip() or None
    _write(store, date_iso, block.layer, lambda blocks: update_block(blocks, block_id, title=title))
    return block.model_copy(update={"title": title})


def set_indicator(store: BlockStore, date_iso: str, at_min: int, label: str,
                  time_text: Optional[str] = None) -> IndicatorEvent:
    """Pin a label to a minute. An indicator already in the same cell is replaced."""
    minute = clamp_minute(at_min)
    cell = minute // CELL_MINUTES
    indicator = IndicatorEvent(
        id=new_block_id(),
        date_iso=date_iso,
        at_min=minute,
        label=label,
        time_text=time_text or min_to_time(minute),
    )
    kept = [i for i in store.indicators(date_iso) if i.at_min // CELL_MINUTES != cell]
    store.set_indicators(date_iso, kept + [indicator])
    return indicator


def delete_indicator(store: BlockStore, date_iso: str, indicator_id: str) -> bool:
    indicators = store.indicators(date_iso)
    kept = [i for i in indicators if i.id != indicator_id]
    store.set_indicators(date_iso, kept)
    return len(kept) != len(indicators)
