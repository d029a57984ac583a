"""Overlap resolution for planlog.

Painter's algorithm over time ranges: a candidate range claims its span on one layer and
every existing block of that layer is trimmed, split or dropped to make room. The
functions here are pure and total; they never raise for well-formed blocks.
"""

import logging
import uuid
from dataclasses import dataclass
from typing import Iterable, List, Optional

from planlog.models.block import Block, BlockSource

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Candidate:
    """A range that is about to claim ``[start_min, end_min)`` on ``layer``."""

    start_min: int
    end_min: int
    layer: str


def new_block_id() -> str:
    return str(uuid.uuid4())


def create_block(
    date_iso: str,
    start_min: int,
    end_min: int,
    activity_id: str,
    layer,
    source=BlockSource.DRAG,
    title: Optional[str] = None,
) -> Block:
    """Create a new Block with a fresh id."""
    return Block(
        id=new_block_id(),
        date_iso=date_iso,
        start_min=start_min,
        end_min=end_min,
        activity_id=activity_id,
        layer=layer,
        source=source,
        title=title,
    )


def detect_overlap(candidate, existing: Iterable[Block], exclude_id: Optional[str] = None) -> List[Block]:
    """Blocks on the candidate's layer that share at least one minute with it."""
    return [
        b for b in existing
        if b.layer == candidate.layer
        and b.id != exclude_id
        and candidate.start_min < b.end_min
        and candidate.end_min > b.start_min
    ]


def resolve_overlaps(existing: Iterable[Block], candidate, exclude_id: Optional[str] = None) -> List[Block]:
    """Rewrite ``existing`` so nothing on the candidate's layer overlaps the candidate.

    Per block on the same layer (other than ``exclude_id``):
    - no intersection: kept unchanged
    - fully covered: dropped
    - tail covered: left remainder kept
    - head covered: right remainder kept
    - candidate strictly inside: split; the left part keeps the original id and the
      right part gets a new id

    Args:
        existing: Current blocks (any layers)
        candidate: Object with ``start_min``, ``end_min`` and ``layer``
        exclude_id: Block id to leave untouched

    Returns:
        New list of blocks; input blocks are never mutated
    """
    start, end = candidate.start_min, candidate.end_min
    result: List[Block] = []

    for block in existing:
        if block.layer != candidate.layer or block.id == exclude_id:
            result.append(block)
            continue

        # No intersection
        if start >= block.end_min or end <= block.start_min:
            result.append(block)
            continue

        # Full overwrite
        if start <= block.start_min and end >= block.end_min:
            continue

        # Tail covered: keep the left remainder
        if start > block.start_min and end >= block.end_min:
            result.append(block.model_copy(update={"end_min": start}))
            continue

        # Head covered: keep the right remainder
        if start <= block.start_min and end < block.end_min:
            result.append(block.model_copy(update={"start_min": end}))
            continue

        # Strictly inside: split in two
        right_id = new_block_id()
        result.append(block.model_copy(update={"end_min": start}))
        result.append(block.model_copy(update={"id": right_id, "start_min": end}))
        logger.debug(f"Split block {block.id} at [{start}, {end}); right remainder {right_id}")

    return result


def insert_block(existing: Iterable[Block], block: Block) -> List[Block]:
    """Add ``block``, resolving any overlap on its layer first."""
    return resolve_overlaps(existing, block) + [block]


def erase_range(existing: Iterable[Block], layer, start_min: int, end_min: int) -> List[Block]:
    """Clear ``[start_min, end_min)`` on one layer."""
    return resolve_overlaps(existing, Candidate(start_min=start_min, end_min=end_min, layer=layer))


def remove_block(existing: Iterable[Block], block_id: str) -> List[Block]:
    return [b for b in existing if b.id != block_id]


def update_block(existing: Iterable[Block], block_id: str, **updates) -> List[Block]:
    return [b.model_copy(update=updates) if b.id == block_id else b for b in existing]


def coalesce_adjacent(blocks: Iterable[Block], anchor_id: Optional[str] = None) -> List[Block]:
    """Merge touching or overlapping blocks of the same date, layer, activity and source.

    With ``anchor_id`` only the run containing that block is merged; every other block is
    left as stored. The earliest block of a merged run keeps its id. Output is ordered by
    start minute.
    """
    ordered = sorted(blocks, key=lambda b: (b.start_min, b.end_min))
    merged: List[Block] = []
    open_runs = {}  # (date_iso, layer, activity_id, source) -> index into merged
    anchored = set()

    for block in ordered:
        run_key = (block.date_iso, block.layer, block.activity_id, block.source)
        idx = open_runs.get(run_key)
        if (
            idx is not None
            and merged[idx].end_min >= block.start_min
            and (anchor_id is None or idx in anchored or block.id == anchor_id)
        ):
            prev = merged[idx]
            if block.end_min > prev.end_min:
                merged[idx] = prev.model_copy(update={"end_min": block.end_min})
            if block.id == anchor_id:
                anchored.add(idx)
            continue
        open_runs[run_key] = len(merged)
        if block.id == anchor_id:
            anchored.add(len(merged))
        merged.append(block)

    return merged
