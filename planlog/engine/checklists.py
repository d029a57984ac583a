"""Checklist block operations.

Checklist blocks are independent of the block store's overlap rules; they may overlap
blocks and each other.
"""

import logging
import uuid
from typing import Optional, Tuple

from planlog.models.block import Layer
from planlog.models.checklist import ChecklistBlock, ChecklistItem
from planlog.models.constants import DEFAULT_CHECKLIST_SPAN_MIN, MIN_COARSE_SPAN_MIN, MINUTES_PER_DAY
from planlog.engine.block_store import BlockStore
from planlog.engine.timeutil import clamp_minute, snap10, time_to_min

logger = logging.getLogger(__name__)


def find_checklist(store: BlockStore, date_iso: str, layer, minute: int) -> Optional[ChecklistBlock]:
    """The checklist on ``layer`` whose span covers ``minute``, if any."""
    layer_value = Layer(layer).value
    for checklist in store.checklists(date_iso):
        if checklist.layer == layer_value and checklist.covers(minute):
            return checklist
    return None


def get_checklist(store: BlockStore, date_iso: str, checklist_id: str) -> Optional[ChecklistBlock]:
    for checklist in store.checklists(date_iso):
        if checklist.id == checklist_id:
            return checklist
    return None


def open_checklist_at(
    store: BlockStore,
    date_iso: str,
    layer,
    minute: int,
    activity_id: Optional[str] = None,
) -> Tuple[ChecklistBlock, bool]:
    """Open the checklist covering a time point, creating a default one when there is none.

    Returns:
        (checklist, created)
    """
    minute = clamp_minute(minute)
    existing = find_checklist(store, date_iso, layer, minute)
    if existing is not None:
        return existing, False

    start = min(minute, MINUTES_PER_DAY - DEFAULT_CHECKLIST_SPAN_MIN)
    checklist = ChecklistBlock(
        id=str(uuid.uuid4()),
        date_iso=date_iso,
        start_min=start,
        end_min=min(MINUTES_PER_DAY, start + DEFAULT_CHECKLIST_SPAN_MIN),
        layer=Layer(layer),
        activity_id=activity_id,
    )
    store.set_checklists(date_iso, store.checklists(date_iso) + [checklist])
    logger.debug(f"Created checklist {checklist.id} at {date_iso} {start} ({checklist.layer})")
    return checklist, True


def _replace(store: BlockStore, date_iso: str, checklist_id: str, **updates) -> Optional[ChecklistBlock]:
    updated = None
    checklists = []
    for checklist in store.checklists(date_iso):
        if checklist.id == checklist_id:
            checklist = checklist.model_copy(update=updates)
            updated = checklist
        checklists.append(checklist)
    if updated is None:
        logger.warning(f"Checklist {checklist_id} not found on {date_iso}")
        return None
    store.set_checklists(date_iso, checklists)
    return updated


def add_item(store: BlockStore, date_iso: str, checklist_id: str, text: str) -> Optional[ChecklistBlock]:
    checklist = get_checklist(store, date_iso, checklist_id)
    if checklist is None:
        return None
    item = ChecklistItem(id=str(uuid.uuid4()), text=text.strip())
    return _replace(store, date_iso, checklist_id, items=checklist.items + [item])


def toggle_item(store: BlockStore, date_iso: str, checklist_id: str, item_id: str) -> Optional[ChecklistBlock]:
    checklist = get_checklist(store, date_iso, checklist_id)
    if checklist is None:
        return None
    items = [
        item.model_copy(update={"done": not item.done}) if item.id == item_id else item
        for item in checklist.items
    ]
    return _replace(store, date_iso, checklist_id, items=items)


def remove_item(store: BlockStore, date_iso: str, checklist_id: str, item_id: str) -> Optional[ChecklistBlock]:
    checklist = get_checklist(store, date_iso, checklist_id)
    if checklist is None:
        return None
    return _replace(store, date_iso, checklist_id, items=[i for i in checklist.items if i.id != item_id])


def update_span(store: BlockStore, date_iso: str, checklist_id: str, start_text: str, end_text: str) -> Optional[ChecklistBlock]:
    """Set a checklist's span from "HH:MM" texts, snapped to 10 minutes (minimum 10 minutes)."""
    start = min(snap10(time_to_min(start_text)), MINUTES_PER_DAY - MIN_COARSE_SPAN_MIN)
    end = min(snap10(time_to_min(end_text)), MINUTES_PER_DAY)
    if end <= start:
        end = start + MIN_COARSE_SPAN_MIN
    return _replace(store, date_iso, checklist_id, start_min=start, end_min=end)


def delete_checklist(store: BlockStore, date_iso: str, checklist_id: str) -> bool:
    checklists = store.checklists(date_iso)
    kept = [c for c in checklists if c.id != checklist_id]
    store.set_checklists(date_iso, kept)
    return len(kept) != len(checklists)
