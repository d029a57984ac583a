"""Hour memo operations.

A memo slot is identified by (date, layer, hour, activity, slot). On execute the activity
is part of the slot and each activity gets two slots per hour; on overlay the hour has a
single slot whatever the activity. Like checklists, memos never touch block occupancy.
"""

import logging
from datetime import datetime
from typing import List, Optional, Tuple

from planlog.models.block import Layer
from planlog.models.memo import MemoBlock
from planlog.engine.block_store import BlockStore

logger = logging.getLogger(__name__)

NO_ACTIVITY = "__NA__"
WHOLE_HOUR = "__HOUR__"
EXECUTE_SLOTS = (0, 1)


def _slot_activity(layer, activity_id: Optional[str]) -> str:
    if Layer(layer) == Layer.OVERLAY:
        return WHOLE_HOUR
    return activity_id or NO_ACTIVITY


def _slot_number(layer, slot: int) -> int:
    return 0 if Layer(layer) == Layer.OVERLAY else slot


def memo_id(date_iso: str, layer, hour: int, activity_id: Optional[str] = None, slot: int = 0) -> str:
    """Stable id of a memo slot."""
    layer_value = Layer(layer).value
    key = _slot_activity(layer, activity_id)
    return f"memo_{date_iso}_{layer_value}_h{hour}_{key}_{_slot_number(layer, slot)}"


def _same_slot(memo: MemoBlock, layer, hour: int, activity_id: Optional[str], slot: int) -> bool:
    if memo.layer != Layer(layer).value or memo.hour != hour or memo.slot != _slot_number(layer, slot):
        return False
    if Layer(layer) == Layer.OVERLAY:
        return True
    return (memo.activity_id or NO_ACTIVITY) == (activity_id or NO_ACTIVITY)


def find_memo(store: BlockStore, date_iso: str, layer, hour: int,
              activity_id: Optional[str] = None, slot: int = 0) -> Optional[MemoBlock]:
    for memo in store.memos(date_iso):
        if _same_slot(memo, layer, hour, activity_id, slot):
            return memo
    return None


def memos_for_hour(store: BlockStore, date_iso: str, hour: int) -> List[MemoBlock]:
    return [m for m in store.memos(date_iso) if m.hour == hour]


def next_free_slot(store: BlockStore, date_iso: str, layer, hour: int, activity_id: Optional[str]) -> int:
    """First execute slot without text for the activity; slot 0 again when both are written."""
    if Layer(layer) == Layer.OVERLAY or not activity_id:
        return 0
    for slot in EXECUTE_SLOTS:
        memo = find_memo(store, date_iso, layer, hour, activity_id, slot)
        if memo is None or memo.is_blank:
            return slot
    return 0


def open_memo(store: BlockStore, date_iso: str, layer, hour: int,
              activity_id: Optional[str] = None, slot: int = 0) -> Tuple[MemoBlock, bool]:
    """The memo in a slot, or an unsaved draft for it.

    Returns:
        (memo, is_new); drafts are stored only by ``save_memo``
    """
    existing = find_memo(store, date_iso, layer, hour, activity_id, slot)
    if existing is not None:
        return existing, False
    draft = MemoBlock(
        id=memo_id(date_iso, layer, hour, activity_id, slot),
        date_iso=date_iso,
        layer=Layer(layer),
        hour=hour,
        activity_id=activity_id if Layer(layer) == Layer.EXECUTE else None,
        slot=_slot_number(layer, slot),
    )
    return draft, True


def open_memo_at(store: BlockStore, date_iso: str, layer, hour: int,
                 activity_id: Optional[str]) -> Tuple[MemoBlock, bool]:
    """Open the memo a memo-tool press on an activity should edit next."""
    slot = next_free_slot(store, date_iso, layer, hour, activity_id)
    return open_memo(store, date_iso, layer, hour, activity_id, slot)


def save_memo(store: BlockStore, memo: MemoBlock, text: str) -> MemoBlock:
    """Store ``memo`` with new text, replacing whatever held its slot."""
    saved = memo.model_copy(update={"text": text, "updated_at": datetime.utcnow()})
    kept = [
        m for m in store.memos(memo.date_iso)
        if m.id != memo.id and not _same_slot(m, memo.layer, memo.hour, memo.activity_id, memo.slot)
    ]
    store.set_memos(memo.date_iso, kept + [saved])
    logger.debug(f"Saved memo {saved.id}")
    return saved


def delete_memo(store: BlockStore, date_iso: str, target_id: str) -> bool:
    memos = store.memos(date_iso)
    kept = [m for m in memos if m.id != target_id]
    store.set_memos(date_iso, kept)
    return len(kept) != len(memos)
