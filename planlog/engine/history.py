"""Snapshot-based undo/redo for the active date and week."""

import logging
from dataclasses import dataclass, field
from typing import List, Optional

from planlog.models.block import Block
from planlog.models.constants import HISTORY_LIMIT
from planlog.engine.block_store import BlockStore
from planlog.engine.timeutil import week_key_for

logger = logging.getLogger(__name__)


@dataclass
class HistorySnapshot:
    """Deep copy of the active date's blocks, its week plan, and the active tool/brush."""

    date_iso: str
    day_blocks: List[Block] = field(default_factory=list)
    week_blocks: List[Block] = field(default_factory=list)
    tool: Optional[str] = None
    brush: Optional[str] = None

    @property
    def week_key(self) -> str:
        return week_key_for(self.date_iso)


class HistoryManager:
    """Bounded undo/redo stacks of HistorySnapshot.

    The manager only records and restores; callers decide when a mutation begins and call
    ``push_snapshot`` before it.
    """

    def __init__(self, store: BlockStore, limit: int = HISTORY_LIMIT):
        self.store = store
        self.limit = max(1, limit)
        self.undo_stack: List[HistorySnapshot] = []
        self.redo_stack: List[HistorySnapshot] = []

    def capture(self, date_iso: str, tool: Optional[str] = None, brush: Optional[str] = None) -> HistorySnapshot:
        return HistorySnapshot(
            date_iso=date_iso,
            day_blocks=[b.model_copy(deep=True) for b in self.store.day_blocks(date_iso)],
            week_blocks=[b.model_copy(deep=True) for b in self.store.week_blocks(week_key_for(date_iso))],
            tool=tool,
            brush=brush,
        )

    def restore(self, snapshot: HistorySnapshot) -> None:
        self.store.set_day_blocks(snapshot.date_iso, [b.model_copy(deep=True) for b in snapshot.day_blocks])
        self.store.set_week_blocks(snapshot.week_key, [b.model_copy(deep=True) for b in snapshot.week_blocks])

    def push_snapshot(self, date_iso: str, tool: Optional[str] = None, brush: Optional[str] = None) -> HistorySnapshot:
        """Record the current state before a mutation. Clears the redo stack."""
        snapshot = self.capture(date_iso, tool, brush)
        self.undo_stack.append(snapshot)
        if len(self.undo_stack) > self.limit:
            evicted = len(self.undo_stack) - self.limit
            del self.undo_stack[:evicted]
            logger.debug(f"History limit {self.limit} reached, evicted {evicted} snapshot(s)")
        self.redo_stack.clear()
        logger.debug(f"Pushed snapshot for {date_iso} (undo depth {len(self.undo_stack)})")
        return snapshot

    def discard_last_snapshot(self) -> Optional[HistorySnapshot]:
        """Drop the most recent snapshot when the gesture it guarded turned out not to mutate."""
        if not self.undo_stack:
            return None
        return self.undo_stack.pop()

    def can_undo(self) -> bool:
        return bool(self.undo_stack)

    def can_redo(self) -> bool:
        return bool(self.redo_stack)

    def undo(self, tool: Optional[str] = None, brush: Optional[str] = None) -> Optional[HistorySnapshot]:
        """Restore the last snapshot; the current state moves to the redo stack.

        ``tool``/``brush`` are the current values, saved with the redo entry.

        Returns:
            The restored snapshot (carrying the tool/brush to reinstate), or None if empty
        """
        if not self.undo_stack:
            return None
        snapshot = self.undo_stack.pop()
        self.redo_stack.append(self.capture(snapshot.date_iso, tool, brush))
        self.restore(snapshot)
        logger.debug(f"Undo to snapshot for {snapshot.date_iso} (undo depth {len(self.undo_stack)})")
        return snapshot

    def redo(self, tool: Optional[str] = None, brush: Optional[str] = None) -> Optional[HistorySnapshot]:
        if not self.redo_stack:
            return None
        snapshot = self.redo_stack.pop()
        self.undo_stack.append(self.capture(snapshot.date_iso, tool, brush))
        self.restore(snapshot)
        logger.debug(f"Redo to snapshot for {snapshot.date_iso} (redo depth {len(self.redo_stack)})")
        return snapshot

    def clear(self) -> None:
        self.undo_stack.clear()
        self.redo_stack.clear()
