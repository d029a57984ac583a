"""Tests for hour memos and the memo tool."""

import pytest
from pydantic import ValidationError

from planlog.engine.block_store import BlockStore
from planlog.engine.memos import (
    delete_memo,
    find_memo,
    memo_id,
    memos_for_hour,
    next_free_slot,
    open_memo,
    open_memo_at,
    save_memo,
)
from planlog.engine.painting import paint_cell, paint_range
from planlog.models.block import Layer
from planlog.models.memo import MemoBlock
from planlog.models.tool import Tool

DATE = "2024-01-03"


def cell(hour, col, date_iso=DATE):
    return f"{date_iso}|{hour:02d}|{col}"


class TestMemos:
    """Test memo slots and CRUD."""

    def test_open_returns_unsaved_draft(self, store):
        """Test that opening an empty slot gives a draft without storing it."""
        memo, created = open_memo(store, DATE, Layer.EXECUTE, 6, "a")
        assert created is True
        assert memo.id == memo_id(DATE, Layer.EXECUTE, 6, "a", 0)
        assert (memo.layer, memo.hour, memo.activity_id, memo.slot, memo.text) == ("execute", 6, "a", 0, "")
        assert store.memos(DATE) == []

    def test_save_then_reopen(self, store):
        """Test that a saved memo is found again in its slot."""
        draft, _ = open_memo(store, DATE, Layer.EXECUTE, 6, "a")
        saved = save_memo(store, draft, "review notes")
        again, created = open_memo(store, DATE, Layer.EXECUTE, 6, "a")
        assert created is False
        assert again == saved
        assert again.text == "review notes"

    def test_save_replaces_same_slot(self, store):
        """Test that saving a slot twice keeps one memo with the latest text."""
        draft, _ = open_memo(store, DATE, Layer.EXECUTE, 6, "a")
        save_memo(store, draft, "first")
        save_memo(store, draft, "second")
        assert [m.text for m in store.memos(DATE)] == ["second"]

    def test_execute_slots_per_activity(self, store):
        """Test that each execute activity gets two slots in an hour."""
        assert next_free_slot(store, DATE, Layer.EXECUTE, 6, "a") == 0
        save_memo(store, open_memo(store, DATE, Layer.EXECUTE, 6, "a", 0)[0], "one")
        assert next_free_slot(store, DATE, Layer.EXECUTE, 6, "a") == 1
        save_memo(store, open_memo(store, DATE, Layer.EXECUTE, 6, "a", 1)[0], "two")
        assert next_free_slot(store, DATE, Layer.EXECUTE, 6, "a") == 0
        assert next_free_slot(store, DATE, Layer.EXECUTE, 6, "b") == 0

    def test_blank_slot_is_free(self, store):
        """Test that a memo saved with blank text does not use up its slot."""
        save_memo(store, open_memo(store, DATE, Layer.EXECUTE, 6, "a")[0], "   ")
        assert next_free_slot(store, DATE, Layer.EXECUTE, 6, "a") == 0

    def test_overlay_has_one_memo_per_hour(self, store):
        """Test that overlay memos ignore the activity and the slot."""
        first, _ = open_memo(store, DATE, Layer.OVERLAY, 6, "a")
        save_memo(store, first, "stretch")
        again, created = open_memo(store, DATE, Layer.OVERLAY, 6, "b", slot=1)
        assert created is False
        assert again.text == "stretch"
        assert first.activity_id is None
        assert first.slot == 0

    def test_open_memo_at_picks_next_slot(self, store):
        """Test that the memo tool entry point opens the next free slot."""
        save_memo(store, open_memo(store, DATE, Layer.EXECUTE, 6, "a")[0], "one")
        memo, created = open_memo_at(store, DATE, Layer.EXECUTE, 6, "a")
        assert created is True
        assert memo.slot == 1

    def test_memos_for_hour(self, store):
        """Test listing the memos anchored to one hour."""
        save_memo(store, open_memo(store, DATE, Layer.EXECUTE, 6, "a")[0], "six")
        save_memo(store, open_memo(store, DATE, Layer.OVERLAY, 7)[0], "seven")
        assert [m.text for m in memos_for_hour(store, DATE, 7)] == ["seven"]

    def test_delete(self, store):
        """Test deleting a memo by id."""
        saved = save_memo(store, open_memo(store, DATE, Layer.EXECUTE, 6, "a")[0], "x")
        assert delete_memo(store, DATE, saved.id) is True
        assert find_memo(store, DATE, Layer.EXECUTE, 6, "a") is None
        assert DATE not in store.memos_by_date
        assert delete_memo(store, DATE, saved.id) is False

    def test_memos_ignore_blocks(self, store):
        """Test that memos never change block occupancy."""
        paint_range(store, DATE, 360, 420, "a")
        save_memo(store, open_memo(store, DATE, Layer.EXECUTE, 6, "a")[0], "x")
        assert [(b.start_min, b.end_min) for b in store.day_blocks(DATE)] == [(360, 420)]

    def test_plan_layer_rejected(self):
        """Test that memos only annotate execute and overlay."""
        with pytest.raises(ValidationError):
            MemoBlock(id="m", date_iso=DATE, layer=Layer.PLAN, hour=6)

    def test_store_round_trip(self, store):
        """Test that memos survive the store's state conversion."""
        save_memo(store, open_memo(store, DATE, Layer.OVERLAY, 6)[0], "kept")
        restored = BlockStore.from_state(store.to_state())
        assert [m.text for m in restored.memos(DATE)] == ["kept"]


class TestMemoTool:
    """Test the memo tool gesture route."""

    def test_press_on_activity_opens_memo(self, session, pointer, opened_memos):
        """Test that a memo-tool press on an execute segment opens that activity's memo."""
        paint_range(session.store, DATE, 360, 420, "a")
        session.set_tool("memo")
        session.gestures.pointer_down(pointer(cell(6, 2)))

        ((memo, created),) = opened_memos
        assert created is True
        assert (memo.layer, memo.hour, memo.activity_id) == ("execute", 6, "a")
        assert session.gestures.state.pointer_id is None

    def test_press_on_empty_cell_opens_nothing(self, session, pointer, opened_memos):
        """Test that a memo-tool press on an empty cell is swallowed."""
        session.set_tool(Tool.MEMO)
        session.gestures.pointer_down(pointer(cell(6, 0)))
        assert opened_memos == []
        assert session.blocks() == []
        assert session.history.can_undo() is False

    def test_overlay_hit_opens_overlay_memo(self, session, pointer, opened_memos):
        """Test that with both layers occupied an overlay-strip press targets the overlay."""
        paint_cell(session.store, cell(6, 0), "a")
        paint_cell(session.store, cell(6, 0), "b")
        session.set_tool(Tool.MEMO)
        session.gestures.pointer_down(pointer(cell(6, 0), overlay_hit=True))
        ((memo, _),) = opened_memos
        assert memo.layer == "overlay"
        assert memo.activity_id is None

    def test_overlay_only_cell(self, session, pointer, opened_memos):
        """Test that a cell with only an overlay opens the overlay memo."""
        paint_cell(session.store, cell(6, 0), "a")
        paint_cell(session.store, cell(6, 0), "b")
        session.store.set_day_blocks(DATE, session.blocks(Layer.OVERLAY))
        session.set_tool(Tool.MEMO)
        session.gestures.pointer_down(pointer(cell(6, 0)))
        ((memo, _),) = opened_memos
        assert memo.layer == "overlay"

    def test_session_save_and_remove(self, session, pointer, opened_memos):
        """Test saving and removing the opened memo through the session."""
        paint_range(session.store, DATE, 360, 420, "a")
        session.set_tool(Tool.MEMO)
        session.gestures.pointer_down(pointer(cell(6, 0)))
        ((memo, _),) = opened_memos

        saved = session.save_memo(memo, "ship it")
        assert [m.text for m in session.memos()] == ["ship it"]
        assert session.remove_memo(saved.id) is True
        assert session.memos() == []
