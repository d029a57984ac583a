"""Tests for plan vs. execute summaries."""

from planlog.engine.painting import commit_range, paint_range
from planlog.engine.summary import daily_summary, execution_delay, find_matching_execute_block
from planlog.models.block import Layer

DATE = "2024-01-03"


class TestDailySummary:
    """Test daily_summary."""

    def test_plan_vs_execute(self, store):
        """Test planned and executed minutes per activity."""
        commit_range(store, DATE, Layer.PLAN, 540, 660, "a")
        commit_range(store, DATE, Layer.PLAN_OVERLAY, 600, 630, "b")
        paint_range(store, DATE, 550, 640, "a")

        rows = {row.activity_id: row for row in daily_summary(store, DATE)}
        assert (rows["a"].plan_min, rows["a"].execute_min, rows["a"].percent) == (120, 90, 75)
        assert (rows["b"].plan_min, rows["b"].execute_min, rows["b"].percent) == (30, 0, 0)
        assert rows["a"].name == "Work"

    def test_duration_text(self, store):
        """Test that planned and executed minutes are formatted for display."""
        commit_range(store, DATE, Layer.PLAN, 540, 620, "a")
        paint_range(store, DATE, 540, 600, "a")
        (row,) = daily_summary(store, DATE)
        assert (row.plan_text, row.execute_text) == ("1h 20m", "1h")

    def test_duration_text_without_execution(self, store):
        """Test that a planned-only activity shows zero executed minutes."""
        commit_range(store, DATE, Layer.PLAN, 540, 585, "b")
        (row,) = daily_summary(store, DATE)
        assert (row.plan_text, row.execute_text) == ("45m", "0m")

    def test_unplanned_execution(self, store):
        """Test that executed but unplanned activities have no percentage."""
        paint_range(store, DATE, 360, 420, "c")
        (row,) = daily_summary(store, DATE)
        assert row.plan_min == 0
        assert row.execute_min == 60
        assert row.percent is None

    def test_other_dates_ignored(self, store):
        """Test that plan blocks on other days of the week are not counted."""
        commit_range(store, "2024-01-04", Layer.PLAN, 540, 660, "a")
        assert daily_summary(store, DATE) == []

    def test_dangling_activity_uses_id(self, store):
        """Test that a block whose activity was deleted still shows up by id."""
        paint_range(store, DATE, 360, 370, "ghost")
        (row,) = daily_summary(store, DATE)
        assert row.name == "ghost"
        assert row.color is None


class TestExecutionDelay:
    """Test matching plan blocks to executions."""

    def test_delay(self, store):
        """Test that the delay is measured from the plan start."""
        plan = commit_range(store, DATE, Layer.PLAN, 540, 600, "a")
        commit_range(store, DATE, Layer.EXECUTE, 555, 610, "a")
        match = find_matching_execute_block(plan, store.blocks_on(DATE, Layer.EXECUTE))
        assert match is not None
        assert execution_delay(plan, match) == 15

    def test_no_match_for_other_activity(self, store):
        """Test that an overlapping execution of another activity is not a match."""
        plan = commit_range(store, DATE, Layer.PLAN, 540, 600, "a")
        paint_range(store, DATE, 540, 600, "b")
        assert find_matching_execute_block(plan, store.blocks_on(DATE, Layer.EXECUTE)) is None
