"""Tests for overlap resolution (painter's algorithm over time ranges)."""

import pytest

from planlog.engine.overlap import (
    Candidate,
    coalesce_adjacent,
    detect_overlap,
    erase_range,
    insert_block,
    remove_block,
    resolve_overlaps,
    update_block,
)
from planlog.models.block import Block, BlockSource, Layer


def make_block(block_id, start, end, activity="a", layer=Layer.EXECUTE, date_iso="2024-01-03", source=BlockSource.DRAG):
    return Block(
        id=block_id,
        date_iso=date_iso,
        start_min=start,
        end_min=end,
        activity_id=activity,
        layer=layer,
        source=source,
    )


def assert_no_overlap(blocks):
    by_key = {}
    for block in blocks:
        by_key.setdefault((block.date_iso, block.layer), []).append(block)
    for same in by_key.values():
        ordered = sorted(same, key=lambda b: b.start_min)
        for left, right in zip(ordered, ordered[1:]):
            assert left.end_min <= right.start_min


class TestResolveOverlaps:
    """Test the five overlap cases."""

    def test_keeps_non_intersecting_block(self):
        """Test that a block outside the candidate is kept unchanged."""
        existing = [make_block("x", 360, 420)]
        result = resolve_overlaps(existing, Candidate(420, 480, Layer.EXECUTE.value))
        assert result == existing

    def test_drops_fully_covered_block(self):
        """Test that a block fully covered by the candidate is dropped."""
        existing = [make_block("x", 370, 390)]
        result = resolve_overlaps(existing, Candidate(360, 420, Layer.EXECUTE.value))
        assert result == []

    def test_trims_tail(self):
        """Test that a candidate over the tail keeps the left remainder."""
        existing = [make_block("x", 360, 420)]
        result = resolve_overlaps(existing, Candidate(390, 480, Layer.EXECUTE.value))
        assert len(result) == 1
        assert (result[0].id, result[0].start_min, result[0].end_min) == ("x", 360, 390)

    def test_trims_head(self):
        """Test that a candidate over the head keeps the right remainder."""
        existing = [make_block("x", 360, 420)]
        result = resolve_overlaps(existing, Candidate(300, 380, Layer.EXECUTE.value))
        assert len(result) == 1
        assert (result[0].id, result[0].start_min, result[0].end_min) == ("x", 380, 420)

    def test_split_keeps_id_on_left_remainder(self):
        """Test split determinism: left keeps the original id, right gets a fresh one."""
        existing = [make_block("X", 360, 480)]
        result = resolve_overlaps(existing, Candidate(400, 420, Layer.EXECUTE.value))
        assert len(result) == 2
        left, right = sorted(result, key=lambda b: b.start_min)
        assert (left.id, left.start_min, left.end_min) == ("X", 360, 400)
        assert (right.start_min, right.end_min) == (420, 480)
        assert right.id != "X"
        assert right.activity_id == left.activity_id

    def test_other_layers_untouched(self):
        """Test that only blocks on the candidate's layer are rewritten."""
        existing = [make_block("x", 360, 420, layer=Layer.OVERLAY)]
        result = resolve_overlaps(existing, Candidate(360, 420, Layer.EXECUTE.value))
        assert result == existing

    def test_excluded_block_untouched(self):
        """Test that excludeId leaves that block alone."""
        existing = [make_block("x", 360, 420), make_block("y", 420, 480)]
        result = resolve_overlaps(existing, Candidate(360, 480, Layer.EXECUTE.value), exclude_id="x")
        assert [b.id for b in result] == ["x"]

    def test_does_not_mutate_input(self):
        """Test that resolution returns new blocks rather than editing the input."""
        original = make_block("x", 360, 420)
        resolve_overlaps([original], Candidate(390, 480, Layer.EXECUTE.value))
        assert original.end_min == 420

    @pytest.mark.parametrize("start,end", [(0, 10), (355, 365), (300, 1440), (365, 366), (470, 490)])
    def test_insert_never_overlaps(self, start, end):
        """Test that insertion always leaves a non-overlapping layer."""
        existing = [make_block("x", 360, 420), make_block("y", 420, 480, activity="b")]
        candidate = make_block("new", start, end, activity="c")
        result = insert_block(existing, candidate)
        assert_no_overlap(result)
        assert candidate in result


class TestHelpers:
    """Test overlap helpers."""

    def test_detect_overlap(self):
        """Test that overlapping blocks on the same layer are reported."""
        existing = [make_block("x", 360, 420), make_block("y", 420, 480), make_block("z", 360, 420, layer=Layer.OVERLAY)]
        found = detect_overlap(Candidate(400, 430, Layer.EXECUTE.value), existing)
        assert [b.id for b in found] == ["x", "y"]

    def test_erase_range(self):
        """Test that erasing a range trims blocks on one layer."""
        existing = [make_block("x", 360, 420)]
        result = erase_range(existing, Layer.EXECUTE, 360, 390)
        assert [(b.start_min, b.end_min) for b in result] == [(390, 420)]

    def test_coalesce_merges_touching_same_activity(self):
        """Test that touching blocks of one activity merge, keeping the earliest id."""
        blocks = [make_block("late", 370, 380), make_block("early", 360, 370), make_block("other", 380, 390, activity="b")]
        result = coalesce_adjacent(blocks)
        assert [(b.id, b.start_min, b.end_min) for b in result] == [("early", 360, 380), ("other", 380, 390)]

    def test_coalesce_keeps_layers_apart(self):
        """Test that coalescing never merges across layers."""
        blocks = [make_block("x", 360, 370), make_block("y", 370, 380, layer=Layer.OVERLAY)]
        assert len(coalesce_adjacent(blocks)) == 2

    def test_coalesce_keeps_sources_apart(self):
        """Test that touching blocks of one activity but different sources stay separate."""
        blocks = [make_block("drag", 360, 420), make_block("voice", 420, 480, source=BlockSource.VOICE)]
        result = coalesce_adjacent(blocks)
        assert [(b.id, b.source, b.start_min, b.end_min) for b in result] == [
            ("drag", "drag", 360, 420),
            ("voice", "voice", 420, 480),
        ]

    def test_remove_block(self):
        """Test that removing by id drops only that block."""
        existing = [make_block("x", 360, 420), make_block("y", 420, 480)]
        assert [b.id for b in remove_block(existing, "x")] == ["y"]
        assert remove_block(existing, "missing") == existing

    def test_update_block(self):
        """Test that updating by id copies the block and leaves the input untouched."""
        existing = [make_block("x", 360, 420), make_block("y", 420, 480)]
        result = update_block(existing, "y", title="Deep work")
        assert [b.title for b in result] == [None, "Deep work"]
        assert existing[1].title is None

    def test_coalesce_with_anchor_merges_only_its_run(self):
        """Test that an anchored coalesce leaves touching blocks outside the anchor's run alone."""
        blocks = [
            make_block("x", 360, 370),
            make_block("anchor", 370, 380),
            make_block("z", 380, 390),
            make_block("p", 500, 510),
            make_block("q", 510, 520),
        ]
        result = coalesce_adjacent(blocks, anchor_id="anchor")
        assert [(b.id, b.start_min, b.end_min) for b in result] == [
            ("x", 360, 390),
            ("p", 500, 510),
            ("q", 510, 520),
        ]
