"""Tests for loading saved payloads and migrating legacy cell grids."""

import json

from planlog.database.migration import dump_state, load_state, migrate_v1_to_v2, scan_layer
from planlog.engine.segments import blocks_to_grid
from planlog.models.block import Block, Layer
from planlog.models.memo import MemoBlock
from planlog.models.state import PersistedState

DATE = "2024-01-03"
WEEK = "2023-12-31"


def legacy_payload():
    return {
        "activities": [
            {"id": "a", "name": "Work", "color": "#3B82F6"},
            {"id": "b", "name": "Reading", "color": "#22C55E"},
        ],
        "day": {
            DATE: {
                f"{DATE}|06|0": {"execute": "a"},
                f"{DATE}|06|1": {"execute": "a", "overlay": "b"},
                f"{DATE}|06|2": {"execute": "a", "indicator": {"label": "woke up"}},
                f"{DATE}|06|4": {"execute": "a"},
                f"{DATE}|06|5": {"execute": "b"},
                f"{DATE}|07|0": {"execute": "b"},
            },
        },
        "week": {
            WEEK: {
                "2024-01-04|09|0": {"activityId": "b"},
                "2024-01-04|09|1": {"activityId": "b", "overlayActivityId": "a"},
            },
        },
        "startHour": 7,
    }


class TestScanLayer:
    """Test the consecutive-cell scan."""

    def test_gap_splits_run(self):
        """Test that a missing cell ends a run even when the activity continues."""
        cells = [(36, {"execute": "a"}), (37, {"execute": "a"}), (39, {"execute": "a"})]
        blocks = scan_layer(DATE, cells, "execute", Layer.EXECUTE)
        assert [(b.start_min, b.end_min) for b in blocks] == [(360, 380), (390, 400)]

    def test_ids_are_deterministic(self):
        """Test that migrated ids depend only on layer, date and start."""
        blocks = scan_layer(DATE, [(36, {"overlay": "b"})], "overlay", Layer.OVERLAY)
        assert blocks[0].id == f"migrated_overlay_{DATE}_360"
        assert blocks[0].source == "import"


class TestMigration:
    """Test legacy payload migration."""

    def test_day_grid_becomes_blocks(self):
        """Test that execute and overlay runs become blocks."""
        state = migrate_v1_to_v2(legacy_payload())
        blocks = state.blocks_by_date[DATE]
        spans = sorted((b.layer, b.start_min, b.end_min, b.activity_id) for b in blocks)
        assert spans == [
            ("execute", 360, 390, "a"),
            ("execute", 400, 410, "a"),
            ("execute", 410, 430, "b"),
            ("overlay", 370, 380, "b"),
        ]
        assert state.start_hour == 7

    def test_round_trip_matches_legacy_grid(self):
        """Test that projecting migrated blocks back onto cells reproduces the legacy grid."""
        legacy = legacy_payload()
        state = migrate_v1_to_v2(legacy)
        expected = {
            cell_id: {k: v for k, v in cell.items() if k in ("execute", "overlay")}
            for cell_id, cell in legacy["day"][DATE].items()
        }
        assert blocks_to_grid(state.blocks_by_date[DATE]) == expected

    def test_week_grid_becomes_plan_blocks(self):
        """Test that week grids become plan/planOverlay blocks carrying their own dates."""
        state = migrate_v1_to_v2(legacy_payload())
        plan = sorted((b.layer, b.date_iso, b.start_min, b.end_min) for b in state.week_plans[WEEK])
        assert plan == [
            ("plan", "2024-01-04", 540, 560),
            ("planOverlay", "2024-01-04", 550, 560),
        ]

    def test_indicators_migrated(self):
        """Test that cell indicators become indicator events at the cell start."""
        state = migrate_v1_to_v2(legacy_payload())
        (indicator,) = state.indicators_by_date[DATE]
        assert indicator.id == f"migrated_ind_{DATE}|06|2"
        assert indicator.at_min == 380
        assert indicator.label == "woke up"
        assert indicator.time_text == "06:20"

    def test_legacy_memos_migrated(self):
        """Test that legacy hour memos keep their slot and drop placeholder activities."""
        legacy = {
            "day": {},
            "memoBlocks": {DATE: [
                {"id": f"memo_{DATE}_execute_h6_a_1", "dateISO": DATE, "layer": "execute", "hour": 6,
                 "activityId": "a", "text": "second note", "updatedAt": 1704261600000},
                {"id": f"memo_{DATE}_overlay_h7___HOUR___0", "dateISO": DATE, "layer": "overlay",
                 "cellId": f"{DATE}|07|2", "activityId": "__HOUR__", "text": "overlay note", "updatedAt": 1704261600000},
                {"id": "broken", "layer": "plan", "hour": 6, "text": "x"},
            ]},
        }
        memos = migrate_v1_to_v2(legacy).memos_by_date[DATE]
        assert [(m.layer, m.hour, m.activity_id, m.slot, m.text) for m in memos] == [
            ("execute", 6, "a", 1, "second note"),
            ("overlay", 7, None, 0, "overlay note"),
        ]

    def test_malformed_cell_ids_skipped(self):
        """Test that unreadable cell ids are skipped rather than failing the load."""
        legacy = {"day": {DATE: {"garbage": {"execute": "a"}, f"{DATE}|06|0": {"execute": "a"}}}}
        state = migrate_v1_to_v2(legacy)
        assert [(b.start_min, b.end_min) for b in state.blocks_by_date[DATE]] == [(360, 370)]


class TestLoadState:
    """Test load_state fallbacks."""

    def test_current_payload_round_trips(self):
        """Test that a saved state loads back equal."""
        state = PersistedState(
            blocks_by_date={DATE: [Block(
                id="x", date_iso=DATE, start_min=360, end_min=420, activity_id="a", layer=Layer.EXECUTE,
            )]},
            start_hour=5,
        )
        loaded = load_state(dump_state(state))
        assert loaded == state

    def test_all_block_sources_load(self):
        """Test that a saved payload with every block source, including fixed_schedule, loads intact."""
        payload = {
            "schemaVersion": 2,
            "activities": [{"id": "a", "name": "Work"}, {"id": "b", "name": "Reading"}],
            "blocksByDate": {DATE: [
                {"id": "x", "dateISO": DATE, "startMin": 360, "endMin": 420, "activityId": "a",
                 "layer": "execute", "source": "drag"},
                {"id": "y", "dateISO": DATE, "startMin": 480, "endMin": 540, "activityId": "b",
                 "layer": "execute", "source": "fixed_schedule"},
            ]},
            "weekPlans": {WEEK: [
                {"id": "z", "dateISO": DATE, "startMin": 540, "endMin": 600, "activityId": "a",
                 "layer": "plan", "source": "template_apply"},
            ]},
        }
        state = load_state(payload)
        assert [(b.id, b.source) for b in state.blocks_by_date[DATE]] == [("x", "drag"), ("y", "fixed_schedule")]
        assert [b.source for b in state.week_plans[WEEK]] == ["template_apply"]
        assert [a.id for a in state.activities] == ["a", "b"]

    def test_memos_round_trip(self):
        """Test that hour memos are saved under memosByDate and load back equal."""
        memo = MemoBlock(id="m", date_iso=DATE, layer=Layer.OVERLAY, hour=6, text="stretch first")
        state = PersistedState(memos_by_date={DATE: [memo]})
        payload = json.loads(dump_state(state))
        assert payload["memosByDate"][DATE][0]["text"] == "stretch first"
        assert load_state(payload) == state

    def test_payload_uses_camel_case_keys(self):
        """Test that the persisted JSON uses the documented key names."""
        payload = json.loads(dump_state(PersistedState()))
        assert payload["schemaVersion"] == 2
        assert "blocksByDate" in payload
        assert "weekPlans" in payload

    def test_legacy_json_text_is_migrated(self):
        """Test that legacy payloads given as JSON text are migrated."""
        state = load_state(json.dumps(legacy_payload()))
        assert len(state.blocks_by_date[DATE]) == 4

    def test_corrupt_payload_falls_back_to_empty(self):
        """Test that unparseable JSON yields an empty state instead of raising."""
        assert load_state("{not json") == PersistedState()

    def test_unknown_version_falls_back_to_empty(self):
        """Test that an unrecognized schema version yields an empty state."""
        assert load_state({"schemaVersion": 99, "blocksByDate": {}}) == PersistedState()

    def test_invalid_blocks_fall_back_to_empty(self):
        """Test that a current-version payload with invalid blocks yields an empty state."""
        payload = {
            "schemaVersion": 2,
            "blocksByDate": {DATE: [{"id": "x", "dateISO": DATE, "startMin": 400, "endMin": 300,
                                     "activityId": "a", "layer": "execute"}]},
        }
        assert load_state(payload) == PersistedState()

    def test_non_object_payload_falls_back_to_empty(self):
        """Test that a JSON array is rejected."""
        assert load_state("[1, 2]") == PersistedState()

    def test_none_is_empty(self):
        """Test that a missing payload is an empty state."""
        assert load_state(None) == PersistedState()
