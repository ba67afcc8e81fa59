"""
Unit tests for lane grouping and ordering.
"""

from datetime import date, datetime, timezone

from obsplanner.timeline.lanes import LaneOrdering, assign_lanes, placeholder_interval
from obsplanner.timeline.placement import place
from obsplanner.timeline.records import RecordKind, TimedRecord
from obsplanner.timeline.window import TimeWindow


def _utc(*args):
    return datetime(*args, tzinfo=timezone.utc)


def _record(record_id, lane, hour):
    return TimedRecord(
        id=record_id,
        start_utc=_utc(2026, 2, 6, hour),
        end_utc=_utc(2026, 2, 6, hour + 1),
        title=record_id,
        lane_key=lane,
        kind=RecordKind.BLOCK,
    )


class TestLaneOrdering:
    def test_pinned_then_dx_then_tx_then_alphabetical(self):
        ordering = LaneOrdering()
        keys = ["TX 2", "DX01", "Other", "DX10", "TX 1", "On Air"]
        assert ordering.sort(keys) == ["On Air", "DX01", "DX10", "TX 1", "TX 2", "Other"]

    def test_numeric_not_lexicographic(self):
        ordering = LaneOrdering(pinned=())
        assert ordering.sort(["TX 10", "TX 9", "TX 02"]) == ["TX 02", "TX 9", "TX 10"]

    def test_equal_numbers_fall_back_to_key(self):
        ordering = LaneOrdering(pinned=())
        assert ordering.sort(["DX1", "DX01"]) == ["DX01", "DX1"]

    def test_unmatched_lanes_alphabetical_case_insensitive(self):
        ordering = LaneOrdering(pinned=())
        assert ordering.sort(["beta", "Alpha", "No Encoder"]) == ["Alpha", "beta", "No Encoder"]

    def test_multiple_pinned_keep_configured_order(self):
        ordering = LaneOrdering(pinned=("On Air", "Standby"))
        assert ordering.sort(["DX01", "Standby", "On Air"]) == ["On Air", "Standby", "DX01"]

    def test_sort_is_a_total_order(self):
        ordering = LaneOrdering()
        keys = ["VT 51", "TX 3", "DX2", "On Air", "Zeta", "TX 03"]
        assert ordering.sort(keys) == ordering.sort(reversed(keys))


class TestAssignLanes:
    def setup_method(self):
        self.tw = TimeWindow.for_date("2026-02-06")

    def test_groups_intervals_by_lane(self):
        placed = place([_record("a", "TX 1", 5), _record("b", "DX01", 3), _record("c", "TX 1", 3)], self.tw)
        lanes = assign_lanes(placed, window=self.tw)
        assert [lane.key for lane in lanes] == ["DX01", "TX 1"]
        assert [lane.order for lane in lanes] == [0, 1]
        assert [i.id for i in lanes[1].intervals] == ["c", "a"]

    def test_every_interval_lands_in_exactly_one_lane(self):
        placed = place([_record(f"r{i}", f"TX {i % 3}", 4 + i) for i in range(6)], self.tw)
        lanes = assign_lanes(placed, window=self.tw)
        ids = [i.id for lane in lanes for i in lane.intervals]
        assert sorted(ids) == sorted(p.id for p in placed)

    def test_known_empty_lane_gets_placeholder(self):
        lanes = assign_lanes([], ["TX 4"], window=self.tw)
        assert len(lanes) == 1
        (placeholder,) = lanes[0].intervals
        assert placeholder.id == "empty-TX 4"
        assert placeholder.is_placeholder
        assert placeholder.display_start_utc == self.tw.start
        assert lanes[0].is_empty

    def test_known_lane_with_intervals_has_no_placeholder(self):
        placed = place([_record("a", "TX 4", 5)], self.tw)
        lanes = assign_lanes(placed, ["TX 4"], window=self.tw)
        assert [i.id for i in lanes[0].intervals] == ["a"]
        assert not lanes[0].is_empty

    def test_placeholder_without_window(self):
        placeholder = placeholder_interval("DX9")
        assert placeholder.record.start_utc == datetime(1970, 1, 1, tzinfo=timezone.utc)
        assert not placeholder.is_resizable
