"""
Unit tests for the gesture controller.

Window: 2026-02-06 in a fixed UTC+1 zone, so it spans 01:00Z..01:00Z+1d and
one pointer unit on a 1000-wide lane is 0.1% (86.4 seconds).
"""

from datetime import date, datetime, timedelta, timezone

import pytest

from obsplanner.timeline.gestures import (
    Edge,
    GestureController,
    GestureKind,
    GesturePhase,
    LaneRect,
    PointerEvent,
    move_percents,
    resize_percents,
    round_to_five_minutes,
)
from obsplanner.timeline.placement import place_record
from obsplanner.timeline.records import RecordKind, TimedRecord
from obsplanner.timeline.window import TimeWindow

UTC_PLUS_ONE = timezone(timedelta(hours=1))
FRAME = LaneRect(left=0.0, width=1000.0)


def _utc(*args):
    return datetime(*args, tzinfo=timezone.utc)


def _window():
    return TimeWindow(date(2026, 2, 6), 24, zone=UTC_PLUS_ONE)


def _block(tw, block_id="blk-1", kind=RecordKind.BLOCK):
    record = TimedRecord(
        id=block_id,
        start_utc=_utc(2026, 2, 6, 4),
        end_utc=_utc(2026, 2, 6, 6),
        title="Match",
        lane_key="TX 1",
        kind=kind,
    )
    return place_record(record, tw)


def _span(tw, start, end, block_id="blk-2"):
    record = TimedRecord(id=block_id, start_utc=start, end_utc=end, title="Heat", lane_key="TX 1", kind=RecordKind.BLOCK)
    return place_record(record, tw)


class TestHelpers:
    @pytest.mark.parametrize(
        "moment, expected",
        [
            (_utc(2026, 2, 6, 10, 58), _utc(2026, 2, 6, 11, 0)),
            (_utc(2026, 2, 6, 10, 57, 29), _utc(2026, 2, 6, 10, 55)),
            (_utc(2026, 2, 6, 10, 57, 30), _utc(2026, 2, 6, 11, 0)),
            (_utc(2026, 2, 6, 23, 59), _utc(2026, 2, 7, 0, 0)),
            (_utc(2026, 2, 6, 4, 24, 0, 500), _utc(2026, 2, 6, 4, 25)),
        ],
    )
    def test_round_to_five_minutes(self, moment, expected):
        assert round_to_five_minutes(moment) == expected

    def test_move_slides_back_inside_at_full_width(self):
        assert move_percents(20, 95, 115) == (80.0, 100.0)
        assert move_percents(-30, 10, 20) == (0.0, 10.0)
        assert move_percents(5, 10, 20) == (15.0, 25.0)

    def test_resize_never_inverts(self):
        assert resize_percents(Edge.END, 5.0, 10.0, 20.0) == (10.0, 10.5)
        assert resize_percents(Edge.START, 30.0, 10.0, 20.0) == (19.5, 20.0)
        assert resize_percents(Edge.START, 2.0, 10.0, 20.0) == (2.0, 20.0)


class TestCreateGesture:
    def setup_method(self):
        self.commits = []
        self.controller = GestureController(_window(), on_commit=self.commits.append)

    def test_create_applies_inset_and_snapping(self):
        assert self.controller.begin_create("TX 1", FRAME, PointerEvent(x=100))
        assert self.controller.phase is GesturePhase.CREATING
        self.controller.pointer_move(PointerEvent(x=200))
        result = self.controller.pointer_up(PointerEvent(x=200))

        assert result.kind is GestureKind.CREATE
        assert result.lane_key == "TX 1"
        assert result.interval_id is None
        assert result.start_utc == _utc(2026, 2, 6, 4, 25)
        assert result.end_utc == _utc(2026, 2, 6, 4, 50)
        assert self.commits == [result]
        assert self.controller.phase is GesturePhase.IDLE

    def test_right_to_left_drag_is_normalised(self):
        self.controller.begin_create("TX 1", FRAME, PointerEvent(x=200))
        result = self.controller.pointer_up(PointerEvent(x=100))
        assert result.start_utc == _utc(2026, 2, 6, 4, 25)
        assert result.end_utc == _utc(2026, 2, 6, 4, 50)

    def test_click_without_drag_emits_nothing(self):
        self.controller.begin_create("TX 1", FRAME, PointerEvent(x=100))
        assert self.controller.pointer_up(PointerEvent(x=100)) is None
        assert self.commits == []
        assert not self.controller.is_active

    def test_frame_is_frozen_at_pointer_down(self):
        scrolled = LaneRect(left=-500.0, width=1000.0)
        self.controller.begin_create("TX 1", FRAME, PointerEvent(x=100))
        # a relayout mid-drag does not reach the controller; only x matters
        self.controller.pointer_move(PointerEvent(x=200))
        assert scrolled.percent_at(200) != FRAME.percent_at(200)
        result = self.controller.pointer_up(PointerEvent(x=200))
        assert result.start_utc == _utc(2026, 2, 6, 4, 25)

    def test_window_change_mid_drag_keeps_gesture_window(self):
        self.controller.begin_create("TX 1", FRAME, PointerEvent(x=100))
        self.controller.set_window(TimeWindow(date(2026, 2, 9), 24, zone=UTC_PLUS_ONE))
        result = self.controller.pointer_up(PointerEvent(x=200))
        assert result.start_utc == _utc(2026, 2, 6, 4, 25)

    def test_pointer_clamped_to_lane(self):
        self.controller.begin_create("TX 1", FRAME, PointerEvent(x=900))
        result = self.controller.pointer_up(PointerEvent(x=5000))
        assert result.end_utc == _utc(2026, 2, 7, 0, 0)

    def test_secondary_button_is_ignored(self):
        assert not self.controller.begin_create("TX 1", FRAME, PointerEvent(x=100, button=2))
        assert not self.controller.is_active

    def test_disabled_lane_is_ignored(self):
        assert not self.controller.begin_create("On Air", FRAME, PointerEvent(x=100), enabled=False)

    def test_zero_width_frame_is_ignored(self):
        assert not self.controller.begin_create("TX 1", LaneRect(left=0, width=0), PointerEvent(x=0))

    def test_second_pointer_down_is_ignored(self):
        self.controller.begin_create("TX 1", FRAME, PointerEvent(x=100))
        assert not self.controller.begin_create("TX 2", FRAME, PointerEvent(x=500))
        assert self.controller.state.lane_key == "TX 1"

    def test_release_off_target_abandons(self):
        self.controller.begin_create("TX 1", FRAME, PointerEvent(x=100))
        assert self.controller.pointer_up(PointerEvent(x=400), on_target=False) is None
        assert self.commits == []
        assert not self.controller.is_active

    def test_cancel(self):
        self.controller.begin_create("TX 1", FRAME, PointerEvent(x=100))
        self.controller.cancel()
        assert self.controller.pointer_up(PointerEvent(x=400)) is None

    def test_preview(self):
        self.controller.begin_create("TX 1", FRAME, PointerEvent(x=300))
        self.controller.pointer_move(PointerEvent(x=100))
        assert self.controller.preview() == pytest.approx((10.0, 20.0))


class TestResizeGesture:
    def setup_method(self):
        self.tw = _window()
        self.commits = []
        self.controller = GestureController(self.tw, on_commit=self.commits.append)
        self.block = _block(self.tw)

    def test_resize_end(self):
        assert self.controller.begin_resize(self.block, Edge.END, FRAME, PointerEvent(x=208))
        self.controller.pointer_move(PointerEvent(x=250))
        result = self.controller.pointer_up(PointerEvent(x=250))
        assert result.kind is GestureKind.RESIZE
        assert result.interval_id == "blk-1"
        assert result.start_utc == _utc(2026, 2, 6, 4, 0)
        assert result.end_utc == _utc(2026, 2, 6, 7, 0)

    def test_resize_start_has_no_inset(self):
        self.controller.begin_resize(self.block, "start", FRAME, PointerEvent(x=125))
        result = self.controller.pointer_up(PointerEvent(x=0))
        assert result.start_utc == _utc(2026, 2, 6, 1, 0)
        assert result.end_utc == _utc(2026, 2, 6, 6, 0)

    def test_resize_past_opposite_edge_keeps_order(self):
        self.controller.begin_resize(self.block, Edge.START, FRAME, PointerEvent(x=125))
        self.controller.pointer_move(PointerEvent(x=600))
        start, width = self.controller.preview()
        assert width == pytest.approx(0.5)
        assert start < self.block.end_percent

    def test_feed_events_are_not_resizable(self):
        event = _block(self.tw, kind=RecordKind.EVENT)
        assert not self.controller.begin_resize(event, Edge.END, FRAME, PointerEvent(x=208))

    def test_vanished_interval_abandons_gesture(self):
        self.controller.sync_intervals([self.block])
        self.controller.begin_resize(self.block, Edge.END, FRAME, PointerEvent(x=208))
        self.controller.sync_intervals(["other"])
        assert self.controller.pointer_up(PointerEvent(x=250)) is None
        assert self.commits == []
        assert not self.controller.is_active


class TestMoveGesture:
    def setup_method(self):
        self.tw = _window()
        self.commits = []
        self.controller = GestureController(self.tw, on_commit=self.commits.append)
        self.block = _block(self.tw)

    def test_move_preserves_duration(self):
        assert self.controller.begin_move(self.block, FRAME, PointerEvent(x=150))
        assert self.controller.phase is GesturePhase.MOVING
        self.controller.pointer_move(PointerEvent(x=350))
        result = self.controller.pointer_up(PointerEvent(x=350))
        assert result.kind is GestureKind.MOVE
        assert result.start_utc == _utc(2026, 2, 6, 8, 50)
        assert result.end_utc == _utc(2026, 2, 6, 10, 50)
        assert self.commits == [result]

    def test_move_past_right_edge_stops_at_window_end(self):
        self.controller.begin_move(self.block, FRAME, PointerEvent(x=150))
        result = self.controller.pointer_up(PointerEvent(x=1000))
        assert result.end_utc == _utc(2026, 2, 7, 1, 0)
        assert result.end_utc - result.start_utc == timedelta(hours=2)

    def test_move_past_left_edge_stops_at_window_start(self):
        self.controller.begin_move(self.block, FRAME, PointerEvent(x=150))
        result = self.controller.pointer_up(PointerEvent(x=0))
        assert result.start_utc == _utc(2026, 2, 6, 1, 0)
        assert result.end_utc == _utc(2026, 2, 6, 3, 0)

    def test_commit_sees_idle_state(self):
        phases = []
        controller = GestureController(self.tw, on_commit=lambda r: phases.append(controller.phase))
        controller.begin_move(self.block, FRAME, PointerEvent(x=150))
        controller.pointer_up(PointerEvent(x=350))
        assert phases == [GesturePhase.IDLE]

    def test_refresh_keeping_tracked_id_does_not_disturb_gesture(self):
        self.controller.sync_intervals([self.block])
        self.controller.begin_move(self.block, FRAME, PointerEvent(x=150))
        self.controller.pointer_move(PointerEvent(x=250))
        refreshed = _block(self.tw)
        other = _span(self.tw, _utc(2026, 2, 6, 12), _utc(2026, 2, 6, 13))
        self.controller.sync_intervals([other, refreshed])
        assert self.controller.phase is GesturePhase.MOVING
        result = self.controller.pointer_up(PointerEvent(x=350))
        assert result.interval_id == "blk-1"
        assert result.start_utc == _utc(2026, 2, 6, 8, 50)
        assert result.end_utc == _utc(2026, 2, 6, 10, 50)
        assert self.commits == [result]

    def test_vanished_interval_abandons_on_pointer_move(self):
        self.controller.sync_intervals([self.block])
        self.controller.begin_move(self.block, FRAME, PointerEvent(x=150))
        self.controller.sync_intervals(["other"])
        state = self.controller.pointer_move(PointerEvent(x=350))
        assert state.phase is GesturePhase.IDLE
        assert not self.controller.is_active
        assert self.controller.pointer_up(PointerEvent(x=350)) is None
        assert self.commits == []


class TestRealInstantsSurviveGestures:
    """Blocks drawn clamped or widened keep their own times when dragged."""

    def setup_method(self):
        self.tw = _window()
        self.controller = GestureController(self.tw)
        # crosses the window start (01:00Z), so it is drawn from 0%
        self.overnight = _span(self.tw, _utc(2026, 2, 5, 22), _utc(2026, 2, 6, 3))
        # one minute long, drawn at the 0.5% minimum width
        self.short = _span(self.tw, _utc(2026, 2, 6, 4), _utc(2026, 2, 6, 4, 1))

    def test_placement_clamps_and_widens(self):
        assert self.overnight.start_percent == 0.0
        assert self.short.width_percent == pytest.approx(0.5)

    def test_move_of_clamped_block_keeps_hidden_part(self):
        self.controller.begin_move(self.overnight, FRAME, PointerEvent(x=40))
        result = self.controller.pointer_up(PointerEvent(x=43))
        assert result.start_utc == _utc(2026, 2, 5, 22, 5)
        assert result.end_utc == _utc(2026, 2, 6, 3, 5)

    def test_end_resize_of_clamped_block_keeps_real_start(self):
        self.controller.begin_resize(self.overnight, Edge.END, FRAME, PointerEvent(x=83))
        result = self.controller.pointer_up(PointerEvent(x=250))
        assert result.start_utc == _utc(2026, 2, 5, 22, 0)
        assert result.end_utc == _utc(2026, 2, 6, 7, 0)

    def test_move_of_widened_block_keeps_real_duration(self):
        self.controller.begin_move(self.short, FRAME, PointerEvent(x=125))
        result = self.controller.pointer_up(PointerEvent(x=325))
        assert result.start_utc == _utc(2026, 2, 6, 8, 50)
        assert result.end_utc - result.start_utc == timedelta(minutes=1)

    def test_start_resize_of_widened_block_keeps_real_end(self):
        self.controller.begin_resize(self.short, Edge.START, FRAME, PointerEvent(x=125))
        result = self.controller.pointer_up(PointerEvent(x=100))
        assert result.start_utc == _utc(2026, 2, 6, 3, 25)
        assert result.end_utc == _utc(2026, 2, 6, 4, 1)

    def test_zero_duration_block_moves_as_one_snap_step(self):
        instant = _span(self.tw, _utc(2026, 2, 6, 4), _utc(2026, 2, 6, 4))
        self.controller.begin_move(instant, FRAME, PointerEvent(x=125))
        result = self.controller.pointer_up(PointerEvent(x=325))
        assert result.start_utc == _utc(2026, 2, 6, 8, 50)
        assert result.end_utc == _utc(2026, 2, 6, 8, 55)
