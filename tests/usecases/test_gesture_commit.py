"""
Tests for writing finished gestures back to blocks and planning.
"""

from datetime import datetime, timezone

import pytest

from obsplanner.infra.exceptions import NotFoundError, ValidationError
from obsplanner.timeline.gestures import FinalizedRange, GestureKind
from obsplanner.usecases import blocks, planning, resources
from obsplanner.usecases.gesture_commit import apply_finalized_range


def _utc(*args):
    return datetime(*args, tzinfo=timezone.utc)


def _range(kind, lane, interval_id=None, start=(2026, 2, 6, 4, 25), end=(2026, 2, 6, 4, 50)):
    return FinalizedRange(kind=kind, lane_key=lane, start_utc=_utc(*start), end_utc=_utc(*end), interval_id=interval_id)


class TestCreate:
    def test_create_on_encoder_lane(self, db_session):
        resources.add_resource(db_session, "encoders", name="TX 01")
        result = apply_finalized_range(db_session, _range(GestureKind.CREATE, "tx 01"))
        block = result["block"]
        assert result["target"] == "block"
        assert block["name"] == "New Block"
        assert block["encoder"]["name"] == "TX 01"
        assert block["start_time"] == "2026-02-06T04:25:00.000Z"
        assert block["broadcast_end_time"] == "2026-02-06T04:50:00.000Z"
        assert block["type"] == "OTHER"

    def test_create_with_name_infers_type(self, db_session):
        result = apply_finalized_range(db_session, _range(GestureKind.CREATE, "Unknown"), name="Women's Final")
        assert result["block"]["type"] == "FINAL/MEDAL"
        assert result["block"]["encoder"] is None

    def test_create_on_pinned_lane_adds_to_planning(self, db_session):
        result = apply_finalized_range(db_session, _range(GestureKind.CREATE, "On Air"), pinned_lane="On Air")
        assert result["target"] == "planning"
        block_id = result["block"]["id"]
        assert result["planning"]["onAirBlockIds"] == [block_id]
        assert result["planning"]["overrides"][block_id]["producer_broadcast_start_time"] == "2026-02-06T04:25:00.000Z"


class TestResizeMove:
    def _block(self, db):
        return blocks.create_block(
            db, name="Match", start_time="2026-02-06T04:00:00Z", end_time="2026-02-06T06:00:00Z"
        )

    def test_resize_rewrites_broadcast_window(self, db_session):
        block = self._block(db_session)
        result = apply_finalized_range(
            db_session,
            _range(GestureKind.RESIZE, "TX 01", block["id"], start=(2026, 2, 6, 4), end=(2026, 2, 6, 7)),
        )
        assert result["target"] == "block"
        assert result["block"]["broadcast_end_time"] == "2026-02-06T07:00:00.000Z"
        assert result["block"]["end_time"] == "2026-02-06T06:00:00.000Z"

    def test_move_on_pinned_lane_rewrites_override_only(self, db_session):
        block = self._block(db_session)
        planning.put_planning(db_session, on_air_block_ids=[block["id"]])
        result = apply_finalized_range(
            db_session,
            _range(GestureKind.MOVE, "On Air", block["id"], start=(2026, 2, 6, 8, 50), end=(2026, 2, 6, 10, 50)),
            pinned_lane="On Air",
        )
        assert result["target"] == "planning"
        override = result["planning"]["overrides"][block["id"]]
        assert override["producer_broadcast_start_time"] == "2026-02-06T08:50:00.000Z"
        assert blocks.get_block(db_session, block["id"])["broadcast_start_time"] is None

    def test_missing_interval(self, db_session):
        with pytest.raises(ValidationError):
            apply_finalized_range(db_session, _range(GestureKind.MOVE, "TX 01"))

    def test_vanished_block(self, db_session):
        block = self._block(db_session)
        blocks.delete_block(db_session, block["id"])
        with pytest.raises(NotFoundError):
            apply_finalized_range(db_session, _range(GestureKind.RESIZE, "TX 01", block["id"]))


def test_inverted_range_rejected(db_session):
    bad = _range(GestureKind.CREATE, "TX 01", start=(2026, 2, 6, 5), end=(2026, 2, 6, 5))
    with pytest.raises(ValidationError):
        apply_finalized_range(db_session, bad)
