"""
Tests for the producer planning lane.
"""

import uuid

import pytest

from obsplanner.infra.exceptions import NotFoundError, ValidationError
from obsplanner.runtime.subscriptions import SubscriptionRegistry
from obsplanner.usecases import blocks, planning


def _block(db, name):
    return blocks.create_block(
        db, name=name, start_time="2026-02-06T09:00:00Z", end_time="2026-02-06T11:00:00Z"
    )


def test_empty_planning(db_session):
    assert planning.get_planning(db_session) == {"onAirBlockIds": [], "overrides": {}}


def test_put_keeps_order_and_overrides(db_session):
    first, second = _block(db_session, "A"), _block(db_session, "B")
    result = planning.put_planning(
        db_session,
        on_air_block_ids=[second["id"], first["id"], second["id"]],
        overrides={
            second["id"]: {
                "producer_broadcast_start_time": "2026-02-06T09:30:00Z",
                "producer_broadcast_end_time": "2026-02-06T10:30:00Z",
                "notes": "Tape delay",
            }
        },
    )
    assert result["onAirBlockIds"] == [second["id"], first["id"]]
    assert result["overrides"][second["id"]] == {
        "producer_broadcast_start_time": "2026-02-06T09:30:00.000Z",
        "producer_broadcast_end_time": "2026-02-06T10:30:00.000Z",
        "notes": "Tape delay",
    }
    assert result["overrides"][first["id"]] == {}


def test_put_replaces_previous_lane(db_session):
    first, second = _block(db_session, "A"), _block(db_session, "B")
    planning.put_planning(db_session, on_air_block_ids=[first["id"], second["id"]])
    result = planning.put_planning(db_session, on_air_block_ids=[second["id"]])
    assert result["onAirBlockIds"] == [second["id"]]


def test_put_unknown_block(db_session):
    with pytest.raises(NotFoundError):
        planning.put_planning(db_session, on_air_block_ids=[str(uuid.uuid4())])


def test_put_invalid_override_time(db_session):
    block = _block(db_session, "A")
    with pytest.raises(ValidationError):
        planning.put_planning(
            db_session,
            on_air_block_ids=[block["id"]],
            overrides={block["id"]: {"producer_broadcast_start_time": "noon"}},
        )


def test_override_appends_to_lane(db_session):
    first, second = _block(db_session, "A"), _block(db_session, "B")
    planning.put_planning(db_session, on_air_block_ids=[first["id"]])
    registry = SubscriptionRegistry()
    received = []
    registry.subscribe("planning", received.append)

    result = planning.set_planning_override(
        db_session,
        second["id"],
        start_time="2026-02-06T09:45:00Z",
        end_time="2026-02-06T10:15:00Z",
        registry=registry,
    )
    assert result["onAirBlockIds"] == [first["id"], second["id"]]
    assert result["overrides"][second["id"]]["producer_broadcast_end_time"] == "2026-02-06T10:15:00.000Z"
    assert len(received) == 1


def test_deleting_block_drops_it_from_planning(db_session):
    block = _block(db_session, "A")
    planning.put_planning(db_session, on_air_block_ids=[block["id"]])
    blocks.delete_block(db_session, block["id"])
    assert planning.get_planning(db_session)["onAirBlockIds"] == []
