"""
Tests for the resource registry use cases.
"""

import uuid

import pytest

from obsplanner.infra.exceptions import ConstraintError, NotFoundError, ValidationError
from obsplanner.runtime.subscriptions import SubscriptionRegistry
from obsplanner.usecases import resources


class TestAddResource:
    def test_add_and_list(self, db_session):
        created = resources.add_resource(db_session, "encoders", name="  TX 05 ")
        assert created["name"] == "TX 05"
        uuid.UUID(created["id"])
        assert created["created_at"].endswith("Z")

        resources.add_resource(db_session, "encoders", name="TX 01")
        assert [r["name"] for r in resources.list_resources(db_session, "encoders")] == ["TX 01", "TX 05"]

    def test_name_is_required(self, db_session):
        with pytest.raises(ValidationError, match="Name is required"):
            resources.add_resource(db_session, "booths", name="   ")

    def test_duplicate_name_ignores_case(self, db_session):
        resources.add_resource(db_session, "commentators", name="Jane Doe")
        with pytest.raises(ConstraintError):
            resources.add_resource(db_session, "commentators", name="jane doe")

    def test_invalid_type(self, db_session):
        with pytest.raises(ValidationError, match="Invalid resource type"):
            resources.add_resource(db_session, "cameras", name="Cam 1")

    def test_publishes_insert(self, db_session):
        registry = SubscriptionRegistry()
        received = []
        registry.subscribe("producers", received.append)
        created = resources.add_resource(db_session, "producers", name="Alex", registry=registry)
        assert received[0].row["id"] == created["id"]
        assert received[0].kind.value == "INSERT"


class TestUpdateDeleteResource:
    def test_update_renames(self, db_session):
        suite = resources.add_resource(db_session, "suites", name="Suite A")
        updated = resources.update_resource(db_session, "suites", suite["id"], name="Suite B")
        assert updated == {**suite, "name": "Suite B"}

    def test_update_to_same_name_is_allowed(self, db_session):
        suite = resources.add_resource(db_session, "suites", name="Suite A")
        assert resources.update_resource(db_session, "suites", suite["id"], name="suite a")["name"] == "suite a"

    def test_update_to_taken_name(self, db_session):
        resources.add_resource(db_session, "networks", name="CBC TV")
        gem = resources.add_resource(db_session, "networks", name="CBC Gem")
        with pytest.raises(ConstraintError):
            resources.update_resource(db_session, "networks", gem["id"], name="cbc tv")

    def test_delete(self, db_session):
        booth = resources.add_resource(db_session, "booths", name="VT 51")
        result = resources.delete_resource(db_session, "booths", booth["id"])
        assert result["deleted"] is True
        assert resources.list_resources(db_session, "booths") == []

    def test_missing_and_malformed_ids(self, db_session):
        with pytest.raises(NotFoundError):
            resources.delete_resource(db_session, "booths", str(uuid.uuid4()))
        with pytest.raises(ValidationError):
            resources.get_resource(db_session, "booths", "not-a-uuid")


def test_seed_default_resources_is_idempotent(db_session):
    assert resources.seed_default_resources(db_session) == {"encoders": 27, "booths": 12}
    assert resources.seed_default_resources(db_session) == {"encoders": 0, "booths": 0}
    names = [r["name"] for r in resources.list_resources(db_session, "encoders")]
    assert names[0] == "TX 01" and names[-1] == "TX 27"
