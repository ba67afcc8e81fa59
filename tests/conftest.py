"""
Global test configuration for obsplanner.

Every test gets a fresh in-memory SQLite database bound to the unit-of-work
session factory, so use cases, routes and CLI commands all see the same data.
"""

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from obsplanner.infra import db as db_module


@pytest.fixture(autouse=True)
def _test_db(monkeypatch):
    """Point SessionLocal at a private in-memory database with all tables created."""
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
        future=True,
    )
    db_module.init_db(bind=engine)

    TestSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine, future=True)
    monkeypatch.setattr(db_module, "SessionLocal", TestSessionLocal)
    monkeypatch.setattr(db_module, "engine", engine)
    yield engine
    engine.dispose()


@pytest.fixture
def db_session():
    session = db_module.SessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def events_path(tmp_path):
    return tmp_path / "events.json"
