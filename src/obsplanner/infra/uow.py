"""
Unit of Work for obsplanner.

The CLI commands and the HTTP routes both take their sessions from here, so a
resource added from the terminal and a block dragged on the timeline commit
and roll back the same way. Use cases also commit themselves; the outer commit
is then a no-op.
"""

from __future__ import annotations

import contextlib
from collections.abc import Generator

from sqlalchemy.orm import Session

from . import db as _db


@contextlib.contextmanager
def session() -> Generator[Session, None, None]:
    """
    Open a session, commit it on success, roll back and re-raise on error.

    Usage:
        with session() as db:
            resources.add_resource(db, "encoders", "TX 28")
    """
    # Resolved per call so tests can rebind SessionLocal.
    db = _db.SessionLocal()
    try:
        yield db
        db.commit()
    except Exception:
        db.rollback()
        raise
    finally:
        db.close()


def get_db() -> Generator[Session, None, None]:
    """FastAPI dependency wrapping ``session()``."""
    with session() as db:
        yield db
