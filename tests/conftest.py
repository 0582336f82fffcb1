# tests/conftest.py
"""
Pytest configuration and fixtures.

Every test gets its own in-memory SQLite database and a FrozenClock, so
expiration and sweeping can be driven by moving the clock forward.
"""

import os
from datetime import datetime

import pytest

# Set test environment before anything imports noteflow.database
os.environ.setdefault("TESTING", "1")
os.environ.setdefault("DATABASE_URL", "sqlite:///:memory:")

from sqlalchemy.orm import sessionmaker  # noqa: E402

from noteflow import models  # noqa: E402,F401
from noteflow.clock import FrozenClock  # noqa: E402
from noteflow.database import Base, build_engine  # noqa: E402

USER_ID = "user_alice"
OTHER_USER_ID = "user_bob"
START = datetime(2025, 1, 1, 12, 0, 0)


@pytest.fixture
def engine():
    engine = build_engine("sqlite:///:memory:")
    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture
def db(engine):
    """Session bound to a fresh in-memory database."""
    Session = sessionmaker(bind=engine, autocommit=False, autoflush=False, future=True)
    session = Session()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def clock():
    return FrozenClock(START)


@pytest.fixture
def make_folder(db, clock):
    """Factory for live folders owned by USER_ID unless told otherwise."""
    from noteflow.services.notes_service import create_folder

    def _make(name="Work", user_id=USER_ID, **kwargs):
        return create_folder(db, user_id, name, clock=clock, **kwargs)

    return _make


@pytest.fixture
def make_note(db, clock):
    """Factory for live notes owned by USER_ID unless told otherwise."""
    from noteflow.services.notes_service import create_note

    def _make(title="Meeting notes", folder=None, user_id=USER_ID, content="", folder_id=None):
        if folder is not None:
            folder_id = folder.id
        return create_note(db, user_id, title, content=content, folder_id=folder_id, clock=clock)

    return _make


@pytest.fixture
def client(db, clock):
    """TestClient wired to the test session and clock."""
    from fastapi.testclient import TestClient

    from noteflow.clock import get_clock
    from noteflow.config import get_settings
    from noteflow.database import get_db
    from noteflow.main import app

    settings = get_settings().model_copy(update={"ADMIN_API_KEY": "test-admin-key"})

    def _get_db():
        yield db

    app.dependency_overrides[get_db] = _get_db
    app.dependency_overrides[get_clock] = lambda: clock
    app.dependency_overrides[get_settings] = lambda: settings
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()


@pytest.fixture
def auth_headers():
    return {"X-User-Id": USER_ID, "X-User-Email": "alice@example.com"}
