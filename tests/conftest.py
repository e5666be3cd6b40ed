# tests/conftest.py
import os
import tempfile
from datetime import datetime, timezone

# Point the app at a throwaway database before anything imports fieldjobs
_DB_DIR = tempfile.mkdtemp(prefix="fieldjobs-tests-")
os.environ["DATABASE_URL"] = f"sqlite:///{os.path.join(_DB_DIR, 'test.db')}"
os.environ.setdefault("REEVALUATE_ENABLED", "false")
os.environ.setdefault("LOG_FORMAT", "text")
os.environ.setdefault("LOG_CONFIG_FILE", "")

import pytest

from fieldjobs.core import FixedClock
from fieldjobs.db import SessionLocal, init_db, engine
from fieldjobs.models.job import Job

T0 = datetime(2026, 3, 2, 9, 0, tzinfo=timezone.utc)

init_db()

@pytest.fixture
def clock():
    return FixedClock(T0)

@pytest.fixture
def db():
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()

@pytest.fixture(autouse=True)
def clean_jobs():
    yield
    with engine.begin() as conn:
        conn.execute(Job.__table__.delete())

@pytest.fixture
def client(clock):
    """TestClient with the app clock pinned; lifespan (and the scheduler) is not started"""
    from fastapi.testclient import TestClient
    from fieldjobs.main import app

    app.state.clock = clock
    try:
        yield TestClient(app)
    finally:
        app.state.clock = None

@pytest.fixture
def job_payload():
    return {
        "customer": "Acme Ltd",
        "site": "Site A - Manchester",
        "contact": {"name": "John Doe", "number": "0123456789", "email": "john@acme.com", "relationship": "Manager"},
        "description": "Fix electrical issue in main hall",
        "job_type": "Maintenance",
        "category": "Electrical",
        "priority": "Medium",
        "engineer": "Jane Smith",
        "target_completion_minutes": 90,
    }
