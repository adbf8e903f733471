"""
Shared pytest fixtures for the records service tests.

Key patterns:

1. Database Isolation: Each test gets a fresh temporary database
2. DI Override: Use app.dependency_overrides to inject test dependencies
3. Event capture: A recording event sink stands in for the logging sink

Fixture Hierarchy:
    temp_db → record_repo / id_counter → record_store → record_service → test_app → client
"""
import os
import tempfile
from typing import List, Tuple

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

# Point the database directory at a temp dir before config is imported,
# so importing core.config does not create ./data in the working tree
os.environ.setdefault("RECORDS_SVC_DB_DIR", tempfile.mkdtemp(prefix="records_svc_test_"))

from repositories import Database, HealthRecordRepository, SqliteIdCounter
from services.record_store import RecordStore
from services.record_service import RecordService
from core.exceptions import setup_exception_handlers
from core import dependencies as deps


class RecordingEventSink:
    """Event sink that keeps every reported event in memory."""

    def __init__(self):
        self.events: List[Tuple[str, int]] = []

    def report(self, operation: str, record_id: int) -> None:
        self.events.append((operation, record_id))


@pytest.fixture
def temp_db():
    """
    Create a temporary database for testing.

    This fixture creates a fresh SQLite database in a temp file,
    ensuring complete isolation between tests.
    """
    fd, db_path = tempfile.mkstemp(suffix='.db')
    os.close(fd)

    db = Database(db_path=db_path)
    yield db

    # Cleanup, including WAL side files
    for path in (db_path, db_path + "-wal", db_path + "-shm"):
        if os.path.exists(path):
            os.unlink(path)


@pytest.fixture
def record_repo(temp_db):
    """Create a HealthRecordRepository with the test database."""
    return HealthRecordRepository(db=temp_db, max_record_size=1024)


@pytest.fixture
def id_counter(temp_db):
    """Create a SqliteIdCounter with the test database."""
    return SqliteIdCounter(db=temp_db)


@pytest.fixture
def record_store(record_repo, id_counter):
    """Create a RecordStore over the test repositories."""
    return RecordStore(records=record_repo, id_counter=id_counter)


@pytest.fixture
def event_sink():
    return RecordingEventSink()


@pytest.fixture
def record_service(record_store, event_sink):
    """Create a RecordService with the test store and a recording sink."""
    return RecordService(store=record_store, event_sink=event_sink)


@pytest.fixture
def alice_payload():
    return {
        "patient_name": "Alice",
        "symptoms": "fever,cough",
        "diagnosis": "flu",
        "treatment": "rest",
    }


@pytest.fixture
def test_app(record_store, record_service):
    """
    Create a FastAPI test app with dependency overrides.

    Uses the real routers, injects the test store and service via
    dependency_overrides, and registers the production exception handlers.
    """
    from api.routers import health_router, records_router

    app = FastAPI(title="Health Records Service API Test")

    setup_exception_handlers(app)

    app.dependency_overrides[deps.get_record_store] = lambda: record_store
    app.dependency_overrides[deps.get_record_service] = lambda: record_service

    app.include_router(health_router)
    app.include_router(records_router)

    yield app

    app.dependency_overrides.clear()


@pytest.fixture
def client(test_app):
    """Create a test client for the API."""
    return TestClient(test_app)
