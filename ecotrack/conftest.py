# ecotrack/conftest.py
from datetime import datetime, timedelta, timezone

import pytest
from fastapi.testclient import TestClient

from ecotrack.core.database import build_engine, create_all_tables
from ecotrack.core.metrics import METRICS
from ecotrack.features.records.store import InMemoryRecordStore
from ecotrack.features.records.store_sql import SqlRecordStore
from ecotrack.models.footprint import CarbonRecord
from ecotrack.services import build_services

# A Tuesday; Monday-only tips stay out of the way unless a test asks for them
BASE_TIME = datetime(2024, 1, 2, 12, 0, tzinfo=timezone.utc)


@pytest.fixture(autouse=True)
def reset_metrics():
    METRICS.reset()
    yield


@pytest.fixture
def store():
    return InMemoryRecordStore()


@pytest.fixture
def services(store):
    """Every feature service over a fresh in-memory store."""
    return build_services(store)


@pytest.fixture
def client(services):
    from ecotrack.main import create_app

    return TestClient(create_app(services))


@pytest.fixture
def sqlite_engine():
    """In-memory SQLite shared across threads via StaticPool."""
    engine = build_engine("sqlite://")
    create_all_tables(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def sql_store(sqlite_engine):
    return SqlRecordStore(sqlite_engine)


@pytest.fixture
def make_records():
    """Build CarbonRecords for one user, one per day starting at BASE_TIME."""

    def _make(emissions, user_id="user-1", start=BASE_TIME):
        return [
            CarbonRecord(
                id=f"{user_id}-{i}",
                user_id=user_id,
                emission=value,
                created_at=start + timedelta(days=i),
            )
            for i, value in enumerate(emissions)
        ]

    return _make
