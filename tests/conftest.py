"""
Pytest fixtures for LeaseLocker tests.
"""

import os
from datetime import datetime, timedelta, timezone

import pytest
import pytest_asyncio

# Ensure test config is set before importing leaselocker modules.
os.environ.setdefault("LEASELOCKER_ENV", "development")
os.environ.setdefault("LEASELOCKER_LOG_LEVEL", "DEBUG")

from leaselocker.db.base import close_db, create_engine, create_session_factory, init_db
from leaselocker.engine.errors import LeaseContention
from leaselocker.models import Lease, StaticLeaseRequest
from leaselocker.observability.metrics import MetricsRegistry
from leaselocker.stores import MemoryLockerStore, SQLLockerStore


class FakeClock:
    """Manually advanced clock."""

    def __init__(self, start: datetime | None = None):
        self.now = start or datetime(2024, 1, 1, 12, 0, 0, tzinfo=timezone.utc)

    def __call__(self) -> datetime:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += timedelta(seconds=seconds)


class ScriptedStore:
    """
    Store whose lease() outcomes are scripted per call.

    Each outcome is either "ok" or an exception instance to raise. Once the
    script runs out, the last outcome repeats.
    """

    def __init__(self, lease_ids: list[str], outcomes: list, attributes: dict | None = None):
        self.lease_ids = lease_ids
        self.outcomes = outcomes
        self.attributes = attributes
        self.calls: list[tuple[str, datetime]] = []
        self.list_error: Exception | None = None

    async def list_lease_ids(self) -> list[str]:
        if self.list_error is not None:
            raise self.list_error
        return list(self.lease_ids)

    async def lease(self, item_id, request, until) -> Lease:
        index = min(len(self.calls), len(self.outcomes) - 1)
        self.calls.append((item_id, until))
        outcome = self.outcomes[index]
        if outcome == "contention":
            raise LeaseContention(item_id, request.lessee_id())
        if isinstance(outcome, Exception):
            raise outcome
        return Lease(
            item_id=item_id,
            payload=request.decode_payload(self.attributes),
            request=request,
            expires_at=until,
        )


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def registry() -> MetricsRegistry:
    return MetricsRegistry()


@pytest.fixture
def make_request():
    def _make(lessee_id: str = "testrunner", seconds: float = 30, payload_model=None):
        return StaticLeaseRequest(lessee_id, timedelta(seconds=seconds), payload_model)

    return _make


@pytest.fixture
def memory_store(clock) -> MemoryLockerStore:
    return MemoryLockerStore(now_provider=clock)


@pytest_asyncio.fixture
async def sql_engine(tmp_path):
    """Async engine on a throwaway database (SQLite unless overridden)."""
    database_url = os.getenv(
        "LEASELOCKER_TEST_DATABASE_URL",
        f"sqlite+aiosqlite:///{tmp_path / 'leases.db'}",
    )
    engine = create_engine(database_url)
    yield engine
    await close_db(engine)


@pytest_asyncio.fixture
async def sql_store(sql_engine, clock) -> SQLLockerStore:
    store = SQLLockerStore(create_session_factory(sql_engine), now_provider=clock)
    async with sql_engine.begin() as conn:
        await conn.run_sync(store.metadata.drop_all)
    await init_db(sql_engine, store.metadata)
    return store


@pytest.fixture
def scripted_store():
    """Factory for stores with scripted lease outcomes."""
    return ScriptedStore
