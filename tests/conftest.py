"""
Shared fixtures and fake collaborators.
"""

import os
import sqlite3

import pytest

from sealbid.core.auction import AuctionRepository, ManualClock, ResolutionEngine
from sealbid.core.storage import MemorySink, PersistentStore

# 2023-11-14 22:13:20 UTC
START_MS = 1_700_000_000_000


# =============================================================================
# Fakes
# =============================================================================


class FakeWallet:
    """External wallet provider double."""

    def __init__(self, address="0x" + "ab" * 20, error=None):
        self.address = address
        self.error = error
        self.connect_calls = []
        self.disconnect_calls = 0
        self.disconnect_error = None

    async def connect(self, provider_id):
        self.connect_calls.append(provider_id)
        if self.error is not None:
            raise self.error
        return self.address

    async def disconnect(self):
        self.disconnect_calls += 1
        if self.disconnect_error is not None:
            raise self.disconnect_error

    async def current_account(self):
        return self.address


class FakeRemoteClient:
    """In-memory remote execution environment."""

    def __init__(self, reachable=True):
        self.reachable = reachable
        self.auctions = {}
        self.results = {}
        self.bids = []
        self._next_id = 1

    def _check(self):
        if not self.reachable:
            raise ConnectionError("connection refused")

    async def ping(self):
        self._check()

    async def submit_auction_create(self, item_name, description, duration_hours, minimum_bid, creator):
        self._check()
        auction_id = self._next_id
        self._next_id += 1
        self.auctions[auction_id] = {
            "id": auction_id,
            "item_name": item_name,
            "description": description,
            "created_at": START_MS,
            "ends_at": START_MS + int(duration_hours * 3_600_000),
            "minimum_bid": minimum_bid,
            "creator": creator,
            "active": True,
        }
        return auction_id

    async def submit_bid(self, auction_id, bidder, amount):
        self._check()
        self.bids.append((auction_id, bidder, amount))
        return f"tx_{len(self.bids)}"

    async def submit_finalize(self, auction_id):
        self._check()
        self.auctions[auction_id]["active"] = False
        return self.results.get(auction_id)

    async def query_auction(self, auction_id):
        self._check()
        return self.auctions.get(auction_id)

    async def query_auctions(self):
        self._check()
        return list(self.auctions.values())

    async def query_result(self, auction_id):
        self._check()
        return self.results.get(auction_id)


class FailingSink(MemorySink):
    """Sink whose writes fail until `healthy` is set."""

    def __init__(self):
        super().__init__()
        self.healthy = False

    def write_batch(self, ops):
        if not self.healthy:
            raise sqlite3.OperationalError("disk I/O error")
        super().write_batch(ops)

    def clear(self, prefix=""):
        if not self.healthy:
            raise sqlite3.OperationalError("disk I/O error")
        super().clear(prefix)


# =============================================================================
# Fixtures
# =============================================================================


@pytest.fixture
def clock():
    return ManualClock(START_MS)


@pytest.fixture
def sink():
    return MemorySink()


@pytest.fixture
def store(sink):
    return PersistentStore(sink)


@pytest.fixture
def repository(store, clock):
    return AuctionRepository(store, clock=clock)


@pytest.fixture
def engine(repository):
    return ResolutionEngine(repository)


@pytest.fixture
def wallet():
    return FakeWallet()


@pytest.fixture
def remote_client():
    return FakeRemoteClient()


@pytest.fixture
def failing_sink():
    return FailingSink()


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    """Keep SEALBID_* variables (including ones a .env file loads) out of other tests."""
    for key in [k for k in os.environ if k.startswith("SEALBID_")]:
        monkeypatch.delenv(key)
    yield
    for key in [k for k in os.environ if k.startswith("SEALBID_")]:
        del os.environ[key]
