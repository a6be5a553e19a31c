"""Shared pytest fixtures for the postback tracker."""

from datetime import datetime, timezone
from itertools import count

import pytest
from fastapi.testclient import TestClient

from utils.conversion_store import ConversionStore, MemoryStorage, get_conversion_store
from utils.records import ConversionKind, ConversionRecord, Network


@pytest.fixture
def memory_store():
    """Conversion store backed by an in-process payload."""
    return ConversionStore(MemoryStorage())


@pytest.fixture
def client(memory_store, monkeypatch):
    """TestClient with the memory store injected and no dashboard token."""
    import core.auth
    from main import app

    monkeypatch.setattr(core.auth, "DASHBOARD_TOKEN", "")
    app.dependency_overrides[get_conversion_store] = lambda: memory_store
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()


@pytest.fixture
def make_record():
    """Factory for ConversionRecords with sensible defaults."""
    seq = count(1)

    def _make(**overrides):
        n = next(seq)
        data = {
            "id": f"rec-{n}",
            "network": Network.TRAFEE,
            "kind": ConversionKind.LEAD,
            "sub_id": f"sub-{n}",
            "transaction_id": f"TX-{n}",
            "payout": 1.0,
            "ip_address": "10.0.0.1",
            "timestamp": datetime(2025, 1, 15, 10, 30, tzinfo=timezone.utc),
            "raw_params": {},
        }
        data.update(overrides)
        return ConversionRecord(**data)

    return _make


@pytest.fixture
def sample_records(make_record):
    """A small mixed set spanning three days and all three networks (newest first)."""
    return [
        make_record(
            network=Network.ADVERTEN, kind=ConversionKind.CLICK, sub_id="fb-camp-2",
            payout=0.0, timestamp=datetime(2025, 1, 17, 23, 59, 59, tzinfo=timezone.utc),
        ),
        make_record(
            network=Network.CLICKDEALER, kind=ConversionKind.LEAD, sub_id="FB-Camp-1",
            payout=20.0, timestamp=datetime(2025, 1, 16, 12, 0, tzinfo=timezone.utc),
        ),
        make_record(
            network=Network.TRAFEE, kind=ConversionKind.CLICK, sub_id="google-1",
            payout=0.0, timestamp=datetime(2025, 1, 16, 8, 0, tzinfo=timezone.utc),
        ),
        make_record(
            network=Network.TRAFEE, kind=ConversionKind.LEAD, sub_id="google-1",
            payout=12.5, timestamp=datetime(2025, 1, 15, 0, 0, tzinfo=timezone.utc),
        ),
    ]
