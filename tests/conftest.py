from __future__ import annotations

from collections.abc import Generator

import pytest
from fastapi.testclient import TestClient

from flakeid.api.deps import get_snowflake_generator
from flakeid.core.layout import FIXED_LAYOUT
from flakeid.core.origin import StaticOrigin
from flakeid.core.snowflake import SnowflakeGenerator
from flakeid.main import app

# 2020-01-01T00:00:00Z
EPOCH_MS = 1577836800000
NOW_MS = EPOCH_MS + 86_400_000


@pytest.fixture
def clock(monkeypatch) -> list[int]:
    """Freeze the generator clock; tests move it by assigning clock[0]."""
    now = [NOW_MS]
    monkeypatch.setattr(SnowflakeGenerator, "_now_ms", staticmethod(lambda: now[0]))
    return now


@pytest.fixture
def fixed_generator() -> SnowflakeGenerator:
    return SnowflakeGenerator(epoch=EPOCH_MS, layout=FIXED_LAYOUT, origin=StaticOrigin(worker_id=1))


@pytest.fixture
def generator() -> SnowflakeGenerator:
    return SnowflakeGenerator(epoch=EPOCH_MS, origin=StaticOrigin(worker_id=3, process_id=9))


@pytest.fixture
def client(fixed_generator) -> Generator[TestClient, None, None]:
    app.dependency_overrides[get_snowflake_generator] = lambda: fixed_generator
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()
