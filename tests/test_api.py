from __future__ import annotations

import asyncio

from fastapi import HTTPException

from flakeid.api.deps import get_snowflake_generator
from flakeid.core.config import settings
from flakeid.core.layout import FieldLayout
from flakeid.core.snowflake import SnowflakeGenerator
from flakeid.main import app

EPOCH_MS = 1577836800000
NOW_MS = EPOCH_MS + 86_400_000


def test_health_check(client):
    r = client.get("/api/v1/utils/health-check/")
    assert r.status_code == 200
    assert r.json() is True


def test_generate_batch(client):
    r = client.post("/api/v1/ids", json={"amount": 3, "timestamp": NOW_MS})
    assert r.status_code == 200
    body = r.json()
    assert body["code"] == 0
    data = body["data"]
    assert data["count"] == 3
    assert [item["sequence"] for item in data["ids"]] == [0, 1, 2]
    assert all(isinstance(item["id"], str) for item in data["ids"])
    assert all(item["worker_id"] == 1 and item["timestamp"] == NOW_MS for item in data["ids"])


def test_generate_then_deconstruct(client):
    r = client.post("/api/v1/ids", json={"timestamp": NOW_MS, "worker_id": 9, "sequence": 77})
    item = r.json()["data"]["ids"][0]

    r = client.get(f"/api/v1/ids/{item['id']}")
    assert r.status_code == 200
    data = r.json()["data"]
    assert data == item
    assert (data["worker_id"], data["sequence"], data["process_id"]) == (9, 77, None)


def test_deconstruct_invalid(client):
    r = client.get("/api/v1/ids/not-a-number")
    assert r.status_code == 400
    assert r.json()["code"] == 400301


def test_amount_validation(client):
    r = client.post("/api/v1/ids", json={"amount": 0})
    assert r.status_code == 422
    assert r.json()["code"] == 422000


def test_amount_over_batch_limit(client, monkeypatch):
    monkeypatch.setattr(settings, "MAX_BATCH_SIZE", 5)
    r = client.post("/api/v1/ids", json={"amount": 6})
    assert r.status_code == 400
    assert r.json()["code"] == 400201


def test_sequence_out_of_range(client):
    r = client.post("/api/v1/ids", json={"timestamp": NOW_MS, "sequence": 1024})
    assert r.status_code == 400
    assert r.json()["code"] == 400201


def test_epoch_overflow_is_server_error(client):
    layout = FieldLayout(total_bits=32, epoch_bits=10, worker_bits=5, process_bits=5, sequence_bits=12)
    app.dependency_overrides[get_snowflake_generator] = lambda: SnowflakeGenerator(epoch=EPOCH_MS, layout=layout)
    r = client.post("/api/v1/ids", json={"timestamp": NOW_MS})
    assert r.status_code == 500
    assert r.json()["code"] == 500101


def test_layout(client):
    r = client.get("/api/v1/ids/layout")
    assert r.status_code == 200
    data = r.json()["data"]
    assert data["epoch"] == EPOCH_MS
    assert data["total_bits"] == 64
    assert data["sequence_space"] == 1024
    assert [f["name"] for f in data["fields"]] == ["timestamp", "worker", "sequence"]
    assert data["max_epoch"] == EPOCH_MS + 2**41 - 1


def test_http_exception_handler_dict_branch():
    from flakeid import main as app_main

    exc = HTTPException(status_code=418, detail={"code": 418001, "message": "teapot"})
    resp = asyncio.run(app_main.http_error_handler(None, exc))  # type: ignore[arg-type]
    assert resp.status_code == 418
    assert b"418001" in resp.body



def test_deconstruct_date_beyond_datetime_range(client):
    layout = FieldLayout(total_bits=96, epoch_bits=60, worker_bits=12, process_bits=12, sequence_bits=12)
    app.dependency_overrides[get_snowflake_generator] = lambda: SnowflakeGenerator(epoch=EPOCH_MS, layout=layout)
    r = client.get(f"/api/v1/ids/{2**96 - 1}")
    assert r.status_code == 200
    data = r.json()["data"]
    assert data["date"] is None
    assert data["sequence"] == 4095
