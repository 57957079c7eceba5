"""Tests for health, readiness and metrics endpoints."""

from fastapi.testclient import TestClient

from ecotrack.services import build_services


def test_healthz_ok(client):
    resp = client.get("/healthz")
    assert resp.status_code == 200
    assert resp.json() == {"status": "ok"}


def test_readyz_memory_store(client):
    resp = client.get("/readyz")
    assert resp.status_code == 200
    assert resp.json()["store"] == "memory"


def test_readyz_sql_store(sql_store):
    from ecotrack.main import create_app

    client = TestClient(create_app(build_services(sql_store)))
    resp = client.get("/readyz")
    assert resp.status_code == 200
    assert resp.json() == {"status": "ok", "store": "sql"}


def test_readyz_reports_missing_tables(sqlite_engine, sql_store):
    from ecotrack.core.database import drop_all_tables
    from ecotrack.main import create_app

    drop_all_tables(sqlite_engine)
    client = TestClient(create_app(build_services(sql_store)))
    resp = client.get("/readyz")
    assert resp.status_code == 503
    assert "missing tables" in resp.json()["detail"]


def test_metrics_exposes_counters(client):
    client.post("/v1/footprint/calculate", headers={"X-User-Id": "u1"}, json={})
    body = client.get("/metrics").text
    assert 'footprint_calculations_total{persisted="true"} 1.0' in body
    assert "http_requests_total" in body
