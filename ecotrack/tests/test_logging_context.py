"""Tests for structured logging and request_id propagation."""

import json
import logging

from ecotrack.core.logging import JsonFormatter, PrettyFormatter, latency_bucket_ms, log_event


def test_request_id_in_response_and_logs(client, caplog):
    with caplog.at_level(logging.INFO, logger="ecotrack"):
        response = client.get("/healthz")
    rid = response.headers.get("x-request-id")
    assert rid
    records = [r for r in caplog.records if getattr(r, "request_id", None) == rid]
    assert records, "Expected logs to contain request_id from response"
    assert len({r.request_id for r in records}) == 1


def test_domain_events_carry_request_id(client, caplog):
    with caplog.at_level(logging.INFO, logger="ecotrack"):
        response = client.post("/v1/footprint/calculate", headers={"X-User-Id": "u1"}, json={})
    rid = response.headers["x-request-id"]
    events = [r for r in caplog.records if r.getMessage() == "footprint.recorded"]
    assert events
    assert events[0].request_id == rid
    assert events[0].user_id == "u1"


def test_json_formatter_fields(caplog):
    with caplog.at_level(logging.INFO, logger="ecotrack"):
        log_event("info", "store.error", user_id="u9", event_type="store.error", error_code="store_unavailable")
    record = next(r for r in caplog.records if r.getMessage() == "store.error")
    payload = json.loads(JsonFormatter().format(record))
    assert payload["user_id"] == "u9"
    assert payload["error_code"] == "store_unavailable"
    assert "[user=u9]" in PrettyFormatter().format(record)


def test_log_event_truncates_extra(caplog):
    with caplog.at_level(logging.INFO, logger="ecotrack"):
        log_event("info", "big.payload", extra={"blob": "x" * 2000})
    record = next(r for r in caplog.records if r.getMessage() == "big.payload")
    assert record.blob.endswith("...<truncated>")


def test_latency_buckets():
    assert latency_bucket_ms(None) == "unknown"
    assert latency_bucket_ms(5000) == ">=1000ms"
