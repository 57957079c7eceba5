"""
Health and diagnostics endpoints.

Lightweight liveness, readiness against the record store, and Prometheus
text metrics. Nothing here exposes secrets.
"""

import logging

from fastapi import APIRouter, Depends, Response
from fastapi.responses import JSONResponse
from sqlalchemy import inspect

from ecotrack.core.database import check_connection, metadata
from ecotrack.core.metrics import METRICS
from ecotrack.features.records.store_sql import SqlRecordStore
from ecotrack.services import AppServices, get_services

logger = logging.getLogger("ecotrack")

router = APIRouter(tags=["health"])


@router.get("/healthz")
def healthz():
    """Lightweight liveness check (no deps)."""
    return {"status": "ok"}


@router.get("/readyz")
def readyz(services: AppServices = Depends(get_services)):
    """Readiness check: store connectivity + required tables."""
    store = services.store
    if not isinstance(store, SqlRecordStore):
        return {"status": "ok", "store": "memory"}

    if not check_connection(store.engine):
        logger.error("[readyz] readiness check failed: database unreachable")
        return JSONResponse(status_code=503, content={"status": "error", "detail": "database unreachable"})

    inspector = inspect(store.engine)
    missing = [t for t in metadata.tables if not inspector.has_table(t)]
    if missing:
        detail = f"missing tables: {', '.join(sorted(missing))}"
        logger.warning(f"[readyz] {detail}")
        return JSONResponse(status_code=503, content={"status": "error", "detail": detail})

    return {"status": "ok", "store": "sql"}


@router.get("/metrics")
def metrics_endpoint():
    payload = METRICS.export_prometheus()
    return Response(content=payload, media_type="text/plain")
