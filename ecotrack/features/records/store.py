"""
ecotrack/features/records/store.py

Typed record-store boundary shared by every feature service.

Each record kind is a flat row (dict) with a string `id`. Stores expose the
same five operations regardless of backing: insert, get, query (equality
filters + optional ordering and limit), update, delete.

In-memory implementation lives here; the SQL implementation is in
store_sql.py. `get_record_store()` picks one based on DATABASE_URL.
"""

from __future__ import annotations

import copy
import logging
import threading
from enum import Enum
from typing import Any, Dict, List, Mapping, Optional, Protocol
from uuid import uuid4

from ecotrack.core.errors import DuplicateRecordError
from ecotrack.core.logging import log_event
from ecotrack.core.metrics import store_errors_total

logger = logging.getLogger(__name__)

Row = Dict[str, Any]


class RecordKind(str, Enum):
    """Record kinds; values double as SQL table names."""
    CARBON_RECORD = "carbon_records"
    INSIGHT = "insights"
    USER_CHALLENGE = "user_challenges"
    CHALLENGE_STATS = "challenge_stats"
    PROFILE = "profiles"
    COMMUNITY_POST = "community_posts"
    POST_COMMENT = "post_comments"
    POST_LIKE = "post_likes"


class RecordStore(Protocol):
    """Operations every record store implements."""

    def insert(self, kind: RecordKind, row: Mapping[str, Any]) -> Row: ...

    def get(self, kind: RecordKind, record_id: str) -> Optional[Row]: ...

    def query(
        self,
        kind: RecordKind,
        filters: Optional[Mapping[str, Any]] = None,
        *,
        order_by: Optional[str] = None,
        descending: bool = False,
        limit: Optional[int] = None,
    ) -> List[Row]: ...

    def update(self, kind: RecordKind, record_id: str, fields: Mapping[str, Any]) -> Optional[Row]: ...

    def delete(self, kind: RecordKind, record_id: str) -> bool: ...


def new_record_id() -> str:
    return str(uuid4())


class InMemoryRecordStore:
    """
    Process-local record store.

    Rows are deep-copied in and out so callers never share mutable state
    with the store. Ordering ties keep insertion order.
    """

    def __init__(self):
        self._tables: Dict[RecordKind, Dict[str, Row]] = {kind: {} for kind in RecordKind}
        self._lock = threading.Lock()

    def insert(self, kind: RecordKind, row: Mapping[str, Any]) -> Row:
        record = copy.deepcopy(dict(row))
        record_id = record.get("id") or new_record_id()
        record["id"] = record_id
        with self._lock:
            table = self._tables[kind]
            if record_id in table:
                raise DuplicateRecordError(f"{kind.value} row {record_id} already exists")
            table[record_id] = record
        return copy.deepcopy(record)

    def get(self, kind: RecordKind, record_id: str) -> Optional[Row]:
        with self._lock:
            row = self._tables[kind].get(record_id)
            return copy.deepcopy(row) if row is not None else None

    def query(
        self,
        kind: RecordKind,
        filters: Optional[Mapping[str, Any]] = None,
        *,
        order_by: Optional[str] = None,
        descending: bool = False,
        limit: Optional[int] = None,
    ) -> List[Row]:
        filters = filters or {}
        with self._lock:
            rows = [
                copy.deepcopy(row)
                for row in self._tables[kind].values()
                if all(row.get(field) == value for field, value in filters.items())
            ]
        if order_by:
            rows.sort(key=lambda r: _sort_key(r.get(order_by)), reverse=descending)
        if limit is not None:
            rows = rows[:limit]
        return rows

    def update(self, kind: RecordKind, record_id: str, fields: Mapping[str, Any]) -> Optional[Row]:
        with self._lock:
            row = self._tables[kind].get(record_id)
            if row is None:
                return None
            changes = {k: copy.deepcopy(v) for k, v in fields.items() if k != "id"}
            row.update(changes)
            return copy.deepcopy(row)

    def delete(self, kind: RecordKind, record_id: str) -> bool:
        with self._lock:
            return self._tables[kind].pop(record_id, None) is not None


def _sort_key(value: Any):
    # None sorts first; a tuple keeps mixed None/non-None comparable
    return (value is not None, value)


def get_record_store() -> RecordStore:
    """
    Get the appropriate record store implementation.

    - SQL store if DATABASE_URL (or TEST_DATABASE_URL) is configured and reachable
    - In-memory otherwise, or if the database is unavailable

    Services are agnostic to the implementation.
    """
    from ecotrack.core.database import get_database_url

    database_url = get_database_url()
    if database_url:
        try:
            from ecotrack.core.database import build_engine, check_connection, create_all_tables
            from ecotrack.features.records.store_sql import SqlRecordStore

            engine = build_engine(database_url)
            if check_connection(engine):
                create_all_tables(engine)
                return SqlRecordStore(engine)
            logger.warning("[record_store] database unavailable, falling back to in-memory")
        except Exception as e:
            logger.warning(f"[record_store] failed to initialize SQL store: {e}; falling back to in-memory")

    return InMemoryRecordStore()


def log_store_failure(kind: RecordKind, op: str, exc: Exception, *, user_id: Optional[str] = None) -> None:
    """Record a swallowed store failure (log + metric). Callers keep prior state."""
    store_errors_total.inc(labels={"kind": kind.value, "op": op})
    log_event(
        "warning",
        "store.error",
        user_id=user_id,
        event_type="store.error",
        error_code=getattr(exc, "code", "store_unavailable"),
        extra={"kind": kind.value, "op": op, "error": exc},
    )
