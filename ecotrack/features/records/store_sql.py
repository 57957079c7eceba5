"""
ecotrack/features/records/store_sql.py

SQL-backed record store.

Maintains the identical interface to InMemoryRecordStore. Tables are defined
in ecotrack.core.database; every SQLAlchemy failure surfaces as StoreError so
services can treat the store as best-effort.
"""

from contextlib import contextmanager
from datetime import datetime, timezone
from typing import Any, List, Mapping, Optional

from sqlalchemy import delete, insert, select, update
from sqlalchemy.engine import Engine
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import sessionmaker

from ecotrack.core.database import metadata
from ecotrack.core.errors import DuplicateRecordError, StoreError
from ecotrack.features.records.store import RecordKind, Row, new_record_id


class SqlRecordStore:
    """
    SQLAlchemy Core record store.

    One short-lived session per operation; no cross-call transactions.
    """

    def __init__(self, engine: Engine):
        self._engine = engine
        self._session_factory = sessionmaker(autocommit=False, autoflush=False, bind=engine)

    @property
    def engine(self) -> Engine:
        return self._engine

    @contextmanager
    def _session(self, kind: RecordKind, op: str):
        session = self._session_factory()
        try:
            yield session
            session.commit()
        except IntegrityError as e:
            session.rollback()
            if _is_unique_violation(e):
                raise DuplicateRecordError(f"{kind.value} {op} violated a unique constraint") from e
            raise StoreError(f"{kind.value} {op} violated a constraint") from e
        except SQLAlchemyError as e:
            session.rollback()
            raise StoreError(f"{kind.value} {op} failed: {e.__class__.__name__}") from e
        finally:
            session.close()

    @staticmethod
    def _table(kind: RecordKind):
        return metadata.tables[kind.value]

    def insert(self, kind: RecordKind, row: Mapping[str, Any]) -> Row:
        table = self._table(kind)
        values = {k: v for k, v in row.items() if k in table.c}
        values["id"] = values.get("id") or new_record_id()
        with self._session(kind, "insert") as session:
            session.execute(insert(table).values(**values))
        return self.get(kind, values["id"])

    def get(self, kind: RecordKind, record_id: str) -> Optional[Row]:
        table = self._table(kind)
        with self._session(kind, "get") as session:
            result = session.execute(select(table).where(table.c.id == record_id)).mappings().first()
            return _to_row(result) if result is not None else None

    def query(
        self,
        kind: RecordKind,
        filters: Optional[Mapping[str, Any]] = None,
        *,
        order_by: Optional[str] = None,
        descending: bool = False,
        limit: Optional[int] = None,
    ) -> List[Row]:
        table = self._table(kind)
        stmt = select(table)
        for field, value in (filters or {}).items():
            stmt = stmt.where(table.c[field] == value)
        if order_by:
            column = table.c[order_by]
            stmt = stmt.order_by(column.desc() if descending else column.asc())
        if limit is not None:
            stmt = stmt.limit(limit)
        with self._session(kind, "query") as session:
            return [_to_row(r) for r in session.execute(stmt).mappings().all()]

    def update(self, kind: RecordKind, record_id: str, fields: Mapping[str, Any]) -> Optional[Row]:
        table = self._table(kind)
        values = {k: v for k, v in fields.items() if k in table.c and k != "id"}
        if values:
            with self._session(kind, "update") as session:
                result = session.execute(update(table).where(table.c.id == record_id).values(**values))
                if result.rowcount == 0:
                    return None
        return self.get(kind, record_id)

    def delete(self, kind: RecordKind, record_id: str) -> bool:
        table = self._table(kind)
        with self._session(kind, "delete") as session:
            result = session.execute(delete(table).where(table.c.id == record_id))
            return result.rowcount > 0


def _is_unique_violation(error: IntegrityError) -> bool:
    # psycopg2 exposes the SQLSTATE; sqlite only has the message
    if getattr(error.orig, "pgcode", None) == "23505":
        return True
    return "unique" in str(error.orig).lower()


def _to_row(mapping) -> Row:
    row = dict(mapping)
    for key, value in row.items():
        # SQLite drops tzinfo; every stored timestamp is UTC
        if isinstance(value, datetime) and value.tzinfo is None:
            row[key] = value.replace(tzinfo=timezone.utc)
    return row
