from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import List, Optional

from ecotrack.core.errors import StoreError
from ecotrack.core.logging import log_event
from ecotrack.core.metrics import footprint_calculations_total
from ecotrack.features.footprint.scoring import impact_equivalents, score
from ecotrack.features.records.store import RecordKind, RecordStore, log_store_failure
from ecotrack.models.footprint import (
    CarbonRecord,
    FootprintResult,
    FootprintSummary,
    QuestionnaireAnswers,
)

logger = logging.getLogger(__name__)


def record_from_row(row: dict) -> CarbonRecord:
    inputs = row.get("calculation_inputs")
    parsed_inputs: Optional[QuestionnaireAnswers] = None
    if inputs:
        try:
            parsed_inputs = QuestionnaireAnswers.model_validate(inputs)
        except ValueError:
            # Unknown payload version: keep the emission, drop the inputs
            logger.warning(f"Unreadable calculation_inputs on record {row.get('id')}")
    return CarbonRecord(
        id=row["id"],
        user_id=row["user_id"],
        emission=float(row["emission"]),
        created_at=row["created_at"],
        calculation_inputs=parsed_inputs,
    )


def summarize(user_id: str, records: List[CarbonRecord]) -> FootprintSummary:
    """Profile statistics over a user's records (oldest first)."""
    if not records:
        return FootprintSummary(user_id=user_id, record_count=0, total_emission=0.0, average_emission=0.0)
    emissions = [r.emission for r in records]
    total = sum(emissions)
    return FootprintSummary(
        user_id=user_id,
        record_count=len(emissions),
        total_emission=round(total, 4),
        average_emission=round(total / len(emissions), 4),
        min_emission=min(emissions),
        max_emission=max(emissions),
        first_to_last_change=round(emissions[-1] - emissions[0], 4) if len(emissions) >= 2 else 0.0,
    )


class FootprintService:
    """Scores questionnaires and owns the CarbonRecord history."""

    def __init__(self, store: RecordStore):
        self._store = store

    def submit(
        self,
        *,
        user_id: str,
        answers: QuestionnaireAnswers,
        now: Optional[datetime] = None,
    ) -> FootprintResult:
        """
        Score answers and append a CarbonRecord for user_id.

        The score is returned even if the record cannot be stored.
        """
        emission = score(answers)
        created_at = now or datetime.now(timezone.utc)

        record: Optional[CarbonRecord] = None
        try:
            row = self._store.insert(
                RecordKind.CARBON_RECORD,
                {
                    "user_id": user_id,
                    "emission": emission,
                    "calculation_inputs": answers.model_dump(mode="json"),
                    "created_at": created_at,
                },
            )
            record = record_from_row(row)
        except StoreError as e:
            log_store_failure(RecordKind.CARBON_RECORD, "insert", e, user_id=user_id)

        persisted = record is not None
        footprint_calculations_total.inc(labels={"persisted": str(persisted).lower()})
        log_event(
            "info",
            "footprint.recorded" if persisted else "footprint.scored",
            user_id=user_id,
            event_type="footprint.recorded" if persisted else "footprint.scored",
            extra={"emission": round(emission, 3)},
        )

        return FootprintResult(
            emission=emission,
            equivalents=impact_equivalents(emission),
            record=record,
            persisted=persisted,
        )

    def records_for(self, user_id: str, limit: Optional[int] = None) -> List[CarbonRecord]:
        """User's records ordered oldest first. Empty on store failure."""
        try:
            rows = self._store.query(
                RecordKind.CARBON_RECORD,
                {"user_id": user_id},
                order_by="created_at",
            )
        except StoreError as e:
            log_store_failure(RecordKind.CARBON_RECORD, "query", e, user_id=user_id)
            return []
        records = [record_from_row(r) for r in rows]
        if limit is not None:
            records = records[-limit:] if limit > 0 else []
        return records

    def all_records(self) -> List[CarbonRecord]:
        try:
            rows = self._store.query(RecordKind.CARBON_RECORD, order_by="created_at")
        except StoreError as e:
            log_store_failure(RecordKind.CARBON_RECORD, "query", e)
            return []
        return [record_from_row(r) for r in rows]

    def summary_for(self, user_id: str) -> FootprintSummary:
        return summarize(user_id, self.records_for(user_id))
