"""Tests for footprint submission, history and best-effort persistence."""

from datetime import datetime, timedelta, timezone

import pytest

from ecotrack.core.errors import StoreError
from ecotrack.core.metrics import footprint_calculations_total, store_errors_total
from ecotrack.features.footprint.service import FootprintService
from ecotrack.features.records.store import InMemoryRecordStore
from ecotrack.models.footprint import QuestionnaireAnswers

T0 = datetime(2024, 1, 2, 12, 0, tzinfo=timezone.utc)


class FailingStore(InMemoryRecordStore):
    def insert(self, kind, row):
        raise StoreError("disk on fire")

    def query(self, kind, filters=None, **kwargs):
        raise StoreError("disk on fire")


def test_submit_appends_record(services):
    result = services.footprints.submit(user_id="u1", answers=QuestionnaireAnswers(diet="meat"), now=T0)
    assert result.persisted is True
    assert result.emission == 3.5
    assert result.record.calculation_inputs.diet.value == "meat"
    assert result.equivalents.yearly_kg == 1277.5
    assert footprint_calculations_total.value({"persisted": "true"}) == 1


def test_records_oldest_first_and_scoped_to_user(services):
    for days, diet in ((2, "meat"), (0, "vegan"), (1, "fish")):
        services.footprints.submit(user_id="u1", answers=QuestionnaireAnswers(diet=diet), now=T0 + timedelta(days=days))
    services.footprints.submit(user_id="u2", answers=QuestionnaireAnswers(), now=T0)

    records = services.footprints.records_for("u1")
    assert [r.emission for r in records] == pytest.approx([1.8, 2.8, 3.5])
    assert [r.emission for r in services.footprints.records_for("u1", limit=2)] == pytest.approx([2.8, 3.5])


def test_summary(services):
    for days, diet in ((0, "meat"), (1, "vegan")):
        services.footprints.submit(user_id="u1", answers=QuestionnaireAnswers(diet=diet), now=T0 + timedelta(days=days))
    summary = services.footprints.summary_for("u1")
    assert summary.record_count == 2
    assert summary.total_emission == 5.3
    assert summary.min_emission == 1.8
    assert summary.max_emission == 3.5
    assert summary.first_to_last_change == -1.7


def test_summary_without_records(services):
    summary = services.footprints.summary_for("nobody")
    assert summary.record_count == 0
    assert summary.average_emission == 0.0


def test_store_failure_still_returns_score():
    service = FootprintService(FailingStore())
    result = service.submit(user_id="u1", answers=QuestionnaireAnswers(diet="vegan"))
    assert result.persisted is False
    assert result.record is None
    assert result.emission == 1.8
    assert store_errors_total.value({"kind": "carbon_records", "op": "insert"}) == 1


def test_store_failure_reads_empty():
    service = FootprintService(FailingStore())
    assert service.records_for("u1") == []
    assert service.summary_for("u1").record_count == 0
