"""
Insight Engine - Computation Service

Runs trend analysis, tip generation and goal generation over a user's
records, stores the resulting insights and keeps the latest goals in memory.
"""

import logging
import threading
from datetime import datetime, timezone
from typing import Dict, List, Optional

from ecotrack.core.errors import NotFoundError, StoreError
from ecotrack.core.logging import log_event
from ecotrack.features.footprint.service import FootprintService
from ecotrack.features.insights.generator import (
    generate_goals,
    generate_tips,
    goal_accepted_insight,
)
from ecotrack.features.insights.models import (
    Goal,
    Insight,
    InsightDraft,
    InsightKind,
    InsightsReport,
    TrendAnalysis,
)
from ecotrack.features.insights.trend import analyze_trend
from ecotrack.features.records.store import RecordKind, RecordStore, log_store_failure

logger = logging.getLogger(__name__)

# Kinds replaced wholesale on every regeneration
REGENERATED_KINDS = frozenset({InsightKind.TIP, InsightKind.ACHIEVEMENT})


def insight_from_row(row: dict) -> Insight:
    return Insight(
        id=row["id"],
        user_id=row["user_id"],
        kind=row["kind"],
        title=row["title"],
        content=row["content"],
        priority=row["priority"],
        category=row["category"],
        carbon_impact=row.get("carbon_impact"),
        created_at=row["created_at"],
        read=bool(row.get("read", False)),
    )


class InsightService:
    """
    Stores generated insights per user.

    Goals are ephemeral: the latest generated set per user is cached here and
    is what accept_goal looks goals up in.
    """

    def __init__(self, store: RecordStore, footprints: FootprintService):
        self._store = store
        self._footprints = footprints
        self._goals: Dict[str, List[Goal]] = {}
        self._lock = threading.Lock()

    def generate(self, user_id: str, now: Optional[datetime] = None) -> InsightsReport:
        """
        Regenerate trend, tips and goals for a user.

        Stored tip and achievement insights are replaced; goal and trend
        insights persist.
        """
        now = now or datetime.now(timezone.utc)
        records = self._footprints.records_for(user_id)

        trend = analyze_trend(records)
        tips = generate_tips(records, now.date())
        goals = generate_goals(records)

        with self._lock:
            self._goals[user_id] = goals

        self._replace_regenerated(user_id, tips, now)

        log_event(
            "info",
            "insights.generated",
            user_id=user_id,
            event_type="insights.generated",
            extra={
                "records": len(records),
                "trend": trend.direction.value,
                "tips": len(tips),
                "goals": len(goals),
            },
        )

        return InsightsReport(
            user_id=user_id,
            trend=trend,
            insights=self.list_insights(user_id),
            goals=goals,
            generated_at=now,
        )

    def trend_for(self, user_id: str) -> TrendAnalysis:
        return analyze_trend(self._footprints.records_for(user_id))

    def goals_for(self, user_id: str) -> List[Goal]:
        """Latest generated goals, generating them if none are cached."""
        with self._lock:
            cached = self._goals.get(user_id)
        if cached is not None:
            return list(cached)
        goals = generate_goals(self._footprints.records_for(user_id))
        with self._lock:
            self._goals[user_id] = goals
        return list(goals)

    def list_insights(self, user_id: str, *, unread_only: bool = False) -> List[Insight]:
        try:
            rows = self._store.query(RecordKind.INSIGHT, {"user_id": user_id}, order_by="created_at")
        except StoreError as e:
            log_store_failure(RecordKind.INSIGHT, "query", e, user_id=user_id)
            return []
        insights = [insight_from_row(r) for r in rows]
        if unread_only:
            insights = [i for i in insights if not i.read]
        return insights

    def mark_read(self, user_id: str, insight_id: str) -> Insight:
        row = self._store.get(RecordKind.INSIGHT, insight_id)
        if row is None or row["user_id"] != user_id:
            raise NotFoundError(f"Insight {insight_id} not found")
        if row.get("read"):
            return insight_from_row(row)
        updated = self._store.update(RecordKind.INSIGHT, insight_id, {"read": True})
        return insight_from_row(updated or {**row, "read": True})

    def accept_goal(self, user_id: str, goal_id: str, now: Optional[datetime] = None) -> Insight:
        """Append a goal insight for one of the user's current goals."""
        goal = next((g for g in self.goals_for(user_id) if g.id == goal_id), None)
        if goal is None:
            raise NotFoundError(f"Goal {goal_id} not found")

        insight = self._insert(user_id, goal_accepted_insight(goal), now or datetime.now(timezone.utc))
        if insight is None:
            raise StoreError("Could not record accepted goal")

        log_event(
            "info",
            "insights.goal_accepted",
            user_id=user_id,
            event_type="insights.goal_accepted",
            extra={"goal_id": goal_id, "estimated_saving_kg": goal.estimated_saving_kg},
        )
        return insight

    # Internal helpers -------------------------------------------------
    def _replace_regenerated(self, user_id: str, drafts: List[InsightDraft], now: datetime) -> None:
        try:
            existing = self._store.query(RecordKind.INSIGHT, {"user_id": user_id})
            for row in existing:
                if row["kind"] in {k.value for k in REGENERATED_KINDS}:
                    self._store.delete(RecordKind.INSIGHT, row["id"])
        except StoreError as e:
            # Leave the previous tips in place; don't stack new ones on top
            log_store_failure(RecordKind.INSIGHT, "replace", e, user_id=user_id)
            return

        for draft in drafts:
            self._insert(user_id, draft, now)

    def _insert(self, user_id: str, draft: InsightDraft, now: datetime) -> Optional[Insight]:
        try:
            row = self._store.insert(
                RecordKind.INSIGHT,
                {
                    "user_id": user_id,
                    **draft.model_dump(mode="json"),
                    "created_at": now,
                    "read": False,
                },
            )
        except StoreError as e:
            log_store_failure(RecordKind.INSIGHT, "insert", e, user_id=user_id)
            return None
        return insight_from_row(row)
