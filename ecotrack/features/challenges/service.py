from __future__ import annotations

import hashlib
import threading
from datetime import date, datetime, timedelta, timezone
from typing import List, Optional, Tuple

from ecotrack.core.errors import DuplicateRecordError, NotFoundError, StoreError
from ecotrack.core.logging import log_event
from ecotrack.core.metrics import challenge_completions_total
from ecotrack.features.challenges.catalog import CHALLENGE_CATALOG, Challenge, get_challenge
from ecotrack.features.challenges.models import ChallengeStats, ChallengeView, UserChallenge
from ecotrack.features.notifications.service import InMemoryNotificationSink
from ecotrack.features.records.store import RecordKind, RecordStore, log_store_failure


def period_start(challenge: Challenge, today: date) -> date:
    """First day of the period containing today. Weeks start on Sunday."""
    if challenge.type == "weekly":
        return today - timedelta(days=(today.weekday() + 1) % 7)
    return today


def period_key(challenge: Challenge, today: date) -> str:
    start = period_start(challenge, today)
    if challenge.type == "weekly":
        return f"week-{start.isoformat()}"
    return start.isoformat()


def instance_id(user_id: str, challenge_id: str, key: str) -> str:
    raw = f"{user_id}:{challenge_id}:{key}".encode("utf-8")
    return hashlib.sha256(raw).hexdigest()[:16]


def clamp_progress(challenge: Challenge, progress: float) -> float:
    return min(max(float(progress), 0.0), float(challenge.target))


class ChallengeService:
    """Per-period challenge progress, completion rewards and stats."""

    def __init__(self, store: RecordStore, notifications: InMemoryNotificationSink):
        self._store = store
        self._notifications = notifications
        self._lock = threading.Lock()

    def list_for(self, *, user_id: str, now: Optional[datetime] = None) -> List[ChallengeView]:
        """Every catalog challenge with the user's state for its current period."""
        today = (now or datetime.now(timezone.utc)).date()
        views = []
        for challenge in CHALLENGE_CATALOG:
            key = period_key(challenge, today)
            instance = self._find(user_id, challenge.id, key)
            views.append(self._to_view(challenge, key, instance))
        return views

    def available_for(self, *, user_id: str, now: Optional[datetime] = None) -> List[ChallengeView]:
        return [v for v in self.list_for(user_id=user_id, now=now) if v.status != "completed"]

    def update_progress(
        self,
        *,
        user_id: str,
        challenge_id: str,
        progress: float,
        now: Optional[datetime] = None,
    ) -> ChallengeView:
        """Set absolute progress, clamped to [0, target]. No-op once completed."""
        challenge = self._require(challenge_id)
        now = now or datetime.now(timezone.utc)
        key = period_key(challenge, now.date())

        with self._lock:
            instance = self._get_or_start(user_id, challenge, key, now)
            if not instance.completed:
                value = clamp_progress(challenge, progress)
                row = self._store.update(RecordKind.USER_CHALLENGE, instance.id, {"progress": value})
                if row:
                    instance = UserChallenge(**row)

        return self._to_view(challenge, key, instance)

    def complete(
        self,
        *,
        user_id: str,
        challenge_id: str,
        now: Optional[datetime] = None,
    ) -> Tuple[ChallengeView, List[dict]]:
        """
        Mark the current-period instance completed (idempotent).

        Points are read and written alongside the instance. A store failure
        on either aborts with StoreError and leaves the instance as it was.
        """
        challenge = self._require(challenge_id)
        now = now or datetime.now(timezone.utc)
        key = period_key(challenge, now.date())

        emitted: List[dict] = []
        with self._lock:
            instance = self._get_or_start(user_id, challenge, key, now)
            if instance.completed:
                return self._to_view(challenge, key, instance), emitted

            current = self._read_stats(user_id)
            previous = {"progress": instance.progress, "completed": False, "completed_at": None}
            row = self._store.update(
                RecordKind.USER_CHALLENGE,
                instance.id,
                {"progress": float(challenge.target), "completed": True, "completed_at": now},
            )
            instance = UserChallenge(**row) if row else instance
            try:
                stats = self._award(user_id, challenge, current, now)
            except StoreError:
                self._revert(user_id, instance.id, previous)
                raise

        emitted.append(
            {
                "type": "challenge.completed",
                "payload": {
                    "userId": user_id,
                    "challengeId": challenge.id,
                    "periodKey": key,
                    "points": challenge.points,
                    "totalPoints": stats.total_points,
                    "completedAt": now.isoformat(),
                },
            }
        )
        challenge_completions_total.inc(labels={"type": challenge.type})
        log_event(
            "info",
            "challenge.completed",
            user_id=user_id,
            event_type="challenge.completed",
            extra={"challenge_id": challenge.id, "period_key": key, "points": challenge.points},
        )
        self._notify(user_id, challenge, now)

        return self._to_view(challenge, key, instance), emitted

    def stats_for(self, user_id: str) -> ChallengeStats:
        try:
            return self._read_stats(user_id)
        except StoreError as e:
            log_store_failure(RecordKind.CHALLENGE_STATS, "get", e, user_id=user_id)
            return ChallengeStats(user_id=user_id)

    def _read_stats(self, user_id: str) -> ChallengeStats:
        row = self._store.get(RecordKind.CHALLENGE_STATS, user_id)
        if not row:
            return ChallengeStats(user_id=user_id)
        return ChallengeStats(
            user_id=user_id,
            total_points=row["total_points"],
            daily_streak=row["daily_streak"],
            completed_count=row["completed_count"],
        )

    # Internal helpers -------------------------------------------------
    @staticmethod
    def _require(challenge_id: str) -> Challenge:
        challenge = get_challenge(challenge_id)
        if challenge is None:
            raise NotFoundError(f"Challenge {challenge_id} not found")
        return challenge

    def _find(self, user_id: str, challenge_id: str, key: str) -> Optional[UserChallenge]:
        try:
            row = self._store.get(RecordKind.USER_CHALLENGE, instance_id(user_id, challenge_id, key))
        except StoreError as e:
            log_store_failure(RecordKind.USER_CHALLENGE, "get", e, user_id=user_id)
            return None
        return UserChallenge(**row) if row else None

    def _get_or_start(self, user_id: str, challenge: Challenge, key: str, now: datetime) -> UserChallenge:
        existing = self._find(user_id, challenge.id, key)
        if existing:
            return existing

        row = {
            "id": instance_id(user_id, challenge.id, key),
            "user_id": user_id,
            "challenge_id": challenge.id,
            "period_key": key,
            "progress": 0.0,
            "completed": False,
            "started_at": now,
            "completed_at": None,
        }
        try:
            return UserChallenge(**self._store.insert(RecordKind.USER_CHALLENGE, row))
        except DuplicateRecordError:
            # Another request started the same period first
            winner = self._find(user_id, challenge.id, key)
            if winner is None:
                raise
            return winner

    def _award(self, user_id: str, challenge: Challenge, current: ChallengeStats, now: datetime) -> ChallengeStats:
        updated = ChallengeStats(
            user_id=user_id,
            total_points=current.total_points + challenge.points,
            daily_streak=current.daily_streak + (1 if challenge.type == "daily" else 0),
            completed_count=current.completed_count + 1,
        )
        fields = {**updated.model_dump(), "updated_at": now}
        if self._store.update(RecordKind.CHALLENGE_STATS, user_id, fields) is None:
            self._store.insert(RecordKind.CHALLENGE_STATS, {"id": user_id, **fields})
        return updated

    def _revert(self, user_id: str, record_id: str, previous: dict) -> None:
        try:
            self._store.update(RecordKind.USER_CHALLENGE, record_id, previous)
        except StoreError as e:
            log_store_failure(RecordKind.USER_CHALLENGE, "revert", e, user_id=user_id)

    def _notify(self, user_id: str, challenge: Challenge, now: datetime) -> None:
        self._notifications.add_notification(
            user_id,
            "challenge",
            "Challenge Completed! 🎉",
            f'You completed "{challenge.title}" and earned {challenge.points} points!',
            now=now,
        )
        self._notifications.send_push(
            user_id,
            "Challenge Completed!",
            f'Great job! You completed "{challenge.title}" and saved {challenge.carbon_saving_kg:g}kg CO₂',
            now=now,
        )

    @staticmethod
    def _to_view(challenge: Challenge, key: str, instance: Optional[UserChallenge]) -> ChallengeView:
        if instance is None:
            status, progress, completed_at = "not_started", 0.0, None
        else:
            status = "completed" if instance.completed else "in_progress"
            progress, completed_at = instance.progress, instance.completed_at
        return ChallengeView(
            id=challenge.id,
            title=challenge.title,
            description=challenge.description,
            type=challenge.type,
            category=challenge.category,
            points=challenge.points,
            target=challenge.target,
            unit=challenge.unit,
            icon=challenge.icon,
            difficulty=challenge.difficulty,
            carbon_saving_kg=challenge.carbon_saving_kg,
            period_key=key,
            progress=progress,
            status=status,
            completed_at=completed_at,
        )
