"""
Profiles - user directory.

The profile row id is the user id. A profile is created on first lookup so
every authenticated user has one.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Dict, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from ecotrack.core.errors import DuplicateRecordError, StoreError
from ecotrack.core.logging import log_event
from ecotrack.features.leaderboard.ranking import DirectoryEntry
from ecotrack.features.records.store import RecordKind, RecordStore, log_store_failure


class Profile(BaseModel):
    id: str
    username: str
    email: Optional[str] = None
    city: Optional[str] = None
    created_at: datetime
    updated_at: datetime


class ProfileUpdate(BaseModel):
    model_config = ConfigDict(extra="forbid")

    username: Optional[str] = Field(None, min_length=1, max_length=64)
    email: Optional[str] = Field(None, max_length=255)
    city: Optional[str] = Field(None, max_length=128)

    @field_validator("username", mode="before")
    @classmethod
    def _username_not_null(cls, value):
        # email and city may be cleared; a profile always keeps a username
        if value is None:
            raise ValueError("username cannot be null")
        return value


def default_username(user_id: str) -> str:
    return f"user-{user_id[:8]}"


class ProfileService:
    def __init__(self, store: RecordStore):
        self._store = store

    def current_profile(self, user_id: str, now: Optional[datetime] = None) -> Profile:
        """The caller's profile, created with defaults when missing."""
        return self.get_or_create(user_id, now=now)

    def get(self, user_id: str) -> Optional[Profile]:
        try:
            row = self._store.get(RecordKind.PROFILE, user_id)
        except StoreError as e:
            log_store_failure(RecordKind.PROFILE, "get", e, user_id=user_id)
            return None
        return Profile(**row) if row else None

    def get_or_create(self, user_id: str, *, now: Optional[datetime] = None) -> Profile:
        existing = self.get(user_id)
        if existing:
            return existing

        now = now or datetime.now(timezone.utc)
        row = {
            "id": user_id,
            "username": default_username(user_id),
            "email": None,
            "city": None,
            "created_at": now,
            "updated_at": now,
        }
        try:
            row = self._store.insert(RecordKind.PROFILE, row)
        except DuplicateRecordError:
            # Concurrent create: read back whichever row won
            return self.get(user_id) or Profile(**row)
        except StoreError as e:
            log_store_failure(RecordKind.PROFILE, "insert", e, user_id=user_id)
            return Profile(**row)
        log_event("info", "profile.created", user_id=user_id, event_type="profile.created")
        return Profile(**row)

    def update(self, user_id: str, changes: ProfileUpdate, now: Optional[datetime] = None) -> Profile:
        profile = self.get_or_create(user_id, now=now)
        fields = changes.model_dump(exclude_unset=True)
        if not fields:
            return profile
        fields["updated_at"] = now or datetime.now(timezone.utc)
        row = self._store.update(RecordKind.PROFILE, user_id, fields)
        return Profile(**row) if row else profile

    def directory(self) -> Dict[str, DirectoryEntry]:
        """username/city per user id. Empty on store failure."""
        try:
            rows = self._store.query(RecordKind.PROFILE)
        except StoreError as e:
            log_store_failure(RecordKind.PROFILE, "query", e)
            return {}
        return {
            row["id"]: DirectoryEntry(
                username=row.get("username") or "Unknown",
                city=row.get("city") or "Unknown",
            )
            for row in rows
        }
