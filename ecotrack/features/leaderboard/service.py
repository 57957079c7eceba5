from __future__ import annotations

from typing import List, Optional

from pydantic import BaseModel

from ecotrack.features.footprint.service import FootprintService
from ecotrack.features.leaderboard.ranking import (
    LeaderboardEntry,
    LeaderboardStats,
    leaderboard_stats,
    rank_users,
)
from ecotrack.features.profiles.service import ProfileService


class Leaderboard(BaseModel):
    entries: List[LeaderboardEntry]
    stats: LeaderboardStats


class LeaderboardService:
    """Joins every user's records with the profile directory and ranks them."""

    def __init__(self, footprints: FootprintService, profiles: ProfileService):
        self._footprints = footprints
        self._profiles = profiles

    def leaderboard(self, limit: Optional[int] = None) -> Leaderboard:
        entries = rank_users(self._footprints.all_records(), self._profiles.directory())
        # Stats cover every participant, not just the visible page
        stats = leaderboard_stats(entries)
        if limit is not None:
            entries = entries[:max(limit, 0)]
        return Leaderboard(entries=entries, stats=stats)

    def position_of(self, user_id: str) -> Optional[LeaderboardEntry]:
        entries = rank_users(self._footprints.all_records(), self._profiles.directory())
        return next((e for e in entries if e.user_id == user_id), None)
