"""
Leaderboard ranking.

Ranks users by their mean daily emission (lower is better). Pure: the same
records and directory always produce the same ordering.
"""

from __future__ import annotations

from collections import defaultdict
import math
from typing import Dict, List, Mapping, Optional, Sequence

from pydantic import BaseModel, ConfigDict

from ecotrack.models.footprint import CarbonRecord

UNKNOWN = "Unknown"

# Upper bounds (exclusive) for each level, in kg CO2e/day
LEVELS = (
    (1.5, "Excellent"),
    (2.0, "Good"),
    (2.5, "Fair"),
)
WORST_LEVEL = "Needs Improvement"


class DirectoryEntry(BaseModel):
    """What the leaderboard needs to know about a user."""
    model_config = ConfigDict(frozen=True)

    username: str = UNKNOWN
    city: str = UNKNOWN


class LeaderboardEntry(BaseModel):
    model_config = ConfigDict(frozen=True)

    rank: int
    user_id: str
    username: str
    city: str
    avg_emission: float
    record_count: int
    level: str


class LeaderboardStats(BaseModel):
    best_performer: Optional[LeaderboardEntry] = None
    community_average: float = 0.0
    participants: int = 0


def emission_level(avg_emission: float) -> str:
    for bound, label in LEVELS:
        if avg_emission < bound:
            return label
    return WORST_LEVEL


def rank_users(
    records: Sequence[CarbonRecord],
    directory: Mapping[str, DirectoryEntry],
) -> List[LeaderboardEntry]:
    """
    Group records per user, average each group and rank ascending.

    Ties on the average break by user_id so the ordering is total.
    Users with no records never appear. Non-finite emissions are skipped.
    """
    emissions: Dict[str, List[float]] = defaultdict(list)
    for record in records:
        if not math.isfinite(record.emission):
            continue
        emissions[record.user_id].append(record.emission)

    averages = sorted(
        ((sum(values) / len(values), user_id, len(values)) for user_id, values in emissions.items()),
        key=lambda item: (item[0], item[1]),
    )

    entries: List[LeaderboardEntry] = []
    for position, (avg, user_id, count) in enumerate(averages, start=1):
        profile = directory.get(user_id) or DirectoryEntry()
        entries.append(LeaderboardEntry(
            rank=position,
            user_id=user_id,
            username=profile.username or UNKNOWN,
            city=profile.city or UNKNOWN,
            avg_emission=avg,
            record_count=count,
            level=emission_level(avg),
        ))
    return entries


def leaderboard_stats(entries: Sequence[LeaderboardEntry]) -> LeaderboardStats:
    if not entries:
        return LeaderboardStats()
    return LeaderboardStats(
        best_performer=entries[0],
        community_average=round(sum(e.avg_emission for e in entries) / len(entries), 4),
        participants=len(entries),
    )
