from __future__ import annotations

from datetime import datetime
from typing import Literal, Optional

from pydantic import BaseModel, Field

ChallengeStatus = Literal["not_started", "in_progress", "completed"]


class UserChallenge(BaseModel):
    """One user's attempt at one challenge within one period."""
    id: str
    user_id: str
    challenge_id: str
    period_key: str
    progress: float = 0.0
    completed: bool = False
    started_at: datetime
    completed_at: Optional[datetime] = None


class ChallengeView(BaseModel):
    """Catalog entry merged with the caller's state for the current period."""
    id: str
    title: str
    description: str
    type: str
    category: str
    points: int
    target: float
    unit: str
    icon: str
    difficulty: str
    carbon_saving_kg: float
    period_key: str
    progress: float = 0.0
    status: ChallengeStatus = "not_started"
    completed_at: Optional[datetime] = None


class ChallengeStats(BaseModel):
    user_id: str
    total_points: int = 0
    daily_streak: int = 0
    completed_count: int = 0


class ProgressUpdate(BaseModel):
    progress: float = Field(..., description="Absolute progress toward the target; clamped to [0, target]")
