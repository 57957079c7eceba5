"""
Insight Engine - Data Models

Pydantic models for stored insights, ephemeral goals and trend analysis.
"""

from datetime import datetime
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class InsightKind(str, Enum):
    TIP = "tip"
    TREND = "trend"
    GOAL = "goal"
    ACHIEVEMENT = "achievement"


class InsightPriority(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class InsightCategory(str, Enum):
    TRANSPORT = "transport"
    ENERGY = "energy"
    DIET = "diet"
    WASTE = "waste"
    GENERAL = "general"


class GoalTimeframe(str, Enum):
    WEEK = "week"
    MONTH = "month"
    QUARTER = "quarter"


class GoalDifficulty(str, Enum):
    EASY = "easy"
    MEDIUM = "medium"
    HARD = "hard"


class TrendDirection(str, Enum):
    INSUFFICIENT_DATA = "insufficient_data"
    STABLE = "stable"
    IMPROVED = "improved"
    REGRESSED = "regressed"


class InsightDraft(BaseModel):
    """An insight produced by the generator, before it is stored."""
    model_config = ConfigDict(frozen=True)

    kind: InsightKind
    title: str
    content: str
    priority: InsightPriority
    category: InsightCategory
    carbon_impact: Optional[float] = None


class Insight(InsightDraft):
    """A stored insight shown to one user."""
    id: str
    user_id: str
    created_at: datetime
    read: bool = False


class Goal(BaseModel):
    """A suggested reduction goal. Regenerated on every analysis run."""
    model_config = ConfigDict(frozen=True)

    id: str
    title: str
    description: str
    target_reduction_pct: float = Field(..., ge=0, le=100)
    timeframe: GoalTimeframe
    category: InsightCategory
    difficulty: GoalDifficulty
    estimated_saving_kg: float


class TrendAnalysis(BaseModel):
    model_config = ConfigDict(frozen=True)

    direction: TrendDirection
    change_pct: float = 0.0
    recent_avg: Optional[float] = None
    older_avg: Optional[float] = None
    summary: str


class InsightsReport(BaseModel):
    """Everything one analysis run produces for a user."""
    user_id: str
    trend: TrendAnalysis
    insights: list[Insight]
    goals: list[Goal]
    generated_at: datetime
