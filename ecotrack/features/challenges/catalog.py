from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Literal, Optional, Tuple

ChallengeType = Literal["daily", "weekly"]
ChallengeCategory = Literal["transport", "energy", "waste", "diet", "water"]
ChallengeDifficulty = Literal["easy", "medium", "hard"]


@dataclass(frozen=True)
class Challenge:
    """A catalog entry. Progress lives in UserChallenge rows, not here."""

    id: str
    title: str
    description: str
    type: ChallengeType
    category: ChallengeCategory
    points: int
    target: float
    unit: str
    icon: str
    difficulty: ChallengeDifficulty
    carbon_saving_kg: float


# Static catalog: 5 daily, 3 weekly
CHALLENGE_CATALOG: Tuple[Challenge, ...] = (
    Challenge("walk-5km", "Walk 5km Today", "Replace car trips with walking for short distances",
              "daily", "transport", 50, 5, "km", "🚶", "easy", 1.2),
    Challenge("no-meat-day", "Meat-Free Day", "Go vegetarian for the entire day",
              "daily", "diet", 75, 1, "day", "🥗", "medium", 2.5),
    Challenge("reduce-shower-time", "Short Showers", "Keep showers under 5 minutes",
              "daily", "water", 30, 5, "minutes", "🚿", "easy", 0.8),
    Challenge("zero-waste-day", "Zero Waste Day", "Produce no single-use plastic waste",
              "daily", "waste", 100, 1, "day", "♻️", "hard", 1.5),
    Challenge("led-lights-only", "LED Lights Only", "Use only LED bulbs for lighting",
              "daily", "energy", 40, 1, "day", "💡", "easy", 0.6),
    Challenge("bike-to-work-week", "Bike to Work Week", "Cycle to work for 5 days this week",
              "weekly", "transport", 200, 5, "days", "🚴", "medium", 8.5),
    Challenge("plant-based-week", "Plant-Based Week", "Eat only plant-based meals for a week",
              "weekly", "diet", 300, 7, "days", "🌱", "hard", 15.2),
    Challenge("energy-saving-week", "Energy Saving Week", "Reduce energy consumption by 20% this week",
              "weekly", "energy", 250, 20, "%", "⚡", "medium", 12.0),
)

_BY_ID: Dict[str, Challenge] = {c.id: c for c in CHALLENGE_CATALOG}


def get_challenge(challenge_id: str) -> Optional[Challenge]:
    return _BY_ID.get(challenge_id)
