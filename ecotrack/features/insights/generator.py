"""
Rule-based tips and reduction goals.

Both generators bucket the mean emission across the supplied records; goal
targets and savings are fixed per rule, not derived from the data.
"""

from datetime import date
from typing import List, Optional, Sequence

from ecotrack.features.insights.models import (
    Goal,
    GoalDifficulty,
    GoalTimeframe,
    InsightCategory,
    InsightDraft,
    InsightKind,
    InsightPriority,
)
from ecotrack.models.footprint import CarbonRecord

HIGH_EMISSION_KG = 3.0
MODERATE_EMISSION_KG = 2.0
TRANSPORT_GOAL_KG = 2.5
DIET_GOAL_KG = 2.0

MONDAY = 0  # date.weekday()


def mean_emission(records: Sequence[CarbonRecord]) -> Optional[float]:
    if not records:
        return None
    return sum(r.emission for r in records) / len(records)


def generate_tips(records: Sequence[CarbonRecord], today: date) -> List[InsightDraft]:
    """One severity-tier insight for the mean emission, plus a Monday tip."""
    avg = mean_emission(records)
    if avg is None:
        return []

    tips: List[InsightDraft] = []

    if avg > HIGH_EMISSION_KG:
        tips.append(InsightDraft(
            kind=InsightKind.TIP,
            title="Reduce Transportation Emissions",
            content=(
                "Your carbon footprint is above average. Consider using public transport, cycling, "
                "or walking for short trips. Even replacing one car trip per day can reduce your "
                "emissions by 20-30%."
            ),
            priority=InsightPriority.HIGH,
            category=InsightCategory.TRANSPORT,
            carbon_impact=1.2,
        ))
    elif avg > MODERATE_EMISSION_KG:
        tips.append(InsightDraft(
            kind=InsightKind.TIP,
            title="Optimize Energy Usage",
            content=(
                "You're doing well! To further reduce your footprint, try switching to LED bulbs, "
                "unplugging devices when not in use, and adjusting your thermostat by 2°C."
            ),
            priority=InsightPriority.MEDIUM,
            category=InsightCategory.ENERGY,
            carbon_impact=0.8,
        ))
    else:
        tips.append(InsightDraft(
            kind=InsightKind.ACHIEVEMENT,
            title="Eco Champion Status!",
            content=(
                "Congratulations! Your carbon footprint is well below average. You're making a real "
                "difference. Consider sharing your eco-friendly habits with the community to inspire others."
            ),
            priority=InsightPriority.HIGH,
            category=InsightCategory.GENERAL,
        ))

    if today.weekday() == MONDAY:
        tips.append(InsightDraft(
            kind=InsightKind.TIP,
            title="Start Your Week Green",
            content=(
                "Monday is perfect for setting eco-friendly intentions! Plan your meals to reduce food "
                "waste, choose sustainable transport options, and set a weekly carbon reduction goal."
            ),
            priority=InsightPriority.MEDIUM,
            category=InsightCategory.GENERAL,
        ))

    return tips


def generate_goals(records: Sequence[CarbonRecord]) -> List[Goal]:
    avg = mean_emission(records)
    if avg is None:
        return []

    goals: List[Goal] = []

    if avg > TRANSPORT_GOAL_KG:
        goals.append(Goal(
            id="reduce-transport-emissions",
            title="Reduce Transportation Footprint",
            description="Cut your transport-related emissions by using alternative modes of transport 3 days per week",
            target_reduction_pct=15,
            timeframe=GoalTimeframe.MONTH,
            category=InsightCategory.TRANSPORT,
            difficulty=GoalDifficulty.MEDIUM,
            estimated_saving_kg=4.5,
        ))

    goals.append(Goal(
        id="energy-efficiency",
        title="Improve Home Energy Efficiency",
        description="Reduce energy consumption through smart usage habits and efficient appliances",
        target_reduction_pct=10,
        timeframe=GoalTimeframe.MONTH,
        category=InsightCategory.ENERGY,
        difficulty=GoalDifficulty.EASY,
        estimated_saving_kg=2.8,
    ))

    if avg > DIET_GOAL_KG:
        goals.append(Goal(
            id="sustainable-diet",
            title="Adopt More Plant-Based Meals",
            description="Replace meat with plant-based alternatives 2-3 times per week",
            target_reduction_pct=12,
            timeframe=GoalTimeframe.MONTH,
            category=InsightCategory.DIET,
            difficulty=GoalDifficulty.MEDIUM,
            estimated_saving_kg=3.2,
        ))

    return goals


def goal_accepted_insight(goal: Goal) -> InsightDraft:
    return InsightDraft(
        kind=InsightKind.GOAL,
        title="New Goal Accepted",
        content=(
            f"You've committed to: {goal.title}. Track your progress and aim to save "
            f"{goal.estimated_saving_kg:g} kg CO₂!"
        ),
        priority=InsightPriority.HIGH,
        category=goal.category,
        carbon_impact=goal.estimated_saving_kg,
    )
