"""
Trend analysis over a user's footprint history.

Compares the mean of the latest window of records with the window before it.
Pure function of the ordered record list.
"""

from typing import Sequence

from ecotrack.features.insights.models import TrendAnalysis, TrendDirection
from ecotrack.models.footprint import CarbonRecord

WINDOW_SIZE = 7
STABLE_THRESHOLD_PCT = 5.0

INSUFFICIENT_DATA_MESSAGE = (
    "Start tracking more data to see personalized insights about your carbon footprint trends."
)


def _mean(values: Sequence[float]) -> float:
    return sum(values) / len(values)


def analyze_trend(records: Sequence[CarbonRecord]) -> TrendAnalysis:
    """
    Summarize the direction of a user's emissions.

    Args:
        records: CarbonRecords ordered oldest first

    Returns:
        TrendAnalysis with direction, percent change and a readable summary.
        With no older window the older average equals the recent one (0% change).
    """
    if len(records) < 2:
        return TrendAnalysis(
            direction=TrendDirection.INSUFFICIENT_DATA,
            summary=INSUFFICIENT_DATA_MESSAGE,
        )

    emissions = [r.emission for r in records]
    recent = emissions[-WINDOW_SIZE:]
    older = emissions[-2 * WINDOW_SIZE:-WINDOW_SIZE]

    recent_avg = _mean(recent)
    older_avg = _mean(older) if older else recent_avg

    # Scores are floored at 0.5 so older_avg is never zero for scored records
    change = ((recent_avg - older_avg) / older_avg) * 100 if older_avg else 0.0

    if abs(change) < STABLE_THRESHOLD_PCT:
        direction = TrendDirection.STABLE
        summary = (
            f"Your carbon footprint has remained stable at {recent_avg:.2f} kg CO₂ per day. "
            "Consider trying new eco-friendly habits to reduce your impact further."
        )
    elif change < 0:
        direction = TrendDirection.IMPROVED
        summary = (
            f"Excellent progress! Your emissions have decreased by {abs(change):.1f}% compared to last week. "
            f"You're now averaging {recent_avg:.2f} kg CO₂ per day. Keep up the great work!"
        )
    else:
        direction = TrendDirection.REGRESSED
        summary = (
            f"Your emissions have increased by {change:.1f}% this week to {recent_avg:.2f} kg CO₂ per day. "
            "Let's work on some strategies to get back on track with your environmental goals."
        )

    return TrendAnalysis(
        direction=direction,
        change_pct=round(change, 2),
        recent_avg=round(recent_avg, 4),
        older_avg=round(older_avg, 4),
        summary=summary,
    )
