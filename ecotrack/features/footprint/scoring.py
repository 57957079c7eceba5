"""
Daily footprint scoring.

Pure functions: a questionnaire in, kg CO2e per day out. No I/O.
"""

import math
from typing import Dict

from ecotrack.models.footprint import (
    AirTravelFrequency,
    DietType,
    EnergyEfficiency,
    MAX_QUANTITY,
    ImpactEquivalents,
    QuestionnaireAnswers,
    TransportMode,
    WasteBagSize,
)

BASE_EMISSION_KG = 2.0
MIN_EMISSION_KG = 0.5

DIET_DELTA: Dict[DietType, float] = {
    DietType.MEAT: 1.5,
    DietType.FISH: 0.8,
    DietType.VEGETARIAN: 0.3,
    DietType.VEGAN: -0.2,
}

# Car is distance-driven; see CAR_KG_PER_KM
TRANSPORT_DELTA: Dict[TransportMode, float] = {
    TransportMode.PUBLIC: 0.3,
    TransportMode.BIKE: -0.2,
    TransportMode.WALK: -0.3,
}
CAR_KG_PER_KM = 0.001

AIR_TRAVEL_DELTA: Dict[AirTravelFrequency, float] = {
    AirTravelFrequency.VERY_FREQUENTLY: 2.0,
    AirTravelFrequency.FREQUENTLY: 1.5,
    AirTravelFrequency.RARELY: 0.5,
    AirTravelFrequency.NEVER: 0.0,
}

ENERGY_EFFICIENCY_DELTA: Dict[EnergyEfficiency, float] = {
    EnergyEfficiency.YES: -0.3,
    EnergyEfficiency.SOMETIMES: -0.1,
    EnergyEfficiency.NO: 0.0,
}

WASTE_KG_PER_BAG: Dict[WasteBagSize, float] = {
    WasteBagSize.SMALL: 0.1,
    WasteBagSize.MEDIUM: 0.2,
    WasteBagSize.LARGE: 0.3,
    WasteBagSize.EXTRA_LARGE: 0.4,
}

SCREEN_KG_PER_HOUR = 0.05
INTERNET_KG_PER_HOUR = 0.03
GROCERY_KG_PER_UNIT = 0.002
CLOTHING_KG_PER_ITEM = 0.1

# Equivalents shown next to a result
KG_PER_TREE_PER_YEAR = 21
KG_PER_DRIVING_KM = 0.404
KWH_PER_KG = 2.3


def _quantity(value: float) -> float:
    if not math.isfinite(value) or value < 0:
        return 0.0
    return min(value, MAX_QUANTITY)


def score(answers: QuestionnaireAnswers) -> float:
    """Estimate daily emissions (kg CO2e) for one questionnaire."""
    emission = BASE_EMISSION_KG

    if answers.diet is not None:
        emission += DIET_DELTA[answers.diet]

    if answers.transport is TransportMode.CAR:
        emission += _quantity(answers.vehicle_distance_km) * CAR_KG_PER_KM
    elif answers.transport is not None:
        emission += TRANSPORT_DELTA[answers.transport]

    emission += _quantity(answers.screen_hours) * SCREEN_KG_PER_HOUR
    emission += _quantity(answers.internet_hours) * INTERNET_KG_PER_HOUR
    emission += _quantity(answers.grocery_spend) * GROCERY_KG_PER_UNIT
    emission += _quantity(answers.new_clothes) * CLOTHING_KG_PER_ITEM

    if answers.waste_bag_size is not None:
        emission += _quantity(answers.waste_bag_count) * WASTE_KG_PER_BAG[answers.waste_bag_size]

    if answers.air_travel is not None:
        emission += AIR_TRAVEL_DELTA[answers.air_travel]

    if answers.energy_efficiency is not None:
        emission += ENERGY_EFFICIENCY_DELTA[answers.energy_efficiency]

    return max(MIN_EMISSION_KG, emission)


def impact_equivalents(emission_kg_per_day: float) -> ImpactEquivalents:
    """Translate a daily figure into monthly/yearly totals and familiar equivalents."""
    daily = float(emission_kg_per_day)
    if not math.isfinite(daily) or daily < 0:
        daily = 0.0
    yearly = daily * 365
    return ImpactEquivalents(
        daily_kg=round(daily, 2),
        monthly_kg=round(daily * 30, 1),
        yearly_kg=round(yearly, 1),
        trees_to_offset_per_year=math.ceil(yearly / KG_PER_TREE_PER_YEAR),
        driving_km_per_year=round(yearly / KG_PER_DRIVING_KM),
        energy_kwh_per_year=round(yearly * KWH_PER_KG),
    )
