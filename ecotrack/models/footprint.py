from __future__ import annotations

from datetime import datetime
from enum import Enum
import math
from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


class DietType(str, Enum):
    MEAT = "meat"
    FISH = "fish"
    VEGETARIAN = "vegetarian"
    VEGAN = "vegan"


class TransportMode(str, Enum):
    CAR = "car"
    PUBLIC = "public"
    BIKE = "bike"
    WALK = "walk"


class AirTravelFrequency(str, Enum):
    NEVER = "never"
    RARELY = "rarely"
    FREQUENTLY = "frequently"
    VERY_FREQUENTLY = "very frequently"


class EnergyEfficiency(str, Enum):
    NO = "no"
    SOMETIMES = "sometimes"
    YES = "yes"


class WasteBagSize(str, Enum):
    SMALL = "small"
    MEDIUM = "medium"
    LARGE = "large"
    EXTRA_LARGE = "extra large"


# Upper bound for any numeric answer (hours, km, bags, spend, items)
MAX_QUANTITY = 1_000_000.0


class QuestionnaireAnswers(BaseModel):
    """
    Version 1 of the lifestyle questionnaire.

    Categorical answers are closed enums; an unknown value is rejected here
    rather than silently ignored by the scorer. A missing categorical answer
    means "no adjustment". Numeric answers that are missing or negative
    count as zero, as do NaN and infinity. Anything above MAX_QUANTITY
    is rejected.
    """
    model_config = ConfigDict(frozen=True, extra="forbid", use_enum_values=False)

    version: Literal[1] = 1

    diet: Optional[DietType] = None
    transport: Optional[TransportMode] = None
    vehicle_distance_km: float = 0.0
    air_travel: Optional[AirTravelFrequency] = None
    energy_efficiency: Optional[EnergyEfficiency] = None
    waste_bag_size: Optional[WasteBagSize] = None
    waste_bag_count: float = 0.0
    screen_hours: float = 0.0
    internet_hours: float = 0.0
    grocery_spend: float = 0.0
    new_clothes: float = 0.0

    # Collected by the questionnaire, not scored
    body_type: Optional[str] = Field(None, max_length=32)
    sex: Optional[str] = Field(None, max_length=32)
    shower_frequency: Optional[str] = Field(None, max_length=32)
    heating_source: Optional[str] = Field(None, max_length=32)
    vehicle_type: Optional[str] = Field(None, max_length=32)
    social_activity: Optional[str] = Field(None, max_length=32)

    @field_validator(
        "vehicle_distance_km",
        "waste_bag_count",
        "screen_hours",
        "internet_hours",
        "grocery_spend",
        "new_clothes",
        mode="before",
    )
    @classmethod
    def _non_negative_or_zero(cls, value):
        if value is None or value == "":
            return 0.0
        try:
            number = float(value)
        except OverflowError:
            raise ValueError(f"must be at most {MAX_QUANTITY:g}")
        except (TypeError, ValueError):
            return 0.0
        if not math.isfinite(number) or number < 0:
            return 0.0
        if number > MAX_QUANTITY:
            raise ValueError(f"must be at most {MAX_QUANTITY:g}")
        return number

    @field_validator(
        "diet", "transport", "air_travel", "energy_efficiency", "waste_bag_size",
        mode="before",
    )
    @classmethod
    def _normalize_choice(cls, value):
        if isinstance(value, str):
            value = value.strip().lower()
            return value or None
        return value


class CarbonRecord(BaseModel):
    """One stored questionnaire result. Immutable once created."""
    model_config = ConfigDict(frozen=True)

    id: str
    user_id: str
    emission: float = Field(..., ge=0)
    created_at: datetime
    calculation_inputs: Optional[QuestionnaireAnswers] = None


class ImpactEquivalents(BaseModel):
    model_config = ConfigDict(frozen=True)

    daily_kg: float
    monthly_kg: float
    yearly_kg: float
    trees_to_offset_per_year: int
    driving_km_per_year: float
    energy_kwh_per_year: float


class FootprintResult(BaseModel):
    """Outcome of one questionnaire submission."""
    emission: float
    equivalents: ImpactEquivalents
    record: Optional[CarbonRecord] = None
    persisted: bool = False


class FootprintSummary(BaseModel):
    user_id: str
    record_count: int
    total_emission: float
    average_emission: float
    min_emission: Optional[float] = None
    max_emission: Optional[float] = None
    first_to_last_change: float = 0.0
