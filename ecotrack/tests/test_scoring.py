"""Tests for questionnaire scoring and impact equivalents."""

import math

import pytest
from pydantic import ValidationError

from ecotrack.features.footprint.scoring import (
    BASE_EMISSION_KG,
    MIN_EMISSION_KG,
    impact_equivalents,
    score,
)
from ecotrack.models.footprint import MAX_QUANTITY, AirTravelFrequency, QuestionnaireAnswers, WasteBagSize


def test_empty_questionnaire_scores_base():
    assert score(QuestionnaireAnswers()) == BASE_EMISSION_KG


def test_meat_diet_and_car_distance():
    answers = QuestionnaireAnswers(diet="meat", transport="car", vehicle_distance_km=100)
    assert score(answers) == pytest.approx(3.6)


def test_low_impact_lifestyle():
    answers = QuestionnaireAnswers(diet="vegan", transport="walk", energy_efficiency="yes")
    assert score(answers) == pytest.approx(1.2)
    assert score(answers) >= MIN_EMISSION_KG


def test_distance_ignored_unless_transport_is_car():
    answers = QuestionnaireAnswers(transport="bike", vehicle_distance_km=500)
    assert score(answers) == pytest.approx(1.8)


def test_waste_scales_with_bag_count():
    answers = QuestionnaireAnswers(waste_bag_size="large", waste_bag_count=3)
    assert score(answers) == pytest.approx(2.9)


def test_waste_count_without_size_is_ignored():
    assert score(QuestionnaireAnswers(waste_bag_count=4)) == BASE_EMISSION_KG


def test_consumption_factors():
    answers = QuestionnaireAnswers(screen_hours=4, internet_hours=10, grocery_spend=100, new_clothes=2)
    # 0.2 + 0.3 + 0.2 + 0.2
    assert score(answers) == pytest.approx(2.9)


def test_air_travel_tiers():
    assert score(QuestionnaireAnswers(air_travel="very frequently")) == pytest.approx(4.0)
    assert score(QuestionnaireAnswers(air_travel="frequently")) == pytest.approx(3.5)
    assert score(QuestionnaireAnswers(air_travel="rarely")) == pytest.approx(2.5)
    assert score(QuestionnaireAnswers(air_travel="never")) == pytest.approx(2.0)


def test_score_is_deterministic():
    answers = QuestionnaireAnswers(diet="fish", transport="public", screen_hours=3)
    assert score(answers) == score(answers)


def test_negative_and_missing_numbers_count_as_zero():
    answers = QuestionnaireAnswers(screen_hours=-5, internet_hours=None, grocery_spend="", new_clothes="lots")
    assert answers.screen_hours == 0.0
    assert answers.internet_hours == 0.0
    assert answers.grocery_spend == 0.0
    assert answers.new_clothes == 0.0
    assert score(answers) == BASE_EMISSION_KG


def test_choice_answers_are_normalized():
    answers = QuestionnaireAnswers(air_travel="  Very Frequently ", waste_bag_size="Extra Large", diet="")
    assert answers.air_travel is AirTravelFrequency.VERY_FREQUENTLY
    assert answers.waste_bag_size is WasteBagSize.EXTRA_LARGE
    assert answers.diet is None


def test_unknown_choice_is_rejected():
    with pytest.raises(ValidationError):
        QuestionnaireAnswers(diet="pescatarian")


def test_unknown_field_is_rejected():
    with pytest.raises(ValidationError):
        QuestionnaireAnswers(pets=3)


def test_impact_equivalents():
    impact = impact_equivalents(2.0)
    assert impact.monthly_kg == 60.0
    assert impact.yearly_kg == 730.0
    assert impact.trees_to_offset_per_year == 35
    assert impact.driving_km_per_year == 1807
    assert impact.energy_kwh_per_year == 1679


def test_non_finite_numbers_count_as_zero():
    answers = QuestionnaireAnswers(screen_hours=float("inf"), grocery_spend=float("nan"), new_clothes="-inf")
    assert answers.screen_hours == 0.0
    assert answers.grocery_spend == 0.0
    assert answers.new_clothes == 0.0
    assert score(answers) == BASE_EMISSION_KG


def test_oversized_numbers_are_rejected():
    with pytest.raises(ValidationError):
        QuestionnaireAnswers(screen_hours=1e308)
    with pytest.raises(ValidationError):
        QuestionnaireAnswers(waste_bag_count=10 ** 400)


def test_largest_answers_still_score_finite():
    answers = QuestionnaireAnswers(
        transport="car",
        vehicle_distance_km=MAX_QUANTITY,
        screen_hours=MAX_QUANTITY,
        internet_hours=MAX_QUANTITY,
        grocery_spend=MAX_QUANTITY,
        new_clothes=MAX_QUANTITY,
        waste_bag_size="extra large",
        waste_bag_count=MAX_QUANTITY,
    )
    emission = score(answers)
    assert math.isfinite(emission)
    equivalents = impact_equivalents(emission)
    assert equivalents.trees_to_offset_per_year > 0


def test_equivalents_of_non_finite_daily_figure_are_zero():
    equivalents = impact_equivalents(float("inf"))
    assert equivalents.yearly_kg == 0.0
    assert equivalents.trees_to_offset_per_year == 0
