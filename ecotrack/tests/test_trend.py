"""Tests for the week-over-week trend analysis."""

import pytest

from ecotrack.features.insights.models import TrendDirection
from ecotrack.features.insights.trend import INSUFFICIENT_DATA_MESSAGE, analyze_trend


@pytest.mark.parametrize("emissions", [[], [2.5]])
def test_fewer_than_two_records_is_insufficient(make_records, emissions):
    trend = analyze_trend(make_records(emissions))
    assert trend.direction == TrendDirection.INSUFFICIENT_DATA
    assert trend.summary == INSUFFICIENT_DATA_MESSAGE


def test_no_older_window_is_stable(make_records):
    trend = analyze_trend(make_records([2.0, 3.0]))
    assert trend.direction == TrendDirection.STABLE
    assert trend.change_pct == 0.0
    assert trend.older_avg == trend.recent_avg == 2.5


def test_flat_single_week_is_stable(make_records):
    trend = analyze_trend(make_records([3.0] * 7))
    assert trend.direction == TrendDirection.STABLE
    assert trend.change_pct == 0.0
    assert trend.recent_avg == 3.0


def test_improvement_against_previous_week(make_records):
    trend = analyze_trend(make_records([3.0] * 7 + [2.0] * 7))
    assert trend.direction == TrendDirection.IMPROVED
    assert trend.change_pct == pytest.approx(-33.33, abs=0.01)
    assert "decreased by 33.3%" in trend.summary
    assert "2.00 kg" in trend.summary


def test_regression_against_previous_week(make_records):
    trend = analyze_trend(make_records([2.0] * 7 + [3.0] * 7))
    assert trend.direction == TrendDirection.REGRESSED
    assert trend.change_pct == pytest.approx(50.0)
    assert "increased by 50.0%" in trend.summary
    assert "3.00 kg" in trend.summary


def test_small_change_is_stable(make_records):
    trend = analyze_trend(make_records([2.0] * 7 + [2.05] * 7))
    assert trend.direction == TrendDirection.STABLE
    assert "stable at 2.05 kg" in trend.summary


def test_windows_use_latest_records(make_records):
    # Only the last 14 records count; the first three are outside both windows
    emissions = [9.0] * 3 + [2.0] * 7 + [2.0] * 7
    trend = analyze_trend(make_records(emissions))
    assert trend.direction == TrendDirection.STABLE
    assert trend.older_avg == 2.0


def test_partial_older_window(make_records):
    # 10 records: recent = last 7, older = first 3
    trend = analyze_trend(make_records([4.0] * 3 + [2.0] * 7))
    assert trend.older_avg == 4.0
    assert trend.recent_avg == 2.0
    assert trend.direction == TrendDirection.IMPROVED
