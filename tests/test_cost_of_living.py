"""Tests for the derived true cost of living."""

import pytest

from domain.scoring.cost_of_living import (
    calculate_true_cost_of_living,
    cost_of_living_rating,
    tax_burden_rating,
    value_rating,
)
from domain.scoring.models import CostMetrics


class TestTrueCostOfLiving:
    """Disposable income deflated by regional prices."""

    def test_national_average_city(self):
        """A national-average city has purchasing power 100."""
        result = calculate_true_cost_of_living(
            CostMetrics(per_capita_disposable_income=56014, regional_price_parity=100.0)
        )
        assert result.true_purchasing_power == 56014
        assert result.true_purchasing_power_index == 100.0
        assert result.overall_value_rating == "moderate"

    def test_cheap_region_boosts_purchasing_power(self):
        """Low price parity raises purchasing power."""
        result = calculate_true_cost_of_living(
            CostMetrics(
                per_capita_income=60000,
                per_capita_disposable_income=52000,
                regional_price_parity=88.0,
                effective_tax_rate=11.5,
                rpp_housing=70.0,
            )
        )
        assert result.true_purchasing_power == round(52000 / 0.88)
        assert result.true_purchasing_power_index == pytest.approx(105.5)
        assert result.tax_burden_rating == "low"
        assert result.cost_of_living_rating == "very-low"
        assert result.overall_value_rating == "good"
        assert result.housing_cost_index == 70.0
        assert result.gross_income == 60000

    def test_missing_inputs_stay_null(self):
        """Missing inputs leave outputs null."""
        result = calculate_true_cost_of_living(CostMetrics(per_capita_disposable_income=50000))
        assert result.true_purchasing_power is None
        assert result.true_purchasing_power_index is None
        assert result.overall_value_rating is None

    def test_no_metrics(self):
        """No cost metrics gives an empty result."""
        assert calculate_true_cost_of_living(None).true_purchasing_power is None

    def test_zero_price_parity_is_ignored(self):
        """Zero price parity is treated as unknown."""
        result = calculate_true_cost_of_living(
            CostMetrics(per_capita_disposable_income=50000, regional_price_parity=0.0)
        )
        assert result.true_purchasing_power is None


class TestRatings:
    """Rating bands."""

    @pytest.mark.parametrize(
        "rate,rating",
        [(None, None), (11.9, "low"), (12.0, "moderate"), (15.0, "high"), (18.0, "very-high")],
    )
    def test_tax_burden(self, rate, rating):
        """Tax rates map to their rating bands."""
        assert tax_burden_rating(rate) == rating

    @pytest.mark.parametrize(
        "rpp,rating",
        [(85.0, "very-low"), (90.0, "low"), (100.0, "moderate"), (110.0, "high"), (115.0, "very-high")],
    )
    def test_cost_of_living(self, rpp, rating):
        """Price parity maps to its rating bands."""
        assert cost_of_living_rating(rpp) == rating

    @pytest.mark.parametrize(
        "index,rating",
        [(110.0, "excellent"), (102.0, "good"), (95.0, "moderate"), (85.0, "poor"), (84.9, "very-poor")],
    )
    def test_value(self, index, rating):
        """The value index maps to its rating bands."""
        assert value_rating(index) == rating
