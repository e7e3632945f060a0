"""Derived "true" cost of living.

True purchasing power is disposable income deflated by the regional price
parity: ``disposable / (rpp / 100)``. The index compares it against the
national per-capita disposable income (100 = national average).
"""
from __future__ import annotations

from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict

from .models import CostMetrics

# BEA per-capita disposable personal income, 2022
NATIONAL_PER_CAPITA_DISPOSABLE = 56014.0

TaxBurdenRating = Literal["low", "moderate", "high", "very-high"]
CostOfLivingRating = Literal["very-low", "low", "moderate", "high", "very-high"]
ValueRating = Literal["excellent", "good", "moderate", "poor", "very-poor"]


class TrueCostOfLiving(BaseModel):
    model_config = ConfigDict(frozen=True)

    true_purchasing_power: Optional[float] = None
    true_purchasing_power_index: Optional[float] = None
    gross_income: Optional[float] = None
    after_tax_income: Optional[float] = None
    effective_tax_rate: Optional[float] = None
    cost_of_living_index: Optional[float] = None
    housing_cost_index: Optional[float] = None
    tax_burden_rating: Optional[TaxBurdenRating] = None
    cost_of_living_rating: Optional[CostOfLivingRating] = None
    overall_value_rating: Optional[ValueRating] = None


def tax_burden_rating(rate: Optional[float]) -> Optional[str]:
    if rate is None:
        return None
    if rate < 12:
        return "low"
    if rate < 15:
        return "moderate"
    if rate < 18:
        return "high"
    return "very-high"


def cost_of_living_rating(rpp: Optional[float]) -> Optional[str]:
    if rpp is None:
        return None
    if rpp < 90:
        return "very-low"
    if rpp < 97:
        return "low"
    if rpp < 103:
        return "moderate"
    if rpp < 115:
        return "high"
    return "very-high"


def value_rating(index: Optional[float]) -> Optional[str]:
    if index is None:
        return None
    if index >= 110:
        return "excellent"
    if index >= 102:
        return "good"
    if index >= 95:
        return "moderate"
    if index >= 85:
        return "poor"
    return "very-poor"


def calculate_true_cost_of_living(
    cost: Optional[CostMetrics],
    national_disposable: float = NATIONAL_PER_CAPITA_DISPOSABLE,
) -> TrueCostOfLiving:
    if cost is None:
        return TrueCostOfLiving()

    disposable = cost.per_capita_disposable_income
    rpp = cost.regional_price_parity

    purchasing_power = None
    if disposable is not None and rpp is not None and rpp > 0:
        purchasing_power = float(round(disposable / (rpp / 100.0)))

    index = None
    if purchasing_power is not None:
        index = round(purchasing_power / national_disposable * 100.0, 1)

    return TrueCostOfLiving(
        true_purchasing_power=purchasing_power,
        true_purchasing_power_index=index,
        gross_income=cost.per_capita_income,
        after_tax_income=disposable,
        effective_tax_rate=cost.effective_tax_rate,
        cost_of_living_index=rpp,
        housing_cost_index=cost.rpp_housing,
        tax_burden_rating=tax_burden_rating(cost.effective_tax_rate),
        cost_of_living_rating=cost_of_living_rating(rpp),
        overall_value_rating=value_rating(index),
    )


__all__ = [
    "NATIONAL_PER_CAPITA_DISPOSABLE",
    "TrueCostOfLiving",
    "calculate_true_cost_of_living",
    "cost_of_living_rating",
    "tax_burden_rating",
    "value_rating",
]
