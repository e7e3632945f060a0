"""Expand a user preference snapshot into concrete per-metric weights.

Housing and work situations are closed enumerations dispatched through the
``HOUSING_MODE_OVERRIDES`` and ``WORK_MODE_OVERRIDES`` tables; adding a mode
means adding an entry, not a branch.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Dict, List, Optional, Tuple

from .catalogue import (
    METRIC_CATALOGUE,
    MetricSpec,
    community_share_spec,
    tradition_presence_extractor,
)
from .models import (
    CATEGORY_ORDER,
    Category,
    HardConstraint,
    HousingSituation,
    PartisanPreference,
    Preferences,
    WorkSituation,
)

SpecMap = Dict[str, MetricSpec]
ModeOverride = Callable[[SpecMap], SpecMap]

POLITICAL_ALIGNMENT_WEIGHT = 0.50
TRADITION_PRESENCE_WEIGHT = 0.25

# Target partisan index per preference (-1 strong R ... +1 strong D)
PARTISAN_TARGETS: Dict[PartisanPreference, float] = {
    PartisanPreference.STRONG_DEM: 0.6,
    PartisanPreference.LEAN_DEM: 0.2,
    PartisanPreference.SWING: 0.0,
    PartisanPreference.LEAN_REP: -0.2,
    PartisanPreference.STRONG_REP: -0.6,
}


def _with(specs: SpecMap, key: str, **changes) -> SpecMap:
    updated = dict(specs)
    updated[key] = specs[key].with_overrides(**changes)
    return updated


def _with_weights(specs: SpecMap, weights: Dict[str, float]) -> SpecMap:
    updated = dict(specs)
    for key, weight in weights.items():
        updated[key] = specs[key].with_overrides(weight=weight)
    return updated


# ============================================================================
# Housing situation (cost category)
# ============================================================================


def _renter(specs: SpecMap) -> SpecMap:
    return _with_weights(
        specs,
        {
            "cost.price_parity": 0.20,
            "cost.rent_parity": 0.30,
            "cost.home_price_trend": 0.0,
            "cost.affordability": 0.0,
        },
    )


def _homeowner(specs: SpecMap) -> SpecMap:
    # Mortgage is fixed; appreciation of the owned asset counts in favour.
    return _with_weights(
        specs,
        {
            "cost.price_parity": 0.15,
            "cost.goods_parity": 0.15,
            "cost.home_price_trend": 0.15,
            "cost.property_tax": 0.10,
        },
    )


def _prospective_buyer(specs: SpecMap) -> SpecMap:
    specs = _with_weights(
        specs,
        {
            "cost.price_parity": 0.10,
            "cost.property_tax": 0.10,
        },
    )
    # Half the spread doubles the slope, so poor affordability bites hard.
    return _with(specs, "cost.affordability", weight=0.40, spread_scale=0.5)


HOUSING_MODE_OVERRIDES: Dict[HousingSituation, ModeOverride] = {
    HousingSituation.RENTER: _renter,
    HousingSituation.HOMEOWNER: _homeowner,
    HousingSituation.PROSPECTIVE_BUYER: _prospective_buyer,
}


# ============================================================================
# Work situation (cost and demographics categories)
# ============================================================================


def _standard(specs: SpecMap) -> SpecMap:
    return _with_weights(
        specs,
        {
            "cost.household_income": 0.25,
            "cost.wage_level": 0.0,
            "cost.tax_burden": 0.20,
        },
    )


def _local_earner(specs: SpecMap) -> SpecMap:
    return _with_weights(
        specs,
        {
            "cost.household_income": 0.0,
            "cost.wage_level": 0.40,
            "cost.tax_burden": 0.15,
            "demographics.bachelors_percent": 0.35,
        },
    )


def _retiree(specs: SpecMap) -> SpecMap:
    # Income is fixed or pension based, so local wages do not matter.
    return _with_weights(
        specs,
        {
            "cost.household_income": 0.0,
            "cost.wage_level": 0.0,
            "cost.tax_burden": 0.40,
            "demographics.median_age": 0.20,
        },
    )


WORK_MODE_OVERRIDES: Dict[WorkSituation, ModeOverride] = {
    WorkSituation.STANDARD: _standard,
    WorkSituation.LOCAL_EARNER: _local_earner,
    WorkSituation.RETIREE: _retiree,
}


# ============================================================================
# Resolution
# ============================================================================


@dataclass(frozen=True)
class ResolvedPreferences:
    category_weights: Dict[Category, float]
    per_category_overrides: Dict[Category, Dict[str, float]]
    metric_specs: Dict[str, MetricSpec]
    constraints: Tuple[HardConstraint, ...]
    equal_fallback: bool = False
    minority_spec: Optional[MetricSpec] = None
    minority_importance: float = 0.0

    def category_specs(self, category: Category) -> List[MetricSpec]:
        return [self.metric_specs[key] for key in self.per_category_overrides[category]]

    def reference_specs(self) -> List[MetricSpec]:
        specs = list(self.metric_specs.values())
        if self.minority_spec is not None:
            specs.append(self.minority_spec)
        return specs


def normalize_category_weights(preferences: Preferences) -> Dict[Category, float]:
    """Scale the six weights to sum to 1; all-zero weights stay zero."""

    raw = preferences.weights.as_dict()
    total = sum(raw.values())
    if total <= 0:
        return {category: 0.0 for category in CATEGORY_ORDER}
    return {category: weight / total for category, weight in raw.items()}


def _apply_preference_targets(specs: SpecMap, preferences: Preferences) -> SpecMap:
    specs = _with(specs, "climate.avg_temp", ideal=preferences.ideal_temperature)

    target = PARTISAN_TARGETS.get(preferences.partisan_preference)
    if target is not None:
        specs = _with(
            specs, "values.political_alignment", ideal=target, weight=POLITICAL_ALIGNMENT_WEIGHT
        )

    if preferences.religious_traditions:
        specs = _with(
            specs,
            "values.tradition_presence",
            extract=tradition_presence_extractor(preferences.religious_traditions),
            weight=TRADITION_PRESENCE_WEIGHT,
        )
    return specs


def resolve(preferences: Preferences) -> ResolvedPreferences:
    specs: SpecMap = dict(METRIC_CATALOGUE)
    specs = HOUSING_MODE_OVERRIDES[preferences.housing_situation](specs)
    specs = WORK_MODE_OVERRIDES[preferences.work_situation](specs)
    specs = _apply_preference_targets(specs, preferences)

    active = {key: spec for key, spec in specs.items() if spec.weight > 0}
    per_category: Dict[Category, Dict[str, float]] = {
        category: {
            key: spec.weight for key, spec in active.items() if spec.category is category
        }
        for category in CATEGORY_ORDER
    }

    minority_spec: Optional[MetricSpec] = None
    importance = 0.0
    if preferences.minority_target is not None:
        minority_spec = community_share_spec(preferences.minority_target.subgroup)
        importance = preferences.minority_target.importance

    category_weights = normalize_category_weights(preferences)
    return ResolvedPreferences(
        category_weights=category_weights,
        per_category_overrides=per_category,
        metric_specs=active,
        constraints=tuple(preferences.constraints),
        equal_fallback=not any(category_weights.values()),
        minority_spec=minority_spec,
        minority_importance=importance,
    )


__all__ = [
    "HOUSING_MODE_OVERRIDES",
    "PARTISAN_TARGETS",
    "ResolvedPreferences",
    "WORK_MODE_OVERRIDES",
    "normalize_category_weights",
    "resolve",
]
