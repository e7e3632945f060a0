"""Closed catalogue of sub-metrics and their base weights per category.

Each entry declares how its raw value is read, which transform family turns it
into a 0-100 sub-score, and its weight inside its category. Weights inside a
category need not sum to 1; the aggregator renormalizes over present values.
Mode- and preference-dependent adjustments live in ``preferences.py``.
"""
from __future__ import annotations

import dataclasses
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Dict, List, Optional, Sequence, Tuple

from .models import Category, City, CityMetrics, read_raw_metric

Extractor = Callable[[City, CityMetrics], Optional[float]]

DEFAULT_FALLBACK_SPREAD = 1.0
PERCENT_BOUNDS: Tuple[float, float] = (0.0, 100.0)


class Transform(str, Enum):
    LINEAR = "linear"
    INVERSE_LINEAR = "inverse-linear"
    TARGET_DISTANCE = "target-distance"
    PERCENTAGE = "percentage-anchored"


@dataclass(frozen=True)
class MetricSpec:
    key: str
    category: Category
    label: str
    transform: Transform
    extract: Extractor
    weight: float = 1.0
    higher_is_better: bool = True
    ideal: Optional[float] = None
    tolerance: Optional[float] = None
    bounds: Optional[Tuple[float, float]] = None
    spread: Optional[float] = None
    spread_scale: float = 1.0

    @property
    def effective_bounds(self) -> Optional[Tuple[float, float]]:
        if self.bounds is not None:
            return self.bounds
        if self.transform is Transform.PERCENTAGE:
            return PERCENT_BOUNDS
        return None

    def with_overrides(self, **changes) -> "MetricSpec":
        return dataclasses.replace(self, **changes)


def _as_float(value) -> Optional[float]:
    if value is None:
        return None
    return float(value)


def raw_field(path: str) -> Extractor:
    def extract(city: City, metrics: CityMetrics) -> Optional[float]:
        return _as_float(read_raw_metric(metrics, path))

    return extract


def _degree_days(city: City, metrics: CityMetrics) -> Optional[float]:
    cooling = metrics.climate.cooling_degree_days
    heating = metrics.climate.heating_degree_days
    if cooling is None or heating is None:
        return None
    return float(cooling + heating)


def _affordability_ratio(city: City, metrics: CityMetrics) -> Optional[float]:
    price = metrics.cost.median_home_price
    income = metrics.cost.median_household_income
    if price is None or income is None or income <= 0:
        return None
    return float(price) / float(income)


def _pro_team_count(city: City, metrics: CityMetrics) -> Optional[float]:
    return _as_float(city.team_count())


def community_share_extractor(subgroup: str) -> Extractor:
    def extract(city: City, metrics: CityMetrics) -> Optional[float]:
        return _as_float(metrics.demographics.community_percent.get(subgroup))

    return extract


def tradition_presence_extractor(traditions: Sequence[str]) -> Extractor:
    selected = tuple(sorted(set(traditions)))

    def extract(city: City, metrics: CityMetrics) -> Optional[float]:
        values = [metrics.culture.religious_adherents.get(name) for name in selected]
        present = [float(value) for value in values if value is not None]
        if not present:
            return None
        return sum(present)

    return extract


def _spec(
    key: str,
    label: str,
    transform: Transform,
    weight: float,
    extract: Optional[Extractor] = None,
    **options,
) -> MetricSpec:
    category = Category(key.split(".", 1)[0])
    path = key if extract is None else None
    return MetricSpec(
        key=key,
        category=category,
        label=label,
        transform=transform,
        extract=extract or raw_field(str(path)),
        weight=weight,
        **options,
    )


def _cost(name: str, path: str, label: str, transform: Transform, weight: float, **options) -> MetricSpec:
    return _spec(f"cost.{name}", label, transform, weight, raw_field(path), **options)


LINEAR = Transform.LINEAR
INVERSE = Transform.INVERSE_LINEAR
TARGET = Transform.TARGET_DISTANCE
PERCENT = Transform.PERCENTAGE


# ============================================================================
# Catalogue
# ============================================================================

_SPECS: List[MetricSpec] = [
    # Climate
    _spec("climate.avg_temp", "Average temperature", TARGET, 0.25, ideal=65.0, tolerance=20.0),
    _spec("climate.comfort_days", "Comfortable days (65-80F)", LINEAR, 0.20),
    _spec("climate.sunshine_days", "Days of sunshine", LINEAR, 0.10),
    _spec("climate.extreme_heat_days", "Extreme heat days (>95F)", INVERSE, 0.10),
    _spec("climate.freeze_days", "Freeze days (<32F)", INVERSE, 0.10),
    _spec("climate.rain_days", "Rain days", INVERSE, 0.10),
    _spec("climate.snow_days", "Snow days", INVERSE, 0.05),
    _spec("climate.july_dewpoint", "July dewpoint", INVERSE, 0.05),
    _spec("climate.degree_days", "Heating + cooling degree days", INVERSE, 0.05, _degree_days),
    # Cost of living (weights are set by the housing and work mode tables)
    _cost("price_parity", "cost.regional_price_parity", "Regional price parity", INVERSE, 0.0),
    _cost("rent_parity", "cost.rpp_housing", "Rent price parity", INVERSE, 0.0),
    _cost("goods_parity", "cost.rpp_goods", "Goods price parity", INVERSE, 0.0),
    _cost("household_income", "cost.median_household_income", "Median household income", LINEAR, 0.0),
    _cost("wage_level", "cost.per_capita_income", "Regional wage level", LINEAR, 0.0),
    _cost(
        "tax_burden", "cost.effective_tax_rate", "Effective tax rate", PERCENT, 0.20,
        higher_is_better=False,
    ),
    _cost(
        "property_tax", "cost.property_tax_rate", "Property tax rate", PERCENT, 0.0,
        higher_is_better=False,
    ),
    _cost("home_price_trend", "cost.home_price_change_1yr", "Home price change (1 yr)", LINEAR, 0.0),
    _spec("cost.affordability", "Home price to income", INVERSE, 0.0, _affordability_ratio),
    # Demographics
    _spec("demographics.population", "Population", LINEAR, 0.10),
    _spec("demographics.diversity_index", "Diversity index", PERCENT, 0.30),
    _spec("demographics.bachelors_percent", "Bachelor's degree or higher", PERCENT, 0.25),
    _spec("demographics.foreign_born_percent", "Foreign-born residents", PERCENT, 0.15),
    _spec(
        "demographics.poverty_rate", "Poverty rate", PERCENT, 0.20, higher_is_better=False,
    ),
    _spec("demographics.median_age", "Median age", TARGET, 0.0, ideal=45.0, tolerance=15.0),
    # Quality of life
    _spec("quality_of_life.walk_score", "Walk Score", PERCENT, 0.15),
    _spec("quality_of_life.transit_score", "Transit Score", PERCENT, 0.05),
    _spec("quality_of_life.violent_crime_rate", "Violent crime per 100k", INVERSE, 0.25),
    _spec("quality_of_life.healthy_air_days_percent", "Healthy air days", PERCENT, 0.15),
    _spec("quality_of_life.fiber_coverage_percent", "Fiber coverage", PERCENT, 0.10),
    _spec("quality_of_life.student_teacher_ratio", "Student-teacher ratio", INVERSE, 0.15),
    _spec("quality_of_life.physicians_per_100k", "Primary care physicians per 100k", LINEAR, 0.15),
    # Values
    _spec(
        "values.political_alignment", "Political alignment", TARGET, 0.0,
        raw_field("culture.partisan_index"), ideal=0.0, tolerance=1.0,
    ),
    _spec(
        "values.religious_diversity", "Religious diversity", PERCENT, 0.25,
        raw_field("culture.religious_diversity_index"),
    ),
    _spec(
        "values.voter_turnout", "Voter turnout", PERCENT, 0.10, raw_field("culture.voter_turnout"),
    ),
    _spec(
        "values.tradition_presence", "Religious community presence", LINEAR, 0.0,
        tradition_presence_extractor(()),
    ),
    # Entertainment
    _spec("entertainment.pro_teams", "Professional sports teams", LINEAR, 0.25, _pro_team_count),
    _spec("entertainment.nightlife", "Bars and clubs per 10k", LINEAR, 0.15, raw_field("culture.bars_per_10k")),
    _spec("entertainment.museums", "Museums", LINEAR, 0.15, raw_field("culture.museums")),
    _spec(
        "entertainment.dining", "Restaurants per 10k", LINEAR, 0.15,
        raw_field("culture.restaurants_per_10k"),
    ),
    _spec(
        "entertainment.cuisine_diversity", "Cuisine diversity", LINEAR, 0.10,
        raw_field("culture.cuisine_diversity"),
    ),
    _spec("entertainment.trails", "Trail miles nearby", LINEAR, 0.10, raw_field("recreation.trail_miles")),
    _spec(
        "entertainment.parks", "Park acres per 1k residents", LINEAR, 0.10,
        raw_field("recreation.park_acres_per_1k"),
    ),
]

METRIC_CATALOGUE: Dict[str, MetricSpec] = {spec.key: spec for spec in _SPECS}

COMMUNITY_SHARE_PREFIX = "demographics.community_share"


def community_share_spec(subgroup: str) -> MetricSpec:
    return MetricSpec(
        key=f"{COMMUNITY_SHARE_PREFIX}.{subgroup}",
        category=Category.DEMOGRAPHICS,
        label=f"{subgroup.replace('-', ' ').title()} community share",
        transform=Transform.PERCENTAGE,
        extract=community_share_extractor(subgroup),
        weight=0.0,
    )


def is_known_metric_key(key: str) -> bool:
    return key in METRIC_CATALOGUE


__all__ = [
    "COMMUNITY_SHARE_PREFIX",
    "DEFAULT_FALLBACK_SPREAD",
    "METRIC_CATALOGUE",
    "MetricSpec",
    "PERCENT_BOUNDS",
    "Transform",
    "community_share_spec",
    "is_known_metric_key",
    "tradition_presence_extractor",
]
