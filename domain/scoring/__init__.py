"""Personalized multi-factor city scoring engine."""

from .comparison import CityComparison, compare_cities
from .cost_of_living import TrueCostOfLiving, calculate_true_cost_of_living
from .models import (
    Category,
    City,
    CityMetrics,
    CityRecord,
    CityScore,
    HardConstraint,
    Preferences,
    ScoringResult,
)
from .pipeline import ScoringOptions, build_scoring_result, score_cities

__all__ = [
    "Category",
    "City",
    "CityComparison",
    "CityMetrics",
    "CityRecord",
    "CityScore",
    "HardConstraint",
    "Preferences",
    "ScoringOptions",
    "ScoringResult",
    "TrueCostOfLiving",
    "build_scoring_result",
    "calculate_true_cost_of_living",
    "compare_cities",
    "score_cities",
]
