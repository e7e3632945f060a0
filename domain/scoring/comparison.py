"""Side-by-side comparison of two scored cities."""
from __future__ import annotations

from typing import Dict, List, Optional, Sequence

from pydantic import BaseModel, ConfigDict

from .models import CATEGORY_ORDER, Category, CityScore

DEFAULT_TOP_DIFFERENCES = 5


class CategoryDelta(BaseModel):
    model_config = ConfigDict(frozen=True)

    category: Category
    first_score: Optional[float]
    second_score: Optional[float]
    difference: Optional[float]


class MetricDifference(BaseModel):
    model_config = ConfigDict(frozen=True)

    metric: str
    label: str
    first_score: float
    second_score: float
    difference: float


class CityComparison(BaseModel):
    model_config = ConfigDict(frozen=True)

    first_city_id: str
    second_city_id: str
    total_difference: Optional[float]
    leader: Optional[str]
    category_deltas: List[CategoryDelta]
    top_differences: List[MetricDifference]


def _difference(first: Optional[float], second: Optional[float]) -> Optional[float]:
    if first is None or second is None:
        return None
    return round(first - second, 2)


def _metric_scores(score: CityScore) -> Dict[str, tuple]:
    scores = {}
    for breakdown in score.breakdown.values():
        for item in breakdown.contributions:
            if item.score is not None:
                scores[item.metric] = (item.label, item.score)
    return scores


def compare_cities(
    first: CityScore,
    second: CityScore,
    limit: int = DEFAULT_TOP_DIFFERENCES,
) -> CityComparison:
    """Positive differences favour ``first``.

    Only metrics known for both cities are compared; ties in magnitude are
    ordered by metric key.
    """

    deltas = [
        CategoryDelta(
            category=category,
            first_score=first.category_score(category),
            second_score=second.category_score(category),
            difference=_difference(
                first.category_score(category), second.category_score(category)
            ),
        )
        for category in CATEGORY_ORDER
    ]

    first_metrics = _metric_scores(first)
    second_metrics = _metric_scores(second)
    differences = [
        MetricDifference(
            metric=key,
            label=label,
            first_score=value,
            second_score=second_metrics[key][1],
            difference=round(value - second_metrics[key][1], 2),
        )
        for key, (label, value) in first_metrics.items()
        if key in second_metrics
    ]
    differences.sort(key=lambda item: (-abs(item.difference), item.metric))

    total_difference = _difference(first.total_score, second.total_score)
    leader = None
    if total_difference is not None and total_difference != 0:
        leader = first.city_id if total_difference > 0 else second.city_id

    return CityComparison(
        first_city_id=first.city_id,
        second_city_id=second.city_id,
        total_difference=total_difference,
        leader=leader,
        category_deltas=deltas,
        top_differences=differences[:limit],
    )


def find_scores(scores: Sequence[CityScore], city_ids: Sequence[str]) -> List[CityScore]:
    """Pick scores by city id in the requested order; KeyError if one is missing."""

    by_id = {score.city_id: score for score in scores}
    missing = [city_id for city_id in city_ids if city_id not in by_id]
    if missing:
        raise KeyError(f"Unknown city id(s): {', '.join(missing)}")
    return [by_id[city_id] for city_id in city_ids]


__all__ = [
    "CategoryDelta",
    "CityComparison",
    "MetricDifference",
    "compare_cities",
    "find_scores",
]
