"""Ranking pipeline: resolve, build the reference, score, filter and sort.

``score_cities`` is a pure function. The national reference is built once per
call from the cities passed in and discarded afterwards; nothing is cached
between calls.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Dict, Iterable, List, Optional, Sequence, Tuple, Union

from .aggregation import aggregate_category, effective_weights, weighted_average
from .catalogue import DEFAULT_FALLBACK_SPREAD, MetricSpec
from .constraints import filter_city
from .display import display_fields
from .models import (
    CATEGORY_ORDER,
    Category,
    CategoryBreakdown,
    City,
    CityMetrics,
    CityRecord,
    CityScore,
    MetricContribution,
    Preferences,
    ScoringResult,
)
from .normalization import NationalReference, build_national_reference, clamp, normalize, read_bounded
from .preferences import ResolvedPreferences, resolve

logger = logging.getLogger(__name__)

CityPair = Tuple[City, CityMetrics]
CityInput = Union[CityPair, CityRecord]


@dataclass(frozen=True)
class ScoringOptions:
    fallback_spread: float = DEFAULT_FALLBACK_SPREAD
    # Decimal places kept in the output; None keeps full precision
    precision: Optional[int] = 2


def _round(value: Optional[float], precision: Optional[int]) -> Optional[float]:
    if value is None or precision is None:
        return value
    return round(value, precision)


def _coerce_pairs(cities: Iterable[CityInput]) -> List[CityPair]:
    if isinstance(cities, (str, bytes, dict)) or not isinstance(cities, Iterable):
        raise TypeError("cities must be a sequence of (City, CityMetrics) pairs")

    pairs: List[CityPair] = []
    for item in cities:
        if isinstance(item, CityRecord):
            pairs.append((item.city, item.metrics))
            continue
        if (
            isinstance(item, tuple)
            and len(item) == 2
            and isinstance(item[0], City)
            and isinstance(item[1], CityMetrics)
        ):
            pairs.append(item)
            continue
        raise TypeError(f"Expected a (City, CityMetrics) pair, got {type(item).__name__}")
    return pairs


# ============================================================================
# Per-city scoring
# ============================================================================


def _minority_bonus(
    city: City,
    metrics: CityMetrics,
    resolved: ResolvedPreferences,
    reference: NationalReference,
) -> Optional[float]:
    spec = resolved.minority_spec
    if spec is None:
        return None
    share_score = normalize(read_bounded(spec, city, metrics), spec, reference)
    if share_score is None:
        return None
    return resolved.minority_importance * share_score


def _score_category(
    category: Category,
    specs: Sequence[MetricSpec],
    city: City,
    metrics: CityMetrics,
    resolved: ResolvedPreferences,
    reference: NationalReference,
    precision: Optional[int],
) -> CategoryBreakdown:
    raw_values = [read_bounded(spec, city, metrics) for spec in specs]
    entries = [
        (spec.key, normalize(raw, spec, reference), spec.weight)
        for spec, raw in zip(specs, raw_values)
    ]
    weights = effective_weights(entries)
    score = aggregate_category(entries)

    bonus = None
    if category is Category.DEMOGRAPHICS and score is not None:
        bonus = _minority_bonus(city, metrics, resolved, reference)
        if bonus is not None:
            score = clamp(score + bonus)

    contributions = []
    for spec, raw, (_, sub_score, weight), effective in zip(specs, raw_values, entries, weights):
        stats = reference.get(spec.key)
        contributions.append(
            MetricContribution(
                metric=spec.key,
                label=spec.label,
                raw_value=raw,
                score=_round(sub_score, precision),
                weight=weight,
                effective_weight=effective,
                contribution=_round((sub_score or 0.0) * effective, precision),
                low_confidence=bool(stats and stats.low_confidence),
            )
        )

    return CategoryBreakdown(
        category=category,
        score=_round(score, precision),
        category_weight=resolved.category_weights[category],
        contributions=contributions,
        minority_bonus=_round(bonus, precision),
    )


def score_city(
    city: City,
    metrics: CityMetrics,
    resolved: ResolvedPreferences,
    reference: NationalReference,
    options: ScoringOptions,
) -> CityScore:
    """Score one city against an already-built reference. Rank is left at 0."""

    breakdown: Dict[Category, CategoryBreakdown] = {
        category: _score_category(
            category,
            resolved.category_specs(category),
            city,
            metrics,
            resolved,
            reference,
            options.precision,
        )
        for category in CATEGORY_ORDER
    }

    total = weighted_average(
        [
            (category.value, breakdown[category].score, resolved.category_weights[category])
            for category in CATEGORY_ORDER
        ],
        equal_fallback=resolved.equal_fallback,
    )
    total = _round(total, options.precision)

    result = filter_city(city, metrics, resolved.constraints)
    grade, label, color = display_fields(total)

    return CityScore(
        city_id=city.id,
        city_name=city.name,
        state=city.state,
        climate_score=breakdown[Category.CLIMATE].score,
        cost_score=breakdown[Category.COST].score,
        demographics_score=breakdown[Category.DEMOGRAPHICS].score,
        quality_of_life_score=breakdown[Category.QUALITY_OF_LIFE].score,
        values_score=breakdown[Category.VALUES].score,
        entertainment_score=breakdown[Category.ENTERTAINMENT].score,
        total_score=total,
        excluded=result.excluded,
        exclusion_reason=result.reason,
        grade=grade,
        rating_label=label,
        color_code=color,
        breakdown=breakdown,
    )


# ============================================================================
# Ranking
# ============================================================================


def _sort_key(score: CityScore):
    missing = score.total_score is None
    return (
        score.excluded,
        missing,
        0.0 if missing else -score.total_score,
        score.city_name,
        score.city_id,
    )


def score_cities(
    cities: Iterable[CityInput],
    preferences: Preferences,
    options: Optional[ScoringOptions] = None,
) -> List[CityScore]:
    """Score and rank every city; excluded cities are marked, never dropped."""

    if not isinstance(preferences, Preferences):
        raise TypeError(f"preferences must be Preferences, got {type(preferences).__name__}")
    if options is not None and not isinstance(options, ScoringOptions):
        raise TypeError(f"options must be ScoringOptions, got {type(options).__name__}")
    options = options or ScoringOptions()
    pairs = _coerce_pairs(cities)

    resolved = resolve(preferences)
    if resolved.equal_fallback:
        logger.info("All category weights are zero; weighting present categories equally")

    reference = build_national_reference(
        pairs, resolved.reference_specs(), options.fallback_spread
    )
    scores = [
        score_city(city, metrics, resolved, reference, options) for city, metrics in pairs
    ]
    ranked = [
        score.model_copy(update={"rank": position})
        for position, score in enumerate(sorted(scores, key=_sort_key), start=1)
    ]

    excluded = sum(1 for score in ranked if score.excluded)
    logger.info("Scored %d cities (%d excluded)", len(ranked), excluded)
    return ranked


def build_scoring_result(scores: Sequence[CityScore]) -> ScoringResult:
    excluded = sum(1 for score in scores if score.excluded)
    return ScoringResult(
        rankings=list(scores),
        included_count=len(scores) - excluded,
        excluded_count=excluded,
    )


__all__ = [
    "ScoringOptions",
    "build_scoring_result",
    "score_cities",
    "score_city",
]
