"""Normalization of raw metrics onto the shared 0-100 scale.

50 is the national-average outcome: the reference mean for the linear,
inverse-linear and percentage-anchored families. The reference is rebuilt from
the cities passed to each scoring call so scores stay comparable within the
active catalogue.
"""
from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import Dict, Iterable, Optional, Sequence, Tuple

import numpy as np

from .catalogue import DEFAULT_FALLBACK_SPREAD, MetricSpec, Transform
from .models import City, CityMetrics

logger = logging.getLogger(__name__)

SCORE_MIN = 0.0
SCORE_MAX = 100.0
NEUTRAL_SCORE = 50.0


def clamp(value: float, minimum: float = SCORE_MIN, maximum: float = SCORE_MAX) -> float:
    return max(minimum, min(maximum, value))


@dataclass(frozen=True)
class ReferenceStats:
    count: int
    mean: Optional[float]
    median: Optional[float]
    std: Optional[float]
    spread: float
    low_confidence: bool
    ideal: Optional[float] = None
    tolerance: Optional[float] = None


@dataclass(frozen=True)
class NationalReference:
    """Per-call baseline; built once before any per-city work starts."""

    stats: Dict[str, ReferenceStats]

    def get(self, key: str) -> Optional[ReferenceStats]:
        return self.stats.get(key)


def read_bounded(spec: MetricSpec, city: City, metrics: CityMetrics) -> Optional[float]:
    """Extract a metric value, clamping bounded metrics into their domain."""

    value = spec.extract(city, metrics)
    if value is None or not math.isfinite(value):
        return None
    bounds = spec.effective_bounds
    if bounds is None:
        return value
    lower, upper = bounds
    if value < lower or value > upper:
        logger.debug(
            "Clamping %s=%s for %s into [%s, %s]", spec.key, value, city.id, lower, upper
        )
        return clamp(value, lower, upper)
    return value


def build_reference_stats(
    values: Sequence[float],
    spec: MetricSpec,
    fallback_spread: float = DEFAULT_FALLBACK_SPREAD,
) -> ReferenceStats:
    count = len(values)
    if count == 0:
        return ReferenceStats(
            count=0,
            mean=None,
            median=None,
            std=None,
            spread=fallback_spread,
            low_confidence=True,
            ideal=spec.ideal,
            tolerance=spec.tolerance,
        )

    data = np.asarray(values, dtype=float)
    mean = float(np.mean(data))
    median = float(np.median(data))
    std = float(np.std(data))

    low_confidence = count < 2
    if spec.spread is not None:
        spread = spec.spread * spec.spread_scale
    elif low_confidence or std <= 0.0:
        spread = fallback_spread
        low_confidence = low_confidence or std <= 0.0
    else:
        spread = std * spec.spread_scale

    return ReferenceStats(
        count=count,
        mean=mean,
        median=median,
        std=std,
        spread=spread,
        low_confidence=low_confidence,
        ideal=spec.ideal,
        tolerance=spec.tolerance,
    )


def build_national_reference(
    cities: Sequence[Tuple[City, CityMetrics]],
    specs: Iterable[MetricSpec],
    fallback_spread: float = DEFAULT_FALLBACK_SPREAD,
) -> NationalReference:
    stats: Dict[str, ReferenceStats] = {}
    for spec in specs:
        values = []
        for city, metrics in cities:
            value = read_bounded(spec, city, metrics)
            if value is not None:
                values.append(value)
        stats[spec.key] = build_reference_stats(values, spec, fallback_spread)
    return NationalReference(stats=stats)


def normalize(
    raw_value: Optional[float],
    spec: MetricSpec,
    reference: NationalReference,
) -> Optional[float]:
    """Map one raw value onto 0-100; ``None`` stays ``None``."""

    if raw_value is None or not math.isfinite(raw_value):
        return None

    stats = reference.get(spec.key)
    if stats is None:
        raise KeyError(f"No national reference for metric '{spec.key}'")

    value = float(raw_value)
    bounds = spec.effective_bounds
    if bounds is not None:
        value = clamp(value, *bounds)

    if spec.transform is Transform.TARGET_DISTANCE:
        ideal = stats.ideal if stats.ideal is not None else stats.mean
        if ideal is None:
            return None
        tolerance = stats.tolerance if stats.tolerance else stats.spread
        return clamp(SCORE_MAX - SCORE_MAX * abs(value - ideal) / tolerance)

    if stats.mean is None:
        return NEUTRAL_SCORE

    deviation = (value - stats.mean) / stats.spread
    if spec.transform is Transform.LINEAR:
        higher_is_better = True
    elif spec.transform is Transform.INVERSE_LINEAR:
        higher_is_better = False
    else:
        higher_is_better = spec.higher_is_better

    if higher_is_better:
        return clamp(NEUTRAL_SCORE + NEUTRAL_SCORE * deviation)
    return clamp(NEUTRAL_SCORE - NEUTRAL_SCORE * deviation)


__all__ = [
    "NEUTRAL_SCORE",
    "NationalReference",
    "ReferenceStats",
    "build_national_reference",
    "build_reference_stats",
    "clamp",
    "normalize",
    "read_bounded",
]
