"""Hard constraint evaluation.

Constraints are checked in declaration order and the first failure wins.
Missing data fails closed: a city that cannot prove it satisfies a
requirement is excluded.
"""
from __future__ import annotations

import logging
import math
import operator
from dataclasses import dataclass
from typing import Callable, Dict, Optional, Sequence

from .catalogue import METRIC_CATALOGUE
from .models import City, CityMetrics, HardConstraint, read_raw_metric

logger = logging.getLogger(__name__)

OPERATORS: Dict[str, Callable[[float, float], bool]] = {
    "<": operator.lt,
    "<=": operator.le,
    ">": operator.gt,
    ">=": operator.ge,
    "==": operator.eq,
    "!=": operator.ne,
}

PREDICATE_ERRORS = (TypeError, ValueError, KeyError, AttributeError, ZeroDivisionError)


@dataclass(frozen=True)
class ConstraintResult:
    excluded: bool
    reason: Optional[str] = None


PASSED = ConstraintResult(excluded=False)


def resolve_metric_value(metric: str, city: City, metrics: CityMetrics) -> Optional[float]:
    """Raw value behind a catalogue key or a raw metric path; non-finite is unknown."""

    spec = METRIC_CATALOGUE.get(metric)
    if spec is not None:
        value = spec.extract(city, metrics)
    else:
        value = read_raw_metric(metrics, metric)
    if value is None:
        return None
    value = float(value)
    if not math.isfinite(value):
        return None
    return value


def _team(constraint: HardConstraint, city: City, metrics: CityMetrics) -> bool:
    count = city.team_count(constraint.league)
    return count is not None and count > 0


def _metric(constraint: HardConstraint, city: City, metrics: CityMetrics) -> bool:
    value = resolve_metric_value(str(constraint.metric), city, metrics)
    if value is None:
        return False
    compare = OPERATORS[str(constraint.operator)]
    return bool(compare(value, constraint.value))


def _airport(constraint: HardConstraint, city: City, metrics: CityMetrics) -> bool:
    return city.has_international_airport is True


def _state(constraint: HardConstraint, city: City, metrics: CityMetrics) -> bool:
    allowed = {state.upper() for state in constraint.states or []}
    return city.state.upper() in allowed


def _predicate(constraint: HardConstraint, city: City, metrics: CityMetrics) -> bool:
    try:
        return bool(constraint.predicate(city, metrics))
    except PREDICATE_ERRORS as exc:
        logger.warning(
            "Constraint '%s' failed to evaluate for %s: %s", constraint.label, city.id, exc
        )
        return False


CONSTRAINT_EVALUATORS: Dict[str, Callable[[HardConstraint, City, CityMetrics], bool]] = {
    "team": _team,
    "metric": _metric,
    "airport": _airport,
    "state": _state,
    "predicate": _predicate,
}


def filter_city(
    city: City,
    metrics: CityMetrics,
    constraints: Sequence[HardConstraint],
) -> ConstraintResult:
    for constraint in constraints:
        if not CONSTRAINT_EVALUATORS[constraint.kind](constraint, city, metrics):
            logger.debug("%s excluded by constraint '%s'", city.id, constraint.label)
            return ConstraintResult(excluded=True, reason=constraint.label)
    return PASSED


__all__ = [
    "CONSTRAINT_EVALUATORS",
    "ConstraintResult",
    "OPERATORS",
    "filter_city",
    "resolve_metric_value",
]
