"""Weighted averaging with redistribution over present values."""
from __future__ import annotations

from typing import List, Optional, Sequence, Tuple

from .normalization import clamp

WeightedEntry = Tuple[str, Optional[float], float]


def effective_weights(
    entries: Sequence[WeightedEntry],
    equal_fallback: bool = True,
) -> List[float]:
    """Weights actually applied to each entry, summing to 1 over present ones.

    Entries whose score is ``None`` get 0 and their weight is shared
    proportionally among the rest. If every present entry has zero weight the
    present entries share equally (when ``equal_fallback``) or all get 0.
    """

    present = [score is not None for _, score, _ in entries]
    if not any(present):
        return [0.0 for _ in entries]

    total = sum(weight for (_, _, weight), is_present in zip(entries, present) if is_present)
    if total > 0:
        return [
            weight / total if is_present else 0.0
            for (_, _, weight), is_present in zip(entries, present)
        ]

    if not equal_fallback:
        return [0.0 for _ in entries]
    share = 1.0 / sum(present)
    return [share if is_present else 0.0 for is_present in present]


def weighted_average(
    entries: Sequence[WeightedEntry],
    equal_fallback: bool = True,
) -> Optional[float]:
    weights = effective_weights(entries, equal_fallback)
    if not any(weight > 0 for weight in weights):
        return None
    total = 0.0
    for (_, score, _), weight in zip(entries, weights):
        if score is not None and weight > 0:
            total += score * weight
    return clamp(total)


def aggregate_category(sub_scores: Sequence[WeightedEntry]) -> Optional[float]:
    """Category score from its sub-scores; ``None`` when nothing is known."""

    return weighted_average(sub_scores, equal_fallback=True)


__all__ = [
    "WeightedEntry",
    "aggregate_category",
    "effective_weights",
    "weighted_average",
]
