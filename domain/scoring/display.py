"""Presentation helpers: letter grades, labels and colours for 0-100 scores."""
from __future__ import annotations

from typing import Optional, Sequence, Tuple, TypeVar

T = TypeVar("T")

GRADE_BANDS: Sequence[Tuple[float, str]] = (
    (90.0, "A+"),
    (85.0, "A"),
    (80.0, "A-"),
    (77.0, "B+"),
    (73.0, "B"),
    (70.0, "B-"),
    (67.0, "C+"),
    (63.0, "C"),
    (60.0, "C-"),
    (50.0, "D"),
)

LABEL_BANDS: Sequence[Tuple[float, str]] = (
    (90.0, "Exceptional"),
    (80.0, "Excellent"),
    (70.0, "Good"),
    (60.0, "Average"),
    (50.0, "Below Average"),
)

# Green through red, one step per ten points
COLOR_BANDS: Sequence[Tuple[float, str]] = (
    (90.0, "#00DD00"),
    (80.0, "#33FF33"),
    (70.0, "#7FFF00"),
    (60.0, "#CCFF00"),
    (50.0, "#FFFF00"),
    (40.0, "#FFCC00"),
    (30.0, "#FF9900"),
    (20.0, "#FF6600"),
    (10.0, "#FF3300"),
)

NEAR_AVERAGE_MARGIN = 5.0


def _band(score: float, bands: Sequence[Tuple[float, T]], default: T) -> T:
    for threshold, value in bands:
        if score >= threshold:
            return value
    return default


def get_grade(score: float) -> str:
    return _band(score, GRADE_BANDS, "F")


def get_score_label(score: float) -> str:
    return _band(score, LABEL_BANDS, "Poor")


def get_color_from_score(score: float) -> str:
    return _band(score, COLOR_BANDS, "#CC0000")


def get_score_relative(score: float) -> str:
    """Offset from the national average: ``"+12"``, ``"-8"`` or ``"avg"``."""

    diff = score - 50.0
    if abs(diff) < NEAR_AVERAGE_MARGIN:
        return "avg"
    if diff > 0:
        return f"+{diff:.0f}"
    return f"{diff:.0f}"


def display_fields(score: Optional[float]) -> Tuple[Optional[str], Optional[str], Optional[str]]:
    """(grade, rating label, colour) for a total score; all ``None`` if unknown."""

    if score is None:
        return None, None, None
    return get_grade(score), get_score_label(score), get_color_from_score(score)


__all__ = [
    "display_fields",
    "get_color_from_score",
    "get_grade",
    "get_score_label",
    "get_score_relative",
]
