# scoring.py

from __future__ import annotations

import math
from dataclasses import dataclass
from enum import Enum
from typing import Iterable, Mapping, Optional, Tuple


class RecommendationTier(str, Enum):
    GOOD_STANDING = "GOOD STANDING"
    WARNING = "WARNING"
    FINAL_WRITE_UP = "FINAL WRITE-UP"
    SEPARATION = "SEPARATION"


@dataclass(frozen=True)
class Recommendation:
    tier: RecommendationTier
    description: str
    threshold: float


# Highest threshold first; each lower bound is inclusive.
RECOMMENDATION_TABLE: Tuple[Recommendation, ...] = (
    Recommendation(RecommendationTier.SEPARATION, "Recommend separation from the post.", 10),
    Recommendation(RecommendationTier.FINAL_WRITE_UP, "Final written warning before separation.", 7),
    Recommendation(RecommendationTier.WARNING, "Verbal or written warning.", 3),
    Recommendation(RecommendationTier.GOOD_STANDING, "No disciplinary action required.", 0),
)


def total_points(scores: Mapping[str, Optional[float]]) -> float:
    """Sum of penalty points; unscored (missing or None) categories count as 0."""
    return math.fsum(value for value in scores.values() if value is not None)


def recommendation_for(total: float) -> Recommendation:
    if not math.isfinite(total):
        raise ValueError(f"Total penalty points must be a finite number, got {total!r}")
    for recommendation in RECOMMENDATION_TABLE:
        if total >= recommendation.threshold:
            return recommendation
    # Negative totals cannot come from a valid rubric; treat them as best case.
    return RECOMMENDATION_TABLE[-1]


def average_points(totals: Iterable[float]) -> float:
    values = list(totals)
    if not values:
        return 0
    return math.fsum(values) / len(values)


def format_points(value: float) -> str:
    """Display form of a point value: one decimal place, no trailing '.0'."""
    text = f"{value:.1f}"
    if text.endswith(".0"):
        text = text[:-2]
    if text == "-0":
        text = "0"
    return text
