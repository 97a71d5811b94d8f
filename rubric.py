# rubric.py

from __future__ import annotations
from dataclasses import dataclass
from typing import List, Sequence, Tuple


RUBRIC_VERSION = "2025.1"


class RubricError(ValueError):
    """Raised when a rubric definition breaks its ordering rules."""


@dataclass(frozen=True)
class RubricOption:
    points: float
    description: str


@dataclass(frozen=True)
class RubricCategory:
    id: str
    label: str
    description: str
    options: Tuple[RubricOption, ...]

    @property
    def option_points(self) -> Tuple[float, ...]:
        return tuple(option.points for option in self.options)

    @property
    def max_points(self) -> float:
        return self.options[-1].points if self.options else 0

    def allows(self, points: float) -> bool:
        return points in self.option_points

    def option_for(self, points: float) -> RubricOption | None:
        for option in self.options:
            if option.points == points:
                return option
        return None


def _options(*pairs: tuple) -> Tuple[RubricOption, ...]:
    return tuple(RubricOption(points=p, description=d) for p, d in pairs)


# Penalty-point rubric shared by every evaluation surface.
GUARD_RUBRIC: Tuple[RubricCategory, ...] = (
    RubricCategory(
        id="punctuality",
        label="Showing Up on Time",
        description="Measures punctuality and readiness for duty.",
        options=_options(
            (0, "On time"),
            (0.5, "Late by 5 minutes or less"),
            (1, "Late by more than 5 minutes and up to 10 minutes"),
            (2, "Late by more than 10 minutes"),
            (3, "Repeated or excessive lateness within the evaluation period"),
        ),
    ),
    RubricCategory(
        id="attendance",
        label="Attendance & Reliability",
        description="Measures overall dependability and ability to maintain scheduled shifts.",
        options=_options(
            (0, "Perfect attendance, no call-offs, fully reliable"),
            (1, "One call-off with sufficient notice (at least 4 hours)"),
            (2, "One call-off with short notice (less than 4 hours)"),
            (10, "No-call/no-show"),
        ),
    ),
    RubricCategory(
        id="patrol",
        label="Patrol Completion & Timeliness",
        description="Ensures patrol duties are completed correctly and on schedule.",
        options=_options(
            (0, "All patrols completed properly and on time"),
            (0.5, "Minor errors in patrol completion"),
            (1, "Significant patrol errors or repeated minor issues"),
            (2, "Patrols routinely incomplete"),
            (3, "Patrols consistently neglected or skipped"),
        ),
    ),
    RubricCategory(
        id="dar",
        label="DAR (Daily Activity Report) Quality",
        description="Ensures reports are accurate, complete, professional, and submitted on time.",
        options=_options(
            (0, "Accurate, complete, professional, and submitted on time"),
            (1, "Second quality issue or incomplete DAR"),
            (2, "Continued issues or repeated inaccuracies"),
            (3, "Consistent non-compliance with DAR standards"),
        ),
    ),
    RubricCategory(
        id="conduct",
        label="Professional Conduct",
        description="Measures behavior, communication, and adherence to professional standards.",
        options=_options(
            (0, "Professional conduct at all times"),
            (1, "First instance of unprofessional behavior"),
            (2, "Repeated misconduct or escalation"),
            (5, "Serious conduct issues"),
            (10, "Unprofessional conduct towards staff, clients, or tenants"),
        ),
    ),
)


def check_rubric(categories: Sequence[RubricCategory]) -> None:
    """Raise RubricError unless every category starts at 0 and ascends strictly."""
    if not categories:
        raise RubricError("Rubric must include at least one category")

    seen: set[str] = set()
    for category in categories:
        if category.id in seen:
            raise RubricError(f"Duplicate rubric category id: {category.id!r}")
        seen.add(category.id)

        points = category.option_points
        if not points:
            raise RubricError(f"Category {category.id!r} has no options")
        if points[0] != 0:
            raise RubricError(
                f"Category {category.id!r} must start with a 0-point option, got {points[0]}"
            )
        for lower, higher in zip(points, points[1:]):
            if higher <= lower:
                raise RubricError(
                    f"Category {category.id!r} options must be strictly ascending "
                    f"({lower} followed by {higher})"
                )


check_rubric(GUARD_RUBRIC)


def get_categories() -> Tuple[RubricCategory, ...]:
    """Rubric categories in report/table column order."""
    return GUARD_RUBRIC


def category_ids(categories: Sequence[RubricCategory] = GUARD_RUBRIC) -> List[str]:
    return [category.id for category in categories]


def max_total_points(categories: Sequence[RubricCategory] = GUARD_RUBRIC) -> float:
    return sum(category.max_points for category in categories)
