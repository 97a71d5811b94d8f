# evaluation.py

from __future__ import annotations

from dataclasses import dataclass, field, replace
from datetime import datetime, timedelta
from enum import Enum
from typing import Dict, List, Mapping, Optional, Sequence, Tuple

from errors import (
    EvaluationError,
    IncompleteCategories,
    InvalidScoreValue,
    MissingSignature,
)
from rubric import GUARD_RUBRIC, RUBRIC_VERSION, RubricCategory
from scoring import Recommendation, recommendation_for, total_points


DEFAULT_EDIT_WINDOW = timedelta(hours=12)


class CompletenessPolicy(str, Enum):
    # Every category must be explicitly scored (0 included) before submission.
    ALL_REQUIRED = "all_required"
    # Categories start at 0 ("fully compliant") and may be submitted untouched.
    DEFAULT_ZERO = "default_zero"


# ----------------- Draft (transient form state) -----------------


@dataclass
class EvaluationDraft:
    scores: Dict[str, Optional[float]] = field(default_factory=dict)
    remarks: Dict[str, str] = field(default_factory=dict)
    evaluator_name: str = ""
    evaluator_signature: str = ""

    @classmethod
    def new(
        cls,
        categories: Sequence[RubricCategory] = GUARD_RUBRIC,
        policy: CompletenessPolicy = CompletenessPolicy.DEFAULT_ZERO,
        *,
        evaluator_name: str = "",
    ) -> "EvaluationDraft":
        """Fresh draft for one evaluation session."""
        start = 0 if policy is CompletenessPolicy.DEFAULT_ZERO else None
        return cls(
            scores={category.id: start for category in categories},
            remarks={category.id: "" for category in categories},
            evaluator_name=evaluator_name,
        )

    def select(self, category_id: str, points: float) -> None:
        self.scores[category_id] = points

    def clear(self, category_id: str) -> None:
        self.scores[category_id] = None

    def set_remark(self, category_id: str, remark: str) -> None:
        self.remarks[category_id] = remark

    def sign(self, signature: str) -> None:
        self.evaluator_signature = signature

    def live_total(self) -> float:
        return total_points(self.scores)

    def live_recommendation(self) -> Recommendation:
        return recommendation_for(self.live_total())


# ----------------- Validation -----------------


@dataclass(frozen=True)
class FinalizedEvaluation:
    scores: Dict[str, float]
    remarks: Dict[str, str]
    total_points: float
    recommendation: Recommendation
    evaluator_name: str
    evaluator_signature: str


@dataclass(frozen=True)
class ValidationResult:
    errors: Tuple[EvaluationError, ...] = ()
    evaluation: Optional[FinalizedEvaluation] = None

    @property
    def ok(self) -> bool:
        return not self.errors

    def raise_for_errors(self) -> FinalizedEvaluation:
        if self.errors:
            raise self.errors[0]
        if self.evaluation is None:
            raise ValueError("Validation result carries neither errors nor an evaluation")
        return self.evaluation


def _is_number(value: object) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def validate(
    draft: EvaluationDraft,
    categories: Sequence[RubricCategory] = GUARD_RUBRIC,
    policy: CompletenessPolicy = CompletenessPolicy.DEFAULT_ZERO,
) -> ValidationResult:
    """Check a draft against the rubric, collecting every problem found."""
    errors: List[EvaluationError] = []
    by_id = {category.id: category for category in categories}

    for category_id, value in draft.scores.items():
        category = by_id.get(category_id)
        if category is None:
            errors.append(InvalidScoreValue(category_id, value))
            continue
        if value is None:
            continue
        if not _is_number(value) or not category.allows(value):
            errors.append(InvalidScoreValue(category_id, value, category.option_points))

    if policy is CompletenessPolicy.ALL_REQUIRED:
        missing = [category.id for category in categories if draft.scores.get(category.id) is None]
        if missing:
            errors.append(IncompleteCategories(missing))

    if not (draft.evaluator_signature or "").strip():
        errors.append(MissingSignature())

    if errors:
        return ValidationResult(errors=tuple(errors))

    scores: Dict[str, float] = {}
    for category in categories:
        value = draft.scores.get(category.id)
        scores[category.id] = 0 if value is None else value
    remarks = {category.id: (draft.remarks.get(category.id) or "").strip() for category in categories}
    total = total_points(scores)

    return ValidationResult(
        evaluation=FinalizedEvaluation(
            scores=scores,
            remarks=remarks,
            total_points=total,
            recommendation=recommendation_for(total),
            evaluator_name=draft.evaluator_name.strip(),
            evaluator_signature=draft.evaluator_signature.strip(),
        )
    )


# ----------------- Persisted record -----------------


def is_editable(created_at: datetime, now: datetime, window: timedelta = DEFAULT_EDIT_WINDOW) -> bool:
    """Advisory check: the record may still be corrected while inside its window."""
    return now - created_at < window


@dataclass(frozen=True)
class EvaluationRecord:
    client_id: str
    guard_id: str
    scores: Mapping[str, float]
    remarks: Mapping[str, str]
    evaluator: Mapping[str, str]
    total_points: float
    created_at: datetime
    editable_until: datetime
    rubric_version: str = RUBRIC_VERSION
    record_id: Optional[str] = None

    @property
    def recommendation(self) -> Recommendation:
        return recommendation_for(self.total_points)

    @property
    def edit_window(self) -> timedelta:
        return self.editable_until - self.created_at

    def is_editable(self, now: datetime) -> bool:
        return is_editable(self.created_at, now, self.edit_window)

    def with_id(self, record_id: str) -> "EvaluationRecord":
        return replace(self, record_id=record_id)


def build_record(
    evaluation: FinalizedEvaluation,
    *,
    client_id: str,
    guard_id: str,
    created_at: datetime,
    window: timedelta = DEFAULT_EDIT_WINDOW,
    client_name: str = "",
    representative_name: str = "",
) -> EvaluationRecord:
    evaluator = {
        "evaluator_name": evaluation.evaluator_name or client_name or representative_name,
        "evaluator_signature": evaluation.evaluator_signature,
        "client_name": client_name,
        "representative_name": representative_name,
    }
    return EvaluationRecord(
        client_id=client_id,
        guard_id=guard_id,
        scores=dict(evaluation.scores),
        remarks=dict(evaluation.remarks),
        evaluator=evaluator,
        total_points=evaluation.total_points,
        created_at=created_at,
        editable_until=created_at + window,
    )
