# errors.py

from __future__ import annotations

from datetime import date
from typing import Sequence, Tuple


class EvaluationError(Exception):
    """Base class for recoverable evaluation failures; callers re-prompt."""


class IncompleteCategories(EvaluationError):
    def __init__(self, category_ids: Sequence[str]) -> None:
        self.category_ids = list(category_ids)
        super().__init__(f"Unscored rubric categories: {', '.join(self.category_ids)}")


class MissingSignature(EvaluationError):
    def __init__(self) -> None:
        super().__init__("Evaluator signature is required before submission")


class InvalidScoreValue(EvaluationError):
    def __init__(self, category_id: str, value: object, allowed: Tuple[float, ...] = ()) -> None:
        self.category_id = category_id
        self.value = value
        self.allowed = tuple(allowed)
        if allowed:
            detail = f"allowed values are {', '.join(str(a) for a in self.allowed)}"
        else:
            detail = "not a rubric category"
        super().__init__(f"Invalid score {value!r} for {category_id!r}: {detail}")


class IdentityVerificationFailed(EvaluationError):
    def __init__(self, message: str = "The client password provided is incorrect.") -> None:
        super().__init__(message)


class DuplicateEvaluation(EvaluationError):
    def __init__(self, guard_id: str, on_date: date) -> None:
        self.guard_id = guard_id
        self.on_date = on_date
        super().__init__(
            f"An evaluation for guard {guard_id} already exists for {on_date.isoformat()}. "
            "Only one evaluation per guard per day is allowed."
        )


class RecordNotFound(EvaluationError):
    def __init__(self, kind: str, key: str) -> None:
        self.kind = kind
        self.key = key
        super().__init__(f"{kind} not found: {key}")
