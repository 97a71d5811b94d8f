from __future__ import annotations

import json
import logging
from datetime import datetime, timezone
from typing import Any, Dict, Sequence

from evaluation import EvaluationRecord
from rubric import GUARD_RUBRIC, RUBRIC_VERSION, RubricCategory

logger = logging.getLogger(__name__)

_EVALUATOR_KEYS = {
    "evaluator_name": "evaluatorName",
    "evaluator_signature": "evaluatorSignature",
    "client_name": "clientName",
    "representative_name": "representativeName",
}


def _to_iso(value: datetime) -> str:
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc).isoformat().replace("+00:00", "Z")


def _from_iso(value: str) -> datetime:
    parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def encode_kpi_scores(record: EvaluationRecord) -> str:
    """Opaque blob: category scores plus remarks and evaluator metadata."""
    blob: Dict[str, Any] = dict(record.scores)
    blob["remarks"] = dict(record.remarks)
    for key, stored_key in _EVALUATOR_KEYS.items():
        blob[stored_key] = record.evaluator.get(key, "")
    blob["rubricVersion"] = record.rubric_version
    return json.dumps(blob)


def decode_kpi_scores(
    raw: str | None,
    categories: Sequence[RubricCategory] = GUARD_RUBRIC,
) -> Dict[str, Any]:
    """Split a stored blob into scores, remarks, evaluator and rubric version."""
    data: Dict[str, Any] = {}
    if raw:
        try:
            loaded = json.loads(raw)
        except (TypeError, ValueError) as exc:
            logger.warning("Could not parse kpi_scores blob: %s", exc)
        else:
            if isinstance(loaded, dict):
                data = loaded
            else:
                logger.warning("kpi_scores blob is not an object: %r", type(loaded).__name__)

    scores: Dict[str, float] = {}
    for category in categories:
        value = data.get(category.id, 0)
        scores[category.id] = value if isinstance(value, (int, float)) and not isinstance(value, bool) else 0

    raw_remarks = data.get("remarks")
    if not isinstance(raw_remarks, dict):
        raw_remarks = {}
    remarks = {category.id: str(raw_remarks.get(category.id) or "") for category in categories}

    evaluator = {key: str(data.get(stored_key) or "") for key, stored_key in _EVALUATOR_KEYS.items()}

    return {
        "scores": scores,
        "remarks": remarks,
        "evaluator": evaluator,
        "rubric_version": str(data.get("rubricVersion") or RUBRIC_VERSION),
    }


def record_to_storage(record: EvaluationRecord) -> Dict[str, Any]:
    """Convert an EvaluationRecord into the flat document the store persists."""
    return {
        "clientId": record.client_id,
        "guardId": record.guard_id,
        "kpi_scores": encode_kpi_scores(record),
        "totalScore": record.total_points,
        "createdAt": _to_iso(record.created_at),
        "editableUntil": _to_iso(record.editable_until),
    }


def record_from_storage(
    data: Dict[str, Any],
    categories: Sequence[RubricCategory] = GUARD_RUBRIC,
) -> EvaluationRecord:
    """Rebuild an EvaluationRecord from a stored document.

    The stored totalScore is authoritative and is never recomputed from the blob.
    """
    blob = decode_kpi_scores(data.get("kpi_scores"), categories)
    return EvaluationRecord(
        record_id=data.get("id"),
        client_id=str(data["clientId"]),
        guard_id=str(data["guardId"]),
        scores=blob["scores"],
        remarks=blob["remarks"],
        evaluator=blob["evaluator"],
        total_points=data.get("totalScore") or 0,
        created_at=_from_iso(data["createdAt"]),
        editable_until=_from_iso(data["editableUntil"]),
        rubric_version=blob["rubric_version"],
    )
