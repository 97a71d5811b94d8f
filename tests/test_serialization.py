"""
Test: stored evaluation documents and the kpi_scores blob.
"""
import json
from datetime import timedelta

from evaluation import build_record, validate
from evaluation_serialization import decode_kpi_scores, record_from_storage, record_to_storage


def _record(make_draft, t0):
    draft = make_draft({"punctuality": 0.5, "conduct": 2})
    draft.set_remark("conduct", "Argued with tenant")
    return build_record(
        validate(draft).evaluation,
        client_id="SS-001-A",
        guard_id="SPG-0001",
        created_at=t0,
        window=timedelta(hours=12),
        client_name="Elimate",
        representative_name="Sarah Connor",
    )


class TestRecordToStorage:
    def test_flat_payload(self, make_draft, t0):
        payload = record_to_storage(_record(make_draft, t0))
        assert set(payload) == {"clientId", "guardId", "kpi_scores", "totalScore", "createdAt", "editableUntil"}
        assert payload["totalScore"] == 2.5
        assert payload["createdAt"] == "2025-03-14T09:00:00Z"
        assert payload["editableUntil"] == "2025-03-14T21:00:00Z"

    def test_blob_contents(self, make_draft, t0):
        blob = json.loads(record_to_storage(_record(make_draft, t0))["kpi_scores"])
        assert blob["punctuality"] == 0.5
        assert blob["conduct"] == 2
        assert blob["remarks"]["conduct"] == "Argued with tenant"
        assert blob["evaluatorSignature"] == "Sarah Connor"
        assert blob["clientName"] == "Elimate"
        assert blob["rubricVersion"] == "2025.1"

    def test_restores_record(self, make_draft, t0):
        original = _record(make_draft, t0)
        restored = record_from_storage({**record_to_storage(original), "id": "ev-1"})
        assert restored == original.with_id("ev-1")


class TestRecordFromStorage:
    def test_stored_total_is_authoritative(self):
        record = record_from_storage({
            "id": "ev-2",
            "clientId": "SS-001-A",
            "guardId": "SPG-0002",
            "kpi_scores": json.dumps({"punctuality": 1}),
            "totalScore": 4,
            "createdAt": "2025-03-14T09:00:00.000+00:00",
            "editableUntil": "2025-03-14T21:00:00.000+00:00",
        })
        assert record.total_points == 4
        assert record.scores["attendance"] == 0

    def test_corrupt_blob_tolerated(self, caplog):
        blob = decode_kpi_scores("{not json")
        assert blob["scores"]["conduct"] == 0
        assert blob["remarks"]["conduct"] == ""
        assert "Could not parse" in caplog.text

    def test_empty_blob(self):
        blob = decode_kpi_scores(None)
        assert blob["evaluator"]["evaluator_name"] == ""
