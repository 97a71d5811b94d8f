# submission.py

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import List, Optional, Sequence

from errors import DuplicateEvaluation, EvaluationError, IdentityVerificationFailed, RecordNotFound
from evaluation import (
    EvaluationDraft,
    EvaluationRecord,
    build_record,
    validate,
)
from evaluation_serialization import record_to_storage
from identity import PortalSession, Role, open_admin_session, verify_submission_password
from portal_config import PortalConfig
from rubric import GUARD_RUBRIC, RubricCategory
from store import EvaluationStore

logger = logging.getLogger(__name__)


def _utc_date(value: datetime):
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc).date()


class EvaluationService:
    """Turns a signed draft into a persisted evaluation record."""

    def __init__(
        self,
        store: EvaluationStore,
        config: PortalConfig | None = None,
        categories: Sequence[RubricCategory] | None = None,
    ) -> None:
        self.store = store
        self.config = config or PortalConfig()
        self.categories = tuple(categories or GUARD_RUBRIC)

    def admin_session(self, password: str) -> PortalSession:
        try:
            return open_admin_session(self.config.admin_password, password)
        except EvaluationError:
            logger.warning("Rejected admin sign-in")
            raise

    def new_draft(self, session: PortalSession) -> EvaluationDraft:
        return EvaluationDraft.new(
            self.categories,
            self.config.completeness_policy,
            evaluator_name=session.client.representative_name or session.client.name,
        )

    # ---------- Submission ----------

    def submit(
        self,
        session: PortalSession,
        guard_id: str,
        draft: EvaluationDraft,
        password: str,
        *,
        now: Optional[datetime] = None,
    ) -> EvaluationRecord:
        """Validate, verify the client, reject same-day duplicates, then persist."""
        now = now or datetime.now(timezone.utc)
        client_id = session.client.client_id
        try:
            if session.role is Role.ADMIN:
                raise IdentityVerificationFailed("Admin sessions cannot submit evaluations.")
            evaluation = validate(draft, self.categories, self.config.completeness_policy).raise_for_errors()

            account = self.store.find_client(client_id)
            if account is None:
                raise RecordNotFound("Client", client_id)
            verify_submission_password(account, password)

            guard = self.store.find_guard(guard_id)
            if guard is None:
                raise RecordNotFound("Guard", guard_id)
            self._reject_duplicate(guard.guard_id, now)
        except EvaluationError as exc:
            logger.warning("Rejected evaluation of guard %s by client %s: %s", guard_id, client_id, exc)
            raise

        record = build_record(
            evaluation,
            client_id=account.client_id,
            guard_id=guard.guard_id,
            created_at=now,
            window=self.config.edit_window,
            client_name=account.name,
            representative_name=account.representative_name,
        )
        record_id = self.store.create_evaluation(record_to_storage(record))
        logger.info(
            "Recorded evaluation %s for guard %s: %s points (%s)",
            record_id,
            guard.guard_id,
            record.total_points,
            record.recommendation.tier.value,
        )
        return record.with_id(record_id)

    def _reject_duplicate(self, guard_id: str, now: datetime) -> None:
        today = _utc_date(now)
        for existing in self.store.list_evaluations(guard_id=guard_id):
            if _utc_date(existing.created_at) == today:
                raise DuplicateEvaluation(guard_id, today)

    # ---------- Reads ----------

    def history(self, session: PortalSession) -> List[EvaluationRecord]:
        """Client sessions see their own evaluations; admins see everything."""
        if session.role is Role.ADMIN:
            return self.store.list_evaluations()
        return self.store.list_evaluations(client_id=session.client.client_id)

    def evaluation_detail(self, record_id: str) -> EvaluationRecord:
        return self.store.get_evaluation(record_id)
