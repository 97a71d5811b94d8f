from __future__ import annotations

import getpass
import json
import logging
from typing import Sequence

from errors import EvaluationError
from evaluation import EvaluationDraft
from evaluation_serialization import record_to_storage
from identity import Guard, PortalSession
from portal_config import PortalConfig, load_config
from rubric import GUARD_RUBRIC, RubricCategory
from rubric_loader import load_rubric
from scoring import format_points
from store import DEMO_CLIENT, EvaluationStore, SupabaseEvaluationStore, demo_store
from submission import EvaluationService

logger = logging.getLogger(__name__)


def _build_store(config: PortalConfig) -> EvaluationStore:
    if config.uses_supabase:
        return SupabaseEvaluationStore.from_credentials(config.supabase_url, config.supabase_key)

    logger.info("Supabase not configured; using an in-memory store with demo records")
    return demo_store()


def _load_categories(config: PortalConfig) -> Sequence[RubricCategory]:
    if config.rubric_path:
        return load_rubric(config.rubric_path).categories
    return GUARD_RUBRIC


def _prompt_choice(category: RubricCategory, current: float | None) -> float | None:
    """Ask for one category's option; blank input keeps the current value."""
    print(f"\n{category.label}")
    print(f"  {category.description}")
    for idx, option in enumerate(category.options, start=1):
        print(f"  [{idx}] {format_points(option.points)} pts - {option.description}")

    while True:
        raw = input("Choose an option number (Enter to keep current): ").strip()
        if not raw:
            return current
        if raw.isdigit() and 1 <= int(raw) <= len(category.options):
            return category.options[int(raw) - 1].points
        print("Please enter one of the listed option numbers.")


def _prompt_guard(guards: Sequence[Guard]) -> Guard:
    print("\nGuards:")
    for idx, guard in enumerate(guards, start=1):
        print(f"  [{idx}] {guard.name} ({guard.guard_id})")
    while True:
        raw = input("Select a guard: ").strip()
        if raw.isdigit() and 1 <= int(raw) <= len(guards):
            return guards[int(raw) - 1]
        print("Please enter one of the listed guard numbers.")


def _fill_draft(draft: EvaluationDraft, categories: Sequence[RubricCategory]) -> None:
    for category in categories:
        draft.select(category.id, _prompt_choice(category, draft.scores.get(category.id)))
        remark = input("Remarks (optional): ").strip()
        if remark:
            draft.set_remark(category.id, remark)
        print(
            f"  Running total: {format_points(draft.live_total())} pts "
            f"({draft.live_recommendation().tier.value})"
        )


def main():
    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s: %(message)s")

    # ------------------------------------------------------------
    # 1. Configuration, rubric and storage
    # ------------------------------------------------------------
    config = load_config()
    categories = _load_categories(config)
    store = _build_store(config)
    service = EvaluationService(store, config, categories)

    client_id = input("Client ID: ").strip() or DEMO_CLIENT.client_id
    account = store.find_client(client_id)
    if account is None:
        raise SystemExit(f"Unknown client: {client_id}")
    session = PortalSession(client=account)

    guards = store.list_guards()
    if not guards:
        raise SystemExit("No guards on record. Add guards before evaluating.")

    # ------------------------------------------------------------
    # 2. Collect the evaluation
    # ------------------------------------------------------------
    guard = _prompt_guard(guards)
    draft = service.new_draft(session)
    print(f"\n=== EVALUATE {guard.name.upper()} ({guard.guard_id}) ===")
    _fill_draft(draft, categories)

    # ------------------------------------------------------------
    # 3. Sign, confirm with the client password and submit
    # ------------------------------------------------------------
    while True:
        draft.sign(input("\nEvaluator signature (type your full name): "))
        password = getpass.getpass("Client password: ")
        try:
            record = service.submit(session, guard.guard_id, draft, password)
        except EvaluationError as exc:
            print(f"\nCould not submit: {exc}")
            if input("Try again? [y/N] ").strip().lower() != "y":
                raise SystemExit(1)
            if input("Revise the scores first? [y/N] ").strip().lower() == "y":
                _fill_draft(draft, categories)
            continue
        break

    # ------------------------------------------------------------
    # 4. Display the result
    # ------------------------------------------------------------
    print("\n=== EVALUATION RECORDED ===\n")
    print(f"Guard: {guard.name} ({guard.guard_id})")
    for category in categories:
        print(f"  - {category.label}: {format_points(record.scores[category.id])}")
    print(f"\nTotal Penalty Points: {format_points(record.total_points)}")
    print(f"Recommendation: {record.recommendation.tier.value} - {record.recommendation.description}")
    print(f"Editable until: {record.editable_until.isoformat()}")

    print("\n=== DOCUMENT STORED ===")
    print(json.dumps({"id": record.record_id, **record_to_storage(record)}, indent=2))


if __name__ == "__main__":
    main()
