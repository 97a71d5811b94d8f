from __future__ import annotations

from datetime import datetime, timezone
from typing import Sequence

import streamlit as st

from errors import EvaluationError, IdentityVerificationFailed, RecordNotFound
from evaluation import EvaluationDraft
from identity import PortalSession, Role, verify_submission_password
from portal_config import PortalConfig, load_config
from reports import guard_summary, history_rows, monthly_activity, top_performers
from rubric import GUARD_RUBRIC, RubricCategory
from rubric_loader import load_rubric
from scoring import format_points
from store import EvaluationStore, SupabaseEvaluationStore, demo_store
from submission import EvaluationService


@st.cache_resource(show_spinner=False)
def get_config() -> PortalConfig:
    return load_config()


@st.cache_resource(show_spinner=False)
def get_store() -> EvaluationStore:
    config = get_config()
    if config.uses_supabase:
        return SupabaseEvaluationStore.from_credentials(config.supabase_url, config.supabase_key)
    return demo_store()


@st.cache_data(show_spinner=False)
def get_categories(rubric_path: str | None) -> Sequence[RubricCategory]:
    if rubric_path:
        return load_rubric(rubric_path).categories
    return GUARD_RUBRIC


def _session() -> PortalSession | None:
    return st.session_state.get("portal_session")


def _render_login(service: EvaluationService) -> None:
    st.subheader("Sign In")
    role = st.radio("Sign in as", options=["Client", "Admin"], horizontal=True)
    if role == "Admin":
        password = st.text_input("Admin password", type="password")
        if st.button("Sign in", type="primary"):
            try:
                st.session_state["portal_session"] = service.admin_session(password)
            except IdentityVerificationFailed:
                st.error("Invalid admin password.")
            else:
                st.rerun()
        return

    client_id = st.text_input("Client ID")
    password = st.text_input("Password", type="password")
    if st.button("Sign in", type="primary"):
        account = service.store.find_client(client_id.strip())
        try:
            if account is None:
                raise RecordNotFound("Client", client_id)
            verify_submission_password(account, password)
        except (RecordNotFound, IdentityVerificationFailed):
            st.error("Invalid client ID or password.")
        else:
            st.session_state["portal_session"] = PortalSession(client=account)
            st.rerun()



def _current_draft(service: EvaluationService, session: PortalSession) -> EvaluationDraft:
    if "draft" not in st.session_state:
        st.session_state["draft"] = service.new_draft(session)
    return st.session_state["draft"]


def _render_evaluate(service: EvaluationService, session: PortalSession, categories: Sequence[RubricCategory]) -> None:
    guards = service.store.list_guards()
    if not guards:
        st.info("No guards on record yet.")
        return

    guard = st.selectbox("Guard", options=guards, format_func=lambda g: f"{g.name} ({g.guard_id})")
    draft = _current_draft(service, session)

    for category in categories:
        with st.expander(category.label, expanded=True):
            st.caption(category.description)
            points = category.option_points
            current = draft.scores.get(category.id)
            choice = st.radio(
                "Points",
                options=points,
                index=points.index(current) if current in points else None,
                format_func=lambda p, c=category: f"{format_points(p)} - {c.option_for(p).description}",
                key=f"score_{category.id}",
            )
            if choice is None:
                draft.clear(category.id)
            else:
                draft.select(category.id, choice)
            draft.set_remark(category.id, st.text_input("Remarks", key=f"remark_{category.id}"))

    recommendation = draft.live_recommendation()
    cols = st.columns(2)
    cols[0].metric("Total Penalty Points", format_points(draft.live_total()))
    cols[1].metric("Recommendation", recommendation.tier.value)
    st.caption(recommendation.description)

    draft.sign(st.text_input("Evaluator signature (type your full name)"))
    password = st.text_input("Confirm with your client password", type="password")

    if st.button("Verify & Submit", type="primary"):
        try:
            record = service.submit(session, guard.guard_id, draft, password)
        except EvaluationError as exc:
            st.error(str(exc))
        else:
            st.success(
                f"Recorded evaluation for {guard.name}. "
                f"Total Penalty Points: {format_points(record.total_points)}"
            )
            st.session_state.pop("draft", None)


def _render_history(service: EvaluationService, session: PortalSession, categories: Sequence[RubricCategory]) -> None:
    records = service.history(session)
    if not records:
        st.info("No evaluations submitted yet.")
        return

    guards = service.store.list_guards()
    now = datetime.now(timezone.utc)
    st.dataframe(history_rows(records, guards, now, categories), use_container_width=True)

    st.subheader("Guard Summaries")
    summaries = top_performers(records, guards)
    st.table(
        [
            {
                "Guard": s.guard_name,
                "Evaluations": s.evaluation_count,
                "Average Points": format_points(s.average_points),
                "Latest": s.latest_recommendation.tier.value if s.latest_recommendation else "-",
            }
            for s in summaries
        ]
    )

    if guards:
        selected = st.selectbox("Guard profile", options=guards, format_func=lambda g: g.name)
        profile = guard_summary(records, selected.guard_id, selected.name)
        cols = st.columns(3)
        cols[0].metric("Evaluations", profile.evaluation_count)
        cols[1].metric("Average Points", format_points(profile.average_points))
        cols[2].metric(
            "Latest",
            profile.latest_recommendation.tier.value if profile.latest_recommendation else "-",
        )

    st.subheader("Monthly Activity")
    activity = monthly_activity(records, now)
    st.bar_chart(
        [{"Month": m.label, "Evaluations": m.count} for m in activity],
        x="Month",
        y="Evaluations",
    )


def _render_detail(service: EvaluationService, session: PortalSession, categories: Sequence[RubricCategory]) -> None:
    records = [r for r in service.history(session) if r.record_id]
    if not records:
        st.info("No evaluations submitted yet.")
        return

    names = {g.guard_id: g.name for g in service.store.list_guards()}
    labels = {
        r.record_id: f"{names.get(r.guard_id, r.guard_id)} - {r.created_at:%Y-%m-%d %H:%M}" for r in records
    }
    record_id = st.selectbox("Evaluation", options=list(labels), format_func=labels.get)
    try:
        record = service.evaluation_detail(record_id)
    except RecordNotFound as exc:
        st.error(str(exc))
        return

    recommendation = record.recommendation
    cols = st.columns(3)
    cols[0].metric("Total Penalty Points", format_points(record.total_points))
    cols[1].metric("Recommendation", recommendation.tier.value)
    cols[2].metric("Client", record.client_id)
    st.caption(f"Evaluator: {record.evaluator.get('evaluator_name') or '-'}")
    st.table(
        [
            {
                "Category": category.label,
                "Points": format_points(record.scores.get(category.id, 0)),
                "Remarks": record.remarks.get(category.id) or "-",
            }
            for category in categories
        ]
    )
    if record.is_editable(datetime.now(timezone.utc)):
        st.caption(f"Editable until {record.editable_until:%Y-%m-%d %H:%M} UTC")


def main() -> None:
    st.set_page_config(page_title="Guard Performance Portal", layout="wide")
    config = get_config()
    st.title(config.company_name)
    st.caption("Guard performance evaluations")

    store = get_store()
    categories = get_categories(config.rubric_path)
    service = EvaluationService(store, config, categories)

    session = _session()
    if session is None:
        _render_login(service)
        return

    st.sidebar.markdown(f"**{session.client.display_name}**")
    if st.sidebar.button("Log out"):
        st.session_state.clear()
        st.rerun()

    if session.role is Role.ADMIN:
        history_tab, detail_tab = st.tabs(["History", "Evaluation Detail"])
        with history_tab:
            _render_history(service, session, categories)
        with detail_tab:
            _render_detail(service, session, categories)
        return

    evaluate_tab, history_tab = st.tabs(["Evaluate", "History"])
    with evaluate_tab:
        _render_evaluate(service, session, categories)
    with history_tab:
        _render_history(service, session, categories)


if __name__ == "__main__":
    main()
