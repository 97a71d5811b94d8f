"""
Test: the Streamlit shell, driven headless through AppTest.
"""
from pathlib import Path

import pytest
import streamlit as st
from streamlit.testing.v1 import AppTest

import store as store_module
from evaluation import build_record, validate
from evaluation_serialization import record_to_storage
from identity import ADMIN_ACCOUNT, ClientAccount, PortalSession, Role
from store import InMemoryEvaluationStore

APP_PATH = str(Path(__file__).resolve().parent.parent / "app.py")

CLIENT = ClientAccount(client_id="SS-001-A", name="Elimate", password="Spade-001")


@pytest.fixture
def portal_store(monkeypatch):
    """Store handed to the app in place of the demo seed."""
    s = InMemoryEvaluationStore()
    s.add_client(CLIENT)
    monkeypatch.setattr(store_module, "demo_store", lambda: s)
    monkeypatch.delenv("SUPABASE_URL", raising=False)
    monkeypatch.delenv("SUPABASE_SERVICE_KEY", raising=False)
    monkeypatch.delenv("PORTAL_RUBRIC_PATH", raising=False)
    monkeypatch.setenv("PORTAL_ADMIN_PASSWORD", "ops-2025")
    st.cache_resource.clear()
    st.cache_data.clear()
    yield s
    st.cache_resource.clear()
    st.cache_data.clear()


@pytest.fixture
def add_record(portal_store, make_draft, t0):
    def _add(guard_id, scores=None):
        evaluation = validate(make_draft(scores)).raise_for_errors()
        record = build_record(evaluation, client_id=CLIENT.client_id, guard_id=guard_id, created_at=t0)
        return portal_store.create_evaluation(record_to_storage(record))
    return _add


def _app():
    return AppTest.from_file(APP_PATH, default_timeout=30)


class TestHistoryView:
    def test_records_without_guard_profiles(self, portal_store, add_record):
        add_record("SPG-0009", {"dar": 1})
        at = _app()
        at.session_state["portal_session"] = PortalSession(client=CLIENT)
        at.run()
        assert not at.exception
        assert not any(s.label == "Guard profile" for s in at.selectbox)


class TestAdminView:
    def test_admin_sign_in(self, portal_store):
        at = _app().run()
        at.radio[0].set_value("Admin").run()
        at.text_input[0].input("ops-2025")
        at.button[0].click().run()
        assert not at.exception
        assert at.session_state["portal_session"].role is Role.ADMIN
        assert [t.label for t in at.tabs] == ["History", "Evaluation Detail"]

    def test_wrong_admin_password(self, portal_store):
        at = _app().run()
        at.radio[0].set_value("Admin").run()
        at.text_input[0].input("Spade-001")
        at.button[0].click().run()
        assert "portal_session" not in at.session_state
        assert at.error[0].value == "Invalid admin password."

    def test_evaluation_detail(self, portal_store, add_record):
        add_record("SPG-0001", {"conduct": 5, "punctuality": 0.5})
        at = _app()
        at.session_state["portal_session"] = PortalSession(client=ADMIN_ACCOUNT, role=Role.ADMIN)
        at.run()
        assert not at.exception
        totals = [m.value for m in at.metric if m.label == "Total Penalty Points"]
        assert totals == ["5.5"]
