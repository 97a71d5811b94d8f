"""
Shared fixtures for the evaluation portal tests.
No network: the Supabase store is exercised through FakeSupabase.
"""
from datetime import datetime, timezone

import pytest

from evaluation import CompletenessPolicy, EvaluationDraft
from identity import ClientAccount, Guard, PortalSession, Role
from portal_config import PortalConfig
from store import InMemoryEvaluationStore
from submission import EvaluationService

T0 = datetime(2025, 3, 14, 9, 0, tzinfo=timezone.utc)

CLIENT = ClientAccount(
    client_id="SS-001-A",
    name="Elimate",
    password="Spade-001",
    representative_name="Sarah Connor",
    email="sarah@elimate.com",
)
OTHER_CLIENT = ClientAccount(client_id="SS-002-B", name="Northgate", password="gate-22")
GUARDS = [
    Guard(guard_id="SPG-0001", name="John Spade"),
    Guard(guard_id="SPG-0002", name="Maria Lopez"),
    Guard(guard_id="SPG-0003", name="Ken Adams"),
]


@pytest.fixture
def t0():
    return T0


@pytest.fixture
def store():
    s = InMemoryEvaluationStore()
    s.add_client(CLIENT)
    s.add_client(OTHER_CLIENT)
    for guard in GUARDS:
        s.add_guard(guard)
    return s


@pytest.fixture
def config():
    return PortalConfig()


@pytest.fixture
def service(store, config):
    return EvaluationService(store, config)


@pytest.fixture
def session():
    return PortalSession(client=CLIENT)


@pytest.fixture
def admin_session():
    return PortalSession(client=CLIENT, role=Role.ADMIN)


@pytest.fixture
def make_draft():
    """Build a signed draft from a partial score mapping."""
    def _make(scores=None, signature="Sarah Connor", policy=CompletenessPolicy.DEFAULT_ZERO):
        draft = EvaluationDraft.new(policy=policy, evaluator_name="Sarah Connor")
        for category_id, points in (scores or {}).items():
            draft.select(category_id, points)
        draft.sign(signature)
        return draft
    return _make


class FakeResult:
    def __init__(self, data):
        self.data = data


class FakeQuery:
    """Minimal chainable stand-in for the supabase table query builder."""

    def __init__(self, db, table):
        self.db = db
        self.table = table
        self.filters = []
        self.ordering = None
        self.to_insert = None

    def select(self, _columns):
        return self

    def insert(self, row):
        self.to_insert = row
        return self

    def eq(self, column, value):
        self.filters.append((column, value))
        return self

    def order(self, column, desc=False):
        self.ordering = (column, desc)
        return self

    def execute(self):
        rows = self.db.tables.setdefault(self.table, [])
        if self.to_insert is not None:
            row = {**self.to_insert, "id": f"{self.table}-{len(rows) + 1}"}
            rows.append(row)
            return FakeResult([row])
        matched = [r for r in rows if all(r.get(c) == v for c, v in self.filters)]
        if self.ordering:
            column, desc = self.ordering
            matched.sort(key=lambda r: r[column], reverse=desc)
        return FakeResult(matched)


class FakeSupabase:
    def __init__(self):
        self.tables = {}

    def table(self, name):
        return FakeQuery(self, name)


@pytest.fixture
def fake_supabase():
    return FakeSupabase()


@pytest.fixture
def guards():
    return list(GUARDS)
