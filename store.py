"""Persistence for clients, guards and evaluations.

SupabaseEvaluationStore talks to the hosted tables; InMemoryEvaluationStore
keeps the same documents in dicts for the console runner and the tests.
"""

from __future__ import annotations

import logging
import uuid
from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional

from supabase import Client, create_client

from errors import RecordNotFound
from evaluation import EvaluationRecord
from evaluation_serialization import record_from_storage
from identity import ClientAccount, Guard

logger = logging.getLogger(__name__)

CLIENTS_TABLE = "clients"
GUARDS_TABLE = "guards"
EVALUATIONS_TABLE = "evaluations"


def client_from_row(row: Dict[str, Any]) -> ClientAccount:
    return ClientAccount(
        client_id=str(row["clientId"]),
        name=str(row.get("name") or ""),
        password=str(row.get("password") or ""),
        representative_name=str(row.get("representativeName") or ""),
        email=str(row.get("email") or ""),
    )


def client_to_row(account: ClientAccount) -> Dict[str, Any]:
    return {
        "clientId": account.client_id,
        "name": account.name,
        "password": account.password,
        "representativeName": account.representative_name,
        "email": account.email,
    }


def guard_from_row(row: Dict[str, Any]) -> Guard:
    return Guard(guard_id=str(row["guardId"]), name=str(row.get("name") or row["guardId"]))


def guard_to_row(guard: Guard) -> Dict[str, Any]:
    return {"guardId": guard.guard_id, "name": guard.name}


class EvaluationStore(ABC):
    @abstractmethod
    def create_evaluation(self, payload: Dict[str, Any]) -> str:
        """Persist a flat evaluation document and return its generated id."""

    @abstractmethod
    def get_evaluation(self, record_id: str) -> EvaluationRecord:
        ...

    @abstractmethod
    def list_evaluations(
        self,
        *,
        client_id: Optional[str] = None,
        guard_id: Optional[str] = None,
    ) -> List[EvaluationRecord]:
        """Evaluations matching the filters, newest first."""

    @abstractmethod
    def find_client(self, client_id: str) -> Optional[ClientAccount]:
        ...

    @abstractmethod
    def add_client(self, account: ClientAccount) -> None:
        ...

    @abstractmethod
    def list_guards(self) -> List[Guard]:
        ...

    @abstractmethod
    def add_guard(self, guard: Guard) -> None:
        ...

    def find_guard(self, guard_id: str) -> Optional[Guard]:
        for guard in self.list_guards():
            if guard.guard_id == guard_id:
                return guard
        return None


# ----------------- In-memory -----------------


class InMemoryEvaluationStore(EvaluationStore):
    def __init__(self) -> None:
        self._clients: Dict[str, Dict[str, Any]] = {}
        self._guards: Dict[str, Dict[str, Any]] = {}
        self._evaluations: Dict[str, Dict[str, Any]] = {}

    def create_evaluation(self, payload: Dict[str, Any]) -> str:
        record_id = uuid.uuid4().hex
        self._evaluations[record_id] = {**payload, "id": record_id}
        logger.debug("Stored evaluation %s for guard %s", record_id, payload.get("guardId"))
        return record_id

    def get_evaluation(self, record_id: str) -> EvaluationRecord:
        row = self._evaluations.get(record_id)
        if row is None:
            raise RecordNotFound("Evaluation", record_id)
        return record_from_storage(row)

    def list_evaluations(
        self,
        *,
        client_id: Optional[str] = None,
        guard_id: Optional[str] = None,
    ) -> List[EvaluationRecord]:
        records = [
            record_from_storage(row)
            for row in self._evaluations.values()
            if (client_id is None or row["clientId"] == client_id)
            and (guard_id is None or row["guardId"] == guard_id)
        ]
        return sorted(records, key=lambda record: record.created_at, reverse=True)

    def find_client(self, client_id: str) -> Optional[ClientAccount]:
        row = self._clients.get(client_id)
        return client_from_row(row) if row else None

    def add_client(self, account: ClientAccount) -> None:
        self._clients[account.client_id] = client_to_row(account)

    def list_guards(self) -> List[Guard]:
        return [guard_from_row(row) for row in self._guards.values()]

    def add_guard(self, guard: Guard) -> None:
        self._guards[guard.guard_id] = guard_to_row(guard)


# ----------------- Supabase -----------------


class SupabaseEvaluationStore(EvaluationStore):
    def __init__(self, client: Client) -> None:
        self._db = client

    @classmethod
    def from_credentials(cls, url: str | None, key: str | None) -> "SupabaseEvaluationStore":
        if not url or not key:
            raise ValueError(
                "Supabase credentials not configured. Check SUPABASE_URL and SUPABASE_SERVICE_KEY in .env"
            )
        return cls(create_client(url, key))

    def create_evaluation(self, payload: Dict[str, Any]) -> str:
        result = self._db.table(EVALUATIONS_TABLE).insert(payload).execute()
        if not result.data:
            raise RuntimeError("Supabase returned no row for the inserted evaluation")
        record_id = str(result.data[0]["id"])
        logger.debug("Stored evaluation %s for guard %s", record_id, payload.get("guardId"))
        return record_id

    def get_evaluation(self, record_id: str) -> EvaluationRecord:
        result = self._db.table(EVALUATIONS_TABLE).select("*").eq("id", record_id).execute()
        if not result.data:
            raise RecordNotFound("Evaluation", record_id)
        return record_from_storage(result.data[0])

    def list_evaluations(
        self,
        *,
        client_id: Optional[str] = None,
        guard_id: Optional[str] = None,
    ) -> List[EvaluationRecord]:
        query = self._db.table(EVALUATIONS_TABLE).select("*")
        if client_id is not None:
            query = query.eq("clientId", client_id)
        if guard_id is not None:
            query = query.eq("guardId", guard_id)
        result = query.order("createdAt", desc=True).execute()
        return [record_from_storage(row) for row in result.data or []]

    def find_client(self, client_id: str) -> Optional[ClientAccount]:
        result = self._db.table(CLIENTS_TABLE).select("*").eq("clientId", client_id).execute()
        if not result.data:
            return None
        return client_from_row(result.data[0])

    def add_client(self, account: ClientAccount) -> None:
        self._db.table(CLIENTS_TABLE).insert(client_to_row(account)).execute()

    def list_guards(self) -> List[Guard]:
        result = self._db.table(GUARDS_TABLE).select("*").order("name").execute()
        return [guard_from_row(row) for row in result.data or []]

    def find_guard(self, guard_id: str) -> Optional[Guard]:
        result = self._db.table(GUARDS_TABLE).select("*").eq("guardId", guard_id).execute()
        if not result.data:
            return None
        return guard_from_row(result.data[0])

    def add_guard(self, guard: Guard) -> None:
        self._db.table(GUARDS_TABLE).insert(guard_to_row(guard)).execute()


# ----------------- Demo data -----------------


DEMO_CLIENT = ClientAccount(
    client_id="SS-001-A",
    name="Elimate",
    password="Spade-001",
    representative_name="Sarah Connor",
    email="sarah@elimate.com",
)
DEMO_GUARDS = [
    Guard(guard_id="SPG-0001", name="John Spade"),
    Guard(guard_id="SPG-0002", name="Maria Lopez"),
]


def demo_store() -> InMemoryEvaluationStore:
    """In-memory store seeded with one client and a couple of guards."""
    store = InMemoryEvaluationStore()
    store.add_client(DEMO_CLIENT)
    for guard in DEMO_GUARDS:
        store.add_guard(guard)
    return store
