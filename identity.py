"""Client and guard identities, plus the explicit session passed into submission."""

from __future__ import annotations

import hmac
from dataclasses import dataclass
from enum import Enum

from errors import IdentityVerificationFailed


class Role(str, Enum):
    CLIENT = "client"
    ADMIN = "admin"


@dataclass(frozen=True)
class ClientAccount:
    client_id: str
    name: str
    password: str
    representative_name: str = ""
    email: str = ""

    @property
    def display_name(self) -> str:
        return self.name or self.representative_name or self.client_id


@dataclass(frozen=True)
class Guard:
    guard_id: str
    name: str


@dataclass(frozen=True)
class PortalSession:
    client: ClientAccount
    role: Role = Role.CLIENT


# Stands in for a client record on admin sessions, which evaluate nobody.
ADMIN_ACCOUNT = ClientAccount(client_id="admin", name="Administrator", password="")


def _passwords_match(expected: str, password: str) -> bool:
    candidate = (password or "").strip()
    if not expected or not candidate:
        return False
    return hmac.compare_digest(expected.encode("utf-8"), candidate.encode("utf-8"))


def verify_submission_password(account: ClientAccount, password: str) -> None:
    """Confirm the submitting client re-entered their password.

    Passwords are stored and compared as plaintext, as the hosted client
    records hold them; only the comparison itself is constant-time.
    """
    if not _passwords_match(account.password, password):
        raise IdentityVerificationFailed()


def open_admin_session(admin_password: str | None, password: str) -> PortalSession:
    """Admin sign-in. Disabled unless an admin password is configured."""
    if not _passwords_match(admin_password or "", password):
        raise IdentityVerificationFailed("The admin password provided is incorrect.")
    return PortalSession(client=ADMIN_ACCOUNT, role=Role.ADMIN)
