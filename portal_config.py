from __future__ import annotations

import os
from dataclasses import dataclass
from datetime import timedelta
from typing import Mapping, Optional

from dotenv import load_dotenv

from evaluation import CompletenessPolicy


@dataclass(frozen=True)
class PortalConfig:
    company_name: str = "Spade Security Services"
    edit_window_hours: float = 12
    completeness_policy: CompletenessPolicy = CompletenessPolicy.DEFAULT_ZERO
    rubric_path: Optional[str] = None
    supabase_url: Optional[str] = None
    supabase_key: Optional[str] = None
    admin_password: Optional[str] = None

    @property
    def edit_window(self) -> timedelta:
        return timedelta(hours=self.edit_window_hours)

    @property
    def uses_supabase(self) -> bool:
        return bool(self.supabase_url and self.supabase_key)


def load_config(environ: Mapping[str, str] | None = None) -> PortalConfig:
    """Build a PortalConfig from environment variables (and a local .env file)."""
    if environ is None:
        load_dotenv()
        environ = os.environ

    defaults = PortalConfig()

    raw_window = environ.get("PORTAL_EDIT_WINDOW_HOURS", "").strip()
    if raw_window:
        try:
            edit_window_hours = float(raw_window)
        except ValueError:
            raise ValueError(f"PORTAL_EDIT_WINDOW_HOURS must be a number, got {raw_window!r}")
        if edit_window_hours <= 0:
            raise ValueError("PORTAL_EDIT_WINDOW_HOURS must be positive")
    else:
        edit_window_hours = defaults.edit_window_hours

    raw_policy = environ.get("PORTAL_COMPLETENESS_POLICY", "").strip().lower()
    if raw_policy:
        try:
            policy = CompletenessPolicy(raw_policy)
        except ValueError:
            allowed = ", ".join(p.value for p in CompletenessPolicy)
            raise ValueError(f"PORTAL_COMPLETENESS_POLICY must be one of: {allowed}")
    else:
        policy = defaults.completeness_policy

    return PortalConfig(
        company_name=environ.get("PORTAL_COMPANY_NAME") or defaults.company_name,
        edit_window_hours=edit_window_hours,
        completeness_policy=policy,
        rubric_path=environ.get("PORTAL_RUBRIC_PATH") or None,
        supabase_url=environ.get("SUPABASE_URL") or None,
        supabase_key=environ.get("SUPABASE_SERVICE_KEY") or None,
        admin_password=environ.get("PORTAL_ADMIN_PASSWORD") or None,
    )
