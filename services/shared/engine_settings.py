"""
Shared helpers for configuring the reconciliation engine's service wrapper.

The engine itself reads no environment variables; the HTTP service that wraps
it needs a default left-to-pay policy, the household members whose personal
breakdowns appear on the budget page, and a display currency. Loading and
validating those settings in one place keeps the service and the diagnostic
script in agreement about names and defaults.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Optional

SUPPORTED_LEFT_TO_PAY_POLICIES = frozenset({"unique_vendors", "selected_vendors"})
DEFAULT_HOUSEHOLD_MEMBERS = ("Andrea", "Isaac")
DEFAULT_CORS_ORIGINS = (
    "http://localhost:3000",
    "http://127.0.0.1:3000",
)

POLICY_ENV = "RECONCILIATION_LEFT_TO_PAY_POLICY"
MEMBERS_ENV = "RECONCILIATION_HOUSEHOLD_MEMBERS"
CURRENCY_ENV = "RECONCILIATION_CURRENCY"
CORS_ENV = "RECONCILIATION_CORS_ORIGINS"


class EngineSettingsError(RuntimeError):
    """Raised when reconciliation settings cannot be constructed."""


@dataclass(frozen=True, slots=True)
class EngineSettings:
    left_to_pay_policy: str
    household_members: tuple[str, ...]
    currency: str
    cors_origins: tuple[str, ...]


def load_engine_settings(
    *,
    default_policy: str = "unique_vendors",
    default_members: tuple[str, ...] = DEFAULT_HOUSEHOLD_MEMBERS,
    default_currency: str = "PHP",
) -> EngineSettings:
    """
    Construct EngineSettings from the environment.

    Args:
        default_policy: Left-to-pay policy used when the env var is unset/empty.
        default_members: Household members used when the env var is unset/empty.
        default_currency: ISO currency code used when the env var is unset/empty.
    """

    policy = _normalize_policy(os.getenv(POLICY_ENV), default_policy)
    members = _parse_csv(os.getenv(MEMBERS_ENV)) or default_members
    currency = _normalize_currency(os.getenv(CURRENCY_ENV), default_currency)
    cors_origins = _parse_cors_origins(os.getenv(CORS_ENV))

    return EngineSettings(
        left_to_pay_policy=policy,
        household_members=members,
        currency=currency,
        cors_origins=cors_origins,
    )


def _normalize_policy(raw_value: Optional[str], default: str) -> str:
    candidate = (raw_value or "").strip().lower().replace("-", "_")
    if not candidate:
        candidate = default

    if candidate not in SUPPORTED_LEFT_TO_PAY_POLICIES:
        raise EngineSettingsError(f"Unsupported left-to-pay policy '{candidate}'")
    return candidate


def _normalize_currency(raw_value: Optional[str], default: str) -> str:
    candidate = (raw_value or "").strip().upper()
    if not candidate:
        return default
    if len(candidate) != 3 or not candidate.isalpha():
        raise EngineSettingsError(f"{CURRENCY_ENV} must be a 3-letter currency code (received '{raw_value}')")
    return candidate


def _parse_csv(raw_value: Optional[str]) -> tuple[str, ...]:
    if raw_value is None or raw_value.strip() == "":
        return ()
    seen: list[str] = []
    for item in raw_value.split(","):
        name = item.strip()
        if name and name not in seen:
            seen.append(name)
    return tuple(seen)


def _parse_cors_origins(raw_value: Optional[str]) -> tuple[str, ...]:
    origins = _parse_csv(raw_value)
    if not origins:
        return DEFAULT_CORS_ORIGINS
    # FastAPI expects ["*"] instead of mixing '*' with explicit origins.
    if "*" in origins:
        return ("*",)
    return origins
