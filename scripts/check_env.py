#!/usr/bin/env python3
"""
Diagnostic script for the reconciliation service's environment configuration.

Prints every variable the service reads, whether it is set, and the value the
service will actually use, then tries to load the settings the same way the
service does at startup. Exits non-zero when the settings would fail to load.
"""

import os
import sys
from pathlib import Path
from typing import Any

SERVICES_ROOT = Path(__file__).resolve().parents[1] / "services"
if str(SERVICES_ROOT) not in sys.path:
    sys.path.insert(0, str(SERVICES_ROOT))

from shared.engine_settings import (  # noqa: E402
    CORS_ENV,
    CURRENCY_ENV,
    MEMBERS_ENV,
    POLICY_ENV,
    EngineSettingsError,
    load_engine_settings,
)

SERVICE_VARS = {
    POLICY_ENV: "unique_vendors",
    MEMBERS_ENV: "Andrea,Isaac",
    CURRENCY_ENV: "PHP",
    CORS_ENV: "http://localhost:3000,http://127.0.0.1:3000",
}

TELEMETRY_VARS = {
    "LOG_LEVEL": "INFO",
    "ENABLE_TELEMETRY": "false",
    "OTEL_CONSOLE_EXPORT": "false",
    "OTEL_SERVICE_NAME": "reconciliation-service",
    "OTEL_EXPORTER_OTLP_ENDPOINT": "http://localhost:4318/v1/traces",
}


def check_env_var(key: str) -> dict[str, Any]:
    """Check whether an environment variable is set."""
    value = os.getenv(key)
    is_set = value is not None and value.strip() != ""
    return {"key": key, "is_set": is_set, "value": value if is_set else None}


def _print_section(title: str, variables: dict[str, str]) -> None:
    print(f"{title}:")
    print("-" * 70)
    for key, default in variables.items():
        result = check_env_var(key)
        if result["is_set"]:
            print(f"✓ {key:40} = {result['value']}")
        else:
            print(f"○ {key:40} = NOT SET (default: {default})")
    print()


def main() -> int:
    """Report reconciliation service configuration and validate it."""
    print("=" * 70)
    print("Reconciliation Service Environment Diagnostic")
    print("=" * 70)
    print()

    _print_section("SERVICE VARIABLES", SERVICE_VARS)
    _print_section("TELEMETRY VARIABLES", TELEMETRY_VARS)

    print("=" * 70)
    try:
        settings = load_engine_settings()
    except EngineSettingsError as exc:
        print("❌ SETTINGS WOULD FAIL TO LOAD:")
        print(f"   - {exc}")
        return 1

    print("✓ Settings load cleanly. Effective values:")
    print(f"   left-to-pay policy : {settings.left_to_pay_policy}")
    print(f"   household members  : {', '.join(settings.household_members)}")
    print(f"   currency           : {settings.currency}")
    print(f"   CORS origins       : {', '.join(settings.cors_origins)}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
