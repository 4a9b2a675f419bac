"""
Shared utilities for the wedding reconciliation services.

This package contains code shared across the service and its tooling:
- engine_settings: Environment-driven configuration for the reconciliation service
- observability: Telemetry, logging, and privacy utilities
"""

from .engine_settings import (
    SUPPORTED_LEFT_TO_PAY_POLICIES,
    DEFAULT_HOUSEHOLD_MEMBERS,
    EngineSettingsError,
    EngineSettings,
    load_engine_settings,
)

__all__ = [
    "SUPPORTED_LEFT_TO_PAY_POLICIES",
    "DEFAULT_HOUSEHOLD_MEMBERS",
    "EngineSettingsError",
    "EngineSettings",
    "load_engine_settings",
]
