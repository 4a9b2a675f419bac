"""
Shared observability helpers (telemetry, privacy utilities, etc.).

The reconciliation service imports from this package so logging and request
correlation are wired the same way everywhere.
"""

from .privacy import redact_fields, snapshot_fingerprint
from .telemetry import (
    CORRELATION_ID_HEADER,
    RequestContextToken,
    bind_request_context,
    ensure_request_id,
    reset_request_context,
    setup_telemetry,
)

__all__ = [
    "redact_fields",
    "snapshot_fingerprint",
    "CORRELATION_ID_HEADER",
    "RequestContextToken",
    "bind_request_context",
    "ensure_request_id",
    "reset_request_context",
    "setup_telemetry",
]
