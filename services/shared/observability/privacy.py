import hashlib
import json
from collections.abc import Iterable, Mapping
from typing import Any

REDACTED = "[REDACTED]"

# Vendor fields that are safe to log; contact details are not.
VENDOR_LOG_FIELDS = ("id", "name", "serviceType", "service_type", "packageName", "package_name", "contractPrice", "contract_price")


def snapshot_fingerprint(value: Any) -> str:
    """
    Return a short, stable SHA-256 fingerprint for a store snapshot.

    Logs carry the fingerprint instead of guest/vendor data so two requests can
    be matched up without leaking the household's records. Objects are
    serialized via JSON with sorted keys (falling back to repr()).
    """

    if value is None:
        normalized = b"null"
    elif isinstance(value, bytes):
        normalized = value
    elif isinstance(value, str):
        normalized = value.encode("utf-8")
    else:
        try:
            normalized = json.dumps(value, sort_keys=True, default=str).encode("utf-8")
        except (TypeError, ValueError):
            normalized = repr(value).encode("utf-8")

    return hashlib.sha256(normalized).hexdigest()[:16]


def redact_fields(payload: Mapping[str, Any], allowed_keys: Iterable[str] = VENDOR_LOG_FIELDS) -> dict[str, Any]:
    """
    Produce a shallow copy that preserves only the whitelisted keys and redacts the rest.
    """

    whitelist = set(allowed_keys)
    return {key: (value if key in whitelist else REDACTED) for key, value in payload.items()}
