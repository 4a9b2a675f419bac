"""
Adapters between raw realtime-store snapshots and the engine's typed records.

Snapshots arrive either as `{record_id: record}` mappings or as plain lists of
records, with camelCase field names and loosely typed values. Everything the
engine needs to know about those shapes, including the two historical formats of
the vendor selection, is handled here.
"""

from __future__ import annotations

import logging
import math
from datetime import date, datetime
from typing import Any, Dict, Iterable, List, Mapping, Optional, Tuple

from vendor_selection import selection_ids
from wedding_model import BudgetContribution, BudgetExpense, SelectedVendors, Vendor

logger = logging.getLogger(__name__)

CURRENCY_SYMBOLS = ("₱", "$", "€", "£")
DATE_FORMATS = ("%Y-%m-%d", "%m/%d/%Y")


def coerce_amount(raw_value: object) -> float:
    """Read a store amount as a float; anything unusable becomes 0."""
    if raw_value is None or isinstance(raw_value, bool):
        return 0.0
    if isinstance(raw_value, (int, float)):
        amount = float(raw_value)
    else:
        cleaned = str(raw_value).replace(",", "").strip()
        for symbol in CURRENCY_SYMBOLS:
            cleaned = cleaned.replace(symbol, "")
        try:
            amount = float(cleaned.strip())
        except ValueError:
            return 0.0
    return amount if math.isfinite(amount) else 0.0


def parse_expense_date(raw_value: object) -> Optional[date]:
    if isinstance(raw_value, datetime):
        return raw_value.date()
    if isinstance(raw_value, date):
        return raw_value
    if not raw_value or not isinstance(raw_value, str):
        return None

    text = raw_value.strip()
    for fmt in DATE_FORMATS:
        try:
            return datetime.strptime(text, fmt).date()
        except ValueError:
            continue
    try:
        # Full ISO timestamps such as "2025-03-01T08:00:00.000Z".
        return datetime.fromisoformat(text.replace("Z", "+00:00")).date()
    except ValueError:
        return None


def _text(record: Mapping[str, Any], *keys: str) -> str:
    for key in keys:
        value = record.get(key)
        if value is None:
            continue
        text = str(value).strip()
        if text:
            return text
    return ""


def _records(raw: Any) -> List[Tuple[str, Mapping[str, Any]]]:
    """Pair every record with its store key, skipping anything that is not an object."""
    if not raw:
        return []
    if isinstance(raw, Mapping):
        items: Iterable[Tuple[Any, Any]] = raw.items()
    elif isinstance(raw, (list, tuple)):
        # Array-shaped snapshots can contain holes (None) where keys were deleted.
        items = enumerate(raw)
    else:
        logger.debug("Ignoring snapshot of unsupported type %s", type(raw).__name__)
        return []

    records: List[Tuple[str, Mapping[str, Any]]] = []
    for key, record in items:
        if not isinstance(record, Mapping):
            if record is not None:
                logger.debug("Skipping non-object record under key %s", key)
            continue
        records.append((str(key), record))
    return records


def vendors_from_snapshot(raw: Any) -> List[Vendor]:
    """Typed vendors sorted by name, as the vendors page lists them."""
    vendors = [
        Vendor(
            id=_text(record, "id") or key,
            service_type=_text(record, "serviceType", "service_type"),
            name=_text(record, "name"),
            contact_number=_text(record, "contactNumber", "contact_number", "contactInfo"),
            email=_text(record, "email"),
            package_name=_text(record, "packageName", "package_name"),
            contract_price=coerce_amount(record.get("contractPrice", record.get("contract_price"))),
            notes=_text(record, "notes"),
        )
        for key, record in _records(raw)
    ]
    return sorted(vendors, key=lambda vendor: vendor.name.casefold())


def expenses_from_snapshot(raw: Any) -> List[BudgetExpense]:
    """Typed expenses in store order; arrival order matters for same-day payments."""
    return [
        BudgetExpense(
            id=_text(record, "id") or key,
            vendor=_text(record, "vendor"),
            vendor_type=_text(record, "vendorType", "vendor_type"),
            amount=coerce_amount(record.get("amount")),
            date=parse_expense_date(record.get("date")),
            paid_by=_text(record, "paidBy", "paid_by"),
            notes=_text(record, "notes"),
        )
        for key, record in _records(raw)
    ]


def contributions_from_snapshot(raw: Any) -> List[BudgetContribution]:
    return [
        BudgetContribution(
            id=_text(record, "id") or key,
            name=_text(record, "name"),
            amount=coerce_amount(record.get("amount")),
        )
        for key, record in _records(raw)
    ]


def sanitize_service_type(service_type: str) -> str:
    """Store keys cannot contain '/', so categories like 'Hair/Makeup' are written as 'Hair-Makeup'."""
    return service_type.replace("/", "-")


def desanitize_service_type(key: str) -> str:
    return key.replace("-", "/")


def canonical_service_type(service_type: str) -> str:
    """
    The key a service type has after a round trip through the store.

    'Photo-Video' and 'Photo/Video' share one store key, so both read back as
    'Photo/Video'. Compare or look up selections with this form.
    """
    return desanitize_service_type(sanitize_service_type(service_type))


def normalize_selected_vendors(raw: Any) -> SelectedVendors:
    """
    Read the stored selection in either historical shape.

    Legacy entries hold a single vendor id string and become one-element lists;
    current entries already hold lists. Empty or unreadable entries are dropped,
    and entries whose keys collapse to the same service type are merged.
    """
    if not isinstance(raw, Mapping):
        return {}

    selected: SelectedVendors = {}
    for key, value in raw.items():
        ids = selection_ids(value)
        if not ids:
            continue
        service_type = desanitize_service_type(str(key))
        selected[service_type] = selection_ids(selected.get(service_type, []) + ids)
    return selected


def selected_vendors_to_store(selected: Mapping[str, Any]) -> Dict[str, List[str]]:
    """
    Write-side counterpart of `normalize_selected_vendors`; always emits the list shape.

    Service types that sanitize to the same store key are merged, never overwritten.
    """
    stored: Dict[str, List[str]] = {}
    for service_type, value in selected.items():
        ids = selection_ids(value)
        if not ids:
            continue
        key = sanitize_service_type(service_type)
        stored[key] = selection_ids(stored.get(key, []) + ids)
    return stored


def service_types_from_setup(raw: Any) -> List[str]:
    """
    Service types configured on the setup page.

    Older setups stored them as an object whose keys were the types; newer ones
    store a list.
    """
    if isinstance(raw, (list, tuple)):
        candidates: Iterable[Any] = raw
    elif isinstance(raw, Mapping):
        candidates = raw.keys()
    else:
        return []

    types: List[str] = []
    for candidate in candidates:
        if isinstance(candidate, str) and candidate.strip() and candidate.strip() not in types:
            types.append(candidate.strip())
    return types
