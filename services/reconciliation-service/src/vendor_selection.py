"""
Vendor selection bookkeeping.

Selections map a service type to the sorted list of vendor ids chosen for it.
Every function here returns a new mapping and leaves its input untouched;
persisting the result is the caller's job.
"""

from __future__ import annotations

import logging
from typing import Any, Iterable, Mapping

from wedding_model import (
    CleanupResult,
    SelectedVendors,
    SelectionSummary,
    Vendor,
    VendorSelectionLine,
    safe_amount,
)

logger = logging.getLogger(__name__)


def selection_ids(value: Any) -> list[str]:
    """
    Read one selection entry as a list of vendor ids.

    Accepts the canonical list shape and the legacy bare-string shape; anything
    else reads as no selection. Duplicates are dropped and the ids come back
    sorted, so equal selections always compare equal.
    """
    if isinstance(value, str):
        candidates: Iterable[Any] = [value]
    elif isinstance(value, (list, tuple)):
        candidates = value
    else:
        return []

    ids: list[str] = []
    for candidate in candidates:
        if isinstance(candidate, str) and candidate and candidate not in ids:
            ids.append(candidate)
    return sorted(ids)


def _copy(selected: Mapping[str, Any] | None) -> SelectedVendors:
    if not selected:
        return {}
    copied: SelectedVendors = {}
    for service_type, value in selected.items():
        ids = selection_ids(value)
        if ids:
            copied[service_type] = ids
    return copied


def select(selected: Mapping[str, Any] | None, service_type: str, vendor_id: str) -> SelectedVendors:
    """Add `vendor_id` under `service_type`; a no-op when it is already there."""
    updated = _copy(selected)
    if not service_type or not vendor_id:
        return updated

    ids = updated.setdefault(service_type, [])
    if vendor_id not in ids:
        ids.append(vendor_id)
        ids.sort()
    return updated


def unselect(selected: Mapping[str, Any] | None, service_type: str, vendor_id: str) -> SelectedVendors:
    """Remove `vendor_id` from `service_type`, dropping the entry once it is empty."""
    updated = _copy(selected)
    ids = updated.get(service_type)
    if not ids or vendor_id not in ids:
        return updated

    remaining = [existing for existing in ids if existing != vendor_id]
    if remaining:
        updated[service_type] = remaining
    else:
        del updated[service_type]
    return updated


def unselect_all(selected: Mapping[str, Any] | None, service_type: str) -> SelectedVendors:
    updated = _copy(selected)
    updated.pop(service_type, None)
    return updated


def is_selected(selected: Mapping[str, Any] | None, service_type: str, vendor_id: str) -> bool:
    if not selected:
        return False
    return vendor_id in selection_ids(selected.get(service_type))


def toggle_selection(selected: Mapping[str, Any] | None, service_type: str, vendor_id: str) -> SelectedVendors:
    """
    Flip the selected state of one (service type, vendor) pair.

    Toggling the same pair twice returns a mapping equal to the normalized input.
    """
    if is_selected(selected, service_type, vendor_id):
        return unselect(selected, service_type, vendor_id)
    return select(selected, service_type, vendor_id)


def valid_selection(
    selected: Mapping[str, Any] | None,
    service_type: str,
    valid_vendor_ids: Iterable[str],
) -> list[str]:
    """
    Selected ids for `service_type` that still resolve to a known vendor.

    Read-side filter only; orphans stay in `selected` until `cleanup_orphans` runs.
    """
    if not selected:
        return []
    valid = set(valid_vendor_ids)
    return [vendor_id for vendor_id in selection_ids(selected.get(service_type)) if vendor_id in valid]


def cleanup_orphans(selected: Mapping[str, Any] | None, valid_vendor_ids: Iterable[str]) -> CleanupResult:
    """
    Drop every selected id that no longer resolves to a vendor.

    Service types left without any selection are removed. Running the cleanup on
    its own output removes nothing further.
    """
    valid = set(valid_vendor_ids)
    cleaned: SelectedVendors = {}
    removed = 0

    for service_type, value in (selected or {}).items():
        ids = selection_ids(value)
        kept = [vendor_id for vendor_id in ids if vendor_id in valid]
        removed += len(ids) - len(kept)
        if kept:
            cleaned[service_type] = kept

    if removed:
        logger.debug("Removed %d orphaned vendor selection(s)", removed)
    return CleanupResult(selected=cleaned, removed_count=removed)


def selection_summary(selected: Mapping[str, Any] | None, vendors: Iterable[Vendor]) -> SelectionSummary:
    """
    Resolve the selection against the vendor list and total the contract prices.

    Orphaned ids are reported separately and contribute nothing to the total.
    """
    by_id = {vendor.id: vendor for vendor in vendors}
    lines: list[VendorSelectionLine] = []
    orphaned: list[str] = []

    for service_type, value in (selected or {}).items():
        for vendor_id in selection_ids(value):
            vendor = by_id.get(vendor_id)
            if vendor is None:
                orphaned.append(vendor_id)
                continue
            lines.append(VendorSelectionLine(service_type=service_type, vendor=vendor))

    total = float(sum(safe_amount(line.vendor.contract_price) for line in lines))
    return SelectionSummary(lines=lines, total_contract_price=total, orphaned_ids=orphaned)
