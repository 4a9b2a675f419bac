"""End-to-end pipeline test: raw store snapshot → adapter → reconciliation engine."""

from __future__ import annotations

import json
from pathlib import Path

import pytest
from budget_aggregator import summarize_budget, vendor_payment_progress
from payment_ledger import build_payment_ledger
from store_adapter import (
    contributions_from_snapshot,
    expenses_from_snapshot,
    normalize_selected_vendors,
    selected_vendors_to_store,
    vendors_from_snapshot,
)
from vendor_catalog import group_vendors_by_service_type
from vendor_selection import cleanup_orphans, selection_summary, toggle_selection

FIXTURE_SNAPSHOT = Path(__file__).parent / "fixtures" / "wedding_snapshot.json"


@pytest.fixture(scope="module")
def snapshot() -> dict:
    return json.loads(FIXTURE_SNAPSHOT.read_text(encoding="utf-8"))


@pytest.mark.integration
def test_budget_page_figures_from_store_snapshot(snapshot: dict) -> None:
    vendors = vendors_from_snapshot(snapshot["vendors"])
    expenses = expenses_from_snapshot(snapshot["expenses"])
    contributions = contributions_from_snapshot(snapshot["contributions"])
    selected = normalize_selected_vendors(snapshot["selectedVendors"])

    summary = summarize_budget(contributions, expenses, vendors, selected_vendors=selected)

    assert summary.total_budget == pytest.approx(400000.0)
    assert summary.total_paid == pytest.approx(155000.0)
    assert summary.budget_left == pytest.approx(245000.0)
    # Feast Co 60000 + Snap Studio 35000; Casa Verde is fully paid and the florist is gone.
    assert summary.left_to_pay_unique_vendors == pytest.approx(95000.0)
    # Adds Lechon Kings (selected, unpaid); skips the orphaned florist selection.
    assert summary.left_to_pay_selected_vendors == pytest.approx(125000.0)
    assert summary.actual_remaining == pytest.approx(150000.0)

    breakdowns = {breakdown.person: breakdown for breakdown in summary.personal_breakdowns}
    assert breakdowns["Andrea"].spent == pytest.approx(80000.0)
    assert breakdowns["Andrea"].remaining == pytest.approx(120000.0)
    assert breakdowns["Isaac"].spent == pytest.approx(75000.0)
    assert breakdowns["Isaac"].remaining == pytest.approx(75000.0)


@pytest.mark.integration
def test_vendor_page_progress_and_ledger(snapshot: dict) -> None:
    vendors = vendors_from_snapshot(snapshot["vendors"])
    expenses = expenses_from_snapshot(snapshot["expenses"])

    bands = {
        vendor.name: vendor_payment_progress(vendor, expenses).band
        for group in group_vendors_by_service_type(vendors)
        for vendor in group.vendors
    }
    assert bands == {
        "Casa Verde": "complete",
        "Feast Co": "mid",
        "Lechon Kings": "low",
        "Snap Studio": "low",
    }

    ledger = build_payment_ledger(expenses, vendors)
    assert [entry.expense.id for entry in ledger] == ["-NaA6", "-NaA3", "-NaA4", "-NaA1", "-NaA2", "-NaA5"]
    assert [entry.remaining for entry in ledger] == pytest.approx([0.0, 40000.0, 0.0, 90000.0, 60000.0, 35000.0])
    # The denormalized category on the payment is kept even for the deleted vendor.
    assert ledger[0].expense.vendor_type == "Florist"


@pytest.mark.integration
def test_selection_cleanup_and_store_write_back(snapshot: dict) -> None:
    vendors = vendors_from_snapshot(snapshot["vendors"])
    selected = normalize_selected_vendors(snapshot["selectedVendors"])

    result = cleanup_orphans(selected, {vendor.id for vendor in vendors})
    assert result.removed_count == 1
    assert "Florist" not in result.selected
    assert cleanup_orphans(result.selected, {vendor.id for vendor in vendors}).removed_count == 0

    summary = selection_summary(result.selected, vendors)
    assert summary.total_contract_price == pytest.approx(275000.0)
    assert summary.orphaned_ids == []

    toggled = toggle_selection(result.selected, "Catering", "1700000000004")
    assert selected_vendors_to_store(toggled) == {
        "Catering": ["1700000000001"],
        "Photo-Video": ["1700000000002"],
        "Venue": ["1700000000003"],
    }
