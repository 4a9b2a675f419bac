from __future__ import annotations

import math
from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from typing import Dict, List, Literal

# Household members who pay for things; contributions may share these names.
HOUSEHOLD_MEMBERS = ("Andrea", "Isaac")
PaidBy = Literal["Andrea", "Isaac"]

LeftToPayPolicy = Literal["unique_vendors", "selected_vendors"]

# Display bands for vendor payment progress (red / orange / green in the UI).
ProgressBand = Literal["low", "mid", "complete"]

# Canonical selection shape: service type -> sorted vendor ids.
SelectedVendors = Dict[str, List[str]]


def safe_amount(value: object) -> float:
    """Numeric value of an amount field; absent, NaN, infinite or non-numeric values read as 0."""
    if isinstance(value, bool) or not isinstance(value, (int, float, Decimal)):
        return 0.0
    try:
        amount = float(value)
    except (TypeError, ValueError):
        return 0.0
    if not math.isfinite(amount):
        return 0.0
    return amount


@dataclass(slots=True)
class Vendor:
    """A vendor in the household's masterlist, grouped by service type."""

    id: str
    service_type: str
    name: str
    contact_number: str = ""
    email: str = ""
    package_name: str = ""
    contract_price: float = 0.0  # Agreed total owed to this vendor
    notes: str = ""


@dataclass(slots=True)
class BudgetExpense:
    """
    One installment paid to a vendor.

    `vendor_type` is copied from the vendor when the payment is recorded and is
    kept as-is even if the vendor's category later changes.
    """

    id: str
    vendor: str
    vendor_type: str
    amount: float
    date: date | None
    paid_by: str
    notes: str = ""


@dataclass(slots=True)
class BudgetContribution:
    id: str
    name: str
    amount: float


@dataclass(slots=True)
class VendorFormData:
    name: str
    service_type: str
    contact_number: str
    package_name: str
    contract_price: float
    email: str = ""


@dataclass
class PersonalBreakdown:
    person: str
    promised: float
    spent: float
    remaining: float


@dataclass
class VendorProgress:
    vendor_id: str
    total_paid: float
    remaining: float
    percentage: float
    band: ProgressBand


@dataclass
class BudgetSummary:
    total_budget: float
    total_paid: float
    budget_left: float
    left_to_pay_unique_vendors: float
    left_to_pay_selected_vendors: float
    actual_remaining: float
    personal_breakdowns: list[PersonalBreakdown] = field(default_factory=list)


@dataclass
class LedgerEntry:
    expense: BudgetExpense
    vendor_name: str
    contract_price: float
    cumulative_paid: float
    remaining: float
    is_first_for_vendor: bool


@dataclass
class VendorGroup:
    service_type: str
    vendors: list[Vendor]


@dataclass
class CleanupResult:
    selected: SelectedVendors
    removed_count: int


@dataclass
class VendorSelectionLine:
    service_type: str
    vendor: Vendor


@dataclass
class SelectionSummary:
    lines: list[VendorSelectionLine]
    total_contract_price: float
    orphaned_ids: list[str] = field(default_factory=list)
