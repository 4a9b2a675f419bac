from __future__ import annotations

import logging
from typing import Any, Dict, Iterable, List, Mapping, Sequence

from vendor_selection import selection_ids
from wedding_model import (
    HOUSEHOLD_MEMBERS,
    BudgetContribution,
    BudgetExpense,
    BudgetSummary,
    LeftToPayPolicy,
    PersonalBreakdown,
    ProgressBand,
    Vendor,
    VendorProgress,
    safe_amount,
)

logger = logging.getLogger(__name__)


def total_budget(contributions: Iterable[BudgetContribution]) -> float:
    """Sum every pledged contribution; empty input yields 0."""
    return float(sum(safe_amount(contribution.amount) for contribution in contributions))


def total_paid(expenses: Iterable[BudgetExpense]) -> float:
    """Sum every recorded payment, including payments to vendors that no longer exist."""
    return float(sum(safe_amount(expense.amount) for expense in expenses))


def budget_left(contributions: Iterable[BudgetContribution], expenses: Iterable[BudgetExpense]) -> float:
    """
    Pledged money minus money already paid out.

    Negative results signal overspend and are returned as-is.
    """
    return total_budget(contributions) - total_paid(expenses)


def total_paid_to_vendor(vendor_id: str, expenses: Iterable[BudgetExpense]) -> float:
    """Sum every installment recorded against `vendor_id`."""
    return float(sum(safe_amount(expense.amount) for expense in expenses if expense.vendor == vendor_id))


def _paid_by_vendor(expenses: Iterable[BudgetExpense]) -> Dict[str, float]:
    totals: Dict[str, float] = {}
    for expense in expenses:
        totals[expense.vendor] = totals.get(expense.vendor, 0.0) + safe_amount(expense.amount)
    return totals


def _contract_prices(vendors: Iterable[Vendor]) -> Dict[str, float]:
    return {vendor.id: safe_amount(vendor.contract_price) for vendor in vendors}


def left_to_pay_by_unique_vendors(expenses: Sequence[BudgetExpense], vendors: Iterable[Vendor]) -> float:
    """
    Outstanding contract balance across every vendor that has at least one payment.

    Args:
        expenses: Installment records; several may point at the same vendor.
        vendors: Current vendor list used to resolve contract prices.
    Returns:
        Sum of max(0, contract_price - paid_to_vendor) over the distinct vendor ids in
        `expenses`. Dangling vendor ids resolve to a contract price of 0 and add nothing.
    """
    prices = _contract_prices(vendors)
    paid = _paid_by_vendor(expenses)

    outstanding = 0.0
    for vendor_id, vendor_paid in paid.items():
        outstanding += max(0.0, prices.get(vendor_id, 0.0) - vendor_paid)
    return outstanding


def left_to_pay_by_selected_vendors(
    expenses: Sequence[BudgetExpense],
    vendors: Iterable[Vendor],
    selected_vendors: Mapping[str, Any] | None,
) -> float:
    """
    Outstanding contract balance across the vendors chosen on the vendors page.

    Args:
        expenses: Installment records; vendors never selected are ignored even when paid.
        vendors: Current vendor list; selected ids missing from it are skipped.
        selected_vendors: Service type -> vendor ids (legacy bare-string entries accepted).
    Returns:
        Sum of max(0, contract_price - paid_to_vendor) over every (service type, vendor id)
        pair whose vendor still exists.
    """
    if not selected_vendors:
        return 0.0

    prices = _contract_prices(vendors)
    paid = _paid_by_vendor(expenses)

    outstanding = 0.0
    for value in selected_vendors.values():
        for vendor_id in selection_ids(value):
            if vendor_id not in prices:
                continue
            outstanding += max(0.0, prices[vendor_id] - paid.get(vendor_id, 0.0))
    return outstanding


def left_to_pay(
    expenses: Sequence[BudgetExpense],
    vendors: Iterable[Vendor],
    selected_vendors: Mapping[str, Any] | None = None,
    policy: LeftToPayPolicy = "unique_vendors",
) -> float:
    """Dispatch to one of the two left-to-pay policies; unique-vendor is the default."""
    if policy == "selected_vendors":
        return left_to_pay_by_selected_vendors(expenses, vendors, selected_vendors)
    return left_to_pay_by_unique_vendors(expenses, vendors)


def actual_remaining(
    contributions: Iterable[BudgetContribution],
    expenses: Sequence[BudgetExpense],
    vendors: Iterable[Vendor],
) -> float:
    """Budget left after also setting aside what is still owed under the unique-vendor policy."""
    return budget_left(contributions, expenses) - left_to_pay_by_unique_vendors(expenses, vendors)


def personal_breakdown(
    person: str,
    contributions: Iterable[BudgetContribution],
    expenses: Iterable[BudgetExpense],
) -> PersonalBreakdown:
    """
    Promised, spent and remaining money for one household member.

    Only the first contribution carrying the person's name counts as promised;
    duplicates are not summed.
    """
    promised = next(
        (safe_amount(contribution.amount) for contribution in contributions if contribution.name == person),
        0.0,
    )
    spent = float(sum(safe_amount(expense.amount) for expense in expenses if expense.paid_by == person))
    return PersonalBreakdown(person=person, promised=promised, spent=spent, remaining=promised - spent)


def progress_band(percentage: float) -> ProgressBand:
    """Map a payment percentage onto the red / orange / green display bands."""
    if percentage >= 100.0:
        return "complete"
    if percentage >= 50.0:
        return "mid"
    return "low"


def vendor_payment_progress(vendor: Vendor, expenses: Iterable[BudgetExpense]) -> VendorProgress:
    """
    How much of a vendor's contract has been paid.

    A contract price of 0 reports 0% rather than dividing by zero.
    """
    contract_price = safe_amount(vendor.contract_price)
    paid = total_paid_to_vendor(vendor.id, expenses)

    if contract_price > 0:
        percentage = min(100.0, paid / contract_price * 100.0)
    else:
        percentage = 0.0

    return VendorProgress(
        vendor_id=vendor.id,
        total_paid=paid,
        remaining=max(0.0, contract_price - paid),
        percentage=percentage,
        band=progress_band(percentage),
    )


def vendor_expense_chronology(expenses: Iterable[BudgetExpense], vendor_id: str) -> List[BudgetExpense]:
    """
    Payments for one vendor in ascending date order.

    The sort is stable, so payments on the same day keep their arrival order.
    Undated payments go last.
    """
    vendor_expenses = [expense for expense in expenses if expense.vendor == vendor_id]
    return sorted(vendor_expenses, key=_date_sort_key)


def _date_sort_key(expense: BudgetExpense):
    return (expense.date is None, expense.date.toordinal() if expense.date else 0)


def summarize_budget(
    contributions: Sequence[BudgetContribution],
    expenses: Sequence[BudgetExpense],
    vendors: Sequence[Vendor],
    selected_vendors: Mapping[str, Any] | None = None,
    members: Iterable[str] = HOUSEHOLD_MEMBERS,
) -> BudgetSummary:
    """
    Compute every figure shown on the budget page's summary cards.

    Args:
        contributions: Pledges from contributors, one row per name by convention.
        expenses: Installment payments to vendors.
        vendors: Current vendor list.
        selected_vendors: Optional selection used for the selected-vendor left-to-pay figure.
        members: Household members to produce personal breakdowns for.
    Returns:
        BudgetSummary carrying both left-to-pay policies side by side.
    Assumptions:
        Pure; inputs are not mutated and malformed amounts read as 0.
    """
    budget = total_budget(contributions)
    paid = total_paid(expenses)
    unique_outstanding = left_to_pay_by_unique_vendors(expenses, vendors)
    selected_outstanding = left_to_pay_by_selected_vendors(expenses, vendors, selected_vendors)

    summary = BudgetSummary(
        total_budget=budget,
        total_paid=paid,
        budget_left=budget - paid,
        left_to_pay_unique_vendors=unique_outstanding,
        left_to_pay_selected_vendors=selected_outstanding,
        actual_remaining=(budget - paid) - unique_outstanding,
        personal_breakdowns=[personal_breakdown(member, contributions, expenses) for member in members],
    )
    logger.debug(
        "Summarized budget over %d contribution(s), %d expense(s), %d vendor(s)",
        len(contributions),
        len(expenses),
        len(vendors),
    )
    return summary
