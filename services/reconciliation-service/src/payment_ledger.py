from __future__ import annotations

from typing import Dict, Iterable, List, Sequence

from budget_aggregator import vendor_expense_chronology
from wedding_model import BudgetExpense, LedgerEntry, Vendor, safe_amount


def cumulative_payments(
    expenses: Iterable[BudgetExpense],
    vendor_id: str,
    contract_price: float,
    vendor_name: str = "",
) -> List[LedgerEntry]:
    """
    Ledger rows for one vendor with the running amount paid at each installment.

    `cumulative_paid` includes the row's own payment; `remaining` never drops below 0.
    """
    contract = safe_amount(contract_price)
    running = 0.0
    rows: List[LedgerEntry] = []

    for index, expense in enumerate(vendor_expense_chronology(expenses, vendor_id)):
        running += safe_amount(expense.amount)
        rows.append(
            LedgerEntry(
                expense=expense,
                vendor_name=vendor_name,
                contract_price=contract,
                cumulative_paid=running,
                remaining=max(0.0, contract - running),
                is_first_for_vendor=index == 0,
            )
        )
    return rows


def build_payment_ledger(expenses: Sequence[BudgetExpense], vendors: Iterable[Vendor]) -> List[LedgerEntry]:
    """
    Every payment grouped by vendor, the way the budget page lists them.

    Groups are ordered by their earliest payment date (ties keep first-seen order,
    fully undated groups go last); rows inside a group are chronological. Payments
    to deleted vendors still appear, with an empty name and a contract price of 0.
    """
    by_id = {vendor.id: vendor for vendor in vendors}

    grouped: Dict[str, List[BudgetExpense]] = {}
    for expense in expenses:
        grouped.setdefault(expense.vendor, []).append(expense)

    groups: List[List[LedgerEntry]] = []
    for vendor_id, group in grouped.items():
        name, contract_price = _vendor_terms(by_id.get(vendor_id))
        groups.append(cumulative_payments(group, vendor_id, contract_price, vendor_name=name))
    groups.sort(key=_earliest_date_key)

    return [row for group in groups for row in group]


def _vendor_terms(vendor: Vendor | None) -> tuple[str, float]:
    if vendor is None:
        return "", 0.0
    return vendor.name, safe_amount(vendor.contract_price)


def _earliest_date_key(rows: List[LedgerEntry]):
    first = rows[0].expense.date
    return (first is None, first.toordinal() if first else 0)
