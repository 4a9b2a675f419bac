"""
Reconciliation Service turns snapshots of the wedding dashboard's store (vendors,
expenses, contributions, vendor selections) into the budget and vendor figures the
dashboard displays, and computes the next selection state for the caller to persist.

The service is stateless: every request carries the snapshot it should reason about.
"""

import datetime as dt
import logging
import sys
from pathlib import Path
from typing import Any, Literal

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field

SRC_DIR = Path(__file__).resolve().parent
if str(SRC_DIR) not in sys.path:
    sys.path.insert(0, str(SRC_DIR))

SERVICES_ROOT = SRC_DIR.parents[1]
if str(SERVICES_ROOT) not in sys.path:
    sys.path.insert(0, str(SERVICES_ROOT))

from budget_aggregator import summarize_budget, vendor_payment_progress  # noqa: E402
from payment_ledger import build_payment_ledger  # noqa: E402
from shared.engine_settings import EngineSettings, EngineSettingsError, load_engine_settings  # noqa: E402
from shared.observability import (  # noqa: E402
    bind_request_context,
    ensure_request_id,
    redact_fields,
    reset_request_context,
    setup_telemetry,
    snapshot_fingerprint,
)
from store_adapter import (  # noqa: E402
    canonical_service_type,
    contributions_from_snapshot,
    expenses_from_snapshot,
    normalize_selected_vendors,
    selected_vendors_to_store,
    vendors_from_snapshot,
)
from vendor_catalog import VendorValidationError, group_vendors_by_service_type, validate_vendor_form  # noqa: E402
from vendor_selection import (  # noqa: E402
    cleanup_orphans,
    is_selected,
    select,
    selection_summary,
    toggle_selection,
    unselect,
    unselect_all,
)

logger = logging.getLogger(__name__)


try:
    ENGINE_SETTINGS = load_engine_settings()
except EngineSettingsError as exc:
    logger.error("Failed to load reconciliation settings: %s", exc)
    raise


def reload_settings_for_tests() -> EngineSettings:
    """
    Refresh settings after tests mutate environment variables.
    """

    global ENGINE_SETTINGS
    ENGINE_SETTINGS = load_engine_settings()
    return ENGINE_SETTINGS


app = FastAPI(title="Reconciliation Service")
setup_telemetry(app, service_name="reconciliation-service")

app.add_middleware(
    CORSMiddleware,
    allow_origins=list(ENGINE_SETTINGS.cors_origins),
    allow_methods=["*"],
    allow_headers=["*"],
    allow_credentials=False,
)


@app.middleware("http")
async def request_context_middleware(request: Request, call_next):
    request_id = ensure_request_id(request)
    token = bind_request_context(request_id)
    try:
        response = await call_next(request)
        response.headers.setdefault("x-request-id", request_id)
        return response
    finally:
        reset_request_context(token)


def error_response(status_code: int, error_code: str, details: str, **extra: Any) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={"error": error_code, "details": details, **extra},
    )


@app.exception_handler(VendorValidationError)
async def vendor_validation_handler(request: Request, exc: VendorValidationError) -> JSONResponse:
    return error_response(422, "invalid_vendor", exc.message, field=exc.field)


class SnapshotPayload(BaseModel):
    """Raw store data as the dashboard received it; objects keyed by record id or plain lists."""

    vendors: dict[str, Any] | list[Any] | None = None
    expenses: dict[str, Any] | list[Any] | None = None
    contributions: dict[str, Any] | list[Any] | None = None
    selected_vendors: dict[str, Any] | None = None


class BudgetSummaryRequest(SnapshotPayload):
    policy: Literal["unique_vendors", "selected_vendors"] | None = None


class PersonalBreakdownModel(BaseModel):
    person: str
    promised: float
    spent: float
    remaining: float


class BudgetSummaryResponseModel(BaseModel):
    currency: str
    total_budget: float
    total_paid: float
    budget_left: float
    left_to_pay: float
    left_to_pay_policy: Literal["unique_vendors", "selected_vendors"]
    left_to_pay_unique_vendors: float
    left_to_pay_selected_vendors: float
    actual_remaining: float
    personal_breakdowns: list[PersonalBreakdownModel]


class LedgerEntryModel(BaseModel):
    expense_id: str
    vendor_id: str
    vendor_name: str
    vendor_type: str
    amount: float
    date: dt.date | None = None
    paid_by: str
    notes: str
    contract_price: float
    cumulative_paid: float
    remaining: float
    is_first_for_vendor: bool


class LedgerResponseModel(BaseModel):
    currency: str
    entries: list[LedgerEntryModel]


class VendorProgressRequest(SnapshotPayload):
    service_type: str | None = None


class VendorProgressModel(BaseModel):
    vendor_id: str
    name: str
    package_name: str
    contract_price: float
    total_paid: float
    remaining: float
    percentage: float
    band: Literal["low", "mid", "complete"]
    selected: bool


class VendorGroupProgressModel(BaseModel):
    service_type: str
    vendors: list[VendorProgressModel]


class VendorProgressResponseModel(BaseModel):
    groups: list[VendorGroupProgressModel]


class VendorFormModel(BaseModel):
    name: str
    service_type: str
    contact_number: str
    package_name: str
    contract_price: float
    email: str


class SelectionChangeRequest(BaseModel):
    selected_vendors: dict[str, Any] | None = None
    service_type: str = Field(min_length=1)
    vendor_id: str | None = None
    action: Literal["toggle", "select", "unselect", "unselect_all"] = "toggle"


class SelectionResponseModel(BaseModel):
    selected_vendors: dict[str, list[str]]
    store_value: dict[str, list[str]]


class CleanupResponseModel(SelectionResponseModel):
    removed_count: int


class SelectionLineModel(BaseModel):
    service_type: str
    vendor_id: str
    name: str
    package_name: str
    contract_price: float


class SelectionSummaryResponseModel(BaseModel):
    currency: str
    lines: list[SelectionLineModel]
    total_contract_price: float
    orphaned_ids: list[str]


@app.get("/health")
def health_check() -> dict:
    """
    Report Reconciliation Service readiness; expects no payload.
    Returns a static status document for load balancers and uptime checks.
    """
    return {"status": "ok", "service": "reconciliation-service"}


@app.post("/budget/summary", response_model=BudgetSummaryResponseModel)
def budget_summary(payload: BudgetSummaryRequest) -> BudgetSummaryResponseModel:
    """
    Compute the budget page's summary cards and per-person breakdowns.
    Both left-to-pay figures are returned; `left_to_pay` mirrors the requested
    (or configured) policy.
    """
    contributions = contributions_from_snapshot(payload.contributions)
    expenses = expenses_from_snapshot(payload.expenses)
    vendors = vendors_from_snapshot(payload.vendors)
    selected = normalize_selected_vendors(payload.selected_vendors)
    policy = payload.policy or ENGINE_SETTINGS.left_to_pay_policy

    summary = summarize_budget(
        contributions,
        expenses,
        vendors,
        selected_vendors=selected,
        members=ENGINE_SETTINGS.household_members,
    )
    left_to_pay = (
        summary.left_to_pay_selected_vendors if policy == "selected_vendors" else summary.left_to_pay_unique_vendors
    )

    logger.info(
        {
            "event": "budget_summary",
            "snapshot": snapshot_fingerprint(payload.model_dump()),
            "policy": policy,
            "expense_count": len(expenses),
            "vendor_count": len(vendors),
        }
    )

    return BudgetSummaryResponseModel(
        currency=ENGINE_SETTINGS.currency,
        total_budget=summary.total_budget,
        total_paid=summary.total_paid,
        budget_left=summary.budget_left,
        left_to_pay=left_to_pay,
        left_to_pay_policy=policy,
        left_to_pay_unique_vendors=summary.left_to_pay_unique_vendors,
        left_to_pay_selected_vendors=summary.left_to_pay_selected_vendors,
        actual_remaining=summary.actual_remaining,
        personal_breakdowns=[
            PersonalBreakdownModel(
                person=breakdown.person,
                promised=breakdown.promised,
                spent=breakdown.spent,
                remaining=breakdown.remaining,
            )
            for breakdown in summary.personal_breakdowns
        ],
    )


@app.post("/budget/ledger", response_model=LedgerResponseModel)
def budget_ledger(payload: SnapshotPayload) -> LedgerResponseModel:
    """
    List every payment grouped by vendor with running totals and outstanding balance.
    """
    entries = build_payment_ledger(expenses_from_snapshot(payload.expenses), vendors_from_snapshot(payload.vendors))
    return LedgerResponseModel(
        currency=ENGINE_SETTINGS.currency,
        entries=[
            LedgerEntryModel(
                expense_id=entry.expense.id,
                vendor_id=entry.expense.vendor,
                vendor_name=entry.vendor_name,
                vendor_type=entry.expense.vendor_type,
                amount=entry.expense.amount,
                date=entry.expense.date,
                paid_by=entry.expense.paid_by,
                notes=entry.expense.notes,
                contract_price=entry.contract_price,
                cumulative_paid=entry.cumulative_paid,
                remaining=entry.remaining,
                is_first_for_vendor=entry.is_first_for_vendor,
            )
            for entry in entries
        ],
    )


@app.post("/vendors/progress", response_model=VendorProgressResponseModel)
def vendors_progress(payload: VendorProgressRequest) -> VendorProgressResponseModel:
    """
    Payment progress for every vendor, grouped by service type.
    Restrict to one service type by passing `service_type`.
    """
    vendors = vendors_from_snapshot(payload.vendors)
    expenses = expenses_from_snapshot(payload.expenses)
    selected = normalize_selected_vendors(payload.selected_vendors)

    groups: list[VendorGroupProgressModel] = []
    for group in group_vendors_by_service_type(vendors):
        if payload.service_type is not None and group.service_type != payload.service_type:
            continue
        rows = []
        selection_key = canonical_service_type(group.service_type)
        for vendor in group.vendors:
            progress = vendor_payment_progress(vendor, expenses)
            rows.append(
                VendorProgressModel(
                    vendor_id=vendor.id,
                    name=vendor.name,
                    package_name=vendor.package_name,
                    contract_price=vendor.contract_price,
                    total_paid=progress.total_paid,
                    remaining=progress.remaining,
                    percentage=progress.percentage,
                    band=progress.band,
                    selected=is_selected(selected, selection_key, vendor.id),
                )
            )
        groups.append(VendorGroupProgressModel(service_type=group.service_type, vendors=rows))

    return VendorProgressResponseModel(groups=groups)


@app.post("/vendors/validate", response_model=VendorFormModel)
def validate_vendor(form: dict[str, Any]) -> VendorFormModel:
    """
    Validate a vendor form before the dashboard writes it to the store.
    Responds 422 with the offending field when validation fails.
    """
    try:
        data = validate_vendor_form(form)
    except VendorValidationError as exc:
        logger.info({"event": "vendor_rejected", "field": exc.field, "vendor": redact_fields(form)})
        raise

    return VendorFormModel(
        name=data.name,
        service_type=data.service_type,
        contact_number=data.contact_number,
        package_name=data.package_name,
        contract_price=data.contract_price,
        email=data.email,
    )


@app.post("/selection/toggle", response_model=SelectionResponseModel)
def change_selection(payload: SelectionChangeRequest) -> SelectionResponseModel:
    """
    Compute the next selection state; the caller persists `store_value`.
    """
    current = normalize_selected_vendors(payload.selected_vendors)
    service_type = canonical_service_type(payload.service_type)
    vendor_id = payload.vendor_id or ""

    # Missing vendor ids fall through to the engine, which treats them as no-ops.
    if payload.action == "unselect_all":
        updated = unselect_all(current, service_type)
    elif payload.action == "select":
        updated = select(current, service_type, vendor_id)
    elif payload.action == "unselect":
        updated = unselect(current, service_type, vendor_id)
    else:
        updated = toggle_selection(current, service_type, vendor_id)

    return SelectionResponseModel(selected_vendors=updated, store_value=selected_vendors_to_store(updated))


@app.post("/selection/cleanup", response_model=CleanupResponseModel)
def cleanup_selection(payload: SnapshotPayload) -> CleanupResponseModel:
    """
    Drop selections that point at deleted vendors.
    """
    vendors = vendors_from_snapshot(payload.vendors)
    result = cleanup_orphans(normalize_selected_vendors(payload.selected_vendors), {vendor.id for vendor in vendors})

    if result.removed_count:
        logger.info({"event": "selection_cleanup", "removed_count": result.removed_count})

    return CleanupResponseModel(
        selected_vendors=result.selected,
        store_value=selected_vendors_to_store(result.selected),
        removed_count=result.removed_count,
    )


@app.post("/selection/summary", response_model=SelectionSummaryResponseModel)
def summarize_selection(payload: SnapshotPayload) -> SelectionSummaryResponseModel:
    """
    Selected vendors per service type with their combined contract cost.
    """
    summary = selection_summary(
        normalize_selected_vendors(payload.selected_vendors),
        vendors_from_snapshot(payload.vendors),
    )
    return SelectionSummaryResponseModel(
        currency=ENGINE_SETTINGS.currency,
        lines=[
            SelectionLineModel(
                service_type=line.service_type,
                vendor_id=line.vendor.id,
                name=line.vendor.name,
                package_name=line.vendor.package_name,
                contract_price=line.vendor.contract_price,
            )
            for line in summary.lines
        ],
        total_contract_price=summary.total_contract_price,
        orphaned_ids=summary.orphaned_ids,
    )
