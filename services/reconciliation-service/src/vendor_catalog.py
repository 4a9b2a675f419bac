from __future__ import annotations

import re
from typing import Any, Dict, Iterable, List, Mapping

from store_adapter import coerce_amount
from wedding_model import Vendor, VendorFormData, VendorGroup

# Philippine mobile numbers: 09XXXXXXXXX or +639XXXXXXXXX.
CONTACT_NUMBER_PATTERN = re.compile(r"^(09|\+639)\d{9}$")
EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")

REQUIRED_FIELDS = (
    ("name", "name"),
    ("serviceType", "service_type"),
    ("contactNumber", "contact_number"),
    ("packageName", "package_name"),
)


class VendorValidationError(ValueError):
    """Raised when a vendor form submission cannot be saved."""

    def __init__(self, field: str, message: str) -> None:
        super().__init__(message)
        self.field = field
        self.message = message


def _field(form: Mapping[str, Any], camel: str, snake: str) -> str:
    value = form.get(camel, form.get(snake))
    return str(value).strip() if value is not None else ""


def validate_vendor_form(form: Mapping[str, Any]) -> VendorFormData:
    """
    Validate a vendor form submission before it is written to the store.

    Args:
        form: Raw form values using either camelCase or snake_case keys.
    Returns:
        VendorFormData with trimmed strings and a numeric contract price.
    Raises:
        VendorValidationError naming the first offending field.
    """
    values: Dict[str, str] = {}
    for camel, snake in REQUIRED_FIELDS:
        value = _field(form, camel, snake)
        if not value:
            raise VendorValidationError(snake, "Missing required fields")
        values[snake] = value

    contract_price = coerce_amount(form.get("contractPrice", form.get("contract_price")))
    if contract_price <= 0:
        raise VendorValidationError("contract_price", "Missing required fields")

    if not CONTACT_NUMBER_PATTERN.match(values["contact_number"]):
        raise VendorValidationError("contact_number", "Invalid contact number format")

    email = _field(form, "email", "email")
    if email and not EMAIL_PATTERN.match(email):
        raise VendorValidationError("email", "Invalid email format")

    return VendorFormData(
        name=values["name"],
        service_type=values["service_type"],
        contact_number=values["contact_number"],
        package_name=values["package_name"],
        contract_price=contract_price,
        email=email,
    )


def group_vendors_by_service_type(vendors: Iterable[Vendor]) -> List[VendorGroup]:
    """Vendors bucketed by service type, in the order each type first appears."""
    groups: Dict[str, List[Vendor]] = {}
    for vendor in vendors:
        groups.setdefault(vendor.service_type, []).append(vendor)
    return [VendorGroup(service_type=service_type, vendors=members) for service_type, members in groups.items()]


def service_types(vendors: Iterable[Vendor]) -> List[str]:
    return sorted({vendor.service_type for vendor in vendors if vendor.service_type})


def vendors_for_service_type(vendors: Iterable[Vendor], service_type: str) -> List[Vendor]:
    return [vendor for vendor in vendors if vendor.service_type == service_type]
