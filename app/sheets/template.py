"""
app/sheets/template.py

Plain-text layout guide for operators setting up the sync spreadsheet.

Headers, required fields, allowed values and length limits are read off
the spreadsheet-shape models, so the guide tracks what the validator
actually accepts.
"""

from __future__ import annotations

from typing import Any, Literal, get_args, get_origin

from pydantic import BaseModel
from pydantic.fields import FieldInfo

from app.domain.sheet_sync import SHEET_NAMES, SheetKey
from app.schemas.sheet_rows import BatchSheetRow, CustomerSheetRow, OrderSheetRow

TEMPLATE_FILENAME = "google-sheets-sync-template.txt"

SHEET_MODELS: dict[str, type[BaseModel]] = {
    SheetKey.CUSTOMERS: CustomerSheetRow,
    SheetKey.BATCHES: BatchSheetRow,
    SheetKey.ORDERS: OrderSheetRow,
}

# Values filled in when the cell is blank.
FIELD_DEFAULTS: dict[str, dict[str, str]] = {
    SheetKey.CUSTOMERS: {"status": "active"},
    SheetKey.BATCHES: {
        "health_status": "good",
        "quarantine_status": "pending",
        "initial_quantity": "available_quantity",
    },
    SheetKey.ORDERS: {
        "unit": "piece",
        "unit_price_currency": "USD",
        "total_value_currency": "USD",
        "shipment_status": "pending",
        "quality_flag": "ok",
        "mortality_reported": "0",
    },
}

SHEET_NOTES: dict[str, tuple[str, ...]] = {
    SheetKey.CUSTOMERS: (
        "Either email or phone must be provided.",
        "Latitude and longitude must be provided together.",
        "Up to three credentials (suffix _1, _2, _3); a credential is imported only when all five of its columns are filled.",
        "Rows whose email already exists are skipped.",
    ),
    SheetKey.BATCHES: (
        "Rows whose batch_code already exists are skipped.",
        "available_quantity cannot exceed initial_quantity.",
        "arrival_date cannot be in the future.",
    ),
    SheetKey.ORDERS: (
        "customer_email must match a customer that already exists or is earlier in this sync.",
        "broodstock_batch_code, when given, must match an existing batch.",
        "quantity and unit_price must be greater than 0; unit_price is rounded to 4 decimals.",
        "total_value is always computed as quantity x unit_price; a total_value column is ignored.",
        "order_date cannot be in the future; shipment_date cannot be before order_date.",
    ),
}

GENERAL_NOTES: tuple[str, ...] = (
    "Row 1 holds the headers. Header matching ignores case, and spaces become underscores.",
    "Dates may be YYYY-MM-DD text or spreadsheet date cells.",
    "Empty cells count as not provided; fully empty rows are skipped.",
    "Sync is insert-only: existing records are never updated.",
    "Every rejected row is reported with its sheet row number.",
)

_UNSIZED_KINDS = {"number", "date"}


def build_sheet_template() -> str:
    lines = [
        "# Google Sheets Sync Template",
        "",
        "Create one tab per entity: " + ", ".join(SHEET_NAMES[key] for key in SheetKey.ORDERED) + ".",
        "Share the sheet with the service account and set its id in the sync configuration.",
    ]
    for sheet_key in SheetKey.ORDERED:
        lines.extend(["", "---", ""])
        lines.extend(_sheet_section(sheet_key))

    lines.extend(["", "---", "", "## General Notes", ""])
    lines.extend(f"- {note}" for note in GENERAL_NOTES)
    return "\n".join(lines) + "\n"


def _sheet_section(sheet_key: str) -> list[str]:
    model = SHEET_MODELS[sheet_key]
    defaults = FIELD_DEFAULTS.get(sheet_key, {})
    fields = model.model_fields

    required = [name for name, info in fields.items() if info.is_required()]
    optional = [name for name, info in fields.items() if not info.is_required()]

    lines = [
        f"## {SHEET_NAMES[sheet_key]} Tab",
        "",
        "Headers (row 1):",
        " | ".join(fields),
        "",
        "Required fields:",
    ]
    lines.extend(f"- {name}: {describe_field(name, fields[name])}" for name in required)
    lines.extend(["", "Optional fields:"])
    lines.extend(
        f"- {name}: {describe_field(name, fields[name], default=defaults.get(name))}" for name in optional
    )
    lines.extend(["", "Notes:"])
    lines.extend(f"- {note}" for note in SHEET_NOTES.get(sheet_key, ()))
    return lines


def describe_field(name: str, info: FieldInfo, *, default: str | None = None) -> str:
    """
    ``"text, 2-255 characters"``, ``"one of ok, minor_issue (default: ok)"`` and so on.
    """

    choices = _literal_choices(info.annotation)
    if choices:
        text = "one of " + ", ".join(choices)
    else:
        kind = _field_kind(name, info.annotation)
        text = kind
        if kind not in _UNSIZED_KINDS:
            limits = _length_limits(info)
            if limits:
                text = f"{text}, {limits}"
        if name == "email" or name.endswith("_email"):
            text = "e-mail address"
    if default is not None:
        text = f"{text} (default: {default})"
    return text


def _field_kind(name: str, annotation: Any) -> str:
    if annotation is str or set(get_args(annotation)) == {str, type(None)}:
        return "text"
    if name.endswith("_date") or name.startswith(("credential_issued", "credential_expiry")):
        return "date"
    return "number"


def _literal_choices(annotation: Any) -> list[str]:
    if get_origin(annotation) is Literal:
        return [str(value) for value in get_args(annotation)]
    choices: list[str] = []
    for arg in get_args(annotation):
        choices.extend(_literal_choices(arg))
    return choices


def _length_limits(info: FieldInfo) -> str | None:
    min_length = None
    max_length = None
    for constraint in info.metadata:
        min_length = getattr(constraint, "min_length", min_length)
        max_length = getattr(constraint, "max_length", max_length)
    if min_length and min_length == max_length:
        return f"exactly {max_length} characters"
    if min_length and max_length:
        return f"{min_length}-{max_length} characters"
    if max_length:
        return f"up to {max_length} characters"
    return None
