"""
app/domain/sheet_sync.py

Domain records used by the spreadsheet sync pipeline.

Rows stay open string-keyed maps only up to validation (``ParsedRow``).
Everything after validation is a closed, frozen draft tagged with its
entity type and the sheet row it came from.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from datetime import date
from decimal import Decimal
from typing import Any, ClassVar

from db.models.sync_error import SyncEntityType


class SheetKey:
    """
    Entity subset names accepted by the trigger, in dependency order.
    """

    CUSTOMERS = "customers"
    BATCHES = "batches"
    ORDERS = "orders"

    ORDERED: tuple[str, ...] = (CUSTOMERS, BATCHES, ORDERS)


SHEET_NAMES: dict[str, str] = {
    SheetKey.CUSTOMERS: "Customers",
    SheetKey.BATCHES: "Batches",
    SheetKey.ORDERS: "Orders",
}


@dataclass(frozen=True)
class ParsedRow:
    """
    One non-blank spreadsheet data row keyed by normalized header.
    """

    row_number: int
    data: dict[str, Any]


@dataclass(frozen=True)
class RowValidationError:
    """
    One row-level sync failure, reported to operators and flushed as SyncError.
    """

    row_number: int
    sheet_name: str
    entity_type: str
    error_type: str
    message: str
    field_name: str | None = None
    invalid_value: str | None = None
    data_snapshot: dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class BusinessRuleViolation:
    field: str
    message: str


@dataclass(frozen=True)
class CredentialDraft:
    type: str
    number: str
    issued_date: date
    expiry_date: date
    file_url: str


@dataclass(frozen=True)
class CustomerDraft:
    entity_type: ClassVar[str] = SyncEntityType.CUSTOMER

    row_number: int
    name: str
    primary_contact_name: str
    status: str
    email: str | None = None
    primary_contact_phone: str | None = None
    address_text: str | None = None
    latitude: float | None = None
    longitude: float | None = None
    country: str | None = None
    province: str | None = None
    district: str | None = None
    credentials: tuple[CredentialDraft, ...] = ()


@dataclass(frozen=True)
class BatchDraft:
    entity_type: ClassVar[str] = SyncEntityType.BROODSTOCK_BATCH

    row_number: int
    batch_code: str
    hatchery_origin: str
    arrival_date: date
    available_quantity: int
    health_status: str
    quarantine_status: str
    initial_quantity: int | None = None
    grade: str | None = None
    species: str | None = None
    strain: str | None = None
    age_weeks: float | None = None
    weight_grams: float | None = None
    notes: str | None = None


@dataclass(frozen=True)
class OrderDraft:
    entity_type: ClassVar[str] = SyncEntityType.ORDER

    row_number: int
    customer_email: str
    order_date: date
    species: str
    quantity: int
    unit_price: Decimal
    unit: str
    unit_price_currency: str
    total_value_currency: str
    shipment_status: str
    quality_flag: str
    mortality_reported: int
    broodstock_batch_code: str | None = None
    strain: str | None = None
    packaging_type: str | None = None
    shipment_date: date | None = None
    notes: str | None = None


EntityDraft = CustomerDraft | BatchDraft | OrderDraft


def draft_snapshot(draft: EntityDraft) -> dict[str, Any]:
    """
    JSON-safe dict of a draft, used for audit entries.
    """

    return _json_safe(asdict(draft))


def compute_order_total(quantity: int, unit_price: Decimal | float) -> Decimal:
    """
    Order total value. Always derived, never read from the sheet.
    """

    return Decimal(quantity) * Decimal(str(unit_price))


def _json_safe(value: Any) -> Any:
    if isinstance(value, dict):
        return {key: _json_safe(item) for key, item in value.items()}
    if isinstance(value, (list, tuple)):
        return [_json_safe(item) for item in value]
    if isinstance(value, date):
        return value.isoformat()
    if isinstance(value, Decimal):
        return str(value)
    return value


@dataclass(frozen=True)
class ValidationOutcome:
    """
    Partition of a sheet's rows into valid drafts and row errors.
    """

    valid_rows: list[Any] = field(default_factory=list)
    errors: list[RowValidationError] = field(default_factory=list)


class RowOutcomeStatus:
    INSERTED = "inserted"
    SKIPPED = "skipped"
    FAILED = "failed"


@dataclass(frozen=True)
class RowOutcome:
    """
    Result of one row-scoped insert attempt.
    """

    status: str
    error: RowValidationError | None = None

    @property
    def inserted(self) -> bool:
        return self.status == RowOutcomeStatus.INSERTED


@dataclass
class EntitySyncResult:
    """
    Mutable per-entity-type tally built by the orchestrator's row loop.
    """

    sheet_key: str
    processed: int = 0
    inserted: int = 0
    skipped: int = 0
    failed: int = 0
    timed_out: bool = False
    errors: list[RowValidationError] = field(default_factory=list)

    def add_validation_errors(self, errors: list[RowValidationError]) -> None:
        self.errors.extend(errors)
        self.failed += len({error.row_number for error in errors})

    def apply(self, outcome: RowOutcome) -> None:
        if outcome.status == RowOutcomeStatus.INSERTED:
            self.inserted += 1
        elif outcome.status == RowOutcomeStatus.SKIPPED:
            self.skipped += 1
        else:
            self.failed += 1
        if outcome.error is not None:
            self.errors.append(outcome.error)


@dataclass(frozen=True)
class SyncRunSummary:
    """
    End-of-run totals written to the job ledger.
    """

    status: str
    processed: int
    inserted: int
    skipped: int
    failed: int
    customers_inserted: int
    orders_inserted: int
    batches_inserted: int
    errors: list[RowValidationError]
    error_summary: dict[str, int]
    error_message: str | None = None


def summarize_errors(errors: list[RowValidationError]) -> dict[str, int]:
    """
    Error counts by entity type, in the ledger's error_summary shape.
    """

    return {
        "customer_errors": sum(1 for error in errors if error.entity_type == SyncEntityType.CUSTOMER),
        "order_errors": sum(1 for error in errors if error.entity_type == SyncEntityType.ORDER),
        "batch_errors": sum(1 for error in errors if error.entity_type == SyncEntityType.BROODSTOCK_BATCH),
    }