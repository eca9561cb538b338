"""
app/validators/entity_validator.py

Row validation for the Customers, Orders and Batches sheets.

Each row goes through four stages and stops at the first failure:
spreadsheet shape, transform into the target shape, create-time schema,
then business rules. Failures come back as RowValidationError values;
nothing here raises for a bad row.
"""

from __future__ import annotations

from collections.abc import Callable, Sequence
from datetime import date
from typing import Any

from pydantic import ValidationError

from app.domain.sheet_sync import (
    SHEET_NAMES,
    BatchDraft,
    BusinessRuleViolation,
    CredentialDraft,
    CustomerDraft,
    OrderDraft,
    ParsedRow,
    RowValidationError,
    SheetKey,
    ValidationOutcome,
)
from app.schemas.entities import BatchCreate, CustomerCreate, OrderCreate
from app.schemas.sheet_rows import BatchSheetRow, CustomerSheetRow, OrderSheetRow
from app.sheets.normalizer import (
    NormalizationError,
    normalize_date,
    normalize_decimal,
    normalize_integer,
    normalize_number,
)
from db.models.sync_error import SyncEntityType, SyncErrorType

CREDENTIAL_GROUPS = (1, 2, 3)

# Target field -> spreadsheet column, for reporting the raw cell value.
_SHEET_COLUMN_FOR_FIELD = {
    "primary_contact_phone": "phone",
    "address_text": "address",
}


class EntityRowValidator:
    """
    Validates parsed rows per entity type and partitions them into drafts and errors.
    """

    def __init__(self, *, today: Callable[[], date] | None = None) -> None:
        self._today = today or date.today

    def validate_customer_rows(
        self,
        rows: Sequence[ParsedRow],
        *,
        sheet_name: str = SHEET_NAMES[SheetKey.CUSTOMERS],
    ) -> ValidationOutcome:
        return self._validate_rows(
            rows,
            sheet_name=sheet_name,
            entity_type=SyncEntityType.CUSTOMER,
            validate_row=self._validate_customer,
        )

    def validate_order_rows(
        self,
        rows: Sequence[ParsedRow],
        *,
        sheet_name: str = SHEET_NAMES[SheetKey.ORDERS],
    ) -> ValidationOutcome:
        return self._validate_rows(
            rows,
            sheet_name=sheet_name,
            entity_type=SyncEntityType.ORDER,
            validate_row=self._validate_order,
        )

    def validate_batch_rows(
        self,
        rows: Sequence[ParsedRow],
        *,
        sheet_name: str = SHEET_NAMES[SheetKey.BATCHES],
    ) -> ValidationOutcome:
        return self._validate_rows(
            rows,
            sheet_name=sheet_name,
            entity_type=SyncEntityType.BROODSTOCK_BATCH,
            validate_row=self._validate_batch,
        )

    def _validate_rows(
        self,
        rows: Sequence[ParsedRow],
        *,
        sheet_name: str,
        entity_type: str,
        validate_row: Callable[[ParsedRow], Any],
    ) -> ValidationOutcome:
        outcome = ValidationOutcome()
        for row in rows:
            try:
                result = validate_row(row)
            except ValidationError as exc:
                outcome.errors.append(
                    self._type_error_from_validation(row, exc, sheet_name=sheet_name, entity_type=entity_type)
                )
                continue
            except NormalizationError as exc:
                outcome.errors.append(
                    self._row_error(
                        row,
                        sheet_name=sheet_name,
                        entity_type=entity_type,
                        error_type=SyncErrorType.TYPE_ERROR,
                        message=str(exc),
                        field_name=exc.field_name,
                        invalid_value=_stringify(exc.value),
                    )
                )
                continue

            if isinstance(result, BusinessRuleViolation):
                outcome.errors.append(
                    self._row_error(
                        row,
                        sheet_name=sheet_name,
                        entity_type=entity_type,
                        error_type=SyncErrorType.BUSINESS_RULE_VIOLATION,
                        message=result.message,
                        field_name=result.field,
                        invalid_value=_stringify(row.data.get(result.field)),
                    )
                )
                continue
            outcome.valid_rows.append(result)
        return outcome

    # ------------------------------------------------------------------
    # Customers
    # ------------------------------------------------------------------

    def _validate_customer(self, row: ParsedRow) -> CustomerDraft | BusinessRuleViolation:
        sheet_row = CustomerSheetRow.model_validate(row.data)
        payload: dict[str, Any] = {
            "name": sheet_row.name,
            "primary_contact_name": sheet_row.primary_contact_name,
            "primary_contact_phone": sheet_row.phone,
            "email": sheet_row.email,
            "address_text": sheet_row.address,
            "country": sheet_row.country,
            "province": sheet_row.province,
            "district": sheet_row.district,
            "status": sheet_row.status or "active",
            "credentials": _credential_groups(sheet_row),
        }
        if sheet_row.latitude is not None:
            payload["latitude"] = normalize_number(sheet_row.latitude, "latitude")
        if sheet_row.longitude is not None:
            payload["longitude"] = normalize_number(sheet_row.longitude, "longitude")

        entity = CustomerCreate.model_validate(payload)
        violation = customer_rule_violation(entity)
        if violation is not None:
            return violation

        return CustomerDraft(
            row_number=row.row_number,
            name=entity.name,
            primary_contact_name=entity.primary_contact_name,
            status=entity.status,
            email=entity.email,
            primary_contact_phone=entity.primary_contact_phone,
            address_text=entity.address_text,
            latitude=entity.latitude,
            longitude=entity.longitude,
            country=entity.country,
            province=entity.province,
            district=entity.district,
            credentials=tuple(
                CredentialDraft(
                    type=credential.type,
                    number=credential.number,
                    issued_date=credential.issued_date,
                    expiry_date=credential.expiry_date,
                    file_url=credential.file_url,
                )
                for credential in entity.credentials
            ),
        )

    # ------------------------------------------------------------------
    # Orders
    # ------------------------------------------------------------------

    def _validate_order(self, row: ParsedRow) -> OrderDraft | BusinessRuleViolation:
        sheet_row = OrderSheetRow.model_validate(row.data)
        payload: dict[str, Any] = {
            "customer_email": sheet_row.customer_email,
            "broodstock_batch_code": sheet_row.broodstock_batch_code,
            "order_date": normalize_date(sheet_row.order_date, "order_date"),
            "species": sheet_row.species,
            "strain": sheet_row.strain,
            "quantity": normalize_integer(sheet_row.quantity, "quantity"),
            "unit_price": normalize_decimal(sheet_row.unit_price, "unit_price"),
            "unit_price_currency": sheet_row.unit_price_currency or "USD",
            "total_value_currency": sheet_row.total_value_currency or "USD",
            "unit": sheet_row.unit or "piece",
            "packaging_type": sheet_row.packaging_type,
            "shipment_status": sheet_row.shipment_status or "pending",
            "quality_flag": sheet_row.quality_flag or "ok",
            "mortality_reported": (
                normalize_integer(sheet_row.mortality_reported, "mortality_reported")
                if sheet_row.mortality_reported is not None
                else 0
            ),
            "notes": sheet_row.notes,
        }
        if sheet_row.shipment_date is not None:
            payload["shipment_date"] = normalize_date(sheet_row.shipment_date, "shipment_date")

        entity = OrderCreate.model_validate(payload)
        violation = order_rule_violation(entity, today=self._today())
        if violation is not None:
            return violation

        return OrderDraft(
            row_number=row.row_number,
            customer_email=entity.customer_email,
            order_date=entity.order_date,
            species=entity.species,
            quantity=entity.quantity,
            unit_price=entity.unit_price,
            unit=entity.unit,
            unit_price_currency=entity.unit_price_currency,
            total_value_currency=entity.total_value_currency,
            shipment_status=entity.shipment_status,
            quality_flag=entity.quality_flag,
            mortality_reported=entity.mortality_reported,
            broodstock_batch_code=entity.broodstock_batch_code,
            strain=entity.strain,
            packaging_type=entity.packaging_type,
            shipment_date=entity.shipment_date,
            notes=entity.notes,
        )

    # ------------------------------------------------------------------
    # Batches
    # ------------------------------------------------------------------

    def _validate_batch(self, row: ParsedRow) -> BatchDraft | BusinessRuleViolation:
        sheet_row = BatchSheetRow.model_validate(row.data)
        payload: dict[str, Any] = {
            "batch_code": sheet_row.batch_code,
            "hatchery_origin": sheet_row.hatchery_origin,
            "grade": sheet_row.grade,
            "arrival_date": normalize_date(sheet_row.arrival_date, "arrival_date"),
            "available_quantity": normalize_integer(sheet_row.available_quantity, "available_quantity"),
            "species": sheet_row.species,
            "strain": sheet_row.strain,
            "health_status": sheet_row.health_status or "good",
            "quarantine_status": sheet_row.quarantine_status or "pending",
            "notes": sheet_row.notes,
        }
        if sheet_row.initial_quantity is not None:
            payload["initial_quantity"] = normalize_integer(sheet_row.initial_quantity, "initial_quantity")
        if sheet_row.age_weeks is not None:
            payload["age_weeks"] = normalize_number(sheet_row.age_weeks, "age_weeks")
        if sheet_row.weight_grams is not None:
            payload["weight_grams"] = normalize_number(sheet_row.weight_grams, "weight_grams")

        entity = BatchCreate.model_validate(payload)
        violation = batch_rule_violation(entity, today=self._today())
        if violation is not None:
            return violation

        return BatchDraft(
            row_number=row.row_number,
            batch_code=entity.batch_code,
            hatchery_origin=entity.hatchery_origin,
            arrival_date=entity.arrival_date,
            available_quantity=entity.available_quantity,
            health_status=entity.health_status,
            quarantine_status=entity.quarantine_status,
            initial_quantity=entity.initial_quantity,
            grade=entity.grade,
            species=entity.species,
            strain=entity.strain,
            age_weeks=entity.age_weeks,
            weight_grams=entity.weight_grams,
            notes=entity.notes,
        )

    # ------------------------------------------------------------------
    # Error records
    # ------------------------------------------------------------------

    def _type_error_from_validation(
        self,
        row: ParsedRow,
        exc: ValidationError,
        *,
        sheet_name: str,
        entity_type: str,
    ) -> RowValidationError:
        first = exc.errors()[0]
        location = [str(part) for part in first.get("loc", ())]
        field_name = ".".join(location) or None
        message = f"{field_name}: {first['msg']}" if field_name else first["msg"]

        invalid_value: str | None = None
        if first.get("type") != "missing":
            raw_input = first.get("input")
            if isinstance(raw_input, (dict, list, tuple)):
                column = _SHEET_COLUMN_FOR_FIELD.get(location[0], location[0]) if location else None
                invalid_value = _stringify(row.data.get(column)) if column else None
            else:
                invalid_value = _stringify(raw_input)

        return self._row_error(
            row,
            sheet_name=sheet_name,
            entity_type=entity_type,
            error_type=SyncErrorType.TYPE_ERROR,
            message=message,
            field_name=field_name,
            invalid_value=invalid_value,
        )

    @staticmethod
    def _row_error(
        row: ParsedRow,
        *,
        sheet_name: str,
        entity_type: str,
        error_type: str,
        message: str,
        field_name: str | None,
        invalid_value: str | None,
    ) -> RowValidationError:
        return RowValidationError(
            row_number=row.row_number,
            sheet_name=sheet_name,
            entity_type=entity_type,
            error_type=error_type,
            message=message,
            field_name=field_name,
            invalid_value=invalid_value,
            data_snapshot=dict(row.data),
        )


def _credential_groups(sheet_row: CustomerSheetRow) -> list[dict[str, Any]]:
    """
    Collect credential groups that have all five cells filled.

    Partial groups, and complete groups whose dates do not parse, are
    skipped without an error.
    """

    credentials: list[dict[str, Any]] = []
    for index in CREDENTIAL_GROUPS:
        credential_type = getattr(sheet_row, f"credential_type_{index}")
        number = getattr(sheet_row, f"credential_number_{index}")
        issued = getattr(sheet_row, f"credential_issued_{index}")
        expiry = getattr(sheet_row, f"credential_expiry_{index}")
        file_url = getattr(sheet_row, f"credential_file_url_{index}")
        if any(value is None for value in (credential_type, number, issued, expiry, file_url)):
            continue
        try:
            issued_date = normalize_date(issued, f"credential_issued_{index}")
            expiry_date = normalize_date(expiry, f"credential_expiry_{index}")
        except NormalizationError:
            continue
        credentials.append(
            {
                "type": credential_type,
                "number": number,
                "issued_date": issued_date,
                "expiry_date": expiry_date,
                "file_url": file_url,
            }
        )
    return credentials


def customer_rule_violation(entity: CustomerCreate) -> BusinessRuleViolation | None:
    if entity.latitude is not None and entity.longitude is None:
        return BusinessRuleViolation("longitude", "Both latitude and longitude must be provided together")
    if entity.longitude is not None and entity.latitude is None:
        return BusinessRuleViolation("latitude", "Both latitude and longitude must be provided together")
    if entity.latitude is not None and not -90 <= entity.latitude <= 90:
        return BusinessRuleViolation("latitude", "Latitude must be between -90 and 90")
    if entity.longitude is not None and not -180 <= entity.longitude <= 180:
        return BusinessRuleViolation("longitude", "Longitude must be between -180 and 180")
    if not entity.email and not entity.primary_contact_phone:
        return BusinessRuleViolation("email", "Either email or phone number must be provided")
    return None


def order_rule_violation(entity: OrderCreate, *, today: date) -> BusinessRuleViolation | None:
    if entity.quantity <= 0:
        return BusinessRuleViolation("quantity", "Quantity must be greater than 0")
    if entity.unit_price <= 0:
        return BusinessRuleViolation("unit_price", "Unit price must be greater than 0")
    if entity.mortality_reported > entity.quantity:
        return BusinessRuleViolation(
            "mortality_reported",
            "Mortality reported cannot exceed quantity ordered",
        )
    if entity.order_date > today:
        return BusinessRuleViolation("order_date", "Order date cannot be in the future")
    if entity.shipment_date is not None and entity.shipment_date < entity.order_date:
        return BusinessRuleViolation("shipment_date", "Shipment date cannot be before order date")
    return None


def batch_rule_violation(entity: BatchCreate, *, today: date) -> BusinessRuleViolation | None:
    if entity.available_quantity < 0:
        return BusinessRuleViolation("available_quantity", "Available quantity cannot be negative")
    if entity.initial_quantity is not None and entity.available_quantity > entity.initial_quantity:
        return BusinessRuleViolation(
            "available_quantity",
            "Available quantity cannot exceed initial quantity",
        )
    if entity.age_weeks is not None and entity.age_weeks < 0:
        return BusinessRuleViolation("age_weeks", "Age in weeks cannot be negative")
    if entity.weight_grams is not None and entity.weight_grams <= 0:
        return BusinessRuleViolation("weight_grams", "Weight in grams must be positive")
    if entity.arrival_date > today:
        return BusinessRuleViolation("arrival_date", "Arrival date cannot be in the future")
    return None


def _stringify(value: Any) -> str | None:
    if value is None or value == "":
        return None
    return str(value)
