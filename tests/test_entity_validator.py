"""
tests/test_entity_validator.py

Pytest unit tests for EntityRowValidator.

All tests are pure Python, no database. ``today`` is pinned by the
validator fixture so date rules are deterministic.
"""

from __future__ import annotations

from datetime import date
from typing import Any

from app.domain.sheet_sync import BatchDraft, CustomerDraft, OrderDraft, ParsedRow
from app.validators.entity_validator import EntityRowValidator
from db.models.sync_error import SyncEntityType, SyncErrorType


def _row(data: dict[str, Any], row_number: int = 2) -> ParsedRow:
    return ParsedRow(row_number=row_number, data=data)


def _customer(**overrides: Any) -> dict[str, Any]:
    data: dict[str, Any] = {
        "name": "Acme Corp",
        "email": "a@acme.com",
        "primary_contact_name": "Jane",
        "status": "active",
    }
    data.update(overrides)
    return data


def _order(**overrides: Any) -> dict[str, Any]:
    data: dict[str, Any] = {
        "customer_email": "a@acme.com",
        "order_date": "2026-09-01",
        "species": "Penaeus vannamei",
        "quantity": 500,
        "unit_price": 2.5,
    }
    data.update(overrides)
    return data


def _batch(**overrides: Any) -> dict[str, Any]:
    data: dict[str, Any] = {
        "batch_code": "BB-001",
        "hatchery_origin": "Hawaii",
        "arrival_date": "2026-08-20",
        "available_quantity": 400,
    }
    data.update(overrides)
    return data


class TestCustomerRows:
    def test_valid_row_becomes_draft_with_defaults(self, validator: EntityRowValidator) -> None:
        outcome = validator.validate_customer_rows([_row(_customer(status=""))])

        assert outcome.errors == []
        draft = outcome.valid_rows[0]
        assert isinstance(draft, CustomerDraft)
        assert draft.row_number == 2
        assert draft.status == "active"
        assert draft.latitude is None and draft.longitude is None

    def test_geolocation_pair(self, validator: EntityRowValidator) -> None:
        outcome = validator.validate_customer_rows([_row(_customer(latitude="10.5", longitude=106.7))])

        assert outcome.errors == []
        assert outcome.valid_rows[0].latitude == 10.5
        assert outcome.valid_rows[0].longitude == 106.7

    def test_latitude_without_longitude_is_a_business_rule_violation(
        self, validator: EntityRowValidator
    ) -> None:
        outcome = validator.validate_customer_rows([_row(_customer(latitude="10.5"))])

        assert outcome.valid_rows == []
        [error] = outcome.errors
        assert error.error_type == SyncErrorType.BUSINESS_RULE_VIOLATION
        assert error.field_name == "longitude"
        assert "provided together" in error.message
        assert error.entity_type == SyncEntityType.CUSTOMER
        assert error.sheet_name == "Customers"

    def test_email_or_phone_required(self, validator: EntityRowValidator) -> None:
        outcome = validator.validate_customer_rows([_row(_customer(email=""))])

        [error] = outcome.errors
        assert error.error_type == SyncErrorType.BUSINESS_RULE_VIOLATION
        assert error.field_name == "email"

    def test_phone_alone_is_enough(self, validator: EntityRowValidator) -> None:
        outcome = validator.validate_customer_rows([_row(_customer(email="", phone=84901234567))])

        assert outcome.errors == []
        assert outcome.valid_rows[0].primary_contact_phone == "84901234567"

    def test_invalid_email_is_a_type_error(self, validator: EntityRowValidator) -> None:
        outcome = validator.validate_customer_rows([_row(_customer(email="not-an-email"))])

        [error] = outcome.errors
        assert error.error_type == SyncErrorType.TYPE_ERROR
        assert error.field_name == "email"
        assert error.invalid_value == "not-an-email"
        assert error.data_snapshot["name"] == "Acme Corp"

    def test_missing_required_column_is_a_type_error(self, validator: EntityRowValidator) -> None:
        outcome = validator.validate_customer_rows([_row(_customer(primary_contact_name=""))])

        [error] = outcome.errors
        assert error.error_type == SyncErrorType.TYPE_ERROR
        assert error.field_name == "primary_contact_name"
        assert error.invalid_value is None

    def test_complete_credential_group_is_kept(self, validator: EntityRowValidator) -> None:
        outcome = validator.validate_customer_rows(
            [
                _row(
                    _customer(
                        credential_type_1="license",
                        credential_number_1="L-100",
                        credential_issued_1="2024-01-01",
                        credential_expiry_1=46387,
                        credential_file_url_1="https://files.acme.com/l-100.pdf",
                    )
                )
            ]
        )

        assert outcome.errors == []
        [credential] = outcome.valid_rows[0].credentials
        assert credential.type == "license"
        assert credential.issued_date == date(2024, 1, 1)
        assert credential.expiry_date == date(2026, 12, 31)

    def test_partial_credential_group_is_skipped_silently(self, validator: EntityRowValidator) -> None:
        outcome = validator.validate_customer_rows(
            [
                _row(
                    _customer(
                        credential_type_2="permit",
                        credential_number_2="P-7",
                        credential_issued_2="2024-01-01",
                        credential_expiry_2="2027-01-01",
                    )
                )
            ]
        )

        assert outcome.errors == []
        assert outcome.valid_rows[0].credentials == ()

    def test_rows_are_partitioned_independently(self, validator: EntityRowValidator) -> None:
        outcome = validator.validate_customer_rows(
            [
                _row(_customer(), row_number=2),
                _row(_customer(email="broken"), row_number=3),
                _row(_customer(name="Beta Farms", email="b@beta.com"), row_number=4),
            ]
        )

        assert [draft.row_number for draft in outcome.valid_rows] == [2, 4]
        assert [error.row_number for error in outcome.errors] == [3]


class TestOrderRows:
    def test_valid_row_with_defaults(self, validator: EntityRowValidator) -> None:
        outcome = validator.validate_order_rows([_row(_order(order_date=46266))])

        assert outcome.errors == []
        draft = outcome.valid_rows[0]
        assert isinstance(draft, OrderDraft)
        assert draft.order_date == date(2026, 9, 1)
        assert draft.unit == "piece"
        assert draft.unit_price_currency == "USD"
        assert draft.total_value_currency == "USD"
        assert draft.shipment_status == "pending"
        assert draft.quality_flag == "ok"
        assert draft.mortality_reported == 0

    def test_non_numeric_quantity_is_a_type_error(self, validator: EntityRowValidator) -> None:
        outcome = validator.validate_order_rows([_row(_order(quantity="lots"))])

        [error] = outcome.errors
        assert error.error_type == SyncErrorType.TYPE_ERROR
        assert error.field_name == "quantity"
        assert error.invalid_value == "lots"

    def test_fractional_quantity_is_a_type_error(self, validator: EntityRowValidator) -> None:
        outcome = validator.validate_order_rows([_row(_order(quantity=12.5))])

        [error] = outcome.errors
        assert error.error_type == SyncErrorType.TYPE_ERROR
        assert error.field_name == "quantity"

    def test_future_order_date(self, validator: EntityRowValidator) -> None:
        outcome = validator.validate_order_rows([_row(_order(order_date="2027-01-01"))])

        [error] = outcome.errors
        assert error.error_type == SyncErrorType.BUSINESS_RULE_VIOLATION
        assert error.field_name == "order_date"

    def test_mortality_cannot_exceed_quantity(self, validator: EntityRowValidator) -> None:
        outcome = validator.validate_order_rows([_row(_order(quantity=10, mortality_reported=11))])

        [error] = outcome.errors
        assert error.error_type == SyncErrorType.BUSINESS_RULE_VIOLATION
        assert error.field_name == "mortality_reported"
        assert error.invalid_value == "11"

    def test_shipment_before_order(self, validator: EntityRowValidator) -> None:
        outcome = validator.validate_order_rows([_row(_order(shipment_date="2026-08-01"))])

        [error] = outcome.errors
        assert error.error_type == SyncErrorType.BUSINESS_RULE_VIOLATION
        assert error.field_name == "shipment_date"

    def test_zero_unit_price_is_a_business_rule_violation(self, validator: EntityRowValidator) -> None:
        outcome = validator.validate_order_rows([_row(_order(unit_price=0))])

        [error] = outcome.errors
        assert error.error_type == SyncErrorType.BUSINESS_RULE_VIOLATION
        assert error.field_name == "unit_price"

    def test_unknown_shipment_status(self, validator: EntityRowValidator) -> None:
        outcome = validator.validate_order_rows([_row(_order(shipment_status="lost"))])

        [error] = outcome.errors
        assert error.error_type == SyncErrorType.TYPE_ERROR
        assert error.field_name == "shipment_status"

    def test_number_error_message_names_the_field_once(self, validator: EntityRowValidator) -> None:
        outcome = validator.validate_order_rows([_row(_order(quantity="lots"))])

        [error] = outcome.errors
        assert error.error_type == SyncErrorType.TYPE_ERROR
        assert error.field_name == "quantity"
        assert error.message == "quantity must be a valid number"
        assert error.invalid_value == "lots"

    def test_date_error_message_names_the_field(self, validator: EntityRowValidator) -> None:
        outcome = validator.validate_order_rows([_row(_order(order_date="someday"))])

        [error] = outcome.errors
        assert error.field_name == "order_date"
        assert error.message == "order_date: Invalid date format: someday"


class TestBatchRows:
    def test_valid_row_with_defaults(self, validator: EntityRowValidator) -> None:
        outcome = validator.validate_batch_rows([_row(_batch(batch_code=1001))])

        assert outcome.errors == []
        draft = outcome.valid_rows[0]
        assert isinstance(draft, BatchDraft)
        assert draft.batch_code == "1001"
        assert draft.health_status == "good"
        assert draft.quarantine_status == "pending"
        assert draft.arrival_date == date(2026, 8, 20)

    def test_available_cannot_exceed_initial(self, validator: EntityRowValidator) -> None:
        outcome = validator.validate_batch_rows([_row(_batch(initial_quantity=300))])

        [error] = outcome.errors
        assert error.error_type == SyncErrorType.BUSINESS_RULE_VIOLATION
        assert error.field_name == "available_quantity"
        assert error.entity_type == SyncEntityType.BROODSTOCK_BATCH

    def test_future_arrival(self, validator: EntityRowValidator) -> None:
        outcome = validator.validate_batch_rows([_row(_batch(arrival_date="2026-12-01"))])

        [error] = outcome.errors
        assert error.field_name == "arrival_date"

    def test_zero_weight_is_rejected(self, validator: EntityRowValidator) -> None:
        outcome = validator.validate_batch_rows([_row(_batch(weight_grams=0))])

        [error] = outcome.errors
        assert error.error_type == SyncErrorType.BUSINESS_RULE_VIOLATION
        assert error.field_name == "weight_grams"

    def test_unparseable_arrival_date(self, validator: EntityRowValidator) -> None:
        outcome = validator.validate_batch_rows([_row(_batch(arrival_date="soon"))])

        [error] = outcome.errors
        assert error.error_type == SyncErrorType.TYPE_ERROR
        assert error.field_name == "arrival_date"
        assert error.invalid_value == "soon"
